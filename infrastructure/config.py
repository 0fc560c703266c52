"""Configuration management for the error diagnostics engine."""
import os
from typing import Optional
from pydantic import BaseModel, Field
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

DEFAULT_MEMORY_PATH = os.path.join(".nova", "knowledge", "debug-memory.json")


class DiagnosticsConfig(BaseModel):
    """Error analysis and fix memory settings."""
    workspace_root: str = Field(default=".", description="Workspace whose fix memory is used by default")
    memory_path: str = Field(default=DEFAULT_MEMORY_PATH, description="Fix memory file, relative to the workspace")
    max_memory_entries: int = Field(default=1000, description="Fix memory capacity before FIFO eviction")
    max_category_matches: int = Field(default=5, description="Category fallback matches returned by fix memory")
    max_memory_suggestions: int = Field(default=3, description="Suggested fixes taken from fix memory")
    max_hypothesis_suggestions: int = Field(default=3, description="Suggested fixes taken from hypotheses")


class RetryConfig(BaseModel):
    """Healing retry wrapper settings."""
    max_retries: int = Field(default=3, description="Attempts before giving up")
    base_delay_seconds: float = Field(default=1.0, description="Delay after the first failed attempt")
    backoff_factor: float = Field(default=2.0, description="Delay multiplier per attempt")
    max_delay_seconds: float = Field(default=30.0, description="Upper bound on any single delay")


class ReflexionConfig(BaseModel):
    """Reflexion loop and storage settings."""
    storage_backend: str = Field(default="json", description="Reflexion store backend (json or memory)")
    storage_path: str = Field(default=os.path.join("data", "reflexion.json"), description="JSON store location")
    max_attempts: int = Field(default=3, description="Attempt number from which retries stop")
    retry_effectiveness_threshold: float = Field(default=0.5, description="Effectiveness a prior reflection needs to justify a retry")
    relevance_floor: float = Field(default=0.3, description="Reflections at or below this effectiveness are never retrieved")
    prior_reflection_limit: int = Field(default=3, description="Prior reflections retrieved per failure")
    keyword_limit: int = Field(default=10, description="Keywords extracted per task")


class LoggingConfig(BaseModel):
    """Logging configuration settings."""
    level: str = Field(default="INFO", description="Logging level (DEBUG, INFO, WARNING, ERROR)")
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log format string"
    )
    file_path: str = Field(default="logs/nova-debug.log", description="Main log file path")
    console_output: bool = Field(default=False, description="Enable console output")
    file_output: bool = Field(default=True, description="Enable file output")
    json_format: bool = Field(default=False, description="Emit one JSON object per log line")


class SystemConfig(BaseModel):
    """Main system configuration."""
    diagnostics: DiagnosticsConfig = Field(default_factory=DiagnosticsConfig)
    retry: RetryConfig = Field(default_factory=RetryConfig)
    reflexion: ReflexionConfig = Field(default_factory=ReflexionConfig)
    logging_settings: LoggingConfig = Field(default_factory=LoggingConfig)
    environment: str = Field(default_factory=lambda: os.getenv("APP_ENV", "development"), description="Deployment environment")

    def __init__(self, **kwargs):
        # Environment variables fill in whatever the caller did not pass
        kwargs['diagnostics'] = _with_env(kwargs.get('diagnostics'), DiagnosticsConfig, {
            'workspace_root': 'NOVA_WORKSPACE_ROOT',
        })
        kwargs['reflexion'] = _with_env(kwargs.get('reflexion'), ReflexionConfig, {
            'storage_backend': 'NOVA_REFLEXION_BACKEND',
            'storage_path': 'NOVA_REFLEXION_PATH',
        })
        kwargs['logging_settings'] = _with_env(kwargs.get('logging_settings'), LoggingConfig, {
            'level': 'NOVA_LOG_LEVEL',
        })
        super().__init__(**kwargs)


def _with_env(section, section_cls, env_vars):
    values = section if isinstance(section, dict) else (section.model_dump() if section is not None else {})
    values = dict(values)
    for field_name, env_var in env_vars.items():
        env_value = os.getenv(env_var)
        if env_value and field_name not in values:
            values[field_name] = env_value
    return section_cls(**values)


class DevelopmentConfig(SystemConfig):
    """Configuration for development environment."""


class ProductionConfig(SystemConfig):
    """Configuration for production environment."""

    def __init__(self, **kwargs):
        logging_settings = kwargs.get('logging_settings')
        if logging_settings is None or isinstance(logging_settings, dict):
            kwargs['logging_settings'] = {'json_format': True, **(logging_settings or {})}
        super().__init__(**kwargs)


_CONFIG_MAP = {
    "development": DevelopmentConfig,
    "production": ProductionConfig,
}


def get_config(environment: Optional[str] = None) -> SystemConfig:
    """Load configuration based on the deployment environment."""
    env = (environment or os.getenv("APP_ENV", "development")).lower()
    config_cls = _CONFIG_MAP.get(env, DevelopmentConfig)
    return config_cls()
