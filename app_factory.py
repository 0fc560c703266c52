"""Application factory for creating fully wired controllers and services."""

from __future__ import annotations

from infrastructure.config import SystemConfig, get_config
from infrastructure.logging import setup_logging


def _create_config():
    """Create system configuration instance."""
    return get_config()


def _bind_services(config: SystemConfig):
    """Instantiate and bind service implementations."""
    from domain.diagnostics import ErrorAnalyzer, FixMemoryRegistry
    from domain.reflexion import ReflexionLoop
    from infrastructure.persistence import (
        InMemoryReflexionStore,
        JsonFileFixMemoryStore,
        JsonFileReflexionStore,
    )

    diagnostics = config.diagnostics
    reflexion = config.reflexion

    registry = FixMemoryRegistry(
        lambda workspace: JsonFileFixMemoryStore(workspace, diagnostics.memory_path),
        max_entries=diagnostics.max_memory_entries,
        max_category_matches=diagnostics.max_category_matches,
    )
    analyzer = ErrorAnalyzer(
        registry,
        max_memory_suggestions=diagnostics.max_memory_suggestions,
        max_hypothesis_suggestions=diagnostics.max_hypothesis_suggestions,
    )

    if reflexion.storage_backend == "memory":
        reflexion_store = InMemoryReflexionStore(relevance_floor=reflexion.relevance_floor)
    elif reflexion.storage_backend == "json":
        reflexion_store = JsonFileReflexionStore(reflexion.storage_path, relevance_floor=reflexion.relevance_floor)
    else:
        raise ValueError(f"Unknown reflexion storage backend: {reflexion.storage_backend}")

    reflexion_loop = ReflexionLoop(
        reflexion_store,
        max_attempts=reflexion.max_attempts,
        retry_effectiveness_threshold=reflexion.retry_effectiveness_threshold,
        prior_reflection_limit=reflexion.prior_reflection_limit,
        keyword_limit=reflexion.keyword_limit,
    )

    return {
        "fix_memory_registry": registry,
        "analyzer": analyzer,
        "reflexion_store": reflexion_store,
        "reflexion_loop": reflexion_loop,
    }


def create_debugging_controller(config: SystemConfig | None = None, debug: bool = False):
    """Create a fully wired :class:`DebuggingController`."""
    config = config or _create_config()
    setup_logging(config.logging_settings, debug=debug)
    services = _bind_services(config)

    from application.controllers import DebuggingController

    return DebuggingController(
        analyzer=services["analyzer"],
        reflexion_loop=services["reflexion_loop"],
        workspace_root=config.diagnostics.workspace_root,
        retry_config=config.retry,
    )
