"""Main entry point for the error diagnostics CLI."""

import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from interface.cli.main import main as cli_main  # noqa: E402
from infrastructure.config import get_config  # noqa: E402
from infrastructure.logging import get_logger  # noqa: E402


logger = get_logger(__name__)


def check_environment(config) -> None:
    """Warn about settings that usually indicate a misconfigured workspace."""
    workspace = Path(config.diagnostics.workspace_root)
    if not workspace.is_dir():
        print(f"⚠️  Warning: workspace {workspace} does not exist; fix memory starts empty.")

    if config.reflexion.storage_backend not in ("json", "memory"):
        print(f"❌ Unknown NOVA_REFLEXION_BACKEND: {config.reflexion.storage_backend}")
        print("   Use 'json' or 'memory'.")
        sys.exit(1)


def main() -> None:
    """Main entry point."""
    try:
        check_environment(get_config())
        cli_main()
    except KeyboardInterrupt:
        print("\n👋 Goodbye!")
        sys.exit(0)
    except Exception as e:
        logger.error(f"Fatal error: {str(e)}")
        print(f"❌ Fatal error: {str(e)}")
        sys.exit(1)


if __name__ == "__main__":
    main()
