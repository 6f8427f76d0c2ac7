import asyncio
import logging
import sys
from typing import List, Optional

from sitelens.core.handlers.analyze_handler import handle_analyze
from sitelens.core.managers.config_manager import config_manager
from sitelens.core.utils.configure_logging import configure_logger

logger = logging.getLogger(__name__)


def _setup_windows_event_loop_if_needed() -> None:
    """Installs Windows compatible asyncio policy if possible."""
    if not sys.platform.startswith("win"):
        return
    try:
        asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())
        logger.info("Using WindowsSelectorEventLoopPolicy for asyncio on Windows.")
    except Exception as exc:  # pragma: no cover
        logger.warning("Could not set WindowsSelectorEventLoopPolicy: %s", exc)


def main(argv: Optional[List[str]] = None) -> int:
    configure_logger(
        config_manager.get_nested("debug.level", "WARNING"),
        config_manager.get_nested("debug.module_levels", {}),
        config_manager.get_nested("debug.silenced", {})
    )
    _setup_windows_event_loop_if_needed()
    return handle_analyze(sys.argv[1:] if argv is None else argv)


if __name__ == "__main__":
    sys.exit(main())
