# src/taskkeeper/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, then either:
- runs a single command given on the command line (`taskkeeper add Buy milk`), or
- starts the interactive console (when enabled).
"""

from __future__ import annotations

import logging
import sys

from ..cli.bootstrap import create_initial_state
from ..config import get_settings
from ..core.errors import PersistenceError
from ..logging_setup import setup_logging
from .console import run_command, run_console_loop

logger = logging.getLogger(__name__)


def _shutdown(state) -> None:
    store = getattr(state, "task_store", None)
    if store is not None and hasattr(store, "close"):
        store.close()


def main(argv: list[str] | None = None) -> int:
    args = list(sys.argv[1:] if argv is None else argv)
    settings = get_settings()

    setup_logging(log_dir=settings.log_dir, console_level=getattr(settings, "log_level", "INFO"))

    logger.info("Starting %s...", settings.app_name)

    try:
        state = create_initial_state(settings=settings)
    except (OSError, PersistenceError):
        logger.exception("Failed to open task store at %s", settings.tasks_file_path)
        return 1

    try:
        if args:
            print(run_command(state, " ".join(args)))
        elif settings.console_enabled:
            run_console_loop(state)
        else:
            logger.info("Console disabled and no command given; nothing to do.")
    finally:
        _shutdown(state)
        logger.info("Bye.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
