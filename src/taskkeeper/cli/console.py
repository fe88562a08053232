# src/taskkeeper/cli/console.py

from __future__ import annotations

import logging
from datetime import datetime

from ..core.state import AppState
from .commands import CommandRegistry
from .commands import registry as command_registry

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}", flush=True)


def run_command(state: AppState, line: str, *, registry: CommandRegistry | None = None) -> str:
    """Run one command line; a missing leading slash is added."""
    reg = registry or command_registry
    line = line.strip()
    if not line.startswith("/"):
        line = "/" + line
    try:
        reply = reg.handle(state, line, emit=_print_ts)
    except Exception:
        logger.exception("Command handler crashed: %s", line)
        return "Internal error while handling a command."
    return reply if reply is not None else ""


def run_console_loop(state: AppState) -> None:
    app_name = str(getattr(state.settings, "app_name", "taskkeeper"))
    logger.info("Console started (tasks=%s).", getattr(state.settings, "tasks_file_path", "?"))
    _print_ts(f"[{app_name}] Type /help for commands. Use /exit to quit.\n")

    while True:
        try:
            user_input = input(f"{app_name}> ").strip()
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            print()
            break

        if not user_input:
            continue

        if user_input.lower() in ("/exit", "/quit"):
            logger.info("Console exit command received.")
            break

        _print_ts(run_command(state, user_input))
