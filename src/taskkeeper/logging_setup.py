# src/taskkeeper/logging_setup.py

from __future__ import annotations

import logging
import sys
from pathlib import Path

LOG_FILE_NAME = "taskkeeper.log"

# Failed operations are already reported back as the command reply.
_REPLIED_LOGGERS = ("taskkeeper.tasks.task_api",)


class _ConsoleFilter(logging.Filter):
    """
    Console view of the log stream:
    - taskkeeper records pass, except INFO/DEBUG from loggers whose failures
      the command reply already shows
    - everything else (third-party, captured warnings) only at ERROR+
    """

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name
        if name != "taskkeeper" and not name.startswith("taskkeeper."):
            return record.levelno >= logging.ERROR
        if name in _REPLIED_LOGGERS:
            return record.levelno >= logging.WARNING
        return True


def resolve_level(level: int | str) -> int:
    """Accept 10 / "debug" / "DEBUG"; unknown names fall back to INFO."""
    if isinstance(level, int):
        return level
    value = logging.getLevelName(str(level).strip().upper())
    return value if isinstance(value, int) else logging.INFO


def setup_logging(
    *,
    log_dir: str | Path = ".local/taskkeeper",
    console_level: int | str = logging.INFO,
    file_level: int | str = logging.DEBUG,
) -> Path:
    """
    Route all logging to stderr (filtered) and to `<log_dir>/taskkeeper.log` (everything
    at file_level). Replaces existing root handlers. Returns the log file path.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / LOG_FILE_NAME

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for h in list(root.handlers):
        root.removeHandler(h)

    # threadName matters here: store calls come from many threads.
    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s [%(threadName)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(resolve_level(console_level))
    console.setFormatter(fmt)
    console.addFilter(_ConsoleFilter())
    root.addHandler(console)

    file_handler = logging.FileHandler(str(log_file), encoding="utf-8")
    file_handler.setLevel(resolve_level(file_level))
    file_handler.setFormatter(fmt)
    root.addHandler(file_handler)

    logging.captureWarnings(True)
    return log_file
