# src/taskkeeper/core/errors.py

"""
Error taxonomy shared by the task model and every TaskRepo backend.

Each error carries a stable `kind` so result-style callers (see tasks/task_api.py)
can branch on the outcome without isinstance chains.
"""

from __future__ import annotations

from pathlib import Path


class TaskStoreError(Exception):
    kind = "error"


class ValidationError(TaskStoreError, ValueError):
    """Malformed or missing caller input. Raised before any lock or I/O."""

    kind = "validation"


class ConflictError(TaskStoreError):
    kind = "conflict"

    def __init__(self, task_id: str) -> None:
        super().__init__(f"Task with id {task_id!r} already exists.")
        self.task_id = task_id


class NotFoundError(TaskStoreError):
    kind = "not_found"

    def __init__(self, task_id: str) -> None:
        super().__init__(f"Task with id {task_id!r} not found.")
        self.task_id = task_id


class PersistenceError(TaskStoreError):
    """Underlying I/O failure while loading or writing the snapshot."""

    kind = "persistence"

    def __init__(self, message: str, *, path: str | Path | None = None) -> None:
        super().__init__(message)
        self.path = Path(path) if path is not None else None
