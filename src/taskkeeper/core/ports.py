# src/taskkeeper/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the rest of the app.

Callers depend on the TaskRepo Protocol instead of a concrete backend.
This keeps storage swappable and makes testing easier.

Failure contract shared by every backend (see core/errors.py):
- ValidationError: bad input (None task, empty id/keyword, non-TaskStatus status),
  raised before any lock or I/O
- ConflictError: save() of an id that already exists
- NotFoundError: update() of an id that does not exist
- PersistenceError: I/O failure while loading or writing

Every returned Task is an independent copy; mutating it never changes stored state.
"""

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from ..tasks.task_models import Task, TaskStatus


@runtime_checkable
class TaskRepo(Protocol):
    # CRUD
    def save(self, task: Task) -> Task: ...
    def update(self, task: Task) -> Task: ...
    def delete(self, task_id: str) -> bool: ...
    def find_by_id(self, task_id: str) -> Task | None: ...
    def find_all(self) -> list[Task]: ...

    # Queries
    def find_by_status(self, status: TaskStatus) -> list[Task]: ...
    def find_by_title_containing(self, keyword: str) -> list[Task]: ...

    # Utility
    def exists_by_id(self, task_id: str) -> bool: ...
    def count(self) -> int: ...
    def delete_all(self) -> None: ...
