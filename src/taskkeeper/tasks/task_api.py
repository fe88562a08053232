# src/taskkeeper/tasks/task_api.py

"""
High-level task helpers that return Result values instead of raising.

Store errors (TaskStoreError subclasses) are captured into Result.error so callers
such as the command surface can branch on `result.ok` / `result.error.kind`.
Anything else (programming errors) still propagates.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

from ..core.errors import NotFoundError, TaskStoreError
from ..core.ports import TaskRepo
from .task_models import Task, TaskStatus

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Result(Generic[T]):
    value: T | None = None
    error: TaskStoreError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]


def attempt(op: Callable[[], T], *, what: str = "task operation") -> Result[T]:
    try:
        return Result(value=op())
    except TaskStoreError as exc:
        logger.info("%s failed (%s): %s", what, exc.kind, exc)
        return Result(error=exc)


def _load(repo: TaskRepo, task_id: str) -> Task:
    task = repo.find_by_id(task_id)
    if task is None:
        raise NotFoundError(task_id)
    return task


def _mutate(repo: TaskRepo, task_id: str, change: Callable[[Task], None], what: str) -> Result[Task]:
    def op() -> Task:
        task = _load(repo, task_id)
        change(task)
        return repo.update(task)

    return attempt(op, what=what)


def create_task(
    repo: TaskRepo,
    title: str,
    description: str = "",
    *,
    status: TaskStatus = TaskStatus.PENDING,
) -> Result[Task]:
    return attempt(
        lambda: repo.save(Task(title=title, description=description, status=status)),
        what="create_task",
    )


def get_task(repo: TaskRepo, task_id: str) -> Result[Task]:
    return attempt(lambda: _load(repo, task_id), what="get_task")


def list_tasks(repo: TaskRepo, status: TaskStatus | None = None) -> Result[list[Task]]:
    if status is None:
        return attempt(repo.find_all, what="list_tasks")
    return attempt(lambda: repo.find_by_status(status), what="list_tasks")


def search_tasks(repo: TaskRepo, keyword: str) -> Result[list[Task]]:
    return attempt(lambda: repo.find_by_title_containing(keyword), what="search_tasks")


def advance_task(repo: TaskRepo, task_id: str) -> Result[Task]:
    return _mutate(repo, task_id, Task.advance, "advance_task")


def revert_task(repo: TaskRepo, task_id: str) -> Result[Task]:
    return _mutate(repo, task_id, Task.revert, "revert_task")


def complete_task(repo: TaskRepo, task_id: str) -> Result[Task]:
    return _mutate(repo, task_id, Task.complete, "complete_task")


def rename_task(repo: TaskRepo, task_id: str, title: str) -> Result[Task]:
    return _mutate(repo, task_id, lambda t: t.set_title(title), "rename_task")


def describe_task(repo: TaskRepo, task_id: str, description: str) -> Result[Task]:
    return _mutate(repo, task_id, lambda t: t.set_description(description), "describe_task")


def remove_task(repo: TaskRepo, task_id: str) -> Result[bool]:
    return attempt(lambda: repo.delete(task_id), what="remove_task")


def clear_tasks(repo: TaskRepo) -> Result[None]:
    return attempt(repo.delete_all, what="clear_tasks")
