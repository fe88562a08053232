# src/taskkeeper/tasks/task_store.py

from __future__ import annotations

import contextlib
import json
import logging
import os
from datetime import datetime
from pathlib import Path

from ..core.errors import ConflictError, NotFoundError, PersistenceError, ValidationError
from .rwlock import ReadWriteLock
from .task_models import Task, TaskStatus

logger = logging.getLogger(__name__)


def _require_id(task_id: str) -> str:
    if not isinstance(task_id, str) or not task_id.strip():
        raise ValidationError("Task id must not be empty.")
    return task_id


def _require_task(task: Task) -> Task:
    if task is None:
        raise ValidationError("Task must not be None.")
    if not isinstance(task, Task):
        raise ValidationError(f"Expected Task, got {type(task).__name__}.")
    # Attributes can be assigned directly, so re-check what the constructor checks.
    if not isinstance(task.status, TaskStatus):
        raise ValidationError(f"Invalid status: {task.status!r}")
    if not isinstance(task.title, str) or not task.title.strip():
        raise ValidationError("Title must not be empty.")
    return task


class FileTaskStore:
    """
    JSON snapshot task store.

    The whole collection lives in one file as a JSON array (insertion order).
    Every operation is one synchronous unit:

        lock -> load full snapshot -> inspect/mutate -> (write full snapshot) -> unlock

    Thread-safety:
    - one ReadWriteLock per instance; reads share it, mutations hold it exclusively
    - writes go to a temp file that is fsync'ed and renamed over the snapshot,
      so the file on disk is always either the old or the new collection

    A snapshot that cannot be decoded is logged and treated as empty; the next
    mutation overwrites it.
    """

    def __init__(self, file_path: str | Path = "tasks.json") -> None:
        self._path = Path(file_path)
        self._tmp_path = self._path.with_name(self._path.name + ".tmp")
        self._lock = ReadWriteLock()
        self._initialize_file()
        try:
            total = self.count()
        except PersistenceError:
            total = -1
        logger.info("FileTaskStore ready path=%s total=%s", self._path, total)

    @property
    def path(self) -> Path:
        return self._path

    def close(self) -> None:
        """Compatibility hook for shutdown (no open handles between calls)."""
        return

    # ---- low-level helpers ----

    def _initialize_file(self) -> None:
        with self._lock.write_locked():
            if self._path.exists():
                return
            self._write_snapshot([])
            logger.info("Created empty task snapshot %s", self._path)

    def _read_snapshot(self) -> list[Task]:
        """Load every record. Caller must hold the lock (either mode)."""
        try:
            raw = self._path.read_bytes()
        except FileNotFoundError:
            return []
        except OSError as exc:
            logger.error("Failed to read task snapshot %s", self._path, exc_info=True)
            raise PersistenceError(f"Failed to read {self._path}: {exc}", path=self._path) from exc

        try:
            text = raw.decode("utf-8")
            if not text.strip():
                return []
            data = json.loads(text)
            if not isinstance(data, list):
                raise TypeError(f"snapshot root must be a list, got {type(data).__name__}")
            return [Task.from_dict(item) for item in data]
        except (ValueError, KeyError, TypeError, OverflowError, RecursionError) as exc:
            logger.warning(
                "Corrupted task snapshot %s (%s: %s); treating it as empty.",
                self._path,
                type(exc).__name__,
                exc,
            )
            return []

    def _write_snapshot(self, tasks: list[Task]) -> None:
        """Replace the snapshot atomically. Caller must hold the write lock."""
        payload = json.dumps([t.to_dict() for t in tasks], ensure_ascii=False, indent=2) + "\n"
        try:
            data = payload.encode("utf-8")
        except UnicodeEncodeError as exc:
            raise ValidationError(f"Task text cannot be stored as UTF-8: {exc.reason}") from exc

        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with open(self._tmp_path, "wb") as handle:
                handle.write(data)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(self._tmp_path, self._path)
        except OSError as exc:
            logger.error("Failed to write task snapshot %s", self._path, exc_info=True)
            raise PersistenceError(f"Failed to write {self._path}: {exc}", path=self._path) from exc
        finally:
            # Gone already after a successful replace.
            with contextlib.suppress(OSError):
                self._tmp_path.unlink(missing_ok=True)

    @staticmethod
    def _index_of(tasks: list[Task], task_id: str) -> int | None:
        for i, t in enumerate(tasks):
            if t.id == task_id:
                return i
        return None

    @staticmethod
    def _merge_update(stored: Task, incoming: Task) -> Task:
        """
        Build the record that replaces `stored`.

        created_at always comes from the stored record. completed_at is kept when the
        task stays DONE, taken from the incoming task when it enters DONE and
        dropped otherwise.
        """
        stamps = (datetime.now(), stored.updated_at, incoming.updated_at)
        updated_at = max(ts for ts in stamps if ts is not None)

        completed_at: datetime | None = None
        if incoming.status is TaskStatus.DONE:
            if stored.status is TaskStatus.DONE:
                completed_at = stored.completed_at
            else:
                completed_at = incoming.completed_at or updated_at

        return Task(
            id=stored.id,
            title=incoming.title,
            description=incoming.description,
            status=incoming.status,
            created_at=stored.created_at,
            updated_at=updated_at,
            completed_at=completed_at,
        )

    # ---- public API: mutations (exclusive lock) ----

    def save(self, task: Task) -> Task:
        # copy() re-runs Task validation and normalises completed_at for the status.
        record = _require_task(task).copy()

        with self._lock.write_locked():
            tasks = self._read_snapshot()
            if self._index_of(tasks, record.id) is not None:
                raise ConflictError(record.id)
            tasks.append(record)
            self._write_snapshot(tasks)

        logger.debug("Task saved id=%s status=%s", record.id, record.status.value)
        return record.copy()

    def update(self, task: Task) -> Task:
        incoming = _require_task(task).copy()

        with self._lock.write_locked():
            tasks = self._read_snapshot()
            idx = self._index_of(tasks, incoming.id)
            if idx is None:
                raise NotFoundError(incoming.id)
            merged = self._merge_update(tasks[idx], incoming)
            tasks[idx] = merged
            self._write_snapshot(tasks)

        logger.debug("Task updated id=%s status=%s", merged.id, merged.status.value)
        return merged.copy()

    def delete(self, task_id: str) -> bool:
        _require_id(task_id)

        with self._lock.write_locked():
            tasks = self._read_snapshot()
            idx = self._index_of(tasks, task_id)
            if idx is None:
                return False
            del tasks[idx]
            self._write_snapshot(tasks)

        logger.debug("Task deleted id=%s", task_id)
        return True

    def delete_all(self) -> None:
        with self._lock.write_locked():
            self._write_snapshot([])
        logger.info("All tasks deleted from %s", self._path)

    # ---- public API: reads (shared lock) ----

    def find_by_id(self, task_id: str) -> Task | None:
        _require_id(task_id)
        with self._lock.read_locked():
            tasks = self._read_snapshot()
        idx = self._index_of(tasks, task_id)
        return tasks[idx] if idx is not None else None

    def find_all(self) -> list[Task]:
        with self._lock.read_locked():
            return self._read_snapshot()

    def find_by_status(self, status: TaskStatus) -> list[Task]:
        if not isinstance(status, TaskStatus):
            raise ValidationError(f"Invalid status: {status!r}")
        with self._lock.read_locked():
            tasks = self._read_snapshot()
        return [t for t in tasks if t.status is status]

    def find_by_title_containing(self, keyword: str) -> list[Task]:
        if not isinstance(keyword, str) or not keyword.strip():
            raise ValidationError("Search keyword must not be empty.")
        needle = keyword.strip().casefold()
        with self._lock.read_locked():
            tasks = self._read_snapshot()
        return [t for t in tasks if needle in t.title.casefold()]

    def exists_by_id(self, task_id: str) -> bool:
        _require_id(task_id)
        with self._lock.read_locked():
            tasks = self._read_snapshot()
        return self._index_of(tasks, task_id) is not None

    def count(self) -> int:
        with self._lock.read_locked():
            return len(self._read_snapshot())
