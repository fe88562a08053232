# src/taskkeeper/tasks/task_models.py

from __future__ import annotations

import uuid
from dataclasses import dataclass, replace
from datetime import datetime
from enum import StrEnum
from typing import Any

from ..core.errors import ValidationError

SHORT_TITLE_MAX = 60
SHORT_DESCRIPTION_MAX = 100
DISPLAY_DATE_FORMAT = "%d/%m/%Y %H:%M"


class TaskStatus(StrEnum):
    """
    Task lifecycle status.

    Ordered lifecycle: PENDING -> IN_PROGRESS -> DONE.
    Values are the wire names stored in the snapshot file.
    """

    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    DONE = "DONE"

    @property
    def display_name(self) -> str:
        return _DISPLAY[self][0]

    @property
    def emoji(self) -> str:
        return _DISPLAY[self][1]

    @property
    def hex_color(self) -> str:
        return _DISPLAY[self][2]

    @property
    def formatted(self) -> str:
        return f"{self.emoji} {self.display_name}"


_DISPLAY: dict[TaskStatus, tuple[str, str, str]] = {
    TaskStatus.PENDING: ("Pending", "⏳", "#FFA500"),
    TaskStatus.IN_PROGRESS: ("In Progress", "🚀", "#2196F3"),
    TaskStatus.DONE: ("Done", "✅", "#4CAF50"),
}

_LIFECYCLE: tuple[TaskStatus, ...] = (TaskStatus.PENDING, TaskStatus.IN_PROGRESS, TaskStatus.DONE)

_SYNONYMS: dict[str, TaskStatus] = {
    "PENDING": TaskStatus.PENDING,
    "PENDENTE": TaskStatus.PENDING,
    "TODO": TaskStatus.PENDING,
    "IN_PROGRESS": TaskStatus.IN_PROGRESS,
    "IN PROGRESS": TaskStatus.IN_PROGRESS,
    "IN-PROGRESS": TaskStatus.IN_PROGRESS,
    "EM_PROGRESSO": TaskStatus.IN_PROGRESS,
    "EM PROGRESSO": TaskStatus.IN_PROGRESS,
    "DONE": TaskStatus.DONE,
    "COMPLETED": TaskStatus.DONE,
    "CONCLUIDA": TaskStatus.DONE,
    "CONCLUÍDA": TaskStatus.DONE,
}


def advance(status: TaskStatus) -> TaskStatus:
    """Next lifecycle status; DONE stays DONE."""
    idx = _LIFECYCLE.index(status)
    return _LIFECYCLE[min(idx + 1, len(_LIFECYCLE) - 1)]


def revert(status: TaskStatus) -> TaskStatus:
    """Previous lifecycle status; PENDING stays PENDING."""
    idx = _LIFECYCLE.index(status)
    return _LIFECYCLE[max(idx - 1, 0)]


def is_terminal(status: TaskStatus) -> bool:
    return status is TaskStatus.DONE


def parse_status(raw: str | None) -> TaskStatus:
    """Case-insensitive status parsing with a few accepted synonyms."""
    if raw is None or not str(raw).strip():
        raise ValidationError("Status must not be empty.")
    key = str(raw).strip().upper()
    status = _SYNONYMS.get(key)
    if status is None:
        accepted = ", ".join(s.value for s in _LIFECYCLE)
        raise ValidationError(f"Invalid status: {raw!r}. Accepted values: {accepted}")
    return status


def _now() -> datetime:
    return datetime.now()


def _require_text(value: str, field: str) -> str:
    try:
        value.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise ValidationError(f"{field} contains text that cannot be stored: {exc.reason}") from exc
    return value


def _clean_title(title: Any) -> str:
    if not isinstance(title, str) or not title.strip():
        raise ValidationError("Title must not be empty.")
    return _require_text(title.strip(), "Title")


def _clean_description(description: Any) -> str:
    if description is None:
        return ""
    if not isinstance(description, str):
        raise ValidationError("Description must be a string.")
    return _require_text(description, "Description")


def _parse_ts(raw: str) -> datetime:
    dt = datetime.fromisoformat(raw)
    # Snapshot times are local wall-clock; fold any offset into local time.
    if dt.tzinfo is not None:
        try:
            dt = dt.astimezone().replace(tzinfo=None)
        except OverflowError as exc:
            raise ValueError(f"timestamp out of range: {raw!r}") from exc
    return dt


def _format_ts(value: datetime | None) -> str:
    return value.strftime(DISPLAY_DATE_FORMAT) if value is not None else ""


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[: limit - 3] + "..."


_IMMUTABLE_FIELDS = frozenset({"id", "created_at"})


@dataclass(slots=True, eq=False)
class Task:
    """
    One unit of work.

    Invariants kept by the mutators below (and re-applied by the store):
    - completed_at is set iff status is DONE
    - updated_at never moves backwards
    - id and created_at never change after construction
    """

    title: str
    description: str = ""
    status: TaskStatus = TaskStatus.PENDING
    id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    completed_at: datetime | None = None

    def __post_init__(self) -> None:
        self.title = _clean_title(self.title)
        self.description = _clean_description(self.description)
        if not isinstance(self.status, TaskStatus):
            raise ValidationError(f"Invalid status: {self.status!r}")
        if self.id is None:
            self.id = str(uuid.uuid4())
        elif not isinstance(self.id, str) or not self.id.strip():
            raise ValidationError("Task id must be a non-empty string.")

        now = _now()
        if self.created_at is None:
            self.created_at = now
        if self.updated_at is None:
            self.updated_at = max(now, self.created_at)

        if self.status is TaskStatus.DONE:
            if self.completed_at is None:
                self.completed_at = self.updated_at
        else:
            self.completed_at = None

    def __setattr__(self, name: str, value: Any) -> None:
        # Unset slots read as None here, so __init__/__post_init__ can still assign.
        if name in _IMMUTABLE_FIELDS and getattr(self, name, None) is not None:
            raise AttributeError(f"Task.{name} is immutable")
        object.__setattr__(self, name, value)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Task):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    def __repr__(self) -> str:
        return f"Task(id={self.id!r}, title={self.title!r}, status={self.status.value})"

    # ---- mutators ----

    def touch(self) -> None:
        now = _now()
        self.updated_at = now if self.updated_at is None else max(now, self.updated_at)

    def set_title(self, title: str) -> None:
        self.title = _clean_title(title)
        self.touch()

    def set_description(self, description: str | None) -> None:
        self.description = _clean_description(description)
        self.touch()

    def set_status(self, status: TaskStatus) -> None:
        if not isinstance(status, TaskStatus):
            raise ValidationError(f"Invalid status: {status!r}")
        self.touch()
        if status is TaskStatus.DONE:
            if self.status is not TaskStatus.DONE:
                self.completed_at = self.updated_at
        else:
            self.completed_at = None
        self.status = status

    def advance(self) -> None:
        self.set_status(advance(self.status))

    def revert(self) -> None:
        self.set_status(revert(self.status))

    def complete(self) -> None:
        self.set_status(TaskStatus.DONE)

    # ---- queries ----

    @property
    def is_completed(self) -> bool:
        return self.status is TaskStatus.DONE

    @property
    def is_in_progress(self) -> bool:
        return self.status is TaskStatus.IN_PROGRESS

    @property
    def is_pending(self) -> bool:
        return self.status is TaskStatus.PENDING

    @property
    def has_description(self) -> bool:
        return bool(self.description.strip())

    @property
    def short_title(self) -> str:
        return _truncate(self.title, SHORT_TITLE_MAX)

    @property
    def short_description(self) -> str:
        return _truncate(self.description, SHORT_DESCRIPTION_MAX)

    @property
    def formatted_created_at(self) -> str:
        return _format_ts(self.created_at)

    @property
    def formatted_updated_at(self) -> str:
        return _format_ts(self.updated_at)

    @property
    def formatted_completed_at(self) -> str:
        if self.completed_at is None:
            return "Not completed"
        return _format_ts(self.completed_at)

    def detailed(self) -> str:
        return (
            "Task:\n"
            f"  id: {self.id}\n"
            f"  title: {self.title}\n"
            f"  description: {self.description}\n"
            f"  status: {self.status.formatted}\n"
            f"  created: {self.formatted_created_at}\n"
            f"  updated: {self.formatted_updated_at}\n"
            f"  completed: {self.formatted_completed_at}"
        )

    # ---- copying / snapshot records ----

    def copy(self) -> Task:
        return replace(self)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "status": self.status.value,
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
            "completedAt": _iso(self.completed_at),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Task:
        """
        Rebuild a Task from a snapshot record.

        Raises KeyError/TypeError/ValueError (ValidationError included) on malformed input.
        """
        if not isinstance(data, dict):
            raise TypeError(f"Task record must be an object, got {type(data).__name__}")
        completed_raw = data.get("completedAt")
        return cls(
            id=data["id"],
            title=data["title"],
            description=data.get("description") or "",
            status=parse_status(data["status"]),
            created_at=_parse_ts(data["createdAt"]),
            updated_at=_parse_ts(data["updatedAt"]),
            completed_at=_parse_ts(completed_raw) if completed_raw else None,
        )
