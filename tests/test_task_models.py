# tests/test_task_models.py

from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from taskkeeper.core.errors import ValidationError
from taskkeeper.tasks.task_models import (
    Task,
    TaskStatus,
    advance,
    is_terminal,
    parse_status,
    revert,
)


def test_lifecycle_functions_clamp_at_the_ends() -> None:
    assert advance(TaskStatus.PENDING) is TaskStatus.IN_PROGRESS
    assert advance(TaskStatus.IN_PROGRESS) is TaskStatus.DONE
    assert advance(TaskStatus.DONE) is TaskStatus.DONE

    assert revert(TaskStatus.DONE) is TaskStatus.IN_PROGRESS
    assert revert(TaskStatus.IN_PROGRESS) is TaskStatus.PENDING
    assert revert(TaskStatus.PENDING) is TaskStatus.PENDING

    assert is_terminal(TaskStatus.DONE)
    assert not is_terminal(TaskStatus.PENDING)
    assert not is_terminal(TaskStatus.IN_PROGRESS)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("pending", TaskStatus.PENDING),
        ("  Pendente ", TaskStatus.PENDING),
        ("in progress", TaskStatus.IN_PROGRESS),
        ("IN_PROGRESS", TaskStatus.IN_PROGRESS),
        ("em_progresso", TaskStatus.IN_PROGRESS),
        ("Completed", TaskStatus.DONE),
        ("concluída", TaskStatus.DONE),
        ("done", TaskStatus.DONE),
    ],
)
def test_parse_status_accepts_synonyms_case_insensitively(raw: str, expected: TaskStatus) -> None:
    assert parse_status(raw) is expected


def test_parse_status_rejects_unknown_and_names_accepted_values() -> None:
    with pytest.raises(ValidationError) as exc_info:
        parse_status("archived")
    msg = str(exc_info.value)
    assert "PENDING" in msg and "IN_PROGRESS" in msg and "DONE" in msg

    with pytest.raises(ValidationError):
        parse_status("   ")
    with pytest.raises(ValidationError):
        parse_status(None)


def test_status_display_attributes() -> None:
    assert TaskStatus.DONE.display_name == "Done"
    assert TaskStatus.IN_PROGRESS.hex_color == "#2196F3"
    assert TaskStatus.PENDING.formatted == f"{TaskStatus.PENDING.emoji} Pending"


def test_new_task_defaults() -> None:
    t = Task("  Buy milk  ")
    assert t.title == "Buy milk"
    assert t.description == ""
    assert t.status is TaskStatus.PENDING
    assert t.id
    assert t.created_at is not None and t.updated_at is not None
    assert t.updated_at >= t.created_at
    assert t.completed_at is None


@pytest.mark.parametrize("title", ["", "   ", None])
def test_title_is_required(title) -> None:
    with pytest.raises(ValidationError):
        Task(title)


def test_set_title_validates_and_trims() -> None:
    t = Task("old")
    t.set_title("  new  ")
    assert t.title == "new"
    with pytest.raises(ValidationError):
        t.set_title(" ")
    assert t.title == "new"


def test_set_status_maintains_completion_invariant() -> None:
    t = Task("Write report")
    before = t.updated_at

    t.set_status(TaskStatus.DONE)
    assert t.status is TaskStatus.DONE
    assert t.completed_at is not None
    assert t.updated_at >= before
    first_completion = t.completed_at

    # Done -> Done keeps the original completion time.
    t.set_status(TaskStatus.DONE)
    assert t.completed_at == first_completion

    t.revert()
    assert t.status is TaskStatus.IN_PROGRESS
    assert t.completed_at is None

    t.complete()
    assert t.is_completed
    assert t.completed_at is not None


def test_set_status_rejects_non_status_values() -> None:
    t = Task("x")
    with pytest.raises(ValidationError):
        t.set_status("DONE")  # type: ignore[arg-type]
    with pytest.raises(ValidationError):
        t.set_status(None)  # type: ignore[arg-type]
    assert t.status is TaskStatus.PENDING


def test_advance_walks_the_lifecycle() -> None:
    t = Task("x")
    t.advance()
    assert t.is_in_progress
    t.advance()
    assert t.is_completed and t.completed_at is not None
    t.advance()
    assert t.is_completed
    t.revert()
    t.revert()
    assert t.is_pending and t.completed_at is None


def test_updated_at_never_moves_backwards() -> None:
    future = datetime.now() + timedelta(days=1)
    t = Task("x", updated_at=future)
    t.set_description("later")
    assert t.updated_at == future


def test_id_and_created_at_are_immutable() -> None:
    t = Task("x")
    with pytest.raises(AttributeError):
        t.id = "other"
    with pytest.raises(AttributeError):
        t.created_at = datetime.now()


def test_equality_is_by_id_only() -> None:
    a = Task("one", id="same")
    b = Task("two", id="same")
    assert a == b
    assert hash(a) == hash(b)
    assert a != Task("one")


def test_full_constructor_normalises_completion() -> None:
    done = Task("x", status=TaskStatus.DONE)
    assert done.completed_at == done.updated_at

    stray = Task("x", status=TaskStatus.PENDING, completed_at=datetime.now())
    assert stray.completed_at is None


def test_copy_is_independent() -> None:
    t = Task("x", description="d")
    c = t.copy()
    c.set_title("changed")
    assert t.title == "x"
    assert c.id == t.id and c.created_at == t.created_at


def test_display_helpers() -> None:
    t = Task("a" * 80, description="b" * 150)
    assert len(t.short_title) == 60 and t.short_title.endswith("...")
    assert len(t.short_description) == 100
    assert t.has_description
    assert not Task("x", description="   ").has_description
    assert t.formatted_completed_at == "Not completed"
    assert t.id in t.detailed()


def test_record_mapping_round_trip() -> None:
    t = Task("Buy milk", description="2 liters", status=TaskStatus.DONE)
    data = t.to_dict()
    assert data["status"] == "DONE"
    assert set(data) == {"id", "title", "description", "status", "createdAt", "updatedAt", "completedAt"}

    back = Task.from_dict(data)
    assert back.to_dict() == data


def test_from_dict_rejects_malformed_records() -> None:
    good = Task("x").to_dict()
    with pytest.raises(KeyError):
        Task.from_dict({k: v for k, v in good.items() if k != "title"})
    with pytest.raises(ValueError):
        Task.from_dict({**good, "status": "ARCHIVED"})
    with pytest.raises(ValueError):
        Task.from_dict({**good, "createdAt": "yesterday"})
    with pytest.raises(TypeError):
        Task.from_dict(["not", "a", "dict"])  # type: ignore[arg-type]


def test_from_dict_folds_offset_timestamps_to_local_time() -> None:
    data = Task("x").to_dict()
    data["createdAt"] = "2026-01-27T14:30:00+00:00"
    data["updatedAt"] = "2026-01-27T14:30:00+00:00"

    t = Task.from_dict(data)
    assert t.created_at is not None and t.created_at.tzinfo is None
    t.touch()
    assert t.updated_at is not None and t.updated_at >= t.created_at


@pytest.mark.parametrize("kwargs", [{"title": "bad \ud800"}, {"title": "ok", "description": "bad \udfff"}])
def test_unencodable_text_is_rejected(kwargs) -> None:
    with pytest.raises(ValidationError):
        Task(**kwargs)


def test_set_description_validates_text() -> None:
    t = Task("x")
    with pytest.raises(ValidationError):
        t.set_description(42)  # type: ignore[arg-type]
    with pytest.raises(ValidationError):
        t.set_description("bad \ud800")
    t.set_description(None)
    assert t.description == ""


def test_from_dict_rejects_out_of_range_offset_timestamp() -> None:
    data = Task("x").to_dict()
    data["createdAt"] = "0001-01-01T00:00:00+14:00"
    with pytest.raises(ValueError):
        Task.from_dict(data)
