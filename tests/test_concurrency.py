# tests/test_concurrency.py

from __future__ import annotations

import json
import threading
import time
from concurrent.futures import ThreadPoolExecutor

import pytest

from taskkeeper.core.errors import ConflictError
from taskkeeper.tasks.rwlock import ReadWriteLock
from taskkeeper.tasks.task_models import Task, TaskStatus
from taskkeeper.tasks.task_store import FileTaskStore


def test_concurrent_saves_all_succeed(store: FileTaskStore) -> None:
    store.save(Task("already there"))
    initial = store.count()
    n = 40

    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(lambda i: store.save(Task(f"task {i}")), range(n)))

    assert len({t.id for t in results}) == n
    assert store.count() == initial + n
    stored_ids = {t.id for t in store.find_all()}
    assert {t.id for t in results} <= stored_ids


def test_concurrent_saves_with_same_id_only_one_wins(store: FileTaskStore) -> None:
    def attempt(i: int) -> bool:
        try:
            store.save(Task(f"dup {i}", id="shared-id"))
            return True
        except ConflictError:
            return False

    with ThreadPoolExecutor(max_workers=8) as pool:
        outcomes = list(pool.map(attempt, range(16)))

    assert outcomes.count(True) == 1
    assert store.count() == 1


def test_readers_never_observe_partial_snapshot(store: FileTaskStore) -> None:
    stop = threading.Event()
    errors: list[str] = []
    seen_counts: list[int] = []

    def writer() -> None:
        for i in range(30):
            t = store.save(Task(f"w{i}", description="x" * 200))
            t.set_status(TaskStatus.DONE)
            store.update(t)
        stop.set()

    def reader() -> None:
        while not stop.is_set():
            tasks = store.find_all()
            seen_counts.append(len(tasks))
            for t in tasks:
                if (t.completed_at is not None) != (t.status is TaskStatus.DONE):
                    errors.append(f"invariant broken for {t.id}")
            # The raw file must always be a complete JSON document.
            raw = store.path.read_text(encoding="utf-8")
            try:
                json.loads(raw)
            except ValueError:
                errors.append("partial snapshot on disk")

    readers = [threading.Thread(target=reader) for _ in range(4)]
    w = threading.Thread(target=writer)
    for r in readers:
        r.start()
    w.start()
    w.join(timeout=60)
    for r in readers:
        r.join(timeout=60)

    assert not errors
    assert all(0 <= c <= 30 for c in seen_counts)
    assert store.count() == 30
    assert all(t.status is TaskStatus.DONE for t in store.find_all())


def test_rwlock_allows_concurrent_readers() -> None:
    lock = ReadWriteLock()
    inside = threading.Barrier(3, timeout=5)

    def reader() -> None:
        with lock.read_locked():
            inside.wait()

    threads = [threading.Thread(target=reader) for _ in range(3)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=5)
    assert not any(t.is_alive() for t in threads)
    assert lock.readers == 0


def test_rwlock_writer_excludes_readers_and_writers() -> None:
    lock = ReadWriteLock()
    assert lock.acquire_write()
    assert lock.write_held

    assert lock.acquire_read(timeout=0.05) is False
    assert lock.acquire_write(timeout=0.05) is False

    lock.release_write()
    assert lock.acquire_read(timeout=0.05) is True
    assert lock.acquire_write(timeout=0.05) is False
    lock.release_read()
    assert lock.acquire_write(timeout=0.05) is True
    lock.release_write()


def test_rwlock_waiting_writer_blocks_new_readers() -> None:
    lock = ReadWriteLock()
    lock.acquire_read()
    got_write = threading.Event()

    def writer() -> None:
        with lock.write_locked():
            got_write.set()

    w = threading.Thread(target=writer)
    w.start()
    time.sleep(0.2)

    # A writer is queued: new readers must not jump ahead of it.
    assert lock.acquire_read(timeout=0.05) is False
    assert not got_write.is_set()

    lock.release_read()
    w.join(timeout=5)
    assert got_write.is_set()
    assert lock.acquire_read(timeout=0.5) is True
    lock.release_read()


def test_rwlock_released_on_exception() -> None:
    lock = ReadWriteLock()
    with pytest.raises(RuntimeError):
        with lock.write_locked():
            raise RuntimeError("boom")
    assert not lock.write_held
    assert lock.acquire_read(timeout=0.05)
    lock.release_read()
