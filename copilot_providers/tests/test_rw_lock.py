"""Shared/exclusive lock semantics."""
from __future__ import annotations

import threading
import time

from copilot_providers.base.concurrency import ReadWriteLock


def test_readers_share_the_lock():
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
    assert not any(t.is_alive() for t in threads)  # nosec B101


def test_writer_excludes_readers():
    lock = ReadWriteLock()
    order = []
    lock.acquire_write()

    def reader() -> None:
        with lock.read_locked():
            order.append("read")

    t = threading.Thread(target=reader)
    t.start()
    time.sleep(0.05)
    order.append("write-done")
    lock.release_write()
    t.join(timeout=5)
    assert order == ["write-done", "read"]  # nosec B101


def test_waiting_writer_blocks_new_readers():
    lock = ReadWriteLock()
    order = []
    lock.acquire_read()

    def writer() -> None:
        with lock.write_locked():
            order.append("write")

    def late_reader() -> None:
        with lock.read_locked():
            order.append("late-read")

    w = threading.Thread(target=writer)
    w.start()
    time.sleep(0.05)
    r = threading.Thread(target=late_reader)
    r.start()
    time.sleep(0.05)
    assert order == []  # nosec B101
    lock.release_read()
    w.join(timeout=5)
    r.join(timeout=5)
    assert order == ["write", "late-read"]  # nosec B101
