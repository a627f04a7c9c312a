"""Tests for named concurrency groups."""

from __future__ import annotations

import threading
import time
from pathlib import Path

import pytest

from pagesmith.core.concurrency import ConcurrencyGroup, ConcurrencyTimeoutError


class TestConcurrencyGroup:
    def test_context_manager(self, tmp_path: Path):
        group = ConcurrencyGroup("pages", tmp_path)
        with group:
            assert group.held
            assert group.path.read_text().isdigit()
        assert not group.held

    def test_second_holder_times_out(self, tmp_path: Path):
        with ConcurrencyGroup("pages", tmp_path):
            with pytest.raises(ConcurrencyTimeoutError):
                ConcurrencyGroup("pages", tmp_path, timeout=0.2).acquire()

    def test_groups_are_independent(self, tmp_path: Path):
        with ConcurrencyGroup("pages", tmp_path):
            with ConcurrencyGroup("preview", tmp_path, timeout=0.2) as other:
                assert other.held

    def test_reacquire_after_release(self, tmp_path: Path):
        with ConcurrencyGroup("pages", tmp_path):
            pass
        with ConcurrencyGroup("pages", tmp_path, timeout=0.2) as group:
            assert group.held

    def test_double_acquire_is_an_error(self, tmp_path: Path):
        group = ConcurrencyGroup("pages", tmp_path)
        with group:
            with pytest.raises(RuntimeError, match="already held"):
                group.acquire()

    def test_waiter_runs_after_holder(self, tmp_path: Path):
        """Two publishers never hold the group at the same time."""
        events: list[str] = []
        first_in = threading.Event()

        def first() -> None:
            with ConcurrencyGroup("pages", tmp_path):
                events.append("first-start")
                first_in.set()
                time.sleep(0.3)
                events.append("first-end")

        def second() -> None:
            first_in.wait()
            with ConcurrencyGroup("pages", tmp_path, timeout=5):
                events.append("second-start")

        threads = [threading.Thread(target=first), threading.Thread(target=second)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert events == ["first-start", "first-end", "second-start"]
