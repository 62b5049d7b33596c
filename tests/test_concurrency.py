"""Concurrency tests for the ledger."""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING

from skillforge.db import utcnow
from skillforge.ledger import Ledger
from skillforge.models.ledger import RunSample

if TYPE_CHECKING:
    from pathlib import Path


class TestConcurrentAccess:
    """Tests for many threads sharing one ledger."""

    def test_concurrent_appends_not_lost(self, temp_dir: Path) -> None:
        """Test that parallel appends all land and aggregate consistently."""
        ledger = Ledger(temp_dir / "forge.db")
        num_threads = 8
        per_thread = 25
        errors: list[Exception] = []

        def append(worker: int) -> None:
            try:
                for i in range(per_thread):
                    ledger.record_run(
                        RunSample(
                            skill_id="shared",
                            elapsed_ms=float(worker * 100 + i),
                            tokens_in=10,
                            tokens_out=5,
                            success=True,
                            timestamp=utcnow(),
                        )
                    )
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=append, args=(w,)) for w in range(num_threads)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == [], f"Errors occurred: {errors}"
        assert ledger.counts()["samples"] == num_threads * per_thread
        aggregate = ledger.aggregate("shared")
        assert aggregate.total_runs == num_threads * per_thread
        assert aggregate.avg_tokens_in == 10.0

    def test_concurrent_registration_single_winner(self, temp_dir: Path) -> None:
        """Test racing registrations leave exactly one consistent entry."""
        ledger = Ledger(temp_dir / "forge.db")
        num_threads = 10
        added: list[str] = []
        lock = threading.Lock()
        barrier = threading.Barrier(num_threads)

        def register(worker: int) -> None:
            path = f"/worker-{worker}/SKILL.md"
            barrier.wait()
            if ledger.register_skill("summarize", path):
                with lock:
                    added.append(path)

        threads = [threading.Thread(target=register, args=(w,)) for w in range(num_threads)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(added) == 1
        entry = ledger.get_skill("summarize")
        assert entry is not None
        assert entry.path == added[0]

    def test_readers_see_whole_samples(self, temp_dir: Path) -> None:
        """Test reads during writes never see partial records."""
        ledger = Ledger(temp_dir / "forge.db")
        stop = threading.Event()
        seen: list[int] = []
        errors: list[Exception] = []

        def read() -> None:
            try:
                while not stop.is_set():
                    samples = ledger.samples("shared")
                    assert all(s.tokens_in == 7 for s in samples)
                    seen.append(len(samples))
            except Exception as e:
                errors.append(e)

        reader = threading.Thread(target=read)
        reader.start()
        for _ in range(50):
            ledger.record_run(
                RunSample(
                    skill_id="shared",
                    elapsed_ms=1.0,
                    tokens_in=7,
                    tokens_out=1,
                    success=True,
                    timestamp=utcnow(),
                )
            )
        stop.set()
        reader.join()

        assert errors == []
        assert seen == sorted(seen)
        assert ledger.skipped_records == 0
