# Copyright (c) Syntropy Systems
"""Profiling: turn executions of a skill into ledger samples."""

from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from contextlib import contextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING

from skillforge.db import utcnow
from skillforge.errors import ContentUnavailable
from skillforge.models.ledger import EventModule, LifecycleEvent, RunSample
from skillforge.skills import (
    DEFAULT_SKILL_FILE,
    discover_skills,
    read_skill_file,
    skill_id_for,
)
from skillforge.tokens import DEFAULT_ESTIMATOR, TokenEstimator

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator
    from pathlib import Path

    from skillforge.execution import Executor
    from skillforge.ledger import Ledger
    from skillforge.models.ledger import AggregateView

logger = logging.getLogger(__name__)


@dataclass
class TrackedRun:
    """Mutable handle for a block of work timed by `Profiler.track`."""

    skill_id: str
    tokens_in: int = 0
    tokens_out: int = 0


class Profiler:
    """Records run samples for skills."""

    def __init__(
        self,
        ledger: Ledger,
        executor: Executor,
        estimator: TokenEstimator | None = None,
    ) -> None:
        self.ledger = ledger
        self.executor = executor
        self.estimator = estimator or DEFAULT_ESTIMATOR

    @contextmanager
    def track(self, skill_id: str, version: str = "v1") -> Iterator[TrackedRun]:
        """Time a block of real work and record it as one sample.

        The block may fill in token counts on the yielded handle. If it
        raises, a failed sample is recorded and the exception propagates.

        Example:
            >>> with profiler.track("summarize") as run:
            ...     run.tokens_in = 1200
            ...     run.tokens_out = 300
        """
        run = TrackedRun(skill_id=skill_id)
        success = True
        start = time.perf_counter()
        try:
            yield run
        except BaseException:
            success = False
            raise
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            self.ledger.record_run(
                RunSample(
                    skill_id=skill_id,
                    elapsed_ms=elapsed_ms,
                    tokens_in=run.tokens_in,
                    tokens_out=run.tokens_out if success else 0,
                    success=success,
                    timestamp=utcnow(),
                    version=version,
                )
            )
            self.ledger.record_event(
                LifecycleEvent(
                    timestamp=utcnow(),
                    module=EventModule.PROFILER,
                    action="recorded",
                    skill_id=skill_id,
                    details=(
                        f"{elapsed_ms:.0f}ms, {run.tokens_in}+{run.tokens_out} tokens, "
                        f"{'ok' if success else 'fail'}"
                    ),
                )
            )

    def profile_skill_file(
        self,
        path: Path,
        iterations: int = 5,
        version: str = "v1",
    ) -> AggregateView:
        """Execute a definition `iterations` times and record every run.

        Failed executions are recorded as failed samples, not raised.
        """
        content = read_skill_file(path)
        skill_id = skill_id_for(path)
        _ = self.ledger.register_skill(skill_id, str(path.resolve()))

        tokens_in = self.estimator.estimate(content)
        failures = 0
        for _i in range(iterations):
            result = self.executor.execute(content)
            if not result.success:
                failures += 1
            self.ledger.record_run(
                RunSample(
                    skill_id=skill_id,
                    elapsed_ms=result.elapsed_ms,
                    tokens_in=tokens_in,
                    tokens_out=result.output_tokens,
                    success=result.success,
                    timestamp=utcnow(),
                    version=version,
                )
            )

        self.ledger.record_event(
            LifecycleEvent(
                timestamp=utcnow(),
                module=EventModule.PROFILER,
                action="batch-complete",
                skill_id=skill_id,
                details=f"Profiled {iterations} iterations ({failures} failed)",
            )
        )
        logger.info("Profiled %s: %d iterations, %d failed", skill_id, iterations, failures)

        return self.ledger.aggregate(skill_id)

    def profile_directory(  # noqa: PLR0913
        self,
        skills_dir: Path,
        iterations: int = 5,
        workers: int = 1,
        skill_file: str = DEFAULT_SKILL_FILE,
        stop: Callable[[], bool] | None = None,
    ) -> dict[str, AggregateView]:
        """Profile every skill found under skills_dir.

        A skill whose definition cannot be read is logged and left out.
        With workers > 1 skills are profiled concurrently. `stop` is polled
        before each skill starts; once it returns True no further skill is
        profiled and only the finished ones are returned.
        """
        sources = discover_skills(skills_dir, skill_file)
        should_stop = stop or (lambda: False)
        stopped = threading.Event()

        def _profile(path: Path) -> AggregateView | None:
            if stopped.is_set() or should_stop():
                stopped.set()
                logger.info("Stop requested, not profiling %s", path)
                return None
            try:
                return self.profile_skill_file(path, iterations)
            except ContentUnavailable as e:
                logger.warning("Skipping %s: %s", path, e)
                return None

        if workers > 1:
            with ThreadPoolExecutor(max_workers=workers) as pool:
                results = list(pool.map(_profile, [s.path for s in sources]))
        else:
            results = [_profile(s.path) for s in sources]

        return {
            source.skill_id: aggregate
            for source, aggregate in zip(sources, results)
            if aggregate is not None
        }
