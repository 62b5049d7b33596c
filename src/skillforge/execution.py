# Copyright (c) Syntropy Systems
"""Execution of skill content.

Running a skill for real means calling out to a language model, which is an
external dependency this package does not ship. Profiling and validation talk
to an `Executor`; `SimulatedExecutor` stands in for the real call with
randomized latency and a hard timeout.
"""

from __future__ import annotations

import random
import time
from dataclasses import dataclass
from typing import Callable, Protocol

from skillforge.tokens import DEFAULT_ESTIMATOR, TokenEstimator


@dataclass(frozen=True)
class ExecutionResult:
    """Outcome of executing a piece of skill content once."""

    elapsed_ms: float
    output_tokens: int
    success: bool


class Executor(Protocol):
    """Runs skill content and reports how it went."""

    def execute(self, content: str) -> ExecutionResult:
        ...


class SimulatedExecutor:
    """Executor that sleeps for a random latency instead of calling a model.

    Output size is 30-70% of the input token estimate. A latency above
    `timeout` is cut short at the timeout and reported as a failure.
    """

    def __init__(  # noqa: PLR0913
        self,
        min_latency_ms: float = 200.0,
        max_latency_ms: float = 1000.0,
        failure_probability: float = 0.05,
        timeout: float = 30.0,
        seed: int | None = None,
        estimator: TokenEstimator | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if min_latency_ms < 0 or max_latency_ms < min_latency_ms:
            msg = "Latency range must satisfy 0 <= min_latency_ms <= max_latency_ms"
            raise ValueError(msg)
        if timeout <= 0:
            msg = "timeout must be positive"
            raise ValueError(msg)
        self.min_latency_ms = min_latency_ms
        self.max_latency_ms = max_latency_ms
        self.failure_probability = failure_probability
        self.timeout = timeout
        self.estimator = estimator or DEFAULT_ESTIMATOR
        self._rng = random.Random(seed)
        self._sleep = sleep

    def execute(self, content: str) -> ExecutionResult:
        latency_ms = self._rng.uniform(self.min_latency_ms, self.max_latency_ms)
        timeout_ms = self.timeout * 1000

        if latency_ms > timeout_ms:
            self._sleep(self.timeout)
            return ExecutionResult(elapsed_ms=timeout_ms, output_tokens=0, success=False)

        self._sleep(latency_ms / 1000)

        success = self._rng.random() >= self.failure_probability
        tokens_in = self.estimator.estimate(content)
        output_tokens = int(tokens_in * self._rng.uniform(0.3, 0.7)) if success else 0

        return ExecutionResult(
            elapsed_ms=latency_ms,
            output_tokens=output_tokens,
            success=success,
        )
