# Copyright (c) Syntropy Systems
"""A/B validation gate for optimized artifacts.

An optimized artifact passes when its word overlap with the original is
above 0.7 and it is estimated to save tokens. Speed is measured and reported
but does not decide the outcome, so a smaller but slower artifact can pass.
"""

from __future__ import annotations

import logging
import re
from statistics import fmean
from typing import TYPE_CHECKING

from skillforge.db import utcnow
from skillforge.models.ledger import EventModule, LifecycleEvent, OptimizationState
from skillforge.models.pipeline import ValidationVerdict
from skillforge.skills import read_skill_file
from skillforge.tokens import DEFAULT_ESTIMATOR, TokenEstimator

if TYPE_CHECKING:
    from pathlib import Path

    from skillforge.execution import Executor
    from skillforge.ledger import Ledger

logger = logging.getLogger(__name__)

SIMILARITY_THRESHOLD = 0.7

_WORD = re.compile(r"\w+")
_VERSION = re.compile(r"^v(\d+)$")


def word_set(text: str) -> set[str]:
    """Case-folded word tokens of a text."""
    return set(_WORD.findall(text.casefold()))


def jaccard_similarity(a: str, b: str) -> float:
    """|A & B| / |A | B| over word sets, 0.0 when both are empty."""
    words_a = word_set(a)
    words_b = word_set(b)
    union = words_a | words_b
    if not union:
        return 0.0
    return len(words_a & words_b) / len(union)


def token_savings_ratio(
    original: str,
    optimized: str,
    estimator: TokenEstimator = DEFAULT_ESTIMATOR,
) -> float:
    """Fraction of the original's estimated tokens saved by the optimized text.

    Negative when the optimized text is larger; 0.0 for an empty original.
    """
    original_tokens = estimator.estimate(original)
    if original_tokens == 0:
        return 0.0
    return (original_tokens - estimator.estimate(optimized)) / original_tokens


def speed_improvement_ratio(original_times: list[float], optimized_times: list[float]) -> float:
    """Relative drop in mean elapsed time; positive means faster."""
    if not original_times or not optimized_times:
        return 0.0
    original_mean = fmean(original_times)
    if original_mean == 0:
        return 0.0
    return (original_mean - fmean(optimized_times)) / original_mean


def gate_passes(similarity: float, token_savings: float) -> bool:
    """Both conditions are required."""
    return similarity > SIMILARITY_THRESHOLD and token_savings > 0


def next_version(current: str) -> str:
    """Tag for the version after `current` (v1 -> v2)."""
    match = _VERSION.match(current)
    if match is None:
        return f"{current}.1"
    return f"v{int(match.group(1)) + 1}"


class Validator:
    """Runs original and optimized artifacts side by side and decides promotion."""

    def __init__(
        self,
        ledger: Ledger,
        executor: Executor,
        estimator: TokenEstimator | None = None,
    ) -> None:
        self.ledger = ledger
        self.executor = executor
        self.estimator = estimator or DEFAULT_ESTIMATOR

    def _target_version(self, skill_id: str) -> str:
        entry = self.ledger.get_skill(skill_id)
        return next_version(entry.current_version if entry else "v1")

    def validate(
        self,
        skill_id: str,
        original: str,
        optimized: str,
        iterations: int = 3,
    ) -> ValidationVerdict:
        """A/B test two artifacts and record the verdict as an event."""
        if iterations < 1:
            msg = "iterations must be at least 1"
            raise ValueError(msg)

        original_times: list[float] = []
        optimized_times: list[float] = []
        for _i in range(iterations):
            original_times.append(self.executor.execute(original).elapsed_ms)
            optimized_times.append(self.executor.execute(optimized).elapsed_ms)

        similarity = jaccard_similarity(original, optimized)
        token_savings = token_savings_ratio(original, optimized, self.estimator)

        verdict = ValidationVerdict(
            skill_id=skill_id,
            version=self._target_version(skill_id),
            passed=gate_passes(similarity, token_savings),
            original_times_ms=original_times,
            optimized_times_ms=optimized_times,
            similarity=similarity,
            speed_improvement=speed_improvement_ratio(original_times, optimized_times),
            token_savings=token_savings,
        )

        self.ledger.record_event(
            LifecycleEvent(
                timestamp=utcnow(),
                module=EventModule.VALIDATOR,
                action="passed" if verdict.passed else "failed",
                skill_id=skill_id,
                details=verdict.summary(),
            )
        )
        logger.info(
            "Validation %s for %s: %s",
            "passed" if verdict.passed else "failed",
            skill_id,
            verdict.summary(),
        )

        return verdict

    def validate_files(
        self,
        skill_id: str,
        original_path: Path,
        optimized_path: Path,
        iterations: int = 3,
    ) -> ValidationVerdict:
        """Read both artifacts and validate them.

        Raises ContentUnavailable if either file cannot be read.
        """
        original = read_skill_file(original_path)
        optimized = read_skill_file(optimized_path)
        return self.validate(skill_id, original, optimized, iterations)

    def promote(self, verdict: ValidationVerdict) -> None:
        """Accept a passed verdict's artifact as the skill's new baseline."""
        if not verdict.passed:
            msg = f"Cannot promote {verdict.skill_id}: validation did not pass"
            raise ValueError(msg)

        self.ledger.record_event(
            LifecycleEvent(
                timestamp=utcnow(),
                module=EventModule.FORGE,
                action="promoted",
                skill_id=verdict.skill_id,
                details=f"{verdict.version} promoted after passing validation",
            )
        )
        _ = self.ledger.set_state(
            verdict.skill_id,
            OptimizationState.PROMOTED,
            version=verdict.version,
            token_savings=verdict.token_savings,
        )

    def reject(self, verdict: ValidationVerdict) -> None:
        """Mark the attempt as rejected in the registry.

        No event is written; the gate's own `failed` event is the audit record.
        """
        _ = self.ledger.set_state(verdict.skill_id, OptimizationState.REJECTED)
