# Copyright (c) Syntropy Systems
"""Scoring of skills as optimization candidates.

A score runs from 0 to 100; higher means more wasteful. Five independent
factors each add a clamped contribution:

    token volume   mean tokens in+out > 2000   min(30, (total - 2000) / 100)
    latency        mean elapsed > 2000ms       min(25, (mean - 2000) / 200)
    tail spike     p95 > 2 * mean              20
    reliability    failure rate > 5%           min(15, rate * 100)
    volume         runs > 20                   min(10, runs / 10)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from skillforge.db import utcnow
from skillforge.models.ledger import EventModule, LifecycleEvent
from skillforge.models.pipeline import CandidateScore, Recommendation, round_half_up

if TYPE_CHECKING:
    from skillforge.ledger import Ledger
    from skillforge.models.ledger import AggregateView

logger = logging.getLogger(__name__)

TOKEN_THRESHOLD = 2000
TOKEN_WEIGHT = 30
LATENCY_THRESHOLD_MS = 2000
LATENCY_WEIGHT = 25
SPIKE_RATIO = 2
SPIKE_WEIGHT = 20
FAILURE_THRESHOLD = 0.05
FAILURE_WEIGHT = 15
VOLUME_THRESHOLD = 20
VOLUME_WEIGHT = 10
MAX_SCORE = 100


def score(aggregate: AggregateView) -> CandidateScore:
    """Score an aggregate. Same input, same score and reasons."""
    reasons: list[str] = []
    total = 0.0

    total_tokens = aggregate.total_tokens
    if total_tokens > TOKEN_THRESHOLD:
        total += min(TOKEN_WEIGHT, (total_tokens - TOKEN_THRESHOLD) / 100)
        reasons.append(f"High token usage: {round_half_up(total_tokens)} avg tokens/run")

    avg_ms = aggregate.avg_elapsed_ms
    if avg_ms > LATENCY_THRESHOLD_MS:
        total += min(LATENCY_WEIGHT, (avg_ms - LATENCY_THRESHOLD_MS) / 200)
        reasons.append(f"Slow execution: {round_half_up(avg_ms)}ms avg")

    if aggregate.p95_elapsed_ms > avg_ms * SPIKE_RATIO:
        total += SPIKE_WEIGHT
        reasons.append(
            f"Latency spikes: P95 {round_half_up(aggregate.p95_elapsed_ms)}ms "
            f"vs avg {round_half_up(avg_ms)}ms"
        )

    if aggregate.failure_rate > FAILURE_THRESHOLD:
        total += min(FAILURE_WEIGHT, aggregate.failure_rate * 100)
        reasons.append(f"High failure rate: {aggregate.failure_rate * 100:.1f}%")

    if aggregate.total_runs > VOLUME_THRESHOLD:
        total += min(VOLUME_WEIGHT, aggregate.total_runs / 10)
        reasons.append(f"High volume: {aggregate.total_runs} runs")

    final = max(0, min(MAX_SCORE, round_half_up(total)))

    return CandidateScore(
        skill_id=aggregate.skill_id,
        aggregate=aggregate,
        score=final,
        reasons=reasons,
        recommendation=Recommendation.from_score(final),
    )


class Analyzer:
    """Ranks tracked skills by optimization potential."""

    def __init__(self, ledger: Ledger) -> None:
        self.ledger = ledger

    def analyze(self, skill_id: str) -> CandidateScore:
        """Score one skill from its current aggregate."""
        return score(self.ledger.aggregate(skill_id))

    def analyze_all(self) -> list[CandidateScore]:
        """Score every known skill, highest score first.

        Ties keep the ledger's skill order.
        """
        results = [self.analyze(skill_id) for skill_id in self.ledger.list_known_skills()]
        return sorted(results, key=lambda r: r.score, reverse=True)

    def record(self, results: list[CandidateScore]) -> None:
        """Write one analyzer event per result."""
        for result in results:
            self.ledger.record_event(
                LifecycleEvent(
                    timestamp=utcnow(),
                    module=EventModule.ANALYZER,
                    action=result.recommendation.value,
                    skill_id=result.skill_id,
                    details=f"Score {result.score}: {'; '.join(result.reasons)}",
                )
            )
        logger.info("Recorded analysis for %d skills", len(results))
