# Copyright (c) Syntropy Systems
"""Pydantic models for analysis, optimization and validation results."""

from __future__ import annotations

import math
from enum import Enum

from pydantic import Field

from .base import ForgeBaseModel
from .ledger import AggregateView

OPTIMIZE_THRESHOLD = 50
MONITOR_THRESHOLD = 25


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up."""
    return math.floor(value + 0.5)


class Recommendation(str, Enum):
    """What to do with a skill given its score."""

    OPTIMIZE = "optimize"
    MONITOR = "monitor"
    OK = "ok"

    @classmethod
    def from_score(cls, score: int) -> Recommendation:
        """Map a 0-100 score onto a recommendation."""
        if score >= OPTIMIZE_THRESHOLD:
            return cls.OPTIMIZE
        if score >= MONITOR_THRESHOLD:
            return cls.MONITOR
        return cls.OK


class CandidateScore(ForgeBaseModel):
    """Scorer verdict for one skill."""

    skill_id: str
    aggregate: AggregateView
    score: int = Field(ge=0, le=100)
    reasons: list[str] = Field(default_factory=list)
    recommendation: Recommendation


class OptimizationOutcome(ForgeBaseModel):
    """Result of rewriting a skill's definition."""

    skill_id: str
    original_path: str | None = None
    optimized_path: str | None = None
    optimized_content: str
    changes: list[str] = Field(default_factory=list)
    original_tokens: int
    optimized_tokens: int
    estimated_token_savings: int
    estimated_time_savings_ms: float

    @property
    def savings_percent(self) -> int:
        """Estimated token savings as a whole percentage of the original."""
        if self.original_tokens <= 0:
            return 0
        return round_half_up(self.estimated_token_savings / self.original_tokens * 100)


class ValidationVerdict(ForgeBaseModel):
    """Result of the A/B gate between an original and an optimized artifact."""

    skill_id: str
    version: str
    passed: bool
    original_times_ms: list[float] = Field(default_factory=list)
    optimized_times_ms: list[float] = Field(default_factory=list)
    similarity: float = Field(ge=0.0, le=1.0)
    speed_improvement: float
    token_savings: float

    def summary(self) -> str:
        """One-line human readable summary of the three gate metrics."""
        return (
            f"Similarity: {self.similarity * 100:.0f}%, "
            f"Speed: {self.speed_improvement * 100:.0f}% faster, "
            f"Tokens: {self.token_savings * 100:.0f}% saved"
        )
