# Copyright (c) Syntropy Systems
"""Pydantic models for ledger records and derived views."""

from __future__ import annotations

from enum import Enum

from pydantic import Field, NonNegativeFloat, NonNegativeInt

from .base import ForgeBaseModel, FrozenRecord


class EventModule(str, Enum):
    """Component that emitted a lifecycle event."""

    PROFILER = "profiler"
    ANALYZER = "analyzer"
    OPTIMIZER = "optimizer"
    VALIDATOR = "validator"
    FORGE = "forge"


class OptimizationState(str, Enum):
    """Where a skill stands in its optimization lifecycle."""

    PENDING = "pending"
    OPTIMIZED = "optimized"
    PROMOTED = "promoted"
    REJECTED = "rejected"


class RunSample(FrozenRecord):
    """One observed execution of a skill version."""

    skill_id: str
    elapsed_ms: NonNegativeFloat
    tokens_in: NonNegativeInt
    tokens_out: NonNegativeInt
    success: bool
    timestamp: str
    version: str = "v1"


class LifecycleEvent(FrozenRecord):
    """Audit record for something that happened to a skill."""

    timestamp: str
    module: EventModule
    action: str
    skill_id: str
    details: str = ""


class SkillEntry(ForgeBaseModel):
    """Registry row for a skill."""

    skill_id: str
    path: str
    current_version: str = "v1"
    state: OptimizationState = OptimizationState.PENDING
    token_savings: float | None = None
    registered_at: str | None = None
    updated_at: str | None = None


class AggregateView(ForgeBaseModel):
    """Summary over the most recent window of a skill's samples.

    An empty window yields zeros everywhere, never NaN.
    """

    skill_id: str
    avg_elapsed_ms: float = 0.0
    avg_tokens_in: float = 0.0
    avg_tokens_out: float = 0.0
    total_runs: int = 0
    failure_rate: float = 0.0
    p95_elapsed_ms: float = 0.0

    @property
    def total_tokens(self) -> float:
        """Mean tokens in plus mean tokens out."""
        return self.avg_tokens_in + self.avg_tokens_out


class ExportSummary(ForgeBaseModel):
    """Headline numbers for the export snapshot."""

    skills_tracked: int
    total_runs: int
    avg_runtime_ms: float
    avg_token_savings: float


class ExportSnapshot(ForgeBaseModel):
    """Read-only snapshot of the ledger for dashboards and reports."""

    timestamp: str
    summary: ExportSummary
    skills: list[AggregateView] = Field(default_factory=list)
    events: list[LifecycleEvent] = Field(default_factory=list)
    skipped_records: int = 0
