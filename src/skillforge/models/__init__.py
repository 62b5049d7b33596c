# Copyright (c) Syntropy Systems
"""Pydantic models for skillforge records."""

from .base import ForgeBaseModel, FrozenRecord
from .ledger import (
    AggregateView,
    EventModule,
    ExportSnapshot,
    ExportSummary,
    LifecycleEvent,
    OptimizationState,
    RunSample,
    SkillEntry,
)
from .pipeline import (
    CandidateScore,
    OptimizationOutcome,
    Recommendation,
    ValidationVerdict,
)

__all__ = [
    "AggregateView",
    "CandidateScore",
    "EventModule",
    "ExportSnapshot",
    "ExportSummary",
    "ForgeBaseModel",
    "FrozenRecord",
    "LifecycleEvent",
    "OptimizationOutcome",
    "OptimizationState",
    "Recommendation",
    "RunSample",
    "SkillEntry",
    "ValidationVerdict",
]
