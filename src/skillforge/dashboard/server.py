# Copyright (c) Syntropy Systems
"""Read-only JSON API over the ledger for dashboards."""
from __future__ import annotations

from pathlib import Path

from fastapi import FastAPI, HTTPException, Query, Request
from pydantic import Field

from skillforge import __version__
from skillforge.analyzer import score
from skillforge.ledger import DEFAULT_WINDOW, EXPORT_EVENT_LIMIT, Ledger
from skillforge.models.base import ForgeBaseModel
from skillforge.models.ledger import (
    AggregateView,
    ExportSnapshot,
    LifecycleEvent,
    SkillEntry,
)
from skillforge.models.pipeline import CandidateScore


class HealthResponse(ForgeBaseModel):
    """Health check response."""

    status: str = "ok"
    version: str


class SkillDetail(ForgeBaseModel):
    """Everything the ledger knows about one skill."""

    skill_id: str
    entry: SkillEntry | None = None
    aggregate: AggregateView
    score: CandidateScore
    events: list[LifecycleEvent] = Field(default_factory=list)


def _ledger(request: Request) -> Ledger:
    return request.app.state.ledger


def create_app(db_path: Path, window: int = DEFAULT_WINDOW) -> FastAPI:
    """
    Create the dashboard API.

    Args:
        db_path: Path to the ledger database
        window: Aggregation window for per-skill views

    Returns:
        Configured FastAPI application
    """
    app = FastAPI(
        title="skillforge dashboard",
        description="Read-only view of skill metrics and lifecycle events",
        version=__version__,
    )
    app.state.ledger = Ledger(db_path, window=window)

    @app.get("/api/health", response_model=HealthResponse)
    def health() -> HealthResponse:
        """Health check endpoint."""
        return HealthResponse(version=__version__)

    @app.get("/api/export", response_model=ExportSnapshot)
    def export(request: Request) -> ExportSnapshot:
        """Snapshot of every tracked skill and the most recent events."""
        return _ledger(request).export()

    @app.get("/api/skills", response_model=list[SkillEntry])
    def list_skills(request: Request) -> list[SkillEntry]:
        """Registered skills."""
        return _ledger(request).skills()

    @app.get("/api/skills/{skill_id}", response_model=SkillDetail)
    def get_skill(
        request: Request,
        skill_id: str,
        events: int = Query(20, ge=0, le=EXPORT_EVENT_LIMIT),
    ) -> SkillDetail:
        """Registry entry, aggregate, score and events for one skill."""
        ledger = _ledger(request)
        entry = ledger.get_skill(skill_id)
        if entry is None and skill_id not in ledger.list_known_skills():
            raise HTTPException(status_code=404, detail=f"Skill {skill_id} not found")

        aggregate = ledger.aggregate(skill_id)
        return SkillDetail(
            skill_id=skill_id,
            entry=entry,
            aggregate=aggregate,
            score=score(aggregate),
            events=ledger.recent_events(limit=events, skill_id=skill_id),
        )

    return app
