# Copyright (c) Syntropy Systems
"""Append-only metrics ledger.

The ledger owns three things: the run sample stream, the lifecycle event
stream and the skill registry. Samples and events are only ever appended;
aggregates are recomputed from the newest window of samples on every read.
"""

from __future__ import annotations

import logging
import math
import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Callable, TypeVar

from pydantic import ValidationError

from skillforge.db import (
    count_events,
    count_samples,
    get_connection,
    get_recent_events,
    get_recent_samples,
    get_skill,
    get_skill_ids,
    get_skills,
    init_db,
    iter_rows,
    insert_event,
    insert_sample,
    register_skill,
    update_skill_state,
    utcnow,
)
from skillforge.errors import MalformedRecord, StorageFailure
from skillforge.models.ledger import (
    AggregateView,
    ExportSnapshot,
    ExportSummary,
    LifecycleEvent,
    OptimizationState,
    RunSample,
    SkillEntry,
)

if TYPE_CHECKING:
    from collections.abc import Iterator

logger = logging.getLogger(__name__)

DEFAULT_WINDOW = 500
EXPORT_EVENT_LIMIT = 100
P95 = 0.95

T = TypeVar("T")


def _sample_from_row(row: sqlite3.Row) -> RunSample:
    try:
        return RunSample.model_validate(
            {
                "skill_id": row["skill_id"],
                "elapsed_ms": row["elapsed_ms"],
                "tokens_in": row["tokens_in"],
                "tokens_out": row["tokens_out"],
                "success": row["success"],
                "timestamp": row["timestamp"],
                "version": row["version"],
            },
        )
    except ValidationError as e:
        raise MalformedRecord("samples", row["id"], str(e.errors()[0]["msg"])) from e


def _event_from_row(row: sqlite3.Row) -> LifecycleEvent:
    try:
        return LifecycleEvent.model_validate(
            {
                "timestamp": row["timestamp"],
                "module": row["module"],
                "action": row["action"],
                "skill_id": row["skill_id"],
                "details": row["details"] or "",
            }
        )
    except ValidationError as e:
        raise MalformedRecord("events", row["id"], str(e.errors()[0]["msg"])) from e


def _skill_from_row(row: sqlite3.Row) -> SkillEntry:
    try:
        return SkillEntry.model_validate(dict(row))
    except ValidationError as e:
        raise MalformedRecord("skills", None, str(e.errors()[0]["msg"])) from e


def compute_aggregate(skill_id: str, samples: list[RunSample]) -> AggregateView:
    """Summarize a window of samples.

    The 95th percentile is the sorted elapsed time at floor(0.95 * n),
    clamped to the last element.
    """
    n = len(samples)
    if n == 0:
        return AggregateView(skill_id=skill_id)

    times = sorted(s.elapsed_ms for s in samples)
    failures = sum(1 for s in samples if not s.success)

    return AggregateView(
        skill_id=skill_id,
        avg_elapsed_ms=sum(times) / n,
        avg_tokens_in=sum(s.tokens_in for s in samples) / n,
        avg_tokens_out=sum(s.tokens_out for s in samples) / n,
        total_runs=n,
        failure_rate=failures / n,
        p95_elapsed_ms=times[min(math.floor(n * P95), n - 1)],
    )


class Ledger:
    """Single source of truth for samples, events and the skill registry.

    Every operation opens its own short-lived connection, so one Ledger can be
    shared between threads.
    """

    def __init__(self, db_path: Path, window: int = DEFAULT_WINDOW) -> None:
        if window < 0:
            msg = f"window must be >= 0, got {window}"
            raise ValueError(msg)
        self.db_path = Path(db_path)
        self.window = window
        self._skipped = 0
        self._skipped_lock = threading.Lock()

        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            init_db(self.db_path)
        except (sqlite3.Error, OSError) as e:
            raise StorageFailure(str(e), path=str(self.db_path)) from e

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        try:
            conn = get_connection(self.db_path)
        except (sqlite3.Error, OSError) as e:
            raise StorageFailure(str(e), path=str(self.db_path)) from e
        try:
            yield conn
        except sqlite3.Error as e:
            raise StorageFailure(str(e), path=str(self.db_path)) from e
        finally:
            conn.close()

    @property
    def skipped_records(self) -> int:
        """Number of malformed records skipped by reads on this ledger."""
        return self._skipped

    def _parse_rows(
        self,
        rows: list[sqlite3.Row],
        parse: Callable[[sqlite3.Row], T],
    ) -> list[T]:
        parsed: list[T] = []
        for row in rows:
            try:
                parsed.append(parse(row))
            except MalformedRecord as e:
                logger.warning("Skipping record: %s", e)
                with self._skipped_lock:
                    self._skipped += 1
        return parsed

    # --- Writes ---

    def record_run(self, sample: RunSample) -> None:
        """Append a run sample."""
        with self._connect() as conn:
            _ = insert_sample(
                conn,
                skill_id=sample.skill_id,
                elapsed_ms=sample.elapsed_ms,
                tokens_in=sample.tokens_in,
                tokens_out=sample.tokens_out,
                success=sample.success,
                timestamp=sample.timestamp,
                version=sample.version,
            )

    def record_event(self, event: LifecycleEvent) -> None:
        """Append a lifecycle event."""
        with self._connect() as conn:
            _ = insert_event(
                conn,
                timestamp=event.timestamp,
                module=event.module.value,
                action=event.action,
                skill_id=event.skill_id,
                details=event.details,
            )

    def register_skill(self, skill_id: str, path: str) -> bool:
        """Register a skill's locator.

        The first registration wins; later ones with a different path are
        ignored. Returns True if this call added the skill.
        """
        with self._connect() as conn:
            added = register_skill(conn, skill_id, path)
        if not added:
            logger.debug("Skill %s already registered, keeping existing path", skill_id)
        return added

    def set_state(
        self,
        skill_id: str,
        state: OptimizationState,
        version: str | None = None,
        token_savings: float | None = None,
    ) -> bool:
        """Record a skill's optimization state in the registry."""
        with self._connect() as conn:
            updated = update_skill_state(
                conn,
                skill_id,
                state.value,
                current_version=version,
                token_savings=token_savings,
            )
        if not updated:
            logger.debug("Skill %s is not registered, state %s not stored", skill_id, state.value)
        return updated

    # --- Reads ---

    def samples(self, skill_id: str, limit: int | None = None) -> list[RunSample]:
        """Most recent samples for a skill, oldest first.

        A limit of 0 selects nothing. Negative limits are rejected.
        """
        if limit is None:
            limit = self.window
        if limit < 0:
            msg = f"window must be >= 0, got {limit}"
            raise ValueError(msg)
        if limit == 0:
            return []
        with self._connect() as conn:
            rows = get_recent_samples(conn, skill_id, limit)
        return self._parse_rows(rows, _sample_from_row)

    def aggregate(self, skill_id: str, window: int | None = None) -> AggregateView:
        """Aggregate the newest `window` samples of a skill."""
        return compute_aggregate(skill_id, self.samples(skill_id, window))

    def list_known_skills(self) -> list[str]:
        """Skill ids that have at least one sample, in first-seen order.

        Registered skills that were never run are not included.
        """
        with self._connect() as conn:
            return get_skill_ids(conn)

    def recent_events(
        self,
        limit: int = 50,
        skill_id: str | None = None,
    ) -> list[LifecycleEvent]:
        """Most recent events, newest first."""
        with self._connect() as conn:
            rows = get_recent_events(conn, limit=limit, skill_id=skill_id)
        return self._parse_rows(rows, _event_from_row)

    def get_skill(self, skill_id: str) -> SkillEntry | None:
        """Registry entry for a skill, if registered."""
        with self._connect() as conn:
            row = get_skill(conn, skill_id)
        if row is None:
            return None
        parsed = self._parse_rows([row], _skill_from_row)
        return parsed[0] if parsed else None

    def skills(self) -> list[SkillEntry]:
        """Every registry entry."""
        with self._connect() as conn:
            rows = get_skills(conn)
        return self._parse_rows(rows, _skill_from_row)

    def counts(self) -> dict[str, int]:
        """Row counts for diagnostics."""
        with self._connect() as conn:
            return {
                "samples": count_samples(conn),
                "events": count_events(conn),
                "skills": len(get_skills(conn)),
            }

    def scan(self) -> dict[str, int]:
        """Parse every stored sample and event and count the malformed ones."""
        parsers: dict[str, Callable[[sqlite3.Row], object]] = {
            "samples": _sample_from_row,
            "events": _event_from_row,
        }
        malformed = {table: 0 for table in parsers}
        with self._connect() as conn:
            for table, parse in parsers.items():
                for row in iter_rows(conn, table):
                    try:
                        _ = parse(row)
                    except MalformedRecord:
                        malformed[table] += 1
        return malformed

    def export(self) -> ExportSnapshot:
        """Build a read-only snapshot for external consumers."""
        aggregates = [self.aggregate(skill_id) for skill_id in self.list_known_skills()]
        events = self.recent_events(limit=EXPORT_EVENT_LIMIT)

        savings = [
            entry.token_savings
            for entry in self.skills()
            if entry.state == OptimizationState.PROMOTED and entry.token_savings is not None
        ]

        summary = ExportSummary(
            skills_tracked=len(aggregates),
            total_runs=sum(a.total_runs for a in aggregates),
            avg_runtime_ms=(
                sum(a.avg_elapsed_ms for a in aggregates) / len(aggregates)
                if aggregates
                else 0.0
            ),
            avg_token_savings=sum(savings) / len(savings) if savings else 0.0,
        )

        return ExportSnapshot(
            timestamp=utcnow(),
            summary=summary,
            skills=aggregates,
            events=events,
            skipped_records=self.skipped_records,
        )
