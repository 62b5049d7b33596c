# Copyright (c) Syntropy Systems
"""Batch pipeline: profile, analyze, optimize, validate, promote.

Stages run strictly in order over a whole skills directory. Per-skill read
failures are caught here and recorded in the report so sibling skills carry
on; ledger storage failures are not caught.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Callable

from skillforge.analyzer import Analyzer
from skillforge.config import ForgeConfig
from skillforge.errors import ContentUnavailable
from skillforge.execution import SimulatedExecutor
from skillforge.models.pipeline import Recommendation
from skillforge.optimizer import Optimizer
from skillforge.profiler import Profiler
from skillforge.skills import discover_skills, optimized_path_for
from skillforge.validator import Validator

if TYPE_CHECKING:
    from skillforge.execution import Executor
    from skillforge.ledger import Ledger
    from skillforge.models.ledger import AggregateView, ExportSnapshot
    from skillforge.models.pipeline import (
        CandidateScore,
        OptimizationOutcome,
        ValidationVerdict,
    )
    from skillforge.optimizer import ArtifactRewriter
    from skillforge.tokens import TokenEstimator

logger = logging.getLogger(__name__)


@dataclass
class ForgeReport:
    """What a pipeline run did, skill by skill."""

    discovered: list[str] = field(default_factory=list)
    profiled: dict[str, AggregateView] = field(default_factory=dict)
    scores: list[CandidateScore] = field(default_factory=list)
    outcomes: dict[str, OptimizationOutcome] = field(default_factory=dict)
    verdicts: dict[str, ValidationVerdict] = field(default_factory=dict)
    promoted: list[str] = field(default_factory=list)
    rejected: list[str] = field(default_factory=list)
    skipped: dict[str, str] = field(default_factory=dict)
    dry_run: list[str] = field(default_factory=list)
    stopped: bool = False
    export_path: Path | None = None

    @property
    def candidates(self) -> list[CandidateScore]:
        """Scores flagged for optimization."""
        return [s for s in self.scores if s.recommendation == Recommendation.OPTIMIZE]


def write_snapshot(ledger: Ledger, path: Path) -> ExportSnapshot:
    """Write the ledger's export snapshot as JSON and return it."""
    snapshot = ledger.export()
    path.parent.mkdir(parents=True, exist_ok=True)
    _ = path.write_text(snapshot.model_dump_json(indent=2), encoding="utf-8")
    return snapshot


class Forge:
    """Runs the whole pipeline over a directory of skills."""

    def __init__(  # noqa: PLR0913
        self,
        ledger: Ledger,
        config: ForgeConfig | None = None,
        executor: Executor | None = None,
        estimator: TokenEstimator | None = None,
        rewriter: ArtifactRewriter | None = None,
    ) -> None:
        self.ledger = ledger
        self.config = config or ForgeConfig()
        if executor is None:
            executor = SimulatedExecutor(
                min_latency_ms=self.config.min_latency_ms,
                max_latency_ms=self.config.max_latency_ms,
                failure_probability=self.config.failure_probability,
                timeout=self.config.execution_timeout,
                estimator=estimator,
            )
        self.profiler = Profiler(ledger, executor, estimator)
        self.analyzer = Analyzer(ledger)
        self.optimizer = Optimizer(
            ledger,
            rewriter=rewriter,
            estimator=estimator,
            optimized_suffix=self.config.optimized_suffix,
        )
        self.validator = Validator(ledger, executor, estimator)

    def run(  # noqa: PLR0913
        self,
        skills_dir: Path,
        iterations: int | None = None,
        dry_run: bool = False,  # noqa: FBT001, FBT002
        export_path: Path | None = None,
        stop: Callable[[], bool] | None = None,
    ) -> ForgeReport:
        """Run every stage over skills_dir.

        `stop` is polled between skills; once it returns True the run ends
        where it is, leaving the ledger exactly as far as it got.
        """
        iterations = iterations or self.config.iterations
        should_stop = stop or (lambda: False)
        report = ForgeReport()

        sources = discover_skills(skills_dir, self.config.skill_file)
        report.discovered = [s.skill_id for s in sources]
        paths = {s.skill_id: s.path for s in sources}
        logger.info("Found %d skills in %s", len(sources), skills_dir)

        # Profile
        if self.config.workers > 1:
            report.profiled = self.profiler.profile_directory(
                skills_dir,
                iterations=iterations,
                workers=self.config.workers,
                skill_file=self.config.skill_file,
                stop=should_stop,
            )
            if should_stop():
                report.stopped = True
                return report
            for skill_id in report.discovered:
                if skill_id not in report.profiled:
                    report.skipped[skill_id] = "definition unreadable"
        else:
            for source in sources:
                if should_stop():
                    report.stopped = True
                    return report
                try:
                    report.profiled[source.skill_id] = self.profiler.profile_skill_file(
                        source.path, iterations
                    )
                except ContentUnavailable as e:
                    logger.warning("Skipping %s: %s", source.skill_id, e)
                    report.skipped[source.skill_id] = str(e)

        # Score
        report.scores = self.analyzer.analyze_all()

        # Optimize, validate, promote
        for candidate in report.candidates:
            if should_stop():
                report.stopped = True
                return report
            self._process_candidate(candidate, paths.get(candidate.skill_id), report, dry_run)

        if export_path is not None:
            _ = write_snapshot(self.ledger, export_path)
            report.export_path = export_path

        return report

    def _process_candidate(
        self,
        candidate: CandidateScore,
        path: Path | None,
        report: ForgeReport,
        dry_run: bool,  # noqa: FBT001
    ) -> None:
        skill_id = candidate.skill_id

        if path is None or not path.is_file():
            logger.warning("Skipping %s: no definition file in this skills directory", skill_id)
            report.skipped[skill_id] = "definition file not found"
            return

        if dry_run:
            logger.info("[dry-run] Would optimize %s (score %d)", skill_id, candidate.score)
            report.dry_run.append(skill_id)
            return

        try:
            outcome = self.optimizer.optimize(skill_id, path, candidate)
            report.outcomes[skill_id] = outcome
            verdict = self.validator.validate_files(
                skill_id,
                path,
                optimized_path_for(path, self.config.optimized_suffix),
                iterations=self.config.validation_iterations,
            )
        except (ContentUnavailable, OSError) as e:
            logger.warning("Skipping %s: %s", skill_id, e)
            report.skipped[skill_id] = str(e)
            return

        report.verdicts[skill_id] = verdict
        if verdict.passed:
            self.validator.promote(verdict)
            report.promoted.append(skill_id)
            logger.info("Promoted %s %s", skill_id, verdict.version)
        else:
            self.validator.reject(verdict)
            report.rejected.append(skill_id)
            logger.info("Rejected %s %s: %s", skill_id, verdict.version, verdict.summary())
