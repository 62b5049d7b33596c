# Copyright (c) Syntropy Systems
"""Rewriting of skill definitions into cheaper artifacts.

The rewrite itself is pluggable. `HeuristicRewriter` applies a handful of
text clean-ups; a model-backed rewriter would send the brief produced by
`build_optimization_prompt` to a language model instead.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, Protocol

from skillforge.analyzer import Analyzer
from skillforge.db import utcnow
from skillforge.models.ledger import EventModule, LifecycleEvent, OptimizationState
from skillforge.models.pipeline import OptimizationOutcome, round_half_up
from skillforge.skills import (
    DEFAULT_OPTIMIZED_SUFFIX,
    optimized_path_for,
    read_skill_file,
)
from skillforge.tokens import DEFAULT_ESTIMATOR, TokenEstimator

if TYPE_CHECKING:
    from pathlib import Path

    from skillforge.ledger import Ledger
    from skillforge.models.pipeline import CandidateScore

logger = logging.getLogger(__name__)

TIME_SAVINGS_RATIO = 0.15
LONG_BULLET_CHARS = 200
SHORT_BULLET_CHARS = 150
OPTIMIZED_HEADER = "<!-- Optimized by skillforge | Estimated savings: {savings}% tokens -->"

_BLANK_RUN = re.compile(r"\n{3,}")
_HTML_COMMENT = re.compile(r"<!--[\s\S]*?-->")
_LONG_BULLET = re.compile(rf"^(\s*[-*]\s+)(.{{{LONG_BULLET_CHARS},}})", re.MULTILINE)
_TRAILING_WORD = re.compile(r"\s+\S*$")


class ArtifactRewriter(Protocol):
    """Produces a cheaper version of a skill definition."""

    def rewrite(self, content: str, candidate: CandidateScore) -> str:
        ...


class HeuristicRewriter:
    """Rewrites a definition with plain text clean-ups.

    - collapses runs of blank lines
    - strips HTML comments
    - shortens very long bullet points
    - drops repeated non-heading lines
    - prefixes a header noting the estimated savings
    """

    def rewrite(self, content: str, candidate: CandidateScore) -> str:  # noqa: ARG002
        optimized = _BLANK_RUN.sub("\n\n", content)
        optimized = _HTML_COMMENT.sub("", optimized)
        optimized = _LONG_BULLET.sub(self._shorten_bullet, optimized)
        optimized = self._dedupe_lines(optimized)

        savings = 0
        if content:
            savings = round_half_up((1 - len(optimized) / len(content)) * 100)
        header = OPTIMIZED_HEADER.format(savings=savings)
        return f"{header}\n{optimized}"

    @staticmethod
    def _shorten_bullet(match: re.Match[str]) -> str:
        prefix, text = match.group(1), match.group(2)
        return prefix + _TRAILING_WORD.sub("…", text[:SHORT_BULLET_CHARS])

    @staticmethod
    def _dedupe_lines(text: str) -> str:
        seen: set[str] = set()
        kept: list[str] = []
        for line in text.split("\n"):
            stripped = line.strip()
            if stripped and not stripped.startswith("#"):
                if stripped in seen:
                    continue
                seen.add(stripped)
            kept.append(line)
        return "\n".join(kept)


def build_optimization_prompt(content: str, candidate: CandidateScore) -> str:
    """Render the rewrite brief for a model-backed rewriter."""
    metrics = candidate.aggregate
    issues = "\n".join(f"- {reason}" for reason in candidate.reasons) or "- None"

    return f"""You are an expert at optimizing AI agent skills (prompt templates).

## Task
Rewrite the skill below to be more efficient. Your goals:
1. Reduce token count while preserving all functionality
2. Remove redundant instructions
3. Consolidate similar sections
4. Use concise language without losing clarity
5. Preserve the skill's core behavior exactly

## Performance Data
- Avg tokens per run: {round_half_up(metrics.total_tokens)}
- Avg execution time: {round_half_up(metrics.avg_elapsed_ms)}ms
- P95 latency: {round_half_up(metrics.p95_elapsed_ms)}ms
- Failure rate: {metrics.failure_rate * 100:.1f}%
- Total runs analyzed: {metrics.total_runs}
- Optimization score: {candidate.score}/100

## Issues Found
{issues}

## Current Skill Content
```markdown
{content}
```

## Output Format
Return ONLY the optimized skill content in markdown. No explanations."""


def describe_changes(original: str, optimized: str) -> list[str]:
    """Human readable summary of how much smaller the artifact got."""
    changes: list[str] = []
    original_lines = len(original.split("\n"))
    optimized_lines = len(optimized.split("\n"))

    if optimized_lines < original_lines:
        changes.append(f"Reduced from {original_lines} to {optimized_lines} lines")
    if original and len(optimized) < len(original):
        reduction = round_half_up((1 - len(optimized) / len(original)) * 100)
        changes.append(f"{reduction}% fewer characters")
    if not changes:
        changes.append("No size reduction")
    return changes


class Optimizer:
    """Produces optimized artifacts and accounts for their savings."""

    def __init__(
        self,
        ledger: Ledger,
        rewriter: ArtifactRewriter | None = None,
        estimator: TokenEstimator | None = None,
        optimized_suffix: str = DEFAULT_OPTIMIZED_SUFFIX,
    ) -> None:
        self.ledger = ledger
        self.rewriter = rewriter or HeuristicRewriter()
        self.estimator = estimator or DEFAULT_ESTIMATOR
        self.optimized_suffix = optimized_suffix

    def _rewrite(
        self,
        skill_id: str,
        content: str,
        candidate: CandidateScore,
        original_path: str | None = None,
        optimized_path: str | None = None,
    ) -> OptimizationOutcome:
        optimized = self.rewriter.rewrite(content, candidate)

        original_tokens = self.estimator.estimate(content)
        optimized_tokens = self.estimator.estimate(optimized)

        return OptimizationOutcome(
            skill_id=skill_id,
            original_path=original_path,
            optimized_path=optimized_path,
            optimized_content=optimized,
            changes=describe_changes(content, optimized),
            original_tokens=original_tokens,
            optimized_tokens=optimized_tokens,
            estimated_token_savings=original_tokens - optimized_tokens,
            estimated_time_savings_ms=candidate.aggregate.avg_elapsed_ms * TIME_SAVINGS_RATIO,
        )

    def _record(self, outcome: OptimizationOutcome) -> None:
        self.ledger.record_event(
            LifecycleEvent(
                timestamp=utcnow(),
                module=EventModule.OPTIMIZER,
                action="optimized",
                skill_id=outcome.skill_id,
                details=(
                    f"Saved ~{outcome.estimated_token_savings} tokens "
                    f"({outcome.savings_percent}%)"
                ),
            )
        )
        _ = self.ledger.set_state(outcome.skill_id, OptimizationState.OPTIMIZED)

    def optimize_content(
        self,
        skill_id: str,
        content: str,
        candidate: CandidateScore,
    ) -> OptimizationOutcome:
        """Rewrite content in memory and record the savings estimate."""
        outcome = self._rewrite(skill_id, content, candidate)
        self._record(outcome)
        return outcome

    def optimize(
        self,
        skill_id: str,
        path: Path,
        candidate: CandidateScore | None = None,
    ) -> OptimizationOutcome:
        """Rewrite a definition file and write the artifact beside it.

        Raises ContentUnavailable, without recording anything, if the
        definition cannot be read.
        """
        content = read_skill_file(path)
        if candidate is None:
            candidate = Analyzer(self.ledger).analyze(skill_id)

        target = optimized_path_for(path, self.optimized_suffix)
        outcome = self._rewrite(
            skill_id,
            content,
            candidate,
            original_path=str(path),
            optimized_path=str(target),
        )
        _ = target.write_text(outcome.optimized_content, encoding="utf-8")
        self._record(outcome)
        logger.info("Wrote optimized artifact for %s to %s", skill_id, target)

        return outcome
