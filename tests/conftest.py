# Copyright (c) Syntropy Systems
"""Pytest fixtures for skillforge tests."""

from __future__ import annotations

import os
import tempfile
from collections.abc import Callable, Generator
from pathlib import Path

import pytest
import yaml

from skillforge.execution import ExecutionResult
from skillforge.ledger import Ledger

# Store original cwd at module load time
_original_cwd = Path.cwd()

SKILL_BODY = """# Research Assistant

Answer questions using the attached knowledge base. Quote passages verbatim,
summarize findings clearly, and flag uncertain claims for human review before
publishing any final report to stakeholders.

## Rules
"""

REPEATED_RULE = "- Always cite the source document when answering a question.\n"


def write_skill(
    skills_dir: Path,
    name: str,
    body: str = SKILL_BODY,
    repeats: int = 40,
) -> Path:
    """Create skills_dir/name/SKILL.md and return its path."""
    skill_dir = skills_dir / name
    skill_dir.mkdir(parents=True, exist_ok=True)
    definition = skill_dir / "SKILL.md"
    _ = definition.write_text(body + REPEATED_RULE * repeats)
    return definition


class FakeExecutor:
    """Deterministic executor driven by a function of the content."""

    def __init__(
        self,
        respond: Callable[[str], ExecutionResult] | None = None,
        elapsed_ms: float = 100.0,
        output_tokens: int = 10,
    ) -> None:
        self.calls: list[str] = []
        self._respond = respond or (
            lambda _content: ExecutionResult(
                elapsed_ms=elapsed_ms,
                output_tokens=output_tokens,
                success=True,
            )
        )

    def execute(self, content: str) -> ExecutionResult:
        self.calls.append(content)
        return self._respond(content)


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def ledger(temp_dir: Path) -> Ledger:
    """A ledger backed by a fresh database."""
    return Ledger(temp_dir / "forge.db")


@pytest.fixture
def skills_dir(temp_dir: Path) -> Path:
    """An empty directory to create skills in."""
    path = temp_dir / "skills"
    path.mkdir()
    return path


@pytest.fixture
def forge_project(temp_dir: Path) -> Generator[Path, None, None]:
    """Create a temporary skillforge project with fast simulated execution."""
    from skillforge.config import ForgeConfig
    from skillforge.db import init_db

    forge_dir = temp_dir / ".forge"
    forge_dir.mkdir()
    (forge_dir / "exports").mkdir()

    config = ForgeConfig(
        min_latency_ms=0.0,
        max_latency_ms=1.0,
        failure_probability=0.0,
        iterations=3,
        validation_iterations=2,
    )
    with (forge_dir / "config.yaml").open("w") as f:
        yaml.dump(config.to_dict(), f)

    init_db(forge_dir / "forge.db")

    # Change to temp directory
    os.chdir(temp_dir)

    yield temp_dir

    # Always return to original cwd
    os.chdir(_original_cwd)


@pytest.fixture
def make_executor() -> type[FakeExecutor]:
    """Factory for deterministic executors."""
    return FakeExecutor


@pytest.fixture
def make_skill() -> Callable[..., Path]:
    """Factory that writes a skill definition and returns its path."""
    return write_skill
