# Copyright (c) Syntropy Systems
"""Discovery and reading of skill definition files."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from skillforge.errors import ContentUnavailable

DEFAULT_SKILL_FILE = "SKILL.md"
DEFAULT_OPTIMIZED_SUFFIX = ".optimized"


@dataclass(frozen=True)
class SkillSource:
    """A skill directory and its definition file."""

    skill_id: str
    path: Path


def skill_id_for(definition_path: Path) -> str:
    """A skill is named after the directory holding its definition."""
    return definition_path.resolve().parent.name


def discover_skills(
    skills_dir: Path,
    skill_file: str = DEFAULT_SKILL_FILE,
) -> list[SkillSource]:
    """List sub-directories of skills_dir that contain a definition file.

    Directories without one are skipped. Results are sorted by skill id.
    """
    if not skills_dir.is_dir():
        raise ContentUnavailable(str(skills_dir), "not a directory")

    sources: list[SkillSource] = []
    for child in sorted(skills_dir.iterdir()):
        definition = child / skill_file
        if child.is_dir() and definition.is_file():
            sources.append(SkillSource(skill_id=child.name, path=definition))
    return sources


def resolve_definition(skill_path: Path, skill_file: str = DEFAULT_SKILL_FILE) -> Path:
    """Accept either a skill directory or its definition file."""
    if skill_path.is_dir():
        return skill_path / skill_file
    return skill_path


def optimized_path_for(
    definition_path: Path,
    suffix: str = DEFAULT_OPTIMIZED_SUFFIX,
) -> Path:
    """Where the optimized artifact for a definition lives.

    SKILL.md becomes SKILL.optimized.md in the same directory.
    """
    return definition_path.with_name(
        f"{definition_path.stem}{suffix}{definition_path.suffix}"
    )


def read_skill_file(path: Path) -> str:
    """Read a definition or artifact, raising ContentUnavailable on failure."""
    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise ContentUnavailable(str(path), "file not found") from e
    except (OSError, UnicodeDecodeError) as e:
        raise ContentUnavailable(str(path), str(e)) from e
