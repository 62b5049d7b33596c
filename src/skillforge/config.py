# Copyright (c) Syntropy Systems
"""Configuration management for skillforge."""
from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path
from typing import cast

import yaml

FORGE_DIR_NAME = ".forge"

# Integer settings with a lower bound; smaller values in config.yaml are ignored
MINIMUMS = {"window": 0, "iterations": 1, "validation_iterations": 1, "workers": 1}


@dataclass
class ForgeConfig:
    """Configuration for skillforge."""

    # Number of most recent samples aggregated per skill
    window: int = 500

    # Simulated profiling iterations per skill
    iterations: int = 5

    # A/B rounds run by the validation gate
    validation_iterations: int = 3

    # Hard cap on a single execution (seconds)
    execution_timeout: float = 30.0

    # Simulated execution latency range (milliseconds)
    min_latency_ms: float = 200.0
    max_latency_ms: float = 1000.0

    # Chance a simulated execution reports failure
    failure_probability: float = 0.05

    # Definition file that marks a directory as a skill
    skill_file: str = "SKILL.md"

    # Inserted before the extension of the optimized artifact
    optimized_suffix: str = ".optimized"

    # Concurrent profiling workers
    workers: int = 1

    def to_dict(self) -> dict[str, object]:
        """Return the config as a plain dict suitable for YAML."""
        return {f.name: getattr(self, f.name) for f in fields(self)}


def find_forge_dir(start_path: Path | None = None) -> Path | None:
    """Find the nearest .forge directory by walking up from start_path.

    Returns None if no .forge directory is found.
    """
    if start_path is None:
        start_path = Path.cwd()

    current = start_path.resolve()

    while current != current.parent:
        forge_dir = current / FORGE_DIR_NAME
        if forge_dir.is_dir():
            return forge_dir
        current = current.parent

    # Check root
    forge_dir = current / FORGE_DIR_NAME
    if forge_dir.is_dir():
        return forge_dir

    return None


def _coerce(value: object, default: object) -> object | None:
    """Return value converted to the type of default, or None if it does not fit."""
    if isinstance(default, bool):
        return value if isinstance(value, bool) else None
    if isinstance(default, int):
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return int(value)
        return None
    if isinstance(default, float):
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return float(value)
        return None
    if isinstance(default, str):
        return value if isinstance(value, str) and value else None
    return None


def load_config(forge_dir: Path | None = None) -> ForgeConfig:
    """Load configuration from .forge/config.yaml or defaults.

    Looks for config in:
    1. Provided forge_dir
    2. Nearest .forge directory walking up
    3. Defaults
    """
    config = ForgeConfig()

    if forge_dir is None:
        forge_dir = find_forge_dir()
    if forge_dir is None:
        return config

    config_path = get_config_path(forge_dir)
    if not config_path.exists():
        return config

    with config_path.open() as f:
        data = cast("dict[str, object]", yaml.safe_load(f) or {})

    for field in fields(config):
        if field.name not in data:
            continue
        value = _coerce(data[field.name], getattr(config, field.name))
        if isinstance(value, int) and value < MINIMUMS.get(field.name, value):
            value = None
        if value is not None:
            setattr(config, field.name, value)

    return config


def require_forge_dir() -> Path:
    """Get forge directory or raise an error if not found."""
    forge_dir = find_forge_dir()
    if forge_dir is None:
        msg = "No .forge directory found. Run 'skillforge init' first."
        raise RuntimeError(msg)
    return forge_dir


def get_db_path(forge_dir: Path | None = None) -> Path:
    """Get the path to the SQLite ledger."""
    if forge_dir is None:
        forge_dir = require_forge_dir()
    return forge_dir / "forge.db"


def get_exports_dir(forge_dir: Path | None = None) -> Path:
    """Get the path to the exports directory."""
    if forge_dir is None:
        forge_dir = require_forge_dir()
    return forge_dir / "exports"


def get_config_path(forge_dir: Path | None = None) -> Path:
    """Get the path to config.yaml."""
    if forge_dir is None:
        forge_dir = require_forge_dir()
    return forge_dir / "config.yaml"


def save_config(config: ForgeConfig, forge_dir: Path) -> Path:
    """Write config as YAML into forge_dir and return the file path."""
    config_path = get_config_path(forge_dir)
    with config_path.open("w") as f:
        yaml.dump(config.to_dict(), f, default_flow_style=False)
    return config_path
