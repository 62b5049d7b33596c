# Copyright (c) Syntropy Systems
"""Shared Pydantic model helpers for skillforge."""

from __future__ import annotations

from typing import ClassVar

from pydantic import BaseModel, ConfigDict


class ForgeBaseModel(BaseModel):
    """Base model with shared config for skillforge schemas."""

    model_config: ClassVar[ConfigDict] = ConfigDict(
        extra="ignore",
        populate_by_name=True,
    )


class FrozenRecord(BaseModel):
    """Base model for append-only records that never change once written."""

    model_config: ClassVar[ConfigDict] = ConfigDict(
        extra="ignore",
        populate_by_name=True,
        frozen=True,
    )
