# Copyright (c) Syntropy Systems
"""skillforge dashboard API."""

from .server import create_app

__all__ = ["create_app"]
