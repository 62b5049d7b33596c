# Copyright (c) Syntropy Systems
"""Exceptions raised by skillforge."""

from __future__ import annotations


class ForgeError(Exception):
    """Base exception for all skillforge errors."""


class StorageFailure(ForgeError):
    """The ledger's storage could not be read or written.

    Never recovered locally. Whoever triggered the operation sees it.
    """

    def __init__(self, message: str, path: str | None = None) -> None:
        self.path = path
        full_message = message
        if path:
            full_message = f"Ledger storage error at '{path}': {message}"
        super().__init__(full_message)


class ContentUnavailable(ForgeError):
    """A skill definition or artifact could not be read."""

    def __init__(self, path: str, reason: str | None = None) -> None:
        self.path = path
        self.reason = reason
        full_message = f"Could not read '{path}'"
        if reason:
            full_message += f": {reason}"
        super().__init__(full_message)


class MalformedRecord(ForgeError):
    """A stored record could not be parsed back into its model."""

    def __init__(self, table: str, row_id: int | None, reason: str) -> None:
        self.table = table
        self.row_id = row_id
        super().__init__(f"Malformed {table} record #{row_id}: {reason}")
