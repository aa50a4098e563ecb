"""
Exception hierarchy for the PharmaLocal store and report layers.
"""
from __future__ import annotations


class PharmaLocalError(Exception):
    """Base class for all errors raised by this package."""


class RecordValidationError(PharmaLocalError):
    """A record is missing required fields; nothing was written."""

    def __init__(self, collection: str, problems: list[str]):
        self.collection = collection
        self.problems = problems
        super().__init__(f"{collection}: " + "; ".join(problems))


class DuplicateIdError(PharmaLocalError):
    def __init__(self, collection: str, record_id: str):
        self.collection = collection
        self.record_id = record_id
        super().__init__(f"{collection}: id {record_id!r} already exists")


class BackupFormatError(PharmaLocalError):
    """Backup document failed to parse or failed the shape check."""

    def __init__(self, messages: list[str]):
        self.messages = messages
        super().__init__("; ".join(messages) or "invalid backup document")


class MigrationError(PharmaLocalError):
    """Legacy data could not be migrated. The migration flag is left unset."""
