"""
Reconciliation exceptions.

Exception hierarchy:
    ReconcileError (base)
    ├── ParseError    spreadsheet bytes could not be read
    └── MappingError  a cost mapping is unusable
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class ReconcileError(Exception):
    """Base class so callers can catch every reconciliation failure at once."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ParseError(ReconcileError):
    """
    A spreadsheet could not be parsed.

    The original exception is chained as ``__cause__``; no partial sheets are
    returned for the file.
    """

    def __init__(self, file_name: str, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(f"{file_name}: {message}", details)
        self.file_name = file_name


class MappingError(ReconcileError):
    """A cost mapping lacks a required column or could not be loaded."""
