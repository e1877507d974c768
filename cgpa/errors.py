"""
Error taxonomy for the CGPA core.
"""
from __future__ import annotations


class CGPAError(Exception):
    """Base class for every error raised by the CGPA core and its collaborators."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class ValidationError(CGPAError):
    """Malformed or rule-violating input. Nothing was mutated."""


class NotFoundError(CGPAError):
    """A record or semester that had to exist does not."""


class PersistenceError(CGPAError):
    """The storage collaborator failed. Surfaced as-is, never retried here."""
