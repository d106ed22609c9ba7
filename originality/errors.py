"""
Exception types raised by the analysis pipeline.

ValidationError is surfaced to the caller, ExternalLookupFailure is absorbed by
the internal-only fallback, InternalComputationError is fatal to one request.
"""

from typing import Any


class OriginalityError(Exception):
    """Base class for all analysis errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class ValidationError(OriginalityError):
    """Input text or options rejected before analysis begins."""

    def __init__(self, message: str, field: str = None, value: Any = None):
        self.field = field
        self.value = value
        super().__init__(message)


class ExternalLookupFailure(OriginalityError):
    """Search collaborator raised or misbehaved for one phrase."""

    def __init__(self, message: str, phrase: str = None):
        self.phrase = phrase
        super().__init__(message)


class InternalComputationError(OriginalityError):
    """Unexpected failure inside the similarity pipeline."""
    pass
