"""Exception types shared across the document store and render pipeline."""

from __future__ import annotations

__all__ = [
    "AssetError",
    "CompositionError",
    "PublishError",
    "ReconciliationError",
    "RenderError",
    "ResumeNotFoundError",
    "ResumifyError",
    "ValidationError",
]


class ResumifyError(Exception):
    """Base class for all application errors."""


class ValidationError(ResumifyError):
    """Document fields are malformed or missing."""


class ResumeNotFoundError(ResumifyError):
    """No document matches the lookup.

    Raised for unknown ids, documents owned by someone else and private
    documents looked up by share id alike.
    """

    def __init__(self, message: str = "Resume not found") -> None:
        super().__init__(message)


class AssetError(ResumifyError):
    """An uploaded asset (e.g. a profile photo) was rejected."""


class CompositionError(ResumifyError):
    """The compositor was handed something it cannot compose.

    This signals a caller bug and is never retried.
    """

    retryable = False


class RenderError(ResumifyError):
    """The headless browser failed to launch, crashed or timed out."""

    def __init__(self, message: str, *, retryable: bool = True, timed_out: bool = False) -> None:
        super().__init__(message)
        self.retryable = retryable
        self.timed_out = timed_out


class PublishError(ResumifyError):
    """Uploading or deriving an artifact from the object store failed."""


class ReconciliationError(ResumifyError):
    """Writing artifact pointers back to the document store failed."""
