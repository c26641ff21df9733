from __future__ import annotations


class TutorError(Exception):
    """Base class for failures that are reported to the operator as a message."""


class StorageError(TutorError):
    """Reading or writing a dictionary file failed."""


class ValidationError(TutorError, ValueError):
    """Input, configuration or dictionary content is malformed."""


class NotFoundError(TutorError, LookupError):
    """A word is not present where the caller expected it."""
