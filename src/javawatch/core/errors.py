"""
Error types raised while fetching, extracting and persisting release data.
"""

from enum import Enum
from typing import Optional


class JavaWatchError(Exception):
    """Base class for all javawatch errors."""


class FetchError(JavaWatchError):
    """The download page could not be loaded, timed out, or was blocked."""

    def __init__(self, message: str, url: Optional[str] = None):
        super().__init__(message)
        self.url = url


class ExtractionFailure(Enum):
    MISSING_VERSION = "MissingVersion"
    NO_DOWNLOADS_FOUND = "NoDownloadsFound"


class ExtractionError(JavaWatchError):
    """The fetched HTML did not contain a usable release."""

    def __init__(self, reason: ExtractionFailure, message: Optional[str] = None):
        super().__init__(message or reason.value)
        self.reason = reason


class PersistenceError(JavaWatchError):
    """The archive file could not be read or written."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path
