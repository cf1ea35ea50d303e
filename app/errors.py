"""
Domain exceptions for race result extraction and job orchestration.
"""

from __future__ import annotations


class RaceResultsError(Exception):
    """Base exception for race result extraction failures."""


class NonRetryableError(RaceResultsError):
    """Failure that is raised on the first attempt instead of being retried."""


class InvalidURLError(NonRetryableError):
    """Raised when a submitted URL cannot be normalized."""


class UnsupportedPlatformError(NonRetryableError):
    """Raised when no registered platform profile matches a URL's host."""


class RenderError(RaceResultsError):
    """Raised when a page cannot be rendered (navigation or network failure)."""


class RenderTimeoutError(RenderError):
    """Raised when rendering a page exceeds its hard timeout."""


class PageUnavailableError(RenderError, NonRetryableError):
    """Raised when the vendor answers with a permanent HTTP failure (e.g. 404)."""


class UnauthorizedError(RaceResultsError):
    """Raised when a caller requests a job owned by a different identity."""


class JobNotFoundError(RaceResultsError):
    """Raised when a job id does not exist."""


class BatchSizeError(RaceResultsError):
    """Raised when a batch submission is empty or exceeds the configured limit."""


class ExportFormatUnsupportedError(RaceResultsError):
    """Raised when a requested export encoding is not recognized."""


class JobStateError(RaceResultsError):
    """Raised on an illegal job status transition or counter overflow."""
