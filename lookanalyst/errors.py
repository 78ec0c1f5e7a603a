"""
Error types for the LookAnalyst pipeline.

Lower layers raise these and never recover on their own, except for the
single proxy retry in lookanalyst.proxy. HTTP handlers map them to status
codes.
"""

from typing import Optional


class LookAnalystError(Exception):
    """Base class for every pipeline failure."""


class NetworkError(LookAnalystError):
    """Timeout, connection failure or terminal HTTP status from an origin."""

    def __init__(self, message: str, url: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class ExtractionError(LookAnalystError):
    """No extraction strategy located an image in the page."""


class InvalidContentError(LookAnalystError):
    """A fetched payload is not an image."""

    def __init__(self, message: str, content_type: Optional[str] = None):
        super().__init__(message)
        self.content_type = content_type


class ProxyError(LookAnalystError):
    """The proxy retry failed as well. Keeps the original failure."""

    def __init__(self, original: Exception, proxy_failure: Exception):
        super().__init__(
            f'{original} (proxy retry failed: {proxy_failure})'
        )
        self.original = original
        self.proxy_failure = proxy_failure


class AnalysisError(LookAnalystError):
    """The Gemini garment analysis could not be completed."""


class UploadTooLargeError(LookAnalystError):
    """An uploaded file exceeds the configured size limit."""

    def __init__(self, max_size: int):
        super().__init__(
            f'File is too large. The maximum allowed size is {round(max_size / (1024 * 1024))}MB.'
        )
        self.max_size = max_size
