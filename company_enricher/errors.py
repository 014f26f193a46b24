"""Exceptions raised by the enrichment pipeline."""

from typing import Optional


class EnrichmentError(Exception):
    """Base class for enrichment failures."""


class TransientHTTPError(EnrichmentError):
    """A rate-limited or server-side failure worth retrying."""

    def __init__(self, url: str, status_code: int):
        super().__init__(f"HTTP {status_code} from {url}")
        self.url = url
        self.status_code = status_code


class RequestFailedError(EnrichmentError):
    """A request that could not be completed, even after retrying."""

    def __init__(self, url: str, message: str, status_code: Optional[int] = None):
        super().__init__(f"Request to {url} failed: {message}")
        self.url = url
        self.status_code = status_code


class SummaryUnavailableError(EnrichmentError):
    """The article summary could not be retrieved for a resolved title."""

    def __init__(self, title: str):
        super().__init__(f"No summary available for '{title}'")
        self.title = title
