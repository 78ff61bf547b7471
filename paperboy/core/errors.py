from __future__ import annotations

from typing import Optional


class PaperboyError(Exception):
    """Base error for the collector."""


class ConfigurationError(PaperboyError):
    """Fatal, raised before any fetch happens."""


class BucketFetchError(PaperboyError):
    """A single snapshot could not be fetched or decoded."""

    def __init__(self, timestamp: int, message: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(f"snapshot {timestamp}: {message}")
        self.timestamp = timestamp
        self.cause = cause


class EnrichmentFetchError(PaperboyError):
    """A story page was unreachable."""

    def __init__(self, url: str, message: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(f"{url}: {message}")
        self.url = url
        self.cause = cause
