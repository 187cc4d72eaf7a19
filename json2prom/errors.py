from __future__ import annotations

from typing import Any


class SourceError(Exception):
    """Raised when a source cannot contribute samples to the current scrape."""

    def __init__(self, url: str, message: str) -> None:
        super().__init__(f"{url}: {message}")
        self.url = url


class SourceFetchError(SourceError):
    pass


class SourceDecodeError(SourceError):
    pass


class SourceSentinelError(SourceError):
    """The document carried the source's error key at its root."""

    def __init__(self, url: str, error_key: str, value: Any) -> None:
        super().__init__(url, f"{error_key}: {value!r}")
        self.error_key = error_key
        self.value = value
