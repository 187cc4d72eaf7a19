from __future__ import annotations

import json
import logging
import time
from concurrent.futures import ThreadPoolExecutor, wait
from typing import Any, Optional, Sequence

import httpx

from ..errors import SourceDecodeError, SourceError, SourceFetchError, SourceSentinelError
from ..metrics.base import SampleSink
from ..metrics.traversal import process_value
from ..models import Source

logger = logging.getLogger(__name__)


class SourceScraper:
    """Fetches every configured source in parallel and projects it into a sink."""

    def __init__(
        self,
        sources: Sequence[Source],
        timeout_seconds: float = 5.0,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self.sources = tuple(sources)
        self.timeout_seconds = timeout_seconds
        self._client = client or httpx.Client(timeout=timeout_seconds)

    def close(self) -> None:
        self._client.close()

    def scrape(self, sink: SampleSink) -> None:
        if not self.sources:
            return
        with ThreadPoolExecutor(
            max_workers=len(self.sources), thread_name_prefix="json2prom-source"
        ) as pool:
            futures = {
                pool.submit(self._scrape_source, source, sink): source
                for source in self.sources
            }
            wait(futures)
        for future, source in futures.items():
            exc = future.exception()
            if exc is not None:
                logger.error("%s: scrape failed", source.url, exc_info=exc)

    def fetch(self, source: Source) -> Any:
        body = self._read_body(source)
        try:
            document = json.loads(body)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise SourceDecodeError(source.url, str(exc)) from exc

        if source.error_key and isinstance(document, dict) and source.error_key in document:
            raise SourceSentinelError(source.url, source.error_key, document[source.error_key])
        return document

    def _read_body(self, source: Source) -> bytes:
        # Bounds the whole request, not only each read.
        deadline = time.monotonic() + self.timeout_seconds
        body = bytearray()
        try:
            with self._client.stream("GET", source.url) as response:
                for chunk in response.iter_bytes():
                    body.extend(chunk)
                    if time.monotonic() > deadline:
                        raise SourceFetchError(
                            source.url,
                            f"request exceeded {self.timeout_seconds:g}s deadline",
                        )
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise SourceFetchError(source.url, str(exc) or type(exc).__name__) from exc
        return bytes(body)

    def _scrape_source(self, source: Source, sink: SampleSink) -> None:
        try:
            document = self.fetch(source)
        except SourceError as exc:
            logger.error("%s", exc)
            return

        process_value(
            source,
            document,
            source.root_action(),
            sink,
            label_names=tuple(source.labels.keys()),
            label_values=tuple(source.labels.values()),
        )
