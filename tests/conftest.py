"""Shared test fixtures for all test modules."""

import json
from typing import Any, Callable, Dict, List, Union

import httpx
import pytest

from json2prom.models import Source
from json2prom.services.collector import SourceScraper
from tests.helpers import ListSink

Upstream = Union[Any, Callable[[httpx.Request], httpx.Response]]


@pytest.fixture
def list_sink() -> ListSink:
    return ListSink()


@pytest.fixture
def make_source() -> Callable[..., Source]:
    """Factory fixture building a Source from the upstream JSON field names."""

    def _source(url: str = "http://upstream.test/doc", **fields: Any) -> Source:
        return Source.model_validate({"URL": url, **fields})

    return _source


@pytest.fixture
def mock_scraper():
    """Factory fixture creating a SourceScraper backed by httpx.MockTransport.

    ``upstreams`` maps a URL to either a JSON-serialisable document or a
    handler returning an ``httpx.Response`` (or raising an httpx error).
    """
    scrapers: List[SourceScraper] = []

    def _scraper(
        sources: List[Source],
        upstreams: Dict[str, Upstream],
        timeout_seconds: float = 5.0,
    ) -> SourceScraper:
        def handler(request: httpx.Request) -> httpx.Response:
            upstream = upstreams.get(str(request.url))
            if upstream is None:
                return httpx.Response(404, text="not found")
            if callable(upstream):
                return upstream(request)
            return httpx.Response(200, content=json.dumps(upstream).encode())

        client = httpx.Client(transport=httpx.MockTransport(handler), timeout=5.0)
        scraper = SourceScraper(sources, timeout_seconds=timeout_seconds, client=client)
        scrapers.append(scraper)
        return scraper

    yield _scraper
    for scraper in scrapers:
        scraper.close()
