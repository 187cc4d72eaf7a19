from __future__ import annotations

import logging
import queue
import threading
from collections import OrderedDict
from typing import TYPE_CHECKING, Iterator, List, Optional

from prometheus_client import (
    CollectorRegistry,
    GCCollector,
    PlatformCollector,
    ProcessCollector,
)
from prometheus_client.core import GaugeMetricFamily
from prometheus_client.registry import Collector

from .base import Sample

if TYPE_CHECKING:
    from ..config import Settings
    from ..services.collector import SourceScraper

logger = logging.getLogger(__name__)


class JSONCollector(Collector):
    """Prometheus collector that scrapes every JSON source on each collection."""

    def __init__(self, scraper: "SourceScraper", describe_on_register: bool = False) -> None:
        self.scraper = scraper
        self.describe_on_register = describe_on_register

    def collect(self) -> Iterator[GaugeMetricFamily]:
        samples: "queue.Queue[Sample]" = queue.Queue()
        self.scraper.scrape(samples)

        families: "OrderedDict[str, GaugeMetricFamily]" = OrderedDict()
        while True:
            try:
                sample = samples.get_nowait()
            except queue.Empty:
                break
            family = self._family_for(families, sample)
            if family is not None:
                family.add_sample(sample.full_name, sample.labels, sample.value)
        yield from families.values()

    def describe(self) -> List[GaugeMetricFamily]:
        if not self.describe_on_register:
            return []

        samples: "queue.Queue[Optional[Sample]]" = queue.Queue()

        def emit() -> None:
            try:
                self.scraper.scrape(samples)
            except Exception:
                logger.exception("trial collection failed")
            finally:
                samples.put(None)

        emitter = threading.Thread(target=emit, name="json2prom-describe", daemon=True)
        emitter.start()
        descriptors: "OrderedDict[str, GaugeMetricFamily]" = OrderedDict()
        try:
            while True:
                sample = samples.get()
                if sample is None:
                    break
                self._family_for(descriptors, sample)
        finally:
            emitter.join()
        return list(descriptors.values())

    @staticmethod
    def _family_for(
        families: "OrderedDict[str, GaugeMetricFamily]", sample: Sample
    ) -> "GaugeMetricFamily | None":
        name = sample.full_name
        if name in families:
            return families[name]
        try:
            family = GaugeMetricFamily(name, sample.documentation)
        except ValueError as exc:
            logger.warning("dropping sample with invalid metric name %r: %s", name, exc)
            return None
        families[name] = family
        return family


def build_registry(settings: "Settings", scraper: "SourceScraper") -> CollectorRegistry:
    registry = CollectorRegistry()
    if settings.runtime_metrics:
        ProcessCollector(registry=registry)
        PlatformCollector(registry=registry)
        GCCollector(registry=registry)
    registry.register(JSONCollector(scraper, describe_on_register=settings.describe_on_register))
    return registry
