"""Helpers shared by unit and integration tests."""

import queue
from typing import List

from json2prom.metrics.base import Sample


class ListSink:
    """Sample sink that keeps everything it receives."""

    def __init__(self) -> None:
        self.samples: List[Sample] = []

    def put(self, item: Sample) -> None:
        self.samples.append(item)


def sample_set(samples: List[Sample]) -> set:
    """Order-independent view of (full_name, labels, value) triples."""
    return {(s.full_name, frozenset(s.labels.items()), s.value) for s in samples}


def drain(sink: "queue.Queue[Sample]") -> List[Sample]:
    items = []
    while not sink.empty():
        items.append(sink.get_nowait())
    return items
