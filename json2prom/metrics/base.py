from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Mapping, Protocol


@dataclass(frozen=True)
class Sample:
    """A single gauge value produced during a scrape."""

    namespace: str
    subsystem: str
    name: str
    labels: Dict[str, str] = field(default_factory=dict)
    value: float = 0.0
    documentation: str = ""

    @property
    def full_name(self) -> str:
        # Same composition as the Prometheus client libraries: an empty name
        # yields an empty full name, empty prefixes are skipped.
        if not self.name:
            return ""
        return "_".join(part for part in (self.namespace, self.subsystem, self.name) if part)


class SampleSink(Protocol):
    def put(self, item: Sample) -> None:
        ...


def emit_gauge(
    sink: SampleSink,
    namespace: str,
    subsystem: str,
    name: str,
    labels: Mapping[str, str],
    value: float,
    documentation: str = "",
) -> None:
    sink.put(
        Sample(
            namespace=namespace,
            subsystem=subsystem,
            name=name,
            labels=dict(labels),
            value=float(value),
            documentation=documentation,
        )
    )
