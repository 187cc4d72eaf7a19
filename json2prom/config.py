import logging
from typing import List, Tuple

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .models import Source


def split_host_port(addr: str) -> Tuple[str, int]:
    """Split ``host:port``; an empty host listens on every interface."""
    host, sep, port = addr.rpartition(":")
    if not sep:
        raise ValueError(f"missing port in address {addr!r}")
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    try:
        port_number = int(port)
    except ValueError as exc:
        raise ValueError(f"invalid port in address {addr!r}") from exc
    if not 0 <= port_number <= 65535:
        raise ValueError(f"port out of range in address {addr!r}")
    return host or "0.0.0.0", port_number


class Settings(BaseSettings):
    app_name: str = "json2prom"
    sources: List[Source] = Field(
        ..., description="JSON array of upstream sources and their key actions."
    )
    http_addr: str = Field(":8080", description="Listen address as host:port.")
    request_timeout_seconds: float = Field(
        5.0, gt=0, description="Per-request timeout when fetching a source."
    )
    describe_on_register: bool = Field(
        False,
        description="Run a trial scrape at startup to advertise metric descriptors.",
    )
    runtime_metrics: bool = Field(
        True, description="Expose process, platform and GC metrics alongside sources."
    )
    log_level: str = Field("INFO", description="Logging level name.")

    model_config = SettingsConfigDict(case_sensitive=False)

    @field_validator("http_addr")
    def check_http_addr(cls, value: str) -> str:
        split_host_port(value)
        return value

    @field_validator("log_level")
    def normalize_log_level(cls, value: str) -> str:
        value = value.upper()
        if not isinstance(logging.getLevelName(value), int):
            raise ValueError(f"unknown log level {value!r}")
        return value
