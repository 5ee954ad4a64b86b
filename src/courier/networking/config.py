"""Configuration model for the requests-backed transport."""

from __future__ import annotations

from dataclasses import dataclass


def _require_positive(name: str, value: float | None) -> None:
    if value is not None and value <= 0:
        raise ValueError(f"{name} must be > 0 when provided")


@dataclass(frozen=True)
class HttpTransportConfig:
    """Settings shared by every request the :class:`~.http_adapter.HttpAdapter`
    sends.

    Per-request options (headers, ``timeout`` in milliseconds, auth, params)
    travel in the request config; the timeouts here only apply when a request
    does not set its own.
    """

    user_agent: str | None = None
    retries: int = 0
    verify_tls: bool = True
    connect_timeout_seconds: float | None = None
    read_timeout_seconds: float | None = None
    backoff_base_seconds: float = 0.0
    timeout_seconds: float | None = None

    def __post_init__(self) -> None:
        if self.retries < 0:
            raise ValueError("retries must be >= 0")
        if self.backoff_base_seconds < 0:
            raise ValueError("backoff_base_seconds must be >= 0")
        if (self.connect_timeout_seconds is None) != (
            self.read_timeout_seconds is None
        ):
            raise ValueError(
                "connect_timeout_seconds and read_timeout_seconds "
                "must be set together"
            )
        _require_positive("timeout_seconds", self.timeout_seconds)
        _require_positive("connect_timeout_seconds", self.connect_timeout_seconds)
        _require_positive("read_timeout_seconds", self.read_timeout_seconds)

    @property
    def default_timeout(self) -> float | tuple[float, float] | None:
        if (
            self.connect_timeout_seconds is not None
            and self.read_timeout_seconds is not None
        ):
            return (self.connect_timeout_seconds, self.read_timeout_seconds)
        return self.timeout_seconds
