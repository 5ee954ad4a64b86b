"""Error hierarchy for the Courier networking layer."""

from __future__ import annotations

from typing import Any, Mapping


class HttpClientError(Exception):
    """Base error for every failure raised by the client.

    Attributes:
        code: Machine-readable error code (``ERR_*`` style), if any.
        config: The request configuration the failure belongs to.
        request: The transport-level request object, when one was built.
        response: The (partial) response, for transport failures with one.
        cause: The underlying exception, when the error wraps another one.
    """

    default_code: str | None = None

    def __init__(
        self,
        message: str = "",
        code: str | None = None,
        *,
        config: Mapping[str, Any] | None = None,
        request: Any | None = None,
        response: Any | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code if code is not None else self.default_code
        self.config = config
        self.request = request
        self.response = response
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    @property
    def status(self) -> int | None:
        return getattr(self.response, "status", None)

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-friendly description of the error."""
        return {
            "name": type(self).__name__,
            "message": self.message,
            "code": self.code,
            "status": self.status,
        }


class CanceledError(HttpClientError):
    """The request was aborted through a cancel token or an abort signal."""

    default_code = "ERR_CANCELED"

    def __init__(
        self,
        message: str | None = None,
        *,
        config: Mapping[str, Any] | None = None,
        request: Any | None = None,
    ) -> None:
        super().__init__(
            message or "canceled", config=config, request=request
        )


class AdapterUnknownError(HttpClientError):
    """A named adapter is not registered."""


class AdapterNotSupportedError(HttpClientError):
    """No candidate adapter can be used in this environment."""

    default_code = "ERR_NOT_SUPPORT"


class ValidationError(HttpClientError):
    """An option bag failed validation before dispatch."""

    default_code = "ERR_BAD_OPTION_VALUE"


class TransportError(HttpClientError):
    """A failure reported by the transport adapter."""

    default_code = "ERR_NETWORK"


class RequestTimeoutError(TransportError):
    """The transport gave up waiting for the server."""

    default_code = "ECONNABORTED"


def is_cancel(value: object) -> bool:
    """Return True if *value* is a cancellation error."""
    return isinstance(value, CanceledError)
