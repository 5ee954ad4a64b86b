"""requests-backed transport adapter.

The adapter turns a request config into one ``requests`` call, retrying
idempotent requests on timeouts and connection errors. The blocking call runs
in a worker thread so the event loop driving the client never blocks.
"""

from __future__ import annotations

import asyncio
from time import sleep
from typing import Any, Mapping

import requests
import structlog

from .cancel import throw_if_cancellation_requested
from .config import HttpTransportConfig
from .errors import (
    HttpClientError,
    RequestTimeoutError,
    TransportError,
    ValidationError,
)
from .headers import Headers
from .response import Response
from .url import build_full_path, build_url

logger = structlog.get_logger(__name__)

_IDEMPOTENT_METHODS = frozenset({"GET", "HEAD", "OPTIONS", "PUT", "DELETE"})
_BINARY_RESPONSE_TYPES = frozenset({"arraybuffer", "blob", "stream"})


class HttpAdapter:
    """Transport adapter sending requests through a ``requests.Session``."""

    adapter_name = "http"

    def __init__(
        self,
        config: HttpTransportConfig | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self._config = config or HttpTransportConfig()
        self._session = session or requests.Session()
        if self._config.user_agent:
            self._session.headers["User-Agent"] = self._config.user_agent

    async def __call__(self, config: dict[str, Any]) -> Response:
        return await asyncio.to_thread(self.send, config)

    def _get_timeout(
        self, config: Mapping[str, Any]
    ) -> float | tuple[float, float] | None:
        """Resolve the timeout: request ``timeout`` (ms) first, then defaults."""
        timeout_ms = config.get("timeout") or 0
        if timeout_ms < 0:
            raise ValidationError("timeout must be >= 0", config=config)
        if timeout_ms:
            return timeout_ms / 1000
        return self._config.default_timeout

    def _max_attempts(self) -> int:
        return 1 + max(0, self._config.retries)

    def _is_retryable_exception(
        self, method: str, error: requests.exceptions.RequestException
    ) -> bool:
        if method not in _IDEMPOTENT_METHODS:
            return False
        return isinstance(
            error,
            (requests.exceptions.Timeout, requests.exceptions.ConnectionError),
        )

    def _sleep_between_attempts(self, attempt: int) -> None:
        """Sleep between retry attempts using exponential backoff."""
        backoff_base = self._config.backoff_base_seconds
        if backoff_base <= 0:
            return
        sleep(backoff_base * (2 ** max(0, attempt - 1)))

    @staticmethod
    def _request_url(config: Mapping[str, Any]) -> str:
        full_path = build_full_path(config.get("base_url"), config.get("url"))
        return build_url(
            full_path, config.get("params"), config.get("params_serializer")
        )

    @staticmethod
    def _auth(config: Mapping[str, Any]) -> tuple[str, str] | None:
        auth = config.get("auth")
        if not auth:
            return None
        return (auth.get("username") or "", auth.get("password") or "")

    def _build_response(
        self, config: dict[str, Any], raw: requests.Response
    ) -> Response:
        if config.get("response_type") in _BINARY_RESPONSE_TYPES:
            data: Any = raw.content
        else:
            data = raw.text
        return Response(
            data=data,
            status=raw.status_code,
            status_text=raw.reason or "",
            headers=dict(raw.headers),
            config=config,
            request=raw.request,
        )

    def _settle(self, config: dict[str, Any], response: Response) -> Response:
        """Reject responses whose status ``validate_status`` refuses."""
        validate_status = config.get("validate_status")
        if not validate_status or validate_status(response.status):
            return response
        code = "ERR_BAD_REQUEST" if response.status < 500 else "ERR_BAD_RESPONSE"
        raise TransportError(
            f"Request failed with status code {response.status}",
            code,
            config=config,
            request=response.request,
            response=response,
        )

    def _map_exception(
        self, config: dict[str, Any], error: requests.exceptions.RequestException
    ) -> HttpClientError:
        """Map requests exceptions onto the client error hierarchy."""
        response = (
            self._build_response(config, error.response)
            if error.response is not None
            else None
        )
        details = {
            "config": config,
            "request": error.request,
            "response": response,
            "cause": error,
        }

        if isinstance(error, requests.exceptions.Timeout):
            transitional = config.get("transitional") or {}
            code = (
                "ETIMEDOUT"
                if transitional.get("clarify_timeout_error")
                else "ECONNABORTED"
            )
            return RequestTimeoutError(str(error), code, **details)

        if isinstance(error, requests.exceptions.ConnectionError):
            return TransportError(str(error), "ERR_NETWORK", **details)

        return TransportError(str(error), "ERR_BAD_REQUEST", **details)

    def send(self, config: dict[str, Any]) -> Response:
        """Perform the request synchronously, retrying where allowed."""
        method = str(config.get("method") or "get").upper()
        url = self._request_url(config)
        timeout = self._get_timeout(config)
        headers = Headers.from_value(config.get("headers")).to_dict(as_strings=True)

        attempts = 0
        last_error: requests.exceptions.RequestException | None = None
        for _ in range(self._max_attempts()):
            throw_if_cancellation_requested(config)
            attempts += 1
            try:
                raw = self._session.request(
                    method,
                    url,
                    headers=headers,
                    data=config.get("data"),
                    auth=self._auth(config),
                    timeout=timeout,
                    allow_redirects=config.get("max_redirects") != 0,
                    verify=self._config.verify_tls,
                )
            except requests.exceptions.RequestException as exc:
                last_error = exc
                if (
                    attempts >= self._max_attempts()
                    or not self._is_retryable_exception(method, exc)
                ):
                    break
                logger.warning(
                    "http_request_retry",
                    method=method,
                    url=url,
                    attempt=attempts,
                    error=type(exc).__name__,
                )
                self._sleep_between_attempts(attempts)
                continue

            logger.debug(
                "http_request_completed",
                method=method,
                url=url,
                status=raw.status_code,
                attempts=attempts,
            )
            return self._settle(config, self._build_response(config, raw))

        assert last_error is not None
        logger.debug(
            "http_request_failed",
            method=method,
            url=url,
            attempts=attempts,
            error=type(last_error).__name__,
        )
        raise self._map_exception(config, last_error)


http_adapter = HttpAdapter()
