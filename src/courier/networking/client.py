"""Request orchestration for the Courier networking layer.

``HttpClient.request`` resolves the per-call configuration, runs the request
interceptors, dispatches through the resolved adapter and runs the response
interceptors. Requests whose included request interceptors are all declared
``synchronous`` run those interceptors immediately (the fast path); otherwise
every stage is chained inside one coroutine.
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Mapping, Sequence

import structlog

from . import validator
from .defaults import build_defaults
from .dispatch import dispatch_request
from .headers import Headers
from .interceptors import InterceptorManager
from .merge import METHOD_BUCKETS, merge_config, merge_headers
from .response import Response
from .url import build_full_path, build_url

logger = structlog.get_logger(__name__)

Stage = tuple[Callable[[Any], Any] | None, Callable[[Any], Any] | None]

TRANSITIONAL_OPTIONS = {
    "silent_json_parsing": validator.optional(validator.boolean),
    "forced_json_parsing": validator.optional(validator.boolean),
    "clarify_timeout_error": validator.optional(validator.boolean),
}

PARAMS_SERIALIZER_OPTIONS = {
    "encode": validator.optional(validator.function),
    "serialize": validator.optional(validator.function),
}


async def _resolved(value: Any) -> Any:
    return value


async def _rejected(error: BaseException) -> Any:
    raise error


async def _run_chain(start: Awaitable[Any], chain: Sequence[Stage]) -> Any:
    """Await *start*, then feed its outcome through each stage in order.

    A stage's fulfilled handler sees the previous value, its rejected handler
    the previous error; a handler that returns recovers the chain.
    """
    value: Any = None
    failure: Exception | None = None
    try:
        value = await start
    except Exception as exc:
        failure = exc

    for fulfilled, rejected in chain:
        handler = fulfilled if failure is None else rejected
        if handler is None:
            continue
        try:
            result = handler(value if failure is None else failure)
            value = await result if inspect.isawaitable(result) else result
            failure = None
        except Exception as exc:
            failure = exc

    if failure is not None:
        raise failure
    return value


def _flatten_headers(headers: Any, method: str) -> Headers:
    """Fold the ``common`` and *method* buckets into one container."""
    if not isinstance(headers, Mapping):
        return Headers.combine(None, headers)

    buckets = {
        str(name).lower(): value
        for name, value in headers.items()
        if str(name).lower() in METHOD_BUCKETS
    }
    remaining = {
        name: value
        for name, value in headers.items()
        if str(name).lower() not in METHOD_BUCKETS
    }
    context = merge_headers(buckets.get("common"), buckets.get(method))
    return Headers.combine(context, remaining)


@dataclass
class Interceptors:
    request: InterceptorManager = field(default_factory=InterceptorManager)
    response: InterceptorManager = field(default_factory=InterceptorManager)


class HttpClient:
    """Uniform request surface over pluggable transport adapters.

    Args:
        defaults: Request configuration every call is merged over. Defaults to
            :func:`~.defaults.build_defaults`.
        strict_options: Treat unknown ``transitional`` flags as errors instead
            of logging a warning.
    """

    def __init__(
        self,
        defaults: Mapping[str, Any] | None = None,
        *,
        strict_options: bool = False,
    ) -> None:
        self.defaults: dict[str, Any] = (
            dict(defaults) if defaults is not None else build_defaults()
        )
        self.strict_options = strict_options
        self.interceptors = Interceptors()

    def create(self, instance_config: Mapping[str, Any] | None = None) -> HttpClient:
        """Return a new client whose defaults extend this client's defaults."""
        return type(self)(
            merge_config(self.defaults, instance_config),
            strict_options=self.strict_options,
        )

    def _validate(self, config: dict[str, Any]) -> None:
        transitional = config.get("transitional")
        if transitional is not None:
            validator.assert_options(
                transitional,
                TRANSITIONAL_OPTIONS,
                allow_unknown=not self.strict_options,
            )

        serializer = config.get("params_serializer")
        if serializer is not None:
            if callable(serializer):
                config["params_serializer"] = {"serialize": serializer}
            else:
                validator.assert_options(
                    serializer, PARAMS_SERIALIZER_OPTIONS, allow_unknown=True
                )

    def _resolve_config(
        self,
        config_or_url: str | Mapping[str, Any] | None,
        config: Mapping[str, Any] | None,
    ) -> dict[str, Any]:
        if isinstance(config_or_url, str):
            call_config = dict(config or {})
            call_config["url"] = config_or_url
        else:
            call_config = dict(config_or_url or {})

        resolved = merge_config(self.defaults, call_config)
        self._validate(resolved)
        resolved["method"] = str(
            resolved.get("method") or self.defaults.get("method") or "get"
        ).lower()
        resolved["headers"] = _flatten_headers(
            resolved.get("headers"), resolved["method"]
        )
        return resolved

    def request(
        self,
        config_or_url: str | Mapping[str, Any] | None = None,
        config: Mapping[str, Any] | None = None,
    ) -> Awaitable[Response]:
        """Start a request and return an awaitable for its outcome.

        Args:
            config_or_url: A request config, or the URL to request.
            config: Extra config when the first argument is a URL.

        Raises:
            ValidationError: ``transitional`` or ``params_serializer`` is
                malformed. Raised here, before anything is sent.
        """
        config = self._resolve_config(config_or_url, config)

        request_chain: list[Stage] = []
        synchronous = True
        for interceptor in self.interceptors.request:
            run_when = interceptor.run_when
            if run_when is not None and run_when(config) is False:
                continue
            synchronous = synchronous and interceptor.synchronous
            request_chain.insert(0, (interceptor.fulfilled, interceptor.rejected))

        response_chain: list[Stage] = [
            (interceptor.fulfilled, interceptor.rejected)
            for interceptor in self.interceptors.response
        ]

        logger.debug(
            "request_started",
            method=config["method"],
            url=config.get("url"),
            synchronous=synchronous,
            request_interceptors=len(request_chain),
            response_interceptors=len(response_chain),
        )

        if not synchronous:
            chain = [*request_chain, (dispatch_request, None), *response_chain]
            return _run_chain(_resolved(config), chain)

        new_config = config
        for fulfilled, rejected in request_chain:
            try:
                if fulfilled is not None:
                    new_config = fulfilled(new_config)
            except Exception as error:
                if rejected is None:
                    return _run_chain(_rejected(error), response_chain)
                try:
                    rejected(error)
                except Exception as unrecovered:
                    return _run_chain(_rejected(unrecovered), response_chain)
                break

        try:
            pending = dispatch_request(new_config)
        except Exception as error:
            pending = _rejected(error)

        return _run_chain(pending, response_chain)

    def get_uri(self, config: Mapping[str, Any] | None = None) -> str:
        """Return the URL a request with *config* would be sent to."""
        resolved = merge_config(self.defaults, config)
        serializer = resolved.get("params_serializer")
        if callable(serializer):
            serializer = {"serialize": serializer}
        full_path = build_full_path(resolved.get("base_url"), resolved.get("url"))
        return build_url(full_path, resolved.get("params"), serializer)

    def _request_without_body(
        self, method: str, url: str, config: Mapping[str, Any] | None
    ) -> Awaitable[Response]:
        return self.request(merge_config(config, {"method": method, "url": url}))

    def _request_with_body(
        self,
        method: str,
        url: str,
        data: Any,
        config: Mapping[str, Any] | None,
        form: bool = False,
    ) -> Awaitable[Response]:
        override: dict[str, Any] = {"method": method, "url": url, "data": data}
        if form:
            override["headers"] = {"Content-Type": "multipart/form-data"}
        return self.request(merge_config(config, override))

    def get(self, url: str, config: Mapping[str, Any] | None = None) -> Awaitable[Response]:
        """Perform an HTTP GET request.

        Args:
            url: URL to request, resolved against ``base_url``.
            config: Optional per-request config merged over the defaults.

        Returns:
            Awaitable settling with the :class:`Response`.
        """
        return self._request_without_body("get", url, config)

    def delete(self, url: str, config: Mapping[str, Any] | None = None) -> Awaitable[Response]:
        """Perform an HTTP DELETE request."""
        return self._request_without_body("delete", url, config)

    def head(self, url: str, config: Mapping[str, Any] | None = None) -> Awaitable[Response]:
        """Perform an HTTP HEAD request."""
        return self._request_without_body("head", url, config)

    def options(self, url: str, config: Mapping[str, Any] | None = None) -> Awaitable[Response]:
        """Perform an HTTP OPTIONS request."""
        return self._request_without_body("options", url, config)

    def post(
        self, url: str, data: Any = None, config: Mapping[str, Any] | None = None
    ) -> Awaitable[Response]:
        """Perform an HTTP POST request.

        Args:
            url: URL to request, resolved against ``base_url``.
            data: Optional body, passed through ``transform_request``.
            config: Optional per-request config merged over the defaults.

        Returns:
            Awaitable settling with the :class:`Response`.
        """
        return self._request_with_body("post", url, data, config)

    def put(
        self, url: str, data: Any = None, config: Mapping[str, Any] | None = None
    ) -> Awaitable[Response]:
        """Perform an HTTP PUT request with *data* as the body."""
        return self._request_with_body("put", url, data, config)

    def patch(
        self, url: str, data: Any = None, config: Mapping[str, Any] | None = None
    ) -> Awaitable[Response]:
        """Perform an HTTP PATCH request with *data* as the body."""
        return self._request_with_body("patch", url, data, config)

    def post_form(
        self, url: str, data: Any = None, config: Mapping[str, Any] | None = None
    ) -> Awaitable[Response]:
        """Perform a multipart form POST request."""
        return self._request_with_body("post", url, data, config, form=True)

    def put_form(
        self, url: str, data: Any = None, config: Mapping[str, Any] | None = None
    ) -> Awaitable[Response]:
        """Perform a multipart form PUT request."""
        return self._request_with_body("put", url, data, config, form=True)

    def patch_form(
        self, url: str, data: Any = None, config: Mapping[str, Any] | None = None
    ) -> Awaitable[Response]:
        """Perform a multipart form PATCH request."""
        return self._request_with_body("patch", url, data, config, form=True)


def create(
    instance_config: Mapping[str, Any] | None = None,
    *,
    strict_options: bool = False,
) -> HttpClient:
    """Create a client from the library defaults extended by *instance_config*."""
    client = HttpClient(
        merge_config(build_defaults(), instance_config),
        strict_options=strict_options,
    )
    logger.info("http_client_created", strict_options=strict_options)
    return client
