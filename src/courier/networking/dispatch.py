"""Send one prepared request through its transport adapter."""

from __future__ import annotations

import inspect
from typing import Any, Awaitable

import structlog

from .adapters import get_adapter
from .cancel import throw_if_cancellation_requested
from .defaults import DEFAULT_ADAPTER
from .errors import is_cancel
from .headers import Headers
from .response import Response
from .transforms import transform_data

logger = structlog.get_logger(__name__)

BODY_METHODS = frozenset({"post", "put", "patch"})


def _transform_response(config: dict[str, Any], response: Response) -> None:
    response.data = transform_data(
        config, config.get("transform_response"), response
    )
    response.headers = Headers.from_value(response.headers)


async def _settle(config: dict[str, Any], pending: Any) -> Response:
    try:
        response = await pending if inspect.isawaitable(pending) else pending
    except Exception as reason:
        if not is_cancel(reason):
            throw_if_cancellation_requested(config)
            partial = getattr(reason, "response", None)
            if isinstance(partial, Response):
                _transform_response(config, partial)
        raise

    throw_if_cancellation_requested(config)
    _transform_response(config, response)
    logger.debug(
        "request_settled",
        method=config.get("method"),
        url=config.get("url"),
        status=response.status,
    )
    return response


def dispatch_request(config: dict[str, Any]) -> Awaitable[Response]:
    """Prepare *config* and hand it to the resolved adapter.

    Cancellation, request transforms, the content-type default and adapter
    resolution happen immediately, so failures there raise from this call.
    The returned awaitable settles with the transformed response.

    Mutates ``config["headers"]`` and ``config["data"]`` in place.
    """
    throw_if_cancellation_requested(config)

    headers = config["headers"] = Headers.from_value(config.get("headers"))
    config["data"] = transform_data(config, config.get("transform_request"))

    if config.get("method") in BODY_METHODS:
        headers.set_content_type(  # type: ignore[attr-defined]
            "application/x-www-form-urlencoded", False
        )

    candidates = config.get("adapter")
    adapter = get_adapter(
        list(DEFAULT_ADAPTER) if candidates is None else candidates
    )

    logger.debug(
        "request_dispatched", method=config.get("method"), url=config.get("url")
    )
    return _settle(config, adapter(config))
