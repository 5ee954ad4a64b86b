"""Request/response data transforms.

Request transforms are called as ``fn(data, headers)``; response transforms
as ``fn(data, headers, status)``. Chains run left to right, each output
feeding the next stage.
"""

from __future__ import annotations

import json
from typing import Any, Callable, Iterable, Mapping

from .headers import Headers
from .response import Response

Transform = Callable[..., Any]


def _as_chain(fns: Transform | Iterable[Transform] | None) -> list[Transform]:
    if fns is None:
        return []
    if callable(fns):
        return [fns]
    return list(fns)


def transform_data(
    config: Mapping[str, Any],
    fns: Transform | Iterable[Transform] | None,
    response: Response | None = None,
) -> Any:
    """Run a transform chain over request data, or over *response* data."""
    headers = Headers.from_value(
        response.headers if response is not None else config.get("headers")
    )
    data = response.data if response is not None else config.get("data")

    for fn in _as_chain(fns):
        if response is None:
            data = fn(data, headers.normalize())
        else:
            data = fn(data, headers.normalize(), response.status)

    headers.normalize()
    return data


def _is_json_content(headers: Headers) -> bool:
    content_type = headers.get_content_type() or ""  # type: ignore[attr-defined]
    return "json" in str(content_type).lower()


def json_request(data: Any, headers: Headers) -> Any:
    """Serialise mappings and lists to JSON; leave other payloads untouched."""
    if isinstance(data, (Mapping, list, tuple)) or (
        data is not None
        and not isinstance(data, (str, bytes, bytearray))
        and _is_json_content(headers)
    ):
        headers.set_content_type("application/json", False)  # type: ignore[attr-defined]
        return json.dumps(data)
    return data


def json_response(data: Any, headers: Headers, status: int | None = None) -> Any:
    """Decode JSON bodies, returning the raw payload if decoding fails."""
    if isinstance(data, (bytes, bytearray)):
        if not _is_json_content(headers):
            return data
        data = data.decode("utf-8", errors="replace")
    if not isinstance(data, str) or not data.strip():
        return data
    if not _is_json_content(headers) and data.lstrip()[:1] not in ("{", "["):
        return data
    try:
        return json.loads(data)
    except ValueError:
        return data
