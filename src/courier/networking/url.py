"""URL building helpers."""

from __future__ import annotations

import re
from typing import Any, Mapping
from urllib.parse import quote, urlencode

_ABSOLUTE_URL = re.compile(r"^([a-z][a-z\d+\-.]*:)?//", re.IGNORECASE)


def is_absolute_url(url: str) -> bool:
    return bool(_ABSOLUTE_URL.match(url))


def combine_urls(base_url: str, relative_url: str | None) -> str:
    if not relative_url:
        return base_url
    return base_url.rstrip("/") + "/" + relative_url.lstrip("/")


def build_full_path(base_url: str | None, requested_url: str | None) -> str:
    """Prefix *requested_url* with *base_url* unless it is already absolute."""
    if base_url and not is_absolute_url(requested_url or ""):
        return combine_urls(base_url, requested_url)
    return requested_url or ""


def encode(value: str) -> str:
    return quote(value, safe=":$,[]@").replace("%20", "+")


def _serialize(params: Mapping[str, Any], options: Mapping[str, Any]) -> str:
    encoder = options.get("encode") or encode
    pairs: list[str] = []
    for key, value in params.items():
        if value is None:
            continue
        values = value if isinstance(value, (list, tuple)) else [value]
        name = f"{key}[]" if isinstance(value, (list, tuple)) else key
        for item in values:
            if isinstance(item, bool):
                item = "true" if item else "false"
            pairs.append(f"{encoder(str(name))}={encoder(str(item))}")
    return "&".join(pairs)


def build_url(
    url: str,
    params: Any = None,
    options: Mapping[str, Any] | None = None,
) -> str:
    """Append serialised *params* to *url*, dropping any fragment.

    ``options`` may carry ``serialize`` (called as ``serialize(params,
    options)``) and ``encode`` (used for each key and value).
    """
    if not params:
        return url

    options = options or {}
    serializer = options.get("serialize")
    if serializer is not None:
        serialized = serializer(params, options)
    elif isinstance(params, Mapping):
        serialized = _serialize(params, options)
    else:
        serialized = urlencode(params)

    if serialized:
        url = url.split("#", 1)[0]
        url += ("&" if "?" in url else "?") + serialized
    return url
