"""Request configuration merging.

``merge_config(base, override)`` builds the configuration for one call from
two layers. Each recognised key follows one strategy:

* value fields (``url``, ``method``, ``data``, ``timeout``, ``adapter``,
  ``transform_request``, ``validate_status`` and every key without a listed
  strategy): the override wins when the key is present, otherwise the base
  value is used.
* ``headers``: merged name by name, case-insensitively, override winning.
  Per-method buckets (``common``, ``get``, ``post``, ...) are merged the same
  way and stay a plain mapping until the client flattens them.
* option bags (``params``, ``auth``, ``proxy``, ``transitional``): merged
  recursively, override winning per key.

Neither input is mutated; mapping and list values are copied.
"""

from __future__ import annotations

from typing import Any, Mapping

from .headers import Headers

METHOD_BUCKETS = (
    "delete",
    "get",
    "head",
    "options",
    "post",
    "put",
    "patch",
    "common",
)

DEEP_MERGE_KEYS = frozenset({"params", "auth", "proxy", "transitional"})


def _is_bag(value: Any) -> bool:
    return isinstance(value, Mapping) and not isinstance(value, Headers)


def _clone(value: Any) -> Any:
    if _is_bag(value):
        return {key: _clone(item) for key, item in value.items()}
    if isinstance(value, list):
        return list(value)
    return value


def _merge_bags(base: Any, override: Any) -> Any:
    if not (_is_bag(base) and _is_bag(override)):
        return _clone(override)
    merged = _clone(base)
    for key, value in override.items():
        merged[key] = (
            _merge_bags(merged[key], value) if key in merged else _clone(value)
        )
    return merged


def _header_items(headers: Any) -> Mapping[str, Any]:
    if headers is None:
        return {}
    if isinstance(headers, Headers):
        return headers.entries()
    if isinstance(headers, str):
        return Headers(headers).entries()
    return headers


def _merge_header_maps(
    base: Mapping[str, Any], override: Mapping[str, Any]
) -> dict[str, Any]:
    merged: dict[str, Any] = {}
    keys: dict[str, str] = {}
    for source in (base, override):
        for name, value in _header_items(source).items():
            lname = str(name).strip().lower()
            key = keys.setdefault(lname, str(name).strip())
            if _is_bag(value) or isinstance(value, Headers):
                existing = merged.get(key)
                value = _merge_header_maps(
                    existing if _is_bag(existing) else {}, value
                )
            merged[key] = _clone(value)
    return merged


def merge_headers(base: Any, override: Any) -> Headers | dict[str, Any]:
    """Merge two header layers.

    Returns a ``Headers`` instance, or a plain mapping when per-method buckets
    are present and still have to be flattened by the client.
    """
    merged = _merge_header_maps(_header_items(base), _header_items(override))
    if any(
        name.lower() in METHOD_BUCKETS and _is_bag(value)
        for name, value in merged.items()
    ):
        return merged
    return Headers(merged)


def merge_config(
    base: Mapping[str, Any] | None = None,
    override: Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    """Combine *base* and *override* into a new configuration mapping."""
    base = base or {}
    override = override or {}

    merged: dict[str, Any] = {}
    keys = list(base) + [key for key in override if key not in base]
    for key in keys:
        in_base = key in base
        in_override = key in override
        if key == "headers":
            merged[key] = merge_headers(
                base.get(key) if in_base else None,
                override.get(key) if in_override else None,
            )
        elif key in DEEP_MERGE_KEYS and in_base and in_override:
            merged[key] = _merge_bags(base[key], override[key])
        elif in_override:
            merged[key] = _clone(override[key])
        else:
            merged[key] = _clone(base[key])
    return merged
