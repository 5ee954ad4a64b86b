"""Library-wide request defaults."""

from __future__ import annotations

from typing import Any

from .merge import METHOD_BUCKETS
from .transforms import json_request, json_response

DEFAULT_ACCEPT = "application/json, text/plain, */*"
DEFAULT_ADAPTER = ("xhr", "http")


def validate_status(status: int) -> bool:
    return 200 <= status < 300


def build_defaults() -> dict[str, Any]:
    """Return a fresh copy of the default request configuration."""
    headers: dict[str, Any] = {bucket: {} for bucket in METHOD_BUCKETS}
    headers["common"] = {"Accept": DEFAULT_ACCEPT, "Content-Type": None}
    return {
        "adapter": list(DEFAULT_ADAPTER),
        "transform_request": [json_request],
        "transform_response": [json_response],
        "transitional": {
            "silent_json_parsing": True,
            "forced_json_parsing": True,
            "clarify_timeout_error": False,
        },
        "timeout": 0,
        "xsrf_cookie_name": "XSRF-TOKEN",
        "xsrf_header_name": "X-XSRF-TOKEN",
        "max_content_length": -1,
        "max_body_length": -1,
        "validate_status": validate_status,
        "headers": headers,
    }
