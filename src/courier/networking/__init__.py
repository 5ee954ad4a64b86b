"""Courier networking layer: headers, interceptors, adapters and the client."""

from .adapters import AdapterRegistry, AdapterState, get_adapter
from .cancel import AbortController, AbortSignal, CancelToken
from .client import HttpClient, create
from .errors import (
    AdapterNotSupportedError,
    AdapterUnknownError,
    CanceledError,
    HttpClientError,
    RequestTimeoutError,
    TransportError,
    ValidationError,
    is_cancel,
)
from .headers import Headers
from .interceptors import Interceptor, InterceptorManager
from .merge import merge_config
from .response import Response

__all__ = [
    "AbortController",
    "AbortSignal",
    "AdapterNotSupportedError",
    "AdapterRegistry",
    "AdapterState",
    "AdapterUnknownError",
    "CancelToken",
    "CanceledError",
    "Headers",
    "HttpClient",
    "HttpClientError",
    "Interceptor",
    "InterceptorManager",
    "RequestTimeoutError",
    "Response",
    "TransportError",
    "ValidationError",
    "create",
    "get_adapter",
    "is_cancel",
    "merge_config",
]
