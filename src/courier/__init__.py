"""Courier: an HTTP client with interceptors and pluggable transports."""

__version__ = "0.1.0"
