"""Cooperative cancellation primitives.

Two interchangeable mechanisms can be attached to a request config:
``cancel_token`` (a :class:`CancelToken`) and ``signal`` (any object with an
``aborted`` attribute, such as :class:`AbortSignal`). Both only set a flag;
the dispatcher polls it before sending and again after the adapter settles.
"""

from __future__ import annotations

from typing import Any, Callable, Mapping, NamedTuple

from .errors import CanceledError

Listener = Callable[[CanceledError], Any]


class CancelToken:
    """A one-shot cancellation flag with listener support."""

    def __init__(self) -> None:
        self.reason: CanceledError | None = None
        self._listeners: list[Listener] = []

    @property
    def requested(self) -> bool:
        return self.reason is not None

    def cancel(
        self,
        message: str | None = None,
        config: Mapping[str, Any] | None = None,
        request: Any | None = None,
    ) -> None:
        """Request cancellation; repeated calls keep the first reason."""
        if self.reason is not None:
            return
        self.reason = CanceledError(message, config=config, request=request)
        listeners, self._listeners = self._listeners, []
        for listener in listeners:
            listener(self.reason)

    def throw_if_requested(self) -> None:
        if self.reason is not None:
            raise self.reason

    def subscribe(self, listener: Listener) -> None:
        """Call *listener* on cancellation (immediately if already canceled)."""
        if self.reason is not None:
            listener(self.reason)
            return
        self._listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    @classmethod
    def source(cls) -> CancelSource:
        token = cls()
        return CancelSource(token=token, cancel=token.cancel)


class CancelSource(NamedTuple):
    token: CancelToken
    cancel: Callable[..., None]


class AbortSignal:
    """Read side of an :class:`AbortController`."""

    def __init__(self) -> None:
        self.aborted = False
        self.reason: Any = None


class AbortController:
    def __init__(self) -> None:
        self.signal = AbortSignal()

    def abort(self, reason: Any = None) -> None:
        if not self.signal.aborted:
            self.signal.aborted = True
            self.signal.reason = reason


def throw_if_cancellation_requested(config: Mapping[str, Any]) -> None:
    """Raise :class:`CanceledError` if the config's token or signal fired."""
    token = config.get("cancel_token")
    if token is not None:
        token.throw_if_requested()

    signal = config.get("signal")
    if signal is not None and getattr(signal, "aborted", False):
        raise CanceledError(config=config)
