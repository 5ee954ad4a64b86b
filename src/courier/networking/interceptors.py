"""Ordered interceptor registry with stable handles."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Iterator, Mapping

import structlog

logger = structlog.get_logger(__name__)

Handler = Callable[[Any], Any]
RunWhen = Callable[[Mapping[str, Any]], bool]


@dataclass(frozen=True)
class Interceptor:
    """A fulfilled/rejected handler pair plus its scheduling options."""

    fulfilled: Handler | None = None
    rejected: Handler | None = None
    synchronous: bool = False
    run_when: RunWhen | None = None


class InterceptorManager:
    """Registry of interceptors addressed by the index ``use`` returns.

    Ejected entries leave an empty slot behind so indices handed out earlier
    stay valid; iteration skips empty slots.
    """

    def __init__(self) -> None:
        self._handlers: list[Interceptor | None] = []

    def use(
        self,
        fulfilled: Handler | None = None,
        rejected: Handler | None = None,
        *,
        synchronous: bool = False,
        run_when: RunWhen | None = None,
    ) -> int:
        """Append an interceptor and return its handle.

        Args:
            fulfilled: Called with the config (request) or response.
            rejected: Called with the error raised by an earlier stage.
            synchronous: Declare the handler as non-suspending so requests can
                take the synchronous fast path.
            run_when: Predicate on the request config; the interceptor is
                skipped only for requests where it returns ``False``.
        """
        self._handlers.append(
            Interceptor(
                fulfilled=fulfilled,
                rejected=rejected,
                synchronous=synchronous,
                run_when=run_when,
            )
        )
        index = len(self._handlers) - 1
        logger.debug("interceptor_registered", index=index, synchronous=synchronous)
        return index

    def eject(self, index: int) -> None:
        """Remove the interceptor registered under *index*, if still present."""
        if 0 <= index < len(self._handlers) and self._handlers[index] is not None:
            self._handlers[index] = None
            logger.debug("interceptor_ejected", index=index)

    def clear(self) -> None:
        self._handlers = []

    def for_each(self, visit: Callable[[Interceptor], Any]) -> None:
        for interceptor in self:
            visit(interceptor)

    def __iter__(self) -> Iterator[Interceptor]:
        return iter([h for h in self._handlers if h is not None])

    def __len__(self) -> int:
        return sum(1 for h in self._handlers if h is not None)
