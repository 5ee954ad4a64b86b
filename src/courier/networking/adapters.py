"""Transport adapter resolution."""

from __future__ import annotations

from enum import Enum
from typing import Any, Awaitable, Callable, Iterable, Mapping, Union

import structlog

from .errors import AdapterNotSupportedError, AdapterUnknownError
from .http_adapter import http_adapter

logger = structlog.get_logger(__name__)


class AdapterState(Enum):
    """Placeholder registered instead of an adapter that cannot be used."""

    DISABLED = "is not supported by the environment"
    UNSUPPORTED = "is not available in the build"

    def __bool__(self) -> bool:
        return False


Adapter = Callable[[dict[str, Any]], Awaitable[Any]]
AdapterCandidate = Union[Adapter, AdapterState, str]


def _is_resolved(candidate: Any) -> bool:
    return callable(candidate) or isinstance(candidate, AdapterState)


class AdapterRegistry:
    """Name-to-adapter table plus the resolution walk over candidate lists."""

    def __init__(
        self, adapters: Mapping[str, Adapter | AdapterState] | None = None
    ) -> None:
        self._adapters: dict[str, Adapter | AdapterState] = {}
        for name, adapter in (adapters or {}).items():
            self.register(name, adapter)

    def register(self, name: str, adapter: Adapter | AdapterState) -> None:
        self._adapters[name.lower()] = adapter

    @property
    def adapters(self) -> Mapping[str, Adapter | AdapterState]:
        return dict(self._adapters)

    def resolve(
        self, candidates: AdapterCandidate | Iterable[AdapterCandidate] | None
    ) -> Adapter:
        """Return the first usable adapter among *candidates*.

        Candidates are callables, :class:`AdapterState` placeholders or
        registered names (case-insensitive). Placeholders are skipped and
        remembered for the error message.

        Raises:
            AdapterUnknownError: A candidate names an unregistered adapter.
            AdapterNotSupportedError: No candidate resolved to a callable.
        """
        if isinstance(candidates, (list, tuple)):
            candidate_list = list(candidates)
        else:
            candidate_list = [candidates]

        rejected: dict[str, AdapterState] = {}
        adapter: Any = None
        for index, candidate in enumerate(candidate_list):
            name: str | None = None
            adapter = candidate
            if not _is_resolved(candidate):
                name = str(candidate)
                adapter = self._adapters.get(name.lower())
                if adapter is None:
                    raise AdapterUnknownError(f"Unknown adapter '{name}'")

            if adapter:
                break

            rejected[name or f"#{index}"] = adapter

        if not adapter:
            raise AdapterNotSupportedError(
                "There is no suitable adapter to dispatch the request "
                + _describe(rejected, len(candidate_list))
            )

        logger.debug(
            "adapter_resolved",
            adapter=getattr(adapter, "__name__", type(adapter).__name__),
        )
        return adapter


def _describe(rejected: Mapping[str, AdapterState], candidates: int) -> str:
    if not candidates:
        return "as no adapter specified"
    reasons = [f"- adapter {name} {state.value}" for name, state in rejected.items()]
    if len(reasons) > 1:
        return "since :\n" + "\n".join(reasons)
    return " " + reasons[0]


default_registry = AdapterRegistry(
    {
        "http": http_adapter,
        "xhr": AdapterState.DISABLED,
    }
)


def get_adapter(
    candidates: AdapterCandidate | Iterable[AdapterCandidate] | None,
) -> Adapter:
    """Resolve *candidates* against the default registry."""
    return default_registry.resolve(candidates)
