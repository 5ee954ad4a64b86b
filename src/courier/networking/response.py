"""Response model shared by adapters and the client."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .headers import Headers


@dataclass
class Response:
    """Settled HTTP response.

    ``data`` and ``headers`` are rewritten in place by the dispatcher once the
    response transforms have run.
    """

    data: Any = None
    status: int = 200
    status_text: str = ""
    headers: Headers | Any = field(default_factory=Headers)
    config: dict[str, Any] = field(default_factory=dict)
    request: Any | None = None
