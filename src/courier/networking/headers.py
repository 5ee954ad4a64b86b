"""Case-insensitive, multi-valued header container.

Header names are matched case-insensitively while the stored key keeps the
casing it was first written with (or the Title-Case form after
:meth:`Headers.normalize`). A value of ``False`` marks a header as explicitly
suppressed: it is never sent and implicit writes leave it alone.
"""

from __future__ import annotations

import re
from typing import Any, Callable, ClassVar, Iterable, Iterator, Mapping, Union

HeaderValue = Union[str, "list[str]", bool, None]
Matcher = Union[str, "re.Pattern[str]", Callable[[Any, str], bool]]

_VALID_HEADER_NAME = re.compile(r"^[-_a-zA-Z0-9^`|~,!#$%&'*+.]+$")
_TOKEN = re.compile(r"([^\s,;=]+)\s*(?:=\s*([^,;]+))?")
_WORD = re.compile(r"([a-z\d])(\w*)")

# Duplicates of these are dropped when parsing a raw header block.
_SINGLE_VALUED = frozenset(
    {
        "age",
        "authorization",
        "content-length",
        "content-type",
        "etag",
        "expires",
        "from",
        "host",
        "if-modified-since",
        "if-unmodified-since",
        "last-modified",
        "location",
        "max-forwards",
        "proxy-authorization",
        "referer",
        "retry-after",
        "user-agent",
    }
)

COMMON_HEADERS = (
    "Content-Type",
    "Content-Length",
    "Accept",
    "Accept-Encoding",
    "User-Agent",
    "Authorization",
)


def _normalize_name(name: Any) -> str:
    if name is None:
        return ""
    return str(name).strip().lower()


def _normalize_value(value: Any) -> HeaderValue:
    if value is False or value is None:
        return value
    if isinstance(value, (list, tuple)):
        return [_normalize_value(item) for item in value]  # type: ignore[misc]
    if value is True:
        return "true"
    return str(value)


def _format_header(name: str) -> str:
    return _WORD.sub(
        lambda match: match.group(1).upper() + match.group(2),
        name.strip().lower(),
    )


def _parse_tokens(value: Any) -> dict[str, str | None]:
    if isinstance(value, list):
        value = ", ".join(value)
    tokens: dict[str, str | None] = {}
    for match in _TOKEN.finditer(str(value)):
        tokens[match.group(1)] = match.group(2)
    return tokens


def _match_value(
    value: Any, name: str, matcher: Matcher, match_name: bool = False
) -> bool:
    if callable(matcher):
        return bool(matcher(value, name))
    if match_name:
        value = name
    if not isinstance(value, str):
        return False
    if isinstance(matcher, str):
        return matcher in value
    if isinstance(matcher, re.Pattern):
        return matcher.search(value) is not None
    return False


def is_valid_header_name(name: str) -> bool:
    return bool(_VALID_HEADER_NAME.match(name.strip()))


def parse_headers(raw: str) -> dict[str, Any]:
    """Parse a raw ``Name: value`` header block into a mapping.

    Names are lower-cased. ``set-cookie`` always yields a list, duplicates of
    single-valued headers keep the first occurrence, and other duplicates are
    joined with ``", "``.
    """
    parsed: dict[str, Any] = {}
    for line in raw.splitlines():
        name, sep, value = line.partition(":")
        key = name.strip().lower()
        if not sep or not key:
            continue
        if key in parsed and key in _SINGLE_VALUED:
            continue
        value = value.strip()
        if key == "set-cookie":
            parsed.setdefault(key, []).append(value)
        elif key in parsed:
            parsed[key] = f"{parsed[key]}, {value}"
        else:
            parsed[key] = value
    return parsed


def _build_accessor(method: str, header: str) -> Callable[..., Any]:
    def accessor(self: Headers, *args: Any) -> Any:
        return getattr(self, method)(header, *args)

    accessor.__name__ = f"{method}_{_normalize_name(header).replace('-', '_')}"
    accessor.__doc__ = f"Shortcut for ``{method}({header!r}, ...)``."
    return accessor


class Headers:
    """Ordered, case-insensitive header mapping.

    ``set`` accepts a single name/value pair, a mapping, another ``Headers``
    or a raw header block. Iteration yields ``(name, value)`` pairs and skips
    unset and suppressed headers.
    """

    __slots__ = ("_entries",)

    _accessors: ClassVar[dict[str, str]] = {}

    def __init__(
        self, headers: Mapping[str, Any] | Headers | str | None = None
    ) -> None:
        self._entries: dict[str, HeaderValue] = {}
        if isinstance(headers, Headers) or headers:
            self.set(headers)

    def _find_key(self, lname: str) -> str | None:
        for key in self._entries:
            if key.lower() == lname:
                return key
        return None

    def _set_one(self, name: Any, value: Any, rewrite: bool | None) -> None:
        lname = _normalize_name(name)
        if not lname:
            raise ValueError("header name must be a non-empty string")

        key = self._find_key(lname)
        current = self._entries[key] if key is not None else None
        if (
            key is None
            or current is None
            or rewrite is True
            or (rewrite is None and current is not False)
        ):
            self._entries[key or str(name).strip()] = _normalize_value(value)

    def _set_many(
        self, headers: Mapping[str, Any] | Headers, rewrite: bool | None
    ) -> None:
        items = (
            headers._entries.items()
            if isinstance(headers, Headers)
            else headers.items()
        )
        for name, value in list(items):
            self._set_one(name, value, rewrite)

    def set(
        self,
        header: Mapping[str, Any] | Headers | str | None,
        value: Any = None,
        rewrite: bool | None = None,
    ) -> Headers:
        """Write one or many headers.

        Args:
            header: A header name, a mapping of names to values, another
                ``Headers`` instance, or a raw ``Name: value`` block.
            value: The value for a single header. For the bag forms this
                argument is the ``rewrite`` flag instead.
            rewrite: ``True`` always overwrites, ``False`` never overwrites an
                existing value, ``None`` overwrites unless the stored value is
                ``False``.

        Returns:
            This instance, for chaining.
        """
        if isinstance(header, (Headers, Mapping)):
            self._set_many(header, value)
        elif (
            isinstance(header, str)
            and header.strip()
            and not is_valid_header_name(header)
        ):
            self._set_many(parse_headers(header), value)
        elif header is not None:
            self._set_one(header, value, rewrite)
        return self

    def get(
        self,
        header: str,
        parser: bool | re.Pattern[str] | Callable[[Any, str], Any] | None = None,
    ) -> Any:
        """Read a header, optionally parsing its value.

        ``parser=True`` decodes ``key=value`` tokens into a dict, a callable
        receives ``(value, stored_name)`` and a compiled pattern returns the
        result of ``pattern.search(value)``.
        """
        lname = _normalize_name(header)
        if not lname:
            return None
        key = self._find_key(lname)
        if key is None:
            return None

        value = self._entries[key]
        if not parser:
            return value
        if parser is True:
            return _parse_tokens(value)
        if callable(parser):
            return parser(value, key)
        if isinstance(parser, re.Pattern):
            return parser.search(str(value))
        raise TypeError("parser must be boolean|regexp|function")

    def has(self, header: str, matcher: Matcher | None = None) -> bool:
        lname = _normalize_name(header)
        if not lname:
            return False
        key = self._find_key(lname)
        if key is None or self._entries[key] is None:
            return False
        return matcher is None or _match_value(self._entries[key], key, matcher)

    def delete(
        self, header: str | Iterable[str], matcher: Matcher | None = None
    ) -> bool:
        """Remove the named header(s); return True if anything was removed."""
        names = [header] if isinstance(header, str) else list(header)
        deleted = False
        for name in names:
            lname = _normalize_name(name)
            if not lname:
                continue
            key = self._find_key(lname)
            if key is not None and (
                matcher is None
                or _match_value(self._entries[key], key, matcher)
            ):
                del self._entries[key]
                deleted = True
        return deleted

    def clear(self, matcher: Matcher | None = None) -> bool:
        """Remove every header whose name matches *matcher* (all if unset)."""
        deleted = False
        for key in list(self._entries):
            if matcher is None or _match_value(
                self._entries[key], key, matcher, match_name=True
            ):
                del self._entries[key]
                deleted = True
        return deleted

    def normalize(self, format: bool = False) -> Headers:
        """Collapse case-insensitive duplicates, optionally Title-Casing keys."""
        entries: dict[str, HeaderValue] = {}
        seen: dict[str, str] = {}
        for name, value in self._entries.items():
            existing = seen.get(name.strip().lower())
            if existing is not None:
                entries[existing] = _normalize_value(value)
                continue
            normalized = _format_header(name) if format else name.strip()
            seen[normalized.lower()] = normalized
            entries[normalized] = _normalize_value(value)
        self._entries = entries
        return self

    def concat(self, *targets: Mapping[str, Any] | Headers | str | None) -> Headers:
        return type(self).combine(self, *targets)

    def to_dict(self, as_strings: bool = False) -> dict[str, Any]:
        result: dict[str, Any] = {}
        for name, value in self._entries.items():
            if value is None or value is False:
                continue
            if as_strings and isinstance(value, list):
                value = ", ".join(value)
            result[name] = value
        return result

    def entries(self) -> dict[str, HeaderValue]:
        """Return a copy of the stored entries, unset and suppressed included."""
        return dict(self._entries)

    def items(self) -> list[tuple[str, Any]]:
        return list(self.to_dict().items())

    def __iter__(self) -> Iterator[tuple[str, Any]]:
        return iter(self.items())

    def __len__(self) -> int:
        return len(self.to_dict())

    def __contains__(self, header: object) -> bool:
        return isinstance(header, str) and self.has(header)

    def __getitem__(self, header: str) -> Any:
        if not self.has(header):
            raise KeyError(header)
        return self.get(header)

    def __setitem__(self, header: str, value: Any) -> None:
        self.set(header, value, True)

    def __delitem__(self, header: str) -> None:
        if not self.delete(header):
            raise KeyError(header)

    def __str__(self) -> str:
        return "\n".join(
            f"{name}: {value}"
            for name, value in self.to_dict(as_strings=True).items()
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.to_dict()!r})"

    @classmethod
    def from_value(
        cls, thing: Mapping[str, Any] | Headers | str | None
    ) -> Headers:
        """Return *thing* if it already is a container, else wrap it."""
        return thing if isinstance(thing, cls) else cls(thing)

    @classmethod
    def combine(
        cls,
        first: Mapping[str, Any] | Headers | str | None,
        *targets: Mapping[str, Any] | Headers | str | None,
    ) -> Headers:
        """Build a new container from *first* with each target set in order."""
        computed = cls(first)
        for target in targets:
            computed.set(target)
        return computed

    @classmethod
    def accessor(cls, header: str | Iterable[str]) -> type[Headers]:
        """Register ``get_x``/``set_x``/``has_x`` shortcuts for header(s)."""
        names = [header] if isinstance(header, str) else list(header)
        for name in names:
            lname = _normalize_name(name)
            if lname in cls._accessors:
                continue
            suffix = lname.replace("-", "_")
            for method in ("get", "set", "has"):
                setattr(cls, f"{method}_{suffix}", _build_accessor(method, name))
            cls._accessors[lname] = suffix
        return cls


Headers.accessor(COMMON_HEADERS)
