"""Endpoint path construction.

A call site describes its endpoint as an ordered list of segments:

    ["organizations", 42, "related"]
    ["organizations", "destroy_many", {"ids": [1, 2, 3]}]

Strings become ``Literal`` segments, integers ``Identifier`` segments and a
trailing mapping ``QueryParams``. The explicit variants can be passed too,
e.g. ``Identifier("ext-77")`` for a string id.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone
from numbers import Integral
from typing import Any, Iterable, Mapping, Optional, Sequence, Union
from urllib.parse import quote, urlencode

from zendesk_client.exceptions import InvalidPathError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Literal:
    """Fixed keyword such as ``organizations`` or ``show_many``."""

    value: str


@dataclass(frozen=True)
class Identifier:
    """Record identifier, numeric or string."""

    value: Union[int, str]


@dataclass(frozen=True)
class QueryParams:
    """Query string parameters; only valid as the last segment."""

    params: Mapping[str, Any]


Segment = Union[Literal, Identifier, QueryParams]


@dataclass(frozen=True)
class EndpointPath:
    """Resolved path plus encoded query string (without ``?``)."""

    path: str
    query: str = ""

    def __str__(self) -> str:
        return f"{self.path}?{self.query}" if self.query else self.path

    def url(self, base_url: str) -> str:
        """Join onto an API root."""
        return f"{base_url.rstrip('/')}/{self}"


def to_segment(raw: Any, position: int) -> Segment:
    """Tag a raw segment value.

    Raises:
        InvalidPathError: For ``None``, empty strings and unsupported types
    """
    if isinstance(raw, (Literal, Identifier, QueryParams)):
        segment = raw
    elif isinstance(raw, Mapping):
        segment = QueryParams(raw)
    elif isinstance(raw, bool):
        raise InvalidPathError(f"segment {position}: booleans are not identifiers")
    elif isinstance(raw, Integral):
        segment = Identifier(int(raw))
    elif isinstance(raw, str):
        segment = Literal(raw)
    elif raw is None:
        raise InvalidPathError(f"segment {position}: identifier is required, got None")
    else:
        raise InvalidPathError(
            f"segment {position}: unsupported type {type(raw).__name__}"
        )

    if isinstance(segment, (Literal, Identifier)):
        if segment.value is None or (isinstance(segment.value, str) and not segment.value.strip()):
            raise InvalidPathError(f"segment {position}: empty segment")
        if isinstance(segment.value, bool):
            raise InvalidPathError(f"segment {position}: booleans are not identifiers")
    return segment


def format_query_value(value: Any) -> str:
    """Serialize one query value.

    Sequences are comma joined (``ids=1,2,3``), booleans are lower case and
    dates become Unix epoch seconds, which incremental exports expect.
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return str(int(value.timestamp()))
    if isinstance(value, date):
        return str(int(datetime(value.year, value.month, value.day, tzinfo=timezone.utc).timestamp()))
    if isinstance(value, (list, tuple, set, frozenset)):
        items = sorted(value) if isinstance(value, (set, frozenset)) else value
        return ",".join(format_query_value(item) for item in items)
    return str(value)


def _flatten_params(params: Mapping[str, Any], prefix: Optional[str] = None) -> list:
    """Flatten nested mappings into bracket keys: ``{"page": {"size": 2}}`` -> ``page[size]``."""
    pairs = []
    for key, value in params.items():
        name = f"{prefix}[{key}]" if prefix else str(key)
        if value is None:
            continue
        if isinstance(value, Mapping):
            pairs.extend(_flatten_params(value, name))
        else:
            pairs.append((name, format_query_value(value)))
    return pairs


def encode_query(params: Mapping[str, Any]) -> str:
    """Encode query parameters, keeping commas and brackets readable."""
    return urlencode(_flatten_params(params), safe=",[]")


def parse_list_value(value: str) -> list[str]:
    """Split a comma joined query value back into its items."""
    if not value:
        return []
    return value.split(",")


def build_path(
    segments: Sequence[Any],
    sideload: Iterable[str] = (),
) -> EndpointPath:
    """Build an endpoint path from ordered segments.

    Args:
        segments: Literals and identifiers, optionally ending with a mapping
            of query parameters
        sideload: Related resources requested via ``include=`` unless the
            query already names ``include``

    Returns:
        EndpointPath with escaped path and encoded query

    Raises:
        InvalidPathError: If the sequence is empty, a mapping appears before
            the last position, or a segment is null/empty
    """
    if isinstance(segments, (str, bytes)) or not isinstance(segments, Sequence):
        raise InvalidPathError("segments must be a list of path components")
    if not segments:
        raise InvalidPathError("at least one path segment is required")

    tagged = [to_segment(raw, i) for i, raw in enumerate(segments)]

    params: dict = {}
    parts = []
    for i, segment in enumerate(tagged):
        if isinstance(segment, QueryParams):
            if i != len(tagged) - 1:
                raise InvalidPathError(
                    f"segment {i}: query parameters are only allowed as the last segment"
                )
            params = dict(segment.params)
            continue
        parts.append(quote(str(segment.value), safe=""))

    if not parts:
        raise InvalidPathError("path has no literal or identifier segments")

    sideload = tuple(sideload)
    if sideload and "include" not in params:
        params["include"] = sideload

    return EndpointPath(path="/".join(parts), query=encode_query(params))
