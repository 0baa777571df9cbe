"""
Query builders for list and get calls.

Each builder renders an ordered list of (key, value) pairs. Builders are
immutable: the fluent FilterBuilder methods return a new builder, so a
partially built filter can be shared and extended safely.
"""

import urllib.parse
from collections.abc import Iterable
from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Any

QueryPairs = list[tuple[str, str]]

MAX_PER_PAGE = 100


def format_value(value: Any) -> str:
    """Render a filter value the way the FreshBooks API expects it."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, datetime):
        return value.strftime("%Y-%m-%d %H:%M:%S")
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


class QueryBuilder:
    """Base class for anything that contributes query-string parameters."""

    def render(self) -> QueryPairs:
        raise NotImplementedError


def build_query_string(builders: Iterable[QueryBuilder | None] | None) -> str:
    """
    Combine builders into a percent-encoded query string.

    Args:
        builders: Builders to render, in order. ``None`` entries are skipped.

    Returns:
        ``"?key=value&..."`` or an empty string when nothing was rendered

    """
    pairs: QueryPairs = []
    for builder in builders or ():
        if builder is None:
            continue
        pairs.extend(builder.render())
    if not pairs:
        return ""
    return "?" + urllib.parse.urlencode(pairs)


# =============================================================================
# Pagination
# =============================================================================


@dataclass(frozen=True)
class PaginateBuilder(QueryBuilder):
    """Page number and page size for list calls."""

    page: int | None = None
    per_page: int | None = None

    def __post_init__(self) -> None:
        if self.page is not None:
            object.__setattr__(self, "page", max(int(self.page), 1))
        if self.per_page is not None:
            object.__setattr__(self, "per_page", min(max(int(self.per_page), 1), MAX_PER_PAGE))

    def render(self) -> QueryPairs:
        pairs: QueryPairs = []
        if self.page is not None:
            pairs.append(("page", str(self.page)))
        if self.per_page is not None:
            pairs.append(("per_page", str(self.per_page)))
        return pairs


# =============================================================================
# Filters
# =============================================================================


@dataclass(frozen=True)
class FilterBuilder(QueryBuilder):
    """
    Search filters for list calls.

    Example:
        filters = FilterBuilder().equals("userid", 123).between("amount", 10, 100)

    """

    filters: tuple[tuple[str, str], ...] = ()

    def _with(self, *pairs: tuple[str, str]) -> "FilterBuilder":
        return replace(self, filters=self.filters + tuple(pairs))

    def equals(self, field: str, value: Any) -> "FilterBuilder":
        """Match records whose field equals the value exactly."""
        return self._with((f"search[{field}]", format_value(value)))

    def in_list(self, field: str, values: Iterable[Any]) -> "FilterBuilder":
        """Match records whose field is any of the values."""
        # The API expects the plural form of the field name for list filters.
        if not field.endswith("s"):
            field = f"{field}s"
        return self._with(*((f"search[{field}][]", format_value(v)) for v in values))

    def like(self, field: str, value: Any) -> "FilterBuilder":
        """Match records whose field contains the value."""
        return self._with((f"search[{field}]", format_value(value)))

    def between(self, field: str, min: Any = None, max: Any = None) -> "FilterBuilder":
        """Match records whose field lies between the given bounds."""
        pairs = []
        if min is not None:
            pairs.append((f"search[{field}_min]", format_value(min)))
        if max is not None:
            pairs.append((f"search[{field}_max]", format_value(max)))
        return self._with(*pairs)

    def boolean(self, field: str, value: bool) -> "FilterBuilder":
        return self._with((field, format_value(bool(value))))

    def date_time(self, field: str, value: datetime) -> "FilterBuilder":
        return self._with((field, format_value(value)))

    def render(self) -> QueryPairs:
        return list(self.filters)


# =============================================================================
# Includes and sorting
# =============================================================================


@dataclass(frozen=True)
class IncludesBuilder(QueryBuilder):
    """Related data to include in the response (e.g. invoice ``lines``)."""

    includes: tuple[str, ...] = ()

    def __init__(self, includes: Iterable[str] = ()):
        object.__setattr__(self, "includes", tuple(includes))

    def include(self, key: str) -> "IncludesBuilder":
        return IncludesBuilder(self.includes + (key,))

    def render(self) -> QueryPairs:
        return [("include[]", key) for key in self.includes]


@dataclass(frozen=True)
class SortBuilder(QueryBuilder):
    """Sort order for list calls."""

    key: str
    ascending_order: bool = True

    @classmethod
    def ascending(cls, key: str) -> "SortBuilder":
        return cls(key, True)

    @classmethod
    def descending(cls, key: str) -> "SortBuilder":
        return cls(key, False)

    def render(self) -> QueryPairs:
        suffix = "asc" if self.ascending_order else "desc"
        return [("sort", f"{self.key}_{suffix}")]
