"""Ordering of companies and stored records.

The same key is applied to the freshly fetched index and to records loaded
from a resumed output file, so both end up in one consistent order.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, TypeVar

T = TypeVar("T")


class SortKey(str, Enum):
    NAME = "name"
    RATING = "rating"
    EMPLOYEES = "employees"
    REVIEWS = "reviews"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True)
class SortSpec:
    """Which field to sort by and in which direction."""

    key: SortKey = SortKey.NAME
    order: SortOrder = SortOrder.ASC

    @property
    def reverse(self) -> bool:
        return self.order is SortOrder.DESC


def _field(item: Any, name: str) -> Any:
    if isinstance(item, Mapping):
        return item.get(name)
    return getattr(item, name, None)


def sort_key(spec: SortSpec) -> Callable[[Any], Any]:
    """Build a key function for sorted() from a SortSpec.

    Names compare case-insensitively with the raw name as tie breaker.
    Numeric fields treat None or a missing value as 0.
    """
    if spec.key is SortKey.NAME:

        def name_key(item: Any) -> tuple[str, str]:
            name = _field(item, "name") or ""
            return (name.casefold(), name)

        return name_key

    field = spec.key.value

    def numeric_key(item: Any) -> float:
        return _field(item, field) or 0

    return numeric_key


def sort_items(items: Iterable[T], spec: SortSpec) -> list[T]:
    """Return items sorted according to spec. The sort is stable."""
    return sorted(items, key=sort_key(spec), reverse=spec.reverse)
