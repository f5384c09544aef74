"""Ordering of rocket listings."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from datetime import datetime, timezone
from typing import Any

from .models import RocketSummary

VALID_SORT_OPTIONS = frozenset({"id", "type", "speed", "mission", "exploded", "updatedAt"})
VALID_SORT_ORDERS = frozenset({"asc", "desc"})

DEFAULT_SORT_BY = "id"
DEFAULT_SORT_ORDER = "asc"

_EARLIEST = datetime.min.replace(tzinfo=timezone.utc)


def validate_sort_by(field: str) -> bool:
    """True if the field may be sorted on; empty means the default."""
    return not field or field in VALID_SORT_OPTIONS


def validate_sort_order(order: str) -> bool:
    """True if the order is known; empty means ascending."""
    return not order or order in VALID_SORT_ORDERS


def _time_key(moment: datetime | None) -> datetime:
    if moment is None:
        return _EARLIEST
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


_KEYS: dict[str, Callable[[RocketSummary], Any]] = {
    "id": lambda r: r.id.lower(),
    "type": lambda r: r.type.lower(),
    "speed": lambda r: r.speed,
    "mission": lambda r: r.mission.lower(),
    "exploded": lambda r: (r.exploded, r.id.lower()),
    "updatedAt": lambda r: _time_key(r.updated_at),
}


def sort_rockets(
    rockets: Iterable[RocketSummary], sort_by: str = "", sort_order: str = ""
) -> list[RocketSummary]:
    """Return a new sorted list; unknown fields sort by id, any order but desc is ascending."""
    key = _KEYS.get(sort_by or DEFAULT_SORT_BY, _KEYS["id"])
    return sorted(rockets, key=key, reverse=(sort_order or DEFAULT_SORT_ORDER) == "desc")