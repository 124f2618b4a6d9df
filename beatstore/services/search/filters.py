"""Validated search criteria (the filter model).

Every optional criterion is ``None`` when the client did not send it, so an
explicit ``False`` or ``0`` is never confused with "no constraint".
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum

from beatstore.core.validation import normalize_query, normalize_single_line, normalize_tag
from beatstore.schemas.search import SearchRequest

DEFAULT_LIMIT = 20
MAX_LIMIT = 100
MAX_TAGS = 20

# Largest accepted bounds; all fit the catalog column types
MAX_BPM = 1000
MAX_PRICE = Decimal("99999999.99")
MAX_DURATION = 86400
MAX_OFFSET = 2**31 - 1


class SortBy(str, Enum):
    NEWEST = "newest"
    OLDEST = "oldest"
    POPULAR = "popular"
    PRICE_LOW = "price_low"
    PRICE_HIGH = "price_high"
    BPM_LOW = "bpm_low"
    BPM_HIGH = "bpm_high"
    RELEVANCE = "relevance"


class InvalidFilter(ValueError):
    """Raised when search criteria are malformed or contradictory."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(f"{field}: {message}")
        self.field = field
        self.message = message


@dataclass(frozen=True)
class Range:
    """Inclusive numeric bounds; either side may be open (None)."""

    minimum: int | Decimal | None = None
    maximum: int | Decimal | None = None

    @property
    def is_open(self) -> bool:
        return self.minimum is None and self.maximum is None


@dataclass(frozen=True)
class SearchFilters:
    query: str | None = None
    genre: str | None = None
    mood: str | None = None
    key: str | None = None
    bpm: Range = field(default_factory=Range)
    price: Range = field(default_factory=Range)
    duration: Range = field(default_factory=Range)
    tags: tuple[str, ...] = ()
    is_free: bool | None = None
    is_exclusive: bool | None = None
    producer_id: str | None = None
    sort_by: SortBy = SortBy.RELEVANCE
    limit: int = DEFAULT_LIMIT
    offset: int = 0

    def to_dict(self) -> dict:
        """JSON-safe representation, also used for cache keys and analytics."""
        return {
            "query": self.query,
            "genre": self.genre,
            "mood": self.mood,
            "key": self.key,
            "bpmMin": self.bpm.minimum,
            "bpmMax": self.bpm.maximum,
            "priceMin": _decimal_str(self.price.minimum),
            "priceMax": _decimal_str(self.price.maximum),
            "durationMin": self.duration.minimum,
            "durationMax": self.duration.maximum,
            "tags": list(self.tags),
            "isFree": self.is_free,
            "isExclusive": self.is_exclusive,
            "producerId": self.producer_id,
            "sortBy": self.sort_by.value,
            "limit": self.limit,
            "offset": self.offset,
        }

    def cache_key(self) -> str:
        canonical = json.dumps(self.to_dict(), sort_keys=True, separators=(",", ":"))
        return "search:" + hashlib.sha256(canonical.encode()).hexdigest()


def _decimal_str(value: int | Decimal | None) -> str | None:
    if value is None:
        return None
    # 10, 10.0 and 10.00 must produce the same cache key
    return format(Decimal(value).normalize(), "f")


def _parse_sort(value: str | None) -> SortBy:
    if value is None or not value.strip():
        return SortBy.RELEVANCE
    try:
        return SortBy(value.strip().lower())
    except ValueError:
        allowed = ", ".join(s.value for s in SortBy)
        raise InvalidFilter(
            "sortBy", f"unknown sort order '{value}' (expected one of: {allowed})"
        ) from None


def _check_range(
    name: str,
    minimum: int | Decimal | None,
    maximum: int | Decimal | None,
    floor: int,
    floor_inclusive: bool,
    ceiling: int | Decimal,
) -> Range:
    """Validate one min/max pair. Bad bounds are rejected, never swapped."""
    for suffix, value in (("Min", minimum), ("Max", maximum)):
        if value is None:
            continue
        too_low = value < floor if floor_inclusive else value <= floor
        if too_low:
            qualifier = "at least" if floor_inclusive else "greater than"
            raise InvalidFilter(f"{name}{suffix}", f"must be {qualifier} {floor}")
        if value > ceiling:
            raise InvalidFilter(f"{name}{suffix}", f"must be at most {ceiling}")
    if minimum is not None and maximum is not None and minimum > maximum:
        raise InvalidFilter(
            f"{name}Min", f"{name}Min ({minimum}) cannot be greater than {name}Max ({maximum})"
        )
    return Range(minimum=minimum, maximum=maximum)


def _clean_optional(value: str | None) -> str | None:
    cleaned = normalize_single_line(value)
    return cleaned or None


def _clean_tags(tags: list[str] | None) -> tuple[str, ...]:
    if not tags:
        return ()
    seen: dict[str, None] = {}
    for tag in tags:
        normalized = normalize_tag(tag)
        if normalized:
            seen.setdefault(normalized, None)
    if len(seen) > MAX_TAGS:
        raise InvalidFilter("tags", f"at most {MAX_TAGS} tags may be given")
    return tuple(seen)


def build_filters(
    request: SearchRequest,
    default_limit: int = DEFAULT_LIMIT,
    max_limit: int = MAX_LIMIT,
) -> SearchFilters:
    """Validate a raw request into a SearchFilters snapshot.

    Raises InvalidFilter naming the offending field. Nothing here touches
    storage, so bad input is rejected before any query is issued.
    """
    sort_by = _parse_sort(request.sort_by)

    bpm = _check_range(
        "bpm", request.bpm_min, request.bpm_max, floor=0, floor_inclusive=False, ceiling=MAX_BPM
    )
    price = _check_range(
        "price",
        request.price_min,
        request.price_max,
        floor=0,
        floor_inclusive=True,
        ceiling=MAX_PRICE,
    )
    duration = _check_range(
        "duration",
        request.duration_min,
        request.duration_max,
        floor=0,
        floor_inclusive=True,
        ceiling=MAX_DURATION,
    )

    limit = default_limit if request.limit is None else request.limit
    if limit < 1:
        raise InvalidFilter("limit", "must be at least 1")
    limit = min(limit, max_limit)

    offset = 0 if request.offset is None else request.offset
    if offset < 0:
        raise InvalidFilter("offset", "cannot be negative")
    if offset > MAX_OFFSET:
        raise InvalidFilter("offset", f"must be at most {MAX_OFFSET}")

    return SearchFilters(
        query=normalize_query(request.query),
        genre=_clean_optional(request.genre),
        mood=_clean_optional(request.mood),
        key=_clean_optional(request.key),
        bpm=bpm,
        price=price,
        duration=duration,
        tags=_clean_tags(request.tags),
        is_free=request.is_free,
        is_exclusive=request.is_exclusive,
        producer_id=_clean_optional(request.producer_id),
        sort_by=sort_by,
        limit=limit,
        offset=offset,
    )
