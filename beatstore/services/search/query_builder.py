"""Translate SearchFilters into catalog predicates and a stable sort order.

Text matching policy: the query is split on whitespace and every token must
occur (case-insensitive substring) in the title, description, a tag, or the
producer's username / "first last" name. No stemming or fuzzy matching.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy import ColumnElement, Numeric, and_, case, func, literal, or_, select

from beatstore.core.validation import LIKE_ESCAPE_CHAR, escape_like
from beatstore.models.beat import Beat, BeatTag
from beatstore.models.user import User
from beatstore.services.search.filters import SearchFilters, SortBy


@dataclass(frozen=True)
class TranslatedQuery:
    conditions: tuple[ColumnElement[bool], ...]
    order_by: tuple[ColumnElement, ...]

    @property
    def where(self) -> ColumnElement[bool]:
        return and_(*self.conditions)


def effective_price() -> ColumnElement[Decimal]:
    """Price as buyers see it: free beats cost zero whatever is stored."""
    return case(
        (Beat.is_free.is_(True), literal(0, Numeric(10, 2))),
        else_=Beat.price,
    )


def _contains(column, token: str) -> ColumnElement[bool]:
    return column.ilike(f"%{escape_like(token)}%", escape=LIKE_ESCAPE_CHAR)


def _token_clause(token: str) -> ColumnElement[bool]:
    tag_match = (
        select(BeatTag.id).where(BeatTag.beat_id == Beat.id, _contains(BeatTag.tag, token)).exists()
    )
    full_name = func.coalesce(User.first_name, "").concat(" ").concat(
        func.coalesce(User.last_name, "")
    )
    producer_match = (
        select(User.id)
        .where(
            User.id == Beat.producer_id,
            or_(_contains(User.username, token), _contains(full_name, token)),
        )
        .exists()
    )
    return or_(
        _contains(Beat.title, token),
        _contains(Beat.description, token),
        tag_match,
        producer_match,
    )


def text_conditions(query: str) -> list[ColumnElement[bool]]:
    return [_token_clause(token) for token in query.split()]


def _range_conditions(column, bounds) -> list[ColumnElement[bool]]:
    conditions = []
    if bounds.minimum is not None:
        conditions.append(column >= bounds.minimum)
    if bounds.maximum is not None:
        conditions.append(column <= bounds.maximum)
    return conditions


def build_conditions(filters: SearchFilters) -> list[ColumnElement[bool]]:
    """AND-ed predicate list. Absent criteria add nothing."""
    conditions: list[ColumnElement[bool]] = [Beat.is_active.is_(True)]

    if filters.query:
        conditions.extend(text_conditions(filters.query))
    if filters.genre is not None:
        conditions.append(Beat.genre == filters.genre)
    if filters.mood is not None:
        conditions.append(Beat.mood == filters.mood)
    if filters.key is not None:
        conditions.append(Beat.key == filters.key)

    conditions.extend(_range_conditions(Beat.bpm, filters.bpm))
    conditions.extend(_range_conditions(effective_price(), filters.price))
    conditions.extend(_range_conditions(Beat.duration, filters.duration))

    if filters.tags:
        conditions.append(
            select(BeatTag.id)
            .where(BeatTag.beat_id == Beat.id, func.lower(BeatTag.tag).in_(filters.tags))
            .exists()
        )
    if filters.is_free is not None:
        conditions.append(Beat.is_free.is_(filters.is_free))
    if filters.is_exclusive is not None:
        conditions.append(Beat.is_exclusive.is_(filters.is_exclusive))
    if filters.producer_id is not None:
        conditions.append(Beat.producer_id == filters.producer_id)

    return conditions


def build_order_by(filters: SearchFilters) -> list[ColumnElement]:
    """Primary sort keys followed by created_at desc, id asc tie-breakers."""
    sort_by = filters.sort_by
    if sort_by is SortBy.NEWEST:
        keys = [Beat.created_at.desc()]
    elif sort_by is SortBy.OLDEST:
        keys = [Beat.created_at.asc()]
    elif sort_by is SortBy.POPULAR:
        keys = [Beat.play_count.desc(), Beat.like_count.desc()]
    elif sort_by is SortBy.PRICE_LOW:
        keys = [effective_price().asc()]
    elif sort_by is SortBy.PRICE_HIGH:
        keys = [effective_price().desc()]
    elif sort_by is SortBy.BPM_LOW:
        keys = [Beat.bpm.asc()]
    elif sort_by is SortBy.BPM_HIGH:
        keys = [Beat.bpm.desc()]
    else:
        keys = []
        if filters.query:
            # Title hits rank above matches found only in tags/description/producer
            keys.append(case((_contains(Beat.title, filters.query), 0), else_=1))
        keys.extend([Beat.play_count.desc(), Beat.like_count.desc()])

    if sort_by not in (SortBy.NEWEST, SortBy.OLDEST):
        keys.append(Beat.created_at.desc())
    keys.append(Beat.id.asc())
    return keys


def translate(filters: SearchFilters) -> TranslatedQuery:
    return TranslatedQuery(
        conditions=tuple(build_conditions(filters)),
        order_by=tuple(build_order_by(filters)),
    )
