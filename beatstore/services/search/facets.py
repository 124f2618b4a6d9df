"""Facet counts over the full (unpaginated) matching set."""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import and_, case, func
from sqlalchemy.orm import Session

from beatstore.models.beat import Beat
from beatstore.schemas.search import FacetRange, FacetValue, SearchFacets
from beatstore.services.search.query_builder import TranslatedQuery, effective_price


@dataclass(frozen=True)
class Bucket:
    label: str
    lower: int | None
    upper: int | None


# Lower bound inclusive, upper bound exclusive
BPM_BUCKETS: tuple[Bucket, ...] = (
    Bucket("<60", None, 60),
    Bucket("60-90", 60, 90),
    Bucket("90-120", 90, 120),
    Bucket("120-140", 120, 140),
    Bucket("140-180", 140, 180),
    Bucket("180+", 180, None),
)

# Lower bound exclusive, upper bound inclusive ("Free" is effective price 0)
PRICE_BUCKETS: tuple[Bucket, ...] = (
    Bucket("Free", None, 0),
    Bucket("$1-$25", 0, 25),
    Bucket("$25-$50", 25, 50),
    Bucket("$50-$100", 50, 100),
    Bucket("$100+", 100, None),
)


def _bucket_expression(column, buckets: tuple[Bucket, ...], upper_inclusive: bool):
    whens = []
    for bucket in buckets:
        bounds = []
        if bucket.lower is not None:
            bounds.append(column > bucket.lower if upper_inclusive else column >= bucket.lower)
        if bucket.upper is not None:
            bounds.append(column <= bucket.upper if upper_inclusive else column < bucket.upper)
        whens.append((and_(*bounds), bucket.label))
    return case(*whens)


def _value_facet(db: Session, column, translated: TranslatedQuery) -> list[FacetValue]:
    count = func.count(Beat.id).label("count")
    rows = (
        db.query(column, count)
        .filter(*translated.conditions)
        .group_by(column)
        .order_by(count.desc(), column.asc())
        .all()
    )
    return [FacetValue(value=value, count=n) for value, n in rows if value is not None]


def _bucket_facet(
    db: Session,
    column,
    buckets: tuple[Bucket, ...],
    translated: TranslatedQuery,
    upper_inclusive: bool,
) -> list[FacetRange]:
    labelled = (
        db.query(_bucket_expression(column, buckets, upper_inclusive).label("bucket"))
        .filter(*translated.conditions)
        .subquery()
    )
    counts = dict(
        db.query(labelled.c.bucket, func.count())
        .group_by(labelled.c.bucket)
        .all()
    )
    # Every bucket is reported, in fixed order, even when empty
    return [FacetRange(range=b.label, count=counts.get(b.label, 0)) for b in buckets]


def compute_facets(db: Session, translated: TranslatedQuery) -> SearchFacets:
    return SearchFacets(
        genres=_value_facet(db, Beat.genre, translated),
        moods=_value_facet(db, Beat.mood, translated),
        keys=_value_facet(db, Beat.key, translated),
        bpm_ranges=_bucket_facet(db, Beat.bpm, BPM_BUCKETS, translated, upper_inclusive=False),
        price_ranges=_bucket_facet(
            db, effective_price(), PRICE_BUCKETS, translated, upper_inclusive=True
        ),
    )
