"""Search orchestrator.

Runs the translated query for one page plus a total count, then adds
facets and suggestions. The page and count must both succeed; facets,
suggestions and the cache degrade to empty on failure.

Page, count and facets are separate reads in one session. They are not
isolated from concurrent writes beyond the engine's default read
consistency, so under heavy writes the count can drift from the page.
"""

import json
import logging
import time

from pydantic import ValidationError
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from beatstore.core.config import get_settings
from beatstore.core.time import elapsed_ms
from beatstore.models.beat import Beat
from beatstore.models.search_analytics import SearchAnalytics
from beatstore.schemas.search import BeatOut, SearchFacets, SearchResult
from beatstore.services.search.cache import get_cached, set_cached
from beatstore.services.search.facets import compute_facets
from beatstore.services.search.filters import SearchFilters
from beatstore.services.search.query_builder import TranslatedQuery, translate
from beatstore.services.search.suggestions import record_suggestion_use, related_suggestions

logger = logging.getLogger(__name__)


class SearchUnavailable(RuntimeError):
    """The catalog could not be queried; no partial result is returned."""


def _fetch_page(
    db: Session, filters: SearchFilters, translated: TranslatedQuery
) -> tuple[list[Beat], int]:
    try:
        beats = (
            db.query(Beat)
            .options(selectinload(Beat.producer))
            .filter(*translated.conditions)
            .order_by(*translated.order_by)
            .limit(filters.limit)
            .offset(filters.offset)
            .all()
        )
        total = db.query(func.count(Beat.id)).filter(*translated.conditions).scalar() or 0
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Catalog query failed: %s", e)
        raise SearchUnavailable("Search is temporarily unavailable") from e
    return beats, total


def _facets_or_empty(db: Session, translated: TranslatedQuery) -> SearchFacets:
    try:
        return compute_facets(db, translated)
    except Exception:
        db.rollback()
        logger.warning("Facet computation failed, returning empty facets", exc_info=True)
        return SearchFacets()


def _suggestions_or_empty(db: Session, query: str | None) -> list[str]:
    try:
        return related_suggestions(db, query, limit=get_settings().suggestion_limit)
    except Exception:
        db.rollback()
        logger.warning("Suggestion lookup failed, returning none", exc_info=True)
        return []


def search_beats(db: Session, filters: SearchFilters) -> SearchResult:
    """Run a search and assemble the result envelope.

    Raises SearchUnavailable when the page or the count cannot be read.
    """
    started = time.perf_counter()
    ttl = get_settings().search_cache_seconds
    cache_key = filters.cache_key()

    if ttl > 0:
        cached = get_cached(db, cache_key)
        if cached is not None:
            try:
                result = SearchResult.model_validate(cached)
            except ValidationError:
                logger.warning("Ignoring malformed cached result %s", cache_key)
            else:
                result.search_time = elapsed_ms(started)
                return result

    translated = translate(filters)
    beats, total = _fetch_page(db, filters, translated)
    facets = _facets_or_empty(db, translated)
    suggestions = _suggestions_or_empty(db, filters.query)

    result = SearchResult(
        beats=[BeatOut.from_beat(beat) for beat in beats],
        total_count=total,
        facets=facets,
        suggestions=suggestions,
    )
    set_cached(db, cache_key, result.model_dump(mode="json"), ttl)
    result.search_time = elapsed_ms(started)
    return result


def track_search(
    db: Session,
    filters: SearchFilters,
    result_count: int,
    user_id: str | None = None,
    response_time_ms: int | None = None,
) -> None:
    """Record analytics and bump the query's suggestion entry.

    Fire-and-forget: every failure is logged and rolled back, never raised.
    """
    try:
        db.add(
            SearchAnalytics(
                query=filters.query or "",
                user_id=user_id,
                result_count=result_count,
                search_type="text" if filters.query else "filter",
                filters_json=json.dumps(filters.to_dict(), sort_keys=True),
                response_time_ms=response_time_ms,
            )
        )
        db.commit()
    except Exception:
        db.rollback()
        logger.warning("Failed to record search analytics", exc_info=True)

    if filters.query:
        try:
            record_suggestion_use(db, filters.query, result_count=result_count)
        except Exception:
            db.rollback()
            logger.warning("Failed to update search suggestions", exc_info=True)
