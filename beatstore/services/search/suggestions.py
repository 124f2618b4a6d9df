"""Suggestion ranker: autocomplete and "related searches" over past queries.

Ranking is read-only. Popularity only moves through record_suggestion_use,
which the search endpoint calls for issued queries and the click endpoint
calls for accepted suggestions.
"""

import logging

from sqlalchemy import or_
from sqlalchemy.orm import Session

from beatstore.core.config import get_settings
from beatstore.core.time import utcnow
from beatstore.core.validation import LIKE_ESCAPE_CHAR, escape_like, normalize_query
from beatstore.models.search_suggestion import SearchSuggestion, SuggestionCategory
from beatstore.services.search.cache import get_cached, set_cached

logger = logging.getLogger(__name__)

MIN_PARTIAL_LENGTH = 2
DEFAULT_SUGGESTION_LIMIT = 10
TRENDING_CACHE_KEY = "trending_searches"


def _normalize(query: str | None) -> str | None:
    normalized = normalize_query(query)
    return normalized.lower() if normalized else None


def rank_suggestions(
    db: Session,
    partial: str | None,
    limit: int = DEFAULT_SUGGESTION_LIMIT,
    category: str | None = None,
) -> list[SearchSuggestion]:
    """Entries containing ``partial`` (case-insensitive), most popular first.

    Inputs shorter than two characters yield an empty list, as does an input
    nothing matches. Ties on popularity are broken alphabetically.
    """
    text = _normalize(partial)
    if text is None or len(text) < MIN_PARTIAL_LENGTH:
        return []

    query = db.query(SearchSuggestion).filter(
        SearchSuggestion.query.ilike(f"%{escape_like(text)}%", escape=LIKE_ESCAPE_CHAR)
    )
    if category is not None:
        query = query.filter(SearchSuggestion.category == category)
    return (
        query.order_by(SearchSuggestion.popularity.desc(), SearchSuggestion.query.asc())
        .limit(limit)
        .all()
    )


def related_suggestions(
    db: Session, query: str | None, limit: int = DEFAULT_SUGGESTION_LIMIT
) -> list[str]:
    """Alternate queries to show next to a result page.

    With a text query: beat-category entries sharing any token with it (the
    query itself excluded) that once returned results. Without one: the most
    popular beat searches.
    """
    text = _normalize(query)
    base = db.query(SearchSuggestion.query).filter(
        SearchSuggestion.category == SuggestionCategory.BEAT.value
    )
    if text is None:
        rows = (
            base.order_by(SearchSuggestion.popularity.desc(), SearchSuggestion.query.asc())
            .limit(limit)
            .all()
        )
        return [row.query for row in rows]

    tokens = [t for t in text.split() if len(t) >= MIN_PARTIAL_LENGTH]
    if not tokens:
        return []
    token_matches = [
        SearchSuggestion.query.ilike(f"%{escape_like(t)}%", escape=LIKE_ESCAPE_CHAR)
        for t in tokens
    ]
    rows = (
        base.filter(
            or_(*token_matches),
            SearchSuggestion.query != text,
            SearchSuggestion.result_count > 0,
        )
        .order_by(
            SearchSuggestion.popularity.desc(),
            SearchSuggestion.result_count.desc(),
            SearchSuggestion.query.asc(),
        )
        .limit(limit)
        .all()
    )
    return [row.query for row in rows]


def record_suggestion_use(
    db: Session,
    query: str,
    category: str = SuggestionCategory.BEAT.value,
    result_count: int | None = None,
) -> SearchSuggestion | None:
    """Bump popularity for a query, creating its entry on first use.

    Returns None for queries too short to be worth suggesting.
    """
    text = _normalize(query)
    if text is None or len(text) < MIN_PARTIAL_LENGTH:
        return None

    suggestion = (
        db.query(SearchSuggestion)
        .filter(SearchSuggestion.query == text, SearchSuggestion.category == category)
        .first()
    )
    if suggestion:
        suggestion.popularity = (suggestion.popularity or 0) + 1
        suggestion.last_used = utcnow()
        if result_count is not None:
            suggestion.result_count = result_count
    else:
        suggestion = SearchSuggestion(
            query=text,
            category=category,
            popularity=1,
            result_count=result_count or 0,
            last_used=utcnow(),
        )
        db.add(suggestion)
    db.commit()
    db.refresh(suggestion)
    return suggestion


def get_trending_searches(db: Session, limit: int = DEFAULT_SUGGESTION_LIMIT) -> list[str]:
    """Most popular beat searches, cached for ``trending_cache_seconds``."""
    ttl = get_settings().trending_cache_seconds
    cache_key = f"{TRENDING_CACHE_KEY}:{limit}"
    if ttl > 0:
        cached = get_cached(db, cache_key)
        if cached is not None:
            return cached

    rows = (
        db.query(SearchSuggestion.query)
        .filter(SearchSuggestion.category == SuggestionCategory.BEAT.value)
        .order_by(SearchSuggestion.popularity.desc(), SearchSuggestion.query.asc())
        .limit(limit)
        .all()
    )
    trending = [row.query for row in rows]
    set_cached(db, cache_key, trending, ttl)
    return trending
