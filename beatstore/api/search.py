from decimal import Decimal

from fastapi import APIRouter, BackgroundTasks, Depends, Query, Request
from sqlalchemy.orm import Session

from beatstore.api.deps import get_db, get_optional_user_id
from beatstore.core.admin_auth import verify_admin_api_key
from beatstore.core.config import get_settings
from beatstore.core.rate_limit import limiter
from beatstore.schemas.common import CacheClearResponse, ErrorResponse
from beatstore.schemas.search import (
    AutocompleteResult,
    SearchRequest,
    SearchResult,
    SuggestionClick,
    SuggestionClickResponse,
)
from beatstore.services.search.autocomplete import get_autocomplete
from beatstore.services.search.cache import clear_cache
from beatstore.services.search.filters import build_filters
from beatstore.services.search.service import search_beats, track_search
from beatstore.services.search.suggestions import (
    get_trending_searches,
    rank_suggestions,
    record_suggestion_use,
)

router = APIRouter()
settings = get_settings()


def _split_csv(value: str | None) -> list[str] | None:
    if value is None:
        return None
    return [part for part in (p.strip() for p in value.split(",")) if part]


def get_search_request(
    q: str | None = Query(default=None, max_length=200),
    genre: str | None = Query(default=None, max_length=50),
    mood: str | None = Query(default=None, max_length=50),
    key: str | None = Query(default=None, max_length=10),
    bpm_min: int | None = Query(default=None, alias="bpmMin"),
    bpm_max: int | None = Query(default=None, alias="bpmMax"),
    price_min: Decimal | None = Query(default=None, alias="priceMin"),
    price_max: Decimal | None = Query(default=None, alias="priceMax"),
    duration_min: int | None = Query(default=None, alias="durationMin"),
    duration_max: int | None = Query(default=None, alias="durationMax"),
    tags: str | None = Query(default=None, max_length=500, description="Comma-separated"),
    is_free: bool | None = Query(default=None, alias="isFree"),
    is_exclusive: bool | None = Query(default=None, alias="isExclusive"),
    producer_id: str | None = Query(default=None, alias="producerId", max_length=36),
    sort_by: str | None = Query(default=None, alias="sortBy", max_length=20),
    limit: int | None = Query(default=None),
    offset: int | None = Query(default=None),
) -> SearchRequest:
    return SearchRequest(
        query=q,
        genre=genre,
        mood=mood,
        key=key,
        bpm_min=bpm_min,
        bpm_max=bpm_max,
        price_min=price_min,
        price_max=price_max,
        duration_min=duration_min,
        duration_max=duration_max,
        tags=_split_csv(tags),
        is_free=is_free,
        is_exclusive=is_exclusive,
        producer_id=producer_id,
        sort_by=sort_by,
        limit=limit,
        offset=offset,
    )


@router.get(
    "",
    response_model=SearchResult,
    responses={400: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
)
@limiter.limit(lambda: f"{settings.search_rate_limit_per_minute}/minute")
def search(
    request: Request,
    background_tasks: BackgroundTasks,
    search_request: SearchRequest = Depends(get_search_request),
    db: Session = Depends(get_db),
    user_id: str | None = Depends(get_optional_user_id),
) -> SearchResult:
    """Filtered catalog search with facets and suggestions.

    Invalid criteria return 400 naming the field; storage failures return 503.
    """
    filters = build_filters(
        search_request,
        default_limit=settings.search_default_limit,
        max_limit=settings.search_max_limit,
    )
    result = search_beats(db, filters)
    background_tasks.add_task(
        track_search, db, filters, result.total_count, user_id, result.search_time
    )
    return result


@router.get("/suggestions", response_model=list[str])
def suggestions(
    q: str = Query(default="", max_length=200),
    category: str | None = Query(default=None, max_length=20),
    limit: int = Query(default=10, ge=1, le=50),
    db: Session = Depends(get_db),
) -> list[str]:
    """Autocomplete from past searches. Fewer than two characters returns []."""
    return [s.query for s in rank_suggestions(db, q, limit=limit, category=category)]


@router.post("/suggestions/click", response_model=SuggestionClickResponse)
def suggestion_click(
    click: SuggestionClick,
    db: Session = Depends(get_db),
) -> SuggestionClickResponse:
    """Record that a user picked a suggestion."""
    suggestion = record_suggestion_use(
        db, click.query, category=click.category.value, result_count=click.result_count
    )
    if suggestion is None:
        return SuggestionClickResponse(
            query=click.query, category=click.category.value, popularity=0
        )
    return SuggestionClickResponse(
        query=suggestion.query,
        category=suggestion.category,
        popularity=suggestion.popularity,
    )


@router.get("/autocomplete", response_model=AutocompleteResult)
def autocomplete(
    q: str = Query(default="", max_length=200),
    categories: str | None = Query(default=None, max_length=100),
    db: Session = Depends(get_db),
) -> AutocompleteResult:
    return get_autocomplete(db, q, _split_csv(categories))


@router.get("/trending", response_model=list[str])
def trending(
    limit: int = Query(default=10, ge=1, le=50),
    db: Session = Depends(get_db),
) -> list[str]:
    return get_trending_searches(db, limit=limit)


@router.delete(
    "/cache",
    response_model=CacheClearResponse,
    dependencies=[Depends(verify_admin_api_key)],
)
def clear_search_cache(db: Session = Depends(get_db)) -> CacheClearResponse:
    """Clear all cached search, autocomplete and trending results."""
    count = clear_cache(db)
    return CacheClearResponse(message=f"Cleared {count} cached search results")
