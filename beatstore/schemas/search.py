from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from beatstore.core.validation import normalize_single_line
from beatstore.models.beat import Beat
from beatstore.models.search_suggestion import SuggestionCategory


class CamelModel(BaseModel):
    """Wire models use camelCase keys; Python code uses snake_case."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SearchRequest(CamelModel):
    """Raw search criteria as received from a client.

    Only per-field type checks happen here. Cross-field rules (min <= max,
    known sort keys, limit clamping) are enforced by ``build_filters``.
    """

    query: str | None = Field(default=None, max_length=200)
    genre: str | None = Field(default=None, max_length=50)
    mood: str | None = Field(default=None, max_length=50)
    key: str | None = Field(default=None, max_length=10)
    bpm_min: int | None = None
    bpm_max: int | None = None
    price_min: Decimal | None = None
    price_max: Decimal | None = None
    duration_min: int | None = None
    duration_max: int | None = None
    tags: list[str] | None = None
    is_free: bool | None = None
    is_exclusive: bool | None = None
    producer_id: str | None = Field(default=None, max_length=36)
    sort_by: str | None = None
    limit: int | None = None
    offset: int | None = None


class BeatOut(CamelModel):
    id: str
    title: str
    description: str | None = None
    producer_id: str
    producer_name: str | None = None
    price: Decimal
    bpm: int
    key: str
    genre: str
    mood: str
    tags: list[str] = []
    duration: int | None = None
    play_count: int = 0
    like_count: int = 0
    is_exclusive: bool = False
    is_free: bool = False
    created_at: datetime

    @classmethod
    def from_beat(cls, beat: Beat) -> "BeatOut":
        return cls(
            id=beat.id,
            title=beat.title,
            description=beat.description,
            producer_id=beat.producer_id,
            producer_name=beat.producer.display_name if beat.producer else None,
            price=beat.price,
            bpm=beat.bpm,
            key=beat.key,
            genre=beat.genre,
            mood=beat.mood,
            tags=beat.tags,
            duration=beat.duration,
            play_count=beat.play_count or 0,
            like_count=beat.like_count or 0,
            is_exclusive=bool(beat.is_exclusive),
            is_free=bool(beat.is_free),
            created_at=beat.created_at,
        )


class FacetValue(CamelModel):
    value: str
    count: int


class FacetRange(CamelModel):
    range: str
    count: int


class SearchFacets(CamelModel):
    genres: list[FacetValue] = []
    moods: list[FacetValue] = []
    keys: list[FacetValue] = []
    bpm_ranges: list[FacetRange] = []
    price_ranges: list[FacetRange] = []


class SearchResult(CamelModel):
    beats: list[BeatOut]
    total_count: int
    facets: SearchFacets
    suggestions: list[str] = []
    search_time: int = 0  # milliseconds


class AutocompleteResult(CamelModel):
    beats: list[str] = []
    producers: list[str] = []
    genres: list[str] = []
    tags: list[str] = []


class SuggestionClick(CamelModel):
    query: str = Field(..., min_length=2, max_length=255)
    category: SuggestionCategory = SuggestionCategory.BEAT
    result_count: int | None = Field(default=None, ge=0)

    @field_validator("query")
    @classmethod
    def normalize_query_text(cls, v: str) -> str:
        normalized = normalize_single_line(v)
        return normalized if normalized else v


class SuggestionClickResponse(CamelModel):
    query: str
    category: str
    popularity: int
