"""Tests for search criteria validation."""

from decimal import Decimal

import pytest

from beatstore.schemas.search import SearchRequest
from beatstore.services.search.filters import (
    MAX_BPM,
    MAX_DURATION,
    MAX_OFFSET,
    InvalidFilter,
    Range,
    SortBy,
    build_filters,
)


def _build(**kwargs):
    return build_filters(SearchRequest(**kwargs))


class TestDefaults:
    def test_empty_request(self):
        filters = _build()
        assert filters.query is None
        assert filters.sort_by is SortBy.RELEVANCE
        assert filters.limit == 20
        assert filters.offset == 0
        assert filters.bpm == Range()
        assert filters.bpm.is_open
        assert filters.tags == ()
        assert filters.is_free is None

    def test_explicit_false_is_kept(self):
        """An explicit False flag is a constraint, not an absent one."""
        filters = _build(is_free=False, is_exclusive=False)
        assert filters.is_free is False
        assert filters.is_exclusive is False

    def test_zero_bound_is_kept(self):
        filters = _build(price_max=Decimal("0"))
        assert filters.price.maximum == Decimal("0")
        assert not filters.price.is_open


class TestRanges:
    def test_bpm_min_greater_than_max_rejected(self):
        with pytest.raises(InvalidFilter) as exc_info:
            _build(bpm_min=150, bpm_max=100)
        assert exc_info.value.field == "bpmMin"

    def test_price_min_greater_than_max_rejected(self):
        with pytest.raises(InvalidFilter) as exc_info:
            _build(price_min=Decimal("50"), price_max=Decimal("10"))
        assert exc_info.value.field == "priceMin"

    def test_duration_min_greater_than_max_rejected(self):
        with pytest.raises(InvalidFilter) as exc_info:
            _build(duration_min=300, duration_max=120)
        assert exc_info.value.field == "durationMin"

    def test_equal_bounds_allowed(self):
        filters = _build(bpm_min=90, bpm_max=90)
        assert filters.bpm == Range(90, 90)

    def test_non_positive_bpm_rejected(self):
        with pytest.raises(InvalidFilter) as exc_info:
            _build(bpm_max=0)
        assert exc_info.value.field == "bpmMax"

    def test_negative_price_rejected(self):
        with pytest.raises(InvalidFilter) as exc_info:
            _build(price_min=Decimal("-1"))
        assert exc_info.value.field == "priceMin"

    def test_negative_duration_rejected(self):
        with pytest.raises(InvalidFilter):
            _build(duration_min=-5)

    def test_huge_bpm_rejected(self):
        with pytest.raises(InvalidFilter) as exc_info:
            _build(bpm_max=10**20)
        assert exc_info.value.field == "bpmMax"

    def test_bpm_at_ceiling_allowed(self):
        assert _build(bpm_min=MAX_BPM).bpm.minimum == MAX_BPM

    def test_huge_duration_rejected(self):
        with pytest.raises(InvalidFilter) as exc_info:
            _build(duration_min=MAX_DURATION + 1)
        assert exc_info.value.field == "durationMin"

    def test_huge_price_rejected(self):
        with pytest.raises(InvalidFilter) as exc_info:
            _build(price_max=Decimal("1e12"))
        assert exc_info.value.field == "priceMax"


class TestSortAndPagination:
    def test_unknown_sort_rejected(self):
        with pytest.raises(InvalidFilter) as exc_info:
            _build(sort_by="loudest")
        assert exc_info.value.field == "sortBy"
        assert "loudest" in exc_info.value.message

    @pytest.mark.parametrize("value", ["bpm_low", "BPM_LOW", " bpm_low "])
    def test_sort_is_case_insensitive(self, value):
        assert _build(sort_by=value).sort_by is SortBy.BPM_LOW

    def test_limit_clamped_to_maximum(self):
        assert _build(limit=500).limit == 100

    def test_custom_limits(self):
        filters = build_filters(SearchRequest(), default_limit=5, max_limit=10)
        assert filters.limit == 5
        assert build_filters(SearchRequest(limit=50), max_limit=10).limit == 10

    def test_zero_limit_rejected(self):
        with pytest.raises(InvalidFilter) as exc_info:
            _build(limit=0)
        assert exc_info.value.field == "limit"

    def test_negative_offset_rejected(self):
        with pytest.raises(InvalidFilter) as exc_info:
            _build(offset=-1)
        assert exc_info.value.field == "offset"

    def test_huge_offset_rejected(self):
        with pytest.raises(InvalidFilter) as exc_info:
            _build(offset=10**20)
        assert exc_info.value.field == "offset"
        assert _build(offset=MAX_OFFSET).offset == MAX_OFFSET


class TestNormalization:
    def test_query_whitespace_collapsed(self):
        assert _build(query="  dark   trap \n").query == "dark trap"

    def test_blank_query_is_absent(self):
        assert _build(query="   ").query is None

    def test_tags_lowercased_and_deduplicated(self):
        filters = _build(tags=["Trap", "trap", " Dark ", ""])
        assert filters.tags == ("trap", "dark")

    def test_blank_genre_is_absent(self):
        assert _build(genre="  ").genre is None

    def test_too_many_tags_rejected(self):
        with pytest.raises(InvalidFilter) as exc_info:
            _build(tags=[f"tag{i}" for i in range(25)])
        assert exc_info.value.field == "tags"


class TestCacheKey:
    def test_equivalent_prices_share_key(self):
        a = _build(price_max=Decimal("10"))
        b = _build(price_max=Decimal("10.00"))
        assert a.cache_key() == b.cache_key()

    def test_different_filters_differ(self):
        assert _build(offset=0).cache_key() != _build(offset=20).cache_key()

    def test_to_dict_is_json_safe(self):
        data = _build(price_min=Decimal("1.50"), tags=["trap"]).to_dict()
        assert data["priceMin"] == "1.5"
        assert data["tags"] == ["trap"]
        assert data["sortBy"] == "relevance"
