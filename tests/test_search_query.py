"""Tests for translating filters into catalog predicates and sort orders."""

from datetime import datetime, timedelta
from decimal import Decimal

from sqlalchemy.orm import Session

from beatstore.models.beat import Beat
from beatstore.schemas.search import SearchRequest
from beatstore.services.beat import deactivate_beat
from beatstore.services.search.filters import build_filters
from beatstore.services.search.query_builder import translate

BASE_TIME = datetime(2026, 1, 1, 12, 0, 0)


def _titles(db: Session, **kwargs) -> list[str]:
    translated = translate(build_filters(SearchRequest(**kwargs)))
    beats = db.query(Beat).filter(*translated.conditions).order_by(*translated.order_by).all()
    return [b.title for b in beats]


class TestPredicates:
    def test_inactive_beats_excluded(self, db, make_beat):
        make_beat(title="Visible")
        hidden = make_beat(title="Hidden")
        deactivate_beat(db, hidden)
        assert _titles(db) == ["Visible"]

    def test_absent_fields_impose_nothing(self, db, make_beat):
        make_beat(title="One", genre="Trap")
        make_beat(title="Two", genre="Drill")
        assert sorted(_titles(db)) == ["One", "Two"]

    def test_genre_mood_key_equality(self, db, make_beat):
        make_beat(title="Match", genre="Trap", mood="Dark", key="Cm")
        make_beat(title="Wrong mood", genre="Trap", mood="Happy", key="Cm")
        make_beat(title="Wrong key", genre="Trap", mood="Dark", key="F#m")
        assert _titles(db, genre="Trap", mood="Dark", key="Cm") == ["Match"]

    def test_bpm_range_is_inclusive(self, db, make_beat):
        for bpm in (79, 80, 100, 101):
            make_beat(title=f"bpm {bpm}", bpm=bpm)
        assert _titles(db, bpm_min=80, bpm_max=100, sort_by="bpm_low") == ["bpm 80", "bpm 100"]

    def test_duration_range(self, db, make_beat):
        make_beat(title="Short", duration=90)
        make_beat(title="Long", duration=240)
        make_beat(title="Unknown length")
        assert _titles(db, duration_min=120) == ["Long"]

    def test_free_beat_matches_zero_price_max(self, db, make_beat):
        """Free beats count as zero even when a stored price remains."""
        make_beat(title="Free with stale price", price="50.00", is_free=True)
        make_beat(title="Paid", price="20.00")
        assert _titles(db, price_max=Decimal("0")) == ["Free with stale price"]

    def test_free_beat_excluded_by_price_min(self, db, make_beat):
        make_beat(title="Free", price="50.00", is_free=True)
        make_beat(title="Paid", price="20.00")
        assert _titles(db, price_min=Decimal("10")) == ["Paid"]

    def test_tags_match_any(self, db, make_beat):
        make_beat(title="Trap beat", tags=["trap", "808"])
        make_beat(title="Lofi beat", tags=["lofi"])
        make_beat(title="Untagged")
        titles = _titles(db, tags=["TRAP", "lofi"], sort_by="bpm_low")
        assert sorted(titles) == ["Lofi beat", "Trap beat"]

    def test_flags(self, db, make_beat):
        make_beat(title="Exclusive", is_exclusive=True)
        make_beat(title="Lease")
        assert _titles(db, is_exclusive=True) == ["Exclusive"]
        assert _titles(db, is_exclusive=False) == ["Lease"]

    def test_producer_filter(self, db, make_beat, other_producer):
        make_beat(title="Mine")
        make_beat(title="Theirs", owner=other_producer)
        assert _titles(db, producer_id=other_producer.id) == ["Theirs"]


class TestTextQuery:
    def test_title_substring_case_insensitive(self, db, make_beat):
        make_beat(title="Midnight Drive")
        make_beat(title="Sunrise")
        assert _titles(db, query="NIGHT") == ["Midnight Drive"]

    def test_matches_tags(self, db, make_beat):
        make_beat(title="Untitled 1", tags=["cinematic"])
        make_beat(title="Untitled 2", tags=["boom bap"])
        assert _titles(db, query="cinema") == ["Untitled 1"]

    def test_matches_description(self, db, make_beat):
        make_beat(title="Untitled", description="Heavy 808s and eerie bells")
        assert _titles(db, query="eerie") == ["Untitled"]

    def test_matches_producer_username_and_full_name(self, db, make_beat, other_producer):
        make_beat(title="From Metro")
        make_beat(title="From Luna", owner=other_producer)
        assert _titles(db, query="metro booming") == ["From Metro"]
        assert _titles(db, query="lofiluna") == ["From Luna"]

    def test_every_token_must_match(self, db, make_beat):
        make_beat(title="Dark Piano", tags=["trap"])
        make_beat(title="Dark Guitar", tags=["rock"])
        assert _titles(db, query="dark trap") == ["Dark Piano"]

    def test_wildcards_are_literal(self, db, make_beat):
        make_beat(title="100% Vibes")
        make_beat(title="1000 Vibes")
        assert _titles(db, query="100%") == ["100% Vibes"]
        assert _titles(db, query="0_v") == []


class TestOrdering:
    def test_bpm_low_and_high(self, db, make_beat):
        for bpm in (95, 85, 90):
            make_beat(title=f"bpm {bpm}", bpm=bpm)
        assert _titles(db, sort_by="bpm_low") == ["bpm 85", "bpm 90", "bpm 95"]
        assert _titles(db, sort_by="bpm_high") == ["bpm 95", "bpm 90", "bpm 85"]

    def test_price_low_uses_effective_price(self, db, make_beat):
        make_beat(title="Cheap", price="5.00")
        make_beat(title="Free", price="99.00", is_free=True)
        make_beat(title="Pricey", price="60.00")
        assert _titles(db, sort_by="price_low") == ["Free", "Cheap", "Pricey"]
        assert _titles(db, sort_by="price_high") == ["Pricey", "Cheap", "Free"]

    def test_newest_and_oldest(self, db, make_beat):
        make_beat(title="Old", created_at=BASE_TIME)
        make_beat(title="New", created_at=BASE_TIME + timedelta(days=2))
        make_beat(title="Mid", created_at=BASE_TIME + timedelta(days=1))
        assert _titles(db, sort_by="newest") == ["New", "Mid", "Old"]
        assert _titles(db, sort_by="oldest") == ["Old", "Mid", "New"]

    def test_popular_uses_plays_then_likes(self, db, make_beat):
        make_beat(title="Liked", play_count=10, like_count=50)
        make_beat(title="Played", play_count=100, like_count=0)
        make_beat(title="Less liked", play_count=10, like_count=5)
        assert _titles(db, sort_by="popular") == ["Played", "Liked", "Less liked"]

    def test_ties_broken_by_created_at_then_id(self, db, make_beat):
        beats = [make_beat(title=f"Tie {i}", bpm=90, created_at=BASE_TIME) for i in range(4)]
        newer = make_beat(title="Newer tie", bpm=90, created_at=BASE_TIME + timedelta(hours=1))

        titles = _titles(db, sort_by="bpm_low")
        expected_rest = [b.title for b in sorted(beats, key=lambda b: b.id)]
        assert titles == [newer.title, *expected_rest]

    def test_relevance_prefers_title_matches(self, db, make_beat):
        make_beat(title="Plain", tags=["ocean"], play_count=1000)
        make_beat(title="Ocean Eyes", play_count=1)
        assert _titles(db, query="ocean") == ["Ocean Eyes", "Plain"]

    def test_relevance_without_query_is_popularity(self, db, make_beat):
        make_beat(title="Quiet", play_count=1)
        make_beat(title="Loud", play_count=500)
        assert _titles(db) == ["Loud", "Quiet"]
