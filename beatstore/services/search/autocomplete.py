"""Prefix autocomplete across beat titles, producers, genres and tags."""

from sqlalchemy import or_
from sqlalchemy.orm import Session

from beatstore.core.config import get_settings
from beatstore.core.validation import LIKE_ESCAPE_CHAR, escape_like, normalize_query
from beatstore.models.beat import Beat, BeatTag
from beatstore.models.user import User, UserRole
from beatstore.schemas.search import AutocompleteResult
from beatstore.services.search.cache import get_cached, set_cached
from beatstore.services.search.suggestions import MIN_PARTIAL_LENGTH

AUTOCOMPLETE_CATEGORIES = ("beat", "producer", "genre", "tag")
DEFAULT_CATEGORIES = ("beat", "producer", "genre")
PER_CATEGORY_LIMIT = 5


def _prefix(column, text: str):
    return column.ilike(f"{escape_like(text)}%", escape=LIKE_ESCAPE_CHAR)


def _beat_titles(db: Session, text: str) -> list[str]:
    rows = (
        db.query(Beat.title)
        .filter(Beat.is_active.is_(True), _prefix(Beat.title, text))
        .order_by(Beat.play_count.desc(), Beat.title.asc())
        .limit(PER_CATEGORY_LIMIT)
        .all()
    )
    return [row.title for row in rows]


def _producers(db: Session, text: str) -> list[str]:
    producers = (
        db.query(User)
        .filter(
            User.role != UserRole.ARTIST.value,
            or_(
                _prefix(User.username, text),
                _prefix(User.first_name, text),
                _prefix(User.last_name, text),
            ),
        )
        .order_by(User.username.asc())
        .limit(PER_CATEGORY_LIMIT)
        .all()
    )
    return [p.display_name for p in producers]


def _genres(db: Session, text: str) -> list[str]:
    rows = (
        db.query(Beat.genre)
        .filter(Beat.is_active.is_(True), _prefix(Beat.genre, text))
        .distinct()
        .order_by(Beat.genre.asc())
        .limit(PER_CATEGORY_LIMIT)
        .all()
    )
    return [row.genre for row in rows]


def _tags(db: Session, text: str) -> list[str]:
    rows = (
        db.query(BeatTag.tag)
        .join(Beat, Beat.id == BeatTag.beat_id)
        .filter(Beat.is_active.is_(True), _prefix(BeatTag.tag, text))
        .distinct()
        .order_by(BeatTag.tag.asc())
        .limit(PER_CATEGORY_LIMIT)
        .all()
    )
    return [row.tag for row in rows]


_LOOKUPS = {
    "beat": ("beats", _beat_titles),
    "producer": ("producers", _producers),
    "genre": ("genres", _genres),
    "tag": ("tags", _tags),
}


def get_autocomplete(
    db: Session,
    partial: str | None,
    categories: list[str] | None = None,
) -> AutocompleteResult:
    """Prefix matches per requested category; unknown categories are ignored."""
    text = normalize_query(partial)
    if text is None or len(text) < MIN_PARTIAL_LENGTH:
        return AutocompleteResult()

    wanted = [c for c in (categories or DEFAULT_CATEGORIES) if c in _LOOKUPS]
    ttl = get_settings().autocomplete_cache_seconds
    cache_key = f"autocomplete:{text.lower()}:{','.join(sorted(set(wanted)))}"
    if ttl > 0:
        cached = get_cached(db, cache_key)
        if cached is not None:
            return AutocompleteResult.model_validate(cached)

    values: dict[str, list[str]] = {}
    for category in wanted:
        field_name, lookup = _LOOKUPS[category]
        values[field_name] = lookup(db, text)

    result = AutocompleteResult(**values)
    set_cached(db, cache_key, result.model_dump(mode="json"), ttl)
    return result
