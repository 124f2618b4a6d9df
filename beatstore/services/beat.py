"""Catalog maintenance: create, look up and soft-deactivate beats."""

import logging
from decimal import Decimal, InvalidOperation

from sqlalchemy.orm import Session, selectinload

from beatstore.core.time import utcnow
from beatstore.core.validation import normalize_single_line, normalize_tag, validate_length
from beatstore.models.beat import Beat, BeatTag
from beatstore.models.user import User

logger = logging.getLogger(__name__)

MAX_TAG_LENGTH = 50


class InvalidBeatError(ValueError):
    """Raised when beat attributes break catalog invariants."""


def create_beat(
    db: Session,
    producer: User,
    title: str,
    bpm: int,
    key: str,
    genre: str,
    mood: str,
    price: Decimal | int | str = Decimal("0"),
    tags: list[str] | None = None,
    description: str | None = None,
    duration: int | None = None,
    is_free: bool = False,
    is_exclusive: bool = False,
) -> Beat:
    """Add a beat to the catalog owned by ``producer``."""
    try:
        price = Decimal(str(price))
    except InvalidOperation:
        raise InvalidBeatError(f"price must be a number, got {price!r}") from None
    if not price.is_finite():
        raise InvalidBeatError("price must be a finite number")
    if price < 0:
        raise InvalidBeatError("price cannot be negative")
    if bpm <= 0:
        raise InvalidBeatError("bpm must be a positive integer")
    if duration is not None and duration < 0:
        raise InvalidBeatError("duration cannot be negative")
    title = normalize_single_line(title) or ""
    if not validate_length(title, min_len=1, max_len=255):
        raise InvalidBeatError("title must be 1-255 characters")
    for name, value in (("key", key), ("genre", genre), ("mood", mood)):
        if not isinstance(value, str) or not value.strip():
            raise InvalidBeatError(f"{name} is required")
    clean_tags = list(dict.fromkeys(t for t in (normalize_tag(t) for t in tags or []) if t))
    if any(not validate_length(t, max_len=MAX_TAG_LENGTH) for t in clean_tags):
        raise InvalidBeatError(f"tags must be at most {MAX_TAG_LENGTH} characters")

    beat = Beat(
        title=title,
        description=description,
        producer_id=producer.id,
        price=price,
        bpm=bpm,
        key=key,
        genre=genre,
        mood=mood,
        duration=duration,
        is_free=is_free,
        is_exclusive=is_exclusive,
    )
    for tag in clean_tags:
        beat.tag_rows.append(BeatTag(tag=tag))
    db.add(beat)
    db.commit()
    db.refresh(beat)
    logger.info("Beat %s created by producer %s", beat.id, producer.id)
    return beat


def get_beat(db: Session, beat_id: str, include_inactive: bool = False) -> Beat | None:
    query = db.query(Beat).options(selectinload(Beat.producer)).filter(Beat.id == beat_id)
    if not include_inactive:
        query = query.filter(Beat.is_active.is_(True))
    return query.first()


def deactivate_beat(db: Session, beat: Beat) -> Beat:
    """Hide a beat from search. Rows are kept for purchases and likes."""
    beat.is_active = False
    beat.updated_at = utcnow()
    db.commit()
    db.refresh(beat)
    return beat


def record_play(db: Session, beat: Beat) -> Beat:
    beat.play_count = (beat.play_count or 0) + 1
    db.commit()
    db.refresh(beat)
    return beat
