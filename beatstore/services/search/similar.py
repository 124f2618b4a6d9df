"""'More like this' lookup for a reference beat."""

from sqlalchemy import and_, case, or_, select
from sqlalchemy.orm import Session, selectinload

from beatstore.models.beat import Beat, BeatTag

BPM_WINDOW = 10
DEFAULT_SIMILAR_LIMIT = 10


def find_similar_beats(
    db: Session, reference: Beat, limit: int = DEFAULT_SIMILAR_LIMIT
) -> list[Beat]:
    """Active beats sharing genre, mood, a nearby BPM or any tag with ``reference``.

    Same-genre beats come first, then same-mood, then the rest; each group
    is ordered by play count.
    """
    criteria = [
        Beat.genre == reference.genre,
        Beat.mood == reference.mood,
        and_(
            Beat.bpm >= reference.bpm - BPM_WINDOW,
            Beat.bpm <= reference.bpm + BPM_WINDOW,
        ),
    ]
    if reference.tags:
        criteria.append(
            select(BeatTag.id)
            .where(BeatTag.beat_id == Beat.id, BeatTag.tag.in_(reference.tags))
            .exists()
        )

    closeness = case(
        (Beat.genre == reference.genre, 1),
        (Beat.mood == reference.mood, 2),
        else_=3,
    )
    return (
        db.query(Beat)
        .options(selectinload(Beat.producer))
        .filter(Beat.is_active.is_(True), Beat.id != reference.id, or_(*criteria))
        .order_by(closeness, Beat.play_count.desc(), Beat.created_at.desc(), Beat.id.asc())
        .limit(limit)
        .all()
    )
