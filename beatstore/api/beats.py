from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from beatstore.api.deps import get_db
from beatstore.schemas.search import BeatOut
from beatstore.services.beat import get_beat
from beatstore.services.search.similar import find_similar_beats

router = APIRouter()


@router.get("/{beat_id}", response_model=BeatOut)
def read_beat(beat_id: str, db: Session = Depends(get_db)) -> BeatOut:
    beat = get_beat(db, beat_id)
    if not beat:
        raise HTTPException(status_code=404, detail="Beat not found")
    return BeatOut.from_beat(beat)


@router.get("/{beat_id}/similar", response_model=list[BeatOut])
def similar_beats(
    beat_id: str,
    limit: int = Query(default=10, ge=1, le=50),
    db: Session = Depends(get_db),
) -> list[BeatOut]:
    """Beats close to the given one by genre, mood, BPM or tags."""
    beat = get_beat(db, beat_id)
    if not beat:
        raise HTTPException(status_code=404, detail="Beat not found")
    return [BeatOut.from_beat(b) for b in find_similar_beats(db, beat, limit=limit)]
