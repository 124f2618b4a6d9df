"""Read-through result cache backed by the search_cache table.

A plain key/value store with expiry timestamps. There is no eviction
policy beyond expiry, and every failure is swallowed: a broken cache
only costs a fresh query.
"""

import json
import logging
from datetime import timedelta
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from beatstore.core.time import utcnow
from beatstore.models.search_cache import SearchCache

logger = logging.getLogger(__name__)


def get_cached(db: Session, key: str) -> Any | None:
    """Return the decoded cached value, or None on miss, expiry or error."""
    try:
        cached = (
            db.query(SearchCache)
            .filter(SearchCache.cache_key == key, SearchCache.expires_at > utcnow())
            .first()
        )
    except SQLAlchemyError:
        db.rollback()
        logger.warning("Cache read failed for %s", key, exc_info=True)
        return None
    if cached is None:
        return None
    try:
        return json.loads(cached.results_json)
    except ValueError:
        logger.warning("Discarding undecodable cache entry %s", key)
        return None


def set_cached(db: Session, key: str, value: Any, ttl_seconds: int) -> bool:
    """Upsert a cache entry. Returns False when skipped or on failure."""
    if ttl_seconds <= 0:
        return False

    expires_at = utcnow() + timedelta(seconds=ttl_seconds)
    results_json = json.dumps(value)
    try:
        existing = db.query(SearchCache).filter(SearchCache.cache_key == key).first()
        if existing:
            existing.results_json = results_json
            existing.expires_at = expires_at
            existing.created_at = utcnow()
        else:
            db.add(SearchCache(cache_key=key, results_json=results_json, expires_at=expires_at))
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.warning("Cache write failed for %s", key, exc_info=True)
        return False
    return True


def clear_cache(db: Session) -> int:
    """Delete every cache entry, returning how many were removed."""
    count = db.query(SearchCache).delete()
    db.commit()
    return count
