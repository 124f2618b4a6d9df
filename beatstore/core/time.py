"""UTC clock helpers.

Catalog timestamps are stored as **naive** UTC datetimes so the same columns
work on SQLite (tests) and PostgreSQL without ``timezone=True``.
"""

import time
from datetime import UTC, datetime


def utcnow() -> datetime:
    """Return the current UTC time as a naive datetime."""
    return datetime.now(UTC).replace(tzinfo=None)


def elapsed_ms(started: float) -> int:
    """Milliseconds since a ``time.perf_counter()`` reading."""
    return int((time.perf_counter() - started) * 1000)
