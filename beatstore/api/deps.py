from collections.abc import Generator

from fastapi import Header
from sqlalchemy.orm import Session

from beatstore.db.session import SessionLocal


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_optional_user_id(
    x_user_id: str | None = Header(default=None, max_length=36),
) -> str | None:
    """Caller identity forwarded by the upstream auth layer, if any.

    Only used to attribute search analytics; anonymous search is allowed.
    """
    if x_user_id is None:
        return None
    return x_user_id.strip() or None
