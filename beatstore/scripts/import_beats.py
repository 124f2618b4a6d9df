"""Script to load beats into the catalog from a JSON file.

The file holds a list of objects with ``producer`` (username) plus the beat
fields accepted by ``create_beat``. Missing producers are created.
"""

import argparse
import json
import sys
from pathlib import Path

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from beatstore.db.session import SessionLocal
from beatstore.models.user import User, UserRole
from beatstore.services.beat import InvalidBeatError, create_beat

BEAT_FIELDS = {
    "title",
    "bpm",
    "key",
    "genre",
    "mood",
    "price",
    "tags",
    "description",
    "duration",
    "is_free",
    "is_exclusive",
}


def _get_or_create_producer(db: Session, username: str) -> User:
    producer = db.query(User).filter(User.username == username).first()
    if producer is None:
        producer = User(username=username, role=UserRole.PRODUCER.value)
        db.add(producer)
        db.commit()
        db.refresh(producer)
    return producer


def import_catalog(db: Session, records: list[dict]) -> tuple[int, list[str]]:
    """Create beats from records. Returns (created count, error messages)."""
    created = 0
    errors: list[str] = []
    for index, record in enumerate(records):
        username = record.get("producer")
        if not username:
            errors.append(f"record {index}: missing producer")
            continue
        fields = {k: v for k, v in record.items() if k in BEAT_FIELDS}
        try:
            create_beat(db, _get_or_create_producer(db, username), **fields)
        except (InvalidBeatError, TypeError, SQLAlchemyError) as e:
            db.rollback()
            errors.append(f"record {index}: {e}")
            continue
        created += 1
    return created, errors


def main():
    parser = argparse.ArgumentParser(description="Import beats into the catalog")
    parser.add_argument("path", type=Path, help="JSON file with a list of beats")
    args = parser.parse_args()

    records = json.loads(args.path.read_text())
    if not isinstance(records, list):
        print("Expected a JSON list of beats.", file=sys.stderr)
        sys.exit(1)

    db = SessionLocal()
    try:
        created, errors = import_catalog(db, records)
    finally:
        db.close()

    print(f"Imported {created} beat(s)")
    for error in errors:
        print(f"Skipped {error}", file=sys.stderr)
    if errors:
        sys.exit(1)


if __name__ == "__main__":
    main()
