from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.db import models


def get_record_entry(db: Session, key: str) -> Optional[models.RecordEntry]:
    return db.get(models.RecordEntry, key)


def set_record_value(db: Session, *, key: str, value: str) -> models.RecordEntry:
    entry = get_record_entry(db, key)
    if entry:
        entry.value = value
        db.flush()
        return entry

    entry = models.RecordEntry(key=key, value=value)
    db.add(entry)
    db.flush()
    return entry


def list_record_keys(db: Session, *, prefix: str, limit: Optional[int] = None) -> list[str]:
    stmt = (
        select(models.RecordEntry.key)
        .where(models.RecordEntry.key.startswith(f"{prefix}:", autoescape=True))
        .order_by(models.RecordEntry.key)
    )
    if limit is not None:
        stmt = stmt.limit(limit)
    return list(db.scalars(stmt))
