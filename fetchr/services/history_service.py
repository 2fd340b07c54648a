"""
History service for request execution records.

History is append-only; entries are listed newest first.
"""

from sqlalchemy import literal_column
from sqlalchemy.orm import Session

from ..models.history import History
from ..schemas.history import HistoryEntry


def save_history(db: Session, entry: HistoryEntry) -> HistoryEntry:
    """
    Append an entry to history.

    Args:
        db: Database session
        entry: The entry to append

    Returns:
        The stored entry
    """
    history = History(
        id=entry.id,
        method=entry.method,
        url=entry.url,
        status=entry.status,
        response_time=entry.response_time,
        created_at=entry.created_at,
    )
    db.add(history)
    db.commit()
    db.refresh(history)
    return HistoryEntry.model_validate(history)


def list_history(db: Session, limit: int = 50) -> list[HistoryEntry]:
    rows = (
        db.query(History)
        .order_by(History.created_at.desc(), literal_column("rowid").desc())
        .limit(limit)
        .all()
    )
    return [HistoryEntry.model_validate(row) for row in rows]


def clear_history(db: Session) -> None:
    db.query(History).delete()
    db.commit()
