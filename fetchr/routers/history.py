"""
History record API routes.

Provides endpoints for appending, viewing and clearing request execution
history. Records are appended by the client after each completed send.
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ..config import DEFAULT_HISTORY_LIMIT
from ..database import get_db
from ..schemas.history import HistoryEntry
from ..services import history_service


router = APIRouter(prefix="/api/history", tags=["history"])


@router.get("", response_model=list[HistoryEntry])
def list_history(
    limit: int = Query(DEFAULT_HISTORY_LIMIT, ge=1),
    db: Session = Depends(get_db)
):
    """
    Get history records ordered by execution time (descending).

    Args:
        limit: Maximum number of records to return
        db: Database session
    """
    return history_service.list_history(db, limit)


@router.post("", response_model=HistoryEntry, status_code=status.HTTP_201_CREATED)
def add_history(entry: HistoryEntry, db: Session = Depends(get_db)):
    return history_service.save_history(db, entry)


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
def clear_all_history(db: Session = Depends(get_db)):
    """Clear all history records."""
    history_service.clear_history(db)
    return None
