"""
Pydantic schemas for request execution history.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class HistoryEntry(BaseModel):
    """Schema for one append-only history record."""
    id: str
    method: str
    url: str
    status: int
    response_time: int
    created_at: datetime = Field(default_factory=datetime.utcnow)

    model_config = ConfigDict(from_attributes=True)
