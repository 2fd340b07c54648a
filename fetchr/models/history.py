"""
History model for storing executed request records.

History is append-only and has no foreign key to saved requests; entries
outlive the request they came from.
"""

from datetime import datetime

from sqlalchemy import String, Text, Integer
from sqlalchemy.orm import Mapped, mapped_column

from ..database import Base


class History(Base):
    """
    SQLAlchemy model for request execution history.

    Attributes:
        id: Opaque string identifier (uuid4)
        method: HTTP method used
        url: Target URL as written in the draft
        status: HTTP response status code
        response_time: Request execution time in milliseconds
        created_at: Timestamp when the request was executed
    """
    __tablename__ = "history"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    method: Mapped[str] = mapped_column(String(10))
    url: Mapped[str] = mapped_column(Text)
    status: Mapped[int] = mapped_column(Integer)
    response_time: Mapped[int] = mapped_column(Integer)
    created_at: Mapped[datetime] = mapped_column(default=datetime.utcnow)
