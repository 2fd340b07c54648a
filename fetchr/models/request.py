"""
Request model for storing saved HTTP request configurations.

Headers and auth data are stored as serialized JSON text, exactly as the
client sends them; malformed values are read back as empty.
"""

from datetime import datetime

from sqlalchemy import String, Text, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from ..database import Base


class Request(Base):
    """
    SQLAlchemy model for HTTP request configurations.

    Attributes:
        id: Opaque string identifier (uuid4)
        collection_id: Owning collection node
        name: Human-readable name for the request
        method: HTTP method
        url: Target URL, may contain {{variable}} placeholders
        headers: JSON list of {key, value, enabled}
        body: Request body content
        body_type: none, json, form or raw
        auth_type: none, basic, bearer or apikey
        auth_data: JSON object with the auth fields
        sort_order: Insertion position within the collection
        created_at: Timestamp when the request was first saved
        updated_at: Timestamp when the request was last saved
    """
    __tablename__ = "requests"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    collection_id: Mapped[str] = mapped_column(
        ForeignKey("collections.id", ondelete="CASCADE")
    )
    name: Mapped[str] = mapped_column(String(255))
    method: Mapped[str] = mapped_column(String(10))
    url: Mapped[str] = mapped_column(Text)
    headers: Mapped[str] = mapped_column(Text, default="[]")
    body: Mapped[str] = mapped_column(Text, default="")
    body_type: Mapped[str] = mapped_column(String(20), default="none")
    auth_type: Mapped[str] = mapped_column(String(20), default="none")
    auth_data: Mapped[str] = mapped_column(Text, default="{}")
    sort_order: Mapped[int] = mapped_column(default=0)
    created_at: Mapped[datetime] = mapped_column(default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(default=datetime.utcnow, onupdate=datetime.utcnow)
