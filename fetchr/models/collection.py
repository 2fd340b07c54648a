"""
Collection model for organizing requests.

A collection row is either a folder (``is_folder=True``) that can hold
sub-collections, or a leaf container. Both kinds can own saved requests.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import String, Boolean, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from ..database import Base


class Collection(Base):
    """
    SQLAlchemy model for collection nodes.

    Deleting a collection cascades to all nested collections and to the
    requests they own (enforced by SQLite foreign keys).

    Attributes:
        id: Opaque string identifier (uuid4)
        name: Human-readable name
        parent_id: Optional reference to the parent collection
        is_folder: Whether the node renders as a folder in the tree
        sort_order: Insertion position, keeps listings stable
        created_at: Timestamp when the node was created
    """
    __tablename__ = "collections"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(255))
    parent_id: Mapped[Optional[str]] = mapped_column(
        ForeignKey("collections.id", ondelete="CASCADE"),
        nullable=True
    )
    is_folder: Mapped[bool] = mapped_column(Boolean, default=False)
    sort_order: Mapped[int] = mapped_column(default=0)
    created_at: Mapped[datetime] = mapped_column(default=datetime.utcnow)
