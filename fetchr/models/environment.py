"""
Environment model for managing variable sets.

Environments contain variables that can be substituted into requests,
allowing the same request templates to work across different environments
(e.g., development, staging, production).
"""

from datetime import datetime

from sqlalchemy import String, Text, Boolean
from sqlalchemy.orm import Mapped, mapped_column

from ..database import Base


class Environment(Base):
    """
    SQLAlchemy model for environments.

    Only one environment can be active at a time for variable substitution;
    the environment service deactivates the others when one is saved active.

    Attributes:
        id: Opaque string identifier (uuid4)
        name: Human-readable name for the environment
        variables: JSON list of {key, value}, order preserved
        is_active: Whether this environment is currently active
        sort_order: Insertion position
        created_at: Timestamp when the environment was created
    """
    __tablename__ = "environments"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(255))
    variables: Mapped[str] = mapped_column(Text, default="[]")
    is_active: Mapped[bool] = mapped_column(Boolean, default=False)
    sort_order: Mapped[int] = mapped_column(default=0)
    created_at: Mapped[datetime] = mapped_column(default=datetime.utcnow)
