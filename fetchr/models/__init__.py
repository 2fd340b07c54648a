"""
Models package for fetchr.

Exports all SQLAlchemy models for database operations.
"""

from .collection import Collection
from .request import Request
from .environment import Environment
from .history import History

__all__ = [
    "Collection",
    "Request",
    "Environment",
    "History",
]
