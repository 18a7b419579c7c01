"""Durable state entry database model.

Each row holds one whole collection (or the session user) as JSON under a
prefixed key.
"""

from sqlalchemy import JSON, Column, String

from .base import Base


class StateEntryModel(Base):
    """Key-value row of the durable store."""

    __tablename__ = "state_entries"

    key = Column(String, primary_key=True, index=True)
    value = Column(JSON, nullable=True)
    update_at = Column(String, nullable=False)  # ISO format string
