"""Durable store adapter.

Asynchronous key-value access to the local SQLite store. Reads never raise:
a missing key or a failed read yields ``None``. Writes are fire-and-forget
from the caller's point of view: failures are logged, never raised.
"""

import asyncio
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Mapping, Optional

import pytz
from sqlalchemy.orm import sessionmaker

from config import durable_key
from core.database import get_session_factory
from models.state_entry import StateEntryModel

logger = logging.getLogger(__name__)


class DurableStore:
    """Persists whole collections as JSON rows using SQLAlchemy."""

    def __init__(
        self,
        db_path: Optional[Path] = None,
        session_factory: Optional[sessionmaker] = None,
    ):
        """Initialize DurableStore.

        Args:
            db_path: SQLite file to use. Defaults to STATE_DB_PATH.
            session_factory: Prebuilt sessionmaker, overrides db_path.
        """
        self._session_factory = session_factory or get_session_factory(db_path)

    def _read(self, key: str) -> Any:
        with self._session_factory() as db:
            model = (
                db.query(StateEntryModel)
                .filter(StateEntryModel.key == durable_key(key))
                .first()
            )
            return model.value if model else None

    def _write(self, values: Mapping[str, Any]) -> None:
        now = datetime.now(pytz.utc).isoformat()
        with self._session_factory() as db:
            try:
                for key, value in values.items():
                    db.merge(
                        StateEntryModel(key=durable_key(key), value=value, update_at=now)
                    )
                db.commit()
            except Exception:
                db.rollback()
                raise

    async def load(self, key: str) -> Any:
        """Load the value stored under a logical key.

        Args:
            key: Logical key, e.g. "users".

        Returns:
            The stored JSON value, or None when absent or unreadable.
        """
        try:
            return await asyncio.to_thread(self._read, key)
        except Exception as e:
            logger.error("Failed to load '%s' from durable store: %s", key, e)
            return None

    async def save(self, key: str, value: Any) -> None:
        """Store a value under a logical key, replacing the previous one."""
        await self.save_many({key: value})

    async def save_many(self, values: Mapping[str, Any]) -> None:
        """Store several keys in one transaction.

        Either every key is written or none is.
        """
        if not values:
            return
        try:
            await asyncio.to_thread(self._write, dict(values))
            logger.debug("Persisted keys: %s", ", ".join(values))
        except Exception as e:
            logger.error(
                "Failed to persist %s to durable store: %s", ", ".join(values), e
            )
