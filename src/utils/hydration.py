"""Hydration and write-back of the entity store.

On startup the controller loads every persisted collection concurrently and
seeds the entity store with whatever was found. Once hydrated, each change
to the store is written back to the durable store asynchronously, one whole
collection at a time.
"""

import asyncio
import logging
from enum import Enum
from typing import Any, Dict, FrozenSet, Iterable, Optional, Set, Tuple

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from config import ASSIGNMENTS_KEY, SESSION_USER_KEY, STATE_KEYS, SUBMISSIONS_KEY, USERS_KEY
from core.exceptions import NotHydratedError
from schemas.assignment import Assignment
from schemas.submission import Submission
from schemas.user import User
from utils.durable_store import DurableStore
from utils.entity_store import EntityStore

logger = logging.getLogger(__name__)

_SESSION_ADAPTER = TypeAdapter(Optional[User])

_RECORD_ADAPTERS: Dict[str, TypeAdapter] = {
    USERS_KEY: TypeAdapter(User),
    ASSIGNMENTS_KEY: TypeAdapter(Assignment),
    SUBMISSIONS_KEY: TypeAdapter(Submission),
}


def _validate(key: str, raw: Any) -> Tuple[Any, bool]:
    """Validate a persisted value, collections record by record.

    Args:
        key: Logical state key.
        raw: Value as read from the durable store.

    Returns:
        The validated value (None when nothing usable was found) and whether
        the persisted value was accepted in full.
    """
    if key == SESSION_USER_KEY:
        try:
            return _SESSION_ADAPTER.validate_python(raw), True
        except PydanticValidationError as e:
            logger.warning("Persisted session user is malformed, keeping default: %s", e)
            return None, False

    if not isinstance(raw, list):
        logger.warning("Persisted value for '%s' is not a list, keeping defaults", key)
        return None, False

    adapter = _RECORD_ADAPTERS[key]
    records = []
    for index, item in enumerate(raw):
        try:
            records.append(adapter.validate_python(item))
        except PydanticValidationError as e:
            logger.warning("Skipping malformed record %d of '%s': %s", index, key, e)
    return records, len(records) == len(raw)


class HydrationState(str, Enum):
    UNHYDRATED = "UNHYDRATED"
    HYDRATED = "HYDRATED"


class HydrationController:
    """Keeps an EntityStore and a DurableStore consistent across restarts.

    Write-backs are fire-and-forget: a single background writer drains the
    pending snapshots in order. Snapshots are taken when the change happens;
    a key changed several times before the writer gets to it is written
    once with its latest state. Keys changed by the same mutation are
    written in one transaction.
    """

    def __init__(self, store: EntityStore, durable: DurableStore):
        """Initialize HydrationController and subscribe to store changes.

        Args:
            store: The in-memory entity store.
            durable: The durable store adapter.
        """
        self.store = store
        self.durable = durable
        self.state = HydrationState.UNHYDRATED
        self._pending: Dict[str, Any] = {}
        self._writer: Optional[asyncio.Task] = None
        store.subscribe(self._on_change)

    @property
    def is_hydrated(self) -> bool:
        return self.state == HydrationState.HYDRATED

    def require_hydrated(self) -> None:
        """Raise NotHydratedError until hydration has completed."""
        if not self.is_hydrated:
            raise NotHydratedError()

    async def _load(self, key: str) -> Any:
        try:
            return await self.durable.load(key)
        except Exception as e:
            logger.warning("Reading '%s' failed, keeping defaults: %s", key, e)
            return None

    async def hydrate(self) -> None:
        """Load all persisted collections and mark the store ready.

        A key that is absent or unreadable keeps its in-memory default; it
        never prevents the other keys from loading. Malformed records are
        left out of the store, and a key that had any is not written back
        until the store changes it, so the durable copy stays intact.
        """
        if self.is_hydrated:
            return
        values = await asyncio.gather(*(self._load(key) for key in STATE_KEYS))

        preserved: Set[str] = set()
        for key, raw in zip(STATE_KEYS, values):
            if raw is None:
                logger.debug("No persisted value for '%s'", key)
                continue
            value, complete = _validate(key, raw)
            if not complete:
                preserved.add(key)
            if value is None:
                continue
            self.store.replace_collection(key, value)
            logger.info("Hydrated '%s'", key)

        self.state = HydrationState.HYDRATED
        logger.info("Hydration complete")
        if preserved:
            logger.warning(
                "Keeping persisted %s until changed", ", ".join(sorted(preserved))
            )
        write_back = [key for key in STATE_KEYS if key not in preserved]
        if write_back:
            self._schedule(write_back)

    def _on_change(self, keys: FrozenSet[str]) -> None:
        if not self.is_hydrated:
            return
        self._schedule(keys)

    def _schedule(self, keys: Iterable[str]) -> None:
        for key in keys:
            self._pending[key] = self.store.snapshot(key)

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # Called outside any event loop: write back synchronously
            asyncio.run(self._drain())
            return

        if self._writer is None or self._writer.done():
            self._writer = loop.create_task(self._drain())

    async def _drain(self) -> None:
        while self._pending:
            batch, self._pending = self._pending, {}
            try:
                await self.durable.save_many(batch)
            except Exception as e:
                logger.error("Write-back of %s failed: %s", ", ".join(batch), e)

    async def flush(self) -> None:
        """Wait until every scheduled write-back has been attempted."""
        while self._writer is not None and not self._writer.done():
            await self._writer
        if self._pending:
            await self._drain()
