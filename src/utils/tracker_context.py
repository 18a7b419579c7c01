"""Wiring of the tracker components.

One TrackerContext owns the entity store and everything that reads or writes
it. The API server and the CLI each build one and pass it to their callers;
there is no module-level store.
"""

import logging
from pathlib import Path
from typing import Optional

from utils.auth_gate import AuthGate, CredentialVerifier, get_credential_verifier
from utils.durable_store import DurableStore
from utils.entity_store import EntityStore
from utils.hydration import HydrationController
from utils.submission_intake import SubmissionIntake

logger = logging.getLogger(__name__)


class TrackerContext:
    """Entity store plus its persistence, session and intake collaborators."""

    def __init__(
        self,
        store: Optional[EntityStore] = None,
        durable: Optional[DurableStore] = None,
        verifier: Optional[CredentialVerifier] = None,
        db_path: Optional[Path] = None,
    ):
        """Initialize TrackerContext.

        Args:
            store: Entity store with its pre-hydration defaults.
            durable: Durable store adapter. Defaults to SQLite at db_path.
            verifier: Credential verifier shared by login and account forms.
            db_path: SQLite file used when no adapter is given.
        """
        self.store = store or EntityStore()
        self.durable = durable or DurableStore(db_path)
        self.verifier = verifier or get_credential_verifier()
        self.hydration = HydrationController(self.store, self.durable)
        self.auth = AuthGate(self.store, self.verifier)
        self.intake = SubmissionIntake(self.store, self.verifier)

    async def start(self) -> None:
        await self.hydration.hydrate()

    async def stop(self) -> None:
        await self.hydration.flush()
        logger.info("Pending write-backs flushed")
