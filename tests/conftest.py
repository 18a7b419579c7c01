from datetime import datetime, timedelta

import pytest
import pytz

from schemas.assignment import SubmissionFile
from schemas.common import Section, UserRole
from utils.durable_store import DurableStore
from utils.entity_store import EntityStore
from utils.tracker_context import TrackerContext


class MemoryDurableStore:
    """In-memory stand-in for DurableStore with optional failing keys."""

    def __init__(self, values=None, failing_keys=()):
        self.values = dict(values or {})
        self.failing_keys = set(failing_keys)
        self.batches = []

    async def load(self, key):
        if key in self.failing_keys:
            raise OSError(f"cannot read {key}")
        return self.values.get(key)

    async def save(self, key, value):
        await self.save_many({key: value})

    async def save_many(self, values):
        self.batches.append(dict(values))
        self.values.update(values)


@pytest.fixture
def memory_durable():
    return MemoryDurableStore()


@pytest.fixture
def durable(tmp_path):
    return DurableStore(db_path=tmp_path / "state.db")


@pytest.fixture
def store():
    return EntityStore()


@pytest.fixture
def seeded_store():
    store = EntityStore()
    store.add_user({"name": "Ada Admin", "username": "ada_admin", "password": "root", "role": UserRole.ADMIN})
    store.add_user(
        {
            "name": "Tom Teacher",
            "username": "tom_teacher",
            "password": "chalk",
            "role": UserRole.TEACHER,
            "section": Section.EINSTEIN_G11,
            "subject": "Physics",
        }
    )
    store.add_user(
        {
            "name": "Jane Doe",
            "username": "jane_doe",
            "password": "secret",
            "role": UserRole.STUDENT,
            "section": Section.EINSTEIN_G11,
        }
    )
    store.add_user(
        {
            "name": "John Roe",
            "username": "john_roe",
            "password": "hunter2",
            "role": UserRole.STUDENT,
            "section": Section.EINSTEIN_G11,
        }
    )
    store.add_user(
        {
            "name": "Gina Galilei",
            "username": "gina_galilei",
            "password": "stars",
            "role": UserRole.STUDENT,
            "section": Section.GALILEI_G12,
        }
    )
    return store


@pytest.fixture
def memory_context(seeded_store, memory_durable):
    return TrackerContext(store=seeded_store, durable=memory_durable)


@pytest.fixture
def pdf_file():
    return SubmissionFile(name="essay.pdf", type="application/pdf", data="data:application/pdf;base64,JVBERi0=")


@pytest.fixture
def now():
    return datetime(2025, 3, 1, 12, 0, tzinfo=pytz.utc)


@pytest.fixture
def future_due(now):
    return (now + timedelta(days=7)).isoformat()


@pytest.fixture
def past_due(now):
    return (now - timedelta(days=1)).isoformat()


@pytest.fixture
def user_named():
    def find(store, name):
        return next(u for u in store.users if u.name == name)

    return find
