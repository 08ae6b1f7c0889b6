from datetime import datetime, timezone
import pytest
from quicknotes.repository import NoteRepository
from quicknotes.stores.memory import MemoryStore


FIXED_TIME = datetime(2012, 5, 2, 3, 4, 5, tzinfo=timezone.utc)


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def repo(store):
    return NoteRepository(store, clock=lambda: FIXED_TIME)
