"""
Pytest configuration and fixtures.
"""

import pytest

from journey_canvas.events import EventBus
from journey_canvas.persistence import MemoryPersistenceService, SQLitePersistenceService
from journey_canvas.session import CanvasSession


# Configure pytest-asyncio
pytest_plugins = ('pytest_asyncio',)


# Short enough to keep the suite fast, long enough to batch a burst of events
TEST_AUTOSAVE_DELAY = 0.2


@pytest.fixture
def anyio_backend():
    return 'asyncio'


@pytest.fixture
async def memory_persistence():
    """In-memory persistence service."""
    backend = MemoryPersistenceService()
    await backend.initialize()
    yield backend
    await backend.close()


@pytest.fixture
async def sqlite_persistence(tmp_path):
    """Create a temporary SQLite persistence service."""
    db_path = tmp_path / "test.db"
    backend = SQLitePersistenceService(str(db_path))
    await backend.initialize()
    yield backend
    await backend.close()


@pytest.fixture
def event_log():
    """An event bus plus the list of every event it has carried."""
    bus = EventBus()
    events = []
    bus.subscribe_all(events.append)
    return bus, events


@pytest.fixture
async def session(memory_persistence, event_log):
    """A loaded canvas session on an empty document with a short autosave delay."""
    bus, _ = event_log
    canvas = CanvasSession(
        memory_persistence,
        "doc-1",
        event_bus=bus,
        autosave_delay=TEST_AUTOSAVE_DELAY,
    )
    await canvas.load()
    yield canvas
    await canvas.close()
