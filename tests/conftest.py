"""Shared test fixtures."""

import sys

import pytest

# Ensure src is in path
sys.path.insert(0, "src")

from storelite import (
    MemoryStorage,
    RecordingInspector,
    StoreSettings,
    create_json_storage,
    create_store,
)


def counter_state(set_, get, api):
    """Initializer used across store tests."""
    return {
        "count": 0,
        "label": "counter",
        "increment": lambda: set_(lambda s: {"count": s["count"] + 1}, action="counter/increment"),
        "reset": lambda: set_({"count": 0}, action="counter/reset"),
    }


@pytest.fixture
def counter_init():
    return counter_state


@pytest.fixture
def store():
    """Plain counter store without middleware."""
    return create_store(counter_state)


@pytest.fixture
def strict_store():
    """Counter store that re-raises listener errors."""
    return create_store(counter_state, settings=StoreSettings(raise_listener_errors=True))


@pytest.fixture
def backend():
    """Fresh raw key-value backend."""
    return MemoryStorage()


@pytest.fixture
def storage(backend):
    """JSON persist storage over the `backend` fixture."""
    return create_json_storage(lambda: backend)


@pytest.fixture
def inspector():
    return RecordingInspector()
