"""Theme store integration tests."""

import json

import pytest

from examples.shop import StaticPreference, create_theme_store, resolve_theme
from examples.shop.theme_store import THEME_STORAGE_NAME, PreferenceProvider


def persist_theme(backend, theme):
    backend.set_item(
        THEME_STORAGE_NAME,
        json.dumps({"name": THEME_STORAGE_NAME, "version": 0, "state": {"theme": theme}}),
    )


@pytest.fixture
def dark_preference():
    return StaticPreference("dark")


def test_system_theme_resolved_at_hydration(backend, storage, dark_preference):
    persist_theme(backend, "system")
    store = create_theme_store(dark_preference, storage=storage)

    assert store.get_state()["resolved_theme"] == "light"

    store.persist.rehydrate()

    assert store.get_state()["theme"] == "system"
    assert store.get_state()["resolved_theme"] == "dark"


def test_resolved_theme_written_back(backend, storage, dark_preference):
    persist_theme(backend, "system")
    store = create_theme_store(dark_preference, storage=storage)
    store.persist.rehydrate()

    record = json.loads(backend.get_item(THEME_STORAGE_NAME))
    assert record["state"]["resolved_theme"] == "dark"


def test_explicit_theme_ignores_preference(backend, storage, dark_preference):
    persist_theme(backend, "light")
    store = create_theme_store(dark_preference, storage=storage)
    store.persist.rehydrate()

    assert store.get_state()["resolved_theme"] == "light"


def test_automatic_hydration(backend, storage, dark_preference):
    persist_theme(backend, "system")
    store = create_theme_store(dark_preference, storage=storage, skip_hydration=False)

    assert store.get_state()["resolved_theme"] == "dark"


def test_set_and_toggle_theme(storage, dark_preference):
    store = create_theme_store(dark_preference, storage=storage)
    store.persist.rehydrate()

    store.get_state()["set_theme"]("light")
    assert store.get_state()["resolved_theme"] == "light"

    store.get_state()["toggle_theme"]()
    assert store.get_state()["theme"] == "dark"
    assert store.get_state()["resolved_theme"] == "dark"

    store.get_state()["set_theme"]("system")
    assert store.get_state()["resolved_theme"] == "dark"


def test_preference_change_while_system(storage):
    preference = StaticPreference("light")
    store = create_theme_store(preference, storage=storage)
    store.persist.rehydrate()

    preference.set_preference("dark")
    assert store.get_state()["resolved_theme"] == "dark"

    store.get_state()["set_theme"]("light")
    preference.set_preference("light")
    preference.set_preference("dark")
    assert store.get_state()["resolved_theme"] == "light"


def test_resolve_theme(dark_preference):
    assert resolve_theme("system", dark_preference) == "dark"
    assert resolve_theme("light", dark_preference) == "light"
    assert isinstance(dark_preference, PreferenceProvider)


def test_destroy_stops_watching_preference(storage):
    preference = StaticPreference("light")
    store = create_theme_store(preference, storage=storage)
    store.persist.rehydrate()

    store.destroy()
    preference.set_preference("dark")

    assert store.get_state()["resolved_theme"] == "light"
    assert preference._callbacks == []
