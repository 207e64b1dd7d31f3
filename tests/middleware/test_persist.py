"""Tests for the Persist middleware."""

import asyncio
import json
import logging

import pytest

from storelite import (
    HydrationStatus,
    Immer,
    MemoryStorage,
    Persist,
    PersistSettings,
    StoreSettings,
    create_json_storage,
    create_store,
)
from storelite.middleware.persist import REHYDRATE_ACTION, drop_callables, merge_shallow


def todo_state(set_, get, api):
    return {
        "todos": [],
        "is_open": False,
        "add": lambda title: set_(lambda s: {"todos": [*s["todos"], title]}),
    }


def write_record(backend, name, state, version=0):
    backend.set_item(name, json.dumps({"name": name, "version": version, "state": state}))


def read_record(backend, name):
    raw = backend.get_item(name)
    return None if raw is None else json.loads(raw)


class TestRoundTrip:
    def test_write_then_rehydrate_in_new_store(self, backend, storage) -> None:
        first = create_store(todo_state, middleware=[Persist(name="todos", storage=storage)])
        first.get_state()["add"]("buy milk")

        second = create_store(todo_state, middleware=[Persist(name="todos", storage=storage)])

        assert second.get_state()["todos"] == ["buy milk"]
        assert second.persist.has_hydrated()
        assert callable(second.get_state()["add"])

    def test_record_format(self, backend, storage) -> None:
        store = create_store(
            todo_state, middleware=[Persist(name="todos", storage=storage, version=3)]
        )
        store.get_state()["add"]("x")

        assert read_record(backend, "todos") == {
            "name": "todos",
            "version": 3,
            "state": {"todos": ["x"], "is_open": False},
        }

    def test_partialize_limits_persisted_fields(self, backend, storage) -> None:
        store = create_store(
            todo_state,
            middleware=[
                Persist(
                    name="todos",
                    storage=storage,
                    partialize=lambda s: {"todos": s["todos"]},
                )
            ],
        )
        store.set_state({"is_open": True})

        assert read_record(backend, "todos")["state"] == {"todos": []}

    def test_set_state_from_outside_is_persisted(self, backend, storage) -> None:
        store = create_store(todo_state, middleware=[Persist(name="todos", storage=storage)])
        store.set_state({"todos": ["external"]})

        assert read_record(backend, "todos")["state"]["todos"] == ["external"]

    def test_single_notification_on_update(self, storage) -> None:
        store = create_store(
            todo_state, middleware=[Immer(), Persist(name="todos", storage=storage)]
        )
        calls = []
        store.subscribe(lambda s, prev: calls.append(s))

        store.set_state(lambda draft: draft["todos"].append("a"))
        assert len(calls) == 1

    def test_hydration_uses_rehydrate_action(self, backend, storage) -> None:
        write_record(backend, "todos", {"todos": ["saved"]})
        actions = []

        class Spy:
            def wrap(self, initializer):
                def spy_initializer(set_, get, api):
                    def spy_set(partial, replace=False, action=None):
                        actions.append(action)
                        set_(partial, replace, action)

                    return initializer(spy_set, get, api)

                return spy_initializer

        create_store(todo_state, middleware=[Persist(name="todos", storage=storage), Spy()])
        assert actions == [REHYDRATE_ACTION]


class TestSkipHydration:
    def test_state_untouched_until_rehydrate(self, backend, storage) -> None:
        write_record(backend, "todos", {"todos": ["saved"]})
        store = create_store(
            todo_state,
            middleware=[Persist(name="todos", storage=storage, skip_hydration=True)],
        )

        assert store.get_state()["todos"] == []
        assert store.persist.status is HydrationStatus.UNINITIALIZED
        assert store.persist.skip_requested

        store.persist.rehydrate()

        assert store.get_state()["todos"] == ["saved"]
        assert store.persist.has_hydrated()

    def test_no_writes_before_hydration(self, backend, storage) -> None:
        write_record(backend, "todos", {"todos": ["saved"]})
        store = create_store(
            todo_state,
            middleware=[Persist(name="todos", storage=storage, skip_hydration=True)],
        )

        store.get_state()["add"]("early")

        assert read_record(backend, "todos")["state"] == {"todos": ["saved"]}
        assert store.get_state()["todos"] == ["early"]

    def test_rehydrate_twice_is_allowed(self, backend, storage) -> None:
        store = create_store(
            todo_state,
            middleware=[Persist(name="todos", storage=storage, skip_hydration=True)],
        )
        store.persist.rehydrate()
        write_record(backend, "todos", {"todos": ["later"]})
        store.persist.rehydrate()

        assert store.get_state()["todos"] == ["later"]


class TestHydrationCallbacks:
    def test_on_rehydrate_storage_receives_states(self, backend, storage) -> None:
        write_record(backend, "todos", {"todos": ["saved"]})
        events = []

        def on_rehydrate_storage(state):
            events.append(("start", list(state["todos"])))

            def done(state, error):
                events.append(("done", list(state["todos"]), error))

            return done

        create_store(
            todo_state,
            middleware=[
                Persist(name="todos", storage=storage, on_rehydrate_storage=on_rehydrate_storage)
            ],
        )

        assert events == [("start", []), ("done", ["saved"], None)]

    def test_on_hydrate_and_finish_listeners(self, backend, storage) -> None:
        write_record(backend, "todos", {"todos": ["saved"]})
        store = create_store(
            todo_state,
            middleware=[Persist(name="todos", storage=storage, skip_hydration=True)],
        )
        events = []
        store.persist.on_hydrate(lambda s: events.append(("hydrate", s["todos"])))
        unsubscribe = store.persist.on_finish_hydration(lambda s: events.append(("finish", s["todos"])))

        store.persist.rehydrate()
        unsubscribe()
        unsubscribe()
        store.persist.rehydrate()

        assert events == [
            ("hydrate", []),
            ("finish", ["saved"]),
            ("hydrate", ["saved"]),
        ]

    def test_writes_from_callback_are_persisted(self, backend, storage) -> None:
        write_record(backend, "todos", {"todos": ["saved"]})
        store_ref = {}

        def on_rehydrate_storage(_state):
            def done(state, error):
                store_ref["store"].set_state({"todos": [*state["todos"], "derived"]})

            return done

        def init(set_, get, api):
            store_ref["store"] = api
            return todo_state(set_, get, api)

        create_store(
            init,
            middleware=[
                Persist(name="todos", storage=storage, on_rehydrate_storage=on_rehydrate_storage)
            ],
        )

        assert read_record(backend, "todos")["state"]["todos"] == ["saved", "derived"]


class TestHydrationFailures:
    def test_malformed_json_keeps_defaults(self, backend, storage, caplog) -> None:
        backend.set_item("todos", "{not json")
        errors = []

        with caplog.at_level(logging.WARNING, logger="storelite.middleware.persist"):
            store = create_store(
                todo_state,
                middleware=[
                    Persist(
                        name="todos",
                        storage=storage,
                        on_rehydrate_storage=lambda s: lambda state, error: errors.append(
                            (state, error)
                        ),
                    )
                ],
            )

        assert store.get_state()["todos"] == []
        assert store.persist.has_hydrated()
        [(state, error)] = errors
        assert state is None
        assert isinstance(error, ValueError)
        assert "Hydration" in caplog.text

    def test_record_without_state_is_malformed(self, backend, storage) -> None:
        backend.set_item("todos", json.dumps({"version": 0}))
        errors = []
        store = create_store(
            todo_state,
            middleware=[
                Persist(
                    name="todos",
                    storage=storage,
                    on_rehydrate_storage=lambda s: lambda state, error: errors.append(error),
                )
            ],
        )

        assert store.get_state()["todos"] == []
        assert errors and errors[0] is not None

    def test_backend_failure_on_read(self) -> None:
        class BrokenStorage:
            def get_item(self, name):
                raise OSError("disk gone")

            def set_item(self, name, value):
                pass

            def remove_item(self, name):
                pass

        errors = []
        store = create_store(
            todo_state,
            middleware=[
                Persist(
                    name="todos",
                    storage=BrokenStorage(),
                    on_rehydrate_storage=lambda s: lambda state, error: errors.append(error),
                )
            ],
        )

        assert isinstance(errors[0], OSError)
        assert store.persist.has_hydrated()

    def test_missing_record_is_not_an_error(self, storage) -> None:
        errors = []
        create_store(
            todo_state,
            middleware=[
                Persist(
                    name="todos",
                    storage=storage,
                    on_rehydrate_storage=lambda s: lambda state, error: errors.append(error),
                )
            ],
        )
        assert errors == [None]


class TestVersioning:
    def test_migrate_called_for_old_version(self, backend, storage) -> None:
        write_record(backend, "todos", {"items": ["old"]}, version=1)
        calls = []

        def migrate(persisted, version):
            calls.append(version)
            return {"todos": persisted["items"]}

        store = create_store(
            todo_state,
            middleware=[Persist(name="todos", storage=storage, version=2, migrate=migrate)],
        )

        assert calls == [1]
        assert store.get_state()["todos"] == ["old"]

    def test_mismatch_without_migrate_discards(self, backend, storage, caplog) -> None:
        write_record(backend, "todos", {"todos": ["old"]}, version=1)

        with caplog.at_level(logging.WARNING, logger="storelite.middleware.persist"):
            store = create_store(
                todo_state, middleware=[Persist(name="todos", storage=storage, version=2)]
            )

        assert store.get_state()["todos"] == []
        assert store.persist.has_hydrated()
        assert "Discarding" in caplog.text

    def test_migrate_failure_is_hydration_failure(self, backend, storage) -> None:
        write_record(backend, "todos", {"todos": ["old"]}, version=1)
        errors = []

        def migrate(persisted, version):
            raise KeyError("schema")

        store = create_store(
            todo_state,
            middleware=[
                Persist(
                    name="todos",
                    storage=storage,
                    version=2,
                    migrate=migrate,
                    on_rehydrate_storage=lambda s: lambda state, error: errors.append(error),
                )
            ],
        )

        assert store.get_state()["todos"] == []
        assert isinstance(errors[0], KeyError)

    def test_default_version_from_settings(self, backend, storage) -> None:
        store = create_store(
            todo_state,
            middleware=[
                Persist(name="todos", storage=storage, settings=PersistSettings(default_version=4))
            ],
        )
        store.set_state({"is_open": True})

        assert store.persist.get_options().version == 4
        assert read_record(backend, "todos")["version"] == 4


class TestWriteFailures:
    def test_on_error_receives_write_failure(self) -> None:
        class ReadOnlyStorage:
            def get_item(self, name):
                return None

            def set_item(self, name, value):
                raise PermissionError("read only")

            def remove_item(self, name):
                pass

        errors = []
        store = create_store(
            todo_state,
            middleware=[Persist(name="todos", storage=ReadOnlyStorage(), on_error=errors.append)],
        )

        store.set_state({"is_open": True})

        assert store.get_state()["is_open"] is True
        assert isinstance(errors[0], PermissionError)

    def test_write_failure_logged_without_hook(self, caplog) -> None:
        class ReadOnlyStorage:
            def get_item(self, name):
                return None

            def set_item(self, name, value):
                raise PermissionError("read only")

            def remove_item(self, name):
                pass

        store = create_store(
            todo_state, middleware=[Persist(name="todos", storage=ReadOnlyStorage())]
        )
        with caplog.at_level(logging.WARNING, logger="storelite.middleware.persist"):
            store.set_state({"is_open": True})

        assert "Failed to persist" in caplog.text


class TestWriteConditions:
    def test_write_survives_raising_listener(self, backend, storage) -> None:
        store = create_store(
            todo_state,
            middleware=[Persist(name="todos", storage=storage)],
            settings=StoreSettings(raise_listener_errors=True),
        )

        def broken(state, previous):
            raise RuntimeError("listener failed")

        store.subscribe(broken)

        with pytest.raises(RuntimeError, match="listener failed"):
            store.get_state()["add"]("a")

        assert store.get_state()["todos"] == ["a"]
        assert read_record(backend, "todos")["state"]["todos"] == ["a"]

    def test_identical_state_not_written(self, backend, storage) -> None:
        store = create_store(todo_state, middleware=[Persist(name="todos", storage=storage)])
        backend.remove_item("todos")

        store.set_state(store.get_state())
        store.set_state(lambda state: state)

        assert "todos" not in backend

    def test_immer_noop_recipe_not_written(self, backend, storage) -> None:
        store = create_store(
            todo_state, middleware=[Immer(), Persist(name="todos", storage=storage)]
        )
        backend.remove_item("todos")

        store.set_state(lambda draft: None)

        assert "todos" not in backend


class AsyncMemoryStorage:
    """Persist storage whose operations are coroutines."""

    def __init__(self):
        self.records = {}
        self.writes = 0

    async def get_item(self, name):
        await asyncio.sleep(0)
        return self.records.get(name)

    async def set_item(self, name, value):
        await asyncio.sleep(0)
        self.records[name] = value
        self.writes += 1

    async def remove_item(self, name):
        self.records.pop(name, None)


class TestAsyncStorage:
    @pytest.mark.asyncio
    async def test_rehydrate_async(self) -> None:
        storage = AsyncMemoryStorage()
        storage.records["todos"] = {"name": "todos", "version": 0, "state": {"todos": ["a"]}}
        store = create_store(
            todo_state,
            middleware=[Persist(name="todos", storage=storage, skip_hydration=True)],
        )

        await store.persist.rehydrate_async()

        assert store.get_state()["todos"] == ["a"]

    @pytest.mark.asyncio
    async def test_writes_scheduled_on_running_loop(self) -> None:
        storage = AsyncMemoryStorage()
        store = create_store(
            todo_state,
            middleware=[Persist(name="todos", storage=storage, skip_hydration=True)],
        )
        await store.persist.rehydrate_async()

        store.get_state()["add"]("a")
        for _ in range(5):
            await asyncio.sleep(0)

        assert storage.records["todos"]["state"]["todos"] == ["a"]

    def test_sync_rehydrate_drives_awaitable_storage(self) -> None:
        storage = AsyncMemoryStorage()
        storage.records["todos"] = {"name": "todos", "version": 0, "state": {"todos": ["b"]}}

        store = create_store(todo_state, middleware=[Persist(name="todos", storage=storage)])

        assert store.get_state()["todos"] == ["b"]

    @pytest.mark.asyncio
    async def test_flush_waits_for_pending_writes(self) -> None:
        storage = AsyncMemoryStorage()
        store = create_store(
            todo_state,
            middleware=[Persist(name="todos", storage=storage, skip_hydration=True)],
        )
        await store.persist.rehydrate_async()

        store.get_state()["add"]("a")
        store.get_state()["add"]("b")
        await store.persist.flush()

        assert storage.records["todos"]["state"]["todos"] == ["a", "b"]

    @pytest.mark.asyncio
    async def test_flush_without_pending_writes(self, storage) -> None:
        store = create_store(todo_state, middleware=[Persist(name="todos", storage=storage)])

        await asyncio.wait_for(store.persist.flush(), timeout=1)

    def test_flush_waits_for_background_writes(self) -> None:
        storage = AsyncMemoryStorage()
        store = create_store(todo_state, middleware=[Persist(name="todos", storage=storage)])

        store.get_state()["add"]("c")
        asyncio.run(store.persist.flush())

        assert storage.records["todos"]["state"]["todos"] == ["c"]


class TestPersistApi:
    def test_clear_storage(self, backend, storage) -> None:
        store = create_store(todo_state, middleware=[Persist(name="todos", storage=storage)])
        store.set_state({"is_open": True})

        store.persist.clear_storage()
        assert "todos" not in backend

    def test_destroy_stops_writes(self, backend, storage) -> None:
        store = create_store(todo_state, middleware=[Persist(name="todos", storage=storage)])
        store.persist.destroy()
        store.set_state({"is_open": True})

        assert "todos" not in backend

    def test_get_options(self, storage) -> None:
        store = create_store(
            todo_state, middleware=[Persist(name="todos", storage=storage, skip_hydration=True)]
        )
        options = store.persist.get_options()
        assert options.name == "todos"
        assert options.skip_hydration is True

    def test_empty_name_rejected(self) -> None:
        with pytest.raises(ValueError):
            Persist(name="")

    def test_lazy_backend_unavailable(self) -> None:
        backend = None
        storage = create_json_storage(lambda: backend)
        store = create_store(todo_state, middleware=[Persist(name="todos", storage=storage)])
        store.set_state({"is_open": True})

        backend = MemoryStorage()
        store.set_state({"is_open": False})
        assert "todos" in backend

    def test_default_storage_directory_from_settings(self, tmp_path) -> None:
        settings = PersistSettings(storage_dir=str(tmp_path))
        store = create_store(
            todo_state, middleware=[Persist(name="todos", settings=settings)]
        )
        store.set_state({"is_open": True})

        assert (tmp_path / "todos.json").exists()


def test_drop_callables():
    assert drop_callables({"a": 1, "f": print}) == {"a": 1}
    assert drop_callables([1]) == [1]


def test_merge_shallow():
    assert merge_shallow({"a": 2}, {"a": 1, "b": 1}) == {"a": 2, "b": 1}
    assert merge_shallow(None, {"a": 1}) == {"a": 1}
