"""storelite: small reactive state stores with composable middleware.

Usage:
    from storelite import Devtools, Immer, Persist, create_store

    def counter_state(set_, get, api):
        def increment():
            def recipe(draft):
                draft["count"] += 1

            set_(recipe, action="counter/increment")

        return {"count": 0, "increment": increment}

    store = create_store(
        counter_state,
        middleware=[Immer(), Persist(name="counter"), Devtools(name="Counter")],
    )
    store.subscribe(lambda s: s["count"], lambda count, previous: print(count))
    store.get_state()["increment"]()
"""

__version__ = "0.1.0"

# Core primitives
from storelite.config import (
    DevtoolsSettings,
    PersistSettings,
    StoreSettings,
)
from storelite.core import (
    DraftConflictError,
    EqualityFn,
    GetState,
    Listener,
    PartialState,
    Selector,
    SetState,
    State,
    StateCreator,
    Unsubscribe,
    Updater,
    is_same,
    produce,
    shallow,
)

# Middleware
from storelite.middleware import (
    Devtools,
    DevtoolsApi,
    HydrationStatus,
    Immer,
    Middleware,
    Persist,
    PersistApi,
    PersistOptions,
    combine,
    compose,
)

# Storage
from storelite.storage import (
    FileStorage,
    JSONStorage,
    MemoryStorage,
    PersistStorage,
    StateStorage,
    StorageValue,
    create_json_storage,
)

# Store
from storelite.store import (
    Store,
    StoreNotInitializedError,
    create_store,
)

# Tracing
from storelite.tracing import (
    ActionRecord,
    Inspector,
    InspectorConnection,
    InspectorMessage,
    RecordingInspector,
)

__all__ = [
    # Version
    "__version__",
    # Store
    "Store",
    "StoreNotInitializedError",
    "create_store",
    # Types
    "State",
    "PartialState",
    "Updater",
    "Listener",
    "Selector",
    "EqualityFn",
    "Unsubscribe",
    "SetState",
    "GetState",
    "StateCreator",
    # Helpers
    "is_same",
    "shallow",
    "produce",
    "DraftConflictError",
    # Middleware
    "Middleware",
    "compose",
    "Persist",
    "PersistApi",
    "PersistOptions",
    "HydrationStatus",
    "Devtools",
    "DevtoolsApi",
    "Immer",
    "combine",
    # Storage
    "StateStorage",
    "PersistStorage",
    "StorageValue",
    "MemoryStorage",
    "FileStorage",
    "JSONStorage",
    "create_json_storage",
    # Tracing
    "Inspector",
    "InspectorConnection",
    "InspectorMessage",
    "ActionRecord",
    "RecordingInspector",
    # Config
    "StoreSettings",
    "PersistSettings",
    "DevtoolsSettings",
]
