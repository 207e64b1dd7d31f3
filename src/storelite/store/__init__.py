"""Store core and subscription registry.

Architecture Note:
    store/ is the stateful layer: one Store owns one state value and its
    listeners. Unlike core/ (stateless functionalities), it maintains runtime
    state and runs the notification passes.
"""

from storelite.store.registry import Subscription, SubscriptionRegistry
from storelite.store.store import (
    ListenerErrorHandler,
    Store,
    StoreNotInitializedError,
    create_store,
)
from storelite.store.sync_runner import SyncRunner

__all__ = [
    "Store",
    "StoreNotInitializedError",
    "ListenerErrorHandler",
    "create_store",
    "Subscription",
    "SubscriptionRegistry",
    "SyncRunner",
]
