"""Middleware: composable wrappers around a store initializer.

Architecture Note:
    Each middleware wraps the (set, get, api) initializer of the one inside
    it, delegating exactly once per update. Lists are applied first element
    innermost: `[Immer(), Persist(...), Devtools(...)]`.
"""

from storelite.middleware.combine import ActionsFactory, combine
from storelite.middleware.devtools import Devtools, DevtoolsApi, DevtoolsOptions
from storelite.middleware.immer import Immer
from storelite.middleware.persist import (
    REHYDRATE_ACTION,
    HydrationStatus,
    Persist,
    PersistApi,
    PersistOptions,
    RehydrateCallback,
    drop_callables,
    merge_shallow,
)
from storelite.middleware.protocol import Middleware, compose

__all__ = [
    # Protocol
    "Middleware",
    "compose",
    # Persist
    "Persist",
    "PersistApi",
    "PersistOptions",
    "HydrationStatus",
    "RehydrateCallback",
    "REHYDRATE_ACTION",
    "drop_callables",
    "merge_shallow",
    # Devtools
    "Devtools",
    "DevtoolsApi",
    "DevtoolsOptions",
    # Sugar
    "Immer",
    "combine",
    "ActionsFactory",
]
