"""Theme store for the shop example.

The colour-scheme preference of the environment is read through an injected
`PreferenceProvider` rather than from globals, so the store can be driven
deterministically in tests.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Literal, Protocol, TypeAlias, runtime_checkable

from storelite import (
    Persist,
    PersistStorage,
    SetState,
    State,
    Store,
    Unsubscribe,
    create_store,
)

_logger = logging.getLogger(__name__)

Theme: TypeAlias = Literal["light", "dark", "system"]
ResolvedTheme: TypeAlias = Literal["light", "dark"]

THEME_STORAGE_NAME = "theme-storage"


@runtime_checkable
class PreferenceProvider(Protocol):
    """Source of the environment's preferred colour scheme."""

    def get_preference(self) -> ResolvedTheme: ...

    def on_preference_change(self, callback: Callable[[ResolvedTheme], None]) -> Unsubscribe: ...


class StaticPreference:
    """Preference provider with a settable value.

    Usage:
        preference = StaticPreference("dark")
        preference.set_preference("light")  # notifies listeners
    """

    def __init__(self, preference: ResolvedTheme = "light") -> None:
        self._preference: ResolvedTheme = preference
        self._callbacks: list[Callable[[ResolvedTheme], None]] = []

    def get_preference(self) -> ResolvedTheme:
        return self._preference

    def on_preference_change(self, callback: Callable[[ResolvedTheme], None]) -> Unsubscribe:
        self._callbacks.append(callback)

        def unsubscribe() -> None:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

        return unsubscribe

    def set_preference(self, preference: ResolvedTheme) -> None:
        if preference == self._preference:
            return
        self._preference = preference
        for callback in list(self._callbacks):
            callback(preference)


def resolve_theme(theme: Theme, preference: PreferenceProvider) -> ResolvedTheme:
    if theme == "system":
        return preference.get_preference()
    return theme


def create_theme_store(
    preference: PreferenceProvider,
    storage: PersistStorage | None = None,
    skip_hydration: bool = True,
) -> Store:
    """Create a theme store bound to `preference`.

    After hydration a persisted "system" theme is resolved against the
    preference immediately, and later preference changes update
    `resolved_theme` while the theme stays "system". `store.destroy()` also
    stops watching the preference.
    """
    api: Store | None = None

    def theme_state(set_: SetState, get: Callable[[], State], store: Store) -> State:
        nonlocal api
        api = store

        def set_theme(theme: Theme) -> None:
            set_({"theme": theme, "resolved_theme": resolve_theme(theme, preference)})

        def toggle_theme() -> None:
            new_theme: ResolvedTheme = "dark" if get()["resolved_theme"] == "light" else "light"
            set_({"theme": new_theme, "resolved_theme": new_theme})

        return {
            "theme": "system",
            "resolved_theme": "light",
            "set_theme": set_theme,
            "toggle_theme": toggle_theme,
        }

    def on_rehydrate_storage(_state: State) -> Callable[[State | None, Exception | None], None]:
        def after_hydration(state: State | None, error: Exception | None) -> None:
            if state is None or api is None:
                return
            resolved = resolve_theme(state["theme"], preference)
            _logger.debug("Resolved theme %r to %r after hydration", state["theme"], resolved)
            api.set_state({"resolved_theme": resolved})

        return after_hydration

    store = create_store(
        theme_state,
        middleware=[
            Persist(
                name=THEME_STORAGE_NAME,
                storage=storage,
                skip_hydration=skip_hydration,
                on_rehydrate_storage=on_rehydrate_storage,
            )
        ],
    )

    def on_preference_change(new_preference: ResolvedTheme) -> None:
        if store.get_state()["theme"] == "system":
            store.set_state({"resolved_theme": new_preference})

    stop_watching = preference.on_preference_change(on_preference_change)
    destroy_store = store.destroy

    def destroy() -> None:
        stop_watching()
        destroy_store()

    store.destroy = destroy  # type: ignore[method-assign]
    return store
