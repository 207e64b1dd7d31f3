"""Subscription registry: plain and selector listeners for one store.

Usage:
    registry = SubscriptionRegistry(get_state=store.get_state)
    unsubscribe = registry.subscribe(lambda s, prev: print(s))
    unsubscribe = registry.subscribe(lambda s: s["count"], on_count, fire_immediately=True)
    errors = registry.notify(state, previous_state)
"""

from __future__ import annotations

import itertools
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from storelite.core.equality import is_same
from storelite.core.types import EqualityFn, GetState, Listener, Selector, State, Unsubscribe


@dataclass(slots=True, eq=False)
class Subscription:
    """A registered listener.

    Attributes:
        listener: Called with (state, previous_state) for plain subscriptions,
            or (selected, previous_selected) for selector subscriptions.
        selector: Optional projection of the full state.
        equality_fn: Decides whether two selected values are the same.
        current_slice: Last selected value the listener has seen.
        active: False once unsubscribed.
    """

    listener: Callable[[Any, Any], None]
    selector: Selector | None = None
    equality_fn: EqualityFn = is_same
    current_slice: Any = None
    active: bool = field(default=True)

    def deliver(self, state: State, previous_state: State) -> None:
        """Invoke the listener if this subscription cares about the change."""
        if self.selector is None:
            self.listener(state, previous_state)
            return

        next_slice = self.selector(state)
        if self.equality_fn(self.current_slice, next_slice):
            return
        previous_slice = self.current_slice
        self.current_slice = next_slice
        self.listener(next_slice, previous_slice)


class SubscriptionRegistry:
    """Ordered set of subscriptions with snapshot-based notification.

    Each notification pass iterates over the subscriptions registered when the
    pass started. Subscriptions removed during a pass are skipped for the rest
    of it; subscriptions added during a pass first hear about the next commit.

    Args:
        get_state: Reads the current state (needed to seed selector slices).
    """

    def __init__(self, get_state: GetState) -> None:
        self._get_state = get_state
        self._subscriptions: dict[int, Subscription] = {}
        self._ids = itertools.count()

    def __len__(self) -> int:
        return len(self._subscriptions)

    def subscribe(
        self,
        selector_or_listener: Selector | Listener,
        listener: Callable[[Any, Any], None] | None = None,
        *,
        equality_fn: EqualityFn | None = None,
        fire_immediately: bool = False,
    ) -> Unsubscribe:
        """Register a plain or selector listener.

        Args:
            selector_or_listener: The listener itself when `listener` is None,
                otherwise a selector.
            listener: Listener for the selected value.
            equality_fn: Equality for selected values (default `is_same`).
            fire_immediately: Call the listener once now with (selected, selected).

        Returns:
            Idempotent unsubscribe function.
        """
        if listener is None:
            if equality_fn is not None or fire_immediately:
                raise TypeError("equality_fn and fire_immediately require a selector")
            subscription = Subscription(listener=selector_or_listener)
        else:
            selected = selector_or_listener(self._get_state())
            subscription = Subscription(
                listener=listener,
                selector=selector_or_listener,
                equality_fn=equality_fn or is_same,
                current_slice=selected,
            )
            if fire_immediately:
                listener(selected, selected)

        key = next(self._ids)
        self._subscriptions[key] = subscription

        def unsubscribe() -> None:
            subscription.active = False
            self._subscriptions.pop(key, None)

        return unsubscribe

    def notify(self, state: State, previous_state: State) -> list[Exception]:
        """Run one notification pass.

        A raising listener does not stop the pass.

        Returns:
            Exceptions raised by listeners, in the order they occurred.
        """
        errors: list[Exception] = []
        for subscription in tuple(self._subscriptions.values()):
            if not subscription.active:
                continue
            try:
                subscription.deliver(state, previous_state)
            except Exception as exc:
                errors.append(exc)
        return errors

    def clear(self) -> None:
        """Deactivate and drop every subscription."""
        for subscription in self._subscriptions.values():
            subscription.active = False
        self._subscriptions.clear()
