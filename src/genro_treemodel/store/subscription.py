# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Event subscription for TreeModelStore.

Subscribers register callbacks per event under a subscriber id:

    >>> store.subscribe('view', update=on_update, load=on_load)
    >>> store.unsubscribe('view')

Callbacks are called with keyword arguments: ``event``, ``store`` and the
event payload:
- load: node, data, error
- insert: node, index
- delete: node, index
- update: nodes (nodes whose cached flags were recomputed)
- reflow: nodes (the rebuilt flat node list)
"""

from __future__ import annotations

from typing import Any, Callable

SubscriberCallback = Callable[..., Any]

EVENTS = ('load', 'insert', 'delete', 'update', 'reflow')


class SubscriptionMixin:
    """Adds subscribe/unsubscribe/emit to a class with ``_subscribers``."""

    __slots__ = ()

    _subscribers: dict[str, dict[str, SubscriberCallback]]

    def _init_subscribers(self) -> None:
        self._subscribers = {event: {} for event in EVENTS}

    def subscribe(
        self,
        subscriber_id: str,
        any: SubscriberCallback | None = None,
        **callbacks: SubscriberCallback,
    ) -> None:
        """Register callbacks for events.

        Args:
            subscriber_id: Key used to unsubscribe later. Subscribing again
                with the same id replaces the previous callback.
            any: Callback registered for every event.
            **callbacks: Callbacks by event name (load, insert, delete,
                update, reflow).

        Raises:
            ValueError: If an unknown event name is given.
        """
        for event in callbacks:
            if event not in EVENTS:
                raise ValueError(f"Unknown event '{event}', expected one of {EVENTS}")
        if any is not None:
            for event in EVENTS:
                self._subscribers[event][subscriber_id] = any
        for event, callback in callbacks.items():
            self._subscribers[event][subscriber_id] = callback

    def unsubscribe(self, subscriber_id: str, *events: str) -> None:
        """Remove the callbacks of subscriber_id (all events if none given)."""
        for event in events or EVENTS:
            self._subscribers[event].pop(subscriber_id, None)

    def emit(self, event: str, **kwargs: Any) -> None:
        """Call the subscribers of event."""
        for callback in list(self._subscribers[event].values()):
            callback(event=event, store=self, **kwargs)
