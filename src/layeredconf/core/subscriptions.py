"""
Subscription registry.

Observers register interest in a set of keys (or in every key) and receive,
after each rebuild of the effective mapping, the cells relevant to them.
"""

import itertools
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from layeredconf.core.levels import ValueCell
from layeredconf.utils.logging import get_logger

logger = get_logger(__name__)

ChangeCallback = Callable[[dict[Any, ValueCell]], None]


@dataclass(eq=False)
class Subscription:
    """A single observer registration."""
    subscription_id: int
    keys: frozenset
    callback: ChangeCallback
    active: bool = field(default=True)

    @property
    def wants_all(self) -> bool:
        return not self.keys

    def payload_for(
        self,
        effective: Mapping[Any, ValueCell],
        changed: frozenset,
    ) -> dict[Any, ValueCell]:
        """Return the cells this subscription should receive for one rebuild."""
        if self.wants_all:
            return dict(effective)
        return {
            key: effective[key]
            for key in self.keys
            if key in changed and key in effective
        }


def normalize_keys(keys: Any) -> frozenset:
    """Accept a single key or an iterable of keys."""
    if keys is None:
        return frozenset()
    if isinstance(keys, (str, bytes)) or not isinstance(keys, Iterable):
        return frozenset([keys])
    return frozenset(keys)


class SubscriptionRegistry:
    """Holds observers and delivers change sets to them."""

    def __init__(self):
        self._subscriptions: list[Subscription] = []
        self._ids = itertools.count(1)

    def __len__(self) -> int:
        return len(self._subscriptions)

    def subscribe(self, keys: Any, callback: ChangeCallback) -> Callable[[], None]:
        """Register ``callback`` for ``keys`` and return an unsubscribe function.

        An empty key list subscribes to every key: the callback then receives
        the full effective mapping on every rebuild.
        """
        if not callable(callback):
            raise TypeError("Subscription callback must be callable")

        subscription = Subscription(
            subscription_id=next(self._ids),
            keys=normalize_keys(keys),
            callback=callback,
        )
        self._subscriptions.append(subscription)
        logger.debug(
            "subscription_added",
            subscription_id=subscription.subscription_id,
            keys=sorted(map(str, subscription.keys)),
        )

        def unsubscribe() -> None:
            self._remove(subscription)

        return unsubscribe

    def _remove(self, subscription: Subscription) -> None:
        if not subscription.active:
            return
        subscription.active = False
        self._subscriptions = [s for s in self._subscriptions if s is not subscription]
        logger.debug("subscription_removed", subscription_id=subscription.subscription_id)

    def notify(self, effective: Mapping[Any, ValueCell], changed: frozenset) -> None:
        """Deliver one rebuild's changes to every interested subscription."""
        # Callbacks may subscribe or unsubscribe while we iterate
        for subscription in list(self._subscriptions):
            if not subscription.active:
                continue

            payload = subscription.payload_for(effective, changed)
            if payload:
                subscription.callback(payload)
