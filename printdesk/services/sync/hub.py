"""Shares live order view subscriptions between consumers."""
import logging
from typing import Dict, List

from printdesk.services.ordering.models import Actor, OrderView
from printdesk.services.sync.store import OrderStore, Scope
from printdesk.services.sync.synchronizer import OrderViewSubscription

logger = logging.getLogger(__name__)


class SubscriptionHub:
    """One live subscription per scope, reference counted across consumers."""

    def __init__(self, store: OrderStore, max_concurrency: int = 8, fetch_timeout: float = 5.0):
        self.store = store
        self.max_concurrency = max_concurrency
        self.fetch_timeout = fetch_timeout
        self._subscriptions: Dict[Scope, OrderViewSubscription] = {}
        self._refs: Dict[Scope, int] = {}

    def _new_subscription(self, scope: Scope) -> OrderViewSubscription:
        return OrderViewSubscription(
            self.store,
            scope,
            max_concurrency=self.max_concurrency,
            fetch_timeout=self.fetch_timeout,
        )

    def acquire(self, actor: Actor) -> OrderViewSubscription:
        """Get the running subscription for the actor's scope, starting it if needed."""
        scope = Scope.for_actor(actor)
        subscription = self._subscriptions.get(scope)
        if subscription is None:
            subscription = self._new_subscription(scope)
            self._subscriptions[scope] = subscription
            self._refs[scope] = 0
            subscription.start()
        self._refs[scope] += 1
        logger.debug(f"[HUB] Acquired scope {scope} ({self._refs[scope]} consumer(s))")
        return subscription

    def release(self, subscription: OrderViewSubscription) -> None:
        """Drop one reference; the last release stops the subscription."""
        scope = subscription.scope
        if self._subscriptions.get(scope) is not subscription:
            return
        self._refs[scope] -= 1
        if self._refs[scope] <= 0:
            subscription.stop()
            del self._subscriptions[scope]
            del self._refs[scope]
            logger.debug(f"[HUB] Released last consumer of scope {scope}")

    @property
    def active_scopes(self) -> List[Scope]:
        return list(self._subscriptions)

    async def snapshot(self, actor: Actor) -> List[OrderView]:
        """Run a single pass for the actor's scope, outside any live subscription."""
        return await self._new_subscription(Scope.for_actor(actor)).refresh()

    async def close(self) -> None:
        """Stop every subscription."""
        for subscription in list(self._subscriptions.values()):
            await subscription.aclose()
        self._subscriptions.clear()
        self._refs.clear()
