"""Real-time order view synchronizer."""
import asyncio
import logging
from enum import Enum
from typing import Callable, List, Optional, Sequence, Tuple

from printdesk.services.ordering.aggregator import aggregate
from printdesk.services.ordering.models import OrderRecord, OrderView
from printdesk.services.sync.store import OrderStore, Scope

logger = logging.getLogger(__name__)

Listener = Callable[[List[OrderView]], None]


class SyncState(str, Enum):
    """Subscription states. There is no error state: failures are absorbed."""

    IDLE = "idle"
    SYNCING = "syncing"
    PUBLISHED = "published"

    def __str__(self) -> str:
        return self.value


class OrderViewSubscription:
    """
    Keeps an aggregated, always-consistent list of order views for one scope.

    Each upstream change batch triggers a sync pass: load the visible orders,
    fetch every order's sub-orders concurrently (bounded by a semaphore and a
    per-fetch timeout), aggregate, and publish the whole list at once. Passes
    never overlap; changes that arrive mid-pass coalesce into one follow-up
    pass. An order whose sub-orders cannot be fetched is published degraded,
    with an empty sub-order set, instead of being dropped.
    """

    def __init__(
        self,
        store: OrderStore,
        scope: Scope,
        max_concurrency: int = 8,
        fetch_timeout: Optional[float] = 5.0,
    ):
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
        self.store = store
        self.scope = scope
        self.max_concurrency = max_concurrency
        self.fetch_timeout = fetch_timeout

        self._state = SyncState.IDLE
        self._views: Tuple[OrderView, ...] = ()
        self._version = 0
        self._listeners: List[Listener] = []
        self._dirty = asyncio.Event()
        self._pass_lock = asyncio.Lock()
        self._tasks: List[asyncio.Task] = []

    # -------------------- State --------------------

    @property
    def state(self) -> SyncState:
        return self._state

    @property
    def views(self) -> List[OrderView]:
        """The last published list (a copy)."""
        return list(self._views)

    @property
    def version(self) -> int:
        """Number of lists published so far."""
        return self._version

    @property
    def running(self) -> bool:
        return any(not task.done() for task in self._tasks)

    # -------------------- Consumers --------------------

    def add_listener(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener``; it gets the current list right away if one exists.

        Returns:
            A function that unregisters the listener
        """
        self._listeners.append(listener)
        if self._version:
            self._notify(listener, self.views)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    # -------------------- Lifecycle --------------------

    def start(self) -> None:
        """Begin following upstream changes. Must be called inside a running loop."""
        if self.running:
            return
        logger.info(f"[SYNC] Starting subscription for scope {self.scope}")
        self._dirty.set()
        self._tasks = [
            asyncio.create_task(self._follow_changes(), name=f"sync-feed-{self.scope}"),
            asyncio.create_task(self._run(), name=f"sync-run-{self.scope}"),
        ]

    def stop(self) -> None:
        """Stop following changes and cancel any in-flight fetches. Does not block."""
        for task in self._tasks:
            task.cancel()
        if self._tasks:
            logger.info(f"[SYNC] Stopped subscription for scope {self.scope}")

    async def aclose(self) -> None:
        """Stop and wait for the background tasks to finish."""
        self.stop()
        tasks, self._tasks = self._tasks, []
        await asyncio.gather(*tasks, return_exceptions=True)

    # -------------------- Sync passes --------------------

    async def refresh(self) -> List[OrderView]:
        """Run one pass now (after any pass already running) and return the result."""
        async with self._pass_lock:
            await self._sync_pass()
        return self.views

    async def _follow_changes(self) -> None:
        while True:
            try:
                async for batch in self.store.changes():
                    logger.debug(f"[SYNC] {len(batch)} change(s) for scope {self.scope}")
                    self._dirty.set()
                logger.info(f"[SYNC] Change stream for scope {self.scope} ended")
                return
            except Exception as e:
                logger.error(
                    f"[SYNC] Change stream for scope {self.scope} failed - "
                    f"Error: {type(e).__name__}: {str(e)}; resubscribing",
                    exc_info=True,
                )
                self._dirty.set()
                await asyncio.sleep(1.0)

    async def _run(self) -> None:
        while True:
            await self._dirty.wait()
            self._dirty.clear()
            await self.refresh()

    async def _sync_pass(self) -> None:
        self._state = SyncState.SYNCING
        try:
            orders = await self.store.list_orders(self.scope)
        except Exception as e:
            # Keep the previous list; the next change retries
            logger.error(
                f"[SYNC] Could not load orders for scope {self.scope} - "
                f"Error: {type(e).__name__}: {str(e)}"
            )
            self._state = SyncState.PUBLISHED if self._version else SyncState.IDLE
            return

        semaphore = asyncio.Semaphore(self.max_concurrency)
        views = await asyncio.gather(*(self._join(order, semaphore) for order in orders))
        self._publish(views)

    async def _join(self, order: OrderRecord, semaphore: asyncio.Semaphore) -> OrderView:
        async with semaphore:
            try:
                sub_orders = await asyncio.wait_for(
                    self.store.list_sub_orders(order.id), timeout=self.fetch_timeout
                )
            except asyncio.TimeoutError:
                logger.warning(
                    f"[SYNC] Sub-order fetch for order {order.id} timed out after "
                    f"{self.fetch_timeout}s; publishing degraded view"
                )
                return aggregate(order, [], degraded=True)
            except Exception as e:
                logger.warning(
                    f"[SYNC] Sub-order fetch for order {order.id} failed - "
                    f"Error: {type(e).__name__}: {str(e)}; publishing degraded view"
                )
                return aggregate(order, [], degraded=True)
        return aggregate(order, sub_orders)

    def _publish(self, views: Sequence[OrderView]) -> None:
        self._views = tuple(views)
        self._version += 1
        self._state = SyncState.PUBLISHED
        degraded = sum(1 for v in self._views if v.degraded)
        logger.info(
            f"[SYNC] Published {len(self._views)} order(s) for scope {self.scope} "
            f"(version {self._version}, degraded {degraded})"
        )
        snapshot = self.views
        for listener in list(self._listeners):
            self._notify(listener, snapshot)

    def _notify(self, listener: Listener, snapshot: List[OrderView]) -> None:
        try:
            listener(list(snapshot))
        except Exception as e:
            logger.error(
                f"[SYNC] Listener failed - Error: {type(e).__name__}: {str(e)}",
                exc_info=True,
            )
