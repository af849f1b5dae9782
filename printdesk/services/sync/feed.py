"""In-process change feed for the order collection."""
import asyncio
import logging
from dataclasses import dataclass
from typing import AsyncIterator, List, Set

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OrderChange:
    """One change to an order or to one of its children."""

    order_id: str
    kind: str  # created, status_changed, confirmed, sub_order_changed, deleted


class ChangeFeed:
    """Broadcasts change batches to every live subscriber.

    Publishing never blocks: each subscriber has its own unbounded queue,
    and a subscriber that falls behind receives the backlog as one batch.
    """

    def __init__(self):
        self._queues: Set[asyncio.Queue] = set()

    @property
    def subscriber_count(self) -> int:
        return len(self._queues)

    def publish(self, *changes: OrderChange) -> None:
        """Deliver ``changes`` as one batch to all subscribers."""
        if not changes:
            return
        for queue in list(self._queues):
            queue.put_nowait(list(changes))
        logger.debug(
            f"[FEED] Published {len(changes)} change(s) to {len(self._queues)} subscriber(s)"
        )

    async def subscribe(self) -> AsyncIterator[List[OrderChange]]:
        """Yield change batches until the consumer stops iterating."""
        queue: asyncio.Queue = asyncio.Queue()
        self._queues.add(queue)
        try:
            while True:
                batch = await queue.get()
                while not queue.empty():
                    batch.extend(queue.get_nowait())
                yield batch
        finally:
            self._queues.discard(queue)
