"""Order store interface consumed by the synchronizer."""
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import AsyncIterator, List, Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker

from printdesk.core.errors import DependencyError
from printdesk.services.ordering.models import Actor, OrderRecord, SubOrderRecord
from printdesk.services.persistence.orders import OrderPersistenceService
from printdesk.services.sync.feed import ChangeFeed, OrderChange

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Scope:
    """Which orders a subscription sees. ``owner_id=None`` means all of them."""

    owner_id: Optional[str] = None

    @classmethod
    def for_actor(cls, actor: Actor) -> "Scope":
        """Staff see every order; clients see their own."""
        return cls(owner_id=None if actor.is_staff else actor.id)

    def __str__(self) -> str:
        return "all" if self.owner_id is None else f"owner:{self.owner_id}"


class OrderStore(ABC):
    """Query-with-subscription access to orders and their sub-orders."""

    @abstractmethod
    async def list_orders(self, scope: Scope) -> List[OrderRecord]:
        """Current orders visible in ``scope``, newest first."""
        pass

    @abstractmethod
    async def list_sub_orders(self, order_id: str) -> List[SubOrderRecord]:
        """Current sub-orders of one order."""
        pass

    @abstractmethod
    def changes(self) -> AsyncIterator[List[OrderChange]]:
        """Stream of change batches, starting from subscription time."""
        pass


class SqlOrderStore(OrderStore):
    """Order store over the SQL database plus the in-process change feed.

    Every call opens its own session so concurrent sub-order fetches never
    share one.
    """

    def __init__(self, session_factory: async_sessionmaker, feed: ChangeFeed):
        self.session_factory = session_factory
        self.feed = feed

    async def list_orders(self, scope: Scope) -> List[OrderRecord]:
        try:
            async with self.session_factory() as session:
                orders = await OrderPersistenceService(session).list_orders(scope.owner_id)
                return [OrderRecord.model_validate(o) for o in orders]
        except SQLAlchemyError as e:
            raise DependencyError(f"Could not load orders: {e}") from e

    async def list_sub_orders(self, order_id: str) -> List[SubOrderRecord]:
        try:
            async with self.session_factory() as session:
                sub_orders = await OrderPersistenceService(session).list_sub_orders(order_id)
                return [SubOrderRecord.model_validate(so) for so in sub_orders]
        except SQLAlchemyError as e:
            raise DependencyError(f"Could not load sub-orders of {order_id}: {e}") from e

    def changes(self) -> AsyncIterator[List[OrderChange]]:
        return self.feed.subscribe()
