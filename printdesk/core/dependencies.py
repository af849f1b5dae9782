"""FastAPI dependencies."""
from typing import Optional
from fastapi import Depends, Header
from starlette.requests import HTTPConnection
from sqlalchemy.ext.asyncio import AsyncSession

from printdesk.core.config import settings
from printdesk.core.errors import PermissionDeniedError, ValidationError
from printdesk.db.database import AsyncSessionLocal, get_db
from printdesk.services.catalog.in_memory_catalog import InMemoryCatalogProvider
from printdesk.services.catalog.repository import CatalogRepository
from printdesk.services.lifecycle.service import OrderLifecycleService
from printdesk.services.ordering.models import Actor, ActorRole
from printdesk.services.storage.base import AttachmentStorage
from printdesk.services.storage.local import LocalAttachmentStorage
from printdesk.services.sync.feed import ChangeFeed
from printdesk.services.sync.hub import SubscriptionHub
from printdesk.services.sync.store import OrderStore, SqlOrderStore

# Process-wide feed shared by the write path and every live subscription
change_feed = ChangeFeed()


def get_catalog_repository() -> CatalogRepository:
    """Get catalog repository instance."""
    return CatalogRepository(provider=InMemoryCatalogProvider(settings.catalog_file or None))


def get_change_feed() -> ChangeFeed:
    """Get the shared change feed."""
    return change_feed


def get_storage() -> AttachmentStorage:
    """Get attachment storage instance."""
    return LocalAttachmentStorage(
        root=settings.attachments_dir,
        base_url=settings.attachments_base_url,
        max_bytes=settings.max_attachment_bytes,
    )


def get_order_store() -> OrderStore:
    """Get the order store used by live subscriptions."""
    return SqlOrderStore(AsyncSessionLocal, get_change_feed())


def build_hub(store: OrderStore) -> SubscriptionHub:
    """Create a subscription hub configured from settings."""
    return SubscriptionHub(
        store,
        max_concurrency=settings.sync_max_concurrency,
        fetch_timeout=settings.sync_fetch_timeout_seconds,
    )


def get_hub(connection: HTTPConnection) -> SubscriptionHub:
    """Get the application's subscription hub (created at startup)."""
    return connection.app.state.hub


def get_lifecycle_service(
    db: AsyncSession = Depends(get_db),
    catalog_repository: CatalogRepository = Depends(get_catalog_repository),
    feed: ChangeFeed = Depends(get_change_feed),
    storage: AttachmentStorage = Depends(get_storage),
) -> OrderLifecycleService:
    """Get a lifecycle service bound to the request's session."""
    return OrderLifecycleService(db, catalog_repository, feed, storage)


def get_actor(
    x_actor_id: Optional[str] = Header(None),
    x_actor_role: str = Header(ActorRole.CLIENT.value),
    x_actor_name: Optional[str] = Header(None),
    x_actor_email: Optional[str] = Header(None),
) -> Actor:
    """
    Resolve the caller from request headers.

    Authentication happens upstream; these headers carry its result.
    """
    return resolve_actor(x_actor_id, x_actor_role, x_actor_name, x_actor_email)


def resolve_actor(
    actor_id: Optional[str],
    role: Optional[str],
    name: Optional[str] = None,
    email: Optional[str] = None,
) -> Actor:
    """Build an Actor from raw header values."""
    if not actor_id:
        raise PermissionDeniedError("Missing X-Actor-Id header")
    try:
        actor_role = ActorRole((role or ActorRole.CLIENT.value).lower())
    except ValueError:
        raise ValidationError(f"Unknown actor role: {role}")
    return Actor(id=actor_id, role=actor_role, name=name, email=email)
