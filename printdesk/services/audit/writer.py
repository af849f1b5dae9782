"""Audit trail writer."""
import logging
from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession

from printdesk.core.errors import NotFoundError, ValidationError
from printdesk.services.ordering.models import (
    SYSTEM_AUTHOR,
    Actor,
    Attachment,
    OrderStatus,
    UpdateRecord,
)
from printdesk.services.ordering.transitions import raise_for_denial, validate_update_deletion
from printdesk.services.persistence.updates import UpdatePersistenceService

logger = logging.getLogger(__name__)


class AuditTrailWriter:
    """Appends entries to an order's update trail.

    Entries are immutable once written. Retries may produce duplicates;
    readers are expected to tolerate them.
    """

    def __init__(self, db: AsyncSession):
        self.updates = UpdatePersistenceService(db)

    async def append_update(
        self,
        order_id: str,
        author: Optional[Actor],
        text: str = "",
        attachment: Optional[Attachment] = None,
        is_system: bool = False,
    ) -> UpdateRecord:
        """
        Append one entry.

        Args:
            order_id: Order the entry belongs to
            author: Who wrote it; ignored for system entries
            text: Message text or a system token; may be empty if an attachment is given
            attachment: Optional uploaded file reference
            is_system: Record under the literal "system" author

        Returns:
            The stored entry
        """
        text = (text or "").strip()
        if not text and attachment is None:
            raise ValidationError("An update needs text or an attachment")
        if not is_system and author is None:
            raise ValidationError("User updates need an author")

        if is_system:
            user_id, user_name, user_email, is_staff = SYSTEM_AUTHOR, SYSTEM_AUTHOR, None, False
        else:
            user_id, user_name, user_email, is_staff = (
                author.id,
                author.display_name,
                author.email,
                author.is_staff,
            )

        update = await self.updates.add_update(
            order_id=order_id,
            user_id=user_id,
            user_name=user_name,
            user_email=user_email,
            text=text,
            is_system=is_system,
            is_staff=is_staff,
            attachment_url=attachment.url if attachment else None,
            attachment_name=attachment.name if attachment else None,
            attachment_type=attachment.media_type if attachment else None,
        )
        logger.info(
            f"[AUDIT] Appended update {update.id} to order {order_id} "
            f"(system={is_system}, attachment={attachment is not None})"
        )
        return UpdateRecord.model_validate(update)

    async def append_system_update(self, order_id: str, token: str) -> UpdateRecord:
        """Append an entry authored by the system itself."""
        return await self.append_update(order_id, None, token, is_system=True)

    async def list_updates(self, order_id: str) -> List[UpdateRecord]:
        """Entries for an order, oldest first."""
        updates = await self.updates.list_updates(order_id)
        return [UpdateRecord.model_validate(u) for u in updates]

    async def delete_update(
        self,
        order_id: str,
        update_id: int,
        actor: Actor,
        current_status: OrderStatus,
    ) -> None:
        """Delete an entry on behalf of ``actor``."""
        update = await self.updates.get_update(update_id)
        if update is None or update.order_id != order_id:
            raise NotFoundError(f"Update {update_id} not found")

        record = UpdateRecord.model_validate(update)
        raise_for_denial(validate_update_deletion(record, actor, current_status))

        await self.updates.delete_update(update)
        logger.info(f"[AUDIT] Update {update_id} on order {order_id} deleted by {actor.id}")
