import logging
from typing import Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from quiz_engine.models import Notification, NotificationType

logger = logging.getLogger(__name__)


async def dispatch_notification(
    db: AsyncSession,
    *,
    recipient_id: UUID,
    sender_id: Optional[UUID],
    type: NotificationType,
    message: str,
    link: Optional[str] = None,
) -> Optional[Notification]:
    """
    Record a notification for the delivery service to pick up.

    Fire-and-forget: must be called after the triggering operation has
    committed. A failure here is logged and rolled back, never raised.
    """
    try:
        notification = Notification(
            recipient_id=recipient_id,
            sender_id=sender_id,
            type=type,
            message=message,
            link=link,
        )
        db.add(notification)
        await db.commit()
        logger.info(f"Notification queued: recipient={recipient_id}, type={type.value}")
        return notification
    except Exception:
        logger.exception(f"Notification dispatch failed for recipient {recipient_id}")
        await db.rollback()
        return None
