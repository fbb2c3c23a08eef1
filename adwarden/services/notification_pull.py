"""
Notification pull - unread global notifications per visitor

Separate from campaign-gated notifications served by ad-block: this path
tracks delivery with read receipts instead of visitor event counts.
"""
import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy import and_, or_, select
from sqlalchemy.exc import IntegrityError

from adwarden.core.clock import utcnow
from adwarden.core.config import settings
from adwarden.models import Notification, NotificationRead, VisitorEvent
from adwarden.models.enums import VisitorEventType
from adwarden.schemas.extension import NotificationPayload
from adwarden.services.campaign_repository import SessionFactory, fetch_scalars
from adwarden.services.event_recorder import STATUS_OK

logger = logging.getLogger(__name__)


async def load_unread_notifications(
    session_factory: SessionFactory, visitor_id: str, now: datetime
) -> List[Notification]:
    stmt = (
        select(Notification)
        .outerjoin(
            NotificationRead,
            and_(
                NotificationRead.notification_id == Notification.id,
                NotificationRead.visitor_id == visitor_id,
            ),
        )
        .where(
            or_(Notification.start_date.is_(None), Notification.start_date <= now),
            or_(Notification.end_date.is_(None), Notification.end_date >= now),
            NotificationRead.id.is_(None),
        )
        .order_by(Notification.created_at, Notification.id)
    )
    return await fetch_scalars(session_factory, stmt)


async def mark_read(session_factory: SessionFactory, visitor_id: str, notifications: List[Notification]) -> None:
    if not notifications:
        return
    async with session_factory() as session:
        session.add_all(
            [NotificationRead(notification_id=n.id, visitor_id=visitor_id) for n in notifications]
        )
        try:
            await session.commit()
        except IntegrityError:
            # A concurrent pull already recorded them
            await session.rollback()
            logger.info(f"Read receipts for {visitor_id} already recorded")


async def pull_notifications(
    session_factory: SessionFactory,
    visitor_id: str,
    country: Optional[str] = None,
    now: Optional[datetime] = None,
) -> List[NotificationPayload]:
    now = now or utcnow()
    notifications = await load_unread_notifications(session_factory, visitor_id, now)
    await mark_read(session_factory, visitor_id, notifications)

    async with session_factory() as session:
        session.add(
            VisitorEvent(
                visitor_id=visitor_id,
                campaign_id=None,
                domain=settings.EXTENSION_LOG_DOMAIN,
                country=country,
                type=VisitorEventType.NOTIFICATION,
                status_code=STATUS_OK,
                created_at=now,
            )
        )
        await session.commit()

    return [
        NotificationPayload(title=n.title, message=n.message, cta_link=n.cta_link)
        for n in notifications
    ]
