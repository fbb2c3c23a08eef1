"""
Event Recorder - append the visitor events for one extension request
"""
import logging
from datetime import datetime
from typing import List, Optional, Sequence

from adwarden.models import Campaign, VisitorEvent
from adwarden.models.enums import CAMPAIGN_TYPE_TO_EVENT, VisitorEventType
from adwarden.services.campaign_repository import SessionFactory

logger = logging.getLogger(__name__)

STATUS_OK = 200


def build_events(
    visitor_id: str,
    domain: str,
    country: Optional[str],
    served_campaigns: Sequence[Campaign],
    now: datetime,
) -> List[VisitorEvent]:
    """
    One row per served campaign, or a single "request" row when nothing was
    served, so every request leaves at least one audit row.
    """
    events = [
        VisitorEvent(
            visitor_id=visitor_id,
            campaign_id=campaign.id,
            domain=domain,
            country=country,
            type=CAMPAIGN_TYPE_TO_EVENT[campaign.campaign_type],
            status_code=STATUS_OK,
            created_at=now,
        )
        for campaign in served_campaigns
    ]
    if not events:
        events.append(
            VisitorEvent(
                visitor_id=visitor_id,
                campaign_id=None,
                domain=domain,
                country=country,
                type=VisitorEventType.REQUEST,
                status_code=STATUS_OK,
                created_at=now,
            )
        )
    return events


async def record_events(session_factory: SessionFactory, events: Sequence[VisitorEvent]) -> int:
    async with session_factory() as session:
        session.add_all(events)
        await session.commit()
    logger.debug(f"Recorded {len(events)} visitor events")
    return len(events)
