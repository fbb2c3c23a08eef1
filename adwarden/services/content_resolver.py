"""
Content Resolver - turn qualifying campaigns into public ad/notification payloads
"""
import asyncio
from dataclasses import dataclass, field
from typing import Dict, List, Sequence

from sqlalchemy import select

from adwarden.models import Ad, Campaign, Notification
from adwarden.models.enums import CAMPAIGN_TYPE_TO_DISPLAY, AdStatus, CampaignType
from adwarden.schemas.extension import AdPayload, ContentRequest, NotificationPayload
from adwarden.services.campaign_repository import CampaignLookups, SessionFactory, fetch_scalars

AD_CAMPAIGN_TYPES = (CampaignType.ADS, CampaignType.POPUP)


@dataclass
class ResolvedContent:
    ads: List[AdPayload] = field(default_factory=list)
    notifications: List[NotificationPayload] = field(default_factory=list)
    # Campaigns whose content was actually returned; only these get credited
    served_campaigns: List[Campaign] = field(default_factory=list)


async def _load_by_ids(session_factory: SessionFactory, model, ids: Sequence[int], *criteria) -> Dict[int, object]:
    if not ids:
        return {}
    rows = await fetch_scalars(session_factory, select(model).where(model.id.in_(ids), *criteria))
    return {row.id: row for row in rows}


def _ad_payload(ad: Ad, campaign: Campaign) -> AdPayload:
    return AdPayload(
        title=ad.name,
        image=ad.image_url,
        description=ad.description,
        redirect_url=ad.target_url,
        html_code=ad.html_code,
        display_as=CAMPAIGN_TYPE_TO_DISPLAY[campaign.campaign_type],
    )


def _notification_payload(notification: Notification) -> NotificationPayload:
    return NotificationPayload(
        title=notification.title,
        message=notification.message,
        cta_link=notification.cta_link,
    )


async def resolve_content(
    session_factory: SessionFactory,
    qualifying: Sequence[Campaign],
    lookups: CampaignLookups,
    content_request: ContentRequest,
) -> ResolvedContent:
    """
    Batch-fetch linked content for the requested kinds.

    Campaigns whose linked row no longer exists, or whose ad is not active,
    are skipped. Each content item appears once in the payload even if several
    campaigns point at it.
    """
    ad_campaigns: List[Campaign] = []
    notification_campaigns: List[Campaign] = []
    if content_request.includes_ads:
        ad_campaigns = [
            c for c in qualifying
            if c.campaign_type in AD_CAMPAIGN_TYPES and c.id in lookups.ad_ids
        ]
    if content_request.includes_notifications:
        notification_campaigns = [
            c for c in qualifying
            if c.campaign_type == CampaignType.NOTIFICATION and c.id in lookups.notification_ids
        ]

    ad_ids = sorted({lookups.ad_ids[c.id] for c in ad_campaigns})
    notification_ids = sorted({lookups.notification_ids[c.id] for c in notification_campaigns})

    ads_by_id, notifications_by_id = await asyncio.gather(
        _load_by_ids(session_factory, Ad, ad_ids, Ad.status == AdStatus.ACTIVE),
        _load_by_ids(session_factory, Notification, notification_ids),
    )

    resolved = ResolvedContent()

    shown_ads = set()
    for campaign in ad_campaigns:
        ad_id = lookups.ad_ids[campaign.id]
        ad = ads_by_id.get(ad_id)
        if ad is None:
            continue
        resolved.served_campaigns.append(campaign)
        if ad_id not in shown_ads:
            shown_ads.add(ad_id)
            resolved.ads.append(_ad_payload(ad, campaign))

    shown_notifications = set()
    for campaign in notification_campaigns:
        notification_id = lookups.notification_ids[campaign.id]
        notification = notifications_by_id.get(notification_id)
        if notification is None:
            continue
        resolved.served_campaigns.append(campaign)
        if notification_id not in shown_notifications:
            shown_notifications.add(notification_id)
            resolved.notifications.append(_notification_payload(notification))

    return resolved
