"""
Campaign Repository - read-only queries behind the extension serving path

Every query opens its own short-lived session from the factory, so queries
gathered concurrently run on separate pooled connections and nothing holds a
connection while waiting on an unrelated round trip.
"""
import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Collection, Dict, List, Optional, Set

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.sql import Select

from adwarden.core.clock import ensure_utc
from adwarden.models import (
    Campaign,
    CampaignAd,
    CampaignCountry,
    CampaignNotification,
    CampaignPlatform,
    Platform,
    VisitorEvent,
)
from adwarden.models.enums import CampaignStatus, CampaignType

logger = logging.getLogger(__name__)

SessionFactory = async_sessionmaker[AsyncSession]


@dataclass
class CampaignLookups:
    """Per-campaign lookup tables for one request"""
    countries: Dict[int, Set[str]] = field(default_factory=dict)
    view_counts: Dict[int, int] = field(default_factory=dict)
    ad_ids: Dict[int, int] = field(default_factory=dict)
    notification_ids: Dict[int, int] = field(default_factory=dict)


async def fetch_scalars(session_factory: SessionFactory, stmt: Select) -> list:
    async with session_factory() as session:
        result = await session.execute(stmt)
        return list(result.scalars().all())


async def fetch_rows(session_factory: SessionFactory, stmt: Select) -> list:
    async with session_factory() as session:
        result = await session.execute(stmt)
        return list(result.all())


# ============================================
# Platforms
# ============================================

async def load_active_platforms(session_factory: SessionFactory) -> List[Platform]:
    stmt = select(Platform).where(Platform.is_active.is_(True)).order_by(Platform.id)
    return await fetch_scalars(session_factory, stmt)


# ============================================
# Candidate campaigns
# ============================================

def _platform_campaigns_stmt(platform_id: int, campaign_types: List[CampaignType]) -> Select:
    return (
        select(Campaign)
        .join(CampaignPlatform, CampaignPlatform.campaign_id == Campaign.id)
        .where(
            CampaignPlatform.platform_id == platform_id,
            Campaign.status == CampaignStatus.ACTIVE,
            Campaign.campaign_type.in_(campaign_types),
        )
    )


def _global_notification_campaigns_stmt() -> Select:
    """Notification campaigns without any platform row serve on every domain"""
    linked = select(CampaignPlatform.campaign_id)
    return select(Campaign).where(
        Campaign.campaign_type == CampaignType.NOTIFICATION,
        Campaign.status == CampaignStatus.ACTIVE,
        Campaign.id.not_in(linked),
    )


async def load_candidate_campaigns(
    session_factory: SessionFactory,
    platform_id: Optional[int],
    campaign_types: Collection[CampaignType],
) -> List[Campaign]:
    """
    Union of the campaigns linked to the platform and the global notification
    campaigns, deduplicated by id and ordered by creation time.
    """
    types = list(campaign_types)
    queries = []
    if platform_id is not None and types:
        queries.append(fetch_scalars(session_factory, _platform_campaigns_stmt(platform_id, types)))
    if CampaignType.NOTIFICATION in types:
        queries.append(fetch_scalars(session_factory, _global_notification_campaigns_stmt()))
    if not queries:
        return []

    results = await asyncio.gather(*queries)

    by_id: Dict[int, Campaign] = {}
    for campaigns in results:
        for campaign in campaigns:
            by_id.setdefault(campaign.id, campaign)

    return sorted(by_id.values(), key=lambda c: (ensure_utc(c.created_at), c.id))


# ============================================
# Visitor history
# ============================================

async def load_visitor_first_seen(session_factory: SessionFactory, visitor_id: str) -> Optional[datetime]:
    stmt = select(func.min(VisitorEvent.created_at)).where(VisitorEvent.visitor_id == visitor_id)
    rows = await fetch_scalars(session_factory, stmt)
    return ensure_utc(rows[0]) if rows else None


async def _load_countries(session_factory: SessionFactory, campaign_ids: List[int]) -> Dict[int, Set[str]]:
    stmt = select(CampaignCountry.campaign_id, CampaignCountry.country_code).where(
        CampaignCountry.campaign_id.in_(campaign_ids)
    )
    countries: Dict[int, Set[str]] = {}
    for campaign_id, code in await fetch_rows(session_factory, stmt):
        countries.setdefault(campaign_id, set()).add(code.upper())
    return countries


async def _load_view_counts(
    session_factory: SessionFactory, campaign_ids: List[int], visitor_id: str
) -> Dict[int, int]:
    stmt = (
        select(VisitorEvent.campaign_id, func.count(VisitorEvent.id))
        .where(
            VisitorEvent.visitor_id == visitor_id,
            VisitorEvent.campaign_id.in_(campaign_ids),
        )
        .group_by(VisitorEvent.campaign_id)
    )
    return {campaign_id: count for campaign_id, count in await fetch_rows(session_factory, stmt)}


async def _load_ad_links(session_factory: SessionFactory, campaign_ids: List[int]) -> Dict[int, int]:
    stmt = select(CampaignAd.campaign_id, CampaignAd.ad_id).where(CampaignAd.campaign_id.in_(campaign_ids))
    return dict(await fetch_rows(session_factory, stmt))


async def _load_notification_links(session_factory: SessionFactory, campaign_ids: List[int]) -> Dict[int, int]:
    stmt = select(CampaignNotification.campaign_id, CampaignNotification.notification_id).where(
        CampaignNotification.campaign_id.in_(campaign_ids)
    )
    return dict(await fetch_rows(session_factory, stmt))


async def load_campaign_lookups(
    session_factory: SessionFactory,
    campaign_ids: Collection[int],
    visitor_id: str,
) -> CampaignLookups:
    """Fan out the per-campaign lookups; no queries for an empty id set"""
    ids = list(campaign_ids)
    if not ids:
        return CampaignLookups()

    countries, view_counts, ad_ids, notification_ids = await asyncio.gather(
        _load_countries(session_factory, ids),
        _load_view_counts(session_factory, ids, visitor_id),
        _load_ad_links(session_factory, ids),
        _load_notification_links(session_factory, ids),
    )
    logger.debug(
        f"Loaded lookups for {len(ids)} campaigns: "
        f"{len(countries)} geo-restricted, {len(view_counts)} previously viewed"
    )
    return CampaignLookups(
        countries=countries,
        view_counts=view_counts,
        ad_ids=ad_ids,
        notification_ids=notification_ids,
    )
