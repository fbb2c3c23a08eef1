"""
Ad Block Service - serve one POST /extension/ad-block request

Pipeline: resolve platform -> load candidates and visitor history -> evaluate
rules -> resolve content -> record events. Nothing is cached between
requests; campaigns and platforms change through the admin side at any time.

Frequency caps read the view count before the events of this request are
written, so concurrent requests from one visitor can each pass a cap that
only one of them should. That window is accepted; the cap is best-effort.
"""
import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, tzinfo
from typing import List, Optional
from zoneinfo import ZoneInfo

from adwarden.core.clock import utcnow
from adwarden.core.config import settings
from adwarden.models import Platform, VisitorEvent
from adwarden.schemas.extension import AdBlockRequest, AdBlockResponse
from adwarden.services import campaign_repository as repo
from adwarden.services.content_resolver import resolve_content
from adwarden.services.domain_matcher import resolve_platform
from adwarden.services.eligibility import is_qualifying
from adwarden.services.event_recorder import build_events, record_events

logger = logging.getLogger(__name__)

MAX_DOMAIN_LENGTH = 255


@dataclass
class AdBlockOutcome:
    response: AdBlockResponse
    platform: Optional[Platform] = None
    events: List[VisitorEvent] = field(default_factory=list)


def campaign_timezone() -> tzinfo:
    return ZoneInfo(settings.CAMPAIGN_TIMEZONE)


async def serve_ad_block(
    session_factory: repo.SessionFactory,
    request: AdBlockRequest,
    country: Optional[str],
    now: Optional[datetime] = None,
    tz: Optional[tzinfo] = None,
) -> AdBlockOutcome:
    now = now or utcnow()
    tz = tz or campaign_timezone()
    content_request = request.content_request

    # Notification-only calls may omit the domain; then only global
    # notification campaigns can apply
    platform = None
    if request.domain:
        platforms = await repo.load_active_platforms(session_factory)
        platform = resolve_platform(request.domain, platforms)
        if platform is None:
            logger.debug(f"No active platform for domain {request.domain!r}")

    candidates, first_seen_at = await asyncio.gather(
        repo.load_candidate_campaigns(
            session_factory,
            platform.id if platform else None,
            content_request.campaign_types,
        ),
        repo.load_visitor_first_seen(session_factory, request.visitor_id),
    )

    lookups = await repo.load_campaign_lookups(
        session_factory, [c.id for c in candidates], request.visitor_id
    )

    new_user_window = timedelta(days=settings.NEW_USER_WINDOW_DAYS)
    qualifying = [
        campaign
        for campaign in candidates
        if is_qualifying(
            campaign,
            now=now,
            visitor_first_seen_at=first_seen_at,
            visitor_country=country,
            past_view_count=lookups.view_counts.get(campaign.id, 0),
            allowed_countries=lookups.countries.get(campaign.id, ()),
            tz=tz,
            new_user_window=new_user_window,
        )
    ]

    resolved = await resolve_content(session_factory, qualifying, lookups, content_request)
    outcome = AdBlockOutcome(
        response=AdBlockResponse(ads=resolved.ads, notifications=resolved.notifications),
        platform=platform,
    )

    log_domain = (request.domain or settings.EXTENSION_LOG_DOMAIN)[:MAX_DOMAIN_LENGTH]
    outcome.events = build_events(
        request.visitor_id, log_domain, country, resolved.served_campaigns, now
    )
    # A failed write fails the request
    await record_events(session_factory, outcome.events)

    logger.info(
        f"ad-block visitor={request.visitor_id} domain={request.domain} "
        f"platform={platform.id if platform else None} candidates={len(candidates)} "
        f"qualifying={len(qualifying)} served={len(resolved.served_campaigns)}"
    )
    return outcome
