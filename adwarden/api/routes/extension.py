"""
Browser extension API endpoints (public, no auth)
"""
import json
import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from adwarden.core.config import settings
from adwarden.core.deps import (
    get_connection_counter,
    get_session_factory,
    limit_ad_block,
    limit_live,
)
from adwarden.core.exceptions import AdwardenError, ExtensionRequestError
from adwarden.schemas.common import ErrorResponse
from adwarden.schemas.extension import (
    AdBlockRequest,
    AdBlockResponse,
    DomainsResponse,
    NotificationsPullRequest,
    NotificationsPullResponse,
)
from adwarden.services.ad_block_service import serve_ad_block
from adwarden.services.campaign_repository import load_active_platforms
from adwarden.services.domain_matcher import canonical_display_domain, normalize_domain_for_match
from adwarden.services.geo import country_from_headers
from adwarden.services.notification_pull import pull_notifications
from adwarden.services.realtime import ConnectionCounter, extension_live_stream

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/extension", tags=["Extension"])

SSE_HEADERS = {
    "Cache-Control": "no-cache, no-transform",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


async def _read_json_body(request: Request):
    content_type = request.headers.get("content-type") or ""
    if "application/json" not in content_type:
        raise ExtensionRequestError("Content-Type must be application/json")
    raw = await request.body()
    try:
        return json.loads(raw)
    except ValueError as e:
        raise ExtensionRequestError("Invalid JSON in request body", details=str(e))


def _server_error(error: str, exc: Exception) -> JSONResponse:
    payload = ErrorResponse(
        error=error,
        details=None if settings.is_production else str(exc),
    )
    return JSONResponse(status_code=500, content=payload.model_dump(exclude_none=True))


@router.post(
    "/ad-block",
    response_model=AdBlockResponse,
    dependencies=[Depends(limit_ad_block)],
)
async def ad_block(
    request: Request,
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
):
    """
    Decide which ads and notifications to show for one page view.

    Body: {"visitorId": str, "domain": str?, "requestType": "ad" | "notification"?}.
    Domain may be omitted only for notification-only requests.
    """
    body = await _read_json_body(request)
    ad_block_request = AdBlockRequest.parse_body(body)
    country = country_from_headers(request.headers)

    try:
        outcome = await serve_ad_block(session_factory, ad_block_request, country)
    except AdwardenError:
        raise
    except Exception as e:
        logger.exception(f"Error serving ad block for {ad_block_request.visitor_id}")
        return _server_error("Failed to fetch ad block", e)

    return outcome.response


@router.get("/domains", response_model=DomainsResponse)
async def list_domains(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
):
    """Active platform domains the extension should request ads for"""
    try:
        platforms = await load_active_platforms(session_factory)
    except Exception as e:
        logger.exception("Error fetching domains")
        return _server_error("Failed to fetch domains", e)

    domains = []
    for platform in platforms:
        host = normalize_domain_for_match(platform.domain or "")
        if not host:
            continue
        canonical = canonical_display_domain(host)
        if canonical not in domains:
            domains.append(canonical)
    return DomainsResponse(domains=domains)


@router.post("/notifications", response_model=NotificationsPullResponse)
async def notifications(
    request: Request,
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
):
    """Unread notifications for a visitor; returned ones are marked read"""
    body = await _read_json_body(request)
    pull_request = NotificationsPullRequest.parse_body(body)
    country = country_from_headers(request.headers)

    try:
        payloads = await pull_notifications(session_factory, pull_request.visitor_id, country)
    except Exception as e:
        logger.exception(f"Error fetching notifications for {pull_request.visitor_id}")
        return _server_error("Failed to fetch notifications", e)

    return NotificationsPullResponse(notifications=payloads)


@router.get("/live", dependencies=[Depends(limit_live)])
async def live(
    request: Request,
    counter: ConnectionCounter = Depends(get_connection_counter),
):
    """SSE: connection_count and notification events for one extension client"""
    return StreamingResponse(
        extension_live_stream(counter, request.is_disconnected),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )
