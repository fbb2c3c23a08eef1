"""
Realtime dashboard endpoints
"""
import json
import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse
from redis.exceptions import RedisError

from adwarden.api.routes.extension import SSE_HEADERS
from adwarden.core.deps import get_connection_counter, require_admin, require_any_role
from adwarden.models.user import User
from adwarden.schemas.common import DataResponse
from adwarden.services.realtime import ConnectionCounter, dashboard_count_stream

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/realtime", tags=["Realtime"])


@router.get("/count", response_model=DataResponse[Dict[str, int]])
async def get_count(
    counter: ConnectionCounter = Depends(get_connection_counter),
    current_user: User = Depends(require_any_role),
):
    """Current number of connected extension clients"""
    return DataResponse(data={"count": await counter.get_count()})


@router.get("/stream")
async def stream(
    request: Request,
    counter: ConnectionCounter = Depends(get_connection_counter),
    current_user: User = Depends(require_any_role),
):
    """SSE of connection count updates. Read-only."""
    return StreamingResponse(
        dashboard_count_stream(counter, request.is_disconnected),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )


@router.post("/notify", response_model=DataResponse[Dict[str, int]])
async def notify(
    payload: Dict[str, Any],
    counter: ConnectionCounter = Depends(get_connection_counter),
    current_user: User = Depends(require_admin),
):
    """Push a notification payload to every live extension stream"""
    if not await counter.is_available():
        return DataResponse(data={"delivered": 0}, message="Realtime store unavailable")

    try:
        delivered = await counter.publish_notification(json.dumps(payload))
    except (RedisError, OSError) as e:
        logger.warning(f"Publishing notification failed: {e}")
        return DataResponse(data={"delivered": 0}, message="Realtime store unavailable")

    logger.info(f"Notification published by user {current_user.id} to {delivered} subscribers")
    return DataResponse(data={"delivered": delivered}, message="Notification published")
