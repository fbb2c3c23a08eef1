"""
Realtime connection counter and SSE streams

The live count of connected extension clients sits in a Redis key. Only the
extension stream changes it: +1 on connect, -1 on disconnect, publishing the
new value each time. The dashboard stream only listens. When Redis is down
every stream reports 0 and closes.
"""
import logging
from typing import AsyncIterator, Awaitable, Callable, Dict, Optional

import anyio
from redis.asyncio import Redis
from redis.asyncio.client import PubSub
from redis.exceptions import RedisError

from adwarden.core.config import settings

logger = logging.getLogger(__name__)

CONNECTION_COUNT_EVENT = "connection_count"
NOTIFICATION_EVENT = "notification"

Disconnected = Callable[[], Awaitable[bool]]


def sse_event(name: str, data: str) -> str:
    """Format one server-sent event; multi-line data becomes several data lines"""
    lines = str(data).splitlines() or [""]
    body = "\n".join(f"data: {line}" for line in lines)
    return f"event: {name}\n{body}\n\n"


class ConnectionCounter:
    """Counter and pub/sub operations on the shared Redis client"""

    def __init__(
        self,
        client: Optional[Redis],
        count_key: str = settings.REALTIME_COUNT_KEY,
        count_channel: str = settings.REALTIME_COUNT_CHANNEL,
        notification_channel: str = settings.REALTIME_NOTIFICATION_CHANNEL,
    ):
        self.client = client
        self.count_key = count_key
        self.count_channel = count_channel
        self.notification_channel = notification_channel

    async def is_available(self) -> bool:
        if self.client is None:
            return False
        try:
            return bool(await self.client.ping())
        except (RedisError, OSError) as e:
            logger.warning(f"Redis unavailable: {e}")
            return False

    async def get_count(self) -> int:
        """Current count, 0 when Redis is unavailable"""
        if self.client is None:
            return 0
        try:
            value = await self.client.get(self.count_key)
        except (RedisError, OSError) as e:
            logger.warning(f"Could not read connection count: {e}")
            return 0
        try:
            return max(0, int(value or 0))
        except ValueError:
            return 0

    async def increment(self) -> int:
        count = await self.client.incr(self.count_key)
        await self.publish_count(count)
        return count

    async def decrement(self) -> int:
        count = await self.client.decr(self.count_key)
        if count < 0:
            # Never leave the key negative (e.g. after a reset with open streams)
            await self.client.set(self.count_key, 0)
            count = 0
        await self.publish_count(count)
        return count

    async def publish_count(self, count: int) -> None:
        await self.client.publish(self.count_channel, str(count))

    async def publish_notification(self, payload: str) -> int:
        """Fan a payload out to live extension streams; returns receiver count"""
        return await self.client.publish(self.notification_channel, payload)

    async def reset(self) -> None:
        await self.client.set(self.count_key, 0)
        await self.publish_count(0)

    def subscriber(self) -> PubSub:
        """Dedicated pub/sub connection for one stream"""
        return self.client.pubsub()


async def _forward_messages(
    pubsub: PubSub,
    event_names: Dict[str, str],
    is_disconnected: Disconnected,
    poll_interval: float,
) -> AsyncIterator[str]:
    while not await is_disconnected():
        message = await pubsub.get_message(ignore_subscribe_messages=True, timeout=poll_interval)
        if not message:
            continue
        name = event_names.get(message.get("channel"))
        if name:
            yield sse_event(name, message.get("data", ""))


async def _close_subscriber(pubsub: Optional[PubSub]) -> None:
    if pubsub is None:
        return
    try:
        await pubsub.unsubscribe()
    except (RedisError, OSError) as e:
        logger.debug(f"Unsubscribe failed: {e}")
    try:
        await pubsub.aclose()
    except (RedisError, OSError) as e:
        logger.debug(f"Closing subscriber failed: {e}")


async def extension_live_stream(
    counter: ConnectionCounter,
    is_disconnected: Disconnected,
    poll_interval: float = settings.LIVE_POLL_INTERVAL_SECONDS,
) -> AsyncIterator[str]:
    """
    Connecting -> Subscribed -> Closed.

    Emits the count after connecting, then forwards published count and
    notification messages until the client goes away. Cleanup runs once and
    is shielded from cancellation.
    """
    if not await counter.is_available():
        yield sse_event(CONNECTION_COUNT_EVENT, "0")
        return

    pubsub = None
    counted = False
    try:
        # Increment first so the own count publish is not echoed back
        count = await counter.increment()
        counted = True
        pubsub = counter.subscriber()
        await pubsub.subscribe(counter.notification_channel, counter.count_channel)
        yield sse_event(CONNECTION_COUNT_EVENT, str(count))

        event_names = {
            counter.notification_channel: NOTIFICATION_EVENT,
            counter.count_channel: CONNECTION_COUNT_EVENT,
        }
        async for event in _forward_messages(pubsub, event_names, is_disconnected, poll_interval):
            yield event
    except (RedisError, OSError) as e:
        logger.warning(f"Live stream closed by Redis error: {e}")
    finally:
        with anyio.CancelScope(shield=True):
            await _close_subscriber(pubsub)
            if counted:
                try:
                    await counter.decrement()
                except (RedisError, OSError) as e:
                    logger.warning(f"Could not decrement connection count: {e}")


async def dashboard_count_stream(
    counter: ConnectionCounter,
    is_disconnected: Disconnected,
    poll_interval: float = settings.LIVE_POLL_INTERVAL_SECONDS,
) -> AsyncIterator[str]:
    """Count updates for the dashboard; never touches the counter itself"""
    if not await counter.is_available():
        yield sse_event(CONNECTION_COUNT_EVENT, "0")
        return

    pubsub = None
    try:
        pubsub = counter.subscriber()
        await pubsub.subscribe(counter.count_channel)
        yield sse_event(CONNECTION_COUNT_EVENT, str(await counter.get_count()))

        event_names = {counter.count_channel: CONNECTION_COUNT_EVENT}
        async for event in _forward_messages(pubsub, event_names, is_disconnected, poll_interval):
            yield event
    except (RedisError, OSError) as e:
        logger.warning(f"Dashboard stream closed by Redis error: {e}")
    finally:
        with anyio.CancelScope(shield=True):
            await _close_subscriber(pubsub)
