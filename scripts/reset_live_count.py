"""
Reset the live extension connection count to 0 in Redis
Use when the dashboard shows a stale count with no extension clients connected.
Usage: python scripts/reset_live_count.py
"""
import asyncio
import sys
import os

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from adwarden.core.redis import close_redis_client, create_redis_client
from adwarden.services.realtime import ConnectionCounter


async def reset_live_count() -> bool:
    client = create_redis_client()
    if client is None:
        print("REDIS_URL is not set")
        return False
    try:
        await ConnectionCounter(client).reset()
    finally:
        await close_redis_client(client)
    return True


def main():
    try:
        if not asyncio.run(reset_live_count()):
            sys.exit(1)
    except Exception as e:
        print(f"Failed: {e}")
        sys.exit(1)
    print("Live connection count reset to 0")


if __name__ == "__main__":
    main()
