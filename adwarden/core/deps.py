"""
Dependency injection for FastAPI
"""
from typing import AsyncGenerator, List, Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from redis.asyncio import Redis
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from adwarden.core.config import settings
from adwarden.core.database import AsyncSessionLocal
from adwarden.core.redis import get_redis
from adwarden.core.security import verify_token
from adwarden.models.enums import UserRole
from adwarden.models.user import User
from adwarden.services.rate_limit import client_ip, enforce_rate_limit
from adwarden.services.realtime import ConnectionCounter

# HTTP Bearer token scheme
security = HTTPBearer(auto_error=False)


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Session factory for services that open one session per query"""
    return AsyncSessionLocal


async def get_db(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> AsyncGenerator[AsyncSession, None]:
    """Get database session"""
    async with session_factory() as session:
        yield session


def get_connection_counter(redis: Optional[Redis] = Depends(get_redis)) -> ConnectionCounter:
    return ConnectionCounter(redis)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> User:
    """
    Get current authenticated user from JWT token.
    Uses its own short session so streaming endpoints do not keep a
    connection checked out for the life of the stream.
    """

    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    if credentials is None:
        raise credentials_exception

    user_id = verify_token(credentials.credentials, token_type="access")
    if user_id is None:
        raise credentials_exception

    try:
        user_pk = int(user_id)
    except ValueError:
        raise credentials_exception

    async with session_factory() as session:
        user = await session.get(User, user_pk)

    if user is None:
        raise credentials_exception

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is not active"
        )

    return user


class RoleChecker:
    """Dependency for checking user roles"""

    def __init__(self, allowed_roles: List[UserRole]):
        self.allowed_roles = allowed_roles

    def __call__(self, user: User = Depends(get_current_user)) -> User:
        if user.role not in self.allowed_roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Access denied. Required roles: {[r.value for r in self.allowed_roles]}"
            )
        return user


# Pre-configured role checkers
require_admin = RoleChecker([UserRole.ADMIN])
require_any_role = RoleChecker([UserRole.ADMIN, UserRole.USER])


async def limit_ad_block(request: Request, redis: Optional[Redis] = Depends(get_redis)) -> None:
    if not settings.RATE_LIMIT_ENABLED:
        return
    await enforce_rate_limit(
        redis,
        "ad-block",
        client_ip(request),
        settings.AD_BLOCK_RATE_LIMIT,
        settings.AD_BLOCK_RATE_WINDOW_SECONDS,
    )


async def limit_live(request: Request, redis: Optional[Redis] = Depends(get_redis)) -> None:
    if not settings.RATE_LIMIT_ENABLED:
        return
    await enforce_rate_limit(
        redis,
        "live",
        client_ip(request),
        settings.LIVE_RATE_LIMIT,
        settings.LIVE_RATE_WINDOW_SECONDS,
        error="Too many connections. Please try again later.",
    )
