"""
Authentication API endpoints (dashboard users)
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from adwarden.core.deps import get_db, get_current_user
from adwarden.core.security import verify_password, create_access_token
from adwarden.models.user import User
from adwarden.schemas.auth import Token, LoginRequest, UserResponse
from adwarden.schemas.common import DataResponse

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/login", response_model=DataResponse[Token])
async def login(request: LoginRequest, db: AsyncSession = Depends(get_db)):
    """Login and get access token"""

    result = await db.execute(select(User).where(User.email == request.email))
    user = result.scalars().first()

    if not user or not verify_password(request.password, user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password"
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is not active"
        )

    access_token = create_access_token(
        subject=user.id,
        additional_claims={"role": user.role.value}
    )

    return DataResponse(
        data=Token(access_token=access_token),
        message="Login successful"
    )


@router.get("/me", response_model=DataResponse[UserResponse])
async def get_current_user_info(current_user: User = Depends(get_current_user)):
    """Get current user info"""
    return DataResponse(data=UserResponse.model_validate(current_user))
