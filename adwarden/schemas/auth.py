"""
Authentication schemas
"""
from typing import Optional
from pydantic import BaseModel, EmailStr

from adwarden.models.enums import UserRole


class Token(BaseModel):
    """Token response"""
    access_token: str
    token_type: str = "bearer"


class LoginRequest(BaseModel):
    """Login request"""
    email: EmailStr
    password: str


class UserResponse(BaseModel):
    """User response"""
    id: int
    email: str
    display_name: Optional[str]
    role: UserRole
    is_active: bool

    class Config:
        from_attributes = True
