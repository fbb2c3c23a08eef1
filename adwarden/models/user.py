"""
Dashboard user model
"""
from sqlalchemy import Column, Integer, String, Boolean, Enum

from adwarden.models.base import BaseModel
from adwarden.models.enums import UserRole


class User(BaseModel):
    """User allowed onto the dashboard endpoints"""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    display_name = Column(String(100), nullable=True)

    role = Column(
        Enum(UserRole),
        default=UserRole.USER,
        nullable=False
    )
    is_active = Column(Boolean, default=True, nullable=False)  # false = banned
