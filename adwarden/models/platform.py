"""
Platform model (target websites)
"""
from sqlalchemy import Column, Integer, String, Boolean

from adwarden.models.base import BaseModel


class Platform(BaseModel):
    """A website the extension serves campaigns on"""

    __tablename__ = "platforms"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    domain = Column(String(255), nullable=False)  # hostname, e.g. "instagram.com"

    # Deactivated rather than deleted in normal operation
    is_active = Column(Boolean, default=True, nullable=False, index=True)
