"""
Database models for Adwarden
"""
from adwarden.models.base import Base, BaseModel, TimestampMixin
from adwarden.models.enums import (
    UserRole, TargetAudience, CampaignType, FrequencyType, CampaignStatus,
    AdStatus, VisitorEventType, DisplayMode
)

# User models
from adwarden.models.user import User

# Platform models
from adwarden.models.platform import Platform

# Content models
from adwarden.models.content import Ad, Notification, NotificationRead

# Campaign models
from adwarden.models.campaign import (
    Campaign, CampaignPlatform, CampaignCountry, CampaignAd, CampaignNotification
)

# Visitor models
from adwarden.models.visitor import VisitorEvent


__all__ = [
    # Base
    "Base", "BaseModel", "TimestampMixin",

    # Enums
    "UserRole", "TargetAudience", "CampaignType", "FrequencyType",
    "CampaignStatus", "AdStatus", "VisitorEventType", "DisplayMode",

    # User
    "User",

    # Platform
    "Platform",

    # Content
    "Ad", "Notification", "NotificationRead",

    # Campaign
    "Campaign", "CampaignPlatform", "CampaignCountry", "CampaignAd",
    "CampaignNotification",

    # Visitor
    "VisitorEvent",
]
