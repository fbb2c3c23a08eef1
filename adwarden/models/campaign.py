"""
Campaign model and its targeting/content join tables
"""
from sqlalchemy import Column, Integer, String, Enum, DateTime, ForeignKey

from adwarden.core.database import Base
from adwarden.models.base import BaseModel
from adwarden.models.enums import (
    TargetAudience,
    CampaignType,
    FrequencyType,
    CampaignStatus,
)


class Campaign(BaseModel):
    """
    Campaign - delivery rules for exactly one ad or one notification.

    ads/popup campaigns are served through campaign_platforms; notification
    campaigns without platform rows are served on every domain.
    """

    __tablename__ = "campaigns"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)

    # ============================================
    # Targeting
    # ============================================
    target_audience = Column(Enum(TargetAudience), default=TargetAudience.ALL_USERS, nullable=False)
    campaign_type = Column(Enum(CampaignType), nullable=False, index=True)

    # ============================================
    # Frequency
    # ============================================
    frequency_type = Column(Enum(FrequencyType), nullable=False)
    frequency_count = Column(Integer, nullable=True)  # specific_count only
    time_start = Column(String(8), nullable=True)     # "HH:MM", time_based only
    time_end = Column(String(8), nullable=True)

    # ============================================
    # Schedule
    # ============================================
    status = Column(Enum(CampaignStatus), default=CampaignStatus.INACTIVE, nullable=False, index=True)
    start_date = Column(DateTime(timezone=True), nullable=True)
    end_date = Column(DateTime(timezone=True), nullable=True)

    created_by = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)


class CampaignPlatform(Base):
    """Domain targeting (many-to-many)"""

    __tablename__ = "campaign_platforms"

    campaign_id = Column(Integer, ForeignKey("campaigns.id", ondelete="CASCADE"), primary_key=True)
    platform_id = Column(Integer, ForeignKey("platforms.id", ondelete="CASCADE"), primary_key=True, index=True)


class CampaignCountry(Base):
    """Country allow-list; no rows = all countries"""

    __tablename__ = "campaign_countries"

    campaign_id = Column(Integer, ForeignKey("campaigns.id", ondelete="CASCADE"), primary_key=True)
    country_code = Column(String(2), primary_key=True)  # uppercase ISO 3166-1 alpha-2


class CampaignAd(Base):
    """1:1 link to the ad of an ads/popup campaign"""

    __tablename__ = "campaign_ad"

    campaign_id = Column(Integer, ForeignKey("campaigns.id", ondelete="CASCADE"), primary_key=True)
    ad_id = Column(Integer, ForeignKey("ads.id", ondelete="CASCADE"), nullable=False, unique=True)


class CampaignNotification(Base):
    """1:1 link to the notification of a notification campaign"""

    __tablename__ = "campaign_notification"

    campaign_id = Column(Integer, ForeignKey("campaigns.id", ondelete="CASCADE"), primary_key=True)
    notification_id = Column(Integer, ForeignKey("notifications.id", ondelete="CASCADE"), nullable=False, unique=True)
