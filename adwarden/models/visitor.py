"""
Visitor event log
"""
from sqlalchemy import Column, Integer, String, Enum, DateTime, ForeignKey, Index, func

from adwarden.core.database import Base
from adwarden.models.enums import VisitorEventType


class VisitorEvent(Base):
    """
    Append-only log of extension requests.

    Also the frequency-cap source (events per visitor and campaign) and the
    first-seen source (earliest created_at per visitor).
    """

    __tablename__ = "visitor_events"
    __table_args__ = (
        Index("ix_visitor_events_visitor_campaign", "visitor_id", "campaign_id"),
    )

    id = Column(Integer, primary_key=True, index=True)
    visitor_id = Column(String(255), nullable=False, index=True)  # opaque, client generated
    campaign_id = Column(Integer, ForeignKey("campaigns.id", ondelete="CASCADE"), nullable=True)
    domain = Column(String(255), nullable=False)
    country = Column(String(2), nullable=True)
    type = Column(Enum(VisitorEventType), nullable=False)
    status_code = Column(Integer, default=200, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)
