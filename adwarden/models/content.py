"""
Served content models - ads and notifications
"""
from sqlalchemy import Column, Integer, String, Enum, Text, DateTime, ForeignKey, UniqueConstraint, func

from adwarden.models.base import BaseModel
from adwarden.models.enums import AdStatus


class Ad(BaseModel):
    """Ad creative shown inline or as a popup"""

    __tablename__ = "ads"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    image_url = Column(Text, nullable=True)
    target_url = Column(Text, nullable=True)
    html_code = Column(Text, nullable=True)

    status = Column(Enum(AdStatus), default=AdStatus.ACTIVE, nullable=False)
    start_date = Column(DateTime(timezone=True), nullable=True)
    end_date = Column(DateTime(timezone=True), nullable=True)


class Notification(BaseModel):
    """Notification message pushed to the extension"""

    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    cta_link = Column(Text, nullable=True)

    # Only the unread-pull endpoint looks at this window; null = open-ended
    start_date = Column(DateTime(timezone=True), nullable=True)
    end_date = Column(DateTime(timezone=True), nullable=True)


class NotificationRead(BaseModel):
    """Read receipt for the unread-pull endpoint"""

    __tablename__ = "notification_reads"
    __table_args__ = (
        UniqueConstraint("notification_id", "visitor_id", name="uq_notification_read_visitor"),
    )

    id = Column(Integer, primary_key=True, index=True)
    notification_id = Column(Integer, ForeignKey("notifications.id", ondelete="CASCADE"), nullable=False)
    visitor_id = Column(String(255), nullable=False, index=True)
    read_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
