"""
Status maintenance tasks
"""
import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import update
from sqlalchemy.orm import Session

from adwarden.core.clock import utcnow
from adwarden.core.database import SessionLocal
from adwarden.models import Ad, Campaign
from adwarden.models.enums import AdStatus, CampaignStatus

logger = logging.getLogger(__name__)


def expire_campaigns(db: Session, now: Optional[datetime] = None) -> int:
    """Mark active campaigns whose end_date has passed as expired"""
    now = now or utcnow()
    result = db.execute(
        update(Campaign)
        .where(
            Campaign.status == CampaignStatus.ACTIVE,
            Campaign.end_date.is_not(None),
            Campaign.end_date < now,
        )
        .values(status=CampaignStatus.EXPIRED)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount or 0


def expire_ads(db: Session, now: Optional[datetime] = None) -> int:
    """Mark active ads whose end_date has passed as expired"""
    now = now or utcnow()
    result = db.execute(
        update(Ad)
        .where(
            Ad.status == AdStatus.ACTIVE,
            Ad.end_date.is_not(None),
            Ad.end_date < now,
        )
        .values(status=AdStatus.EXPIRED)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount or 0


def sync_statuses(now: Optional[datetime] = None) -> dict:
    db = SessionLocal()

    try:
        campaigns = expire_campaigns(db, now)
        ads = expire_ads(db, now)
        db.commit()
        if campaigns or ads:
            logger.info(f"Expired {campaigns} campaigns and {ads} ads")
        return {"campaigns": campaigns, "ads": ads}
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
