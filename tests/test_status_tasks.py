from datetime import timedelta

from adwarden.models.enums import AdStatus, CampaignStatus, CampaignType
from adwarden.tasks.status_tasks import expire_ads, expire_campaigns


def test_expire_campaigns_only_touches_ended_active_rows(seed, now):
    ended = seed.campaign(CampaignType.ADS, end_date=now - timedelta(hours=1))
    running = seed.campaign(CampaignType.ADS, end_date=now + timedelta(hours=1))
    open_ended = seed.campaign(CampaignType.ADS)
    paused = seed.campaign(CampaignType.ADS, status=CampaignStatus.INACTIVE, end_date=now - timedelta(days=1))

    assert expire_campaigns(seed.session, now) == 1
    seed.session.commit()
    seed.session.expire_all()

    assert ended.status == CampaignStatus.EXPIRED
    assert running.status == CampaignStatus.ACTIVE
    assert open_ended.status == CampaignStatus.ACTIVE
    assert paused.status == CampaignStatus.INACTIVE


def test_expire_ads(seed, now):
    ended = seed.ad("Old", end_date=now - timedelta(minutes=1))
    current = seed.ad("New", end_date=now + timedelta(days=1))

    assert expire_ads(seed.session, now) == 1
    seed.session.commit()
    seed.session.expire_all()

    assert ended.status == AdStatus.EXPIRED
    assert current.status == AdStatus.ACTIVE
