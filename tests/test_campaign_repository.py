import asyncio
from datetime import timedelta

from adwarden.models.enums import CampaignStatus, CampaignType, VisitorEventType
from adwarden.services import campaign_repository as repo
from adwarden.services.event_recorder import build_events, record_events


def test_load_active_platforms_skips_inactive(seed, session_factory):
    seed.platform("instagram.com")
    seed.platform("retired.com", is_active=False)

    platforms = asyncio.run(repo.load_active_platforms(session_factory))

    assert [p.domain for p in platforms] == ["instagram.com"]


def test_candidates_union_platform_and_global_notifications(seed, session_factory):
    youtube = seed.platform("youtube.com")
    other = seed.platform("other.com")
    linked_ad = seed.campaign(CampaignType.ADS, platforms=[youtube], ad=seed.ad())
    popup = seed.campaign(CampaignType.POPUP, platforms=[youtube], ad=seed.ad())
    seed.campaign(CampaignType.ADS, platforms=[other], ad=seed.ad())
    global_note = seed.campaign(CampaignType.NOTIFICATION, notification=seed.notification())
    seed.campaign(CampaignType.NOTIFICATION, platforms=[other], notification=seed.notification())
    seed.campaign(CampaignType.ADS, platforms=[youtube], ad=seed.ad(), status=CampaignStatus.INACTIVE)

    candidates = asyncio.run(
        repo.load_candidate_campaigns(
            session_factory,
            youtube.id,
            [CampaignType.ADS, CampaignType.POPUP, CampaignType.NOTIFICATION],
        )
    )

    assert [c.id for c in candidates] == [linked_ad.id, popup.id, global_note.id]


def test_candidates_without_platform_only_global_notifications(seed, session_factory):
    site = seed.platform("site.com")
    seed.campaign(CampaignType.ADS, platforms=[site], ad=seed.ad())
    unlinked_ad = seed.campaign(CampaignType.ADS, ad=seed.ad())
    global_note = seed.campaign(CampaignType.NOTIFICATION, notification=seed.notification())

    candidates = asyncio.run(
        repo.load_candidate_campaigns(
            session_factory, None, [CampaignType.ADS, CampaignType.POPUP, CampaignType.NOTIFICATION]
        )
    )

    ids = [c.id for c in candidates]
    assert ids == [global_note.id]
    assert unlinked_ad.id not in ids


def test_candidates_respect_requested_types(seed, session_factory):
    site = seed.platform("site.com")
    ad_campaign = seed.campaign(CampaignType.ADS, platforms=[site], ad=seed.ad())
    seed.campaign(CampaignType.NOTIFICATION, notification=seed.notification())

    candidates = asyncio.run(
        repo.load_candidate_campaigns(session_factory, site.id, [CampaignType.ADS, CampaignType.POPUP])
    )

    assert [c.id for c in candidates] == [ad_campaign.id]


def test_visitor_first_seen(seed, session_factory, now):
    seed.event("v1", created_at=now - timedelta(days=3))
    seed.event("v1", created_at=now - timedelta(days=1))
    seed.event("v2", created_at=now - timedelta(days=30))

    first_seen = asyncio.run(repo.load_visitor_first_seen(session_factory, "v1"))
    never_seen = asyncio.run(repo.load_visitor_first_seen(session_factory, "nobody"))

    assert abs(first_seen - (now - timedelta(days=3))) < timedelta(seconds=1)
    assert first_seen.tzinfo is not None
    assert never_seen is None


def test_campaign_lookups(seed, session_factory):
    site = seed.platform("site.com")
    ad = seed.ad()
    note = seed.notification()
    geo = seed.campaign(CampaignType.ADS, platforms=[site], ad=ad, countries=["US", "CA"])
    noted = seed.campaign(CampaignType.NOTIFICATION, notification=note)
    seed.event("v1", campaign=geo)
    seed.event("v1", campaign=geo)
    seed.event("v2", campaign=geo)

    lookups = asyncio.run(repo.load_campaign_lookups(session_factory, [geo.id, noted.id], "v1"))

    assert lookups.countries == {geo.id: {"US", "CA"}}
    assert lookups.view_counts == {geo.id: 2}
    assert lookups.ad_ids == {geo.id: ad.id}
    assert lookups.notification_ids == {noted.id: note.id}


def test_campaign_lookups_for_no_campaigns(session_factory):
    lookups = asyncio.run(repo.load_campaign_lookups(session_factory, [], "v1"))
    assert lookups.view_counts == {}
    assert lookups.ad_ids == {}


def test_build_events_one_row_per_served_campaign(seed, now):
    site = seed.platform("site.com")
    inline = seed.campaign(CampaignType.ADS, platforms=[site], ad=seed.ad())
    popup = seed.campaign(CampaignType.POPUP, platforms=[site], ad=seed.ad())

    events = build_events("v1", "site.com", "US", [inline, popup], now)

    assert [(e.campaign_id, e.type) for e in events] == [
        (inline.id, VisitorEventType.AD),
        (popup.id, VisitorEventType.POPUP),
    ]
    assert all(e.status_code == 200 and e.country == "US" for e in events)


def test_build_events_fallback_row(now):
    events = build_events("v1", "extension", None, [], now)

    assert len(events) == 1
    assert events[0].campaign_id is None
    assert events[0].type == VisitorEventType.REQUEST
    assert events[0].domain == "extension"


def test_record_events(seed, session_factory, now):
    asyncio.run(record_events(session_factory, build_events("v9", "site.com", None, [], now)))

    rows = seed.events("v9")
    assert len(rows) == 1
    assert rows[0].type == VisitorEventType.REQUEST
