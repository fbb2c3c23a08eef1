"""
Eligibility Evaluator - decide whether one campaign may be served to a visitor

Pure logic, no I/O. Filters run in a fixed order and stop at the first
failure:

1. status must be active
2. now inside [start_date, end_date] (either bound optional)
3. new_users audience: visitor first seen within the new-user window
4. time_based: current local time inside [time_start, time_end], windows may
   wrap past midnight
5. frequency cap: only_once / specific_count against past views
6. country allow-list (empty = everywhere)
"""
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Iterable, Optional

from adwarden.core.clock import ensure_utc
from adwarden.models import Campaign
from adwarden.models.enums import (
    CampaignStatus,
    FrequencyType,
    TargetAudience,
)

DEFAULT_NEW_USER_WINDOW = timedelta(days=7)


def parse_time_of_day(value: Optional[str]) -> Optional[int]:
    """
    Parse "HH:MM" (or "HH:MM:SS") into minutes since midnight.
    Returns None for missing or unparseable values.
    """
    if not value:
        return None
    parts = str(value).strip().split(":")
    if len(parts) < 2:
        return None
    try:
        hours = int(parts[0])
        minutes = int(parts[1])
    except ValueError:
        return None
    if not (0 <= hours < 24 and 0 <= minutes < 60):
        return None
    return hours * 60 + minutes


def is_within_time_window(current_minutes: int, start: int, end: int) -> bool:
    if start <= end:
        return start <= current_minutes <= end
    # Wraps midnight (e.g. 22:00-06:00): only the gap (end, start) is outside
    return not (end < current_minutes < start)


def is_new_visitor(
    now: datetime,
    first_seen_at: Optional[datetime],
    window: timedelta = DEFAULT_NEW_USER_WINDOW,
) -> bool:
    # A visitor without history is seen for the first time by this request
    if first_seen_at is None:
        return True
    return now - ensure_utc(first_seen_at) <= window


def is_qualifying(
    campaign: Campaign,
    now: datetime,
    visitor_first_seen_at: Optional[datetime],
    visitor_country: Optional[str],
    past_view_count: int,
    allowed_countries: Iterable[str] = (),
    tz: tzinfo = timezone.utc,
    new_user_window: timedelta = DEFAULT_NEW_USER_WINDOW,
) -> bool:
    """Return True if the campaign passes every serving rule"""
    now = ensure_utc(now)

    # 1. Status is the authoritative switch
    if campaign.status != CampaignStatus.ACTIVE:
        return False

    # 2. Date window
    start_date = ensure_utc(campaign.start_date)
    end_date = ensure_utc(campaign.end_date)
    if start_date is not None and now < start_date:
        return False
    if end_date is not None and now > end_date:
        return False

    # 3. Audience
    if campaign.target_audience == TargetAudience.NEW_USERS:
        if not is_new_visitor(now, visitor_first_seen_at, new_user_window):
            return False

    # 4. Time of day
    if campaign.frequency_type == FrequencyType.TIME_BASED:
        start = parse_time_of_day(campaign.time_start)
        end = parse_time_of_day(campaign.time_end)
        if start is not None and end is not None:
            local_now = now.astimezone(tz)
            current = local_now.hour * 60 + local_now.minute
            if not is_within_time_window(current, start, end):
                return False

    # 5. Frequency cap
    if campaign.frequency_type == FrequencyType.ONLY_ONCE and past_view_count >= 1:
        return False
    if (
        campaign.frequency_type == FrequencyType.SPECIFIC_COUNT
        and campaign.frequency_count is not None
        and past_view_count >= campaign.frequency_count
    ):
        return False

    # 6. Geography
    allowed = {code.upper() for code in allowed_countries}
    if allowed:
        if not visitor_country or visitor_country.upper() not in allowed:
            return False

    return True
