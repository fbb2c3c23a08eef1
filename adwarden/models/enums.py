"""
Enums for database models
"""
import enum


class UserRole(str, enum.Enum):
    """Dashboard user roles"""
    USER = "user"
    ADMIN = "admin"


class TargetAudience(str, enum.Enum):
    """Who a campaign is shown to"""
    ALL_USERS = "all_users"
    NEW_USERS = "new_users"   # first seen within NEW_USER_WINDOW_DAYS


class CampaignType(str, enum.Enum):
    """What a campaign delivers"""
    ADS = "ads"                    # inline ad, needs a platform
    POPUP = "popup"                # popup ad, needs a platform
    NOTIFICATION = "notification"  # no platform = every domain


class FrequencyType(str, enum.Enum):
    """How often a campaign may be shown to a visitor"""
    ALWAYS = "always"
    FULL_DAY = "full_day"              # bounded by the date window only
    TIME_BASED = "time_based"          # time_start..time_end each day
    ONLY_ONCE = "only_once"
    SPECIFIC_COUNT = "specific_count"  # at most frequency_count views


class CampaignStatus(str, enum.Enum):
    """Campaign status, the authoritative serving switch"""
    ACTIVE = "active"
    INACTIVE = "inactive"
    SCHEDULED = "scheduled"
    EXPIRED = "expired"


class AdStatus(str, enum.Enum):
    """Ad content status"""
    ACTIVE = "active"
    INACTIVE = "inactive"
    EXPIRED = "expired"


class VisitorEventType(str, enum.Enum):
    """Visitor event log type"""
    AD = "ad"
    POPUP = "popup"
    NOTIFICATION = "notification"
    REQUEST = "request"   # nothing was served


class DisplayMode(str, enum.Enum):
    """How the extension renders an ad"""
    INLINE = "inline"
    POPUP = "popup"


# Mapping: CampaignType -> event type logged when the campaign is served
CAMPAIGN_TYPE_TO_EVENT = {
    CampaignType.ADS: VisitorEventType.AD,
    CampaignType.POPUP: VisitorEventType.POPUP,
    CampaignType.NOTIFICATION: VisitorEventType.NOTIFICATION,
}

# Mapping: CampaignType -> ad display mode
CAMPAIGN_TYPE_TO_DISPLAY = {
    CampaignType.ADS: DisplayMode.INLINE,
    CampaignType.POPUP: DisplayMode.POPUP,
}
