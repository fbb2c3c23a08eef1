"""
Browser extension request/response schemas
"""
import enum
from typing import Any, List, Optional

from pydantic import BaseModel
from pydantic.alias_generators import to_camel

from adwarden.core.exceptions import ExtensionRequestError
from adwarden.models.enums import CampaignType, DisplayMode

MAX_VISITOR_ID_LENGTH = 255  # visitor_events.visitor_id


class ContentRequest(str, enum.Enum):
    """Which content kinds an ad-block call asks for"""
    ADS = "ad"
    NOTIFICATIONS = "notification"
    BOTH = "both"   # requestType omitted

    @classmethod
    def from_request_type(cls, request_type: Optional[str]) -> "ContentRequest":
        if request_type is None:
            return cls.BOTH
        if request_type == "ad":
            return cls.ADS
        if request_type == "notification":
            return cls.NOTIFICATIONS
        raise ExtensionRequestError('requestType must be either "ad" or "notification"')

    @property
    def includes_ads(self) -> bool:
        return self in (ContentRequest.ADS, ContentRequest.BOTH)

    @property
    def includes_notifications(self) -> bool:
        return self in (ContentRequest.NOTIFICATIONS, ContentRequest.BOTH)

    @property
    def campaign_types(self) -> List[CampaignType]:
        types = []
        if self.includes_ads:
            types.extend([CampaignType.ADS, CampaignType.POPUP])
        if self.includes_notifications:
            types.append(CampaignType.NOTIFICATION)
        return types


class CamelModel(BaseModel):
    class Config:
        alias_generator = to_camel
        populate_by_name = True


def _visitor_id(body: dict) -> str:
    visitor_id = body.get("visitorId")
    if not isinstance(visitor_id, str) or not visitor_id.strip():
        raise ExtensionRequestError("visitorId is required")
    visitor_id = visitor_id.strip()
    if len(visitor_id) > MAX_VISITOR_ID_LENGTH:
        raise ExtensionRequestError(f"visitorId must be at most {MAX_VISITOR_ID_LENGTH} characters")
    return visitor_id


class AdBlockRequest(CamelModel):
    """Validated POST /extension/ad-block body"""
    visitor_id: str
    domain: Optional[str] = None
    content_request: ContentRequest = ContentRequest.BOTH

    @classmethod
    def parse_body(cls, body: Any) -> "AdBlockRequest":
        """Validate the raw JSON body, raising ExtensionRequestError (400)"""
        if not isinstance(body, dict):
            raise ExtensionRequestError("Request body must be a JSON object")

        visitor_id = _visitor_id(body)

        request_type = body.get("requestType")
        # Present but null is rejected, only an absent key means both
        if "requestType" in body and not isinstance(request_type, str):
            raise ExtensionRequestError('requestType must be either "ad" or "notification"')
        content_request = ContentRequest.from_request_type(request_type)

        domain = body.get("domain")
        if domain is not None and not isinstance(domain, str):
            raise ExtensionRequestError("domain must be a string")
        domain = domain.strip() if domain else None
        if not domain and content_request.includes_ads:
            raise ExtensionRequestError("domain is required when requesting ads")

        return cls(
            visitor_id=visitor_id,
            domain=domain or None,
            content_request=content_request,
        )


class AdPayload(CamelModel):
    """Public ad fields"""
    title: str
    image: Optional[str] = None
    description: Optional[str] = None
    redirect_url: Optional[str] = None
    html_code: Optional[str] = None
    display_as: DisplayMode = DisplayMode.INLINE


class NotificationPayload(CamelModel):
    """Public notification fields"""
    title: str
    message: str
    cta_link: Optional[str] = None


class AdBlockResponse(CamelModel):
    ads: List[AdPayload] = []
    notifications: List[NotificationPayload] = []


class NotificationsPullRequest(CamelModel):
    visitor_id: str

    @classmethod
    def parse_body(cls, body: Any) -> "NotificationsPullRequest":
        if not isinstance(body, dict):
            raise ExtensionRequestError("Request body must be a JSON object")
        return cls(visitor_id=_visitor_id(body))


class NotificationsPullResponse(CamelModel):
    notifications: List[NotificationPayload] = []


class DomainsResponse(BaseModel):
    domains: List[str] = []
