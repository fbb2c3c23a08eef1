"""
Application exceptions rendered as ErrorResponse payloads
"""
from typing import Any, Optional


class AdwardenError(Exception):
    """Base error carrying an HTTP status and a machine-readable message"""

    status_code: int = 500

    def __init__(self, error: str, details: Optional[Any] = None, status_code: Optional[int] = None):
        super().__init__(error)
        self.error = error
        self.details = details
        if status_code is not None:
            self.status_code = status_code


class ExtensionRequestError(AdwardenError):
    """Malformed or incomplete request from the browser extension"""

    status_code = 400


class RateLimitExceeded(AdwardenError):
    status_code = 429
