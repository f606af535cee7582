# server/biolink/errors.py

from typing import Optional


class BiolinkError(Exception):
    status_code = 400
    code = "BAD_REQUEST"

    def __init__(self, message: str, code: Optional[str] = None, details: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code
        self.details = details or {}

    def to_dict(self) -> dict:
        data = {"error": self.message, "code": self.code}
        if self.details:
            data["details"] = self.details
        return data


class ValidationError(BiolinkError):
    status_code = 400
    code = "VALIDATION_ERROR"


class InvalidLinkFormat(BiolinkError):
    """Raised when a platform link cannot be canonicalized to a URL matching its pattern."""

    status_code = 400
    code = "INVALID_LINK_FORMAT"

    def __init__(self, platform: str, link_type: str, value: str):
        super().__init__(
            f"Please enter a valid {platform} {link_type} URL or ID",
            details={"platform": platform, "link_type": link_type, "value": value[:200]},
        )
        self.platform = platform
        self.link_type = link_type
        self.value = value


class UnsupportedPlatform(BiolinkError):
    status_code = 400
    code = "UNSUPPORTED_PLATFORM"

    def __init__(self, platform: str, link_type: Optional[str] = None):
        if link_type:
            message = f"{platform} does not support {link_type} links"
        else:
            message = f"Unsupported music platform: {platform}"
        super().__init__(message, details={"platform": platform, "link_type": link_type})
        self.platform = platform
        self.link_type = link_type


class NotFound(BiolinkError):
    status_code = 404
    code = "NOT_FOUND"


class Unauthorized(BiolinkError):
    status_code = 403
    code = "UNAUTHORIZED"

    def __init__(self, message: str = "You do not own this resource"):
        super().__init__(message)
