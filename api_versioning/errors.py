"""API version errors raised while selecting a handler for a request."""

from typing import Any, Dict, List, Optional


class APIVersionError(Exception):
    """Base exception for API version errors.

    Carries the HTTP status and a machine-readable code so the versioning
    middleware can render it without knowing the concrete subclass.
    """

    code = "ApiVersionError"

    def __init__(self, message: str, status_code: int = 400, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.details = details or {}

    def to_dict(self, supported_versions: Optional[List[str]] = None) -> Dict[str, Any]:
        return {
            "error": self.message,
            "code": self.code,
            "details": self.details,
            "supported_versions": supported_versions or [],
        }


class ApiVersionUnspecifiedError(APIVersionError):
    """Raised when no version was requested and no default may be assumed."""

    code = "ApiVersionUnspecified"

    def __init__(self):
        super().__init__("An API version is required, but was not specified.")


class InvalidApiVersionError(APIVersionError, ValueError):
    """Raised when a requested version is not a valid version string."""

    code = "InvalidApiVersion"

    def __init__(self, requested: Optional[str]):
        super().__init__(
            f"The requested API version '{requested}' is invalid.",
            details={"requested_version": requested},
        )


class AmbiguousApiVersionError(APIVersionError):
    """Raised when one request carries several different version values."""

    code = "AmbiguousApiVersion"

    def __init__(self, requested: List[str]):
        super().__init__(
            f"The following API versions were requested: {', '.join(requested)}. "
            "At most, only a single API version may be specified.",
            details={"requested_versions": list(requested)},
        )


class UnsupportedApiVersionError(APIVersionError):
    """Raised when the matched route has no handler for the requested version."""

    code = "UnsupportedApiVersion"

    def __init__(self, requested: str, path: str):
        super().__init__(
            f"The HTTP resource that matches the request URI '{path}' "
            f"does not support the API version '{requested}'.",
            details={"requested_version": requested, "path": path},
        )
