"""Domain exceptions for the timesheet gateway."""
from typing import Optional

from .value_objects import Rejected


class GatewayError(Exception):
    """Base exception for errors answered locally by the gateway."""
    status_code = 500
    error = "Gateway error"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class MissingCredentialsError(GatewayError):
    """Raised when an endpoint requires a token and none could be resolved."""
    status_code = 401
    error = "Authentication required"

    def __init__(self, message: str = "Provide Bearer token in Authorization header"):
        super().__init__(message)


class MissingLocationError(GatewayError):
    """Raised when latitude/longitude are absent or not valid numbers."""
    status_code = 400
    error = "Location required"

    def __init__(self, message: str, received: Optional[dict] = None, error: Optional[str] = None):
        self.received = received or {}
        if error:
            self.error = error
        super().__init__(message)


class LocationRejectedError(GatewayError):
    """Raised when a coordinate is outside every allowed region."""
    status_code = 403
    error = "Location not allowed"

    def __init__(self, rejection: Rejected, latitude: float, longitude: float):
        self.rejection = rejection
        self.latitude = latitude
        self.longitude = longitude
        super().__init__(rejection.message)


class ConfigurationError(GatewayError):
    """Raised when the gateway is missing configuration it needs."""
    status_code = 500
    error = "Server configuration error"


class UpstreamFailureError(GatewayError):
    """Raised when the upstream API answers with a non-success status."""
    error = "Upstream request failed"

    def __init__(self, status_code: int, body: bytes, content_type: str):
        self.status_code = status_code
        self.body = body
        self.content_type = content_type
        super().__init__(f"Upstream returned {status_code}")


class UpstreamUnreachableError(GatewayError):
    """Raised when the upstream API cannot be reached or times out."""
    status_code = 502
    error = "Upstream unreachable"
