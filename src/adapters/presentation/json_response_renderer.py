"""JSON response renderer."""
from datetime import datetime, timezone
from typing import List, Optional
import json

from domain.entities import GeofencePolicy
from domain.exceptions import GatewayError, LocationRejectedError, MissingLocationError, UpstreamFailureError
from domain.value_objects import Coordinate, Credentials, UpstreamResponse, ValidationResult

JSON_HEADERS = {"Content-Type": "application/json"}


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


class JSONResponseRenderer:
    """Renders gateway responses as (status, body, headers) triples."""

    def __init__(self, version: str = "1.0.0"):
        self._version = version

    def render_json(self, status_code: int, payload: dict) -> tuple[int, bytes, dict]:
        return status_code, json.dumps(payload).encode("utf-8"), dict(JSON_HEADERS)

    def render_upstream(self, response: UpstreamResponse) -> tuple[int, bytes, dict]:
        """Relay an upstream response verbatim."""
        return response.status_code, response.body, {"Content-Type": response.content_type}

    def render_error(self, error: GatewayError) -> tuple[int, bytes, dict]:
        if isinstance(error, UpstreamFailureError):
            return error.status_code, error.body, {"Content-Type": error.content_type}

        payload = {"error": error.error, "message": error.message}

        if isinstance(error, MissingLocationError):
            payload["received"] = error.received
        elif isinstance(error, LocationRejectedError):
            rejection = error.rejection
            payload["details"] = {
                "userLocation": {"latitude": error.latitude, "longitude": error.longitude},
                "closestLocation": rejection.closest_region,
                "distance": rejection.reported_distance,
                "allowedRadius": rejection.allowed_radius,
                "validationFailed": True,
            }

        return self.render_json(error.status_code, payload)

    def render_internal_error(self, exc: Exception) -> tuple[int, bytes, dict]:
        return self.render_json(500, {"error": "Internal server error", "message": str(exc)})

    def render_not_found(self, method: str, path: str) -> tuple[int, bytes, dict]:
        return self.render_json(404, {
            "error": "Route not found",
            "message": f"{method} {path} not found",
        })

    def render_health(self) -> tuple[int, bytes, dict]:
        return self.render_json(200, {
            "status": "ok",
            "message": "Timesheet gateway is running",
            "timestamp": _timestamp(),
            "version": self._version,
        })

    def render_auth_test(self, credentials: Credentials, cookie_names: List[str]) -> tuple[int, bytes, dict]:
        return self.render_json(200, {
            "status": "ok",
            "message": "Authentication test endpoint",
            "timestamp": _timestamp(),
            "auth": {
                "hasToken": credentials.has_token,
                "tokenMasked": credentials.masked_token or None,
                "userId": credentials.user_id,
                "role": credentials.role,
                "hasCookies": bool(cookie_names),
                "cookies": cookie_names,
            },
        })

    def render_office_config(self, policy: GeofencePolicy) -> tuple[int, bytes, dict]:
        return self.render_json(200, {
            "data": {
                "regions": [region.to_dict() for region in policy.regions],
                "dynamicMode": policy.dynamic_mode,
            }
        })

    def render_location_check(
        self,
        coordinate: Coordinate,
        result: ValidationResult,
        policy: GeofencePolicy,
    ) -> tuple[int, bytes, dict]:
        return self.render_json(200, {
            "userLocation": coordinate.to_dict(),
            "validation": result.to_dict(),
            "locationConfig": {
                "regions": [region.to_dict() for region in policy.regions],
                "dynamicMode": policy.dynamic_mode,
            },
            "timestamp": _timestamp(),
        })

    def render_bad_query(self, error: str, message: str, example: Optional[str] = None) -> tuple[int, bytes, dict]:
        payload = {"error": error, "message": message}
        if example:
            payload["example"] = example
        return self.render_json(400, payload)
