"""Value objects for the domain layer."""
from dataclasses import dataclass
from enum import Enum
from math import floor, isfinite
from typing import Optional, Union


@dataclass(frozen=True)
class Coordinate:
    """Immutable GPS coordinate in decimal degrees."""
    latitude: float
    longitude: float

    def __post_init__(self):
        if not (isfinite(self.latitude) and isfinite(self.longitude)):
            raise ValueError(f"Coordinates must be finite, got ({self.latitude}, {self.longitude})")
        if not -90 <= self.latitude <= 90:
            raise ValueError(f"Latitude must be between -90 and 90, got {self.latitude}")
        if not -180 <= self.longitude <= 180:
            raise ValueError(f"Longitude must be between -180 and 180, got {self.longitude}")

    def to_dict(self) -> dict:
        return {"latitude": self.latitude, "longitude": self.longitude}


def mask_token(token: Optional[str]) -> str:
    """Mask a token for logging: first 4 and last 4 characters only."""
    if not token:
        return ""
    if len(token) <= 8:
        return "****"
    return f"{token[:4]}...{token[-4:]}"


@dataclass(frozen=True)
class Credentials:
    """Caller identity resolved from a single inbound request."""
    token: Optional[str] = None
    user_id: Optional[str] = None
    role: Optional[str] = None

    @property
    def has_token(self) -> bool:
        return bool(self.token)

    @property
    def masked_token(self) -> str:
        return mask_token(self.token)


def round_meters(distance: float) -> int:
    """Round a distance half-up to whole meters."""
    return int(floor(distance + 0.5))


@dataclass(frozen=True)
class Admitted:
    """The coordinate lies inside a configured region."""
    matched_region: str
    distance_meters: float
    allowed_radius: Optional[float] = None

    is_valid = True

    @property
    def reported_distance(self) -> int:
        return round_meters(self.distance_meters)

    def to_dict(self) -> dict:
        return {
            "isValid": True,
            "matchedLocation": self.matched_region,
            "distance": self.reported_distance,
            "allowedRadius": self.allowed_radius,
        }


@dataclass(frozen=True)
class Rejected:
    """The coordinate lies outside every configured region."""
    closest_region: str
    distance_meters: float
    allowed_radius: float

    is_valid = False

    @property
    def reported_distance(self) -> int:
        return round_meters(self.distance_meters)

    @property
    def message(self) -> str:
        return (
            f"You are {self.reported_distance}m away from the nearest allowed location "
            f"({self.closest_region}). Maximum allowed distance is {self.allowed_radius:g}m."
        )

    def to_dict(self) -> dict:
        return {
            "isValid": False,
            "closestLocation": self.closest_region,
            "distance": self.reported_distance,
            "allowedRadius": self.allowed_radius,
            "message": self.message,
        }


ValidationResult = Union[Admitted, Rejected]


class LocationRequirement(Enum):
    """How an endpoint treats latitude/longitude in the request body."""
    NONE = "none"
    OPTIONAL = "optional"
    REQUIRED = "required"


@dataclass(frozen=True)
class InboundRequest:
    """Framework-independent view of one inbound HTTP request."""
    method: str
    path: str
    headers: dict
    body: dict
    path_params: dict
    query: dict
    raw_body: bytes = b""
    content_type: Optional[str] = None

    def header(self, name: str) -> Optional[str]:
        """Case-insensitive header lookup."""
        wanted = name.lower()
        for key, value in self.headers.items():
            if key.lower() == wanted:
                return value
        return None


@dataclass(frozen=True)
class UpstreamResponse:
    """A response received from the upstream timesheet API."""
    status_code: int
    body: bytes
    content_type: str = "application/json"

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")
