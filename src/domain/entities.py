"""Domain entities for the timesheet gateway."""
from dataclasses import dataclass
from math import radians, sin, cos, sqrt, atan2, isfinite
from typing import Tuple

from .value_objects import Coordinate

EARTH_RADIUS_METERS = 6371000


def haversine_distance(a: Coordinate, b: Coordinate) -> float:
    """Great-circle distance between two coordinates in meters."""
    lat1_rad = radians(a.latitude)
    lat2_rad = radians(b.latitude)
    delta_lat = radians(b.latitude - a.latitude)
    delta_lon = radians(b.longitude - a.longitude)

    h = sin(delta_lat / 2) ** 2 + cos(lat1_rad) * cos(lat2_rad) * sin(delta_lon / 2) ** 2
    # Rounding can push h marginally past 1 for antipodal points
    h = min(1.0, h)
    c = 2 * atan2(sqrt(h), sqrt(1 - h))
    return EARTH_RADIUS_METERS * c


@dataclass(frozen=True)
class GeoRegion:
    """A named circular area where clocking in is allowed."""
    name: str
    center: Coordinate
    radius_meters: float

    def __post_init__(self):
        if not isfinite(self.radius_meters) or self.radius_meters <= 0:
            raise ValueError(f"Radius for {self.name!r} must be a positive number, got {self.radius_meters}")

    def distance_to(self, location: Coordinate) -> float:
        return haversine_distance(self.center, location)

    def contains(self, location: Coordinate) -> tuple[bool, float]:
        """
        Check if a location is within this region.

        Returns:
            Tuple of (is_within_region, distance_in_meters)
        """
        distance = self.distance_to(location)
        return (distance <= self.radius_meters, distance)

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "latitude": self.center.latitude,
            "longitude": self.center.longitude,
            "radius": self.radius_meters,
            "configured": True,
        }


@dataclass(frozen=True)
class GeofencePolicy:
    """Regions in configured order plus the always-admit switch."""
    regions: Tuple[GeoRegion, ...] = ()
    dynamic_mode: bool = False

    def __post_init__(self):
        # Accept any iterable, always hold a tuple
        object.__setattr__(self, "regions", tuple(self.regions))

    @property
    def always_admits(self) -> bool:
        return self.dynamic_mode or not self.regions
