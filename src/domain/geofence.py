"""Geofence validation against the configured regions."""
from typing import Optional

from .entities import GeofencePolicy, GeoRegion
from .value_objects import Admitted, Coordinate, Rejected, ValidationResult

DYNAMIC_REGION_NAME = "Dynamic Location"


def validate_location(latitude: float, longitude: float, policy: GeofencePolicy) -> ValidationResult:
    """
    Decide whether a coordinate may clock in under the given policy.

    The first region (in configured order) containing the point is the match,
    even if a later region is closer. When no region contains the point, the
    closest region is reported; ties go to the earliest configured region.

    Args:
        latitude: Latitude in decimal degrees
        longitude: Longitude in decimal degrees
        policy: Configured regions and the dynamic-mode switch

    Returns:
        Admitted or Rejected

    Raises:
        ValueError: if the coordinate is not finite or out of range
    """
    location = Coordinate(latitude=latitude, longitude=longitude)

    if policy.always_admits:
        return Admitted(matched_region=DYNAMIC_REGION_NAME, distance_meters=0.0)

    for region in policy.regions:
        is_within, distance = region.contains(location)
        if is_within:
            return Admitted(
                matched_region=region.name,
                distance_meters=distance,
                allowed_radius=region.radius_meters,
            )

    closest: Optional[GeoRegion] = None
    min_distance = float("inf")
    for region in policy.regions:
        distance = region.distance_to(location)
        # Strict comparison keeps the first region on ties
        if distance < min_distance:
            closest = region
            min_distance = distance

    return Rejected(
        closest_region=closest.name,
        distance_meters=min_distance,
        allowed_radius=closest.radius_meters,
    )
