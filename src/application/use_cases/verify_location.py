"""Use case for checking a reported location against the geofence."""
from math import isfinite
from typing import Any, Optional
import logging

from domain.entities import GeofencePolicy
from domain.exceptions import LocationRejectedError, MissingLocationError
from domain.geofence import validate_location
from domain.value_objects import Coordinate, LocationRequirement, ValidationResult


def _to_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return None
    return None


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def read_coordinate(body: dict, requirement: LocationRequirement) -> Optional[Coordinate]:
    """
    Read latitude/longitude from a request body.

    Returns None when the endpoint does not need a location, or when an
    optional location was not sent.

    Raises:
        MissingLocationError: if a required location is absent, or a sent
            location is not a pair of valid numbers
    """
    if requirement is LocationRequirement.NONE:
        return None

    raw_lat = body.get("latitude")
    raw_lng = body.get("longitude")
    received = {"latitude": raw_lat, "longitude": raw_lng}

    if _is_blank(raw_lat) or _is_blank(raw_lng):
        if requirement is LocationRequirement.OPTIONAL:
            return None
        raise MissingLocationError("Both latitude and longitude are required", received=received)

    latitude = _to_float(raw_lat)
    longitude = _to_float(raw_lng)
    if latitude is None or longitude is None or not (isfinite(latitude) and isfinite(longitude)):
        raise MissingLocationError(
            "Latitude and longitude must be valid numbers",
            received=received,
            error="Invalid location data",
        )

    try:
        return Coordinate(latitude=latitude, longitude=longitude)
    except ValueError as e:
        raise MissingLocationError(str(e), received=received, error="Invalid location data") from e


class VerifyLocation:
    """Use case for admitting or rejecting a clock-in location."""

    def __init__(self, policy: GeofencePolicy):
        self._policy = policy

    @property
    def policy(self) -> GeofencePolicy:
        return self._policy

    def check(self, coordinate: Coordinate) -> ValidationResult:
        """Validate without raising; used by the diagnostics route."""
        return validate_location(coordinate.latitude, coordinate.longitude, self._policy)

    def execute(self, coordinate: Coordinate) -> ValidationResult:
        """
        Validate a coordinate for a location-sensitive action.

        Raises:
            LocationRejectedError: if the coordinate is outside every region
        """
        result = self.check(coordinate)

        if not result.is_valid:
            logging.warning(f"🚫 Location validation failed: {result.message}")
            raise LocationRejectedError(result, coordinate.latitude, coordinate.longitude)

        logging.info(
            f"✅ Location validation passed: {result.matched_region} "
            f"({result.reported_distance}m, allowed {result.allowed_radius})"
        )
        return result
