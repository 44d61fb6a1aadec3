"""Configuration management."""
import os
import json
import logging
from dataclasses import dataclass, field
from typing import List, Mapping, Optional, Tuple

from application.compatibility import MockFallbackPolicy
from domain.entities import GeoRegion, GeofencePolicy
from domain.exceptions import ConfigurationError
from domain.value_objects import Coordinate

TRUTHY = {"1", "true", "yes", "on"}

# (name, latitude env, longitude env, radius env, default latitude, default longitude, default radius)
LEGACY_REGIONS = [
    ("Default Office", "LATITUDE", "LONGITUDE", "RADIUS", 26.257544, 73.009617, 100.0),
    ("Mumbai Office", "MUMBAI_LATITUDE", "MUMBAI_LONGITUDE", "MUMBAI_RADIUS", 19.184251792428768, 72.8313642, 100.0),
    ("Current Location", "CURRENT_LATITUDE", "CURRENT_LONGITUDE", "CURRENT_RADIUS", 24.9167872, 74.62912, 100.0),
]


def _float_env(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from e


def _make_region(name: str, latitude: float, longitude: float, radius: float) -> GeoRegion:
    try:
        return GeoRegion(
            name=name,
            center=Coordinate(latitude=latitude, longitude=longitude),
            radius_meters=radius,
        )
    except ValueError as e:
        raise ConfigurationError(f"Invalid region {name!r}: {e}") from e


@dataclass(frozen=True)
class UpstreamConfig:
    """Upstream timesheet API configuration."""
    base_url: str
    timeout_seconds: float = 10.0

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> 'UpstreamConfig':
        """Load upstream config from environment variables."""
        env = os.environ if env is None else env
        base_url = env.get('TIMESHEET_API_URL', '').strip()
        if not base_url:
            logging.warning("⚠️ TIMESHEET_API_URL is not set; forwarded routes will answer 500")
        return cls(
            base_url=base_url,
            timeout_seconds=_float_env(env, 'UPSTREAM_TIMEOUT_SECONDS', 10.0),
        )


@dataclass(frozen=True)
class GeofenceConfig:
    """Allowed regions and the dynamic location switch."""
    regions: Tuple[GeoRegion, ...] = field(default_factory=tuple)
    dynamic_mode: bool = False

    @property
    def policy(self) -> GeofencePolicy:
        return GeofencePolicy(regions=self.regions, dynamic_mode=self.dynamic_mode)

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> 'GeofenceConfig':
        """
        Load regions from GEOFENCE_REGIONS (a JSON list), falling back to the
        per-office LATITUDE/LONGITUDE/RADIUS variables.
        """
        env = os.environ if env is None else env
        raw_regions = env.get('GEOFENCE_REGIONS', '').strip()
        regions = cls._parse_regions(raw_regions) if raw_regions else cls._legacy_regions(env)
        dynamic_mode = env.get('DYNAMIC_LOCATION', '').strip().lower() in TRUTHY

        if dynamic_mode:
            logging.warning("⚠️ DYNAMIC_LOCATION is enabled: geofence checks admit every location")
        elif not regions:
            logging.warning("⚠️ No geofence regions configured: every location will be admitted")
        else:
            names = ", ".join(region.name for region in regions)
            logging.info(f"✅ Loaded {len(regions)} geofence regions: {names}")

        return cls(regions=tuple(regions), dynamic_mode=dynamic_mode)

    @staticmethod
    def _parse_regions(raw: str) -> List[GeoRegion]:
        try:
            items = json.loads(raw)
        except ValueError as e:
            raise ConfigurationError(f"GEOFENCE_REGIONS is not valid JSON: {e}") from e
        if not isinstance(items, list):
            raise ConfigurationError("GEOFENCE_REGIONS must be a JSON list")

        regions = []
        for index, item in enumerate(items):
            if not isinstance(item, dict):
                raise ConfigurationError(f"GEOFENCE_REGIONS[{index}] must be an object")
            try:
                name = str(item.get('name') or f"Region {index + 1}")
                latitude = float(item['latitude'])
                longitude = float(item['longitude'])
                radius = float(item.get('radius', item.get('radius_meters')))
            except (KeyError, TypeError, ValueError) as e:
                raise ConfigurationError(f"GEOFENCE_REGIONS[{index}] is missing or has invalid fields: {e}") from e
            regions.append(_make_region(name, latitude, longitude, radius))
        return regions

    @staticmethod
    def _legacy_regions(env: Mapping[str, str]) -> List[GeoRegion]:
        return [
            _make_region(
                name,
                _float_env(env, lat_var, default_lat),
                _float_env(env, lng_var, default_lng),
                _float_env(env, radius_var, default_radius),
            )
            for name, lat_var, lng_var, radius_var, default_lat, default_lng, default_radius in LEGACY_REGIONS
        ]


@dataclass(frozen=True)
class CompatibilityConfig:
    """Upstream statuses answered with a synthetic success on punch in/out."""
    mock_statuses: frozenset = frozenset()

    @property
    def mock_fallback(self) -> MockFallbackPolicy:
        return MockFallbackPolicy(statuses=self.mock_statuses)

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> 'CompatibilityConfig':
        env = os.environ if env is None else env
        raw = env.get('COMPAT_MOCK_STATUSES', '').strip()
        if not raw:
            return cls()
        try:
            statuses = frozenset(int(part) for part in raw.split(',') if part.strip())
        except ValueError as e:
            raise ConfigurationError(f"COMPAT_MOCK_STATUSES must be comma-separated status codes, got {raw!r}") from e
        logging.warning(f"⚠️ Mock fallback enabled for upstream statuses: {sorted(statuses)}")
        return cls(mock_statuses=statuses)


@dataclass(frozen=True)
class AppConfig:
    """Application configuration."""
    upstream: UpstreamConfig
    geofence: GeofenceConfig
    compatibility: CompatibilityConfig
    version: str = "1.0.0"

    @classmethod
    def load(cls, env: Optional[Mapping[str, str]] = None) -> 'AppConfig':
        """Load application configuration."""
        return cls(
            upstream=UpstreamConfig.from_env(env),
            geofence=GeofenceConfig.from_env(env),
            compatibility=CompatibilityConfig.from_env(env),
        )
