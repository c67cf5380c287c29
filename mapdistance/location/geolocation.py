"""Best-effort device coordinate lookup.

Processing flow:
    1. Use `DEVICE_LAT`/`DEVICE_LNG` from settings when both are configured.
    2. Otherwise query the IP geolocation endpoint (`GEOLOCATION_URL`) once.
    3. Return a `DeviceCoordinate`, or raise `LocationUnavailableError`.

Error handling strategy:
    Every failure (disabled lookup, HTTP error, malformed body) is raised as
    `LocationUnavailableError`. The shell treats it as non-fatal and proceeds
    without location bias.

Determinism:
    Configured coordinates are deterministic; IP lookup depends on network
    egress and provider data.
"""

import logging

import requests

from mapdistance.core.errors import LocationUnavailableError
from mapdistance.core.types import DeviceCoordinate


logger = logging.getLogger(__name__)

LOOKUP_TIMEOUT_SECONDS = 5


def _coordinate_from_body(data: dict) -> DeviceCoordinate:
    if not isinstance(data, dict):
        raise LocationUnavailableError()

    if data.get("status") and data.get("status") != "success":
        raise LocationUnavailableError()

    lat = data.get("lat", data.get("latitude"))
    lng = data.get("lon", data.get("longitude"))

    try:
        coordinate = DeviceCoordinate(lat=float(lat), lng=float(lng))
    except (TypeError, ValueError) as err:
        raise LocationUnavailableError() from err

    return coordinate


def lookup_device_coordinate(settings) -> DeviceCoordinate:
    """Resolve the device coordinate once.

    Args:
        settings: `provider_config.Settings` snapshot.

    Returns:
        Coordinate with both fields set.

    Raises:
        LocationUnavailableError: When no source yields a coordinate.
    """
    if settings.device_lat is not None and settings.device_lng is not None:
        return DeviceCoordinate(lat=settings.device_lat, lng=settings.device_lng)

    if not settings.geolocation_url:
        raise LocationUnavailableError()

    try:
        response = requests.get(settings.geolocation_url, timeout=LOOKUP_TIMEOUT_SECONDS)
        response.raise_for_status()
        data = response.json()
    except (requests.exceptions.RequestException, ValueError) as err:
        logger.warning("Geolocation lookup failed: %s", err)
        raise LocationUnavailableError() from err

    return _coordinate_from_body(data)
