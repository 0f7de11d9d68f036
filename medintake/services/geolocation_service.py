# medintake/services/geolocation_service.py
"""
Geolocation providers.

acquire_location() either returns a GeoLocation or raises AcquisitionFailure
with reason "unsupported" or "permission_denied". Failures are never fatal:
the caller may retry or fall back to a manually entered address.
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional

from medintake.core.exceptions import AcquisitionFailure, acquisition_failure
from medintake.models.fields import GeoLocation

logger = logging.getLogger(__name__)


def format_current_location(latitude: float, longitude: float) -> str:
    """Placeholder reverse geocoding"""
    return f"{latitude:.4f}, {longitude:.4f} - Current Location"


class GeolocationProvider(ABC):

    @abstractmethod
    async def acquire_location(self) -> GeoLocation:
        """
        Raises:
            AcquisitionFailure: If no position can be obtained
        """
        pass


class StaticGeolocationProvider(GeolocationProvider):
    """Reports a fixed position; stands in for a device location service"""

    def __init__(self, latitude: float, longitude: float, address: Optional[str] = None):
        self.latitude = latitude
        self.longitude = longitude
        self.address = address

    async def acquire_location(self) -> GeoLocation:
        address = self.address or format_current_location(self.latitude, self.longitude)
        return GeoLocation(latitude=self.latitude, longitude=self.longitude, address=address)


class UnsupportedGeolocationProvider(GeolocationProvider):
    """Used when no location service is available at all"""

    async def acquire_location(self) -> GeoLocation:
        raise acquisition_failure(
            "Location services are not supported",
            reason=AcquisitionFailure.UNSUPPORTED,
            source="geolocation"
        )


class DeniedGeolocationProvider(GeolocationProvider):
    """Models a user who refused the location permission"""

    async def acquire_location(self) -> GeoLocation:
        raise acquisition_failure(
            "Location permission denied",
            reason=AcquisitionFailure.PERMISSION_DENIED,
            source="geolocation"
        )
