"""Geocoding Clients - Imperative Shell.

This module handles HTTP communication with the reverse geocoding service
used to name event locations, and with the place search service used to
validate subscription cities. Field selection is in the core module.
"""

import logging

import requests

from quake_notifier import __version__
from quake_notifier.core.errors import CityValidationUnavailable, GeoLookupFailed
from quake_notifier.core.geocode import GeoLocation, is_city_result, resolve_location


logger = logging.getLogger(__name__)


REVERSE_GEOCODE_URL = "https://api-bdc.net/data/reverse-geocode-client"
NOMINATIM_SEARCH_URL = "https://nominatim.openstreetmap.org/search"

# Nominatim's usage policy requires an identifying User-Agent
USER_AGENT = f"quake-notifier/{__version__}"

# Default timeout for geocoding requests (seconds)
DEFAULT_TIMEOUT = 10


class ReverseGeocodeClient:
    """Client for resolving coordinates to a locality.

    This is part of the imperative shell - it handles HTTP I/O.
    """

    def __init__(
        self,
        base_url: str = REVERSE_GEOCODE_URL,
        timeout: int = DEFAULT_TIMEOUT,
    ) -> None:
        """Initialize reverse geocode client.

        Args:
            base_url: Reverse geocoding endpoint
            timeout: Request timeout in seconds
        """
        self.base_url = base_url
        self.timeout = timeout

    def resolve(self, latitude: float, longitude: float, region_code: str) -> GeoLocation:
        """Resolve coordinates to a display name and matching candidates.

        This method performs HTTP I/O.

        Args:
            latitude: Event latitude
            longitude: Event longitude
            region_code: Locality language hint (e.g. 'tr', 'en')

        Returns:
            GeoLocation for the coordinates

        Raises:
            GeoLookupFailed: On network errors, non-2xx or invalid responses
        """
        params = {
            "latitude": str(latitude),
            "longitude": str(longitude),
            "localityLanguage": region_code,
        }

        try:
            response = requests.get(self.base_url, params=params, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except requests.RequestException as e:
            raise GeoLookupFailed(f"Reverse geocoding failed: {e}") from e
        except ValueError as e:
            raise GeoLookupFailed(f"Reverse geocoding returned invalid JSON: {e}") from e

        if not isinstance(data, dict):
            raise GeoLookupFailed("Reverse geocoding returned an unexpected body")

        location = resolve_location(data)
        logger.debug(
            "Resolved %.4f,%.4f to %s (candidates: %s)",
            latitude,
            longitude,
            location.display_name,
            ", ".join(location.candidates),
        )
        return location


class CityValidationClient:
    """Client for checking that a name refers to a city.

    This is part of the imperative shell - it handles HTTP I/O.
    """

    def __init__(
        self,
        base_url: str = NOMINATIM_SEARCH_URL,
        timeout: int = DEFAULT_TIMEOUT,
    ) -> None:
        self.base_url = base_url
        self.timeout = timeout

    def is_city(self, name: str) -> bool:
        """Check whether a place search classifies the name as a city.

        This method performs HTTP I/O.

        Args:
            name: City name as typed by the subscriber

        Returns:
            True if any search result is a city

        Raises:
            CityValidationUnavailable: If the search service cannot be used
        """
        try:
            response = requests.get(
                self.base_url,
                params={"q": name, "format": "json", "limit": "5"},
                headers={"User-Agent": USER_AGENT},
                timeout=self.timeout,
            )
            response.raise_for_status()
            data = response.json()
        except requests.RequestException as e:
            logger.error("City validation request failed: %s", str(e))
            raise CityValidationUnavailable(f"City validation failed: {e}") from e
        except ValueError as e:
            logger.error("City validation returned invalid JSON: %s", str(e))
            raise CityValidationUnavailable("City validation returned invalid JSON") from e

        if not isinstance(data, list):
            raise CityValidationUnavailable("City validation returned an unexpected body")

        return is_city_result(data)
