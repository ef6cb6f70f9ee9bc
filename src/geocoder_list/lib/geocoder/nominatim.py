"""OpenStreetMap Nominatim geocoder backend.

Uses the Nominatim API (https://nominatim.org/release-docs/develop/api/Search/)
for location-to-coordinate resolution. Free but rate-limited to 1 req/sec.
Records come back in the flat ``lat``/``lon`` shape with an ``address`` mapping.
"""

import httpx
from loguru import logger

from geocoder_list.lib.geocoder.base import BaseGeocoder, GeocodingProviderError, RawRecord

NOMINATIM_API_URL = "https://nominatim.openstreetmap.org/search"
DEFAULT_LIMIT = 5


class NominatimGeocoder(BaseGeocoder):
    """OpenStreetMap Nominatim geocoder backend."""

    def __init__(
        self,
        email: str = "",
        limit: int = DEFAULT_LIMIT,
        country_codes: str | None = None,
        base_url: str = NOMINATIM_API_URL,
    ) -> None:
        self._email = email
        self._limit = limit
        self._country_codes = country_codes
        self._base_url = base_url

    @property
    def provider_name(self) -> str:
        return "nominatim"

    async def search(self, query: str) -> list[RawRecord]:
        """Geocode a location using the Nominatim API.

        Args:
            query: Normalized location string.

        Returns:
            Nominatim result records, empty if no match found.

        Raises:
            GeocodingProviderError: On transport or service errors.
        """
        params: dict[str, str | int] = {
            "q": query,
            "format": "json",
            "limit": self._limit,
            "addressdetails": 1,
        }
        if self._email:
            params["email"] = self._email
        if self._country_codes:
            params["countrycodes"] = self._country_codes

        try:
            async with self.transport.client() as client:
                response = await client.get(self._base_url, params=params)
                response.raise_for_status()

            data = response.json()
        except httpx.TimeoutException as e:
            logger.warning("Nominatim geocoder timeout for location (redacted)")
            raise GeocodingProviderError("nominatim", "Geocoding request timed out") from e
        except httpx.HTTPStatusError as e:
            logger.warning(f"Nominatim geocoder HTTP error {e.response.status_code}")
            raise GeocodingProviderError(
                "nominatim",
                f"Provider returned HTTP {e.response.status_code}",
                status_code=e.response.status_code,
            ) from e
        except httpx.ConnectError as e:
            logger.warning("Nominatim geocoder connection error")
            raise GeocodingProviderError("nominatim", "Connection to geocoding provider failed") from e
        except ValueError as e:
            raise GeocodingProviderError("nominatim", f"Failed to parse response: {e}") from e

        if isinstance(data, dict) and data.get("error"):
            return [{"error": data["error"]}]
        if not isinstance(data, list):
            raise GeocodingProviderError("nominatim", f"Unexpected response type: {type(data).__name__}")
        return data
