"""US Census Bureau geocoder backend.

Uses the Census Geocoding API (https://geocoding.geo.census.gov/geocoder/)
for location-to-coordinate resolution. Only US addresses resolve, so this
backend is usually registered behind a routing predicate.
"""

import httpx
from loguru import logger

from geocoder_list.lib.geocoder.base import BaseGeocoder, GeocodingProviderError, RawRecord

CENSUS_API_URL = "https://geocoding.geo.census.gov/geocoder/locations/onelineaddress"
DEFAULT_BENCHMARK = "Public_AR_Current"


class CensusGeocoder(BaseGeocoder):
    """US Census Bureau geocoder backend."""

    def __init__(self, benchmark: str = DEFAULT_BENCHMARK) -> None:
        self._benchmark = benchmark

    @property
    def provider_name(self) -> str:
        return "census"

    async def search(self, query: str) -> list[RawRecord]:
        """Geocode a location using the Census Bureau API.

        The whole response is returned as a single record; its first
        ``result.addressMatches`` entry carries the coordinates.

        Args:
            query: Normalized location string.

        Returns:
            A one-element list with the response, or empty if nothing matched.

        Raises:
            GeocodingProviderError: On transport or service errors (timeout, HTTP error, connection).
        """
        params = {
            "address": query,
            "benchmark": self._benchmark,
            "format": "json",
        }

        try:
            async with self.transport.client() as client:
                response = await client.get(CENSUS_API_URL, params=params)
                response.raise_for_status()

            data = response.json()
        except httpx.TimeoutException as e:
            logger.warning("Census geocoder timeout for location (redacted)")
            raise GeocodingProviderError("census", "Geocoding request timed out") from e
        except httpx.HTTPStatusError as e:
            logger.warning(f"Census geocoder HTTP error {e.response.status_code}")
            raise GeocodingProviderError(
                "census", f"Provider returned HTTP {e.response.status_code}", status_code=e.response.status_code
            ) from e
        except httpx.ConnectError as e:
            logger.warning("Census geocoder connection error")
            raise GeocodingProviderError("census", "Connection to geocoding provider failed") from e
        except ValueError as e:
            raise GeocodingProviderError("census", f"Failed to parse response: {e}") from e

        if not isinstance(data, dict):
            raise GeocodingProviderError("census", f"Unexpected response type: {type(data).__name__}")
        if data.get("errors"):
            return [{"error": "; ".join(str(err) for err in data["errors"])}]
        if not data.get("result", {}).get("addressMatches"):
            return []
        return [data]
