"""Photon (Komoot) geocoder backend.

Uses the Photon geocoder (https://photon.komoot.io/) for location-to-coordinate
resolution. Free, open-source, and self-hostable. Based on OpenStreetMap data.
Results are GeoJSON features whose positions are ``[lng, lat]``.
"""

from typing import Any

import httpx
from loguru import logger

from geocoder_list.lib.geocoder.base import BaseGeocoder, GeocodingProviderError, RawRecord

DEFAULT_BASE_URL = "https://photon.komoot.io"
DEFAULT_LIMIT = 5

# Photon property → canonical address field
_ADDRESS_FIELDS: dict[str, str] = {
    "housenumber": "house_number",
    "street": "road",
    "city": "city",
    "county": "county",
    "state": "state",
    "postcode": "postcode",
    "country": "country",
    "countrycode": "country_code",
}


class PhotonGeocoder(BaseGeocoder):
    """Photon (Komoot) geocoder backend."""

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        limit: int = DEFAULT_LIMIT,
        lang: str = "en",
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._limit = limit
        self._lang = lang

    @property
    def provider_name(self) -> str:
        return "photon"

    async def search(self, query: str) -> list[RawRecord]:
        """Geocode a location using the Photon API.

        Args:
            query: Normalized location string.

        Returns:
            GeoJSON features, each with an added ``address`` mapping.

        Raises:
            GeocodingProviderError: On transport or service errors.
        """
        url = f"{self._base_url}/api"
        params: dict[str, str | int] = {
            "q": query,
            "limit": self._limit,
            "lang": self._lang,
        }

        try:
            async with self.transport.client() as client:
                response = await client.get(url, params=params)
                response.raise_for_status()

            data = response.json()
        except httpx.TimeoutException as e:
            logger.warning("Photon geocoder timeout for location (redacted)")
            raise GeocodingProviderError("photon", "Geocoding request timed out") from e
        except httpx.HTTPStatusError as e:
            logger.warning(f"Photon geocoder HTTP error {e.response.status_code}")
            raise GeocodingProviderError(
                "photon",
                f"Provider returned HTTP {e.response.status_code}",
                status_code=e.response.status_code,
            ) from e
        except httpx.ConnectError as e:
            logger.warning("Photon geocoder connection error")
            raise GeocodingProviderError("photon", "Connection to geocoding provider failed") from e
        except ValueError as e:
            raise GeocodingProviderError("photon", f"Failed to parse response: {e}") from e

        return self._parse_response(data)

    def _parse_response(self, data: Any) -> list[RawRecord]:
        """Extract features from a Photon FeatureCollection.

        Args:
            data: Raw GeoJSON response from Photon API.

        Returns:
            Feature records, empty if no match found.

        Raises:
            GeocodingProviderError: If the body is not a JSON object.
        """
        if not isinstance(data, dict):
            raise GeocodingProviderError("photon", f"Unexpected response type: {type(data).__name__}")
        if data.get("message"):
            return [{"error": data["message"]}]

        records: list[RawRecord] = []
        for feature in data.get("features") or []:
            if not isinstance(feature, dict):
                continue
            record = dict(feature)
            record["address"] = self._build_address(feature.get("properties") or {})
            records.append(record)
        return records

    @staticmethod
    def _build_address(properties: dict) -> dict[str, str]:
        """Build structured address fields from Photon properties."""
        return {field: properties[key] for key, field in _ADDRESS_FIELDS.items() if properties.get(key)}
