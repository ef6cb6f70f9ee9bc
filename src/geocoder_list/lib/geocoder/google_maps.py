"""Google Maps Geocoding API backend.

Uses the Google Maps Geocoding API
(https://developers.google.com/maps/documentation/geocoding/)
for location-to-coordinate resolution. Requires an API key.
"""

from typing import Any

import httpx
from loguru import logger

from geocoder_list.lib.geocoder.base import BaseGeocoder, GeocodingProviderError, RawRecord

GOOGLE_API_URL = "https://maps.googleapis.com/maps/api/geocode/json"

# Statuses Google reports inside an otherwise successful response
_REPORTED_ERRORS = ("REQUEST_DENIED", "OVER_QUERY_LIMIT", "OVER_DAILY_LIMIT", "INVALID_REQUEST")


class GoogleMapsGeocoder(BaseGeocoder):
    """Google Maps geocoder backend."""

    def __init__(self, api_key: str, region: str | None = None) -> None:
        self._api_key = api_key
        self._region = region

    @property
    def provider_name(self) -> str:
        return "google"

    @property
    def requires_api_key(self) -> bool:
        return True

    @property
    def is_configured(self) -> bool:
        return bool(self._api_key)

    async def search(self, query: str) -> list[RawRecord]:
        """Geocode a location using the Google Maps API.

        Args:
            query: Normalized location string.

        Returns:
            Google result records (already in the canonical ``geometry`` shape).
            Quota and key problems come back as a single ``{"error": ...}``
            record so the dispatcher moves on to the next backend.

        Raises:
            GeocodingProviderError: On transport or unexpected service errors.
        """
        params = {
            "address": query,
            "key": self._api_key,
        }
        if self._region:
            params["region"] = self._region

        try:
            async with self.transport.client() as client:
                response = await client.get(GOOGLE_API_URL, params=params)
                response.raise_for_status()

            data = response.json()
        except httpx.TimeoutException as e:
            logger.warning("Google Maps geocoder timeout for location (redacted)")
            raise GeocodingProviderError("google", "Geocoding request timed out") from e
        except httpx.HTTPStatusError as e:
            logger.warning(f"Google Maps geocoder HTTP error {e.response.status_code}")
            raise GeocodingProviderError(
                "google",
                f"Provider returned HTTP {e.response.status_code}",
                status_code=e.response.status_code,
            ) from e
        except httpx.ConnectError as e:
            logger.warning("Google Maps geocoder connection error")
            raise GeocodingProviderError("google", "Connection to geocoding provider failed") from e
        except ValueError as e:
            raise GeocodingProviderError("google", f"Failed to parse response: {e}") from e

        return self._parse_response(data)

    def _parse_response(self, data: Any) -> list[RawRecord]:
        """Turn a Google response into candidate records.

        Args:
            data: Raw JSON response from Google Maps API.

        Returns:
            Candidate records, each with an ``address`` mapping built from
            its ``address_components``.

        Raises:
            GeocodingProviderError: On a non-object body or an unknown API status.
        """
        if not isinstance(data, dict):
            raise GeocodingProviderError("google", f"Unexpected response type: {type(data).__name__}")

        api_status = data.get("status", "UNKNOWN")

        if api_status == "ZERO_RESULTS":
            return []

        if api_status in _REPORTED_ERRORS:
            return [{"error": data.get("error_message", api_status)}]

        if api_status != "OK":
            raise GeocodingProviderError("google", f"Unexpected API status: {api_status}")

        records: list[RawRecord] = []
        for result in data.get("results") or []:
            if not isinstance(result, dict):
                continue
            record = dict(result)
            record["address"] = self._address_fields(result.get("address_components", []))
            records.append(record)
        return records

    @staticmethod
    def _address_fields(components: list[dict[str, Any]]) -> dict[str, str]:
        """Map Google address components to ``{type: long_name}``, first type wins."""
        fields: dict[str, str] = {}
        for component in components:
            types = component.get("types") or []
            if types and "long_name" in component:
                fields.setdefault(types[0], component["long_name"])
        return fields
