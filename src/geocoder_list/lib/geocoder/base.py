"""Abstract base geocoder interface for pluggable backend support."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from loguru import logger

from geocoder_list.lib.geocoder.transport import Transport

RawRecord = dict[str, Any]


@dataclass(frozen=True)
class CanonicalResult:
    """Backend-independent geocoding result.

    ``geocoder`` names the backend that produced the result during the current
    call; it is ``None`` for results served from the cache.
    """

    latitude: float
    longitude: float
    address: dict[str, Any] = field(default_factory=dict)
    geocoder: str | None = None
    raw: RawRecord | None = field(default=None, compare=False, repr=False)

    def __post_init__(self) -> None:
        if not (-90 <= self.latitude <= 90):
            msg = f"latitude must be between -90 and 90, got {self.latitude}"
            raise ValueError(msg)
        if not (-180 <= self.longitude <= 180):
            msg = f"longitude must be between -180 and 180, got {self.longitude}"
            raise ValueError(msg)

    def to_dict(self) -> dict[str, Any]:
        """Render the canonical boundary shape consumed by map clients."""
        data: dict[str, Any] = {
            "geometry": {"location": {"lat": self.latitude, "lng": self.longitude}},
            "address": dict(self.address),
        }
        if self.geocoder is not None:
            data["geocoder"] = self.geocoder
        return data


class GeocodingProviderError(Exception):
    """Raised when a geocoding backend experiences a transport or service error.

    Distinguishes backend failures (timeout, HTTP error, connection error)
    from a successful response with no match (which returns an empty list).

    Args:
        provider_name: Name of the failing backend.
        message: Human-readable error description.
        status_code: Optional HTTP status code from the backend.
    """

    def __init__(self, provider_name: str, message: str, status_code: int | None = None) -> None:
        self.provider_name = provider_name
        self.message = message
        self.status_code = status_code
        super().__init__(f"{provider_name}: {message}")


@dataclass(frozen=True)
class GeocodeOutcome:
    """Result of invoking a backend: either raw candidate records or an error."""

    records: list[RawRecord] = field(default_factory=list)
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, records: list[RawRecord]) -> "GeocodeOutcome":
        return cls(records=list(records))

    @classmethod
    def failure(cls, error: str) -> "GeocodeOutcome":
        return cls(error=error)


class BaseGeocoder(ABC):
    """Abstract geocoder interface. All backends must implement this."""

    _transport: Transport | None = None

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Unique name identifying this geocoder backend."""

    @property
    def requires_api_key(self) -> bool:
        """Whether this backend requires an API key to function."""
        return False

    @property
    def is_configured(self) -> bool:
        """Whether this backend has all required configuration (e.g., API keys)."""
        return True

    @property
    def transport(self) -> Transport:
        """Shared transport settings, or defaults when none were propagated."""
        return self._transport if self._transport is not None else Transport()

    def set_transport(self, transport: Transport) -> None:
        """Accept a shared transport configuration (user agent, proxy, timeout).

        Args:
            transport: Transport settings used for every subsequent request.
        """
        self._transport = transport

    @abstractmethod
    async def search(self, query: str) -> list[RawRecord]:
        """Run the backend lookup and return its raw candidate records.

        Args:
            query: Whitespace-normalized location string.

        Returns:
            Raw candidate records in backend order (empty when nothing matched).

        Raises:
            GeocodingProviderError: On transport or service errors.
        """

    async def geocode(self, query: str) -> GeocodeOutcome:
        """Look up a location, reporting backend failures as a failed outcome.

        Args:
            query: Whitespace-normalized location string.

        Returns:
            GeocodeOutcome holding the raw records, or the error text on failure.
        """
        try:
            return GeocodeOutcome.success(await self.search(query))
        except GeocodingProviderError as e:
            return GeocodeOutcome.failure(str(e))
        except Exception as e:
            logger.exception(f"{self.provider_name} geocoder unexpected error")
            return GeocodeOutcome.failure(f"{self.provider_name}: Unexpected error: {e}")
