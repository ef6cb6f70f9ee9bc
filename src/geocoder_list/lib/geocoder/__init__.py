"""Geocoder library: one façade over many geocoding backends.

Public API:
    - GeocoderList: Dispatcher trying backends in order with caching and an attempt log
    - Multiplicity: SINGLE / ALL result modes
    - BackendRegistry, Unconditional, Conditional: Ordered backend entries
    - ResultNormalizer, ShapeMatcher: Raw record → CanonicalResult mapping
    - CanonicalResult: Backend-independent result
    - AttemptRecord, AttemptLog: Structured log of backend invocations
    - BaseGeocoder, GeocodeOutcome, GeocodingProviderError: Backend contract
    - Transport: Shared user agent / proxy / timeout settings
    - CensusGeocoder, GoogleMapsGeocoder, NominatimGeocoder, PhotonGeocoder: Bundled backends
    - get_geocoder: Backend factory/registry
    - build_geocoder_list: Dispatcher configured from Settings
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from geocoder_list.lib.geocoder.address import normalize_query
from geocoder_list.lib.geocoder.attempt_log import AttemptLog, AttemptRecord
from geocoder_list.lib.geocoder.base import (
    BaseGeocoder,
    CanonicalResult,
    GeocodeOutcome,
    GeocodingProviderError,
)
from geocoder_list.lib.geocoder.census import CensusGeocoder
from geocoder_list.lib.geocoder.dispatcher import GeocoderList, Multiplicity
from geocoder_list.lib.geocoder.google_maps import GoogleMapsGeocoder
from geocoder_list.lib.geocoder.nominatim import NominatimGeocoder
from geocoder_list.lib.geocoder.normalizer import ResultNormalizer, ShapeMatcher
from geocoder_list.lib.geocoder.photon import PhotonGeocoder
from geocoder_list.lib.geocoder.registry import BackendRegistry, Conditional, Unconditional
from geocoder_list.lib.geocoder.transport import Transport

if TYPE_CHECKING:
    from geocoder_list.core.config import Settings

# Backend registry: all known backends
_PROVIDERS: dict[str, type[BaseGeocoder]] = {
    "census": CensusGeocoder,
    "google": GoogleMapsGeocoder,
    "nominatim": NominatimGeocoder,
    "photon": PhotonGeocoder,
}


def get_available_providers() -> list[str]:
    """Return the names of all bundled geocoder backends.

    Returns:
        Sorted list of backend name strings.
    """
    return sorted(_PROVIDERS.keys())


def get_geocoder(provider: str, **kwargs: Any) -> BaseGeocoder:
    """Get a geocoder instance by backend name.

    Args:
        provider: Backend name (e.g., "nominatim").
        **kwargs: Additional arguments forwarded to the backend constructor.

    Returns:
        An instance of the requested backend.

    Raises:
        ValueError: If the backend is not registered.
    """
    cls = _PROVIDERS.get(provider)
    if cls is None:
        msg = f"Unknown geocoder provider: {provider!r}. Available: {list(_PROVIDERS.keys())}"
        raise ValueError(msg)
    return cls(**kwargs)


def transport_from_settings(settings: Settings) -> Transport:
    """Build the shared transport from application settings."""
    return Transport(
        user_agent=settings.geocoder_user_agent,
        timeout=settings.geocoder_timeout,
        proxy=settings.geocoder_proxy,
        trust_env=settings.geocoder_trust_env,
    )


def build_geocoder_list(settings: Settings) -> GeocoderList:
    """Build a dispatcher from the backends that are enabled and configured.

    Backends are registered in ``geocoder_fallback_order``. The Census
    backend is routed through ``geocoder_census_pattern`` when one is set.
    The shared transport is propagated to every backend.

    Args:
        settings: Application settings.

    Returns:
        A GeocoderList ready to resolve queries.
    """
    provider_configs: dict[str, dict[str, Any]] = {
        "census": {
            "enabled": settings.geocoder_census_enabled,
            "pattern": settings.geocoder_census_pattern,
        },
        "google": {
            "enabled": settings.geocoder_google_enabled and bool(settings.geocoder_google_api_key),
            "kwargs": {"api_key": settings.geocoder_google_api_key or ""},
        },
        "nominatim": {
            "enabled": settings.geocoder_nominatim_enabled,
            "kwargs": {"email": settings.geocoder_nominatim_email},
        },
        "photon": {
            "enabled": settings.geocoder_photon_enabled,
            "kwargs": {"base_url": settings.geocoder_photon_base_url},
        },
    }

    geocoders = GeocoderList()
    seen: set[str] = set()

    for name in settings.geocoder_fallback_order_list:
        if name in seen:
            continue
        seen.add(name)
        config = provider_configs.get(name)
        if config is None or not config.get("enabled", False):
            continue

        geocoder = get_geocoder(name, **config.get("kwargs", {}))
        if not geocoder.is_configured:
            continue

        pattern = config.get("pattern")
        if pattern:
            geocoders.register(Conditional(pattern, geocoder))
        else:
            geocoders.register(geocoder)

    geocoders.propagate_transport(transport_from_settings(settings))
    return geocoders


__all__ = [
    "AttemptLog",
    "AttemptRecord",
    "BackendRegistry",
    "BaseGeocoder",
    "CanonicalResult",
    "CensusGeocoder",
    "Conditional",
    "GeocodeOutcome",
    "GeocoderList",
    "GeocodingProviderError",
    "GoogleMapsGeocoder",
    "Multiplicity",
    "NominatimGeocoder",
    "PhotonGeocoder",
    "ResultNormalizer",
    "ShapeMatcher",
    "Transport",
    "Unconditional",
    "build_geocoder_list",
    "get_available_providers",
    "get_geocoder",
    "normalize_query",
    "transport_from_settings",
]
