"""Geocoder list: try many backends in order, with caching and an attempt log.

A ``GeocoderList`` answers a location query by walking its registered backends
in priority order. Conditional backends are only consulted when their routing
predicate accepts the query. The first backend producing a usable candidate
wins: its result is cached under the normalized query and no later backend is
tried. Every backend invocation and every cache hit is recorded in the attempt
log, which is the only way to tell "nothing found" apart from "every backend
failed".
"""

import copy
import time
from dataclasses import replace
from enum import StrEnum
from typing import Any, Literal, overload

from loguru import logger

from geocoder_list.lib.geocoder.address import normalize_query
from geocoder_list.lib.geocoder.attempt_log import AttemptLog, AttemptRecord
from geocoder_list.lib.geocoder.base import BaseGeocoder, CanonicalResult, RawRecord
from geocoder_list.lib.geocoder.cache import CachedValue, ResultCache
from geocoder_list.lib.geocoder.normalizer import ResultNormalizer
from geocoder_list.lib.geocoder.registry import BackendRegistry
from geocoder_list.lib.geocoder.transport import Transport


class Multiplicity(StrEnum):
    """How many candidates a caller wants from the winning backend."""

    SINGLE = "single"
    ALL = "all"


def _strip(result: CanonicalResult) -> CanonicalResult:
    """Copy of a result without attribution, sharing no mutable state with the original."""
    return replace(
        result,
        geocoder=None,
        address=copy.deepcopy(result.address),
        raw=copy.deepcopy(result.raw),
    )


class GeocoderList:
    """Dispatcher over an ordered list of geocoding backends.

    Cache and attempt log belong to the instance; two dispatchers never share
    results or log records.

    Example:
        >>> geocoders = GeocoderList().register(
        ...     {"predicate": r"(Canada|USA|United States)$", "backend": CensusGeocoder()}
        ... ).register(NominatimGeocoder())
        >>> location = await geocoders.resolve_one("1600 Pennsylvania Ave NW, Washington DC, USA")
    """

    def __init__(self, normalizer: ResultNormalizer | None = None) -> None:
        self._registry = BackendRegistry()
        self._normalizer = normalizer or ResultNormalizer()
        self._cache = ResultCache()
        self._log = AttemptLog()
        self._last_error: str | None = None

    @property
    def registry(self) -> BackendRegistry:
        return self._registry

    @property
    def last_error(self) -> str | None:
        """Most recent backend failure seen by the latest ``resolve`` call."""
        return self._last_error

    def register(self, entry: Any) -> "GeocoderList":
        """Add a backend (bare, or ``{predicate, backend}``) and return self for chaining."""
        self._registry.register(entry)
        return self

    def propagate_transport(self, transport: Transport) -> None:
        """Set the shared transport on every registered backend."""
        self._registry.propagate_transport(transport)

    def log(self) -> tuple[AttemptRecord, ...]:
        """Snapshot of the attempt log, oldest first."""
        return self._log.records()

    def flush(self) -> None:
        """Clear the attempt log. The result cache is kept."""
        self._log.flush()

    async def resolve_one(self, query: str | None) -> CanonicalResult | None:
        """Return the first usable candidate for a location, or None."""
        return await self.resolve(query, Multiplicity.SINGLE)

    async def resolve_all(self, query: str | None) -> list[CanonicalResult]:
        """Return every usable candidate from the first backend that resolves a location.

        Only candidates that normalize to coordinates are returned. Candidates
        without a recognizable coordinate pair are dropped, wherever they sit
        in the winning batch.
        """
        return await self.resolve(query, Multiplicity.ALL)

    @overload
    async def resolve(
        self, query: str | None, mode: Literal[Multiplicity.SINGLE] = ...
    ) -> CanonicalResult | None: ...

    @overload
    async def resolve(self, query: str | None, mode: Literal[Multiplicity.ALL]) -> list[CanonicalResult]: ...

    async def resolve(self, query: str | None, mode: Multiplicity = Multiplicity.SINGLE) -> Any:
        """Geocode a location string.

        Args:
            query: Location text. None or blank input is a no-op.
            mode: SINGLE for the first usable candidate, ALL for every usable
                candidate of the winning backend. Usable means non-error and
                normalizable to coordinates.

        Returns:
            SINGLE: CanonicalResult or None. ALL: list of CanonicalResult,
            empty when nothing resolved.
        """
        mode = Multiplicity(mode)
        empty: Any = None if mode is Multiplicity.SINGLE else []

        location = normalize_query(query)
        if not location:
            return empty

        self._last_error = None

        cached = self._from_cache(location, mode)
        if cached is not None:
            return cached

        for entry in self._registry:
            if not entry.accepts(location):
                logger.debug(f"Skipping {entry.backend.provider_name}: routing predicate does not match")
                continue

            candidates = await self._invoke(entry.backend, location, mode)
            if not candidates:
                continue

            if mode is Multiplicity.SINGLE:
                winner = candidates[0]
                self._cache.set(location, _strip(winner))
                return winner

            self._cache.set(location, tuple(_strip(c) for c in candidates))
            return list(candidates)

        return empty

    def _from_cache(self, location: str, mode: Multiplicity) -> Any:
        """Serve a cached value with attribution stripped, logging the hit."""
        value: CachedValue | None = self._cache.get(location)
        if value is None:
            return None

        if mode is Multiplicity.SINGLE:
            if isinstance(value, tuple):
                if not value:
                    return None
                value = value[0]
            result: CanonicalResult | tuple[CanonicalResult, ...] = _strip(value)
            returned: Any = _strip(value)
        else:
            if not isinstance(value, tuple) or not value:
                # A single cached result cannot answer a request for all candidates
                return None
            result = tuple(_strip(v) for v in value)
            returned = [_strip(v) for v in value]

        logger.debug(f"Cache hit for {location!r}")
        self._log.append(AttemptRecord(location=location, elapsed_seconds=0.0, result=result))
        return returned

    async def _invoke(self, backend: BaseGeocoder, location: str, mode: Multiplicity) -> list[CanonicalResult]:
        """Call one backend and return its usable candidates (empty if none or on error)."""
        name = backend.provider_name
        started = time.perf_counter()
        outcome = await backend.geocode(location)
        elapsed = time.perf_counter() - started

        if not outcome.ok:
            self._record(location, name, elapsed, error=outcome.error)
            logger.warning(f"{name} {location!r}: {outcome.error}")
            self._last_error = outcome.error
            return []

        records = [r for r in outcome.records if isinstance(r, dict)]
        for index, record in enumerate(records):
            if record.get("error"):
                error = str(record["error"])
                self._record(location, name, elapsed, error=error)
                logger.info(f"{name} reported an error for {location!r}: {error}")
                return []

            first = self._normalizer.normalize(record)
            if first is None:
                continue

            first = replace(first, geocoder=name)
            self._record(location, name, elapsed, result=first)
            if mode is Multiplicity.SINGLE:
                return [first]
            return [first, *self._remaining(records[index + 1 :], name)]

        # Invoked but nothing usable: neither an error nor a result
        self._record(location, name, elapsed)
        return []

    def _remaining(self, records: list[RawRecord], name: str) -> list[CanonicalResult]:
        """Normalize the candidates after the first usable one, skipping errors and unresolved shapes."""
        results: list[CanonicalResult] = []
        for record in records:
            if record.get("error"):
                continue
            result = self._normalizer.normalize(record)
            if result is not None:
                results.append(replace(result, geocoder=name))
        return results

    def _record(
        self,
        location: str,
        backend_name: str,
        elapsed: float,
        *,
        error: str | None = None,
        result: CanonicalResult | None = None,
    ) -> None:
        self._log.append(
            AttemptRecord(
                location=location,
                backend_name=backend_name,
                elapsed_seconds=elapsed,
                error=error,
                result=result,
            )
        )
