"""Normalization of heterogeneous backend records into CanonicalResult.

Every backend returns its own record shape. ``ResultNormalizer`` holds an
ordered table of shape matchers; each matcher knows how to pull a
latitude/longitude pair out of one recognized shape. The first matcher that
yields both coordinates wins. Records no matcher understands are unresolved
and the dispatcher treats them as unusable candidates.
"""

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from typing import Any

from geocoder_list.lib.geocoder.base import CanonicalResult, RawRecord

Coordinates = tuple[Any, Any]
Extractor = Callable[[RawRecord], Coordinates | None]


def _dig(record: Any, *path: str | int) -> Any:
    """Follow a path of mapping keys / sequence indexes, returning None when it breaks."""
    node = record
    for step in path:
        if isinstance(step, int):
            if not isinstance(node, Sequence) or isinstance(node, str) or len(node) <= step:
                return None
            node = node[step]
        else:
            if not isinstance(node, dict):
                return None
            node = node.get(step)
        if node is None:
            return None
    return node


def _to_float(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _pair(lat_path: tuple[str | int, ...], lng_path: tuple[str | int, ...]) -> Extractor:
    """Build an extractor reading latitude and longitude from two paths."""

    def extract(record: RawRecord) -> Coordinates | None:
        return _dig(record, *lat_path), _dig(record, *lng_path)

    return extract


@dataclass(frozen=True)
class ShapeMatcher:
    """One recognized raw record shape."""

    name: str
    extract: Extractor

    def coordinates(self, record: RawRecord) -> tuple[float, float] | None:
        """Return ``(lat, lng)`` if this shape yields both values, else None."""
        pair = self.extract(record)
        if pair is None:
            return None
        lat, lng = _to_float(pair[0]), _to_float(pair[1])
        if lat is None or lng is None:
            return None
        return lat, lng


# Ordered: the first matcher yielding both coordinates wins.
DEFAULT_MATCHERS: tuple[ShapeMatcher, ...] = (
    ShapeMatcher("canonical", _pair(("geometry", "location", "lat"), ("geometry", "location", "lng"))),
    ShapeMatcher("openstreetmap", _pair(("lat",), ("lon",))),
    ShapeMatcher(
        "bing_best_location",
        _pair(
            ("BestLocation", "Coordinates", "Latitude"),
            ("BestLocation", "Coordinates", "Longitude"),
        ),
    ),
    ShapeMatcher("bing_point", _pair(("point", "coordinates", 0), ("point", "coordinates", 1))),
    ShapeMatcher("geocoder_ca", _pair(("latt",), ("longt",))),
    ShapeMatcher("postcodes_io", _pair(("latitude",), ("longitude",))),
    ShapeMatcher("ovi", _pair(("properties", "geoLatitude"), ("properties", "geoLongitude"))),
    ShapeMatcher(
        "geocodefarm",
        _pair(
            ("RESULTS", 0, "COORDINATES", "latitude"),
            ("RESULTS", 0, "COORDINATES", "longitude"),
        ),
    ),
    ShapeMatcher(
        "census",
        _pair(
            ("result", "addressMatches", 0, "coordinates", "y"),
            ("result", "addressMatches", 0, "coordinates", "x"),
        ),
    ),
    ShapeMatcher("geonames", _pair(("lat",), ("lng",))),
    # GeoJSON positions are [longitude, latitude]
    ShapeMatcher("geojson_feature", _pair(("geometry", "coordinates", 1), ("geometry", "coordinates", 0))),
)


class ResultNormalizer:
    """Map raw backend records onto CanonicalResult using a shape table."""

    def __init__(self, matchers: Iterable[ShapeMatcher] = DEFAULT_MATCHERS) -> None:
        self._matchers = tuple(matchers)

    @property
    def matchers(self) -> tuple[ShapeMatcher, ...]:
        return self._matchers

    def with_matcher(self, matcher: ShapeMatcher, *, first: bool = False) -> "ResultNormalizer":
        """Return a normalizer that also recognizes ``matcher``.

        Args:
            matcher: Shape matcher to add.
            first: Try the new matcher before the existing ones.

        Returns:
            A new ResultNormalizer; this one is left unchanged.
        """
        if first:
            return ResultNormalizer((matcher, *self._matchers))
        return ResultNormalizer((*self._matchers, matcher))

    def match(self, record: RawRecord) -> tuple[str, float, float] | None:
        """Find the first shape that yields in-range coordinates.

        Returns:
            ``(shape_name, lat, lng)`` or None if the record is unresolved.
        """
        for matcher in self._matchers:
            coords = matcher.coordinates(record)
            if coords is None:
                continue
            lat, lng = coords
            if -90 <= lat <= 90 and -180 <= lng <= 180:
                return matcher.name, lat, lng
        return None

    def normalize(self, record: RawRecord) -> CanonicalResult | None:
        """Normalize one raw candidate record.

        Args:
            record: Raw record as returned by a backend.

        Returns:
            CanonicalResult, or None when no recognized shape yields coordinates.
        """
        if not isinstance(record, dict):
            return None
        matched = self.match(record)
        if matched is None:
            return None
        _, lat, lng = matched
        return CanonicalResult(
            latitude=lat,
            longitude=lng,
            address=extract_address(record),
            raw=record,
        )


def extract_address(record: RawRecord) -> dict[str, Any]:
    """Collect structured address fields from a raw record.

    A mapping under ``address`` is carried over as-is. An administrative
    ``standard.countryname`` (geocoder.xyz) is promoted to ``country``.
    """
    address = record.get("address")
    fields: dict[str, Any] = dict(address) if isinstance(address, dict) else {}
    country = _dig(record, "standard", "countryname")
    if country:
        fields["country"] = country
    return fields
