"""In-memory result cache keyed by normalized location query.

Entries live as long as the owning dispatcher: there is no TTL, no eviction
and no size bound.
"""

from geocoder_list.lib.geocoder.base import CanonicalResult

CachedValue = CanonicalResult | tuple[CanonicalResult, ...]


class ResultCache:
    """Per-dispatcher store of resolved results."""

    def __init__(self) -> None:
        self._entries: dict[str, CachedValue] = {}

    def get(self, key: str) -> CachedValue | None:
        """Look up a cached value by normalized query.

        Args:
            key: Normalized location string.

        Returns:
            A single result, a tuple of results, or None on cache miss.
        """
        return self._entries.get(key)

    def set(self, key: str, value: CachedValue) -> None:
        """Store a value, replacing any previous entry for the key.

        Args:
            key: Normalized location string.
            value: Attribution-free result(s) to cache.
        """
        self._entries[key] = value

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)
