"""Append-only log of backend invocations and cache hits."""

from collections.abc import Iterator
from dataclasses import dataclass

from geocoder_list.lib.geocoder.base import CanonicalResult


@dataclass(frozen=True)
class AttemptRecord:
    """One backend invocation, or one cache hit (no backend, zero elapsed time)."""

    location: str
    backend_name: str | None = None
    elapsed_seconds: float = 0.0
    error: str | None = None
    result: CanonicalResult | tuple[CanonicalResult, ...] | None = None

    @property
    def from_cache(self) -> bool:
        return self.backend_name is None


class AttemptLog:
    """Records accumulate across calls until ``flush`` is called."""

    def __init__(self) -> None:
        self._records: list[AttemptRecord] = []

    def append(self, record: AttemptRecord) -> None:
        self._records.append(record)

    def records(self) -> tuple[AttemptRecord, ...]:
        """Read-only snapshot of the records in insertion order."""
        return tuple(self._records)

    def flush(self) -> None:
        """Discard all records."""
        self._records.clear()

    def __iter__(self) -> Iterator[AttemptRecord]:
        return iter(self.records())

    def __len__(self) -> int:
        return len(self._records)
