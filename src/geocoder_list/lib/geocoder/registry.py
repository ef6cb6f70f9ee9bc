"""Ordered registry of geocoding backends with optional routing predicates."""

import re
from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass
from typing import Any

from geocoder_list.lib.geocoder.base import BaseGeocoder
from geocoder_list.lib.geocoder.transport import Transport

Predicate = Callable[[str], bool]


@dataclass(frozen=True)
class Unconditional:
    """Backend tried for every query."""

    backend: BaseGeocoder

    def accepts(self, query: str) -> bool:
        return True


@dataclass(frozen=True)
class Conditional:
    """Backend tried only for queries its predicate accepts.

    The predicate may be a callable, a compiled regex or a regex string;
    regexes use search semantics, so ``r"USA$"`` routes queries ending in USA.
    """

    predicate: Predicate | re.Pattern[str] | str
    backend: BaseGeocoder

    def accepts(self, query: str) -> bool:
        predicate = self.predicate
        if isinstance(predicate, str):
            return re.search(predicate, query) is not None
        if isinstance(predicate, re.Pattern):
            return predicate.search(query) is not None
        return bool(predicate(query))


BackendEntry = Unconditional | Conditional


def to_entry(entry: Any) -> BackendEntry:
    """Coerce a registration argument into a BackendEntry.

    Accepts a bare backend, an existing entry, or a mapping with
    ``predicate``/``regex`` and ``backend``/``geocoder`` keys.

    Raises:
        TypeError: If the argument is none of the supported forms.
    """
    if isinstance(entry, Unconditional | Conditional):
        return entry
    if isinstance(entry, BaseGeocoder):
        return Unconditional(entry)
    if isinstance(entry, Mapping):
        backend = entry.get("backend", entry.get("geocoder"))
        predicate = entry.get("predicate", entry.get("regex"))
        if isinstance(backend, BaseGeocoder):
            if predicate is None:
                return Unconditional(backend)
            return Conditional(predicate, backend)
    msg = f"Cannot register {entry!r}: expected a BaseGeocoder, Unconditional, Conditional or mapping"
    raise TypeError(msg)


class BackendRegistry:
    """Backends in registration order. Entries are never removed or reordered."""

    def __init__(self) -> None:
        self._entries: list[BackendEntry] = []

    def register(self, entry: Any) -> "BackendRegistry":
        """Append a backend entry and return the registry for chaining."""
        self._entries.append(to_entry(entry))
        return self

    def propagate_transport(self, transport: Transport) -> None:
        """Push a shared transport into every backend, conditional or not."""
        for entry in self._entries:
            entry.backend.set_transport(transport)

    def backends(self) -> list[BaseGeocoder]:
        return [entry.backend for entry in self._entries]

    def __iter__(self) -> Iterator[BackendEntry]:
        return iter(tuple(self._entries))

    def __len__(self) -> int:
        return len(self._entries)
