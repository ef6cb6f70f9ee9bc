"""Location query normalization used as the cache key."""

import re

_WHITESPACE_RUN = re.compile(r"\s+")


def normalize_query(location: str | None) -> str:
    """Collapse whitespace runs in a location string to single spaces.

    Leading and trailing whitespace is removed, so a blank query normalizes
    to the empty string.

    Args:
        location: Raw location string (may be None).

    Returns:
        Normalized location string, or ``""`` for missing/blank input.

    Example:
        >>> normalize_query("New   York,\\tNY ")
        'New York, NY'
    """
    if not location:
        return ""
    return _WHITESPACE_RUN.sub(" ", location).strip()
