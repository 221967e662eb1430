"""Category keys and display names.

Every category is identified by a canonical key (trimmed, lower-cased display
name). The registry maps keys to the display name the user first chose, so the
rest of the package only ever compares keys.
"""

import logging
import re
from collections.abc import Iterator, Mapping
from typing import Optional

from . import constants

logger = logging.getLogger(__name__)

_DISALLOWED_CHARS = re.compile(r"[^\w\s]|_")
_WHITESPACE_RUN = re.compile(r"\s+")


def normalize_key(name: str) -> str:
    """Canonical key for a category name ("" -> "other")."""
    key = name.strip().lower()
    return key or constants.EMPTY_CATEGORY_KEY


def sanitize_display_name(name: str) -> str:
    """
    Clean a category name for display and storage.

    Keeps letters, digits and single spaces; returns "Category" when nothing
    usable is left.

    Examples:
        >>> sanitize_display_name("  Rent / Utilities!! ")
        'Rent Utilities'
    """
    cleaned = _DISALLOWED_CHARS.sub("", name)
    cleaned = _WHITESPACE_RUN.sub(" ", cleaned).strip()
    return cleaned or constants.EMPTY_DISPLAY_NAME


class CategoryRegistry:
    """Bidirectional key <-> display name mapping."""

    def __init__(self, names: Optional[Mapping[str, str]] = None):
        self._names: dict[str, str] = {}
        for key, display in (names or {}).items():
            self.add(key, display)

    def add(self, key: str, display: str) -> str:
        """Register ``key`` with ``display`` unless already present. Returns the key."""
        if key not in self._names:
            self._names[key] = display or key
            logger.debug("Registered category %s (%s)", key, self._names[key])
        return key

    def key_for(self, name: str) -> str:
        """Key that ``name`` resolves to, without registering it."""
        return normalize_key(self._display_for(name))

    def intern(self, name: str) -> str:
        """
        Return the key for ``name``, registering it on first use.

        Both display names ("Saving") and existing keys ("saving") resolve to
        the same key; the first display name seen is kept.
        """
        display = self._display_for(name)
        return self.add(normalize_key(display), display)

    @staticmethod
    def _display_for(name: str) -> str:
        if not name or not name.strip():
            return constants.FALLBACK_CATEGORY
        return sanitize_display_name(name)

    def display_name(self, key: str) -> str:
        """Display name for ``key`` (the key itself when unknown)."""
        return self._names.get(key, key)

    def as_dict(self) -> dict[str, str]:
        return dict(self._names)

    def __contains__(self, key: object) -> bool:
        return key in self._names

    def __iter__(self) -> Iterator[str]:
        return iter(self._names)

    def __len__(self) -> int:
        return len(self._names)
