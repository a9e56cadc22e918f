"""Search the catalog by video file name."""

import os
import re

from netfrix.errors import InvalidQueryError, InvalidSelectionError


def matches(name, pattern, regex=False):
    """Case-insensitive test of ``pattern`` against a file's base name.

    By default ``pattern`` is a plain substring. With ``regex=True`` it is
    a regular expression searched anywhere in the lower-cased name.
    """
    name = name.lower()
    pattern = pattern.lower()
    if regex:
        return re.search(pattern, name) is not None
    return pattern in name


class SearchResultSet:
    """Matches keyed 1..N in catalog order, valid for one selection round."""

    def __init__(self, pattern, paths):
        self.pattern = pattern
        self._paths = tuple(paths)

    @property
    def found(self):
        return bool(self._paths)

    def __len__(self):
        return len(self._paths)

    def __getitem__(self, key):
        if not isinstance(key, int) or isinstance(key, bool) or not 1 <= key <= len(self._paths):
            raise KeyError(key)
        return self._paths[key - 1]

    def keys(self):
        return range(1, len(self._paths) + 1)

    def items(self):
        return [(i, path) for i, path in enumerate(self._paths, start=1)]

    def select(self, raw):
        """Resolve a typed ID to a path. ``"0"`` cancels and returns None."""
        choice = (raw or "").strip()
        if not choice:
            raise InvalidSelectionError("Please select an ID.")
        if not (choice.isascii() and choice.isdigit()):
            raise InvalidSelectionError(f"Invalid ID: {choice}")
        key = int(choice)
        if key == 0:
            return None
        if key > len(self._paths):
            raise InvalidSelectionError(f"Invalid ID: {choice}")
        return self._paths[key - 1]


def search(catalog, pattern, regex=False):
    """Return the catalog entries whose base name matches ``pattern``."""
    if regex:
        try:
            re.compile(pattern.lower())
        except re.error as e:
            raise InvalidQueryError(f"Invalid pattern '{pattern}': {e}")
    hits = [p for p in catalog if matches(os.path.basename(p), pattern, regex=regex)]
    return SearchResultSet(pattern, hits)
