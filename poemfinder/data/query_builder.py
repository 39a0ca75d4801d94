# poemfinder/data/query_builder.py

import re
from typing import Optional
from urllib.parse import quote

DEFAULT_BASE_URL = "https://poetrydb.org"
EXACT_SUFFIX = ":abs"
RANDOM_FIELDS = "author,title,lines"

# Same unreserved set as JavaScript's encodeURIComponent
_COMPONENT_SAFE = "-_.!~*'()"
_WHITESPACE = re.compile(r"\s+")


def normalize(value: Optional[str], lowercase: bool = True) -> Optional[str]:
    """
    Collapse whitespace runs and trim a user supplied field.

    Args:
        value: Raw input, may be None
        lowercase: Also lowercase the result (non-exact searches)

    Returns:
        Normalized string, or None when the input is blank
    """
    if not value:
        return None
    collapsed = _WHITESPACE.sub(" ", value).strip()
    if not collapsed:
        return None
    return collapsed.lower() if lowercase else collapsed


def encode_component(value: str) -> str:
    """Percent-encode a single path component"""
    return quote(value, safe=_COMPONENT_SAFE)


class QueryBuilder:
    """
    Builds PoetryDB request URLs from loosely structured user input.

    Pure string transformation; no network access.
    """

    def __init__(self, base_url: str = DEFAULT_BASE_URL):
        self.base_url = base_url.rstrip('/')

    def _field(self, value: str, exact: bool) -> str:
        encoded = encode_component(value)
        return f"{encoded}{EXACT_SUFFIX}" if exact else encoded

    def build_path(self, author: Optional[str] = None, title: Optional[str] = None,
                   exact: bool = False) -> str:
        """
        Select the search path for the given fields.

        Args:
            author: Author filter
            title: Title filter
            exact: Case-literal matching; appends ':abs' to each present field

        Returns:
            Path starting with '/'
        """
        # exact searches keep case, everything else is matched case-insensitively
        n_author = normalize(author, lowercase=not exact)
        n_title = normalize(title, lowercase=not exact)

        if n_author and n_title:
            return f"/author,title/{self._field(n_author, exact)};{self._field(n_title, exact)}"
        if n_author:
            return f"/author/{self._field(n_author, exact)}"
        if n_title:
            return f"/title/{self._field(n_title, exact)}"
        return "/author"

    def build_url(self, author: Optional[str] = None, title: Optional[str] = None,
                  exact: bool = False) -> str:
        """Full search URL; falls back to the author listing when no field is given"""
        return f"{self.base_url}{self.build_path(author, title, exact)}"

    def random_url(self, count: int = 1) -> str:
        """URL for `count` random poems with author, title and lines populated"""
        if isinstance(count, bool) or not isinstance(count, int) or count < 1:
            raise ValueError(f"count must be a positive integer, got {count!r}")
        return f"{self.base_url}/random/{count}/{RANDOM_FIELDS}"


_default_builder = QueryBuilder()


def build_url(author: Optional[str] = None, title: Optional[str] = None,
              exact: bool = False) -> str:
    """Build a search URL against the default PoetryDB origin"""
    return _default_builder.build_url(author, title, exact)
