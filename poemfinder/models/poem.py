# poemfinder/models/poem.py

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple, Union

AUTHOR_LISTING_TITLE = "(author listing)"


@dataclass(frozen=True)
class Poem:
    """A single poem as returned by PoetryDB"""
    title: str
    author: str
    lines: Tuple[str, ...] = field(default_factory=tuple)
    linecount: Optional[Union[str, int]] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Poem':
        """Create Poem from a raw API record"""
        lines = data.get('lines') or ()
        if isinstance(lines, str):
            lines = lines.split('\n')
        elif not isinstance(lines, (list, tuple)):
            lines = ()
        return cls(
            title=str(data.get('title') or ''),
            author=str(data.get('author') or ''),
            lines=tuple(str(line) for line in lines),
            linecount=data.get('linecount')
        )

    @classmethod
    def author_listing(cls, name: str) -> 'Poem':
        """Synthetic entry used to browse the author index"""
        return cls(title=AUTHOR_LISTING_TITLE, author=name, lines=())

    @property
    def text(self) -> str:
        """Poem body with lines joined by newlines"""
        return '\n'.join(self.lines)

    @property
    def is_author_listing(self) -> bool:
        return self.title == AUTHOR_LISTING_TITLE and not self.lines

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            'title': self.title,
            'author': self.author,
            'lines': list(self.lines),
        }
        if self.linecount is not None:
            data['linecount'] = self.linecount
        return data


@dataclass(frozen=True)
class SearchCriteria:
    """Author/title filter as typed by the user"""
    author: Optional[str] = None
    title: Optional[str] = None
    exact: bool = False

    @property
    def has_terms(self) -> bool:
        """True when at least one of author or title is non-blank"""
        return bool((self.author or '').strip() or (self.title or '').strip())


@dataclass(frozen=True)
class PoetryDbError:
    """Normalized failure record for a PoetryDB request"""
    status: int
    url: str
    message: str

    def __str__(self) -> str:
        if self.status:
            return f"{self.status} {self.message} ({self.url})"
        return f"{self.message} ({self.url})"


@dataclass(frozen=True)
class ScoreEntry:
    """Word count for one poem; poem_index -1 means nothing matched"""
    poem_index: int
    count: int
    word: str

    @classmethod
    def no_match(cls, word: str) -> 'ScoreEntry':
        return cls(poem_index=-1, count=0, word=word)

    @property
    def is_match(self) -> bool:
        return self.poem_index >= 0 and self.count > 0
