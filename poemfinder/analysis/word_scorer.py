# poemfinder/analysis/word_scorer.py

import html
import re
from functools import lru_cache
from typing import List, Optional, Pattern, Sequence, Tuple

from poemfinder.models.poem import Poem, ScoreEntry

MARK_OPEN = '<mark class="hl">'
MARK_CLOSE = '</mark>'


@lru_cache(maxsize=128)
def _compile(word: str) -> Pattern:
    return re.compile(rf"\b{re.escape(word)}\b", re.IGNORECASE)


def word_pattern(word: Optional[str]) -> Optional[Pattern]:
    """
    Whole-word, case-insensitive pattern for a literal word.

    Returns:
        Compiled pattern, or None for a blank word
    """
    w = (word or '').strip()
    if not w:
        return None
    return _compile(w)


def escape_markup(text: str) -> str:
    """Escape &, < and > so text can be embedded in markup"""
    return html.escape(text, quote=False)


def count_word(text: str, word: Optional[str]) -> int:
    """
    Count non-overlapping whole-word occurrences of `word` in `text`.

    Regex metacharacters in `word` are matched literally, so "a.b" only
    matches "a.b". A blank word counts 0.
    """
    pattern = word_pattern(word)
    if pattern is None or not text:
        return 0
    return sum(1 for _ in pattern.finditer(text))


def count_in_poem(poem: Poem, word: Optional[str]) -> int:
    """Count `word` over the poem's lines joined with newlines"""
    return count_word(poem.text, word)


def rank(poems: Sequence[Poem], word: Optional[str]) -> List[ScoreEntry]:
    """
    Score every poem and order by count, highest first.

    The sort is stable so poems with equal counts keep their input order.
    A blank word performs no ranking and returns an empty list.
    """
    w = (word or '').strip()
    if not w:
        return []
    entries = [ScoreEntry(poem_index=i, count=count_in_poem(p, w), word=w)
               for i, p in enumerate(poems)]
    return sorted(entries, key=lambda e: e.count, reverse=True)


def best_match(poems: Sequence[Poem], word: Optional[str]) -> ScoreEntry:
    """
    The first poem with the highest count.

    Returns:
        The winning entry, or ScoreEntry.no_match(word) when the word is
        blank or no poem contains it
    """
    w = (word or '').strip()
    ranked = rank(poems, w)
    if not ranked or ranked[0].count == 0:
        return ScoreEntry.no_match(w)
    return ranked[0]


def top_k(poems: Sequence[Poem], word: Optional[str], k: int) -> List[Tuple[Poem, int]]:
    """
    Keep the `k` highest scoring poems that contain `word` at least once.

    Args:
        poems: Candidate pool
        word: Target word
        k: Maximum number of poems to keep

    Returns:
        (poem, count) pairs, highest count first, ties in pool order
    """
    if k < 0:
        raise ValueError(f"k must be non-negative, got {k}")
    scored = [(poems[e.poem_index], e.count) for e in rank(poems, word) if e.count > 0]
    return scored[:k]


def highlight(text: str, word: Optional[str], open_marker: str = MARK_OPEN,
              close_marker: str = MARK_CLOSE, escape: bool = True) -> str:
    """
    Wrap every whole-word match of `word` in markers.

    With `escape` on, the text is markup-escaped segment by segment before
    the markers are inserted, so poem text cannot inject structure and an
    escaped entity is never split by a marker.
    """
    esc = escape_markup if escape else str
    pattern = word_pattern(word)
    if pattern is None:
        return esc(text)

    parts = []
    last = 0
    for match in pattern.finditer(text):
        parts.append(esc(text[last:match.start()]))
        parts.append(f"{open_marker}{esc(match.group(0))}{close_marker}")
        last = match.end()
    parts.append(esc(text[last:]))
    return ''.join(parts)
