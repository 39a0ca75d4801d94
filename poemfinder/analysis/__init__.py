# poemfinder/analysis/__init__.py

from .word_scorer import (
    count_word,
    count_in_poem,
    rank,
    best_match,
    top_k,
    highlight,
    escape_markup
)

__all__ = [
    "count_word",
    "count_in_poem",
    "rank",
    "best_match",
    "top_k",
    "highlight",
    "escape_markup"
]
