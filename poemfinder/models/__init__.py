# poemfinder/models/__init__.py

from .poem import Poem, SearchCriteria, PoetryDbError, ScoreEntry, AUTHOR_LISTING_TITLE
from .state import AppState

__all__ = [
    'Poem',
    'SearchCriteria',
    'PoetryDbError',
    'ScoreEntry',
    'AUTHOR_LISTING_TITLE',
    'AppState'
]
