# poemfinder/core/orchestrator.py

import logging
from typing import List, Optional

from poemfinder.analysis import word_scorer
from poemfinder.core.debouncer import Debouncer
from poemfinder.data.poetry_client import BasePoetryClient, TransportError
from poemfinder.models.poem import Poem, PoetryDbError, ScoreEntry, SearchCriteria
from poemfinder.models.state import AppState

DEFAULT_DEBOUNCE_SECONDS = 0.25
DEFAULT_RANDOM_COUNT = 1
DEFAULT_POOL_SIZE = 150
DEFAULT_TOP_K = 10


def _checked_count(value: int, name: str, minimum: int = 1) -> int:
    """Validate a retrieval size before begin_retrieval so loading is never left set"""
    if isinstance(value, bool) or not isinstance(value, int) or value < minimum:
        raise ValueError(f"{name} must be an integer >= {minimum}, got {value!r}")
    return value


class SearchOrchestrator:
    """
    Drives retrievals against a poetry client and owns the session state.

    Three retrieval modes are supported: filtered search, random sample and
    random pool ranked by word frequency. Each one ends in exactly one of
    success (poems replaced) or failure (poems cleared, error set).

    Every retrieval is tagged with a generation number when it starts. A
    response whose generation is no longer the latest is discarded, so a
    slow request can never overwrite the result of one issued after it.
    """

    def __init__(self, client: BasePoetryClient,
                 debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
                 random_count: int = DEFAULT_RANDOM_COUNT,
                 pool_size: int = DEFAULT_POOL_SIZE,
                 top_k: int = DEFAULT_TOP_K):
        self.client = client
        self.state = AppState()
        self.random_count = random_count
        self.pool_size = pool_size
        self.top_k = top_k
        self.logger = logging.getLogger(self.__class__.__name__)
        self.debouncer = Debouncer(debounce_seconds, self._on_criteria_settled)

    @classmethod
    def from_config(cls, client: BasePoetryClient, search_config) -> 'SearchOrchestrator':
        """Build an orchestrator from a SearchConfig"""
        return cls(
            client,
            debounce_seconds=search_config.debounce_ms / 1000.0,
            random_count=search_config.random_count,
            pool_size=search_config.pool_size,
            top_k=search_config.top_k
        )

    # ------------------------------------------------------------------
    # Criteria and word
    # ------------------------------------------------------------------

    @property
    def can_search(self) -> bool:
        return self.state.criteria.has_terms

    def update_criteria(self, author: Optional[str] = None, title: Optional[str] = None,
                        exact: bool = False) -> SearchCriteria:
        """
        Record new criteria and schedule a debounced search.

        The search fires once the input has settled, only if the settled
        criteria differ from the last dispatched ones and at least one of
        author or title is non-blank.
        """
        criteria = SearchCriteria(author=author, title=title, exact=exact)
        self.state.criteria = criteria
        self.debouncer.submit(criteria)
        return criteria

    async def _on_criteria_settled(self, criteria: SearchCriteria) -> None:
        if criteria.has_terms:
            await self.search(show_spinner=False, criteria=criteria)

    def set_word(self, word: str) -> None:
        self.state.word = word or ''

    # ------------------------------------------------------------------
    # Retrievals
    # ------------------------------------------------------------------

    def _complete(self, generation: int, poems: List[Poem]) -> bool:
        if not self.state.is_current(generation):
            self.logger.debug(f"Discarding stale response for retrieval {generation} "
                              f"(current {self.state.generation})")
            return False
        self.state.complete(poems)
        self.logger.info(f"Retrieval {generation} returned {len(poems)} poems")
        return True

    def _fail(self, generation: int, error: PoetryDbError) -> bool:
        if not self.state.is_current(generation):
            self.logger.debug(f"Discarding stale failure for retrieval {generation}: {error}")
            return False
        self.state.fail(error)
        self.logger.error(f"Retrieval {generation} failed: {error}")
        return True

    async def search(self, show_spinner: bool = True,
                     criteria: Optional[SearchCriteria] = None) -> bool:
        """
        Filtered search.

        Args:
            show_spinner: Set loading while in flight; False for the silent
                debounced refresh
            criteria: Filters to search with (default: the current criteria)

        Returns:
            True if this retrieval updated the state
        """
        criteria = criteria or self.state.criteria
        generation = self.state.begin_retrieval(show_spinner)
        self.logger.info(f"Searching author={criteria.author!r} title={criteria.title!r} "
                         f"exact={criteria.exact}")
        try:
            poems = await self.client.search(criteria.author or None, criteria.title or None,
                                             criteria.exact)
        except TransportError as e:
            return self._fail(generation, e.error)
        return self._complete(generation, poems)

    async def random(self, count: Optional[int] = None) -> bool:
        """
        Replace results with `count` random poems.

        Returns:
            True if this retrieval updated the state

        Raises:
            ValueError: If count is not a positive integer
        """
        count = self.random_count if count is None else _checked_count(count, "count")
        generation = self.state.begin_retrieval()
        self.logger.info(f"Fetching {count} random poem(s)")
        try:
            poems = await self.client.random(count)
        except TransportError as e:
            return self._fail(generation, e.error)
        return self._complete(generation, poems)

    async def top_by_word(self, pool_size: Optional[int] = None,
                          top_k: Optional[int] = None) -> bool:
        """
        Fetch a random pool and keep the poems that use the current word most.

        Zero-count poems are dropped, the rest are sorted by count (ties keep
        pool order) and cut to `top_k`. The winner is selected and recorded as
        best match; if nothing survives the best match is the no-match entry.
        A blank word clears the best match and fetches nothing.

        Returns:
            True if this retrieval updated the state

        Raises:
            ValueError: If pool_size is not positive or top_k is negative
        """
        word = self.state.word.strip()
        if not word:
            self.state.set_best_match(None)
            return False

        pool_size = self.pool_size if pool_size is None else _checked_count(pool_size, "pool_size")
        top_k = self.top_k if top_k is None else _checked_count(top_k, "top_k", minimum=0)
        generation = self.state.begin_retrieval()
        self.logger.info(f"Ranking a pool of {pool_size} random poems by '{word}' (top {top_k})")
        try:
            pool = await self.client.random(pool_size)
        except TransportError as e:
            return self._fail(generation, e.error)

        top = word_scorer.top_k(pool, word, top_k)
        if not self._complete(generation, [poem for poem, _ in top]):
            return False

        if top:
            self.state.set_best_match(ScoreEntry(poem_index=0, count=top[0][1], word=word))
            self.state.select(0)
        else:
            self.state.set_best_match(ScoreEntry.no_match(word))
        self.logger.info(f"{len(top)} of {len(pool)} pooled poems contain '{word}'")
        return True

    # ------------------------------------------------------------------
    # Local analysis
    # ------------------------------------------------------------------

    def count_in_poem(self, poem: Poem) -> int:
        return word_scorer.count_in_poem(poem, self.state.word)

    def highlight(self, poem: Poem, **kwargs) -> str:
        """Poem text with the current word marked; see word_scorer.highlight"""
        return word_scorer.highlight(poem.text, self.state.word, **kwargs)

    def find_best_in_current_results(self) -> Optional[ScoreEntry]:
        """
        Rank the loaded poems by the current word.

        Selects the winner when there is one. With no match the no-match
        entry is recorded and the selection is left alone; a blank word
        clears the best match.
        """
        word = self.state.word.strip()
        if not word:
            self.state.set_best_match(None)
            return None

        entry = word_scorer.best_match(self.state.poems, word)
        self.state.set_best_match(entry)
        if entry.is_match:
            self.state.select(entry.poem_index)
        return entry

    def toggle_select(self, index: int) -> None:
        self.state.toggle_select(index)

    @property
    def selected_poem(self) -> Optional[Poem]:
        if self.state.selected_index is None:
            return None
        return self.state.poems[self.state.selected_index]

    @property
    def result_summary(self) -> str:
        poems = self.state.poems
        if not poems:
            return "No results yet."
        authors = {p.author for p in poems if p.author}
        return (f"{len(poems)} poem{'' if len(poems) == 1 else 's'} • "
                f"{len(authors)} author{'' if len(authors) == 1 else 's'}")

    def format_poem(self, index: int) -> str:
        """Plain-text rendering used for copying a poem"""
        poem = self.state.poems[index]
        return f"{poem.title} — {poem.author}\n\n{poem.text}"

    def close(self) -> None:
        self.debouncer.cancel()
