# poemfinder/models/state.py

from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from poemfinder.models.poem import Poem, PoetryDbError, ScoreEntry, SearchCriteria


@dataclass
class AppState:
    """
    Browsing session state owned by the SearchOrchestrator.

    All mutations go through the transition methods below so that the
    retrieval invariants hold in one place:

    - starting a retrieval clears error, selection and best match
    - replacing poems always resets the selection
    - a selection is either None or a valid index into poems
    """
    loading: bool = False
    error: Optional[PoetryDbError] = None
    poems: List[Poem] = field(default_factory=list)
    selected_index: Optional[int] = None
    word: str = ''
    best_match: Optional[ScoreEntry] = None
    criteria: SearchCriteria = field(default_factory=SearchCriteria)
    generation: int = 0

    def begin_retrieval(self, show_spinner: bool = True) -> int:
        """
        Reset transient fields for a new retrieval.

        Args:
            show_spinner: Set loading; False for a silent background refresh

        Returns:
            Generation number identifying this retrieval
        """
        self.error = None
        self.selected_index = None
        self.best_match = None
        if show_spinner:
            self.loading = True
        self.generation += 1
        return self.generation

    def is_current(self, generation: int) -> bool:
        return generation == self.generation

    def complete(self, poems: Sequence[Poem]) -> None:
        """Success: replace poems and clear loading"""
        self.poems = list(poems)
        self.selected_index = None
        self.loading = False

    def fail(self, error: PoetryDbError) -> None:
        """Failure: clear poems, record the error and clear loading"""
        self.poems = []
        self.selected_index = None
        self.error = error
        self.loading = False

    def select(self, index: Optional[int]) -> None:
        if index is not None and not 0 <= index < len(self.poems):
            raise IndexError(f"No poem at index {index} (have {len(self.poems)})")
        self.selected_index = index

    def toggle_select(self, index: int) -> None:
        """Single-select accordion: select index, or clear it if already selected"""
        if self.selected_index == index:
            self.selected_index = None
        else:
            self.select(index)

    def set_best_match(self, entry: Optional[ScoreEntry]) -> None:
        self.best_match = entry
