# poemfinder/core/__init__.py

from .debouncer import Debouncer
from .orchestrator import SearchOrchestrator

__all__ = ["Debouncer", "SearchOrchestrator"]
