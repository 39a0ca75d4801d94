# poemfinder/interface/base_interface.py

from abc import ABC, abstractmethod
from typing import Dict, Any, Optional
import logging

from poemfinder.core.orchestrator import SearchOrchestrator


class BaseInterface(ABC):
    """Base class for front-ends driving a SearchOrchestrator."""

    def __init__(self, orchestrator: SearchOrchestrator, config: Optional[Dict[str, Any]] = None):
        self.orchestrator = orchestrator
        self.config = config or {}
        self.logger = logging.getLogger(self.__class__.__name__)

    @abstractmethod
    def run(self) -> None:
        """
        Run the interface.

        This method should run until completion or interruption.
        """
        pass

    @abstractmethod
    def is_completed(self) -> bool:
        """
        Check if the interface has completed its task.

        Returns:
            True if completed, False otherwise
        """
        pass

    def cleanup(self) -> None:
        """Cleanup resources before shutdown."""
        self.orchestrator.close()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.cleanup()
