import abc
import logging
import numpy as np
from typing import Any, Callable, Optional, Union

from modules.search_state.search_state import SearchState
from modules.search_state.search_result import SearchResult
from utils.exceptions import MissingCollaboratorError

class BaseSelectionAlgorithm(abc.ABC):
    """
    Abstract base class for the model selection searches.

    Provides common functionality for:
    - Oracle, settings and logger attachment.
    - Random number generation (seeded numpy Generator).
    - A single clock used for elapsed-time tracking.
    - Display-aware progress logging.
    """

    def __init__(self, oracle: Any, settings: Any, logger: Optional[logging.Logger] = None,
                 rng: Union[None, int, np.random.Generator] = None,
                 clock: Optional[Callable[[], float]] = None):
        self.oracle = oracle
        self.settings = settings
        self.logger = logger or logging.getLogger(self.__class__.__name__)
        self.rng = rng if isinstance(rng, np.random.Generator) else np.random.default_rng(rng)
        self.clock = clock

    def check(self) -> None:
        """
        Fatal preconditions checked before a run starts.

        Raises:
            MissingCollaboratorError: No oracle or settings attached.
        """
        if self.oracle is None:
            raise MissingCollaboratorError(
                f"{self.__class__.__name__} has no evaluation oracle attached.")
        if self.settings is None:
            raise MissingCollaboratorError(
                f"{self.__class__.__name__} has no settings attached.")

    def _new_state(self) -> SearchState:
        return SearchState(clock=self.clock)

    def _log_progress(self, message: str) -> None:
        """Per-iteration messages are INFO when display is on, DEBUG otherwise."""
        if self.settings.display:
            self.logger.info(message)
        else:
            self.logger.debug(message)

    @abc.abstractmethod
    def execute(self) -> SearchResult:
        """
        Runs the search and returns its result.
        This must be implemented by all subclasses.
        """
        pass
