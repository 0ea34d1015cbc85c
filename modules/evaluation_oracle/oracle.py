"""
Evaluation oracle interfaces.

The searches never train anything themselves. They are handed an oracle
restricted to the operations below and treat every call as a blocking,
possibly expensive and possibly non-deterministic service.
"""

import abc
import numpy as np
import pandas as pd
from typing import List, Optional

from modules.search_state.search_state import PerformanceMetrics


class OrderOracle(abc.ABC):
    """Trains and scores a model with a given number of hidden units."""

    @abc.abstractmethod
    def evaluate(self, order: int) -> PerformanceMetrics:
        """Train a model of the given order and return its error pair."""
        raise NotImplementedError

    @abc.abstractmethod
    def get_parameters(self, order: int) -> np.ndarray:
        """Parameter vector obtained by the last evaluation of this order."""
        raise NotImplementedError

    @abc.abstractmethod
    def commit_order(self, order: int, parameters: np.ndarray) -> None:
        """Rebuild the live model with this order and parameters."""
        raise NotImplementedError


class InputsOracle(abc.ABC):
    """
    Mutable handle on a trained model whose input set can be pruned and grown.

    Indices passed to prune_input / grow_input are positions among the
    currently active model inputs.
    """

    @property
    @abc.abstractmethod
    def inputs_number(self) -> int:
        """Number of input variables in the dataset before any selection."""
        raise NotImplementedError

    @abc.abstractmethod
    def evaluate_inputs(self, mask: np.ndarray) -> PerformanceMetrics:
        """Train on the inputs selected by the mask and return its error pair."""
        raise NotImplementedError

    @abc.abstractmethod
    def get_parameters(self) -> np.ndarray:
        raise NotImplementedError

    @abc.abstractmethod
    def set_parameters(self, parameters: np.ndarray) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    def prune_input(self, index: int) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    def grow_input(self, index: int) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    def calculate_training_error(self) -> float:
        raise NotImplementedError

    @abc.abstractmethod
    def calculate_selection_error(self) -> float:
        raise NotImplementedError

    @abc.abstractmethod
    def get_variable_uses(self) -> List[str]:
        """Use of every dataset variable: 'Input', 'Target' or 'Unused'."""
        raise NotImplementedError

    @abc.abstractmethod
    def get_variable_names(self) -> List[str]:
        raise NotImplementedError

    def has_scaling_layer(self) -> bool:
        return False

    def get_scaling_statistics(self) -> Optional[pd.DataFrame]:
        """One row per input: mean, std, minimum, maximum."""
        return None

    def get_scaling_method(self) -> Optional[str]:
        return None

    @abc.abstractmethod
    def commit_inputs(self, uses: List[str], mask: np.ndarray, parameters: np.ndarray,
                      statistics: Optional[pd.DataFrame] = None,
                      scaling_method: Optional[str] = None) -> None:
        """Apply the final variable uses, parameters and scaling to the live model."""
        raise NotImplementedError
