import logging
import numpy as np
from typing import Dict, List, Optional, Tuple

from modules.evaluation_oracle.oracle import OrderOracle
from modules.search_state.search_state import PerformanceMetrics
from utils.exceptions import ConfigurationError
from utils import constants


class OrderEvaluator(OrderOracle):
    """
    Multi-trial, caching front for an OrderOracle.

    Each order is trained `trials_number` times. The reported performance is
    aggregated with the performance calculation method:
    - Maximum: the trial with the largest selection error (pessimistic).
    - Minimum: the trial with the smallest selection error.
    - Mean: the mean of both errors across trials.

    Parameters come from the trial matching the aggregate; for Mean, from the
    trial with the smallest selection error. An order that was already
    evaluated is served from the cache and not retrained.
    """

    def __init__(self, oracle: OrderOracle, trials_number: int = constants.DEFAULT_TRIALS_NUMBER,
                 performance_calculation_method: str = constants.PERFORMANCE_MINIMUM,
                 logger: Optional[logging.Logger] = None):
        if trials_number <= 0:
            raise ConfigurationError("Trials number must be greater than 0.",
                                     option='trials_number', constraint="trials_number > 0")
        if performance_calculation_method not in constants.PERFORMANCE_CALCULATION_METHODS:
            raise ConfigurationError(
                f"Unknown performance calculation method: {performance_calculation_method}",
                option='performance_calculation_method')

        self.oracle = oracle
        self.trials_number = trials_number
        self.performance_calculation_method = performance_calculation_method
        self.logger = logger or logging.getLogger(self.__class__.__name__)

        self._performances: Dict[int, PerformanceMetrics] = {}
        self._parameters: Dict[int, np.ndarray] = {}

    @classmethod
    def from_settings(cls, oracle: OrderOracle, settings, logger: Optional[logging.Logger] = None) -> "OrderEvaluator":
        return cls(oracle, settings.trials_number, settings.performance_calculation_method, logger)

    @property
    def order_history(self) -> List[int]:
        """Orders evaluated so far, in evaluation order."""
        return list(self._performances)

    def is_cached(self, order: int) -> bool:
        return order in self._performances

    def evaluate(self, order: int) -> PerformanceMetrics:
        if order in self._performances:
            self.logger.debug(f"Order {order} served from cache.")
            return self._performances[order]

        trials: List[Tuple[PerformanceMetrics, np.ndarray]] = []
        for trial in range(self.trials_number):
            performance = self.oracle.evaluate(order)
            parameters = np.asarray(self.oracle.get_parameters(order), dtype=float).copy()
            trials.append((performance, parameters))
            self.logger.debug(
                f"Order {order} trial {trial + 1}/{self.trials_number}: "
                f"training={performance.training_error:.6g}, selection={performance.selection_error:.6g}")

        performance, parameters = self._aggregate(trials)
        self._performances[order] = performance
        self._parameters[order] = parameters
        return performance

    def get_parameters(self, order: int) -> np.ndarray:
        if order not in self._parameters:
            self.evaluate(order)
        return self._parameters[order].copy()

    def commit_order(self, order: int, parameters: np.ndarray) -> None:
        self.oracle.commit_order(order, parameters)

    def clear(self) -> None:
        self._performances.clear()
        self._parameters.clear()

    def _aggregate(self, trials: List[Tuple[PerformanceMetrics, np.ndarray]]) -> Tuple[PerformanceMetrics, np.ndarray]:
        selection_errors = np.array([p.selection_error for p, _ in trials])
        method = self.performance_calculation_method

        if method == constants.PERFORMANCE_MAXIMUM:
            return trials[int(np.argmax(selection_errors))]
        if method == constants.PERFORMANCE_MINIMUM:
            return trials[int(np.argmin(selection_errors))]

        training_errors = np.array([p.training_error for p, _ in trials])
        mean = PerformanceMetrics(float(training_errors.mean()), float(selection_errors.mean()))
        return mean, trials[int(np.argmin(selection_errors))][1]
