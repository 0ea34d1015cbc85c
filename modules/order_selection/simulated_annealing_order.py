"""
Simulated annealing search over the number of hidden units (the model order).

The algorithm:
1. Draw an initial order uniformly in [minimum_order, maximum_order] and
   evaluate it; the initial temperature is its selection error.
2. Sample a neighbour order inside a window of a third of the range
   centred on the optimum, never equal to the optimum.
3. Accept it with the Boltzmann probability min(1, exp(-delta / T)); ties
   within tolerance keep the smaller order.
4. Cool down: T = T * cooling_rate.
5. Repeat until a stopping condition holds, then commit the optimum.
"""

import logging
import math
import numpy as np
from typing import Callable, Optional, Tuple, Union

from modules.base.base_engine import BaseSelectionAlgorithm
from modules.config_manager.search_settings import OrderSelectionSettings
from modules.evaluation_oracle.oracle import OrderOracle
from modules.search_state.history_recorder import HistoryRecorder
from modules.search_state.search_result import OrderSearchResult
from modules.search_state.search_state import PerformanceMetrics, SearchState
from modules.search_state.stopping_criteria import OrderStoppingCriteria
from utils.error_handling import handle_oracle_errors
from utils.exceptions import ConfigurationError
from utils import constants


def boltzmann_probability(current_error: float, optimum_error: float, temperature: float) -> float:
    """
    Acceptance probability min(1, exp(-(current - optimum) / T)).

    A non-positive temperature accepts only strict improvements.
    """
    delta = current_error - optimum_error
    if delta <= 0:
        return 1.0
    if temperature <= 0:
        return 0.0
    return min(1.0, math.exp(-delta / temperature))


class SimulatedAnnealingOrder(BaseSelectionAlgorithm):
    """
    Order selection with the simulated annealing method.

    The oracle is usually an OrderEvaluator so that revisited orders are not
    retrained and each order can be trained several times.
    """

    def __init__(self, oracle: Optional[OrderOracle], settings: Optional[OrderSelectionSettings] = None,
                 logger: Optional[logging.Logger] = None,
                 rng: Union[None, int, np.random.Generator] = None,
                 clock: Optional[Callable[[], float]] = None):
        super().__init__(oracle, settings or OrderSelectionSettings(logger), logger, rng, clock)
        self.stopping_criteria = OrderStoppingCriteria(self.settings, self.logger)
        self.temperature_history = []

    def check(self) -> None:
        super().check()
        s = self.settings
        if s.minimum_order >= s.maximum_order:
            raise ConfigurationError(
                f"Minimum order ({s.minimum_order}) must be less than maximum order ({s.maximum_order}).",
                option='minimum_order', constraint="minimum_order < maximum_order")

    # --- Neighbourhood ---

    def neighborhood_bounds(self, optimal_order: int) -> Tuple[int, int]:
        """
        Window of width (maximum - minimum) / 3 around the optimum, clamped to
        the global bounds.
        """
        s = self.settings
        window = (s.maximum_order - s.minimum_order) // 3
        upper_bound = min(s.maximum_order, optimal_order + window)
        if optimal_order - window <= s.minimum_order:
            lower_bound = s.minimum_order
        else:
            lower_bound = optimal_order - window
        return lower_bound, upper_bound

    def sample_neighbor(self, optimal_order: int) -> int:
        """
        Uniform draw from the window, redrawn while it equals the optimum.
        After MAXIMUM_RANDOM_FAILURES redraws the step goes one order down,
        or one order up when the optimum sits on the minimum.
        """
        s = self.settings
        lower_bound, upper_bound = self.neighborhood_bounds(optimal_order)

        current_order = int(self.rng.integers(lower_bound, upper_bound + 1))
        random_failures = 0
        while current_order == optimal_order:
            current_order = int(self.rng.integers(lower_bound, upper_bound + 1))
            random_failures += 1
            if random_failures >= constants.MAXIMUM_RANDOM_FAILURES and optimal_order != s.minimum_order:
                current_order = optimal_order - 1
            elif random_failures >= constants.MAXIMUM_RANDOM_FAILURES and optimal_order != s.maximum_order:
                current_order = optimal_order + 1
        return current_order

    def is_rejected(self, current_order: int, optimal_order: int, current: PerformanceMetrics,
                    optimum: PerformanceMetrics, temperature: float, uniform: float) -> bool:
        """Generalization failure test (Boltzmann draw or tie keeping the smaller order)."""
        probability = boltzmann_probability(current.selection_error, optimum.selection_error, temperature)
        tie = abs(optimum.selection_error - current.selection_error) <= self.settings.tolerance
        return probability <= uniform or (tie and current_order >= optimal_order)

    # --- Oracle calls ---

    @handle_oracle_errors("Order evaluation")
    def _evaluate(self, order: int) -> Tuple[PerformanceMetrics, np.ndarray]:
        performance = self.oracle.evaluate(order)
        if not isinstance(performance, PerformanceMetrics):
            performance = PerformanceMetrics.from_pair(performance)
        parameters = np.asarray(self.oracle.get_parameters(order), dtype=float)
        return performance, parameters

    def _record(self, history: HistoryRecorder, order: int, performance: PerformanceMetrics,
                parameters: np.ndarray) -> None:
        history.append('performance', (order, performance.training_error))
        history.append('generalization_performance', (order, performance.selection_error))
        history.append('parameters', (order, parameters))

    # --- Main loop ---

    def perform_order_selection(self) -> OrderSearchResult:
        """
        Perform the order selection with the simulated annealing method.

        Returns:
            OrderSearchResult owned by the caller.
        """
        self.check()
        s = self.settings

        history = HistoryRecorder({
            'performance': s.reserve_performance_data,
            'generalization_performance': s.reserve_generalization_performance_data,
            'parameters': s.reserve_parameters_data,
        })
        result = OrderSearchResult(history=history)
        state = self._new_state()

        self._log_progress("Performing order selection with simulated annealing method...")
        state.start()

        optimal_order = int(self.rng.integers(s.minimum_order, s.maximum_order + 1))
        optimum_performance, optimum_parameters = self._evaluate(optimal_order)
        state.set_current(optimal_order, optimum_performance)
        state.set_optimum(optimal_order, optimum_performance, optimum_parameters)

        temperature = optimum_performance.selection_error
        self.temperature_history = [temperature]
        self._record(history, optimal_order, optimum_performance, optimum_parameters)

        self._log_progress(
            f"Initial values: hidden units={optimal_order}, "
            f"training={optimum_performance.training_error:.6g}, "
            f"generalization={optimum_performance.selection_error:.6g}, "
            f"temperature={temperature:.6g}, elapsed={state.elapsed_time:.2f}s")

        while True:
            optimal_order = state.optimal_configuration
            current_order = self.sample_neighbor(optimal_order)

            current_performance, current_parameters = self._evaluate(current_order)
            state.set_current(current_order, current_performance)

            uniform = float(self.rng.random())
            if self.is_rejected(current_order, optimal_order, current_performance,
                                state.optimum_performance, temperature, uniform):
                state.record_failure()
            else:
                state.set_optimum(current_order, current_performance, current_parameters)
                state.reset_failures()

            self._record(history, current_order, current_performance, current_parameters)

            temperature *= s.cooling_rate
            self.temperature_history.append(temperature)
            state.next_iteration()

            condition = self.stopping_criteria.evaluate(state, temperature=temperature)

            self._log_progress(
                f"Iteration {state.iterations}: hidden units={state.optimal_configuration}, "
                f"training={state.optimum_performance.training_error:.6g}, "
                f"generalization={state.optimum_performance.selection_error:.6g}, "
                f"temperature={temperature:.6g}, elapsed={state.elapsed_time:.2f}s")

            if condition is not None:
                result.stopping_condition = condition
                break

        self._commit(state)
        self._finalize(result, state)
        self._log_progress(f"Optimal order: {result.optimal_order}")
        return result

    def execute(self) -> OrderSearchResult:
        return self.perform_order_selection()

    @handle_oracle_errors("Order commit")
    def _commit(self, state: SearchState) -> None:
        self.oracle.commit_order(state.optimal_configuration, state.optimum_parameters)

    def _finalize(self, result: OrderSearchResult, state: SearchState) -> None:
        result.optimal_order = state.optimal_configuration
        result.final_training_error = state.optimum_performance.training_error
        result.final_selection_error = state.optimum_performance.selection_error
        result.iterations_number = state.iterations
        result.elapsed_time = state.elapsed_time
        if self.settings.reserve_minimal_parameters:
            result.minimal_parameters = state.optimum_parameters.copy()
