"""
Selective pruning: greedy, round-by-round removal of input variables.

Each round every active input is removed in turn from the trained model,
the selection error is measured, and the input is restored together with
the parameter snapshot, so every trial starts from the same baseline. The
input whose removal gives the lowest selection error is dropped for good
when it beats the current selection error.
"""

import logging
import numpy as np
from typing import Callable, List, Optional, Union
from tqdm import tqdm

from modules.base.base_engine import BaseSelectionAlgorithm
from modules.config_manager.search_settings import InputsSelectionSettings
from modules.evaluation_oracle.oracle import InputsOracle
from modules.inputs_selection.error_ratio_table import ErrorRatioTable
from modules.search_state.history_recorder import HistoryRecorder
from modules.search_state.search_result import InputsSearchResult
from modules.search_state.search_state import PerformanceMetrics, SearchState
from modules.search_state.stopping_criteria import InputsStoppingCriteria, StoppingCondition
from utils.error_handling import handle_oracle_errors
from utils.exceptions import ConfigurationError
from utils import constants


def get_input_index(uses: List[str], input_number: int) -> int:
    """
    Translates the n-th input (0-based, counting only 'Input' uses) back to
    its index among all dataset variables.
    """
    count = -1
    for i, use in enumerate(uses):
        if use == constants.USE_INPUT:
            count += 1
            if count == input_number:
                return i
    raise IndexError(f"Input number {input_number} out of range for {count + 1} inputs.")


class SelectivePruning(BaseSelectionAlgorithm):
    """
    Inputs selection with the selective pruning method.
    """

    def __init__(self, oracle: Optional[InputsOracle], settings: Optional[InputsSelectionSettings] = None,
                 logger: Optional[logging.Logger] = None,
                 rng: Union[None, int, np.random.Generator] = None,
                 clock: Optional[Callable[[], float]] = None):
        super().__init__(oracle, settings or InputsSelectionSettings(logger), logger, rng, clock)
        self.stopping_criteria = InputsStoppingCriteria(self.settings, self.logger)
        self.error_ratios = ErrorRatioTable()
        if oracle is not None:
            self.settings.resolve_maximum_selection_failures(oracle.inputs_number)

    def check(self) -> None:
        super().check()
        inputs_number = self.oracle.inputs_number
        if inputs_number <= 0:
            raise ConfigurationError("The oracle exposes no inputs to select from.", option='inputs_number')
        if self.settings.minimum_inputs_number > inputs_number:
            raise ConfigurationError(
                f"Minimum inputs number ({self.settings.minimum_inputs_number}) exceeds "
                f"the number of inputs ({inputs_number}).",
                option='minimum_inputs_number', constraint="minimum_inputs_number <= inputs_number")

    # --- Oracle calls ---

    @handle_oracle_errors("Initial inputs evaluation")
    def _evaluate_all(self, mask: np.ndarray) -> PerformanceMetrics:
        performance = self.oracle.evaluate_inputs(mask)
        if not isinstance(performance, PerformanceMetrics):
            performance = PerformanceMetrics.from_pair(performance)
        return performance

    @handle_oracle_errors("Pruning trial")
    def _score_removal(self, model_index: int, baseline: np.ndarray) -> float:
        """
        Selection error with one input removed. The input and the baseline
        parameters are restored before returning, even if scoring fails.
        """
        self.oracle.prune_input(model_index)
        try:
            return float(self.oracle.calculate_selection_error())
        finally:
            self.oracle.grow_input(model_index)
            self.oracle.set_parameters(baseline)

    @handle_oracle_errors("Performance evaluation")
    def _current_performance(self) -> PerformanceMetrics:
        return PerformanceMetrics(float(self.oracle.calculate_training_error()),
                                  float(self.oracle.calculate_selection_error()))

    def _score_round(self, current_inputs: np.ndarray) -> None:
        """Scores every active position from one parameter baseline."""
        baseline = np.asarray(self.oracle.get_parameters(), dtype=float).copy()
        self.error_ratios.begin_round()
        positions = [p for p in self.error_ratios.candidate_positions() if current_inputs[p]]

        trials = tqdm(positions, desc="Pruning trials", unit="input", disable=not self.settings.display,
                      leave=False)
        for position in trials:
            model_index = int(current_inputs[:position].sum())
            self.error_ratios.record(position, self._score_removal(model_index, baseline))

    def _record(self, history: HistoryRecorder, mask: np.ndarray, performance: PerformanceMetrics) -> None:
        history.append('inputs', mask)
        history.append('performance', performance.training_error)
        history.append('selection_performance', performance.selection_error)
        history.append('parameters', np.asarray(self.oracle.get_parameters(), dtype=float))

    # --- Main loop ---

    def perform_inputs_selection(self) -> InputsSearchResult:
        """
        Perform the inputs selection with the selective pruning method.

        Returns:
            InputsSearchResult owned by the caller.
        """
        self.check()
        s = self.settings
        inputs_number = self.oracle.inputs_number
        variable_names = self.oracle.get_variable_names()

        has_scaling_layer = self.oracle.has_scaling_layer()
        original_statistics = self.oracle.get_scaling_statistics() if has_scaling_layer else None
        original_scaling_method = self.oracle.get_scaling_method() if has_scaling_layer else None

        original_uses = self.oracle.get_variable_uses()
        current_uses = list(original_uses)

        history = HistoryRecorder({
            'inputs': True,
            'performance': s.reserve_performance_data,
            'selection_performance': s.reserve_selection_performance_data,
            'parameters': s.reserve_parameters_data,
        })
        result = InputsSearchResult(history=history)
        state = self._new_state()

        self._log_progress("Performing selective pruning selection...")
        state.start()

        current_inputs = np.ones(inputs_number, dtype=bool)
        self.error_ratios.reset(inputs_number)

        initial_performance = self._evaluate_all(current_inputs)
        state.set_current(current_inputs, initial_performance)
        self._record(history, current_inputs, initial_performance)

        self._log_progress(
            f"Initial values: inputs={int(current_inputs.sum())}, "
            f"training={initial_performance.training_error:.6g}, "
            f"selection={initial_performance.selection_error:.6g}")

        while True:
            if int(current_inputs.sum()) <= s.minimum_inputs_number:
                result.stopping_condition = StoppingCondition.MINIMUM_INPUTS
                self._log_progress(f"Minimum inputs ({s.minimum_inputs_number}) reached.")
                break

            self._score_round(current_inputs)

            best_ratio_index, best_error = self.error_ratios.best()
            removed_name = None

            if (best_error < state.current_performance.selection_error
                    and int(current_inputs.sum()) > s.minimum_inputs_number):
                original_index = get_input_index(original_uses, best_ratio_index)
                current_uses[original_index] = constants.USE_UNUSED
                removed_name = variable_names[original_index]

                # Position of the input among those still in the model
                model_index = int(current_inputs[:best_ratio_index].sum())
                current_inputs = current_inputs.copy()
                current_inputs[best_ratio_index] = False
                self._prune(model_index)
                result.removed_inputs.append(removed_name)

            current_performance = self._current_performance()
            self.error_ratios.exclude(best_ratio_index)
            state.set_current(current_inputs, current_performance)
            state.next_iteration()
            self._record(history, current_inputs, current_performance)

            active_inputs = int(current_inputs.sum())
            condition = self.stopping_criteria.evaluate(
                state, initial_performance=initial_performance,
                best_error=best_error, active_inputs=active_inputs)

            if removed_name is not None:
                self._log_progress(f"Iteration {state.iterations}: removed input '{removed_name}'")
            self._log_progress(
                f"Iteration {state.iterations}: inputs={active_inputs}, "
                f"training={current_performance.training_error:.6g}, "
                f"selection={current_performance.selection_error:.6g}, "
                f"elapsed={state.elapsed_time:.2f}s")

            if condition is not None:
                result.stopping_condition = condition
                break

        optimal_parameters = np.asarray(self.oracle.get_parameters(), dtype=float).copy()
        state.set_optimum(current_inputs, state.current_performance, optimal_parameters)

        self._commit(state, original_uses, original_statistics, original_scaling_method)
        self._finalize(result, state, variable_names, original_uses)
        self._log_progress(
            f"Optimal inputs: {result.optimal_input_names} "
            f"({int(result.optimal_inputs.sum())} of {inputs_number})")
        return result

    def execute(self) -> InputsSearchResult:
        return self.perform_inputs_selection()

    @handle_oracle_errors("Input pruning")
    def _prune(self, model_index: int) -> None:
        self.oracle.prune_input(model_index)

    def final_uses(self, original_uses: List[str], optimal_inputs: np.ndarray) -> List[str]:
        """Variable uses rebuilt from the optimal mask."""
        uses = list(original_uses)
        for i, keep in enumerate(optimal_inputs):
            original_index = get_input_index(original_uses, i)
            uses[original_index] = constants.USE_INPUT if keep else constants.USE_UNUSED
        return uses

    @handle_oracle_errors("Inputs commit")
    def _commit(self, state: SearchState, original_uses: List[str], original_statistics,
                original_scaling_method: Optional[str]) -> None:
        optimal_inputs = state.optimal_configuration
        uses = self.final_uses(original_uses, optimal_inputs)
        statistics = None
        if original_statistics is not None:
            statistics = original_statistics.iloc[np.flatnonzero(optimal_inputs)].copy()
        self.oracle.commit_inputs(uses, optimal_inputs, state.optimum_parameters,
                                  statistics, original_scaling_method)

    def _finalize(self, result: InputsSearchResult, state: SearchState, variable_names: List[str],
                  original_uses: List[str]) -> None:
        optimal_inputs = state.optimal_configuration
        result.optimal_inputs = optimal_inputs.copy()
        result.optimal_input_names = [
            variable_names[get_input_index(original_uses, i)]
            for i, keep in enumerate(optimal_inputs) if keep
        ]
        result.final_training_error = state.optimum_performance.training_error
        result.final_selection_error = state.optimum_performance.selection_error
        result.iterations_number = state.iterations
        result.elapsed_time = state.elapsed_time
        if self.settings.reserve_minimal_parameters:
            result.minimal_parameters = state.optimum_parameters.copy()
