import pytest
from unittest.mock import MagicMock

from modules.config_manager.search_settings import OrderSelectionSettings, InputsSelectionSettings
from modules.search_state import (
    SearchState, PerformanceMetrics, StoppingCondition,
    StoppingCriteria, OrderStoppingCriteria, InputsStoppingCriteria,
)

# --- Fixtures ---

@pytest.fixture
def order_settings():
    settings = OrderSelectionSettings(MagicMock())
    settings.set('maximum_iterations_number', 5)
    settings.set('maximum_time', 100)
    settings.set('generalization_performance_goal', 0.1)
    return settings

@pytest.fixture
def inputs_settings():
    settings = InputsSelectionSettings(MagicMock())
    settings.set('maximum_iterations_number', 5)
    settings.set('maximum_time', 100)
    settings.set('selection_performance_goal', 0.1)
    settings.set('minimum_inputs_number', 2)
    return settings

def make_state(clock_value=0.0, iterations=0, failures=0, optimum=1.0, current=1.0):
    state = SearchState(clock=lambda: clock_value)
    state.start()
    state.iterations = iterations
    state.failures = failures
    state.set_optimum(3, PerformanceMetrics(optimum, optimum), None)
    state.set_current(3, PerformanceMetrics(current, current))
    return state

# --- Tests ---

class TestOrderStoppingCriteria:

    def test_continue_when_nothing_holds(self, order_settings, mock_logger):
        criteria = OrderStoppingCriteria(order_settings, mock_logger)
        assert criteria.evaluate(make_state(), temperature=1.0) is None

    def test_minimum_temperature_has_priority(self, order_settings, mock_logger):
        """Every predicate holds; only the first one in priority order is reported."""
        criteria = OrderStoppingCriteria(order_settings, mock_logger)
        state = make_state(iterations=10, failures=10, optimum=0.0)
        state.beginning_time = -1000.0

        stop, condition, reason = criteria.should_stop(state, temperature=0.0)
        assert stop is True
        assert condition == StoppingCondition.MINIMUM_TEMPERATURE
        assert "temperature" in reason

    def test_maximum_time_before_goal(self, order_settings, mock_logger):
        criteria = OrderStoppingCriteria(order_settings, mock_logger)
        state = make_state(optimum=0.0)
        state.beginning_time = -1000.0
        assert criteria.evaluate(state, temperature=1.0) == StoppingCondition.MAXIMUM_TIME

    def test_maximum_time_is_strict(self, order_settings, mock_logger):
        criteria = OrderStoppingCriteria(order_settings, mock_logger)
        state = make_state()
        state.beginning_time = -100.0
        assert criteria.evaluate(state, temperature=1.0) is None

    def test_goal_before_failures(self, order_settings, mock_logger):
        criteria = OrderStoppingCriteria(order_settings, mock_logger)
        state = make_state(failures=3, optimum=0.05)
        assert criteria.evaluate(state, temperature=1.0) == StoppingCondition.GENERALIZATION_PERFORMANCE_GOAL

    def test_failures_before_iterations(self, order_settings, mock_logger):
        criteria = OrderStoppingCriteria(order_settings, mock_logger)
        state = make_state(failures=3, iterations=5)
        assert criteria.evaluate(state, temperature=1.0) == StoppingCondition.MAXIMUM_GENERALIZATION_FAILURES

    def test_maximum_iterations(self, order_settings, mock_logger):
        criteria = OrderStoppingCriteria(order_settings, mock_logger)
        state = make_state(iterations=5)
        assert criteria.evaluate(state, temperature=1.0) == StoppingCondition.MAXIMUM_ITERATIONS

    def test_reason_logged_at_info_when_displaying(self, order_settings, mock_logger):
        criteria = OrderStoppingCriteria(order_settings, mock_logger)
        criteria.evaluate(make_state(iterations=5), temperature=1.0)
        mock_logger.info.assert_called_with("Maximum number of iterations reached.")

    def test_reason_logged_at_debug_when_silent(self, order_settings, mock_logger):
        order_settings.set('display', False)
        criteria = OrderStoppingCriteria(order_settings, mock_logger)
        criteria.evaluate(make_state(iterations=5), temperature=1.0)
        mock_logger.info.assert_not_called()
        mock_logger.debug.assert_called_with("Maximum number of iterations reached.")


class TestInputsStoppingCriteria:

    def test_continue_when_candidate_improves(self, inputs_settings, mock_logger):
        criteria = InputsStoppingCriteria(inputs_settings, mock_logger)
        state = make_state(current=1.0)
        condition = criteria.evaluate(state, initial_performance=PerformanceMetrics(1.0, 1.0),
                                      best_error=0.5, active_inputs=4)
        assert condition is None

    def test_maximum_time_is_inclusive(self, inputs_settings, mock_logger):
        criteria = InputsStoppingCriteria(inputs_settings, mock_logger)
        state = make_state()
        state.beginning_time = -100.0
        condition = criteria.evaluate(state, initial_performance=PerformanceMetrics(0.0, 0.0),
                                      best_error=2.0, active_inputs=1)
        assert condition == StoppingCondition.MAXIMUM_TIME

    def test_goal_checks_initial_performance(self, inputs_settings, mock_logger):
        """The goal is compared with the initial evaluation, not the current one."""
        criteria = InputsStoppingCriteria(inputs_settings, mock_logger)
        state = make_state(current=0.01)
        condition = criteria.evaluate(state, initial_performance=PerformanceMetrics(1.0, 1.0),
                                      best_error=0.005, active_inputs=4)
        assert condition is None

        condition = criteria.evaluate(state, initial_performance=PerformanceMetrics(0.05, 0.05),
                                      best_error=0.005, active_inputs=4)
        assert condition == StoppingCondition.SELECTION_PERFORMANCE_GOAL

    def test_iterations_before_minimum_inputs(self, inputs_settings, mock_logger):
        criteria = InputsStoppingCriteria(inputs_settings, mock_logger)
        state = make_state(iterations=5)
        condition = criteria.evaluate(state, initial_performance=PerformanceMetrics(1.0, 1.0),
                                      best_error=2.0, active_inputs=2)
        assert condition == StoppingCondition.MAXIMUM_ITERATIONS

    def test_minimum_inputs_before_algorithm_finished(self, inputs_settings, mock_logger):
        criteria = InputsStoppingCriteria(inputs_settings, mock_logger)
        condition = criteria.evaluate(make_state(), initial_performance=PerformanceMetrics(1.0, 1.0),
                                      best_error=2.0, active_inputs=2)
        assert condition == StoppingCondition.MINIMUM_INPUTS

    def test_algorithm_finished_when_no_candidate_improves(self, inputs_settings, mock_logger):
        criteria = InputsStoppingCriteria(inputs_settings, mock_logger)
        condition = criteria.evaluate(make_state(current=1.0), initial_performance=PerformanceMetrics(1.0, 1.0),
                                      best_error=1.0, active_inputs=4)
        assert condition == StoppingCondition.ALGORITHM_FINISHED

    def test_single_input_reports_minimum_inputs(self, mock_logger):
        settings = InputsSelectionSettings(MagicMock())
        criteria = InputsStoppingCriteria(settings, mock_logger)
        state = make_state(current=1.0)
        # minimum_inputs_number=1 catches a single active input first
        condition = criteria.evaluate(state, initial_performance=PerformanceMetrics(1.0, 1.0),
                                      best_error=0.1, active_inputs=1)
        assert condition == StoppingCondition.MINIMUM_INPUTS


class TestStoppingCriteriaBase:

    def test_base_class_is_abstract(self, inputs_settings, mock_logger):
        with pytest.raises(TypeError):
            StoppingCriteria(inputs_settings, mock_logger)
