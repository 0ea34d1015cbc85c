import pytest
import numpy as np
from unittest.mock import MagicMock

from modules.evaluation_oracle import OrderEvaluator
from modules.search_state import PerformanceMetrics
from utils.exceptions import ConfigurationError
from utils import constants


@pytest.fixture
def base_oracle():
    """Three trials of the same order with selection errors 3, 1, 2."""
    oracle = MagicMock()
    oracle.evaluate.side_effect = [
        PerformanceMetrics(0.3, 3.0),
        PerformanceMetrics(0.1, 1.0),
        PerformanceMetrics(0.2, 2.0),
    ]
    oracle.get_parameters.side_effect = [np.array([3.0]), np.array([1.0]), np.array([2.0])]
    return oracle


class TestOrderEvaluator:

    def test_minimum(self, base_oracle, mock_logger):
        evaluator = OrderEvaluator(base_oracle, 3, constants.PERFORMANCE_MINIMUM, mock_logger)
        assert evaluator.evaluate(5) == PerformanceMetrics(0.1, 1.0)
        assert evaluator.get_parameters(5).tolist() == [1.0]

    def test_maximum(self, base_oracle, mock_logger):
        evaluator = OrderEvaluator(base_oracle, 3, constants.PERFORMANCE_MAXIMUM, mock_logger)
        assert evaluator.evaluate(5) == PerformanceMetrics(0.3, 3.0)
        assert evaluator.get_parameters(5).tolist() == [3.0]

    def test_mean(self, base_oracle, mock_logger):
        evaluator = OrderEvaluator(base_oracle, 3, constants.PERFORMANCE_MEAN, mock_logger)
        performance = evaluator.evaluate(5)
        assert performance.training_error == pytest.approx(0.2)
        assert performance.selection_error == pytest.approx(2.0)
        assert evaluator.get_parameters(5).tolist() == [1.0]

    def test_cached_order_is_not_retrained(self, base_oracle, mock_logger):
        evaluator = OrderEvaluator(base_oracle, 3, constants.PERFORMANCE_MINIMUM, mock_logger)
        first = evaluator.evaluate(5)
        second = evaluator.evaluate(5)
        assert first == second
        assert base_oracle.evaluate.call_count == 3
        assert evaluator.is_cached(5)
        assert evaluator.order_history == [5]

    def test_clear(self, mock_logger):
        oracle = MagicMock()
        oracle.evaluate.return_value = PerformanceMetrics(0.1, 0.2)
        oracle.get_parameters.return_value = np.zeros(2)
        evaluator = OrderEvaluator(oracle, 1, constants.PERFORMANCE_MINIMUM, mock_logger)
        evaluator.evaluate(2)
        evaluator.clear()
        assert not evaluator.is_cached(2)
        evaluator.evaluate(2)
        assert oracle.evaluate.call_count == 2

    def test_parameters_are_copies(self, mock_logger):
        oracle = MagicMock()
        oracle.evaluate.return_value = PerformanceMetrics(0.1, 0.2)
        oracle.get_parameters.return_value = np.array([1.0, 2.0])
        evaluator = OrderEvaluator(oracle, 1, constants.PERFORMANCE_MINIMUM, mock_logger)
        parameters = evaluator.get_parameters(2)
        parameters[0] = 100.0
        assert evaluator.get_parameters(2).tolist() == [1.0, 2.0]

    def test_commit_delegates(self, mock_logger):
        oracle = MagicMock()
        evaluator = OrderEvaluator(oracle, 1, constants.PERFORMANCE_MINIMUM, mock_logger)
        evaluator.commit_order(4, np.ones(3))
        oracle.commit_order.assert_called_once()
        assert oracle.commit_order.call_args[0][0] == 4

    @pytest.mark.parametrize("trials, method", [
        (0, constants.PERFORMANCE_MINIMUM),
        (1, "Median"),
    ])
    def test_invalid_arguments(self, trials, method, mock_logger):
        with pytest.raises(ConfigurationError):
            OrderEvaluator(MagicMock(), trials, method, mock_logger)

    def test_from_settings(self, mock_logger):
        settings = MagicMock(trials_number=4, performance_calculation_method=constants.PERFORMANCE_MEAN)
        evaluator = OrderEvaluator.from_settings(MagicMock(), settings, mock_logger)
        assert evaluator.trials_number == 4
        assert evaluator.performance_calculation_method == constants.PERFORMANCE_MEAN
