import pytest
import numpy as np
import pandas as pd
from unittest.mock import MagicMock

from modules.evaluation_oracle.oracle import InputsOracle, OrderOracle
from modules.search_state.search_state import PerformanceMetrics
from utils import constants


class FakeOrderOracle(OrderOracle):
    """Deterministic order oracle: selection error given by a function of the order."""

    def __init__(self, selection_error=None):
        self.selection_error = selection_error or (lambda order: 1.0)
        self.evaluations = []
        self.committed = None

    def evaluate(self, order):
        self.evaluations.append(order)
        error = float(self.selection_error(order))
        return PerformanceMetrics(error / 2.0, error)

    def get_parameters(self, order):
        return np.full(order, float(order))

    def commit_order(self, order, parameters):
        self.committed = (order, np.asarray(parameters).copy())


class FakeInputsOracle(InputsOracle):
    """
    Additive inputs oracle.

    selection error = base + sum(contribution of active inputs) + drift * permanent removals
    Negative contributions are useful inputs, positive ones are noise.
    """

    def __init__(self, contributions, base=2.0, drift=0.0, variable_names=None, uses=None):
        self.contributions = list(contributions)
        self.base = base
        self.drift = drift
        n = len(self.contributions)
        self.variable_names = variable_names or [f"x{i}" for i in range(n)] + ["y"]
        self.uses = uses or [constants.USE_INPUT] * n + [constants.USE_TARGET]
        self.active = list(range(n))
        self.params = np.arange(1, n + 1, dtype=float)
        self._stack = []
        self.set_parameters_calls = 0
        self.committed = None
        self.statistics = pd.DataFrame(
            {'mean': np.arange(n, dtype=float), 'std': np.ones(n)},
            index=[name for name, use in zip(self.variable_names, self.uses) if use == constants.USE_INPUT])

    @property
    def inputs_number(self):
        return len(self.contributions)

    def _permanent_removals(self):
        return self.inputs_number - len(self.active) - len(self._stack)

    def evaluate_inputs(self, mask):
        self.active = [i for i, keep in enumerate(mask) if keep]
        self.params = np.array([i + 1.0 for i in self.active])
        self._stack = []
        return PerformanceMetrics(self.calculate_training_error(), self.calculate_selection_error())

    def get_parameters(self):
        return self.params.copy()

    def set_parameters(self, parameters):
        parameters = np.asarray(parameters, dtype=float)
        if parameters.size != len(self.active):
            raise ValueError("parameter size mismatch")
        self.params = parameters.copy()
        self.set_parameters_calls += 1

    def prune_input(self, index):
        self._stack.append((index, self.active[index], self.params[index]))
        del self.active[index]
        # Pruning disturbs the remaining weights
        self.params = np.delete(self.params, index) * 1.5

    def grow_input(self, index):
        position_index, position, value = self._stack.pop()
        assert position_index == index
        self.active.insert(index, position)
        self.params = np.insert(self.params, index, value)

    def calculate_selection_error(self):
        return (self.base + sum(self.contributions[i] for i in self.active)
                + self.drift * self._permanent_removals())

    def calculate_training_error(self):
        return self.calculate_selection_error() / 2.0

    def get_variable_uses(self):
        return list(self.uses)

    def get_variable_names(self):
        return list(self.variable_names)

    def has_scaling_layer(self):
        return True

    def get_scaling_statistics(self):
        return self.statistics.copy()

    def get_scaling_method(self):
        return constants.SCALING_MEAN_STD

    def commit_inputs(self, uses, mask, parameters, statistics=None, scaling_method=None):
        self.committed = {
            'uses': list(uses),
            'mask': np.asarray(mask).copy(),
            'parameters': np.asarray(parameters).copy(),
            'statistics': statistics,
            'scaling_method': scaling_method,
        }


@pytest.fixture
def order_oracle():
    """Factory for deterministic order oracles."""
    return FakeOrderOracle


@pytest.fixture
def inputs_oracle():
    """Factory for additive inputs oracles."""
    return FakeInputsOracle


@pytest.fixture
def mock_logger():
    """Provides a mock logger instance."""
    return MagicMock()


@pytest.fixture
def lowest_rng():
    """Random source that always draws the lower bound and a uniform of 0.5."""
    rng = MagicMock(spec=np.random.Generator)
    rng.integers.side_effect = lambda low, high: low
    rng.random.return_value = 0.5
    return rng


@pytest.fixture
def synthetic_frame():
    """Small regression dataset: y depends on x0 and x1, x2 is noise."""
    rng = np.random.default_rng(0)
    n = 80
    x0 = rng.normal(size=n)
    x1 = rng.normal(size=n)
    x2 = rng.normal(size=n)
    y = 2.0 * x0 - x1 + 0.05 * rng.normal(size=n)
    return pd.DataFrame({'x0': x0, 'x1': x1, 'x2': x2, 'y': y})


@pytest.fixture
def oracle_config():
    return {
        'data': {'target_column': 'y', 'selection_size': 0.25, 'seed': 1},
        'oracle': {'activation': 'tanh', 'max_iter': 60, 'hidden_units': 2,
                   'learning_rate_init': 0.01, 'scaling_method': constants.SCALING_MEAN_STD},
        '_internal_seeds': {'split': 1, 'model': 1001},
    }
