import copy
import logging
import warnings
import numpy as np
import pandas as pd
from typing import Any, Dict, List, Optional, Tuple

from sklearn.exceptions import ConvergenceWarning
from sklearn.metrics import mean_squared_error
from sklearn.model_selection import train_test_split
from sklearn.neural_network import MLPRegressor
from sklearn.preprocessing import MinMaxScaler, StandardScaler

from modules.evaluation_oracle.oracle import InputsOracle, OrderOracle
from modules.search_state.search_state import PerformanceMetrics
from utils.error_handling import handle_oracle_errors
from utils.exceptions import ConfigurationError, SearchStateError
from utils import constants


class MLPOracle(OrderOracle, InputsOracle):
    """
    Dataset-backed evaluation oracle using a one-hidden-layer MLPRegressor.

    Responsibilities:
    1. Split the data into training and selection subsets.
    2. Hold the input scaling statistics (the model's scaling layer).
    3. Train a model per order (order search) or per input mask.
    4. Expose the live model's parameter vector and a prune/grow interface
       that removes or re-inserts rows of the first weight matrix, so a
       trial can be scored without retraining.
    """

    def __init__(self, df: pd.DataFrame, config: dict, logger: logging.Logger):
        self.config = config
        self.logger = logger

        data_cfg = config.get('data', {})
        oracle_cfg = config.get('oracle', {})
        seeds = config.get('_internal_seeds', {})

        target = data_cfg.get('target_column')
        if target not in df.columns:
            raise ConfigurationError(f"Target column '{target}' not found in data.", option='target_column')

        input_columns = data_cfg.get('input_columns') or [
            c for c in df.columns if c != target and c not in data_cfg.get('drop_columns', [])
        ]
        missing = [c for c in input_columns if c not in df.columns]
        if missing:
            raise ConfigurationError(f"Input columns not found in data: {missing}", option='input_columns')

        self.variable_names: List[str] = list(df.columns)
        self.uses: List[str] = [
            constants.USE_INPUT if c in input_columns
            else constants.USE_TARGET if c == target
            else constants.USE_UNUSED
            for c in self.variable_names
        ]
        self.all_input_names = [c for c, u in zip(self.variable_names, self.uses) if u == constants.USE_INPUT]

        X = df[self.all_input_names].to_numpy(dtype=float)
        y = df[target].to_numpy(dtype=float)
        self.X_train, self.X_sel, self.y_train, self.y_sel = train_test_split(
            X, y,
            test_size=data_cfg.get('selection_size', 0.2),
            random_state=seeds.get('split', data_cfg.get('seed', 42)),
        )

        self.activation = oracle_cfg.get('activation', 'tanh')
        self.max_iter = oracle_cfg.get('max_iter', 200)
        self.learning_rate_init = oracle_cfg.get('learning_rate_init', 1e-3)
        self.order = oracle_cfg.get('hidden_units', constants.DEFAULT_MINIMUM_ORDER)
        self._rng = np.random.default_rng(seeds.get('model', 0))

        self.scaling_method: Optional[str] = oracle_cfg.get('scaling_method', constants.SCALING_MEAN_STD)
        self.statistics = self._compute_statistics(self.X_train) if self.scaling_method else None

        self.active: List[int] = list(range(len(self.all_input_names)))
        self.model: Optional[MLPRegressor] = None
        self._order_models: Dict[int, MLPRegressor] = {}
        self._pruned: List[Tuple[int, int, np.ndarray]] = []

        self.logger.info(
            f"MLPOracle ready: {len(self.all_input_names)} inputs, "
            f"{len(self.X_train)} training / {len(self.X_sel)} selection samples.")

    # --- Data helpers ---

    def _compute_statistics(self, X: np.ndarray) -> pd.DataFrame:
        standard = StandardScaler().fit(X)
        minmax = MinMaxScaler().fit(X)
        return pd.DataFrame({
            'mean': standard.mean_,
            'std': standard.scale_,
            'minimum': minmax.data_min_,
            'maximum': minmax.data_max_,
        }, index=self.all_input_names)

    @property
    def active_names(self) -> List[str]:
        return [self.all_input_names[i] for i in self.active]

    def _design(self, X: np.ndarray) -> np.ndarray:
        """Active columns of X passed through the scaling layer."""
        Xa = X[:, self.active]
        if not self.scaling_method or self.statistics is None:
            return Xa
        stats = self.statistics.loc[self.active_names]
        if self.scaling_method == constants.SCALING_MIN_MAX:
            span = (stats['maximum'] - stats['minimum']).to_numpy()
            span[span == 0] = 1.0
            return 2.0 * (Xa - stats['minimum'].to_numpy()) / span - 1.0
        std = stats['std'].to_numpy().copy()
        std[std == 0] = 1.0
        return (Xa - stats['mean'].to_numpy()) / std

    def _fit(self, order: int) -> MLPRegressor:
        model = MLPRegressor(
            hidden_layer_sizes=(order,),
            activation=self.activation,
            max_iter=self.max_iter,
            learning_rate_init=self.learning_rate_init,
            random_state=int(self._rng.integers(0, 2**31 - 1)),
        )
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", category=ConvergenceWarning)
            model.fit(self._design(self.X_train), self.y_train)
        return model

    def _errors(self) -> PerformanceMetrics:
        return PerformanceMetrics(self.calculate_training_error(), self.calculate_selection_error())

    def _require_model(self) -> MLPRegressor:
        if self.model is None:
            raise SearchStateError("No trained model attached to the oracle.")
        return self.model

    # --- Parameter vector ---

    @staticmethod
    def flatten(model: MLPRegressor) -> np.ndarray:
        return np.concatenate([w.ravel() for w in model.coefs_] + [b.ravel() for b in model.intercepts_])

    def get_parameters(self, order: Optional[int] = None) -> np.ndarray:
        if order is None:
            return self.flatten(self._require_model())
        if order not in self._order_models:
            raise SearchStateError(f"Order {order} has not been evaluated yet.")
        return self.flatten(self._order_models[order])

    def set_parameters(self, parameters: np.ndarray) -> None:
        model = self._require_model()
        parameters = np.asarray(parameters, dtype=float)
        shapes = [w.shape for w in model.coefs_] + [b.shape for b in model.intercepts_]
        expected = sum(int(np.prod(s)) for s in shapes)
        if parameters.size != expected:
            raise ValueError(f"Parameter vector has size {parameters.size}, model expects {expected}.")

        arrays, offset = [], 0
        for shape in shapes:
            size = int(np.prod(shape))
            arrays.append(parameters[offset:offset + size].reshape(shape).copy())
            offset += size
        n_layers = len(model.coefs_)
        model.coefs_ = arrays[:n_layers]
        model.intercepts_ = arrays[n_layers:]

    # --- Order search interface ---

    @handle_oracle_errors("Order evaluation")
    def evaluate(self, order: int) -> PerformanceMetrics:
        model = self._fit(order)
        self._order_models[order] = model
        self.model = model
        self.order = order
        return self._errors()

    @handle_oracle_errors("Order commit")
    def commit_order(self, order: int, parameters: np.ndarray) -> None:
        model = self._order_models.get(order)
        self.model = copy.deepcopy(model) if model is not None else self._fit(order)
        self.order = order
        self.set_parameters(parameters)
        self.logger.info(f"Committed order {order} to the model.")

    # --- Inputs search interface ---

    @property
    def inputs_number(self) -> int:
        return len(self.all_input_names)

    @handle_oracle_errors("Inputs evaluation")
    def evaluate_inputs(self, mask: np.ndarray) -> PerformanceMetrics:
        mask = np.asarray(mask, dtype=bool)
        self.active = [i for i, keep in enumerate(mask) if keep]
        self._pruned.clear()
        self.model = self._fit(self.order)
        return self._errors()

    def prune_input(self, index: int) -> None:
        model = self._require_model()
        row = model.coefs_[0][index].copy()
        self._pruned.append((index, self.active[index], row))
        model.coefs_[0] = np.delete(model.coefs_[0], index, axis=0)
        del self.active[index]
        model.n_features_in_ = len(self.active)

    def grow_input(self, index: int) -> None:
        if not self._pruned or self._pruned[-1][0] != index:
            raise SearchStateError(f"Input {index} was not the last pruned input.")
        model = self._require_model()
        _, position, row = self._pruned.pop()
        model.coefs_[0] = np.insert(model.coefs_[0], index, row, axis=0)
        self.active.insert(index, position)
        model.n_features_in_ = len(self.active)

    def calculate_training_error(self) -> float:
        model = self._require_model()
        return float(mean_squared_error(self.y_train, model.predict(self._design(self.X_train))))

    def calculate_selection_error(self) -> float:
        model = self._require_model()
        return float(mean_squared_error(self.y_sel, model.predict(self._design(self.X_sel))))

    def get_variable_uses(self) -> List[str]:
        return list(self.uses)

    def get_variable_names(self) -> List[str]:
        return list(self.variable_names)

    def has_scaling_layer(self) -> bool:
        return bool(self.scaling_method)

    def get_scaling_statistics(self) -> Optional[pd.DataFrame]:
        return None if self.statistics is None else self.statistics.copy()

    def get_scaling_method(self) -> Optional[str]:
        return self.scaling_method

    def commit_inputs(self, uses: List[str], mask: np.ndarray, parameters: np.ndarray,
                      statistics: Optional[pd.DataFrame] = None,
                      scaling_method: Optional[str] = None) -> None:
        mask = np.asarray(mask, dtype=bool)
        active = [i for i, keep in enumerate(mask) if keep]
        if len(active) != self._require_model().coefs_[0].shape[0]:
            raise SearchStateError(
                f"Mask keeps {len(active)} inputs but the model has {self.model.coefs_[0].shape[0]}.")

        self.uses = list(uses)
        self.active = active
        self._pruned.clear()
        self.set_parameters(parameters)
        if statistics is not None:
            self.statistics = statistics.copy()
            self.scaling_method = scaling_method
        self.logger.info(f"Committed inputs to the model: {self.active_names}")

    def describe(self) -> Dict[str, Any]:
        return {
            'order': self.order,
            'inputs': self.active_names,
            'scaling_method': self.scaling_method,
            'parameters_number': 0 if self.model is None else int(self.flatten(self.model).size),
        }
