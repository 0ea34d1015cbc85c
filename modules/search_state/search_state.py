import time
import numpy as np
from dataclasses import dataclass
from typing import Any, Callable, Optional, Sequence


@dataclass(frozen=True)
class PerformanceMetrics:
    """
    Pair of errors returned by the evaluation oracle for one configuration.

    selection_error (a.k.a. generalization error) drives every acceptance
    decision; training_error is only recorded.
    """
    training_error: float
    selection_error: float

    @classmethod
    def from_pair(cls, pair: Sequence[float]) -> "PerformanceMetrics":
        training_error, selection_error = pair
        return cls(float(training_error), float(selection_error))

    def as_tuple(self):
        return (self.training_error, self.selection_error)


def snapshot(value: Any) -> Any:
    """Detached copy of a configuration or parameter vector."""
    if isinstance(value, np.ndarray):
        return value.copy()
    return value


class SearchState:
    """
    Mutable bookkeeping shared by both searches.

    Holds the current and optimal configuration, their performances, the
    optimal parameter vector, the failure and iteration counters and the
    beginning timestamp. The current and optimal copies never alias each
    other: every assignment goes through snapshot().
    """

    def __init__(self, clock: Optional[Callable[[], float]] = None):
        self._clock = clock or time.perf_counter
        self.beginning_time: Optional[float] = None

        self.iterations = 0
        self.failures = 0

        self.current_configuration: Any = None
        self.current_performance: Optional[PerformanceMetrics] = None

        self.optimal_configuration: Any = None
        self.optimum_performance: Optional[PerformanceMetrics] = None
        self.optimum_parameters: Optional[np.ndarray] = None

    def start(self) -> None:
        """Sample the beginning timestamp. Called once per run."""
        self.beginning_time = self._clock()
        self.iterations = 0
        self.failures = 0

    @property
    def elapsed_time(self) -> float:
        if self.beginning_time is None:
            return 0.0
        return self._clock() - self.beginning_time

    def set_current(self, configuration: Any, performance: PerformanceMetrics) -> None:
        self.current_configuration = snapshot(configuration)
        self.current_performance = performance

    def set_optimum(self, configuration: Any, performance: PerformanceMetrics,
                    parameters: Optional[np.ndarray]) -> None:
        self.optimal_configuration = snapshot(configuration)
        self.optimum_performance = performance
        self.optimum_parameters = snapshot(parameters)

    def record_failure(self) -> None:
        self.failures += 1

    def reset_failures(self) -> None:
        self.failures = 0

    def next_iteration(self) -> int:
        self.iterations += 1
        return self.iterations
