import abc
import logging
from enum import Enum
from typing import Callable, List, Optional, Tuple

from modules.search_state.search_state import SearchState


class StoppingCondition(str, Enum):
    """Tagged reason a search run terminated."""
    MINIMUM_TEMPERATURE = "MinimumTemperature"
    MAXIMUM_TIME = "MaximumTime"
    GENERALIZATION_PERFORMANCE_GOAL = "GeneralizationPerformanceGoal"
    MAXIMUM_GENERALIZATION_FAILURES = "MaximumGeneralizationFailures"
    MAXIMUM_ITERATIONS = "MaximumIterations"
    SELECTION_PERFORMANCE_GOAL = "SelectionPerformanceGoal"
    MINIMUM_INPUTS = "MinimumInputs"
    ALGORITHM_FINISHED = "AlgorithmFinished"


# (condition, predicate, human readable reason)
Criterion = Tuple[StoppingCondition, Callable[[], bool], str]


class StoppingCriteria(abc.ABC):
    """
    Evaluates whether a search loop should terminate.

    Subclasses build an ordered list of criteria; the first predicate that
    holds wins, so exactly one condition is reported per run.
    """

    def __init__(self, settings, logger: logging.Logger):
        self.settings = settings
        self.logger = logger

    @abc.abstractmethod
    def _criteria(self, state: SearchState, **context) -> List[Criterion]:
        """Ordered (condition, predicate, reason) triples for the current iteration."""
        pass

    def evaluate(self, state: SearchState, **context) -> Optional[StoppingCondition]:
        """
        Returns the first stopping condition that holds, or None to continue.
        """
        stop, condition, reason = self.should_stop(state, **context)
        return condition if stop else None

    def should_stop(self, state: SearchState, **context) -> Tuple[bool, Optional[StoppingCondition], str]:
        """
        Determines if the search should stop at the current iteration.

        Returns:
            (bool, condition, reason_string)
        """
        for condition, predicate, reason in self._criteria(state, **context):
            if predicate():
                if self.settings.display:
                    self.logger.info(reason)
                else:
                    self.logger.debug(reason)
                return True, condition, reason
        return False, None, ""


class OrderStoppingCriteria(StoppingCriteria):
    """
    Simulated annealing termination, in priority order:
    temperature, time, goal, generalization failures, iterations.
    """

    def _criteria(self, state: SearchState, temperature: float = None, **context) -> List[Criterion]:
        s = self.settings
        elapsed_time = state.elapsed_time
        return [
            (StoppingCondition.MINIMUM_TEMPERATURE,
             lambda: temperature < s.minimum_temperature,
             "Minimum temperature reached."),
            (StoppingCondition.MAXIMUM_TIME,
             lambda: elapsed_time > s.maximum_time,
             "Maximum time reached."),
            (StoppingCondition.GENERALIZATION_PERFORMANCE_GOAL,
             lambda: state.optimum_performance.selection_error < s.generalization_performance_goal,
             "Generalization performance goal reached."),
            (StoppingCondition.MAXIMUM_GENERALIZATION_FAILURES,
             lambda: state.failures >= s.maximum_generalization_failures,
             f"Maximum generalization performance failures ({state.failures}) reached."),
            (StoppingCondition.MAXIMUM_ITERATIONS,
             lambda: state.iterations >= s.maximum_iterations_number,
             "Maximum number of iterations reached."),
        ]


class InputsStoppingCriteria(StoppingCriteria):
    """
    Selective pruning termination, in priority order:
    time, goal (against the initial evaluation), iterations, minimum inputs,
    algorithm finished.
    """

    def _criteria(self, state: SearchState, initial_performance=None, best_error: float = None,
                  active_inputs: int = None, **context) -> List[Criterion]:
        s = self.settings
        elapsed_time = state.elapsed_time
        return [
            (StoppingCondition.MAXIMUM_TIME,
             lambda: elapsed_time >= s.maximum_time,
             "Maximum time reached."),
            (StoppingCondition.SELECTION_PERFORMANCE_GOAL,
             lambda: initial_performance.selection_error < s.selection_performance_goal,
             "Selection performance goal reached."),
            (StoppingCondition.MAXIMUM_ITERATIONS,
             lambda: state.iterations >= s.maximum_iterations_number,
             "Maximum number of iterations reached."),
            (StoppingCondition.MINIMUM_INPUTS,
             lambda: active_inputs <= s.minimum_inputs_number,
             f"Minimum inputs ({s.minimum_inputs_number}) reached."),
            (StoppingCondition.ALGORITHM_FINISHED,
             lambda: active_inputs == 1 or best_error >= state.current_performance.selection_error,
             "Algorithm finished."),
        ]
