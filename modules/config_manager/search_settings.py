import logging
import pandas as pd
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from utils.exceptions import ConfigurationError
from utils import constants


@dataclass(frozen=True)
class ValidationOutcome:
    """Explicit result of setting one option."""
    accepted: bool
    option: str
    message: str = ""


def _parse_bool(raw: Any) -> bool:
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, (int, float)) and raw in (0, 1):
        return bool(raw)
    if isinstance(raw, str) and raw.strip().lower() in {'1', 'true', 'yes'}:
        return True
    if isinstance(raw, str) and raw.strip().lower() in {'0', 'false', 'no'}:
        return False
    raise ValueError(f"cannot interpret {raw!r} as a boolean")


def _parse_int(raw: Any) -> int:
    if isinstance(raw, bool):
        raise ValueError(f"cannot interpret {raw!r} as an integer")
    if isinstance(raw, float):
        if not raw.is_integer():
            raise ValueError(f"{raw!r} is not a whole number")
        return int(raw)
    return int(str(raw).strip()) if isinstance(raw, str) else int(raw)


def _parse_float(raw: Any) -> float:
    if isinstance(raw, bool):
        raise ValueError(f"cannot interpret {raw!r} as a number")
    return float(raw)


def _parse_str(raw: Any) -> str:
    if not isinstance(raw, str):
        raise ValueError(f"expected a string, got {raw!r}")
    return raw.strip()


# (parser, predicate, constraint description)
OptionSpec = Tuple[Callable[[Any], Any], Callable[[Any], bool], str]


class SelectionSettings:
    """
    Configuration surface shared by the model selection algorithms.

    Every option is independently settable. A value is validated before it is
    assigned, so a rejected value leaves the previous one in place.

    Two call styles are offered:
    - set(option, value) raises ConfigurationError on rejection.
    - try_set(option, value) returns a ValidationOutcome instead.
    """

    OPTIONS: Dict[str, OptionSpec] = {
        'trials_number': (_parse_int, lambda v: v > 0,
                          "Trials number must be greater than 0."),
        'performance_calculation_method': (
            _parse_str, lambda v: v in constants.PERFORMANCE_CALCULATION_METHODS,
            f"Performance calculation method must be one of {constants.PERFORMANCE_CALCULATION_METHODS}."),
        'tolerance': (_parse_float, lambda v: v >= 0,
                      "Tolerance must be equal or greater than 0."),
        'maximum_iterations_number': (_parse_int, lambda v: v > 0,
                                      "Maximum iterations number must be greater than 0."),
        'maximum_time': (_parse_float, lambda v: v >= 0,
                         "Maximum time must be equal or greater than 0."),
        'reserve_parameters_data': (_parse_bool, lambda v: True, ""),
        'reserve_performance_data': (_parse_bool, lambda v: True, ""),
        'reserve_minimal_parameters': (_parse_bool, lambda v: True, ""),
        'display': (_parse_bool, lambda v: True, ""),
    }

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(self.__class__.__name__)
        self.set_default()

    @classmethod
    def options(cls) -> Dict[str, OptionSpec]:
        merged: Dict[str, OptionSpec] = {}
        for klass in reversed(cls.__mro__):
            merged.update(getattr(klass, 'OPTIONS', {}))
        return merged

    def set_default(self) -> None:
        """Sets the members of the settings object to their default values."""
        self.trials_number = constants.DEFAULT_TRIALS_NUMBER
        self.performance_calculation_method = constants.PERFORMANCE_MINIMUM
        self.tolerance = constants.DEFAULT_TOLERANCE
        self.maximum_iterations_number = constants.DEFAULT_MAXIMUM_ITERATIONS_NUMBER
        self.maximum_time = constants.DEFAULT_MAXIMUM_TIME
        self.reserve_parameters_data = True
        self.reserve_performance_data = True
        self.reserve_minimal_parameters = True
        self.display = True

    # --- Setting values ---

    def validate(self, option: str, value: Any) -> Any:
        """
        Parses and validates a value without assigning it.

        Returns:
            The parsed value.

        Raises:
            ConfigurationError: Unknown option, unparsable value or violated constraint.
        """
        option_spec = self.options().get(option)
        if option_spec is None:
            raise ConfigurationError(f"Unknown option '{option}' for {self.__class__.__name__}.",
                                     option=option, constraint="known option")
        parser, predicate, constraint = option_spec
        try:
            parsed = parser(value)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid value for '{option}': {e}",
                                     option=option, constraint="parsable value") from e
        if not predicate(parsed):
            raise ConfigurationError(f"{constraint} Got {parsed!r}.", option=option, constraint=constraint)
        return parsed

    def set(self, option: str, value: Any) -> None:
        parsed = self.validate(option, value)
        setattr(self, option, parsed)

    def try_set(self, option: str, value: Any) -> ValidationOutcome:
        try:
            self.set(option, value)
        except ConfigurationError as e:
            return ValidationOutcome(False, option, str(e))
        return ValidationOutcome(True, option)

    def set_tolerance(self, value: float) -> None:
        self.set('tolerance', value)

    def set_maximum_iterations_number(self, value: int) -> None:
        self.set('maximum_iterations_number', value)

    def set_maximum_time(self, value: float) -> None:
        self.set('maximum_time', value)

    # --- Persistence boundary ---

    def to_fields(self) -> Dict[str, Any]:
        """Flat mapping of every option to its current scalar value."""
        return {option: getattr(self, option) for option in self.options()}

    def from_fields(self, fields: Mapping[str, Any]) -> List[ValidationOutcome]:
        """
        Applies persisted fields best-effort.

        Unknown, unparsable or invalid fields are logged and skipped, leaving
        the option at its prior value.
        """
        outcomes = []
        for option, value in fields.items():
            outcome = self.try_set(option, value)
            if not outcome.accepted:
                self.logger.warning(f"Skipping field '{option}': {outcome.message}")
            outcomes.append(outcome)
        return outcomes

    def settings_frame(self) -> pd.DataFrame:
        """Two-column table of human readable option labels and values."""
        rows = [{'option': option.replace('_', ' ').capitalize(), 'value': str(value)}
                for option, value in self.to_fields().items()]
        return pd.DataFrame(rows, columns=['option', 'value'])

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.to_fields()})"


class OrderSelectionSettings(SelectionSettings):
    """Options of the simulated annealing order search."""

    OPTIONS: Dict[str, OptionSpec] = {
        'minimum_order': (_parse_int, lambda v: v > 0,
                          "Minimum order must be greater than 0."),
        'maximum_order': (_parse_int, lambda v: v > 0,
                          "Maximum order must be greater than 0."),
        'cooling_rate': (_parse_float, lambda v: 0 < v < 1,
                         "Cooling rate must be greater than 0 and less than 1."),
        'minimum_temperature': (_parse_float, lambda v: v >= 0,
                                "Minimum temperature must be equal or greater than 0."),
        'maximum_generalization_failures': (_parse_int, lambda v: v > 0,
                                            "Maximum generalization failures must be greater than 0."),
        'generalization_performance_goal': (_parse_float, lambda v: v >= 0,
                                            "Generalization performance goal must be equal or greater than 0."),
        'reserve_generalization_performance_data': (_parse_bool, lambda v: True, ""),
    }

    def set_default(self) -> None:
        super().set_default()
        self.minimum_order = constants.DEFAULT_MINIMUM_ORDER
        self.maximum_order = constants.DEFAULT_MAXIMUM_ORDER
        self.cooling_rate = constants.DEFAULT_COOLING_RATE
        self.minimum_temperature = constants.DEFAULT_MINIMUM_TEMPERATURE
        self.maximum_generalization_failures = constants.DEFAULT_MAXIMUM_GENERALIZATION_FAILURES
        self.generalization_performance_goal = constants.DEFAULT_GENERALIZATION_PERFORMANCE_GOAL
        self.reserve_generalization_performance_data = True

    def set_cooling_rate(self, value: float) -> None:
        self.set('cooling_rate', value)

    def set_minimum_temperature(self, value: float) -> None:
        self.set('minimum_temperature', value)

    def set_maximum_generalization_failures(self, value: int) -> None:
        self.set('maximum_generalization_failures', value)

    def set_order_bounds(self, minimum_order: int, maximum_order: int) -> None:
        """Sets both bounds at once, rejecting an empty range."""
        minimum_order = self.validate('minimum_order', minimum_order)
        maximum_order = self.validate('maximum_order', maximum_order)
        if minimum_order >= maximum_order:
            raise ConfigurationError(
                f"Minimum order ({minimum_order}) must be less than maximum order ({maximum_order}).",
                option='minimum_order', constraint="minimum_order < maximum_order")
        self.minimum_order = minimum_order
        self.maximum_order = maximum_order


class InputsSelectionSettings(SelectionSettings):
    """Options of the selective pruning inputs search."""

    OPTIONS: Dict[str, OptionSpec] = {
        'minimum_inputs_number': (_parse_int, lambda v: v > 0,
                                  "Minimum inputs number must be greater than 0."),
        'maximum_selection_failures': (_parse_int, lambda v: v > 0,
                                       "Maximum selection failures must be greater than 0."),
        'selection_performance_goal': (_parse_float, lambda v: v >= 0,
                                       "Selection performance goal must be equal or greater than 0."),
        'reserve_selection_performance_data': (_parse_bool, lambda v: True, ""),
    }

    def set_default(self, inputs_number: Optional[int] = None) -> None:
        """
        Sets defaults. maximum_selection_failures is derived from the number of
        inputs when it is known: max(3, inputs_number / 5).
        """
        super().set_default()
        self.minimum_inputs_number = constants.DEFAULT_MINIMUM_INPUTS_NUMBER
        self.maximum_selection_failures = self.default_maximum_selection_failures(inputs_number)
        self.selection_performance_goal = constants.DEFAULT_SELECTION_PERFORMANCE_GOAL
        self.reserve_selection_performance_data = True
        self.maximum_selection_failures_is_set = False

    @staticmethod
    def default_maximum_selection_failures(inputs_number: Optional[int] = None) -> int:
        if not inputs_number:
            return constants.DEFAULT_MAXIMUM_SELECTION_FAILURES
        return int(max(float(constants.DEFAULT_MAXIMUM_SELECTION_FAILURES), inputs_number / 5.0))

    def set(self, option: str, value: Any) -> None:
        super().set(option, value)
        if option == 'maximum_selection_failures':
            self.maximum_selection_failures_is_set = True

    def resolve_maximum_selection_failures(self, inputs_number: int) -> int:
        """Derives the failure bound from the inputs number unless it was set explicitly."""
        if not self.maximum_selection_failures_is_set:
            self.maximum_selection_failures = self.default_maximum_selection_failures(inputs_number)
        return self.maximum_selection_failures

    def set_minimum_inputs_number(self, value: int) -> None:
        self.set('minimum_inputs_number', value)

    def set_maximum_selection_failures(self, value: int) -> None:
        self.set('maximum_selection_failures', value)
