import numpy as np
import pandas as pd
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from modules.search_state.history_recorder import HistoryRecorder
from modules.search_state.stopping_criteria import StoppingCondition


@dataclass
class SearchResult:
    """
    Outcome of one search run. Created once per invocation, populated
    incrementally by the search, and owned by the caller once returned.
    """
    history: HistoryRecorder
    stopping_condition: Optional[StoppingCondition] = None
    iterations_number: int = 0
    elapsed_time: float = 0.0
    final_training_error: float = float('nan')
    final_selection_error: float = float('nan')
    minimal_parameters: Optional[np.ndarray] = None

    # Column names used when flattening tuple rows of each stream
    HISTORY_COLUMNS = {}

    def history_frame(self) -> pd.DataFrame:
        frame = self.history.to_frame(self.HISTORY_COLUMNS)
        if 'parameters' in frame.columns:
            frame['parameters'] = frame['parameters'].apply(
                lambda p: np.asarray(p, dtype=float).tolist())
        return frame

    def to_dict(self) -> Dict[str, Any]:
        return {
            'stopping_condition': self.stopping_condition.value if self.stopping_condition else None,
            'iterations_number': self.iterations_number,
            'elapsed_time': self.elapsed_time,
            'final_training_error': self.final_training_error,
            'final_selection_error': self.final_selection_error,
            'minimal_parameters': self.minimal_parameters,
        }

    def to_string(self) -> str:
        lines = [f"{key.replace('_', ' ').capitalize()}: {value}"
                 for key, value in self.to_dict().items()
                 if key != 'minimal_parameters']
        return "\n".join(lines)


@dataclass
class OrderSearchResult(SearchResult):
    optimal_order: Optional[int] = None

    HISTORY_COLUMNS = {
        'performance': ['order', 'training_error'],
        'generalization_performance': ['order', 'selection_error'],
        'parameters': ['order', 'parameters'],
    }

    def to_dict(self) -> Dict[str, Any]:
        payload = super().to_dict()
        payload['optimal_order'] = self.optimal_order
        return payload


@dataclass
class InputsSearchResult(SearchResult):
    optimal_inputs: Optional[np.ndarray] = None
    optimal_input_names: List[str] = field(default_factory=list)
    removed_inputs: List[str] = field(default_factory=list)

    HISTORY_COLUMNS = {}

    def history_frame(self) -> pd.DataFrame:
        frame = super().history_frame()
        if 'inputs' in frame.columns:
            frame['inputs'] = frame['inputs'].apply(lambda m: np.asarray(m, dtype=bool).tolist())
            frame.insert(1, 'inputs_number', frame['inputs'].apply(sum))
        return frame

    def to_dict(self) -> Dict[str, Any]:
        payload = super().to_dict()
        payload['optimal_inputs'] = self.optimal_inputs
        payload['optimal_input_names'] = list(self.optimal_input_names)
        payload['removed_inputs'] = list(self.removed_inputs)
        return payload
