"""
Search State Module
===================

Shared bookkeeping for both model selection searches:
- SearchState / PerformanceMetrics: current and optimal configuration tracking.
- StoppingCriteria: ordered termination predicates with a tagged reason.
- HistoryRecorder: per-iteration logs gated by reservation flags.
- SearchResult: the owned outcome of one run.
"""

from .search_state import SearchState, PerformanceMetrics
from .stopping_criteria import (
    StoppingCondition,
    StoppingCriteria,
    OrderStoppingCriteria,
    InputsStoppingCriteria,
)
from .history_recorder import HistoryRecorder
from .search_result import SearchResult, OrderSearchResult, InputsSearchResult

__all__ = [
    'SearchState',
    'PerformanceMetrics',
    'StoppingCondition',
    'StoppingCriteria',
    'OrderStoppingCriteria',
    'InputsStoppingCriteria',
    'HistoryRecorder',
    'SearchResult',
    'OrderSearchResult',
    'InputsSearchResult',
]
