"""
Inputs Selection Module
=======================

Responsibility:
- Greedy input elimination with leave-one-input-out re-scoring
  (SelectivePruning), committing the optimal input set to the model.
- ErrorRatioTable: per-position trial errors with explicit exclusion status.
"""

from .selective_pruning import SelectivePruning, get_input_index
from .error_ratio_table import ErrorRatioTable, PositionStatus

__all__ = ['SelectivePruning', 'get_input_index', 'ErrorRatioTable', 'PositionStatus']
