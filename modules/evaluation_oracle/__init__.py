"""
Evaluation Oracle Module
========================

Responsibility:
- Abstract interfaces the searches are allowed to call (OrderOracle, InputsOracle).
- Multi-trial aggregation and per-order caching (OrderEvaluator).
- A scikit-learn MLP backed oracle over a pandas DataFrame (MLPOracle).
"""

from .oracle import OrderOracle, InputsOracle
from .order_evaluator import OrderEvaluator
from .mlp_oracle import MLPOracle

__all__ = ['OrderOracle', 'InputsOracle', 'OrderEvaluator', 'MLPOracle']
