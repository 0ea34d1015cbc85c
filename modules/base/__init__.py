from .base_engine import BaseSelectionAlgorithm

__all__ = ['BaseSelectionAlgorithm']
