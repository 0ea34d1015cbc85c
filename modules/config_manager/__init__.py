"""
Configuration Manager Module
============================

Responsibility:
- Centralized loading and validation of JSON configuration files.
- Enforcement of schema constraints and logical business rules.
- Validated, independently settable search options with a
  load(fields) / save(fields) persistence boundary.
- Deterministic seed propagation for reproducibility.
"""

from .config_manager import ConfigurationManager
from .search_settings import (
    SelectionSettings,
    OrderSelectionSettings,
    InputsSelectionSettings,
    ValidationOutcome,
)

__all__ = [
    'ConfigurationManager',
    'SelectionSettings',
    'OrderSelectionSettings',
    'InputsSelectionSettings',
    'ValidationOutcome',
]
