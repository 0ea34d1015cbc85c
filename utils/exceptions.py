"""
Custom exception hierarchy for the Model Selection Search Engine.
"""

class ModelSelectionException(Exception):
    """Base exception for all system errors."""
    pass

class ConfigurationError(ModelSelectionException):
    """
    Configuration validation failed.

    Carries the offending option and the violated constraint so callers can
    report which rule rejected the value.
    """

    def __init__(self, message: str, option: str = None, constraint: str = None):
        super().__init__(message)
        self.option = option
        self.constraint = constraint

class MissingCollaboratorError(ModelSelectionException):
    """A required collaborator (e.g. the evaluation oracle) is not attached."""
    pass

class OracleEvaluationError(ModelSelectionException):
    """The evaluation oracle failed while training or scoring a candidate."""
    pass

class SearchStateError(ModelSelectionException):
    """Internal search invariant was violated."""
    pass
