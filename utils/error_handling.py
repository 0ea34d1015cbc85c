import functools
import logging
from utils.exceptions import ModelSelectionException, OracleEvaluationError

def handle_oracle_errors(operation_name: str):
    """Decorator for consistent error handling around oracle calls."""
    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except ModelSelectionException:
                # Re-raise our custom exceptions
                raise
            except Exception as e:
                # Wrap unexpected errors, the run is aborted
                logger = args[0].logger if hasattr(args[0], 'logger') else logging.getLogger()
                logger.error(f"{operation_name} failed: {e}", exc_info=True)
                raise OracleEvaluationError(f"{operation_name} failed: {str(e)}") from e
        return wrapper
    return decorator
