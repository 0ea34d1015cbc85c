import logging
import joblib
import pandas as pd
from pathlib import Path
from typing import Any, Dict, Optional

from modules.search_state.search_result import SearchResult
from utils.file_io import save_dataframe, save_json
from utils import constants

class ReportingEngine:
    """
    Writes the artifacts of a model selection run.

    Per search directory:
    - history.parquet: one row per iteration (reserved streams only).
    - summary.json: stopping condition, optimum, final errors, timings.
    - settings.parquet: the option table the search ran with.
    """

    SEARCH_DIRS = {
        'order': constants.ORDER_SELECTION_DIR,
        'inputs': constants.INPUTS_SELECTION_DIR,
    }

    def __init__(self, config: dict, logger: logging.Logger):
        self.config = config
        self.logger = logger
        self.base_dir = Path(config.get('outputs', {}).get('base_results_dir', 'results'))
        self.excel_copy = config.get('outputs', {}).get('save_excel_copy', False)

    def ensure_base_structure(self) -> None:
        for name in constants.TOP_LEVEL_RESULT_DIRS:
            (self.base_dir / name).mkdir(parents=True, exist_ok=True)

    def report_search(self, kind: str, result: SearchResult, settings: Any = None) -> Path:
        """
        Saves history, summary and settings of one search.

        Args:
            kind: 'order' or 'inputs'.
            result: The search result.
            settings: Optional settings object exposing settings_frame().

        Returns:
            The directory the artifacts were written to.
        """
        if kind not in self.SEARCH_DIRS:
            raise ValueError(f"Unknown search kind: {kind}")
        output_dir = self.base_dir / self.SEARCH_DIRS[kind]
        output_dir.mkdir(parents=True, exist_ok=True)

        history = result.history_frame()
        if not history.empty:
            save_dataframe(history, output_dir / constants.HISTORY_FILE, excel_copy=self.excel_copy)

        summary = result.to_dict()
        save_json(summary, output_dir / constants.SUMMARY_FILE)

        if settings is not None:
            save_dataframe(settings.settings_frame(), output_dir / constants.SETTINGS_FILE,
                           excel_copy=self.excel_copy)

        self.logger.info(
            f"{kind.capitalize()} selection report saved to {output_dir} "
            f"(stopping condition: {summary['stopping_condition']}, "
            f"{summary['iterations_number']} iterations)")
        return output_dir

    def save_model(self, model: Any, description: Optional[Dict[str, Any]] = None) -> Optional[Path]:
        """Persists the committed estimator with joblib."""
        if model is None:
            self.logger.warning("No committed model to save.")
            return None
        output_dir = self.base_dir / constants.FINAL_MODEL_DIR
        output_dir.mkdir(parents=True, exist_ok=True)
        path = output_dir / constants.MODEL_FILE
        joblib.dump(model, path)
        if description:
            save_json(description, output_dir / "model_description.json")
        self.logger.info(f"Committed model saved to {path}")
        return path

    def summary_table(self, results: Dict[str, SearchResult]) -> pd.DataFrame:
        """One row per search, for the console summary."""
        rows = []
        for kind, result in results.items():
            payload = result.to_dict()
            rows.append({
                'search': kind,
                'stopping_condition': payload['stopping_condition'],
                'iterations': payload['iterations_number'],
                'elapsed_time': round(payload['elapsed_time'], 3),
                'final_training_error': payload['final_training_error'],
                'final_selection_error': payload['final_selection_error'],
            })
        return pd.DataFrame(rows)
