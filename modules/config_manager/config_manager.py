import json
import os
import hashlib
import sys
import logging
import jsonschema
from datetime import datetime
from pathlib import Path
from typing import Dict, Any, Optional

from modules.config_manager.search_settings import OrderSelectionSettings, InputsSelectionSettings
from utils.exceptions import ConfigurationError
from utils import constants

class ConfigurationManager:
    """
    Manages system configuration loading, validation, and access.
    Acts as the single source of truth for a model selection run.

    The JSON file is validated structurally (jsonschema) and logically
    (business rules). The algorithm sections are then applied to the
    settings objects field by field, best-effort.
    """

    def __init__(self, config_path: str = "config/config.json",
                 schema_path: str = "config/schema.json"):
        """
        Initialize the ConfigurationManager.

        Args:
            config_path (str): Path to the user configuration JSON.
            schema_path (str): Path to the JSON schema definition.
        """
        self.config_path = config_path
        self.schema_path = schema_path
        self.config: Dict[str, Any] = {}
        self.schema: Dict[str, Any] = {}
        self.run_id: Optional[str] = None
        self.logger = logging.getLogger("config_manager")

    def load_and_validate(self) -> Dict[str, Any]:
        """
        Main entry point. Loads config, validates schema/logic and
        propagates seeds.

        Returns:
            Dict[str, Any]: The fully validated configuration.

        Raises:
            ConfigurationError: If any validation step fails.
        """
        # 1. Load Files
        self.config = self._load_json(self.config_path)
        self.schema = self._load_json(self.schema_path)

        # 2. Structural Validation (Schema)
        self._validate_schema()

        # 3. Logical Validation (Business Rules & Bounds)
        self._validate_logic()

        # 4. Internal Seed Propagation (Reproducibility)
        self._propagate_seeds()

        return self.config

    def build_order_settings(self, logger: Optional[logging.Logger] = None) -> OrderSelectionSettings:
        """Settings for the simulated annealing order search."""
        settings = OrderSelectionSettings(logger or self.logger)
        settings.from_fields(self.config.get('order_selection', {}))
        return settings

    def build_inputs_settings(self, logger: Optional[logging.Logger] = None) -> InputsSelectionSettings:
        """Settings for the selective pruning inputs search."""
        settings = InputsSelectionSettings(logger or self.logger)
        settings.from_fields(self.config.get('inputs_selection', {}))
        return settings

    def generate_run_id(self) -> str:
        """
        Generate or retrieve a unique run identifier based on timestamp.
        Used for directory naming and metadata.
        """
        if not self.run_id:
            timestamp = datetime.now()
            # Format: YYYYMMDD_HHMMSS
            self.run_id = timestamp.strftime("%Y%m%d_%H%M%S")
        return self.run_id

    def save_artifacts(self, output_dir: str) -> None:
        """
        Save configuration artifacts to the run directory for reproducibility.

        Saves:
        1. config_used.json: The exact config object in memory.
        2. run_metadata.json: Environment details and config hash.
        """
        config_dir = Path(output_dir) / constants.CONFIG_DIR
        config_dir.mkdir(parents=True, exist_ok=True)

        with open(config_dir / constants.CONFIG_USED_FILE, 'w') as f:
            json.dump(self.config, f, indent=2)

        config_str = json.dumps(self.config, sort_keys=True)
        config_hash = hashlib.sha256(config_str.encode()).hexdigest()

        metadata = {
            'run_id': self.run_id,
            'start_time': datetime.now().isoformat(),
            'python_version': sys.version,
            'platform': sys.platform,
            'config_hash': config_hash,
            'working_directory': os.getcwd()
        }

        with open(config_dir / "run_metadata.json", 'w') as f:
            json.dump(metadata, f, indent=2)

    def _load_json(self, path: str) -> Dict[str, Any]:
        """Safely load a JSON file."""
        if not os.path.exists(path):
            raise ConfigurationError(f"File not found: {path}")
        try:
            with open(path, 'r') as f:
                return json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid JSON in {path}: {str(e)}")

    def _validate_schema(self) -> None:
        """Validate config structure against JSON schema."""
        try:
            jsonschema.validate(instance=self.config, schema=self.schema)
        except jsonschema.ValidationError as e:
            raise ConfigurationError(f"Schema validation failed: {e.message}")

    def _validate_logic(self) -> None:
        """Logical validation of the sections the driver relies on."""
        # --- Data Section ---
        data = self.config.get('data', {})
        for key in ['file_path', 'target_column']:
            if not data.get(key):
                raise ConfigurationError(f"Data '{key}' must be specified and non-empty.", option=key)

        selection_size = data.get('selection_size', 0.2)
        if not (0.0 < selection_size < 1.0):
            raise ConfigurationError(
                f"selection_size must be between 0 and 1 (exclusive), got {selection_size}",
                option='selection_size', constraint="0 < selection_size < 1")

        if data.get('seed', 42) < 0:
            raise ConfigurationError("Data seed must be non-negative.", option='seed')

        # --- Oracle Section ---
        oracle = self.config.get('oracle', {})
        scaling_method = oracle.get('scaling_method', constants.SCALING_MEAN_STD)
        if scaling_method is not None and scaling_method not in constants.SCALING_METHODS:
            raise ConfigurationError(
                f"oracle.scaling_method must be one of {constants.SCALING_METHODS} or null, got {scaling_method}",
                option='scaling_method')
        if oracle.get('max_iter', 200) <= 0:
            raise ConfigurationError(f"oracle.max_iter must be > 0, got {oracle.get('max_iter')}",
                                     option='max_iter')

        # --- Order Selection Section ---
        order = self.config.get('order_selection', {})
        min_order = order.get('minimum_order', constants.DEFAULT_MINIMUM_ORDER)
        max_order = order.get('maximum_order', constants.DEFAULT_MAXIMUM_ORDER)
        if min_order >= max_order:
            raise ConfigurationError(
                f"order_selection.minimum_order ({min_order}) must be < maximum_order ({max_order}).",
                option='minimum_order', constraint="minimum_order < maximum_order")

        # --- Inputs Selection Section ---
        inputs = self.config.get('inputs_selection', {})
        input_columns = data.get('input_columns')
        min_inputs = inputs.get('minimum_inputs_number', constants.DEFAULT_MINIMUM_INPUTS_NUMBER)
        if input_columns and min_inputs > len(input_columns):
            raise ConfigurationError(
                f"inputs_selection.minimum_inputs_number ({min_inputs}) exceeds the "
                f"number of input columns ({len(input_columns)}).",
                option='minimum_inputs_number')

    def _propagate_seeds(self) -> None:
        """
        Propagate master seed to internal components to ensure full reproducibility.
        Uses large, non-overlapping offsets to avoid correlation between components.
        """
        master_seed = self.config.get('data', {}).get('seed', 42)

        self.config['_internal_seeds'] = {
            'split': master_seed,
            'model': master_seed + 1000,
            'order_search': master_seed + 2000,
            'inputs_search': master_seed + 3000,
        }
        logging.debug(f"Seeds propagated from master ({master_seed}): {self.config['_internal_seeds']}")
