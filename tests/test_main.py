import pytest
import json
import logging
import numpy as np
import pandas as pd
from pathlib import Path

import main
from utils import constants

REPO_SCHEMA = Path(__file__).resolve().parents[1] / "config" / "schema.json"

@pytest.fixture
def run_files(tmp_path):
    rng = np.random.default_rng(3)
    df = pd.DataFrame({'a': rng.normal(size=60), 'b': rng.normal(size=60)})
    df['y'] = 1.5 * df['a'] + 0.1 * rng.normal(size=60)
    data_path = tmp_path / "data.csv"
    df.to_csv(data_path, index=False)

    config = {
        "data": {"file_path": str(data_path), "target_column": "y", "selection_size": 0.25, "seed": 5},
        "oracle": {"hidden_units": 2, "max_iter": 40, "learning_rate_init": 0.01},
        "order_selection": {"minimum_order": 1, "maximum_order": 4, "maximum_iterations_number": 2,
                            "display": False},
        "inputs_selection": {"maximum_iterations_number": 2, "display": False},
        "logging": {"level": "INFO", "log_to_console": False, "log_to_file": False},
        "outputs": {"base_results_dir": str(tmp_path / "results")}
    }
    config_path = tmp_path / "config.json"
    config_path.write_text(json.dumps(config))
    yield config_path, tmp_path / "results"
    logging.getLogger().handlers = []

def test_parse_arguments_defaults():
    args = main.parse_arguments([])
    assert args.config == "config/config.json"
    assert args.algorithm == "both"
    assert args.verbose is False
    assert args.dry_run is False

def test_dry_run(run_files):
    config_path, results_dir = run_files
    code = main.main(["--config", str(config_path), "--schema", str(REPO_SCHEMA), "--dry-run"])
    assert code == 0
    assert (results_dir / constants.CONFIG_DIR / constants.CONFIG_USED_FILE).exists()
    assert not (results_dir / constants.ORDER_SELECTION_DIR).exists()

def test_full_run(run_files):
    config_path, results_dir = run_files
    code = main.main(["--config", str(config_path), "--schema", str(REPO_SCHEMA)])
    assert code == 0
    for directory in (constants.ORDER_SELECTION_DIR, constants.INPUTS_SELECTION_DIR):
        assert (results_dir / directory / constants.SUMMARY_FILE).exists()
    assert (results_dir / constants.FINAL_MODEL_DIR / constants.MODEL_FILE).exists()

def test_configuration_error_exit_code(tmp_path):
    code = main.main(["--config", str(tmp_path / "missing.json"), "--schema", str(REPO_SCHEMA)])
    assert code == 1
