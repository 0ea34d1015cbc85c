#!/usr/bin/env python
"""
Model Selection Search Engine - Main Entry Point
Runs the order search (simulated annealing) and/or the inputs search
(selective pruning) against a dataset-backed MLP oracle.
"""
import sys
import logging
import argparse
from pathlib import Path
from typing import Dict

from modules.config_manager import ConfigurationManager
from modules.logging_config import LoggingConfigurator
from modules.evaluation_oracle import MLPOracle, OrderEvaluator
from modules.order_selection import SimulatedAnnealingOrder
from modules.inputs_selection import SelectivePruning
from modules.reporting_engine import ReportingEngine
from modules.search_state import SearchResult
from utils.file_io import read_dataframe
from utils.exceptions import ModelSelectionException


def parse_arguments(argv=None):
    """
    Parse command-line arguments.

    Returns:
        argparse.Namespace: Parsed command-line arguments.
    """
    parser = argparse.ArgumentParser(
        description="Model Selection Search Engine - Order & Inputs Selection",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )

    parser.add_argument(
        "--config",
        type=str,
        default="config/config.json",
        help="Path to the configuration JSON file"
    )

    parser.add_argument(
        "--schema",
        type=str,
        default="config/schema.json",
        help="Path to the configuration JSON schema"
    )

    parser.add_argument(
        "--algorithm",
        choices=["order", "inputs", "both"],
        default="both",
        help="Which search to run; 'both' runs order selection first"
    )

    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose (DEBUG) logging"
    )

    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Validate configuration and setup without running the searches"
    )

    return parser.parse_args(argv)


def run_searches(config: dict, algorithm: str, logger: logging.Logger,
                 config_manager: ConfigurationManager) -> Dict[str, SearchResult]:
    """
    Builds the oracle and runs the requested searches in sequence.

    Returns:
        Mapping of search kind ('order', 'inputs') to its result.
    """
    seeds = config.get('_internal_seeds', {})
    reporter = ReportingEngine(config, logger)
    reporter.ensure_base_structure()

    df = read_dataframe(Path(config['data']['file_path']))
    logger.info(f"Loaded {len(df)} rows x {len(df.columns)} columns from {config['data']['file_path']}")
    oracle = MLPOracle(df, config, logging.getLogger('oracle'))

    results: Dict[str, SearchResult] = {}

    if algorithm in ("order", "both"):
        settings = config_manager.build_order_settings(logging.getLogger('order_selection'))
        evaluator = OrderEvaluator.from_settings(oracle, settings, logging.getLogger('order_evaluator'))
        search = SimulatedAnnealingOrder(evaluator, settings, logging.getLogger('order_selection'),
                                         rng=seeds.get('order_search'))
        results['order'] = search.perform_order_selection()
        reporter.report_search('order', results['order'], settings)

    if algorithm in ("inputs", "both"):
        settings = config_manager.build_inputs_settings(logging.getLogger('inputs_selection'))
        search = SelectivePruning(oracle, settings, logging.getLogger('inputs_selection'),
                                  rng=seeds.get('inputs_search'))
        results['inputs'] = search.perform_inputs_selection()
        reporter.report_search('inputs', results['inputs'], settings)

    reporter.save_model(oracle.model, oracle.describe())
    logger.info("\n" + reporter.summary_table(results).to_string(index=False))
    return results


def main(argv=None):
    """
    Main orchestration function.

    Returns:
        int: Exit code (0 for success, 1 for errors)
    """
    logger = None

    try:
        args = parse_arguments(argv)

        # 1. Load and validate configuration
        config_manager = ConfigurationManager(config_path=args.config, schema_path=args.schema)
        config = config_manager.load_and_validate()

        if args.verbose:
            config.setdefault('logging', {})['level'] = 'DEBUG'

        # 2. Setup logging
        logging_configurator = LoggingConfigurator(config)
        logging_configurator.setup()
        logger = logging_configurator.get_logger('model_selection')
        logger.info(f"Configuration loaded from: {args.config}")

        # 3. Save configuration artifacts
        run_id = config_manager.generate_run_id()
        base_dir = config.get('outputs', {}).get('base_results_dir', 'results')
        config_manager.save_artifacts(base_dir)
        logger.info(f"Run ID: {run_id}, output directory: {Path(base_dir).absolute()}")

        if args.dry_run:
            logger.info("Dry run: configuration valid, searches skipped.")
            return 0

        run_searches(config, args.algorithm, logger, config_manager)
        logger.info("Model selection completed successfully")
        return 0

    except ModelSelectionException as e:
        if logger:
            logger.error(f"Model selection failed: {e}")
        else:
            print(f"ERROR: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        if logger:
            logger.warning("Interrupted by user")
        return 1


def cli():
    sys.exit(main())


if __name__ == "__main__":
    cli()
