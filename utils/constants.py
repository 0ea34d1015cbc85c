# utils/constants.py

# --- Top-Level Result Directories ---
CONFIG_DIR = "01_RunConfiguration"              # Config used, settings tables
ORDER_SELECTION_DIR = "02_OrderSelection"       # Simulated annealing results
INPUTS_SELECTION_DIR = "03_InputsSelection"     # Selective pruning results
FINAL_MODEL_DIR = "04_CommittedModel"           # Estimator after commit

TOP_LEVEL_RESULT_DIRS = [
    CONFIG_DIR,
    ORDER_SELECTION_DIR,
    INPUTS_SELECTION_DIR,
    FINAL_MODEL_DIR,
]

# --- File Names ---
CONFIG_USED_FILE = "config_used.json"
HISTORY_FILE = "history.parquet"
SUMMARY_FILE = "summary.json"
SETTINGS_FILE = "settings.parquet"
MODEL_FILE = "model.pkl"

# --- Variable Uses ---
USE_INPUT = "Input"
USE_TARGET = "Target"
USE_UNUSED = "Unused"

# --- Scaling Methods ---
SCALING_MEAN_STD = "MeanStandardDeviation"
SCALING_MIN_MAX = "MinimumMaximum"
SCALING_METHODS = [SCALING_MEAN_STD, SCALING_MIN_MAX]

# --- Performance Calculation Methods (multi-trial aggregation) ---
PERFORMANCE_MAXIMUM = "Maximum"
PERFORMANCE_MINIMUM = "Minimum"
PERFORMANCE_MEAN = "Mean"
PERFORMANCE_CALCULATION_METHODS = [PERFORMANCE_MAXIMUM, PERFORMANCE_MINIMUM, PERFORMANCE_MEAN]

# --- Neighbour sampling ---
MAXIMUM_RANDOM_FAILURES = 5

# --- Defaults: shared ---
DEFAULT_TRIALS_NUMBER = 1
DEFAULT_TOLERANCE = 0.0
DEFAULT_MAXIMUM_ITERATIONS_NUMBER = 1000
DEFAULT_MAXIMUM_TIME = 10000.0

# --- Defaults: order selection ---
DEFAULT_MINIMUM_ORDER = 1
DEFAULT_MAXIMUM_ORDER = 10
DEFAULT_COOLING_RATE = 0.5
DEFAULT_MINIMUM_TEMPERATURE = 1.0e-3
DEFAULT_MAXIMUM_GENERALIZATION_FAILURES = 3
DEFAULT_GENERALIZATION_PERFORMANCE_GOAL = 0.0

# --- Defaults: inputs selection ---
DEFAULT_MINIMUM_INPUTS_NUMBER = 1
DEFAULT_MAXIMUM_SELECTION_FAILURES = 3
DEFAULT_SELECTION_PERFORMANCE_GOAL = 0.0
