# config.py

# Policy constants
INITIAL_ISSUANCE = 120_000_000  # DOT per year
INITIAL_SUPPLY = 1_450_000_000  # DOT at the start of 2025
START_YEAR = 2025
END_YEAR = 2052
TREASURY_SHARE = 0.15
STAKER_SHARE = 0.85
STAKED_SUPPLY_FRACTION = 0.5  # assumed share of supply that is staked
SUSTAIN_USD = 480_000_000  # yearly issuance value at launch
TARGET_EXPENSE_USD = 90_000_000

# Target supply must exceed the supply after one year of unconstrained issuance
MIN_TARGET_SUPPLY = INITIAL_SUPPLY + INITIAL_ISSUANCE
BILLION = 1_000_000_000

# Model options
MODEL_FIXED = "fixed"
MODEL_TARGET = "target"
MODEL_OPTIONS = {
    "Fixed Step Reduction": MODEL_FIXED,
    "Target Supply": MODEL_TARGET,
}

# Default values
DEFAULT_MODEL = MODEL_FIXED
DEFAULT_REDUCTION_STEP = 50
DEFAULT_INFLATION_PERIOD = 2
DEFAULT_TARGET_SUPPLY_BILLIONS = 3.14
DEFAULT_REDUCTION_RATE = 25
DEFAULT_TARGET_PERIOD = 2

# Input validation ranges
RATE_RANGE = (0.0, 100.0)  # lower bound inclusive, upper bound exclusive
PERIOD_MIN = 1

# UI tuning constants
STEP_SLIDER_MAX = 99
PERIOD_SLIDER_MAX = 10
BILLIONS_DECIMALS = 3

# Summary and export
SUMMARY_YEAR = 2034
SUMMARY_FALLBACK_INDEX = 10
CSV_FILENAME = "polkadot_inflation_data.csv"

# Chart colors
COLOR_ISSUANCE = "#2196F3"
COLOR_SUPPLY = "#4CAF50"
COLOR_SUPPLY_FIXED = "#607D8B"
COLOR_BASELINE = "#FF9800"
COLOR_MC_SUSTAIN = "#9C27B0"
COLOR_MC_TARGET = "#F44336"
COLOR_STAKING = "#FF5722"
