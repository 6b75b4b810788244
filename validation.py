# validation.py
import math
from numbers import Real

from config import (
    RATE_RANGE,
    PERIOD_MIN,
    MIN_TARGET_SUPPLY,
    BILLION,
    START_YEAR,
    END_YEAR,
    INITIAL_ISSUANCE,
    INITIAL_SUPPLY,
    SUSTAIN_USD,
    TARGET_EXPENSE_USD,
)


def _is_number(value) -> bool:
    if isinstance(value, bool) or not isinstance(value, Real):
        return False
    return math.isfinite(value)


def _is_whole_number(value) -> bool:
    return _is_number(value) and float(value).is_integer()


def _check_rate(value, label, errors):
    if not _is_number(value):
        errors.append(f"{label} must be a number")
    elif not RATE_RANGE[0] <= value < RATE_RANGE[1]:
        errors.append(
            f"{label} must be at least {RATE_RANGE[0]:g}% and below {RATE_RANGE[1]:g}%"
        )


def _check_period(value, label, errors):
    if not _is_whole_number(value):
        errors.append(f"{label} must be a whole number of years")
    elif value < PERIOD_MIN:
        errors.append(f"{label} must be at least {PERIOD_MIN} year")


def final_fixed_issuance(reduction_step, period_years) -> float:
    """Issuance in ``END_YEAR`` under the fixed-step schedule.

    One cut lands in the year after ``START_YEAR`` and another every
    ``period_years`` years after that.
    """
    last_index = END_YEAR - START_YEAR
    cuts = min(last_index, 1) + max(last_index - 1, 0) // int(period_years)
    return INITIAL_ISSUANCE * (1 - reduction_step / 100) ** cuts


def validate_fixed_inputs(reduction_step, period_years):
    """Validate fixed-step model inputs and return any errors found"""
    errors = []
    _check_rate(reduction_step, "Reduction step", errors)
    _check_period(period_years, "Inflation period", errors)
    if errors:
        return errors

    # Issuance must stay positive and the market cap figures finite
    final_issuance = final_fixed_issuance(reduction_step, period_years)
    max_supply = INITIAL_SUPPLY + INITIAL_ISSUANCE * (END_YEAR - START_YEAR)
    max_usd = max(SUSTAIN_USD, TARGET_EXPENSE_USD)
    if final_issuance <= 0 or not math.isfinite(max_supply * (max_usd / final_issuance)):
        errors.append(
            f"Reduction step is too large: issuance would fall to zero by {END_YEAR}"
        )
    return errors


def validate_target_inputs(target_supply, reduction_rate, period_years):
    """Validate target-supply model inputs and return any errors found.

    ``target_supply`` is expressed in DOT, not billions.
    """
    errors = []

    if not _is_number(target_supply):
        errors.append("Target supply must be a number")
    elif target_supply < MIN_TARGET_SUPPLY:
        errors.append(
            f"Target supply must be at least {MIN_TARGET_SUPPLY / BILLION:.2f}B DOT"
        )

    _check_rate(reduction_rate, "Reduction rate", errors)
    _check_period(period_years, "Period", errors)
    return errors
