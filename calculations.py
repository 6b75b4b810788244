"""Issuance projections for the Polkadot inflation calculator."""

from dataclasses import dataclass
from typing import Sequence

import numpy as np

from config import (
    INITIAL_ISSUANCE,
    INITIAL_SUPPLY,
    START_YEAR,
    END_YEAR,
    TREASURY_SHARE,
    STAKER_SHARE,
    STAKED_SUPPLY_FRACTION,
    SUSTAIN_USD,
    TARGET_EXPENSE_USD,
    MODEL_FIXED,
    MODEL_TARGET,
    SUMMARY_YEAR,
    SUMMARY_FALLBACK_INDEX,
)
from validation import validate_fixed_inputs, validate_target_inputs


class InvalidParameterError(ValueError):
    """Raised when projection inputs fail validation."""

    def __init__(self, errors: Sequence[str]):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors))


class DegenerateStateError(ArithmeticError):
    """Raised when a fixed-step projection would divide by zero issuance."""


@dataclass(frozen=True)
class YearRecord:
    """One simulated year. Supply values are taken at the start of the year."""

    year: int
    yearly_issuance: float
    total_supply: float
    total_supply_fixed: float
    treasury_income: float
    stakers_income: float
    inflation_rate: float
    staking_rate: float
    mc_to_sustain: float
    mc_to_target: float
    model: str
    policy_rate: float
    period_years: int


@dataclass(frozen=True)
class ProjectionSummary:
    """Results returned from :func:`summarize_projection`."""

    current_inflation: float
    ten_year_inflation: float
    final_supply: float
    final_supply_fixed: float
    supply_difference: float


def projection_years() -> np.ndarray:
    """Return every simulated year from ``START_YEAR`` to ``END_YEAR`` inclusive."""

    return np.arange(START_YEAR, END_YEAR + 1)


def _build_records(
    model: str,
    issuance: np.ndarray,
    supply: np.ndarray,
    policy_rate: float,
    period_years: int,
) -> tuple[YearRecord, ...]:
    """Derive the yearly metrics and pack them into records.

    ``supply`` holds start-of-year values, so inflation and staking rates
    relate this year's issuance to last year's closing supply. Market cap
    figures are reported as ``0`` for years without issuance.
    """
    years = projection_years()
    supply_fixed = INITIAL_SUPPLY + INITIAL_ISSUANCE * np.arange(len(years), dtype=float)

    inflation_rate = issuance / supply * 100
    treasury_income = issuance * TREASURY_SHARE
    stakers_income = issuance * STAKER_SHARE
    staking_rate = stakers_income / (supply * STAKED_SUPPLY_FRACTION) * 100

    has_issuance = issuance > 0
    mc_to_sustain = supply * np.divide(
        SUSTAIN_USD, issuance, out=np.zeros_like(issuance), where=has_issuance
    )
    mc_to_target = supply * np.divide(
        TARGET_EXPENSE_USD, issuance, out=np.zeros_like(issuance), where=has_issuance
    )

    return tuple(
        YearRecord(
            year=int(year),
            yearly_issuance=iss,
            total_supply=sup,
            total_supply_fixed=sup_fixed,
            treasury_income=treasury,
            stakers_income=stakers,
            inflation_rate=infl,
            staking_rate=staking,
            mc_to_sustain=mc_sustain,
            mc_to_target=mc_target,
            model=model,
            policy_rate=policy_rate,
            period_years=period_years,
        )
        for year, iss, sup, sup_fixed, treasury, stakers, infl, staking, mc_sustain, mc_target in zip(
            years.tolist(),
            issuance.tolist(),
            supply.tolist(),
            supply_fixed.tolist(),
            treasury_income.tolist(),
            stakers_income.tolist(),
            inflation_rate.tolist(),
            staking_rate.tolist(),
            mc_to_sustain.tolist(),
            mc_to_target.tolist(),
        )
    )


def fixed_reduction_counts(n_years: int, period_years: int) -> np.ndarray:
    """Number of reductions applied by each year index of the fixed model.

    The first cut lands exactly one year after the start; later cuts follow
    every ``period_years`` years after that first one.
    """
    idx = np.arange(n_years)
    first = (idx >= 1).astype(int)
    later = np.maximum(idx - 1, 0) // period_years
    return first + later


def project_fixed(reduction_step: float, period_years: int) -> tuple[YearRecord, ...]:
    """Project issuance cut by ``reduction_step`` percent on a fixed cadence.

    Args:
        reduction_step: Percentage removed from issuance at each cut, in ``[0, 100)``.
        period_years: Years between cuts after the first one.

    Returns:
        One :class:`YearRecord` per year from ``START_YEAR`` to ``END_YEAR``.

    Raises:
        InvalidParameterError: If the inputs fail validation.
        DegenerateStateError: If issuance is not strictly positive in some year.
    """
    errors = validate_fixed_inputs(reduction_step, period_years)
    if errors:
        raise InvalidParameterError(errors)
    period_years = int(period_years)

    n_years = len(projection_years())
    counts = fixed_reduction_counts(n_years, period_years)
    issuance = INITIAL_ISSUANCE * (1 - reduction_step / 100) ** counts.astype(float)
    if np.any(issuance <= 0):
        raise DegenerateStateError("Fixed-step issuance reached zero")

    # Issuance is added to supply only after each year is recorded
    supply = INITIAL_SUPPLY + np.concatenate(([0.0], np.cumsum(issuance)[:-1]))

    return _build_records(MODEL_FIXED, issuance, supply, reduction_step, period_years)


def project_target(
    target_supply: float, reduction_rate: float, period_years: int
) -> tuple[YearRecord, ...]:
    """Project issuance that approaches ``target_supply`` asymptotically.

    At the start of every period after the first year, ``reduction_rate``
    percent of the headroom left to the target is spread evenly across the
    period's years. Issuance never pushes supply above the target.

    Raises:
        InvalidParameterError: If the inputs fail validation.
    """
    errors = validate_target_inputs(target_supply, reduction_rate, period_years)
    if errors:
        raise InvalidParameterError(errors)
    period_years = int(period_years)

    issuance_by_year = []
    supply_by_year = []
    supply = float(INITIAL_SUPPLY)
    issuance = float(INITIAL_ISSUANCE)
    years_into_period = 0

    for year in projection_years():
        if year > START_YEAR and years_into_period == 0:
            remaining = target_supply - supply
            issuance = remaining * (reduction_rate / 100) / period_years

        if supply + issuance > target_supply:
            issuance = max(0.0, target_supply - supply)

        issuance_by_year.append(issuance)
        supply_by_year.append(supply)
        supply += issuance

        # Periods are counted from the year after the start
        if year > START_YEAR:
            years_into_period += 1
            if years_into_period >= period_years:
                years_into_period = 0

    return _build_records(
        MODEL_TARGET,
        np.array(issuance_by_year, dtype=float),
        np.array(supply_by_year, dtype=float),
        reduction_rate,
        period_years,
    )


def summarize_projection(records: Sequence[YearRecord]) -> ProjectionSummary:
    """Collect the headline figures shown above the chart.

    The ten-year figure uses the record for ``SUMMARY_YEAR``; when the
    horizon does not contain it, the record at ``SUMMARY_FALLBACK_INDEX`` (or
    the last record) is used instead.

    Raises:
        ValueError: If ``records`` is empty.
    """
    records = list(records)
    if not records:
        raise ValueError("records must not be empty")

    ten_year = next((r for r in records if r.year == SUMMARY_YEAR), None)
    if ten_year is None:
        ten_year = records[min(SUMMARY_FALLBACK_INDEX, len(records) - 1)]

    final = records[-1]
    return ProjectionSummary(
        current_inflation=records[0].inflation_rate,
        ten_year_inflation=ten_year.inflation_rate,
        final_supply=final.total_supply,
        final_supply_fixed=final.total_supply_fixed,
        supply_difference=final.total_supply_fixed - final.total_supply,
    )
