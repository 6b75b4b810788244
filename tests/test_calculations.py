import os
import sys

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from calculations import (
    DegenerateStateError,
    InvalidParameterError,
    fixed_reduction_counts,
    project_fixed,
    project_target,
)
from config import (
    END_YEAR,
    INITIAL_ISSUANCE,
    INITIAL_SUPPLY,
    MIN_TARGET_SUPPLY,
    STAKER_SHARE,
    START_YEAR,
    SUSTAIN_USD,
    TARGET_EXPENSE_USD,
    TREASURY_SHARE,
)

N_YEARS = END_YEAR - START_YEAR + 1


def _manual_fixed(reduction_step, period_years):
    """Year-by-year reference loop for the fixed-step model."""
    issuance = INITIAL_ISSUANCE
    supply = INITIAL_SUPPLY
    rows = []
    for years_since_start in range(N_YEARS):
        if years_since_start == 1:
            issuance *= 1 - reduction_step / 100
        elif years_since_start > 1:
            k = years_since_start - 1
            if k > 0 and k % period_years == 0:
                issuance *= 1 - reduction_step / 100
        rows.append((issuance, supply))
        supply += issuance
    return rows


@pytest.mark.parametrize(
    "project",
    [
        lambda: project_fixed(50, 2),
        lambda: project_fixed(0, 1),
        lambda: project_fixed(99.5, 7),
        lambda: project_target(3_140_000_000, 25, 2),
        lambda: project_target(MIN_TARGET_SUPPLY, 0, 1),
        lambda: project_target(10_000_000_000, 99, 10),
    ],
)
def test_projection_covers_every_year(project):
    records = project()

    assert len(records) == N_YEARS
    assert [r.year for r in records] == list(range(START_YEAR, END_YEAR + 1))


def test_fixed_start_year_values():
    first = project_fixed(50, 2)[0]

    assert first.year == 2025
    assert first.yearly_issuance == pytest.approx(120_000_000)
    assert first.total_supply == pytest.approx(1_450_000_000)
    assert first.treasury_income == pytest.approx(18_000_000)
    assert first.stakers_income == pytest.approx(102_000_000)
    assert first.inflation_rate == pytest.approx(120 / 1450 * 100)
    assert first.staking_rate == pytest.approx(102 / 725 * 100)
    assert first.mc_to_sustain == pytest.approx(1_450_000_000 * 4)
    assert first.mc_to_target == pytest.approx(1_450_000_000 * 0.75)
    assert first.model == "fixed"
    assert first.policy_rate == 50
    assert first.period_years == 2


def test_fixed_zero_step_keeps_issuance_constant():
    records = project_fixed(0, 3)

    assert all(r.yearly_issuance == INITIAL_ISSUANCE for r in records)
    for prev, cur in zip(records, records[1:]):
        assert cur.total_supply - prev.total_supply == pytest.approx(INITIAL_ISSUANCE)
    assert [r.total_supply for r in records] == pytest.approx(
        [r.total_supply_fixed for r in records]
    )


def test_fixed_zero_step_accumulation_closed_form():
    records = project_fixed(0, 1)

    total_issued = sum(r.yearly_issuance for r in records)
    last = records[-1]
    assert INITIAL_SUPPLY + total_issued == pytest.approx(
        last.total_supply + last.yearly_issuance
    )


def test_fixed_half_step_every_two_years():
    issuance = [r.yearly_issuance for r in project_fixed(50, 2)]

    assert issuance[1] == pytest.approx(INITIAL_ISSUANCE * 0.5)
    assert issuance[2] == pytest.approx(INITIAL_ISSUANCE * 0.5)
    assert issuance[3] == pytest.approx(INITIAL_ISSUANCE * 0.25)
    assert issuance[4] == pytest.approx(INITIAL_ISSUANCE * 0.25)
    assert issuance[5] == pytest.approx(INITIAL_ISSUANCE * 0.125)


@pytest.mark.parametrize("reduction_step,period_years", [(50, 2), (10, 1), (33.3, 4), (5, 30)])
def test_fixed_matches_manual_loop(reduction_step, period_years):
    records = project_fixed(reduction_step, period_years)
    expected = _manual_fixed(reduction_step, period_years)

    assert [r.yearly_issuance for r in records] == pytest.approx([e[0] for e in expected])
    assert [r.total_supply for r in records] == pytest.approx([e[1] for e in expected])
    for r, (issuance, supply) in zip(records, expected):
        assert r.inflation_rate == pytest.approx(issuance / supply * 100)
        assert r.mc_to_sustain == pytest.approx(supply * SUSTAIN_USD / issuance)
        assert r.mc_to_target == pytest.approx(supply * TARGET_EXPENSE_USD / issuance)


def test_fixed_inflation_uses_reduced_issuance_against_opening_supply():
    records = project_fixed(50, 2)

    assert records[1].total_supply == pytest.approx(INITIAL_SUPPLY + INITIAL_ISSUANCE)
    assert records[1].inflation_rate == pytest.approx(
        INITIAL_ISSUANCE * 0.5 / (INITIAL_SUPPLY + INITIAL_ISSUANCE) * 100
    )


def test_fixed_reduction_counts_first_cut_then_period():
    assert fixed_reduction_counts(8, 3).tolist() == [0, 1, 1, 1, 2, 2, 2, 3]
    assert fixed_reduction_counts(4, 1).tolist() == [0, 1, 2, 3]


def test_income_split_sums_to_issuance():
    for r in project_target(3_140_000_000, 25, 2):
        assert r.treasury_income + r.stakers_income == pytest.approx(r.yearly_issuance)
        assert r.treasury_income == pytest.approx(r.yearly_issuance * TREASURY_SHARE)
        assert r.stakers_income == pytest.approx(r.yearly_issuance * STAKER_SHARE)


@pytest.mark.parametrize(
    "reduction_step,period_years",
    [(100, 2), (-1, 2), (50, 0), (50, 1.5), (None, 2), ("50", 2), (float("nan"), 2)],
)
def test_fixed_rejects_invalid_parameters(reduction_step, period_years):
    with pytest.raises(InvalidParameterError) as excinfo:
        project_fixed(reduction_step, period_years)
    assert excinfo.value.errors


def test_invalid_parameter_error_is_value_error():
    with pytest.raises(ValueError):
        project_fixed(100, 1)


def test_fixed_degenerate_issuance_raises(monkeypatch):
    import calculations

    monkeypatch.setattr(calculations, "INITIAL_ISSUANCE", 0)
    with pytest.raises(DegenerateStateError):
        calculations.project_fixed(50, 2)


def test_target_start_year_keeps_initial_issuance():
    records = project_target(3_140_000_000, 25, 2)

    assert records[0].yearly_issuance == pytest.approx(INITIAL_ISSUANCE)
    assert records[0].model == "target"
    assert records[0].policy_rate == 25
    assert records[0].period_years == 2


def test_target_recomputes_at_each_period_start():
    target = 3_140_000_000
    records = project_target(target, 25, 2)

    remaining = target - (INITIAL_SUPPLY + INITIAL_ISSUANCE)
    assert records[1].yearly_issuance == pytest.approx(remaining * 0.25 / 2)
    assert records[2].yearly_issuance == pytest.approx(records[1].yearly_issuance)

    remaining = target - records[3].total_supply
    assert records[3].yearly_issuance == pytest.approx(remaining * 0.25 / 2)
    assert records[4].yearly_issuance == pytest.approx(records[3].yearly_issuance)


def test_target_supply_is_monotone_and_bounded():
    target = 3_140_000_000
    records = project_target(target, 25, 2)

    supplies = [r.total_supply for r in records]
    assert all(b >= a for a, b in zip(supplies, supplies[1:]))
    assert all(s <= target for s in supplies)
    assert all(r.total_supply + r.yearly_issuance <= target for r in records)


def test_target_issuance_non_increasing_after_first_period():
    issuance = [r.yearly_issuance for r in project_target(3_140_000_000, 25, 2)]

    tail = issuance[1:]
    assert all(b <= a for a, b in zip(tail, tail[1:]))


def test_target_converges_toward_ceiling():
    target = 3_140_000_000
    records = project_target(target, 50, 1)

    first_gap = target - records[1].total_supply
    last = records[-1]
    last_gap = target - (last.total_supply + last.yearly_issuance)
    assert 0 <= last_gap < first_gap * 1e-6


def test_target_at_minimum_reaches_zero_issuance():
    records = project_target(MIN_TARGET_SUPPLY, 25, 2)

    for r in records[1:]:
        assert r.yearly_issuance == 0
        assert r.inflation_rate == 0
        assert r.staking_rate == 0
        assert r.mc_to_sustain == 0
        assert r.mc_to_target == 0
    assert records[-1].total_supply == pytest.approx(MIN_TARGET_SUPPLY)


def test_target_fixed_counterfactual_grows_linearly():
    records = project_target(3_140_000_000, 25, 2)

    for i, r in enumerate(records):
        assert r.total_supply_fixed == pytest.approx(INITIAL_SUPPLY + i * INITIAL_ISSUANCE)


@pytest.mark.parametrize(
    "target_supply,reduction_rate,period_years",
    [
        (1_560_000_000, 25, 2),
        (INITIAL_SUPPLY, 25, 2),
        (3_140_000_000, 100, 2),
        (3_140_000_000, -5, 2),
        (3_140_000_000, 25, 0),
        (None, 25, 2),
    ],
)
def test_target_rejects_invalid_parameters(target_supply, reduction_rate, period_years):
    with pytest.raises(InvalidParameterError):
        project_target(target_supply, reduction_rate, period_years)


def test_projections_return_fresh_immutable_sequences():
    first = project_fixed(50, 2)
    second = project_fixed(50, 2)

    assert first == second
    assert first is not second
    with pytest.raises(AttributeError):
        first[0].yearly_issuance = 1


def test_fixed_rejects_step_whose_issuance_underflows():
    with pytest.raises(InvalidParameterError):
        project_fixed(99.9999999999, 1)
