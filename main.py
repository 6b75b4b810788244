# main.py
import logging

import streamlit as st

from utils import (
    initialize_session_state,
    load_from_query_params,
    update_query_params,
    reset_model_inputs,
    clean_billions_input,
    parse_billions,
    records_to_csv,
)
from calculations import (
    project_fixed,
    project_target,
    summarize_projection,
    InvalidParameterError,
    DegenerateStateError,
)
from validation import validate_fixed_inputs, validate_target_inputs
from config import (
    MODEL_FIXED,
    MODEL_OPTIONS,
    RATE_RANGE,
    PERIOD_MIN,
    STEP_SLIDER_MAX,
    PERIOD_SLIDER_MAX,
    MIN_TARGET_SUPPLY,
    BILLION,
    START_YEAR,
    END_YEAR,
    INITIAL_ISSUANCE,
    INITIAL_SUPPLY,
    TREASURY_SHARE,
    STAKER_SHARE,
    SUSTAIN_USD,
    TARGET_EXPENSE_USD,
    CSV_FILENAME,
)
from visualization import show_projection_chart, show_projection_table, show_summary

MODEL_LABELS = {value: label for label, value in MODEL_OPTIONS.items()}

st.set_page_config(
   page_title="Polkadot Inflation Calculator",
   page_icon="📉",
   layout="wide",
)


@st.cache_data
def _cached_project_fixed(reduction_step: float, period_years: int):
    return project_fixed(reduction_step, period_years)


@st.cache_data
def _cached_project_target(target_supply: float, reduction_rate: float, period_years: int):
    return project_target(target_supply, reduction_rate, period_years)


def _clamp_session_value(key: str, lo: int, hi: int):
    # Values restored from the URL may fall outside the widget range
    value = st.session_state.get(key)
    if isinstance(value, int) and not lo <= value <= hi:
        st.session_state[key] = max(lo, min(value, hi))


def _on_target_supply_change():
    st.session_state.target_supply = clean_billions_input(st.session_state.target_supply)


def render_parameters():
    """Render the model selector and its inputs, returning ``(model, inputs)``."""
    model = st.radio(
        "Inflation Model",
        options=list(MODEL_LABELS),
        format_func=MODEL_LABELS.get,
        horizontal=True,
        key="model",
    )

    if model == MODEL_FIXED:
        _clamp_session_value("reduction_step", int(RATE_RANGE[0]), STEP_SLIDER_MAX)
        _clamp_session_value("inflation_period", PERIOD_MIN, PERIOD_SLIDER_MAX)
        col1, col2 = st.columns(2)
        with col1:
            reduction_step = st.slider(
                "Reduction Step (%)",
                min_value=int(RATE_RANGE[0]),
                max_value=STEP_SLIDER_MAX,
                step=1,
                help="Share of yearly issuance removed at each reduction",
                key="reduction_step",
            )
        with col2:
            inflation_period = st.slider(
                "Inflation Period (years)",
                min_value=PERIOD_MIN,
                max_value=PERIOD_SLIDER_MAX,
                step=1,
                help="Years between reductions after the first one in "
                f"{START_YEAR + 1}",
                key="inflation_period",
            )
        inputs = {
            "reduction_step": reduction_step,
            "inflation_period": inflation_period,
        }
    else:
        _clamp_session_value("reduction_rate", int(RATE_RANGE[0]), STEP_SLIDER_MAX)
        _clamp_session_value("target_period", PERIOD_MIN, PERIOD_SLIDER_MAX)
        col1, col2, col3 = st.columns(3)
        with col1:
            target_supply = st.text_input(
                "Target Supply (billions DOT)",
                help=f"Minimum {MIN_TARGET_SUPPLY / BILLION:.2f}B, the supply after "
                f"{START_YEAR} issuance",
                on_change=_on_target_supply_change,
                key="target_supply",
            )
        with col2:
            reduction_rate = st.slider(
                "Reduction Rate (%)",
                min_value=int(RATE_RANGE[0]),
                max_value=STEP_SLIDER_MAX,
                step=1,
                help="Share of the remaining headroom issued in each period",
                key="reduction_rate",
            )
        with col3:
            target_period = st.slider(
                "Period (years)",
                min_value=PERIOD_MIN,
                max_value=PERIOD_SLIDER_MAX,
                step=1,
                help="Years over which each period's issuance is spread",
                key="target_period",
            )
        inputs = {
            "target_supply": target_supply,
            "reduction_rate": reduction_rate,
            "target_period": target_period,
        }

    st.button("Reset", on_click=reset_model_inputs, args=(model,))
    return model, inputs


def validate_form_inputs(model, inputs):
    if model == MODEL_FIXED:
        return validate_fixed_inputs(inputs["reduction_step"], inputs["inflation_period"])
    return validate_target_inputs(
        parse_billions(inputs["target_supply"]),
        inputs["reduction_rate"],
        inputs["target_period"],
    )


def compute_projection(model, inputs):
    if model == MODEL_FIXED:
        return _cached_project_fixed(inputs["reduction_step"], inputs["inflation_period"])
    return _cached_project_target(
        parse_billions(inputs["target_supply"]),
        inputs["reduction_rate"],
        inputs["target_period"],
    )


def render_results(records, model, inputs, show_mc_lines=False, show_staking_rate=False, log_scale=False):
    """Render summary metrics, chart, table and export for a projection.

    Returns the :class:`~calculations.ProjectionSummary` that was displayed.
    """
    summary = summarize_projection(records)
    if model == MODEL_FIXED:
        policy_rate, period_years, target_supply = (
            inputs["reduction_step"],
            inputs["inflation_period"],
            None,
        )
    else:
        policy_rate, period_years, target_supply = (
            inputs["reduction_rate"],
            inputs["target_period"],
            parse_billions(inputs["target_supply"]),
        )
    show_summary(summary, model, policy_rate, period_years, target_supply)

    show_projection_chart(
        records,
        model,
        show_mc_lines=show_mc_lines,
        show_staking_rate=show_staking_rate,
        log_scale=log_scale,
    )
    show_projection_table(records, model)
    st.download_button(
        "Export CSV",
        data=records_to_csv(records),
        file_name=CSV_FILENAME,
        mime="text/csv",
    )
    return summary


def render_calculation_methodology():
    st.markdown(
        f"""
        1) **Horizon**: Every year from {START_YEAR} to {END_YEAR} is simulated. Supply figures are taken at the **start** of each year; that year's issuance is added afterwards.

        2) **Fixed step reduction**: Issuance starts at {INITIAL_ISSUANCE:,} DOT. The first cut of `step%` happens in {START_YEAR + 1}, then again every `period` years after that.
           - At each cut: `issuance = issuance * (1 - step / 100)`

        3) **Target supply**: {START_YEAR} keeps the full {INITIAL_ISSUANCE:,} DOT. From {START_YEAR + 1}, at the start of each period:
           - `issuance = (target_supply - supply) * rate / 100 / period`
           - Issuance is capped so supply never passes the target.

        4) **Derived metrics** (using start-of-year supply):
           - Inflation rate: `issuance / supply * 100`
           - Treasury income: `issuance * {TREASURY_SHARE}`, stakers income: `issuance * {STAKER_SHARE}`
           - Staking rewards rate: `issuance * {STAKER_SHARE} / (supply * 0.5) * 100`, assuming half the supply is staked
           - MC to sustain: `supply * ${SUSTAIN_USD:,} / issuance`
           - MC to $90M: `supply * ${TARGET_EXPENSE_USD:,} / issuance`

        5) **Fixed issuance comparison**: The dashed supply line keeps issuance at {INITIAL_ISSUANCE:,} DOT forever, starting from {INITIAL_SUPPLY:,} DOT.
        """
    )


def main():
    st.title("📉 Polkadot Inflation Calculator")
    if not st.session_state.get("query_params_loaded"):
        load_from_query_params()
        st.session_state.query_params_loaded = True
    initialize_session_state()

    model, inputs = render_parameters()
    update_query_params()

    col1, col2, col3 = st.columns(3)
    show_mc_lines = col1.checkbox("Show market cap lines", key="show_mc_lines")
    show_staking_rate = col2.checkbox("Show staking rewards rate", key="show_staking_rate")
    log_scale = col3.checkbox("Logarithmic scale", key="log_scale")

    errors = validate_form_inputs(model, inputs)
    if errors:
        for err in errors:
            logging.warning(f"Rejected {model} model inputs: {err}")
            st.error(err)
    else:
        try:
            records = compute_projection(model, inputs)
        except (InvalidParameterError, DegenerateStateError) as e:
            logging.error(f"Projection failed for {model} model with {inputs}: {e}")
            st.error(str(e))
        else:
            render_results(
                records,
                model,
                inputs,
                show_mc_lines=show_mc_lines,
                show_staking_rate=show_staking_rate,
                log_scale=log_scale,
            )

    with st.expander("🛠️ Calculation Methodology"):
        render_calculation_methodology()


if __name__ == "__main__":
    main()
