# utils.py
import logging
import re
from collections.abc import Sequence

import pandas as pd
import streamlit as st

from config import (
    BILLION,
    BILLIONS_DECIMALS,
    DEFAULT_MODEL,
    DEFAULT_REDUCTION_STEP,
    DEFAULT_INFLATION_PERIOD,
    DEFAULT_TARGET_SUPPLY_BILLIONS,
    DEFAULT_REDUCTION_RATE,
    DEFAULT_TARGET_PERIOD,
    MODEL_FIXED,
    MODEL_OPTIONS,
)

QUERY_PARAM_DEFAULTS = {
    "model": DEFAULT_MODEL,
    "reduction_step": DEFAULT_REDUCTION_STEP,
    "inflation_period": DEFAULT_INFLATION_PERIOD,
    "target_supply": f"{DEFAULT_TARGET_SUPPLY_BILLIONS:g}",
    "reduction_rate": DEFAULT_REDUCTION_RATE,
    "target_period": DEFAULT_TARGET_PERIOD,
}

CSV_HEADERS = [
    "Year",
    "Yearly Issuance (DOT)",
    "Total Supply (DOT)",
    "Total Supply Fixed (DOT)",
    "Inflation Rate %",
    "Yearly Treasury Income (DOT)",
    "Yearly Stakers Income (DOT)",
    "Staking Rewards Rate %",
    "MC Needed to Sustain (USD)",
    "MC Needed to $90M (USD)",
    "Step %",
    "Inflation Period",
]


TOGGLE_DEFAULTS = {
    "show_mc_lines": False,
    "show_staking_rate": False,
    "log_scale": False,
}


def initialize_session_state():
    """Initialize the Streamlit session state variables.

    Both models' inputs are kept on every run. Streamlit drops the state of
    widgets that are not drawn, so each existing value is written back
    before the widgets are created; this keeps the hidden model's inputs
    when the user switches models.

    Examples
    --------
    >>> initialize_session_state()
    >>> st.session_state["target_supply"]
    '3.14'
    """
    for key, value in {**QUERY_PARAM_DEFAULTS, **TOGGLE_DEFAULTS}.items():
        if key in st.session_state:
            st.session_state[key] = st.session_state[key]
        else:
            st.session_state[key] = value


def reset_model_inputs(model: str):
    """Restore the default inputs of ``model`` in session state."""
    if model == MODEL_FIXED:
        keys = ("reduction_step", "inflation_period")
    else:
        keys = ("target_supply", "reduction_rate", "target_period")
    for key in keys:
        st.session_state[key] = QUERY_PARAM_DEFAULTS[key]


def update_query_params():
    """Mirror the current calculator inputs into the page URL."""
    st.query_params.update(
        {key: str(st.session_state.get(key, default)) for key, default in QUERY_PARAM_DEFAULTS.items()}
    )


def load_from_query_params():
    """Load calculator inputs from the page URL into session state.

    Values that are missing or cannot be parsed fall back to
    ``QUERY_PARAM_DEFAULTS``.

    Returns:
        tuple: (inputs, all_present) where ``inputs`` maps each key to its
            loaded value and ``all_present`` tells whether every key was
            found in the URL.
    """
    params = st.query_params.to_dict()
    loaded = {}
    all_present = True

    for key, default in QUERY_PARAM_DEFAULTS.items():
        raw = params.get(key)
        if raw is None:
            all_present = False
            value = default
        else:
            try:
                value = type(default)(raw)
            except (TypeError, ValueError):
                logging.warning(f"Ignoring invalid query parameter {key}={raw!r}")
                value = default
        if key == "model" and value not in MODEL_OPTIONS.values():
            logging.warning(f"Ignoring unknown model {value!r}")
            value = default
        if key == "target_supply":
            value = clean_billions_input(value)
        loaded[key] = value
        st.session_state[key] = value

    return loaded, all_present


def clean_billions_input(value) -> str:
    """Mask free text to a decimal number of billions, e.g. ``"3.14"``.

    Non-numeric characters are dropped, only the first decimal point is
    kept and at most three decimals survive.
    """
    cleaned = re.sub(r"[^0-9.]", "", str(value))
    if not cleaned:
        return ""

    whole, sep, fraction = cleaned.partition(".")
    if not sep:
        return whole
    fraction = fraction.replace(".", "")[:BILLIONS_DECIMALS]
    return f"{whole}.{fraction}"


def parse_billions(value):
    """Convert a billions string such as ``"3.14"`` to DOT.

    Returns ``None`` when the text holds no number.
    """
    cleaned = clean_billions_input(value)
    if cleaned in ("", "."):
        return None
    return float(cleaned) * BILLION


def format_billions(value: float) -> str:
    """Render a DOT amount in billions, trimming trailing zeros."""
    text = f"{value / BILLION:.{BILLIONS_DECIMALS}f}"
    return text.rstrip("0").rstrip(".")


def format_number(num: float, decimals: int = 0) -> str:
    return f"{num:,.{decimals}f}"


def format_dot(num: float) -> str:
    return f"{format_number(num)} DOT"


def format_usd(num: float) -> str:
    return f"${format_number(num)}"


def format_usd_compact(num: float) -> str:
    """Format USD amounts with T/B/M suffixes, falling back to whole dollars."""
    if num >= 1e12:
        return f"${num / 1e12:.2f}T"
    if num >= 1e9:
        return f"${num / 1e9:.2f}B"
    if num >= 1e6:
        return f"${num / 1e6:.2f}M"
    return format_usd(num)


def _raw_number(value) -> str:
    # Integral floats are written without a trailing ".0"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def records_to_csv(records: Sequence) -> str:
    """Serialize projection records to CSV text.

    Rates are written with four decimals; every other value is written raw.
    """
    rows = [
        [
            _raw_number(r.year),
            _raw_number(r.yearly_issuance),
            _raw_number(r.total_supply),
            _raw_number(r.total_supply_fixed),
            f"{r.inflation_rate:.4f}",
            _raw_number(r.treasury_income),
            _raw_number(r.stakers_income),
            f"{r.staking_rate:.4f}",
            _raw_number(r.mc_to_sustain),
            _raw_number(r.mc_to_target),
            _raw_number(r.policy_rate),
            _raw_number(r.period_years),
        ]
        for r in records
    ]
    df = pd.DataFrame(rows, columns=CSV_HEADERS)
    return df.to_csv(index=False, lineterminator="\n")
