# visualization.py
import streamlit as st
import pandas as pd
import plotly.graph_objects as go
from collections.abc import Sequence

from calculations import YearRecord, ProjectionSummary
from config import (
    INITIAL_ISSUANCE,
    MODEL_FIXED,
    COLOR_ISSUANCE,
    COLOR_SUPPLY,
    COLOR_SUPPLY_FIXED,
    COLOR_BASELINE,
    COLOR_MC_SUSTAIN,
    COLOR_MC_TARGET,
    COLOR_STAKING,
)
from utils import format_number, format_usd_compact, format_billions

FIXED_CHART_TITLE = "Polkadot Issuance and Supply Over Time - Fixed Step Reduction"
TARGET_CHART_TITLE = "Polkadot Issuance and Supply Over Time - Target Supply Model"


def _fill(hex_color: str, alpha: float) -> str:
    r, g, b = (int(hex_color[i:i + 2], 16) for i in (1, 3, 5))
    return f"rgba({r}, {g}, {b}, {alpha})"


def format_projection_table(records: Sequence[YearRecord], model: str) -> pd.DataFrame:
    """Build the display table with formatted text columns.

    ``model`` decides how the policy parameter column is labelled.
    """
    rate_label = "Step" if model == MODEL_FIXED else "Reduction Rate"
    period_label = "Inflation Period" if model == MODEL_FIXED else "Period"
    return pd.DataFrame(
        {
            "Year": [str(r.year) for r in records],
            "Yearly Issuance": [format_number(r.yearly_issuance) for r in records],
            "Total Supply": [format_number(r.total_supply) for r in records],
            "Treasury Income": [format_number(r.treasury_income) for r in records],
            "Stakers Income": [format_number(r.stakers_income) for r in records],
            "MC to Sustain": [format_usd_compact(r.mc_to_sustain) for r in records],
            "MC to $90M": [format_usd_compact(r.mc_to_target) for r in records],
            rate_label: [f"{r.policy_rate:g}%" for r in records],
            period_label: [r.period_years for r in records],
        }
    )


def build_projection_figure(
    records: Sequence[YearRecord],
    model: str,
    show_mc_lines: bool = False,
    show_staking_rate: bool = False,
    log_scale: bool = False,
) -> go.Figure:
    """Create the issuance/supply chart for a projection.

    Issuance is plotted on the left axis and supply on the right. The
    optional market-cap and staking-rate overlays each get an extra right
    axis. ``log_scale`` switches every y axis to logarithmic.
    """
    years = [r.year for r in records]
    axis_type = "log" if log_scale else "linear"

    fig = go.Figure()
    fig.add_trace(
        go.Scatter(
            x=years,
            y=[r.yearly_issuance for r in records],
            name="Yearly Issuance (DOT)",
            line=dict(color=COLOR_ISSUANCE),
            fill="tozeroy",
            fillcolor=_fill(COLOR_ISSUANCE, 0.1),
            yaxis="y",
        )
    )
    fig.add_trace(
        go.Scatter(
            x=years,
            y=[r.total_supply for r in records],
            name="Total Supply (DOT)",
            line=dict(color=COLOR_SUPPLY),
            yaxis="y2",
        )
    )
    fig.add_trace(
        go.Scatter(
            x=years,
            y=[r.total_supply_fixed for r in records],
            name=f"Total Supply (Fixed {INITIAL_ISSUANCE / 1e6:.0f}M/year)",
            line=dict(color=COLOR_SUPPLY_FIXED, dash="dash"),
            mode="lines",
            yaxis="y2",
        )
    )
    fig.add_trace(
        go.Scatter(
            x=years,
            y=[INITIAL_ISSUANCE] * len(years),
            name=f"Baseline Issuance ({INITIAL_ISSUANCE / 1e6:.0f}M DOT)",
            line=dict(color=COLOR_BASELINE, dash="dot"),
            mode="lines",
            yaxis="y",
        )
    )

    extra_axes = []
    if show_mc_lines:
        fig.add_trace(
            go.Scatter(
                x=years,
                y=[r.mc_to_sustain for r in records],
                name="MC to Sustain (USD)",
                line=dict(color=COLOR_MC_SUSTAIN),
                yaxis="y3",
            )
        )
        fig.add_trace(
            go.Scatter(
                x=years,
                y=[r.mc_to_target for r in records],
                name="MC to $90M (USD)",
                line=dict(color=COLOR_MC_TARGET),
                yaxis="y3",
            )
        )
        extra_axes.append(("yaxis3", "Market Cap (USD)", "$~s"))
    if show_staking_rate:
        axis = "y4" if show_mc_lines else "y3"
        fig.add_trace(
            go.Scatter(
                x=years,
                y=[r.staking_rate for r in records],
                name="Staking Rewards Rate (%)",
                line=dict(color=COLOR_STAKING),
                yaxis=axis,
            )
        )
        extra_axes.append((axis.replace("y", "yaxis"), "Staking Rewards Rate (%)", ".1f"))

    # Extra axes sit to the right of the plot area
    x_domain_end = 1.0 - 0.08 * len(extra_axes)
    layout = dict(
        title=FIXED_CHART_TITLE if model == MODEL_FIXED else TARGET_CHART_TITLE,
        hovermode="x unified",
        margin=dict(t=40, b=0, l=0, r=0),
        legend=dict(orientation="h", yanchor="top", y=-0.15),
        xaxis=dict(title="Year", domain=[0.0, x_domain_end]),
        yaxis=dict(title="Yearly Issuance (DOT)", type=axis_type, tickformat="~s"),
        yaxis2=dict(
            title="Total Supply (DOT)",
            type=axis_type,
            tickformat="~s",
            overlaying="y",
            side="right",
            anchor="x",
            showgrid=False,
        ),
    )
    for i, (name, title, tickformat) in enumerate(extra_axes):
        layout[name] = dict(
            title=title,
            type=axis_type,
            tickformat=tickformat,
            overlaying="y",
            side="right",
            anchor="free",
            position=min(1.0, x_domain_end + 0.08 * (i + 1)),
            showgrid=False,
        )
    fig.update_layout(**layout)
    return fig


def show_projection_chart(
    records: Sequence[YearRecord],
    model: str,
    show_mc_lines: bool = False,
    show_staking_rate: bool = False,
    log_scale: bool = False,
) -> None:
    """Render the projection chart."""
    fig = build_projection_figure(
        records,
        model,
        show_mc_lines=show_mc_lines,
        show_staking_rate=show_staking_rate,
        log_scale=log_scale,
    )
    st.plotly_chart(fig, use_container_width=True, config={"displayModeBar": False})


def show_projection_table(records: Sequence[YearRecord], model: str) -> None:
    st.dataframe(
        format_projection_table(records, model),
        hide_index=True,
        use_container_width=True,
    )


def show_summary(
    summary: ProjectionSummary,
    model: str,
    policy_rate: float,
    period_years: int,
    target_supply: float | None = None,
) -> None:
    """Display the headline metrics for the selected model.

    The model and its parameters are passed in explicitly so the summary
    never depends on shared page state.
    """
    cols = st.columns(3)
    if model == MODEL_FIXED:
        cols[0].metric("Reduction Step", f"{policy_rate:g}%")
        cols[1].metric("Inflation Period", f"{period_years} yr")
        cols[2].metric("Current Inflation", f"{format_number(summary.current_inflation, 2)}%")
    else:
        cols[0].metric("Target Supply", f"{format_billions(target_supply or 0)}B DOT")
        cols[1].metric("Reduction Rate", f"{policy_rate:g}% / {period_years} yr")
        cols[2].metric("Current Inflation", f"{format_number(summary.current_inflation, 2)}%")

    cols = st.columns(2)
    cols[0].metric("Inflation in 10 Years", f"{format_number(summary.ten_year_inflation, 2)}%")
    cols[1].metric(
        "Supply Saved vs Fixed Issuance",
        f"{format_number(summary.supply_difference)} DOT",
    )
