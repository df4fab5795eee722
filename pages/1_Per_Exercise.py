"""Per-exercise detail view."""

from __future__ import annotations

import altair as alt
import pandas as pd
import streamlit as st

from app_utils import load_app_data
from progress_stats import METRICS, bar_height, metric_series

st.title("Per-Exercise View")

data = load_app_data()
if not data:
    st.stop()

_, stats = data
exercises = sorted(stats)


def history_table(history: pd.DataFrame) -> pd.DataFrame:
    table = history.copy()
    table["pr"] = table["is_pr"].map(lambda val: "PR" if val else "")
    table = table.drop(columns=["is_pr"]).iloc[::-1].reset_index(drop=True)
    return table


def render_exercise_view(selected_exercise: str) -> None:
    metric = st.radio(
        "Metric",
        list(METRICS),
        format_func=METRICS.get,
        horizontal=True,
        key=f"metric_{selected_exercise}",
    )
    series = metric_series(stats, selected_exercise, metric)
    history = series["history"]
    latest = series["latest"]

    col1, col2, col3 = st.columns(3)
    col1.metric("Max", f"{series['max']:g}")
    col2.metric("Last", f"{latest[metric]:g}")
    col3.metric("Est. 1RM", f"{latest['est_1rm']:g} kg")

    st.subheader("Trend")
    chart_df = history.assign(
        value=series["values"],
        height=[bar_height(value, series["min"], series["max"]) for value in series["values"]],
        highlight=history["is_pr"] & (metric == "max_weight"),
    )
    chart = (
        alt.Chart(chart_df)
        .mark_bar()
        .encode(
            x=alt.X("date:O", title="Date"),
            y=alt.Y("height:Q", title=None, axis=None, scale=alt.Scale(domain=[0, 100])),
            color=alt.condition("datum.highlight", alt.value("white"), alt.value("#3f3f46")),
            tooltip=["date:O", alt.Tooltip("value:Q", title=METRICS[metric])],
        )
        .properties(height=240)
    )
    st.altair_chart(chart, use_container_width=True)

    st.subheader("History")
    st.dataframe(history_table(history), use_container_width=True)


selected = st.selectbox("Exercise", exercises)
if selected:
    render_exercise_view(selected)
