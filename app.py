#!/usr/bin/env python3
"""Streamlit app for Iron Log progress insights."""

from __future__ import annotations

import altair as alt
import pandas as pd
import streamlit as st

from app_utils import load_app_data, sparkline_points
from progress_stats import exercise_overview, is_completed


def sparkline_chart(heights: list[float]) -> alt.Chart:
    data = pd.DataFrame({"session": range(len(heights)), "height": heights})
    return (
        alt.Chart(data)
        .mark_bar(color="white")
        .encode(
            x=alt.X("session:O", axis=None),
            y=alt.Y("height:Q", axis=None, scale=alt.Scale(domain=[0, 100])),
        )
        .properties(height=40, width=80)
    )


def main() -> None:
    st.set_page_config(page_title="Iron Log", layout="wide")
    st.title("Insights")

    data = load_app_data()
    if not data:
        return

    store, stats = data
    overview = exercise_overview(stats, sparkline_points())

    col1, col2, col3 = st.columns(3)
    col1.metric("Exercises", len(overview))
    col2.metric("Completed Sessions", sum(1 for plan in store.plans if is_completed(plan)))
    col3.metric("Coaching Notes", len(store.notes))

    st.subheader("Exercises")
    for row in overview.itertuples(index=False):
        name_col, chart_col = st.columns([3, 1])
        name_col.markdown(f"**{row.exercise}**")
        name_col.caption(f"Personal Record: {row.personal_record:g} kg · {row.sessions} sessions")
        chart_col.altair_chart(sparkline_chart(row.sparkline_heights), use_container_width=False)

    st.subheader("Sessions by Week")
    for week, plans in store.plans_by_week().items():
        with st.expander(f"Week of {week}", expanded=False):
            for plan in plans:
                status = "✓" if is_completed(plan) else "·"
                names = " • ".join(ex.get("name", "") for ex in plan.get("exercises") or [])
                st.write(f"{status} {plan.get('date')} {plan.get('title') or ''} — {names}")

    st.subheader("Coaching Notes")
    notes = store.notes
    if not notes:
        st.caption("No coaching notes yet.")
    for note in notes:
        st.markdown(f"**{note.get('techniqueName')}** · {note.get('date')}")
        if note.get("feedback"):
            st.write(note["feedback"])
        if note.get("videoUrl"):
            st.video(note["videoUrl"])


if __name__ == "__main__":
    main()
