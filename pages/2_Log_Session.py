"""Plan a session, log the sets and keep coaching notes."""

from __future__ import annotations

from datetime import date

import streamlit as st

from app_utils import load_store_for_edit, save_app_store
from plan_store import flatten_sets

st.title("Log Session")

try:
    store = load_store_for_edit()
except RuntimeError as exc:
    st.error(f"{exc}. Fix the file before logging.")
    st.stop()


def commit(message: str) -> None:
    save_app_store(store)
    st.toast(message)
    st.rerun()


def render_exercise(plan_id: str, exercise: dict) -> None:
    ex_id = exercise["id"]
    with st.expander(exercise.get("name") or "Unnamed exercise", expanded=True):
        name = st.text_input("Name", exercise.get("name", ""), key=f"name_{ex_id}")
        if name != exercise.get("name", ""):
            store.rename_exercise(plan_id, ex_id, name)
            commit("Exercise renamed")

        for group in exercise.get("setGroups") or []:
            weight_col, sets_col, reps_col, remove_col = st.columns([2, 1, 1, 1])
            weight = weight_col.number_input(
                "Weight (kg)", value=float(group.get("weight") or 0), step=2.5, key=f"w_{group['id']}"
            )
            sets = sets_col.number_input(
                "Sets", value=int(group.get("setsCount") or 0), min_value=0, step=1, key=f"s_{group['id']}"
            )
            reps = reps_col.number_input(
                "Reps", value=int(group.get("reps") or 0), min_value=0, step=1, key=f"r_{group['id']}"
            )
            for field, value in (("weight", weight), ("setsCount", sets), ("reps", reps)):
                if value != (group.get(field) or 0):
                    store.update_set_group(plan_id, ex_id, group["id"], field, value)
                    commit("Set updated")
            if remove_col.button("Remove", key=f"rm_{group['id']}"):
                store.remove_set_group(plan_id, ex_id, group["id"])
                commit("Set removed")

        add_col, drop_col = st.columns(2)
        if add_col.button("Add set", key=f"add_set_{ex_id}"):
            store.add_set_group(plan_id, ex_id)
            commit("Set added")
        if drop_col.button("Remove exercise", key=f"rm_ex_{ex_id}"):
            store.remove_exercise(plan_id, ex_id)
            commit("Exercise removed")

        review = st.text_area("Review", exercise.get("review", ""), key=f"review_{ex_id}")
        if review != exercise.get("review", ""):
            store.set_review(plan_id, ex_id, review)
            commit("Review saved")


def render_plan(plan: dict) -> None:
    plan_id = plan["id"]
    status = "Completed" if plan.get("isCompleted") is True else "In progress"
    st.subheader(f"{plan.get('title') or 'Session'} · {plan['date']}")
    st.caption(status)

    for exercise in plan.get("exercises") or []:
        render_exercise(plan_id, exercise)

    add_col, finish_col = st.columns(2)
    if add_col.button("Add exercise"):
        store.add_exercise(plan_id)
        commit("Exercise added")
    if finish_col.button("Finish session", disabled=plan.get("isCompleted") is True):
        store.finish_session(plan_id)
        commit("Session completed")

    total_sets = sum(len(ex["flattenedSets"]) for ex in flatten_sets(plan))
    st.caption(f"{total_sets} sets planned")


with st.form("plan_form"):
    session_date = st.date_input("Date", value=date.today())
    title = st.text_input("Title")
    if st.form_submit_button("Open session"):
        day = session_date.isoformat()
        existing = store.plan_for_date(day)
        plan = existing or {"date": day, "exercises": []}
        if title or existing is None:
            plan["title"] = title
        st.session_state["plan_id"] = store.save_plan(plan)["id"]
        commit("Session saved")

plan_id = st.session_state.get("plan_id")
if plan_id:
    try:
        current = store.get_plan(plan_id)
    except KeyError:
        st.session_state.pop("plan_id")
        st.info("That session no longer exists.")
    else:
        render_plan(current)

st.divider()
st.subheader("Coaching Note")
with st.form("note_form", clear_on_submit=True):
    technique = st.text_input("Technique")
    feedback = st.text_area("Feedback")
    video_url = st.text_input("Video URL")
    if st.form_submit_button("Add note"):
        try:
            store.add_note(technique, feedback, video_url)
        except ValueError as exc:
            st.error(str(exc))
        else:
            commit("Note added")
