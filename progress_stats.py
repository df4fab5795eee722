"""Progress statistics for completed workout plans.

Completed plans are flattened into one row per set group, aggregated into one
point per exercise instance and grouped by normalized exercise name. Every call
recomputes from the plans it is given; nothing is cached here.
"""

from __future__ import annotations

import logging
import math

import pandas as pd

logger = logging.getLogger(__name__)

SPARKLINE_POINTS = 6

METRICS = {
    "max_weight": "Max Weight",
    "volume": "Volume",
    "est_1rm": "Est. 1RM",
}
METRIC_ALIASES = {
    "maxWeight": "max_weight",
    "est1RM": "est_1rm",
}

SET_GROUP_COLUMNS = ["session", "exercise", "date", "weight", "reps", "sets_count"]
HISTORY_COLUMNS = ["date", "max_weight", "volume", "est_1rm", "is_pr"]


class ExerciseNotFoundError(KeyError):
    """Raised when a metric query names an exercise with no history."""


def normalize_exercise_name(name: object) -> str:
    if name is None:
        return ""
    return str(name).strip().upper()


def is_completed(plan: dict) -> bool:
    return plan.get("isCompleted") is True


def estimate_1rm(weight: float, reps: int) -> float:
    """Estimate a one-rep max from a weight x reps set.

    A single rep is already a max attempt. Otherwise the weight is divided by
    ``1.0278 - 0.0278 * reps`` and rounded half up. From 37 reps the divisor is
    no longer positive and the set contributes 0.
    """
    if reps == 1:
        return weight
    denominator = 1.0278 - 0.0278 * reps
    if denominator <= 0:
        return 0
    return math.floor(weight / denominator + 0.5)


def set_group_frame(plans: list[dict]) -> pd.DataFrame:
    """One row per set group of every completed plan.

    ``session`` numbers each exercise instance in input order. An exercise
    without set groups still gets a single all-zero row so it shows up as a
    session with zero metrics.
    """
    rows = []
    session = 0
    for plan in plans:
        if not is_completed(plan):
            continue
        date = str(plan.get("date") or "")
        for exercise in plan.get("exercises") or []:
            key = normalize_exercise_name(exercise.get("name"))
            if not key:
                continue
            for group in exercise.get("setGroups") or [{}]:
                rows.append(
                    {
                        "session": session,
                        "exercise": key,
                        "date": date,
                        "weight": group.get("weight"),
                        "reps": group.get("reps"),
                        "sets_count": group.get("setsCount"),
                    }
                )
            session += 1

    if not rows:
        return pd.DataFrame(columns=SET_GROUP_COLUMNS)
    df = pd.DataFrame(rows, columns=SET_GROUP_COLUMNS)
    df["weight"] = pd.to_numeric(df["weight"], errors="coerce").fillna(0.0)
    df["reps"] = pd.to_numeric(df["reps"], errors="coerce").fillna(0).astype(int)
    df["sets_count"] = pd.to_numeric(df["sets_count"], errors="coerce").fillna(0).astype(int)
    return df


def session_metrics(frame: pd.DataFrame) -> pd.DataFrame:
    """Collapse set-group rows into one row per exercise instance."""
    if frame.empty:
        return pd.DataFrame(columns=["session", "exercise", "date", "max_weight", "volume", "est_1rm"])
    frame = frame.copy()
    frame["volume"] = frame["weight"] * frame["reps"] * frame["sets_count"]
    frame["est_1rm"] = frame.apply(lambda row: estimate_1rm(row["weight"], row["reps"]), axis=1)
    per_session = frame.groupby("session", as_index=False, sort=True).agg(
        exercise=("exercise", "first"),
        date=("date", "first"),
        max_weight=("weight", "max"),
        volume=("volume", "sum"),
        est_1rm=("est_1rm", "max"),
    )
    # Running bests start at 0, matching a scan over an empty group list.
    per_session["max_weight"] = per_session["max_weight"].clip(lower=0)
    per_session["est_1rm"] = per_session["est_1rm"].clip(lower=0)
    return per_session


def flag_personal_records(history: pd.DataFrame) -> pd.DataFrame:
    """Mark points whose max weight beats every earlier point.

    ``history`` must already be sorted by date. The running best starts at 0,
    so the first point is a PR unless its weight is 0, and ties never count.
    """
    history = history.copy()
    previous_best = history["max_weight"].cummax().shift(1, fill_value=0)
    history["is_pr"] = history["max_weight"] > previous_best
    return history


def exercise_stats(plans: list[dict]) -> dict[str, pd.DataFrame]:
    """Map each normalized exercise name to its date-sorted history."""
    per_session = session_metrics(set_group_frame(plans))
    stats: dict[str, pd.DataFrame] = {}
    if per_session.empty:
        return stats

    for name, group in per_session.groupby("exercise", sort=True):
        history = (
            group.sort_values(["date", "session"], kind="mergesort")
            .reset_index(drop=True)[["date", "max_weight", "volume", "est_1rm"]]
        )
        stats[name] = flag_personal_records(history)

    logger.debug("Built %d exercise histories from %d sessions", len(stats), len(per_session))
    return stats


def metric_column(metric: str) -> str:
    column = METRIC_ALIASES.get(metric, metric)
    if column not in METRICS:
        raise ValueError(f"metric must be one of {', '.join(METRICS)}")
    return column


def metric_series(stats: dict[str, pd.DataFrame], exercise: str, metric: str = "max_weight") -> dict:
    column = metric_column(metric)
    key = normalize_exercise_name(exercise)
    history = stats.get(key)
    if history is None or history.empty:
        raise ExerciseNotFoundError(exercise)

    values = history[column].tolist()
    return {
        "exercise": key,
        "metric": column,
        "history": history,
        "values": values,
        "min": min(values),
        "max": max(values),
        "latest": history.iloc[-1].to_dict(),
    }


def bar_height(value: float, min_value: float, max_value: float) -> float:
    """Bar height in percent, with the floor 5% below the smallest value."""
    if max_value == min_value:
        return 100.0
    baseline = min_value * 0.95
    return (value - baseline) / (max_value - baseline) * 100


def exercise_overview(stats: dict[str, pd.DataFrame], sparkline_points: int = SPARKLINE_POINTS) -> pd.DataFrame:
    rows = []
    for name in sorted(stats):
        history = stats[name]
        record = float(history["max_weight"].max()) if not history.empty else 0.0
        recent = history["max_weight"].tail(sparkline_points).tolist() if sparkline_points > 0 else []
        rows.append(
            {
                "exercise": name,
                "personal_record": record,
                "sessions": len(history),
                "sparkline": recent,
                "sparkline_heights": [value / record * 100 if record else 0.0 for value in recent],
            }
        )
    return pd.DataFrame(rows, columns=["exercise", "personal_record", "sessions", "sparkline", "sparkline_heights"])
