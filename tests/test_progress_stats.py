"""
Unit tests for the progress statistics engine.

Expected values are hand-computed from the 1RM formula
``weight / (1.0278 - 0.0278 * reps)`` rounded half up.
"""

import copy

import pandas as pd
import pytest

from progress_stats import (
    HISTORY_COLUMNS,
    SPARKLINE_POINTS,
    ExerciseNotFoundError,
    bar_height,
    estimate_1rm,
    exercise_overview,
    exercise_stats,
    flag_personal_records,
    metric_series,
    normalize_exercise_name,
    set_group_frame,
)

# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------

def _group(weight, reps, sets_count=1, **extra) -> dict:
    return {"id": "g", "weight": weight, "reps": reps, "setsCount": sets_count, **extra}


def _exercise(name: str, *groups: dict) -> dict:
    return {"id": "e", "name": name, "setGroups": list(groups)}


def _plan(date: str, *exercises: dict, completed=True) -> dict:
    plan = {"id": f"p-{date}", "date": date, "exercises": list(exercises)}
    if completed is not None:
        plan["isCompleted"] = completed
    return plan


def _squat_block() -> list[dict]:
    return [
        _plan("2024-01-15", _exercise("Squat", _group(105, 5, 3))),
        _plan("2024-01-01", _exercise("Squat", _group(100, 5, 3))),
        _plan("2024-01-08", _exercise("Squat", _group(110, 3, 3))),
        _plan("2024-01-22", _exercise("Squat", _group(110, 5, 3))),
        _plan("2024-01-29", _exercise("Squat", _group(120, 2, 2))),
    ]


# ---------------------------------------------------------------------------
# Estimated 1RM
# ---------------------------------------------------------------------------

def test_estimate_1rm_five_reps():
    # 100 / 0.8888 = 112.51 -> 113
    assert estimate_1rm(100, 5) == 113


def test_estimate_1rm_single_rep_is_the_weight():
    assert estimate_1rm(100, 1) == 100
    assert estimate_1rm(142.5, 1) == 142.5


def test_estimate_1rm_ten_reps():
    # 70 / 0.7498 = 93.36 -> 93
    assert estimate_1rm(70, 10) == 93


def test_estimate_1rm_zero_reps_uses_formula():
    # 100 / 1.0278 = 97.30 -> 97
    assert estimate_1rm(100, 0) == 97


def test_estimate_1rm_last_positive_denominator():
    # 10 / 0.027 = 370.37 -> 370
    assert estimate_1rm(10, 36) == 370


@pytest.mark.parametrize("reps", [37, 50, 100])
def test_estimate_1rm_ignores_non_positive_denominator(reps):
    assert estimate_1rm(100, reps) == 0


# ---------------------------------------------------------------------------
# Aggregation
# ---------------------------------------------------------------------------

def test_empty_input_gives_empty_mapping():
    assert exercise_stats([]) == {}


def test_volume_and_max_weight_example():
    stats = exercise_stats([_plan("2024-01-01", _exercise("Bench", _group(100, 5, 3)))])

    assert list(stats["BENCH"].columns) == HISTORY_COLUMNS
    point = stats["BENCH"].iloc[0]
    assert point["volume"] == 1500
    assert point["max_weight"] == 100
    assert point["est_1rm"] == 113


def test_metrics_span_all_set_groups():
    plans = [
        _plan(
            "2024-01-01",
            _exercise("Squat", _group(80, 8, 2), _group(100, 5, 3), _group(60, 1, 1)),
        )
    ]
    point = exercise_stats(plans)["SQUAT"].iloc[0]

    assert point["max_weight"] == 100
    assert point["volume"] == 80 * 8 * 2 + 100 * 5 * 3 + 60 * 1 * 1
    # 80x8 -> 99, 100x5 -> 113, 60x1 -> 60
    assert point["est_1rm"] == 113


def test_incomplete_plans_contribute_nothing():
    plans = [
        _plan("2024-01-01", _exercise("Deadlift", _group(140, 5)), completed=False),
        _plan("2024-01-02", _exercise("Deadlift", _group(150, 5)), completed=None),
        _plan("2024-01-03", _exercise("Row", _group(60, 10)), completed=True),
    ]
    stats = exercise_stats(plans)

    assert list(stats) == ["ROW"]


def test_names_are_trimmed_and_uppercased():
    plans = [
        _plan("2024-01-01", _exercise(" Bench Press ", _group(60, 8))),
        _plan("2024-01-08", _exercise("bench press", _group(65, 8))),
        _plan("2024-01-15", _exercise("BENCH PRESS", _group(70, 8))),
    ]
    stats = exercise_stats(plans)

    assert list(stats) == ["BENCH PRESS"]
    assert len(stats["BENCH PRESS"]) == 3


def test_blank_names_are_skipped():
    plans = [
        _plan(
            "2024-01-01",
            _exercise("   ", _group(60, 8)),
            _exercise("", _group(60, 8)),
            {"id": "e", "setGroups": [_group(60, 8)]},
        )
    ]
    assert exercise_stats(plans) == {}


def test_normalize_exercise_name():
    assert normalize_exercise_name("  Front squat\t") == "FRONT SQUAT"
    assert normalize_exercise_name(None) == ""


def test_history_sorted_by_date_regardless_of_input_order():
    history = exercise_stats(_squat_block())["SQUAT"]

    dates = history["date"].tolist()
    assert dates == sorted(dates)
    assert all(a <= b for a, b in zip(dates, dates[1:]))


def test_same_name_twice_in_one_plan_keeps_two_points():
    plans = [
        _plan(
            "2024-01-01",
            _exercise("Curl", _group(20, 10)),
            _exercise("curl", _group(25, 8)),
        )
    ]
    history = exercise_stats(plans)["CURL"]

    assert history["date"].tolist() == ["2024-01-01", "2024-01-01"]
    assert history["max_weight"].tolist() == [20, 25]


def test_exercise_without_set_groups_is_a_zero_point():
    plans = [_plan("2024-01-01", {"id": "e", "name": "Plank", "setGroups": []})]
    point = exercise_stats(plans)["PLANK"].iloc[0]

    assert point["max_weight"] == 0
    assert point["volume"] == 0
    assert point["est_1rm"] == 0
    assert not point["is_pr"]


def test_missing_or_malformed_numbers_count_as_zero():
    plans = [
        _plan(
            "2024-01-01",
            _exercise(
                "Dip",
                {"id": "g1", "reps": 10, "setsCount": 3},
                {"id": "g2", "weight": "heavy", "reps": 8, "setsCount": 2},
                {"id": "g3", "weight": 20, "reps": 6},
            ),
        )
    ]
    point = exercise_stats(plans)["DIP"].iloc[0]

    assert point["max_weight"] == 20
    assert point["volume"] == 0
    assert not pd.isna(point["est_1rm"])


def test_set_group_frame_columns():
    frame = set_group_frame([_plan("2024-01-01", _exercise("Row", _group(60, 10, 3)))])

    assert list(frame.columns) == ["session", "exercise", "date", "weight", "reps", "sets_count"]
    assert frame.iloc[0]["sets_count"] == 3


def test_input_plans_are_not_mutated():
    plans = _squat_block()
    before = copy.deepcopy(plans)

    exercise_stats(plans)

    assert plans == before


def test_recomputation_is_idempotent():
    plans = _squat_block()
    first = exercise_stats(plans)
    second = exercise_stats(plans)

    assert first.keys() == second.keys()
    for name in first:
        pd.testing.assert_frame_equal(first[name], second[name])


def test_histories_are_fresh_per_call():
    plans = _squat_block()
    first = exercise_stats(plans)
    first["SQUAT"].loc[0, "max_weight"] = 999

    assert exercise_stats(plans)["SQUAT"].iloc[0]["max_weight"] == 100


# ---------------------------------------------------------------------------
# Personal records
# ---------------------------------------------------------------------------

def test_two_session_scenario_both_prs():
    plans = [
        _plan("2024-01-01", _exercise("Squat", _group(100, 5))),
        _plan("2024-01-08", _exercise("Squat", _group(110, 5))),
    ]
    history = exercise_stats(plans)["SQUAT"]

    assert len(history) == 2
    assert history["is_pr"].tolist() == [True, True]


def test_ties_and_drops_are_not_prs():
    history = exercise_stats(_squat_block())["SQUAT"]

    # 100, 110, 105, 110, 120
    assert history["max_weight"].tolist() == [100, 110, 105, 110, 120]
    assert history["is_pr"].tolist() == [True, True, False, False, True]


def test_pr_weights_strictly_increase():
    history = exercise_stats(_squat_block())["SQUAT"]
    pr_weights = history.loc[history["is_pr"], "max_weight"].tolist()

    assert all(a < b for a, b in zip(pr_weights, pr_weights[1:]))


def test_first_point_at_zero_weight_is_not_a_pr():
    history = pd.DataFrame({"date": ["2024-01-01", "2024-01-02"], "max_weight": [0.0, 0.0]})
    flagged = flag_personal_records(history)

    assert flagged["is_pr"].tolist() == [False, False]
    assert "is_pr" not in history.columns


# ---------------------------------------------------------------------------
# Metric query and chart scaling
# ---------------------------------------------------------------------------

def test_metric_series_summary():
    stats = exercise_stats(_squat_block())
    series = metric_series(stats, "SQUAT", "max_weight")

    assert series["values"] == [100, 110, 105, 110, 120]
    assert series["min"] == 100
    assert series["max"] == 120
    assert series["latest"]["date"] == "2024-01-29"
    assert len(series["history"]) == 5


def test_metric_series_volume_and_aliases():
    stats = exercise_stats(_squat_block())

    volume = metric_series(stats, "SQUAT", "volume")
    assert volume["values"][0] == 1500
    assert metric_series(stats, "SQUAT", "est1RM")["metric"] == "est_1rm"
    assert metric_series(stats, "SQUAT", "maxWeight")["values"] == metric_series(stats, "SQUAT")["values"]


def test_metric_series_unknown_exercise():
    stats = exercise_stats(_squat_block())

    with pytest.raises(ExerciseNotFoundError):
        metric_series(stats, "LUNGE", "volume")


def test_metric_series_empty_history_is_not_found():
    stats = {"SQUAT": pd.DataFrame(columns=HISTORY_COLUMNS)}

    with pytest.raises(ExerciseNotFoundError):
        metric_series(stats, "squat")


def test_metric_series_unknown_metric():
    stats = exercise_stats(_squat_block())

    with pytest.raises(ValueError):
        metric_series(stats, "SQUAT", "reps")


def test_bar_height_flat_series_is_full():
    assert bar_height(50, 50, 50) == 100


def test_bar_height_scales_above_baseline():
    # baseline = 95, range = 25
    assert bar_height(120, 100, 120) == pytest.approx(100.0)
    assert bar_height(100, 100, 120) == pytest.approx(20.0)
    assert bar_height(110, 100, 120) == pytest.approx(60.0)


def test_single_point_series_renders_full_height():
    stats = exercise_stats([_plan("2024-01-01", _exercise("Press", _group(50, 5)))])
    series = metric_series(stats, "PRESS", "max_weight")

    assert series["min"] == series["max"] == 50
    assert bar_height(series["values"][0], series["min"], series["max"]) == 100


# ---------------------------------------------------------------------------
# Overview
# ---------------------------------------------------------------------------

def test_overview_lists_records_and_sparkline():
    plans = _squat_block() + [
        _plan("2024-02-05", _exercise("Squat", _group(100, 5))),
        _plan("2024-02-12", _exercise("Squat", _group(90, 5))),
        _plan("2024-01-02", _exercise("Bench", _group(60, 5))),
    ]
    overview = exercise_overview(exercise_stats(plans))

    assert overview["exercise"].tolist() == ["BENCH", "SQUAT"]
    squat = overview.set_index("exercise").loc["SQUAT"]
    assert squat["personal_record"] == 120
    assert squat["sessions"] == 7
    assert len(squat["sparkline"]) == SPARKLINE_POINTS
    assert squat["sparkline"] == [110, 105, 110, 120, 100, 90]
    assert squat["sparkline_heights"][3] == pytest.approx(100.0)
    assert squat["sparkline_heights"][5] == pytest.approx(75.0)


def test_overview_all_zero_record_has_flat_sparkline():
    plans = [_plan("2024-01-01", _exercise("Pushup", _group(0, 20, 3)))]
    row = exercise_overview(exercise_stats(plans)).iloc[0]

    assert row["personal_record"] == 0
    assert row["sparkline_heights"] == [0.0]


def test_overview_empty():
    assert exercise_overview({}).empty
