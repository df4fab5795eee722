#!/usr/bin/env python3
"""Print progress statistics for a plans JSON file."""

from __future__ import annotations

import argparse
import json
import logging

from plan_store import PlanStore
from progress_stats import exercise_overview, exercise_stats, is_completed, metric_series

DEFAULT_PATH = "data/plans.json"

logger = logging.getLogger("plan_summary")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Summarize completed workout plans")
    parser.add_argument("--input", default=DEFAULT_PATH, help="Plans JSON file")
    parser.add_argument("--exercise", help="Print the full history of one exercise")
    parser.add_argument(
        "--metric",
        default="max_weight",
        help="Metric for --exercise: max_weight, volume or est_1rm",
    )
    parser.add_argument(
        "--pretty",
        action="store_true",
        help="Pretty-print JSON",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def read_plans(path: str) -> PlanStore:
    try:
        with open(path, "r", encoding="utf-8") as handle:
            payload = json.load(handle)
    except OSError as exc:
        raise RuntimeError(f"Failed to read {path}: {exc.strerror}") from exc
    except json.JSONDecodeError as exc:
        raise RuntimeError(f"{path} is not valid JSON") from exc
    if isinstance(payload, list):
        payload = {"plans": payload}
    if not isinstance(payload, dict):
        raise RuntimeError(f"{path} must hold a JSON object or a list of plans")
    return PlanStore.from_payload(payload)


def summarize(plans: list[dict]) -> dict:
    stats = exercise_stats(plans)
    overview = exercise_overview(stats)
    return {
        "completed_sessions": sum(1 for plan in plans if is_completed(plan)),
        "exercises": {
            row.exercise: {
                "personal_record": float(row.personal_record),
                "sessions": int(row.sessions),
                "recent": row.sparkline,
            }
            for row in overview.itertuples(index=False)
        },
    }


def exercise_detail(plans: list[dict], exercise: str, metric: str) -> dict:
    series = metric_series(exercise_stats(plans), exercise, metric)
    return {
        "exercise": series["exercise"],
        "metric": series["metric"],
        "min": series["min"],
        "max": series["max"],
        "history": series["history"].to_dict(orient="records"),
    }


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    try:
        plans = read_plans(args.input).plans
        if args.exercise:
            result = exercise_detail(plans, args.exercise, args.metric)
        else:
            result = summarize(plans)
    except RuntimeError as exc:
        logger.error("%s", exc)
        return 1
    except KeyError as exc:
        logger.error("No completed sessions for exercise %s", exc)
        return 2
    except ValueError as exc:
        logger.error("%s", exc)
        return 2

    print(json.dumps(result, indent=2 if args.pretty else None, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
