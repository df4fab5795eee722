#!/usr/bin/env python3
"""Plan sessions, log sets and keep coaching notes in the plans JSON file."""

from __future__ import annotations

import argparse
import json
import logging
import os
from pathlib import Path

from plan_store import PlanStore, load_store, save_store

DEFAULT_PATH = "data/plans.json"
FIELD_TYPES = {"weight": float, "setsCount": int, "reps": int, "rpe": float}

logger = logging.getLogger("plan_log")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Edit workout plans and coaching notes")
    parser.add_argument(
        "--data",
        default=os.getenv("IRONLOG_DATA_PATH") or DEFAULT_PATH,
        help="Plans JSON file (read and rewritten in place)",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    commands = parser.add_subparsers(dest="command", required=True)

    plan = commands.add_parser("plan", help="Create the plan for a date, or update its title")
    plan.add_argument("date", help="Session date, YYYY-MM-DD")
    plan.add_argument("--title", default="", help="Session title")

    show = commands.add_parser("show", help="Print one plan")
    show.add_argument("plan_id")

    add_exercise = commands.add_parser("add-exercise", help="Append an exercise to a plan")
    add_exercise.add_argument("plan_id")
    add_exercise.add_argument("name", nargs="?", default="")

    for name, help_text in (
        ("remove-exercise", "Delete an exercise"),
        ("add-set", "Append one set repeating the last weight and reps"),
    ):
        sub = commands.add_parser(name, help=help_text)
        sub.add_argument("plan_id")
        sub.add_argument("exercise_id")

    rename = commands.add_parser("rename", help="Rename an exercise")
    rename.add_argument("plan_id")
    rename.add_argument("exercise_id")
    rename.add_argument("name")

    review = commands.add_parser("review", help="Store a post-session review for an exercise")
    review.add_argument("plan_id")
    review.add_argument("exercise_id")
    review.add_argument("text")

    remove_set = commands.add_parser("remove-set", help="Delete a set group")
    remove_set.add_argument("plan_id")
    remove_set.add_argument("exercise_id")
    remove_set.add_argument("group_id")

    set_field = commands.add_parser("set", help="Change one field of a set group")
    set_field.add_argument("plan_id")
    set_field.add_argument("exercise_id")
    set_field.add_argument("group_id")
    set_field.add_argument("field", choices=sorted(FIELD_TYPES))
    set_field.add_argument("value")

    finish = commands.add_parser("finish", help="Mark a session as completed")
    finish.add_argument("plan_id")

    note = commands.add_parser("note", help="Add a coaching note")
    note.add_argument("technique")
    note.add_argument("--feedback", default="")
    note.add_argument("--video-url", default="")
    note.add_argument("--date", dest="note_date", help="Note date, defaults to today")

    return parser.parse_args(argv)


def parse_value(field: str, raw: str):
    try:
        return FIELD_TYPES[field](raw)
    except ValueError as exc:
        raise ValueError(f"{field} must be a number, got {raw!r}") from exc


def apply_command(store: PlanStore, args: argparse.Namespace) -> tuple[dict, bool]:
    """Run one command; returns the result to print and whether the store changed."""
    command = args.command
    if command == "show":
        return store.get_plan(args.plan_id), False
    if command == "plan":
        existing = store.plan_for_date(args.date)
        plan = existing or {"date": args.date, "exercises": []}
        if args.title or existing is None:
            plan["title"] = args.title
        return store.save_plan(plan), True
    if command == "add-exercise":
        return store.add_exercise(args.plan_id, args.name), True
    if command == "remove-exercise":
        return store.remove_exercise(args.plan_id, args.exercise_id), True
    if command == "rename":
        return store.rename_exercise(args.plan_id, args.exercise_id, args.name), True
    if command == "review":
        return store.set_review(args.plan_id, args.exercise_id, args.text), True
    if command == "add-set":
        return store.add_set_group(args.plan_id, args.exercise_id), True
    if command == "remove-set":
        return store.remove_set_group(args.plan_id, args.exercise_id, args.group_id), True
    if command == "set":
        value = parse_value(args.field, args.value)
        return store.update_set_group(args.plan_id, args.exercise_id, args.group_id, args.field, value), True
    if command == "finish":
        return store.finish_session(args.plan_id), True
    if command == "note":
        return store.add_note(args.technique, args.feedback, args.video_url, args.note_date), True
    raise ValueError(f"Unknown command {command}")


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)
    path = Path(args.data)

    try:
        store = load_store(path, strict=True)
        result, changed = apply_command(store, args)
        if changed:
            save_store(store, path)
    except RuntimeError as exc:
        logger.error("%s", exc)
        return 1
    except OSError as exc:
        logger.error("Failed to write %s: %s", path, exc)
        return 1
    except KeyError as exc:
        logger.error("Not found: %s", exc)
        return 2
    except ValueError as exc:
        logger.error("%s", exc)
        return 2

    print(json.dumps(result, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
