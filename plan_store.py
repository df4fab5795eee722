"""Local store for workout plans and coaching notes."""

from __future__ import annotations

import copy
import json
import logging
import uuid
from collections import OrderedDict
from datetime import date, datetime, timedelta
from pathlib import Path

logger = logging.getLogger(__name__)

SET_GROUP_FIELDS = ("weight", "setsCount", "reps", "rpe")


def new_id() -> str:
    return uuid.uuid4().hex[:9]


def week_start(date_str: str) -> str:
    """ISO date of the Monday starting the week of ``date_str``."""
    try:
        day = datetime.strptime(str(date_str), "%Y-%m-%d").date()
    except ValueError:
        return "Unknown"
    return (day - timedelta(days=day.weekday())).isoformat()


def flatten_sets(plan: dict) -> list[dict]:
    """Expand each exercise's set groups into individual sets for logging.

    Returns one entry per exercise with its ``flattenedSets``. A group with a
    missing or zero ``setsCount`` still yields one set.
    """
    exercises = []
    for exercise in plan.get("exercises") or []:
        sets = []
        for group in exercise.get("setGroups") or []:
            for index in range(int(group.get("setsCount") or 1)):
                sets.append(
                    {
                        "id": f"{group['id']}-{index}",
                        "groupId": group["id"],
                        "weight": group.get("weight") or 0,
                        "reps": group.get("reps") or 0,
                        "setIndex": index + 1,
                        "completed": False,
                    }
                )
        exercises.append({**exercise, "flattenedSets": sets})
    return exercises


def _find_exercise(plan: dict, exercise_id: str) -> dict:
    for exercise in plan.get("exercises") or []:
        if exercise.get("id") == exercise_id:
            return exercise
    raise KeyError(exercise_id)


def _find_group(exercise: dict, group_id: str) -> dict:
    for group in exercise.get("setGroups") or []:
        if group.get("id") == group_id:
            return group
    raise KeyError(f"{exercise.get('id')}/{group_id}")


class PlanStore:
    """Workout plans and coaching notes held in memory.

    Reads hand out deep copies; every write replaces the stored dicts instead
    of editing them, so snapshots taken earlier stay unchanged.
    """

    def __init__(self, plans: list[dict] | None = None, notes: list[dict] | None = None) -> None:
        self._plans = copy.deepcopy(list(plans or []))
        self._notes = copy.deepcopy(list(notes or []))

    @classmethod
    def from_payload(cls, payload: dict) -> "PlanStore":
        return cls(payload.get("plans") or [], payload.get("notes") or [])

    def to_payload(self) -> dict:
        return {"plans": self.plans, "notes": self.notes}

    @property
    def plans(self) -> list[dict]:
        return copy.deepcopy(self._plans)

    @property
    def notes(self) -> list[dict]:
        return copy.deepcopy(self._notes)

    def get_plan(self, plan_id: str) -> dict:
        for plan in self._plans:
            if plan.get("id") == plan_id:
                return copy.deepcopy(plan)
        raise KeyError(plan_id)

    def plan_for_date(self, date_str: str) -> dict | None:
        for plan in self._plans:
            if plan.get("date") == date_str:
                return copy.deepcopy(plan)
        return None

    def save_plan(self, plan: dict) -> dict:
        """Insert ``plan`` or replace the plan already saved for its date."""
        if not plan.get("date"):
            raise ValueError("plan must have a date")
        plan = copy.deepcopy(plan)
        for index, existing in enumerate(self._plans):
            if existing.get("date") == plan["date"]:
                plan["id"] = existing.get("id") or plan.get("id") or new_id()
                self._plans[index] = plan
                logger.info("Updated plan %s for %s", plan["id"], plan["date"])
                return copy.deepcopy(plan)
        plan.setdefault("id", new_id())
        plan.setdefault("exercises", [])
        self._plans.append(plan)
        logger.info("Added plan %s for %s", plan["id"], plan["date"])
        return copy.deepcopy(plan)

    def add_note(
        self,
        technique_name: str,
        feedback: str = "",
        video_url: str = "",
        note_date: str | None = None,
    ) -> dict:
        if not technique_name or not technique_name.strip():
            raise ValueError("technique name is required")
        note = {
            "id": new_id(),
            "date": note_date or date.today().isoformat(),
            "techniqueName": technique_name,
            "feedback": feedback,
            "videoUrl": video_url,
        }
        self._notes.insert(0, note)
        return copy.deepcopy(note)

    def _replace_plan(self, plan_id: str, update) -> dict:
        for index, plan in enumerate(self._plans):
            if plan.get("id") == plan_id:
                updated = update(copy.deepcopy(plan))
                self._plans[index] = updated
                return copy.deepcopy(updated)
        raise KeyError(plan_id)

    def finish_session(self, plan_id: str) -> dict:
        def complete(plan: dict) -> dict:
            plan["isCompleted"] = True
            return plan

        plan = self._replace_plan(plan_id, complete)
        logger.info("Completed session %s (%s)", plan_id, plan.get("date"))
        return plan

    def update_set_group(self, plan_id: str, exercise_id: str, group_id: str, field: str, value) -> dict:
        """Set one field of one set group, e.g. the weight actually lifted."""
        if field not in SET_GROUP_FIELDS:
            raise ValueError(f"field must be one of {', '.join(SET_GROUP_FIELDS)}")

        def apply(plan: dict) -> dict:
            group = _find_group(_find_exercise(plan, exercise_id), group_id)
            group[field] = value
            return plan

        return self._replace_plan(plan_id, apply)

    def add_exercise(self, plan_id: str, name: str = "") -> dict:
        """Append an exercise with one empty set group; returns the updated plan."""

        def apply(plan: dict) -> dict:
            plan.setdefault("exercises", []).append(
                {
                    "id": new_id(),
                    "name": name,
                    "setGroups": [{"id": new_id(), "weight": 0, "setsCount": 1, "reps": 0}],
                }
            )
            return plan

        return self._replace_plan(plan_id, apply)

    def rename_exercise(self, plan_id: str, exercise_id: str, name: str) -> dict:
        def apply(plan: dict) -> dict:
            _find_exercise(plan, exercise_id)["name"] = name
            return plan

        return self._replace_plan(plan_id, apply)

    def set_review(self, plan_id: str, exercise_id: str, review: str) -> dict:
        def apply(plan: dict) -> dict:
            _find_exercise(plan, exercise_id)["review"] = review
            return plan

        return self._replace_plan(plan_id, apply)

    def remove_exercise(self, plan_id: str, exercise_id: str) -> dict:
        def apply(plan: dict) -> dict:
            exercise = _find_exercise(plan, exercise_id)
            plan["exercises"] = [ex for ex in plan["exercises"] if ex is not exercise]
            return plan

        return self._replace_plan(plan_id, apply)

    def add_set_group(self, plan_id: str, exercise_id: str) -> dict:
        """Append a single set that repeats the last group's weight and reps."""

        def apply(plan: dict) -> dict:
            exercise = _find_exercise(plan, exercise_id)
            groups = exercise.setdefault("setGroups", [])
            last = groups[-1] if groups else {}
            groups.append(
                {
                    "id": new_id(),
                    "weight": last.get("weight") or 0,
                    "setsCount": 1,
                    "reps": last.get("reps") or 0,
                }
            )
            return plan

        return self._replace_plan(plan_id, apply)

    def remove_set_group(self, plan_id: str, exercise_id: str, group_id: str) -> dict:
        def apply(plan: dict) -> dict:
            exercise = _find_exercise(plan, exercise_id)
            group = _find_group(exercise, group_id)
            exercise["setGroups"] = [g for g in exercise["setGroups"] if g is not group]
            return plan

        return self._replace_plan(plan_id, apply)

    def plans_by_week(self) -> "OrderedDict[str, list[dict]]":
        """Plans newest first, grouped under the Monday of their week."""
        groups: OrderedDict[str, list[dict]] = OrderedDict()
        for plan in sorted(self.plans, key=lambda p: str(p.get("date") or ""), reverse=True):
            groups.setdefault(week_start(plan.get("date")), []).append(plan)
        return groups


def load_store(path: Path, strict: bool = False) -> PlanStore:
    """Read a store snapshot.

    A missing file gives an empty store. An unreadable one gives an empty store
    with a warning, or a ``RuntimeError`` when ``strict`` is set so callers that
    write back never clobber a file they could not parse.
    """
    if not path.exists():
        return PlanStore()
    try:
        with path.open("r", encoding="utf-8") as handle:
            payload = json.load(handle)
    except (OSError, json.JSONDecodeError) as exc:
        if strict:
            raise RuntimeError(f"Failed to read {path}: {exc}") from exc
        logger.warning("Could not read %s: %s", path, exc)
        return PlanStore()
    if not isinstance(payload, dict):
        if strict:
            raise RuntimeError(f"{path} must hold a JSON object")
        logger.warning("Ignoring %s: expected a JSON object", path)
        return PlanStore()
    return PlanStore.from_payload(payload)


def save_store(store: PlanStore, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as handle:
        json.dump(store.to_payload(), handle, indent=2, ensure_ascii=False)
    logger.info("Saved %d plans to %s", len(store.plans), path)
