"""Shared utilities for the Iron Log Streamlit pages."""

from __future__ import annotations

import logging
import os
from pathlib import Path

import pandas as pd
import streamlit as st

from plan_store import PlanStore, load_store, save_store
from progress_stats import SPARKLINE_POINTS, exercise_stats

DEFAULT_DATA_PATH = Path("data/plans.json")
ENV_PATH = Path(".env")
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

logger = logging.getLogger(__name__)


def load_env_file(path: Path = ENV_PATH) -> None:
    if not path.exists():
        return
    for raw_line in path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip().strip("'").strip('"')
        if key and key not in os.environ:
            os.environ[key] = value


def data_path() -> Path:
    return Path(os.getenv("IRONLOG_DATA_PATH", "").strip() or DEFAULT_DATA_PATH)


def sparkline_points() -> int:
    raw = os.getenv("IRONLOG_SPARKLINE_POINTS", "").strip()
    if not raw:
        return SPARKLINE_POINTS
    try:
        return max(int(raw), 0)
    except ValueError:
        logger.warning("Ignoring IRONLOG_SPARKLINE_POINTS=%r, using %d", raw, SPARKLINE_POINTS)
        return SPARKLINE_POINTS


def configure_logging() -> None:
    name = os.getenv("IRONLOG_LOG_LEVEL", "INFO").strip().upper() or "INFO"
    level = getattr(logging, name, None)
    if not isinstance(level, int):
        level = logging.INFO
    logging.basicConfig(format=LOG_FORMAT)
    # basicConfig is a no-op once handlers exist, so set the level directly.
    logging.getLogger().setLevel(level)


@st.cache_data(show_spinner=False)
def _cached_store(path: str, mtime: float) -> PlanStore:
    # mtime is part of the cache key so edits to the file are picked up.
    return load_store(Path(path))


def load_store_for_edit() -> PlanStore:
    """Uncached store for pages that write; raises on an unreadable file."""
    load_env_file()
    configure_logging()
    return load_store(data_path(), strict=True)


def save_app_store(store: PlanStore) -> None:
    save_store(store, data_path())
    _cached_store.clear()


def load_app_data() -> tuple[PlanStore, dict[str, pd.DataFrame]] | None:
    load_env_file()
    configure_logging()
    path = data_path()
    if not path.exists():
        st.warning(
            f"No plans found at {path}. Set IRONLOG_DATA_PATH or place a JSON file "
            "with `plans` and `notes` there."
        )
        return None

    store = _cached_store(str(path), path.stat().st_mtime)
    stats = exercise_stats(store.plans)
    if not stats:
        st.info("No completed sessions yet. Finish a session to see progress.")
        return None

    return store, stats
