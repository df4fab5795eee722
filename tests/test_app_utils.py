"""Configuration helpers shared by the Streamlit pages."""

import logging
import os
from pathlib import Path

from app_utils import DEFAULT_DATA_PATH, configure_logging, data_path, load_env_file, sparkline_points
from progress_stats import SPARKLINE_POINTS


def test_load_env_file_sets_missing_keys_only(tmp_path, monkeypatch):
    env = tmp_path / ".env"
    env.write_text(
        "# local settings\n"
        "IRONLOG_DATA_PATH='custom/plans.json'\n"
        'IRONLOG_LOG_LEVEL="DEBUG"\n'
        "not a setting\n",
        encoding="utf-8",
    )
    monkeypatch.setenv("IRONLOG_DATA_PATH", "")
    monkeypatch.delenv("IRONLOG_DATA_PATH")
    monkeypatch.setenv("IRONLOG_LOG_LEVEL", "WARNING")

    load_env_file(env)

    assert data_path() == Path("custom/plans.json")
    assert os.environ["IRONLOG_LOG_LEVEL"] == "WARNING"


def test_load_env_file_missing_is_noop(tmp_path):
    load_env_file(tmp_path / "absent.env")


def test_data_path_default(monkeypatch):
    monkeypatch.delenv("IRONLOG_DATA_PATH", raising=False)

    assert data_path() == DEFAULT_DATA_PATH


def test_sparkline_points_from_env(monkeypatch):
    monkeypatch.setenv("IRONLOG_SPARKLINE_POINTS", "10")
    assert sparkline_points() == 10

    monkeypatch.setenv("IRONLOG_SPARKLINE_POINTS", "lots")
    assert sparkline_points() == SPARKLINE_POINTS

    monkeypatch.delenv("IRONLOG_SPARKLINE_POINTS")
    assert sparkline_points() == SPARKLINE_POINTS


def test_configure_logging_sets_root_level(monkeypatch):
    root = logging.getLogger()
    previous = root.level
    try:
        monkeypatch.setenv("IRONLOG_LOG_LEVEL", "debug")
        configure_logging()
        assert root.level == logging.DEBUG

        monkeypatch.setenv("IRONLOG_LOG_LEVEL", "chatty")
        configure_logging()
        assert root.level == logging.INFO
    finally:
        root.setLevel(previous)
