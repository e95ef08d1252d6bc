from __future__ import annotations

import json

import pytest
import structlog

from studydiff.config import Settings, get_settings
from studydiff.diff import SnapshotComparator
from studydiff.kernel.log_config import configure_logging
from tests.support.study_data import STUDY_SCHEMA, build_baseline


@pytest.fixture(autouse=True)
def _reset_structlog():
    yield
    structlog.reset_defaults()


@pytest.mark.unit
def test_json_logging_emits_comparison_summary(capsys):
    configure_logging(Settings(log_level="INFO", log_format="json"))

    SnapshotComparator(STUDY_SCHEMA).diff(build_baseline(), None)

    lines = [line for line in capsys.readouterr().out.splitlines() if line.strip()]
    events = [json.loads(line) for line in lines]
    summary = [e for e in events if e["event"] == "Compared snapshots"]
    assert len(summary) == 1
    assert summary[0]["level"] == "info"
    assert summary[0]["removed"] == 6
    assert "timestamp" in summary[0]


@pytest.mark.unit
def test_log_level_filters_debug_events(capsys):
    configure_logging(Settings(log_level="WARNING", log_format="json"))

    SnapshotComparator(STUDY_SCHEMA).diff(build_baseline(), build_baseline())

    assert capsys.readouterr().out.strip() == ""


@pytest.mark.unit
def test_settings_read_environment(monkeypatch):
    monkeypatch.setenv("NUMERIC_TOLERANCE", "0.001")
    monkeypatch.setenv("UNIT_TOKENS", '["kV", "kA"]')
    get_settings.cache_clear()
    try:
        settings = get_settings()
        assert settings.numeric_tolerance == 0.001
        assert settings.unit_tokens == ["kV", "kA"]
    finally:
        get_settings.cache_clear()
