from datetime import datetime, timedelta, timezone

import pytest

from anamnesis.domain.models import ProgressItem

NOW = datetime(2026, 3, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def now():
    """A fixed, timezone-aware reference time."""
    return NOW


@pytest.fixture
def make_item():
    """Factory for progress items due `due_in_days` from NOW (None = never scheduled)."""

    def _make(lesson_id="l1", due_in_days=None, **fields):
        due = NOW + timedelta(days=due_in_days) if due_in_days is not None else None
        return ProgressItem(lesson_id=lesson_id, next_review_date=due, **fields)

    return _make


@pytest.fixture(autouse=True)
def mock_home(tmp_path, monkeypatch):
    """Mocks Path.home() to point to a temp dir."""
    home = tmp_path / "home"
    home.mkdir()

    # Isolate config files and ANAMNESIS_* settings from the developer machine
    monkeypatch.setenv("HOME", str(home))
    for key in ("ANAMNESIS_MIN_EASE", "ANAMNESIS_MAX_EASE", "ANAMNESIS_PROGRESS_FILE"):
        monkeypatch.delenv(key, raising=False)
    return home
