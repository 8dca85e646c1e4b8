import random
from datetime import datetime, timezone

import pytest
from fsrs import Scheduler


@pytest.fixture
def tmp_db(tmp_path):
    """Provide a temporary SQLite database path for tests."""
    db_path = str(tmp_path / "test_drill.db")
    return db_path


@pytest.fixture
def now():
    return datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def scheduler():
    """FSRS scheduler without interval fuzzing, so due dates are repeatable."""
    return Scheduler(enable_fuzzing=False)
