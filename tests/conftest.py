"""Shared test fixtures for TaskTumbler tests.

This module provides common fixtures used across all test modules:
- Database isolation with temporary files
- Standard task pools
- Fast duel timings and recording collaborators

Usage:
    def test_something(temp_db):
        # temp_db is automatically cleaned up after the test
        ...
"""

import os
import random
import tempfile
from collections.abc import Generator
from pathlib import Path
from unittest.mock import patch

import pytest

from tumbler.duel.config_models import DuelConfig


# ─────────────────────────────────────────────────────────────────────────────
# Path Constants
# ─────────────────────────────────────────────────────────────────────────────

PROJECT_ROOT = Path(__file__).parent.parent
PACKAGE_DIR = PROJECT_ROOT / "tumbler"


# ─────────────────────────────────────────────────────────────────────────────
# Database Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def temp_db() -> Generator[Path, None, None]:
    """Create a temporary database file for testing.

    The database file is automatically deleted after the test completes.

    Yields:
        Path to the temporary database file
    """
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = Path(f.name)

    yield db_path

    # Cleanup
    if db_path.exists():
        os.unlink(db_path)


@pytest.fixture
def task_store(temp_db):
    """Task store module pointed at the temporary database."""
    with (
        patch("tumbler.tasks.store.DB_PATH", temp_db),
        patch("tumbler.tasks.DB_PATH", temp_db),
    ):
        from tumbler.tasks import store

        # Force table creation
        conn = store.get_connection()
        conn.close()

        yield store


# ─────────────────────────────────────────────────────────────────────────────
# Task Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def sample_task() -> dict:
    """A fully populated task in the app's wire shape."""
    return {
        "id": "t1",
        "title": "File taxes",
        "category": "Admin",
        "priority": "High",
        "weight": 40,
        "dueDate": None,
        "tags": ["money"],
        "people": ["Sam"],
        "location": "Home office",
        "completed": False,
    }


@pytest.fixture
def close_pool() -> list:
    """Pool where every task is within one weight class of another."""
    return [
        {"id": "a", "title": "Email landlord", "priority": "High", "weight": 50},
        {"id": "b", "title": "Book dentist", "priority": "Medium", "weight": 55},
        {"id": "c", "title": "Water plants", "priority": "Low", "weight": 45},
    ]


@pytest.fixture
def spread_pool() -> list:
    """Pool where no two tasks are within 10 weight of each other."""
    return [
        {"id": "a", "title": "Low", "weight": 1},
        {"id": "b", "title": "Mid", "weight": 40},
        {"id": "c", "title": "High", "weight": 90},
    ]


# ─────────────────────────────────────────────────────────────────────────────
# Duel Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def seeded_rng() -> random.Random:
    """Deterministic random source."""
    return random.Random(1234)


@pytest.fixture
def fast_config() -> DuelConfig:
    """Default duel settings with round timings shrunk for tests."""
    return DuelConfig(
        clash_ms=10,
        particle_delay_ms=10,
        settle_ms=40,
        xp_display_ms=20,
        sound=True,
        confetti=True,
    )


class Recorder:
    """Collects collaborator calls made by the duel engine."""

    def __init__(self):
        self.updates = []
        self.activities = []
        self.notices = []
        self.xp = []

    def task_update(self, task_id, fields):
        self.updates.append((task_id, dict(fields)))

    def record_activity(self, event):
        self.activities.append(event)

    def notify(self, message, icon=""):
        self.notices.append((message, icon))

    def on_xp_change(self, delta):
        self.xp.append(delta)


@pytest.fixture
def recorder() -> Recorder:
    return Recorder()
