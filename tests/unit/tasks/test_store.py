"""Tests for tumbler/tasks/store.py

The task store backs the duel CLI:
- Task CRUD in the app's wire shape
- Weight writes coming from the duel engine
- The activity log duels are recorded into
- XP totals that never drop below zero
"""

from datetime import datetime, timedelta, timezone

import pytest


# ─────────────────────────────────────────────────────────────────────────────
# Task Creation Tests
# ─────────────────────────────────────────────────────────────────────────────


class TestCreateTask:
    """Tests for task creation."""

    def test_creates_basic_task(self, task_store):
        """Should create a task with defaults for everything but the title."""
        result = task_store.create_task("do taxes")

        assert result["success"] is True
        task = result["data"]["task"]
        assert task["title"] == "do taxes"
        assert task["weight"] == 10
        assert task["priority"] == "Medium"
        assert task["category"] == "General"
        assert task["completed"] is False
        assert task["tags"] == []

    def test_creates_task_with_all_fields(self, task_store, sample_task):
        """Should round-trip every optional field."""
        result = task_store.create_task(
            sample_task["title"],
            category=sample_task["category"],
            priority=sample_task["priority"],
            weight=sample_task["weight"],
            due_date="2026-01-31",
            tags=sample_task["tags"],
            people=sample_task["people"],
            location=sample_task["location"],
        )

        task = result["data"]["task"]
        assert task["category"] == "Admin"
        assert task["priority"] == "High"
        assert task["weight"] == 40
        assert task["dueDate"] == "2026-01-31"
        assert task["tags"] == ["money"]
        assert task["people"] == ["Sam"]
        assert task["location"] == "Home office"

    def test_generates_unique_id(self, task_store):
        result1 = task_store.create_task("task 1")
        result2 = task_store.create_task("task 2")

        assert result1["data"]["task_id"] != result2["data"]["task_id"]

    def test_rejects_invalid_priority(self, task_store):
        result = task_store.create_task("x", priority="Whenever")

        assert result["success"] is False
        assert "priority" in result["error"]

    def test_rejects_blank_title(self, task_store):
        assert task_store.create_task("   ")["success"] is False

    def test_fractional_weight_is_kept(self, task_store):
        task = task_store.create_task("half", weight=12.5)["data"]["task"]
        assert task["weight"] == 12.5


# ─────────────────────────────────────────────────────────────────────────────
# Listing Tests
# ─────────────────────────────────────────────────────────────────────────────


class TestListTasks:
    def test_heaviest_first(self, task_store):
        task_store.create_task("light", weight=5)
        task_store.create_task("heavy", weight=80)
        task_store.create_task("middle", weight=40)

        result = task_store.list_tasks()

        assert [t["title"] for t in result["data"]["tasks"]] == ["heavy", "middle", "light"]
        assert result["data"]["total"] == 3

    def test_hides_completed_by_default(self, task_store):
        done = task_store.create_task("done")["data"]["task_id"]
        task_store.create_task("open")
        task_store.complete_task(done)

        titles = [t["title"] for t in task_store.list_tasks()["data"]["tasks"]]
        all_titles = [
            t["title"] for t in task_store.list_tasks(include_completed=True)["data"]["tasks"]
        ]

        assert titles == ["open"]
        assert sorted(all_titles) == ["done", "open"]

    def test_empty_store(self, task_store):
        assert task_store.list_tasks()["data"] == {"tasks": [], "total": 0}


# ─────────────────────────────────────────────────────────────────────────────
# Update Tests
# ─────────────────────────────────────────────────────────────────────────────


class TestUpdateTask:
    def test_updates_weight(self, task_store):
        """The duel engine writes weights through this call."""
        task_id = task_store.create_task("fight me", weight=50)["data"]["task_id"]

        result = task_store.update_task(task_id, {"weight": 60})

        assert result["success"] is True
        assert result["data"]["weight"] == 60
        assert task_store.get_task(task_id)["data"]["weight"] == 60

    def test_updates_list_fields(self, task_store):
        task_id = task_store.create_task("tagged")["data"]["task_id"]

        result = task_store.update_task(task_id, {"tags": ["a", "b"], "people": ("Kim",)})

        assert result["data"]["tags"] == ["a", "b"]
        assert result["data"]["people"] == ["Kim"]

    def test_rejects_unknown_fields(self, task_store):
        task_id = task_store.create_task("x")["data"]["task_id"]

        result = task_store.update_task(task_id, {"id": "other"})

        assert result["success"] is False
        assert "Cannot update" in result["error"]

    def test_rejects_empty_update(self, task_store):
        task_id = task_store.create_task("x")["data"]["task_id"]
        assert task_store.update_task(task_id, {})["success"] is False

    def test_rejects_invalid_priority(self, task_store):
        task_id = task_store.create_task("x")["data"]["task_id"]
        assert task_store.update_task(task_id, {"priority": "Soon"})["success"] is False

    def test_missing_task(self, task_store):
        result = task_store.update_task("nope", {"weight": 5})

        assert result["success"] is False
        assert "not found" in result["error"]


class TestCompleteAndDelete:
    def test_complete_marks_task(self, task_store):
        task_id = task_store.create_task("finish")["data"]["task_id"]

        result = task_store.complete_task(task_id)

        assert result["success"] is True
        assert result["data"]["completed"] is True

    def test_complete_missing_task(self, task_store):
        assert task_store.complete_task("nope")["success"] is False

    def test_delete_removes_task(self, task_store):
        task_id = task_store.create_task("gone")["data"]["task_id"]

        assert task_store.delete_task(task_id)["success"] is True
        assert task_store.get_task(task_id)["success"] is False

    def test_delete_missing_task(self, task_store):
        assert task_store.delete_task("nope")["success"] is False


# ─────────────────────────────────────────────────────────────────────────────
# Activity Tests
# ─────────────────────────────────────────────────────────────────────────────


class TestActivities:
    def test_records_full_payload(self, task_store):
        event = {
            "id": "act_1",
            "type": "duel",
            "title": "Duel: A vs B",
            "taskId": "a",
            "metadata": {"comboCount": 2},
            "createdAt": "2026-01-01T10:00:00+00:00",
        }

        result = task_store.record_activity(event)
        [stored] = task_store.list_activities()["data"]["activities"]

        assert result["data"]["activity_id"] == "act_1"
        assert stored == event

    def test_generates_id_when_missing(self, task_store):
        result = task_store.record_activity({"type": "duel"})
        assert result["data"]["activity_id"].startswith("act_")

    def test_requires_type(self, task_store):
        assert task_store.record_activity({"title": "?"})["success"] is False

    def test_newest_first_and_filtered(self, task_store):
        task_store.record_activity({"type": "duel", "title": "old", "createdAt": "2026-01-01T09:00:00"})
        task_store.record_activity({"type": "focus", "title": "focus", "createdAt": "2026-01-01T09:30:00"})
        task_store.record_activity({"type": "duel", "title": "new", "createdAt": "2026-01-01T10:00:00"})

        everything = task_store.list_activities()["data"]["activities"]
        duels = task_store.list_activities(activity_type="duel")["data"]["activities"]

        assert [a["title"] for a in everything] == ["new", "focus", "old"]
        assert [a["title"] for a in duels] == ["new", "old"]

    def test_recent_duel_times_within_window(self, task_store):
        now = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)
        for minutes_ago in (90, 30, 5):
            stamp = (now - timedelta(minutes=minutes_ago)).isoformat()
            task_store.record_activity({"type": "duel", "createdAt": stamp})
        task_store.record_activity(
            {"type": "focus", "createdAt": (now - timedelta(minutes=1)).isoformat()}
        )

        result = task_store.recent_duel_times(window_seconds=3600, now=now.timestamp())

        assert result["data"]["timestamps"] == [
            (now - timedelta(minutes=30)).timestamp(),
            (now - timedelta(minutes=5)).timestamp(),
        ]
        assert result["data"]["total"] == 2

    def test_recent_duel_times_skips_unparseable_stamps(self, task_store):
        task_store.record_activity({"type": "duel", "createdAt": "yesterday-ish"})

        assert task_store.recent_duel_times()["data"]["timestamps"] == []

    def test_limit(self, task_store):
        for i in range(5):
            task_store.record_activity({"type": "duel", "createdAt": f"2026-01-01T10:0{i}:00"})

        assert task_store.list_activities(limit=2)["data"]["total"] == 2


# ─────────────────────────────────────────────────────────────────────────────
# Stats Tests
# ─────────────────────────────────────────────────────────────────────────────


class TestStats:
    def test_fresh_stats(self, task_store):
        assert task_store.get_stats()["data"] == {"xp": 0, "duels": 0}

    def test_counts_duels(self, task_store):
        task_store.record_activity({"type": "duel"})
        task_store.record_activity({"type": "focus"})

        assert task_store.get_stats()["data"]["duels"] == 1

    @pytest.mark.parametrize("deltas,expected", [([2, 2, 1], 5), ([2, -5], 0), ([3, -1], 2)])
    def test_xp_floor_at_zero(self, task_store, deltas, expected):
        for delta in deltas:
            result = task_store.add_xp(delta)

        assert result["data"]["xp"] == expected
        assert task_store.get_stats()["data"]["xp"] == expected
