"""Task Store - SQLite persistence for tasks, activities and XP

The duel engine never touches storage directly. This package is the
collaborator the CLI wires in: it serves the active task pool, applies
weight updates, logs duel activities and keeps the user's XP.

Components:
    store.py: Task CRUD, activity log and user stats

Usage:
    from tumbler.tasks import store

    store.create_task("File taxes", priority="High", weight=40)
    pool = store.list_tasks()["data"]["tasks"]
    store.update_task(pool[0]["id"], {"weight": 50})
"""

from pathlib import Path

# Path constants
PROJECT_ROOT = Path(__file__).parent.parent.parent
DB_PATH = PROJECT_ROOT / "data" / "tasks.db"

# Valid priorities, most pressing first
TASK_PRIORITIES = ("Urgent", "High", "Medium", "Low")

# Fields a caller may change through update_task
UPDATABLE_FIELDS = (
    "title",
    "category",
    "priority",
    "weight",
    "dueDate",
    "tags",
    "people",
    "location",
    "completed",
)

__all__ = [
    "PROJECT_ROOT",
    "DB_PATH",
    "TASK_PRIORITIES",
    "UPDATABLE_FIELDS",
]
