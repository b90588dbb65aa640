"""
Tool: Task Store
Purpose: SQLite-backed task list, activity log and XP for the duel CLI

Tasks are returned as plain dicts in the app's wire shape:
    {id, title, category, priority, weight, dueDate, tags, people,
     location, completed, createdAt}

Every function returns a result dict:
    {"success": True, "data": ...} or {"success": False, "error": "..."}

Dependencies:
    - sqlite3 (stdlib)
    - uuid (stdlib)
"""

import json
import sqlite3
import uuid
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional

from . import DB_PATH, TASK_PRIORITIES, UPDATABLE_FIELDS

# wire field -> column
_COLUMNS = {
    "title": "title",
    "category": "category",
    "priority": "priority",
    "weight": "weight",
    "dueDate": "due_date",
    "tags": "tags",
    "people": "people",
    "location": "location",
    "completed": "completed",
}
_JSON_FIELDS = ("tags", "people")


def get_connection() -> sqlite3.Connection:
    """Get database connection, creating tables if needed."""
    DB_PATH.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(DB_PATH))
    conn.row_factory = sqlite3.Row

    cursor = conn.cursor()

    cursor.execute("""
        CREATE TABLE IF NOT EXISTS tasks (
            id TEXT PRIMARY KEY,
            title TEXT NOT NULL,
            category TEXT DEFAULT 'General',
            priority TEXT DEFAULT 'Medium' CHECK(priority IN ('Urgent', 'High', 'Medium', 'Low')),
            weight REAL DEFAULT 10,
            due_date TEXT,
            tags TEXT DEFAULT '[]',
            people TEXT DEFAULT '[]',
            location TEXT DEFAULT '',
            completed INTEGER DEFAULT 0,
            created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
            completed_at DATETIME
        )
    """)

    cursor.execute("""
        CREATE TABLE IF NOT EXISTS activities (
            id TEXT PRIMARY KEY,
            type TEXT NOT NULL,
            task_id TEXT,
            title TEXT,
            category TEXT,
            payload TEXT NOT NULL,
            created_at DATETIME DEFAULT CURRENT_TIMESTAMP
        )
    """)

    cursor.execute("""
        CREATE TABLE IF NOT EXISTS user_stats (
            id INTEGER PRIMARY KEY CHECK(id = 1),
            xp INTEGER DEFAULT 0,
            updated_at DATETIME DEFAULT CURRENT_TIMESTAMP
        )
    """)
    cursor.execute("INSERT OR IGNORE INTO user_stats (id, xp) VALUES (1, 0)")

    cursor.execute("CREATE INDEX IF NOT EXISTS idx_tasks_completed ON tasks(completed)")
    cursor.execute("CREATE INDEX IF NOT EXISTS idx_activities_type ON activities(type)")
    cursor.execute("CREATE INDEX IF NOT EXISTS idx_activities_created ON activities(created_at)")

    conn.commit()
    return conn


def generate_id() -> str:
    """Generate a short unique ID."""
    return uuid.uuid4().hex[:12]


def row_to_task(row: Optional[sqlite3.Row]) -> Optional[Dict[str, Any]]:
    """Convert a tasks row to the wire shape."""
    if row is None:
        return None
    weight = row["weight"]
    if weight is not None and float(weight).is_integer():
        weight = int(weight)
    return {
        "id": row["id"],
        "title": row["title"],
        "category": row["category"],
        "priority": row["priority"],
        "weight": weight,
        "dueDate": row["due_date"],
        "tags": json.loads(row["tags"] or "[]"),
        "people": json.loads(row["people"] or "[]"),
        "location": row["location"] or "",
        "completed": bool(row["completed"]),
        "createdAt": row["created_at"],
    }


def create_task(
    title: str,
    category: str = "General",
    priority: str = "Medium",
    weight: Optional[float] = 10,
    due_date: Optional[str] = None,
    tags: Optional[List[str]] = None,
    people: Optional[List[str]] = None,
    location: str = "",
) -> Dict[str, Any]:
    """
    Create a task.

    Args:
        title: What the task is
        category: Grouping shown on the activity feed
        priority: Urgent/High/Medium/Low
        weight: Duel rating, defaults to 10
        due_date: ISO date or datetime
        tags: Free-form labels
        people: People involved
        location: Where it happens

    Returns:
        dict with success status and task data
    """
    if priority not in TASK_PRIORITIES:
        return {"success": False, "error": f"Invalid priority. Must be one of: {TASK_PRIORITIES}"}
    if not title or not title.strip():
        return {"success": False, "error": "Title is required"}

    task_id = generate_id()

    conn = get_connection()
    cursor = conn.cursor()

    cursor.execute("""
        INSERT INTO tasks (id, title, category, priority, weight, due_date, tags, people, location)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
    """, (
        task_id,
        title.strip(),
        category,
        priority,
        weight,
        due_date,
        json.dumps(tags or []),
        json.dumps(people or []),
        location,
    ))
    conn.commit()

    cursor.execute("SELECT * FROM tasks WHERE id = ?", (task_id,))
    task = row_to_task(cursor.fetchone())

    conn.close()

    return {
        "success": True,
        "data": {"task_id": task_id, "task": task},
        "message": f"Task created with ID {task_id}",
    }


def get_task(task_id: str) -> Dict[str, Any]:
    """Get a task by ID."""
    conn = get_connection()
    cursor = conn.cursor()

    cursor.execute("SELECT * FROM tasks WHERE id = ?", (task_id,))
    task = row_to_task(cursor.fetchone())

    conn.close()

    if not task:
        return {"success": False, "error": f"Task not found: {task_id}"}
    return {"success": True, "data": task}


def list_tasks(include_completed: bool = False) -> Dict[str, Any]:
    """
    List tasks, heaviest first.

    Args:
        include_completed: Also return completed tasks

    Returns:
        dict with task list
    """
    conn = get_connection()
    cursor = conn.cursor()

    where_clause = "" if include_completed else "WHERE completed = 0"
    cursor.execute(f"""
        SELECT * FROM tasks
        {where_clause}
        ORDER BY weight DESC, created_at ASC
    """)
    tasks = [row_to_task(row) for row in cursor.fetchall()]

    conn.close()

    return {"success": True, "data": {"tasks": tasks, "total": len(tasks)}}


def update_task(task_id: str, fields: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Update task fields.

    This is the single entry point the duel engine writes weights through:
    ``update_task(task_id, {"weight": 60})``.

    Args:
        task_id: Task to update
        fields: Wire-shaped fields to change (see UPDATABLE_FIELDS)

    Returns:
        dict with updated task
    """
    unknown = [key for key in fields if key not in UPDATABLE_FIELDS]
    if unknown:
        return {"success": False, "error": f"Cannot update fields: {unknown}"}
    if not fields:
        return {"success": False, "error": "No fields to update"}
    if "priority" in fields and fields["priority"] not in TASK_PRIORITIES:
        return {"success": False, "error": f"Invalid priority. Must be one of: {TASK_PRIORITIES}"}

    conn = get_connection()
    cursor = conn.cursor()

    cursor.execute("SELECT id FROM tasks WHERE id = ?", (task_id,))
    if not cursor.fetchone():
        conn.close()
        return {"success": False, "error": f"Task not found: {task_id}"}

    updates = []
    params: List[Any] = []

    for key, value in fields.items():
        if key in _JSON_FIELDS:
            value = json.dumps(list(value or []))
        elif key == "completed":
            value = 1 if value else 0
            updates.append("completed_at = ?")
            params.append(datetime.now().isoformat() if value else None)
        updates.append(f"{_COLUMNS[key]} = ?")
        params.append(value)

    params.append(task_id)
    cursor.execute(f"UPDATE tasks SET {', '.join(updates)} WHERE id = ?", params)
    conn.commit()

    cursor.execute("SELECT * FROM tasks WHERE id = ?", (task_id,))
    task = row_to_task(cursor.fetchone())

    conn.close()

    return {"success": True, "data": task, "message": f"Task {task_id} updated"}


def complete_task(task_id: str) -> Dict[str, Any]:
    """Mark a task as completed. Completed tasks leave the duel pool."""
    return update_task(task_id, {"completed": True})


def delete_task(task_id: str) -> Dict[str, Any]:
    """Delete a task permanently."""
    conn = get_connection()
    cursor = conn.cursor()

    cursor.execute("DELETE FROM tasks WHERE id = ?", (task_id,))
    deleted = cursor.rowcount

    conn.commit()
    conn.close()

    if deleted == 0:
        return {"success": False, "error": f"Task not found: {task_id}"}
    return {"success": True, "message": f"Task {task_id} deleted"}


# -------------------- activities --------------------

def record_activity(event: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Append an activity event (duel results, sessions, ...).

    The full event is stored as JSON; type, task and title are also kept
    in columns for filtering.
    """
    if not event.get("type"):
        return {"success": False, "error": "Activity type is required"}

    activity_id = event.get("id") or f"act_{generate_id()}"

    conn = get_connection()
    cursor = conn.cursor()

    cursor.execute("""
        INSERT INTO activities (id, type, task_id, title, category, payload, created_at)
        VALUES (?, ?, ?, ?, ?, ?, ?)
    """, (
        activity_id,
        event["type"],
        event.get("taskId"),
        event.get("title"),
        event.get("category"),
        json.dumps(dict(event, id=activity_id), default=str),
        event.get("createdAt") or datetime.now().isoformat(),
    ))

    conn.commit()
    conn.close()

    return {"success": True, "data": {"activity_id": activity_id}}


def list_activities(activity_type: Optional[str] = None, limit: int = 20) -> Dict[str, Any]:
    """List recent activities, newest first."""
    conn = get_connection()
    cursor = conn.cursor()

    if activity_type:
        cursor.execute("""
            SELECT payload FROM activities
            WHERE type = ?
            ORDER BY created_at DESC
            LIMIT ?
        """, (activity_type, limit))
    else:
        cursor.execute("""
            SELECT payload FROM activities
            ORDER BY created_at DESC
            LIMIT ?
        """, (limit,))

    activities = [json.loads(row["payload"]) for row in cursor.fetchall()]

    conn.close()

    return {"success": True, "data": {"activities": activities, "total": len(activities)}}


def _to_epoch(value: Optional[str]) -> Optional[float]:
    if not value:
        return None
    try:
        stamp = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    # Naive values were written with local datetime.now()
    return stamp.timestamp()


def recent_duel_times(
    window_seconds: float = 3600,
    now: Optional[float] = None,
) -> Dict[str, Any]:
    """
    Epoch timestamps of duels logged within the last ``window_seconds``.

    Seeds the hourly XP window so it survives restarting a duel session.

    Args:
        window_seconds: How far back to look
        now: Reference time (epoch seconds), defaults to the current time

    Returns:
        dict with timestamps, oldest first
    """
    if now is None:
        now = datetime.now().timestamp()
    cutoff = now - window_seconds

    conn = get_connection()
    cursor = conn.cursor()

    cursor.execute("SELECT created_at FROM activities WHERE type = 'duel'")
    stamps = [_to_epoch(row["created_at"]) for row in cursor.fetchall()]

    conn.close()

    recent = sorted(ts for ts in stamps if ts is not None and cutoff < ts <= now)
    return {"success": True, "data": {"timestamps": recent, "total": len(recent)}}


# -------------------- user stats --------------------

def get_stats() -> Dict[str, Any]:
    conn = get_connection()
    cursor = conn.cursor()

    cursor.execute("SELECT xp FROM user_stats WHERE id = 1")
    xp = cursor.fetchone()["xp"]

    cursor.execute("SELECT COUNT(*) AS count FROM activities WHERE type = 'duel'")
    duels = cursor.fetchone()["count"]

    conn.close()

    return {"success": True, "data": {"xp": xp, "duels": duels}}


def add_xp(delta: int) -> Dict[str, Any]:
    """Apply an XP change. XP never drops below zero."""
    conn = get_connection()
    cursor = conn.cursor()

    cursor.execute("""
        UPDATE user_stats
        SET xp = MAX(0, xp + ?), updated_at = ?
        WHERE id = 1
    """, (delta, datetime.now().isoformat()))
    conn.commit()

    cursor.execute("SELECT xp FROM user_stats WHERE id = 1")
    xp = cursor.fetchone()["xp"]

    conn.close()

    return {"success": True, "data": {"xp": xp, "delta": delta}}


__all__ = [
    "add_xp",
    "complete_task",
    "create_task",
    "delete_task",
    "get_connection",
    "get_stats",
    "get_task",
    "list_activities",
    "list_tasks",
    "recent_duel_times",
    "record_activity",
    "update_task",
]
