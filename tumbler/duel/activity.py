"""
Activity log entries for resolved duels.

The shape matches the rest of the app's activity feed so duels show up
next to timed sessions and completions.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional

from .rating import Number


def generate_activity_id() -> str:
    return f"act_{uuid.uuid4().hex[:12]}"


def build_duel_activity(
    winner: Mapping[str, Any],
    loser: Mapping[str, Any],
    winner_weight: Number,
    loser_weight: Number,
    win_boost: Number,
    loss_penalty: Number,
    combo_count: int,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Build the activity event for one duel.

    Category, people, location and priority come from the winner, since
    the winner is the task the user just chose to care about.
    """
    timestamp = (now or datetime.now(timezone.utc)).isoformat()
    people = winner.get("people")

    return {
        "id": generate_activity_id(),
        "title": f"Duel: {winner.get('title') or 'Untitled'} vs {loser.get('title') or 'Untitled'}",
        "category": winner.get("category") or "General",
        "duration": 0,
        "type": "duel",
        "taskId": winner.get("id"),
        "people": list(people) if isinstance(people, (list, tuple)) else [],
        "location": winner.get("location") or "",
        "createdAt": timestamp,
        "timestamp": timestamp,
        "priority": winner.get("priority") or "Medium",
        "metadata": {
            "winner": {
                "id": winner.get("id"),
                "title": winner.get("title"),
                "weight": winner_weight,
                "weightChange": win_boost,
            },
            "loser": {
                "id": loser.get("id"),
                "title": loser.get("title"),
                "weight": loser_weight,
                "weightChange": -loss_penalty,
            },
            "comboCount": combo_count,
        },
    }


__all__ = ["build_duel_activity", "generate_activity_id"]
