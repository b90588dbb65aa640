"""
Presentation helpers for duel fighters.

These stay free of any UI toolkit: they return colour names, scale
factors and labels that a renderer (the CLI, a web view) can apply.
"""

from datetime import datetime, timezone
from typing import Any, Mapping, Optional

from .rating import coerce_weight

WINNER_ACTION = "WIN!"
LOSER_ACTION = "LOST"

FIGHTER_COLORS = {
    "Urgent": "red",
    "High": "yellow",
    "Medium": "blue",
    "Low": "green",
}
DEFAULT_FIGHTER_COLOR = "blue"


def fighter_color(priority: Optional[str]) -> str:
    return FIGHTER_COLORS.get(priority or "", DEFAULT_FIGHTER_COLOR)


def _parse_due(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        due = value
    elif isinstance(value, str) and value:
        try:
            due = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
    else:
        return None
    if due.tzinfo is None:
        due = due.replace(tzinfo=timezone.utc)
    return due


def is_urgent(task: Optional[Mapping[str, Any]], now: Optional[datetime] = None) -> bool:
    """Urgent priority, or a due date already in the past."""
    if not task:
        return False
    if task.get("priority") == "Urgent":
        return True
    due = _parse_due(task.get("dueDate"))
    if due is None:
        return False
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return due < now


def weight_scale(weight: Any, weight_max: float = 100) -> float:
    """Heavier tasks render slightly larger: 0.95 at weight 0 up to 1.05 at max."""
    normalized = min(coerce_weight(weight) / weight_max, 1)
    return 0.95 + normalized * 0.1


__all__ = [
    "FIGHTER_COLORS",
    "LOSER_ACTION",
    "WINNER_ACTION",
    "fighter_color",
    "is_urgent",
    "weight_scale",
]
