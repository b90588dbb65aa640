"""
Tool: Duel Matchmaking
Purpose: Choose the two tasks for the next duel round

Two modes:
- Open: any two distinct active tasks, uniformly at random
- Weight classes: an anchor task plus an opponent whose weight is within
  the tolerance. The anchor is redrawn up to MAX_MATCH_ATTEMPTS times; if
  every attempt finds nobody in range the pool is "too spread out" and the
  caller is warned once.

The pool is always passed in fresh. Nothing here caches tasks between
calls because the task list can be edited from anywhere in the app.

Usage:
    from tumbler.duel.matchmaking import eligible_tasks, select_pair

    pair = select_pair(eligible_tasks(tasks), fairness_enabled=True)
    if pair:
        left, right = pair.fighters
"""

import random
from typing import Any, Callable, Iterable, List, Mapping, Optional

import structlog

from . import WEIGHTS_TOO_SPREAD_MESSAGE
from .models import EMPTY_PAIR, Pair
from .rating import coerce_weight

logger = structlog.get_logger(__name__)

MAX_MATCH_ATTEMPTS = 10
DEFAULT_TOLERANCE = 10


def eligible_tasks(tasks: Optional[Iterable[Mapping[str, Any]]]) -> List[Mapping[str, Any]]:
    """
    Active tasks that can fight, one entry per task id.

    Completed tasks and tasks without an id are dropped, since weight
    writes are addressed by id. When the same id appears more than once
    only the first occurrence is kept, so a task can never be matched
    against a copy of itself.
    """
    seen = set()
    result = []
    for task in tasks or []:
        if task.get("completed"):
            continue
        task_id = task.get("id")
        if task_id is None or task_id in seen:
            continue
        seen.add(task_id)
        result.append(task)
    return result


def select_pair(
    pool: List[Mapping[str, Any]],
    fairness_enabled: bool = True,
    tolerance: float = DEFAULT_TOLERANCE,
    rng: Optional[random.Random] = None,
    on_warning: Optional[Callable[[str], None]] = None,
) -> Pair:
    """
    Pick two tasks from the pool.

    Args:
        pool: Active tasks (see eligible_tasks)
        fairness_enabled: Restrict matchups to the anchor's weight class
        tolerance: Maximum weight difference inside a weight class
        rng: Random source, injectable for deterministic tests
        on_warning: Called once with a message when weight classes are exhausted

    Returns:
        Pair of two tasks, or EMPTY_PAIR
    """
    if len(pool) < 2:
        return EMPTY_PAIR

    rng = rng or random

    if not fairness_enabled:
        first, second = rng.sample(range(len(pool)), 2)
        return Pair((pool[first], pool[second]))

    for attempt in range(MAX_MATCH_ATTEMPTS):
        anchor_index = rng.randrange(len(pool))
        anchor = pool[anchor_index]
        anchor_weight = coerce_weight(anchor.get("weight"))

        candidates = [
            task
            for i, task in enumerate(pool)
            if i != anchor_index
            and abs(anchor_weight - coerce_weight(task.get("weight"))) <= tolerance
        ]

        if candidates:
            opponent = candidates[rng.randrange(len(candidates))]
            logger.debug(
                "matchmaking.paired",
                anchor=anchor.get("id"),
                opponent=opponent.get("id"),
                attempts=attempt + 1,
            )
            return Pair((anchor, opponent))

    logger.warning(
        "matchmaking.exhausted",
        pool_size=len(pool),
        attempts=MAX_MATCH_ATTEMPTS,
        tolerance=tolerance,
    )
    if on_warning is not None:
        on_warning(WEIGHTS_TOO_SPREAD_MESSAGE)
    return EMPTY_PAIR


__all__ = ["DEFAULT_TOLERANCE", "MAX_MATCH_ATTEMPTS", "eligible_tasks", "select_pair"]
