"""Duel Engine - pairwise task prioritisation through rapid binary choices

Philosophy:
    Ranking a whole list is a wall of decisions. Picking between two
    tasks is one. The duel engine turns prioritisation into a fast
    fidget loop: two tasks appear, the user taps the one that matters
    more, weights shift a little, and the next pair is already there.

Components:
    rating.py: Bounded additive weight update (not zero-sum)
    matchmaking.py: Pair selection with optional weight classes
    combo.py: Streak detection from inter-choice latency
    particles.py: Loss-burst particle kinematics
    engine.py: Timed round state machine tying it all together
    xp.py: Hourly duel XP ledger
    presentation.py: Fighter colour, urgency and scale helpers

Usage:
    import asyncio
    from tumbler.duel.engine import DuelStateMachine
    from tumbler.tasks import store

    async def main():
        engine = DuelStateMachine(
            pool_provider=lambda: store.list_tasks()["data"]["tasks"],
            task_update=store.update_task,
            record_activity=store.record_activity,
        )
        engine.start()
        engine.choose(0)
        await engine.wait_until_ready()
        engine.close()

    asyncio.run(main())
"""

from pathlib import Path

# Path constants
PROJECT_ROOT = Path(__file__).parent.parent.parent
ARGS_DIR = PROJECT_ROOT / "args"
CONFIG_PATH = ARGS_DIR / "duel.yaml"

# Weight defaults
DEFAULT_WEIGHT = 10
MIN_WEIGHT = 1

# Round result variants are numbered 1..RESULT_VARIANTS
RESULT_VARIANTS = 5

# User-facing messages
WEIGHTS_TOO_SPREAD_MESSAGE = (
    "Tasks are too spread out in weight. Try completing some or adjusting weights."
)
NOT_ENOUGH_TASKS_MESSAGE = "Add at least 2 active tasks to start a duel."

__all__ = [
    "PROJECT_ROOT",
    "ARGS_DIR",
    "CONFIG_PATH",
    "DEFAULT_WEIGHT",
    "MIN_WEIGHT",
    "RESULT_VARIANTS",
    "WEIGHTS_TOO_SPREAD_MESSAGE",
    "NOT_ENOUGH_TASKS_MESSAGE",
]
