"""
Tool: Duel Combo Tracker
Purpose: Detect rapid-fire duel streaks from the time between choices

Signals:
- A choice within COMBO_WINDOW_SECONDS of the previous one extends the
  streak and nudges interaction speed up by SPEED_STEP (capped)
- A slower choice starts a new streak at 1 with base speed
- No choice for a whole window decays the streak to 0

Interaction speed feeds back into round pacing through speed_multiplier().
"""

from dataclasses import replace
from typing import Optional

import structlog

from .models import ComboState
from .timers import TimerSlot, loop_time

logger = structlog.get_logger(__name__)

COMBO_WINDOW_SECONDS = 3.0
BASE_SPEED = 50
SPEED_STEP = 10
MAX_SPEED = 100


class ComboTracker:
    """Tracks the current streak. Must be used from inside a running loop."""

    def __init__(self, window: float = COMBO_WINDOW_SECONDS):
        self.window = window
        self._state = ComboState(interaction_speed=BASE_SPEED)
        self._decay = TimerSlot("combo-decay")

    @property
    def state(self) -> ComboState:
        return replace(self._state)

    @property
    def count(self) -> int:
        return self._state.count

    @property
    def interaction_speed(self) -> int:
        return self._state.interaction_speed

    def on_choice(self, now: Optional[float] = None) -> ComboState:
        """
        Register a choice made at ``now`` (loop clock seconds).

        Returns:
            Copy of the updated ComboState
        """
        if now is None:
            now = loop_time()

        last = self._state.last_choice_at
        if last is not None and now - last < self.window:
            self._state.count += 1
            self._state.interaction_speed = min(
                MAX_SPEED, self._state.interaction_speed + SPEED_STEP
            )
        else:
            self._state.count = 1
            self._state.interaction_speed = BASE_SPEED

        self._state.last_choice_at = now
        self._decay.schedule(self.window, self._reset)

        if self._state.count > 1:
            logger.debug("combo.extended", count=self._state.count)
        return self.state

    def speed_multiplier(self) -> float:
        """Pacing factor between 0.5 and 2, 1 at base speed."""
        return max(0.5, min(2.0, self._state.interaction_speed / BASE_SPEED))

    def close(self) -> None:
        self._decay.cancel()

    def _reset(self) -> None:
        self._state.count = 0
        self._state.interaction_speed = BASE_SPEED


__all__ = [
    "BASE_SPEED",
    "COMBO_WINDOW_SECONDS",
    "ComboTracker",
    "MAX_SPEED",
    "SPEED_STEP",
]
