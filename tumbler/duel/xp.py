"""
Tool: Duel XP Ledger
Purpose: Reward a healthy number of duels per hour, discourage grinding

Rules (rolling one-hour window, counting the duel just played):
- Duels 1-10:  +2 XP each
- Duels 11-15: +1 XP each
- Duel 16+:    -1, -2, -3 ... XP (the excess over 15)

The ledger itself is in memory. Pass ``history`` (timestamps of duels
already played, e.g. from the activity log) so the window carries over
between sessions.
"""

import time
from typing import Callable, Iterable, List, Optional

XP_WINDOW_SECONDS = 60 * 60
FULL_REWARD_DUELS = 10
REWARD_DUELS = 15


def xp_for_duel_count(count: int) -> int:
    if count <= FULL_REWARD_DUELS:
        return 2
    if count <= REWARD_DUELS:
        return 1
    return -(count - REWARD_DUELS)


def format_xp(delta: int) -> str:
    return f"+{delta} XP" if delta > 0 else f"{delta} XP"


class DuelXpLedger:
    def __init__(
        self,
        window: float = XP_WINDOW_SECONDS,
        clock: Callable[[], float] = time.time,
        history: Optional[Iterable[float]] = None,
    ):
        self.window = window
        self.clock = clock
        self._timestamps: List[float] = []
        if history:
            cutoff = self.clock() - self.window
            self._timestamps = sorted(ts for ts in history if ts > cutoff)

    @property
    def recent_count(self) -> int:
        return len(self._timestamps)

    def record(self, now: Optional[float] = None) -> int:
        """Add a duel at ``now`` and return the XP change it earns."""
        if now is None:
            now = self.clock()
        cutoff = now - self.window
        self._timestamps = [ts for ts in self._timestamps if ts > cutoff]
        self._timestamps.append(now)
        return xp_for_duel_count(len(self._timestamps))


__all__ = ["DuelXpLedger", "XP_WINDOW_SECONDS", "format_xp", "xp_for_duel_count"]
