"""
Tool: Duel Models
Purpose: Data structures shared by the duel engine components

Usage:
    from tumbler.duel.models import Pair, AnimationPhase, ComboState, Particle

Tasks themselves stay plain mappings owned by the task store; the types
here only describe what a duel round holds while it is on screen.
"""

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple

from . import RESULT_VARIANTS


class DuelState(str, Enum):
    """Round lifecycle states."""

    IDLE = "idle"
    CHOICE_LOCKED = "choice_locked"
    RESOLVE = "resolve"
    SETTLE = "settle"
    COMPLETE = "complete"


class AnimationPhase(str, Enum):
    """Per-fighter animation phase."""

    NONE = "none"
    ATTACKING = "attacking"
    DEFENDING = "defending"
    WIN1 = "win1"
    WIN2 = "win2"
    WIN3 = "win3"
    WIN4 = "win4"
    WIN5 = "win5"
    LOSE1 = "lose1"
    LOSE2 = "lose2"
    LOSE3 = "lose3"
    LOSE4 = "lose4"
    LOSE5 = "lose5"

    @classmethod
    def win(cls, variant: int) -> "AnimationPhase":
        if not 1 <= variant <= RESULT_VARIANTS:
            raise ValueError(f"Invalid win variant: {variant}")
        return cls(f"win{variant}")

    @classmethod
    def lose(cls, variant: int) -> "AnimationPhase":
        if not 1 <= variant <= RESULT_VARIANTS:
            raise ValueError(f"Invalid lose variant: {variant}")
        return cls(f"lose{variant}")

    @property
    def is_winning(self) -> bool:
        return self is AnimationPhase.ATTACKING or self.value.startswith("win")

    @property
    def is_losing(self) -> bool:
        return self is AnimationPhase.DEFENDING or self.value.startswith("lose")


@dataclass(frozen=True)
class Pair:
    """
    Two fighters for one round, or nothing.

    An empty pair is falsy so callers can write ``if pair:``.
    """

    fighters: Tuple[Mapping[str, Any], ...] = ()

    def __post_init__(self):
        if len(self.fighters) not in (0, 2):
            raise ValueError(f"A pair holds 0 or 2 tasks, got {len(self.fighters)}")

    def __bool__(self) -> bool:
        return len(self.fighters) == 2

    def __len__(self) -> int:
        return len(self.fighters)

    def __getitem__(self, slot: int) -> Mapping[str, Any]:
        return self.fighters[slot]

    @property
    def is_empty(self) -> bool:
        return not self.fighters

    @property
    def ids(self) -> Tuple[Any, ...]:
        return tuple(t.get("id") for t in self.fighters)


EMPTY_PAIR = Pair()


@dataclass
class ComboState:
    count: int = 0
    last_choice_at: Optional[float] = None  # loop clock, seconds
    interaction_speed: int = 50


@dataclass
class Particle:
    id: int
    x: float
    y: float
    vx: float
    vy: float
    life: float = 1.0


@dataclass(frozen=True)
class WeightChangeDisplay:
    task_id: Any
    delta_text: str


@dataclass
class DuelOutcome:
    """What a resolved round did. Kept on the engine as ``last_outcome``."""

    winner_id: Any
    loser_id: Any
    winner_weight: float
    loser_weight: float
    winner_change: int
    loser_change: int
    winner_variant: int
    loser_variant: int
    combo_count: int
    activity: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to JSON-serializable dict."""
        return asdict(self)


__all__ = [
    "AnimationPhase",
    "ComboState",
    "DuelOutcome",
    "DuelState",
    "EMPTY_PAIR",
    "Pair",
    "Particle",
    "WeightChangeDisplay",
]
