"""
Tool: Duel Rating
Purpose: Bounded additive weight update for a resolved duel

Each side moves independently: the winner gains a fixed boost capped at
the configured maximum, the loser drops a fixed penalty floored at 1.
Nothing is normalised across the pool, so the update is not zero-sum.

Usage:
    from tumbler.duel.rating import update_weights

    result = update_weights(50, 55)
    # WeightUpdate(winner=60, loser=50)
"""

import math
from numbers import Real
from typing import Any, NamedTuple, Union

from . import DEFAULT_WEIGHT, MIN_WEIGHT

Number = Union[int, float]


class WeightUpdate(NamedTuple):
    winner: Number
    loser: Number


def coerce_weight(value: Any, default: Number = DEFAULT_WEIGHT) -> Number:
    """
    Read a task weight, treating anything non-numeric as the default.

    Numeric strings are accepted ("25" -> 25). Booleans, None, NaN and
    infinities fall back to the default.
    """
    if isinstance(value, bool) or value is None:
        return default

    if isinstance(value, Real):
        number = value
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return default
    else:
        return default

    if isinstance(number, float):
        if not math.isfinite(number):
            return default
        if number.is_integer():
            return int(number)
    return number


def update_weights(
    winner_weight: Any,
    loser_weight: Any,
    win_boost: Number = 10,
    loss_penalty: Number = 5,
    weight_max: Number = 100,
) -> WeightUpdate:
    """
    Compute new weights for both sides of a duel.

    Args:
        winner_weight: Current weight of the chosen task
        loser_weight: Current weight of the other task
        win_boost: Amount added to the winner
        loss_penalty: Amount removed from the loser
        weight_max: Upper bound for the winner

    Returns:
        WeightUpdate(winner, loser)
    """
    winner = coerce_weight(winner_weight)
    loser = coerce_weight(loser_weight)

    return WeightUpdate(
        winner=min(weight_max, winner + win_boost),
        loser=max(MIN_WEIGHT, loser - loss_penalty),
    )


def format_delta(value: Number) -> str:
    """Render a signed change for display ("+10", "-5")."""
    return f"+{value}" if value >= 0 else f"-{abs(value)}"


__all__ = ["WeightUpdate", "coerce_weight", "format_delta", "update_weights"]
