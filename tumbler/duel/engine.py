"""
Tool: Duel Engine
Purpose: Run duel rounds as an explicit, timer-driven state machine

Round lifecycle (times measured from the choice):

    idle --choose--> choice_locked --clash_ms--> resolve
         --particle delay--> settle --settle_ms--> idle (auto-advance)
                                                or complete --advance--> idle

- choice_locked: input is locked, fighters show attacking/defending
- resolve: weights are written, the duel is logged, win/lose variants shown
- settle: the loser's particle burst is running, displays clear at the end

Every delayed step goes through one TimerSlot, so starting a round or
closing the engine cancels whatever the previous round still had queued.

Collaborators:
    pool_provider() -> iterable of task mappings, read fresh every time
    task_update(task_id, {"weight": value})
    record_activity(event)
Failures in either writer are logged and the round carries on.
"""

import asyncio
import random
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple

import structlog

from . import NOT_ENOUGH_TASKS_MESSAGE, RESULT_VARIANTS
from .activity import build_duel_activity
from .capabilities import DuelEffects, Notifier, NullEffects, null_notifier
from .combo import ComboTracker
from .config_models import DuelConfig
from .matchmaking import eligible_tasks, select_pair
from .models import (
    EMPTY_PAIR,
    AnimationPhase,
    DuelOutcome,
    DuelState,
    Pair,
    WeightChangeDisplay,
)
from .particles import ParticleSimulator
from .presentation import LOSER_ACTION, WINNER_ACTION
from .rating import format_delta, update_weights
from .timers import TimerSlot, loop_time
from .xp import DuelXpLedger, format_xp

logger = structlog.get_logger(__name__)

TaskPool = Iterable[Mapping[str, Any]]


class DuelStateMachine:
    """Owns one duel screen: the current pair, its phases and its timers."""

    def __init__(
        self,
        pool_provider: Callable[[], TaskPool],
        task_update: Callable[[Any, Dict[str, Any]], Any],
        record_activity: Callable[[Dict[str, Any]], Any],
        config: Optional[DuelConfig] = None,
        effects: Optional[DuelEffects] = None,
        notifier: Optional[Notifier] = None,
        rng: Optional[random.Random] = None,
        combo: Optional[ComboTracker] = None,
        particles: Optional[ParticleSimulator] = None,
        xp_ledger: Optional[DuelXpLedger] = None,
        on_xp_change: Optional[Callable[[int], Any]] = None,
    ):
        self.pool_provider = pool_provider
        self.task_update = task_update
        self.record_activity = record_activity
        self.config = config or DuelConfig()
        self.effects = effects or NullEffects()
        self.notifier = notifier or null_notifier
        self.rng = rng or random.Random()
        self.combo = combo or ComboTracker()
        self.particles = particles or ParticleSimulator(
            viewport_height=self.config.viewport_height, rng=self.rng
        )
        self.xp_ledger = xp_ledger or DuelXpLedger()
        self.on_xp_change = on_xp_change

        self.state = DuelState.IDLE
        self.pair: Pair = EMPTY_PAIR
        self.phases: List[AnimationPhase] = [AnimationPhase.NONE, AnimationPhase.NONE]
        self.weight_changes: List[Optional[WeightChangeDisplay]] = [None, None]
        self.actions: List[Optional[str]] = [None, None]
        self.xp_display: Optional[str] = None
        self.needs_more_tasks = False
        self.last_outcome: Optional[DuelOutcome] = None
        self.rounds_played = 0

        self._round = TimerSlot("duel-round")
        self._xp_fade = TimerSlot("duel-xp")
        self._round_started_at = 0.0
        self._winner_slot = 0
        self._loser_origin: Tuple[float, float] = (0.0, 0.0)
        self._ready = asyncio.Event()
        self._ready.set()
        self._closed = False

    # -------------------- public API --------------------

    def start(self) -> Pair:
        """Pick the first pair for this screen."""
        self._pick_pair()
        return self.pair

    def choose(self, winner_slot: int, loser_origin: Tuple[float, float] = (0.0, 0.0)) -> bool:
        """
        Pick the fighter in ``winner_slot`` (0 or 1) as the winner.

        Args:
            winner_slot: Slot of the chosen task
            loser_origin: Screen position of the losing fighter, used for the
                particle burst

        Returns:
            True if a round started, False if the choice was ignored
        """
        if winner_slot not in (0, 1):
            raise ValueError(f"Invalid fighter slot: {winner_slot}")
        if self._closed or self.state is not DuelState.IDLE or not self.pair:
            return False

        self._round.cancel()
        self._round_started_at = loop_time()
        self._winner_slot = winner_slot
        self._loser_origin = loser_origin

        self.state = DuelState.CHOICE_LOCKED
        self._ready.clear()
        self.phases[winner_slot] = AnimationPhase.ATTACKING
        self.phases[1 - winner_slot] = AnimationPhase.DEFENDING

        self.combo.on_choice(self._round_started_at)
        if self.config.sound:
            self._run_effect(self.effects.play_select, "select_sound")

        self._round.schedule(self.config.clash_ms / 1000, self._resolve)
        return True

    def advance(self) -> bool:
        """Move on from ``complete`` when auto-advance is off."""
        if self._closed or self.state is not DuelState.COMPLETE:
            return False
        self._pick_pair()
        return True

    def refresh_pool(self) -> None:
        """
        Re-check the pool after the task list changed elsewhere.

        Drops to the empty state (mid-round included) when fewer than two
        tasks remain. An idle screen is re-picked when it is empty or when
        one of its fighters left the pool.
        """
        if self._closed:
            return
        pool = self._current_pool()
        if len(pool) < 2:
            self._enter_empty()
        elif self.state is DuelState.IDLE:
            active_ids = {t.get("id") for t in pool}
            if not self.pair or any(i not in active_ids for i in self.pair.ids):
                self._pick_pair(pool)

    async def wait_until_ready(self) -> None:
        """Wait until the engine is idle or holding a completed round."""
        await self._ready.wait()

    def close(self) -> None:
        """Tear down the screen: cancel every pending timer."""
        self._closed = True
        self._round.cancel()
        self._xp_fade.cancel()
        self.combo.close()
        self.particles.close()
        self._ready.set()

    def snapshot(self) -> Dict[str, Any]:
        """Everything a renderer needs for the current frame."""
        combo = self.combo.state
        return {
            "state": self.state.value,
            "fighters": list(self.pair.fighters),
            "phases": [p.value for p in self.phases],
            "weight_changes": [
                {"task_id": w.task_id, "text": w.delta_text} if w else None
                for w in self.weight_changes
            ],
            "actions": list(self.actions),
            "combo": {"count": combo.count, "interaction_speed": combo.interaction_speed},
            "xp_display": self.xp_display,
            "particles": len(self.particles.particles),
            "needs_more_tasks": self.needs_more_tasks,
        }

    # -------------------- round steps --------------------

    def _resolve(self) -> None:
        winner_slot = self._winner_slot
        loser_slot = 1 - winner_slot

        pool = self._current_pool()
        if len(pool) < 2:
            self._enter_empty()
            return

        by_id = {t.get("id"): t for t in pool}
        winner = by_id.get(self.pair[winner_slot].get("id"))
        loser = by_id.get(self.pair[loser_slot].get("id"))
        if winner is None or loser is None:
            logger.info("duel.round_abandoned", reason="fighter_no_longer_active")
            self._pick_pair(pool)
            return

        cfg = self.config
        result = update_weights(
            winner.get("weight"),
            loser.get("weight"),
            win_boost=cfg.duel_win_boost,
            loss_penalty=cfg.duel_loss_penalty,
            weight_max=cfg.weight_max,
        )
        winner_variant = self.rng.randint(1, RESULT_VARIANTS)
        loser_variant = self.rng.randint(1, RESULT_VARIANTS)

        self.state = DuelState.RESOLVE
        self.phases[winner_slot] = AnimationPhase.win(winner_variant)
        self.phases[loser_slot] = AnimationPhase.lose(loser_variant)
        self.weight_changes[winner_slot] = WeightChangeDisplay(
            winner.get("id"), format_delta(cfg.duel_win_boost)
        )
        self.weight_changes[loser_slot] = WeightChangeDisplay(
            loser.get("id"), format_delta(-cfg.duel_loss_penalty)
        )
        self.actions[winner_slot] = WINNER_ACTION
        self.actions[loser_slot] = LOSER_ACTION

        self._write_weight(winner.get("id"), result.winner)
        self._write_weight(loser.get("id"), result.loser)

        combo_count = self.combo.count
        activity = build_duel_activity(
            winner,
            loser,
            result.winner,
            result.loser,
            cfg.duel_win_boost,
            cfg.duel_loss_penalty,
            combo_count,
        )
        self._record(activity)

        self.last_outcome = DuelOutcome(
            winner_id=winner.get("id"),
            loser_id=loser.get("id"),
            winner_weight=result.winner,
            loser_weight=result.loser,
            winner_change=cfg.duel_win_boost,
            loser_change=-cfg.duel_loss_penalty,
            winner_variant=winner_variant,
            loser_variant=loser_variant,
            combo_count=combo_count,
            activity=activity,
        )
        self.rounds_played += 1
        logger.info(
            "duel.resolved",
            winner=winner.get("id"),
            loser=loser.get("id"),
            winner_weight=result.winner,
            loser_weight=result.loser,
            combo=combo_count,
        )

        if cfg.confetti:
            self._run_effect(self.effects.fire_confetti, "confetti")

        delay = cfg.particle_delay_ms / 1000 / self.combo.speed_multiplier()
        self._round.schedule(delay, self._burst)

    def _burst(self) -> None:
        self.particles.burst(*self._loser_origin)
        self.state = DuelState.SETTLE
        self._round.schedule_at(
            self._round_started_at + self.config.settle_ms / 1000, self._settle
        )

    def _settle(self) -> None:
        self.weight_changes = [None, None]
        self.actions = [None, None]
        self._award_xp()

        if self.config.duel_auto_advance:
            self._pick_pair()
        else:
            self.state = DuelState.COMPLETE
            self._ready.set()

    # -------------------- helpers --------------------

    def _current_pool(self) -> List[Mapping[str, Any]]:
        try:
            return eligible_tasks(self.pool_provider())
        except Exception:
            logger.exception("duel.pool_unavailable")
            return []

    def _pick_pair(self, pool: Optional[List[Mapping[str, Any]]] = None) -> None:
        self._round.cancel()
        if pool is None:
            pool = self._current_pool()
        if len(pool) < 2:
            self._enter_empty()
            return

        self.needs_more_tasks = False
        self.pair = select_pair(
            pool,
            fairness_enabled=self.config.enable_weight_classes,
            tolerance=self.config.weight_class_tolerance,
            rng=self.rng,
            on_warning=lambda message: self._notify(message, "⚠️"),
        )
        self._reset_round()

    def _enter_empty(self) -> None:
        self._reset_round()
        self.pair = EMPTY_PAIR
        if not self.needs_more_tasks:
            self.needs_more_tasks = True
            logger.info("duel.not_enough_tasks")
            self._notify(NOT_ENOUGH_TASKS_MESSAGE, "🏁")

    def _reset_round(self) -> None:
        self._round.cancel()
        self.state = DuelState.IDLE
        self.phases = [AnimationPhase.NONE, AnimationPhase.NONE]
        self.weight_changes = [None, None]
        self.actions = [None, None]
        self._ready.set()

    def _write_weight(self, task_id: Any, weight: Any) -> None:
        try:
            result = self.task_update(task_id, {"weight": weight})
        except Exception:
            logger.exception("duel.task_update_failed", task_id=task_id)
            return
        if isinstance(result, dict) and result.get("success") is False:
            logger.warning("duel.task_update_rejected", task_id=task_id, error=result.get("error"))

    def _record(self, activity: Dict[str, Any]) -> None:
        try:
            self.record_activity(activity)
        except Exception:
            logger.exception("duel.record_activity_failed", activity_id=activity.get("id"))

    def _award_xp(self) -> None:
        if self.on_xp_change is None:
            return
        delta = self.xp_ledger.record()
        if not delta:
            return
        try:
            self.on_xp_change(delta)
        except Exception:
            logger.exception("duel.xp_update_failed", delta=delta)
            return
        self.xp_display = format_xp(delta)
        self._xp_fade.schedule(self.config.xp_display_ms / 1000, self._clear_xp)

    def _clear_xp(self) -> None:
        self.xp_display = None

    def _notify(self, message: str, icon: str) -> None:
        try:
            self.notifier(message, icon)
        except Exception:
            logger.exception("duel.notify_failed")

    def _run_effect(self, effect: Callable[[], None], name: str) -> None:
        try:
            effect()
        except Exception:
            logger.warning("duel.effect_failed", effect=name)


__all__ = ["DuelStateMachine"]
