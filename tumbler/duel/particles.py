"""
Tool: Duel Particles
Purpose: Loss-burst particle kinematics for the losing fighter

A burst fires PARTICLE_COUNT particles evenly around a circle with a
random speed each. Every frame they drift, fall under a constant gravity
and fade; faded or off-screen particles are dropped. The simulator only
produces positions. Drawing them is up to whoever listens to on_frame.

Usage:
    from tumbler.duel.particles import ParticleSimulator

    sim = ParticleSimulator(on_frame=redraw)
    sim.burst(240.0, 380.0)     # steps every 16ms until the set is empty
"""

import itertools
import math
import random
from dataclasses import replace
from typing import Callable, List, Optional

import structlog

from .models import Particle
from .timers import TimerSlot

logger = structlog.get_logger(__name__)

PARTICLE_COUNT = 20
MIN_SPEED = 50.0
MAX_SPEED = 100.0
FRAME_INTERVAL = 0.016  # seconds
VELOCITY_SCALE = 0.1
GRAVITY = 2.0
FADE_PER_FRAME = 0.02
DEFAULT_VIEWPORT_HEIGHT = 1000.0

_particle_ids = itertools.count(1)


def burst(origin_x: float, origin_y: float, rng: Optional[random.Random] = None) -> List[Particle]:
    """Spawn PARTICLE_COUNT particles at the origin, spread evenly by angle."""
    rng = rng or random
    particles = []
    for i in range(PARTICLE_COUNT):
        angle = 2 * math.pi * i / PARTICLE_COUNT
        speed = rng.uniform(MIN_SPEED, MAX_SPEED)
        particles.append(
            Particle(
                id=next(_particle_ids),
                x=origin_x,
                y=origin_y,
                vx=math.cos(angle) * speed,
                vy=math.sin(angle) * speed,
                life=1.0,
            )
        )
    return particles


def step(
    particles: List[Particle],
    dt: float = FRAME_INTERVAL,
    viewport_height: float = DEFAULT_VIEWPORT_HEIGHT,
) -> List[Particle]:
    """
    Advance every particle by ``dt`` seconds and drop the dead ones.

    Motion is defined per frame; ``dt`` is expressed in frames of
    FRAME_INTERVAL, so one call at the normal cadence is one frame.
    """
    frames = dt / FRAME_INTERVAL
    survivors = []
    for p in particles:
        moved = replace(
            p,
            x=p.x + p.vx * VELOCITY_SCALE * frames,
            y=p.y + p.vy * VELOCITY_SCALE * frames,
            vy=p.vy + GRAVITY * frames,
            life=p.life - FADE_PER_FRAME * frames,
        )
        if moved.life <= 0 or moved.y >= viewport_height:
            continue
        survivors.append(moved)
    return survivors


class ParticleSimulator:
    """Owns the live particle set and its frame timer."""

    def __init__(
        self,
        viewport_height: float = DEFAULT_VIEWPORT_HEIGHT,
        frame_interval: float = FRAME_INTERVAL,
        on_frame: Optional[Callable[[List[Particle]], None]] = None,
        rng: Optional[random.Random] = None,
    ):
        self.viewport_height = viewport_height
        self.frame_interval = frame_interval
        self.on_frame = on_frame
        self.rng = rng
        self.particles: List[Particle] = []
        self._ticker = TimerSlot("particles")

    @property
    def running(self) -> bool:
        return self._ticker.pending

    def burst(self, origin_x: float, origin_y: float) -> List[Particle]:
        spawned = burst(origin_x, origin_y, self.rng)
        self.particles = self.particles + spawned
        if not self._ticker.pending:
            self._ticker.schedule(self.frame_interval, self._tick)
        return spawned

    def close(self) -> None:
        self._ticker.cancel()
        self.particles = []

    def _tick(self) -> None:
        self.particles = step(self.particles, self.frame_interval, self.viewport_height)
        if self.on_frame is not None:
            try:
                self.on_frame(list(self.particles))
            except Exception:
                logger.exception("particles.frame_callback_failed", live=len(self.particles))
        if self.particles:
            self._ticker.schedule(self.frame_interval, self._tick)


__all__ = [
    "FRAME_INTERVAL",
    "GRAVITY",
    "PARTICLE_COUNT",
    "ParticleSimulator",
    "burst",
    "step",
]
