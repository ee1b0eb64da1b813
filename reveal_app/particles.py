"""
Short-lived particles emitted from the revealing edge of the title.

Each particle flies out in an upward cone, falls back under a light
gravity, loses some horizontal speed to drag, shrinks and fades until its
life runs out. There are no collisions and no forces between particles.
"""

from __future__ import annotations

import math
import random
import sys
from dataclasses import dataclass
from typing import List, Optional

from reveal_app.reveal_config import RevealConfig
from reveal_app.surface import DrawingSurface, HslaColor


# ---------------------------------------------------------------------------
# Tuning constants
# ---------------------------------------------------------------------------

DESKTOP_MAX_PARTICLES = 1300
MOBILE_MAX_PARTICLES = 850

# Emission cone: straight up, +/- half of this spread (radians).
CONE_SPREAD = 1.2
# Initial speed range in px/s, before the particle_speed multiplier.
SPEED_MIN = 34.0
SPEED_RANGE = 88.0
# Life range as a fraction of the configured lifespan.
LIFE_MIN = 0.7
LIFE_RANGE = 0.7
SIZE_MIN = 0.45
SIZE_RANGE = 0.95
ALPHA_MIN = 0.6
ALPHA_RANGE = 0.5
HUE_MIN = 230.0
HUE_RANGE = 95.0

GRAVITY = 30.0  # px/s^2, scaled by particle_speed
HORIZONTAL_DRAG = 0.993  # applied once per step
MIN_RADIUS = 0.4


def max_particles_for_device(mobile: Optional[bool] = None) -> int:
    """
    Return the particle cap for the current device class.

    When *mobile* is None the class is guessed from the platform.
    """
    if mobile is None:
        mobile = sys.platform in ("android", "ios")
    return MOBILE_MAX_PARTICLES if mobile else DESKTOP_MAX_PARTICLES


@dataclass
class Particle:
    """
    Single emitted particle.

    Positions are in logical canvas pixels, velocities in px/s, life in ms.
    """

    x: float
    y: float
    vx: float
    vy: float
    size: float
    base_alpha: float
    life: float
    life_max: float
    hue: float

    @property
    def fade(self) -> float:
        """Remaining life fraction in (0, 1]."""
        return self.life / self.life_max


class ParticlePool:
    """
    Bounded collection of live particles.

    spawn() requests beyond max_particles are truncated, never queued.
    The random source can be replaced (any object with a random() method)
    to make spawns reproducible in tests.
    """

    def __init__(self, max_particles: int, rng: Optional[random.Random] = None) -> None:
        if max_particles < 0:
            raise ValueError(f"max_particles must be >= 0, got {max_particles}")
        self.max_particles: int = int(max_particles)
        self._rng = rng if rng is not None else random.Random()
        self.particles: List[Particle] = []

    def __len__(self) -> int:
        return len(self.particles)

    def clear(self) -> None:
        self.particles = []

    def spawn(self, x: float, y: float, count: int, config: RevealConfig) -> int:
        """
        Emit up to *count* particles at (x, y).

        Returns the number of particles actually created.
        """
        room = self.max_particles - len(self.particles)
        if count <= 0 or room <= 0:
            return 0

        rnd = self._rng.random
        spawn_count = min(int(count), room)
        for _ in range(spawn_count):
            angle = -math.pi / 2.0 + (rnd() - 0.5) * CONE_SPREAD
            speed = (SPEED_MIN + rnd() * SPEED_RANGE) * config.particle_speed
            life = config.lifespan * (LIFE_MIN + rnd() * LIFE_RANGE)
            self.particles.append(
                Particle(
                    x=x,
                    y=y,
                    vx=math.cos(angle) * speed,
                    vy=math.sin(angle) * speed,
                    size=config.size * (SIZE_MIN + rnd() * SIZE_RANGE),
                    base_alpha=config.opacity * (ALPHA_MIN + rnd() * ALPHA_RANGE),
                    life=life,
                    life_max=life,
                    hue=HUE_MIN + rnd() * HUE_RANGE,
                )
            )
        return spawn_count

    def step(
        self,
        dt_ms: float,
        config: RevealConfig,
        surface: Optional[DrawingSurface] = None,
    ) -> None:
        """
        Advance every particle by *dt_ms* and drop the expired ones.

        Surviving particles are drawn on *surface* in the same pass, so the
        pool is only traversed once per frame.
        """
        dt_s = dt_ms / 1000.0
        gravity = GRAVITY * config.particle_speed * dt_s
        survivors: List[Particle] = []

        for p in self.particles:
            p.life -= dt_ms
            if p.life <= 0.0:
                continue

            t = p.fade
            p.x += p.vx * dt_s
            p.y += p.vy * dt_s
            p.vy += gravity
            p.vx *= HORIZONTAL_DRAG

            if surface is not None:
                surface.fill_circle(
                    p.x,
                    p.y,
                    max(MIN_RADIUS, p.size * (0.5 + 0.5 * t)),
                    HslaColor(hue=p.hue, saturation=0.95, lightness=0.66, alpha=p.base_alpha * t),
                )

            survivors.append(p)

        self.particles = survivors
