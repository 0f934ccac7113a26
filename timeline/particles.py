"""Fixed-capacity particle storage updated in bulk every tick."""
from __future__ import annotations

import math
import random
from typing import Optional, Tuple

import numpy as np

Vec3 = Tuple[float, float, float]

DEFAULT_GRAVITY: Vec3 = (0.0, -0.6, 0.0)
DEFAULT_DECAY = 2.0


def step_particle(
    position: Vec3,
    velocity: Vec3,
    life: float,
    dt: float,
    gravity: Vec3 = DEFAULT_GRAVITY,
    decay: float = DEFAULT_DECAY,
) -> Tuple[Vec3, Vec3, float]:
    """Advance a single particle; ``life <= 0`` marks it recyclable."""

    new_velocity = (
        velocity[0] + gravity[0] * dt,
        velocity[1] + gravity[1] * dt,
        velocity[2] + gravity[2] * dt,
    )
    new_position = (
        position[0] + new_velocity[0] * dt,
        position[1] + new_velocity[1] * dt,
        position[2] + new_velocity[2] * dt,
    )
    return new_position, new_velocity, life - decay * dt


class ParticleSet:
    """Particles packed into numpy arrays whose shapes never change.

    Slots with ``life <= 0`` are free and get reused by :meth:`emit`.
    """

    def __init__(
        self,
        capacity: int,
        *,
        gravity: Vec3 = DEFAULT_GRAVITY,
        decay: float = DEFAULT_DECAY,
    ) -> None:
        if capacity <= 0:
            raise ValueError("Particle capacity must be positive")
        self.capacity = capacity
        self.gravity = np.asarray(gravity, dtype=np.float32)
        self.decay = decay
        self.positions = np.zeros((capacity, 3), dtype=np.float32)
        self.velocities = np.zeros((capacity, 3), dtype=np.float32)
        self.life = np.zeros(capacity, dtype=np.float32)
        self.sizes = np.ones(capacity, dtype=np.float32)
        self._cursor = 0

    @property
    def alive(self) -> np.ndarray:
        return self.life > 0.0

    def alive_count(self) -> int:
        return int(np.count_nonzero(self.alive))

    def clear(self) -> None:
        self.life.fill(0.0)
        self.velocities.fill(0.0)
        self._cursor = 0

    def emit(
        self,
        origin: Vec3,
        count: int,
        rng: random.Random,
        *,
        speed_range: Tuple[float, float] = (0.1, 0.2),
        life: float = 1.0,
    ) -> int:
        """Spawn up to ``count`` particles radiating from ``origin``.

        Free slots are used first; once the set is full the oldest emissions are
        overwritten in ring order.
        """

        emitted = 0
        free = np.flatnonzero(~self.alive)
        for i in range(min(count, self.capacity)):
            if i < free.size:
                slot = int(free[i])
            else:
                slot = self._cursor
                self._cursor = (self._cursor + 1) % self.capacity
            theta = rng.random() * math.tau
            phi = rng.random() * math.tau
            speed = rng.uniform(*speed_range)
            self.positions[slot] = origin
            self.velocities[slot] = (
                math.cos(theta) * math.sin(phi) * speed,
                math.sin(theta) * math.sin(phi) * speed,
                math.cos(phi) * speed,
            )
            self.life[slot] = life
            emitted += 1
        return emitted

    def step(self, dt: float) -> None:
        """Vectorised :func:`step_particle` over every live slot."""

        alive = self.alive
        if not alive.any():
            return
        self.velocities[alive] += self.gravity * dt
        self.positions[alive] += self.velocities[alive] * dt
        self.life[alive] -= self.decay * dt
        expired = alive & (self.life <= 0.0)
        if expired.any():
            self.life[expired] = 0.0
            self.velocities[expired] = 0.0

    def recycle_outside(self, lower: Vec3, upper: Vec3) -> int:
        """Free every live particle outside the axis-aligned box."""

        low = np.asarray(lower, dtype=np.float32)
        high = np.asarray(upper, dtype=np.float32)
        outside = np.any((self.positions < low) | (self.positions > high), axis=1)
        mask = outside & self.alive
        count = int(np.count_nonzero(mask))
        if count:
            self.life[mask] = 0.0
            self.velocities[mask] = 0.0
        return count

    def scatter(
        self,
        rng: random.Random,
        lower: Vec3,
        upper: Vec3,
        life: Optional[float] = 1.0,
    ) -> None:
        """Fill every slot with a uniformly random position inside a box."""

        for i in range(self.capacity):
            self.positions[i] = (
                rng.uniform(lower[0], upper[0]),
                rng.uniform(lower[1], upper[1]),
                rng.uniform(lower[2], upper[2]),
            )
        self.velocities.fill(0.0)
        if life is not None:
            self.life.fill(life)
