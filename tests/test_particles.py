"""Tests for the fixed-capacity particle set."""
from __future__ import annotations

import random

import numpy as np
import pytest

from timeline.particles import ParticleSet, step_particle


def test_step_particle_applies_gravity_and_decay():
    """One step integrates velocity, then position, and burns life."""
    position, velocity, life = step_particle(
        (0.0, 0.0, 0.0), (1.0, 0.0, 0.0), 1.0, 0.5, gravity=(0.0, -2.0, 0.0), decay=2.0
    )
    assert velocity == pytest.approx((1.0, -1.0, 0.0))
    assert position == pytest.approx((0.5, -0.5, 0.0))
    assert life == pytest.approx(0.0)


def test_capacity_must_be_positive():
    """An empty particle set is a configuration error."""
    with pytest.raises(ValueError):
        ParticleSet(0)


def test_emit_fills_free_slots():
    """Emitted particles start alive at the origin."""
    particles = ParticleSet(8)
    emitted = particles.emit((1.0, 2.0, 3.0), 3, random.Random(1))
    assert emitted == 3
    assert particles.alive_count() == 3
    alive = particles.positions[particles.alive]
    assert np.allclose(alive, [1.0, 2.0, 3.0])


def test_emit_never_grows_past_capacity():
    """Emission beyond capacity recycles slots instead of allocating."""
    particles = ParticleSet(4)
    rng = random.Random(2)
    particles.emit((0.0, 0.0, 0.0), 3, rng)
    particles.emit((0.0, 0.0, 0.0), 3, rng)
    assert particles.positions.shape == (4, 3)
    assert particles.alive_count() == 4


def test_emit_speed_within_range():
    """Initial speeds fall inside the requested range."""
    particles = ParticleSet(32)
    particles.emit((0.0, 0.0, 0.0), 32, random.Random(3), speed_range=(6.0, 12.0))
    speeds = np.linalg.norm(particles.velocities, axis=1)
    assert speeds.min() >= 6.0 - 1e-4
    assert speeds.max() <= 12.0 + 1e-4


def test_step_expires_particles():
    """Particles whose life runs out become free slots with zero velocity."""
    particles = ParticleSet(4, decay=2.0)
    particles.emit((0.0, 0.0, 0.0), 2, random.Random(4), life=1.0)
    particles.step(0.25)
    assert particles.alive_count() == 2
    particles.step(0.3)
    assert particles.alive_count() == 0
    assert not particles.velocities.any()


def test_step_moves_live_particles_only():
    """Dead slots keep their positions while live ones fall under gravity."""
    particles = ParticleSet(2, gravity=(0.0, -10.0, 0.0), decay=0.1)
    particles.emit((0.0, 0.0, 0.0), 1, random.Random(5), speed_range=(0.0, 0.0))
    particles.step(0.1)
    assert particles.positions[0][1] == pytest.approx(-0.1)
    assert particles.positions[1][1] == 0.0


def test_clear_frees_everything():
    """clear leaves every slot free."""
    particles = ParticleSet(4)
    particles.emit((0.0, 0.0, 0.0), 4, random.Random(6))
    particles.clear()
    assert particles.alive_count() == 0


def test_recycle_outside_box():
    """Particles that leave the bounds are freed."""
    particles = ParticleSet(3)
    particles.scatter(random.Random(7), (-1.0, -1.0, -1.0), (1.0, 1.0, 1.0))
    particles.positions[0] = (5.0, 0.0, 0.0)
    assert particles.recycle_outside((-2.0, -2.0, -2.0), (2.0, 2.0, 2.0)) == 1
    assert particles.alive_count() == 2


def test_scatter_is_seed_deterministic():
    """The same seed produces the same scattered cloud."""
    first = ParticleSet(16)
    second = ParticleSet(16)
    first.scatter(random.Random(9), (-5.0, -5.0, -5.0), (5.0, 5.0, 5.0))
    second.scatter(random.Random(9), (-5.0, -5.0, -5.0), (5.0, 5.0, 5.0))
    assert np.array_equal(first.positions, second.positions)
