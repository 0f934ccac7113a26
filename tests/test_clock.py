"""Tests for the per-show clock and host frame-delta clamping."""
from __future__ import annotations

import math

import pytest

from timeline.clock import Clock
from timeline.config import MAX_FRAME_DELTA, EngineConfig


def test_advance_accumulates_explicit_deltas():
    """Each advance adds its delta and counts a tick."""
    clock = Clock()
    clock.advance(0.5)
    assert clock.advance(0.25) == pytest.approx(0.75)
    assert clock.ticks == 2


def test_fixed_delta_used_without_argument():
    """advance() with no argument steps by the fixed delta."""
    clock = Clock(fixed_delta=0.016)
    for _ in range(10):
        clock.advance()
    assert clock.elapsed == pytest.approx(0.16)


def test_explicit_delta_overrides_fixed_delta():
    """An explicit dt always wins over the configured fixed delta."""
    clock = Clock(fixed_delta=0.016)
    assert clock.advance(1.0) == pytest.approx(1.0)


def test_advance_without_any_delta_fails():
    """A clock with no fixed delta needs an explicit dt."""
    with pytest.raises(ValueError):
        Clock().advance()


@pytest.mark.parametrize("dt", [-0.1, math.nan, math.inf])
def test_invalid_deltas_rejected(dt):
    """Negative or non-finite deltas would break monotonic time."""
    clock = Clock()
    with pytest.raises(ValueError):
        clock.advance(dt)
    assert clock.elapsed == 0.0


def test_zero_delta_is_allowed():
    """A zero step is a valid (paused) frame."""
    clock = Clock()
    assert clock.advance(0.0) == 0.0
    assert clock.ticks == 1


def test_invalid_fixed_delta_rejected():
    """Fixed deltas must be positive."""
    with pytest.raises(ValueError):
        Clock(fixed_delta=0.0)


def test_reset_returns_to_zero():
    """reset clears both elapsed time and the tick count."""
    clock = Clock()
    clock.advance(3.0)
    clock.reset()
    assert clock.elapsed == 0.0
    assert clock.ticks == 0


def test_frame_delta_clamps_measured_time():
    """Measured host deltas are clamped to the configured maximum."""
    config = EngineConfig()
    assert config.frame_delta(0.02) == pytest.approx(0.02)
    assert config.frame_delta(5.0) == MAX_FRAME_DELTA
    assert config.frame_delta(-1.0) == 0.0


def test_frame_delta_prefers_fixed_delta():
    """A configured fixed delta replaces the measured frame time."""
    config = EngineConfig(fixed_delta=0.016)
    assert config.frame_delta(0.5) == pytest.approx(0.016)
