"""Tests for easing curves and staggered reveal helpers."""
from __future__ import annotations

import pytest

from timeline.easing import (
    EASINGS,
    clamp01,
    ease_in_out_cubic,
    ease_out_back,
    ease_out_cubic,
    lerp,
    local_progress,
    pulse,
    ramp,
    revealed_count,
    smoothstep,
)


def test_clamp01_limits_range():
    """Values outside [0, 1] are clamped."""
    assert clamp01(-0.5) == 0.0
    assert clamp01(0.25) == 0.25
    assert clamp01(3.0) == 1.0


@pytest.mark.parametrize("name", sorted(EASINGS))
def test_easings_fix_endpoints(name):
    """Every easing maps 0 to 0 and 1 to 1."""
    easing = EASINGS[name]
    assert easing(0.0) == pytest.approx(0.0)
    assert easing(1.0) == pytest.approx(1.0)


def test_ease_in_out_cubic_is_symmetric():
    """The in-out curve passes through the midpoint."""
    assert ease_in_out_cubic(0.5) == pytest.approx(0.5)
    assert ease_in_out_cubic(0.25) == pytest.approx(1.0 - ease_in_out_cubic(0.75))


def test_ease_out_cubic_front_loaded():
    """Ease-out moves faster than linear early on."""
    assert ease_out_cubic(0.25) > 0.25


def test_ease_out_back_overshoots():
    """Back easing overshoots 1 before settling."""
    assert max(ease_out_back(i / 100.0) for i in range(101)) > 1.0


def test_lerp_and_smoothstep():
    """lerp interpolates linearly; smoothstep clamps outside its edges."""
    assert lerp(2.0, 4.0, 0.5) == pytest.approx(3.0)
    assert smoothstep(0.0, 1.0, -1.0) == 0.0
    assert smoothstep(0.0, 1.0, 0.5) == pytest.approx(0.5)
    assert smoothstep(0.0, 1.0, 2.0) == 1.0


def test_ramp_maps_sub_range():
    """ramp rescales a slice of stage progress onto [0, 1]."""
    assert ramp(0.1, 0.2, 0.6) == 0.0
    assert ramp(0.4, 0.2, 0.6) == pytest.approx(0.5)
    assert ramp(0.9, 0.2, 0.6) == 1.0


def test_pulse_oscillates_around_base():
    """pulse starts at its base value."""
    assert pulse(0.0, 3.0, 0.2, base=0.8) == pytest.approx(0.8)


def test_revealed_count_uses_floor():
    """Only entities whose slice has fully elapsed count as revealed."""
    assert revealed_count(0.0, 12) == 0
    assert revealed_count(0.5, 12) == 6
    assert revealed_count(0.99, 12) == 11
    assert revealed_count(1.0, 12) == 12
    assert revealed_count(0.5, 0) == 0


def test_local_progress_of_in_flight_entity():
    """The entity right after the revealed ones is partway through its slice."""
    progress = 0.5 + 0.5 / 12
    count = revealed_count(progress, 12)
    assert count == 6
    assert local_progress(progress, count, 12) == pytest.approx(0.5)
    assert local_progress(progress, count + 1, 12) == 0.0
    assert local_progress(progress, 0, 12) == 1.0
