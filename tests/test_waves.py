"""Tests for wave fields and smoothing helpers."""
from __future__ import annotations

import math

import numpy as np
import pytest

from timeline.waves import WaveBand, approach, bob, twinkle, wave, wave_field


def test_wave_single_band():
    """A band is a plain sine of coordinate and time."""
    band = WaveBand(amplitude=0.5, frequency=1.0, phase_speed=2.0)
    assert wave(math.pi / 2.0, 0.0, band) == pytest.approx(0.5)
    assert wave(0.0, math.pi / 4.0, band) == pytest.approx(0.5)


def test_wave_field_sums_bands_per_axis():
    """Each band reads its own vertex axis and the results add up."""
    rest = np.array([[math.pi / 2.0, 0.0, 0.0], [0.0, math.pi / 2.0, 0.0]])
    bands = [WaveBand(1.0, 1.0, 0.0, axis=0), WaveBand(0.25, 1.0, 0.0, axis=1)]
    field = wave_field(rest, 0.0, bands)
    assert field == pytest.approx([1.0, 0.25])


def test_wave_field_is_repeatable():
    """Evaluating twice at the same time gives identical displacements."""
    rest = np.random.default_rng(3).uniform(-5.0, 5.0, size=(50, 3))
    bands = [WaveBand(0.5, 0.5, 0.5), WaveBand(0.1, 2.0, 0.7, axis=1)]
    assert np.array_equal(wave_field(rest, 1.7, bands), wave_field(rest, 1.7, bands))


def test_approach_moves_fraction_of_gap():
    """approach closes the given fraction of the remaining distance."""
    assert approach(0.0, -0.6, 0.05) == pytest.approx(-0.03)
    value = 0.0
    for _ in range(500):
        value = approach(value, 1.0, 0.1)
    assert value == pytest.approx(1.0)


def test_twinkle_stays_in_band():
    """Twinkle multipliers oscillate within 1 - 2 * depth and 1."""
    phases = np.linspace(0.0, math.tau, 64)
    values = twinkle(2.0, phases, 3.0, depth=0.2)
    assert values.shape == (64,)
    assert values.min() >= 0.6 - 1e-9
    assert values.max() <= 1.0 + 1e-9


def test_bob_amplitude():
    """bob peaks at its amplitude a quarter period in."""
    assert bob(math.pi / 2.0, 1.0, 0.5) == pytest.approx(0.5)
    assert bob(0.0, 1.0, 0.5, phase=math.pi / 2.0) == pytest.approx(0.5)
