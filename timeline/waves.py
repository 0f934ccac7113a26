"""Sinusoidal fields and smoothing helpers for perpetual motion effects."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence, Union

import numpy as np

ArrayLike = Union[float, np.ndarray]


@dataclass(frozen=True)
class WaveBand:
    """``amplitude * sin(frequency * coordinate + phase_speed * time)``.

    ``axis`` selects which vertex component feeds the band when the field is
    evaluated over a vertex buffer (0 = x, 1 = y, 2 = z).
    """

    amplitude: float
    frequency: float
    phase_speed: float
    axis: int = 0


def wave(coordinate: ArrayLike, time: float, band: WaveBand) -> ArrayLike:
    return band.amplitude * np.sin(band.frequency * coordinate + band.phase_speed * time)


def wave_field(
    coordinates: np.ndarray, time: float, bands: Sequence[WaveBand]
) -> np.ndarray:
    """Sum every band over an (N, 3) array of rest positions.

    Returns an (N,) array of displacements; depends only on the rest positions
    and ``time`` so repeated evaluation is exact.
    """

    coords = np.asarray(coordinates, dtype=np.float64)
    total = np.zeros(coords.shape[0], dtype=np.float64)
    for band in bands:
        total += wave(coords[:, band.axis], time, band)
    return total


def approach(current: float, target: float, rate: float) -> float:
    """One step of exponential smoothing of ``current`` toward ``target``."""

    return current + (target - current) * rate


def twinkle(time: float, phases: np.ndarray, speed: float, depth: float = 0.2) -> np.ndarray:
    """Per-element multiplier oscillating around 1 with staggered phases."""

    return 1.0 - depth + np.sin(time * speed + phases) * depth


def bob(time: float, speed: float, amplitude: float, phase: float = 0.0) -> float:
    return math.sin(time * speed + phase) * amplitude
