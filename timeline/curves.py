"""Parametric curves used for entity motion paths and camera moves."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Tuple

import numpy as np

from .easing import clamp01

Vec3 = Tuple[float, float, float]


def _as_point(values: np.ndarray) -> Vec3:
    return (float(values[0]), float(values[1]), float(values[2]))


class _Curve:
    def point_at(self, t: float) -> Vec3:
        raise NotImplementedError

    def sample(self, count: int) -> np.ndarray:
        """Return ``count + 1`` evenly parameterised points as an (N, 3) array."""

        if count < 1:
            raise ValueError("count must be at least 1")
        return np.array(
            [self.point_at(i / count) for i in range(count + 1)], dtype=np.float32
        )


@dataclass(frozen=True)
class LineSegment(_Curve):
    start: Vec3
    end: Vec3

    def point_at(self, t: float) -> Vec3:
        t = clamp01(t)
        a = np.asarray(self.start, dtype=np.float64)
        b = np.asarray(self.end, dtype=np.float64)
        return _as_point(a + (b - a) * t)


@dataclass(frozen=True)
class QuadraticBezier(_Curve):
    start: Vec3
    control: Vec3
    end: Vec3

    def point_at(self, t: float) -> Vec3:
        t = clamp01(t)
        inv = 1.0 - t
        p0 = np.asarray(self.start, dtype=np.float64)
        p1 = np.asarray(self.control, dtype=np.float64)
        p2 = np.asarray(self.end, dtype=np.float64)
        return _as_point(inv * inv * p0 + 2.0 * inv * t * p1 + t * t * p2)


@dataclass(frozen=True)
class CubicBezier(_Curve):
    start: Vec3
    control1: Vec3
    control2: Vec3
    end: Vec3

    def point_at(self, t: float) -> Vec3:
        t = clamp01(t)
        inv = 1.0 - t
        p0 = np.asarray(self.start, dtype=np.float64)
        p1 = np.asarray(self.control1, dtype=np.float64)
        p2 = np.asarray(self.control2, dtype=np.float64)
        p3 = np.asarray(self.end, dtype=np.float64)
        point = (
            inv ** 3 * p0
            + 3.0 * inv * inv * t * p1
            + 3.0 * inv * t * t * p2
            + t ** 3 * p3
        )
        return _as_point(point)


def orbit_point(angle: float, radius: float, height: float = 0.0) -> Vec3:
    """Point on a horizontal circle around the origin, angle measured from +Z."""

    return (math.sin(angle) * radius, height, math.cos(angle) * radius)
