"""Easing curves and progress helpers shared by every show."""
from __future__ import annotations

import math
from typing import Callable, Dict


def clamp01(value: float) -> float:
    """Clamp a floating point value to the inclusive range [0, 1]."""

    if value <= 0.0:
        return 0.0
    if value >= 1.0:
        return 1.0
    return value


def lerp(a: float, b: float, t: float) -> float:
    return a + (b - a) * t


def smoothstep(edge0: float, edge1: float, x: float) -> float:
    if edge0 == edge1:
        return 0.0 if x < edge0 else 1.0
    t = clamp01((x - edge0) / (edge1 - edge0))
    return t * t * (3.0 - 2.0 * t)


def linear(x: float) -> float:
    return x


def ease_in_cubic(x: float) -> float:
    return x * x * x


def ease_out_cubic(x: float) -> float:
    return 1.0 - (1.0 - x) ** 3


def ease_in_out_cubic(x: float) -> float:
    if x < 0.5:
        return 4.0 * x * x * x
    return 1.0 - (-2.0 * x + 2.0) ** 3 / 2.0


def ease_out_back(x: float) -> float:
    """Overshoots slightly past 1 before settling; used for pop-in scaling."""

    c1 = 1.70158
    c3 = c1 + 1.0
    return 1.0 + c3 * (x - 1.0) ** 3 + c1 * (x - 1.0) ** 2


EASINGS: Dict[str, Callable[[float], float]] = {
    "linear": linear,
    "ease_in_cubic": ease_in_cubic,
    "ease_out_cubic": ease_out_cubic,
    "ease_in_out_cubic": ease_in_out_cubic,
    "ease_out_back": ease_out_back,
}


def ramp(progress: float, start: float, end: float) -> float:
    """Map ``progress`` within ``[start, end]`` of a stage onto [0, 1]."""

    if end <= start:
        return 1.0 if progress >= end else 0.0
    return clamp01((progress - start) / (end - start))


def pulse(time: float, speed: float, amount: float, base: float = 1.0) -> float:
    return base + math.sin(time * speed) * amount


# ----------------------------------------------------------------------
# Staggered reveal of N sub-entities across one stage
def revealed_count(progress: float, count: int) -> int:
    """Number of sub-entities that have fully arrived at ``progress``."""

    if count <= 0:
        return 0
    return max(0, min(count, int(math.floor(progress * count))))


def local_progress(progress: float, index: int, count: int) -> float:
    """Progress of sub-entity ``index`` within its own slice of the stage."""

    if count <= 0:
        return 0.0
    return clamp01(progress * count - index)
