"""Per-show elapsed-time clock."""
from __future__ import annotations

import math
from typing import Optional


class Clock:
    """Monotonic accumulator of frame deltas.

    ``fixed_delta`` simulates a constant frame rate; an explicit ``dt`` passed
    to :meth:`advance` always takes precedence.
    """

    def __init__(self, fixed_delta: Optional[float] = None) -> None:
        if fixed_delta is not None and not fixed_delta > 0.0:
            raise ValueError("fixed_delta must be positive")
        self._fixed_delta = fixed_delta
        self._elapsed = 0.0
        self._ticks = 0

    @property
    def elapsed(self) -> float:
        return self._elapsed

    @property
    def ticks(self) -> int:
        return self._ticks

    @property
    def fixed_delta(self) -> Optional[float]:
        return self._fixed_delta

    def advance(self, dt: Optional[float] = None) -> float:
        """Add one frame worth of time and return the new elapsed value."""

        if dt is None:
            if self._fixed_delta is None:
                raise ValueError("Clock has no fixed delta; pass dt explicitly")
            dt = self._fixed_delta
        if not math.isfinite(dt) or dt < 0.0:
            raise ValueError(f"Frame delta must be a finite, non-negative number: {dt!r}")
        self._elapsed += dt
        self._ticks += 1
        return self._elapsed

    def reset(self) -> None:
        self._elapsed = 0.0
        self._ticks = 0
