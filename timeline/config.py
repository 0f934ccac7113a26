"""Shared constants and host configuration for the show engine."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

Vec3 = Tuple[float, float, float]

# Nominal frame step used when a show is driven at a constant rate.
NOMINAL_FRAME_DELTA = 0.016
# Measured frame deltas above this are clamped so a stalled window does not
# fast-forward a show through whole stages.
MAX_FRAME_DELTA = 0.25

DEFAULT_CAMERA_POSITION: Vec3 = (0.0, 0.0, 10.0)
DEFAULT_CAMERA_TARGET: Vec3 = (0.0, 0.0, 0.0)
DEFAULT_CAMERA_FOV = 35.0

BACKGROUND_COLOR = (0.0, 0.0, 0.0)

# ``None`` selects pygame's bundled default typeface.
DEFAULT_FONT_PATH: Optional[str] = None
FONT_RASTER_SIZE = 96


@dataclass
class EngineConfig:
    """Window and loop settings consumed by ``main.run``."""

    window_size: Tuple[int, int] = (1280, 720)
    fullscreen: bool = False
    target_fps: int = 60
    fixed_delta: Optional[float] = None
    start_show: str = "rotating-cubes"
    fov: float = DEFAULT_CAMERA_FOV
    caption: str = "Showreel"

    def frame_delta(self, measured: float) -> float:
        """Return the delta fed to the switcher for a measured frame time."""

        if self.fixed_delta is not None:
            return self.fixed_delta
        return min(max(measured, 0.0), MAX_FRAME_DELTA)
