"""A subdivided flag rippling in front of a star field."""
from __future__ import annotations

import math

import numpy as np

from rendering.primitives import create_plane, create_point_cloud
from rendering.scene import Material, create_entity, hex_color
from timeline.show import Show
from timeline.waves import WaveBand, wave_field


class WavingFlagShow(Show):
    SHOW_ID = "waving-flag"
    TITLE = "Waving Flag"
    STAGES = (("wave", 2.0 * math.pi / 0.3125),)
    SEED = 4

    FLAG_SIZE = (10.0, 6.0)
    FLAG_SEGMENTS = 32
    # Wave time advances 3.125 units per second.
    TIME_SCALE = 3.125
    WAVE_BANDS = (
        WaveBand(amplitude=0.5, frequency=0.5, phase_speed=0.5, axis=0),
        WaveBand(amplitude=0.25, frequency=1.0, phase_speed=1.0, axis=0),
        WaveBand(amplitude=0.1, frequency=2.0, phase_speed=0.7, axis=1),
    )
    STAR_COUNT = 500
    STAR_EXTENT = 100.0
    STAR_SPIN = 0.0625

    def build(self) -> None:
        width, height = self.FLAG_SIZE
        geometry = create_plane(width, height, self.FLAG_SEGMENTS, self.FLAG_SEGMENTS)
        self.rest_positions = geometry.positions.copy()
        self.flag = self.own(
            create_entity(
                geometry,
                Material(
                    color=hex_color(0x2288FF), metalness=0.2, roughness=0.8, double_sided=True
                ),
                name="flag",
            )
        )

        half = self.STAR_EXTENT / 2.0
        stars = np.array(
            [
                (
                    self.rng.uniform(-half, half),
                    self.rng.uniform(-half, half),
                    self.rng.uniform(-half, half) - 50.0,
                )
                for _ in range(self.STAR_COUNT)
            ],
            dtype=np.float32,
        )
        sizes = np.array([self.rng.random() * 2.0 for _ in range(self.STAR_COUNT)])
        self.stars = self.own(
            create_entity(
                create_point_cloud(stars, sizes),
                Material(color=(1.0, 1.0, 1.0), point_size=1.5, lit=False),
                kind="points",
                name="stars",
            )
        )

    def stage_handlers(self):
        return (self._wave,)

    def reset(self) -> None:
        self._wave(0.0)

    def _wave(self, progress: float) -> None:
        t = self.elapsed * self.TIME_SCALE
        geometry = self.flag.geometry
        geometry.positions[:, 2] = wave_field(self.rest_positions, t, self.WAVE_BANDS)
        geometry.compute_vertex_normals()
        geometry.mark_dirty()
        self.flag.rotation[1] = math.sin(t * 0.1) * 0.2
        self.stars.rotation[1] = self.elapsed * self.STAR_SPIN
