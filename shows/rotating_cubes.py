"""A large cube surrounded by ten small cubes, all spinning."""
from __future__ import annotations

from typing import List

from rendering.primitives import create_box
from rendering.scene import Material, Mesh, create_entity, hex_color
from timeline.show import Show


class RotatingCubesShow(Show):
    SHOW_ID = "rotating-cubes"
    TITLE = "Rotating Cubes"
    STAGES = (("spin", 10.0),)
    SEED = 1

    SATELLITE_COUNT = 10
    SCATTER_EXTENT = 10.0
    # Radians per second.
    CENTER_SPIN = (0.625, 0.625)
    SATELLITE_SPIN = (1.25, 1.875)

    def build(self) -> None:
        self.cube = self.own(
            create_entity(
                create_box(2.0, 2.0, 2.0),
                Material(color=hex_color(0x6699FF), metalness=0.3, roughness=0.4),
                name="center",
            )
        )
        self.satellites: List[Mesh] = []
        half = self.SCATTER_EXTENT / 2.0
        for i in range(self.SATELLITE_COUNT):
            color = hex_color(int(0xFFFFFF * self.rng.random()))
            satellite = create_entity(
                create_box(0.5, 0.5, 0.5),
                Material(color=color, metalness=0.3, roughness=0.4),
                name=f"satellite-{i}",
            )
            satellite.set_position(
                self.rng.uniform(-half, half),
                self.rng.uniform(-half, half),
                self.rng.uniform(-half, half),
            )
            self.satellites.append(self.own(satellite))

    def stage_handlers(self):
        return (self._spin,)

    def reset(self) -> None:
        self._apply(self.elapsed)

    def _spin(self, progress: float) -> None:
        self._apply(self.elapsed)

    def _apply(self, time: float) -> None:
        self.cube.rotation[0] = time * self.CENTER_SPIN[0]
        self.cube.rotation[1] = time * self.CENTER_SPIN[1]
        for satellite in self.satellites:
            satellite.rotation[0] = time * self.SATELLITE_SPIN[0]
            satellite.rotation[1] = time * self.SATELLITE_SPIN[1]
