"""A metallic torus tumbling inside a slowly turning cloud of points."""
from __future__ import annotations

import numpy as np

from rendering.primitives import create_point_cloud, create_torus
from rendering.scene import Material, create_entity, hex_color
from timeline.show import Show


class TorusFieldShow(Show):
    SHOW_ID = "torus-field"
    TITLE = "Torus Field"
    STAGES = (("tumble", 12.0),)
    SEED = 2

    POINT_COUNT = 1000
    FIELD_EXTENT = 15.0
    TUMBLE_SPEED = (0.3125, 0.1875)
    FIELD_SPEED = 0.0625

    def build(self) -> None:
        self.torus = self.own(
            create_entity(
                create_torus(3.0, 1.0, 16, 100),
                Material(color=hex_color(0xFF5533), metalness=0.7, roughness=0.2),
                name="torus",
            )
        )
        half = self.FIELD_EXTENT / 2.0
        points = np.array(
            [
                [self.rng.uniform(-half, half) for _ in range(3)]
                for _ in range(self.POINT_COUNT)
            ],
            dtype=np.float32,
        )
        self.field = self.own(
            create_entity(
                create_point_cloud(points),
                Material(color=(1.0, 1.0, 1.0), point_size=2.0, lit=False),
                kind="points",
                name="field",
            )
        )

    def stage_handlers(self):
        return (self._tumble,)

    def reset(self) -> None:
        self._tumble(0.0)

    def _tumble(self, progress: float) -> None:
        time = self.elapsed
        self.torus.rotation[0] = time * self.TUMBLE_SPEED[0]
        self.torus.rotation[1] = time * self.TUMBLE_SPEED[1]
        self.field.rotation[1] = time * self.FIELD_SPEED
