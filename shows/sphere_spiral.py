"""One hundred spheres on a rising spiral, bobbing and pulsing around a moving light."""
from __future__ import annotations

import math
from typing import List

from rendering.primitives import create_sphere
from rendering.scene import POINT, Light, Material, Mesh, create_entity, hsl_color
from timeline.easing import pulse
from timeline.show import Show
from timeline.waves import bob


class SphereSpiralShow(Show):
    SHOW_ID = "sphere-spiral"
    TITLE = "Sphere Spiral"
    STAGES = (("drift", 2.0 * math.pi / 0.625),)
    SEED = 3

    SPHERE_COUNT = 100
    ANGLE_STEP = 0.2
    RADIUS_STEP = 0.1
    RISE_STEP = 0.05
    # Animation time advances at 0.625 units per second.
    TIME_SCALE = 0.625

    def build(self) -> None:
        self.spheres: List[Mesh] = []
        for i in range(self.SPHERE_COUNT):
            material = Material(
                color=hsl_color((i % 20) / 20.0, 1.0, 0.5), metalness=0.4, roughness=0.6
            )
            sphere = create_entity(create_sphere(0.2, 32, 32), material, name=f"sphere-{i}")
            angle = i * self.ANGLE_STEP
            radius = self.RADIUS_STEP * i
            sphere.set_position(
                math.cos(angle) * radius, self.RISE_STEP * i, math.sin(angle) * radius
            )
            self.spheres.append(self.own(sphere))
        self.light = self.own(Light(POINT, intensity=15.0, distance=50.0, name="orbiting-light"))

    def stage_handlers(self):
        return (self._drift,)

    def reset(self) -> None:
        self._drift(0.0)

    def _drift(self, progress: float) -> None:
        t = self.elapsed * self.TIME_SCALE
        for i, sphere in enumerate(self.spheres):
            sphere.position[1] = bob(t, 1.0, 0.5, phase=i * 0.1) + self.RISE_STEP * i
            sphere.set_scale(pulse(t + i * 0.1, 3.0, 0.2, base=0.8))
        self.light.set_position(math.sin(t) * 3.0, math.sin(t * 2.0) * 2.0, math.cos(t) * 3.0)
