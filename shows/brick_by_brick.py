"""Twelve bricks stack one at a time on a foundation; the last one glows."""
from __future__ import annotations

import math
from typing import List, Optional

from rendering.primitives import create_box
from rendering.scene import (
    DIRECTIONAL,
    POINT,
    Light,
    Material,
    Mesh,
    create_entity,
    hex_color,
    hsl_color,
)
from timeline.assets import FontHandle
from timeline.curves import orbit_point
from timeline.easing import ease_in_out_cubic, local_progress, revealed_count
from timeline.show import Show

from .common import ambient, make_text


class BrickByBrickShow(Show):
    SHOW_ID = "brick-by-brick"
    TITLE = "Brick by Brick"
    STAGES = (
        ("foundation", 2.0),
        ("stacking", 10.0),
        ("completion", 3.0),
    )
    SEED = 6
    CAMERA_POSITION = (0.0, 5.0, 15.0)
    CAMERA_TARGET = (0.0, 4.0, 0.0)

    BACKGROUND = hex_color(0x202030)
    BRICK_COUNT = 12
    BRICK_SIZE = (2.0, 0.5, 1.0)
    RISE_START_Y = -3.0
    HIDDEN_Y = -5.0
    JITTER = 0.02
    FINAL_LIGHT_COLOR = hex_color(0x00FFFF)
    TITLE_LABEL = "POWER TRANSFER"
    SUBTITLE_LABEL = "BRICK BY BRICK"

    def build(self) -> None:
        self.scene.background = self.BACKGROUND
        width, height, depth = self.BRICK_SIZE

        self.foundation = self.own(
            create_entity(
                create_box(width * 1.5, height * 0.5, depth * 1.5),
                Material(
                    color=hex_color(0x333333),
                    metalness=0.7,
                    roughness=0.5,
                    transparent=True,
                    opacity=0.0,
                ),
                name="foundation",
            )
        )
        self.foundation.position[1] = -height * 0.5

        self.bricks: List[Mesh] = []
        for i in range(self.BRICK_COUNT):
            final = i == self.BRICK_COUNT - 1
            material = Material(
                color=hex_color(0x4488FF if final else 0x888888),
                metalness=0.9 if final else 0.3,
                roughness=0.2 if final else 0.8,
                emissive=hex_color(0x0088FF if final else 0x000000),
                emissive_intensity=0.5 if final else 0.0,
                transparent=True,
                opacity=0.0,
            )
            brick = create_entity(create_box(width, height, depth), material, name=f"brick-{i}")
            brick.user_data["target_y"] = i * height
            brick.user_data["final"] = final
            if final:
                brick.user_data["rest_rotation"] = (0.0, 0.0, 0.0)
            else:
                brick.user_data["rest_rotation"] = (
                    0.0,
                    self.rng.uniform(-self.JITTER, self.JITTER) / 2.0,
                    self.rng.uniform(-self.JITTER, self.JITTER) / 2.0,
                )
            self.bricks.append(self.own(brick))

        self.final_glow_shell = self.own(
            create_entity(
                create_box(width * 1.1, height * 1.1, depth * 1.1),
                Material(
                    color=hex_color(0x00FFFF),
                    transparent=True,
                    opacity=0.0,
                    back_side=True,
                    lit=False,
                ),
                name="final-glow",
            )
        )

        self.own(ambient(hex_color(0x444444), 1.0))
        key = Light(DIRECTIONAL, (1.0, 1.0, 1.0), 1.5, name="key-light")
        key.set_position(5.0, 10.0, 7.0)
        fill = Light(POINT, hex_color(0x6688CC), 1.0, distance=20.0, name="fill-light")
        fill.set_position(-5.0, 3.0, 5.0)
        self.own(key)
        self.own(fill)
        self.final_light = self.own(
            Light(POINT, self.FINAL_LIGHT_COLOR, 0.0, distance=10.0, name="final-light")
        )

        self.title_text: Optional[Mesh] = None
        self.subtitle_text: Optional[Mesh] = None
        self.request_font(self._on_font)

    def _on_font(self, font: FontHandle) -> None:
        self.title_text = self.own(
            make_text(
                font,
                self.TITLE_LABEL,
                0.7,
                (1.0, 1.0, 1.0),
                emissive_intensity=0.2,
                position=(0.0, -2.0, 0.0),
            )
        )
        self.subtitle_text = self.own(
            make_text(
                font,
                self.SUBTITLE_LABEL,
                0.4,
                hex_color(0xCCCCCC),
                position=(0.0, -3.0, 0.0),
            )
        )
        self.title_text.set_visible(True)
        self.subtitle_text.set_visible(True)

    @property
    def final_brick(self) -> Mesh:
        return self.bricks[-1]

    # ------------------------------------------------------------------
    # Stages
    def stage_handlers(self):
        return (self._lay_foundation, self._stack, self._complete)

    def reset(self) -> None:
        self.foundation.set_opacity(0.0)
        for brick in self.bricks:
            self._hide_brick(brick)
        self.final_brick.material.emissive_intensity = 0.5
        self.final_glow_shell.set_visible(False)
        self.final_glow_shell.set_opacity(0.0)
        self.final_glow_shell.set_scale(1.0)
        self.final_light.intensity = 0.0
        self.final_light.color = self.FINAL_LIGHT_COLOR
        for label in self._labels():
            label.set_opacity(0.0)
        self.camera.set_pose(self.CAMERA_POSITION, self.CAMERA_TARGET)

    def _labels(self) -> List[Mesh]:
        return [label for label in (self.title_text, self.subtitle_text) if label is not None]

    def _hide_brick(self, brick: Mesh) -> None:
        brick.set_visible(False)
        brick.set_opacity(0.0)
        brick.position[1] = self.HIDDEN_Y
        brick.rotation[:] = brick.user_data["rest_rotation"]

    def _place_brick(self, brick: Mesh) -> None:
        brick.set_visible(True)
        brick.set_opacity(1.0)
        brick.position[1] = brick.user_data["target_y"]
        brick.rotation[:] = brick.user_data["rest_rotation"]

    def _lay_foundation(self, progress: float) -> None:
        self.foundation.set_opacity(progress)
        if self.title_text is not None:
            self.title_text.set_opacity(progress)
            self.title_text.position[1] = -2.5 + progress * 0.5
        if self.subtitle_text is not None:
            self.subtitle_text.set_opacity(progress)
            self.subtitle_text.position[1] = -3.0 + progress * 0.5

    def _stack(self, progress: float) -> None:
        self.foundation.set_opacity(1.0)
        for label in self._labels():
            label.set_opacity(1.0)

        count = len(self.bricks)
        revealed = revealed_count(progress, count)
        for i, brick in enumerate(self.bricks):
            if i >= revealed:
                self._hide_brick(brick)
                continue
            # The newest brick rises over the slice that follows its reveal.
            local = local_progress(progress, revealed, count) if i == revealed - 1 else 1.0
            if local < 1.0:
                eased = ease_in_out_cubic(local)
                target_y = brick.user_data["target_y"]
                brick.set_visible(True)
                brick.set_opacity(eased)
                brick.position[1] = self.RISE_START_Y + (target_y - self.RISE_START_Y) * eased
                brick.rotation[2] = math.sin(local * math.pi * 2.0) * 0.05 * (1.0 - local)
            else:
                self._place_brick(brick)

    def _complete(self, progress: float) -> None:
        for brick in self.bricks:
            self._place_brick(brick)
        final = self.final_brick
        final_position = tuple(final.position)

        self.final_glow_shell.set_visible(True)
        self.final_glow_shell.set_transform(position=final_position)
        self.final_glow_shell.set_opacity(progress * 0.6)
        self.final_glow_shell.set_scale(1.0 + math.sin(progress * math.pi * 4.0) * 0.1 * progress)

        self.final_light.set_transform(position=final_position)
        self.final_light.intensity = progress * 2.0
        final.material.emissive_intensity = 0.5 + math.sin(progress * math.pi * 6.0) * 0.3

        x, _, z = orbit_point(progress * math.tau, 15.0 - progress * 3.0)
        self.camera.set_position(x, self.CAMERA_POSITION[1], z)
        self.camera.look_at(final_position)

        if self.title_text is not None:
            self.title_text.material.emissive_intensity = 0.2 + progress * 0.4

    def update_effects(self, dt: float) -> None:
        time = self.elapsed
        if self.title_text is not None:
            self.title_text.rotation[1] = math.sin(time * 0.5) * 0.05
        if self.final_light.intensity > 0.0:
            self.final_light.color = hsl_color((time * 0.1) % 1.0, 1.0, 0.5)
