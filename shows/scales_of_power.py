"""A scale of justice tips under piled-up wealth while a chain tightens below it."""
from __future__ import annotations

import math
from typing import List, Optional, Tuple

import numpy as np

from rendering.primitives import (
    create_box,
    create_cone,
    create_cylinder,
    create_octahedron,
    create_point_cloud,
    create_sphere,
    create_torus,
)
from rendering.scene import POINT, Group, Light, Material, Mesh, create_entity, hex_color
from timeline.assets import FontHandle
from timeline.curves import orbit_point
from timeline.easing import ease_out_cubic, lerp
from timeline.particles import ParticleSet
from timeline.show import Show
from timeline.waves import approach

from .common import ambient, make_text, set_emissive_intensity

Vec3 = Tuple[float, float, float]

GOLD = hex_color(0xD4AF37)
SILVER = hex_color(0xC0C0C0)
DARK_BLUE = hex_color(0x0A1931)
DEEP_RED = hex_color(0x8B0000)


class ScalesOfPowerShow(Show):
    SHOW_ID = "scales-of-power"
    TITLE = "Privilege and Power"
    STAGES = (
        ("intro", 3.0),
        ("tipping", 4.0),
        ("imbalance", 5.0),
        ("chains", 4.0),
        ("finale", 3.0),
    )
    SEED = 8
    CAMERA_POSITION = (0.0, 5.0, 18.0)

    BACKGROUND = hex_color(0x08080F)
    FOG_DENSITY = 0.02
    PAN_ARM = 5.0
    PAN_HEIGHT = 2.5
    # Per-tick smoothing rates of the tilt accumulator.
    TIP_RATE = 0.05
    IMBALANCE_RATE = 0.1
    FINAL_TILT = -1.0
    CHAIN_RADIUS = 3.5
    CHAIN_LINKS = 20
    SPARK_CAPACITY = 512
    SPARK_GRAVITY = (0.0, -36.0, 0.0)
    SPARK_SPEED = (6.0, 12.0)
    FALL_LIMIT = -10.0

    def build(self) -> None:
        self.scene.background = self.BACKGROUND
        self.scene.fog_color = self.BACKGROUND

        self.scale_group = self.own(Group("scale"))
        self._build_scale()
        self.wealth_group = self.own(Group("wealth"))
        self.wealth: List[Mesh] = []
        self._build_wealth()
        self.poverty_group = self.own(Group("poverty"))
        self.poverty: List[Mesh] = []
        self._build_poverty()
        self.chain_group = self.own(Group("chain"))
        self.links: List[Mesh] = []
        self._build_chain()

        self.sparks = ParticleSet(
            self.SPARK_CAPACITY, gravity=self.SPARK_GRAVITY, decay=2.0
        )
        self.spark_points = self.own(
            create_entity(
                create_point_cloud(self.sparks.positions),
                Material(
                    color=hex_color(0xFFFFAA),
                    transparent=True,
                    additive=True,
                    point_size=4.0,
                    lit=False,
                ),
                kind="points",
                name="sparks",
            )
        )

        self.own(ambient(hex_color(0x222222), 1.0))
        # (color, intensity, distance, position)
        for color, intensity, distance, position in (
            ((1.0, 1.0, 1.0), 15.0, 30.0, (0.0, 15.0, 5.0)),
            (hex_color(0xFFD700), 10.0, 20.0, (-5.0, 10.0, 3.0)),
            (DEEP_RED, 8.0, 20.0, (5.0, 8.0, 3.0)),
            (DARK_BLUE, 5.0, 15.0, (0.0, -5.0, -10.0)),
        ):
            light = Light(POINT, color, intensity, distance=distance)
            light.set_transform(position=position)
            self.own(light)

        self.title_text: Optional[Mesh] = None
        self.request_font(self._on_font)
        self.tilt = 0.0
        self.target_tilt = 0.0

    # ------------------------------------------------------------------
    # Construction
    def _build_scale(self) -> None:
        def silver() -> Material:
            return Material(color=SILVER, metalness=0.7, roughness=0.3)

        def gold() -> Material:
            return Material(color=GOLD, metalness=0.9, roughness=0.1)

        base = create_entity(create_cylinder(1.0, 1.5, 1.0, 16), silver(), name="base")
        base.position[1] = -5.0
        pillar = create_entity(create_cylinder(0.3, 0.5, 8.0, 16), silver(), name="pillar")
        pillar.position[1] = -0.5
        self.crossbar = create_entity(create_box(12.0, 0.4, 0.4), gold(), name="crossbar")
        self.crossbar.position[1] = 3.5
        self.left_pan = create_entity(create_cylinder(2.0, 2.0, 0.2, 32), gold(), name="left-pan")
        self.right_pan = create_entity(create_cylinder(2.0, 2.0, 0.2, 32), gold(), name="right-pan")
        self.scale_group.add(base, pillar, self.crossbar, self.left_pan, self.right_pan)
        for side in (-self.PAN_ARM, self.PAN_ARM):
            for i in range(3):
                angle = i / 3.0 * math.tau
                hanger = create_entity(create_cylinder(0.05, 0.05, 1.5, 8), silver())
                hanger.set_position(side + math.cos(angle) * 1.5, 3.0, math.sin(angle) * 1.5)
                self.scale_group.add(hanger)

    def _scatter(
        self, node: Mesh, center_x: float, spread: float, y: float, spin: bool = True
    ) -> None:
        half = spread / 2.0
        rng = self.rng
        node.set_position(center_x + rng.uniform(-half, half), y, rng.uniform(-half, half))
        if spin:
            node.rotation[:] = [self.rng.random() * math.tau for _ in range(3)]
        node.user_data["home"] = node.position.copy()
        node.user_data["home_rotation"] = node.rotation.copy()

    def _build_wealth(self) -> None:
        x = -self.PAN_ARM
        for i in range(40):
            coin = create_entity(
                create_cylinder(0.3, 0.3, 0.05, 24),
                Material(
                    color=GOLD,
                    metalness=1.0,
                    roughness=0.1,
                    emissive=hex_color(0xFFCC00),
                    emissive_intensity=0.2,
                ),
                name=f"coin-{i}",
            )
            self._scatter(coin, x, 2.0, 2.6 + i * 0.05)
            self.wealth.append(coin)
        for i in range(5):
            diamond = create_entity(
                create_octahedron(0.4),
                Material(color=(1.0, 1.0, 1.0), roughness=0.0, transparent=True, opacity=0.6),
                name=f"diamond-{i}",
            )
            self._scatter(diamond, x, 1.5, 3.5 + i * 0.2)
            self.wealth.append(diamond)
        for i in range(3):
            cash = create_entity(
                create_box(1.2, 0.1, 0.6),
                Material(color=hex_color(0x44AA44), metalness=0.1, roughness=0.8),
                name=f"cash-{i}",
            )
            self._scatter(cash, x, 1.5, 2.7 + i * 0.1, spin=False)
            cash.rotation[1] = self.rng.random() * math.tau
            cash.user_data["home_rotation"] = cash.rotation.copy()
            self.wealth.append(cash)
        self.money_bag = create_entity(
            create_sphere(0.8, 16, 16),
            Material(color=hex_color(0x8B4513), metalness=0.1, roughness=0.9),
            name="money-bag",
        )
        self.money_bag.set_position(x, 3.2, 0.0)
        self.money_bag.user_data["home"] = self.money_bag.position.copy()
        self.money_bag.user_data["home_rotation"] = self.money_bag.rotation.copy()
        self.wealth.append(self.money_bag)
        self.wealth_group.add(*self.wealth)

    def _build_poverty(self) -> None:
        x = self.PAN_ARM
        for i in range(6):
            link = create_entity(
                create_torus(0.2, 0.06, 8, 16),
                Material(color=hex_color(0x777777), metalness=0.3, roughness=0.7),
                name=f"broken-link-{i}",
            )
            self._scatter(link, x, 1.5, 2.7 + i * 0.15)
            self.poverty.append(link)
        for i in range(10):
            shard = create_entity(
                create_cone(0.2, 0.5, 4),
                Material(color=hex_color(0xAADDFF), roughness=0.1, transparent=True, opacity=0.6),
                name=f"shard-{i}",
            )
            self._scatter(shard, x, 1.7, 2.6 + i * 0.05)
            self.poverty.append(shard)
        for i in range(15):
            stone = create_entity(
                create_octahedron(0.2 + self.rng.random() * 0.2),
                Material(color=hex_color(0x999999), metalness=0.1, roughness=0.9),
                name=f"stone-{i}",
            )
            self._scatter(stone, x, 1.5, 2.6 + i * 0.1, spin=False)
            self.poverty.append(stone)
        broken = (((5.0, 3.0, 0.0), math.pi * 0.1), ((5.6, 2.9, 0.0), -math.pi * 0.15))
        for position, tilt in broken:
            beam = create_entity(
                create_box(1.2, 0.1, 0.1),
                Material(color=hex_color(0x555555), metalness=0.3, roughness=0.7),
                name="broken-beam",
            )
            beam.set_transform(position=position, rotation=(0.0, 0.0, tilt))
            beam.user_data["home"] = beam.position.copy()
            beam.user_data["home_rotation"] = beam.rotation.copy()
            self.poverty.append(beam)
        self.poverty_group.add(*self.poverty)

    def _build_chain(self) -> None:
        for i in range(self.CHAIN_LINKS):
            angle = i / self.CHAIN_LINKS * math.tau
            link = create_entity(
                create_torus(0.3, 0.1, 8, 16),
                Material(color=SILVER, metalness=0.8, roughness=0.2),
                name=f"chain-link-{i}",
            )
            link.user_data["angle"] = angle
            self.links.append(link)
        self.chain_glow = Light(POINT, DEEP_RED, 2.0, distance=5.0, name="chain-glow")
        self.chain_group.add(*self.links)
        self.chain_group.add(self.chain_glow)

    def _on_font(self, font: FontHandle) -> None:
        self.title_text = self.own(
            make_text(
                font,
                "PRIVILEGE & POWER",
                1.0,
                GOLD,
                emissive_intensity=0.2,
                position=(0.0, -6.0, 0.0),
            )
        )
        self.title_text.set_opacity(1.0)
        self.title_text.set_visible(True)
        sign = make_text(font, "$", 0.5, GOLD, emissive_intensity=0.5)
        sign.set_opacity(1.0)
        sign.set_visible(True)
        sign.position[2] = 0.85
        self.money_bag.add(sign)

    # ------------------------------------------------------------------
    # Shared per-tick helpers
    def _apply_tilt(self) -> None:
        self.crossbar.rotation[2] = self.tilt
        offset = math.sin(self.tilt) * self.PAN_ARM
        self.left_pan.set_position(-self.PAN_ARM, self.PAN_HEIGHT + offset, 0.0)
        self.right_pan.set_position(self.PAN_ARM, self.PAN_HEIGHT - offset, 0.0)
        self.wealth_group.position[1] = offset
        self.poverty_group.position[1] = -offset

    def _restore(self, nodes: List[Mesh], scale: float = 1.0) -> None:
        for node in nodes:
            node.set_transform(
                position=node.user_data["home"],
                rotation=node.user_data["home_rotation"],
                scale=scale,
            )
            node.set_visible(True)

    def _place_chain(self, radius: float, spin: float = 0.0, scale: float = 1.0) -> None:
        for link in self.links:
            angle = link.user_data["angle"]
            link.set_transform(
                position=(math.cos(angle) * radius, 0.0, math.sin(angle) * radius),
                rotation=(spin, angle + math.pi / 2.0, 0.0),
                scale=scale,
            )

    def _orbit_camera(self, angle: float, radius: float, height: float) -> None:
        x, _, z = orbit_point(angle, radius)
        self.camera.set_position(x, height, z)
        self.camera.look_at((0.0, 0.0, 0.0))

    # ------------------------------------------------------------------
    # Stages
    def stage_handlers(self):
        return (
            self._introduce,
            self._tip,
            self._imbalance,
            self._tighten_chains,
            self._finale,
        )

    def reset(self) -> None:
        self.tilt = 0.0
        self.target_tilt = 0.0
        self._apply_tilt()
        self.scale_group.position[1] = -5.0
        self.wealth_group.set_visible(False)
        self.poverty_group.set_visible(False)
        self._restore(self.wealth)
        self._restore(self.poverty)
        set_emissive_intensity(self.wealth_group, 0.2)
        self.chain_group.set_visible(False)
        self.chain_group.position[1] = -2.0
        self._place_chain(self.CHAIN_RADIUS)
        self.chain_glow.intensity = 2.0
        self.chain_glow.distance = 5.0
        self.sparks.clear()
        self.scene.fog_density = self.FOG_DENSITY
        if self.title_text is not None:
            self.title_text.set_transform(position=(0.0, -6.0, 0.0), scale=1.0)
            self.title_text.material.emissive_intensity = 0.2
        self.camera.set_pose(self.CAMERA_POSITION, self.CAMERA_TARGET)

    def _introduce(self, progress: float) -> None:
        self.scale_group.position[1] = -5.0 + progress * 5.0
        self.tilt = math.sin(self.elapsed * 2.0) * 0.02
        self._apply_tilt()
        shown = progress > 0.8
        self.wealth_group.set_visible(shown)
        self.poverty_group.set_visible(shown)
        grow = max(1e-3, (progress - 0.8) * 5.0)
        self._restore(self.wealth, grow)
        self._restore(self.poverty, grow)
        if self.title_text is not None:
            self.title_text.position[1] = -6.0 + progress * 3.0

    def _tip(self, progress: float) -> None:
        self.scale_group.position[1] = 0.0
        self.target_tilt = progress * -0.6
        self.tilt = approach(self.tilt, self.target_tilt, self.TIP_RATE)
        self._apply_tilt()

        self.wealth_group.set_visible(True)
        rise = min(1.5, progress * 2.5)
        for node in self.wealth:
            home = node.user_data["home"]
            node.set_transform(
                position=(home[0], home[1] + rise, home[2]),
                rotation=node.user_data["home_rotation"] + np.array([0.0, progress * 2.5, 0.0]),
                scale=1.0 + progress * 0.3,
            )
        self.poverty_group.set_visible(True)
        sink = 1.25 * progress * progress
        for node in self.poverty:
            home = node.user_data["home"]
            node.set_transform(
                position=(home[0], home[1] - sink, home[2]), scale=1.0 - progress * 0.3
            )

        if self.title_text is not None:
            self.title_text.material.emissive_intensity = 0.2 + progress * 0.3
        self.camera.set_position(progress * 3.0, self.CAMERA_POSITION[1], self.CAMERA_POSITION[2])
        self.camera.look_at(self.CAMERA_TARGET)

    def _imbalance(self, progress: float) -> None:
        time = self.elapsed
        self.target_tilt = -0.8 - progress * 0.2
        self.tilt = approach(self.tilt, self.target_tilt, self.IMBALANCE_RATE)
        self._apply_tilt()

        spin = 2.5 + progress * 6.0
        for i, node in enumerate(self.wealth):
            home = node.user_data["home"]
            node.set_transform(
                position=(home[0], home[1] + 1.5 + math.sin(time * 2.0 + i) * 0.1, home[2]),
                rotation=node.user_data["home_rotation"] + np.array([0.0, spin, 0.0]),
                scale=1.3,
            )
        set_emissive_intensity(self.wealth_group, 0.2 + math.sin(time * 3.0) * 0.1)

        count = len(self.poverty)
        duration = self.schedule.stages[2].duration
        for i, node in enumerate(self.poverty):
            home = node.user_data["home"]
            # Objects drop off the pan one after another and vanish below the stage.
            fall_time = max(0.0, progress - i / count * 0.8) * duration
            drop = 3.0 * fall_time * fall_time
            rest_rotation = node.user_data["home_rotation"]
            node.set_transform(
                position=(home[0], home[1] - drop, home[2]),
                rotation=rest_rotation + np.array([fall_time * 1.2, 0.0, fall_time * 0.6]),
                scale=0.7,
            )
            node.set_visible(home[1] - drop + self.poverty_group.position[1] > self.FALL_LIMIT)

        self._orbit_camera(time * 0.2, 18.0 - progress * 3.0, self.CAMERA_POSITION[1])
        if self.title_text is not None:
            self.title_text.set_scale(1.0 + math.sin(time * 3.0) * 0.1)
            self.title_text.material.emissive_intensity = 0.5

    def _tighten_chains(self, progress: float) -> None:
        self.chain_group.set_visible(True)
        self.chain_group.position[1] = -2.0 + progress * 2.0
        self._place_chain(self.CHAIN_RADIUS * (1.0 - progress * 0.8), spin=progress * 2.4)

        self.target_tilt = self.FINAL_TILT
        self.tilt = self.FINAL_TILT
        self._apply_tilt()

        eased = ease_out_cubic(progress)
        self._orbit_camera(self.elapsed * 0.2, 15.0, lerp(self.CAMERA_POSITION[1], 0.0, eased))
        if self.title_text is not None:
            self.title_text.set_scale(1.0)
            self.title_text.position[1] = -3.0 + progress * 6.0

    def _finale(self, progress: float) -> None:
        time = self.elapsed
        self.chain_group.set_visible(True)
        self.chain_group.position[1] = 0.0
        radius = self.CHAIN_RADIUS * lerp(0.2, 0.1, progress)
        self._place_chain(radius, spin=2.4, scale=1.0 + math.sin(time * 10.0) * 0.1)
        self.chain_glow.intensity = 2.0 + progress * 8.0
        self.chain_glow.distance = 5.0 + progress * 10.0

        self._orbit_camera(time * 0.2, 15.0 + ease_out_cubic(progress) * 10.0, progress * 3.0)
        if self.title_text is not None:
            self.title_text.position[1] = 3.0 + math.sin(time * 2.0) * 0.1
            self.title_text.material.emissive_intensity = 0.5 + math.sin(time * 5.0) * 0.5
        self.scene.fog_density = self.FOG_DENSITY + max(0.0, progress - 0.9) * 0.5

    # ------------------------------------------------------------------
    # Sparks
    # Stage name -> (sparks per burst, bursts per second)
    SPARK_RATES = {
        "tipping": (5, 3.0),
        "imbalance": (3, 2.0),
        "chains": (3, 6.0),
        "finale": (20, 18.0),
    }

    def _spark_origin(self, stage: str) -> Vec3:
        rng = self.rng
        if stage == "tipping":
            return (
                -self.PAN_ARM + rng.uniform(-0.5, 0.5),
                3.0 + rng.uniform(-0.5, 0.5),
                rng.uniform(-0.5, 0.5),
            )
        if stage == "imbalance":
            return (
                self.PAN_ARM + rng.uniform(-1.0, 1.0),
                self.PAN_HEIGHT + rng.random(),
                rng.uniform(-1.0, 1.0),
            )
        if stage == "chains":
            angle = rng.random() * math.tau
            radius = math.hypot(self.links[0].position[0], self.links[0].position[2])
            return (
                math.cos(angle) * radius,
                self.chain_group.position[1],
                math.sin(angle) * radius,
            )
        return (0.0, 0.0, 0.0)

    def update_effects(self, dt: float) -> None:
        stage = self.position.name
        rate = self.SPARK_RATES.get(stage)
        if stage == "finale" and self.position.progress <= 0.8:
            rate = None
        if dt > 0.0:
            if rate is not None and self.rng.random() < rate[1] * dt:
                origin = self._spark_origin(stage)
                self.sparks.emit(origin, rate[0], self.rng, speed_range=self.SPARK_SPEED)
            self.sparks.step(dt)
        geometry = self.spark_points.geometry
        geometry.attributes["alpha"] = np.clip(self.sparks.life, 0.0, 1.0)
        geometry.mark_dirty()
