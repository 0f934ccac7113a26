"""A glowing thread loosens, unravels into strands and dissolves into particles."""
from __future__ import annotations

import math
from typing import List, Optional

import numpy as np

from rendering.primitives import create_cylinder, create_point_cloud, create_tube
from rendering.scene import (
    DIRECTIONAL,
    POINT,
    Group,
    Light,
    Material,
    Mesh,
    create_entity,
    hex_color,
)
from timeline.assets import FontHandle
from timeline.curves import LineSegment, orbit_point
from timeline.easing import revealed_count
from timeline.show import Show
from timeline.waves import twinkle

from .common import ambient, make_text


class UnravelingThreadShow(Show):
    SHOW_ID = "unraveling-thread"
    TITLE = "Unraveling Thread"
    STAGES = (
        ("intro", 3.0),
        ("loosening", 4.0),
        ("unraveling", 5.0),
        ("dissolution", 4.0),
        ("aftermath", 3.0),
    )
    SEED = 7
    CAMERA_POSITION = (0.0, 0.0, 15.0)

    THREAD_COLOR = hex_color(0x00FFFF)
    GLOW_COLOR = hex_color(0x88FFFF)
    STRAND_COLOR = hex_color(0xAAFFFF)
    BACKGROUND = hex_color(0x070723)

    THREAD_LENGTH = 10.0
    THREAD_SEGMENTS = 100
    THREAD_THICKNESS = 0.1
    STRAND_COUNT = 12
    STRAND_OPACITY = 0.7
    PARTICLE_COUNT = 500
    # Outward travel of the particle cloud at the end of dissolution and aftermath.
    DISSOLVE_SPREAD = 6.0
    AFTERMATH_SPREAD = 3.0
    STRAND_DRIFT = 1.5
    STRAND_FLIGHT = 6.0

    def build(self) -> None:
        self.scene.background = self.BACKGROUND
        half = self.THREAD_LENGTH / 2.0

        self.thread_group = self.own(Group("thread"))
        path = LineSegment((-half, 0.0, 0.0), (half, 0.0, 0.0)).sample(self.THREAD_SEGMENTS)
        self.thread = create_entity(
            create_tube(path, self.THREAD_THICKNESS, 12),
            Material(
                color=self.THREAD_COLOR,
                emissive=self.THREAD_COLOR,
                emissive_intensity=0.5,
                roughness=0.2,
            ),
            name="thread",
        )
        self.thread_group.add(self.thread)
        self.rest_vertices = self.thread.geometry.positions.copy()
        vertex_count = self.rest_vertices.shape[0]
        self.vertex_phase = np.arange(vertex_count, dtype=np.float64) * 0.05
        self.distance_from_center = np.abs(self.rest_vertices[:, 0]) / half

        self.strands: List[Mesh] = []
        for i in range(self.STRAND_COUNT):
            tip = tuple(self.rng.uniform(-1.0, 1.0) for _ in range(3))
            strand = create_entity(
                create_tube(
                    LineSegment((0.0, 0.0, 0.0), tip).sample(10), self.THREAD_THICKNESS / 3.0, 6
                ),
                Material(
                    color=self.STRAND_COLOR,
                    emissive=self.STRAND_COLOR,
                    emissive_intensity=0.7,
                    transparent=True,
                    opacity=self.STRAND_OPACITY,
                ),
                name=f"strand-{i}",
            )
            anchor_x = self.rng.uniform(-half, half)
            drift = np.array(
                [
                    1.0 if anchor_x > 0 else -1.0,
                    self.rng.uniform(-0.5, 0.5),
                    self.rng.uniform(-0.5, 0.5),
                ]
            )
            strand.user_data["anchor"] = (anchor_x, 0.0, 0.0)
            strand.user_data["drift"] = drift / np.linalg.norm(drift)
            self.strands.append(strand)
            self.thread_group.add(strand)

        self.sheath = create_entity(
            create_cylinder(
                self.THREAD_THICKNESS * 2.0, self.THREAD_THICKNESS * 2.0, self.THREAD_LENGTH, 16
            ),
            Material(
                color=self.GLOW_COLOR, transparent=True, opacity=0.2, additive=True, lit=False
            ),
            name="sheath",
        )
        self.sheath.rotation[2] = math.pi / 2.0
        self.thread_group.add(self.sheath)

        rest = np.array(
            [
                (
                    self.rng.uniform(-half, half),
                    self.rng.uniform(-0.05, 0.05),
                    self.rng.uniform(-0.05, 0.05),
                )
                for _ in range(self.PARTICLE_COUNT)
            ],
            dtype=np.float64,
        )
        self.particle_rest = rest
        norms = np.linalg.norm(rest, axis=1, keepdims=True)
        self.particle_dirs = rest / np.maximum(norms, 1e-6)
        self.particle_sizes = np.array(
            [self.rng.uniform(0.02, 0.07) for _ in range(self.PARTICLE_COUNT)], dtype=np.float32
        )
        self.particle_phases = np.arange(self.PARTICLE_COUNT, dtype=np.float64) * 2.5
        self.particles = self.own(
            create_entity(
                create_point_cloud(rest, self.particle_sizes),
                Material(
                    color=(1.0, 1.0, 1.0),
                    transparent=True,
                    opacity=0.8,
                    additive=True,
                    point_size=3.0,
                    lit=False,
                ),
                kind="points",
                name="particles",
            )
        )

        self.own(ambient(hex_color(0x222244), 1.0))
        key = Light(DIRECTIONAL, (1.0, 1.0, 1.0), 0.5, name="key-light")
        key.set_position(5.0, 5.0, 5.0)
        self.own(key)
        self.own(Light(POINT, self.GLOW_COLOR, 2.0, distance=10.0, name="thread-light"))
        for i in range(3):
            angle = i / 3.0 * math.tau
            beam = Light(POINT, self.GLOW_COLOR, 1.0, distance=15.0, name=f"beam-{i}")
            beam.set_position(math.cos(angle) * 5.0, math.sin(angle) * 5.0, 3.0)
            self.own(beam)

        self.title_text: Optional[Mesh] = None
        self.request_font(self._on_font)

    def _on_font(self, font: FontHandle) -> None:
        self.title_text = self.own(
            make_text(
                font,
                "UNRAVELING",
                1.0,
                self.THREAD_COLOR,
                emissive_intensity=0.5,
                position=(0.0, -5.0, 0.0),
            )
        )
        self.title_text.set_opacity(1.0)
        self.title_text.set_visible(True)

    # ------------------------------------------------------------------
    # Deformation helpers
    def _write_thread(self, offsets: np.ndarray) -> None:
        geometry = self.thread.geometry
        geometry.positions[:] = self.rest_vertices + offsets
        geometry.compute_vertex_normals()
        geometry.mark_dirty()

    def _loosen_offsets(self, amount: float) -> np.ndarray:
        time = self.elapsed
        dist = self.distance_from_center
        offsets = np.zeros_like(self.rest_vertices)
        offsets[:, 1] = amount * 0.5 * np.sin(dist * (3.0 + amount * 5.0) + time * 2.0)
        offsets[:, 2] = np.sin(dist * 10.0 + time) * amount * 0.3
        return offsets

    def _chaos_offsets(self, chaos: float) -> np.ndarray:
        phase = self.elapsed * 3.0 + self.vertex_phase
        offsets = np.empty_like(self.rest_vertices)
        offsets[:, 0] = np.sin(phase) * chaos
        offsets[:, 1] = np.cos(phase * 0.7) * chaos
        offsets[:, 2] = np.sin(phase * 0.5) * chaos
        return offsets

    def _spread_particles(self, distance: float) -> None:
        geometry = self.particles.geometry
        geometry.positions[:] = self.particle_rest + self.particle_dirs * distance
        geometry.mark_dirty()

    def _place_strand(self, strand: Mesh, offset: float, scale: float) -> None:
        anchor = np.asarray(strand.user_data["anchor"])
        strand.set_transform(position=anchor + strand.user_data["drift"] * offset, scale=scale)

    def _orbit_camera(self, angle: float, radius: float) -> None:
        x, _, z = orbit_point(angle, radius)
        self.camera.set_position(x, self.CAMERA_POSITION[1], z)
        self.camera.look_at((0.0, 0.0, 0.0))

    # ------------------------------------------------------------------
    # Stages
    def stage_handlers(self):
        return (
            self._introduce,
            self._loosen,
            self._unravel,
            self._dissolve,
            self._aftermath,
        )

    def reset(self) -> None:
        self._write_thread(np.zeros_like(self.rest_vertices))
        self.thread.material.opacity = 1.0
        self.thread.material.transparent = False
        self.thread.material.emissive_intensity = 0.5
        self.thread.set_visible(True)
        self.thread_group.rotation[:] = 0.0
        for strand in self.strands:
            strand.set_visible(False)
            strand.set_opacity(self.STRAND_OPACITY)
            strand.rotation[:] = 0.0
            self._place_strand(strand, 0.0, 1.0)
        self.sheath.set_visible(True)
        self.sheath.set_opacity(0.2)
        self.sheath.set_scale(1.0)
        self.particles.set_visible(False)
        self._spread_particles(0.0)
        if self.title_text is not None:
            self.title_text.position[1] = -5.0
        self.camera.set_pose(self.CAMERA_POSITION, self.CAMERA_TARGET)

    def _introduce(self, progress: float) -> None:
        time = self.elapsed
        self.thread.material.emissive_intensity = 0.2 + 0.1 * math.sin(time * 5.0)
        self.thread_group.rotation[2] = math.sin(time) * 0.05
        self.sheath.set_opacity(0.15 + 0.1 * math.sin(time * 3.0))
        if self.title_text is not None:
            self.title_text.position[1] = -5.0 + progress * 3.0
        self._orbit_camera(time * 0.1, 15.0)

    def _loosen(self, progress: float) -> None:
        time = self.elapsed
        self._write_thread(self._loosen_offsets(progress))
        self.thread.material.emissive_intensity = 0.5 + progress * 0.5

        strand_progress = max(0.0, (progress - 0.5) * 2.0)
        shown = revealed_count(strand_progress, len(self.strands))
        for i, strand in enumerate(self.strands):
            strand.set_visible(i < shown)
            if i < shown:
                self._place_strand(strand, 0.0, max(strand_progress, 1e-3))
                strand.rotation[0] = math.sin(time * 3.0 + i) * 0.3
                strand.rotation[2] = math.cos(time * 2.0 + i) * 0.3

        self.particles.set_visible(progress > 0.5)
        self.particles.set_opacity(strand_progress * 0.25)
        if self.title_text is not None:
            self.title_text.position[1] = -2.0
        self._orbit_camera(time * 0.1, 15.0 - progress * 5.0)

    def _unravel(self, progress: float) -> None:
        time = self.elapsed
        self.thread.material.transparent = True
        self.thread.material.opacity = 1.0 - progress * 0.8
        self._write_thread(self._chaos_offsets(progress * 1.5))

        for i, strand in enumerate(self.strands):
            strand.set_visible(True)
            self._place_strand(
                strand, progress * progress * self.STRAND_DRIFT, 1.0 + progress * 2.0
            )
            strand.rotation[:] = (
                math.sin(time * 2.0 + i) * 0.6,
                math.cos(time * 1.5 + i) * 0.6,
                math.sin(time + i) * 0.6,
            )

        self.sheath.set_opacity(0.2 - progress * 0.2)
        self.sheath.scale[1] = 1.0 - progress * 0.5
        self.particles.set_visible(True)
        self.particles.set_opacity(0.5 + progress * 0.5)
        self._orbit_camera(time * (0.1 + progress * 0.2), 10.0 - progress * 2.0)

    def _dissolve(self, progress: float) -> None:
        time = self.elapsed
        self.thread.material.transparent = True
        self.thread.material.opacity = 0.2 * (1.0 - progress)
        self._write_thread(self._chaos_offsets(1.5))

        for i, strand in enumerate(self.strands):
            strand.set_visible(True)
            offset = self.STRAND_DRIFT + progress * self.STRAND_FLIGHT
            self._place_strand(strand, offset, 3.0)
            strand.set_opacity(self.STRAND_OPACITY * (1.0 - progress))
            strand.rotation[:] = (time * 3.0, time * 4.2, time * 3.6)

        self.sheath.set_visible(progress < 0.5)
        self.particles.set_visible(True)
        self.particles.set_opacity(1.0)
        self._spread_particles(self.DISSOLVE_SPREAD * (progress + progress * progress) / 2.0)

        self._orbit_camera(time * 0.3, 8.0 + progress * 7.0)
        if self.title_text is not None:
            self.title_text.position[1] = -2.0 + progress * 2.0

    def _aftermath(self, progress: float) -> None:
        time = self.elapsed
        self.thread.set_visible(False)
        for strand in self.strands:
            strand.set_visible(False)
        self.sheath.set_visible(False)
        self.particles.set_visible(True)
        self.particles.set_opacity((1.0 - progress) * 0.5)
        self._spread_particles(self.DISSOLVE_SPREAD + progress * self.AFTERMATH_SPREAD)
        if self.title_text is not None:
            self.title_text.position[1] = 0.0
            self.title_text.material.emissive_intensity = 0.5 + math.sin(time * 2.0) * 0.3
        self._orbit_camera(time * 0.05, 15.0)

    def update_effects(self, dt: float) -> None:
        if not self.particles.visible:
            return
        sizes = self.particle_sizes * twinkle(self.elapsed, self.particle_phases, 5.0)
        self.particles.geometry.attributes["size"] = sizes.astype(np.float32)
        self.particles.geometry.mark_dirty()
