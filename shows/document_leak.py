"""Sealed documents burst open, a stream of data pours down and the locked folders break."""
from __future__ import annotations

import math
from typing import List, Optional, Tuple

from rendering.primitives import (
    create_box,
    create_cylinder,
    create_plane,
    create_ring,
    create_sphere,
)
from rendering.scene import POINT, Group, Light, Material, Mesh, create_entity, hex_color
from timeline.assets import FontHandle
from timeline.show import Show

from .common import ambient, make_text, set_emissive_intensity

DOCUMENT_WHITE = hex_color(0xF0F0F0)
FINANCIAL_GREEN = hex_color(0x44FF88)

Vec3 = Tuple[float, float, float]


class DocumentLeakShow(Show):
    SHOW_ID = "document-leak"
    TITLE = "Document Leak"
    STAGES = (
        ("intro", 2.0),
        ("explosion", 3.0),
        ("data_stream", 5.0),
        ("transform", 3.0),
        ("finale", 3.0),
    )
    SEED = 9
    CAMERA_POSITION = (0.0, 0.0, 20.0)

    BACKGROUND = hex_color(0x090918)
    DOCUMENT_COUNT = 30
    DATA_COUNT = 200
    FOLDER_COUNT = 5
    FOLDER_RADIUS = 8.0
    EXPLOSION_REACH = 12.0
    # The data stream falls from above the frame and wraps at the bottom.
    STREAM_TOP = 20.0
    STREAM_BOTTOM = -15.0
    STREAM_WIDTH = 20.0
    STREAM_STAGGER = 0.7
    TITLE_LABEL = "DOCUMENT LEAK"

    def build(self) -> None:
        self.scene.background = self.BACKGROUND

        self.documents = self.own(Group("documents"))
        self.papers: List[Mesh] = []
        self._build_documents()
        self.data_stream = self.own(Group("data-stream"))
        self.data: List[Mesh] = []
        self._build_data()
        self.secrets = self.own(Group("secrets"))
        self.folders: List[Mesh] = []
        self._build_folders()

        self.own(ambient(hex_color(0x333333), 2.0))
        # (color, intensity, distance, position)
        for color, intensity, distance, position in (
            ((1.0, 1.0, 1.0), 10.0, 50.0, (0.0, 15.0, 10.0)),
            (hex_color(0x6644FF), 5.0, 20.0, (-10.0, 5.0, 8.0)),
            (hex_color(0xFF4422), 5.0, 20.0, (10.0, -5.0, 8.0)),
        ):
            light = Light(POINT, color, intensity, distance=distance)
            light.set_transform(position=position)
            self.own(light)

        self.title_text: Optional[Mesh] = None
        self.request_font(self._on_font)

    # ------------------------------------------------------------------
    # Construction
    def _build_documents(self) -> None:
        rng = self.rng
        for i in range(self.DOCUMENT_COUNT):
            kind = rng.randrange(3)
            material = Material(
                color=(DOCUMENT_WHITE, hex_color(0xEEFFEE), hex_color(0xFFEEEE))[kind],
                roughness=0.7,
                metalness=0.1,
                double_sided=True,
            )
            if kind == 2:
                material.emissive = hex_color(0xFF0000)
                material.emissive_intensity = 0.2
            paper = create_entity(
                create_plane(1.0 + rng.random() * 0.5, 1.4 + rng.random() * 0.5),
                material,
                name=f"document-{i}",
            )
            paper.user_data["home"] = tuple(rng.uniform(-0.1, 0.1) for _ in range(3))
            paper.user_data["home_rotation"] = tuple(rng.random() * math.tau for _ in range(3))
            paper.user_data["velocity"] = tuple(rng.uniform(-1.0, 1.0) for _ in range(3))
            # Radians per second.
            paper.user_data["spin"] = tuple(rng.uniform(-3.0, 3.0) for _ in range(3))
            self.documents.add(paper)
            self.papers.append(paper)

    def _build_data(self) -> None:
        rng = self.rng
        for i in range(self.DATA_COUNT):
            kind = rng.randrange(5)
            if kind == 0:
                geometry = create_ring(0.05, 0.2, 16)
                material = Material(
                    color=FINANCIAL_GREEN,
                    emissive=FINANCIAL_GREEN,
                    emissive_intensity=0.5,
                    double_sided=True,
                )
                opacity = 0.9
            elif kind == 1:
                geometry = create_box(0.3, 0.3, 0.3)
                material = Material(color=(1.0, 1.0, 1.0))
                opacity = 0.7
            elif kind == 2:
                geometry = create_box(0.1, 0.2 + rng.random() * 0.5, 0.1)
                material = Material(color=hex_color(0x44AAFF))
                opacity = 0.8
            elif kind == 3:
                geometry = create_cylinder(0.15, 0.15, 0.25, 16)
                material = Material(color=hex_color(0xBBBBDD), metalness=0.8, roughness=0.2)
                opacity = 1.0
            else:
                geometry = create_sphere(0.08, 8, 8)
                material = Material(
                    color=(rng.random(), rng.random(), rng.random()),
                    emissive=hex_color(0x444444),
                    emissive_intensity=0.2,
                )
                opacity = 1.0
            material.transparent = True
            element = create_entity(geometry, material, name=f"data-{i}")
            element.user_data["x"] = rng.uniform(-0.5, 0.5) * self.STREAM_WIDTH
            element.user_data["z"] = rng.uniform(-5.0, 5.0)
            element.user_data["top"] = self.STREAM_TOP + rng.random() * 30.0
            # Units per second.
            element.user_data["fall_speed"] = 6.0 + rng.random() * 18.0
            element.user_data["opacity"] = opacity
            self.data_stream.add(element)
            self.data.append(element)

    def _build_folders(self) -> None:
        for i in range(self.FOLDER_COUNT):
            angle = i / self.FOLDER_COUNT * math.tau
            folder = create_entity(
                create_box(2.0, 1.5, 0.2),
                Material(
                    color=hex_color(0xAA3333),
                    roughness=0.5,
                    metalness=0.2,
                    emissive=hex_color(0xFF0000),
                    emissive_intensity=0.0,
                ),
                name=f"folder-{i}",
            )
            lock = create_entity(
                create_cylinder(0.3, 0.3, 0.2, 16),
                Material(color=hex_color(0xDDDDDD), metalness=0.9, roughness=0.1),
                name=f"folder-lock-{i}",
            )
            lock.set_transform(position=(0.0, 0.0, 0.15), rotation=(math.pi / 2.0, 0.0, 0.0))
            folder.add(lock)
            folder.user_data["home"] = (
                math.cos(angle) * self.FOLDER_RADIUS,
                math.sin(angle) * self.FOLDER_RADIUS,
                -5.0,
            )
            # Lean the face in towards the centre.
            folder.user_data["home_rotation"] = (math.pi * 0.1, 0.0, angle + math.pi / 2.0)
            self.secrets.add(folder)
            self.folders.append(folder)

    def _on_font(self, font: FontHandle) -> None:
        self.title_text = self.own(
            make_text(
                font,
                self.TITLE_LABEL,
                2.0,
                (1.0, 1.0, 1.0),
                emissive_intensity=0.3,
                position=(0.0, -8.0, 0.0),
            )
        )
        self.title_text.material.emissive = hex_color(0xFF0000)
        self.title_text.material.lit = True
        self.title_text.set_opacity(1.0)

    # ------------------------------------------------------------------
    # Closed-form motion
    @staticmethod
    def _burst(progress: float) -> float:
        """Fraction of the full explosion distance covered at ``progress``.

        The push accelerates over the first fifth of the stage, then eases
        off slowly.
        """

        if progress < 0.2:
            covered = 2.5 * progress * progress
        else:
            late = progress - 0.2
            covered = 0.1 + late - 0.15 * late * late
        return covered / 0.804

    def _exploded(self, paper: Mesh, amount: float) -> Vec3:
        home = paper.user_data["home"]
        velocity = paper.user_data["velocity"]
        reach = self.EXPLOSION_REACH * amount
        return tuple(h + v * reach for h, v in zip(home, velocity))

    def _spun(self, paper: Mesh, seconds: float) -> Vec3:
        return tuple(
            r + s * seconds
            for r, s in zip(paper.user_data["home_rotation"], paper.user_data["spin"])
        )

    def _stream_fallen(self, element: Mesh, index: int, progress: float) -> float:
        """Distance ``element`` has fallen by ``progress`` of the data stream stage."""

        start = index / len(self.data) * self.STREAM_STAGGER
        if progress <= start:
            return 0.0
        duration = self.schedule.stages[2].duration
        return (progress - start) * duration * element.user_data["fall_speed"]

    def _place_data(self, element: Mesh, index: int, fallen: float, jitter: float = 0.0) -> None:
        span = self.STREAM_TOP - self.STREAM_BOTTOM
        y = element.user_data["top"] - fallen
        lap = 0
        if y < self.STREAM_BOTTOM:
            below = self.STREAM_BOTTOM - y
            lap = 1 + int(below // span)
            y = self.STREAM_TOP - math.fmod(below, span)
        half = self.STREAM_WIDTH / 2.0
        # Each wrap re-enters the stream at a different column.
        x = math.fmod(element.user_data["x"] + half + lap * 7.3, self.STREAM_WIDTH) - half
        x += math.sin(self.elapsed * 2.0 + index) * 0.3
        x += math.sin(self.elapsed * 13.0 + index * 1.7) * jitter
        z = element.user_data["z"] + math.cos(self.elapsed * 11.0 + index) * jitter
        time = self.elapsed
        element.set_transform(position=(x, y, z), rotation=(time * 0.6, time * 1.2, 0.0))

    def _folder_pull(self, progress: float) -> float:
        """Remaining share of a folder's distance from the centre."""

        return 0.99 ** (progress * 180.0)

    # ------------------------------------------------------------------
    # Stages
    def stage_handlers(self):
        return (
            self._introduce,
            self._explode,
            self._stream,
            self._transform,
            self._finale,
        )

    def reset(self) -> None:
        for paper in self.papers:
            paper.set_visible(False)
            paper.set_transform(
                position=paper.user_data["home"],
                rotation=paper.user_data["home_rotation"],
                scale=1.0,
            )
            paper.set_opacity(1.0)
        for i, element in enumerate(self.data):
            element.set_visible(False)
            element.set_opacity(element.user_data["opacity"])
            self._place_data(element, i, 0.0)
        for folder in self.folders:
            folder.set_visible(False)
            folder.set_transform(
                position=folder.user_data["home"],
                rotation=folder.user_data["home_rotation"],
                scale=1.0,
            )
            folder.set_opacity(1.0)
        set_emissive_intensity(self.secrets, 0.0)
        if self.title_text is not None:
            self.title_text.set_visible(False)
            self.title_text.set_transform(
                position=(0.0, -8.0, 0.0), rotation=(0.0, 0.0, 0.0), scale=1.0
            )
            self.title_text.set_opacity(1.0)
            self.title_text.material.emissive_intensity = 0.3
        self.camera.set_pose(self.CAMERA_POSITION, self.CAMERA_TARGET)

    def _introduce(self, progress: float) -> None:
        for i, paper in enumerate(self.papers):
            shown = i < 5 and progress > 0.3
            paper.set_visible(shown)
            if shown:
                home = paper.user_data["home"]
                rotation = paper.user_data["home_rotation"]
                paper.set_transform(
                    position=(home[0], home[1], -5.0 + progress * 5.0),
                    rotation=(rotation[0], self.elapsed * 0.5, rotation[2]),
                    scale=progress,
                )
        if self.title_text is not None:
            self.title_text.set_visible(True)
            self.title_text.position[1] = -8.0 + progress * 5.0
            self.title_text.rotation[0] = math.sin(self.elapsed * 2.0) * 0.05
        self.camera.set_position(0.0, 0.0, self.CAMERA_POSITION[2] - progress * 5.0)

    def _explode(self, progress: float) -> None:
        amount = self._burst(progress)
        seconds = progress * self.schedule.stages[1].duration
        for paper in self.papers:
            paper.set_visible(True)
            paper.set_transform(
                position=self._exploded(paper, amount),
                rotation=self._spun(paper, seconds),
                scale=1.0,
            )
        if self.title_text is not None:
            self.title_text.set_visible(True)
            self.title_text.set_scale(1.0 + math.sin(progress * math.tau) * 0.2)
            self.title_text.material.emissive_intensity = 0.3 + progress * 0.7

        shake = progress * 0.6 if progress < 0.5 else (1.0 - progress) * 0.6
        self.camera.set_position(
            math.sin(self.elapsed * 37.0) * shake * 0.5,
            math.cos(self.elapsed * 29.0) * shake * 0.5,
            self.CAMERA_POSITION[2] - 5.0,
        )
        self.camera.look_at(self.CAMERA_TARGET)

    def _stream(self, progress: float) -> None:
        explosion = self.schedule.stages[1].duration
        for paper in self.papers:
            x, y, z = self._exploded(paper, 1.0)
            spread = 1.0 + progress * 0.6
            paper.set_visible(True)
            paper.set_transform(
                position=(x * spread, y - progress * 2.0, z * spread),
                rotation=self._spun(paper, explosion + progress * 2.0),
                scale=1.0,
            )
            paper.set_opacity(1.0 - progress * 0.8)

        for i, element in enumerate(self.data):
            element.set_visible(True)
            element.set_opacity(element.user_data["opacity"])
            self._place_data(element, i, self._stream_fallen(element, i, progress))

        reveal = progress > 0.5
        for folder in self.folders:
            folder.set_visible(reveal)
            rotation = folder.user_data["home_rotation"]
            folder.set_transform(
                position=folder.user_data["home"],
                rotation=(rotation[0], rotation[1] + self.elapsed * 0.2, rotation[2]),
                scale=1.0,
            )

        if self.title_text is not None:
            self.title_text.set_visible(True)
            self.title_text.set_scale(1.0)
            self.title_text.position[1] = -3.0 + progress * 2.0
            self.title_text.material.emissive_intensity = 1.0 - progress * 0.5
        self.camera.set_pose((0.0, 0.0, self.CAMERA_POSITION[2] - 5.0), self.CAMERA_TARGET)

    def _transform(self, progress: float) -> None:
        duration = self.schedule.stages[3].duration
        for i, element in enumerate(self.data):
            streamed = self._stream_fallen(element, i, 1.0)
            speed = element.user_data["fall_speed"]
            slowed = speed * duration * (progress - 0.4 * progress * progress)
            # Elements flicker out as the stream breaks up.
            glitch = progress > 0.3 and (int(self.elapsed * 12.0) + i) % 29 == 0
            element.set_visible(not glitch)
            self._place_data(element, i, streamed + slowed, jitter=progress * 0.5)

        pull = self._folder_pull(progress)
        deform = max(0.0, (progress - 0.3) * 1.4)
        for i, folder in enumerate(self.folders):
            home = folder.user_data["home"]
            rotation = folder.user_data["home_rotation"]
            folder.set_visible(True)
            folder.set_transform(
                position=(home[0] * pull, home[1] * pull, home[2]),
                rotation=(rotation[0], rotation[1] + self.elapsed * 0.2, rotation[2]),
                scale=(
                    1.0 + math.sin(self.elapsed * 3.0 + i) * deform,
                    1.0 + math.cos(self.elapsed * 4.0 + i) * deform,
                    1.0,
                ),
            )
        set_emissive_intensity(self.secrets, deform)

        if self.title_text is not None:
            flicker = math.sin(self.elapsed * 31.0) > 0.8
            self.title_text.set_visible(not flicker)
            self.title_text.position[0] = math.sin(self.elapsed * 17.0) * progress * 0.1
            self.title_text.material.emissive_intensity = 0.75 + math.sin(self.elapsed * 9.0) * 0.25

    def _finale(self, progress: float) -> None:
        transform = self.schedule.stages[3].duration
        duration = self.schedule.stages[4].duration
        for i, element in enumerate(self.data):
            speed = element.user_data["fall_speed"]
            fallen = (
                self._stream_fallen(element, i, 1.0)
                + speed * transform * 0.6
                + speed * duration * (progress - 0.475 * progress * progress)
            )
            element.set_visible(True)
            self._place_data(element, i, fallen)
            element.set_opacity(element.user_data["opacity"] * (1.0 - progress * 0.8))

        pull = self._folder_pull(1.0)
        for folder in self.folders:
            home = folder.user_data["home"]
            rotation = folder.user_data["home_rotation"]
            tumble = progress * 1.8
            folder.set_visible(True)
            folder.set_transform(
                position=(home[0] * pull, home[1] * pull - 4.5 * progress * progress, home[2]),
                rotation=(rotation[0] + tumble, rotation[1], rotation[2] + tumble),
                scale=1.0,
            )
            folder.set_opacity(1.0 - progress * 0.8)

        if self.title_text is not None:
            self.title_text.set_visible(True)
            self.title_text.set_transform(position=(0.0, -1.0 + progress * 2.0, 0.0))
            self.title_text.set_opacity(1.0 - progress * 0.5)
        self.camera.set_pose(
            (0.0, 0.0, self.CAMERA_POSITION[2] - 5.0 + progress * 10.0), self.CAMERA_TARGET
        )
