"""Perspective camera shared by every show."""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Optional, Sequence, Tuple

import numpy as np

from timeline.config import (
    DEFAULT_CAMERA_FOV,
    DEFAULT_CAMERA_POSITION,
    DEFAULT_CAMERA_TARGET,
)

Vec2 = Tuple[float, float]
Vec3 = Tuple[float, float, float]


def _normalize(vec: np.ndarray) -> np.ndarray:
    norm = np.linalg.norm(vec)
    if norm == 0:
        return vec
    return vec / norm


def _as_vec3(values: Sequence[float]) -> Vec3:
    return (float(values[0]), float(values[1]), float(values[2]))


def look_at_matrix(position: Vec3, target: Vec3, up: Vec3) -> np.ndarray:
    pos = np.array(position, dtype=np.float32)
    forward = _normalize(np.array(target, dtype=np.float32) - pos)
    side = _normalize(np.cross(forward, np.array(up, dtype=np.float32)))
    true_up = np.cross(side, forward)

    view = np.identity(4, dtype=np.float32)
    view[0, :3] = side
    view[1, :3] = true_up
    view[2, :3] = -forward
    view[0, 3] = -np.dot(side, pos)
    view[1, 3] = -np.dot(true_up, pos)
    view[2, 3] = np.dot(forward, pos)
    return view


def perspective_matrix(fov_degrees: float, aspect: float, near: float, far: float) -> np.ndarray:
    projection = np.zeros((4, 4), dtype=np.float32)
    f = 1.0 / math.tan(math.radians(fov_degrees) / 2.0)
    projection[0, 0] = f / aspect
    projection[1, 1] = f
    projection[2, 2] = (far + near) / (near - far)
    projection[2, 3] = (2 * far * near) / (near - far)
    projection[3, 2] = -1.0
    return projection


@dataclass
class Camera3D:
    position: Vec3 = DEFAULT_CAMERA_POSITION
    target: Vec3 = DEFAULT_CAMERA_TARGET
    viewport_size: Tuple[int, int] = (1280, 720)
    fov: float = DEFAULT_CAMERA_FOV
    near_clip: float = 0.1
    far_clip: float = 1000.0
    up: Vec3 = (0.0, 1.0, 0.0)
    home_position: Vec3 = field(default=DEFAULT_CAMERA_POSITION)
    home_target: Vec3 = field(default=DEFAULT_CAMERA_TARGET)

    def set_position(self, x: float, y: float, z: float) -> None:
        self.position = (float(x), float(y), float(z))

    def look_at(self, target: Sequence[float]) -> None:
        self.target = _as_vec3(target)

    def set_pose(self, position: Sequence[float], target: Optional[Sequence[float]] = None) -> None:
        self.position = _as_vec3(position)
        if target is not None:
            self.target = _as_vec3(target)

    def go_home(self) -> None:
        """Restore the pose the host configured before any show ran."""

        self.position = self.home_position
        self.target = self.home_target

    def distance_to_target(self) -> float:
        return float(np.linalg.norm(np.array(self.position) - np.array(self.target)))

    def update_viewport(self, size: Tuple[int, int]) -> None:
        self.viewport_size = size

    @property
    def aspect(self) -> float:
        width, height = self.viewport_size
        return width / height if height > 0 else 1.0

    def view_matrix(self) -> np.ndarray:
        return look_at_matrix(self.position, self.target, self.up)

    def projection_matrix(self) -> np.ndarray:
        return perspective_matrix(self.fov, self.aspect, self.near_clip, self.far_clip)

    def view_projection_matrix(self) -> np.ndarray:
        return self.projection_matrix() @ self.view_matrix()

    def world_to_screen(self, world_pos: Vec3) -> Optional[Vec2]:
        """Project a world point to pixel coordinates, or ``None`` when clipped."""

        point = np.array([world_pos[0], world_pos[1], world_pos[2], 1.0], dtype=np.float32)
        clip = self.view_projection_matrix() @ point
        w = clip[3]
        if w == 0:
            return None
        ndc = clip[:3] / w
        if ndc[2] < -1 or ndc[2] > 1:
            return None
        width, height = self.viewport_size
        screen_x = float((ndc[0] + 1.0) * 0.5 * width)
        screen_y = float((1.0 - ndc[1]) * 0.5 * height)
        return (screen_x, screen_y)
