"""Tests for the perspective camera."""
from __future__ import annotations

import numpy as np
import pytest

from rendering.camera import Camera3D, look_at_matrix, perspective_matrix


def test_view_matrix_puts_target_on_negative_z():
    """The look-at target lands straight ahead of the eye."""
    view = look_at_matrix((0.0, 5.0, 15.0), (0.0, 4.0, 0.0), (0.0, 1.0, 0.0))
    target = view @ np.array([0.0, 4.0, 0.0, 1.0], dtype=np.float32)
    assert target[0] == pytest.approx(0.0, abs=1e-5)
    assert target[1] == pytest.approx(0.0, abs=1e-5)
    assert target[2] < 0.0


def test_perspective_matrix_uses_aspect():
    """Horizontal focal length shrinks by the aspect ratio."""
    projection = perspective_matrix(90.0, 2.0, 0.1, 100.0)
    assert projection[1, 1] == pytest.approx(1.0)
    assert projection[0, 0] == pytest.approx(0.5)
    assert projection[3, 2] == -1.0


def test_target_projects_to_screen_centre():
    """A point on the view axis maps to the middle of the viewport."""
    camera = Camera3D(position=(0.0, 0.0, 10.0), viewport_size=(800, 600))
    screen = camera.world_to_screen((0.0, 0.0, 0.0))
    assert screen == pytest.approx((400.0, 300.0), abs=1e-3)


def test_points_behind_camera_are_clipped():
    """Points behind the eye have no screen position."""
    camera = Camera3D(position=(0.0, 0.0, 10.0))
    assert camera.world_to_screen((0.0, 0.0, 20.0)) is None


def test_pose_and_home():
    """Shows move the camera freely; go_home restores the host pose."""
    camera = Camera3D()
    camera.set_pose((1.0, 2.0, 3.0), (0.0, 1.0, 0.0))
    assert camera.position == (1.0, 2.0, 3.0)
    assert camera.target == (0.0, 1.0, 0.0)
    camera.go_home()
    assert camera.position == camera.home_position
    assert camera.target == camera.home_target


def test_distance_and_aspect():
    """Distance is eye-to-target; aspect follows the viewport."""
    camera = Camera3D(position=(0.0, 0.0, 15.0))
    assert camera.distance_to_target() == pytest.approx(15.0)
    camera.update_viewport((1000, 500))
    assert camera.aspect == pytest.approx(2.0)
    camera.update_viewport((100, 0))
    assert camera.aspect == 1.0
