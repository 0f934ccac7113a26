"""OpenGL context helpers for the fixed-function scene renderer."""
from __future__ import annotations

from typing import Tuple

from OpenGL import GL as gl

from timeline.config import BACKGROUND_COLOR


def initialize_gl(surface_size: Tuple[int, int]) -> None:
    """Configure OpenGL state for lit, depth-tested 3D rendering."""
    width, height = surface_size
    gl.glViewport(0, 0, width, height)
    gl.glClearColor(*BACKGROUND_COLOR, 1.0)

    gl.glMatrixMode(gl.GL_PROJECTION)
    gl.glLoadIdentity()
    gl.glMatrixMode(gl.GL_MODELVIEW)
    gl.glLoadIdentity()

    gl.glEnable(gl.GL_DEPTH_TEST)
    gl.glDepthFunc(gl.GL_LEQUAL)
    gl.glEnable(gl.GL_BLEND)
    gl.glBlendFunc(gl.GL_SRC_ALPHA, gl.GL_ONE_MINUS_SRC_ALPHA)
    gl.glShadeModel(gl.GL_SMOOTH)
    # Scaled nodes would otherwise light with stretched normals.
    gl.glEnable(gl.GL_NORMALIZE)
    gl.glEnable(gl.GL_COLOR_MATERIAL)
    gl.glColorMaterial(gl.GL_FRONT_AND_BACK, gl.GL_AMBIENT_AND_DIFFUSE)
    gl.glLightModeli(gl.GL_LIGHT_MODEL_TWO_SIDE, gl.GL_TRUE)
    gl.glEnable(gl.GL_POINT_SMOOTH)
    gl.glLineWidth(1.5)


def resize_viewport(surface_size: Tuple[int, int]) -> None:
    """Update the viewport when the window changes size."""
    width, height = surface_size
    gl.glViewport(0, 0, max(1, width), max(1, height))
