"""Fixed-function OpenGL renderer for the scene graph."""
from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from OpenGL import GL as gl

import numpy as np
import pygame

from .camera import Camera3D
from .scene import (
    AMBIENT,
    DIRECTIONAL,
    LINE_STRIP,
    LINES,
    POINTS,
    Geometry,
    Light,
    Material,
    Mesh,
    Node,
    Scene,
)

logger = logging.getLogger(__name__)

MAX_LIGHTS = 8
# Show light intensities are authored for physically based shading; the fixed
# function pipeline saturates far earlier.
LIGHT_INTENSITY_SCALE = 0.25
TEXT_RASTER_COLOR = (255, 255, 255)

_DRAW_MODES = {
    LINES: gl.GL_LINES,
    LINE_STRIP: gl.GL_LINE_STRIP,
    POINTS: gl.GL_POINTS,
}


class SceneRenderer:
    """Draws every visible mesh of a :class:`Scene` from a camera.

    GL textures are created lazily on first draw and deleted through the
    release hooks of the geometry or material that owns them.
    """

    def __init__(self) -> None:
        pygame.font.init()
        self._overlay_font = pygame.font.SysFont("Consolas", 16)
        self._view = np.identity(4)

    def draw(self, scene: Scene, camera: Camera3D, *, caption: Optional[str] = None) -> None:
        width, height = camera.viewport_size
        gl.glViewport(0, 0, width, height)
        gl.glClearColor(*scene.background, 1.0)
        gl.glClear(gl.GL_COLOR_BUFFER_BIT | gl.GL_DEPTH_BUFFER_BIT)
        self._apply_camera(camera)
        self._apply_fog(scene)
        self._apply_lights(scene)

        opaque: List[Tuple[Mesh, np.ndarray]] = []
        transparent: List[Tuple[float, Mesh, np.ndarray]] = []
        camera_position = np.asarray(camera.position, dtype=np.float64)
        for node in scene.nodes:
            self._collect(node, np.identity(4), opaque, transparent, camera_position)

        for mesh, world in opaque:
            self._draw_mesh(mesh, world)
        # Far to near so blended surfaces composite correctly.
        gl.glDepthMask(gl.GL_FALSE)
        for _, mesh, world in sorted(transparent, key=lambda item: -item[0]):
            self._draw_mesh(mesh, world)
        gl.glDepthMask(gl.GL_TRUE)
        gl.glBlendFunc(gl.GL_SRC_ALPHA, gl.GL_ONE_MINUS_SRC_ALPHA)

        if caption and self._begin_overlay(camera):
            self._draw_overlay_text(12.0, 12.0, caption, (220, 220, 230))
            self._end_overlay()

    # ------------------------------------------------------------------
    # Frame setup
    def _apply_camera(self, camera: Camera3D) -> None:
        projection = camera.projection_matrix()
        self._view = camera.view_matrix()
        gl.glMatrixMode(gl.GL_PROJECTION)
        gl.glLoadMatrixf(np.transpose(projection).flatten())
        gl.glMatrixMode(gl.GL_MODELVIEW)
        gl.glLoadMatrixf(np.transpose(self._view).flatten())

    def _apply_fog(self, scene: Scene) -> None:
        if scene.fog_density <= 0.0:
            gl.glDisable(gl.GL_FOG)
            return
        gl.glEnable(gl.GL_FOG)
        gl.glFogi(gl.GL_FOG_MODE, gl.GL_EXP2)
        gl.glFogf(gl.GL_FOG_DENSITY, scene.fog_density)
        gl.glFogfv(gl.GL_FOG_COLOR, (*scene.fog_color, 1.0))

    def _apply_lights(self, scene: Scene) -> None:
        ambient = np.zeros(3)
        slot = 0
        for light in scene.lights():
            color = np.asarray(light.color) * light.intensity
            if light.light_type == AMBIENT:
                ambient += color
                continue
            if slot >= MAX_LIGHTS:
                logger.debug("Ignoring light %s; all %d GL lights in use", light.name, MAX_LIGHTS)
                continue
            self._configure_light(gl.GL_LIGHT0 + slot, light, color * LIGHT_INTENSITY_SCALE)
            slot += 1
        for unused in range(slot, MAX_LIGHTS):
            gl.glDisable(gl.GL_LIGHT0 + unused)
        gl.glLightModelfv(gl.GL_LIGHT_MODEL_AMBIENT, (*np.clip(ambient, 0.0, 1.0), 1.0))

    def _configure_light(self, gl_light: int, light: Light, color: np.ndarray) -> None:
        position = light.world_position()
        diffuse = (*np.clip(color, 0.0, 1.0), 1.0)
        gl.glEnable(gl_light)
        gl.glLightfv(gl_light, gl.GL_DIFFUSE, diffuse)
        gl.glLightfv(gl_light, gl.GL_SPECULAR, diffuse)
        gl.glLightfv(gl_light, gl.GL_AMBIENT, (0.0, 0.0, 0.0, 1.0))
        if light.light_type == DIRECTIONAL:
            # Directional lights shine from their position toward the origin.
            gl.glLightfv(gl_light, gl.GL_POSITION, (*position, 0.0))
            gl.glLightf(gl_light, gl.GL_LINEAR_ATTENUATION, 0.0)
            return
        gl.glLightfv(gl_light, gl.GL_POSITION, (*position, 1.0))
        linear = 1.0 / light.distance if light.distance > 0.0 else 0.0
        gl.glLightf(gl_light, gl.GL_CONSTANT_ATTENUATION, 1.0)
        gl.glLightf(gl_light, gl.GL_LINEAR_ATTENUATION, linear)

    def _collect(
        self,
        node: Node,
        parent_world: np.ndarray,
        opaque: List[Tuple[Mesh, np.ndarray]],
        transparent: List[Tuple[float, Mesh, np.ndarray]],
        camera_position: np.ndarray,
    ) -> None:
        if not node.visible:
            return
        world = parent_world @ node.local_matrix()
        if isinstance(node, Mesh) and not node.geometry.released:
            material = node.material
            if material.transparent or material.additive or material.opacity < 1.0:
                if material.opacity > 0.0:
                    distance = float(np.linalg.norm(world[:3, 3] - camera_position))
                    transparent.append((distance, node, world))
            else:
                opaque.append((node, world))
        for child in node.children:
            self._collect(child, world, opaque, transparent, camera_position)

    # ------------------------------------------------------------------
    # Meshes
    def _draw_mesh(self, mesh: Mesh, world: np.ndarray) -> None:
        geometry = mesh.geometry
        material = mesh.material
        if geometry.vertex_count == 0:
            return
        gl.glLoadMatrixf(np.transpose(self._view @ world).flatten())
        self._apply_material(material, geometry)

        gl.glEnableClientState(gl.GL_VERTEX_ARRAY)
        gl.glVertexPointer(3, gl.GL_FLOAT, 0, geometry.positions)
        has_normals = geometry.normals is not None and material.lit
        if has_normals:
            gl.glEnableClientState(gl.GL_NORMAL_ARRAY)
            gl.glNormalPointer(gl.GL_FLOAT, 0, geometry.normals)
        texture = self._texture_for(geometry, material)
        uv = geometry.attributes.get("uv")
        if texture is not None and uv is not None:
            gl.glEnable(gl.GL_TEXTURE_2D)
            gl.glBindTexture(gl.GL_TEXTURE_2D, texture)
            gl.glEnableClientState(gl.GL_TEXTURE_COORD_ARRAY)
            gl.glTexCoordPointer(2, gl.GL_FLOAT, 0, uv)

        if geometry.mode == POINTS:
            self._draw_points(geometry, material)
        else:
            mode = _DRAW_MODES.get(geometry.mode, gl.GL_TRIANGLES)
            if geometry.indices is not None:
                gl.glDrawElements(mode, geometry.indices.size, gl.GL_UNSIGNED_INT, geometry.indices)
            else:
                gl.glDrawArrays(mode, 0, geometry.vertex_count)

        if texture is not None and uv is not None:
            gl.glDisableClientState(gl.GL_TEXTURE_COORD_ARRAY)
            gl.glDisable(gl.GL_TEXTURE_2D)
        if has_normals:
            gl.glDisableClientState(gl.GL_NORMAL_ARRAY)
        gl.glDisableClientState(gl.GL_VERTEX_ARRAY)

    def _draw_points(self, geometry: Geometry, material: Material) -> None:
        """Points fade with their ``alpha``/``size`` attributes; dead ones are skipped."""

        weights = np.ones(geometry.vertex_count, dtype=np.float32)
        alpha = geometry.attributes.get("alpha")
        if alpha is not None:
            weights = weights * alpha
        sizes = geometry.attributes.get("size")
        if sizes is not None and sizes.size and sizes.max() > 0.0:
            weights = weights * (sizes / sizes.max())
        visible = np.flatnonzero(weights > 0.0).astype(np.uint32)
        if visible.size == 0:
            return
        colors = np.empty((geometry.vertex_count, 4), dtype=np.float32)
        colors[:, :3] = material.color
        colors[:, 3] = weights * material.opacity
        gl.glEnableClientState(gl.GL_COLOR_ARRAY)
        gl.glColorPointer(4, gl.GL_FLOAT, 0, colors)
        gl.glDrawElements(gl.GL_POINTS, visible.size, gl.GL_UNSIGNED_INT, visible)
        gl.glDisableClientState(gl.GL_COLOR_ARRAY)

    def _apply_material(self, material: Material, geometry: Geometry) -> None:
        gl.glColor4f(*material.color, material.opacity)
        emission = np.asarray(material.emissive) * material.emissive_intensity
        if material.lit and geometry.mode not in (LINES, LINE_STRIP, POINTS):
            gl.glEnable(gl.GL_LIGHTING)
            emission = (*np.clip(emission, 0.0, 1.0), 1.0)
            gl.glMaterialfv(gl.GL_FRONT_AND_BACK, gl.GL_EMISSION, emission)
            shininess = (1.0 - material.roughness) * 128.0
            specular = material.metalness * 0.5 + 0.1
            gl.glMaterialfv(gl.GL_FRONT_AND_BACK, gl.GL_SPECULAR, (specular,) * 3 + (1.0,))
            gl.glMaterialf(gl.GL_FRONT_AND_BACK, gl.GL_SHININESS, shininess)
        else:
            gl.glDisable(gl.GL_LIGHTING)

        if material.additive:
            gl.glBlendFunc(gl.GL_SRC_ALPHA, gl.GL_ONE)
        else:
            gl.glBlendFunc(gl.GL_SRC_ALPHA, gl.GL_ONE_MINUS_SRC_ALPHA)

        if material.double_sided:
            gl.glDisable(gl.GL_CULL_FACE)
        else:
            gl.glEnable(gl.GL_CULL_FACE)
            gl.glCullFace(gl.GL_FRONT if material.back_side else gl.GL_BACK)

        gl.glPolygonMode(gl.GL_FRONT_AND_BACK, gl.GL_LINE if material.wireframe else gl.GL_FILL)
        gl.glPointSize(material.point_size)

    # ------------------------------------------------------------------
    # Textures
    def _texture_for(self, geometry: Geometry, material: Material) -> Optional[int]:
        if geometry.text is not None and geometry.font is not None:
            if "texture" not in geometry.gpu:
                surface = geometry.font.font.render(geometry.text, True, TEXT_RASTER_COLOR)
                geometry.gpu["texture"] = self._upload_surface(surface)
                geometry.add_release_hook(self._texture_release_hook(geometry.gpu["texture"]))
            return geometry.gpu["texture"]
        if material.texture is not None:
            if "texture" not in material.gpu:
                material.gpu["texture"] = self._upload_surface(material.texture.surface)
                material.add_release_hook(self._texture_release_hook(material.gpu["texture"]))
            return material.gpu["texture"]
        return None

    @staticmethod
    def _upload_surface(surface: pygame.Surface) -> int:
        data = pygame.image.tostring(surface, "RGBA", True)
        texture = gl.glGenTextures(1)
        gl.glBindTexture(gl.GL_TEXTURE_2D, texture)
        gl.glTexParameteri(gl.GL_TEXTURE_2D, gl.GL_TEXTURE_MIN_FILTER, gl.GL_LINEAR)
        gl.glTexParameteri(gl.GL_TEXTURE_2D, gl.GL_TEXTURE_MAG_FILTER, gl.GL_LINEAR)
        gl.glTexParameteri(gl.GL_TEXTURE_2D, gl.GL_TEXTURE_WRAP_S, gl.GL_CLAMP_TO_EDGE)
        gl.glTexParameteri(gl.GL_TEXTURE_2D, gl.GL_TEXTURE_WRAP_T, gl.GL_CLAMP_TO_EDGE)
        gl.glTexEnvi(gl.GL_TEXTURE_ENV, gl.GL_TEXTURE_ENV_MODE, gl.GL_MODULATE)
        gl.glTexImage2D(
            gl.GL_TEXTURE_2D,
            0,
            gl.GL_RGBA,
            surface.get_width(),
            surface.get_height(),
            0,
            gl.GL_RGBA,
            gl.GL_UNSIGNED_BYTE,
            data,
        )
        return int(texture)

    @staticmethod
    def _texture_release_hook(texture: int):
        def release() -> None:
            gl.glDeleteTextures([texture])

        return release

    # ------------------------------------------------------------------
    # Overlay
    def _begin_overlay(self, camera: Camera3D) -> bool:
        width, height = camera.viewport_size
        if width <= 0 or height <= 0:
            return False
        gl.glMatrixMode(gl.GL_PROJECTION)
        gl.glPushMatrix()
        gl.glLoadIdentity()
        gl.glOrtho(0, width, 0, height, -1, 1)
        gl.glMatrixMode(gl.GL_MODELVIEW)
        gl.glPushMatrix()
        gl.glLoadIdentity()
        gl.glDisable(gl.GL_DEPTH_TEST)
        gl.glDisable(gl.GL_LIGHTING)
        gl.glDisable(gl.GL_FOG)
        return True

    def _end_overlay(self) -> None:
        gl.glEnable(gl.GL_DEPTH_TEST)
        gl.glPopMatrix()
        gl.glMatrixMode(gl.GL_PROJECTION)
        gl.glPopMatrix()
        gl.glMatrixMode(gl.GL_MODELVIEW)

    def _draw_overlay_text(
        self, x: float, y: float, text: str, color: Tuple[int, int, int]
    ) -> None:
        surface = self._overlay_font.render(text, True, color)
        data = pygame.image.tostring(surface, "RGBA", True)
        gl.glRasterPos2f(x, y)
        gl.glDrawPixels(
            surface.get_width(),
            surface.get_height(),
            gl.GL_RGBA,
            gl.GL_UNSIGNED_BYTE,
            data,
        )
