"""Scene container and drawable nodes mutated by the shows.

Nodes keep their transforms in small numpy vectors so stage handlers can write
single components in place (``node.position[1] = ...``).  Nothing here talks
to OpenGL; :mod:`rendering.draw_system` attaches GPU resources lazily and
registers release hooks on the geometry/material it uploads.
"""
from __future__ import annotations

import colorsys
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterator, List, Optional, Sequence, Tuple, Union

import numpy as np

Vec3 = Tuple[float, float, float]
Color = Tuple[float, float, float]

TRIANGLES = "triangles"
LINES = "lines"
LINE_STRIP = "line_strip"
POINTS = "points"


def hex_color(value: int) -> Color:
    return (
        ((value >> 16) & 0xFF) / 255.0,
        ((value >> 8) & 0xFF) / 255.0,
        (value & 0xFF) / 255.0,
    )


def hsl_color(hue: float, saturation: float, lightness: float) -> Color:
    r, g, b = colorsys.hls_to_rgb(hue % 1.0, lightness, saturation)
    return (r, g, b)


class _Releasable:
    """Runs registered release hooks exactly once."""

    def __init__(self) -> None:
        self.released = False
        self._release_hooks: List[Callable[[], None]] = []
        # Backend-specific handles (display lists, texture ids).
        self.gpu: Dict[str, Any] = {}

    def add_release_hook(self, hook: Callable[[], None]) -> None:
        if self.released:
            hook()
            return
        self._release_hooks.append(hook)

    def release(self) -> None:
        if self.released:
            return
        self.released = True
        hooks, self._release_hooks = self._release_hooks, []
        for hook in hooks:
            hook()
        self.gpu.clear()


class Geometry(_Releasable):
    """Vertex buffer plus optional index buffer and extra attributes."""

    def __init__(
        self,
        positions: np.ndarray,
        indices: Optional[np.ndarray] = None,
        *,
        mode: str = TRIANGLES,
        attributes: Optional[Dict[str, np.ndarray]] = None,
    ) -> None:
        super().__init__()
        self.positions = np.asarray(positions, dtype=np.float32).reshape(-1, 3)
        self.indices = None if indices is None else np.asarray(indices, dtype=np.uint32)
        self.mode = mode
        self.attributes: Dict[str, np.ndarray] = dict(attributes or {})
        self.normals: Optional[np.ndarray] = None
        self.version = 0
        # Set by text geometry so the renderer can rasterise a label texture.
        self.text: Optional[str] = None
        self.font: Any = None
        if mode == TRIANGLES and self.indices is not None:
            self.compute_vertex_normals()

    @property
    def vertex_count(self) -> int:
        return int(self.positions.shape[0])

    def mark_dirty(self) -> None:
        self.version += 1

    def compute_vertex_normals(self) -> None:
        if self.indices is None or self.indices.size == 0:
            return
        tris = self.indices.reshape(-1, 3)
        v0 = self.positions[tris[:, 0]]
        v1 = self.positions[tris[:, 1]]
        v2 = self.positions[tris[:, 2]]
        face_normals = np.cross(v1 - v0, v2 - v0)
        normals = np.zeros_like(self.positions)
        for corner in range(3):
            np.add.at(normals, tris[:, corner], face_normals)
        lengths = np.linalg.norm(normals, axis=1, keepdims=True)
        lengths[lengths == 0.0] = 1.0
        self.normals = (normals / lengths).astype(np.float32)

    def bounds(self) -> Tuple[np.ndarray, np.ndarray]:
        return self.positions.min(axis=0), self.positions.max(axis=0)


@dataclass(eq=False)
class Material(_Releasable):
    color: Color = (1.0, 1.0, 1.0)
    opacity: float = 1.0
    transparent: bool = False
    emissive: Color = (0.0, 0.0, 0.0)
    emissive_intensity: float = 0.0
    metalness: float = 0.0
    roughness: float = 1.0
    wireframe: bool = False
    additive: bool = False
    double_sided: bool = False
    back_side: bool = False
    lit: bool = True
    point_size: float = 1.0
    texture: Any = None

    def __post_init__(self) -> None:
        _Releasable.__init__(self)


ScaleLike = Union[float, Sequence[float]]


def _vec3(values: ScaleLike) -> np.ndarray:
    if isinstance(values, (int, float)):
        return np.full(3, float(values), dtype=np.float64)
    return np.asarray(values, dtype=np.float64).reshape(3)


class Node:
    """Transformable scene-graph node with optional children."""

    kind = "group"

    def __init__(self, name: str = "") -> None:
        self.name = name
        self.position = np.zeros(3, dtype=np.float64)
        self.rotation = np.zeros(3, dtype=np.float64)
        self.scale = np.ones(3, dtype=np.float64)
        self.visible = True
        self.parent: Optional[Node] = None
        self.children: List[Node] = []
        self.user_data: Dict[str, Any] = {}
        self.released = False

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"

    # ------------------------------------------------------------------
    # Hierarchy
    def add(self, *nodes: "Node") -> None:
        for node in nodes:
            if node.parent is not None:
                node.parent.remove(node)
            node.parent = self
            self.children.append(node)

    def remove(self, node: "Node") -> None:
        if node in self.children:
            self.children.remove(node)
            node.parent = None

    def traverse(self) -> Iterator["Node"]:
        yield self
        for child in self.children:
            yield from child.traverse()

    # ------------------------------------------------------------------
    # Transform/appearance
    def set_transform(
        self,
        position: Optional[Sequence[float]] = None,
        rotation: Optional[Sequence[float]] = None,
        scale: Optional[ScaleLike] = None,
    ) -> None:
        if position is not None:
            self.position[:] = _vec3(position)
        if rotation is not None:
            self.rotation[:] = _vec3(rotation)
        if scale is not None:
            self.scale[:] = _vec3(scale)

    def set_position(self, x: float, y: float, z: float) -> None:
        self.position[:] = (x, y, z)

    def set_scale(self, value: ScaleLike) -> None:
        self.scale[:] = _vec3(value)

    def set_visible(self, visible: bool) -> None:
        self.visible = bool(visible)

    def set_opacity(self, value: float) -> None:
        for node in self.traverse():
            material = getattr(node, "material", None)
            if material is not None:
                material.opacity = value
                material.transparent = material.transparent or value < 1.0

    def world_visible(self) -> bool:
        node: Optional[Node] = self
        while node is not None:
            if not node.visible:
                return False
            node = node.parent
        return True

    def local_matrix(self) -> np.ndarray:
        """4x4 translate * rotate(X, then Y, then Z) * scale matrix."""

        cx, cy, cz = np.cos(self.rotation)
        sx, sy, sz = np.sin(self.rotation)
        rot_x = np.array([[1.0, 0.0, 0.0], [0.0, cx, -sx], [0.0, sx, cx]])
        rot_y = np.array([[cy, 0.0, sy], [0.0, 1.0, 0.0], [-sy, 0.0, cy]])
        rot_z = np.array([[cz, -sz, 0.0], [sz, cz, 0.0], [0.0, 0.0, 1.0]])
        matrix = np.identity(4)
        matrix[:3, :3] = rot_x @ rot_y @ rot_z * self.scale
        matrix[:3, 3] = self.position
        return matrix

    def world_matrix(self) -> np.ndarray:
        matrix = self.local_matrix()
        node = self.parent
        while node is not None:
            matrix = node.local_matrix() @ matrix
            node = node.parent
        return matrix

    def world_position(self) -> np.ndarray:
        return self.world_matrix()[:3, 3].copy()

    def release_resources(self) -> None:
        if self.released:
            return
        self.released = True
        for child in self.children:
            child.release_resources()
        self._release_own()

    def _release_own(self) -> None:
        pass


class Group(Node):
    kind = "group"


class Mesh(Node):
    kind = "mesh"

    def __init__(self, geometry: Geometry, material: Material, name: str = "") -> None:
        super().__init__(name)
        self.geometry = geometry
        self.material = material

    def _release_own(self) -> None:
        self.geometry.release()
        self.material.release()


class Points(Mesh):
    kind = "points"


class Line(Mesh):
    kind = "line"


AMBIENT = "ambient"
DIRECTIONAL = "directional"
POINT = "point"


class Light(Node):
    kind = "light"

    def __init__(
        self,
        light_type: str,
        color: Color = (1.0, 1.0, 1.0),
        intensity: float = 1.0,
        *,
        distance: float = 0.0,
        name: str = "",
    ) -> None:
        super().__init__(name)
        self.light_type = light_type
        self.color = color
        self.intensity = intensity
        self.distance = distance


_ENTITY_TYPES = {"mesh": Mesh, "points": Points, "line": Line}


def create_entity(
    geometry: Geometry, material: Material, kind: str = "mesh", name: str = ""
) -> Mesh:
    try:
        entity_type = _ENTITY_TYPES[kind]
    except KeyError as exc:
        raise KeyError(f"Unknown entity kind: {kind}") from exc
    return entity_type(geometry, material, name=name)


class Scene:
    """Shared, non-owning container of top-level nodes."""

    def __init__(self, background: Color = (0.0, 0.0, 0.0)) -> None:
        self.default_background = background
        self.background = background
        self.fog_color: Color = background
        self.fog_density = 0.0
        self._nodes: List[Node] = []

    def __contains__(self, node: object) -> bool:
        return any(existing is node for existing in self._nodes)

    def __len__(self) -> int:
        return len(self._nodes)

    @property
    def nodes(self) -> Tuple[Node, ...]:
        return tuple(self._nodes)

    def add(self, *nodes: Node) -> None:
        for node in nodes:
            if node not in self:
                self._nodes.append(node)

    def remove(self, *nodes: Node) -> None:
        """Detach nodes; nodes that are not present are ignored."""

        for node in nodes:
            self._nodes = [existing for existing in self._nodes if existing is not node]

    def traverse(self) -> Iterator[Node]:
        for node in list(self._nodes):
            yield from node.traverse()

    def lights(self) -> List[Light]:
        return [
            node
            for node in self.traverse()
            if isinstance(node, Light) and node.world_visible()
        ]

    def reset_environment(self) -> None:
        self.background = self.default_background
        self.fog_color = self.default_background
        self.fog_density = 0.0
