"""Procedural geometry builders used by the shows."""
from __future__ import annotations

import math
from typing import List, Optional, Sequence, Tuple

import numpy as np

from .scene import LINE_STRIP, LINES, POINTS, TRIANGLES, Geometry

Vec3 = Tuple[float, float, float]


def _grid_indices(rows: int, cols: int) -> np.ndarray:
    """Two triangles per cell of a ``(rows + 1) x (cols + 1)`` vertex lattice."""

    stride = cols + 1
    indices: List[int] = []
    for r in range(rows):
        for c in range(cols):
            a = r * stride + c
            b = a + stride
            c1 = a + 1
            d = b + 1
            indices.extend((a, b, c1, c1, b, d))
    return np.array(indices, dtype=np.uint32)


def _flipped(indices: np.ndarray) -> np.ndarray:
    return indices.reshape(-1, 3)[:, ::-1].ravel().copy()


def create_box(width: float = 1.0, height: float = 1.0, depth: float = 1.0) -> Geometry:
    """Axis-aligned box with four vertices per face so every face shades flat."""

    hx, hy, hz = width / 2.0, height / 2.0, depth / 2.0
    faces = [
        # +X, -X, +Y, -Y, +Z, -Z
        [(hx, -hy, hz), (hx, -hy, -hz), (hx, hy, -hz), (hx, hy, hz)],
        [(-hx, -hy, -hz), (-hx, -hy, hz), (-hx, hy, hz), (-hx, hy, -hz)],
        [(-hx, hy, hz), (hx, hy, hz), (hx, hy, -hz), (-hx, hy, -hz)],
        [(-hx, -hy, -hz), (hx, -hy, -hz), (hx, -hy, hz), (-hx, -hy, hz)],
        [(-hx, -hy, hz), (hx, -hy, hz), (hx, hy, hz), (-hx, hy, hz)],
        [(hx, -hy, -hz), (-hx, -hy, -hz), (-hx, hy, -hz), (hx, hy, -hz)],
    ]
    vertices: List[Vec3] = []
    indices: List[int] = []
    for face in faces:
        start = len(vertices)
        vertices.extend(face)
        indices.extend((start, start + 1, start + 2, start, start + 2, start + 3))
    return Geometry(np.array(vertices), np.array(indices))


def create_plane(
    width: float = 1.0,
    height: float = 1.0,
    width_segments: int = 1,
    height_segments: int = 1,
) -> Geometry:
    """Subdivided rectangle in the XY plane facing +Z."""

    xs = np.linspace(-width / 2.0, width / 2.0, width_segments + 1)
    ys = np.linspace(height / 2.0, -height / 2.0, height_segments + 1)
    grid_x, grid_y = np.meshgrid(xs, ys)
    positions = np.column_stack(
        (grid_x.ravel(), grid_y.ravel(), np.zeros(grid_x.size))
    )
    return Geometry(positions, _grid_indices(height_segments, width_segments))


def create_sphere(
    radius: float = 1.0, width_segments: int = 16, height_segments: int = 12
) -> Geometry:
    phi = np.linspace(0.0, math.tau, width_segments + 1)
    theta = np.linspace(0.0, math.pi, height_segments + 1)
    rows = []
    for t in theta:
        rows.append(
            np.column_stack(
                (
                    -radius * np.cos(phi) * math.sin(t),
                    np.full(phi.size, radius * math.cos(t)),
                    radius * np.sin(phi) * math.sin(t),
                )
            )
        )
    positions = np.vstack(rows)
    return Geometry(positions, _grid_indices(height_segments, width_segments))


def create_torus(
    radius: float = 1.0,
    tube: float = 0.4,
    radial_segments: int = 12,
    tubular_segments: int = 48,
) -> Geometry:
    """Ring in the XY plane; ``radius`` to the tube centre, ``tube`` its thickness."""

    rows = []
    for j in range(radial_segments + 1):
        v = j / radial_segments * math.tau
        u = np.linspace(0.0, math.tau, tubular_segments + 1)
        rows.append(
            np.column_stack(
                (
                    (radius + tube * math.cos(v)) * np.cos(u),
                    (radius + tube * math.cos(v)) * np.sin(u),
                    np.full(u.size, tube * math.sin(v)),
                )
            )
        )
    positions = np.vstack(rows)
    # Rows advance around the tube, so the lattice winds inward unless flipped.
    return Geometry(positions, _flipped(_grid_indices(radial_segments, tubular_segments)))


def create_cylinder(
    radius_top: float = 1.0,
    radius_bottom: float = 1.0,
    height: float = 1.0,
    radial_segments: int = 16,
    capped: bool = True,
) -> Geometry:
    """Y-aligned cylinder; ``radius_top == 0`` gives a cone."""

    half = height / 2.0
    angles = np.linspace(0.0, math.tau, radial_segments + 1)
    top = np.column_stack(
        (np.sin(angles) * radius_top, np.full(angles.size, half), np.cos(angles) * radius_top)
    )
    bottom = np.column_stack(
        (
            np.sin(angles) * radius_bottom,
            np.full(angles.size, -half),
            np.cos(angles) * radius_bottom,
        )
    )
    positions = [top, bottom]
    indices = list(_grid_indices(1, radial_segments))

    def add_cap(ring: np.ndarray, y: float, flip: bool) -> None:
        start = sum(len(block) for block in positions)
        centre = start + ring.shape[0]
        positions.append(ring)
        positions.append(np.array([[0.0, y, 0.0]]))
        for i in range(radial_segments):
            a, b = start + i, start + i + 1
            indices.extend((centre, b, a) if flip else (centre, a, b))

    if capped:
        if radius_top > 0.0:
            add_cap(top.copy(), half, flip=False)
        if radius_bottom > 0.0:
            add_cap(bottom.copy(), -half, flip=True)
    return Geometry(np.vstack(positions), np.array(indices, dtype=np.uint32))


def create_cone(radius: float = 1.0, height: float = 1.0, radial_segments: int = 16) -> Geometry:
    return create_cylinder(0.0, radius, height, radial_segments)


def create_octahedron(radius: float = 1.0) -> Geometry:
    r = radius
    vertices = [(r, 0, 0), (-r, 0, 0), (0, r, 0), (0, -r, 0), (0, 0, r), (0, 0, -r)]
    faces = [
        (0, 2, 4), (0, 4, 3), (0, 3, 5), (0, 5, 2),
        (1, 2, 5), (1, 5, 3), (1, 3, 4), (1, 4, 2),
    ]
    # Unshared vertices keep the facets flat shaded.
    positions = np.array([vertices[i] for face in faces for i in face], dtype=np.float32)
    return Geometry(positions, np.arange(len(faces) * 3, dtype=np.uint32))


def create_ring(
    inner_radius: float = 0.5, outer_radius: float = 1.0, segments: int = 32
) -> Geometry:
    """Flat annulus in the XY plane facing +Z."""

    angles = np.linspace(0.0, math.tau, segments + 1)
    circle = np.column_stack((np.cos(angles), np.sin(angles), np.zeros(angles.size)))
    outer = circle * outer_radius
    inner = circle * inner_radius
    return Geometry(np.vstack((outer, inner)), _flipped(_grid_indices(1, segments)))


def create_tube(
    path: np.ndarray,
    radius: float = 0.1,
    radial_segments: int = 8,
) -> Geometry:
    """Sweep a circle along ``path`` (an (N, 3) array of centre points).

    The centre line is kept in ``attributes["centerline"]`` and the unit offset
    of every vertex from it in ``attributes["offset"]`` so callers can deform
    the tube by rebuilding ``positions`` from those arrays.
    """

    centers = np.asarray(path, dtype=np.float64)
    if centers.shape[0] < 2:
        raise ValueError("A tube path needs at least two points")
    tangents = np.gradient(centers, axis=0)
    tangents /= np.maximum(np.linalg.norm(tangents, axis=1, keepdims=True), 1e-9)

    reference = np.array([0.0, 1.0, 0.0])
    if abs(float(np.dot(tangents[0], reference))) > 0.9:
        reference = np.array([1.0, 0.0, 0.0])
    angles = np.linspace(0.0, math.tau, radial_segments + 1)

    positions = []
    offsets = []
    centerline = []
    for center, tangent in zip(centers, tangents):
        normal = np.cross(tangent, reference)
        normal /= max(np.linalg.norm(normal), 1e-9)
        binormal = np.cross(tangent, normal)
        ring = np.outer(np.cos(angles), normal) + np.outer(np.sin(angles), binormal)
        offsets.append(ring)
        positions.append(center + ring * radius)
        centerline.append(np.repeat(center[None, :], angles.size, axis=0))
    geometry = Geometry(
        np.vstack(positions),
        _flipped(_grid_indices(centers.shape[0] - 1, radial_segments)),
        attributes={
            "centerline": np.vstack(centerline).astype(np.float32),
            "offset": np.vstack(offsets).astype(np.float32),
        },
    )
    return geometry


def create_polyline(points: Sequence[Vec3], closed: bool = False) -> Geometry:
    positions = np.asarray(points, dtype=np.float32).reshape(-1, 3)
    if closed and positions.shape[0] > 1:
        positions = np.vstack((positions, positions[:1]))
    return Geometry(positions, mode=LINE_STRIP)


def create_segments(pairs: Sequence[Tuple[Vec3, Vec3]]) -> Geometry:
    """Independent line segments, two vertices each."""

    positions = np.array([point for pair in pairs for point in pair], dtype=np.float32)
    return Geometry(positions.reshape(-1, 3), mode=LINES)


def create_point_cloud(positions: np.ndarray, sizes: Optional[np.ndarray] = None) -> Geometry:
    attributes = {}
    if sizes is not None:
        attributes["size"] = np.asarray(sizes, dtype=np.float32)
    return Geometry(positions, mode=POINTS, attributes=attributes)


def create_text(text: str, font, size: float = 1.0, *, center: bool = False) -> Geometry:
    """Textured quad sized to ``text`` as measured by a loaded font handle.

    The quad starts at the origin and grows along +X unless ``center`` is set.
    The renderer rasterises ``geometry.text`` with ``geometry.font`` on first
    draw.
    """

    width_em, height_em = font.measure(text)
    width = width_em * size
    height = height_em * size
    left = -width / 2.0 if center else 0.0
    bottom = -height / 2.0 if center else 0.0
    positions = np.array(
        [
            (left, bottom, 0.0),
            (left + width, bottom, 0.0),
            (left + width, bottom + height, 0.0),
            (left, bottom + height, 0.0),
        ],
        dtype=np.float32,
    )
    uvs = np.array([(0.0, 0.0), (1.0, 0.0), (1.0, 1.0), (0.0, 1.0)], dtype=np.float32)
    geometry = Geometry(
        positions,
        np.array([0, 1, 2, 0, 2, 3], dtype=np.uint32),
        mode=TRIANGLES,
        attributes={"uv": uvs},
    )
    geometry.text = text
    geometry.font = font
    return geometry
