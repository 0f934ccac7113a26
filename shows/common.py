"""Construction helpers shared by the narrative shows."""
from __future__ import annotations

from typing import Optional, Sequence

from rendering.primitives import create_text
from rendering.scene import AMBIENT, Color, Light, Material, Mesh, Node, create_entity
from timeline.assets import FontHandle


def make_text(
    font: FontHandle,
    text: str,
    size: float,
    color: Color,
    *,
    center: bool = True,
    emissive_intensity: float = 0.0,
    position: Optional[Sequence[float]] = None,
    name: str = "",
) -> Mesh:
    """Text label mesh, hidden and fully transparent until a handler shows it."""

    material = Material(
        color=color,
        emissive=color,
        emissive_intensity=emissive_intensity,
        transparent=True,
        opacity=0.0,
        lit=False,
        double_sided=True,
    )
    mesh = create_entity(create_text(text, font, size, center=center), material, name=name or text)
    if position is not None:
        mesh.set_transform(position=position)
    mesh.set_visible(False)
    return mesh


def ambient(color: Color, intensity: float, name: str = "ambient") -> Light:
    return Light(AMBIENT, color, intensity, name=name)


def set_emissive_intensity(root: Node, value: float) -> None:
    """Apply ``value`` to every emissive material below ``root``."""

    for node in root.traverse():
        material = getattr(node, "material", None)
        if material is not None and any(material.emissive):
            material.emissive_intensity = value
