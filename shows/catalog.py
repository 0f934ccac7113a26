"""Every bundled show, in the order the number keys select them."""
from __future__ import annotations

from typing import Dict, Optional, Type

from rendering.camera import Camera3D
from rendering.scene import Scene
from timeline.assets import AssetLoader
from timeline.config import NOMINAL_FRAME_DELTA
from timeline.show import Show
from timeline.switcher import ShowSwitcher

from .brick_by_brick import BrickByBrickShow
from .document_leak import DocumentLeakShow
from .money_transfer import MoneyTransferShow
from .rotating_cubes import RotatingCubesShow
from .scales_of_power import ScalesOfPowerShow
from .sphere_spiral import SphereSpiralShow
from .torus_field import TorusFieldShow
from .unraveling_thread import UnravelingThreadShow
from .waving_flag import WavingFlagShow

SHOW_TYPES: Dict[str, Type[Show]] = {
    show.SHOW_ID: show
    for show in (
        RotatingCubesShow,
        TorusFieldShow,
        SphereSpiralShow,
        WavingFlagShow,
        MoneyTransferShow,
        BrickByBrickShow,
        UnravelingThreadShow,
        ScalesOfPowerShow,
        DocumentLeakShow,
    )
}


def create_switcher(
    scene: Scene,
    camera: Camera3D,
    assets: AssetLoader,
    fixed_delta: Optional[float] = NOMINAL_FRAME_DELTA,
) -> ShowSwitcher:
    switcher = ShowSwitcher()
    for show_type in SHOW_TYPES.values():
        switcher.register(show_type(scene, camera, assets, fixed_delta=fixed_delta))
    return switcher
