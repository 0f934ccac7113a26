"""Tests for the keyboard controls that drive the show switcher."""
from __future__ import annotations

import logging

import pygame

from rendering.camera import Camera3D
from rendering.primitives import create_box
from rendering.scene import Material, Scene, create_entity
from timeline.assets import AssetLoader
from timeline.controls import caption_for, handle_key
from timeline.show import Show
from timeline.switcher import ShowSwitcher


class PulseShow(Show):
    SHOW_ID = "pulse"
    TITLE = "Pulse"
    STAGES = (("grow", 1.0), ("shrink", 1.0))

    def build(self):
        self.box = self.own(create_entity(create_box(), Material(), name=self.SHOW_ID))

    def stage_handlers(self):
        return (self._grow, self._shrink)

    def _grow(self, progress):
        self.box.set_scale(1.0 + progress)

    def _shrink(self, progress):
        self.box.set_scale(2.0 - progress)


class BrokenShow(PulseShow):
    SHOW_ID = "broken"

    def build(self):
        super().build()
        raise RuntimeError("bad geometry table")


def _switcher():
    scene = Scene()
    switcher = ShowSwitcher()
    for show_type in (PulseShow, BrokenShow):
        switcher.register(show_type(scene, Camera3D(), AssetLoader()))
    return switcher, scene


def test_escape_quits():
    """Escape asks the player to stop."""
    switcher, _ = _switcher()
    assert handle_key(switcher, pygame.K_ESCAPE) is False


def test_number_keys_activate_in_catalog_order():
    """Key 1 starts the first registered show; keys past the end do nothing."""
    switcher, _ = _switcher()
    assert handle_key(switcher, pygame.K_1)
    assert switcher.active_id == "pulse"
    assert handle_key(switcher, pygame.K_9)
    assert switcher.active_id == "pulse"


def test_failing_show_is_logged_and_player_keeps_running(caplog):
    """A show that cannot start is logged; the loop continues with no show active."""
    switcher, scene = _switcher()
    handle_key(switcher, pygame.K_1)
    with caplog.at_level(logging.ERROR, logger="timeline.controls"):
        assert handle_key(switcher, pygame.K_2)
    assert "failed" in caplog.text
    assert switcher.active is None
    assert len(scene) == 0
    assert handle_key(switcher, pygame.K_1)
    assert switcher.active_id == "pulse"


def test_arrows_cycle_and_r_restarts():
    """Arrow keys step through shows and R restarts the current one."""
    switcher, _ = _switcher()
    handle_key(switcher, pygame.K_1)
    switcher.update(0.5)
    handle_key(switcher, pygame.K_r)
    assert switcher.active.elapsed == 0.0
    handle_key(switcher, pygame.K_LEFT)
    assert switcher.active_id is None
    handle_key(switcher, pygame.K_RIGHT)
    assert switcher.active_id == "pulse"


def test_caption_names_show_and_stage():
    """The caption shows the key number, title and current stage."""
    switcher, _ = _switcher()
    assert caption_for(switcher) is None
    handle_key(switcher, pygame.K_1)
    switcher.update(1.5)
    assert caption_for(switcher) == "1. Pulse | shrink"
