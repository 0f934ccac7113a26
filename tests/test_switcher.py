"""Tests for registering, activating and cycling shows."""
from __future__ import annotations

import logging

import pytest

from rendering.camera import Camera3D
from rendering.primitives import create_box
from rendering.scene import Material, Scene, create_entity
from timeline.assets import AssetLoader
from timeline.show import Show
from timeline.switcher import ShowSwitcher


class BoxShow(Show):
    SHOW_ID = "box"
    STAGES = (("only", 1.0),)

    def build(self):
        self.box = self.own(create_entity(create_box(), Material(), name=self.SHOW_ID))

    def stage_handlers(self):
        return (self._spin,)

    def _spin(self, progress):
        self.box.rotation[1] = progress


class OtherShow(BoxShow):
    SHOW_ID = "other"


class ExplodingShow(BoxShow):
    SHOW_ID = "exploding"

    def _spin(self, progress):
        raise RuntimeError("boom")


class TracingShow(BoxShow):
    """Box show that appends its lifecycle calls to a shared log."""

    log = []

    def init(self):
        self.log.append(("init", self.SHOW_ID))
        super().init()

    def dispose(self):
        self.log.append(("dispose", self.SHOW_ID))
        super().dispose()


class TracingOtherShow(TracingShow):
    SHOW_ID = "tracing-other"


def _switcher(*show_types):
    scene = Scene()
    camera = Camera3D()
    assets = AssetLoader()
    switcher = ShowSwitcher()
    for show_type in show_types:
        switcher.register(show_type(scene, camera, assets))
    return switcher, scene


def test_register_rejects_duplicates():
    """Two shows cannot share an identifier."""
    switcher, _ = _switcher(BoxShow)
    with pytest.raises(ValueError):
        switcher.register(BoxShow(Scene(), Camera3D(), AssetLoader()))


def test_unknown_show_raises_key_error():
    """Activating an id that was never registered is a KeyError."""
    switcher, _ = _switcher(BoxShow)
    with pytest.raises(KeyError):
        switcher.activate("missing")
    assert switcher.active is None


def test_activate_disposes_previous_show():
    """Only the newly activated show's entities remain in the scene."""
    switcher, scene = _switcher(BoxShow, OtherShow)
    first = switcher.activate("box")
    second = switcher.activate("other")
    assert not first.active
    assert second.active
    assert [node.name for node in scene.nodes] == ["other"]
    assert switcher.active_id == "other"


def test_reactivating_restarts_from_zero():
    """Activating the running show again restarts its clock."""
    switcher, scene = _switcher(BoxShow)
    switcher.activate("box")
    switcher.update(0.5)
    show = switcher.restart()
    assert show.elapsed == 0.0
    assert len(scene) == 1


def test_cycle_wraps_in_registration_order():
    """cycle steps through shows in order and wraps at both ends."""
    switcher, _ = _switcher(BoxShow, OtherShow)
    assert switcher.cycle().SHOW_ID == "box"
    assert switcher.cycle().SHOW_ID == "other"
    assert switcher.cycle().SHOW_ID == "box"
    assert switcher.cycle(-1).SHOW_ID == "other"


def test_cycle_and_restart_without_shows():
    """An empty switcher has nothing to cycle or restart."""
    switcher = ShowSwitcher()
    assert switcher.cycle() is None
    assert switcher.restart() is None
    switcher.update(0.1)


def test_update_forwards_to_active_show():
    """Only the active show advances."""
    switcher, _ = _switcher(BoxShow, OtherShow)
    show = switcher.activate("box")
    switcher.update(0.25)
    assert show.elapsed == pytest.approx(0.25)
    assert switcher.get("other").elapsed == 0.0


def test_update_absorbs_frame_errors(caplog):
    """A failing frame is logged and the loop keeps going."""
    switcher, _ = _switcher(ExplodingShow)
    switcher.activate("exploding")
    with caplog.at_level(logging.ERROR, logger="timeline.switcher"):
        switcher.update(0.1)
        switcher.update(0.1)
    assert caplog.text.count("failed during update") == 2
    assert switcher.active_id == "exploding"


def test_shutdown_disposes_active_show():
    """shutdown leaves the scene empty and no show active."""
    switcher, scene = _switcher(BoxShow)
    switcher.activate("box")
    switcher.shutdown()
    assert switcher.active is None
    assert len(scene) == 0
    assert "box" in switcher
    assert switcher.show_ids == ["box"]


def test_previous_show_disposed_once_before_next_init():
    """Switching shows disposes the old one exactly once before the new init."""
    TracingShow.log = []
    switcher, _ = _switcher(TracingShow, TracingOtherShow)
    switcher.activate("box")
    switcher.activate("tracing-other")
    assert TracingShow.log == [
        ("init", "box"),
        ("dispose", "box"),
        ("init", "tracing-other"),
    ]
