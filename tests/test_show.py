"""Tests for the show lifecycle: init, stage dispatch, looping and dispose."""
from __future__ import annotations

import logging

import pytest

from rendering.camera import Camera3D
from rendering.primitives import create_box
from rendering.scene import Material, Scene, create_entity
from timeline.assets import AssetLoader, FontHandle, TextureHandle
from timeline.schedule import ScheduleError
from timeline.show import Show
from timeline.switcher import ShowSwitcher


class FakeFont:
    def size(self, text):
        return (len(text) * 10, 20)


def _font_factory(path):
    return FontHandle(path=path, font=FakeFont())


def _broken_font_factory(path):
    raise OSError("no such font")


class RecordingShow(Show):
    """Two-stage show that records every hook call."""

    SHOW_ID = "recording"
    STAGES = (("first", 1.0), ("second", 2.0))
    CAMERA_POSITION = (0.0, 1.0, 5.0)

    def build(self):
        self.calls = []
        self.fonts = []
        self.box = self.own(create_entity(create_box(), Material(), name="box"))
        self.request_font(self.fonts.append)

    def stage_handlers(self):
        return (self._first, self._second)

    def reset(self):
        self.calls.append(("reset", 0.0))

    def _first(self, progress):
        self.calls.append(("first", progress))

    def _second(self, progress):
        self.calls.append(("second", progress))


class MismatchedShow(RecordingShow):
    SHOW_ID = "mismatched"

    def stage_handlers(self):
        return (self._first,)


class HalfBuiltShow(RecordingShow):
    """Owns a box, then fails partway through construction."""

    SHOW_ID = "half-built"

    def build(self):
        self.box = self.own(create_entity(create_box(), Material(), name="box"))
        self.scene.background = (1.0, 0.0, 0.0)
        raise RuntimeError("missing asset table")


class TexturedShow(RecordingShow):
    SHOW_ID = "textured"

    def build(self):
        super().build()
        self.textures = []
        self.request_texture("crate.png", self.textures.append)


class FakeSurface:
    def get_size(self):
        return (64, 32)


def _texture_factory(path):
    return TextureHandle(path=path, surface=FakeSurface())


def _make(show_type=RecordingShow, font_factory=_font_factory, **kwargs):
    scene = Scene()
    camera = Camera3D()
    assets = AssetLoader(font_factory=font_factory, texture_factory=_texture_factory)
    return show_type(scene, camera, assets, **kwargs), scene, camera, assets


def test_init_builds_and_resets():
    """init adds entities, poses the camera and runs reset once."""
    show, scene, camera, _ = _make()
    show.init()
    assert show.active
    assert show.box in scene
    assert show.calls == [("reset", 0.0)]
    assert camera.position == (0.0, 1.0, 5.0)


def test_update_dispatches_one_handler_per_tick():
    """Each tick runs exactly the handler of the current stage."""
    show, _, _, _ = _make()
    show.init()
    show.calls.clear()
    show.update(0.5)
    show.update(1.0)
    assert show.calls == [("first", pytest.approx(0.5)), ("second", pytest.approx(0.25))]
    assert show.position.name == "second"


def test_exact_loop_boundary_runs_reset():
    """Landing on the loop length resets instead of running a handler."""
    show, _, _, _ = _make()
    show.init()
    show.calls.clear()
    show.update(3.0)
    assert show.calls == [("reset", 0.0)]
    assert show.position.is_reset


def test_skipped_boundary_resets_before_handler():
    """Wrapping past the loop end restores initial state before the new loop runs."""
    show, _, _, _ = _make()
    show.init()
    show.update(2.5)
    show.calls.clear()
    show.update(1.0)
    assert show.calls == [("reset", 0.0), ("first", pytest.approx(0.5))]


def test_fixed_delta_drives_clock():
    """Shows built with a fixed delta advance without an explicit dt."""
    show, _, _, _ = _make(fixed_delta=0.25)
    show.init()
    show.update()
    show.update()
    assert show.elapsed == pytest.approx(0.5)


def test_update_before_init_is_ignored():
    """An inactive show does not advance."""
    show, _, _, _ = _make()
    show.update(1.0)
    assert show.elapsed == 0.0


def test_same_elapsed_gives_same_state_regardless_of_step_size():
    """Handlers see the same stage and progress for the same cumulative time."""
    coarse, _, _, _ = _make()
    fine, _, _, _ = _make()
    coarse.init()
    fine.init()
    coarse.update(1.5)
    for _ in range(6):
        fine.update(0.25)
    assert coarse.calls[-1] == fine.calls[-1]


def test_font_delivered_after_poll():
    """Font callbacks arrive once the loader is polled."""
    show, _, _, assets = _make()
    show.init()
    assert show.fonts == []
    assets.poll()
    assert len(show.fonts) == 1


def test_font_after_dispose_is_dropped():
    """A font completing after dispose never reaches the show."""
    show, _, _, assets = _make()
    show.init()
    fonts = show.fonts
    show.dispose()
    assets.poll()
    assert fonts == []


def test_texture_delivered_after_poll():
    """Texture callbacks arrive once the loader is polled."""
    show, _, _, assets = _make(TexturedShow)
    show.init()
    assert show.textures == []
    assets.poll()
    assert len(show.textures) == 1
    assert show.textures[0].size == (64, 32)


def test_texture_after_dispose_is_dropped():
    """A texture completing after dispose never reaches the show."""
    show, _, _, assets = _make(TexturedShow)
    show.init()
    textures = show.textures
    show.dispose()
    assets.poll()
    assert textures == []


def test_font_failure_is_logged_and_show_continues(caplog):
    """A failed font load is a warning; the show keeps running."""
    show, _, _, assets = _make(font_factory=_broken_font_factory)
    show.init()
    with caplog.at_level(logging.WARNING):
        assets.poll()
    show.update(0.5)
    assert show.fonts == []
    assert "continues without font" in caplog.text
    assert show.calls[-1][0] == "first"


def test_dispose_releases_and_is_idempotent():
    """dispose empties the scene, releases resources and restores the camera."""
    show, scene, camera, _ = _make()
    show.init()
    box = show.box
    show.dispose()
    show.dispose()
    assert len(scene) == 0
    assert box.geometry.released
    assert not show.active
    assert camera.position == camera.home_position


def test_reinit_starts_from_zero():
    """Re-activating a show restarts its clock and rebuilds its entities."""
    show, scene, _, _ = _make()
    show.init()
    show.update(2.0)
    show.dispose()
    show.init()
    assert show.elapsed == 0.0
    assert len(scene) == 1


def test_double_init_warns(caplog):
    """A second init while active is ignored with a warning."""
    show, scene, _, _ = _make()
    show.init()
    with caplog.at_level(logging.WARNING, logger="timeline.show"):
        show.init()
    assert len(scene) == 1
    assert "already active" in caplog.text


def test_handler_count_must_match_stages():
    """A show with the wrong number of handlers fails init and leaves nothing behind."""
    show, scene, _, _ = _make(MismatchedShow)
    with pytest.raises(ScheduleError):
        show.init()
    assert len(scene) == 0
    assert not show.active


def test_missing_show_id_rejected():
    """Every show needs an identifier."""

    class Anonymous(Show):
        STAGES = (("only", 1.0),)

    with pytest.raises(ScheduleError):
        Anonymous(Scene(), Camera3D(), AssetLoader())


def test_failed_build_leaves_scene_clean():
    """Entities owned before a build failure are removed and released."""
    show, scene, camera, _ = _make(HalfBuiltShow)
    with pytest.raises(RuntimeError):
        show.init()
    assert len(scene) == 0
    assert show.box.geometry.released
    assert not show.active
    assert camera.position == camera.home_position
    assert scene.background == Scene().background


def test_failed_activation_leaves_no_show_behind():
    """A show that fails to build leaves the switcher idle and the scene empty."""
    show, scene, _, _ = _make(HalfBuiltShow)
    switcher = ShowSwitcher()
    switcher.register(show)
    with pytest.raises(RuntimeError):
        switcher.activate("half-built")
    assert switcher.active is None
    switcher.shutdown()
    assert len(scene) == 0
