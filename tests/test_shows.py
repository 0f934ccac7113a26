"""Smoke and behaviour tests for every bundled show."""
from __future__ import annotations

import pytest

from rendering.camera import Camera3D
from rendering.scene import Scene
from shows.brick_by_brick import BrickByBrickShow
from shows.catalog import SHOW_TYPES, create_switcher
from shows.document_leak import DocumentLeakShow
from shows.money_transfer import MoneyTransferShow
from shows.scales_of_power import ScalesOfPowerShow
from timeline.assets import AssetLoader, FontHandle


class FakeFont:
    def size(self, text):
        return (len(text) * 10, 20)


def _font_factory(path):
    return FontHandle(path=path, font=FakeFont())


def _make(show_type):
    scene = Scene()
    camera = Camera3D()
    assets = AssetLoader(font_factory=_font_factory)
    return show_type(scene, camera, assets, fixed_delta=None), scene, camera, assets


def _walk(nodes):
    for node in nodes:
        yield node
        yield from _walk(node.children)


@pytest.mark.parametrize("show_type", list(SHOW_TYPES.values()), ids=list(SHOW_TYPES))
def test_show_runs_a_full_loop_and_cleans_up(show_type):
    """Each show survives more than one loop and leaves nothing behind."""
    show, scene, camera, assets = _make(show_type)
    show.init()
    assets.poll()
    steps = int(show.schedule.total_duration / 0.1) + 20
    for _ in range(steps):
        show.update(0.1)
    assert show.elapsed > show.schedule.total_duration
    nodes = list(_walk(scene.nodes))
    assert nodes
    show.dispose()
    assert len(scene) == 0
    for node in nodes:
        geometry = getattr(node, "geometry", None)
        if geometry is not None:
            assert geometry.released
    assert camera.position == camera.home_position


def test_brick_stack_reveals_one_brick_at_a_time():
    """Halfway through the seventh slice, six bricks are shown and the sixth is still rising."""
    show, _, _, _ = _make(BrickByBrickShow)
    show.init()
    show.update(2.0 + 10.0 * (0.5 + 0.5 / 12.0))
    assert show.position.name == "stacking"
    for brick in show.bricks[:5]:
        assert brick.visible
        assert brick.position[1] == pytest.approx(brick.user_data["target_y"])
    rising = show.bricks[5]
    assert rising.visible
    assert -3.0 < rising.position[1] < rising.user_data["target_y"]
    for brick in show.bricks[6:]:
        assert not brick.visible


def test_brick_visible_count_is_floor_of_progress():
    """Exactly floor(progress * count) bricks are visible while stacking."""
    show, _, _, _ = _make(BrickByBrickShow)
    show.init()
    show.update(2.0 + 10.0 * 0.35)
    assert sum(brick.visible for brick in show.bricks) == 4


def test_brick_reset_hides_stack():
    """Returning to the start of the loop hides every brick again."""
    show, _, _, _ = _make(BrickByBrickShow)
    show.init()
    show.update(show.schedule.total_duration - 0.5)
    assert all(brick.visible for brick in show.bricks)
    show.update(0.5)
    assert not any(brick.visible for brick in show.bricks)


def test_scales_tip_towards_poverty():
    """During the tipping stage the crossbar leans by the current tilt."""
    show, _, _, _ = _make(ScalesOfPowerShow)
    show.init()
    for _ in range(50):
        show.update(0.1)
    assert show.position.name == "tipping"
    assert show.tilt < 0.0
    assert show.crossbar.rotation[2] == pytest.approx(show.tilt)
    assert show.sparks.alive_count() <= show.sparks.capacity


def test_scales_sparks_stay_within_capacity():
    """Spark emission never exceeds the particle pool."""
    show, _, _, _ = _make(ScalesOfPowerShow)
    show.init()
    for _ in range(200):
        show.update(0.1)
    assert show.sparks.alive_count() <= show.sparks.capacity
    assert show.spark_points.geometry.attributes["alpha"].shape == (show.sparks.capacity,)


def test_money_labels_arrive_with_font():
    """Text labels are only created once the font finishes loading."""
    show, _, _, assets = _make(MoneyTransferShow)
    show.init()
    assert show.amount_text is None
    assets.poll()
    assert show.amount_text is not None
    assert show.complete_text is not None
    assert show.amount_text.geometry.text == MoneyTransferShow.AMOUNT_LABEL


def test_catalog_order_matches_number_keys():
    """The catalog lists shows in number-key order."""
    assert list(SHOW_TYPES) == [
        "rotating-cubes",
        "torus-field",
        "sphere-spiral",
        "waving-flag",
        "money-transfer",
        "brick-by-brick",
        "unraveling-thread",
        "scales-of-power",
        "document-leak",
    ]


def test_create_switcher_registers_every_show():
    """The switcher knows every catalogued show and starts with none active."""
    switcher = create_switcher(Scene(), Camera3D(), AssetLoader(font_factory=_font_factory))
    assert switcher.show_ids == list(SHOW_TYPES)
    assert switcher.active is None
    show = switcher.activate("waving-flag")
    assert show.active


def test_leak_documents_reach_full_burst_at_end_of_explosion():
    """Documents travel their whole burst distance by the end of the explosion."""
    assert DocumentLeakShow._burst(0.0) == 0.0
    assert DocumentLeakShow._burst(1.0) == pytest.approx(1.0)
    assert DocumentLeakShow._burst(0.2) < DocumentLeakShow._burst(0.6)
    show, _, _, _ = _make(DocumentLeakShow)
    show.init()
    show.update(2.0 + 3.0 * 0.999)
    assert show.position.name == "explosion"
    paper = show.papers[0]
    expected = show._exploded(paper, DocumentLeakShow._burst(show.position.progress))
    assert paper.visible
    assert paper.position.tolist() == pytest.approx(list(expected))


def test_leak_data_stream_is_staggered():
    """Late data elements wait at the top of the stream while early ones fall."""
    show, _, _, _ = _make(DocumentLeakShow)
    show.init()
    show.update(5.0 + 5.0 * 0.1)
    assert show.position.name == "data_stream"
    last = show.data[-1]
    assert last.visible
    assert last.position[1] == pytest.approx(last.user_data["top"])
    first = show.data[0]
    assert first.position[1] != pytest.approx(first.user_data["top"])


def test_leak_title_arrives_with_font():
    """The title label is built from the neutral caption once the font loads."""
    show, _, _, assets = _make(DocumentLeakShow)
    show.init()
    assert show.title_text is None
    assets.poll()
    show.update(1.0)
    assert show.title_text.geometry.text == "DOCUMENT LEAK"
    assert show.title_text.visible
