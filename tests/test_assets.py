"""Tests for deferred font/texture loading and subscriptions."""
from __future__ import annotations

import logging

import pytest

from timeline.assets import (
    CANCELLED,
    FAILED,
    RESOLVED,
    AssetLoader,
    AssetRequest,
    FontHandle,
    TextureHandle,
)


class FakeFont:
    """Stands in for ``pygame.font.Font``: 10 px per character, 20 px tall."""

    def size(self, text):
        return (len(text) * 10, 20)


def _font_factory(calls):
    def factory(path):
        calls.append(path)
        return FontHandle(path=path, font=FakeFont())

    return factory


def _missing_texture(path):
    raise FileNotFoundError(path)


def test_font_measure_in_em_units():
    """Text extents are reported relative to the line height."""
    handle = FontHandle(path=None, font=FakeFont())
    assert handle.measure("abcd") == pytest.approx((2.0, 1.0))


def test_requests_complete_only_on_poll():
    """Loads are deferred until the host polls."""
    calls = []
    loader = AssetLoader(font_factory=_font_factory(calls))
    request = loader.load_font()
    received = []
    request.add_done_callback(received.append)
    assert not request.done
    assert loader.pending_count() == 1

    assert loader.poll() == 1
    assert request.state == RESOLVED
    assert received == [request]
    assert calls == [None]


def test_same_path_uses_cache():
    """A second request for the same font reuses the loaded handle."""
    calls = []
    loader = AssetLoader(font_factory=_font_factory(calls))
    first = loader.load_font("title.ttf")
    second = loader.load_font("title.ttf")
    loader.poll()
    assert first.value is second.value
    assert calls == ["title.ttf"]


def test_poll_limit():
    """poll(limit) completes at most that many requests per call."""
    loader = AssetLoader(font_factory=_font_factory([]))
    loader.load_font("a")
    loader.load_font("b")
    assert loader.poll(limit=1) == 1
    assert loader.pending_count() == 1


def test_failed_load_is_logged_and_delivered(caplog):
    """A missing file fails the request and logs a warning instead of raising."""
    loader = AssetLoader(texture_factory=_missing_texture)
    request = loader.load_texture("missing.png")
    with caplog.at_level(logging.WARNING, logger="timeline.assets"):
        loader.poll()
    assert request.state == FAILED
    assert isinstance(request.error, FileNotFoundError)
    assert "missing.png" in caplog.text


def test_cancelled_request_never_calls_back():
    """Cancelling drops callbacks and the loader skips the request."""
    calls = []
    loader = AssetLoader(font_factory=_font_factory(calls))
    request = loader.load_font()
    received = []
    request.add_done_callback(received.append)
    assert request.cancel()
    loader.poll()
    assert request.state == CANCELLED
    assert received == []
    assert calls == []


def test_callback_added_after_completion_runs_immediately():
    """Late subscribers to a finished request are called at once."""
    request: AssetRequest = AssetRequest("texture", "a.png")
    request.resolve(TextureHandle(path="a.png", surface=None))
    received = []
    request.add_done_callback(received.append)
    assert received == [request]


def test_resolve_is_one_shot():
    """Only the first completion sticks."""
    request: AssetRequest = AssetRequest("font", None)
    request.resolve("first")
    request.fail(OSError("late"))
    assert request.value == "first"
    assert request.state == RESOLVED
    assert not request.cancel()
