"""Asynchronous-style font and texture loading, delivered on the main thread.

Requests are queued when a show asks for an asset and completed later by
:meth:`AssetLoader.poll`, which the host calls once per frame.  A request may
therefore resolve many ticks after it was made, after its requester has been
disposed, or never.
"""
from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from typing import Any, Callable, Deque, Dict, Generic, List, Optional, Tuple, TypeVar

import pygame

from .config import DEFAULT_FONT_PATH, FONT_RASTER_SIZE

logger = logging.getLogger(__name__)

T = TypeVar("T")

PENDING = "pending"
RESOLVED = "resolved"
FAILED = "failed"
CANCELLED = "cancelled"


@dataclass
class FontHandle:
    """Loaded typeface; ``font`` is anything exposing pygame's ``size``/``render``."""

    path: Optional[str]
    font: Any

    def measure(self, text: str) -> Tuple[float, float]:
        """Return (width, height) of ``text`` in em units (height == 1)."""

        width, height = self.font.size(text)
        if height <= 0:
            return (0.0, 1.0)
        return (width / height, 1.0)


@dataclass
class TextureHandle:
    path: str
    surface: Any

    @property
    def size(self) -> Tuple[int, int]:
        return self.surface.get_size()


class AssetRequest(Generic[T]):
    """Minimal cancellable future; callbacks run synchronously on completion."""

    def __init__(self, kind: str, path: Optional[str]) -> None:
        self.kind = kind
        self.path = path
        self.state = PENDING
        self.value: Optional[T] = None
        self.error: Optional[BaseException] = None
        self._callbacks: List[Callable[["AssetRequest[T]"], None]] = []

    def __repr__(self) -> str:
        return f"AssetRequest({self.kind!r}, {self.path!r}, state={self.state})"

    @property
    def done(self) -> bool:
        return self.state != PENDING

    def add_done_callback(self, callback: Callable[["AssetRequest[T]"], None]) -> None:
        if self.state == CANCELLED:
            return
        if self.done:
            callback(self)
            return
        self._callbacks.append(callback)

    def resolve(self, value: T) -> None:
        if self.done:
            return
        self.value = value
        self.state = RESOLVED
        self._fire()

    def fail(self, error: BaseException) -> None:
        if self.done:
            return
        self.error = error
        self.state = FAILED
        self._fire()

    def cancel(self) -> bool:
        if self.done:
            return False
        self.state = CANCELLED
        self._callbacks.clear()
        return True

    def _fire(self) -> None:
        callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            callback(self)


@dataclass
class Subscription:
    """Token tying a completion callback to its owner's lifetime."""

    request: AssetRequest
    valid: bool = True

    def invalidate(self) -> None:
        self.valid = False


def _load_pygame_font(path: Optional[str]) -> FontHandle:
    if not pygame.font.get_init():
        pygame.font.init()
    return FontHandle(path=path, font=pygame.font.Font(path, FONT_RASTER_SIZE))


def _load_pygame_texture(path: str) -> TextureHandle:
    return TextureHandle(path=path, surface=pygame.image.load(path))


class AssetLoader:
    """Queues font/texture requests and completes them from :meth:`poll`."""

    def __init__(
        self,
        font_factory: Callable[[Optional[str]], FontHandle] = _load_pygame_font,
        texture_factory: Callable[[str], TextureHandle] = _load_pygame_texture,
    ) -> None:
        self.font_factory = font_factory
        self.texture_factory = texture_factory
        self._queue: Deque[Tuple[AssetRequest, Callable[[], Any]]] = deque()
        self._cache: Dict[Tuple[str, Optional[str]], Any] = {}

    def load_font(self, path: Optional[str] = DEFAULT_FONT_PATH) -> AssetRequest[FontHandle]:
        return self._enqueue("font", path, lambda: self.font_factory(path))

    def load_texture(self, path: str) -> AssetRequest[TextureHandle]:
        return self._enqueue("texture", path, lambda: self.texture_factory(path))

    def pending_count(self) -> int:
        return sum(1 for request, _ in self._queue if not request.done)

    def poll(self, limit: Optional[int] = None) -> int:
        """Complete up to ``limit`` queued requests; returns how many finished."""

        completed = 0
        while self._queue and (limit is None or completed < limit):
            request, load = self._queue.popleft()
            if request.done:
                continue
            key = (request.kind, request.path)
            if key in self._cache:
                request.resolve(self._cache[key])
                completed += 1
                continue
            try:
                value = load()
            except (OSError, pygame.error) as exc:
                logger.warning("Failed to load %s %r: %s", request.kind, request.path, exc)
                request.fail(exc)
            else:
                logger.info("Loaded %s %r", request.kind, request.path)
                self._cache[key] = value
                request.resolve(value)
            completed += 1
        return completed

    def clear_cache(self) -> None:
        self._cache.clear()

    def _enqueue(
        self, kind: str, path: Optional[str], load: Callable[[], Any]
    ) -> AssetRequest:
        request: AssetRequest = AssetRequest(kind, path)
        self._queue.append((request, load))
        return request
