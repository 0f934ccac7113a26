"""Base class for staged shows.

A show owns a :class:`~timeline.clock.Clock`, a :class:`~timeline.schedule.StageSchedule`
and every node it adds to the shared scene.  Each tick the elapsed time is
mapped to a stage and exactly one stage handler runs with that stage's
progress; continuous effects run afterwards through :meth:`Show.update_effects`.
"""
from __future__ import annotations

import logging
import random
from typing import Callable, List, Optional, Sequence, Tuple

from rendering.camera import Camera3D
from rendering.scene import Node, Scene

from .assets import AssetLoader, AssetRequest, FontHandle, Subscription, TextureHandle
from .clock import Clock
from .config import DEFAULT_CAMERA_POSITION, DEFAULT_CAMERA_TARGET, DEFAULT_FONT_PATH
from .schedule import RESET_POSITION, ScheduleError, StagePosition, StageSchedule

logger = logging.getLogger(__name__)

Vec3 = Tuple[float, float, float]
StageHandler = Callable[[float], None]


class Show:
    """Subclasses fill in the class constants and the ``build``/``reset`` hooks."""

    SHOW_ID = ""
    TITLE = ""
    STAGES: Sequence[Tuple[str, float]] = ()
    SEED = 0
    CAMERA_POSITION: Vec3 = DEFAULT_CAMERA_POSITION
    CAMERA_TARGET: Vec3 = DEFAULT_CAMERA_TARGET

    def __init__(
        self,
        scene: Scene,
        camera: Camera3D,
        assets: AssetLoader,
        *,
        fixed_delta: Optional[float] = None,
    ) -> None:
        if not self.SHOW_ID:
            raise ScheduleError(f"{type(self).__name__} does not define SHOW_ID")
        self.scene = scene
        self.camera = camera
        self.assets = assets
        self.schedule = StageSchedule(self.STAGES)
        self.clock = Clock(fixed_delta)
        self.rng = random.Random(self.SEED)
        self.position: StagePosition = RESET_POSITION
        self._entities: List[Node] = []
        self._subscriptions: List[Subscription] = []
        self._handlers: Sequence[StageHandler] = ()
        self._active = False
        self._loop = 0

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.SHOW_ID!r}, active={self._active})"

    # ------------------------------------------------------------------
    # Lifecycle
    @property
    def active(self) -> bool:
        return self._active

    @property
    def elapsed(self) -> float:
        return self.clock.elapsed

    @property
    def entities(self) -> Tuple[Node, ...]:
        return tuple(self._entities)

    def init(self) -> None:
        if self._active:
            logger.warning("Show %s is already active; ignoring init()", self.SHOW_ID)
            return
        self.clock.reset()
        self.rng.seed(self.SEED)
        self._loop = 0
        self.position = RESET_POSITION
        try:
            self.build()
            handlers = tuple(self.stage_handlers())
            if len(handlers) != len(self.schedule):
                raise ScheduleError(
                    f"Show {self.SHOW_ID} has {len(handlers)} stage handlers "
                    f"for {len(self.schedule)} stages"
                )
            self._handlers = handlers
            self.camera.set_pose(self.CAMERA_POSITION, self.CAMERA_TARGET)
            self._active = True
            self.reset()
        except BaseException:
            # Nothing a half-built show added may stay in the shared scene.
            self._active = False
            self._teardown()
            self.camera.go_home()
            self.scene.reset_environment()
            raise
        logger.info("Show %s started (loop %.1fs)", self.SHOW_ID, self.schedule.total_duration)

    def update(self, dt: Optional[float] = None) -> None:
        if not self._active:
            return
        elapsed = self.clock.advance(dt)
        step = dt if dt is not None else self.clock.fixed_delta
        position = self.schedule.resolve(elapsed)
        loop = self.schedule.loop_index(elapsed)

        if loop != self._loop:
            self._loop = loop
            if not position.is_reset:
                # The exact loop boundary was skipped over; restore initial
                # state before the new loop's first handler runs.
                self.reset()

        if position.stage != self.position.stage:
            logger.debug(
                "Show %s entering stage %d (%s) at %.3fs",
                self.SHOW_ID,
                position.stage,
                position.name,
                elapsed,
            )
        self.position = position

        if position.is_reset:
            self.reset()
        else:
            self._handlers[position.stage - 1](position.progress)
        self.update_effects(step or 0.0)

    def dispose(self) -> None:
        if not self._active:
            return
        self._active = False
        self._teardown()
        self.camera.go_home()
        self.scene.reset_environment()
        logger.info("Show %s disposed", self.SHOW_ID)

    def _teardown(self) -> None:
        for subscription in self._subscriptions:
            subscription.invalidate()
            subscription.request.cancel()
        self._subscriptions = []
        for node in self._entities:
            self.scene.remove(node)
            node.release_resources()
        self._entities = []
        self._handlers = ()

    # ------------------------------------------------------------------
    # Hooks
    def build(self) -> None:
        """Create every entity; called once per ``init``."""

    def stage_handlers(self) -> Sequence[StageHandler]:
        """Handlers in stage order: index ``i`` drives stage ``i + 1``."""

        raise NotImplementedError

    def reset(self) -> None:
        """Put every entity back in its initial state (stage 0)."""

    def update_effects(self, dt: float) -> None:
        """Continuous effects that run every tick regardless of stage."""

    # ------------------------------------------------------------------
    # Helpers for subclasses
    def own(self, node: Node) -> Node:
        """Add ``node`` to the scene and release it on dispose."""

        self.scene.add(node)
        self._entities.append(node)
        return node

    def request_font(
        self,
        callback: Callable[[FontHandle], None],
        path: Optional[str] = DEFAULT_FONT_PATH,
    ) -> Subscription:
        return self._subscribe(self.assets.load_font(path), callback)

    def request_texture(
        self, path: str, callback: Callable[[TextureHandle], None]
    ) -> Subscription:
        return self._subscribe(self.assets.load_texture(path), callback)

    def _subscribe(self, request: AssetRequest, callback: Callable) -> Subscription:
        subscription = Subscription(request)
        self._subscriptions.append(subscription)

        def _deliver(done: AssetRequest) -> None:
            if not subscription.valid or not self._active:
                return
            if done.error is not None or done.value is None:
                logger.warning(
                    "Show %s continues without %s %r", self.SHOW_ID, done.kind, done.path
                )
                return
            callback(done.value)

        request.add_done_callback(_deliver)
        return subscription
