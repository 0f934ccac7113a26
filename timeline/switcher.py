"""Registry of shows with at most one active at a time."""
from __future__ import annotations

import logging
from typing import Dict, List, Optional

from .show import Show

logger = logging.getLogger(__name__)


class ShowSwitcher:
    def __init__(self) -> None:
        self._shows: Dict[str, Show] = {}
        self._order: List[str] = []
        self._active: Optional[Show] = None

    @property
    def active(self) -> Optional[Show]:
        return self._active

    @property
    def active_id(self) -> Optional[str]:
        return self._active.SHOW_ID if self._active is not None else None

    @property
    def show_ids(self) -> List[str]:
        return list(self._order)

    def __contains__(self, show_id: object) -> bool:
        return show_id in self._shows

    def get(self, show_id: str) -> Show:
        try:
            return self._shows[show_id]
        except KeyError as exc:
            raise KeyError(f"Unknown show: {show_id}") from exc

    def register(self, show: Show) -> None:
        if show.SHOW_ID in self._shows:
            raise ValueError(f"Show already registered: {show.SHOW_ID}")
        self._shows[show.SHOW_ID] = show
        self._order.append(show.SHOW_ID)

    def activate(self, show_id: str) -> Show:
        """Dispose the current show, then start ``show_id`` from zero.

        Activating the show that is already running restarts it.
        """

        target = self.get(show_id)
        if self._active is not None:
            self._active.dispose()
            self._active = None
        target.init()
        self._active = target
        logger.info("Activated show %s", show_id)
        return target

    def cycle(self, step: int = 1) -> Optional[Show]:
        if not self._order:
            return None
        if self._active is None:
            index = 0 if step >= 0 else len(self._order) - 1
        else:
            index = (self._order.index(self._active.SHOW_ID) + step) % len(self._order)
        return self.activate(self._order[index])

    def restart(self) -> Optional[Show]:
        if self._active is None:
            return None
        return self.activate(self._active.SHOW_ID)

    def update(self, dt: Optional[float] = None) -> None:
        if self._active is None:
            return
        try:
            self._active.update(dt)
        except Exception:
            # A broken frame must not stop the render loop.
            logger.exception("Show %s failed during update", self._active.SHOW_ID)

    def shutdown(self) -> None:
        if self._active is not None:
            self._active.dispose()
            self._active = None
