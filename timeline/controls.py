"""Keyboard wiring between the host window and the show switcher."""
from __future__ import annotations

import logging
from typing import Optional

import pygame

from .switcher import ShowSwitcher

logger = logging.getLogger(__name__)

SHOW_KEYS = (
    pygame.K_1,
    pygame.K_2,
    pygame.K_3,
    pygame.K_4,
    pygame.K_5,
    pygame.K_6,
    pygame.K_7,
    pygame.K_8,
    pygame.K_9,
)


def handle_key(switcher: ShowSwitcher, key: int) -> bool:
    """Apply a show-control key; returns ``False`` when the player should quit.

    A show that fails to start is logged and the player keeps running with
    no show active.
    """

    if key == pygame.K_ESCAPE:
        return False
    try:
        if key in SHOW_KEYS:
            index = SHOW_KEYS.index(key)
            show_ids = switcher.show_ids
            if index < len(show_ids):
                switcher.activate(show_ids[index])
        elif key == pygame.K_RIGHT:
            switcher.cycle(1)
        elif key == pygame.K_LEFT:
            switcher.cycle(-1)
        elif key == pygame.K_r:
            switcher.restart()
    except Exception:
        logger.exception("Show control key %d failed", key)
    return True


def caption_for(switcher: ShowSwitcher) -> Optional[str]:
    show = switcher.active
    if show is None:
        return None
    number = switcher.show_ids.index(show.SHOW_ID) + 1
    return f"{number}. {show.TITLE} | {show.position.name}"
