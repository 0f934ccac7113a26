"""Entry point for the show player."""
from __future__ import annotations

import logging
from typing import List, Optional

import pygame

from rendering.camera import Camera3D
from rendering.draw_system import SceneRenderer
from rendering.opengl_context import initialize_gl, resize_viewport
from rendering.scene import AMBIENT, DIRECTIONAL, Light, Scene, hex_color
from shows.catalog import create_switcher
from timeline.assets import AssetLoader
from timeline.config import BACKGROUND_COLOR, EngineConfig
from timeline.controls import caption_for, handle_key

logger = logging.getLogger(__name__)


def create_host_lights() -> List[Light]:
    """Sky fill and key light shared by every show."""

    sky = Light(AMBIENT, hex_color(0xDDEEFF), 0.25, name="host-sky")
    key = Light(DIRECTIONAL, (1.0, 1.0, 1.0), 5.0, name="host-key")
    key.set_position(10.0, 10.0, 10.0)
    return [sky, key]


def run(config: Optional[EngineConfig] = None) -> None:
    config = config or EngineConfig()
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    pygame.init()
    pygame.display.set_caption(config.caption)
    flags = pygame.OPENGL | pygame.DOUBLEBUF
    if config.fullscreen:
        pygame.display.set_mode((0, 0), flags | pygame.FULLSCREEN)
    else:
        pygame.display.set_mode(config.window_size, flags | pygame.RESIZABLE)
    window_size = pygame.display.get_surface().get_size()

    initialize_gl(window_size)

    scene = Scene(background=BACKGROUND_COLOR)
    scene.add(*create_host_lights())
    camera = Camera3D(viewport_size=window_size, fov=config.fov)
    assets = AssetLoader()
    switcher = create_switcher(scene, camera, assets, fixed_delta=config.fixed_delta)
    renderer = SceneRenderer()
    try:
        switcher.activate(config.start_show)
    except Exception:
        logger.exception("Could not start show %s", config.start_show)

    clock = pygame.time.Clock()
    running = True
    while running:
        dt = clock.tick(config.target_fps) / 1000.0
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False
            elif event.type == pygame.KEYDOWN:
                running = handle_key(switcher, event.key)
            elif event.type == pygame.VIDEORESIZE:
                pygame.display.set_mode(event.size, flags | pygame.RESIZABLE)
                resize_viewport(event.size)
                camera.update_viewport(event.size)

        assets.poll()
        switcher.update(config.frame_delta(dt))
        renderer.draw(scene, camera, caption=caption_for(switcher))
        pygame.display.flip()

    switcher.shutdown()
    assets.clear_cache()
    pygame.quit()


if __name__ == "__main__":
    run()
