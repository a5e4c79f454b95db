"""Entry point for Dinostroids."""
from __future__ import annotations

import pygame

from dinostroids.engine.input import InputBindings, InputMapper
from dinostroids.engine.logger import init_logger
from dinostroids.engine.loop import FrameLoop
from dinostroids.engine.scene import SceneManager
from dinostroids.engine.settings import SETTINGS_PATH, GameSettings
from dinostroids.render.renderer import VectorRenderer
from dinostroids.services.leaderboard import LeaderboardClient
from dinostroids.services.tasks import BackgroundTaskRunner
from dinostroids.ui.game_over_scene import GameOverScene
from dinostroids.ui.play_scene import PlayScene
from dinostroids.ui.title_scene import TitleScene


def main() -> None:
    settings = GameSettings.load(SETTINGS_PATH)
    logger = init_logger(SETTINGS_PATH)
    pygame.init()

    resolution = settings.resolution
    display_flags = pygame.RESIZABLE
    if settings.fullscreen:
        display_flags = pygame.FULLSCREEN
    if resolution == (0, 0):
        display_info = pygame.display.Info()
        resolution = (display_info.current_w, display_info.current_h)
        if not settings.fullscreen:
            resolution = (int(resolution[0] * 0.8), int(resolution[1] * 0.8))

    screen = pygame.display.set_mode(resolution, display_flags)
    pygame.display.set_caption("Dinostroids")
    clock = pygame.time.Clock()

    input_mapper = InputMapper(InputBindings.load(SETTINGS_PATH))
    net_log = logger.channel("net")
    tasks = BackgroundTaskRunner(logger=net_log)
    tasks.start()
    leaderboard = LeaderboardClient(settings.api_base_url, logger=net_log)

    manager = SceneManager()
    manager.register("title", TitleScene)
    manager.register("play", PlayScene)
    manager.register("game_over", GameOverScene)
    manager.set_context(
        settings=settings,
        input=input_mapper,
        logger=logger,
        difficulties=settings.difficulty_database(),
        difficulty=settings.difficulty,
        tasks=tasks,
        leaderboard=leaderboard,
        renderer=VectorRenderer(),
    )
    manager.activate("title")

    def process_events() -> None:
        input_mapper.begin_frame()
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                loop.stop()
                return
            input_mapper.handle_event(event)
            manager.handle_event(event)

    def update(dt: float) -> None:
        manager.update(dt)

    def render() -> None:
        manager.render(screen)
        pygame.display.flip()
        clock.tick(settings.max_fps)

    loop = FrameLoop(update, render, process_events)

    try:
        loop.run()
    finally:
        if tasks.running:
            tasks.submit(leaderboard.aclose()).result(timeout=2.0)
        tasks.stop()
        pygame.quit()


if __name__ == "__main__":
    main()
