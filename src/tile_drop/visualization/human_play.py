from __future__ import annotations

import argparse
from typing import Dict, Optional

import pygame

from tile_drop.game import Command, GameConfig, GameSession, TickDriver
from .renderer import Renderer


KEY_TO_COMMAND: Dict[int, Command] = {
    pygame.K_LEFT: Command.MOVE_LEFT,
    pygame.K_RIGHT: Command.MOVE_RIGHT,
    pygame.K_DOWN: Command.SOFT_DROP,
    pygame.K_SPACE: Command.HARD_DROP,
    pygame.K_p: Command.TOGGLE_PAUSE,
    pygame.K_r: Command.RESTART,
}


def command_for_key(key: int) -> Optional[Command]:
    return KEY_TO_COMMAND.get(key)


def run(config: Optional[GameConfig] = None) -> None:
    pygame.init()
    try:
        clock = pygame.time.Clock()
        session = GameSession(config)
        driver = TickDriver(session)
        renderer = Renderer()

        screen = pygame.display.set_mode(renderer.window_size(session.config.rows, session.config.cols))
        pygame.display.set_caption("Tile Drop")

        running = True
        while running:
            # Input handling
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN:
                    if event.key == pygame.K_ESCAPE:
                        running = False
                    else:
                        command = command_for_key(event.key)
                        if command is not None:
                            session.dispatch(command)

            # Gravity
            driver.advance(clock.get_time())

            renderer.draw(screen, session.state)
            clock.tick(60)
    finally:
        pygame.quit()


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Play tile-drop in a pygame window")
    p.add_argument("--seed", type=int, default=None)
    p.add_argument("--tick-ms", type=int, default=1000, help="Gravity interval in milliseconds")
    return p


def main() -> None:
    args = build_parser().parse_args()
    run(GameConfig(random_seed=args.seed, tick_interval_ms=args.tick_ms))


if __name__ == "__main__":  # pragma: no cover
    main()
