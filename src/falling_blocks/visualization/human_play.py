from __future__ import annotations

import argparse
from typing import Dict, List, Optional

import pygame

from falling_blocks.game import Command, FallingBlocksGame, GameConfig
from .renderer import Renderer


KEY_TO_COMMAND: Dict[int, Command] = {
    pygame.K_LEFT: Command.MOVE_LEFT,
    pygame.K_a: Command.MOVE_LEFT,
    pygame.K_RIGHT: Command.MOVE_RIGHT,
    pygame.K_d: Command.MOVE_RIGHT,
    pygame.K_DOWN: Command.SOFT_DROP,
    pygame.K_s: Command.SOFT_DROP,
    pygame.K_UP: Command.ROTATE,
    pygame.K_w: Command.ROTATE,
    pygame.K_SPACE: Command.HARD_DROP,
    pygame.K_r: Command.RESTART,
}


def run(seed: Optional[int] = None, cell_size: int = 30) -> None:
    config = GameConfig(random_seed=seed)
    renderer = Renderer(width=config.width, height=config.height, cell_size=cell_size)
    # The renderer must be attached before the first spawn so it sees the initial picture.
    game = FallingBlocksGame(config, sink=renderer)

    pygame.init()
    try:
        screen = pygame.display.set_mode(renderer.window_size())
        pygame.display.set_caption("Falling Blocks - Human Play")
        font = pygame.font.SysFont(None, 32)
        clock = pygame.time.Clock()

        running = True
        while running:
            dt = clock.tick(60) / 1000.0

            # Key edges only: holding a key does not repeat the command.
            commands: List[Command] = []
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN:
                    if event.key == pygame.K_ESCAPE:
                        running = False
                    else:
                        command = KEY_TO_COMMAND.get(event.key)
                        if command is not None:
                            commands.append(command)

            game.update(dt, commands)
            renderer.draw(screen, font)
    finally:
        pygame.quit()
    print(f"Final score: {game.score}  lines: {game.lines_cleared_total}")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser()
    p.add_argument("--seed", type=int, default=None)
    p.add_argument("--cell-size", type=int, default=30)
    return p


def main() -> None:
    args = build_parser().parse_args()
    run(args.seed, args.cell_size)


if __name__ == "__main__":  # pragma: no cover
    main()
