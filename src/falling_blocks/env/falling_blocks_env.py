from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

import numpy as np
import gymnasium as gym
from gymnasium import spaces

from falling_blocks.game import Command, FallingBlocksGame, FrameInput, GameConfig, TetrominoType, color_for_value


# Action index -> engine command; 0 is "do nothing this step".
ACTION_TO_COMMAND: Dict[int, Optional[Command]] = {
    0: None,
    1: Command.MOVE_LEFT,
    2: Command.MOVE_RIGHT,
    3: Command.SOFT_DROP,
    4: Command.HARD_DROP,
    5: Command.ROTATE,
}


class FallingBlocksEnv(gym.Env):
    """One engine frame per step: the chosen command plus one gravity tick."""

    metadata = {"render_modes": ["rgb_array"], "render_fps": 30}

    def __init__(self, config: Optional[GameConfig] = None, render_mode: Optional[str] = None,
                 max_episode_steps: int = 10000) -> None:
        super().__init__()
        self.game = FallingBlocksGame(config)
        self.render_mode = render_mode
        self.max_episode_steps = int(max_episode_steps)

        height, width = self.game.config.height, self.game.config.width
        kinds = len(TetrominoType)
        self.observation_space = spaces.Box(low=-kinds, high=kinds, shape=(height, width), dtype=np.int8)
        self.action_space = spaces.Discrete(len(ACTION_TO_COMMAND))

        self._steps = 0

    def _get_obs(self) -> np.ndarray:
        return self.game.get_state().astype(np.int8)

    def _get_info(self) -> Dict[str, Any]:
        return {
            "score": self.game.score,
            "lines_cleared_total": self.game.lines_cleared_total,
            "steps": self._steps,
        }

    def reset(self, *, seed: Optional[int] = None, options: Optional[dict] = None) -> Tuple[np.ndarray, Dict[str, Any]]:
        super().reset(seed=seed)
        self.game.reset(seed)
        self._steps = 0
        return self._get_obs(), self._get_info()

    def step(self, action):
        command = ACTION_TO_COMMAND[int(action)]
        score_before = self.game.score
        commands = () if command is None else (command,)
        result = self.game.frame(FrameInput(commands=commands, gravity=True))
        self._steps += 1

        reward = float(self.game.score - score_before)
        terminated = bool(self.game.game_over)
        truncated = self._steps >= self.max_episode_steps

        info = self._get_info()
        info["lines_cleared"] = result.lines_cleared
        info["locked"] = result.locked
        return self._get_obs(), reward, terminated, truncated, info

    def render(self) -> Optional[np.ndarray]:
        if self.render_mode != "rgb_array":
            return None
        state = self.game.get_state()
        cell = 12
        h, w = state.shape
        img = np.zeros((h * cell, w * cell, 3), dtype=np.uint8)
        for y in range(h):
            # Board row 0 is the bottom, image row 0 is the top.
            top = (h - 1 - y) * cell
            for x in range(w):
                color = color_for_value(state[y, x])
                img[top : top + cell, x * cell : (x + 1) * cell, :] = color
        return img

    def close(self) -> None:
        pass
