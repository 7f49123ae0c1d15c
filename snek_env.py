from typing import Optional

import gymnasium as gym
import numpy as np

from snek_game import DOWN, LEFT, RIGHT, UP, Phase, SnekConfig, SnekGame, StepOutcome
from snek_render import render_frame

# 0=up,1=down,2=left,3=right
ACTIONS = (UP, DOWN, LEFT, RIGHT)


class SnekEnv(gym.Env):
    """Drives a SnekGame one step per action, for agents and scripted play."""

    metadata = {"render_modes": ["rgb_array"], "render_fps": 12}

    def __init__(self, config: Optional[SnekConfig] = None, render_mode: Optional[str] = None):
        super().__init__()
        self.config = config or SnekConfig()
        self.render_mode = render_mode
        size = self.config.grid_size

        self.action_space = gym.spaces.Discrete(len(ACTIONS))
        # Channels-first: body, head, food
        self.observation_space = gym.spaces.Box(
            low=0.0,
            high=1.0,
            shape=(3, size, size),
            dtype=np.float32,
        )

        self.game = SnekGame(self.config)
        self._steps_since_food = 0

    def reset(self, *, seed: Optional[int] = None, options=None):
        super().reset(seed=seed)
        self.game.seed(seed)
        self.game.restart()

        if options and "snake" in options:
            self.game.arrange(
                options["snake"],
                direction=tuple(options.get("direction", RIGHT)),
                food=options.get("food"),
            )
        elif options and options.get("food") is not None:
            self.game.set_food(options["food"])

        self.game.start()
        self._steps_since_food = 0
        return self._get_obs(), {"score": self.game.score}

    def step(self, action: int):
        self.game.set_direction(ACTIONS[int(action)])
        outcome = self.game.step()

        terminated = outcome.fatal or self.game.phase is not Phase.RUNNING
        if outcome is StepOutcome.ATE:
            reward = self.config.food_reward
            self._steps_since_food = 0
        elif outcome.fatal:
            reward = self.config.death_penalty
        else:
            reward = self.config.step_penalty
            self._steps_since_food += 1

        limit = self.config.max_no_food_steps
        truncated = bool(limit) and not terminated and self._steps_since_food >= limit

        info = {"length": self.game.length, "score": self.game.score, "outcome": outcome.value}
        return self._get_obs(), reward, terminated, truncated, info

    def _get_obs(self):
        size = self.config.grid_size
        obs = np.zeros((3, size, size), dtype=np.float32)

        snake = self.game.snake
        for (x, y) in snake[:-1]:
            obs[0, y, x] = 1.0

        head_x, head_y = snake[-1]
        obs[1, head_y, head_x] = 1.0

        food_x, food_y = self.game.food
        obs[2, food_y, food_x] = 1.0

        return obs

    def render(self):
        if self.render_mode != "rgb_array":
            return None
        return render_frame(self.game.snapshot())
