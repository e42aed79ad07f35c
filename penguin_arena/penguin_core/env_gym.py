"""
Gymnasium Environment Wrapper
=============================

Provides a standard Gymnasium interface to the penguin foraging game.
One step is one decision: the action is held until the next decision is due.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Tuple, Union

import numpy as np

import gymnasium as gym
from gymnasium import spaces

from penguin_arena.penguin_core.config_loader import PenguinConfig, load_config
from penguin_arena.penguin_core.game import PenguinGame
from penguin_arena.penguin_core.penguin_agent import PenguinAgent


class PenguinEnv(gym.Env):
    """
    Penguin foraging as a Gymnasium environment.

    Action Space:
        MultiDiscrete([2, 3])
        [0]: forward (0 = stay, 1 = swim forward)
        [1]: turn (0 = none, 1 = left, 2 = right)

    Observation Space:
        Box(shape=(8,), dtype=float32)
        [is_full, distance to baby, direction to baby (3), forward (3)]

    Reward:
        +1 per fish eaten, +1 per feeding, -1/max_steps per tick.

    Info:
        Contains step_count, cumulative_reward, fish_remaining, is_full, etc.
    """

    metadata = {
        "render_modes": [],
        "render_fps": 50,
    }

    def __init__(
        self,
        config_path: Optional[str] = None,
        config: Optional[PenguinConfig] = None,
        render_mode: Optional[str] = None,
        debug: bool = False,
    ):
        """
        Initialize penguin environment.

        Args:
            config_path: Path to penguin_config.yaml. Uses default if None.
            config: Already-loaded configuration; takes precedence over config_path.
            render_mode: Unsupported; kept for Gymnasium compatibility.
            debug: If True, enables verbose debug output.
        """
        super().__init__()

        self._config = config if config is not None else load_config(config_path)
        self.render_mode = render_mode
        self._debug = debug

        self._game = PenguinGame(config=self._config, auto_reset=False, debug=debug)

        self.action_space = spaces.MultiDiscrete([2, 3])
        self.observation_space = spaces.Box(
            low=-np.inf,
            high=np.inf,
            shape=(PenguinAgent.observation_size,),
            dtype=np.float32
        )

        if self._debug:
            print(f"[DEBUG] PenguinEnv initialized")
            print(f"[DEBUG]   Area half extent: {self._config.area.half_extent}")
            print(f"[DEBUG]   Fish: {self._config.area.fish_count}")
            print(f"[DEBUG]   Decision period: {self._config.agent.decision_period}")

    def reset(
        self,
        *,
        seed: Optional[int] = None,
        options: Optional[Dict[str, Any]] = None
    ) -> Tuple[np.ndarray, Dict[str, Any]]:
        """
        Reset the environment.

        Args:
            seed: Random seed for reproducibility.
            options: Optional curriculum hook, applied before the episode begins:
                "reset_environment_parameters": True drops earlier overrides and
                    restores the configured values;
                "environment_parameters": {name: value} sets parameters.

        Returns:
            (observation, info) tuple.
        """
        super().reset(seed=seed)

        parameters = self._game.parameters
        if options:
            if options.get("reset_environment_parameters"):
                parameters.reset()
            if "environment_parameters" in options:
                parameters.update(options["environment_parameters"])

        if self._debug:
            print(f"[DEBUG] Reset: seed={seed}, parameters={parameters.as_dict()}")

        obs = self._game.reset(seed=seed)
        info = self._game.get_info()
        return obs, info

    def step(
        self,
        action: Union[np.ndarray, list, tuple]
    ) -> Tuple[np.ndarray, float, bool, bool, Dict[str, Any]]:
        """
        Execute one decision.

        Args:
            action: [forward, turn] as described by action_space.

        Returns:
            (observation, reward, terminated, truncated, info) tuple.
        """
        action = np.asarray(action, dtype=np.float32).reshape(-1)

        result = self._game.step_decision(action)

        info = self._game.get_info()
        info["ticks"] = result.ticks

        if self._debug:
            print(f"[DEBUG] Step: action={action.tolist()}, reward={result.reward:.4f}, "
                  f"is_full={info['is_full']}, fish_remaining={info['fish_remaining']}")
            if result.terminated or result.truncated:
                print(f"[DEBUG] DONE: {result.reason}")

        return (
            result.observation,
            float(result.reward),
            bool(result.terminated),
            bool(result.truncated),
            info,
        )

    def set_environment_parameter(self, key: str, value: float) -> None:
        """Set a parameter read at the next episode start (e.g. feed_radius)."""
        self._game.set_environment_parameter(key, value)

    def render(self) -> None:
        return None

    def close(self) -> None:
        pass

    @property
    def game(self) -> PenguinGame:
        """Access to underlying game (for debugging/tools)."""
        return self._game

    @property
    def config(self) -> PenguinConfig:
        return self._config
