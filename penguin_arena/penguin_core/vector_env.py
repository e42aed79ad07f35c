"""
Vector Environment Factory
==========================

Factory functions for running several penguin areas in parallel through
gymnasium.vector. Each environment owns its own area and agent.

Usage:
    from penguin_arena.penguin_core.vector_env import make_vec_env

    vec_env = make_vec_env(num_envs=8, seed=42)
    obs, infos = vec_env.reset()
    obs, rewards, terms, truncs, infos = vec_env.step(vec_env.action_space.sample())
    vec_env.close()
"""

from __future__ import annotations

import multiprocessing
from typing import Callable, Optional

import gymnasium as gym
from gymnasium.vector import AsyncVectorEnv, SyncVectorEnv


def make_env(
    rank: int,
    seed: int,
    config_path: Optional[str] = None,
) -> Callable[[], gym.Env]:
    """
    Create a factory function for a single environment.

    Args:
        rank: Index of this environment (0 to num_envs-1).
        seed: Base seed. Each env gets seed + rank.
        config_path: Path to penguin_config.yaml (None = default).

    Returns:
        Factory function that creates the environment.
    """
    def _init() -> gym.Env:
        # Import here to avoid issues with multiprocessing spawn
        from penguin_arena.penguin_core.env_gym import PenguinEnv

        env = PenguinEnv(config_path=config_path)
        env.reset(seed=seed + rank)
        return env

    return _init


def make_vec_env(
    num_envs: Optional[int] = None,
    seed: int = 42,
    config_path: Optional[str] = None,
    use_sync: bool = False,
) -> gym.vector.VectorEnv:
    """
    Create a vectorized environment.

    Args:
        num_envs: Number of parallel environments. Default: CPU count, capped at 32.
        seed: Base random seed. Each env gets seed + i.
        config_path: Path to penguin_config.yaml (None = default).
        use_sync: If True, use SyncVectorEnv (single process, for debugging).

    Returns:
        AsyncVectorEnv or SyncVectorEnv instance.
    """
    if num_envs is None:
        num_envs = min(multiprocessing.cpu_count(), 32)

    env_fns = [make_env(rank=i, seed=seed, config_path=config_path) for i in range(num_envs)]

    if use_sync:
        return SyncVectorEnv(env_fns)
    return AsyncVectorEnv(env_fns)


__all__ = [
    "make_env",
    "make_vec_env",
]
