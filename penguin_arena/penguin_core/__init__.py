"""
Penguin Core - The foraging arena and its agent.

This module provides the penguin agent, the area it forages in, the host tick
loop, and a Gymnasium environment wrapper.

Main exports:
- PenguinEnv: Gymnasium environment for single-agent training
- make_vec_env: Create parallel environments (gymnasium.vector)
- PenguinGame: Tick-driven host loop (used internally and by tools)
- PenguinAgent: The foraging agent
- PenguinArea: Fish pool, baby and feedback markers
- PenguinConfig: Configuration loaded from penguin_config.yaml
"""

from penguin_arena.penguin_core.config_loader import PenguinConfig, load_config
from penguin_arena.penguin_core.parameters import EnvironmentParameters
from penguin_arena.penguin_core.area import PenguinArea, TransientMarker
from penguin_arena.penguin_core.agent_base import Agent, VectorSensor
from penguin_arena.penguin_core.penguin_agent import PenguinAgent
from penguin_arena.penguin_core.game import PenguinGame
from penguin_arena.penguin_core.env_gym import PenguinEnv
from penguin_arena.penguin_core.vector_env import make_env, make_vec_env

__all__ = [
    "PenguinConfig",
    "load_config",
    "EnvironmentParameters",
    "PenguinArea",
    "TransientMarker",
    "Agent",
    "VectorSensor",
    "PenguinAgent",
    "PenguinGame",
    "PenguinEnv",
    "make_env",
    "make_vec_env",
]
