"""
Shared fixtures for penguin arena tests.
"""

import os
from dataclasses import replace

import pytest
import yaml

from penguin_arena.penguin_core.config_loader import PenguinConfig, load_config


DEFAULT_CONFIG_PATH = os.path.join(
    os.path.dirname(os.path.dirname(__file__)), "penguin_arena", "penguin_config.yaml"
)


def _with_overrides(config: PenguinConfig, agent=None, area=None, physics=None, feedback=None) -> PenguinConfig:
    """Copy a config with some fields of its sections replaced."""
    return replace(
        config,
        agent=replace(config.agent, **(agent or {})),
        area=replace(config.area, **(area or {})),
        physics=replace(config.physics, **(physics or {})),
        feedback=replace(config.feedback, **(feedback or {})),
    )


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def with_overrides():
    """Factory: with_overrides(config, agent={...}, area={...}, ...) -> PenguinConfig."""
    return _with_overrides


@pytest.fixture
def still_config(config):
    """Two motionless fish, default everything else."""
    return _with_overrides(config, area={"fish_count": 2, "fish_speed": 0.0})


@pytest.fixture
def empty_config(config):
    """No fish at all: only the per-step penalty can change the reward."""
    return _with_overrides(config, area={"fish_count": 0, "fish_speed": 0.0})


@pytest.fixture
def write_config(tmp_path):
    """Write a copy of the default YAML with section overrides and return its path."""
    def _write(**sections):
        with open(DEFAULT_CONFIG_PATH, "r") as f:
            raw = yaml.safe_load(f)
        for section, values in sections.items():
            if isinstance(values, dict) and isinstance(raw.get(section), dict):
                raw[section].update(values)
            else:
                raw[section] = values
        path = tmp_path / "penguin_config.yaml"
        with open(path, "w") as f:
            yaml.safe_dump(raw, f)
        return str(path)

    return _write
