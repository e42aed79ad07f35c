"""
Configuration Loader
====================

Loads and validates penguin_config.yaml, providing typed access to all parameters.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional

import yaml


@dataclass(frozen=True)
class AgentConfig:
    """Penguin movement and episode budget settings."""
    move_speed: float
    turn_speed: float            # Degrees per second
    max_steps: int               # 0 disables the step budget and per-step penalty
    decision_period: int         # Ticks between fresh decisions
    radius: float
    mass: float


@dataclass(frozen=True)
class SpawnBand:
    """Annular sector used to place actors around the area center."""
    min_angle: float
    max_angle: float
    min_radius: float
    max_radius: float


@dataclass(frozen=True)
class AreaConfig:
    """Arena geometry and population."""
    half_extent: float
    fish_count: int
    fish_speed: float
    fish_radius: float
    baby_radius: float
    penguin_spawn: SpawnBand
    baby_spawn: SpawnBand
    fish_spawn: SpawnBand


@dataclass(frozen=True)
class PhysicsConfig:
    """Physics simulation parameters."""
    dt: float
    substeps: int
    friction: float
    elasticity: float


@dataclass(frozen=True)
class FeedbackConfig:
    """Transient marker settings."""
    marker_lifetime: float
    heart_height: float


@dataclass(frozen=True)
class PenguinConfig:
    """
    Complete arena configuration loaded from YAML.

    All values are immutable to prevent accidental modification during runtime.
    """
    agent: AgentConfig
    area: AreaConfig
    physics: PhysicsConfig
    feedback: FeedbackConfig
    environment_parameters: Dict[str, float]


def _parse_band(data: dict, name: str) -> SpawnBand:
    """Parse a spawn band from YAML."""
    try:
        return SpawnBand(
            min_angle=float(data["min_angle"]),
            max_angle=float(data["max_angle"]),
            min_radius=float(data["min_radius"]),
            max_radius=float(data["max_radius"])
        )
    except KeyError as e:
        raise ValueError(f"Spawn band '{name}' is missing {e}") from None


def _validate_band(band: SpawnBand, name: str, half_extent: float) -> None:
    if band.min_angle > band.max_angle:
        raise ValueError(f"{name}: min_angle ({band.min_angle}) exceeds max_angle ({band.max_angle})")
    if band.min_radius < 0 or band.min_radius > band.max_radius:
        raise ValueError(f"{name}: invalid radius range [{band.min_radius}, {band.max_radius}]")
    if band.max_radius >= half_extent:
        raise ValueError(
            f"{name}: max_radius ({band.max_radius}) must stay inside the walls "
            f"(half_extent={half_extent})"
        )


def _validate_config(config: PenguinConfig) -> None:
    """Validate configuration consistency."""
    agent = config.agent
    if agent.move_speed < 0 or agent.turn_speed < 0:
        raise ValueError("move_speed and turn_speed must be non-negative")
    if agent.max_steps < 0:
        raise ValueError(f"max_steps must be >= 0, got {agent.max_steps}")
    if agent.decision_period < 1:
        raise ValueError(f"decision_period must be >= 1, got {agent.decision_period}")
    if agent.radius <= 0 or agent.mass <= 0:
        raise ValueError("agent radius and mass must be positive")

    area = config.area
    if area.half_extent <= 0:
        raise ValueError(f"half_extent must be positive, got {area.half_extent}")
    if area.fish_count < 0:
        raise ValueError(f"fish_count must be >= 0, got {area.fish_count}")
    if area.fish_speed < 0:
        raise ValueError(f"fish_speed must be >= 0, got {area.fish_speed}")
    if area.fish_radius <= 0 or area.baby_radius <= 0:
        raise ValueError("fish_radius and baby_radius must be positive")
    _validate_band(area.penguin_spawn, "penguin_spawn", area.half_extent)
    _validate_band(area.baby_spawn, "baby_spawn", area.half_extent)
    _validate_band(area.fish_spawn, "fish_spawn", area.half_extent)

    if config.physics.dt <= 0:
        raise ValueError(f"physics.dt must be positive, got {config.physics.dt}")
    if config.physics.substeps < 1:
        raise ValueError(f"physics.substeps must be >= 1, got {config.physics.substeps}")

    if config.feedback.marker_lifetime <= 0:
        raise ValueError(f"marker_lifetime must be positive, got {config.feedback.marker_lifetime}")


def load_config(config_path: Optional[str] = None) -> PenguinConfig:
    """
    Load and validate arena configuration from YAML.

    Args:
        config_path: Path to penguin_config.yaml. If None, uses default location.

    Returns:
        Validated PenguinConfig instance.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ValueError: If config validation fails.
    """
    if config_path is None:
        config_path = os.path.join(
            os.path.dirname(os.path.dirname(__file__)),
            "penguin_config.yaml"
        )

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r") as f:
        raw = yaml.safe_load(f)

    agent_data = raw["agent"]
    agent = AgentConfig(
        move_speed=float(agent_data["move_speed"]),
        turn_speed=float(agent_data["turn_speed"]),
        max_steps=int(agent_data.get("max_steps", 3000)),
        decision_period=int(agent_data.get("decision_period", 4)),
        radius=float(agent_data.get("radius", 0.5)),
        mass=float(agent_data.get("mass", 1.0))
    )

    area_data = raw["area"]
    area = AreaConfig(
        half_extent=float(area_data["half_extent"]),
        fish_count=int(area_data["fish_count"]),
        fish_speed=float(area_data.get("fish_speed", 0.0)),
        fish_radius=float(area_data.get("fish_radius", 0.35)),
        baby_radius=float(area_data.get("baby_radius", 0.5)),
        penguin_spawn=_parse_band(area_data["penguin_spawn"], "penguin_spawn"),
        baby_spawn=_parse_band(area_data["baby_spawn"], "baby_spawn"),
        fish_spawn=_parse_band(area_data["fish_spawn"], "fish_spawn")
    )

    physics_data = raw["physics"]
    physics = PhysicsConfig(
        dt=float(physics_data["dt"]),
        substeps=int(physics_data.get("substeps", 1)),
        friction=float(physics_data.get("friction", 0.4)),
        elasticity=float(physics_data.get("elasticity", 0.0))
    )

    feedback_data = raw.get("feedback", {})
    feedback = FeedbackConfig(
        marker_lifetime=float(feedback_data.get("marker_lifetime", 4.0)),
        heart_height=float(feedback_data.get("heart_height", 1.5))
    )

    # Optional section, may be empty or null in YAML
    params_data = raw.get("environment_parameters") or {}
    environment_parameters = {str(k): float(v) for k, v in params_data.items()}

    config = PenguinConfig(
        agent=agent,
        area=area,
        physics=physics,
        feedback=feedback,
        environment_parameters=environment_parameters
    )

    _validate_config(config)
    return config


# Module-level singleton for convenience
_cached_config: Optional[PenguinConfig] = None


def get_config() -> PenguinConfig:
    """Get the cached arena configuration, loading if necessary."""
    global _cached_config
    if _cached_config is None:
        _cached_config = load_config()
    return _cached_config


def reload_config(config_path: Optional[str] = None) -> PenguinConfig:
    """Reload the configuration (useful for testing)."""
    global _cached_config
    _cached_config = load_config(config_path)
    return _cached_config
