"""
Penguin Area
============

The environment the penguin forages in: owns the baby, the fish pool and the
transient feedback markers, and re-randomizes them on reset.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

import numpy as np

from penguin_arena.penguin_core.config_loader import PenguinConfig, SpawnBand, get_config
from penguin_arena.penguin_core.physics_world import Actor, PhysicsWorld


MARKER_REGURGITATED_FISH = "regurgitated_fish"
MARKER_HEART = "heart"


@dataclass
class TransientMarker:
    """Short-lived feedback marker (regurgitated fish, heart)."""
    kind: str
    position: np.ndarray
    lifetime: float
    age: float = 0.0

    @property
    def expired(self) -> bool:
        return self.age >= self.lifetime


@dataclass
class Fish:
    """
    A swimming fish.

    Picks a destination in the fish spawn band, swims there at a randomized
    speed, then picks another.
    """
    actor: Actor
    speed: float = 0.0
    destination: Optional[np.ndarray] = None  # Ground-plane (x, z)

    @property
    def uid(self) -> int:
        return self.actor.uid

    @property
    def position(self) -> np.ndarray:
        return self.actor.position


class PenguinArea:
    """
    Host-side area the PenguinAgent binds to at episode start.

    Exposes:
    - reset_area(): respawn penguin, baby and fish
    - baby_position / baby
    - remove_fish(actor)
    - fish_remaining
    - spawn_transient(kind, position, lifetime)
    """

    def __init__(
        self,
        config: Optional[PenguinConfig] = None,
        seed: Optional[int] = None
    ):
        """
        Initialize the area.

        Args:
            config: Arena configuration. Uses default if None.
            seed: Random seed for placement and fish behaviour.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._rng = np.random.default_rng(seed)
        self._center = np.zeros(3, dtype=np.float64)

        self._physics = PhysicsWorld(config)
        self.penguin: Actor = self._physics.create_penguin()
        self.baby: Actor = self._physics.create_baby()

        self._fish: List[Fish] = []
        self._markers: List[TransientMarker] = []

    @property
    def config(self) -> PenguinConfig:
        return self._config

    @property
    def physics(self) -> PhysicsWorld:
        return self._physics

    @property
    def center(self) -> np.ndarray:
        return self._center.copy()

    @property
    def baby_position(self) -> np.ndarray:
        return self.baby.position

    @property
    def fish(self) -> List[Fish]:
        return list(self._fish)

    @property
    def fish_remaining(self) -> int:
        return len(self._fish)

    @property
    def transients(self) -> List[TransientMarker]:
        return list(self._markers)

    def seed(self, seed: Optional[int] = None) -> None:
        """Reseed placement and fish randomness."""
        self._rng = np.random.default_rng(seed)

    def choose_random_position(
        self,
        center: np.ndarray,
        min_angle: float,
        max_angle: float,
        min_radius: float,
        max_radius: float
    ) -> np.ndarray:
        """
        Choose a random position in an annular sector around ``center``.

        Angles are degrees measured from +z towards +x.
        """
        radius = min_radius
        angle = min_angle

        if max_radius > min_radius:
            radius = self._rng.uniform(min_radius, max_radius)
        if max_angle > min_angle:
            angle = self._rng.uniform(min_angle, max_angle)

        rad = np.radians(angle)
        offset = np.array([np.sin(rad), 0.0, np.cos(rad)]) * radius
        return np.asarray(center, dtype=np.float64) + offset

    def _choose_in_band(self, band: SpawnBand) -> np.ndarray:
        return self.choose_random_position(
            self._center, band.min_angle, band.max_angle, band.min_radius, band.max_radius
        )

    def reset_area(self) -> None:
        """Remove all fish and markers, then place penguin, baby and new fish."""
        self.remove_all_fish()
        self._markers.clear()
        self.place_penguin()
        self.place_baby()
        self.spawn_fish(self._config.area.fish_count, self._config.area.fish_speed)
        # Contacts from the previous layout are stale
        self._physics.pop_contacts()

    def place_penguin(self) -> None:
        pos = self._choose_in_band(self._config.area.penguin_spawn)
        self._physics.teleport(self.penguin, pos[0], pos[2])
        self.penguin.yaw = float(self._rng.uniform(0.0, 360.0))

    def place_baby(self) -> None:
        pos = self._choose_in_band(self._config.area.baby_spawn)
        self._physics.teleport(self.baby, pos[0], pos[2])
        self.baby.yaw = float(self._rng.uniform(0.0, 360.0))

    def spawn_fish(self, count: int, fish_speed: float) -> None:
        for _ in range(count):
            pos = self._choose_in_band(self._config.area.fish_spawn)
            actor = self._physics.spawn_fish(pos[0], pos[2])
            actor.yaw = float(self._rng.uniform(0.0, 360.0))
            self._fish.append(Fish(actor=actor, speed=fish_speed))

    def remove_fish(self, fish_actor: Actor) -> bool:
        """
        Remove a specific fish from the area.

        Returns:
            True if the fish was in the pool.
        """
        for i, fish in enumerate(self._fish):
            if fish.uid == fish_actor.uid:
                self._fish.pop(i)
                self._physics.remove_actor(fish.uid)
                return True
        return False

    def remove_all_fish(self) -> None:
        for fish in self._fish:
            self._physics.remove_actor(fish.uid)
        self._fish.clear()

    def spawn_transient(self, kind: str, position: np.ndarray, lifetime: float) -> TransientMarker:
        """Spawn a feedback marker that expires after ``lifetime`` seconds."""
        marker = TransientMarker(
            kind=kind,
            position=np.asarray(position, dtype=np.float64).copy(),
            lifetime=float(lifetime)
        )
        self._markers.append(marker)
        return marker

    def update(self, dt: float) -> None:
        """Advance fish swimming and marker lifetimes by one tick."""
        for fish in self._fish:
            self._swim(fish, dt)

        for marker in self._markers:
            marker.age += dt
        self._markers = [m for m in self._markers if not m.expired]

    def _swim(self, fish: Fish, dt: float) -> None:
        base_speed = self._config.area.fish_speed
        if base_speed <= 0:
            fish.actor.body.velocity = (0.0, 0.0)
            return

        x, z = fish.actor.ground_position
        if fish.destination is None:
            self._choose_fish_destination(fish)

        delta = fish.destination - np.array([x, z])
        distance = float(np.linalg.norm(delta))
        if distance < 1e-3:
            self._choose_fish_destination(fish)
            delta = fish.destination - np.array([x, z])
            distance = float(np.linalg.norm(delta))
            if distance < 1e-3:
                fish.actor.body.velocity = (0.0, 0.0)
                return

        # Never overshoot the destination within one tick
        speed = min(fish.speed, distance / dt)
        direction = delta / distance
        fish.actor.body.velocity = (direction[0] * speed, direction[1] * speed)
        fish.actor.yaw = float(np.degrees(np.arctan2(direction[0], direction[1])))

    def _choose_fish_destination(self, fish: Fish) -> None:
        pos = self._choose_in_band(self._config.area.fish_spawn)
        fish.destination = np.array([pos[0], pos[2]])
        fish.speed = self._config.area.fish_speed * float(self._rng.uniform(0.5, 1.5))
