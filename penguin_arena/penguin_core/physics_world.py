"""
Physics World
=============

Manages the pymunk Space, arena walls, and penguin/baby/fish body creation/removal.

The arena is simulated on the ground plane. pymunk's 2D (x, y) maps to world
(x, 0, z): the vertical world axis is y and is never simulated.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

import numpy as np
import pymunk

from penguin_arena.penguin_core.config_loader import PenguinConfig, get_config


# Collision types for pymunk
COLLISION_TYPE_PENGUIN = 1
COLLISION_TYPE_FISH = 2
COLLISION_TYPE_BABY = 3
COLLISION_TYPE_WALL = 4

TAG_PENGUIN = "penguin"
TAG_FISH = "fish"
TAG_BABY = "baby"


def to_world(x: float, z: float, y: float = 0.0) -> np.ndarray:
    """Lift a ground-plane point to a world 3-vector."""
    return np.array([x, y, z], dtype=np.float64)


@dataclass
class Actor:
    """
    A tagged body in the physics world.

    Wraps a pymunk Body and its circle shape with the tag used by
    collision notifications ("penguin", "fish", "baby").
    """
    uid: int
    tag: str
    body: pymunk.Body
    shape: pymunk.Circle
    yaw: float = 0.0  # Degrees about the vertical axis

    def compare_tag(self, tag: str) -> bool:
        return self.tag == tag

    @property
    def position(self) -> np.ndarray:
        """World position (x, 0, z)."""
        return to_world(self.body.position.x, self.body.position.y)

    @property
    def forward(self) -> np.ndarray:
        """Unit heading vector. Yaw 0 faces +z; positive yaw turns right."""
        rad = np.radians(self.yaw)
        return np.array([np.sin(rad), 0.0, np.cos(rad)], dtype=np.float64)

    @property
    def ground_position(self) -> Tuple[float, float]:
        return self.body.position.x, self.body.position.y

    @property
    def radius(self) -> float:
        return self.shape.radius


class PhysicsWorld:
    """
    Manages the pymunk physics simulation.

    Handles:
    - Space creation (no gravity, top-down plane)
    - Static wall segments around the area
    - Penguin, baby and fish bodies
    - Physics stepping
    - Penguin contact queue (consumed after each step)
    """

    def __init__(self, config: Optional[PenguinConfig] = None):
        """
        Initialize physics world.

        Args:
            config: Arena configuration. Uses default if None.
        """
        if config is None:
            config = get_config()

        self._config = config

        self._space = pymunk.Space()
        self._space.gravity = (0.0, 0.0)

        self._actors: Dict[int, Actor] = {}
        self._next_uid = 0

        # Actors the penguin started touching during the last step, in order
        self._contacts: List[Actor] = []

        self._wall_shapes: List[pymunk.Segment] = []
        self._create_walls()

        # pymunk 7.x uses on_collision() instead of add_collision_handler()
        self._space.on_collision(
            COLLISION_TYPE_PENGUIN, COLLISION_TYPE_FISH, begin=self._on_penguin_contact
        )
        self._space.on_collision(
            COLLISION_TYPE_PENGUIN, COLLISION_TYPE_BABY, begin=self._on_penguin_contact
        )

    def _create_walls(self) -> None:
        """Create static wall segments enclosing the area."""
        h = self._config.area.half_extent
        thickness = 0.5
        static_body = self._space.static_body

        corners = [(-h, -h), (h, -h), (h, h), (-h, h)]
        for i, start in enumerate(corners):
            end = corners[(i + 1) % len(corners)]
            wall = pymunk.Segment(static_body, start, end, thickness)
            wall.friction = self._config.physics.friction
            wall.elasticity = self._config.physics.elasticity
            wall.collision_type = COLLISION_TYPE_WALL
            self._wall_shapes.append(wall)

        self._space.add(*self._wall_shapes)

    def _on_penguin_contact(
        self,
        arbiter: pymunk.Arbiter,
        space: pymunk.Space,
        data: Any
    ) -> None:
        """Queue the non-penguin actor of a new penguin contact."""
        for shape in arbiter.shapes:
            if shape.collision_type == COLLISION_TYPE_PENGUIN:
                continue
            actor = self.get_actor_by_body(shape.body)
            if actor is not None:
                self._contacts.append(actor)

    @property
    def space(self) -> pymunk.Space:
        """The pymunk Space instance."""
        return self._space

    @property
    def actors(self) -> Dict[int, Actor]:
        """Dictionary of all actors by UID."""
        return self._actors

    def _add_actor(
        self,
        tag: str,
        body: pymunk.Body,
        radius: float,
        collision_type: int
    ) -> Actor:
        shape = pymunk.Circle(body, radius)
        shape.friction = self._config.physics.friction
        shape.elasticity = self._config.physics.elasticity
        shape.collision_type = collision_type

        uid = self._next_uid
        self._next_uid += 1

        # Store UID in body for collision lookup
        body.actor_uid = uid

        actor = Actor(uid=uid, tag=tag, body=body, shape=shape)
        self._space.add(body, shape)
        self._actors[uid] = actor
        return actor

    def create_penguin(self, x: float = 0.0, z: float = 0.0) -> Actor:
        """
        Create the penguin as a dynamic body that never rotates from contacts.

        Its heading is tracked by the agent; the body only carries velocity.
        """
        agent = self._config.agent
        body = pymunk.Body(agent.mass, float("inf"))
        body.position = (x, z)
        return self._add_actor(TAG_PENGUIN, body, agent.radius, COLLISION_TYPE_PENGUIN)

    def create_baby(self, x: float = 0.0, z: float = 0.0) -> Actor:
        body = pymunk.Body(body_type=pymunk.Body.KINEMATIC)
        body.position = (x, z)
        return self._add_actor(TAG_BABY, body, self._config.area.baby_radius, COLLISION_TYPE_BABY)

    def spawn_fish(self, x: float, z: float) -> Actor:
        """Spawn a kinematic fish at the given ground-plane position."""
        body = pymunk.Body(body_type=pymunk.Body.KINEMATIC)
        body.position = (x, z)
        return self._add_actor(TAG_FISH, body, self._config.area.fish_radius, COLLISION_TYPE_FISH)

    def remove_actor(self, uid: int) -> Optional[Actor]:
        """
        Remove an actor from the world.

        Returns:
            The removed Actor, or None if not found.
        """
        actor = self._actors.pop(uid, None)
        if actor is not None:
            self._space.remove(actor.body, actor.shape)
            self._contacts = [a for a in self._contacts if a.uid != uid]
        return actor

    def get_actor(self, uid: int) -> Optional[Actor]:
        return self._actors.get(uid)

    def get_actor_by_body(self, body: pymunk.Body) -> Optional[Actor]:
        """Get an actor by its pymunk Body."""
        uid = getattr(body, "actor_uid", None)
        if uid is not None:
            return self._actors.get(uid)
        return None

    def teleport(self, actor: Actor, x: float, z: float) -> None:
        """Place an actor at a new position and stop it."""
        actor.body.position = (x, z)
        actor.body.velocity = (0.0, 0.0)
        self._space.reindex_shapes_for_body(actor.body)

    def step(self, dt: Optional[float] = None) -> None:
        """
        Advance physics simulation by one tick.

        Args:
            dt: Tick duration. Uses config default if None.
        """
        if dt is None:
            dt = self._config.physics.dt

        for _ in range(self._config.physics.substeps):
            self._space.step(dt / self._config.physics.substeps)

    def pop_contacts(self) -> List[Actor]:
        """Return and clear contacts queued since the last call."""
        contacts = self._contacts
        self._contacts = []
        return contacts
