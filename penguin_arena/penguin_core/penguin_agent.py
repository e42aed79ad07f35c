"""
Penguin Agent
=============

The foraging agent: catches fish, swims back and feeds its baby.

Observation (8 values, fixed order):
    [is_full, distance to baby, direction to baby (3), penguin forward (3)]

Actions (2 values):
    [forward amount, turn selector]   turn: 0 = none, 1 = left, 2 = right

Rewards:
    +1 for eating a fish, +1 for feeding the baby,
    -1/max_steps every step as a shaping penalty.
"""

from __future__ import annotations

from typing import Iterable, Optional

import numpy as np

from penguin_arena.penguin_core.agent_base import (
    Agent,
    RewardCallback,
    TerminateCallback,
    VectorSensor,
)
from penguin_arena.penguin_core.area import (
    MARKER_HEART,
    MARKER_REGURGITATED_FISH,
    PenguinArea,
)
from penguin_arena.penguin_core.config_loader import PenguinConfig, get_config
from penguin_arena.penguin_core.parameters import EnvironmentParameters
from penguin_arena.penguin_core.physics_world import TAG_BABY, TAG_FISH, Actor


TURN_NONE = 0
TURN_LEFT = 1
TURN_RIGHT = 2

UP = np.array([0.0, 1.0, 0.0])


def _normalized(v: np.ndarray) -> np.ndarray:
    """Unit vector, or zero for (near) zero input."""
    norm = float(np.linalg.norm(v))
    if norm < 1e-5:
        return np.zeros(3, dtype=np.float64)
    return v / norm


class PenguinAgent(Agent):
    """
    Penguin that eats fish and regurgitates them for its baby.

    State machine per episode:
        Hungry --(eat fish)--> Full --(touch or get close to baby)--> Hungry
    Feeding the baby when no fish remain ends the episode.
    """

    observation_size = 8
    action_size = 2

    def __init__(
        self,
        area: Optional[PenguinArea] = None,
        parameters: Optional[EnvironmentParameters] = None,
        config: Optional[PenguinConfig] = None,
        on_reward: Optional[RewardCallback] = None,
        on_terminate: Optional[TerminateCallback] = None,
        debug: bool = False
    ):
        """
        Initialize the penguin.

        Args:
            area: Area to bind to at episode start.
            parameters: Runtime environment parameters (feed_radius).
            config: Arena configuration. Uses the area's, then the default.
            on_reward: Outbound reward delta callback.
            on_terminate: Outbound episode end callback.
            debug: If True, print eat/feed events.
        """
        if config is None:
            config = area.config if area is not None else get_config()

        super().__init__(
            max_step=config.agent.max_steps,
            on_reward=on_reward,
            on_terminate=on_terminate
        )

        self._config = config
        self.move_speed = config.agent.move_speed
        self.turn_speed = config.agent.turn_speed
        self.decision_period = config.agent.decision_period
        self.fixed_delta_time = config.physics.dt

        self._area = area
        self._parameters = parameters or EnvironmentParameters(config.environment_parameters)
        self._debug = debug

        self._body: Optional[Actor] = None
        self._baby: Optional[Actor] = None
        self.is_full = False
        self.feed_radius = 0.0

        self.fish_eaten = 0
        self.babies_fed = 0

    @property
    def area(self) -> Optional[PenguinArea]:
        return self._area

    @property
    def parameters(self) -> EnvironmentParameters:
        return self._parameters

    @property
    def position(self) -> np.ndarray:
        return self._body.position

    @property
    def forward(self) -> np.ndarray:
        return self._body.forward

    @property
    def baby_position(self) -> np.ndarray:
        return self._baby.position

    def distance_to_baby(self) -> float:
        return float(np.linalg.norm(self.baby_position - self.position))

    def on_episode_begin(self) -> None:
        if self._area is None:
            raise RuntimeError("PenguinAgent has no area bound; cannot begin episode")

        self._body = self._area.penguin
        self._baby = self._area.baby
        if self._baby is None:
            raise RuntimeError("PenguinArea has no baby")

        self.is_full = False
        self.fish_eaten = 0
        self.babies_fed = 0
        self._area.reset_area()

        self.feed_radius = self._parameters.get_with_default("feed_radius", 0.0)

        if self._debug:
            print(f"[DEBUG] Episode begin: feed_radius={self.feed_radius}, "
                  f"fish={self._area.fish_remaining}")

    def collect_observations(self, sensor: VectorSensor) -> None:
        to_baby = self.baby_position - self.position
        sensor.add_observation(self.is_full)
        sensor.add_observation(float(np.linalg.norm(to_baby)))
        sensor.add_observation(_normalized(to_baby))
        sensor.add_observation(self.forward)
        # 1 + 1 + 3 + 3 = 8

    def on_action_received(self, actions: np.ndarray) -> None:
        forward_amount = float(actions[0])

        turn_amount = 0.0
        if actions[1] == TURN_LEFT:
            turn_amount = -1.0
        elif actions[1] == TURN_RIGHT:
            turn_amount = 1.0

        # Displacement over this tick is velocity * fixed_delta_time
        velocity = self.forward * forward_amount * self.move_speed
        self._body.body.velocity = (velocity[0], velocity[2])
        self._body.yaw = (self._body.yaw + turn_amount * self.turn_speed * self.fixed_delta_time) % 360.0

        if self.max_step > 0:
            self.add_reward(-1.0 / self.max_step)

    def heuristic(self, actions_out: np.ndarray, keys: Iterable[str] = ()) -> None:
        """Map W/A/D key state to the action encoding."""
        pressed = {k.lower() for k in keys}

        forward_action = 0.0
        turn_action = TURN_NONE
        if "w" in pressed:
            forward_action = 1.0
        if "a" in pressed:
            turn_action = TURN_LEFT
        elif "d" in pressed:
            turn_action = TURN_RIGHT

        actions_out[0] = forward_action
        actions_out[1] = turn_action

    def fixed_update(self) -> None:
        """Per-tick callback: decision cadence, then proximity feeding."""
        if self.step_count % self.decision_period == 0:
            self.request_decision()
        else:
            self.request_action()

        if self.distance_to_baby() < self.feed_radius:
            self.regurgitate_fish()

    def on_collision_enter(self, other: Actor) -> None:
        if other.compare_tag(TAG_FISH):
            self.eat_fish(other)
        elif other.compare_tag(TAG_BABY):
            self.regurgitate_fish()

    def eat_fish(self, fish: Actor) -> bool:
        """Eat a fish unless already full. Returns True if eaten."""
        if self.is_full:
            return False
        self.is_full = True

        self._area.remove_fish(fish)
        self.fish_eaten += 1
        self.add_reward(1.0)

        if self._debug:
            print(f"[DEBUG] Ate fish {fish.uid} at step {self.step_count}")
        return True

    def regurgitate_fish(self) -> bool:
        """Feed the baby if full. Returns True if fed."""
        if not self.is_full:
            return False
        self.is_full = False

        feedback = self._config.feedback
        baby_pos = self.baby_position
        self._area.spawn_transient(MARKER_REGURGITATED_FISH, baby_pos, feedback.marker_lifetime)
        self._area.spawn_transient(MARKER_HEART, baby_pos + UP * feedback.heart_height, feedback.marker_lifetime)

        self.babies_fed += 1
        self.add_reward(1.0)

        if self._debug:
            print(f"[DEBUG] Fed baby at step {self.step_count}, "
                  f"fish remaining={self._area.fish_remaining}")

        if self._area.fish_remaining <= 0:
            self.end_episode()
        return True
