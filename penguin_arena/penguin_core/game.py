"""
Core Game
=========

Host tick loop: drives the PenguinAgent, the area and the physics world,
routes decisions to a policy and enforces the step budget.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, Optional, Sequence

import numpy as np

from penguin_arena.penguin_core.agent_base import Agent
from penguin_arena.penguin_core.area import PenguinArea
from penguin_arena.penguin_core.config_loader import PenguinConfig, get_config
from penguin_arena.penguin_core.parameters import EnvironmentParameters
from penguin_arena.penguin_core.penguin_agent import PenguinAgent


REASON_ALL_FISH_FED = "all_fish_fed"
REASON_MAX_STEPS = "max_steps"

Policy = Callable[[np.ndarray], Sequence[float]]
KeySource = Callable[[], Iterable[str]]


@dataclass
class TickResult:
    """Result of a single physics tick."""
    reward: float
    terminated: bool
    truncated: bool
    reason: str
    decision_requested: bool


@dataclass
class DecisionResult:
    """Result of one decision and the ticks its action was held for."""
    observation: np.ndarray
    reward: float
    terminated: bool
    truncated: bool
    reason: str
    ticks: int


class PenguinGame:
    """
    Main simulation class.

    One tick:
    1. agent.fixed_update() requests a decision or a repeat, checks feed proximity
    2. the requested action is chosen (policy, external action or heuristic) and applied
    3. fish swim, markers age, physics steps, contacts reach the agent
    4. the step budget is enforced
    """

    def __init__(
        self,
        config: Optional[PenguinConfig] = None,
        seed: Optional[int] = None,
        policy: Optional[Policy] = None,
        key_source: Optional[KeySource] = None,
        auto_reset: bool = True,
        debug: bool = False
    ):
        """
        Initialize game.

        Args:
            config: Arena configuration. Uses default if None.
            seed: Random seed for reproducibility.
            policy: Maps an observation to an action. If None, decisions use the
                heuristic with keys from key_source.
            key_source: Returns currently pressed keys for the heuristic.
            auto_reset: Start a new episode on the tick after one ends.
            debug: If True, print episode events.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._debug = debug
        self._policy = policy
        self._key_source = key_source
        self._auto_reset = auto_reset

        self._area = PenguinArea(config, seed=seed)
        self._parameters = EnvironmentParameters(config.environment_parameters)
        self._agent = PenguinAgent(
            area=self._area,
            parameters=self._parameters,
            config=config,
            on_reward=self._on_reward,
            on_terminate=self._on_terminate,
            debug=debug
        )

        self._started = False
        self._tick_reward = 0.0
        self._terminated = False
        self._truncated = False
        self._termination_reason = ""
        self._total_ticks = 0

    @property
    def config(self) -> PenguinConfig:
        return self._config

    @property
    def agent(self) -> PenguinAgent:
        return self._agent

    @property
    def area(self) -> PenguinArea:
        return self._area

    @property
    def parameters(self) -> EnvironmentParameters:
        return self._parameters

    @property
    def is_over(self) -> bool:
        """True if the current episode has ended."""
        return self._terminated or self._truncated

    @property
    def termination_reason(self) -> str:
        return self._termination_reason

    @property
    def total_ticks(self) -> int:
        """Ticks simulated since construction, across episodes."""
        return self._total_ticks

    def set_policy(self, policy: Optional[Policy]) -> None:
        self._policy = policy

    def set_key_source(self, key_source: Optional[KeySource]) -> None:
        self._key_source = key_source

    def set_environment_parameter(self, key: str, value: float) -> None:
        """Takes effect at the next episode start."""
        self._parameters.set(key, value)

    # -------------------------------------------------------------------------
    # Outbound agent signals
    # -------------------------------------------------------------------------

    def _on_reward(self, delta: float) -> None:
        self._tick_reward += delta

    def _on_terminate(self, agent: Agent, interrupted: bool) -> None:
        if interrupted:
            self._truncated = True
            self._termination_reason = REASON_MAX_STEPS
        else:
            self._terminated = True
            self._termination_reason = REASON_ALL_FISH_FED

        if self._debug:
            print(f"[DEBUG] Episode end: {self._termination_reason}, "
                  f"steps={agent.step_count}, reward={agent.get_cumulative_reward():.3f}")

    # -------------------------------------------------------------------------
    # Episode control
    # -------------------------------------------------------------------------

    def reset(self, seed: Optional[int] = None) -> np.ndarray:
        """
        Start a new episode.

        Args:
            seed: New random seed. Keeps the current random stream if None.

        Returns:
            Initial observation.
        """
        if seed is not None:
            self._area.seed(seed)

        self._terminated = False
        self._truncated = False
        self._termination_reason = ""
        self._tick_reward = 0.0

        self._agent.begin_episode()
        self._started = True
        return self._agent.get_observations()

    def _decide(self, action: Optional[Sequence[float]]) -> Sequence[float]:
        if action is not None:
            return action
        if self._policy is not None:
            return self._policy(self._agent.get_observations())
        keys = self._key_source() if self._key_source is not None else ()
        return self._agent.get_heuristic_action(keys)

    def tick(self, action: Optional[Sequence[float]] = None) -> TickResult:
        """
        Advance the simulation by one tick.

        Args:
            action: Action to use if this tick requests a decision. Ignored on
                repeat ticks. If None, the policy or heuristic decides.

        Returns:
            TickResult with the reward earned this tick.
        """
        if not self._started:
            self.reset()

        if self.is_over:
            if not self._auto_reset:
                return TickResult(
                    reward=0.0,
                    terminated=self._terminated,
                    truncated=self._truncated,
                    reason=self._termination_reason,
                    decision_requested=False
                )
            self.reset()

        self._tick_reward = 0.0
        agent = self._agent
        dt = self._config.physics.dt

        agent.fixed_update()
        decision_requested, action_requested = agent.consume_requests()

        if not agent.is_done:
            if decision_requested:
                agent.store_action(self._decide(action))
            if decision_requested or action_requested:
                agent.apply_stored_action()

            self._area.update(dt)
            self._area.physics.step(dt)

            for other in self._area.physics.pop_contacts():
                if agent.is_done:
                    break
                agent.on_collision_enter(other)

            if agent.max_step > 0 and agent.step_count >= agent.max_step:
                agent.episode_interrupted()

        self._total_ticks += 1

        return TickResult(
            reward=self._tick_reward,
            terminated=self._terminated,
            truncated=self._truncated,
            reason=self._termination_reason,
            decision_requested=decision_requested
        )

    def step_decision(self, action: Sequence[float]) -> DecisionResult:
        """
        Apply one decision and hold it until the next decision is due.

        If earlier tick() calls stopped partway through a decision period,
        the held action first plays out to the period boundary; those ticks
        and their reward are included in the result. If the episode ends
        while doing so, ``action`` is not applied.

        Args:
            action: Action for the decision tick.

        Returns:
            DecisionResult with the summed reward and the next observation.
        """
        period = self._agent.decision_period
        reward = 0.0
        ticks = 0

        while self._started and not self.is_over and self._agent.step_count % period != 0:
            reward += self.tick().reward
            ticks += 1

        if not (ticks and self.is_over):
            reward += self.tick(action).reward
            ticks += 1
            while not self.is_over and self._agent.step_count % period != 0:
                reward += self.tick().reward
                ticks += 1

        return DecisionResult(
            observation=self._agent.get_observations(),
            reward=reward,
            terminated=self._terminated,
            truncated=self._truncated,
            reason=self._termination_reason,
            ticks=ticks
        )

    def run(self, num_ticks: int) -> float:
        """Run ``num_ticks`` ticks and return the total reward earned."""
        total = 0.0
        for _ in range(num_ticks):
            total += self.tick().reward
        return total

    def get_info(self) -> Dict[str, Any]:
        """Get additional info dict for Gymnasium."""
        agent = self._agent
        return {
            "step_count": agent.step_count,
            "cumulative_reward": agent.get_cumulative_reward(),
            "fish_remaining": self._area.fish_remaining,
            "is_full": agent.is_full,
            "fish_eaten": agent.fish_eaten,
            "babies_fed": agent.babies_fed,
            "feed_radius": agent.feed_radius,
            "completed_episodes": agent.completed_episodes,
            "terminated_reason": self._termination_reason,
        }

    def get_render_data(self) -> Dict[str, Any]:
        """
        Get data needed for drawing the arena (ground-plane coordinates).

        Returns:
            Dict with actor positions, headings and active markers.
        """
        area = self._area
        penguin = area.penguin
        return {
            "half_extent": self._config.area.half_extent,
            "penguin": {
                "x": penguin.body.position.x,
                "z": penguin.body.position.y,
                "yaw": penguin.yaw,
                "radius": penguin.radius,
                "is_full": self._agent.is_full,
            },
            "baby": {
                "x": area.baby.body.position.x,
                "z": area.baby.body.position.y,
                "radius": area.baby.radius,
            },
            "fish": [
                {"x": f.actor.body.position.x, "z": f.actor.body.position.y,
                 "radius": f.actor.radius, "yaw": f.actor.yaw}
                for f in area.fish
            ],
            "markers": [
                {"kind": m.kind, "x": m.position[0], "z": m.position[2], "age": m.age,
                 "lifetime": m.lifetime}
                for m in area.transients
            ],
            "step_count": self._agent.step_count,
            "cumulative_reward": self._agent.get_cumulative_reward(),
        }
