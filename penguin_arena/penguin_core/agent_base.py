"""
Agent Base
==========

Host-facing agent interface: episode lifecycle, decision cadence requests,
reward accumulation and termination signalling.

The host (PenguinGame) owns the tick loop and calls the lifecycle hooks.
Rewards and termination leave the agent through outbound callbacks so the
agent never talks to a trainer directly.
"""

from __future__ import annotations

from typing import Callable, List, Optional, Sequence, Tuple, Union

import numpy as np


RewardCallback = Callable[[float], None]
TerminateCallback = Callable[["Agent", bool], None]


class VectorSensor:
    """
    Fixed-size observation buffer.

    Values are appended in call order; ``to_array()`` refuses to build a
    vector of the wrong size so the observation layout cannot drift.
    """

    def __init__(self, observation_size: int):
        self._size = observation_size
        self._values: List[float] = []

    @property
    def observation_size(self) -> int:
        return self._size

    def add_observation(self, value: Union[bool, float, int, Sequence[float], np.ndarray]) -> None:
        """Append a bool (as 0/1), a scalar, or every component of a vector."""
        if isinstance(value, (bool, np.bool_)):
            self._values.append(1.0 if value else 0.0)
        elif np.isscalar(value):
            self._values.append(float(value))
        else:
            self._values.extend(float(v) for v in np.ravel(value))

    def reset(self) -> None:
        self._values.clear()

    def to_array(self) -> np.ndarray:
        if len(self._values) != self._size:
            raise ValueError(
                f"Observation size mismatch: expected {self._size}, got {len(self._values)}"
            )
        return np.array(self._values, dtype=np.float32)


class Agent:
    """
    Base class for agents driven by a host tick loop.

    Subclasses override:
    - on_episode_begin()
    - collect_observations(sensor)
    - on_action_received(actions)
    - heuristic(actions_out, keys)

    Class attributes ``observation_size`` and ``action_size`` fix the
    observation and action vector lengths.
    """

    observation_size: int = 0
    action_size: int = 0

    def __init__(
        self,
        max_step: int = 0,
        on_reward: Optional[RewardCallback] = None,
        on_terminate: Optional[TerminateCallback] = None
    ):
        """
        Args:
            max_step: Step budget per episode, 0 for unbounded.
            on_reward: Called with every reward delta.
            on_terminate: Called as (agent, interrupted) when the episode ends.
        """
        self.max_step = max_step
        self.on_reward = on_reward
        self.on_terminate = on_terminate

        self._step_count = 0
        self._completed_episodes = 0
        self._cumulative_reward = 0.0
        self._done = False
        self._interrupted = False

        self._decision_requested = False
        self._action_requested = False
        self._stored_action = np.zeros(self.action_size, dtype=np.float32)

    # -------------------------------------------------------------------------
    # Episode lifecycle
    # -------------------------------------------------------------------------

    @property
    def step_count(self) -> int:
        """Actions applied in the current episode."""
        return self._step_count

    @property
    def completed_episodes(self) -> int:
        return self._completed_episodes

    @property
    def is_done(self) -> bool:
        """True once the current episode has ended (terminal or interrupted)."""
        return self._done

    @property
    def was_interrupted(self) -> bool:
        """True if the current episode ended by hitting the step budget."""
        return self._interrupted

    def begin_episode(self) -> None:
        """Reset per-episode bookkeeping, then run the subclass hook."""
        self._step_count = 0
        self._cumulative_reward = 0.0
        self._done = False
        self._interrupted = False
        self._decision_requested = False
        self._action_requested = False
        self._stored_action = np.zeros(self.action_size, dtype=np.float32)
        self.on_episode_begin()

    def end_episode(self) -> None:
        """Terminate the episode (success/failure state reached)."""
        self._finish(interrupted=False)

    def episode_interrupted(self) -> None:
        """End the episode without a terminal state (step budget exhausted)."""
        self._finish(interrupted=True)

    def _finish(self, interrupted: bool) -> None:
        if self._done:
            return
        self._done = True
        self._interrupted = interrupted
        self._completed_episodes += 1
        if self.on_terminate is not None:
            self.on_terminate(self, interrupted)

    # -------------------------------------------------------------------------
    # Rewards
    # -------------------------------------------------------------------------

    def add_reward(self, increment: float) -> None:
        self._cumulative_reward += increment
        if self.on_reward is not None:
            self.on_reward(increment)

    def set_reward(self, value: float) -> None:
        """Overwrite the episode reward; the difference goes out as a delta."""
        delta = value - self._cumulative_reward
        self._cumulative_reward = value
        if self.on_reward is not None:
            self.on_reward(delta)

    def get_cumulative_reward(self) -> float:
        return self._cumulative_reward

    # -------------------------------------------------------------------------
    # Decision cadence
    # -------------------------------------------------------------------------

    def request_decision(self) -> None:
        """Ask the host for a fresh action this tick."""
        self._decision_requested = True

    def request_action(self) -> None:
        """Ask the host to reapply the last action this tick."""
        self._action_requested = True

    def consume_requests(self) -> Tuple[bool, bool]:
        """Return and clear (decision_requested, action_requested)."""
        requests = (self._decision_requested, self._action_requested)
        self._decision_requested = False
        self._action_requested = False
        return requests

    @property
    def stored_action(self) -> np.ndarray:
        """The action from the most recent decision."""
        return self._stored_action.copy()

    def store_action(self, actions: Union[Sequence[float], np.ndarray]) -> None:
        actions = np.asarray(actions, dtype=np.float32).reshape(-1)
        if actions.shape[0] != self.action_size:
            raise ValueError(f"Expected {self.action_size} actions, got {actions.shape[0]}")
        self._stored_action = actions.copy()

    def apply_stored_action(self) -> None:
        """Run on_action_received with the stored action and count the step."""
        self.on_action_received(self._stored_action.copy())
        self._step_count += 1

    def get_observations(self) -> np.ndarray:
        sensor = VectorSensor(self.observation_size)
        self.collect_observations(sensor)
        return sensor.to_array()

    def get_heuristic_action(self, keys=()) -> np.ndarray:
        actions_out = np.zeros(self.action_size, dtype=np.float32)
        self.heuristic(actions_out, keys)
        return actions_out

    # -------------------------------------------------------------------------
    # Hooks
    # -------------------------------------------------------------------------

    def on_episode_begin(self) -> None:
        pass

    def collect_observations(self, sensor: VectorSensor) -> None:
        pass

    def on_action_received(self, actions: np.ndarray) -> None:
        pass

    def heuristic(self, actions_out: np.ndarray, keys=()) -> None:
        pass
