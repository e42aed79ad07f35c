"""
Baseline Homing Policy - Hunt away from the baby, home in when full.

This is a simple scripted policy that reads only the 8-value observation:

    [is_full, distance to baby, direction to baby (3), forward (3)]

Strategy:
- Full: turn towards the baby and swim forward until fed
- Hungry: fish live on the far side of the area from the baby, so turn
  away from the baby and swim, with occasional random turns to sweep the water
"""

import numpy as np
from typing import Optional


TURN_NONE = 0
TURN_LEFT = 1
TURN_RIGHT = 2

# Heading is "good enough" when the cosine to the target exceeds this
ALIGN_COS = 0.95


def steer_towards(forward: np.ndarray, target_dir: np.ndarray) -> int:
    """
    Pick the turn that rotates ``forward`` towards ``target_dir``.

    Both vectors live on the ground plane (x, 0, z). The vertical component
    of forward x target is positive when the target is to the right.
    """
    if float(np.dot(forward, target_dir)) > ALIGN_COS:
        return TURN_NONE
    cross_y = forward[2] * target_dir[0] - forward[0] * target_dir[2]
    return TURN_RIGHT if cross_y > 0 else TURN_LEFT


class PenguinPolicy:
    """Scripted homing baseline."""

    def __init__(self, wander: float = 0.15, seed: Optional[int] = None, debug: bool = False):
        """
        Args:
            wander: Probability of a random turn per decision while hunting.
            seed: Random seed for wander turns.
            debug: If True, print decisions to stdout.
        """
        self.wander = wander
        self.debug = debug
        self._rng = np.random.default_rng(seed)

    def reset(self, seed: Optional[int] = None) -> None:
        if seed is not None:
            self._rng = np.random.default_rng(seed)

    def act(self, observation: np.ndarray) -> np.ndarray:
        obs = np.asarray(observation, dtype=np.float64)
        is_full = obs[0] > 0.5
        to_baby = obs[2:5]
        forward = obs[5:8]

        if is_full:
            turn = steer_towards(forward, to_baby)
        elif self._rng.random() < self.wander:
            turn = int(self._rng.integers(TURN_LEFT, TURN_RIGHT + 1))
        else:
            turn = steer_towards(forward, -to_baby)

        action = np.array([1, turn], dtype=np.int64)

        if self.debug:
            print(f"[Homing Policy] full={is_full}, dist={obs[1]:.2f}, turn={turn}")

        return action


def create_policy(**kwargs) -> PenguinPolicy:
    """Factory function to create a policy instance."""
    return PenguinPolicy(**kwargs)
