"""
Baseline Homing Policy Package

A scripted policy that swims away from the baby to hunt and homes back to
feed it. Serves as a benchmark and example.
"""

from .agent import PenguinPolicy, create_policy

__all__ = ["PenguinPolicy", "create_policy"]
