"""
Penguin Arena Package
=====================

A penguin learns to catch fish and feed its baby.

- penguin_core: agent, area, physics, tick loop and Gymnasium wrapper
- evaluation: seed-bank evaluation harness for policies

All tunable parameters are in penguin_config.yaml.
"""
