"""
Evaluation Package
==================

Contains the seed bank and evaluation harness for scoring penguin policies.
"""

from penguin_arena.evaluation.run_eval import evaluate_policy, load_seed_bank

__all__ = ["evaluate_policy", "load_seed_bank"]
