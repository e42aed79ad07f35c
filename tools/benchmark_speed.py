"""
Performance Benchmark
=====================

Measures tick and decision throughput for performance tuning.

Usage:
    python -m tools.benchmark_speed [--ticks N] [--steps S] [--envs E] [--sync]
"""

from __future__ import annotations

import argparse
import os
import sys
import time

import numpy as np

# Optional dependency for resource monitoring
try:
    import psutil
    PSUTIL_AVAILABLE = True
except ImportError:
    PSUTIL_AVAILABLE = False

from penguin_arena.penguin_core.config_loader import load_config
from penguin_arena.penguin_core.env_gym import PenguinEnv
from penguin_arena.penguin_core.game import PenguinGame
from penguin_arena.penguin_core.vector_env import make_vec_env


def benchmark_game_ticks(num_ticks: int = 10000, seed: int = 42) -> dict:
    """
    Benchmark raw host ticks with a random policy.

    Args:
        num_ticks: Number of ticks to run.
        seed: Random seed.

    Returns:
        Dict with timing results.
    """
    rng = np.random.default_rng(seed)

    def random_policy(obs):
        return np.array([rng.integers(0, 2), rng.integers(0, 3)])

    game = PenguinGame(config=load_config(), seed=seed, policy=random_policy)
    game.reset(seed=seed)

    start = time.perf_counter()
    game.run(num_ticks)
    elapsed = time.perf_counter() - start

    return {
        "mode": "ticks",
        "num_steps": num_ticks,
        "elapsed_seconds": elapsed,
        "steps_per_second": num_ticks / elapsed,
        "ms_per_step": (elapsed * 1000) / num_ticks
    }


def benchmark_env_steps(num_steps: int = 2000, seed: int = 42) -> dict:
    """
    Benchmark Gymnasium decision steps.

    Args:
        num_steps: Number of env.step calls.
        seed: Random seed.

    Returns:
        Dict with timing results.
    """
    env = PenguinEnv()
    env.action_space.seed(seed)
    env.reset(seed=seed)

    start = time.perf_counter()
    for _ in range(num_steps):
        _, _, terminated, truncated, _ = env.step(env.action_space.sample())
        if terminated or truncated:
            env.reset()
    elapsed = time.perf_counter() - start
    env.close()

    return {
        "mode": "env",
        "num_steps": num_steps,
        "elapsed_seconds": elapsed,
        "steps_per_second": num_steps / elapsed,
        "ms_per_step": (elapsed * 1000) / num_steps
    }


def benchmark_vec_env(
    num_envs: int = 4,
    num_steps: int = 500,
    seed: int = 42,
    use_sync: bool = False
) -> dict:
    """
    Benchmark decision steps across parallel environments.

    Args:
        num_envs: Number of environments.
        num_steps: Number of vectorized step calls.
        seed: Base random seed.
        use_sync: Run in a single process instead of one per env.

    Returns:
        Dict with timing results. Step counts are summed over all envs.
    """
    process = psutil.Process(os.getpid()) if PSUTIL_AVAILABLE else None

    vec_env = make_vec_env(num_envs=num_envs, seed=seed, use_sync=use_sync)
    vec_env.action_space.seed(seed)
    vec_env.reset(seed=seed)

    start = time.perf_counter()
    for _ in range(num_steps):
        vec_env.step(vec_env.action_space.sample())
    elapsed = time.perf_counter() - start

    memory_mb = process.memory_info().rss / (1024 * 1024) if process is not None else None
    vec_env.close()

    total = num_steps * num_envs
    return {
        "mode": f"vec x{num_envs}" + (" (sync)" if use_sync else ""),
        "num_steps": total,
        "elapsed_seconds": elapsed,
        "steps_per_second": total / elapsed,
        "ms_per_step": (elapsed * 1000) / total,
        "memory_mb": memory_mb
    }


def print_results(results: dict) -> None:
    print(f"  Mode:           {results['mode']}")
    print(f"  Steps:          {results['num_steps']}")
    print(f"  Elapsed:        {results['elapsed_seconds']:.2f}s")
    print(f"  Steps/second:   {results['steps_per_second']:.0f}")
    print(f"  ms/step:        {results['ms_per_step']:.3f}")
    if results.get("memory_mb") is not None:
        print(f"  Memory (main):  {results['memory_mb']:.1f} MB")
    print()


def main():
    parser = argparse.ArgumentParser(description="Benchmark penguin arena throughput")
    parser.add_argument("--ticks", type=int, default=10000, help="Host ticks to run")
    parser.add_argument("--steps", type=int, default=2000, help="Env decision steps to run")
    parser.add_argument("--envs", type=int, default=4, help="Parallel envs for the vector benchmark (0 to skip)")
    parser.add_argument("--sync", action="store_true", help="Use SyncVectorEnv for the vector benchmark")
    parser.add_argument("--seed", type=int, default=42, help="Random seed")

    args = parser.parse_args()

    print("=== Host ticks ===")
    print_results(benchmark_game_ticks(args.ticks, args.seed))

    print("=== Gymnasium steps ===")
    print_results(benchmark_env_steps(args.steps, args.seed))

    if args.envs > 0:
        print("=== Vector env steps ===")
        vec_steps = max(1, args.steps // args.envs)
        print_results(benchmark_vec_env(args.envs, vec_steps, args.seed, use_sync=args.sync))

    return 0


if __name__ == "__main__":
    sys.exit(main())
