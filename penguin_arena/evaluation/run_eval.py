"""
Evaluation Harness
==================

Runs a penguin policy once per seed of the fixed seed bank and reports
episode reward, feeding counts and how episodes ended.

Usage:
    python -m penguin_arena.evaluation.run_eval --policy policies/baseline_homing
    python -m penguin_arena.evaluation.run_eval --policy my_agent.py --feed-radius 2.0
"""

from __future__ import annotations

import argparse
import importlib.util
import json
import os
import sys
import time
from collections import Counter
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional

import numpy as np

from penguin_arena.penguin_core.env_gym import PenguinEnv
from penguin_arena.penguin_core.game import REASON_ALL_FISH_FED


ActFn = Callable[[np.ndarray], np.ndarray]


@dataclass
class EvalResult:
    """Outcome of one episode."""
    seed: int
    total_reward: float
    steps: int
    fish_eaten: int
    babies_fed: int
    termination_reason: str
    elapsed_time: float

    @property
    def success(self) -> bool:
        return self.termination_reason == REASON_ALL_FISH_FED


@dataclass
class EvalSummary:
    """Aggregate over every evaluated seed."""
    mean_reward: float
    std_reward: float
    min_reward: float
    max_reward: float
    success_rate: float
    mean_steps: float
    mean_babies_fed: float
    total_time: float
    results: List[EvalResult]
    reasons: Dict[str, int] = field(default_factory=dict)


def load_seed_bank(path: Optional[str] = None) -> List[int]:
    """Read the ``seeds`` list from seed_bank.json (the packaged one if ``path`` is None)."""
    if path is None:
        path = os.path.join(os.path.dirname(__file__), "seed_bank.json")

    with open(path, "r") as f:
        return list(json.load(f)["seeds"])


def load_policy(policy_path: str) -> ActFn:
    """
    Import a policy module and return its act function.

    The module (``agent.py`` inside a directory, or the file itself) must
    define either a ``PenguinPolicy`` class with ``act(obs)`` or a
    module-level ``act(obs)``. A ``PenguinPolicy`` instance that also has
    ``reset(seed)`` is reseeded by the harness before each episode.

    Raises:
        FileNotFoundError: If the module file does not exist.
        ImportError: If the file cannot be imported as a module.
        AttributeError: If neither entry point is present.
    """
    path = Path(policy_path)
    agent_file = path / "agent.py" if path.is_dir() else path
    if not agent_file.exists():
        raise FileNotFoundError(f"Policy file not found: {agent_file}")

    spec = importlib.util.spec_from_file_location("policy_module", agent_file)
    if spec is None or spec.loader is None:
        raise ImportError(f"Failed to load policy module from {agent_file}")

    module = importlib.util.module_from_spec(spec)
    sys.modules["policy_module"] = module
    spec.loader.exec_module(module)

    policy_class = getattr(module, "PenguinPolicy", None)
    if policy_class is not None:
        policy = policy_class()
        if not hasattr(policy, "act"):
            raise AttributeError("PenguinPolicy class must have an 'act' method")
        return policy.act

    if hasattr(module, "act"):
        return module.act

    raise AttributeError(
        "Policy module must define a 'PenguinPolicy' class with an 'act' method "
        "or a module-level 'act' function"
    )


def _reseed_policy(act_fn: ActFn, seed: int) -> None:
    # Bound methods of stateful policies expose their instance
    reset = getattr(getattr(act_fn, "__self__", None), "reset", None)
    if callable(reset):
        reset(seed=seed)


def evaluate_single_seed(
    act_fn: ActFn,
    seed: int,
    config_path: Optional[str] = None,
    environment_parameters: Optional[Dict[str, float]] = None,
    verbose: bool = False
) -> EvalResult:
    """
    Play one episode to termination or truncation.

    Args:
        act_fn: Maps an observation to a [forward, turn] action.
        seed: Seed for the area layout (and for the policy, if it can be reseeded).
        config_path: Path to penguin_config.yaml (None = default).
        environment_parameters: Passed to the episode through reset options,
            e.g. {"feed_radius": 2.0}.
        verbose: If True, print a one-line result.

    Raises:
        ValueError: If the configuration has no step budget (max_steps: 0),
            since an episode could then run forever.
    """
    env = PenguinEnv(config_path=config_path)
    if env.config.agent.max_steps <= 0:
        env.close()
        raise ValueError("Evaluation needs a step budget: set agent.max_steps > 0")
    options = {"environment_parameters": environment_parameters} if environment_parameters else None
    obs, info = env.reset(seed=seed, options=options)
    _reseed_policy(act_fn, seed)

    start_time = time.time()
    total_reward = 0.0
    terminated = truncated = False
    while not (terminated or truncated):
        obs, reward, terminated, truncated, info = env.step(act_fn(obs))
        total_reward += reward
    elapsed = time.time() - start_time
    env.close()

    result = EvalResult(
        seed=seed,
        total_reward=total_reward,
        steps=info["step_count"],
        fish_eaten=info["fish_eaten"],
        babies_fed=info["babies_fed"],
        termination_reason=info["terminated_reason"],
        elapsed_time=elapsed
    )

    if verbose:
        print(f"  Seed {seed}: reward={result.total_reward:.3f}, "
              f"eaten={result.fish_eaten}, fed={result.babies_fed}, steps={result.steps}, "
              f"end={result.termination_reason}, time={elapsed:.2f}s")

    return result


def summarize(results: List[EvalResult], total_time: float) -> EvalSummary:
    rewards = np.array([r.total_reward for r in results], dtype=np.float64)
    return EvalSummary(
        mean_reward=float(rewards.mean()),
        std_reward=float(rewards.std()),
        min_reward=float(rewards.min()),
        max_reward=float(rewards.max()),
        success_rate=float(np.mean([r.success for r in results])),
        mean_steps=float(np.mean([r.steps for r in results])),
        mean_babies_fed=float(np.mean([r.babies_fed for r in results])),
        total_time=total_time,
        results=results,
        reasons=dict(Counter(r.termination_reason for r in results))
    )


def print_summary(summary: EvalSummary) -> None:
    print()
    print("=" * 50)
    print("EVALUATION SUMMARY")
    print("=" * 50)
    print(f"Seeds evaluated: {len(summary.results)}")
    print(f"Mean reward:     {summary.mean_reward:.3f} (std {summary.std_reward:.3f})")
    print(f"Reward range:    [{summary.min_reward:.3f}, {summary.max_reward:.3f}]")
    print(f"Babies fed:      {summary.mean_babies_fed:.2f} per episode")
    print(f"Success rate:    {summary.success_rate:.0%}")
    print(f"Mean steps:      {summary.mean_steps:.1f}")
    for reason, count in sorted(summary.reasons.items()):
        print(f"  {reason or 'unfinished'}: {count}")
    print(f"Total time:      {summary.total_time:.2f}s")
    print("=" * 50)


def evaluate_policy(
    act_fn: ActFn,
    seeds: Optional[List[int]] = None,
    config_path: Optional[str] = None,
    environment_parameters: Optional[Dict[str, float]] = None,
    verbose: bool = True
) -> EvalSummary:
    """
    Evaluate a policy on every seed (the packaged seed bank if ``seeds`` is None).

    Returns:
        EvalSummary with reward statistics and termination reason counts.
    """
    if seeds is None:
        seeds = load_seed_bank()

    if verbose:
        print(f"Evaluating on {len(seeds)} seeds...")

    total_start = time.time()
    results = []
    for i, seed in enumerate(seeds):
        if verbose:
            print(f"[{i+1}/{len(seeds)}] Running seed {seed}...")
        results.append(evaluate_single_seed(
            act_fn,
            seed,
            config_path=config_path,
            environment_parameters=environment_parameters,
            verbose=verbose
        ))

    summary = summarize(results, time.time() - total_start)
    if verbose:
        print_summary(summary)
    return summary


def save_results(summary: EvalSummary, policy_name: str, output_path: str) -> None:
    """Write the summary and per-seed results to JSON."""
    data = {"policy": policy_name, "timestamp": time.strftime("%Y-%m-%d %H:%M:%S")}
    data.update(asdict(summary))

    with open(output_path, "w") as f:
        json.dump(data, f, indent=2)

    print(f"Results saved to {output_path}")


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Evaluate a penguin policy")
    parser.add_argument("--policy", type=str, required=True,
                        help="Path to policy directory or agent.py file")
    parser.add_argument("--seeds", type=str, default=None,
                        help="Path to seed bank JSON (uses default if not specified)")
    parser.add_argument("--config", type=str, default=None,
                        help="Path to penguin_config.yaml (uses default if not specified)")
    parser.add_argument("--feed-radius", type=float, default=None,
                        help="feed_radius environment parameter for every episode")
    parser.add_argument("--output", type=str, default=None,
                        help="Path to save results JSON")
    parser.add_argument("--quiet", action="store_true",
                        help="Reduce output verbosity")

    args = parser.parse_args(argv)

    print(f"Loading policy from {args.policy}...")
    try:
        act_fn = load_policy(args.policy)
    except (FileNotFoundError, ImportError, AttributeError) as e:
        print(f"Error loading policy: {e}")
        return 1

    seeds = load_seed_bank(args.seeds) if args.seeds else None
    params = {"feed_radius": args.feed_radius} if args.feed_radius is not None else None

    try:
        summary = evaluate_policy(
            act_fn,
            seeds=seeds,
            config_path=args.config,
            environment_parameters=params,
            verbose=not args.quiet
        )
    except ValueError as e:
        print(f"Error: {e}")
        return 1

    if args.output:
        save_results(summary, Path(args.policy).name, args.output)

    return 0


if __name__ == "__main__":
    sys.exit(main())
