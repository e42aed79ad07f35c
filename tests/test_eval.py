"""
Tests for the evaluation harness and the baseline policy.
"""

import json
import os

import numpy as np
import pytest

from penguin_arena.evaluation import run_eval
from penguin_arena.evaluation.run_eval import (
    EvalResult,
    evaluate_policy,
    evaluate_single_seed,
    load_policy,
    load_seed_bank,
    main,
    save_results,
)
from policies.baseline_homing.agent import (
    TURN_LEFT,
    TURN_NONE,
    TURN_RIGHT,
    PenguinPolicy,
    steer_towards,
)


BASELINE_DIR = os.path.join(os.path.dirname(os.path.dirname(__file__)), "policies", "baseline_homing")


def forward_only(obs):
    return np.array([1, 0])


@pytest.fixture
def short_config_path(write_config):
    return write_config(agent={"max_steps": 40})


@pytest.fixture
def unbounded_config_path(write_config):
    return write_config(agent={"max_steps": 0})


class TestSteering:
    """Test the baseline's turn selection."""

    def test_aligned(self):
        """Facing the target should not turn."""
        assert steer_towards(np.array([0.0, 0.0, 1.0]), np.array([0.0, 0.0, 1.0])) == TURN_NONE

    def test_target_on_right(self):
        """Target towards +x from +z should turn right."""
        # Positive yaw turns from +z towards +x
        assert steer_towards(np.array([0.0, 0.0, 1.0]), np.array([1.0, 0.0, 0.0])) == TURN_RIGHT

    def test_target_on_left(self):
        """Target towards -x from +z should turn left."""
        assert steer_towards(np.array([0.0, 0.0, 1.0]), np.array([-1.0, 0.0, 0.0])) == TURN_LEFT

    def test_target_behind_turns(self):
        """Target behind should turn."""
        assert steer_towards(np.array([0.0, 0.0, 1.0]), np.array([0.1, 0.0, -1.0])) != TURN_NONE


class TestBaselinePolicy:
    """Test the scripted policy's choices."""

    def test_full_heads_home(self):
        """A full penguin should swim towards the baby."""
        policy = PenguinPolicy(seed=0)
        obs = np.array([1.0, 5.0, 0.0, 0.0, 1.0, 0.0, 0.0, 1.0], dtype=np.float32)
        np.testing.assert_array_equal(policy.act(obs), [1, TURN_NONE])

    def test_hungry_turns_away(self):
        """A hungry penguin should turn away from the baby."""
        policy = PenguinPolicy(wander=0.0, seed=0)
        obs = np.array([0.0, 5.0, 0.0, 0.0, 1.0, 0.0, 0.0, 1.0], dtype=np.float32)
        action = policy.act(obs)
        assert action[0] == 1
        assert action[1] != TURN_NONE

    def test_action_fits_space(self):
        """Actions should fit MultiDiscrete([2, 3])."""
        policy = PenguinPolicy(seed=3)
        obs = np.zeros(8, dtype=np.float32)
        for _ in range(20):
            action = policy.act(obs)
            assert action.shape == (2,)
            assert 0 <= action[0] < 2
            assert 0 <= action[1] < 3


class TestLoadPolicy:
    """Test policy loading."""

    def test_load_directory(self):
        """A directory should load its agent.py."""
        act = load_policy(BASELINE_DIR)
        action = act(np.zeros(8, dtype=np.float32))
        assert len(action) == 2

    def test_load_act_function(self, tmp_path):
        """A module-level act function should be accepted."""
        path = tmp_path / "agent.py"
        path.write_text("def act(obs):\n    return [1, 0]\n")
        assert load_policy(str(path))(None) == [1, 0]

    def test_missing_file(self, tmp_path):
        """A missing path should raise FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_policy(str(tmp_path / "missing"))

    def test_module_without_act(self, tmp_path):
        """A module without an entry point should raise AttributeError."""
        path = tmp_path / "agent.py"
        path.write_text("VALUE = 1\n")
        with pytest.raises(AttributeError):
            load_policy(str(path))


class TestEvaluation:
    """Test episode evaluation."""

    def test_seed_bank(self):
        """Seed bank should hold 10 distinct seeds."""
        seeds = load_seed_bank()
        assert len(seeds) == 10
        assert len(set(seeds)) == len(seeds)

    def test_single_seed_truncates(self, short_config_path):
        """A policy that never feeds should hit max_steps."""
        result = evaluate_single_seed(forward_only, 7, config_path=short_config_path)

        assert isinstance(result, EvalResult)
        assert result.steps == 40
        assert result.termination_reason == "max_steps"
        assert not result.success
        # 40 ticks cannot cover more than one catch and one feeding
        assert result.total_reward < 2.0

    def test_single_seed_deterministic(self, short_config_path):
        """Same seed should give the same reward."""
        a = evaluate_single_seed(forward_only, 11, config_path=short_config_path)
        b = evaluate_single_seed(forward_only, 11, config_path=short_config_path)
        assert a.total_reward == b.total_reward

    def test_no_step_budget_rejected(self, unbounded_config_path):
        """max_steps 0 should raise instead of running forever."""
        with pytest.raises(ValueError):
            evaluate_single_seed(forward_only, 1, config_path=unbounded_config_path)

    def test_evaluate_policy_summary(self, short_config_path):
        """Summary should aggregate every seed."""
        summary = evaluate_policy(forward_only, seeds=[1, 2, 3], config_path=short_config_path, verbose=False)

        assert len(summary.results) == 3
        assert summary.min_reward <= summary.mean_reward <= summary.max_reward
        assert summary.mean_steps == 40
        assert summary.success_rate == 0.0
        assert summary.reasons == {"max_steps": 3}

    def test_stateful_policy_reseeded_per_episode(self, short_config_path):
        """A policy with reset(seed) should replay the same episode."""
        act = load_policy(BASELINE_DIR)

        a = evaluate_single_seed(act, 8, config_path=short_config_path)
        b = evaluate_single_seed(act, 8, config_path=short_config_path)

        assert a.total_reward == b.total_reward
        assert a.fish_eaten == b.fish_eaten

    def test_environment_parameters_reach_episode(self, short_config_path, monkeypatch):
        """Environment parameters should be passed through reset options."""
        radii = []

        class RecordingEnv(run_eval.PenguinEnv):
            def reset(self, *, seed=None, options=None):
                obs, info = super().reset(seed=seed, options=options)
                radii.append(info["feed_radius"])
                return obs, info

        monkeypatch.setattr(run_eval, "PenguinEnv", RecordingEnv)

        evaluate_single_seed(
            forward_only, 3, config_path=short_config_path, environment_parameters={"feed_radius": 2.5}
        )

        assert radii == [2.5]

    def test_save_results(self, short_config_path, tmp_path):
        """Results should be written as JSON."""
        summary = evaluate_policy(forward_only, seeds=[5], config_path=short_config_path, verbose=False)
        out = tmp_path / "results.json"

        save_results(summary, "forward_only", str(out))

        data = json.loads(out.read_text())
        assert data["policy"] == "forward_only"
        assert data["results"][0]["seed"] == 5


class TestCli:
    """Test the command-line entry point."""

    def test_bad_policy_path(self, tmp_path):
        """A missing policy should exit with status 1."""
        assert main(["--policy", str(tmp_path / "nope")]) == 1

    def test_no_step_budget_exits_with_error(self, unbounded_config_path, capsys):
        """A config without a step budget should exit with status 1."""
        code = main(["--policy", BASELINE_DIR, "--config", unbounded_config_path, "--quiet"])

        assert code == 1
        assert "max_steps" in capsys.readouterr().out

    def test_runs_baseline(self, short_config_path, tmp_path):
        """The baseline should run end to end and save results."""
        seeds = tmp_path / "seeds.json"
        seeds.write_text(json.dumps({"seeds": [4]}))
        out = tmp_path / "out.json"

        code = main([
            "--policy", BASELINE_DIR,
            "--seeds", str(seeds),
            "--config", short_config_path,
            "--output", str(out),
            "--quiet",
        ])

        assert code == 0
        data = json.loads(out.read_text())
        assert data["policy"] == "baseline_homing"
        assert len(data["results"]) == 1
        assert sum(data["reasons"].values()) == 1
