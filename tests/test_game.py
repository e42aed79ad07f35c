"""
Tests for the host tick loop: cadence, movement, collisions and episode end.
"""

import numpy as np
import pytest

from penguin_arena.penguin_core.game import (
    REASON_ALL_FISH_FED,
    REASON_MAX_STEPS,
    PenguinGame,
)


def stage(game, penguin=(0.0, 0.0), yaw=0.0, baby=(-10.0, -10.0)):
    """Put the penguin and baby at known spots after reset."""
    area = game.area
    area.physics.teleport(area.penguin, *penguin)
    area.penguin.yaw = yaw
    area.physics.teleport(area.baby, *baby)


class TestDecisionLoop:
    """Test decision requests and held actions."""

    def test_policy_called_every_fourth_tick(self, still_config):
        """Policy should be asked once per decision period."""
        calls = []

        def policy(obs):
            calls.append(obs)
            return [0.0, 0.0]

        game = PenguinGame(config=still_config, seed=0, policy=policy)
        game.reset()

        decisions = [game.tick().decision_requested for _ in range(12)]

        assert len(calls) == 3
        assert decisions == [True, False, False, False] * 3
        assert all(obs.shape == (8,) for obs in calls)

    def test_external_action_ignored_on_repeat_ticks(self, still_config):
        """Actions passed on repeat ticks should not replace the held one."""
        game = PenguinGame(config=still_config, seed=0)
        game.reset()
        stage(game, yaw=0.0)
        game.area.remove_all_fish()

        game.tick([1.0, 0.0])
        game.tick([0.0, 2.0])

        np.testing.assert_array_equal(game.agent.stored_action, [1.0, 0.0])
        assert game.area.penguin.yaw == pytest.approx(0.0)

    def test_heuristic_reads_key_source(self, still_config):
        """Without a policy, decisions should come from the pressed keys."""
        game = PenguinGame(config=still_config, seed=0, key_source=lambda: {"w", "d"})
        game.reset()

        game.tick()

        np.testing.assert_array_equal(game.agent.stored_action, [1.0, 2.0])

    def test_no_policy_no_keys_stays_still(self, still_config):
        """No policy and no keys should leave the penguin in place."""
        game = PenguinGame(config=still_config, seed=0)
        game.reset()
        stage(game)
        game.area.remove_all_fish()

        game.run(8)

        np.testing.assert_allclose(game.agent.position, [0.0, 0.0, 0.0], atol=1e-9)


class TestMovement:
    """Test that held actions move the penguin."""

    def test_forward_displacement_per_tick(self, still_config):
        """One forward tick should move move_speed * dt."""
        game = PenguinGame(config=still_config, seed=0)
        game.reset()
        stage(game, yaw=0.0)
        game.area.remove_all_fish()

        game.tick([1.0, 0.0])

        np.testing.assert_allclose(game.agent.position, [0.0, 0.0, 0.1], atol=1e-6)

    def test_turning_over_one_decision(self, still_config):
        """A held turn should apply on every tick of the decision."""
        game = PenguinGame(config=still_config, seed=0)
        game.reset()
        stage(game, yaw=0.0)

        game.step_decision([0.0, 2.0])

        assert game.area.penguin.yaw == pytest.approx(4 * 3.6)


class TestStepBudget:
    """Test truncation at max_steps."""

    @pytest.fixture
    def short_config(self, empty_config, with_overrides):
        return with_overrides(empty_config, agent={"max_steps": 10})

    def test_truncates_at_budget(self, short_config):
        """Episode should truncate on the tick reaching max_steps."""
        game = PenguinGame(config=short_config, seed=0, auto_reset=False)
        game.reset()

        results = [game.tick() for _ in range(10)]

        assert not any(r.truncated for r in results[:-1])
        assert results[-1].truncated
        assert not results[-1].terminated
        assert results[-1].reason == REASON_MAX_STEPS
        assert game.agent.was_interrupted

    def test_finished_episode_is_inert_without_auto_reset(self, short_config):
        """Ticking a finished episode should do nothing without auto_reset."""
        game = PenguinGame(config=short_config, seed=0, auto_reset=False)
        game.reset()
        game.run(10)

        result = game.tick()

        assert result.reward == 0.0
        assert result.truncated
        assert game.agent.step_count == 10

    def test_auto_reset_starts_new_episode(self, short_config):
        """With auto_reset, the next tick should start a new episode."""
        game = PenguinGame(config=short_config, seed=0)
        game.reset()
        game.run(10)

        result = game.tick()

        assert not result.truncated
        assert game.agent.step_count == 1
        assert game.agent.completed_episodes == 1

    def test_penalty_sums_to_minus_one(self, empty_config):
        """Step penalties over a full episode should sum to -1."""
        game = PenguinGame(config=empty_config, seed=0, policy=lambda obs: [1.0, 0.0])
        game.reset()

        total = game.run(3000)

        assert total == pytest.approx(-1.0, abs=1e-6)
        assert game.termination_reason == REASON_MAX_STEPS


class TestForaging:
    """Test eating and feeding through the tick loop."""

    @pytest.fixture
    def one_fish_config(self, still_config, with_overrides):
        return with_overrides(still_config, area={"fish_count": 1})

    def test_collision_eats_fish(self, still_config):
        """Swimming into a fish should eat it."""
        game = PenguinGame(config=still_config, seed=0, auto_reset=False)
        game.reset()
        stage(game, yaw=0.0)
        target, other = game.area.fish
        game.area.physics.teleport(target.actor, 0.0, 1.0)
        game.area.physics.teleport(other.actor, 10.0, 10.0)

        for _ in range(20):
            game.tick([1.0, 0.0])
            if game.agent.is_full:
                break

        assert game.agent.is_full
        assert game.agent.fish_eaten == 1
        assert [f.uid for f in game.area.fish] == [other.uid]

    def test_full_cycle_ends_episode(self, one_fish_config):
        """Eating the last fish and feeding the baby should terminate."""
        game = PenguinGame(config=one_fish_config, seed=0, auto_reset=False)
        game.reset()
        stage(game, yaw=0.0)
        game.area.physics.teleport(game.area.fish[0].actor, 0.0, 1.0)

        for _ in range(20):
            game.tick([1.0, 0.0])
            if game.agent.is_full:
                break
        assert game.agent.is_full

        x, _, z = game.agent.position
        game.area.physics.teleport(game.area.baby, x, z + 1.2)

        result = None
        for _ in range(20):
            result = game.tick([1.0, 0.0])
            if game.is_over:
                break

        assert result.terminated
        assert not result.truncated
        assert result.reason == REASON_ALL_FISH_FED
        assert game.agent.babies_fed == 1
        assert game.area.fish_remaining == 0
        assert len(game.area.transients) == 2

    def test_proximity_feeding_via_parameter(self, one_fish_config):
        """A large feed_radius should feed before the action is applied."""
        game = PenguinGame(config=one_fish_config, seed=0, auto_reset=False)
        game.set_environment_parameter("feed_radius", 100.0)
        game.reset()
        assert game.agent.feed_radius == 100.0

        game.agent.eat_fish(game.area.fish[0].actor)
        result = game.tick()

        assert result.terminated
        assert result.reward == pytest.approx(1.0)
        assert game.agent.step_count == 0

    def test_markers_expire_during_play(self, still_config):
        """Feeding markers should expire after their lifetime in ticks."""
        game = PenguinGame(config=still_config, seed=0)
        game.reset()
        stage(game)
        game.agent.eat_fish(game.area.fish[0].actor)
        game.agent.regurgitate_fish()
        assert len(game.area.transients) == 2

        # 4 s of markers at 50 ticks per second
        game.run(199)
        assert len(game.area.transients) == 2
        game.run(2)
        assert game.area.transients == []


class TestDecisionSteps:
    """Test step_decision grouping."""

    def test_one_decision_spans_period(self, still_config):
        """One decision should cover decision_period ticks."""
        game = PenguinGame(config=still_config, seed=0, auto_reset=False)
        game.reset()

        first = game.step_decision([0.0, 0.0])
        second = game.step_decision([0.0, 0.0])

        assert first.ticks == 4
        assert second.ticks == 4
        assert game.agent.step_count == 8
        assert first.observation.shape == (8,)

    def test_partial_period_finished_before_decision(self, still_config):
        """After a lone tick(), the action should land on the next decision tick."""
        game = PenguinGame(config=still_config, seed=0, auto_reset=False)
        game.reset()
        stage(game)
        game.area.remove_all_fish()

        game.tick([0.0, 0.0])
        result = game.step_decision([1.0, 2.0])

        np.testing.assert_array_equal(game.agent.stored_action, [1.0, 2.0])
        assert result.ticks == 7
        assert game.agent.step_count == 8

    def test_episode_ending_mid_period_skips_action(self, empty_config, with_overrides):
        """If the held action runs out the budget, the new action is not applied."""
        cfg = with_overrides(empty_config, agent={"max_steps": 6})
        game = PenguinGame(config=cfg, seed=0, auto_reset=False)
        game.reset()
        for _ in range(5):
            game.tick([0.0, 0.0])

        result = game.step_decision([1.0, 2.0])

        assert result.ticks == 1
        assert result.truncated
        np.testing.assert_array_equal(game.agent.stored_action, [0.0, 0.0])

    def test_decision_cut_short_by_budget(self, empty_config, with_overrides):
        """A decision should stop early when the step budget runs out."""
        cfg = with_overrides(empty_config, agent={"max_steps": 6})
        game = PenguinGame(config=cfg, seed=0, auto_reset=False)
        game.reset()

        game.step_decision([1.0, 0.0])
        result = game.step_decision([1.0, 0.0])

        assert result.ticks == 2
        assert result.truncated
        assert result.reward == pytest.approx(-2.0 / 6)


class TestReproducibility:
    """Test seeded determinism."""

    @staticmethod
    def policy(obs):
        return [1.0, 2.0 if obs[1] > 6.0 else 0.0]

    def test_same_seed_same_trajectory(self, config):
        """Same seed and policy should give identical runs."""
        a = PenguinGame(config=config, seed=42, policy=self.policy)
        b = PenguinGame(config=config, seed=42, policy=self.policy)
        a.reset()
        b.reset()

        ra = a.run(300)
        rb = b.run(300)

        assert ra == rb
        np.testing.assert_array_equal(a.agent.get_observations(), b.agent.get_observations())

    def test_reset_seed_restores_layout(self, config):
        """Reset with the same seed should give the same first observation."""
        game = PenguinGame(config=config, seed=1)
        first = game.reset(seed=9)
        game.run(20)
        again = game.reset(seed=9)

        np.testing.assert_array_equal(first, again)


class TestInfo:
    """Test info and render data."""

    def test_info_keys(self, still_config):
        """Info should contain the episode counters."""
        game = PenguinGame(config=still_config, seed=0)
        game.reset()
        info = game.get_info()
        for key in ("step_count", "cumulative_reward", "fish_remaining", "is_full",
                    "babies_fed", "feed_radius", "terminated_reason"):
            assert key in info
        assert info["fish_remaining"] == 2

    def test_render_data(self, still_config):
        """Render data should list the fish and markers."""
        game = PenguinGame(config=still_config, seed=0)
        game.reset()
        data = game.get_render_data()
        assert len(data["fish"]) == 2
        assert data["markers"] == []
        assert data["half_extent"] == still_config.area.half_extent
