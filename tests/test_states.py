import numpy as np
import pytest

from humanlike_agent.actions import Action, ActionSet
from humanlike_agent.behavior_state import BehaviorStateId
from humanlike_agent.collect_state import CollectState
from humanlike_agent.explore_state import ExploreState
from humanlike_agent.flee_state import FleeState, panic_actions
from humanlike_agent.hesitate_state import HesitateState
from humanlike_agent.jump_state import JumpState
from humanlike_agent.stuck_state import StuckState

# Agent cell in the 15x16 test window
R0, C0 = 7, 8


def flat():
    terrain = np.zeros((15, 16), dtype=int)
    terrain[R0 + 1, :] = 1
    return terrain


def with_gap(width, start=C0 + 1):
    terrain = flat()
    terrain[R0 + 1, start:start + width] = 0
    return terrain


# =============================================================================
# EXPLORE
# =============================================================================

class TestExplore:

    def test_jumps_obstacle_at_body_height(self, make_obs, make_ctx):
        terrain = np.zeros((15, 16), dtype=int)
        terrain[R0, C0 + 1] = 1
        ctx = make_ctx(make_obs(terrain))

        actions = ExploreState().actions(ctx)

        assert actions[Action.JUMP]
        assert actions[Action.RIGHT]

    def test_jumps_obstacle_at_head_height(self, make_obs, make_ctx):
        terrain = flat()
        terrain[R0 - 1, C0 + 1] = 3
        actions = ExploreState().actions(make_ctx(make_obs(terrain)))
        assert actions[Action.JUMP]

    def test_open_ground_runs_without_jumping(self, make_obs, make_ctx):
        actions = ExploreState().actions(make_ctx(make_obs(flat())))
        assert actions == ActionSet.forward_run()

    def test_speed_off_when_enemies_crowd_the_cone(self, make_obs, make_ctx, enemies):
        enemies[R0, C0 + 3] = 1
        enemies[R0 - 1, C0 + 4] = 1
        actions = ExploreState().actions(make_ctx(make_obs(flat(), enemies)))
        assert actions[Action.RIGHT]
        assert not actions[Action.SPEED]

    def test_single_enemy_keeps_speed(self, make_obs, make_ctx, enemies):
        enemies[R0, C0 + 4] = 1
        actions = ExploreState().actions(make_ctx(make_obs(flat(), enemies)))
        assert actions[Action.SPEED]

    def test_curious_agent_jumps_into_overhead_coin_row(self, make_obs, make_ctx, rng_factory):
        terrain = flat()
        terrain[R0 - 2, C0 + 1:C0 + 4] = 2
        state = ExploreState()

        actions = state.actions(make_ctx(make_obs(terrain), rng=rng_factory(default=0.0)))

        assert actions[Action.JUMP]
        assert state.trails_followed == 1

    def test_worthwhile_trail_followed_without_curiosity(self, make_obs, make_ctx, rng_factory):
        terrain = flat()
        terrain[R0 - 2, C0:C0 + 3] = 2
        rng = rng_factory()
        state = ExploreState()

        actions = state.actions(make_ctx(make_obs(terrain), rng=rng))

        assert actions[Action.JUMP]
        assert state.trails_followed == 1
        assert rng.calls == 0

    def test_nearby_coin_without_trail_needs_curiosity(self, make_obs, make_ctx, rng_factory):
        terrain = flat()
        terrain[R0 - 1, C0 + 2] = 2

        calm = ExploreState().actions(make_ctx(make_obs(terrain)))
        curious = ExploreState().actions(make_ctx(make_obs(terrain), rng=rng_factory(default=0.0)))

        assert not calm[Action.JUMP]
        assert curious[Action.JUMP]

    def test_high_value_trail_slows_down_even_without_curiosity(self, make_obs, make_ctx):
        terrain = flat()
        terrain[R0 - 2, C0 + 1:C0 + 6] = 2
        actions = ExploreState().actions(make_ctx(make_obs(terrain)))
        assert actions[Action.JUMP]
        assert not actions[Action.SPEED]

    @pytest.mark.parametrize("terrain", [flat(), with_gap(5), np.zeros((15, 16), dtype=int)])
    def test_adjacent_enemy_means_flee_regardless_of_terrain(self, make_obs, make_ctx,
                                                             enemies, terrain):
        enemies[R0, C0 + 1] = 1
        ctx = make_ctx(make_obs(terrain, enemies), stuck_counter=5)
        assert ExploreState().next_state(ctx) == BehaviorStateId.FLEE

    def test_stuck_counter_means_stuck(self, make_obs, make_ctx):
        ctx = make_ctx(make_obs(flat()), stuck_counter=1)
        assert ExploreState().next_state(ctx) == BehaviorStateId.STUCK

    def test_wide_gap_and_nervous_means_hesitate(self, make_obs, make_ctx, rng_factory):
        ctx = make_ctx(make_obs(with_gap(3)), rng=rng_factory(default=0.0))
        assert ExploreState().next_state(ctx) == BehaviorStateId.HESITATE

    def test_wide_gap_and_calm_means_jump(self, make_obs, make_ctx):
        ctx = make_ctx(make_obs(with_gap(3)))
        assert ExploreState().next_state(ctx) == BehaviorStateId.JUMP

    def test_tall_wall_means_jump(self, make_obs, make_ctx):
        terrain = flat()
        terrain[R0 - 2:R0 + 1, C0 + 1] = 1
        ctx = make_ctx(make_obs(terrain))
        assert ExploreState().next_state(ctx) == BehaviorStateId.JUMP

    def test_power_up_and_curiosity_means_collect(self, make_obs, make_ctx, rng_factory):
        terrain = flat()
        terrain[R0, C0 + 3] = 7
        ctx = make_ctx(make_obs(terrain), rng=rng_factory(default=0.0))
        assert ExploreState().next_state(ctx) == BehaviorStateId.COLLECT

    def test_flat_ground_stays(self, make_obs, make_ctx):
        assert ExploreState().next_state(make_ctx(make_obs(flat()))) is None


# =============================================================================
# JUMP
# =============================================================================

class TestJump:

    def test_wider_gap_commits_longer(self, make_obs):
        state = JumpState()
        wide = state.base_duration(make_obs(with_gap(6)))
        narrow = state.base_duration(make_obs(with_gap(2)))
        assert wide > narrow

    def test_tall_wall_extends_commitment(self, make_obs):
        terrain = flat()
        terrain[R0 - 3:R0 + 1, C0 + 1] = 4
        assert JumpState().base_duration(make_obs(terrain)) == 12

    def test_duration_always_within_bounds(self, make_obs, make_ctx):
        state = JumpState()
        rng = np.random.default_rng(3)
        for width in range(0, 8):
            ctx = make_ctx(make_obs(with_gap(width)), rng=rng)
            for _ in range(20):
                assert 5 <= state.compute_duration(ctx) <= 20

    def test_holds_jump_for_committed_duration_then_leaves(self, make_obs, make_ctx):
        ctx = make_ctx(make_obs(flat()))
        state = JumpState()
        state.enter(ctx)
        assert state.remaining == 8

        for _ in range(8):
            assert state.next_state(ctx) is None
            actions = state.actions(ctx)
            assert actions[Action.JUMP] and actions[Action.RIGHT] and actions[Action.SPEED]

        assert not state.committed
        assert not state.actions(ctx)[Action.JUMP]
        assert state.next_state(ctx) == BehaviorStateId.EXPLORE

    def test_obstacle_sequence_keeps_state(self, make_obs, make_ctx):
        terrain = flat()
        terrain[R0, C0 + 1:C0 + 4] = 1
        ctx = make_ctx(make_obs(terrain))
        state = JumpState()
        assert state.next_state(ctx) is None

    def test_new_obstacle_starts_new_commitment(self, make_obs, make_ctx):
        terrain = flat()
        terrain[R0, C0 + 1] = 1
        ctx = make_ctx(make_obs(terrain))
        state = JumpState()

        actions = state.actions(ctx)

        assert actions[Action.JUMP]
        assert state.jumps_started == 1
        assert state.remaining == state.last_duration - 1

    def test_exit_discards_commitment(self, make_obs, make_ctx):
        ctx = make_ctx(make_obs(with_gap(4)))
        state = JumpState()
        state.enter(ctx)
        state.exit(ctx)
        assert state.remaining == 0


# =============================================================================
# COLLECT
# =============================================================================

class TestCollect:

    def test_walks_and_jumps_toward_overhead_coin(self, make_obs, make_ctx):
        terrain = flat()
        terrain[R0 - 1, C0 + 2] = 2
        state = CollectState()
        ctx = make_ctx(make_obs(terrain))
        state.enter(ctx)

        actions = state.actions(ctx)

        assert state.target == (R0 - 1, C0 + 2)
        assert actions[Action.RIGHT]
        assert actions[Action.JUMP]
        assert not actions[Action.SPEED]

    def test_picks_nearest_by_manhattan_distance(self, make_obs, make_ctx):
        terrain = flat()
        terrain[R0 - 3, C0 + 1] = 2      # distance 4
        terrain[R0, C0 + 2] = 2          # distance 2
        state = CollectState()
        state.actions(make_ctx(make_obs(terrain)))
        assert state.target == (R0, C0 + 2)

    def test_target_is_sticky(self, make_obs, make_ctx):
        terrain = flat()
        terrain[R0, C0 + 3] = 2
        state = CollectState()
        state.actions(make_ctx(make_obs(terrain)))

        terrain[R0, C0 + 1] = 2          # closer coin appears
        state.actions(make_ctx(make_obs(terrain)))
        assert state.target == (R0, C0 + 3)

    def test_collected_target_is_replaced(self, make_obs, make_ctx):
        terrain = flat()
        terrain[R0, C0 + 3] = 2
        terrain[R0 - 2, C0 + 5] = 7
        state = CollectState()
        state.actions(make_ctx(make_obs(terrain)))

        terrain[R0, C0 + 3] = 0
        state.actions(make_ctx(make_obs(terrain)))
        assert state.target == (R0 - 2, C0 + 5)

    def test_target_behind_walks_back(self, make_obs, make_ctx):
        terrain = flat()
        terrain[R0, C0 + 1] = 2
        state = CollectState()
        state.target = (R0, C0 - 1)
        terrain[R0, C0 - 1] = 2
        actions = state.actions(make_ctx(make_obs(terrain)))
        assert actions[Action.LEFT]
        assert not actions[Action.RIGHT]

    def test_distraction_empties_the_set(self, make_obs, make_ctx, rng_factory):
        terrain = flat()
        terrain[R0, C0 + 2] = 2
        actions = CollectState().actions(make_ctx(make_obs(terrain), rng=rng_factory(default=0.0)))
        assert actions.is_empty()

    def test_leaves_when_nothing_left(self, make_obs, make_ctx):
        assert CollectState().next_state(make_ctx(make_obs(flat()))) == BehaviorStateId.EXPLORE

    def test_leaves_after_budget(self, make_obs, make_ctx):
        terrain = flat()
        terrain[R0, C0 + 2] = 2
        state = CollectState()
        state.elapsed = 121
        assert state.next_state(make_ctx(make_obs(terrain))) == BehaviorStateId.EXPLORE

    def test_threat_pre_empts_complex_jump(self, make_obs, make_ctx, enemies):
        enemies[R0, C0 + 1] = 1
        ctx = make_ctx(make_obs(with_gap(4), enemies))
        assert CollectState().next_state(ctx) == BehaviorStateId.FLEE

    def test_complex_jump_pre_empts_collecting(self, make_obs, make_ctx):
        terrain = with_gap(4)
        terrain[R0, C0 + 1] = 2
        assert CollectState().next_state(make_ctx(make_obs(terrain))) == BehaviorStateId.JUMP


# =============================================================================
# FLEE
# =============================================================================

class TestFlee:

    def test_panic_actions_bolt(self, rng_factory):
        actions = panic_actions(rng_factory(randoms=[0.1, 0.1]))
        assert actions == ActionSet((Action.RIGHT, Action.SPEED, Action.JUMP))

    def test_panic_actions_freeze(self, rng_factory):
        assert panic_actions(rng_factory(randoms=[0.9, 0.9])).is_empty()

    def test_calm_phase_jumps_enemy_ahead(self, make_obs, make_ctx, enemies):
        enemies[R0, C0 + 2] = 1
        state = FleeState()
        state.elapsed = 30
        actions = state.actions(make_ctx(make_obs(flat(), enemies)))
        assert actions == ActionSet((Action.RIGHT, Action.SPEED, Action.JUMP))

    def test_calm_phase_runs_when_clear(self, make_obs, make_ctx):
        state = FleeState()
        state.elapsed = 30
        assert state.actions(make_ctx(make_obs(flat()))) == ActionSet.forward_run()

    def test_stands_down_after_dwell(self, make_obs, make_ctx):
        state = FleeState()
        ctx = make_ctx(make_obs(flat()))
        state.enter(ctx)
        for _ in range(29):
            state.actions(ctx)
        assert state.next_state(ctx) is None
        state.actions(ctx)
        assert state.next_state(ctx) == BehaviorStateId.EXPLORE

    def test_threat_resets_escape(self, make_obs, make_ctx, enemies):
        state = FleeState()
        state.escaped_ticks = 20
        enemies[R0, C0 - 1] = 1
        state.actions(make_ctx(make_obs(flat(), enemies)))
        assert state.escaped_ticks == 0

    def test_blocking_wall_forces_jump(self, make_obs, make_ctx, enemies):
        terrain = flat()
        terrain[R0 - 3:R0 + 1, C0 + 1] = 1
        enemies[R0, C0 - 1] = 1
        assert FleeState().next_state(make_ctx(make_obs(terrain, enemies))) == BehaviorStateId.JUMP

    @pytest.mark.parametrize("stuck_counter, expected", [
        (0, BehaviorStateId.JUMP),
        (3, BehaviorStateId.STUCK),
    ])
    def test_ceiling(self, make_obs, make_ctx, enemies, stuck_counter, expected):
        enemies[R0, C0 - 1] = 1
        state = FleeState()
        state.elapsed = 201
        ctx = make_ctx(make_obs(flat(), enemies), stuck_counter=stuck_counter)
        assert state.next_state(ctx) == expected


# =============================================================================
# STUCK
# =============================================================================

class TestStuck:

    def test_displacement_resets_timer_and_runs(self, make_obs, make_ctx):
        state = StuckState()
        state.enter(make_ctx(make_obs(flat(), x=10.0)))
        for _ in range(5):
            state.actions(make_ctx(make_obs(flat(), x=10.0)))
        assert state.elapsed == 5

        actions = state.actions(make_ctx(make_obs(flat(), x=10.5)))

        assert actions == ActionSet.forward_run()
        assert state.elapsed == 0

    def test_strategy_rotates_on_cadence(self, make_obs, make_ctx):
        state = StuckState()
        ctx = make_ctx(make_obs(flat(), x=3.0))
        state.enter(ctx)

        for _ in range(29):
            state.actions(ctx)
        assert state.strategy == 0

        actions = state.actions(ctx)
        assert state.attempts == 1
        assert state.strategy == 1
        assert actions == ActionSet((Action.RIGHT, Action.JUMP, Action.SPEED))

    def test_first_strategy_is_plain_jump(self, make_obs, make_ctx):
        state = StuckState()
        ctx = make_ctx(make_obs(flat()))
        state.enter(ctx)
        assert state.actions(ctx) == ActionSet((Action.RIGHT, Action.JUMP))

    def test_giving_up_empties_the_set(self, make_obs, make_ctx, rng_factory):
        state = StuckState()
        ctx = make_ctx(make_obs(flat()), rng=rng_factory(default=0.0))
        state.enter(ctx)
        state.elapsed = 200
        assert state.actions(ctx).is_empty()

    def test_escape_leads_to_explore(self, make_obs, make_ctx):
        state = StuckState()
        state.enter(make_ctx(make_obs(flat(), x=0.0)))
        assert state.next_state(make_ctx(make_obs(flat(), x=2.0))) == BehaviorStateId.EXPLORE

    def test_escape_near_coins_leads_to_collect(self, make_obs, make_ctx):
        terrain = flat()
        terrain[R0, C0 + 1] = 2
        terrain[R0 - 1, C0 + 2] = 2
        state = StuckState()
        state.enter(make_ctx(make_obs(terrain, x=0.0)))
        assert state.next_state(make_ctx(make_obs(terrain, x=2.0))) == BehaviorStateId.COLLECT

    def test_threat_means_flee(self, make_obs, make_ctx, enemies):
        enemies[R0 - 1, C0] = 1
        state = StuckState()
        ctx = make_ctx(make_obs(flat(), enemies))
        state.enter(ctx)
        assert state.next_state(ctx) == BehaviorStateId.FLEE

    def test_many_attempts_means_hesitate(self, make_obs, make_ctx):
        state = StuckState()
        ctx = make_ctx(make_obs(flat()))
        state.enter(ctx)
        state.elapsed = 241
        state.attempts = 9
        assert state.next_state(ctx) == BehaviorStateId.HESITATE

    def test_absolute_ceiling_means_explore(self, make_obs, make_ctx):
        state = StuckState()
        ctx = make_ctx(make_obs(flat()))
        state.enter(ctx)
        state.ticks_in_state = 401
        assert state.next_state(ctx) == BehaviorStateId.EXPLORE

    def test_bumping_against_a_wall_still_hits_the_ceiling(self, make_obs, make_ctx):
        state = StuckState()
        state.enter(make_ctx(make_obs(flat(), x=100.0)))

        left_on = None
        for tick in range(1, 1001):
            ctx = make_ctx(make_obs(flat(), x=100.2 if tick % 2 else 100.0))
            state.actions(ctx)
            if state.next_state(ctx) is not None:
                left_on = tick
                break

        assert state.elapsed == 0
        assert left_on == 401
        assert state.next_state(ctx) == BehaviorStateId.EXPLORE


# =============================================================================
# HESITATE
# =============================================================================

class TestHesitate:

    def test_observe_phase_is_still(self, make_obs, make_ctx):
        state = HesitateState()
        ctx = make_ctx(make_obs(flat()))
        state.enter(ctx)
        for _ in range(30):
            assert state.actions(ctx).is_empty()

    def test_test_phase_taps_without_running(self, make_obs, make_ctx):
        state = HesitateState()
        ctx = make_ctx(make_obs(flat()))
        state.elapsed = 40
        actions = state.actions(ctx)
        assert actions[Action.RIGHT]
        assert not actions[Action.SPEED]

    def test_safe_decision_commits_and_explores(self, make_obs, make_ctx):
        state = HesitateState()
        ctx = make_ctx(make_obs(flat()))
        state.elapsed = 60

        actions = state.actions(ctx)

        assert actions[Action.RIGHT]
        assert not actions[Action.SPEED]
        assert state.found_safe
        assert state.next_state(ctx) == BehaviorStateId.EXPLORE

    def test_confident_agent_runs(self, make_obs, make_ctx):
        ctx = make_ctx(make_obs(flat()))
        ctx.emotion.confidence = 0.9
        state = HesitateState()
        state.elapsed = 60
        assert state.actions(ctx)[Action.SPEED]

    def test_risky_and_unsure_keeps_shuffling(self, make_obs, make_ctx):
        state = HesitateState()
        ctx = make_ctx(make_obs(with_gap(2)))
        state.elapsed = 60
        state.actions(ctx)
        assert state.assessed
        assert not state.found_safe
        assert state.next_state(ctx) is None

    def test_brave_over_gap_means_jump(self, make_obs, make_ctx):
        ctx = make_ctx(make_obs(with_gap(2, start=C0 + 2)))
        ctx.emotion.confidence = 0.75
        state = HesitateState()
        state.elapsed = 60
        state.actions(ctx)
        assert state.found_safe
        assert state.next_state(ctx) == BehaviorStateId.JUMP

    def test_safe_near_power_up_means_collect(self, make_obs, make_ctx):
        terrain = flat()
        terrain[R0 - 2, C0 + 4] = 9
        ctx = make_ctx(make_obs(terrain))
        state = HesitateState()
        state.elapsed = 60
        state.actions(ctx)
        assert state.next_state(ctx) == BehaviorStateId.COLLECT

    def test_threat_means_flee(self, make_obs, make_ctx, enemies):
        enemies[R0 + 1, C0 + 2] = 1
        ctx = make_ctx(make_obs(flat(), enemies))
        assert HesitateState().next_state(ctx) == BehaviorStateId.FLEE

    @pytest.mark.parametrize("stuck_counter, expected", [
        (0, BehaviorStateId.JUMP),
        (1, BehaviorStateId.STUCK),
    ])
    def test_dwell_ceiling(self, make_obs, make_ctx, stuck_counter, expected):
        state = HesitateState()
        state.elapsed = 121
        ctx = make_ctx(make_obs(flat()), stuck_counter=stuck_counter)
        assert state.next_state(ctx) == expected

    def test_enter_resets_assessment(self, make_obs, make_ctx):
        state = HesitateState()
        state.assessed = state.found_safe = True
        state.elapsed = 90
        state.enter(make_ctx(make_obs(flat())))
        assert (state.elapsed, state.assessed, state.found_safe) == (0, False, False)
