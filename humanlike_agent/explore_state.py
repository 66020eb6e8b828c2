"""
Explore State - the default, forward-biased way of playing.

Each tick:
1. Walk forward, jump anything solid at body or head height.
2. Ease off the run button when the forward cone holds several enemies.
3. Look for coin trails ahead; a worthwhile one overrides the default
   timing: jump as the trail starts, slow down for valuable ones.
   Without a trail, a curious agent makes a small hop toward any
   collectible just above the path.

Leaving is decided in fixed priority:
    adjacent enemy → Flee
    stuck counter → Stuck
    risky terrain + nervous → Hesitate
    gap / tall wall → Jump
    power-up in reach + curious → Collect
"""

from typing import Optional

from .actions import Action, ActionSet, FORWARD
from .behavior_state import BehaviorState, BehaviorStateId, StateContext
from .coin_trail import CoinTrail, TrailPattern, find_coin_trail
from .collect_state import find_nearest_valuable
from .observation import Observation


class ExploreState(BehaviorState):
    """Cautious forward movement with environmental scanning."""

    state_id = BehaviorStateId.EXPLORE

    def __init__(self, config=None):
        super().__init__(config)
        self.trails_followed = 0

    def actions(self, ctx: StateContext) -> ActionSet:
        obs = ctx.observation
        actions = ActionSet((FORWARD,))

        if obs.obstacle_ahead():
            actions.press(Action.JUMP)

        # Several enemies ahead: don't run into them at full speed
        crowded = obs.enemies_ahead(self.config.threat_cone_depth) >= 2
        actions.press(Action.SPEED, not crowded)

        trail = find_coin_trail(obs)
        if trail is not None:
            self._follow_trail(trail, obs, actions)
            self.trails_followed += 1
        elif (self._collectible_nearby(obs)
              and ctx.emotion.should_explore_for_coins(ctx.rng)):
            self._adjust_for_collectible(obs, actions)

        self.elapsed += 1
        return actions

    def next_state(self, ctx: StateContext) -> Optional[BehaviorStateId]:
        obs = ctx.observation

        if obs.immediate_threat():
            return BehaviorStateId.FLEE

        if ctx.stuck_counter > self.config.explore_stuck_threshold:
            return BehaviorStateId.STUCK

        if obs.is_high_risk() and ctx.emotion.should_hesitate(ctx.rng):
            return BehaviorStateId.HESITATE

        if obs.needs_complex_jump():
            return BehaviorStateId.JUMP

        if (find_nearest_valuable(obs, power_ups_only=True) is not None
                and ctx.emotion.should_explore_for_coins(ctx.rng)):
            return BehaviorStateId.COLLECT

        return None

    # =========================================================================
    # TRAIL TIMING
    # =========================================================================

    def _follow_trail(self, trail: CoinTrail, obs: Observation, actions: ActionSet):
        """Pattern-specific timing once a trail is worth chasing."""
        r0, c0 = obs.center
        lead = trail.min_col - c0          # Columns until the trail starts
        elevated = trail.center_row < r0
        passing_under = trail.min_col <= c0 + 1 and trail.max_col >= c0

        if trail.pattern == TrailPattern.HORIZONTAL:
            # Jump as the row starts overhead, keep jumping while under it
            if elevated and passing_under:
                actions.press(Action.JUMP)
            if trail.high_value:
                actions.release(Action.SPEED)

        elif trail.pattern == TrailPattern.VERTICAL:
            # Line up under the column without running past it, then climb it
            actions.release(Action.SPEED)
            if lead <= 0 and trail.min_row < r0:
                actions.press(Action.JUMP)

        elif trail.pattern == TrailPattern.ARC:
            # Arcs are drawn for a running jump: take off one or two columns early
            if 1 <= lead <= 2 and elevated:
                actions.press(Action.JUMP)
            if trail.high_value:
                actions.release(Action.SPEED)

        elif trail.pattern == TrailPattern.CLUSTER:
            actions.release(Action.SPEED)
            if elevated and lead <= 1:
                actions.press(Action.JUMP)

    # =========================================================================
    # SIMPLE CURIOSITY
    # =========================================================================

    def _collectible_nearby(self, obs: Observation) -> bool:
        r0, c0 = obs.center
        return bool(obs.valuable_cells(r0 - 2, r0 + 3, c0, c0 + 4))

    def _adjust_for_collectible(self, obs: Observation, actions: ActionSet):
        """Hop toward a collectible just above the path."""
        r0, c0 = obs.center
        if obs.valuable_cells(r0 - 3, r0, c0 + 1, c0 + 3):
            actions.press(Action.JUMP)

    def get_state(self) -> dict:
        return {'elapsed': self.elapsed, 'trails_followed': self.trails_followed}
