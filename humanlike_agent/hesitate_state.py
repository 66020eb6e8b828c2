"""
Hesitate State - looking before leaping.

Phases by time in state:
    observe  stand still
    test     small forward taps, no running, the odd test jump
    decide   re-assess risk; commit forward if it looks safe (or we feel
             brave), otherwise keep shuffling with nervous jumps
"""

from typing import Optional

from .actions import Action, ActionSet, FORWARD
from .behavior_state import BehaviorState, BehaviorStateId, StateContext
from .observation import Observation


class HesitateState(BehaviorState):
    """Observe, test, decide."""

    state_id = BehaviorStateId.HESITATE

    def __init__(self, config=None):
        super().__init__(config)
        self.assessed = False
        self.found_safe = False

    def enter(self, ctx: StateContext):
        super().enter(ctx)
        self.assessed = False
        self.found_safe = False

    @staticmethod
    def assess_risk(obs: Observation) -> bool:
        """Enemies close ahead, a crowded stretch of blocks, or a gap."""
        r0, c0 = obs.center
        enemies_close = obs.count_enemies(r0 - 2, r0 + 3, c0 + 1, c0 + 5) > 0
        return enemies_close or obs.obstacle_density() >= 3 or obs.gap_width() > 0

    def actions(self, ctx: StateContext) -> ActionSet:
        obs = ctx.observation
        rng = ctx.rng
        c = self.config
        t = self.elapsed
        actions = ActionSet()

        if t < c.hesitate_observe_ticks:
            pass
        elif t < c.hesitate_test_ticks:
            actions.press(FORWARD, t % 20 < 10)
            actions.press(Action.JUMP, t % 30 == 25)
        else:
            self.assessed = True
            confidence = ctx.emotion.confidence
            if not self.assess_risk(obs) or confidence > c.hesitate_commit_confidence:
                actions.press(FORWARD)
                actions.press(Action.SPEED, confidence > c.hesitate_run_confidence)
                actions.press(Action.JUMP, obs.obstacle_ahead())
                self.found_safe = True
            else:
                actions.press(FORWARD, t % 40 < 20)
                actions.press(Action.JUMP, rng.random() < 0.1)

        # Jitter pause
        if rng.random() < c.hesitate_jitter_chance:
            actions.clear()

        self.elapsed += 1
        return actions

    def _power_up_nearby(self, obs: Observation) -> bool:
        r0, c0 = obs.center
        return any(obs.is_power_up(r, col)
                   for r, col in obs.valuable_cells(r0 - 3, r0 + 4, c0, c0 + 6))

    def next_state(self, ctx: StateContext) -> Optional[BehaviorStateId]:
        obs = ctx.observation

        if obs.immediate_threat():
            return BehaviorStateId.FLEE

        if self.assessed and self.found_safe:
            if obs.needs_complex_jump():
                return BehaviorStateId.JUMP
            if self._power_up_nearby(obs):
                return BehaviorStateId.COLLECT
            return BehaviorStateId.EXPLORE

        if self.elapsed > self.config.hesitate_ceiling:
            return BehaviorStateId.STUCK if ctx.stuck_counter > 0 else BehaviorStateId.JUMP

        return None

    def get_state(self) -> dict:
        return {'elapsed': self.elapsed, 'assessed': self.assessed, 'found_safe': self.found_safe}
