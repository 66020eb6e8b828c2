"""
Stuck State - trying different things to get past an obstacle.

Any movement resets the stall timer and we simply run forward. Otherwise
four attempt strategies rotate on a fixed cadence:

    0 plain jump
    1 running jump
    2 slow approach, delayed jump
    3 random mash

Frustration builds with the stall: after a while jumps are sometimes
missed, and much later the agent occasionally gives up for a tick.
Bumping back and forth keeps resetting the stall timer, so the hard
ceiling counts every tick since entry instead.
"""

from typing import Optional

from .actions import Action, ActionSet, FORWARD
from .behavior_state import BehaviorState, BehaviorStateId, StateContext

NUM_STRATEGIES = 4


class StuckState(BehaviorState):
    """Rotating escape attempts with growing frustration."""

    state_id = BehaviorStateId.STUCK

    def __init__(self, config=None):
        super().__init__(config)
        self.anchor_x = 0.0         # Position on entry
        self.last_x = 0.0
        self.ticks_in_state = 0     # Since entry, never reset by movement
        self.attempts = 0
        self.strategy = 0

    def enter(self, ctx: StateContext):
        super().enter(ctx)
        self.anchor_x = ctx.observation.x
        self.last_x = ctx.observation.x
        self.ticks_in_state = 0
        self.attempts = 0
        self.strategy = 0

    def actions(self, ctx: StateContext) -> ActionSet:
        obs = ctx.observation
        rng = ctx.rng
        c = self.config
        self.ticks_in_state += 1

        # Moving again: reset and just go
        if abs(obs.x - self.last_x) > c.stuck_epsilon:
            self.last_x = obs.x
            self.elapsed = 0
            return ActionSet.forward_run()
        self.last_x = obs.x

        self.elapsed += 1
        timer = self.elapsed
        if timer % c.stuck_strategy_period == 0:
            self.attempts += 1
            self.strategy = self.attempts % NUM_STRATEGIES

        actions = ActionSet()
        if self.strategy == 0:
            actions.press(FORWARD).press(Action.JUMP)
        elif self.strategy == 1:
            actions.press(FORWARD).press(Action.JUMP).press(Action.SPEED)
        elif self.strategy == 2:
            actions.press(FORWARD, timer % 60 < 30)
            actions.press(Action.JUMP, timer % 40 == 20)
        else:
            actions.press(FORWARD, rng.random() < 0.7)
            actions.press(Action.JUMP, rng.random() < 0.5)
            actions.press(Action.SPEED, rng.random() < 0.3)

        # Frustration
        if timer > c.stuck_miss_after and actions[Action.JUMP] and rng.random() < 0.1:
            actions.release(Action.JUMP)
        if timer > c.stuck_giveup_after and rng.random() < 0.05:
            actions.clear()

        return actions

    def next_state(self, ctx: StateContext) -> Optional[BehaviorStateId]:
        obs = ctx.observation
        c = self.config

        if abs(obs.x - self.anchor_x) > c.stuck_escape_distance:
            r0, c0 = obs.center
            if len(obs.valuable_cells(r0 - 2, r0 + 3, c0, c0 + 5)) >= 2:
                return BehaviorStateId.COLLECT
            return BehaviorStateId.EXPLORE

        if obs.immediate_threat():
            return BehaviorStateId.FLEE

        if self.elapsed > c.stuck_reconsider_ticks and self.attempts > c.stuck_attempt_limit:
            return BehaviorStateId.HESITATE

        if self.ticks_in_state > c.stuck_ceiling:
            return BehaviorStateId.EXPLORE

        return None

    def get_state(self) -> dict:
        return {
            'elapsed': self.elapsed,
            'attempts': self.attempts,
            'strategy': self.strategy,
            'anchor_x': self.anchor_x,
            'ticks_in_state': self.ticks_in_state,
        }
