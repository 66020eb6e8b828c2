"""
Flee State - getting away from enemies.

Two phases:
1. Panic (first ticks): high-variance choices, run or freeze, jump or not.
2. Calmer: jump over an enemy directly ahead, otherwise run, with the odd
   fumble (letting go of forward or run).

The state tracks how long the agent has been clear of any adjacent enemy
and only stands down after a minimum dwell, so a single quiet frame is
not mistaken for safety.
"""

from typing import Optional

import numpy as np

from .actions import Action, ActionSet, FORWARD
from .behavior_state import BehaviorState, BehaviorStateId, StateContext
from .config import AgentConfig


def panic_actions(rng: np.random.Generator, config: Optional[AgentConfig] = None) -> ActionSet:
    """Erratic escape: usually bolt forward, sometimes freeze, often jump."""
    actions = ActionSet()
    if rng.random() < 0.7:
        actions.press(FORWARD)
        actions.press(Action.SPEED)
    if rng.random() < 0.4:
        actions.press(Action.JUMP)
    return actions


class FleeState(BehaviorState):
    """Panic first, then a calmer escape run."""

    state_id = BehaviorStateId.FLEE

    def __init__(self, config=None):
        super().__init__(config)
        self.escaped_ticks = 0      # Consecutive ticks without an adjacent enemy

    def enter(self, ctx: StateContext):
        super().enter(ctx)
        self.escaped_ticks = 0

    @property
    def panicking(self) -> bool:
        return self.elapsed < self.config.flee_panic_ticks

    def actions(self, ctx: StateContext) -> ActionSet:
        obs = ctx.observation
        rng = ctx.rng

        if self.panicking:
            actions = panic_actions(rng, self.config)
        else:
            actions = ActionSet.forward_run()
            if obs.enemies_ahead(depth=2) > 0:
                actions.press(Action.JUMP)
            elif rng.random() < 0.2:
                actions.press(Action.JUMP)

            if ctx.emotion.should_make_mistake(rng) and rng.random() < 0.3:
                actions.release(FORWARD if rng.random() < 0.5 else Action.SPEED)

        if obs.immediate_threat():
            self.escaped_ticks = 0
        else:
            self.escaped_ticks += 1

        self.elapsed += 1
        return actions

    def next_state(self, ctx: StateContext) -> Optional[BehaviorStateId]:
        obs = ctx.observation
        c = self.config

        if obs.wall_height() > c.flee_blocking_wall:
            return BehaviorStateId.JUMP

        if self.escaped_ticks >= c.flee_min_dwell and not obs.immediate_threat():
            return BehaviorStateId.EXPLORE

        if self.elapsed > c.flee_ceiling:
            return BehaviorStateId.STUCK if ctx.stuck_counter > 0 else BehaviorStateId.JUMP

        return None

    def get_state(self) -> dict:
        return {'elapsed': self.elapsed, 'escaped_ticks': self.escaped_ticks}
