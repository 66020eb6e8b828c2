"""
Jump State - committed obstacle and gap navigation.

A person holds the jump button through a maneuver instead of re-aiming
every frame. On entry we size the commitment from what is ahead:

    duration = max(base, gap * 2 (capped), wall * 3 (capped))
             + jitter (+ extra jitter on a mistake)
             → clamped to [min, max]

While committed: jump + forward + run. In the air, horizontal input is
occasionally fumbled (overcorrection). A new obstacle met after the
commitment runs out starts a fresh one, so staircases and pipe rows are
handled without leaving the state.
"""

from typing import Optional

import numpy as np

from .actions import Action, ActionSet, FORWARD
from .behavior_state import BehaviorState, BehaviorStateId, StateContext
from .observation import Observation


class JumpState(BehaviorState):
    """Hold-the-button jump with human timing noise."""

    state_id = BehaviorStateId.JUMP

    def __init__(self, config=None):
        super().__init__(config)
        self.remaining = 0          # Ticks of jump still committed
        self.last_duration = 0
        self.jumps_started = 0

    def base_duration(self, obs: Observation) -> int:
        """Commitment length implied by the terrain, before any jitter."""
        c = self.config
        gap_term = min(obs.gap_width() * c.jump_gap_factor, c.jump_gap_cap)
        wall_term = min(obs.wall_height() * c.jump_height_factor, c.jump_height_cap)
        return max(c.jump_base_duration, gap_term, wall_term)

    def compute_duration(self, ctx: StateContext) -> int:
        c = self.config
        rng = ctx.rng
        duration = self.base_duration(ctx.observation)
        duration += int(rng.integers(-c.jump_jitter, c.jump_jitter + 1))
        if ctx.emotion.should_make_mistake(rng):
            duration += int(rng.integers(-c.jump_mistake_jitter, c.jump_mistake_jitter + 1))
        return int(np.clip(duration, c.jump_duration_min, c.jump_duration_max))

    def _commit(self, ctx: StateContext):
        self.last_duration = self.compute_duration(ctx)
        self.remaining = self.last_duration
        self.jumps_started += 1

    def enter(self, ctx: StateContext):
        super().enter(ctx)
        self._commit(ctx)

    def exit(self, ctx: StateContext):
        self.remaining = 0

    @property
    def committed(self) -> bool:
        return self.remaining > 0

    def actions(self, ctx: StateContext) -> ActionSet:
        obs = ctx.observation
        rng = ctx.rng
        _, c0 = obs.center
        actions = ActionSet.forward_run()

        if not self.committed and (obs.obstacle_ahead() or not obs.column_has_ground(c0 + 1)):
            self._commit(ctx)

        if self.committed:
            actions.press(Action.JUMP)
            self.remaining -= 1

        # Overcorrection in the air
        if obs.is_airborne() and rng.random() < self.config.jump_overcorrect_chance:
            actions.press(FORWARD, rng.random() < 0.7)

        self.elapsed += 1
        return actions

    def next_state(self, ctx: StateContext) -> Optional[BehaviorStateId]:
        if self.committed:
            return None
        # More than two obstacle columns close ahead: stay for the next jump
        if ctx.observation.obstacle_columns_ahead(self.config.jump_sequence_window) > 2:
            return None
        return BehaviorStateId.EXPLORE

    def get_state(self) -> dict:
        return {
            'elapsed': self.elapsed,
            'remaining': self.remaining,
            'last_duration': self.last_duration,
            'jumps_started': self.jumps_started,
        }
