"""
Collect State - focused pursuit of a coin or power-up.

Picks the nearest valuable cell (Manhattan distance) inside a bounded
window ahead and sticks with it across ticks: walk toward its column,
jump when it is above. Humans fumble this: jumps are sometimes mistimed
(more often when rattled) and attention occasionally lapses entirely.
"""

from typing import Optional, Tuple

from .actions import Action, ActionSet, BACKWARD, FORWARD
from .behavior_state import BehaviorState, BehaviorStateId, StateContext
from .observation import Observation

# Target search window relative to the agent
SEARCH_ROWS = 4          # rows above and below
SEARCH_COLS_AHEAD = 7


def find_nearest_valuable(obs: Observation, power_ups_only: bool = False) -> Optional[Tuple[int, int]]:
    """Nearest valuable cell in the search window, ties broken by scan order."""
    r0, c0 = obs.center
    best = None
    best_distance = None
    for r, c in obs.valuable_cells(r0 - SEARCH_ROWS, r0 + SEARCH_ROWS + 1,
                                   c0, c0 + SEARCH_COLS_AHEAD + 1):
        if power_ups_only and not obs.is_power_up(r, c):
            continue
        distance = abs(r - r0) + abs(c - c0)
        if best_distance is None or distance < best_distance:
            best, best_distance = (r, c), distance
    return best


def collectibles_remaining(obs: Observation) -> bool:
    """Anything left in the search window Explore hands over from."""
    return find_nearest_valuable(obs) is not None


class CollectState(BehaviorState):
    """Walk to and grab the nearest valuable."""

    state_id = BehaviorStateId.COLLECT

    def __init__(self, config=None):
        super().__init__(config)
        self.target: Optional[Tuple[int, int]] = None

    def enter(self, ctx: StateContext):
        super().enter(ctx)
        self.target = None

    def exit(self, ctx: StateContext):
        self.target = None

    def _refresh_target(self, obs: Observation):
        # Keep the target while its cell still holds something worth having
        if self.target is not None and not obs.is_valuable(*self.target):
            self.target = None
        if self.target is None:
            self.target = find_nearest_valuable(obs)

    def actions(self, ctx: StateContext) -> ActionSet:
        obs = ctx.observation
        rng = ctx.rng
        r0, c0 = obs.center
        actions = ActionSet()

        self._refresh_target(obs)

        if self.target is not None:
            target_row, target_col = self.target
            if target_col > c0:
                actions.press(FORWARD)
                # Excited overshoot
                if ctx.emotion.curiosity > 0.8 and rng.random() < 0.1:
                    actions.press(Action.SPEED)
            elif target_col < c0:
                actions.press(BACKWARD)

            if target_row < r0:
                actions.press(Action.JUMP)
                # Mistimed jump: rattled players let go too late more often
                severity = ctx.emotion.mistake_severity(rng)
                if rng.random() < self.config.collect_mistime_scale * severity:
                    if rng.random() < 0.5:
                        actions.release(Action.JUMP)
        else:
            # Nothing to aim at: slow and careful
            actions.press(FORWARD)

        # Distracted for a moment
        if rng.random() < self.config.collect_distract_chance:
            actions.clear()

        self.elapsed += 1
        return actions

    def next_state(self, ctx: StateContext) -> Optional[BehaviorStateId]:
        obs = ctx.observation

        if obs.immediate_threat():
            return BehaviorStateId.FLEE

        if obs.needs_complex_jump():
            return BehaviorStateId.JUMP

        if self.elapsed > self.config.collect_budget or not collectibles_remaining(obs):
            return BehaviorStateId.EXPLORE

        return None

    def get_state(self) -> dict:
        return {'elapsed': self.elapsed, 'target': self.target}
