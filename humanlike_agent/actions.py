"""
Action alphabet and action sets.

One ActionSet is produced per tick: a fixed-length vector of boolean
flags, one per Action. A flag that is not set means "not pressed".
"""

from enum import IntEnum
from typing import Iterable, List

import numpy as np


class Action(IntEnum):
    """Controller buttons the agent may press (closed alphabet)."""
    LEFT = 0
    RIGHT = 1
    DOWN = 2      # Crouch
    SPEED = 3     # Run
    JUMP = 4


NUM_ACTIONS = len(Action)

# Forward is always rightward in a side-scroller
FORWARD = Action.RIGHT
BACKWARD = Action.LEFT


class ActionSet:
    """Fixed-length set of pressed buttons."""

    __slots__ = ('flags',)

    def __init__(self, pressed: Iterable[Action] = ()):
        self.flags = np.zeros(NUM_ACTIONS, dtype=bool)
        for action in pressed:
            self.flags[action] = True

    @classmethod
    def empty(cls) -> 'ActionSet':
        return cls()

    @classmethod
    def forward_run(cls) -> 'ActionSet':
        """Plain forward movement at run speed."""
        return cls((FORWARD, Action.SPEED))

    def press(self, action: Action, pressed: bool = True) -> 'ActionSet':
        self.flags[action] = bool(pressed)
        return self

    def release(self, action: Action) -> 'ActionSet':
        self.flags[action] = False
        return self

    def clear(self) -> 'ActionSet':
        self.flags[:] = False
        return self

    def is_pressed(self, action: Action) -> bool:
        return bool(self.flags[action])

    def is_empty(self) -> bool:
        return not self.flags.any()

    def pressed(self) -> List[Action]:
        return [action for action in Action if self.flags[action]]

    def copy(self) -> 'ActionSet':
        clone = ActionSet()
        clone.flags[:] = self.flags
        return clone

    def to_list(self) -> List[bool]:
        """Plain booleans, in Action order, for the environment."""
        return [bool(flag) for flag in self.flags]

    def __getitem__(self, action: Action) -> bool:
        return bool(self.flags[action])

    def __setitem__(self, action: Action, pressed: bool):
        self.flags[action] = bool(pressed)

    def __len__(self) -> int:
        return NUM_ACTIONS

    def __iter__(self):
        return iter(self.to_list())

    def __eq__(self, other) -> bool:
        if not isinstance(other, ActionSet):
            return NotImplemented
        return bool(np.array_equal(self.flags, other.flags))

    def __repr__(self) -> str:
        names = ", ".join(action.name for action in self.pressed())
        return f"ActionSet({names})"
