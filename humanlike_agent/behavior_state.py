"""
Behavioral States - the closed set of modes the agent can be in.

Exactly one state is active at a time. Every state shares one contract:
1. actions(ctx)     analyze the grid, synthesize this tick's buttons
2. next_state(ctx)  decide whether to hand control to another state
3. enter(ctx) / exit(ctx)  lifecycle hooks called by the controller

Transition logic is local: each state owns the decision to leave itself.
There is no external transition table.

Each state keeps its own counters (time in state, target cell, anchor x).
They survive between activations but are reset only in that state's
enter() hook.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional

import numpy as np

from .actions import ActionSet
from .config import AgentConfig
from .emotion import EmotionModel
from .observation import Observation


class BehaviorStateId(Enum):
    """Discrete behavioral modes - people have modes, not continuous policies."""
    EXPLORE = auto()    # Forward-biased default, scanning for threats and coins
    JUMP = auto()       # Committed obstacle / gap navigation
    COLLECT = auto()    # Focused pursuit of a coin or power-up
    FLEE = auto()       # Escape from enemy threats
    STUCK = auto()      # Repeated attempts to get past an obstacle
    HESITATE = auto()   # Careful assessment before a risky move

    @property
    def label(self) -> str:
        return self.name.lower()


@dataclass(frozen=True)
class StateContext:
    """
    Everything a state may look at during one tick.

    emotion is shared with the controller and must only be queried here.
    """
    observation: Observation
    emotion: EmotionModel
    rng: np.random.Generator
    config: AgentConfig
    tick: int = 0
    stuck_counter: int = 0
    frames_since_progress: int = 0


class BehaviorState:
    """Capability contract shared by the six states."""

    state_id: BehaviorStateId = None

    def __init__(self, config: Optional[AgentConfig] = None):
        self.config = config or AgentConfig()
        self.elapsed = 0

    def enter(self, ctx: StateContext):
        """Reset private counters. Called once when the state becomes active."""
        self.elapsed = 0

    def exit(self, ctx: StateContext):
        """Discard in-flight commitments. Called once when the state is left."""

    def next_state(self, ctx: StateContext) -> Optional[BehaviorStateId]:
        """Return the state to switch to, or None to remain."""
        raise NotImplementedError

    def actions(self, ctx: StateContext) -> ActionSet:
        """Synthesize this tick's action set."""
        raise NotImplementedError

    def get_state(self) -> dict:
        """Private counters, for inspection."""
        return {'elapsed': self.elapsed}

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.get_state()})"
