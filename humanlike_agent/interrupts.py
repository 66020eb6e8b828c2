"""
Interrupt Layers - reflexes that pre-empt the state machine.

Precedence, highest first:
    PanicDetector    enemy suddenly appears / closes in   → erratic escape
    HesitationGate   risky move ahead + nervous           → freeze
    (state machine)
    MistakeInjector  post-processes whatever the state produced

The detector and gate only decide whether to fire; the controller owns
the timers and the action sets emitted while they run.
"""

from typing import Optional

import numpy as np

from .actions import Action, ActionSet, BACKWARD, FORWARD
from .config import AgentConfig
from .emotion import EmotionModel
from .logging_config import get_logger
from .observation import Observation

logger = get_logger(__name__)


class PanicDetector:
    """
    Fires on a newly proximate enemy, or on a new enemy appearing while
    one is already close, gated by the emotion model's panic draw.

    Enemy counts are remembered every tick (call observe() on ticks where
    the detector is not checked) so that "new" means new since last tick.
    """

    def __init__(self, config: Optional[AgentConfig] = None):
        self.config = config or AgentConfig()
        self.prev_proximate = 0
        self.prev_total = 0
        self.triggers = 0

    def _proximate(self, obs: Observation) -> int:
        r0, c0 = obs.center
        radius = self.config.panic_radius
        return obs.count_enemies(r0 - radius, r0 + radius + 1, c0 - radius, c0 + radius + 1)

    def observe(self, obs: Observation) -> bool:
        """Update enemy memory. Returns True if this tick shows a startling change."""
        proximate = self._proximate(obs)
        total = int(np.count_nonzero(obs.enemies))

        newly_proximate = proximate > self.prev_proximate
        newly_appeared = total > self.prev_total and proximate > 0

        self.prev_proximate = proximate
        self.prev_total = total
        return newly_proximate or newly_appeared

    def check(self, obs: Observation, emotion: EmotionModel, rng: np.random.Generator) -> bool:
        if not self.observe(obs):
            return False
        if not emotion.should_panic(rng):
            return False
        self.triggers += 1
        return True

    def reset(self):
        self.prev_proximate = 0
        self.prev_total = 0


class HesitationGate:
    """Freeze before a risky move when the emotion model says so."""

    def __init__(self, config: Optional[AgentConfig] = None):
        self.config = config or AgentConfig()
        self.triggers = 0

    def check(self, obs: Observation, emotion: EmotionModel, rng: np.random.Generator) -> bool:
        # Risk first: no draw is spent on safe ground
        if not obs.is_risky_move():
            return False
        if not emotion.should_hesitate(rng):
            return False
        self.triggers += 1
        return True


class MistakeInjector:
    """
    Corrupts a synthesized action set with the emotion model's mistake
    probability. Severity picks how bad the slip is:

        < 0.34   drop the jump (or the run if there is no jump)
        < 0.67   ...and also drop forward or add a spurious jump
        else     turn around and stop running
    """

    MINOR = 0.34
    MODERATE = 0.67

    def __init__(self, config: Optional[AgentConfig] = None):
        self.config = config or AgentConfig()
        self.mistakes = 0

    def apply(self, actions: ActionSet, emotion: EmotionModel,
              rng: np.random.Generator) -> ActionSet:
        if not emotion.should_make_mistake(rng):
            return actions

        severity = emotion.mistake_severity(rng)
        corrupted = actions.copy()

        if severity < self.MODERATE:
            if corrupted[Action.JUMP]:
                corrupted.release(Action.JUMP)
            else:
                corrupted.release(Action.SPEED)
            if severity >= self.MINOR:
                if rng.random() < 0.5:
                    corrupted.release(FORWARD)
                else:
                    corrupted.press(Action.JUMP)
        else:
            if corrupted[FORWARD]:
                corrupted.release(FORWARD)
                corrupted.press(BACKWARD)
            corrupted.release(Action.SPEED)

        self.mistakes += 1
        logger.debug(f"Mistake (severity {severity:.2f}): {actions} -> {corrupted}")
        return corrupted
