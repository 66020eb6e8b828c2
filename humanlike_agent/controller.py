"""
Behavior Controller - the per-tick pipeline.

Owns the active state, the emotion model, progress tracking, the three
interrupt layers and the single random stream. Everything that mutates
shared data happens here; states only read.

Architecture (one call per simulation step):
    snapshot(env) → Observation
        ↓
    emotion.update_emotions()  →  progress.update()
        ↓
    panic timer running?        → panic actions          (no state runs)
    panic detector fires?       → start timer, panic actions
    hesitation timer running?   → empty set               (no state runs)
    hesitation gate fires?      → start timer, empty set
        ↓
    state.next_state() → exit old / enter new
        ↓
    state.actions()  →  MistakeInjector  →  ActionSet
"""

from collections import deque
from dataclasses import dataclass
from typing import Deque, Dict, List, Optional, Tuple

import numpy as np

from .actions import ActionSet
from .behavior_state import BehaviorState, BehaviorStateId, StateContext
from .collect_state import CollectState
from .config import AgentConfig
from .emotion import EmotionModel
from .environment import EnvironmentAccessor, snapshot
from .explore_state import ExploreState
from .flee_state import FleeState, panic_actions
from .hesitate_state import HesitateState
from .interrupts import HesitationGate, MistakeInjector, PanicDetector
from .jump_state import JumpState
from .logging_config import get_logger, log_interrupt, log_transition
from .observation import Observation
from .stuck_state import StuckState

logger = get_logger(__name__)

STATE_CLASSES = {
    BehaviorStateId.EXPLORE: ExploreState,
    BehaviorStateId.JUMP: JumpState,
    BehaviorStateId.COLLECT: CollectState,
    BehaviorStateId.FLEE: FleeState,
    BehaviorStateId.STUCK: StuckState,
    BehaviorStateId.HESITATE: HesitateState,
}

# Entering these means the last maneuver did not work out
FAILURE_STATES = (BehaviorStateId.FLEE, BehaviorStateId.STUCK)

SOURCE_PANIC = "panic"
SOURCE_HESITATION = "hesitation"
SOURCE_STATE = "state"


def build_states(config: Optional[AgentConfig] = None) -> Dict[BehaviorStateId, BehaviorState]:
    """One instance of each state, keyed by id."""
    return {state_id: cls(config) for state_id, cls in STATE_CLASSES.items()}


class ProgressTracker:
    """
    Counts ticks without meaningful horizontal progress.

    frames_since_progress grows while |x - anchor| stays under
    min_progress; once it exceeds stuck_threshold the stuck counter
    runs. Any qualifying displacement resets both and moves the anchor.
    """

    def __init__(self, config: Optional[AgentConfig] = None):
        self.config = config or AgentConfig()
        self.anchor_x: Optional[float] = None
        self.frames_since_progress = 0
        self.stuck_counter = 0

    def update(self, x: float):
        if self.anchor_x is None:
            self.anchor_x = x
            return

        if abs(x - self.anchor_x) >= self.config.min_progress:
            self.anchor_x = x
            self.frames_since_progress = 0
        else:
            self.frames_since_progress += 1

        if self.frames_since_progress > self.config.stuck_threshold:
            self.stuck_counter += 1
        else:
            self.stuck_counter = 0

    def reset(self, x: Optional[float] = None):
        self.anchor_x = x
        self.frames_since_progress = 0
        self.stuck_counter = 0


@dataclass
class TickRecord:
    """One tick of the diagnostic trace."""
    tick: int
    state: str
    source: str                      # panic / hesitation / state
    confidence: float
    caution: float
    curiosity: float
    experience: float
    panic_timer: int
    hesitation_timer: int
    actions: Tuple[bool, ...]


class BehaviorController:
    """
    Human-like platformer agent: six behavior states under an emotion
    model, pre-empted by panic and hesitation, corrupted by mistakes.

    Usage:
        controller = BehaviorController(seed=42)
        while playing:
            buttons = controller.get_actions(env)
    """

    def __init__(self, config: Optional[AgentConfig] = None,
                 rng: Optional[np.random.Generator] = None,
                 seed: Optional[int] = None,
                 emotion: Optional[EmotionModel] = None):
        self.config = config or AgentConfig()
        self.rng = rng if rng is not None else np.random.default_rng(seed)
        self.emotion = emotion or EmotionModel(self.config)

        # State machine
        self.states = build_states(self.config)
        self.current_state_id = BehaviorStateId.EXPLORE
        self._entered = False                     # Initial enter() waits for the first observation
        self._last_context: Optional[StateContext] = None

        # Interrupt layers
        self.panic_detector = PanicDetector(self.config)
        self.hesitation_gate = HesitationGate(self.config)
        self.mistake_injector = MistakeInjector(self.config)
        self._panic_timer = 0
        self._hesitation_timer = 0

        self.progress = ProgressTracker(self.config)

        # Diagnostics
        self.tick_count = 0
        self.transitions = 0
        self.trace: Deque[TickRecord] = deque(maxlen=self.config.trace_length)

    # =========================================================================
    # READ-ONLY VIEWS
    # =========================================================================

    @property
    def current_state(self) -> BehaviorState:
        return self.states[self.current_state_id]

    @property
    def panic_timer(self) -> int:
        return self._panic_timer

    @property
    def hesitation_timer(self) -> int:
        return self._hesitation_timer

    @property
    def stuck_counter(self) -> int:
        return self.progress.stuck_counter

    @property
    def frames_since_progress(self) -> int:
        return self.progress.frames_since_progress

    # =========================================================================
    # TICK
    # =========================================================================

    def get_actions(self, env: EnvironmentAccessor) -> List[bool]:
        """Pull this tick's snapshot from the environment and return its buttons."""
        return self.tick(snapshot(env, self.config)).to_list()

    def tick(self, obs: Observation) -> ActionSet:
        """Run the full pipeline for one observation."""
        self.tick_count += 1
        emotion = self.emotion
        rng = self.rng

        emotion.update_emotions(obs)
        self.progress.update(obs.x)

        ctx = self._context(obs)
        if not self._entered:
            self.current_state.enter(ctx)
            self._entered = True

        # 1. Panic in progress
        if self._panic_timer > 0:
            self._panic_timer -= 1
            self.panic_detector.observe(obs)
            return self._emit(panic_actions(rng, self.config), SOURCE_PANIC)

        # 2. New panic
        if self.panic_detector.check(obs, emotion, rng):
            duration = emotion.panic_duration(rng)
            self._panic_timer = duration - 1
            # Panic overrides any freeze in progress
            self._hesitation_timer = 0
            log_interrupt(self.tick_count, SOURCE_PANIC, duration,
                          state=self.current_state_id.label, caution=emotion.caution)
            return self._emit(panic_actions(rng, self.config), SOURCE_PANIC)

        # 3. Hesitation in progress
        if self._hesitation_timer > 0:
            self._hesitation_timer -= 1
            return self._emit(ActionSet.empty(), SOURCE_HESITATION)

        # 4. New hesitation
        if self.hesitation_gate.check(obs, emotion, rng):
            duration = emotion.hesitation_duration(rng)
            self._hesitation_timer = duration - 1
            log_interrupt(self.tick_count, SOURCE_HESITATION, duration,
                          state=self.current_state_id.label, confidence=emotion.confidence)
            return self._emit(ActionSet.empty(), SOURCE_HESITATION)

        # 5. State transition
        next_id = self.current_state.next_state(ctx)
        if next_id is not None and next_id != self.current_state_id:
            self._transition(next_id, ctx)

        # 6-7. Synthesis, then mistakes
        actions = self.current_state.actions(ctx)
        actions = self.mistake_injector.apply(actions, emotion, rng)
        return self._emit(actions, SOURCE_STATE)

    def _context(self, obs: Observation) -> StateContext:
        ctx = StateContext(
            observation=obs,
            emotion=self.emotion,
            rng=self.rng,
            config=self.config,
            tick=self.tick_count,
            stuck_counter=self.progress.stuck_counter,
            frames_since_progress=self.progress.frames_since_progress,
        )
        self._last_context = ctx
        return ctx

    def _transition(self, new_id: BehaviorStateId, ctx: StateContext):
        old_id = self.current_state_id
        self.current_state.exit(ctx)
        self.current_state_id = new_id

        if new_id in FAILURE_STATES:
            self.emotion.record_failed_jump()
        elif old_id == BehaviorStateId.JUMP:
            self.emotion.record_successful_jump()

        self.current_state.enter(ctx)
        self.transitions += 1
        log_transition(self.tick_count, old_id.label, new_id.label,
                       x=f"{ctx.observation.x:.1f}",
                       confidence=f"{self.emotion.confidence:.2f}",
                       caution=f"{self.emotion.caution:.2f}")

    def _emit(self, actions: ActionSet, source: str) -> ActionSet:
        emotion = self.emotion
        self.trace.append(TickRecord(
            tick=self.tick_count,
            state=self.current_state_id.label,
            source=source,
            confidence=emotion.confidence,
            caution=emotion.caution,
            curiosity=emotion.curiosity,
            experience=emotion.experience_level,
            panic_timer=self._panic_timer,
            hesitation_timer=self._hesitation_timer,
            actions=tuple(actions.to_list()),
        ))
        return actions

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def start_level(self, x: float = 0.0):
        """
        Prepare for a new level (or a retry).

        Situational emotions reset; experience and the death streak carry
        over. The active state is exited and Explore is entered on the
        next tick.
        """
        if self._entered and self._last_context is not None:
            self.current_state.exit(self._last_context)
        self.current_state_id = BehaviorStateId.EXPLORE
        self._entered = False

        self.emotion.reset_for_new_level()
        self._panic_timer = 0
        self._hesitation_timer = 0
        self.panic_detector.reset()
        self.progress.reset(x)
        self.trace.clear()
        logger.info(f"Level start at x={x:.1f} ({self.emotion})")

    def get_state(self) -> Dict[str, object]:
        """Snapshot for dashboards and debugging."""
        return {
            'tick': self.tick_count,
            'state': self.current_state_id.label,
            'state_detail': self.current_state.get_state(),
            'panic_timer': self._panic_timer,
            'hesitation_timer': self._hesitation_timer,
            'stuck_counter': self.progress.stuck_counter,
            'frames_since_progress': self.progress.frames_since_progress,
            'transitions': self.transitions,
            'mistakes': self.mistake_injector.mistakes,
            'emotion': self.emotion.get_state(),
        }

    def __repr__(self) -> str:
        return (f"BehaviorController(tick={self.tick_count}, "
                f"state={self.current_state_id.label}, emotion={self.emotion})")
