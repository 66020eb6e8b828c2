# Human-like Platformer Agent - Behavior Core
#
# Plays like a person, not like a solver: hesitates, fumbles, panics,
# and wanders off after coins.
#
# ARCHITECTURE:
# ├── controller.py        - Per-tick pipeline, progress tracking, tick trace
# ├── interrupts.py        - Panic detector, hesitation gate, mistake injector
# ├── emotion.py           - Confidence / caution / curiosity + experience
# ├── behavior_state.py    - State ids, StateContext, the state contract
# ├── *_state.py           - Explore, Jump, Collect, Flee, Stuck, Hesitate
# ├── coin_trail.py        - Coin pattern recognition for Explore
# ├── observation.py       - Grid snapshot + every canonical grid metric
# ├── environment.py       - Environment accessor protocol, in-memory grid env
# ├── actions.py           - Button alphabet and action sets
# ├── config.py            - AgentConfig + YAML loading
# └── logging_config.py    - Logger hierarchy and event helpers
#
# visualization.py (matplotlib) is imported on demand.

__version__ = "1.0.0"

# =============================================================================
# PRIMARY EXPORTS: Controller
# =============================================================================

from .controller import (
    BehaviorController,
    ProgressTracker,
    TickRecord,
    build_states,
)

# =============================================================================
# EMOTION & INTERRUPTS
# =============================================================================

from .emotion import EmotionModel
from .interrupts import HesitationGate, MistakeInjector, PanicDetector

# =============================================================================
# BEHAVIOR STATES
# =============================================================================

from .behavior_state import BehaviorState, BehaviorStateId, StateContext
from .explore_state import ExploreState
from .jump_state import JumpState
from .collect_state import CollectState
from .flee_state import FleeState, panic_actions
from .stuck_state import StuckState
from .hesitate_state import HesitateState
from .coin_trail import CoinTrail, TrailPattern, find_coin_trail

# =============================================================================
# ENVIRONMENT, ACTIONS, CONFIG
# =============================================================================

from .actions import Action, ActionSet, NUM_ACTIONS
from .observation import LevelStatus, Observation, ObservationError, TerrainCode
from .environment import EnvironmentAccessor, GridEnvironment, snapshot
from .config import AgentConfig, ConfigError, HumanlikeAgentError, load_config
from .logging_config import get_logger, setup_logging

__all__ = [
    # Controller
    'BehaviorController',
    'ProgressTracker',
    'TickRecord',
    'build_states',

    # Emotion & interrupts
    'EmotionModel',
    'PanicDetector',
    'HesitationGate',
    'MistakeInjector',

    # States
    'BehaviorState',
    'BehaviorStateId',
    'StateContext',
    'ExploreState',
    'JumpState',
    'CollectState',
    'FleeState',
    'StuckState',
    'HesitateState',
    'panic_actions',
    'CoinTrail',
    'TrailPattern',
    'find_coin_trail',

    # Environment, actions, config
    'Action',
    'ActionSet',
    'NUM_ACTIONS',
    'LevelStatus',
    'Observation',
    'ObservationError',
    'TerrainCode',
    'EnvironmentAccessor',
    'GridEnvironment',
    'snapshot',
    'AgentConfig',
    'ConfigError',
    'HumanlikeAgentError',
    'load_config',
    'get_logger',
    'setup_logging',
]
