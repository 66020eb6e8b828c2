"""
Agent Configuration

Every tunable constant of the behavior core lives in one dataclass:
- Grid codes (what counts as solid, passable, valuable)
- Emotion model baselines, deltas and probability weights
- Controller thresholds (progress / stuck detection, trace length)
- Interrupt layer tuning (panic, hesitation, mistakes)
- Per-state timing windows

Configs can be loaded from YAML; unknown keys are ignored so that
older config files keep working.
"""

import os
from dataclasses import dataclass, fields
from typing import Any, Dict, Optional, Tuple

import yaml


class HumanlikeAgentError(Exception):
    """Base class for errors raised by the behavior core."""


class ConfigError(HumanlikeAgentError, ValueError):
    """Raised when a configuration value is out of range."""


@dataclass
class AgentConfig:
    """
    Configuration for the human-like behavior core.

    Use load_config(path) or AgentConfig(**overrides) to customize.
    """
    # ==========================================================================
    # GRID CODES
    # ==========================================================================
    empty_code: int = 0
    coin_codes: Tuple[int, ...] = (2,)
    power_up_codes: Tuple[int, ...] = (7, 9)       # 7 = item, 9 = question block
    passable_codes: Tuple[int, ...] = (0, 2, 7)    # Everything else non-zero is solid
    gap_search_lookahead: int = 3                  # Columns searched for the start of a gap

    # ==========================================================================
    # EMOTION BASELINES & BOUNDS
    # ==========================================================================
    confidence_baseline: float = 0.7
    caution_baseline: float = 0.5
    curiosity_baseline: float = 0.6
    decay_step: float = 0.001          # Per-tick drift back to baseline
    trait_floor: float = 0.2           # Floor for death / kill adjustments

    # ==========================================================================
    # EMOTION EVENT DELTAS
    # ==========================================================================
    death_confidence_penalty: float = 0.2
    death_caution_increase: float = 0.15
    coin_confidence_boost: float = 0.05
    coin_curiosity_boost: float = 0.02
    kill_confidence_boost: float = 0.1
    kill_caution_relief: float = 0.05
    jump_success_confidence: float = 0.02
    jump_success_caution: float = 0.01
    jump_failure_confidence: float = 0.03
    jump_failure_caution: float = 0.02
    level_complete_confidence: float = 0.15
    level_complete_caution: float = 0.1
    level_failure_confidence: float = 0.1
    level_failure_caution: float = 0.1

    # ==========================================================================
    # EMOTION PROBABILITY WEIGHTS
    # ==========================================================================
    death_bonus_per_death: float = 0.03
    death_streak_cap: int = 5
    experience_damping: float = 0.3
    experience_jump_weight: float = 0.7     # Level-completion weight is 1 - this

    hesitate_base: float = 0.02
    hesitate_caution_weight: float = 0.12
    hesitate_doubt_weight: float = 0.08     # Weight of (1 - confidence)

    mistake_base: float = 0.02
    mistake_doubt_weight: float = 0.05
    mistake_caution_weight: float = 0.02

    panic_base: float = 0.05
    panic_caution_weight: float = 0.35
    panic_doubt_weight: float = 0.25

    explore_base: float = 0.05
    explore_curiosity_weight: float = 0.3
    explore_confidence_weight: float = 0.1
    explore_caution_weight: float = 0.15

    # ==========================================================================
    # INTERRUPT DURATIONS (ticks)
    # ==========================================================================
    hesitation_duration_base: float = 15.0
    hesitation_duration_min: int = 10
    hesitation_duration_max: int = 60
    hesitation_jitter: int = 3
    panic_duration_base: float = 20.0
    panic_duration_min: int = 15
    panic_duration_max: int = 90
    panic_jitter: int = 5
    panic_radius: int = 3                  # Chebyshev radius counted as "proximate"

    # ==========================================================================
    # CONTROLLER
    # ==========================================================================
    min_progress: float = 0.5              # Minimum x displacement counted as progress
    stuck_threshold: int = 120             # Ticks without progress before stuck counter runs
    trace_length: int = 2000               # Tick records kept for diagnostics

    # ==========================================================================
    # STATES
    # ==========================================================================
    explore_stuck_threshold: int = 0       # Explore leaves for Stuck when counter exceeds this
    threat_cone_depth: int = 4             # Columns ahead scanned for the speed decision

    jump_base_duration: int = 8
    jump_gap_factor: int = 2
    jump_gap_cap: int = 16
    jump_height_factor: int = 3
    jump_height_cap: int = 15
    jump_jitter: int = 2
    jump_mistake_jitter: int = 5
    jump_duration_min: int = 5
    jump_duration_max: int = 20
    jump_overcorrect_chance: float = 0.1
    jump_sequence_window: int = 5

    collect_budget: int = 120
    collect_distract_chance: float = 0.05
    collect_mistime_scale: float = 0.3

    flee_panic_ticks: int = 30
    flee_min_dwell: int = 30
    flee_ceiling: int = 200
    flee_blocking_wall: int = 3

    stuck_epsilon: float = 0.1
    stuck_escape_distance: float = 1.0
    stuck_strategy_period: int = 30
    stuck_attempt_limit: int = 8
    stuck_reconsider_ticks: int = 240
    stuck_ceiling: int = 400
    stuck_miss_after: int = 60
    stuck_giveup_after: int = 180

    hesitate_observe_ticks: int = 30
    hesitate_test_ticks: int = 60
    hesitate_ceiling: int = 120
    hesitate_run_confidence: float = 0.8
    hesitate_commit_confidence: float = 0.7
    hesitate_jitter_chance: float = 0.05

    def validate(self) -> 'AgentConfig':
        """Check value ranges. Returns self so calls can be chained."""
        if self.hesitation_duration_min > self.hesitation_duration_max:
            raise ConfigError("hesitation_duration_min exceeds hesitation_duration_max")
        if self.panic_duration_min > self.panic_duration_max:
            raise ConfigError("panic_duration_min exceeds panic_duration_max")
        if self.jump_duration_min > self.jump_duration_max:
            raise ConfigError("jump_duration_min exceeds jump_duration_max")
        for name in ('hesitation_duration_min', 'panic_duration_min', 'jump_duration_min',
                     'stuck_threshold', 'collect_budget', 'flee_ceiling', 'stuck_ceiling',
                     'hesitate_ceiling', 'stuck_strategy_period'):
            if getattr(self, name) < 1:
                raise ConfigError(f"{name} must be at least 1")
        for name in ('confidence_baseline', 'caution_baseline', 'curiosity_baseline',
                     'trait_floor', 'collect_distract_chance', 'jump_overcorrect_chance',
                     'hesitate_jitter_chance', 'experience_jump_weight'):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ConfigError(f"{name} must be within [0, 1], got {value}")
        overlap = set(self.coin_codes) & (set(self.power_up_codes) - set(self.passable_codes))
        if overlap:
            raise ConfigError(f"codes {sorted(overlap)} are both coins and solid power-ups")
        return self

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


# Safe load of a YAML config, ignoring unknown keys
def load_config(path: Optional[str] = None) -> AgentConfig:
    """Load configuration from YAML, filtered to AgentConfig fields."""
    if path is None or not os.path.exists(path):
        return AgentConfig()

    with open(path) as f:
        raw = yaml.safe_load(f) or {}
    if not isinstance(raw, dict):
        raise ConfigError(f"{path} must contain a mapping, got {type(raw).__name__}")

    valid = {f.name: f for f in fields(AgentConfig)}
    filtered = {}
    for key, value in raw.items():
        if key not in valid:
            continue
        if isinstance(value, list):
            value = tuple(value)
        filtered[key] = value
    return AgentConfig(**filtered).validate()
