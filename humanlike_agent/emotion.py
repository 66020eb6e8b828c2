"""
Emotion Model - the mood that makes the agent play like a person.

Three bounded traits drive every stochastic decision in the core:
- confidence: drops on deaths and failed jumps, rises on coins and kills
- caution:    rises after deaths, relaxes after kills
- curiosity:  how tempting detours for coins are

Around them sit counters (death streak, coins, kills) and an experience
scalar derived from jump-success and level-completion ratios, which
slowly damps hesitation, panic and mistake rates over a career.

Architecture:
    update_emotions(observation)   once per tick, before any query
        ↓
    traits (clamped to [0, 1], drifting back to baseline)
        ↓
    queries: *_probability()  pure, no randomness
             should_*()       one Bernoulli draw each
             *_duration()     clamped tick counts

Queries never mutate traits. Only record_* and update_emotions do.
"""

from typing import Any, Dict, Optional

import numpy as np

from .config import AgentConfig
from .logging_config import get_logger, log_death
from .observation import LevelStatus, Observation

logger = get_logger(__name__)


def _clip01(value: float) -> float:
    return float(np.clip(value, 0.0, 1.0))


class EmotionModel:
    """
    Confidence / caution / curiosity with counters and experience.

    Owned by the BehaviorController (single writer). States receive it
    for queries only.
    """

    def __init__(self, config: Optional[AgentConfig] = None):
        self.config = config or AgentConfig()

        # Situational traits
        self.confidence = self.config.confidence_baseline
        self.caution = self.config.caution_baseline
        self.curiosity = self.config.curiosity_baseline

        # Outcome counters (used only to detect deltas)
        self.consecutive_deaths = 0
        self.coins_collected = 0
        self.enemies_killed = 0
        self._last_status = LevelStatus.ONGOING

        # Attempt statistics behind the experience scalar
        self.jump_attempts = 0
        self.jump_successes = 0
        self.level_attempts = 0
        self.level_completions = 0
        self._experience = 0.0

        self.ticks = 0

    # =========================================================================
    # DERIVED VALUES
    # =========================================================================

    @property
    def experience_level(self) -> float:
        """Weighted blend of jump-success and level-completion ratios."""
        return self._experience

    def _recompute_experience(self):
        jump_ratio = self.jump_successes / self.jump_attempts if self.jump_attempts else 0.0
        level_ratio = self.level_completions / self.level_attempts if self.level_attempts else 0.0
        w = self.config.experience_jump_weight
        self._experience = _clip01(w * jump_ratio + (1.0 - w) * level_ratio)

    def _death_streak(self) -> int:
        return min(self.consecutive_deaths, self.config.death_streak_cap)

    def _death_bonus(self) -> float:
        return self._death_streak() * self.config.death_bonus_per_death

    def _damping(self) -> float:
        return 1.0 - self.config.experience_damping * self._experience

    # =========================================================================
    # PROBABILITIES (pure)
    # =========================================================================

    def hesitation_probability(self) -> float:
        c = self.config
        raw = (c.hesitate_base
               + c.hesitate_caution_weight * self.caution
               + c.hesitate_doubt_weight * (1.0 - self.confidence)
               + self._death_bonus())
        return _clip01(raw * self._damping())

    def mistake_probability(self) -> float:
        c = self.config
        raw = (c.mistake_base
               + c.mistake_doubt_weight * (1.0 - self.confidence)
               + c.mistake_caution_weight * self.caution
               + self._death_bonus())
        return _clip01(raw * self._damping())

    def panic_probability(self) -> float:
        c = self.config
        raw = (c.panic_base
               + c.panic_caution_weight * self.caution
               + c.panic_doubt_weight * (1.0 - self.confidence)
               + self._death_bonus())
        return _clip01(raw * self._damping())

    def explore_probability(self) -> float:
        c = self.config
        return _clip01(c.explore_base
                       + c.explore_curiosity_weight * self.curiosity
                       + c.explore_confidence_weight * self.confidence
                       - c.explore_caution_weight * self.caution)

    # =========================================================================
    # QUERIES (one draw each)
    # =========================================================================

    def should_hesitate(self, rng: np.random.Generator) -> bool:
        return rng.random() < self.hesitation_probability()

    def should_make_mistake(self, rng: np.random.Generator) -> bool:
        return rng.random() < self.mistake_probability()

    def should_panic(self, rng: np.random.Generator) -> bool:
        return rng.random() < self.panic_probability()

    def should_explore_for_coins(self, rng: np.random.Generator) -> bool:
        return rng.random() < self.explore_probability()

    def mistake_severity(self, rng: np.random.Generator) -> float:
        """How bad a mistake is, 0 (slip) .. 1 (blunder)."""
        streak = self._death_streak() / max(1, self.config.death_streak_cap)
        base = 0.3 * (1.0 - self.confidence) + 0.2 * self.caution + 0.1 * streak
        return _clip01(base + rng.uniform(-0.1, 0.1))

    def hesitation_duration(self, rng: np.random.Generator) -> int:
        c = self.config
        base = (c.hesitation_duration_base
                + 30.0 * self.caution
                + 20.0 * (1.0 - self.confidence)
                + 5.0 * self._death_streak())
        jitter = int(rng.integers(-c.hesitation_jitter, c.hesitation_jitter + 1))
        return int(np.clip(round(base) + jitter, c.hesitation_duration_min, c.hesitation_duration_max))

    def panic_duration(self, rng: np.random.Generator) -> int:
        c = self.config
        base = (c.panic_duration_base
                + 40.0 * self.caution
                + 30.0 * (1.0 - self.confidence)
                + 5.0 * self._death_streak())
        jitter = int(rng.integers(-c.panic_jitter, c.panic_jitter + 1))
        return int(np.clip(round(base) + jitter, c.panic_duration_min, c.panic_duration_max))

    # =========================================================================
    # UPDATES
    # =========================================================================

    def _nudge(self, confidence: float = 0.0, caution: float = 0.0, curiosity: float = 0.0):
        self.confidence = _clip01(self.confidence + confidence)
        self.caution = _clip01(self.caution + caution)
        self.curiosity = _clip01(self.curiosity + curiosity)

    def record_successful_jump(self):
        c = self.config
        self.jump_attempts += 1
        self.jump_successes += 1
        self._nudge(confidence=c.jump_success_confidence, caution=-c.jump_success_caution)
        self._recompute_experience()

    def record_failed_jump(self):
        c = self.config
        self.jump_attempts += 1
        self._nudge(confidence=-c.jump_failure_confidence, caution=c.jump_failure_caution)
        self._recompute_experience()

    def record_level_completion(self):
        c = self.config
        self.level_attempts += 1
        self.level_completions += 1
        self.consecutive_deaths = 0
        self._nudge(confidence=c.level_complete_confidence, caution=-c.level_complete_caution)
        self._recompute_experience()

    def record_level_failure(self):
        c = self.config
        self.level_attempts += 1
        self._nudge(confidence=-c.level_failure_confidence, caution=c.level_failure_caution)
        self._recompute_experience()

    def update_emotions(self, observation: Observation):
        """
        Apply this tick's outcome signals, then drift toward baseline.

        Must be called exactly once per tick before any query.
        """
        c = self.config
        self.ticks += 1

        # Terminal statuses are edge-triggered: a death shown for several ticks counts once
        status = observation.status
        if status != self._last_status:
            if status == LevelStatus.LOST:
                self.consecutive_deaths += 1
                self.confidence = max(c.trait_floor, self.confidence - c.death_confidence_penalty)
                self.caution = _clip01(self.caution + c.death_caution_increase)
                self.record_level_failure()
                log_death(self.ticks, observation.x, self.consecutive_deaths,
                          self.confidence, self.caution)
            elif status == LevelStatus.WON:
                self.record_level_completion()
                logger.info(f"Level completed after {self.ticks} ticks "
                            f"(experience={self._experience:.2f})")
            self._last_status = status

        if observation.coins > self.coins_collected:
            self._nudge(confidence=c.coin_confidence_boost, curiosity=c.coin_curiosity_boost)
        self.coins_collected = observation.coins

        if observation.kills > self.enemies_killed:
            self.confidence = _clip01(self.confidence + c.kill_confidence_boost)
            self.caution = max(c.trait_floor, self.caution - c.kill_caution_relief)
        self.enemies_killed = observation.kills

        self._decay_toward_baseline()

    def _decay_toward_baseline(self):
        step = self.config.decay_step
        self.confidence = self._drift(self.confidence, self.config.confidence_baseline, step)
        self.caution = self._drift(self.caution, self.config.caution_baseline, step)
        self.curiosity = self._drift(self.curiosity, self.config.curiosity_baseline, step)

    @staticmethod
    def _drift(value: float, baseline: float, step: float) -> float:
        if value < baseline:
            return _clip01(min(baseline, value + step))
        if value > baseline:
            return _clip01(max(baseline, value - step))
        return value

    def reset_for_new_level(self):
        """Partial reset: situational traits only. Experience and streaks survive."""
        self.confidence = self.config.confidence_baseline
        self.caution = self.config.caution_baseline
        self.curiosity = self.config.curiosity_baseline
        self.coins_collected = 0
        self.enemies_killed = 0
        self._last_status = LevelStatus.ONGOING

    # =========================================================================
    # SERIALIZATION
    # =========================================================================

    def get_state(self) -> Dict[str, float]:
        """Current traits for logging and traces."""
        return {
            'confidence': self.confidence,
            'caution': self.caution,
            'curiosity': self.curiosity,
            'experience': self._experience,
            'consecutive_deaths': self.consecutive_deaths,
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            'confidence': self.confidence,
            'caution': self.caution,
            'curiosity': self.curiosity,
            'consecutive_deaths': self.consecutive_deaths,
            'jump_attempts': self.jump_attempts,
            'jump_successes': self.jump_successes,
            'level_attempts': self.level_attempts,
            'level_completions': self.level_completions,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], config: Optional[AgentConfig] = None) -> 'EmotionModel':
        model = cls(config)
        model.confidence = _clip01(data.get('confidence', model.confidence))
        model.caution = _clip01(data.get('caution', model.caution))
        model.curiosity = _clip01(data.get('curiosity', model.curiosity))
        model.consecutive_deaths = max(0, int(data.get('consecutive_deaths', 0)))
        model.jump_attempts = max(0, int(data.get('jump_attempts', 0)))
        model.jump_successes = min(model.jump_attempts, max(0, int(data.get('jump_successes', 0))))
        model.level_attempts = max(0, int(data.get('level_attempts', 0)))
        model.level_completions = min(model.level_attempts,
                                      max(0, int(data.get('level_completions', 0))))
        model._recompute_experience()
        return model

    def __repr__(self) -> str:
        return (f"EmotionModel(confidence={self.confidence:.2f}, caution={self.caution:.2f}, "
                f"curiosity={self.curiosity:.2f}, experience={self._experience:.2f})")
