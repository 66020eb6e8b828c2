"""Shared grid builders and a scripted random stream."""

import numpy as np
import pytest

from humanlike_agent.behavior_state import StateContext
from humanlike_agent.config import AgentConfig
from humanlike_agent.emotion import EmotionModel
from humanlike_agent.observation import Observation

ROWS = 15
COLS = 16
R0 = ROWS // 2      # 7
C0 = COLS // 2      # 8


class FixedRng:
    """
    Stand-in for numpy's Generator with scripted outcomes.

    random() pops queued values, then returns `default` forever.
    default=0.99 makes every Bernoulli draw fail, 0.0 makes them all pass.
    """

    def __init__(self, randoms=(), default=0.99, integer=None, uniform=None):
        self._values = list(randoms)
        self.default = default
        self.integer = integer
        self.uniform_value = uniform
        self.calls = 0

    def random(self):
        self.calls += 1
        if self._values:
            return self._values.pop(0)
        return self.default

    def integers(self, low, high=None):
        if high is None:
            low, high = 0, low
        if self.integer is not None:
            return self.integer
        # Zero jitter when the range allows it
        return 0 if low <= 0 < high else low

    def uniform(self, low=0.0, high=1.0):
        if self.uniform_value is not None:
            return self.uniform_value
        return (low + high) / 2.0

    def choice(self, options):
        return options[0]


def blank_terrain(ground=True):
    terrain = np.zeros((ROWS, COLS), dtype=int)
    if ground:
        terrain[R0 + 1, :] = 1
    return terrain


def blank_enemies():
    return np.zeros((ROWS, COLS), dtype=int)


@pytest.fixture
def rng_factory():
    return FixedRng


@pytest.fixture
def terrain():
    """Flat ground directly under the agent row."""
    return blank_terrain()


@pytest.fixture
def enemies():
    return blank_enemies()


@pytest.fixture
def make_obs():
    def _make(terrain=None, enemies=None, **kwargs):
        if terrain is None:
            terrain = blank_terrain()
        if enemies is None:
            enemies = np.zeros_like(np.asarray(terrain))
        return Observation(terrain=terrain, enemies=enemies, **kwargs)
    return _make


@pytest.fixture
def make_ctx():
    def _make(obs, rng=None, emotion=None, config=None, **kwargs):
        config = config or AgentConfig()
        return StateContext(
            observation=obs,
            emotion=emotion or EmotionModel(config),
            rng=rng if rng is not None else FixedRng(),
            config=config,
            **kwargs,
        )
    return _make
