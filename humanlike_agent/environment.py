"""
Environment Accessor - the read-only view of the simulation.

The physics/terrain simulation is an external collaborator. All the core
needs from it each tick is:
- terrain and enemy grids centered on the agent
- the agent's horizontal world position
- the level outcome signal and cumulative coin / kill counts

snapshot() pulls those once per tick into an Observation.
GridEnvironment is a plain in-memory accessor for harnesses and tests.
"""

from typing import Optional, Protocol, runtime_checkable

import numpy as np

from .config import AgentConfig
from .observation import LevelStatus, Observation


@runtime_checkable
class EnvironmentAccessor(Protocol):
    """What the simulation must expose to drive the agent."""

    def terrain_grid(self) -> np.ndarray: ...

    def enemy_grid(self) -> np.ndarray: ...

    def agent_x(self) -> float: ...

    def level_status(self) -> LevelStatus: ...

    def coins_collected(self) -> int: ...

    def kills_total(self) -> int: ...


def snapshot(env: EnvironmentAccessor, config: Optional[AgentConfig] = None) -> Observation:
    """Read everything the core needs for one tick."""
    on_ground = None
    probe = getattr(env, 'agent_on_ground', None)
    if callable(probe):
        reading = probe()
        on_ground = None if reading is None else bool(reading)
    return Observation(
        terrain=env.terrain_grid(),
        enemies=env.enemy_grid(),
        x=float(env.agent_x()),
        status=env.level_status(),
        coins=int(env.coins_collected()),
        kills=int(env.kills_total()),
        on_ground=on_ground,
        config=config or AgentConfig(),
    )


class GridEnvironment:
    """
    Mutable in-memory environment.

    Set the fields between ticks to script a scenario:
        env = GridEnvironment(terrain, enemies)
        env.x += 1.0
        env.coins += 1
    """

    def __init__(self, terrain, enemies=None, x: float = 0.0,
                 status: LevelStatus = LevelStatus.ONGOING,
                 coins: int = 0, kills: int = 0, on_ground: Optional[bool] = None):
        self.terrain = np.asarray(terrain, dtype=int)
        if enemies is None:
            enemies = np.zeros_like(self.terrain)
        self.enemies = np.asarray(enemies, dtype=int)
        self.x = x
        self.status = status
        self.coins = coins
        self.kills = kills
        self.on_ground = on_ground

    def terrain_grid(self) -> np.ndarray:
        return self.terrain.copy()

    def enemy_grid(self) -> np.ndarray:
        return self.enemies.copy()

    def agent_x(self) -> float:
        return self.x

    def level_status(self) -> LevelStatus:
        return self.status

    def coins_collected(self) -> int:
        return self.coins

    def kills_total(self) -> int:
        return self.kills

    def agent_on_ground(self) -> Optional[bool]:
        return self.on_ground
