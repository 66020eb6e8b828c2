"""
Observation Grid - per-tick snapshot of the agent's surroundings.

The environment hands us two equally sized 2D arrays centered on the agent:
- terrain: small integer codes (0 = empty, others = blocks, coins, pipes...)
- enemies: 0 = nothing, non-zero = enemy type

Row 0 is the top of the window. The agent sits at (rows // 2, cols // 2)
and "ahead" means increasing column index.

Every grid metric used by the states and interrupt layers is defined here,
once, so that "gap" and "wall" mean the same thing everywhere. All scans
clamp their row/column ranges to the window, so an agent near the edge
of the level never indexes out of range.
"""

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import List, Optional, Tuple

import numpy as np

from .config import AgentConfig, HumanlikeAgentError


class ObservationError(HumanlikeAgentError, ValueError):
    """Raised when the environment supplies malformed grids."""


class TerrainCode(IntEnum):
    """Default terrain codes (see AgentConfig for the configurable sets)."""
    EMPTY = 0
    SOLID = 1
    COIN = 2
    BRICK = 3
    PIPE = 4
    POWER_UP = 7
    QUESTION_BLOCK = 9


class LevelStatus(Enum):
    """Level outcome signal."""
    ONGOING = "ongoing"
    WON = "won"
    LOST = "lost"


@dataclass(eq=False)
class Observation:
    """One tick's worth of input. Valid for exactly that tick."""
    terrain: np.ndarray
    enemies: np.ndarray
    x: float = 0.0
    status: LevelStatus = LevelStatus.ONGOING
    coins: int = 0
    kills: int = 0
    on_ground: Optional[bool] = None
    config: AgentConfig = field(default_factory=AgentConfig, repr=False, compare=False)

    def __post_init__(self):
        self.terrain = np.asarray(self.terrain, dtype=int)
        self.enemies = np.asarray(self.enemies, dtype=int)
        if self.terrain.ndim != 2 or self.enemies.ndim != 2:
            raise ObservationError(
                f"grids must be 2D, got terrain {self.terrain.shape} enemies {self.enemies.shape}"
            )
        if self.terrain.shape != self.enemies.shape:
            raise ObservationError(
                f"terrain {self.terrain.shape} and enemies {self.enemies.shape} differ in shape"
            )
        if self.terrain.size == 0:
            raise ObservationError("grids must not be empty")
        self._solid = np.isin(self.terrain, self.config.passable_codes, invert=True) & (
            self.terrain != self.config.empty_code
        )
        self._valuable = np.isin(
            self.terrain, tuple(self.config.coin_codes) + tuple(self.config.power_up_codes)
        )

    # =========================================================================
    # GEOMETRY
    # =========================================================================

    @property
    def rows(self) -> int:
        return self.terrain.shape[0]

    @property
    def cols(self) -> int:
        return self.terrain.shape[1]

    @property
    def center(self) -> Tuple[int, int]:
        return self.rows // 2, self.cols // 2

    def _rows(self, start: int, stop: int) -> range:
        """Clamped half-open row range."""
        return range(max(0, start), min(self.rows, stop))

    def _cols(self, start: int, stop: int) -> range:
        """Clamped half-open column range."""
        return range(max(0, start), min(self.cols, stop))

    def in_bounds(self, row: int, col: int) -> bool:
        return 0 <= row < self.rows and 0 <= col < self.cols

    def is_solid(self, row: int, col: int) -> bool:
        return self.in_bounds(row, col) and bool(self._solid[row, col])

    def is_valuable(self, row: int, col: int) -> bool:
        return self.in_bounds(row, col) and bool(self._valuable[row, col])

    def is_coin(self, row: int, col: int) -> bool:
        return self.in_bounds(row, col) and int(self.terrain[row, col]) in self.config.coin_codes

    def is_power_up(self, row: int, col: int) -> bool:
        return self.in_bounds(row, col) and int(self.terrain[row, col]) in self.config.power_up_codes

    def has_enemy(self, row: int, col: int) -> bool:
        return self.in_bounds(row, col) and self.enemies[row, col] != 0

    def count_enemies(self, row_start: int, row_stop: int,
                      col_start: int, col_stop: int) -> int:
        """Enemies in the clamped window [row_start, row_stop) x [col_start, col_stop)."""
        rows = self._rows(row_start, row_stop)
        cols = self._cols(col_start, col_stop)
        if not rows or not cols:
            return 0
        window = self.enemies[rows.start:rows.stop, cols.start:cols.stop]
        return int(np.count_nonzero(window))

    def valuable_cells(self, row_start: int, row_stop: int,
                       col_start: int, col_stop: int) -> List[Tuple[int, int]]:
        """(row, col) of every valuable cell in the clamped window."""
        cells = []
        for r in self._rows(row_start, row_stop):
            for c in self._cols(col_start, col_stop):
                if self._valuable[r, c]:
                    cells.append((r, c))
        return cells

    # =========================================================================
    # TERRAIN METRICS
    # =========================================================================

    def column_has_ground(self, col: int) -> bool:
        """Any solid cell strictly below the agent row in this column."""
        if not 0 <= col < self.cols:
            # Off-window columns are unknown; treat them as solid footing
            return True
        r0, _ = self.center
        return bool(self._solid[r0 + 1:, col].any())

    def gap_width(self) -> int:
        """
        Width of the next gap ahead.

        The gap must start within the configured lookahead; from there we
        count consecutive ground-less columns.
        """
        _, c0 = self.center
        start = None
        for c in self._cols(c0 + 1, c0 + 1 + self.config.gap_search_lookahead):
            if not self.column_has_ground(c):
                start = c
                break
        if start is None:
            return 0

        width = 0
        for c in range(start, self.cols):
            if self.column_has_ground(c):
                break
            width += 1
        return width

    def wall_height(self, offset: int = 1) -> int:
        """Consecutive solid cells in column c0+offset, from body height upward."""
        r0, c0 = self.center
        col = c0 + offset
        if not 0 <= col < self.cols:
            return 0
        height = 0
        for r in range(r0, -1, -1):
            if not self._solid[r, col]:
                break
            height += 1
        return height

    def obstacle_ahead(self) -> bool:
        """Solid cell one column ahead at body or head height."""
        r0, c0 = self.center
        return self.is_solid(r0, c0 + 1) or self.is_solid(r0 - 1, c0 + 1)

    def obstacle_columns_ahead(self, window: int) -> int:
        """Columns in the next `window` that hold a solid cell at body or head height."""
        r0, c0 = self.center
        count = 0
        for c in self._cols(c0 + 1, c0 + 1 + window):
            if self.is_solid(r0, c) or self.is_solid(r0 - 1, c):
                count += 1
        return count

    def obstacle_density(self, window: int = 4) -> int:
        """Columns ahead that hold any solid cell from two rows up down to foot level."""
        r0, c0 = self.center
        count = 0
        for c in self._cols(c0 + 1, c0 + 1 + window):
            if any(self._solid[r, c] for r in self._rows(r0 - 2, r0 + 1)):
                count += 1
        return count

    def needs_complex_jump(self) -> bool:
        """Gap in the next-but-one column, or a wall taller than two cells."""
        _, c0 = self.center
        return not self.column_has_ground(c0 + 2) or self.wall_height() > 2

    def is_airborne(self) -> bool:
        if self.on_ground is not None:
            return not self.on_ground
        r0, c0 = self.center
        return not self.is_solid(r0 + 1, c0)

    # =========================================================================
    # ENEMY METRICS
    # =========================================================================

    def immediate_threat(self) -> bool:
        """Enemy touching or about to touch the agent."""
        r0, c0 = self.center
        return self.count_enemies(r0 - 1, r0 + 2, c0 - 1, c0 + 3) > 0

    def enemies_ahead(self, depth: int = 4) -> int:
        """Enemies in the forward cone (one row above to one below)."""
        r0, c0 = self.center
        return self.count_enemies(r0 - 1, r0 + 2, c0 + 1, c0 + 1 + depth)

    def enemies_nearby(self) -> int:
        r0, c0 = self.center
        return self.count_enemies(r0 - 2, r0 + 3, c0 - 2, c0 + 5)

    # =========================================================================
    # RISK
    # =========================================================================

    def is_high_risk(self) -> bool:
        """Several enemies around, a wide gap, or a tall wall."""
        return (self.enemies_nearby() >= 2
                or self.gap_width() >= 3
                or self.wall_height() >= 4)

    def is_risky_move(self) -> bool:
        """Anything that would make a person pause before pressing forward."""
        return (self.gap_width() >= 1
                or self.enemies_ahead() >= 1
                or self.wall_height() >= 3)
