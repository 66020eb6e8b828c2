"""
Coin Trails - recognizing collectible patterns ahead of the agent.

A person does not chase single coins; they notice shapes: a row of coins
over a gap, a column under a block, an arc left by a designer, a dense
cluster. Four detectors scan the window ahead, in priority order:

    horizontal run → vertical run → arc (2D spread) → 3x3 cluster

The first pattern found that is worth the detour wins. A trail is a fresh
value every tick; nothing here is stored between ticks.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Tuple

from .observation import Observation


class TrailPattern(Enum):
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"
    ARC = "arc"
    CLUSTER = "cluster"


# Coins needed before a plain-coin trail is worth leaving the default path
WORTH_THRESHOLDS = {
    TrailPattern.HORIZONTAL: 3,
    TrailPattern.VERTICAL: 3,
    TrailPattern.ARC: 4,
    TrailPattern.CLUSTER: 3,
}

HIGH_VALUE_COINS = 5

# Scan window relative to the agent (rows up/down, columns ahead)
SCAN_ROWS_ABOVE = 4
SCAN_ROWS_BELOW = 2
SCAN_COLS_AHEAD = 8

MIN_RUN_LENGTH = 2
MIN_ARC_CELLS = 3
MIN_ARC_COL_SPAN = 3
MIN_ARC_ROW_SPAN = 2
MIN_CLUSTER_DENSITY = 4


@dataclass(frozen=True)
class CoinTrail:
    """Bounding box + contents of a recognized collectible pattern."""
    pattern: TrailPattern
    min_row: int
    max_row: int
    min_col: int
    max_col: int
    coin_count: int
    power_ups: int = 0

    @property
    def high_value(self) -> bool:
        return self.power_ups > 0 or self.coin_count >= HIGH_VALUE_COINS

    @property
    def width(self) -> int:
        return self.max_col - self.min_col + 1

    @property
    def height(self) -> int:
        return self.max_row - self.min_row + 1

    @property
    def center_row(self) -> int:
        return (self.min_row + self.max_row) // 2

    @property
    def center_col(self) -> int:
        return (self.min_col + self.max_col) // 2

    def worth_it(self) -> bool:
        return self.power_ups > 0 or self.coin_count >= WORTH_THRESHOLDS[self.pattern]


def _scan_window(obs: Observation) -> Tuple[range, range]:
    r0, c0 = obs.center
    rows = range(max(0, r0 - SCAN_ROWS_ABOVE), min(obs.rows, r0 + SCAN_ROWS_BELOW + 1))
    cols = range(max(0, c0), min(obs.cols, c0 + SCAN_COLS_AHEAD + 1))
    return rows, cols


def _make_trail(obs: Observation, pattern: TrailPattern,
                cells: List[Tuple[int, int]]) -> CoinTrail:
    coins = sum(1 for r, c in cells if obs.is_coin(r, c))
    power_ups = sum(1 for r, c in cells if obs.is_power_up(r, c))
    return CoinTrail(
        pattern=pattern,
        min_row=min(r for r, _ in cells),
        max_row=max(r for r, _ in cells),
        min_col=min(c for _, c in cells),
        max_col=max(c for _, c in cells),
        coin_count=coins,
        power_ups=power_ups,
    )


def _nearest(obs: Observation, trails: List[CoinTrail]) -> Optional[CoinTrail]:
    """Closest start column first, then closest to the agent's row."""
    if not trails:
        return None
    r0, _ = obs.center
    return min(trails, key=lambda t: (t.min_col, abs(t.center_row - r0)))


def detect_horizontal(obs: Observation) -> Optional[CoinTrail]:
    rows, cols = _scan_window(obs)
    found = []
    for r in rows:
        run: List[Tuple[int, int]] = []
        for c in cols:
            if obs.is_valuable(r, c):
                run.append((r, c))
                continue
            if len(run) >= MIN_RUN_LENGTH:
                found.append(_make_trail(obs, TrailPattern.HORIZONTAL, run))
            run = []
        if len(run) >= MIN_RUN_LENGTH:
            found.append(_make_trail(obs, TrailPattern.HORIZONTAL, run))
    return _nearest(obs, found)


def detect_vertical(obs: Observation) -> Optional[CoinTrail]:
    rows, cols = _scan_window(obs)
    found = []
    for c in cols:
        run: List[Tuple[int, int]] = []
        for r in rows:
            if obs.is_valuable(r, c):
                run.append((r, c))
                continue
            if len(run) >= MIN_RUN_LENGTH:
                found.append(_make_trail(obs, TrailPattern.VERTICAL, run))
            run = []
        if len(run) >= MIN_RUN_LENGTH:
            found.append(_make_trail(obs, TrailPattern.VERTICAL, run))
    return _nearest(obs, found)


def detect_arc(obs: Observation) -> Optional[CoinTrail]:
    """Collectibles spread over a 2D box: spans several columns and rows."""
    rows, cols = _scan_window(obs)
    if not rows or not cols:
        return None
    cells = obs.valuable_cells(rows.start, rows.stop, cols.start, cols.stop)
    if len(cells) < MIN_ARC_CELLS:
        return None
    trail = _make_trail(obs, TrailPattern.ARC, cells)
    if trail.width < MIN_ARC_COL_SPAN or trail.height < MIN_ARC_ROW_SPAN:
        return None
    return trail


def detect_cluster(obs: Observation) -> Optional[CoinTrail]:
    """Densest 3x3 window of collectibles."""
    rows, cols = _scan_window(obs)
    best: Optional[List[Tuple[int, int]]] = None
    for r in rows:
        for c in cols:
            cells = obs.valuable_cells(r, r + 3, c, c + 3)
            if len(cells) >= MIN_CLUSTER_DENSITY and (best is None or len(cells) > len(best)):
                best = cells
    if best is None:
        return None
    return _make_trail(obs, TrailPattern.CLUSTER, best)


DETECTORS: List[Callable[[Observation], Optional[CoinTrail]]] = [
    detect_horizontal,
    detect_vertical,
    detect_arc,
    detect_cluster,
]


def find_coin_trail(obs: Observation) -> Optional[CoinTrail]:
    """First worthwhile trail in detector priority order."""
    for detector in DETECTORS:
        trail = detector(obs)
        if trail is not None and trail.worth_it():
            return trail
    return None
