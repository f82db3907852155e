from __future__ import annotations

import math
from typing import Mapping, Optional, Sequence

import numpy as np

from .grid import Cell, Grid

NEUTRAL_ADJUSTMENT = 0.0
ADJUSTMENT_LIMIT = 50.0


def scale_weights(base_weights: Sequence[float], rl_adjustment: float) -> np.ndarray:
    """Bias positive base weights by the trainer's adjustment signal.

    Each weight becomes ``base_i * (base_i / g) ** (-a)`` where ``g`` is the
    geometric mean of ``base_weights`` and ``a`` is the adjustment. ``a == 0``
    returns the base weights untouched. Positive ``a`` moves probability
    toward rarer tiles, negative ``a`` toward common ones. The result is
    rescaled so its maximum is 1, which leaves sampling probabilities intact.
    """
    base = np.asarray(base_weights, dtype=np.float64)
    if base.size == 0 or math.isnan(rl_adjustment) or rl_adjustment == NEUTRAL_ADJUSTMENT:
        return base.copy()
    a = min(max(float(rl_adjustment), -ADJUSTMENT_LIMIT), ADJUSTMENT_LIMIT)
    log_base = np.log(base)
    log_scaled = log_base - a * (log_base - log_base.mean())
    return np.exp(log_scaled - log_scaled.max())


class CollapseSelector:
    """Minimum-remaining-values cell choice plus weighted tile draw."""

    def __init__(self, weights: Mapping[str, float]):
        self.weights = dict(weights)

    def select_cell(self, grid: Grid) -> Optional[Cell]:
        # Strict "<" keeps the first cell in scan order on ties.
        best: Optional[Cell] = None
        for cell in grid.uncollapsed():
            if best is None or len(cell.candidates) < len(best.candidates):
                best = cell
        return best

    def select_tile(self, cell: Cell, rl_adjustment: float, rng: np.random.Generator) -> Optional[str]:
        if not cell.candidates:
            return None
        weights = scale_weights([self.weights[tile_id] for tile_id in cell.candidates], rl_adjustment)
        cumulative = np.cumsum(weights)
        threshold = rng.random() * cumulative[-1]
        idx = int(np.searchsorted(cumulative, threshold, side="right"))
        return cell.candidates[min(idx, len(cell.candidates) - 1)]
