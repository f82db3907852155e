from __future__ import annotations

from typing import Dict, Optional

import numpy as np

from .catalog import Biome
from .layout import Layout


def decode_biome(obs: Dict[str, np.ndarray]) -> Biome:
    return list(Biome)[int(np.argmax(obs["biome"]))]


def decode_layout(obs: Dict[str, np.ndarray]) -> Layout:
    return list(Layout)[int(np.argmax(obs["layout"]))]


class ConstantAdjustmentPolicy:
    def __init__(self, value: float = 0.0):
        self.value = value

    def __call__(self, obs: Dict[str, np.ndarray]) -> float:
        return self.value


class HeuristicAdjustmentPolicy:
    """Hand-written baseline that nudges tile weights by biome, layout and progress."""

    def __init__(self, seed: Optional[int] = None, noise: float = 0.15):
        self.rng = np.random.default_rng(seed)
        self.noise = noise

    def __call__(self, obs: Dict[str, np.ndarray]) -> float:
        biome = decode_biome(obs)
        layout = decode_layout(obs)
        completion = float(obs["progress"][0])
        adjustment = 0.0
        if biome == Biome.CITY and layout == Layout.CONTINUOUS:
            adjustment += 0.3 * (1.0 - completion)
        elif biome == Biome.FOREST and layout == Layout.SPARSE:
            adjustment += 0.2
        elif biome == Biome.DESERT:
            adjustment += 0.1 * completion
        adjustment += (self.rng.random() - 0.5) * self.noise
        return adjustment
