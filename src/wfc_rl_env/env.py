from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple

import numpy as np

from .algorithm import GenerationAlgorithm, GeneratorConfig
from .catalog import Biome, TileCatalog
from .layout import Layout

AdjustmentPolicy = Callable[[Dict[str, np.ndarray]], float]


@dataclass
class EnvConfig:
    width: int = 15
    height: int = 15
    biome: Optional[Biome] = None  # None: drawn per episode from the catalog's biomes
    layout: Optional[Layout] = None  # None: drawn per episode
    seed: Optional[int] = None
    max_steps: Optional[int] = None  # defaults to width * height * 2
    validate_catalog: bool = True
    log_path: Optional[str] = None  # optional JSONL episode log


class WFCGenerationEnv:
    """Gym-style wrapper that exposes map generation as an episodic control task.

    Each ``step`` feeds one adjustment value to the generator. Rewards are left
    to the caller; ``info`` carries the step outcome and episode status.
    """

    def __init__(self, catalog: TileCatalog, config: Optional[EnvConfig] = None):
        self.config = config or EnvConfig()
        if not catalog.biomes():
            raise ValueError("Tile catalog has no tiles for any biome.")
        if self.config.biome is not None and self.config.biome not in catalog.biomes():
            raise ValueError(f"Tile catalog has no tiles for biome {self.config.biome.name}.")
        self.catalog = catalog
        self.rng = np.random.default_rng(self.config.seed)
        self.generator = GenerationAlgorithm(
            catalog,
            GeneratorConfig(
                width=self.config.width,
                height=self.config.height,
                validate_catalog=self.config.validate_catalog,
            ),
        )
        if self.config.max_steps is None:
            self.max_steps = self.config.width * self.config.height * 2
        elif self.config.max_steps < 1:
            raise ValueError(f"max_steps must be at least 1, got {self.config.max_steps}")
        else:
            self.max_steps = self.config.max_steps
        self.step_count: int = 0
        self.biome: Optional[Biome] = None
        self.layout: Optional[Layout] = None

    def reset(self) -> Dict[str, np.ndarray]:
        biomes = self.catalog.biomes()
        self.biome = self.config.biome or biomes[int(self.rng.integers(len(biomes)))]
        self.layout = self.config.layout or list(Layout)[int(self.rng.integers(len(Layout)))]
        seed = int(self.rng.integers(0, 2**31 - 1))
        self.generator.reset(self.biome, self.layout, seed=seed)
        self.step_count = 0
        return self._build_observation()

    def step(self, rl_adjustment: float) -> Tuple[Dict[str, np.ndarray], bool, Dict]:
        assert self.generator.session is not None, "Environment not reset."
        self.step_count += 1
        success = self.generator.perform_single_step(float(rl_adjustment))
        complete = self.generator.is_complete()
        failed = self.generator.has_failed()
        timeout = self.step_count >= self.max_steps and not (complete or failed)
        info = {
            "success": success,
            "complete": complete,
            "failed": failed,
            "timeout": timeout,
            "steps": self.step_count,
        }
        done = complete or failed or timeout
        return self._build_observation(), done, info

    def run_episode(self, policy: AdjustmentPolicy, max_steps: Optional[int] = None) -> Dict:
        """Drive one episode with ``policy`` and return a summary."""
        if max_steps is None:
            max_steps = self.max_steps
        obs = self.reset()
        steps = 0
        for _ in range(max_steps):
            obs, done, _ = self.step(policy(obs))
            steps += 1
            if done:
                break
        session = self.generator.session
        summary = {
            "episode": session.episode,
            "biome": self.biome.name,
            "layout": self.layout.name,
            "seed": session.seed,
            "steps": steps,
            "complete": self.generator.is_complete(),
            "failed": self.generator.has_failed(),
            "completion": self.generator.completion_rate(),
        }
        if self.config.log_path:
            with open(self.config.log_path, "a", encoding="utf-8") as f:
                f.write(json.dumps(summary) + "\n")
        return summary

    def _build_observation(self) -> Dict[str, np.ndarray]:
        view = self.generator.get_grid()
        tile_count = len(self.generator.session.tiles)
        cells = np.zeros((view.height, view.width, 2), dtype=np.float32)
        cells[..., 0] = view.collapsed_mask()
        if tile_count:
            entropy = np.where(view.collapsed_mask(), 0, view.candidate_counts())
            cells[..., 1] = entropy / float(tile_count)
        biome = np.zeros(len(Biome), dtype=np.float32)
        biome[list(Biome).index(self.biome)] = 1.0
        layout = np.zeros(len(Layout), dtype=np.float32)
        layout[list(Layout).index(self.layout)] = 1.0
        progress = np.array(
            [self.generator.completion_rate(), self.step_count / float(self.max_steps)],
            dtype=np.float32,
        )
        return {"cells": cells, "biome": biome, "layout": layout, "progress": progress}


def encode_obs_to_vector(obs: Dict[str, np.ndarray]) -> np.ndarray:
    """Flatten an observation dict into one float32 vector.

    Order: per-cell (collapsed, normalised entropy) pairs in row-major order,
    biome one-hot, layout one-hot, then completion and step fraction.
    """
    parts = [
        obs["cells"].reshape(-1),
        obs["biome"],
        obs["layout"],
        obs["progress"],
    ]
    return np.concatenate([np.asarray(p, dtype=np.float32) for p in parts])
