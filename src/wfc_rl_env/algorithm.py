from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Dict, List, Optional, Tuple

import numpy as np

from .catalog import Biome, CatalogIssue, TileCatalog, TileVariant, check_catalog, variants_by_id
from .grid import Grid, GridView
from .layout import Layout, layout_rule
from .propagation import PropagationEngine
from .selection import NEUTRAL_ADJUSTMENT, CollapseSelector

# Episode ids are unique per process, across every algorithm instance.
_episode_counter = itertools.count(1)


class GenerationState(Enum):
    UNINITIALIZED = auto()
    GENERATING = auto()
    COMPLETE = auto()
    FAILED = auto()


@dataclass
class GeneratorConfig:
    width: int = 15
    height: int = 15
    seed: Optional[int] = None  # master seed for per-episode seeds drawn by reset()
    validate_catalog: bool = True
    strict_catalog: bool = False


@dataclass
class GenerationSession:
    grid: Grid
    biome: Biome
    layout: Layout
    seed: int
    rng: np.random.Generator
    tiles: Tuple[TileVariant, ...]
    episode: int
    state: GenerationState = GenerationState.GENERATING
    failure_cell: Optional[Tuple[int, int]] = None
    steps: int = 0
    catalog_issues: List[CatalogIssue] = field(default_factory=list)

    @property
    def failed(self) -> bool:
        return self.state == GenerationState.FAILED


class GenerationAlgorithm:
    """Single-step WFC generator driven by an external trainer.

    ``reset`` starts an episode, each ``perform_single_step`` call does one
    collapse followed by propagation to a fixed point. A contradiction ends
    the episode in ``FAILED``; there is no backtracking, only ``reset``
    starts over.
    """

    def __init__(self, catalog: TileCatalog, config: Optional[GeneratorConfig] = None):
        self.catalog = catalog
        self.config = config or GeneratorConfig()
        if self.config.width < 1 or self.config.height < 1:
            raise ValueError(
                f"Generator width and height must be at least 1, got {self.config.width}x{self.config.height}"
            )
        self.seed_rng = np.random.default_rng(self.config.seed)
        self.session: Optional[GenerationSession] = None
        self._selector: Optional[CollapseSelector] = None
        self._engine: Optional[PropagationEngine] = None
        self._variants: Dict[str, TileVariant] = {}
        # Validation results per biome; the catalog never changes.
        self._catalog_issues: Dict[Biome, List[CatalogIssue]] = {}

    @property
    def state(self) -> GenerationState:
        if self.session is None:
            return GenerationState.UNINITIALIZED
        return self.session.state

    def reset(self, biome: Biome, layout: Layout = Layout.OPEN, seed: Optional[int] = None) -> None:
        issues: List[CatalogIssue] = []
        if self.config.validate_catalog:
            if biome not in self._catalog_issues:
                self._catalog_issues[biome] = check_catalog(
                    self.catalog, biome, strict=self.config.strict_catalog
                )
            issues = list(self._catalog_issues[biome])
        if seed is None:
            seed = int(self.seed_rng.integers(0, 2**31 - 1))

        tiles = self.catalog.tiles_for_biome(biome)
        rule = layout_rule(layout)
        grid = Grid(self.config.width, self.config.height, [tile.tile_id for tile in tiles])
        self._variants = variants_by_id(tiles)
        self._selector = CollapseSelector(rule.weights(tiles))
        self._engine = PropagationEngine(tiles)
        self.session = GenerationSession(
            grid=grid,
            biome=biome,
            layout=layout,
            seed=seed,
            rng=np.random.default_rng(seed),
            tiles=tiles,
            episode=next(_episode_counter),
            catalog_issues=issues,
        )
        restricted = rule.restrict(grid, tiles)
        if restricted:
            # An emptied cell here is picked first by the next step, which then fails.
            self._engine.propagate(grid, restricted)

    def perform_single_step(self, rl_adjustment: float = NEUTRAL_ADJUSTMENT) -> bool:
        session = self.session
        if session is None or session.state != GenerationState.GENERATING:
            return False
        assert self._selector is not None and self._engine is not None

        cell = self._selector.select_cell(session.grid)
        if cell is None:
            session.state = GenerationState.COMPLETE
            return False

        tile_id = self._selector.select_tile(cell, rl_adjustment, session.rng)
        if tile_id is None:
            self._fail(session, cell.position())
            return False

        cell.collapse(tile_id)
        session.steps += 1
        result = self._engine.propagate(session.grid, [cell])
        if not result.ok:
            self._fail(session, result.contradiction)
            return False

        if session.grid.is_complete():
            session.state = GenerationState.COMPLETE
        return True

    def is_complete(self) -> bool:
        return self.session is not None and self.session.grid.is_complete()

    def has_failed(self) -> bool:
        return self.session is not None and self.session.failed

    def get_grid(self) -> GridView:
        assert self.session is not None, "Generator not reset."
        return GridView(self.session.grid, self._variants)

    def completion_rate(self) -> float:
        if self.session is None:
            return 0.0
        grid = self.session.grid
        return grid.collapsed_count() / float(len(grid))

    @staticmethod
    def _fail(session: GenerationSession, position: Optional[Tuple[int, int]]) -> None:
        session.state = GenerationState.FAILED
        session.failure_cell = position
