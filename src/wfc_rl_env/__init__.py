"""RL-modulated Wave-Function-Collapse map generation for training episodes."""

from .algorithm import GenerationAlgorithm, GenerationSession, GenerationState, GeneratorConfig  # noqa: F401
from .catalog import (  # noqa: F401
    WILDCARD,
    Biome,
    CatalogIssue,
    CatalogValidationError,
    TileCatalog,
    TileType,
    TileVariant,
    compatible,
)
from .env import EnvConfig, WFCGenerationEnv, encode_obs_to_vector  # noqa: F401
from .grid import Cell, CellState, Direction, Grid, GridView  # noqa: F401
from .layout import Layout, LayoutRule, layout_rule  # noqa: F401
from .policy import ConstantAdjustmentPolicy, HeuristicAdjustmentPolicy  # noqa: F401
from .propagation import PropagationEngine, PropagationResult  # noqa: F401
from .selection import NEUTRAL_ADJUSTMENT, CollapseSelector, scale_weights  # noqa: F401
from .tasks import TaskSpec, task_presets  # noqa: F401
from .tilesets import default_catalog, default_tiles  # noqa: F401
