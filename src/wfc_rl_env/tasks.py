from __future__ import annotations

from dataclasses import dataclass
from typing import Dict

from .catalog import Biome
from .env import EnvConfig
from .layout import Layout


@dataclass
class TaskSpec:
    name: str
    description: str
    env_config: EnvConfig


def task_presets() -> Dict[str, TaskSpec]:
    """Return predefined generation tasks, from a small fixed map to a mixed curriculum."""
    return {
        "grassland_open": TaskSpec(
            name="grassland_open",
            description="Small grassland map with no layout constraint; checks basic collapse behaviour.",
            env_config=EnvConfig(
                width=8,
                height=8,
                biome=Biome.GRASSLAND,
                layout=Layout.OPEN,
            ),
        ),
        "city_continuous": TaskSpec(
            name="city_continuous",
            description="City blocks with path tiles favoured; the policy learns how far to push road density.",
            env_config=EnvConfig(
                width=12,
                height=12,
                biome=Biome.CITY,
                layout=Layout.CONTINUOUS,
            ),
        ),
        "forest_walled": TaskSpec(
            name="forest_walled",
            description="Forest enclosed by a ring of impassable trees; interior must stay compatible with the wall.",
            env_config=EnvConfig(
                width=10,
                height=10,
                biome=Biome.FOREST,
                layout=Layout.WALLED,
            ),
        ),
        "mixed_biomes": TaskSpec(
            name="mixed_biomes",
            description="Full-size map with biome and layout drawn every episode; the broadest training distribution.",
            env_config=EnvConfig(
                width=15,
                height=15,
                biome=None,
                layout=None,
            ),
        ),
    }
