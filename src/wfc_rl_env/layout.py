from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from types import MappingProxyType
from typing import Dict, FrozenSet, List, Mapping, Optional, Sequence

from .catalog import TileType, TileVariant
from .grid import Cell, Grid


class Layout(Enum):
    OPEN = auto()
    CONTINUOUS = auto()
    SPARSE = auto()
    WALLED = auto()


@dataclass(frozen=True)
class LayoutRule:
    """Initial candidate restrictions and weight bias for one layout.

    ``border_types`` limits border cells to tiles of those types (None means
    no restriction). ``type_bias`` multiplies a tile's base weight by tile type.
    """

    border_types: Optional[FrozenSet[TileType]] = None
    type_bias: Mapping[TileType, float] = field(default_factory=dict)

    def weight_for(self, tile: TileVariant) -> float:
        return tile.weight * self.type_bias.get(tile.tile_type, 1.0)

    def weights(self, tiles: Sequence[TileVariant]) -> Dict[str, float]:
        return {tile.tile_id: self.weight_for(tile) for tile in tiles}

    def border_candidates(self, tiles: Sequence[TileVariant]) -> Optional[List[str]]:
        if self.border_types is None:
            return None
        return [tile.tile_id for tile in tiles if tile.tile_type in self.border_types]

    def restrict(self, grid: Grid, tiles: Sequence[TileVariant]) -> List[Cell]:
        """Apply the border restriction in place; return the cells that changed."""
        allowed = self.border_candidates(tiles)
        if allowed is None:
            return []
        allowed_set = frozenset(allowed)
        return [cell for cell in grid if grid.is_border(cell.x, cell.y) and cell.restrict(allowed_set)]


_LAYOUT_RULES: Mapping[Layout, LayoutRule] = MappingProxyType(
    {
        Layout.OPEN: LayoutRule(),
        Layout.CONTINUOUS: LayoutRule(type_bias={TileType.PATH: 1.3}),
        Layout.SPARSE: LayoutRule(type_bias={TileType.IMPASSABLE: 1.2}),
        Layout.WALLED: LayoutRule(border_types=frozenset({TileType.IMPASSABLE})),
    }
)


def layout_rule(layout: Layout) -> LayoutRule:
    return _LAYOUT_RULES[layout]
