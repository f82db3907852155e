from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from enum import Enum, auto
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Tuple

from .grid import Direction

logger = logging.getLogger(__name__)

WILDCARD = "*"


class Biome(Enum):
    GRASSLAND = auto()
    DESERT = auto()
    FOREST = auto()
    TUNDRA = auto()
    SWAMP = auto()
    MOUNTAIN = auto()
    OCEAN = auto()
    CUSTOM = auto()
    CITY = auto()


class TileType(Enum):
    GRASS = auto()
    WATER = auto()
    STONE = auto()
    SAND = auto()
    DIRT = auto()
    SNOW = auto()
    LAVA = auto()
    ICE = auto()
    WOOD = auto()
    PATH = auto()
    CUSTOM = auto()
    IMPASSABLE = auto()

    @property
    def walkable(self) -> bool:
        return self not in (TileType.WATER, TileType.LAVA, TileType.IMPASSABLE)


@dataclass(frozen=True)
class TileVariant:
    """Immutable tile definition with per-direction adjacency lists.

    ``north`` lists the tile ids that may sit directly north of this tile, and
    so on. A list containing ``WILDCARD`` accepts anything. An empty list
    accepts nothing unless ``allow_all_by_default`` is set.
    """

    tile_id: str
    biome: Biome
    tile_type: TileType = TileType.GRASS
    weight: float = 1.0
    north: FrozenSet[str] = field(default_factory=frozenset)
    east: FrozenSet[str] = field(default_factory=frozenset)
    south: FrozenSet[str] = field(default_factory=frozenset)
    west: FrozenSet[str] = field(default_factory=frozenset)
    allow_all_by_default: bool = False

    def __post_init__(self) -> None:
        if not (math.isfinite(self.weight) and self.weight > 0):
            raise ValueError(f"Tile {self.tile_id!r} needs a positive finite weight, got {self.weight}")
        for name in ("north", "east", "south", "west"):
            object.__setattr__(self, name, frozenset(getattr(self, name)))

    def allowed(self, direction: Direction) -> FrozenSet[str]:
        return getattr(self, direction.name.lower())

    @property
    def walkable(self) -> bool:
        return self.tile_type.walkable

    @classmethod
    def from_dict(cls, record: Mapping[str, Any]) -> "TileVariant":
        """Build a variant from a plain record such as a parsed JSON object."""
        biome = record["biome"]
        tile_type = record.get("type", TileType.GRASS)
        return cls(
            tile_id=str(record["id"]),
            biome=biome if isinstance(biome, Biome) else Biome[str(biome).upper()],
            tile_type=tile_type if isinstance(tile_type, TileType) else TileType[str(tile_type).upper()],
            weight=float(record.get("weight", 1.0)),
            north=_id_set(record.get("north", ())),
            east=_id_set(record.get("east", ())),
            south=_id_set(record.get("south", ())),
            west=_id_set(record.get("west", ())),
            allow_all_by_default=bool(record.get("allow_all_by_default", False)),
        )


def _id_set(value: Any) -> FrozenSet[str]:
    if isinstance(value, str):
        return frozenset({value})
    return frozenset(str(v) for v in value)


def compatible(tile_a: TileVariant, tile_b: TileVariant, direction: Direction) -> bool:
    """True if ``tile_b`` may be placed in ``direction`` from ``tile_a``, judged by ``tile_a``'s list only."""
    allowed = tile_a.allowed(direction)
    if not allowed:
        return tile_a.allow_all_by_default
    return WILDCARD in allowed or tile_b.tile_id in allowed


@dataclass(frozen=True)
class CatalogIssue:
    kind: str  # "unknown" or "asymmetric"
    biome: Biome
    tile_id: str
    direction: Direction
    other_id: str

    def describe(self) -> str:
        if self.kind == "unknown":
            return (
                f"{self.biome.name}: tile {self.tile_id!r} lists unknown tile {self.other_id!r} "
                f"to the {self.direction.name.lower()}"
            )
        return (
            f"{self.biome.name}: {self.tile_id!r} accepts {self.other_id!r} to the "
            f"{self.direction.name.lower()} but the reverse relation does not hold"
        )


class CatalogValidationError(ValueError):
    def __init__(self, issues: List[CatalogIssue]):
        self.issues = issues
        lines = "; ".join(issue.describe() for issue in issues[:5])
        more = f" (and {len(issues) - 5} more)" if len(issues) > 5 else ""
        super().__init__(f"Tile catalog has {len(issues)} issue(s): {lines}{more}")


class TileCatalog:
    """Biome-indexed, read-only collection of tile variants."""

    def __init__(self, tiles: Iterable[TileVariant]):
        by_biome: Dict[Biome, List[TileVariant]] = {}
        for tile in tiles:
            by_biome.setdefault(tile.biome, []).append(tile)
        for biome, variants in by_biome.items():
            seen = set()
            for tile in variants:
                if tile.tile_id in seen:
                    raise ValueError(f"Duplicate tile id {tile.tile_id!r} in biome {biome.name}")
                seen.add(tile.tile_id)
        self._by_biome: Mapping[Biome, Tuple[TileVariant, ...]] = MappingProxyType(
            {biome: tuple(variants) for biome, variants in by_biome.items()}
        )

    @classmethod
    def from_records(cls, records: Iterable[Mapping[str, Any]]) -> "TileCatalog":
        return cls(TileVariant.from_dict(record) for record in records)

    def tiles_for_biome(self, biome: Biome) -> Tuple[TileVariant, ...]:
        return self._by_biome.get(biome, ())

    def biomes(self) -> Tuple[Biome, ...]:
        return tuple(biome for biome in Biome if self._by_biome.get(biome))

    def variant(self, biome: Biome, tile_id: str) -> TileVariant:
        for tile in self.tiles_for_biome(biome):
            if tile.tile_id == tile_id:
                return tile
        raise KeyError(f"No tile {tile_id!r} in biome {biome.name}")

    def validate(self, biome: Biome) -> List[CatalogIssue]:
        tiles = self.tiles_for_biome(biome)
        known = {tile.tile_id for tile in tiles}
        issues: List[CatalogIssue] = []
        for tile in tiles:
            for direction in Direction:
                for other_id in sorted(tile.allowed(direction) - known - {WILDCARD}):
                    issues.append(CatalogIssue("unknown", biome, tile.tile_id, direction, other_id))
        for tile_a in tiles:
            for tile_b in tiles:
                for direction in Direction:
                    if compatible(tile_a, tile_b, direction) and not compatible(tile_b, tile_a, direction.opposite):
                        issues.append(CatalogIssue("asymmetric", biome, tile_a.tile_id, direction, tile_b.tile_id))
        return issues

    def __len__(self) -> int:
        return sum(len(tiles) for tiles in self._by_biome.values())


def check_catalog(catalog: TileCatalog, biome: Biome, strict: bool = False) -> List[CatalogIssue]:
    """Validate one biome; raise in strict mode, otherwise warn and carry on."""
    issues = catalog.validate(biome)
    if issues and strict:
        raise CatalogValidationError(issues)
    for issue in issues:
        logger.warning("Tile catalog: %s", issue.describe())
    return issues


def variants_by_id(tiles: Iterable[TileVariant]) -> Dict[str, TileVariant]:
    return {tile.tile_id: tile for tile in tiles}
