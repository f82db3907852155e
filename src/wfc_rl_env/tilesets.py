from __future__ import annotations

from typing import Dict, FrozenSet, List, Tuple

from .catalog import Biome, TileCatalog, TileType, TileVariant

# tile_id -> (tile type, base weight, tiles allowed on every side)
_BiomeTable = Dict[str, Tuple[TileType, float, FrozenSet[str]]]

_GRASSLAND: _BiomeTable = {
    "grass": (TileType.GRASS, 3.0, frozenset({"grass", "meadow", "path", "pond", "rock"})),
    "meadow": (TileType.GRASS, 1.5, frozenset({"grass", "meadow", "path"})),
    "path": (TileType.PATH, 1.0, frozenset({"grass", "meadow", "path"})),
    "pond": (TileType.WATER, 0.5, frozenset({"grass", "pond"})),
    "rock": (TileType.IMPASSABLE, 0.4, frozenset({"grass", "rock"})),
}

_DESERT: _BiomeTable = {
    "sand": (TileType.SAND, 3.0, frozenset({"sand", "dune", "oasis", "cactus", "track"})),
    "dune": (TileType.SAND, 1.5, frozenset({"sand", "dune"})),
    "oasis": (TileType.WATER, 0.3, frozenset({"sand"})),
    "cactus": (TileType.IMPASSABLE, 0.6, frozenset({"sand", "cactus"})),
    "track": (TileType.PATH, 0.8, frozenset({"sand", "track"})),
}

_FOREST: _BiomeTable = {
    "forest_floor": (
        TileType.GRASS,
        2.5,
        frozenset({"forest_floor", "trees", "trail", "clearing", "stream"}),
    ),
    "trees": (TileType.IMPASSABLE, 2.0, frozenset({"forest_floor", "trees"})),
    "trail": (TileType.PATH, 0.8, frozenset({"forest_floor", "trail", "clearing"})),
    "clearing": (TileType.GRASS, 0.7, frozenset({"forest_floor", "trail", "clearing"})),
    "stream": (TileType.WATER, 0.5, frozenset({"forest_floor", "stream"})),
}

_CITY: _BiomeTable = {
    "pavement": (TileType.PATH, 2.0, frozenset({"pavement", "road", "building", "plaza", "park"})),
    "road": (TileType.PATH, 2.0, frozenset({"pavement", "road"})),
    "building": (TileType.IMPASSABLE, 1.5, frozenset({"pavement", "building"})),
    "plaza": (TileType.STONE, 0.6, frozenset({"pavement", "plaza"})),
    "park": (TileType.GRASS, 0.5, frozenset({"pavement", "park"})),
}


def _biome_tiles(biome: Biome, table: _BiomeTable) -> List[TileVariant]:
    return [
        TileVariant(
            tile_id=tile_id,
            biome=biome,
            tile_type=tile_type,
            weight=weight,
            north=neighbors,
            east=neighbors,
            south=neighbors,
            west=neighbors,
        )
        for tile_id, (tile_type, weight, neighbors) in table.items()
    ]


def default_tiles() -> List[TileVariant]:
    """Built-in tile set for four biomes.

    Each biome has one filler tile that accepts every other tile on all sides,
    and every relation is listed on both tiles, so these sets validate clean
    and never contradict under the OPEN, CONTINUOUS, SPARSE or WALLED layouts.
    """
    tiles: List[TileVariant] = []
    tiles.extend(_biome_tiles(Biome.GRASSLAND, _GRASSLAND))
    tiles.extend(_biome_tiles(Biome.DESERT, _DESERT))
    tiles.extend(_biome_tiles(Biome.FOREST, _FOREST))
    tiles.extend(_biome_tiles(Biome.CITY, _CITY))
    return tiles


def default_catalog() -> TileCatalog:
    return TileCatalog(default_tiles())
