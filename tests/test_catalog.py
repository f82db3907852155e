import logging
import pathlib
import sys

import pytest

ROOT = pathlib.Path(__file__).resolve().parents[1]
sys.path.append(str(ROOT / "src"))

from wfc_rl_env import (  # noqa: E402
    WILDCARD,
    Biome,
    CatalogValidationError,
    Direction,
    TileCatalog,
    TileType,
    TileVariant,
    compatible,
    default_catalog,
)
from wfc_rl_env.catalog import check_catalog  # noqa: E402


def _tile(tile_id, biome=Biome.GRASSLAND, **kwargs):
    return TileVariant(tile_id=tile_id, biome=biome, **kwargs)


def test_compatible_is_direction_specific_and_one_sided():
    a = _tile("a", east={"b"})
    b = _tile("b")
    assert compatible(a, b, Direction.EAST)
    assert not compatible(a, b, Direction.WEST)
    # b's own (empty) list is never inferred from a's.
    assert not compatible(b, a, Direction.WEST)


def test_wildcard_and_allow_all_by_default():
    anything = _tile("any", north={WILDCARD})
    open_default = _tile("open", allow_all_by_default=True)
    other = _tile("other")
    assert compatible(anything, other, Direction.NORTH)
    assert not compatible(anything, other, Direction.SOUTH)
    for direction in Direction:
        assert compatible(open_default, other, direction)


def test_tiles_for_biome_filters_and_keeps_order():
    tiles = [
        _tile("g1"),
        _tile("d1", biome=Biome.DESERT),
        _tile("g2"),
        _tile("d2", biome=Biome.DESERT),
        _tile("g3"),
    ]
    catalog = TileCatalog(tiles)
    assert [t.tile_id for t in catalog.tiles_for_biome(Biome.GRASSLAND)] == ["g1", "g2", "g3"]
    assert [t.tile_id for t in catalog.tiles_for_biome(Biome.DESERT)] == ["d1", "d2"]
    assert catalog.tiles_for_biome(Biome.OCEAN) == ()
    assert catalog.biomes() == (Biome.GRASSLAND, Biome.DESERT)
    assert len(catalog) == 5
    assert catalog.variant(Biome.DESERT, "d2").tile_id == "d2"
    with pytest.raises(KeyError):
        catalog.variant(Biome.DESERT, "g1")


def test_invalid_tiles_are_rejected():
    with pytest.raises(ValueError):
        _tile("zero", weight=0.0)
    for bad in (float("inf"), float("-inf"), float("nan")):
        with pytest.raises(ValueError):
            _tile("bad", weight=bad)
    with pytest.raises(ValueError):
        TileVariant.from_dict({"id": "huge", "biome": "grassland", "weight": "inf"})
    with pytest.raises(ValueError):
        TileCatalog([_tile("dup"), _tile("dup")])


def test_from_records_parses_plain_dicts():
    catalog = TileCatalog.from_records(
        [
            {"id": "road", "biome": "city", "type": "path", "weight": 2.0, "north": ["road"], "south": ["*"]},
            {"id": "lot", "biome": Biome.CITY, "allow_all_by_default": True},
        ]
    )
    road, lot = catalog.tiles_for_biome(Biome.CITY)
    assert road.tile_type == TileType.PATH
    assert road.weight == 2.0
    assert road.north == frozenset({"road"})
    assert compatible(road, lot, Direction.SOUTH)
    assert not compatible(road, lot, Direction.NORTH)
    assert lot.allow_all_by_default
    assert lot.tile_type == TileType.GRASS


def test_validate_reports_unknown_and_asymmetric_pairs():
    catalog = TileCatalog(
        [
            _tile("a", north={"a"}, south={"a"}, east={"a", "b"}, west={"a", "ghost"}),
            _tile("b", north={"b"}, south={"b"}, east={"b"}, west={"b"}),
        ]
    )
    issues = catalog.validate(Biome.GRASSLAND)
    kinds = {(i.kind, i.tile_id, i.direction, i.other_id) for i in issues}
    assert ("unknown", "a", Direction.WEST, "ghost") in kinds
    # a accepts b to the east, b does not accept a to the west.
    assert ("asymmetric", "a", Direction.EAST, "b") in kinds
    assert len(issues) == 2


def test_check_catalog_strict_raises_and_lenient_warns(caplog):
    catalog = TileCatalog([_tile("a", east={"b"}), _tile("b")])
    with pytest.raises(CatalogValidationError) as excinfo:
        check_catalog(catalog, Biome.GRASSLAND, strict=True)
    assert len(excinfo.value.issues) == 1
    assert isinstance(excinfo.value, ValueError)

    with caplog.at_level(logging.WARNING):
        issues = check_catalog(catalog, Biome.GRASSLAND, strict=False)
    assert len(issues) == 1
    assert "reverse relation" in caplog.text


def test_default_catalog_validates_clean():
    catalog = default_catalog()
    assert set(catalog.biomes()) == {Biome.GRASSLAND, Biome.DESERT, Biome.FOREST, Biome.CITY}
    for biome in catalog.biomes():
        assert catalog.validate(biome) == []
        types = {t.tile_type for t in catalog.tiles_for_biome(biome)}
        assert TileType.IMPASSABLE in types
        assert TileType.PATH in types
