from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import TYPE_CHECKING, Iterable, Iterator, List, Mapping, Optional, Tuple

import numpy as np

if TYPE_CHECKING:
    from .catalog import TileVariant


class Direction(Enum):
    NORTH = auto()
    EAST = auto()
    SOUTH = auto()
    WEST = auto()

    @property
    def delta(self) -> Tuple[int, int]:
        # (dx, dy); y grows downward in row-major layout.
        if self == Direction.NORTH:
            return (0, -1)
        if self == Direction.SOUTH:
            return (0, 1)
        if self == Direction.EAST:
            return (1, 0)
        return (-1, 0)

    @property
    def opposite(self) -> "Direction":
        opposite_map = {
            Direction.NORTH: Direction.SOUTH,
            Direction.SOUTH: Direction.NORTH,
            Direction.EAST: Direction.WEST,
            Direction.WEST: Direction.EAST,
        }
        return opposite_map[self]


@dataclass
class Cell:
    x: int
    y: int
    candidates: List[str] = field(default_factory=list)
    collapsed: bool = False
    tile_id: Optional[str] = None

    @property
    def entropy(self) -> int:
        return 0 if self.collapsed else len(self.candidates)

    def position(self) -> Tuple[int, int]:
        return (self.x, self.y)

    def collapse(self, tile_id: str) -> None:
        if self.collapsed:
            raise ValueError(f"Cell ({self.x}, {self.y}) is already collapsed to {self.tile_id!r}")
        if tile_id not in self.candidates:
            raise ValueError(f"{tile_id!r} is not a candidate of cell ({self.x}, {self.y})")
        self.candidates = [tile_id]
        self.tile_id = tile_id
        self.collapsed = True

    def restrict(self, allowed: Iterable[str]) -> bool:
        """Keep only candidates in ``allowed``; return True if anything was removed."""
        if self.collapsed:
            return False
        allowed_set = allowed if isinstance(allowed, (set, frozenset)) else set(allowed)
        kept = [tile_id for tile_id in self.candidates if tile_id in allowed_set]
        if len(kept) == len(self.candidates):
            return False
        self.candidates = kept
        return True


class Grid:
    """Row-major ``width`` x ``height`` array of cells sharing one candidate universe."""

    def __init__(self, width: int, height: int, candidates: Iterable[str] = ()):
        if width < 1 or height < 1:
            raise ValueError(f"Grid width and height must be at least 1, got {width}x{height}")
        self.width = width
        self.height = height
        universe = list(candidates)
        self.cells: List[Cell] = [
            Cell(x=x, y=y, candidates=list(universe)) for y in range(height) for x in range(width)
        ]

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def is_border(self, x: int, y: int) -> bool:
        return x in (0, self.width - 1) or y in (0, self.height - 1)

    def cell(self, x: int, y: int) -> Cell:
        if not self.in_bounds(x, y):
            raise IndexError(f"({x}, {y}) is outside a {self.width}x{self.height} grid")
        return self.cells[y * self.width + x]

    def neighbors(self, x: int, y: int) -> Iterator[Tuple[Direction, Cell]]:
        for direction in Direction:
            dx, dy = direction.delta
            nx, ny = x + dx, y + dy
            if self.in_bounds(nx, ny):
                yield direction, self.cells[ny * self.width + nx]

    def __iter__(self) -> Iterator[Cell]:
        return iter(self.cells)

    def __len__(self) -> int:
        return len(self.cells)

    def uncollapsed(self) -> List[Cell]:
        return [cell for cell in self.cells if not cell.collapsed]

    def collapsed_count(self) -> int:
        return sum(1 for cell in self.cells if cell.collapsed)

    def is_complete(self) -> bool:
        return all(cell.collapsed for cell in self.cells)


@dataclass(frozen=True)
class CellState:
    x: int
    y: int
    candidates: Tuple[str, ...]
    collapsed: bool
    tile_id: Optional[str]

    @classmethod
    def of(cls, cell: Cell) -> "CellState":
        return cls(
            x=cell.x,
            y=cell.y,
            candidates=tuple(cell.candidates),
            collapsed=cell.collapsed,
            tile_id=cell.tile_id,
        )


class GridView:
    """Read-only view over a session grid for renderers, trainers and pathfinding.

    Every accessor returns immutable snapshots or fresh numpy arrays, so the
    caller never holds a reference to a live ``Cell``.
    """

    def __init__(self, grid: Grid, variants: Mapping[str, "TileVariant"]):
        self._grid = grid
        self._variants = variants

    @property
    def width(self) -> int:
        return self._grid.width

    @property
    def height(self) -> int:
        return self._grid.height

    def cell(self, x: int, y: int) -> CellState:
        return CellState.of(self._grid.cell(x, y))

    def __iter__(self) -> Iterator[CellState]:
        return (CellState.of(cell) for cell in self._grid)

    def __len__(self) -> int:
        return len(self._grid)

    def snapshot(self) -> Tuple[CellState, ...]:
        return tuple(self)

    def tile_ids(self) -> np.ndarray:
        out = np.full((self.height, self.width), None, dtype=object)
        for cell in self._grid:
            if cell.collapsed:
                out[cell.y, cell.x] = cell.tile_id
        return out

    def candidate_counts(self) -> np.ndarray:
        out = np.zeros((self.height, self.width), dtype=np.int32)
        for cell in self._grid:
            out[cell.y, cell.x] = len(cell.candidates)
        return out

    def collapsed_mask(self) -> np.ndarray:
        out = np.zeros((self.height, self.width), dtype=bool)
        for cell in self._grid:
            out[cell.y, cell.x] = cell.collapsed
        return out

    def walkable_mask(self) -> np.ndarray:
        """True where the cell is collapsed to a walkable tile."""
        out = np.zeros((self.height, self.width), dtype=bool)
        for cell in self._grid:
            if cell.collapsed:
                out[cell.y, cell.x] = self._variants[cell.tile_id].walkable
        return out
