from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Deque, Dict, FrozenSet, Iterable, Optional, Sequence, Set, Tuple

from .catalog import TileVariant, compatible
from .grid import Cell, Direction, Grid


@dataclass
class PropagationResult:
    contradiction: Optional[Tuple[int, int]] = None
    narrowed: int = 0

    @property
    def ok(self) -> bool:
        return self.contradiction is None


class PropagationEngine:
    """Breadth-first constraint narrowing over a grid of candidate sets.

    ``support[direction][s]`` holds every tile ``t`` that may sit in
    ``direction`` from ``s``. Both tiles are asked from their own side: ``s``
    must accept ``t`` and ``t`` must accept ``s`` in the opposite direction, so
    one-sided tile data never lets an unchecked pairing through.
    """

    def __init__(self, tiles: Sequence[TileVariant]):
        self.support: Dict[Direction, Dict[str, FrozenSet[str]]] = {}
        for direction in Direction:
            table: Dict[str, FrozenSet[str]] = {}
            for source in tiles:
                table[source.tile_id] = frozenset(
                    target.tile_id
                    for target in tiles
                    if compatible(source, target, direction) and compatible(target, source, direction.opposite)
                )
            self.support[direction] = table

    def allowed_next_to(self, candidates: Iterable[str], direction: Direction) -> Set[str]:
        """Union of tiles supported in ``direction`` by any of ``candidates``."""
        table = self.support[direction]
        allowed: Set[str] = set()
        for tile_id in candidates:
            allowed |= table.get(tile_id, frozenset())
        return allowed

    def propagate(self, grid: Grid, sources: Iterable[Cell]) -> PropagationResult:
        """Narrow neighbours of ``sources`` until nothing changes or a cell empties.

        On contradiction the grid is left exactly as narrowed so far.
        """
        result = PropagationResult()
        queue: Deque[Cell] = deque()
        queued: Set[Tuple[int, int]] = set()
        for cell in sources:
            if cell.position() not in queued:
                queue.append(cell)
                queued.add(cell.position())

        while queue:
            current = queue.popleft()
            queued.discard(current.position())
            for direction, neighbor in grid.neighbors(current.x, current.y):
                if neighbor.collapsed:
                    continue
                allowed = self.allowed_next_to(current.candidates, direction)
                if not neighbor.restrict(allowed):
                    continue
                result.narrowed += 1
                if not neighbor.candidates:
                    result.contradiction = neighbor.position()
                    return result
                if neighbor.position() not in queued:
                    queue.append(neighbor)
                    queued.add(neighbor.position())
        return result
