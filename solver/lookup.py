"""Working set of grid positions worth probing for the next placement."""

from __future__ import annotations

from bisect import insort
from typing import Iterator, List, Optional, Set

from config import CFG
from models import Pos
from solver.grid import Cell, GridState, PlacedInBounds


class LookupCache:
    """Row-major positions that may still anchor a tetra.

    Contract: every Empty cell of the grid is present whenever the search asks.
    Occupied cells may linger between rebuilds; they only cost a failed probe.
    Filling never breaks the contract, so the cache is only narrowed to the
    Empty cells once per ``each`` stacked tetras. Unfilling re-admits the freed
    cells in row-major position.
    """

    def __init__(self, grid: GridState, each: Optional[int] = None) -> None:
        if each is None:
            each = int(getattr(CFG, "CACHE_EACH_TETRAS", 4))
        self.each = max(1, int(each))
        self.positions: List[Pos] = []
        self._members: Set[Pos] = set()
        self.rebuilds = 0
        self.rebuild(grid)

    def __iter__(self) -> Iterator[Pos]:
        return iter(self.positions)

    def __len__(self) -> int:
        return len(self.positions)

    def __contains__(self, pos: object) -> bool:
        return pos in self._members

    def rebuild(self, grid: GridState) -> None:
        self.positions = list(grid.iter_positions(Cell.EMPTY))
        self._members = set(self.positions)
        self.rebuilds += 1

    def after_fill(self, grid: GridState, depth: int) -> None:
        if depth % self.each == 0:
            self.rebuild(grid)

    def after_unfill(self, grid: GridState, placement: PlacedInBounds) -> None:
        for pos in placement.iter_cells():
            if pos not in self._members:
                insort(self.positions, pos)
                self._members.add(pos)

    def missing(self, grid: GridState) -> List[Pos]:
        """Empty cells absent from the cache; always empty for a correct search."""
        return [pos for pos in grid.iter_positions(Cell.EMPTY) if pos not in self._members]
