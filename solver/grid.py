"""Grid state and the bounds check that turns a tetra + anchor into a placement."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Iterable, Iterator, Optional, Tuple

from config import CFG
from models import ConfigurationError, Pos, Size
from tetras import Tetra


class Cell(IntEnum):
    EMPTY = 0
    UNAVAILABLE = 1
    OCCUPIED = 2


@dataclass(frozen=True)
class PlacedTetra:
    tetra: Tetra
    position: Pos


@dataclass(frozen=True)
class PlacedInBounds:
    """A :class:`PlacedTetra` known to lie inside some grid.

    Only instances produced by :func:`validate_placement` should exist; the
    absolute cells are only meaningful once the bounds were checked.
    """

    placed: PlacedTetra

    @property
    def tetra(self) -> Tetra:
        return self.placed.tetra

    @property
    def position(self) -> Pos:
        return self.placed.position

    def iter_cells(self) -> Iterator[Pos]:
        tetra = self.placed.tetra
        anchor = self.placed.position
        for offset in tetra.positions:
            yield Pos(anchor.row + offset.row, anchor.col + offset.col - tetra.col_shift)


def validate_placement(tetra: Tetra, anchor: Pos, bounds: Size) -> Optional[PlacedInBounds]:
    """Return the placement if ``tetra`` at ``anchor`` stays inside ``bounds``.

    Pure arithmetic; whether the covered cells are free is the caller's concern.
    """
    shift = tetra.col_shift
    if (
        shift > anchor.col
        or anchor.col + tetra.size.cols - shift > bounds.cols
        or anchor.row + tetra.size.rows > bounds.rows
    ):
        return None
    return PlacedInBounds(PlacedTetra(tetra, anchor))


class GridState:
    """Row-major cell bytes plus the free-cell count.

    ``free + occupied + unavailable`` always equals the grid area and the
    unavailable count is fixed at construction.
    """

    def __init__(self, size: Size, unavailable: Iterable[Pos] = ()) -> None:
        if size.rows < 1 or size.cols < 1:
            raise ConfigurationError(f"grid must have at least one cell, got {size}")

        self.size = size
        self.cells = bytearray(size.area)
        self.free = size.area
        self.unavailable = 0
        self._check = bool(getattr(CFG, "CHECK_INVARIANTS", False))

        for pos in unavailable:
            if not size.contains(pos):
                raise ConfigurationError(f"blocked position {pos} is outside {size} grid")
            idx = self.index(pos)
            if self.cells[idx] == Cell.UNAVAILABLE:
                continue
            self.cells[idx] = Cell.UNAVAILABLE
            self.unavailable += 1
            self.free -= 1

    def index(self, pos: Pos) -> int:
        return pos.row * self.size.cols + pos.col

    def indices(self, placement: PlacedInBounds) -> Tuple[int, ...]:
        return tuple(self.index(p) for p in placement.iter_cells())

    def __getitem__(self, pos: Pos) -> Cell:
        return Cell(self.cells[self.index(pos)])

    @property
    def occupied(self) -> int:
        return self.size.area - self.free - self.unavailable

    def fits(self, placement: PlacedInBounds) -> bool:
        cells = self.cells
        return all(cells[i] == Cell.EMPTY for i in self.indices(placement))

    def fill(self, placement: PlacedInBounds) -> None:
        cells = self.cells
        for i in self.indices(placement):
            if self._check and cells[i] != Cell.EMPTY:
                raise AssertionError(f"fill over non-empty cell {divmod(i, self.size.cols)}")
            cells[i] = Cell.OCCUPIED
            self.free -= 1

    def unfill(self, placement: PlacedInBounds) -> None:
        cells = self.cells
        for i in self.indices(placement):
            if self._check and cells[i] != Cell.OCCUPIED:
                raise AssertionError(f"unfill of non-occupied cell {divmod(i, self.size.cols)}")
            cells[i] = Cell.EMPTY
            self.free += 1

    def iter_positions(self, *kinds: Cell) -> Iterator[Pos]:
        """Row-major positions, optionally restricted to the given cell kinds."""
        cols = self.size.cols
        for idx, cell in enumerate(self.cells):
            if not kinds or cell in kinds:
                yield Pos(*divmod(idx, cols))

    def __repr__(self) -> str:
        glyph = {Cell.EMPTY: "-", Cell.UNAVAILABLE: "x", Cell.OCCUPIED: "+"}
        cols = self.size.cols
        rows = [
            "".join(glyph[Cell(c)] for c in self.cells[r * cols:(r + 1) * cols])
            for r in range(self.size.rows)
        ]
        return "GridState(\n  " + "\n  ".join(rows) + "\n)"
