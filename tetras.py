# tetras.py — fixed catalog of tetromino orientations
from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from models import Pos, Size


@dataclass(frozen=True)
class Tetra:
    """One orientation of a tetromino.

    ``positions`` are non-negative offsets from the anchor; ``col_shift`` is how
    far the shape reaches left of its anchor column, so the absolute cell of an
    offset is ``anchor + offset - (0, col_shift)``.
    """

    positions: Tuple[Pos, Pos, Pos, Pos]
    size: Size
    col_shift: int


def _tetra(cells: Tuple[Tuple[int, int], ...], col_shift: int) -> Tetra:
    rows, cols = 1, 1
    for row, col in cells:
        rows = max(rows, row + 1)
        cols = max(cols, col + 1)
    return Tetra(
        positions=tuple(Pos(row, col) for row, col in cells),  # type: ignore[arg-type]
        size=Size(rows, cols),
        col_shift=col_shift,
    )


# O, I (2), T (4), L (4), J (4), S (2), Z (2)
TETRAS: Tuple[Tetra, ...] = (
    _tetra(((0, 0), (0, 1), (1, 0), (1, 1)), 0),
    _tetra(((0, 0), (0, 1), (0, 2), (0, 3)), 0),
    _tetra(((0, 0), (1, 0), (2, 0), (3, 0)), 0),
    _tetra(((0, 0), (0, 1), (0, 2), (1, 1)), 0),
    _tetra(((0, 0), (1, 0), (1, 1), (2, 0)), 0),
    _tetra(((0, 1), (1, 0), (1, 1), (1, 2)), 1),
    _tetra(((0, 1), (1, 0), (1, 1), (2, 1)), 1),
    _tetra(((0, 0), (0, 1), (0, 2), (1, 0)), 0),
    _tetra(((0, 0), (1, 0), (2, 0), (2, 1)), 0),
    _tetra(((0, 2), (1, 0), (1, 1), (1, 2)), 2),
    _tetra(((0, 0), (0, 1), (1, 1), (2, 1)), 0),
    _tetra(((0, 0), (0, 1), (0, 2), (1, 2)), 0),
    _tetra(((0, 1), (1, 1), (2, 0), (2, 1)), 1),
    _tetra(((0, 0), (1, 0), (1, 1), (1, 2)), 0),
    _tetra(((0, 0), (0, 1), (1, 0), (2, 0)), 0),
    _tetra(((0, 1), (0, 2), (1, 0), (1, 1)), 1),
    _tetra(((0, 0), (1, 0), (1, 1), (2, 1)), 0),
    _tetra(((0, 0), (0, 1), (1, 1), (1, 2)), 0),
    _tetra(((0, 1), (1, 0), (1, 1), (2, 0)), 1),
)

TETRAS_COUNT = len(TETRAS)

I_HORIZONTAL = TETRAS[1]
T_LOOK_LEFT = TETRAS[6]

_INDEX: Dict[Tetra, int] = {tetra: idx for idx, tetra in enumerate(TETRAS)}


def tetra_index(tetra: Tetra) -> int:
    """Catalog position of ``tetra``; raises ``KeyError`` for foreign shapes."""
    return _INDEX[tetra]


class Shuffler:
    """Yields skewed catalog orders for the randomized search.

    Every slot is drawn independently, so a shape can appear more than once
    and others not at all. The generator is injected to keep runs repeatable.
    """

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self.rng = rng if rng is not None else random.Random()

    def finite_indices(self) -> List[int]:
        return [self.rng.randrange(TETRAS_COUNT) for _ in range(TETRAS_COUNT)]

    def finite_iter(self) -> List[Tetra]:
        return [TETRAS[idx] for idx in self.finite_indices()]


__all__ = [
    "Tetra",
    "TETRAS",
    "TETRAS_COUNT",
    "I_HORIZONTAL",
    "T_LOOK_LEFT",
    "tetra_index",
    "Shuffler",
]
