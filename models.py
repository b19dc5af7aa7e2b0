from __future__ import annotations

from dataclasses import dataclass
from typing import FrozenSet, Iterable, Optional, Tuple, Union


class ConfigurationError(ValueError):
    """Raised for a field that cannot be searched (bad size, cap or blockers)."""


@dataclass(frozen=True, order=True)
class Pos:
    row: int
    col: int

    def __str__(self) -> str:
        return f"({self.row}, {self.col})"

    def as_list(self):
        return [self.row, self.col]


@dataclass(frozen=True)
class Size:
    rows: int
    cols: int

    @property
    def area(self) -> int:
        return self.rows * self.cols

    def contains(self, pos: Pos) -> bool:
        return 0 <= pos.row < self.rows and 0 <= pos.col < self.cols

    def __str__(self) -> str:
        return f"{self.rows} × {self.cols}"


PosLike = Union[Pos, Tuple[int, int]]


def as_pos(value: PosLike) -> Pos:
    if isinstance(value, Pos):
        return value
    row, col = value
    return Pos(int(row), int(col))


def as_size(value: Union[Size, Tuple[int, int]]) -> Size:
    if isinstance(value, Size):
        return value
    rows, cols = value
    return Size(int(rows), int(cols))


class Configuration:
    """Grid size, permanently blocked cells and an optional result cap.

    Duplicate blockers collapse. Every check happens here so a search never
    starts on a field it cannot handle.
    """

    def __init__(
        self,
        size: Union[Size, Tuple[int, int]],
        unavailable: Iterable[PosLike] = (),
        results_limit: Optional[int] = None,
    ) -> None:
        size = as_size(size)
        if size.rows < 1 or size.cols < 1:
            raise ConfigurationError(f"grid must have at least one cell, got {size}")

        blocked = frozenset(as_pos(p) for p in unavailable)
        outside = sorted(p for p in blocked if not size.contains(p))
        if outside:
            listed = ", ".join(str(p) for p in outside[:5])
            raise ConfigurationError(f"blocked positions outside {size} grid: {listed}")

        if results_limit is not None:
            results_limit = int(results_limit)
            if results_limit <= 0:
                raise ConfigurationError("results limit must be a positive integer")

        self.size: Size = size
        self.unavailable: FrozenSet[Pos] = blocked
        self.results_limit: Optional[int] = results_limit

    def with_results_limit(self, limit: Optional[int]) -> "Configuration":
        return Configuration(self.size, self.unavailable, limit)

    @property
    def usable_cells(self) -> int:
        return self.size.area - len(self.unavailable)

    @property
    def min_free_cells(self) -> int:
        return self.usable_cells % 4

    def run(self, stats=None, *, rng=None, policy=None):
        from solver.search import SearchEngine
        return SearchEngine(self, stats=stats, rng=rng, policy=policy).run()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Configuration):
            return NotImplemented
        return (
            self.size == other.size
            and self.unavailable == other.unavailable
            and self.results_limit == other.results_limit
        )

    def __hash__(self) -> int:
        return hash((self.size, self.unavailable, self.results_limit))

    def __repr__(self) -> str:
        return (
            f"Configuration(size={self.size.rows}x{self.size.cols}, "
            f"unavailable={len(self.unavailable)}, results_limit={self.results_limit})"
        )
