"""Depth-first tetra placement search.

Two traversal policies share one skeleton:

``Policy.EXHAUSTIVE``
    Tetras are tried in catalog order and every node whose free-cell count has
    reached the unavoidable remainder is recorded, before its children are
    explored. Nothing stops the search early. With pruning on, subtrees where
    too many Empty cells are already uncoverable are skipped; they hold no
    recordable node, so the results are the same either way.

``Policy.RANDOMIZED``
    Each node tries a skewed catalog order drawn by :class:`tetras.Shuffler`.
    Only dead ends (no tetra fits) with fewer free cells than the acceptance
    threshold are recorded; reaching the result cap halts the whole search.

Per tetra, the anchor is the first position in lookup-cache order where the
tetra stays inside the grid and covers only Empty cells.
"""

from __future__ import annotations

import logging
import math
import random
import sys
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, List, Optional, Tuple

from config import CFG
from models import Configuration, Pos
from solver.grid import Cell, GridState, PlacedInBounds, validate_placement
from solver.lookup import LookupCache
from tetras import TETRAS, TETRAS_COUNT, Shuffler, Tetra, tetra_index

LOGGER = logging.getLogger(__name__)

_Candidate = Tuple[PlacedInBounds, Tuple[int, ...]]


class CollectStats:
    """Instrumentation sink; both hooks are called synchronously by the search."""

    def recursions_inc(self) -> None:
        pass

    def results_inc(self) -> None:
        pass


class NullStats(CollectStats):
    pass


class CountingStats(CollectStats):
    def __init__(self) -> None:
        self.recursions = 0
        self.results = 0

    def recursions_inc(self) -> None:
        self.recursions += 1

    def results_inc(self) -> None:
        self.results += 1


@dataclass(frozen=True)
class PlacementResult:
    placement: Tuple[PlacedInBounds, ...]
    free: int

    def iter_cells(self) -> Iterator[Pos]:
        for placed in self.placement:
            yield from placed.iter_cells()

    def __len__(self) -> int:
        return len(self.placement)


class Policy(str, Enum):
    EXHAUSTIVE = "exhaustive"
    RANDOMIZED = "randomized"


class Flow(Enum):
    PROCEED = 0
    HALT = 1


def resolve_policy(configuration: Configuration, policy=None) -> Policy:
    if policy is None:
        return Policy.RANDOMIZED if configuration.results_limit else Policy.EXHAUSTIVE
    return Policy(policy)


class SearchEngine:
    """Owns the grid, lookup cache and placement stack of a single run."""

    def __init__(
        self,
        configuration: Configuration,
        *,
        stats: Optional[CollectStats] = None,
        rng: Optional[random.Random] = None,
        policy=None,
        cache_each: Optional[int] = None,
        prune: Optional[bool] = None,
    ) -> None:
        self.configuration = configuration
        self.policy = resolve_policy(configuration, policy)
        self.stats = stats if stats is not None else NullStats()
        self.limit = configuration.results_limit

        self.grid = GridState(configuration.size, configuration.unavailable)
        self.min_free_cells = (self.grid.size.area - self.grid.unavailable) % 4
        self.acceptance_threshold = math.isqrt(self.grid.free - self.min_free_cells)

        if rng is None and getattr(CFG, "RANDOM_SEED", None) is not None:
            rng = random.Random(CFG.RANDOM_SEED)
        if prune is None:
            prune = bool(getattr(CFG, "PRUNE_DEAD_CELLS", True))

        self.cache = LookupCache(self.grid, cache_each)
        self.shuffler = Shuffler(rng)
        self.stack: List[PlacedInBounds] = []
        self.results: List[PlacementResult] = []
        self.prune = prune
        self._check = bool(getattr(CFG, "CHECK_INVARIANTS", False))
        self._done = False
        self._anchors, self._covering = self._build_tables()

    def _build_tables(self) -> Tuple[List[List[Optional[_Candidate]]], List[List[Tuple[int, ...]]]]:
        """Per tetra and anchor index: the in-bounds placement and its cell indices.

        Placements touching an Unavailable cell can never fit and are left out.
        ``covering[i]`` lists the cell indices of every placement covering cell ``i``.
        """
        grid = self.grid
        bounds = grid.size
        anchors: List[List[Optional[_Candidate]]] = []
        covering: List[List[Tuple[int, ...]]] = [[] for _ in range(bounds.area)]
        for tetra in TETRAS:
            row: List[Optional[_Candidate]] = [None] * bounds.area
            for anchor in grid.iter_positions():
                placement = validate_placement(tetra, anchor, bounds)
                if placement is None:
                    continue
                indices = grid.indices(placement)
                if any(grid.cells[i] == Cell.UNAVAILABLE for i in indices):
                    continue
                row[grid.index(anchor)] = (placement, indices)
                for i in indices:
                    covering[i].append(indices)
            anchors.append(row)
        return anchors, covering

    # ---------- entry ----------

    def run(self) -> List[PlacementResult]:
        if self._done:
            raise RuntimeError("search engine already ran; build a new one")
        self._done = True

        depth_needed = self.grid.size.area // 4 + 100
        if sys.getrecursionlimit() < depth_needed * 2:
            sys.setrecursionlimit(depth_needed * 2)

        LOGGER.debug(
            "search start policy=%s grid=%s free=%d min_free=%d threshold=%d limit=%s",
            self.policy.value,
            self.grid.size,
            self.grid.free,
            self.min_free_cells,
            self.acceptance_threshold,
            self.limit,
        )
        if self.policy is Policy.EXHAUSTIVE:
            self._exhaustive()
        else:
            self._randomized()
        LOGGER.debug("search done results=%d", len(self.results))
        return self.results

    # ---------- policies ----------

    def _exhaustive(self) -> None:
        self.stats.recursions_inc()

        if self.grid.free == self.min_free_cells:
            self._record()

        if self.prune and self._uncoverable_exceeds(self.min_free_cells):
            return

        for idx in range(TETRAS_COUNT):
            placement = self._first_fit(idx)
            if placement is None:
                continue
            with self._placed(placement):
                self._exhaustive()

    def _randomized(self) -> Flow:
        self.stats.recursions_inc()

        was_any_fit = False
        for idx in self.shuffler.finite_indices():
            placement = self._first_fit(idx)
            if placement is None:
                continue
            was_any_fit = True
            with self._placed(placement):
                if self._randomized() is Flow.HALT:
                    return Flow.HALT

        if not was_any_fit and self.grid.free < self.acceptance_threshold:
            self._record()
            if self.limit is not None and len(self.results) >= self.limit:
                return Flow.HALT
        return Flow.PROCEED

    # ---------- probing ----------

    def find_any_fit_for(self, tetra: Tetra) -> Optional[PlacedInBounds]:
        """First placement of ``tetra`` in cache order covering only Empty cells."""
        return self._first_fit(tetra_index(tetra))

    def _first_fit(self, idx: int) -> Optional[PlacedInBounds]:
        row = self._anchors[idx]
        cells = self.grid.cells
        cols = self.grid.size.cols
        for pos in self.cache:
            candidate = row[pos.row * cols + pos.col]
            if candidate is None:
                continue
            a, b, c, d = candidate[1]
            if cells[a] or cells[b] or cells[c] or cells[d]:
                continue
            return candidate[0]
        return None

    def _uncoverable_exceeds(self, allowed: int) -> bool:
        """True once more than ``allowed`` Empty cells can no longer be covered.

        Occupancy only grows below this node, so such cells stay Empty in every
        descendant and none of them can reach ``min_free_cells``.
        """
        cells = self.grid.cells
        dead = 0
        for i, options in enumerate(self._covering):
            if cells[i]:
                continue
            for a, b, c, d in options:
                if not (cells[a] or cells[b] or cells[c] or cells[d]):
                    break
            else:
                dead += 1
                if dead > allowed:
                    return True
        return False

    # ---------- stack ----------

    def fill_and_push(self, placement: PlacedInBounds) -> None:
        self.grid.fill(placement)
        self.stack.append(placement)
        self.cache.after_fill(self.grid, len(self.stack))
        if self._check:
            self._verify_cache()

    def pop_and_clear(self) -> PlacedInBounds:
        if not self.stack:
            raise RuntimeError("pop from an empty placement stack")
        placement = self.stack.pop()
        self.grid.unfill(placement)
        self.cache.after_unfill(self.grid, placement)
        if self._check:
            self._verify_cache()
        return placement

    @contextmanager
    def _placed(self, placement: PlacedInBounds):
        self.fill_and_push(placement)
        try:
            yield
        finally:
            self.pop_and_clear()

    def _record(self) -> None:
        self.results.append(PlacementResult(tuple(self.stack), self.grid.free))
        self.stats.results_inc()

    def _verify_cache(self) -> None:
        missing = self.cache.missing(self.grid)
        if missing:
            raise AssertionError(f"lookup cache lost empty cells: {missing[:5]}")


__all__ = [
    "CollectStats",
    "NullStats",
    "CountingStats",
    "PlacementResult",
    "Policy",
    "SearchEngine",
    "resolve_policy",
]
