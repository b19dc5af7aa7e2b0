import random

import pytest

from models import Configuration, Pos, Size
from solver.grid import Cell, GridState
from solver.lookup import LookupCache
from solver.search import SearchEngine
from tetras import I_HORIZONTAL, TETRAS


def test_initial_cache_is_every_usable_cell_in_row_major_order():
    grid = GridState(Size(3, 3), [Pos(1, 1)])
    cache = LookupCache(grid, each=4)
    assert len(cache) == 8
    assert cache.positions == sorted(cache.positions)
    assert Pos(1, 1) not in cache
    assert cache.missing(grid) == []


def test_cache_narrows_on_schedule_and_readmits_freed_cells():
    engine = SearchEngine(Configuration((8, 8)), cache_each=4)
    cache = engine.cache

    for _ in range(3):
        engine.fill_and_push(engine.find_any_fit_for(I_HORIZONTAL))
    assert len(cache) == 64

    engine.fill_and_push(engine.find_any_fit_for(I_HORIZONTAL))
    assert len(cache) == 48

    engine.fill_and_push(engine.find_any_fit_for(I_HORIZONTAL))
    assert len(cache) == 48
    assert cache.missing(engine.grid) == []

    engine.pop_and_clear()
    assert len(cache) == 48
    engine.pop_and_clear()
    assert len(cache) == 52
    assert cache.positions == sorted(cache.positions)
    assert cache.missing(engine.grid) == []


@pytest.mark.parametrize("each", [1, 2, 3, 4, 7])
@pytest.mark.parametrize("seed", [0, 1, 2])
def test_cache_never_loses_an_empty_cell(each, seed):
    rng = random.Random(seed)
    engine = SearchEngine(Configuration((6, 7), [(2, 3), (5, 0)]), cache_each=each)
    grid = engine.grid
    area = grid.size.area

    for _ in range(300):
        if engine.stack and rng.random() < 0.45:
            engine.pop_and_clear()
        else:
            placement = engine.find_any_fit_for(rng.choice(TETRAS))
            if placement is not None:
                engine.fill_and_push(placement)
        assert engine.cache.missing(grid) == []
        assert engine.cache.positions == sorted(engine.cache.positions)
        assert grid.free + grid.occupied + grid.unavailable == area

    while engine.stack:
        engine.pop_and_clear()
    assert grid.free == area - 2
    assert set(engine.cache) >= set(grid.iter_positions(Cell.EMPTY))
