import pytest

from models import Configuration, ConfigurationError, Pos, Size
from solver.grid import Cell, GridState, validate_placement
from tetras import I_HORIZONTAL, T_LOOK_LEFT, TETRAS


def test_left_reaching_tetra_needs_room_left_of_anchor():
    bounds = Size(3, 3)
    assert validate_placement(T_LOOK_LEFT, Pos(0, 0), bounds) is None
    placed = validate_placement(T_LOOK_LEFT, Pos(0, 1), bounds)
    assert placed is not None
    assert set(placed.iter_cells()) == {Pos(0, 1), Pos(1, 0), Pos(1, 1), Pos(2, 1)}


def test_placement_must_fit_right_and_bottom_edges():
    assert validate_placement(I_HORIZONTAL, Pos(0, 0), Size(3, 3)) is None
    assert validate_placement(I_HORIZONTAL, Pos(0, 0), Size(4, 4)) is not None
    assert validate_placement(I_HORIZONTAL, Pos(0, 1), Size(4, 4)) is None
    assert validate_placement(T_LOOK_LEFT, Pos(1, 1), Size(3, 3)) is None
    assert validate_placement(T_LOOK_LEFT, Pos(0, 2), Size(3, 3)) is not None


def test_validation_is_deterministic():
    bounds = Size(5, 5)
    for tetra in TETRAS:
        for row in range(5):
            for col in range(5):
                first = validate_placement(tetra, Pos(row, col), bounds)
                second = validate_placement(tetra, Pos(row, col), bounds)
                assert first == second


def test_validated_cells_stay_inside_bounds():
    bounds = Size(4, 5)
    for tetra in TETRAS:
        for row in range(4):
            for col in range(5):
                placed = validate_placement(tetra, Pos(row, col), bounds)
                if placed is None:
                    continue
                cells = list(placed.iter_cells())
                assert Pos(row, col) in cells
                assert all(bounds.contains(p) for p in cells)


def test_grid_counts_blocked_cells_once():
    grid = GridState(Size(3, 3), [Pos(0, 0), Pos(0, 0), Pos(2, 2)])
    assert grid.unavailable == 2
    assert grid.free == 7
    assert grid[Pos(0, 0)] is Cell.UNAVAILABLE
    assert grid[Pos(1, 1)] is Cell.EMPTY


def test_grid_rejects_blocker_outside():
    with pytest.raises(ConfigurationError):
        GridState(Size(2, 2), [Pos(2, 0)])


def test_fill_and_unfill_keep_cell_totals():
    grid = GridState(Size(4, 4), [Pos(3, 3)])
    area = grid.size.area
    placed = validate_placement(T_LOOK_LEFT, Pos(0, 1), grid.size)
    assert grid.fits(placed)

    grid.fill(placed)
    assert grid.free == 11
    assert grid.occupied == 4
    assert grid.free + grid.occupied + grid.unavailable == area
    assert grid[Pos(1, 0)] is Cell.OCCUPIED
    assert not grid.fits(placed)

    grid.unfill(placed)
    assert grid.free == 15
    assert grid.occupied == 0
    assert grid.unavailable == 1
    assert list(grid.iter_positions(Cell.OCCUPIED)) == []


def test_fits_rejects_unavailable_cells():
    grid = GridState(Size(2, 4), [Pos(0, 3)])
    placed = validate_placement(I_HORIZONTAL, Pos(0, 0), grid.size)
    assert placed is not None
    assert not grid.fits(placed)


def test_invariant_checks_catch_double_fill(monkeypatch):
    from config import CFG

    monkeypatch.setattr(CFG, "CHECK_INVARIANTS", True)
    grid = GridState(Size(2, 2))
    placed = validate_placement(TETRAS[0], Pos(0, 0), grid.size)
    grid.fill(placed)
    with pytest.raises(AssertionError):
        grid.fill(placed)


def test_iter_positions_is_row_major():
    grid = GridState(Size(2, 3), [Pos(0, 1)])
    assert list(grid.iter_positions(Cell.EMPTY)) == [
        Pos(0, 0), Pos(0, 2), Pos(1, 0), Pos(1, 1), Pos(1, 2),
    ]


def test_configuration_validation():
    with pytest.raises(ConfigurationError):
        Configuration((0, 3))
    with pytest.raises(ConfigurationError):
        Configuration((3, 3), [(3, 0)])
    with pytest.raises(ConfigurationError):
        Configuration((3, 3), results_limit=0)

    config = Configuration((3, 3), [(1, 1), Pos(1, 1)], results_limit=2)
    assert config.unavailable == frozenset({Pos(1, 1)})
    assert config.usable_cells == 8
    assert config.min_free_cells == 0
    assert config.with_results_limit(None).results_limit is None
    assert config == Configuration(Size(3, 3), [(1, 1)], 2)
