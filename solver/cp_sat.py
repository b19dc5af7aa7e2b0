"""CP-SAT probe for how many tetras a field can hold at best.

The probe answers a question the depth-first search cannot answer cheaply:
whether any packing reaches the unavoidable remainder at all. It never feeds
back into the search.
"""

import time
from collections import defaultdict
from typing import Dict, List, Optional, Tuple

from ortools.sat.python import cp_model as _cp

from config import CFG
from models import Configuration, Pos
from solver.grid import PlacedInBounds, validate_placement
from tetras import TETRAS


def build_options(configuration: Configuration) -> List[PlacedInBounds]:
    """Every in-bounds placement of every tetra that avoids the blocked cells."""
    size = configuration.size
    blocked = configuration.unavailable
    options: List[PlacedInBounds] = []
    for tetra in TETRAS:
        for row in range(size.rows):
            for col in range(size.cols):
                placement = validate_placement(tetra, Pos(row, col), size)
                if placement is None:
                    continue
                if any(cell in blocked for cell in placement.iter_cells()):
                    continue
                options.append(placement)
    return options


def probe_capacity(
    configuration: Configuration,
    max_seconds: Optional[float] = None,
) -> Tuple[bool, int, int, Optional[str]]:
    """
    Returns (ok, max_tetras, best_leftover, reason).

    ``best_leftover`` is the smallest number of usable cells any packing
    leaves free. ``ok`` is False when the solver produced no packing at all.
    """
    t0 = time.time()
    usable = configuration.usable_cells
    options = build_options(configuration)
    meta: Dict[str, object] = {"options": len(options), "usable": usable}
    setattr(probe_capacity, "last_meta", meta)

    if not options:
        meta.update({"status": "trivial", "witness": [], "elapsed": time.time() - t0})
        return True, 0, usable, None

    m = _cp.CpModel()
    p = [m.NewBoolVar(f"p_{k}") for k in range(len(options))]

    cell_to_vars: Dict[Pos, List[_cp.IntVar]] = defaultdict(list)
    for k, placement in enumerate(options):
        for cell in placement.iter_cells():
            cell_to_vars[cell].append(p[k])
    for cell_vars in cell_to_vars.values():
        if len(cell_vars) > 1:
            m.Add(sum(cell_vars) <= 1)

    m.Add(sum(p) <= usable // 4)
    m.Maximize(sum(p))

    if max_seconds is None:
        max_seconds = float(getattr(CFG, "PROBE_SECONDS", 10.0))

    solver = _cp.CpSolver()
    solver.parameters.max_time_in_seconds = float(max_seconds)
    solver.parameters.num_search_workers = max(1, int(getattr(CFG, "WORKERS", 1)))
    solver.parameters.log_search_progress = False

    res = solver.Solve(m)
    meta["elapsed"] = time.time() - t0

    if res in (_cp.OPTIMAL, _cp.FEASIBLE):
        witness = [options[k] for k in range(len(options)) if solver.BooleanValue(p[k])]
        count = len(witness)
        meta.update({"status": "optimal" if res == _cp.OPTIMAL else "feasible", "witness": witness})
        reason = None if res == _cp.OPTIMAL else "Stopped before optimum (timebox)"
        return True, count, usable - 4 * count, reason

    meta["status"] = "failed"
    if res == _cp.INFEASIBLE:
        return False, 0, usable, "Proven infeasible under current constraints"
    if res == _cp.MODEL_INVALID:
        return False, 0, usable, "Model invalid (configuration error)"
    return False, 0, usable, "Stopped before solution (timebox)"


__all__ = ["build_options", "probe_capacity"]
