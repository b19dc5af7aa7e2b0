# Orchestrator: one search run wired to progress, logging and the CP-SAT probe
from __future__ import annotations

import logging
import random
import time
from typing import Any, Dict, List, Optional, Tuple

from config import CFG
from models import Configuration
from progress import (
    ProgressStats,
    log_attempt_detail,
    set_done,
    set_grid,
    set_message,
    set_policy,
    set_status,
    start_timer,
)
from solver.cp_sat import probe_capacity
from solver.search import CollectStats, PlacementResult, SearchEngine, resolve_policy

LOGGER = logging.getLogger(__name__)


def _run_capacity_probe(configuration: Configuration) -> Dict[str, Any]:
    try:
        ok, max_tetras, best_leftover, reason = probe_capacity(configuration)
    except Exception as exc:
        LOGGER.exception("Capacity probe failed")
        return {"ok": False, "reason": f"Capacity probe exception: {type(exc).__name__}: {exc}"}

    info: Dict[str, Any] = {
        "ok": ok,
        "max_tetras": max_tetras,
        "best_leftover": best_leftover,
        "reason": reason,
    }
    if ok and reason is None:
        info["remainder_reachable"] = best_leftover == configuration.min_free_cells
    return info


def solve_orchestrator(
    configuration: Configuration,
    *,
    policy=None,
    seed: Optional[int] = None,
    rng: Optional[random.Random] = None,
    stats: Optional[CollectStats] = None,
    probe: Optional[bool] = None,
) -> Tuple[bool, List[PlacementResult], str, Optional[str], Dict[str, Any]]:
    """
    Returns: (ok, results, strategy, reason, meta)
    ``strategy`` is the policy name; ``ok`` is True when at least one result
    was accepted.
    """
    t0 = time.time()
    chosen = resolve_policy(configuration, policy)
    if rng is None and seed is not None:
        rng = random.Random(seed)
    if stats is None:
        stats = ProgressStats(limit=configuration.results_limit)
    if probe is None:
        probe = bool(getattr(CFG, "PROBE_CAPACITY", True))

    log_attempt_detail(
        "Run setup",
        grid=str(configuration.size),
        blocked=len(configuration.unavailable),
        usable=configuration.usable_cells,
        min_free=configuration.min_free_cells,
        policy=chosen.value,
        limit=configuration.results_limit,
        seed=seed,
    )
    set_status("Solving")
    set_grid(str(configuration.size))
    set_policy(chosen)
    start_timer()

    meta: Dict[str, Any] = {"policy": chosen.value}

    if probe:
        set_message("Probing capacity")
        meta["probe"] = _run_capacity_probe(configuration)
        log_attempt_detail("Capacity probe", **{k: v for k, v in meta["probe"].items() if k != "ok"})

    set_message("Searching")
    engine = SearchEngine(configuration, stats=stats, rng=rng, policy=chosen)
    results = engine.run()
    if isinstance(stats, ProgressStats):
        stats.flush()

    elapsed = time.time() - t0
    meta.update({
        "results": len(results),
        "min_free_cells": engine.min_free_cells,
        "acceptance_threshold": engine.acceptance_threshold,
        "cache_rebuilds": engine.cache.rebuilds,
        "elapsed": elapsed,
    })
    recursions = getattr(stats, "recursions", None)
    if recursions is not None:
        meta["recursions"] = recursions

    ok = bool(results)
    reason: Optional[str] = None
    if not ok:
        reason = "No placement met the acceptance condition"
    LOGGER.info(
        "search finished policy=%s grid=%s results=%d elapsed=%.2fs",
        chosen.value,
        configuration.size,
        len(results),
        elapsed,
    )
    set_done(ok, reason=reason)
    return ok, results, chosen.value, reason, meta


__all__ = ["solve_orchestrator"]
