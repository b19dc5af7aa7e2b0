from __future__ import annotations

import logging
import threading
import time
from pathlib import Path
from typing import Any, Dict, Optional

from config import CFG
from solver.search import CollectStats

# ------------------------------
# Attempt log (logs/solver_attempts.log)
# ------------------------------

ATTEMPT_LOG_PATH = Path(__file__).resolve().parent / "logs" / "solver_attempts.log"


def _attach_file_handler(logger: logging.Logger, path: Path) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(path, encoding="utf-8")
    except OSError:
        # Read-only checkout: run without an attempt log.
        return
    handler.setFormatter(
        logging.Formatter("%(asctime)s [%(levelname)s] %(message)s", datefmt="%Y-%m-%d %H:%M:%S")
    )
    logger.addHandler(handler)


ATTEMPT_LOGGER = logging.getLogger("tiler.attempt_log")
if not ATTEMPT_LOGGER.handlers:
    _attach_file_handler(ATTEMPT_LOGGER, ATTEMPT_LOG_PATH)
    ATTEMPT_LOGGER.setLevel(logging.INFO)
    ATTEMPT_LOGGER.propagate = False


def _fmt_seconds(seconds: Optional[float]) -> Optional[str]:
    return None if seconds is None else f"{float(seconds):.2f}s"


def log_attempt_detail(event: str, **fields: Any) -> None:
    """Write ``event | key=value ...`` to the attempt log, skipping blank fields."""
    if not ATTEMPT_LOGGER.handlers:
        return
    pairs = " ".join(f"{k}={v}" for k, v in fields.items() if v is not None and v != "")
    try:
        if pairs:
            ATTEMPT_LOGGER.info("%s | %s", event, pairs)
        else:
            ATTEMPT_LOGGER.info("%s", event)
    except Exception:
        # The attempt log is advisory; a broken handler must not fail a run.
        pass


# ------------------------------
# Shared run state behind /progress
# ------------------------------

PROGRESS_LOCK = threading.Lock()

_IDLE: Dict[str, Any] = {
    "status": "Idle",      # Idle | Solving | Solved | Error
    "policy": "",          # exhaustive | randomized
    "grid": "",            # "rows × cols"
    "recursions": 0,
    "results": 0,
    "percent": 0.0,        # capped runs only
    "elapsed_start": None,
    "elapsed": 0.0,
    "message": "",
    "done": False,
    "ok": None,
}

PROGRESS: Dict[str, Any] = dict(_IDLE, run_id=0)


def _now() -> float:
    return time.time()


def _fmt_elapsed(seconds: float) -> str:
    total = int(max(0.0, float(seconds)))
    minutes, secs = divmod(total, 60)
    hours, minutes = divmod(minutes, 60)
    if hours:
        return f"{hours}h {minutes}m"
    if minutes:
        return f"{minutes}m {secs}s"
    return f"{secs}s"


def _refresh_elapsed() -> None:
    # caller holds PROGRESS_LOCK
    started = PROGRESS["elapsed_start"]
    if started is not None:
        PROGRESS["elapsed"] = _now() - started


def reset() -> None:
    with PROGRESS_LOCK:
        run_id = int(PROGRESS["run_id"]) + 1
        PROGRESS.clear()
        PROGRESS.update(_IDLE, run_id=run_id)
    log_attempt_detail("Progress reset", run_id=run_id)


def start_timer() -> None:
    with PROGRESS_LOCK:
        PROGRESS["elapsed_start"] = _now()
        PROGRESS["elapsed"] = 0.0
        run_id = PROGRESS["run_id"]
    log_attempt_detail("Run timer started", run_id=run_id)


def _set_text(key: str, value: Any, event: Optional[str] = None) -> None:
    text = "" if value is None else str(getattr(value, "value", value))
    with PROGRESS_LOCK:
        changed = text != PROGRESS[key]
        PROGRESS[key] = text
        grid = PROGRESS["grid"]
    if event and changed and text:
        fields = {key: text}
        if key != "grid":
            fields["grid"] = grid
        log_attempt_detail(event, **fields)


def set_status(value: Any) -> None:
    _set_text("status", value)


def set_policy(value: Any) -> None:
    _set_text("policy", value, "Policy selected")


def set_grid(value: Any) -> None:
    _set_text("grid", value, "Grid updated")


def set_message(value: Any) -> None:
    _set_text("message", value)


def set_counters(recursions: int, results: int, limit: Optional[int] = None) -> None:
    with PROGRESS_LOCK:
        PROGRESS["recursions"] = max(0, int(recursions))
        PROGRESS["results"] = max(0, int(results))
        if limit:
            PROGRESS["percent"] = min(100.0, 100.0 * PROGRESS["results"] / limit)
        _refresh_elapsed()


def set_done(ok: Optional[bool] = None, *, reason: Any = None) -> None:
    """Mark the run complete.

    ``ok`` picks the final status (``"Solved"``/``"Error"``); when omitted the
    run counts as solved. ``reason`` is surfaced through ``message``.
    """
    ok_flag = True if ok is None else bool(ok)
    with PROGRESS_LOCK:
        _refresh_elapsed()
        PROGRESS.update(status="Solved" if ok_flag else "Error", ok=ok_flag, percent=100.0, done=True)
        if reason is not None:
            PROGRESS["message"] = str(reason)
        final = dict(PROGRESS)
    log_attempt_detail(
        "Run finished",
        status=final["status"],
        policy=final["policy"],
        grid=final["grid"],
        duration=_fmt_seconds(final["elapsed"] if final["elapsed_start"] is not None else None),
        recursions=final["recursions"],
        results=final["results"],
        message=final["message"],
    )


# ------------------------------
# Instrumentation sink for the search
# ------------------------------

class ProgressStats(CollectStats):
    """Counts search steps and accepted results for the progress snapshot.

    Counters are published every ``every`` recursions and on each accepted
    result; the search itself never sees any of this.
    """

    def __init__(self, every: Optional[int] = None, limit: Optional[int] = None) -> None:
        if every is None:
            every = int(getattr(CFG, "PROGRESS_EVERY", 100_000))
        self.every = max(1, int(every))
        self.limit = limit
        self.start = _now()
        self.recursions = 0
        self.results = 0

    def recursions_inc(self) -> None:
        self.recursions += 1
        if self.recursions % self.every == 0:
            self.flush()
            log_attempt_detail(
                "Search progress",
                recursions=self.recursions,
                results=self.results,
                elapsed=_fmt_seconds(self.elapsed),
            )

    def results_inc(self) -> None:
        self.results += 1
        self.flush()

    @property
    def elapsed(self) -> float:
        return _now() - self.start

    def flush(self) -> None:
        set_counters(self.recursions, self.results, self.limit)


def snapshot() -> Dict[str, Any]:
    with PROGRESS_LOCK:
        _refresh_elapsed()
        snap = {k: v for k, v in PROGRESS.items() if k != "elapsed_start"}
    snap["elapsed_str"] = _fmt_elapsed(snap["elapsed"])
    return snap


as_json = snapshot
