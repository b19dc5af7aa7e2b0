# config.py
import os

# ======= Field text format =======
CHAR_EMPTY = os.getenv("TT_CHAR_EMPTY", "-")
CHAR_BUSY  = os.getenv("TT_CHAR_BUSY", "x")

# ======= Rendering glyphs =======
CHAR_EMPTY_VIEW       = os.getenv("TT_CHAR_EMPTY_VIEW", "·")
CHAR_UNAVAILABLE_VIEW = os.getenv("TT_CHAR_UNAVAILABLE_VIEW", "×")

# ======= Search knobs =======
# Rebuild the lookup cache once per this many stacked tetras.
CACHE_EACH_TETRAS = int(os.getenv("TT_CACHE_EACH_TETRAS", "4"))
RESULTS_LIMIT     = int(os.getenv("TT_RESULTS_LIMIT", "0"))    # 0 = exhaustive
_seed_raw         = os.getenv("TT_RANDOM_SEED", "").strip()
RANDOM_SEED       = int(_seed_raw) if _seed_raw else None
CHECK_INVARIANTS  = int(os.getenv("TT_CHECK_INVARIANTS", "0")) != 0
# Skip exhaustive subtrees once more cells are uncoverable than may stay free.
PRUNE_DEAD_CELLS  = int(os.getenv("TT_PRUNE_DEAD_CELLS", "1")) != 0

# ======= Progress =======
PROGRESS_EVERY = int(os.getenv("TT_PROGRESS_EVERY", "100000"))

# ======= CP-SAT capacity probe =======
PROBE_CAPACITY = int(os.getenv("TT_PROBE_CAPACITY", "1")) != 0
PROBE_SECONDS  = float(os.getenv("TT_PROBE_SECONDS", "10"))
WORKERS        = int(os.getenv("TT_WORKERS", "1"))

# ======= Output names =======
COORDS_OUT   = os.getenv("TT_COORDS_OUT", "coords.txt")
RESULTS_JSON = os.getenv("TT_RESULTS_JSON", "results.json")
LAYOUT_HTML  = os.getenv("TT_LAYOUT_HTML", "layout_view.html")

class CFG:
    CHAR_EMPTY = CHAR_EMPTY
    CHAR_BUSY  = CHAR_BUSY

    CHAR_EMPTY_VIEW       = CHAR_EMPTY_VIEW
    CHAR_UNAVAILABLE_VIEW = CHAR_UNAVAILABLE_VIEW

    CACHE_EACH_TETRAS = CACHE_EACH_TETRAS
    RESULTS_LIMIT     = RESULTS_LIMIT
    RANDOM_SEED       = RANDOM_SEED
    CHECK_INVARIANTS  = CHECK_INVARIANTS
    PRUNE_DEAD_CELLS  = PRUNE_DEAD_CELLS

    PROGRESS_EVERY = PROGRESS_EVERY

    PROBE_CAPACITY = PROBE_CAPACITY
    PROBE_SECONDS  = PROBE_SECONDS
    WORKERS        = WORKERS

    COORDS_OUT   = COORDS_OUT
    RESULTS_JSON = RESULTS_JSON
    LAYOUT_HTML  = LAYOUT_HTML

__all__ = ["CFG"]
