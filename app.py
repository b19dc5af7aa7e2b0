# app.py — HTTP front for the tetra tiler; progress no-cache
from __future__ import annotations
import logging
import os
from typing import Any, Dict, List, Optional, Tuple

from flask import Flask, jsonify, request, send_from_directory

from config import CFG
from field_parser import FieldParseError, Parser
from io_files import (
    build_output,
    layout_view_html,
    write_coords,
    write_layout_view_html,
    write_results_json,
)
from models import Configuration, ConfigurationError
from progress import as_json as progress_json, reset as progress_reset, set_done
from render import render_svg
from solver.orchestrator import solve_orchestrator
from solver.search import PlacementResult

BASE_DIR = os.path.dirname(os.path.abspath(__file__))
LOGGER = logging.getLogger(__name__)


def _resolve_output_paths(configured: str, fallback: str) -> Tuple[str, str, str]:
    name = (configured or "").strip() or fallback
    if os.path.isabs(name):
        full_path = name
    else:
        full_path = os.path.abspath(os.path.join(BASE_DIR, name))
    directory = os.path.dirname(full_path) or BASE_DIR
    filename = os.path.basename(full_path) or fallback
    return full_path, directory, filename


_JSON_FULL_PATH, JSON_DIR, JSON_FILENAME = _resolve_output_paths(
    CFG.RESULTS_JSON, "results.json"
)

LAST_RESULT: Dict[str, Any] = {
    "ok": False,
    "strategy": "",
    "reason": "No run yet",
    "count": 0,
    "output": {"tetras": {}, "placements": []},
    "meta": {},
}
LAST_RUN: Dict[str, Any] = {"configuration": None, "results": []}

app = Flask(__name__)


@app.after_request
def _no_cache_progress(resp):
    if request.path == "/progress":
        resp.headers["Cache-Control"] = "no-store, max-age=0"
        resp.headers["Pragma"] = "no-cache"
        resp.headers["Expires"] = "0"
    return resp


def _merge_like_mapping() -> Dict[str, Any]:
    merged: Dict[str, Any] = {}
    payload = request.get_json(silent=True)
    if isinstance(payload, dict):
        merged.update(payload)
    for k, v in request.form.items():
        merged.setdefault(k, v)
    for k, v in request.args.items():
        merged.setdefault(k, v)
    return merged


def _optional_int(like: Dict[str, Any], key: str) -> Optional[int]:
    raw = like.get(key)
    if raw is None or str(raw).strip() == "":
        return None
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise ConfigurationError(f"{key} must be an integer, got {raw!r}")


def _configuration_from_request(like: Dict[str, Any]) -> Tuple[Configuration, Optional[int]]:
    """Parse the posted field; raises FieldParseError / ConfigurationError / ValueError."""
    field = like.get("field")
    if not isinstance(field, str):
        raise ConfigurationError("field must be a string layout")
    markers = []
    for key in ("char_empty", "char_busy"):
        raw = like.get(key)
        if raw is not None and not isinstance(raw, str):
            raise ConfigurationError(f"{key} must be a single character, got {raw!r}")
        markers.append(raw or None)
    parser = Parser(*markers)
    parsed = parser.parse(field)
    limit = _optional_int(like, "results_limit")
    seed = _optional_int(like, "seed")
    return parsed.to_configuration(limit), seed


def _bad_request(reason: str, field: Optional[str] = None, error: Optional[FieldParseError] = None):
    set_done(False, reason=reason)
    body: Dict[str, Any] = {"ok": False, "reason": reason}
    if error is not None:
        body.update({"offset": error.offset, "row": error.row, "col": error.col})
        body["detail"] = error.describe(field)
    return jsonify(body), 400


@app.route("/solve", methods=["POST"])
def solve():
    progress_reset()
    like = _merge_like_mapping()

    try:
        configuration, seed = _configuration_from_request(like)
    except FieldParseError as e:
        return _bad_request(f"Bad field: {e.message}", like.get("field"), e)
    except ValueError as e:
        return _bad_request(f"Bad request: {e}")

    try:
        ok, results, strategy, reason, meta = solve_orchestrator(configuration, seed=seed)
    except Exception as e:
        LOGGER.exception("Search failed")
        reason = f"orchestrator exception: {type(e).__name__}: {e}"
        set_done(False, reason=reason)
        return jsonify({"ok": False, "reason": reason}), 500

    _store_last(configuration, results)
    try:
        write_results_json(results, BASE_DIR)
        write_coords(results, configuration, BASE_DIR)
        if results:
            svg, legend = render_svg(results[0], configuration)
            write_layout_view_html(svg, legend, BASE_DIR, title="Placement 1")
    except OSError:
        LOGGER.warning("Could not write result files", exc_info=True)

    LAST_RESULT.update({
        "ok": ok,
        "strategy": strategy,
        "reason": reason,
        "count": len(results),
        "output": build_output(results),
        "meta": meta,
    })
    return jsonify(LAST_RESULT)


def _store_last(configuration: Configuration, results: List[PlacementResult]) -> None:
    LAST_RUN["configuration"] = configuration
    LAST_RUN["results"] = list(results)


@app.route("/result/latest")
def result_latest():
    return jsonify(LAST_RESULT)


@app.route("/result/latest/svg")
def result_latest_svg():
    configuration = LAST_RUN["configuration"]
    results = LAST_RUN["results"]
    if configuration is None or not results:
        return jsonify({"ok": False, "reason": "no placement to render"}), 404
    try:
        index = int(request.args.get("index", 0))
    except ValueError:
        return jsonify({"ok": False, "reason": "index must be an integer"}), 400
    if not 0 <= index < len(results):
        return jsonify({"ok": False, "reason": f"index out of range 0..{len(results) - 1}"}), 404
    svg, legend = render_svg(results[index], configuration)
    return layout_view_html(svg, legend, title=f"Placement {index + 1} of {len(results)}")


@app.route("/download/json")
def download_json():
    return send_from_directory(JSON_DIR, JSON_FILENAME, as_attachment=True)


@app.route("/progress")
def progress():
    return jsonify(progress_json())


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
    app.run(debug=False)
