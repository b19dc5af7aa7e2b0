"""Helpers for turning search results into structured output and files."""

from __future__ import annotations

import json
import os
from typing import Any, Dict, List, Sequence, Tuple

from config import CFG
from models import Configuration
from solver.search import PlacementResult
from tetras import TETRAS, tetra_index


def _resolve_output_path(base_dir: str, configured_name: str, fallback: str) -> str:
    """Return the absolute path where an output artifact should be written."""

    name = (configured_name or "").strip() or fallback
    if os.path.isabs(name):
        return name
    return os.path.join(base_dir, name)


def build_output(results: Sequence[PlacementResult]) -> Dict[str, Any]:
    """Catalog plus the distinct packings found.

    A packing reached through different placement orders is listed once;
    packings and their tetras come out sorted.
    """

    tetras = {
        str(idx): {
            "positions": [p.as_list() for p in tetra.positions],
            "col_shift": tetra.col_shift,
        }
        for idx, tetra in enumerate(TETRAS)
    }

    seen: Dict[Tuple[Tuple[Tuple[int, int, int], ...], int], None] = {}
    for result in results:
        key = tuple(
            sorted(
                (tetra_index(placed.tetra), placed.position.row, placed.position.col)
                for placed in result.placement
            )
        )
        seen.setdefault((key, result.free), None)

    placements: List[Dict[str, Any]] = [
        {
            "tetras": [{"tetra": idx, "pos": [row, col]} for idx, row, col in key],
            "free": free,
        }
        for key, free in sorted(seen)
    ]
    return {"tetras": tetras, "placements": placements}


def write_results_json(results: Sequence[PlacementResult], base_dir: str) -> str:
    """Write :func:`build_output` to the configured JSON file."""

    path = _resolve_output_path(base_dir, CFG.RESULTS_JSON, "results.json")
    os.makedirs(os.path.dirname(path), exist_ok=True)

    with open(path, "w", encoding="utf-8") as f:
        json.dump(build_output(results), f, indent=2)
    return path


def write_coords(results: Sequence[PlacementResult], configuration: Configuration, base_dir: str) -> str:
    """Write one block of tetra coordinates per result to the configured text file."""

    path = _resolve_output_path(base_dir, CFG.COORDS_OUT, "coords.txt")
    os.makedirs(os.path.dirname(path), exist_ok=True)

    with open(path, "w", encoding="utf-8") as f:
        f.write(f"grid {configuration.size.rows}x{configuration.size.cols}\n")
        if not results:
            f.write("No placement\n")
        for n, result in enumerate(results, start=1):
            f.write(f"placement {n} free={result.free}\n")
            for placed in result.placement:
                cells = " ".join(str(p) for p in placed.iter_cells())
                f.write(f"  tetra {tetra_index(placed.tetra)} @ {placed.position}: {cells}\n")
    return path


def layout_view_html(svg: str, legend_html: str, title: str = "Layout View") -> str:
    return f"""<!doctype html>
<html><head><meta charset='utf-8'><title>{title}</title></head>
<body class='container'>
<h1>{title}</h1>
<section class='card'><div class='gridwrap'>{svg}</div></section>
<section class='card'><h3>Legend</h3><ul>{legend_html}</ul></section>
</body></html>"""


def write_layout_view_html(svg: str, legend_html: str, base_dir: str, title: str = "Layout View") -> str:
    """Write the rendered SVG/legend preview to the configured HTML file."""

    path = _resolve_output_path(base_dir, CFG.LAYOUT_HTML, "layout_view.html")
    os.makedirs(os.path.dirname(path), exist_ok=True)

    with open(path, "w", encoding="utf-8") as vf:
        vf.write(layout_view_html(svg, legend_html, title))
    return path


__all__ = [
    "build_output",
    "write_results_json",
    "write_coords",
    "layout_view_html",
    "write_layout_view_html",
]
