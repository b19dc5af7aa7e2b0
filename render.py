import string
from typing import Dict, List, Optional, Tuple

from config import CFG
from models import Configuration, Pos
from solver.search import PlacementResult

_COLORS = ["green", "cyan", "blue", "magenta", "yellow"]
_BLOCKED_COLOR = "darkred"
_LETTERS = string.ascii_uppercase


def _owners(result: PlacementResult) -> Dict[Pos, int]:
    owners: Dict[Pos, int] = {}
    for idx, placed in enumerate(result.placement):
        for pos in placed.iter_cells():
            owners[pos] = idx
    return owners


def render_text(result: PlacementResult, configuration: Configuration) -> str:
    owners = _owners(result)
    lines: List[str] = []
    for r in range(configuration.size.rows):
        row = []
        for c in range(configuration.size.cols):
            pos = Pos(r, c)
            if pos in configuration.unavailable:
                row.append(CFG.CHAR_UNAVAILABLE_VIEW)
            elif pos in owners:
                row.append(_LETTERS[owners[pos] % len(_LETTERS)])
            else:
                row.append(CFG.CHAR_EMPTY_VIEW)
        lines.append(" ".join(row))
    return "\n".join(lines)


def render_svg(result: PlacementResult, configuration: Configuration, scale: Optional[int] = None) -> Tuple[str, str]:
    scale = scale or 40
    owners = _owners(result)
    svg_w = configuration.size.cols * scale + 2
    svg_h = configuration.size.rows * scale + 2

    rects = []
    for r in range(configuration.size.rows):
        for c in range(configuration.size.cols):
            pos = Pos(r, c)
            x = c * scale + 1
            y = r * scale + 1
            if pos in configuration.unavailable:
                fill, label = _BLOCKED_COLOR, ""
            elif pos in owners:
                idx = owners[pos]
                fill, label = _COLORS[idx % len(_COLORS)], _LETTERS[idx % len(_LETTERS)]
            else:
                continue
            rects.append(
                f'<rect x="{x}" y="{y}" width="{scale}" height="{scale}" fill="{fill}" stroke="black" stroke-width="1"/>'
            )
            if label:
                rects.append(
                    f'<text x="{x + 4}" y="{y + 14}" font-size="12" fill="black">{label}</text>'
                )
    grid = f'<rect x="1" y="1" width="{svg_w-2}" height="{svg_h-2}" fill="none" stroke="black" stroke-width="2"/>'
    svg = (
        f'<svg class="layout-svg" xmlns="http://www.w3.org/2000/svg" '
        f'width="{svg_w}" height="{svg_h}" '
        f'viewBox="0 0 {svg_w} {svg_h}" preserveAspectRatio="xMinYMin meet">'
        f'{grid}{"".join(rects)}</svg>'
    )

    legend = "".join(
        f"<li><span class='swatch' style='background:{_COLORS[idx % len(_COLORS)]}'></span>"
        f"{_LETTERS[idx % len(_LETTERS)]} @ {placed.position}</li>"
        for idx, placed in enumerate(result.placement)
    )
    return svg, legend
