from config import CFG
from models import Configuration, Pos
from render import render_svg, render_text
from solver.grid import validate_placement
from solver.search import PlacementResult
from tetras import I_HORIZONTAL


def _result():
    configuration = Configuration((2, 5), [(1, 4)])
    first = validate_placement(I_HORIZONTAL, Pos(0, 0), configuration.size)
    return configuration, PlacementResult((first,), 5)


def test_render_text_marks_tetras_blocked_and_free(monkeypatch):
    monkeypatch.setattr(CFG, "CHAR_EMPTY_VIEW", ".")
    monkeypatch.setattr(CFG, "CHAR_UNAVAILABLE_VIEW", "#")
    configuration, result = _result()
    assert render_text(result, configuration) == "A A A A .\n. . . . #"


def test_render_svg_labels_each_tetra():
    configuration, result = _result()
    svg, legend = render_svg(result, configuration, scale=10)
    assert svg.startswith("<svg")
    assert 'width="52"' in svg
    assert svg.count(">A</text>") == 4
    assert "darkred" in svg
    assert legend.count("<li>") == 1
    assert "A @ (0, 0)" in legend
