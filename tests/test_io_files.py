import json
import os
import tempfile
import unittest

from config import CFG
from io_files import build_output, write_coords, write_layout_view_html, write_results_json
from models import Configuration, Pos, Size
from solver.grid import validate_placement
from solver.search import PlacementResult
from tetras import TETRAS


def _two_squares():
    first = validate_placement(TETRAS[0], Pos(0, 0), Size(2, 4))
    second = validate_placement(TETRAS[0], Pos(0, 2), Size(2, 4))
    return first, second


class BuildOutputTestCase(unittest.TestCase):
    def test_lists_catalog(self) -> None:
        output = build_output([])
        self.assertEqual(len(output["tetras"]), 19)
        self.assertEqual(output["tetras"]["6"]["col_shift"], 1)
        self.assertEqual(output["tetras"]["1"]["positions"], [[0, 0], [0, 1], [0, 2], [0, 3]])
        self.assertEqual(output["placements"], [])

    def test_same_packing_in_other_order_is_listed_once(self) -> None:
        first, second = _two_squares()
        results = [
            PlacementResult((first, second), 0),
            PlacementResult((second, first), 0),
        ]
        output = build_output(results)
        self.assertEqual(
            output["placements"],
            [{"tetras": [{"tetra": 0, "pos": [0, 0]}, {"tetra": 0, "pos": [0, 2]}], "free": 0}],
        )

    def test_output_is_json_serialisable(self) -> None:
        results = Configuration((4, 4)).run()
        output = json.loads(json.dumps(build_output(results)))
        self.assertLessEqual(len(output["placements"]), len(results))
        self.assertTrue(all(p["free"] == 0 for p in output["placements"]))


class WriteOutputsTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.tmpdir = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmpdir.cleanup)
        self._orig_coords = CFG.COORDS_OUT
        self._orig_json = CFG.RESULTS_JSON
        self._orig_layout = CFG.LAYOUT_HTML

    def tearDown(self) -> None:
        CFG.COORDS_OUT = self._orig_coords
        CFG.RESULTS_JSON = self._orig_json
        CFG.LAYOUT_HTML = self._orig_layout

    def test_write_coords_uses_configured_relative_path(self) -> None:
        CFG.COORDS_OUT = "outputs/custom_coords.txt"
        first, second = _two_squares()
        configuration = Configuration((2, 4))

        path = write_coords([PlacementResult((first, second), 0)], configuration, self.tmpdir.name)

        expected = os.path.join(self.tmpdir.name, "outputs", "custom_coords.txt")
        self.assertEqual(path, expected)
        with open(path, "r", encoding="utf-8") as fh:
            contents = fh.read()
        self.assertIn("grid 2x4", contents)
        self.assertIn("placement 1 free=0", contents)
        self.assertIn("tetra 0 @ (0, 2): (0, 2) (0, 3) (1, 2) (1, 3)", contents)

    def test_write_coords_without_results(self) -> None:
        CFG.COORDS_OUT = "coords.txt"
        path = write_coords([], Configuration((2, 2)), self.tmpdir.name)
        with open(path, "r", encoding="utf-8") as fh:
            self.assertEqual(fh.read(), "grid 2x2\nNo placement\n")

    def test_write_results_json(self) -> None:
        CFG.RESULTS_JSON = "out/results.json"
        first, second = _two_squares()
        path = write_results_json([PlacementResult((first, second), 0)], self.tmpdir.name)

        with open(path, "r", encoding="utf-8") as fh:
            data = json.load(fh)
        self.assertEqual(len(data["placements"]), 1)
        self.assertEqual(data["placements"][0]["free"], 0)

    def test_write_layout_view_html_accepts_absolute_path(self) -> None:
        target = os.path.join(self.tmpdir.name, "html", "layout.html")
        CFG.LAYOUT_HTML = target

        svg = "<svg></svg>"
        legend = "<li>A</li>"

        path = write_layout_view_html(svg, legend, self.tmpdir.name)

        self.assertEqual(path, target)
        with open(path, "r", encoding="utf-8") as fh:
            contents = fh.read()
        self.assertIn(svg, contents)
        self.assertIn(legend, contents)


if __name__ == "__main__":
    unittest.main()
