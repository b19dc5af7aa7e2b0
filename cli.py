import argparse
import json
import logging
import sys
import time
from typing import List, Optional

from config import CFG
from field_parser import FieldParseError, Parser, format_field
from io_files import build_output
from render import render_text
from solver.orchestrator import solve_orchestrator

LOGGER = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Place tetrominoes on a field with blocked cells.",
    )
    parser.add_argument(
        "--results-limit",
        type=int,
        default=CFG.RESULTS_LIMIT or None,
        help="sample random packings up to this many results (omit for exhaustive search)",
    )
    parser.add_argument("--seed", type=int, default=CFG.RANDOM_SEED, help="seed for the random sampler")
    parser.add_argument(
        "--field-file",
        default=None,
        help="read the field from this file instead of STDIN",
    )
    parser.add_argument("--char-empty", default=CFG.CHAR_EMPTY, help="character of an empty cell")
    parser.add_argument("--char-busy", default=CFG.CHAR_BUSY, help="character of an unavailable cell")
    parser.add_argument(
        "--output-format",
        choices=("default", "json"),
        default="default",
        help="human readable report or JSON",
    )
    parser.add_argument("--no-probe", action="store_true", help="skip the CP-SAT capacity probe")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.WARNING, format="%(levelname)s: %(message)s")

    if args.field_file:
        with open(args.field_file, "r", encoding="utf-8") as fh:
            source = fh.read()
    else:
        source = sys.stdin.read()

    try:
        parsed = Parser(args.char_empty, args.char_busy).parse(source)
        configuration = parsed.to_configuration(args.results_limit)
    except FieldParseError as e:
        print(f"Failed to parse field: {e.describe(source)}", file=sys.stderr)
        return 2
    except ValueError as e:
        print(f"Bad configuration: {e}", file=sys.stderr)
        return 2

    t0 = time.time()
    ok, results, strategy, reason, meta = solve_orchestrator(
        configuration,
        seed=args.seed,
        probe=False if args.no_probe else None,
    )
    elapsed = time.time() - t0

    if args.output_format == "json":
        print(json.dumps(build_output(results), indent=2))
        return 0

    print(format_field(configuration, args.char_empty, args.char_busy))
    print()
    for result in results:
        print(render_text(result, configuration))
        print()
    probe = meta.get("probe") or {}
    if probe.get("ok"):
        print(f"  Best possible leftover: {probe['best_leftover']} cells")
    print(f"  Found placements: {len(results)} (time: {elapsed:.2f}s, policy: {strategy})")
    if not ok and reason:
        print(f"  {reason}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
