#!/usr/bin/env python3
from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any


ROOT_DIR = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT_DIR / "backend"))

from zip_unlimited.services.generator import DIFFICULTY_TIERS, generate_puzzle  # noqa: E402
from zip_unlimited.services.logic import PuzzleConfig, point_to_string, validate_path  # noqa: E402


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Generate puzzles in bulk and audit their solution paths."
    )
    parser.add_argument(
        "--difficulty",
        choices=sorted(DIFFICULTY_TIERS),
        default="medium",
        help="Difficulty tier to generate.",
    )
    parser.add_argument(
        "--count",
        type=int,
        default=10,
        help="How many puzzles to generate.",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="First seed; puzzle i uses seed + i. Random seeds when omitted.",
    )
    parser.add_argument(
        "--out",
        type=Path,
        default=None,
        help="Write puzzle_<seed>.json files into this directory.",
    )
    return parser.parse_args(argv)


def puzzle_to_json(puzzle: PuzzleConfig) -> dict[str, Any]:
    return {
        "seed": puzzle.seed,
        "difficulty": puzzle.difficulty,
        "grid": {"width": puzzle.width, "height": puzzle.height},
        "checkpoints": {point_to_string(p): rank for p, rank in puzzle.checkpoints.items()},
        "solution": [{"x": p.x, "y": p.y} for p in puzzle.solution_path or ()],
    }


def gap_violations(puzzle: PuzzleConfig, min_gap: int) -> int:
    """How many neighbouring checkpoints sit closer than min_gap along the solution."""
    index_of = {p: i for i, p in enumerate(puzzle.solution_path or ())}
    indices = sorted(index_of[p] for p in puzzle.checkpoints)
    return sum(1 for a, b in zip(indices, indices[1:]) if b - a < min_gap)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    tier = DIFFICULTY_TIERS[args.difficulty]

    if args.out is not None:
        args.out.mkdir(parents=True, exist_ok=True)

    failed = 0
    tight = 0

    for i in range(args.count):
        seed = None if args.seed is None else args.seed + i
        puzzle = generate_puzzle(args.difficulty, seed=seed)
        result = validate_path(puzzle.solution_path or (), puzzle)
        violations = gap_violations(puzzle, tier["min_gap"])

        if violations:
            tight += 1
        if not result["valid"]:
            failed += 1
            print(f"seed {puzzle.seed}: invalid solution")
            for error in result["errors"]:
                print(f"  {error}")

        if args.out is not None:
            path = args.out / f"puzzle_{puzzle.seed}.json"
            path.write_text(
                json.dumps(puzzle_to_json(puzzle), ensure_ascii=False, indent="\t") + "\n",
                encoding="utf-8",
            )

    print(
        f"Generated {args.count} {args.difficulty} puzzle(s): "
        f"{failed} invalid, {tight} with checkpoints closer than min_gap."
    )
    return 1 if failed else 0


if __name__ == "__main__":
    raise SystemExit(main())
