# tests/conftest.py
import os
import sys
from pathlib import Path

import pytest

# Settings are read once at import time, so pin them before the app is imported
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["DEBUG"] = "false"
os.environ["EXPOSE_SOLUTION"] = "false"

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from zip_unlimited.services.logic import Point, PuzzleConfig  # noqa: E402


@pytest.fixture
def open_5x5():
    return PuzzleConfig(width=5, height=5, checkpoints={})


@pytest.fixture
def serpentine_3x3():
    """
    Serpentine solution on 3x3:
    (0,0) (1,0) (2,0)
    (0,1) (1,1) (2,1)   <- walked right to left
    (0,2) (1,2) (2,2)
    """
    solution = (
        Point(0, 0), Point(1, 0), Point(2, 0),
        Point(2, 1), Point(1, 1), Point(0, 1),
        Point(0, 2), Point(1, 2), Point(2, 2),
    )
    return PuzzleConfig(
        width=3,
        height=3,
        checkpoints={Point(0, 0): 1, Point(2, 1): 2, Point(2, 2): 3},
        solution_path=solution,
        seed=7,
        difficulty=None,
    )


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()
