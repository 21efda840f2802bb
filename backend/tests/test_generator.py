import pytest

from zip_unlimited.services.generator import (
    DIFFICULTY_TIERS,
    SeededRandom,
    generate_custom_puzzle,
    generate_full_coverage_path,
    generate_puzzle,
    generate_serpentine_path,
    normalize_difficulty,
    place_checkpoints,
)
from zip_unlimited.services.logic import Point, is_adjacent, validate_path


def assert_hamiltonian(path, width, height):
    assert len(path) == width * height
    assert set(path) == {Point(x, y) for x in range(width) for y in range(height)}
    for a, b in zip(path, path[1:]):
        assert is_adjacent(a, b)


def assert_ranks_follow_path(puzzle):
    last_index = -1
    last_rank = 0
    for index, cell in enumerate(puzzle.solution_path):
        rank = puzzle.checkpoints.get(cell)
        if rank is None:
            continue
        assert index > last_index
        assert rank == last_rank + 1
        last_index, last_rank = index, rank
    assert last_rank == puzzle.total_checkpoints
    assert puzzle.checkpoints[puzzle.solution_path[0]] == 1
    assert puzzle.checkpoints[puzzle.solution_path[-1]] == puzzle.total_checkpoints


# ---------- seeded random ----------

def test_seeded_random_is_reproducible_and_in_range():
    a, b = SeededRandom(42), SeededRandom(42)
    draws = [a.next() for _ in range(200)]
    assert draws == [b.next() for _ in range(200)]
    assert all(0.0 <= d < 1.0 for d in draws)

    rng = SeededRandom(3)
    assert all(2 <= rng.next_int(2, 5) <= 5 for _ in range(500))
    assert sorted(rng.shuffle([1, 2, 3, 4])) == [1, 2, 3, 4]
    assert rng.choice([]) is None


# ---------- hamiltonian path ----------

def test_serpentine_path():
    assert generate_serpentine_path(3, 2) == [
        Point(0, 0), Point(1, 0), Point(2, 0),
        Point(2, 1), Point(1, 1), Point(0, 1),
    ]
    assert_hamiltonian(generate_serpentine_path(5, 4), 5, 4)


@pytest.mark.parametrize("width,height", [(1, 1), (1, 5), (5, 1), (2, 2), (5, 3), (6, 6), (7, 4)])
def test_rewired_path_always_covers_grid(width, height):
    for seed in range(1, 6):
        path = generate_full_coverage_path(width, height, 500, SeededRandom(seed))
        assert_hamiltonian(path, width, height)


def test_zero_iterations_returns_serpentine():
    path = generate_full_coverage_path(4, 4, 0, SeededRandom(1))
    assert path == generate_serpentine_path(4, 4)


def test_rewiring_changes_structure():
    signatures = set()
    for seed in range(1, 6):
        path = generate_full_coverage_path(8, 8, 800, SeededRandom(seed))
        signatures.add(tuple(path[:20]))
    assert len(signatures) > 1


# ---------- checkpoints ----------

def test_checkpoints_respect_min_gap_when_room_allows():
    path = generate_serpentine_path(10, 10)
    checkpoints = place_checkpoints(path, 5, 4, SeededRandom(11))
    assert len(checkpoints) == 5
    assert checkpoints[path[0]] == 1
    assert checkpoints[path[-1]] == 5

    index_of = {p: i for i, p in enumerate(path)}
    indices = sorted(index_of[p] for p in checkpoints)
    assert all(b - a >= 4 for a, b in zip(indices, indices[1:]))


def test_checkpoint_fallback_fills_requested_count():
    path = generate_serpentine_path(5, 2)
    checkpoints = place_checkpoints(path, 8, 5, SeededRandom(5), max_attempts=50)
    assert len(checkpoints) == 8

    ranks_along_path = [checkpoints[p] for p in path if p in checkpoints]
    assert ranks_along_path == list(range(1, 9))


def test_checkpoint_count_clamped_to_path_length():
    path = generate_serpentine_path(2, 2)
    checkpoints = place_checkpoints(path, 10, 1, SeededRandom(1))
    assert sorted(checkpoints.values()) == [1, 2, 3, 4]
    assert place_checkpoints([Point(0, 0)], 3, 1, SeededRandom(1)) == {Point(0, 0): 1}


# ---------- puzzles ----------

@pytest.mark.parametrize("tier", list(DIFFICULTY_TIERS))
def test_generated_puzzles_are_well_formed(tier):
    params = DIFFICULTY_TIERS[tier]
    for _ in range(3):
        puzzle = generate_puzzle(tier)
        assert puzzle.width == params["width"]
        assert puzzle.height == params["height"]
        assert puzzle.difficulty == tier
        assert puzzle.total_checkpoints == params["checkpoints"]
        assert_hamiltonian(puzzle.solution_path, puzzle.width, puzzle.height)
        assert_ranks_follow_path(puzzle)
        assert validate_path(puzzle.solution_path, puzzle)["valid"] is True
        assert puzzle.start_point == puzzle.solution_path[0]


def test_same_seed_same_puzzle():
    a = generate_puzzle("hard", seed=1234)
    b = generate_puzzle("hard", seed=1234)
    assert a.solution_path == b.solution_path
    assert a.checkpoints == b.checkpoints
    assert a.seed == 1234


def test_unseeded_puzzles_record_their_seed():
    puzzle = generate_puzzle("easy")
    replay = generate_puzzle("easy", seed=puzzle.seed)
    assert replay.solution_path == puzzle.solution_path


def test_normalize_difficulty():
    assert normalize_difficulty("Easy") == "easy"
    assert normalize_difficulty(" MID ") == "medium"
    assert normalize_difficulty("Hard") == "hard"
    assert normalize_difficulty("unknown") == "medium"
    assert normalize_difficulty(3) == "hard"
    assert normalize_difficulty(None) == "medium"


def test_custom_puzzle():
    puzzle = generate_custom_puzzle(5, 3, 4, min_gap=2, seed=99)
    assert (puzzle.width, puzzle.height) == (5, 3)
    assert puzzle.total_checkpoints == 4
    assert puzzle.difficulty is None
    assert_hamiltonian(puzzle.solution_path, 5, 3)
    assert_ranks_follow_path(puzzle)


@pytest.mark.parametrize("kwargs", [
    {"width": 0, "height": 3, "checkpoint_count": 2},
    {"width": 3, "height": -1, "checkpoint_count": 2},
    {"width": 3, "height": 3, "checkpoint_count": 0},
    {"width": 3, "height": 3, "checkpoint_count": 2, "min_gap": 0},
])
def test_custom_puzzle_rejects_bad_parameters(kwargs):
    with pytest.raises(ValueError):
        generate_custom_puzzle(**kwargs)
