"""
Zip Unlimited - Puzzle Generator (Server)

Алгоритм:
✅ Стартуем со "змейки" (serpentine) - всегда валидный гамильтонов путь
✅ Перемешиваем его перестройками концов (backbiting)
✅ Расставляем чекпоинты вдоль пути с минимальным зазором
✅ Номера растут строго по индексу пути -> решение существует всегда
"""

import logging
import random
import time
from typing import Any, Dict, List, Optional

from .logic import Point, PuzzleConfig, validate_path


logger = logging.getLogger(__name__)


# ============================================
# SEEDED RANDOM
# ============================================

class SeededRandom:
    """Детерминированный PRNG для воспроизводимости головоломок."""

    def __init__(self, seed: int):
        self.seed = seed
        self._state = seed & 0x7FFFFFFF

    def next(self) -> float:
        """Возвращает число из [0, 1)."""
        self._state = (self._state * 1103515245 + 12345) & 0x7FFFFFFF
        return self._state / 0x80000000

    def next_int(self, min_val: int, max_val: int) -> int:
        """Возвращает целое число в диапазоне [min, max]."""
        if min_val > max_val:
            return min_val
        return min_val + int(self.next() * (max_val - min_val + 1))

    def shuffle(self, arr: list) -> list:
        """Fisher-Yates shuffle (возвращает копию)."""
        result = arr.copy()
        for i in range(len(result) - 1, 0, -1):
            j = self.next_int(0, i)
            result[i], result[j] = result[j], result[i]
        return result

    def choice(self, arr: list):
        """Случайный элемент массива."""
        if not arr:
            return None
        return arr[self.next_int(0, len(arr) - 1)]


def new_seed() -> int:
    """Свежий seed из общего источника случайности процесса."""
    return random.randint(1, 0x7FFFFFFF)


# ============================================
# DIFFICULTY TIERS
# ============================================

DIFFICULTY_TIERS: Dict[str, Dict[str, int]] = {
    "easy": {"width": 6, "height": 6, "checkpoints": 8, "min_gap": 3, "rewire_iterations": 300},
    "medium": {"width": 8, "height": 8, "checkpoints": 14, "min_gap": 3, "rewire_iterations": 800},
    "hard": {"width": 10, "height": 10, "checkpoints": 20, "min_gap": 4, "rewire_iterations": 2000},
}

DEFAULT_DIFFICULTY = "medium"
DEFAULT_PLACEMENT_ATTEMPTS = 2000


def normalize_difficulty(value: Any) -> str:
    if isinstance(value, str):
        text = " ".join(value.strip().lower().split())
        if text in {"easy", "small", "low"}:
            return "easy"
        if text in {"medium", "normal", "mid"}:
            return "medium"
        if text in {"hard", "large", "high"}:
            return "hard"
        return DEFAULT_DIFFICULTY
    if isinstance(value, int) and not isinstance(value, bool):
        if value <= 1:
            return "easy"
        if value == 2:
            return "medium"
        return "hard"
    return DEFAULT_DIFFICULTY


# ============================================
# CONSTANTS
# ============================================

DIRECTION_VECTORS = [
    (0, -1),  # up
    (0, 1),   # down
    (-1, 0),  # left
    (1, 0),   # right
]


# ============================================
# HAMILTONIAN PATH
# ============================================

def generate_serpentine_path(width: int, height: int) -> List[Point]:
    """Змейка: чётные строки слева направо, нечётные справа налево."""
    path = []
    for y in range(height):
        xs = range(width) if y % 2 == 0 else range(width - 1, -1, -1)
        for x in xs:
            path.append(Point(x, y))
    return path


def _grid_neighbors(p: Point, width: int, height: int) -> List[Point]:
    result = []
    for dx, dy in DIRECTION_VECTORS:
        x, y = p.x + dx, p.y + dy
        if 0 <= x < width and 0 <= y < height:
            result.append(Point(x, y))
    return result


def generate_full_coverage_path(
    width: int,
    height: int,
    rewire_iterations: int,
    rng: SeededRandom,
) -> List[Point]:
    """
    Гамильтонов путь через перестройку концов (backbiting).

    Шаг: берём голову или хвост (50/50), выбираем соседа по сетке,
    кроме соседа по пути, и разворачиваем отрезок между ними.
    Каждый шаг сохраняет путь гамильтоновым.
    """
    path = generate_serpentine_path(width, height)
    total = len(path)

    if total < 2:
        return path

    index_of: Dict[Point, int] = {p: i for i, p in enumerate(path)}

    for _ in range(rewire_iterations):
        mutate_tail = rng.next() >= 0.5

        if mutate_tail:
            end = path[-1]
            anchor = path[-2]
        else:
            end = path[0]
            anchor = path[1]

        candidates = [n for n in _grid_neighbors(end, width, height) if n != anchor]
        if not candidates:
            continue

        target = rng.choice(candidates)
        target_idx = index_of[target]

        if mutate_tail:
            # 0 .. target | tail .. target+1
            path[target_idx + 1:] = path[target_idx + 1:][::-1]
            changed = range(target_idx + 1, total)
        else:
            # target-1 .. head | target .. end
            path[:target_idx] = path[:target_idx][::-1]
            changed = range(0, target_idx)

        for i in changed:
            index_of[path[i]] = i

    return path


# ============================================
# CHECKPOINTS
# ============================================

def place_checkpoints(
    path: List[Point],
    count: int,
    min_gap: int,
    rng: SeededRandom,
    max_attempts: int = DEFAULT_PLACEMENT_ATTEMPTS,
) -> Dict[Point, int]:
    """
    Выбирает индексы пути под чекпоинты и нумерует их 1..N по порядку.

    Фаза 1: случайные индексы с зазором >= min_gap (не больше max_attempts попыток).
    Фаза 2: если не хватило - добиваем перемешанными свободными индексами без зазора.
    """
    length = len(path)
    if length == 0:
        return {}
    if length == 1:
        return {path[0]: 1}

    count = max(2, min(count, length))
    indices = {0, length - 1}

    def far_enough(candidate: int) -> bool:
        return all(abs(candidate - idx) >= min_gap for idx in indices)

    attempts = 0
    while len(indices) < count and attempts < max_attempts and length > 2:
        attempts += 1
        candidate = rng.next_int(1, length - 2)
        if candidate not in indices and far_enough(candidate):
            indices.add(candidate)

    if len(indices) < count:
        available = [i for i in range(1, length - 1) if i not in indices]
        fallback_added = 0
        for i in rng.shuffle(available):
            if len(indices) >= count:
                break
            indices.add(i)
            fallback_added += 1
        logger.debug(f"Checkpoint fallback added {fallback_added} index(es) ignoring min_gap={min_gap}")

    return {path[idx]: rank for rank, idx in enumerate(sorted(indices), start=1)}


# ============================================
# MAIN GENERATOR FUNCTIONS
# ============================================

def _build_puzzle(
    width: int,
    height: int,
    checkpoint_count: int,
    min_gap: int,
    rewire_iterations: int,
    seed: int,
    difficulty: Optional[str],
    max_attempts: int,
) -> PuzzleConfig:
    started = time.monotonic()
    rng = SeededRandom(seed)

    path = generate_full_coverage_path(width, height, rewire_iterations, rng)
    checkpoints = place_checkpoints(path, checkpoint_count, min_gap, rng, max_attempts)

    elapsed_ms = (time.monotonic() - started) * 1000
    logger.info(
        f"[Generator] {width}x{height} difficulty={difficulty} seed={seed} "
        f"checkpoints={len(checkpoints)} elapsed_ms={elapsed_ms:.1f}"
    )

    return PuzzleConfig(
        width=width,
        height=height,
        checkpoints=checkpoints,
        solution_path=tuple(path),
        seed=seed,
        difficulty=difficulty,
    )


def generate_puzzle(
    difficulty: Any = DEFAULT_DIFFICULTY,
    seed: Optional[int] = None,
    max_attempts: int = DEFAULT_PLACEMENT_ATTEMPTS,
) -> PuzzleConfig:
    """Головоломка по уровню сложности (easy / medium / hard)."""
    tier_name = normalize_difficulty(difficulty)
    tier = DIFFICULTY_TIERS[tier_name]

    if seed is None:
        seed = new_seed()

    return _build_puzzle(
        tier["width"],
        tier["height"],
        tier["checkpoints"],
        tier["min_gap"],
        tier["rewire_iterations"],
        seed,
        tier_name,
        max_attempts,
    )


def generate_custom_puzzle(
    width: int,
    height: int,
    checkpoint_count: int,
    min_gap: int = 2,
    rewire_iterations: Optional[int] = None,
    seed: Optional[int] = None,
    max_attempts: int = DEFAULT_PLACEMENT_ATTEMPTS,
) -> PuzzleConfig:
    """Головоломка с произвольными параметрами."""
    for name, value in (("width", width), ("height", height), ("checkpoint_count", checkpoint_count)):
        if not isinstance(value, int) or value <= 0:
            raise ValueError(f"{name} must be a positive integer, got: {value!r}")
    if min_gap < 1:
        raise ValueError(f"min_gap must be >= 1, got: {min_gap!r}")

    if rewire_iterations is None:
        # Масштабируем с размером поля (~20 перестроек на клетку)
        rewire_iterations = width * height * 20

    if seed is None:
        seed = new_seed()

    return _build_puzzle(
        width, height, checkpoint_count, min_gap, rewire_iterations, seed, None, max_attempts,
    )


def get_tier_table() -> List[Dict[str, Any]]:
    return [{"difficulty": name, **params} for name, params in DIFFICULTY_TIERS.items()]


# ============================================
# CLI TESTING
# ============================================

if __name__ == "__main__":
    print("🎮 Zip Unlimited Generator (BACKBITING)")
    print("=" * 60)

    for tier_name in DIFFICULTY_TIERS:
        start = time.time()
        puzzle = generate_puzzle(tier_name)
        elapsed = (time.time() - start) * 1000

        validation = validate_path(puzzle.solution_path, puzzle)

        status = "✅" if validation["valid"] else "❌"
        print(f"\n{tier_name:6s} {status} | {elapsed:6.1f}ms")
        print(f"  Grid: {puzzle.width}×{puzzle.height}")
        print(f"  Seed: {puzzle.seed}")
        print(f"  Checkpoints: {puzzle.total_checkpoints}")
        print(f"  Coverage: {validation['coverage']:.1f}%")

        if not validation["valid"]:
            print("  ❌ ERRORS:")
            for err in validation["errors"][:5]:
                print(f"     - {err}")

    print("\n" + "=" * 60)
