"""
Zip Unlimited - Game Logic

Правила хода и классификация пути игрока.
Все функции чистые: путь и конфиг только читаются.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, NamedTuple, Optional, Sequence, Tuple


# ============================================
# DATA MODEL
# ============================================

class Point(NamedTuple):
    """Клетка поля (x, y), отсчёт от нуля."""
    x: int
    y: int


Path = List[Point]
CheckpointMap = Dict[Point, int]


def point_to_string(p: Tuple[int, int]) -> str:
    """Канонический ключ "x,y" для JSON."""
    return f"{p[0]},{p[1]}"


def string_to_point(s: str) -> Point:
    """Обратное преобразование "x,y" -> Point."""
    raw_x, raw_y = s.split(",")
    return Point(int(raw_x.strip()), int(raw_y.strip()))


@dataclass(frozen=True)
class PuzzleConfig:
    """
    Конфигурация головоломки.

    checkpoints: клетка -> номер (1..N, без пропусков).
    solution_path хранится только для генерации/тестов,
    для проверки хода игрока он не нужен.
    """
    width: int
    height: int
    checkpoints: CheckpointMap = field(default_factory=dict)
    solution_path: Optional[Tuple[Point, ...]] = None
    seed: Optional[int] = None
    difficulty: Optional[str] = None

    @property
    def total_cells(self) -> int:
        return self.width * self.height

    @property
    def total_checkpoints(self) -> int:
        return len(self.checkpoints)

    @property
    def start_point(self) -> Point:
        """Клетка с номером 1 (или (0, 0), если её нет)."""
        for point, rank in self.checkpoints.items():
            if rank == 1:
                return Point(*point)
        return Point(0, 0)

    @property
    def end_point(self) -> Optional[Point]:
        total = self.total_checkpoints
        for point, rank in self.checkpoints.items():
            if rank == total:
                return Point(*point)
        return None

    def in_bounds(self, p: Tuple[int, int]) -> bool:
        return 0 <= p[0] < self.width and 0 <= p[1] < self.height

    def checkpoints_as_strings(self) -> Dict[str, int]:
        return {point_to_string(p): rank for p, rank in self.checkpoints.items()}


def build_checkpoints(raw: Dict[str, int]) -> CheckpointMap:
    """Строит карту чекпоинтов из JSON-вида {"x,y": rank}."""
    return {string_to_point(key): int(rank) for key, rank in raw.items()}


# ============================================
# MOVE VALIDATOR
# ============================================

def is_adjacent(a: Tuple[int, int], b: Tuple[int, int]) -> bool:
    """Соседи по стороне (манхэттенское расстояние ровно 1)."""
    dx = abs(a[0] - b[0])
    dy = abs(a[1] - b[1])
    return (dx == 1 and dy == 0) or (dx == 0 and dy == 1)


def get_current_max_checkpoint(path: Sequence[Point], checkpoints: CheckpointMap) -> int:
    """Максимальный номер чекпоинта, уже пройденного путём (0 если ни одного)."""
    current = 0
    for p in path:
        rank = checkpoints.get(p)
        if rank is not None and rank > current:
            current = rank
    return current


def is_valid_move(path: Sequence[Point], next_point: Tuple[int, int], config: PuzzleConfig) -> bool:
    """
    Можно ли продлить путь клеткой next_point.

    Порядок проверок:
    1. соседство с головой пути (без диагоналей)
    2. границы поля
    3. клетка ещё не посещена
    4. если на клетке чекпоинт - он строго следующий по номеру
    """
    if not path:
        return False

    head = path[-1]
    if not is_adjacent(head, next_point):
        return False

    if not config.in_bounds(next_point):
        return False

    candidate = Point(*next_point)
    if candidate in path:
        return False

    rank = config.checkpoints.get(candidate)
    if rank is not None:
        return rank == get_current_max_checkpoint(path, config.checkpoints) + 1

    return True


# ============================================
# WIN / FAIL CLASSIFIER
# ============================================

class PathStatus(str, Enum):
    WIN = "win"
    INVALID_FULL = "invalid_full"
    INVALID_INCOMPLETE = "invalid_incomplete"
    IN_PROGRESS = "in_progress"


STATUS_MESSAGES = {
    PathStatus.INVALID_FULL: "You must end on the final number.",
    PathStatus.INVALID_INCOMPLETE: "All spots must be filled.",
}


def _head_rank(path: Sequence[Point], config: PuzzleConfig) -> Optional[int]:
    if not path:
        return None
    return config.checkpoints.get(path[-1])


def check_win(path: Sequence[Point], config: PuzzleConfig) -> bool:
    """Поле заполнено и путь закончился на последнем чекпоинте."""
    if len(path) != config.total_cells:
        return False
    return _head_rank(path, config) == config.total_checkpoints


def check_invalid_full_board(path: Sequence[Point], config: PuzzleConfig) -> bool:
    """Поле заполнено, но путь закончился не на последнем номере."""
    if len(path) != config.total_cells:
        return False
    return _head_rank(path, config) != config.total_checkpoints


def check_invalid_not_full(path: Sequence[Point], config: PuzzleConfig) -> bool:
    """Все чекпоинты пройдены, но поле ещё не заполнено."""
    if len(path) == config.total_cells:
        return False
    return get_current_max_checkpoint(path, config.checkpoints) == config.total_checkpoints


def classify_path(path: Sequence[Point], config: PuzzleConfig) -> PathStatus:
    if check_win(path, config):
        return PathStatus.WIN
    if check_invalid_full_board(path, config):
        return PathStatus.INVALID_FULL
    if check_invalid_not_full(path, config):
        return PathStatus.INVALID_INCOMPLETE
    return PathStatus.IN_PROGRESS


def status_message(status: PathStatus) -> Optional[str]:
    return STATUS_MESSAGES.get(status)


# ============================================
# FULL PATH AUDIT
# ============================================

def validate_path(path: Sequence[Tuple[int, int]], config: PuzzleConfig) -> Dict:
    """Полная проверка пути (решения или присланного игроком)."""
    errors = []
    cells = [Point(*p) for p in path]

    if not cells:
        return {"valid": False, "errors": ["Path is empty"], "coverage": 0.0}

    if config.checkpoints.get(cells[0]) != 1:
        errors.append(f"Path must start on checkpoint 1, starts on {point_to_string(cells[0])}")

    seen = set()
    for i, cell in enumerate(cells):
        if not config.in_bounds(cell):
            errors.append(f"Cell {i} out of bounds: {point_to_string(cell)}")
        if cell in seen:
            errors.append(f"Cell {i} revisits {point_to_string(cell)}")
        seen.add(cell)

    for i in range(len(cells) - 1):
        if not is_adjacent(cells[i], cells[i + 1]):
            errors.append(f"Path not orthogonal at cell {i}")
            break

    last_rank = 0
    for i, cell in enumerate(cells):
        rank = config.checkpoints.get(cell)
        if rank is None:
            continue
        if rank != last_rank + 1:
            errors.append(f"Checkpoint {rank} at cell {i} out of order (expected {last_rank + 1})")
            break
        last_rank = rank

    coverage = len(seen) / config.total_cells * 100 if config.total_cells else 0.0
    if len(seen) != config.total_cells:
        errors.append(f"Grid not fully covered: {coverage:.1f}% ({len(seen)}/{config.total_cells})")

    if not errors and not check_win(cells, config):
        errors.append("Path does not end on the final checkpoint")

    return {
        "valid": len(errors) == 0,
        "errors": errors,
        "coverage": coverage,
    }
