"""
Zip Unlimited - Pathfinding

Автодостройка пути по клику: сначала прямая линия, потом BFS.
Каждый шаг проверяется тем же is_valid_move, что и ручной ход.
"""

from collections import deque
from typing import List, Optional, Sequence, Tuple

from .logic import Point, PuzzleConfig, is_valid_move


# Порядок соседей: вверх, вниз, влево, вправо
NEIGHBOR_OFFSETS = [(0, -1), (0, 1), (-1, 0), (1, 0)]


def _sign(value: int) -> int:
    return (value > 0) - (value < 0)


def find_straight_line_path(
    start: Tuple[int, int],
    target: Tuple[int, int],
    current_path: Sequence[Point],
    config: PuzzleConfig,
) -> Optional[List[Point]]:
    """
    Продление по прямой (одна строка или один столбец).

    Возвращает клетки после start до target включительно,
    либо None если хоть один шаг невалиден.
    """
    if start[0] != target[0] and start[1] != target[1]:
        return None

    dx = _sign(target[0] - start[0])
    dy = _sign(target[1] - start[1])

    steps: List[Point] = []
    trail = list(current_path)
    x, y = start

    while (x, y) != tuple(target):
        x, y = x + dx, y + dy
        nxt = Point(x, y)
        if not is_valid_move(trail, nxt, config):
            return None
        steps.append(nxt)
        trail.append(nxt)

    return steps


def find_shortest_path(
    start: Tuple[int, int],
    target: Tuple[int, int],
    current_path: Sequence[Point],
    config: PuzzleConfig,
) -> Optional[List[Point]]:
    """
    BFS по свободным клеткам.

    Уже нарисованный путь непроходим. Соседа кладём в очередь только если
    is_valid_move принимает его для current_path + накопленный подпуть.
    """
    goal = Point(*target)
    base = list(current_path)

    queue = deque([(Point(*start), [])])
    visited = set(base)

    while queue:
        point, sub_path = queue.popleft()

        if point == goal:
            return sub_path

        trail = base + sub_path
        for dx, dy in NEIGHBOR_OFFSETS:
            nb = Point(point.x + dx, point.y + dy)
            if nb in visited:
                continue
            if not is_valid_move(trail, nb, config):
                continue
            visited.add(nb)
            queue.append((nb, sub_path + [nb]))

    return None


def find_extension(
    head: Tuple[int, int],
    target: Tuple[int, int],
    current_path: Sequence[Point],
    config: PuzzleConfig,
) -> Optional[Tuple[str, List[Point]]]:
    """Стратегия клика: (название стратегии, клетки) или None."""
    line = find_straight_line_path(head, target, current_path, config)
    if line is not None:
        return "straight", line

    bfs = find_shortest_path(head, target, current_path, config)
    if bfs is not None:
        return "shortest", bfs

    return None
