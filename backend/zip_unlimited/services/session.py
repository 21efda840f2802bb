"""
Zip Unlimited - Game Session

Состояние одной попытки: путь, история для undo, таймер, режим ввода.
Ядро (logic / pathfinding) получает путь и конфиг явно, глобального состояния нет.
"""

import logging
import time
import uuid
from collections import OrderedDict
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple

from .logic import (
    Path,
    PathStatus,
    Point,
    PuzzleConfig,
    classify_path,
    is_valid_move,
    status_message,
)
from .pathfinding import find_extension


logger = logging.getLogger(__name__)


# ============================================
# INPUT MODE
# ============================================

class InputMode(str, Enum):
    BOTH = "both"
    DRAG = "drag"
    CLICK = "click"


def should_allow_drag(mode: InputMode) -> bool:
    return mode in (InputMode.DRAG, InputMode.BOTH)


def should_allow_click(mode: InputMode) -> bool:
    return mode in (InputMode.CLICK, InputMode.BOTH)


DIRECTION_STEPS: Dict[str, Tuple[int, int]] = {
    "up": (0, -1),
    "down": (0, 1),
    "left": (-1, 0),
    "right": (1, 0),
}


def format_time(seconds: int) -> str:
    """Секунды -> "MM:SS"."""
    minutes, secs = divmod(int(seconds), 60)
    return f"{minutes:02d}:{secs:02d}"


# ============================================
# SESSION
# ============================================

class GameSession:
    """Одна попытка решить головоломку."""

    def __init__(
        self,
        puzzle: PuzzleConfig,
        input_mode: InputMode = InputMode.BOTH,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.puzzle = puzzle
        self.input_mode = input_mode
        self._clock = clock

        self.history: List[Path] = []
        self.is_dragging = False

        self.started_at = clock()
        self.finished_at: Optional[float] = None

        self.path: Path = []
        self.status = PathStatus.IN_PROGRESS
        self.message: Optional[str] = None
        self._apply([puzzle.start_point])

    # ---------- state ----------

    @property
    def head(self) -> Point:
        return self.path[-1]

    @property
    def is_complete(self) -> bool:
        return self.status == PathStatus.WIN

    @property
    def can_undo(self) -> bool:
        return len(self.history) > 0

    @property
    def elapsed_seconds(self) -> int:
        end = self.finished_at if self.finished_at is not None else self._clock()
        return max(0, int(end - self.started_at))

    def _resume_timer(self) -> None:
        """Снова запускает таймер после победы, не считая время простоя."""
        if self.finished_at is not None:
            self.started_at += self._clock() - self.finished_at
            self.finished_at = None

    def _snapshot(self) -> None:
        self.history.append(list(self.path))

    def _apply(self, new_path: Path) -> None:
        """Применяет путь и заново классифицирует его."""
        self.path = new_path
        self.status = classify_path(new_path, self.puzzle)
        self.message = status_message(self.status)

        if self.status == PathStatus.WIN and self.finished_at is None:
            self.finished_at = self._clock()
            self.is_dragging = False
            logger.info(f"Puzzle solved in {format_time(self.elapsed_seconds)} (seed={self.puzzle.seed})")

    # ---------- keyboard ----------

    def step(self, point: Tuple[int, int]) -> bool:
        """Один шаг (клавиатура). Коммитит в историю."""
        if self.is_complete:
            return False
        nxt = Point(*point)
        if not is_valid_move(self.path, nxt, self.puzzle):
            logger.debug(f"Rejected step to {nxt}")
            return False
        self._snapshot()
        self._apply(self.path + [nxt])
        return True

    def step_direction(self, direction: str) -> bool:
        offset = DIRECTION_STEPS.get(direction)
        if offset is None:
            return False
        head = self.head
        return self.step((head.x + offset[0], head.y + offset[1]))

    # ---------- click ----------

    def click(self, point: Tuple[int, int]) -> bool:
        """
        Клик по клетке:
        - голова: ничего
        - клетка пути: обрезаем путь до неё
        - пустая клетка: прямая линия, иначе кратчайший путь
        """
        if self.is_complete or not should_allow_click(self.input_mode):
            return False

        target = Point(*point)
        if target == self.head:
            return False

        if target in self.path:
            idx = self.path.index(target)
            self._snapshot()
            self._apply(self.path[:idx + 1])
            return True

        extension = find_extension(self.head, target, self.path, self.puzzle)
        if extension is None:
            logger.debug(f"No extension from {self.head} to {target}")
            return False

        strategy, cells = extension
        logger.debug(f"Extension via {strategy}: {len(cells)} cell(s)")
        self._snapshot()
        self._apply(self.path + cells)
        return True

    # ---------- drag ----------

    def begin_drag(self) -> bool:
        """Начало перетаскивания с головы: снимок для undo."""
        if self.is_complete or not should_allow_drag(self.input_mode):
            return False
        self._snapshot()
        self.is_dragging = True
        return True

    def end_drag(self) -> None:
        self.is_dragging = False

    def drag_to(self, point: Tuple[int, int]) -> bool:
        """
        Вход курсора в клетку во время перетаскивания.

        Шаг назад разрешён только на предыдущую клетку пути,
        остальные посещённые клетки игнорируются. Истории не добавляет.
        """
        if not self.is_dragging or self.is_complete:
            return False
        if not should_allow_drag(self.input_mode):
            return False

        target = Point(*point)
        if target in self.path:
            idx = self.path.index(target)
            if idx == len(self.path) - 2:
                self._apply(self.path[:idx + 1])
                return True
            return False

        if is_valid_move(self.path, target, self.puzzle):
            self._apply(self.path + [target])
            return True
        return False

    # ---------- history ----------

    def undo(self) -> bool:
        if not self.history:
            return False
        previous = self.history.pop()
        self.is_dragging = False
        self._apply(previous)
        if self.status != PathStatus.WIN:
            self._resume_timer()
        return True

    def clear(self) -> None:
        self.history = []
        self.is_dragging = False
        self._resume_timer()
        self._apply([self.puzzle.start_point])

    def set_input_mode(self, mode: InputMode) -> None:
        self.input_mode = mode
        if not should_allow_drag(mode):
            self.is_dragging = False


# ============================================
# SESSION STORE (in-memory LRU)
# ============================================

class SessionStore:
    """Сессии в памяти процесса. После рестарта не сохраняются."""

    def __init__(self, max_sessions: int = 1000):
        self.max_sessions = max_sessions
        self._sessions: "OrderedDict[str, GameSession]" = OrderedDict()

    def __len__(self) -> int:
        return len(self._sessions)

    def create(self, puzzle: PuzzleConfig, input_mode: InputMode = InputMode.BOTH) -> Tuple[str, GameSession]:
        session_id = uuid.uuid4().hex
        session = GameSession(puzzle, input_mode=input_mode)
        self._sessions[session_id] = session

        while len(self._sessions) > self.max_sessions:
            evicted_id, _ = self._sessions.popitem(last=False)
            logger.info(f"Evicted session {evicted_id}")

        return session_id, session

    def get(self, session_id: str) -> Optional[GameSession]:
        session = self._sessions.get(session_id)
        if session is not None:
            self._sessions.move_to_end(session_id)
        return session

    def delete(self, session_id: str) -> bool:
        return self._sessions.pop(session_id, None) is not None
