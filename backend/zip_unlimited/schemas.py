"""
Zip Unlimited - Pydantic Schemas

Все схемы валидации в одном файле.
"""

from typing import Dict, List, Optional
from pydantic import BaseModel, Field, field_validator

from .config import settings
from .services.logic import Point, PuzzleConfig, build_checkpoints, string_to_point
from .services.session import InputMode


# ============================================
# GAME
# ============================================

class Cell(BaseModel):
    """Клетка на поле."""
    x: int
    y: int

    def to_point(self) -> Point:
        return Point(self.x, self.y)

    @classmethod
    def from_point(cls, p: Point) -> "Cell":
        return cls(x=p[0], y=p[1])


def _validate_grid_side(value: int) -> int:
    if value > settings.MAX_GRID_SIZE:
        raise ValueError(f"Grid side must be <= {settings.MAX_GRID_SIZE}, got: {value}")
    return value


def _validate_path_length(value: List[Cell]) -> List[Cell]:
    limit = settings.MAX_GRID_SIZE * settings.MAX_GRID_SIZE
    if len(value) > limit:
        raise ValueError(f"Path is longer than the largest grid ({limit} cells)")
    return value


def _validate_checkpoint_keys(value: Dict[str, int]) -> Dict[str, int]:
    for key, rank in value.items():
        try:
            string_to_point(key)
        except ValueError as exc:
            raise ValueError(f"Checkpoint key must look like 'x,y', got: {key!r}") from exc
        if rank <= 0:
            raise ValueError(f"Checkpoint rank must be positive, got: {rank}")
    return value


class Puzzle(BaseModel):
    """Головоломка (чекпоинты в виде {"x,y": номер})."""
    width: int = Field(gt=0)
    height: int = Field(gt=0)
    checkpoints: Dict[str, int] = {}
    seed: Optional[int] = None
    difficulty: Optional[str] = None
    solution: Optional[List[Cell]] = None

    @field_validator("checkpoints")
    @classmethod
    def validate_checkpoints(cls, value: Dict[str, int]) -> Dict[str, int]:
        return _validate_checkpoint_keys(value)

    @field_validator("width", "height")
    @classmethod
    def validate_size(cls, value: int) -> int:
        return _validate_grid_side(value)

    def to_config(self) -> PuzzleConfig:
        return PuzzleConfig(
            width=self.width,
            height=self.height,
            checkpoints=build_checkpoints(self.checkpoints),
            solution_path=tuple(c.to_point() for c in self.solution) if self.solution else None,
            seed=self.seed,
            difficulty=self.difficulty,
        )

    @classmethod
    def from_config(cls, config: PuzzleConfig, include_solution: bool = False) -> "Puzzle":
        solution = None
        if include_solution and config.solution_path:
            solution = [Cell.from_point(p) for p in config.solution_path]
        return cls(
            width=config.width,
            height=config.height,
            checkpoints=config.checkpoints_as_strings(),
            seed=config.seed,
            difficulty=config.difficulty,
            solution=solution,
        )


class DifficultyTier(BaseModel):
    difficulty: str
    width: int
    height: int
    checkpoints: int
    min_gap: int
    rewire_iterations: int


class NewGameRequest(BaseModel):
    """Запрос новой игры."""
    difficulty: str = "medium"
    seed: Optional[int] = Field(default=None, ge=0)
    input_mode: InputMode = InputMode.BOTH


class CustomGameRequest(BaseModel):
    """Новая игра с произвольными параметрами."""
    width: int = Field(gt=0)
    height: int = Field(gt=0)
    checkpoints: int = Field(gt=0)
    min_gap: int = Field(default=2, ge=1)
    rewire_iterations: Optional[int] = Field(default=None, ge=0)
    seed: Optional[int] = Field(default=None, ge=0)
    input_mode: InputMode = InputMode.BOTH

    @field_validator("rewire_iterations")
    @classmethod
    def validate_rewire_iterations(cls, value: Optional[int]) -> Optional[int]:
        if value is not None and value > settings.MAX_REWIRE_ITERATIONS:
            raise ValueError(f"rewire_iterations must be <= {settings.MAX_REWIRE_ITERATIONS}, got: {value}")
        return value


class StepRequest(BaseModel):
    """Ход: либо клетка, либо направление ('up', 'down', 'left', 'right')."""
    x: Optional[int] = None
    y: Optional[int] = None
    direction: Optional[str] = None


class InputModeRequest(BaseModel):
    mode: InputMode


class SessionResponse(BaseModel):
    """Состояние игровой сессии."""
    session_id: str
    puzzle: Puzzle
    path: List[Cell]
    status: str
    message: Optional[str] = None
    is_complete: bool
    can_undo: bool
    input_mode: InputMode
    elapsed_seconds: int
    elapsed: str
    # Изменил ли последний запрос путь
    accepted: Optional[bool] = None


# ============================================
# STATELESS CORE
# ============================================

class ValidateMoveRequest(BaseModel):
    puzzle: Puzzle
    path: List[Cell] = Field(min_length=1)
    candidate: Cell

    @field_validator("path")
    @classmethod
    def check_path_length(cls, value: List[Cell]) -> List[Cell]:
        return _validate_path_length(value)


class ValidateMoveResponse(BaseModel):
    valid: bool


class ExtendRequest(BaseModel):
    puzzle: Puzzle
    path: List[Cell] = Field(min_length=1)
    target: Cell

    @field_validator("path")
    @classmethod
    def check_path_length(cls, value: List[Cell]) -> List[Cell]:
        return _validate_path_length(value)


class ExtendResponse(BaseModel):
    found: bool
    strategy: Optional[str] = None
    extension: List[Cell] = []


class ClassifyRequest(BaseModel):
    puzzle: Puzzle
    path: List[Cell] = Field(min_length=1)

    @field_validator("path")
    @classmethod
    def check_path_length(cls, value: List[Cell]) -> List[Cell]:
        return _validate_path_length(value)


class ClassifyResponse(BaseModel):
    status: str
    win: bool
    invalid_full: bool
    invalid_incomplete: bool
    message: Optional[str] = None


class VerifyResponse(BaseModel):
    valid: bool
    errors: List[str]
    coverage: float
