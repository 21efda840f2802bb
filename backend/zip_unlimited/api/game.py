"""
Zip Unlimited - Game API

Игровые сессии живут в памяти процесса (LRU).
Stateless endpoints (validate-move / extend / classify / verify)
работают только с присланными головоломкой и путём.
"""

import logging
import time
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Request

from ..config import settings
from ..middleware.security import limiter, GAME_RATE_LIMIT
from ..schemas import (
    Cell, Puzzle, DifficultyTier, NewGameRequest, CustomGameRequest, StepRequest,
    InputModeRequest, SessionResponse, ValidateMoveRequest, ValidateMoveResponse,
    ExtendRequest, ExtendResponse, ClassifyRequest, ClassifyResponse, VerifyResponse,
)
from ..services.generator import generate_custom_puzzle, generate_puzzle, get_tier_table
from ..services.logic import (
    Point, classify_path, check_invalid_full_board, check_invalid_not_full, check_win,
    is_valid_move, status_message, validate_path,
)
from ..services.pathfinding import find_extension
from ..services.session import GameSession, SessionStore, format_time


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/game", tags=["game"])


# ============================================
# SESSION STORE (in-memory LRU)
# ============================================

session_store = SessionStore(max_sessions=settings.SESSION_MAX)


def get_session_store() -> SessionStore:
    return session_store


def _get_session_or_404(session_id: str, store: SessionStore) -> GameSession:
    session = store.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return session


def _serialize_session(session_id: str, session: GameSession, accepted: bool | None = None) -> SessionResponse:
    """Конвертирует GameSession в Pydantic SessionResponse."""
    elapsed = session.elapsed_seconds
    return SessionResponse(
        session_id=session_id,
        puzzle=Puzzle.from_config(session.puzzle, include_solution=settings.solution_visible),
        path=[Cell.from_point(p) for p in session.path],
        status=session.status.value,
        message=session.message,
        is_complete=session.is_complete,
        can_undo=session.can_undo,
        input_mode=session.input_mode,
        elapsed_seconds=elapsed,
        elapsed=format_time(elapsed),
        accepted=accepted,
    )


def _to_points(cells: List[Cell]) -> List[Point]:
    return [c.to_point() for c in cells]


# ============================================
# ENDPOINTS: NEW GAME
# ============================================

@router.get("/tiers", response_model=List[DifficultyTier])
async def get_tiers():
    return [DifficultyTier(**row) for row in get_tier_table()]


@router.post("/new", response_model=SessionResponse)
@limiter.limit(GAME_RATE_LIMIT)
async def new_game(
    request: Request,
    body: NewGameRequest,
    store: SessionStore = Depends(get_session_store),
):
    started = time.monotonic()
    puzzle = generate_puzzle(
        body.difficulty,
        seed=body.seed,
        max_attempts=settings.CHECKPOINT_PLACEMENT_ATTEMPTS,
    )
    session_id, session = store.create(puzzle, input_mode=body.input_mode)

    endpoint_ms = (time.monotonic() - started) * 1000
    logger.info(
        f"[NewGame] session={session_id} difficulty={puzzle.difficulty} seed={puzzle.seed} "
        f"endpoint_ms={endpoint_ms:.1f} sessions={len(store)}"
    )
    return _serialize_session(session_id, session)


@router.post("/new/custom", response_model=SessionResponse)
@limiter.limit(GAME_RATE_LIMIT)
async def new_custom_game(
    request: Request,
    body: CustomGameRequest,
    store: SessionStore = Depends(get_session_store),
):
    if body.width > settings.MAX_GRID_SIZE or body.height > settings.MAX_GRID_SIZE:
        raise HTTPException(
            status_code=400,
            detail=f"Grid too large (max {settings.MAX_GRID_SIZE}x{settings.MAX_GRID_SIZE})",
        )

    try:
        puzzle = generate_custom_puzzle(
            body.width,
            body.height,
            body.checkpoints,
            min_gap=body.min_gap,
            rewire_iterations=body.rewire_iterations,
            seed=body.seed,
            max_attempts=settings.CHECKPOINT_PLACEMENT_ATTEMPTS,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    session_id, session = store.create(puzzle, input_mode=body.input_mode)
    logger.info(f"[NewCustomGame] session={session_id} {puzzle.width}x{puzzle.height} seed={puzzle.seed}")
    return _serialize_session(session_id, session)


# ============================================
# ENDPOINTS: STATELESS CORE
# ============================================

@router.post("/validate-move", response_model=ValidateMoveResponse)
@limiter.limit(GAME_RATE_LIMIT)
async def validate_move(request: Request, body: ValidateMoveRequest):
    config = body.puzzle.to_config()
    return ValidateMoveResponse(
        valid=is_valid_move(_to_points(body.path), body.candidate.to_point(), config),
    )


@router.post("/extend", response_model=ExtendResponse)
@limiter.limit(GAME_RATE_LIMIT)
async def extend_path(request: Request, body: ExtendRequest):
    config = body.puzzle.to_config()
    path = _to_points(body.path)
    result = find_extension(path[-1], body.target.to_point(), path, config)
    if result is None:
        return ExtendResponse(found=False)

    strategy, cells = result
    return ExtendResponse(
        found=True,
        strategy=strategy,
        extension=[Cell.from_point(p) for p in cells],
    )


@router.post("/classify", response_model=ClassifyResponse)
@limiter.limit(GAME_RATE_LIMIT)
async def classify(request: Request, body: ClassifyRequest):
    config = body.puzzle.to_config()
    path = _to_points(body.path)
    status = classify_path(path, config)
    return ClassifyResponse(
        status=status.value,
        win=check_win(path, config),
        invalid_full=check_invalid_full_board(path, config),
        invalid_incomplete=check_invalid_not_full(path, config),
        message=status_message(status),
    )


@router.post("/verify", response_model=VerifyResponse)
@limiter.limit(GAME_RATE_LIMIT)
async def verify(request: Request, body: ClassifyRequest):
    """Полная проверка решения (как validate_level)."""
    result = validate_path(_to_points(body.path), body.puzzle.to_config())
    return VerifyResponse(**result)


# ============================================
# ENDPOINTS: SESSION
# ============================================

@router.get("/{session_id}", response_model=SessionResponse)
async def get_game(session_id: str, store: SessionStore = Depends(get_session_store)):
    session = _get_session_or_404(session_id, store)
    return _serialize_session(session_id, session)


@router.delete("/{session_id}")
async def delete_game(session_id: str, store: SessionStore = Depends(get_session_store)):
    if not store.delete(session_id):
        raise HTTPException(status_code=404, detail="Session not found")
    return {"success": True}


@router.post("/{session_id}/step", response_model=SessionResponse)
async def step(session_id: str, body: StepRequest, store: SessionStore = Depends(get_session_store)):
    session = _get_session_or_404(session_id, store)

    if body.direction is not None:
        accepted = session.step_direction(body.direction.strip().lower())
    elif body.x is not None and body.y is not None:
        accepted = session.step((body.x, body.y))
    else:
        raise HTTPException(status_code=400, detail="Provide either direction or x and y")

    return _serialize_session(session_id, session, accepted)


@router.post("/{session_id}/click", response_model=SessionResponse)
async def click(session_id: str, body: Cell, store: SessionStore = Depends(get_session_store)):
    session = _get_session_or_404(session_id, store)
    accepted = session.click(body.to_point())
    return _serialize_session(session_id, session, accepted)


@router.post("/{session_id}/drag/start", response_model=SessionResponse)
async def drag_start(session_id: str, store: SessionStore = Depends(get_session_store)):
    session = _get_session_or_404(session_id, store)
    accepted = session.begin_drag()
    return _serialize_session(session_id, session, accepted)


@router.post("/{session_id}/drag", response_model=SessionResponse)
async def drag(session_id: str, body: Cell, store: SessionStore = Depends(get_session_store)):
    session = _get_session_or_404(session_id, store)
    accepted = session.drag_to(body.to_point())
    return _serialize_session(session_id, session, accepted)


@router.post("/{session_id}/drag/end", response_model=SessionResponse)
async def drag_end(session_id: str, store: SessionStore = Depends(get_session_store)):
    session = _get_session_or_404(session_id, store)
    session.end_drag()
    return _serialize_session(session_id, session)


@router.post("/{session_id}/undo", response_model=SessionResponse)
async def undo(session_id: str, store: SessionStore = Depends(get_session_store)):
    session = _get_session_or_404(session_id, store)
    accepted = session.undo()
    return _serialize_session(session_id, session, accepted)


@router.post("/{session_id}/clear", response_model=SessionResponse)
async def clear(session_id: str, store: SessionStore = Depends(get_session_store)):
    session = _get_session_or_404(session_id, store)
    session.clear()
    return _serialize_session(session_id, session, True)


@router.post("/{session_id}/input-mode", response_model=SessionResponse)
async def set_input_mode(
    session_id: str,
    body: InputModeRequest,
    store: SessionStore = Depends(get_session_store),
):
    session = _get_session_or_404(session_id, store)
    session.set_input_mode(body.mode)
    return _serialize_session(session_id, session)
