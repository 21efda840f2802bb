import pytest

from zip_unlimited.services.logic import PathStatus, Point, PuzzleConfig, build_checkpoints
from zip_unlimited.services.session import (
    GameSession,
    InputMode,
    SessionStore,
    format_time,
    should_allow_click,
    should_allow_drag,
)


def P(x, y):
    return Point(x, y)


@pytest.fixture
def session(serpentine_3x3, clock):
    return GameSession(serpentine_3x3, clock=clock)


# ---------- helpers ----------

@pytest.mark.parametrize("seconds,expected", [
    (0, "00:00"),
    (59, "00:59"),
    (60, "01:00"),
    (65, "01:05"),
    (600, "10:00"),
])
def test_format_time(seconds, expected):
    assert format_time(seconds) == expected


def test_input_mode_gating():
    assert should_allow_drag(InputMode.BOTH)
    assert should_allow_drag(InputMode.DRAG)
    assert not should_allow_drag(InputMode.CLICK)
    assert should_allow_click(InputMode.BOTH)
    assert should_allow_click(InputMode.CLICK)
    assert not should_allow_click(InputMode.DRAG)


# ---------- keyboard ----------

def test_session_starts_on_first_checkpoint(session):
    assert session.path == [P(0, 0)]
    assert session.status == PathStatus.IN_PROGRESS
    assert session.message is None
    assert not session.can_undo


def test_step_accepts_valid_and_rejects_invalid(session):
    assert session.step((1, 1)) is False
    assert not session.can_undo

    assert session.step_direction("right") is True
    assert session.path == [P(0, 0), P(1, 0)]
    assert session.can_undo

    assert session.step_direction("sideways") is False


def test_full_solve_wins_and_stops_timer(session, serpentine_3x3, clock):
    for cell in serpentine_3x3.solution_path[1:]:
        clock.advance(2)
        assert session.step(cell) is True

    assert session.is_complete
    assert session.status == PathStatus.WIN
    assert session.elapsed_seconds == 16

    clock.advance(30)
    assert session.elapsed_seconds == 16
    assert session.step((2, 2)) is False
    assert session.click((0, 0)) is False


# ---------- click ----------

def test_click_extends_by_straight_line(session):
    assert session.click((2, 0)) is True
    assert session.path == [P(0, 0), P(1, 0), P(2, 0)]


def test_click_reaching_last_checkpoint_early_is_reported(session):
    session.click((2, 0))
    assert session.click((2, 2)) is True
    assert session.path[-1] == P(2, 2)
    assert session.status == PathStatus.INVALID_INCOMPLETE
    assert session.message == "All spots must be filled."

    assert session.undo() is True
    assert session.path == [P(0, 0), P(1, 0), P(2, 0)]
    assert session.status == PathStatus.IN_PROGRESS
    assert session.message is None


def test_click_on_trail_truncates(session):
    session.click((2, 0))
    assert session.click((1, 0)) is True
    assert session.path == [P(0, 0), P(1, 0)]

    session.undo()
    assert session.path == [P(0, 0), P(1, 0), P(2, 0)]


def test_click_on_head_does_nothing(session):
    assert session.click((0, 0)) is False
    assert session.path == [P(0, 0)]
    assert not session.can_undo


def test_click_routes_through_checkpoints_in_order(session):
    assert session.click((2, 2)) is True
    assert session.path == [P(0, 0), P(1, 0), P(1, 1), P(2, 1), P(2, 2)]


def test_click_on_unreachable_cell_does_nothing(clock):
    config = PuzzleConfig(3, 1, build_checkpoints({"0,0": 1, "1,0": 3, "2,0": 2}))
    session = GameSession(config, clock=clock)
    assert session.click((2, 0)) is False
    assert session.path == [P(0, 0)]
    assert not session.can_undo


def test_click_disabled_in_drag_mode(serpentine_3x3, clock):
    session = GameSession(serpentine_3x3, input_mode=InputMode.DRAG, clock=clock)
    assert session.click((2, 0)) is False


# ---------- drag ----------

def test_drag_extends_and_retracts(session):
    assert session.drag_to((1, 0)) is False  # not dragging yet

    assert session.begin_drag() is True
    assert session.drag_to((1, 0)) is True
    assert session.drag_to((2, 0)) is True
    assert session.drag_to((0, 0)) is False  # not the predecessor
    assert session.drag_to((1, 0)) is True  # step back
    assert session.path == [P(0, 0), P(1, 0)]
    assert session.drag_to((1, 2)) is False  # not adjacent
    session.end_drag()

    # the whole drag is a single undo step
    assert len(session.history) == 1
    session.undo()
    assert session.path == [P(0, 0)]


def test_drag_disabled_in_click_mode(session):
    session.set_input_mode(InputMode.CLICK)
    assert session.begin_drag() is False


# ---------- history ----------

def test_undo_without_history(session):
    assert session.undo() is False


def test_clear_resets_path_and_timer(session, serpentine_3x3, clock):
    for cell in serpentine_3x3.solution_path[1:]:
        session.step(cell)
    assert session.is_complete

    session.clear()
    assert session.path == [P(0, 0)]
    assert not session.can_undo
    assert not session.is_complete
    assert session.finished_at is None


def test_undo_after_win_reopens_session(session, serpentine_3x3):
    for cell in serpentine_3x3.solution_path[1:]:
        session.step(cell)
    session.undo()
    assert not session.is_complete
    assert session.finished_at is None
    assert session.step(serpentine_3x3.solution_path[-1]) is True
    assert session.is_complete


# ---------- store ----------

def test_session_store_evicts_oldest(serpentine_3x3):
    store = SessionStore(max_sessions=2)
    first, _ = store.create(serpentine_3x3)
    second, _ = store.create(serpentine_3x3)

    # touching the first keeps it alive
    assert store.get(first) is not None
    third, _ = store.create(serpentine_3x3)

    assert len(store) == 2
    assert store.get(second) is None
    assert store.get(first) is not None
    assert store.get(third) is not None
    assert store.delete(third) is True
    assert store.delete(third) is False


# ---------- timer ----------

def test_undo_after_win_does_not_count_idle_time(session, serpentine_3x3, clock):
    for cell in serpentine_3x3.solution_path[1:]:
        clock.advance(2)
        session.step(cell)
    assert session.elapsed_seconds == 16

    clock.advance(30)
    session.undo()
    assert session.elapsed_seconds == 16

    clock.advance(4)
    assert session.elapsed_seconds == 20


def test_clear_after_win_does_not_count_idle_time(session, serpentine_3x3, clock):
    for cell in serpentine_3x3.solution_path[1:]:
        clock.advance(2)
        session.step(cell)

    clock.advance(30)
    session.clear()
    assert session.elapsed_seconds == 16
    assert session.finished_at is None


def test_single_cell_puzzle_is_won_on_start(clock):
    config = PuzzleConfig(1, 1, build_checkpoints({"0,0": 1}))
    session = GameSession(config, clock=clock)
    assert session.status == PathStatus.WIN
    assert session.is_complete

    clock.advance(5)
    session.clear()
    assert session.status == PathStatus.WIN
    assert session.elapsed_seconds == 0
