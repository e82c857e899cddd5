import random
import threading

import pytest

from tile_drop.game import (
    Command,
    GameConfig,
    GameGrid,
    GameSession,
    GameState,
    Piece,
    PieceGenerator,
    SessionStatus,
    hard_drop,
    parse_command,
    resolve,
    transition,
)
from tile_drop.game.grid import is_tile_value

from conftest import ALTERNATING_2_4_AT_COL3, TWO_AT_COL3, SequenceSource


def test_initial_state(make_session):
    session = make_session(TWO_AT_COL3)
    state = session.state
    assert state.status is SessionStatus.PLAYING
    assert state.current_piece == Piece(2, 3, 0)
    assert state.next_piece == Piece(2, 3, 0)
    assert state.score == 0
    assert state.highest_tile == 0
    assert state.grid.max_value() == 0
    assert state.grid.frozen


def test_soft_drop_eight_times_commits_at_bottom(make_session):
    session = make_session(TWO_AT_COL3)
    for _ in range(7):
        state = session.soft_drop()
    assert state.current_piece.y == 7
    assert state.grid.max_value() == 0

    state = session.soft_drop()
    assert state.grid.get(3, 7) == 2
    assert state.score == 0
    assert state.highest_tile == 2
    assert state.status is SessionStatus.PLAYING
    assert state.current_piece == Piece(2, 3, 0)


def test_second_piece_merges_down(make_session):
    session = make_session(TWO_AT_COL3)
    session.hard_drop()
    state = session.hard_drop()
    assert state.grid.get(3, 7) == 4
    assert state.grid.get(3, 6) == 0
    assert state.score == 4
    assert state.highest_tile == 4


def test_filled_column_ends_the_game(make_session):
    session = make_session(ALTERNATING_2_4_AT_COL3)
    for _ in range(7):
        state = session.hard_drop()
        assert state.status is SessionStatus.PLAYING
    assert [state.grid.get(3, y) for y in range(1, 8)] == [2, 4, 2, 4, 2, 4, 2]

    state = session.hard_drop()
    assert state.status is SessionStatus.GAME_OVER
    assert state.game_over
    assert state.grid.get(3, 0) == 4
    assert state.score == 0
    assert state.highest_tile == 4


def test_occupied_spawn_cell_is_not_overwritten():
    grid = GameGrid()
    for y, v in enumerate([4, 2, 4, 2, 4, 2, 4, 2]):
        grid.set(3, y, v)
    state = GameState(grid=grid.freeze(), current_piece=Piece(2, 3, 0), next_piece=Piece(2, 5, 0))
    gen = PieceGenerator(SequenceSource(TWO_AT_COL3))

    after = transition(state, Command.TICK, gen)
    assert after.status is SessionStatus.GAME_OVER
    assert after.grid.get(3, 0) == 4
    assert after.score == 0


def test_game_over_is_terminal_except_restart(make_session):
    session = make_session(ALTERNATING_2_4_AT_COL3)
    for _ in range(8):
        session.hard_drop()
    over = session.state
    assert over.game_over
    for command in (Command.MOVE_LEFT, Command.MOVE_RIGHT, Command.SOFT_DROP,
                    Command.HARD_DROP, Command.TICK, Command.TOGGLE_PAUSE):
        assert session.dispatch(command) is over

    fresh = session.restart()
    assert fresh.status is SessionStatus.PLAYING
    assert fresh.score == 0
    assert fresh.highest_tile == 0
    assert fresh.grid.max_value() == 0


def test_horizontal_moves(make_session):
    session = make_session(TWO_AT_COL3)
    assert session.move_left().current_piece.x == 2
    assert session.move_right().current_piece.x == 3
    for _ in range(3):
        session.move_left()
    at_wall = session.state
    assert at_wall.current_piece.x == 0
    assert session.move_left() is at_wall


def test_pause_blocks_everything_but_toggle_and_restart(make_session):
    session = make_session(TWO_AT_COL3)
    session.hard_drop()
    scored = session.hard_drop()
    assert scored.score == 4

    paused = session.toggle_pause()
    assert paused.status is SessionStatus.PAUSED
    assert paused.paused
    assert session.move_left() is paused
    assert session.tick() is paused
    assert session.soft_drop() is paused
    assert session.hard_drop() is paused

    resumed = session.toggle_pause()
    assert resumed.status is SessionStatus.PLAYING
    assert resumed.grid == paused.grid

    session.toggle_pause()
    restarted = session.restart()
    assert restarted.status is SessionStatus.PLAYING
    assert restarted.score == 0


def test_tick_and_soft_drop_are_equivalent_while_playing(make_session):
    a = make_session(TWO_AT_COL3)
    b = make_session(TWO_AT_COL3)
    for _ in range(9):
        sa = a.tick()
        sb = b.soft_drop()
    assert sa.grid == sb.grid
    assert sa.current_piece == sb.current_piece


def test_transition_does_not_mutate_input():
    gen = PieceGenerator(SequenceSource(TWO_AT_COL3))
    grid = GameGrid()
    grid.set(3, 7, 2)
    state = GameState(grid=grid.freeze(), current_piece=Piece(2, 3, 0), next_piece=Piece(4, 1, 0))
    snapshot = state.grid.copy()

    after = transition(state, Command.HARD_DROP, gen)
    assert after is not state
    assert state.grid == snapshot
    assert state.current_piece == Piece(2, 3, 0)
    assert state.score == 0
    assert after.score == 4
    assert after.current_piece == Piece(4, 1, 0)


def test_view_overlays_falling_piece(make_session):
    session = make_session(TWO_AT_COL3)
    state = session.soft_drop()
    view = state.view()
    assert view[1, 3] == 2
    assert state.grid.get(3, 1) == 0
    view[0, 0] = 64
    assert state.grid.get(0, 0) == 0


def test_to_dict(make_session):
    data = make_session(TWO_AT_COL3).state.to_dict()
    assert data["score"] == 0
    assert data["status"] == "playing"
    assert data["current_piece"] == {"value": 2, "x": 3, "y": 0}
    assert data["next_value"] == 2
    assert data["grid"].shape == (8, 8)


@pytest.mark.parametrize(
    "name, expected",
    [
        ("moveLeft", Command.MOVE_LEFT),
        ("move_right", Command.MOVE_RIGHT),
        ("SOFT_DROP", Command.SOFT_DROP),
        ("hardDrop", Command.HARD_DROP),
        ("togglePause", Command.TOGGLE_PAUSE),
        ("restart", Command.RESTART),
        (Command.TICK, Command.TICK),
    ],
)
def test_parse_command(name, expected):
    assert parse_command(name) is expected


def test_unknown_command_is_rejected_at_the_boundary(make_session):
    session = make_session(TWO_AT_COL3)
    before = session.state
    with pytest.raises(ValueError):
        session.dispatch("rotate")
    with pytest.raises(ValueError):
        parse_command(42)
    assert session.state is before


def test_config_validation():
    with pytest.raises(ValueError):
        GameConfig(rows=0)
    with pytest.raises(ValueError):
        GameConfig(two_probability=1.5)
    with pytest.raises(ValueError):
        GameConfig(tick_interval_ms=0)


def test_random_play_invariants():
    rng = random.Random(7)
    session = GameSession(GameConfig(random_seed=3))
    commands = [Command.MOVE_LEFT, Command.MOVE_RIGHT, Command.SOFT_DROP, Command.HARD_DROP, Command.TICK]
    prev = session.state
    for _ in range(3000):
        command = rng.choice(commands)
        if prev.game_over:
            command = Command.RESTART
        expected_gain = None
        if command == Command.HARD_DROP and not prev.game_over:
            landed = hard_drop(prev.current_piece, prev.grid)
            placed = prev.grid.copy()
            if placed.is_empty(landed.x, landed.y):
                placed.set(landed.x, landed.y, landed.value)
            expected_gain = resolve(placed).score

        state = session.dispatch(command)
        for _, _, v in state.grid.cells():
            assert is_tile_value(v)
        assert state.highest_tile >= state.grid.max_value()
        if command != Command.RESTART:
            assert state.score >= prev.score
            assert state.highest_tile >= prev.highest_tile
        if expected_gain is not None:
            assert state.score - prev.score == expected_gain
        prev = state


def test_concurrent_commands_are_serialized():
    session = GameSession(GameConfig(random_seed=11))
    errors = []

    def worker(command):
        try:
            for _ in range(300):
                session.dispatch(command)
        except Exception as exc:  # pragma: no cover
            errors.append(exc)

    threads = [threading.Thread(target=worker, args=(c,)) for c in
               (Command.TICK, Command.MOVE_LEFT, Command.MOVE_RIGHT, Command.SOFT_DROP)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert not errors
    for _, _, v in session.state.grid.cells():
        assert is_tile_value(v)


def test_snapshot_returns_current_state(make_session):
    session = make_session(TWO_AT_COL3)
    assert session.snapshot() is session.state
    dropped = session.hard_drop()
    assert session.snapshot() is dropped


def test_states_are_hashable(make_session):
    session = make_session(TWO_AT_COL3)
    first = session.state
    other = make_session(TWO_AT_COL3).state
    assert first == other
    assert hash(first) == hash(other)
    dropped = session.hard_drop()
    assert len({first, other, dropped}) == 2
