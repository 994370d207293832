import random

from flipchess.board import Board, Color, Move, Piece, PieceKind, Position
from flipchess.bots import cpu_turn, score_move, select_cpu_move
from flipchess.game import GameState, init_game

W, B = Color.WHITE, Color.BLACK


class FixedRandom:
    """Random source that always returns the same value."""

    def __init__(self, value=0.0):
        self.value = value

    def random(self):
        return self.value


def place(board, row, col, kind, color, original=None):
    board.squares[row][col] = Piece(kind, color, original)


def move(src, dst):
    return Move(Position(*src), Position(*dst))


def flipping_board():
    board = Board()
    place(board, 3, 0, PieceKind.ROOK, W)
    place(board, 3, 1, PieceKind.PAWN, B)
    place(board, 3, 2, PieceKind.PAWN, B)
    place(board, 6, 3, PieceKind.ROOK, W)
    place(board, 7, 7, PieceKind.KING, W)
    place(board, 0, 7, PieceKind.KING, B)
    return board


def test_self_capture_is_penalised():
    board = Board.initial()
    assert score_move(board, move((7, 1), (6, 3)), W) == -5
    assert score_move(board, move((7, 1), (5, 2)), W) == 0


def test_flips_and_win_are_rewarded():
    board = flipping_board()
    # Two flips leave black with only its king, which also wins the game.
    assert score_move(board, move((6, 3), (3, 3)), W) == 2 * 10 + 1000
    assert score_move(board, move((6, 3), (4, 3)), W) == 0


def test_cpu_picks_the_flipping_move():
    board = flipping_board()
    before = board.copy()
    assert select_cpu_move(board, W, FixedRandom()) == move((6, 3), (3, 3))
    assert board == before


def test_ties_go_to_the_first_move_seen():
    board = Board.initial()
    assert select_cpu_move(board, W, FixedRandom(0.0)) == move((6, 0), (5, 0))
    assert select_cpu_move(board, B, FixedRandom(1.5)) == move((0, 1), (2, 0))


def test_seeded_choices_repeat():
    board = Board.initial()
    first = select_cpu_move(board, B, random.Random(7))
    second = select_cpu_move(board, B, random.Random(7))
    assert first == second
    assert board[first.src].color is B


def test_no_moves_returns_none():
    board = Board()
    # A pawn on the far row can neither advance nor take.
    place(board, 0, 3, PieceKind.PAWN, W)
    place(board, 0, 4, PieceKind.KING, B)
    assert select_cpu_move(board, W, FixedRandom()) is None


def test_cpu_turn_plays_move():
    state = GameState(flipping_board(), W)
    chosen, result = cpu_turn(state, W, FixedRandom())
    assert chosen == move((6, 3), (3, 3))
    assert result.flipped == 2
    assert result.winner is W
    assert result.state.game_over


def test_cpu_turn_passes_without_moves():
    board = Board()
    place(board, 0, 3, PieceKind.PAWN, W)
    place(board, 0, 4, PieceKind.KING, B)
    chosen, result = cpu_turn(GameState(board, W), W, FixedRandom())
    assert chosen is None
    assert result.state.turn is B
    assert result.flipped == 0


def test_cpu_reply_from_initial_position():
    state = init_game()
    chosen, result = cpu_turn(state, W, random.Random(1))
    assert result.state.last_move == chosen
    assert result.state.turn is B
    assert result.state.board[chosen.src] is None


def test_string_cpu_color():
    board = flipping_board()
    assert select_cpu_move(board, "white", FixedRandom()) == move((6, 3), (3, 3))
    assert select_cpu_move(Board.initial(), "black", FixedRandom()) == move((0, 1), (2, 0))
