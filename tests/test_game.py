import pytest

from flipchess.board import Board, Color, Piece, PieceKind, Position
from flipchess.errors import GameOverError, IllegalMoveError, OutOfRangeError
from flipchess.game import GameState, apply_flip, apply_move, evaluate_win, has_moves, init_game, pass_turn
from flipchess.moves import get_valid_moves

W, B = Color.WHITE, Color.BLACK


def place(board, row, col, kind, color, original=None):
    board.squares[row][col] = Piece(kind, color, original)
    return board.squares[row][col]


def test_init_game():
    state = init_game()
    assert state.turn is W
    assert not state.game_over
    assert state.winner is None
    assert state.last_move is None
    assert state.board == Board.initial()


def test_flip_sandwiched_run():
    board = Board()
    place(board, 3, 0, PieceKind.ROOK, W)
    place(board, 3, 1, PieceKind.PAWN, B)
    place(board, 3, 2, PieceKind.KNIGHT, B)
    place(board, 3, 3, PieceKind.QUEEN, W)
    # Open-ended run below the landing square has no anchor.
    place(board, 4, 3, PieceKind.PAWN, B)
    place(board, 5, 3, PieceKind.PAWN, B)

    assert apply_flip(board, (3, 3), W) == 2
    assert board[(3, 1)].color is W
    assert board[(3, 2)].color is W
    assert board[(3, 1)].original_color is B
    assert board[(4, 3)].color is B
    assert board[(5, 3)].color is B


def test_flip_run_to_edge_does_nothing():
    board = Board()
    place(board, 0, 5, PieceKind.QUEEN, W)
    place(board, 0, 6, PieceKind.PAWN, B)
    place(board, 0, 7, PieceKind.PAWN, B)
    assert apply_flip(board, (0, 5), W) == 0
    assert board[(0, 7)].color is B


def test_flip_needs_at_least_one_opponent():
    board = Board()
    place(board, 4, 4, PieceKind.KING, B)
    place(board, 4, 5, PieceKind.ROOK, B)
    assert apply_flip(board, (4, 4), B) == 0


def test_flips_accumulate_across_directions():
    board = Board()
    place(board, 4, 4, PieceKind.KING, B)
    for row, col in [(3, 3), (3, 4), (4, 3), (5, 5)]:
        place(board, row, col, PieceKind.PAWN, W)
    for row, col in [(2, 2), (2, 4), (4, 2), (6, 6)]:
        place(board, row, col, PieceKind.PAWN, B)
    assert apply_flip(board, (4, 4), B) == 4
    assert all(piece.color is B for _, piece in board.pieces())


def test_no_winner_at_start():
    assert evaluate_win(Board.initial()) is None


def test_flipped_king_loses():
    board = Board.initial()
    board[(0, 4)].color = W
    assert evaluate_win(board) is W
    board = Board.initial()
    board[(7, 4)].color = B
    assert evaluate_win(board) is B


def test_king_check_comes_before_piece_count():
    board = Board()
    # White has a lone king, black has lost its king: the king rule decides.
    place(board, 7, 4, PieceKind.KING, W)
    place(board, 0, 0, PieceKind.ROOK, B)
    place(board, 0, 1, PieceKind.ROOK, B)
    assert evaluate_win(board) is W


def test_single_piece_loses_even_with_king():
    board = Board()
    place(board, 7, 4, PieceKind.KING, W)
    place(board, 0, 4, PieceKind.KING, B)
    place(board, 1, 4, PieceKind.PAWN, B)
    assert evaluate_win(board) is B
    place(board, 7, 3, PieceKind.QUEEN, W)
    board.clear((1, 4))
    assert evaluate_win(board) is W


def test_evaluate_win_does_not_mutate():
    board = Board.initial()
    before = board.copy()
    evaluate_win(board)
    assert board == before


def test_pawn_double_step_is_legal():
    state = init_game()
    result = apply_move(state, (6, 3), (4, 3))
    new_state = result.state
    assert new_state.board[(4, 3)].kind is PieceKind.PAWN
    assert new_state.board[(6, 3)] is None
    assert new_state.turn is B
    assert new_state.last_move == ((6, 3), (4, 3))
    assert result.flipped == 0
    assert result.captured is None
    assert result.winner is None
    # The original state is not touched.
    assert state.board == Board.initial()
    assert state.turn is W


def test_unreachable_square_is_illegal():
    with pytest.raises(IllegalMoveError):
        apply_move(init_game(), (6, 3), (3, 3))


def test_cannot_move_opponent_or_empty_square():
    state = init_game()
    with pytest.raises(IllegalMoveError):
        apply_move(state, (1, 3), (3, 3))
    with pytest.raises(IllegalMoveError):
        apply_move(state, (4, 4), (3, 4))


def test_positions_are_range_checked():
    with pytest.raises(OutOfRangeError):
        apply_move(init_game(), (6, 3), (8, 3))


def test_capturing_own_piece():
    result = apply_move(init_game(), (7, 1), (6, 3))
    assert result.captured == Piece(PieceKind.PAWN, W)
    assert result.state.board.count(W) == 15
    assert result.state.board[(6, 3)].kind is PieceKind.KNIGHT


def test_pass_turn():
    state = init_game()
    passed = pass_turn(state)
    assert passed.turn is B
    assert state.turn is W
    assert passed.board == state.board


def test_finished_game_rejects_moves_and_passes():
    state = GameState()
    state.game_over = True
    with pytest.raises(GameOverError):
        apply_move(state, (6, 3), (4, 3))
    with pytest.raises(GameOverError):
        pass_turn(state)


def test_queen_cannot_take_opponent_on_file():
    board = Board()
    place(board, 0, 0, PieceKind.KING, B)
    place(board, 1, 0, PieceKind.PAWN, B)
    place(board, 4, 0, PieceKind.QUEEN, W)
    place(board, 7, 7, PieceKind.KING, W)
    state = GameState(board, W)

    moves = get_valid_moves(board, (4, 0))
    assert (1, 0) not in moves
    assert Position(2, 0) in moves

    result = apply_move(state, (4, 0), (2, 0))
    # The run above the queen ends at the edge, so nothing flips.
    assert result.flipped == 0
    assert result.winner is None
    assert result.state.board[(1, 0)].color is B
    assert result.state.board[(0, 0)].color is B
    with pytest.raises(IllegalMoveError):
        apply_move(state, (4, 0), (1, 0))


def test_sandwiched_king_ends_the_game():
    board = Board()
    place(board, 0, 0, PieceKind.ROOK, W)
    place(board, 0, 1, PieceKind.KING, B)
    place(board, 1, 5, PieceKind.PAWN, B)
    place(board, 2, 6, PieceKind.KNIGHT, B)
    place(board, 4, 2, PieceKind.QUEEN, W)
    place(board, 7, 7, PieceKind.KING, W)
    state = GameState(board, W)
    assert evaluate_win(board) is None

    result = apply_move(state, (4, 2), (0, 2))
    king = result.state.board[(0, 1)]
    assert result.flipped == 1
    assert king.color is W
    assert king.original_color is B
    assert result.winner is W
    assert result.state.game_over
    assert result.state.winner is W
    # The winner keeps the turn; nothing else may be played.
    assert result.state.turn is W
    with pytest.raises(GameOverError):
        pass_turn(result.state)


def test_state_json():
    state = apply_move(init_game(), (6, 4), (5, 4)).state
    data = state.to_json()
    assert data["turn"] == "black"
    assert data["gameOver"] is False
    assert data["winner"] is None
    assert data["last"] == [[6, 4], [5, 4]]
    assert data["board"][5][4]["type"] == "pawn"


def test_has_moves():
    assert has_moves(init_game())
    board = Board()
    place(board, 0, 3, PieceKind.PAWN, W)
    place(board, 0, 4, PieceKind.KING, B)
    assert not has_moves(GameState(board, W))
    assert has_moves(GameState(board, B))


def test_flip_with_string_color():
    board = Board()
    place(board, 3, 0, PieceKind.ROOK, W)
    place(board, 3, 1, PieceKind.PAWN, B)
    place(board, 3, 2, PieceKind.QUEEN, W)
    assert apply_flip(board, (3, 2), "white") == 1
    assert board[(3, 1)].color is W
    assert GameState(turn="black").turn is B
