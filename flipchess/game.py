"""Flip chess turn, flip and win logic."""
from __future__ import annotations

import logging
from typing import List, NamedTuple, Optional

from .board import BOARD_SIZE, Board, Color, Move, Piece, PieceKind, check_position, inside
from .errors import GameOverError, IllegalMoveError
from .moves import all_moves, generate_moves

logger = logging.getLogger(__name__)

DIRECTIONS = [
    (-1, -1), (0, -1), (1, -1),
    (-1, 0),           (1, 0),
    (-1, 1),  (0, 1),  (1, 1),
]


class GameState:
    """Board, side to move and terminal flag for one game."""

    def __init__(self, board: Optional[Board] = None, turn: Color = Color.WHITE) -> None:
        self.board = board if board is not None else Board.initial()
        self.turn = Color(turn)
        self.game_over = False
        self.winner: Optional[Color] = None
        # Most recent move, ``None`` before the first one.
        self.last_move: Optional[Move] = None

    def copy(self) -> "GameState":
        new_state = GameState.__new__(GameState)
        new_state.board = self.board.copy()
        new_state.turn = self.turn
        new_state.game_over = self.game_over
        new_state.winner = self.winner
        new_state.last_move = self.last_move
        return new_state

    def to_json(self) -> dict:
        last = self.last_move
        return {
            "board": self.board.to_json(),
            "turn": self.turn.value,
            "gameOver": self.game_over,
            "winner": self.winner.value if self.winner else None,
            "last": [list(last.src), list(last.dst)] if last else None,
        }


class MoveResult(NamedTuple):
    state: GameState
    flipped: int
    captured: Optional[Piece]
    winner: Optional[Color]


def apply_flip(board: Board, position, color: Color) -> int:
    """Flip every opposing run sandwiched between ``position`` and a ``color`` anchor.

    Only ``color`` changes on a flipped piece; its original color stays.
    Returns the number of pieces flipped across all eight directions.
    """
    color = Color(color)
    row, col = check_position(position)
    squares = board.squares
    flipped = 0
    for dr, dc in DIRECTIONS:
        r, c = row + dr, col + dc
        run: List[Piece] = []
        while inside(r, c) and squares[r][c] is not None and squares[r][c].color is not color:
            run.append(squares[r][c])
            r += dr
            c += dc
        if run and inside(r, c) and squares[r][c] is not None:
            for piece in run:
                piece.color = color
            flipped += len(run)
    return flipped


def evaluate_win(board: Board) -> Optional[Color]:
    """Return the winning color for ``board`` or ``None`` if play continues.

    Checked in a fixed order: a side without a king of its own color loses
    (white first, then black); otherwise a side with at most one piece loses
    (again white first).
    """
    kings = {Color.WHITE: False, Color.BLACK: False}
    counts = {Color.WHITE: 0, Color.BLACK: 0}
    for r in range(BOARD_SIZE):
        for c in range(BOARD_SIZE):
            piece = board.squares[r][c]
            if piece is None:
                continue
            counts[piece.color] += 1
            if piece.kind is PieceKind.KING:
                kings[piece.color] = True

    for color in (Color.WHITE, Color.BLACK):
        if not kings[color]:
            return color.opponent
    for color in (Color.WHITE, Color.BLACK):
        if counts[color] <= 1:
            return color.opponent
    return None


def init_game() -> GameState:
    return GameState()


def has_moves(state: GameState) -> bool:
    return bool(all_moves(state.board, state.turn))


def apply_move(state: GameState, src, dst) -> MoveResult:
    """Play ``src`` -> ``dst`` for the side to move and return the new state.

    ``state`` itself is left untouched.
    """
    src = check_position(src)
    dst = check_position(dst)
    if state.game_over:
        raise GameOverError("Game is over")
    piece = state.board.squares[src.row][src.col]
    if piece is None or piece.color is not state.turn:
        raise IllegalMoveError(f"No {state.turn.value} piece at {tuple(src)}")
    if dst not in generate_moves(state.board, src, piece):
        raise IllegalMoveError(f"{piece.kind.value} cannot move from {tuple(src)} to {tuple(dst)}")

    new_state = state.copy()
    board = new_state.board
    moving = board.clear(src)
    captured = board[dst]
    board[dst] = moving
    new_state.last_move = Move(src, dst)

    flipped = apply_flip(board, dst, moving.color)
    winner = evaluate_win(board)
    logger.debug(
        "%s %s %s -> %s flipped=%d captured=%s",
        state.turn.value, moving.kind.value, tuple(src), tuple(dst), flipped, captured is not None,
    )
    if winner is not None:
        new_state.game_over = True
        new_state.winner = winner
        logger.info("%s wins", winner.value)
    else:
        new_state.turn = state.turn.opponent
    return MoveResult(new_state, flipped, captured, winner)


def pass_turn(state: GameState) -> GameState:
    if state.game_over:
        raise GameOverError("Game is over")
    new_state = state.copy()
    new_state.turn = state.turn.opponent
    logger.debug("%s passes", state.turn.value)
    return new_state
