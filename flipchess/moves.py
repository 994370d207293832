"""Move generation for each piece kind.

Captures in flip chess only ever land on pieces of the mover's own color:
pawns take diagonally onto their own side, knights, kings and sliders may
end on an own piece, and opponent pieces simply block. Opponents are beaten
by flipping, not by removal.
"""
from __future__ import annotations

from typing import Callable, Dict, List, Sequence, Tuple

from .board import Board, Color, Move, Piece, PieceKind, Position, check_position, inside

KNIGHT_OFFSETS = [
    (-2, -1), (-2, 1), (-1, -2), (-1, 2),
    (1, -2), (1, 2), (2, -1), (2, 1),
]
KING_OFFSETS = [
    (-1, -1), (-1, 0), (-1, 1),
    (0, -1),           (0, 1),
    (1, -1),  (1, 0),  (1, 1),
]
ORTHOGONAL = [(0, 1), (0, -1), (1, 0), (-1, 0)]
DIAGONAL = [(1, 1), (1, -1), (-1, 1), (-1, -1)]

MoveGenerator = Callable[[Board, Position, Piece], List[Position]]


def _pawn_moves(board: Board, pos: Position, piece: Piece) -> List[Position]:
    # Orientation follows the color the pawn started with.
    direction = -1 if piece.original_color is Color.WHITE else 1
    start_row = 6 if piece.original_color is Color.WHITE else 1
    squares = board.squares
    moves = []

    row = pos.row + direction
    if inside(row, pos.col) and squares[row][pos.col] is None:
        moves.append(Position(row, pos.col))
        two = pos.row + 2 * direction
        if pos.row == start_row and inside(two, pos.col) and squares[two][pos.col] is None:
            moves.append(Position(two, pos.col))

    for dc in (-1, 1):
        col = pos.col + dc
        if inside(row, col):
            target = squares[row][col]
            if target is not None and target.color is piece.color:
                moves.append(Position(row, col))
    return moves


def _step_moves(offsets: Sequence[Tuple[int, int]]) -> MoveGenerator:
    def generate(board: Board, pos: Position, piece: Piece) -> List[Position]:
        moves = []
        for dr, dc in offsets:
            row, col = pos.row + dr, pos.col + dc
            if not inside(row, col):
                continue
            target = board.squares[row][col]
            if target is None or target.color is piece.color:
                moves.append(Position(row, col))
        return moves

    return generate


def _slide_moves(directions: Sequence[Tuple[int, int]]) -> MoveGenerator:
    def generate(board: Board, pos: Position, piece: Piece) -> List[Position]:
        moves = []
        for dr, dc in directions:
            row, col = pos.row + dr, pos.col + dc
            while inside(row, col):
                target = board.squares[row][col]
                if target is None:
                    moves.append(Position(row, col))
                else:
                    if target.color is piece.color:
                        moves.append(Position(row, col))
                    break
                row += dr
                col += dc
        return moves

    return generate


GENERATORS: Dict[PieceKind, MoveGenerator] = {
    PieceKind.PAWN: _pawn_moves,
    PieceKind.KNIGHT: _step_moves(KNIGHT_OFFSETS),
    PieceKind.KING: _step_moves(KING_OFFSETS),
    PieceKind.ROOK: _slide_moves(ORTHOGONAL),
    PieceKind.BISHOP: _slide_moves(DIAGONAL),
    PieceKind.QUEEN: _slide_moves(ORTHOGONAL + DIAGONAL),
}


def generate_moves(board: Board, position, piece: Piece) -> List[Position]:
    """Return every square ``piece`` standing on ``position`` may move to."""
    return GENERATORS[piece.kind](board, check_position(position), piece)


def get_valid_moves(board: Board, position) -> List[Position]:
    """Destinations for whatever stands on ``position``; empty cells have none."""
    pos = check_position(position)
    piece = board.squares[pos.row][pos.col]
    if piece is None:
        return []
    return generate_moves(board, pos, piece)


def all_moves(board: Board, color: Color) -> List[Move]:
    color = Color(color)
    moves = []
    for pos, piece in board.pieces(color):
        for dst in GENERATORS[piece.kind](board, pos, piece):
            moves.append(Move(pos, dst))
    return moves
