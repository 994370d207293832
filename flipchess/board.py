"""Board model for flip chess."""
from __future__ import annotations

from enum import Enum
from typing import Iterator, List, NamedTuple, Optional, Tuple

from .errors import InvalidBoardError, OutOfRangeError

BOARD_SIZE = 8


class Color(str, Enum):
    WHITE = "white"
    BLACK = "black"

    @property
    def opponent(self) -> "Color":
        return Color.BLACK if self is Color.WHITE else Color.WHITE


class PieceKind(str, Enum):
    KING = "king"
    QUEEN = "queen"
    ROOK = "rook"
    BISHOP = "bishop"
    KNIGHT = "knight"
    PAWN = "pawn"


BACK_RANK = [
    PieceKind.ROOK, PieceKind.KNIGHT, PieceKind.BISHOP, PieceKind.QUEEN,
    PieceKind.KING, PieceKind.BISHOP, PieceKind.KNIGHT, PieceKind.ROOK,
]

# Letters used by ``Board.__str__``; white is uppercase.
LETTERS = {
    PieceKind.KING: "k",
    PieceKind.QUEEN: "q",
    PieceKind.ROOK: "r",
    PieceKind.BISHOP: "b",
    PieceKind.KNIGHT: "n",
    PieceKind.PAWN: "p",
}


class Position(NamedTuple):
    row: int
    col: int


class Move(NamedTuple):
    src: Position
    dst: Position


def inside(row: int, col: int) -> bool:
    return 0 <= row < BOARD_SIZE and 0 <= col < BOARD_SIZE


def check_position(pos) -> Position:
    """Return ``pos`` as a :class:`Position`, raising if it is off the board."""
    try:
        row, col = pos
    except (TypeError, ValueError):
        raise OutOfRangeError(f"Not a board position: {pos!r}") from None
    # No coercion: 6.7 or "6" must not quietly become row 6.
    if any(not isinstance(v, int) or isinstance(v, bool) for v in (row, col)):
        raise OutOfRangeError(f"Not a board position: {pos!r}")
    if not inside(row, col):
        raise OutOfRangeError(f"Position out of range: ({row}, {col})")
    return Position(row, col)


class Piece:
    """A chess piece whose color can be flipped.

    ``original_color`` is fixed when the piece is created and keeps deciding
    which way a pawn walks after any number of flips.
    """

    __slots__ = ("kind", "color", "_original_color")

    def __init__(self, kind: PieceKind, color: Color, original_color: Optional[Color] = None) -> None:
        self.kind = PieceKind(kind)
        self.color = Color(color)
        self._original_color = self.color if original_color is None else Color(original_color)

    @property
    def original_color(self) -> Color:
        return self._original_color

    @property
    def flipped(self) -> bool:
        return self.color is not self._original_color

    def copy(self) -> "Piece":
        return Piece(self.kind, self.color, self._original_color)

    def to_json(self) -> dict:
        return {
            "type": self.kind.value,
            "color": self.color.value,
            "originalColor": self._original_color.value,
        }

    @classmethod
    def from_json(cls, data: dict) -> "Piece":
        try:
            kind = PieceKind(data["type"])
            color = Color(data["color"])
            original = Color(data.get("originalColor", data["color"]))
        except (KeyError, TypeError, ValueError) as exc:
            raise InvalidBoardError(f"Invalid piece: {data!r}") from exc
        return cls(kind, color, original)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Piece):
            return NotImplemented
        return (
            self.kind is other.kind
            and self.color is other.color
            and self._original_color is other._original_color
        )

    def __repr__(self) -> str:
        return f"Piece({self.kind.value}, {self.color.value}, original={self._original_color.value})"


class Board:
    """8x8 grid of pieces, row 0 at the top (black's back rank)."""

    def __init__(self, squares: Optional[List[List[Optional[Piece]]]] = None) -> None:
        if squares is None:
            squares = [[None for _ in range(BOARD_SIZE)] for _ in range(BOARD_SIZE)]
        self.squares = squares

    @classmethod
    def initial(cls) -> "Board":
        board = cls()
        for row, color, kinds in (
            (0, Color.BLACK, BACK_RANK),
            (1, Color.BLACK, [PieceKind.PAWN] * BOARD_SIZE),
            (6, Color.WHITE, [PieceKind.PAWN] * BOARD_SIZE),
            (7, Color.WHITE, BACK_RANK),
        ):
            for col, kind in enumerate(kinds):
                board.squares[row][col] = Piece(kind, color)
        return board

    def copy(self) -> "Board":
        """Return a deep copy; pieces are duplicated, not shared."""
        new_board = Board.__new__(Board)
        new_board.squares = [
            [piece.copy() if piece else None for piece in row] for row in self.squares
        ]
        return new_board

    def __getitem__(self, pos) -> Optional[Piece]:
        row, col = check_position(pos)
        return self.squares[row][col]

    def __setitem__(self, pos, piece: Optional[Piece]) -> None:
        row, col = check_position(pos)
        self.squares[row][col] = piece

    def clear(self, pos) -> Optional[Piece]:
        """Empty the cell at ``pos`` and return whatever was there."""
        row, col = check_position(pos)
        piece = self.squares[row][col]
        self.squares[row][col] = None
        return piece

    def pieces(self, color: Optional[Color] = None) -> Iterator[Tuple[Position, Piece]]:
        if color is not None:
            color = Color(color)
        for row in range(BOARD_SIZE):
            for col in range(BOARD_SIZE):
                piece = self.squares[row][col]
                if piece and (color is None or piece.color is color):
                    yield Position(row, col), piece

    def count(self, color: Color) -> int:
        return sum(1 for _ in self.pieces(color))

    def to_json(self) -> List[List[Optional[dict]]]:
        return [[piece.to_json() if piece else None for piece in row] for row in self.squares]

    @classmethod
    def from_json(cls, data) -> "Board":
        if not isinstance(data, list) or len(data) != BOARD_SIZE:
            raise InvalidBoardError("Board must have 8 rows")
        if any(not isinstance(row, list) or len(row) != BOARD_SIZE for row in data):
            raise InvalidBoardError("Each row must have 8 cells")
        return cls([[Piece.from_json(cell) if cell else None for cell in row] for row in data])

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Board):
            return NotImplemented
        return self.squares == other.squares

    def __str__(self) -> str:
        lines = []
        for row in self.squares:
            cells = []
            for piece in row:
                if piece is None:
                    cells.append(".")
                    continue
                letter = LETTERS[piece.kind]
                cells.append(letter.upper() if piece.color is Color.WHITE else letter)
            lines.append(" ".join(cells))
        return "\n".join(lines)


def create_initial_board() -> Board:
    return Board.initial()


def clone(board: Board) -> Board:
    return board.copy()
