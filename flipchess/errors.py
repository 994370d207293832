"""Exceptions raised by the flip chess core."""
from __future__ import annotations


class FlipChessError(Exception):
    """Base class for rule engine errors."""


class OutOfRangeError(FlipChessError, ValueError):
    """A position lies outside the 8x8 board."""


class IllegalMoveError(FlipChessError):
    """The requested move is not available to the side to move."""


class GameOverError(FlipChessError):
    """The game has finished and accepts no further moves."""


class InvalidBoardError(FlipChessError):
    """A board snapshot could not be decoded."""
