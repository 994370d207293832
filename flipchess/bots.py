"""Computer opponent for flip chess."""
from __future__ import annotations

import logging
import random
from typing import Optional, Tuple

from .board import Board, Color, Move
from .game import GameState, MoveResult, apply_flip, apply_move, evaluate_win, pass_turn
from .moves import all_moves

logger = logging.getLogger(__name__)

SELF_CAPTURE_PENALTY = 5
FLIP_REWARD = 10
WIN_REWARD = 1000
TIE_BREAK_RANGE = 2


def score_move(board: Board, move: Move, cpu_color: Color) -> int:
    """Deterministic one-ply score of ``move`` without the random term."""
    cpu_color = Color(cpu_color)
    sim = board.copy()
    piece = sim.squares[move.src.row][move.src.col]
    target = sim.squares[move.dst.row][move.dst.col]
    sim.squares[move.dst.row][move.dst.col] = piece
    sim.squares[move.src.row][move.src.col] = None

    score = 0
    if target is not None and target.color is cpu_color:
        score -= SELF_CAPTURE_PENALTY
    score += FLIP_REWARD * apply_flip(sim, move.dst, piece.color)
    if evaluate_win(sim) is cpu_color:
        score += WIN_REWARD
    return score


def select_cpu_move(board: Board, cpu_color: Color, rng=None) -> Optional[Move]:
    """Pick the greedy best move for ``cpu_color`` or ``None`` if it has none.

    Each candidate is played on a copy of ``board``: eating an own piece costs
    5, every flipped piece earns 10 and a resulting win earns 1000. A random
    value in ``[0, 2)`` drawn from ``rng`` breaks ties; pass a seeded
    ``random.Random`` for reproducible choices.
    """
    cpu_color = Color(cpu_color)
    if rng is None:
        rng = random
    moves = all_moves(board, cpu_color)
    if not moves:
        return None
    best_move = None
    best_score = -float("inf")
    for move in moves:
        score = score_move(board, move, cpu_color) + rng.random() * TIE_BREAK_RANGE
        if score > best_score:
            best_score = score
            best_move = move
    logger.debug("cpu %s picks %s score=%.2f of %d", cpu_color.value, best_move, best_score, len(moves))
    return best_move


def cpu_turn(state: GameState, cpu_color: Color, rng=None) -> Tuple[Optional[Move], MoveResult]:
    """Play the CPU's turn on ``state``, passing when no move exists.

    Returns the chosen move (``None`` for a pass) and the resulting state.
    """
    cpu_color = Color(cpu_color)
    move = select_cpu_move(state.board, cpu_color, rng)
    if move is None:
        logger.info("cpu %s has no moves and passes", cpu_color.value)
        return None, MoveResult(pass_turn(state), 0, None, None)
    return move, apply_move(state, move.src, move.dst)
