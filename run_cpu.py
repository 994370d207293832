#!/usr/bin/env python3
"""Ask the CPU opponent for its move on a board snapshot."""
import argparse
import json
import logging
import random
from pathlib import Path

from flipchess.board import Board, Color
from flipchess.bots import select_cpu_move
from flipchess.errors import FlipChessError
from flipchess.game import GameState


def load_state(path: Path) -> GameState:
    """Load a board snapshot from ``path``.

    The file may hold a state as sent in the server's ``update`` messages
    (``{"board": ..., "turn": ...}``) or just the list of board rows, in which
    case white is to move.
    """
    with path.open() as f:
        data = json.load(f)
    if isinstance(data, dict):
        board = Board.from_json(data.get("board"))
        turn = Color(data.get("turn", Color.WHITE.value))
    else:
        board = Board.from_json(data)
        turn = Color.WHITE
    return GameState(board, turn)


def main() -> None:
    parser = argparse.ArgumentParser(description="Run the flip chess CPU on a board snapshot")
    parser.add_argument("file", type=Path, help="Path to a board snapshot JSON file")
    parser.add_argument(
        "--color", choices=[c.value for c in Color], help="Side to play (defaults to the side to move)"
    )
    parser.add_argument("--seed", type=int, help="Seed for the tie-breaking random source")
    parser.add_argument("--verbose", action="store_true", help="Log the CPU's choice")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)
    try:
        state = load_state(args.file)
    except (FlipChessError, ValueError) as exc:
        parser.error(f"cannot load {args.file}: {exc}")
    color = Color(args.color) if args.color else state.turn
    print(state.board)
    move = select_cpu_move(state.board, color, random.Random(args.seed))
    if move:
        print(f"Next move: {move.src.row} {move.src.col} -> {move.dst.row} {move.dst.col}")
    else:
        print("No valid moves available.")


if __name__ == "__main__":
    main()
