"""FastAPI WebSocket server hosting flip chess games for the browser client."""
from __future__ import annotations

import asyncio
import json
import logging
from typing import Dict, List, Optional

from fastapi import FastAPI, WebSocket, WebSocketDisconnect

from .board import Color, check_position
from .bots import cpu_turn
from .config import SETTINGS, Settings
from .errors import FlipChessError
from .game import GameState, MoveResult, apply_move, has_moves, init_game, pass_turn
from .moves import get_valid_moves

logger = logging.getLogger(__name__)

app = FastAPI(title="Flip Chess")


class Room:
    """One game and the sockets watching it."""

    def __init__(self, game_id: str, name: str) -> None:
        self.id = game_id
        self.name = name
        self.state: GameState = init_game()
        # Color played by the computer, ``None`` for two humans at one board.
        self.cpu: Optional[Color] = None
        self.connections: List[WebSocket] = []
        # Held for every read-evaluate-apply sequence on ``state``.
        self.lock = asyncio.Lock()
        self.cpu_task: Optional[asyncio.Task] = None

    def snapshot(self) -> dict:
        data = self.state.to_json()
        data["cpu"] = self.cpu.value if self.cpu else None
        # Lets the client offer the pass button only when it is needed.
        data["canMove"] = not self.state.game_over and has_moves(self.state)
        return data

    def cpu_to_move(self) -> bool:
        return self.cpu is not None and not self.state.game_over and self.state.turn is self.cpu


def _update(room: Room, result: Optional[MoveResult] = None) -> dict:
    message = {"type": "update", **room.snapshot()}
    message["flipped"] = result.flipped if result else 0
    message["captured"] = bool(result and result.captured)
    return message


class ConnectionManager:
    def __init__(self, settings: Optional[Settings] = None) -> None:
        self.settings = settings or SETTINGS
        self.rooms: Dict[str, Room] = {}
        # Tasks that remove rooms after a period without connections
        self.cleanup_tasks: Dict[str, Optional[asyncio.Task]] = {}
        self._counter = 1

    def create_game(self) -> str:
        """Create a new room and return its id."""
        game_id = str(self._counter)
        self._counter += 1
        self.rooms[game_id] = Room(game_id, f"Game {game_id}")
        self._schedule_room_cleanup(game_id)
        logger.info("created room %s", game_id)
        return game_id

    async def connect(self, game_id: str, websocket: WebSocket) -> Room:
        await websocket.accept()
        room = self.rooms.get(game_id)
        if room is None:
            # Auto-create if missing (e.g., a bookmarked room after restart)
            room = self.rooms[game_id] = Room(game_id, f"Game {game_id}")
        room.connections.append(websocket)
        self._schedule_room_cleanup(game_id)
        return room

    def disconnect(self, game_id: str, websocket: WebSocket) -> None:
        room = self.rooms.get(game_id)
        if not room:
            return
        if websocket in room.connections:
            room.connections.remove(websocket)
        self._schedule_room_cleanup(game_id)

    async def broadcast(self, game_id: str, message: dict) -> None:
        room = self.rooms.get(game_id)
        if not room:
            return
        text = json.dumps(message)
        for connection in list(room.connections):
            try:
                await connection.send_text(text)
            except (WebSocketDisconnect, RuntimeError):
                # A closed peer must not fail the move that was already applied.
                logger.warning("room %s: dropping dead connection", game_id)
                self.disconnect(game_id, connection)

    def valid_moves(self, game_id: str, row: int, col: int) -> List[List[int]]:
        """Moves for the piece at ``row``/``col`` if it belongs to the side to move."""
        room = self.rooms[game_id]
        pos = check_position((row, col))
        piece = room.state.board[pos]
        if room.state.game_over or piece is None or piece.color is not room.state.turn:
            return []
        return [list(dst) for dst in get_valid_moves(room.state.board, pos)]

    async def play(self, game_id: str, src, dst) -> MoveResult:
        room = self.rooms[game_id]
        async with room.lock:
            if room.cpu_to_move():
                raise FlipChessError("Waiting for the CPU")
            result = apply_move(room.state, src, dst)
            room.state = result.state
            await self.broadcast(game_id, _update(room, result))
        self.schedule_cpu(game_id)
        return result

    async def pass_turn(self, game_id: str) -> None:
        room = self.rooms[game_id]
        async with room.lock:
            if room.cpu_to_move():
                raise FlipChessError("Waiting for the CPU")
            room.state = pass_turn(room.state)
            await self.broadcast(game_id, _update(room))
        self.schedule_cpu(game_id)

    async def restart_game(self, game_id: str) -> bool:
        """Reset the board for ``game_id`` keeping the CPU setting.

        Returns ``True`` if the room existed and was reset.
        """
        room = self.rooms.get(game_id)
        if room is None:
            return False
        async with room.lock:
            self._cancel_cpu(room)
            room.state = init_game()
            await self.broadcast(game_id, _update(room))
        self.schedule_cpu(game_id)
        return True

    async def set_cpu(self, game_id: str, color: Optional[Color]) -> None:
        """Switch the computer opponent on or off; the game starts over."""
        room = self.rooms[game_id]
        room.cpu = color
        logger.info("room %s cpu=%s", game_id, color.value if color else None)
        await self.restart_game(game_id)

    def schedule_cpu(self, game_id: str) -> None:
        room = self.rooms.get(game_id)
        if room is None or not room.cpu_to_move():
            return
        if room.cpu_task and not room.cpu_task.done():
            return
        room.cpu_task = asyncio.create_task(self.cpu_move(game_id))

    async def cpu_move(self, game_id: str) -> None:
        """Let the CPU answer after a short pause so its move is visible."""
        await asyncio.sleep(self.settings.cpu_delay)
        room = self.rooms.get(game_id)
        if room is None:
            return
        async with room.lock:
            if not room.cpu_to_move():
                return
            move, result = cpu_turn(room.state, room.cpu)
            room.state = result.state
            if move is None:
                logger.info("room %s: cpu passes", game_id)
            await self.broadcast(game_id, _update(room, result))

    def _cancel_cpu(self, room: Room) -> None:
        if room.cpu_task and room.cpu_task is not asyncio.current_task():
            room.cpu_task.cancel()
        room.cpu_task = None

    def _remove_room(self, game_id: str) -> None:
        room = self.rooms.pop(game_id, None)
        if room:
            self._cancel_cpu(room)
            logger.info("removed idle room %s", game_id)

    def _schedule_room_cleanup(self, game_id: str) -> None:
        """Schedule removal of a room once nobody is connected."""
        room = self.rooms.get(game_id)
        if room is None:
            return
        existing = self.cleanup_tasks.get(game_id)
        if existing:
            existing.cancel()
        if room.connections:
            self.cleanup_tasks[game_id] = None
            return
        self.cleanup_tasks[game_id] = asyncio.create_task(
            self._remove_after_delay(game_id, self.settings.room_idle_timeout)
        )

    async def _remove_after_delay(self, game_id: str, delay: float) -> None:
        try:
            await asyncio.sleep(delay)
            room = self.rooms.get(game_id)
            if room is not None and not room.connections:
                self._remove_room(game_id)
        finally:
            if self.cleanup_tasks.get(game_id) is asyncio.current_task():
                self.cleanup_tasks.pop(game_id, None)


manager = ConnectionManager()


@app.get("/health")
async def health() -> dict:
    return {"status": "ok"}


@app.get("/rooms")
async def list_rooms() -> dict:
    return {
        "rooms": [
            {
                "id": gid,
                "name": room.name,
                "cpu": room.cpu.value if room.cpu else None,
                "turn": room.state.turn.value,
                "gameOver": room.state.game_over,
            }
            for gid, room in manager.rooms.items()
        ]
    }


@app.post("/create")
async def create_room() -> dict:
    gid = manager.create_game()
    return {"id": gid, "name": manager.rooms[gid].name}


async def _send_error(websocket: WebSocket, message: str) -> None:
    await websocket.send_text(json.dumps({"type": "error", "message": message}))


@app.websocket("/ws/{game_id}")
async def websocket_endpoint(websocket: WebSocket, game_id: str):
    room = await manager.connect(game_id, websocket)
    await websocket.send_text(json.dumps({"type": "init", **room.snapshot()}))
    try:
        while True:
            data = await websocket.receive_text()
            try:
                msg = json.loads(data)
                action = msg.get("action")
                if action == "select":
                    moves = manager.valid_moves(game_id, msg["row"], msg["col"])
                    await websocket.send_text(
                        json.dumps({"type": "moves", "from": [msg["row"], msg["col"]], "moves": moves})
                    )
                elif action == "move":
                    await manager.play(game_id, msg["from"], msg["to"])
                elif action == "pass":
                    await manager.pass_turn(game_id)
                elif action == "restart":
                    await manager.restart_game(game_id)
                elif action == "cpu":
                    color = msg.get("color")
                    await manager.set_cpu(game_id, Color(color) if color else None)
                else:
                    await _send_error(websocket, f"Unknown action: {action}")
            except FlipChessError as exc:
                logger.warning("room %s rejected %s: %s", game_id, data, exc)
                await _send_error(websocket, str(exc))
            except (ValueError, KeyError, TypeError, AttributeError):
                logger.warning("room %s malformed message: %s", game_id, data)
                await _send_error(websocket, "Malformed message")
    except WebSocketDisconnect:
        manager.disconnect(game_id, websocket)


if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(level=SETTINGS.log_level)
    uvicorn.run(app, host=SETTINGS.host, port=SETTINGS.port)
