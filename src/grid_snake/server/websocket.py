"""WebSocket handler for real-time play."""

from __future__ import annotations

import json
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from starlette.websockets import WebSocketState

from grid_snake.protocol import OpCode
from grid_snake.server.match_registry import MatchRegistry, encode_frame

logger = logging.getLogger(__name__)

ws_router = APIRouter()


def _get_registry(ws: WebSocket) -> MatchRegistry:
    return ws.app.state.match_registry


@ws_router.websocket("/matches/{match_id}/play")
async def play(websocket: WebSocket, match_id: str, user_id: str = "") -> None:
    """Player WebSocket: send moves, receive updates and feedback each tick."""
    registry = _get_registry(websocket)
    instance = registry.get_match(match_id)
    if instance is None:
        await websocket.close(code=4004, reason="Match not found.")
        return
    if not user_id:
        await websocket.close(code=4001, reason="Missing user_id.")
        return

    accepted, reason = await registry.join_attempt(instance, user_id)
    if not accepted:
        await websocket.close(code=4009, reason=reason)
        return

    try:
        await websocket.accept()
    except BaseException:
        await registry.abort_join(instance, user_id)
        raise
    if not await registry.confirm_join(instance, user_id, websocket):
        await websocket.close(code=1000, reason="Match finished.")
        return
    logger.info("Player %s connected to match %s.", user_id, match_id)

    try:
        # Initial snapshot so the client can draw before the next tick.
        state = instance.match.get_state()
        await websocket.send_text(
            encode_frame(OpCode.UPDATE, json.dumps(state, separators=(",", ":"))),
        )

        while websocket.application_state == WebSocketState.CONNECTED:
            raw = await websocket.receive_text()
            try:
                msg = json.loads(raw)
            except json.JSONDecodeError:
                continue
            if not isinstance(msg, dict):
                continue

            op_code = msg.get("op")
            if not isinstance(op_code, int) or isinstance(op_code, bool):
                continue

            registry.enqueue(instance, user_id, op_code, json.dumps(msg.get("data")))
    except WebSocketDisconnect:
        logger.info("Player %s disconnected from match %s.", user_id, match_id)
    finally:
        await registry.leave(instance, user_id)
