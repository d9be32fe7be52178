from __future__ import annotations

import logging
from typing import Any, Dict

from fastapi import FastAPI, HTTPException, WebSocket, WebSocketDisconnect
from pydantic import BaseModel, Field

from soure.config import settings
from soure.engine.types import ActionResult, ErrorCode

from .registry import GameRegistry

logger = logging.getLogger(__name__)

STATUS_BY_CODE = {
    ErrorCode.GAME_NOT_FOUND: 404,
    ErrorCode.NOT_A_MEMBER: 403,
}


class PlayerIn(BaseModel):
    user_id: str
    display_name: str


class ActionIn(BaseModel):
    user_id: str
    payload: Dict[str, Any] = Field(default_factory=dict)


def _error_message(text: str) -> Dict[str, Any]:
    return {"type": "error", "payload": {"message": text}}


def _raise_for(result: ActionResult) -> None:
    if not result.ok:
        raise HTTPException(status_code=STATUS_BY_CODE.get(result.code, 400), detail=result.to_dict())


def create_app(registry: GameRegistry | None = None) -> FastAPI:
    registry = registry or GameRegistry()
    app = FastAPI(title="Soure")
    app.state.registry = registry

    @app.get("/api/health")
    def health() -> Dict[str, str]:
        return {"status": "ok"}

    @app.post("/api/games")
    async def create_game(player: PlayerIn) -> Dict[str, Any]:
        game_id = await registry.create_game(player.user_id, player.display_name)
        return {"ok": True, "gameId": game_id}

    @app.post("/api/games/{game_id}/join")
    async def join_game(game_id: str, player: PlayerIn) -> Dict[str, Any]:
        result = await registry.join_game(game_id, player.user_id, player.display_name)
        _raise_for(result)
        return {**result.to_dict(), "gameId": game_id}

    @app.get("/api/games/{game_id}/state")
    async def get_state(game_id: str) -> Dict[str, Any]:
        entry = registry.get(game_id)
        if entry is None:
            raise HTTPException(status_code=404, detail="Game not found")
        async with entry.lock:
            return entry.game.get_state()

    @app.post("/api/games/{game_id}/actions/{action}")
    async def apply_action(game_id: str, action: str, body: ActionIn) -> Dict[str, Any]:
        result = await registry.dispatch(game_id, body.user_id, action, body.payload)
        _raise_for(result)
        return result.to_dict()

    @app.get("/api/users/{user_id}/active-game")
    async def active_game(user_id: str) -> Dict[str, Any]:
        return {"ok": True, "gameId": registry.active_game_for(user_id)}

    @app.websocket("/ws/{game_id}/{user_id}")
    async def game_socket(websocket: WebSocket, game_id: str, user_id: str) -> None:
        await websocket.accept()
        entry = registry.get(game_id)
        if entry is None or not entry.game.is_member(user_id):
            await websocket.send_json(_error_message("Not a member of this game"))
            await websocket.close(code=4403)
            return

        key = f"{user_id}:{id(websocket)}"
        await registry.subscribe(game_id, key, websocket.send_json)
        logger.info("User %s subscribed to game %s", user_id, game_id)
        try:
            while True:
                try:
                    message = await websocket.receive_json()
                except ValueError:
                    await websocket.send_json(_error_message("Expected a JSON object"))
                    continue
                if not isinstance(message, dict):
                    await websocket.send_json(_error_message("Expected a JSON object"))
                    continue
                payload = message.get("payload") or {}
                if not isinstance(payload, dict):
                    await websocket.send_json(_error_message("Payload must be a JSON object"))
                    continue
                action = str(message.get("action", ""))
                result = await registry.dispatch(game_id, user_id, action, payload)
                await websocket.send_json(
                    {"type": "actionResult", "action": action, "payload": result.to_dict()}
                )
        except WebSocketDisconnect:
            logger.info("User %s left game %s", user_id, game_id)
        finally:
            registry.unsubscribe(game_id, key)

    return app


app = create_app()


def main() -> None:
    import uvicorn

    logging.basicConfig(level=settings.log_level)
    uvicorn.run("soure.web.server:app", host=settings.host, port=settings.port)
