"""REST service hosting Queens rooms."""

from __future__ import annotations

import asyncio
import logging
import os
from contextlib import asynccontextmanager
from dataclasses import asdict
from typing import Dict, List, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from queens.config import GameConfig
from queens.errors import GameError, NotYourTurn, PlayerNotFound, RoomExists, RoomNotFound, WrongPhase
from queens.service import GameService
from queens.view import RoomView

logger = logging.getLogger(__name__)


class CreateRoomRequest(BaseModel):
    room_id: Optional[str] = None


class RoomRequest(BaseModel):
    room_id: str


class JoinRequest(RoomRequest):
    player_id: Optional[str] = None


class PlayerRequest(RoomRequest):
    player_id: str


class SelectRequest(PlayerRequest):
    selected_card_ids: List[str]


class CardRequest(PlayerRequest):
    card_id: str


class SwapRequest(PlayerRequest):
    from_card_id: str
    to_card_id: str


def error_status(error: GameError) -> int:
    if isinstance(error, (RoomNotFound, PlayerNotFound)):
        return 404
    if isinstance(error, (NotYourTurn, RoomExists, WrongPhase)):
        return 409
    return 400


def serialize_view(view: RoomView) -> Dict[str, object]:
    return {"status": "ok", **asdict(view)}


def create_app(service: Optional[GameService] = None, *, run_reaper: bool = True) -> FastAPI:
    service = service or GameService(config=GameConfig.from_env())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        task = asyncio.create_task(service.make_reaper().run()) if run_reaper else None
        yield
        if task is not None:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass

    app = FastAPI(title="Queens Table Service", lifespan=lifespan)
    app.state.service = service
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(GameError)
    async def handle_game_error(request: Request, exc: GameError) -> JSONResponse:
        logger.warning("%s %s rejected: [%s] %s", request.method, request.url.path, exc.kind, exc.message)
        return JSONResponse(
            status_code=error_status(exc),
            content={"status": "error", "kind": exc.kind, "message": exc.message},
        )

    @app.post("/create_room")
    def create_room(request: Optional[CreateRoomRequest] = None) -> Dict[str, object]:
        return serialize_view(service.create_room(request.room_id if request else None))

    @app.post("/join")
    def join(request: JoinRequest) -> Dict[str, object]:
        return serialize_view(service.join(request.room_id, request.player_id))

    @app.post("/select_initial_cards")
    def select_initial_cards(request: SelectRequest) -> Dict[str, object]:
        view = service.select_initial_cards(request.room_id, request.player_id, request.selected_card_ids)
        return serialize_view(view)

    @app.post("/play_card")
    def play_card(request: CardRequest) -> Dict[str, object]:
        return serialize_view(service.play_card(request.room_id, request.player_id, request.card_id))

    @app.post("/draw_card")
    def draw_card(request: PlayerRequest) -> Dict[str, object]:
        return serialize_view(service.draw_card(request.room_id, request.player_id))

    @app.post("/call_queens")
    def call_queens(request: PlayerRequest) -> Dict[str, object]:
        return serialize_view(service.call_queens(request.room_id, request.player_id))

    @app.post("/king_reveal")
    def king_reveal(request: CardRequest) -> Dict[str, object]:
        return serialize_view(service.king_reveal(request.room_id, request.player_id, request.card_id))

    @app.post("/jack_swap")
    def jack_swap(request: SwapRequest) -> Dict[str, object]:
        view = service.jack_swap(request.room_id, request.player_id, request.from_card_id, request.to_card_id)
        return serialize_view(view)

    @app.post("/pass_reaction")
    def pass_reaction(request: PlayerRequest) -> Dict[str, object]:
        return serialize_view(service.pass_reaction(request.room_id, request.player_id))

    @app.post("/reset")
    def reset(request: RoomRequest) -> Dict[str, object]:
        return serialize_view(service.reset(request.room_id))

    @app.get("/state")
    def get_state(room_id: str, player_id: Optional[str] = None) -> Dict[str, object]:
        return serialize_view(service.get_state(room_id, player_id))

    @app.get("/rooms")
    def list_rooms() -> Dict[str, object]:
        return {"status": "ok", "rooms": [asdict(summary) for summary in service.list_rooms()]}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(level=logging.INFO)
    uvicorn.run(app, host="0.0.0.0", port=int(os.environ.get("PORT", "3000")))
