# server/api/live.py

import logging
from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from fastapi.concurrency import run_in_threadpool

from core.stats import compute_stats
from database import SessionLocal


logger = logging.getLogger(__name__)

router = APIRouter()

WELCOME_MESSAGE = "Connected to live updates"


def load_stats() -> dict:
    db = SessionLocal()
    try:
        return compute_stats(db)
    finally:
        db.close()


@router.websocket("/ws")
async def live_updates(websocket: WebSocket):
    """
    Push-only channel: an info message and a stats snapshot on join,
    then a fresh snapshot after every project or task change.
    """
    viewers = websocket.app.state.viewers

    await websocket.accept()
    try:
        await websocket.send_json({"type": "info", "message": WELCOME_MESSAGE})
        viewers.register(websocket)
        stats = await run_in_threadpool(load_stats)
        await viewers.send(websocket, {"type": "stats", "data": stats})

        while True:
            # Client frames, text or binary, carry no meaning and are dropped.
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break
    except WebSocketDisconnect:
        pass
    finally:
        viewers.unregister(websocket)
