import logging
from fastapi import APIRouter, WebSocket, WebSocketDisconnect

router = APIRouter(tags=["notifications"])

logger = logging.getLogger(__name__)

@router.websocket("/ws")
async def admin_socket(websocket: WebSocket):
    """Broadcast-only channel for admin dashboards; incoming messages are ignored."""
    broadcaster = websocket.app.state.broadcaster
    await websocket.accept()
    broadcaster.register(websocket)
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        pass
    except Exception as e:
        logger.error("WebSocket error: %s", e)
    finally:
        broadcaster.unregister(websocket)
