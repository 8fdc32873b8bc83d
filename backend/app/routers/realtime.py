"""
WebSocket endpoint for real-time change events.

Clients only listen; anything they send is read and discarded so the
connection notices when the peer goes away.
"""

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from stockapp.logging import get_logger
from stockapp.notifications import ConnectionHub

from ..dependencies import get_websocket_hub

logger = get_logger("realtime")

router = APIRouter(tags=["realtime"])


@router.websocket("/hubs/stock")
async def stock_hub(websocket: WebSocket, hub: ConnectionHub = Depends(get_websocket_hub)):
    await hub.connect(websocket)
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        logger.debug("websocket_closed")
    finally:
        await hub.disconnect(websocket)
