"""
MODULE OVERVIEW:
The WebSocket route implementation.

WHAT IS HAPPENING HERE:
Upgrades the HTTP request to a stateful WebSocket connection and hands it to a
`ConnectionSession` for its whole lifetime. The handshake itself is done by the
ASGI server; this route only accepts and runs the session.
"""
from fastapi import APIRouter, Query, WebSocket
from loguru import logger

from server.session import ConnectionSession
from shared.config import settings
from shared.framing import SessionError
from shared.route_utils import extract_client_id, log_connection

router = APIRouter()


@router.websocket(settings.WS_PATH)
async def websocket_endpoint(
    websocket: WebSocket,
    client_id: str | None = Query(None)
):
    cid = await extract_client_id(client_id)
    await websocket.accept()
    await log_connection("websocket:connect", cid)

    session = ConnectionSession(
        websocket,
        cid,
        heartbeat_interval_s=settings.HEARTBEAT_INTERVAL_S,
        heartbeat_timeout_s=settings.HEARTBEAT_TIMEOUT_S,
    )
    try:
        await session.run()
    except SessionError:
        logger.exception(f"client_id={cid} protocol=websocket event=error")
        raise
    except Exception:
        logger.exception(f"client_id={cid} protocol=websocket event=unexpected_error")
        raise
    finally:
        await log_connection("websocket:disconnect", cid)
