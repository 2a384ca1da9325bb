"""
MODULE OVERVIEW:
The WebSocket console client.

WHAT IS HAPPENING HERE:
We use the `websockets` library. The client sends its commands in order, then keeps
reading until the server closes the connection (after "adios", or on heartbeat
timeout) or the local duration runs out. Every frame is handed to `on_frame_callback`
already classified as a heartbeat or a plain reply.
"""
import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable

import websockets
from loguru import logger
from pydantic import ValidationError

from shared.models import HeartbeatPayload


@dataclass
class CloseInfo:
    code: int | None
    reason: str


def classify_frame(text: str) -> HeartbeatPayload | str:
    """Heartbeat frames are JSON status objects; anything else is a command reply."""
    try:
        return HeartbeatPayload.model_validate_json(text)
    except ValidationError:
        return text


class WebSocketClient:
    def __init__(self, client_id: str, server_base_url: str, ws_path: str = "/ws"):
        self.client_id = client_id
        self.server_base_url = server_base_url.rstrip('/')
        self.ws_url = f"{self.server_base_url.replace('http://', 'ws://').replace('https://', 'wss://')}{ws_path}?client_id={self.client_id}"
        self.on_frame_callback: Callable[[HeartbeatPayload | str], Awaitable[None]] | None = None
        self.frames_received = 0

    async def _on_frame(self, text: str) -> None:
        self.frames_received += 1
        if self.on_frame_callback:
            await self.on_frame_callback(classify_frame(text))

    async def run(self, commands: list[str], duration_s: float = 70.0) -> CloseInfo:
        async with websockets.connect(self.ws_url, ping_interval=None) as ws:
            for command in commands:
                logger.debug(f"client_id={self.client_id} send={command!r}")
                await ws.send(command)

            try:
                await asyncio.wait_for(self._read_until_closed(ws), timeout=duration_s)
            except asyncio.TimeoutError:
                logger.info(f"client_id={self.client_id} event=duration_elapsed")
                await ws.close()
            return CloseInfo(code=ws.close_code, reason=ws.close_reason or "")

    async def _read_until_closed(self, ws) -> None:
        try:
            async for message in ws:
                await self._on_frame(message if isinstance(message, str) else message.decode("utf-8"))
        except websockets.ConnectionClosedError as e:
            logger.warning(f"client_id={self.client_id} event=closed_abnormally reason='{e}'")
