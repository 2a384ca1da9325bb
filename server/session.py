"""
MODULE OVERVIEW:
The Connection Session Handler.

WHAT IS HAPPENING HERE:
One `ConnectionSession` exists per accepted WebSocket. It runs two concurrent tasks over
the same socket:
  - the Command Loop (this module) reads messages and writes replies in FIFO order;
  - the Heartbeat Emitter (`server/heartbeat.py`) pushes a status frame on a timer.
A WebSocket cannot safely carry two writes at once, so every send and close goes through
`_send_lock`. A single `asyncio.Event` is the shared cancellation signal: whichever task
finishes first sets it, and the other one stops at its next suspension point.
"""
import asyncio

from fastapi import status
from fastapi.websockets import WebSocket, WebSocketDisconnect, WebSocketState
from loguru import logger

from server.commands import respond
from server.heartbeat import emit_heartbeats
from shared.framing import Frame, MessageType, TransportError, UnexpectedMessageType, receive_string
from shared.models import CloseSession


class ConnectionSession:
    def __init__(
        self,
        websocket: WebSocket,
        client_id: str,
        heartbeat_interval_s: float = 2.0,
        heartbeat_timeout_s: float = 60.0,
    ):
        self.websocket = websocket
        self.client_id = client_id
        self.heartbeat_interval_s = heartbeat_interval_s
        self.heartbeat_timeout_s = heartbeat_timeout_s
        self.cancelled = asyncio.Event()
        self._send_lock = asyncio.Lock()

    @property
    def is_open(self) -> bool:
        return (
            self.websocket.application_state == WebSocketState.CONNECTED
            and self.websocket.client_state == WebSocketState.CONNECTED
        )

    # ==========================
    # OUTBOUND
    # ==========================
    async def send(self, data: str) -> bool:
        """
        Write one complete text frame. Returns False, without writing, if the
        connection was closed while waiting for the lock.
        """
        async with self._send_lock:
            if not self.is_open:
                logger.debug(f"client_id={self.client_id} event=send_skipped reason=not_open")
                return False
            try:
                await self.websocket.send_text(data)
            except (RuntimeError, OSError, WebSocketDisconnect) as e:
                raise TransportError(f"send failed: {e}") from e
            return True

    async def close(self, reason: str = "", code: int = status.WS_1000_NORMAL_CLOSURE) -> bool:
        async with self._send_lock:
            if not self.is_open:
                return False
            try:
                await self.websocket.close(code=code, reason=reason)
            except (RuntimeError, OSError, WebSocketDisconnect) as e:
                raise TransportError(f"close failed: {e}") from e
            logger.info(f"client_id={self.client_id} protocol=websocket event=close code={code} reason='{reason}'")
            return True

    # ==========================
    # INBOUND
    # ==========================
    async def receive_frame(self) -> Frame:
        """
        Wait for the next ASGI receive event, or for the cancellation signal.
        A cancelled wait is reported as a CLOSE frame, i.e. a clean end of stream.
        """
        if self.cancelled.is_set():
            return Frame(MessageType.CLOSE)

        receive = asyncio.ensure_future(self.websocket.receive())
        cancelled = asyncio.ensure_future(self.cancelled.wait())
        try:
            done, _ = await asyncio.wait({receive, cancelled}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for task in (receive, cancelled):
                if not task.done():
                    task.cancel()

        if receive not in done:
            return Frame(MessageType.CLOSE)
        try:
            message = receive.result()
        except (RuntimeError, OSError, WebSocketDisconnect) as e:
            raise TransportError(f"receive failed: {e}") from e

        if message["type"] == "websocket.disconnect":
            return Frame(MessageType.CLOSE)
        # ASGI servers reassemble fragments, so every receive event is a whole message.
        if message.get("text") is not None:
            return Frame(MessageType.TEXT, message["text"].encode("utf-8"))
        return Frame(MessageType.BINARY, message.get("bytes") or b"")

    # ==========================
    # LIFECYCLE
    # ==========================
    async def command_loop(self) -> None:
        while self.is_open and not self.cancelled.is_set():
            message = await receive_string(self.receive_frame)
            if message is None:
                break
            logger.debug(f"client_id={self.client_id} received={message!r}")

            outcome = respond(message)
            if isinstance(outcome, CloseSession):
                await self.close(outcome.reason)
            else:
                await self.send(outcome.text)

    async def run(self) -> None:
        """
        Drive one session to completion. The heartbeat task is always awaited and the
        socket is always closed before this returns or raises.
        """
        heartbeat = asyncio.create_task(
            emit_heartbeats(self, self.heartbeat_interval_s, self.heartbeat_timeout_s)
        )
        try:
            await self.command_loop()
        except UnexpectedMessageType:
            await self._shutdown(heartbeat, status.WS_1003_UNSUPPORTED_DATA, failing=True)
            raise
        except Exception:
            await self._shutdown(heartbeat, status.WS_1011_INTERNAL_ERROR, failing=True)
            raise
        except asyncio.CancelledError:
            await self._shutdown(heartbeat, status.WS_1000_NORMAL_CLOSURE, failing=True)
            raise
        await self._shutdown(heartbeat, status.WS_1000_NORMAL_CLOSURE, failing=False)

    async def _shutdown(self, heartbeat: asyncio.Task, close_code: int, failing: bool) -> None:
        """
        Stop and join the heartbeat, then close the socket. A heartbeat failure turns a
        normal close into 1011. While `failing`, errors raised here are logged instead of
        replacing the exception already in flight.
        """
        self.cancelled.set()
        heartbeat_error = (await asyncio.gather(heartbeat, return_exceptions=True))[0]
        if not isinstance(heartbeat_error, Exception):
            heartbeat_error = None
        elif close_code == status.WS_1000_NORMAL_CLOSURE:
            close_code = status.WS_1011_INTERNAL_ERROR
        if heartbeat_error is not None and failing:
            logger.opt(exception=heartbeat_error).error(f"client_id={self.client_id} event=heartbeat_error")

        try:
            await self.close(code=close_code)
        except TransportError:
            if not failing and heartbeat_error is None:
                raise
            logger.exception(f"client_id={self.client_id} event=close_error")

        if heartbeat_error is not None and not failing:
            raise heartbeat_error
