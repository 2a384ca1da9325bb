"""Shared test fixtures for the payment status socket test suite.

Provides an in-memory stand-in for a Starlette WebSocket that records every
outbound frame and lets tests queue inbound ASGI events.
"""

from __future__ import annotations

import asyncio
from typing import Any

import pytest
from fastapi.websockets import WebSocketState

from server.session import ConnectionSession


class FakeWebSocket:
    """Implements the slice of the Starlette WebSocket API a session uses."""

    def __init__(
        self,
        send_delay: float = 0.0,
        fail_sends: bool = False,
        close_error: BaseException | None = None,
    ) -> None:
        self.inbound: asyncio.Queue[dict[str, Any]] = asyncio.Queue()
        self.events: list[tuple] = []
        self.client_state = WebSocketState.CONNECTED
        self.application_state = WebSocketState.CONNECTED
        self.send_delay = send_delay
        self.fail_sends = fail_sends
        self.close_error = close_error
        self.in_flight = 0
        self.max_in_flight = 0

    # -- inbound helpers -------------------------------------------------

    def push_text(self, text: str) -> None:
        self.inbound.put_nowait({"type": "websocket.receive", "text": text})

    def push_bytes(self, data: bytes) -> None:
        self.inbound.put_nowait({"type": "websocket.receive", "bytes": data})

    def push_disconnect(self, code: int = 1000) -> None:
        self.inbound.put_nowait({"type": "websocket.disconnect", "code": code})

    # -- recorded output -------------------------------------------------

    @property
    def sent(self) -> list[str]:
        return [e[1] for e in self.events if e[0] == "text"]

    @property
    def replies(self) -> list[str]:
        return [text for text in self.sent if not text.startswith("{")]

    @property
    def heartbeats(self) -> list[str]:
        return [text for text in self.sent if text.startswith("{")]

    @property
    def closed(self) -> tuple[int, str] | None:
        closes = [(e[1], e[2]) for e in self.events if e[0] == "close"]
        return closes[0] if closes else None

    # -- WebSocket API ---------------------------------------------------

    async def accept(self) -> None:
        pass

    async def receive(self) -> dict[str, Any]:
        message = await self.inbound.get()
        if message["type"] == "websocket.disconnect":
            self.client_state = WebSocketState.DISCONNECTED
        return message

    async def send_text(self, data: str) -> None:
        if self.fail_sends:
            raise RuntimeError("socket is broken")
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.send_delay)
            self.events.append(("text", data))
        finally:
            self.in_flight -= 1

    async def close(self, code: int = 1000, reason: str | None = None) -> None:
        if self.close_error is not None:
            raise self.close_error
        self.application_state = WebSocketState.DISCONNECTED
        self.events.append(("close", code, reason or ""))


# Binary fractions keep the accumulated elapsed time exact.
FAST_INTERVAL_S = 1 / 64
SLOW_INTERVAL_S = 100.0


@pytest.fixture
def fake_ws() -> FakeWebSocket:
    return FakeWebSocket()


@pytest.fixture
def make_session():
    def _make(
        websocket: FakeWebSocket,
        interval_s: float = SLOW_INTERVAL_S,
        timeout_s: float = 1000.0,
    ) -> ConnectionSession:
        return ConnectionSession(
            websocket,  # type: ignore[arg-type]
            "client-test",
            heartbeat_interval_s=interval_s,
            heartbeat_timeout_s=timeout_s,
        )

    return _make
