"""
MODULE OVERVIEW:
The Heartbeat Emitter: an unsolicited payment status pushed on every open session.

WHAT IS HAPPENING HERE:
From the moment a connection is accepted, a background task writes a JSON status frame
every `interval_s` seconds, alternating "Pagado" (result 1) and "Denegado" (result 2).
Once `timeout_s` seconds have accumulated, it closes the connection itself. Its counters
live in a `HeartbeatState` owned by the task, so every connection starts from scratch.
"""
import asyncio
from dataclasses import dataclass
from typing import TYPE_CHECKING

from loguru import logger

from shared.models import HeartbeatPayload

if TYPE_CHECKING:
    from server.session import ConnectionSession

TIMEOUT_REASON = "Timeout. Se cerró la conexión."


@dataclass
class HeartbeatState:
    interval_s: float = 2.0
    timeout_s: float = 60.0
    elapsed_s: float = 0.0
    paid: bool = True

    def next_payload(self) -> HeartbeatPayload:
        payload = HeartbeatPayload.for_toggle(self.paid)
        self.paid = not self.paid
        return payload

    def advance(self) -> bool:
        """Account for one interval. Returns True once the timeout is reached."""
        self.elapsed_s += self.interval_s
        return self.elapsed_s >= self.timeout_s


async def emit_heartbeats(session: "ConnectionSession", interval_s: float, timeout_s: float) -> None:
    """
    Running -> Running (send, flip, sleep, count) -> Closed.

    Stops on timeout, when the session's cancellation signal fires, or when the
    connection is no longer open. Write failures propagate. On every exit the
    cancellation signal is set so the Command Loop stops waiting for input.
    """
    state = HeartbeatState(interval_s=interval_s, timeout_s=timeout_s)
    try:
        while session.is_open and not session.cancelled.is_set():
            payload = state.next_payload()
            if not await session.send(payload.model_dump_json()):
                break
            logger.debug(f"client_id={session.client_id} heartbeat={payload.message} elapsed_s={state.elapsed_s}")

            try:
                await asyncio.wait_for(session.cancelled.wait(), timeout=state.interval_s)
                break
            except asyncio.TimeoutError:
                pass

            if state.advance():
                await session.close(TIMEOUT_REASON)
                break
    finally:
        session.cancelled.set()
