"""
MODULE OVERVIEW:
Frame-level receive helper for a text-message connection.

WHAT IS HAPPENING HERE:
A logical WebSocket message may arrive split over several frames. `receive_string`
keeps reading frames into one byte buffer until it sees the end-of-message flag, then
decodes the whole buffer as UTF-8 (http://tools.ietf.org/html/rfc6455#section-5.6).
The transport itself is abstracted behind a frame-receiving callable so the same helper
works for the ASGI adapter in `server/session.py` and for in-memory fakes in tests.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable


class MessageType(str, Enum):
    TEXT = "text"
    BINARY = "binary"
    CLOSE = "close"


@dataclass(frozen=True)
class Frame:
    message_type: MessageType
    payload: bytes = b""
    end_of_message: bool = True


class SessionError(Exception):
    """Base class for failures that tear a session down."""


class UnexpectedMessageType(SessionError):
    def __init__(self, message_type: MessageType):
        self.message_type = message_type
        super().__init__(f"Unexpected message type: {message_type.value}")


class TransportError(SessionError):
    """A read or write on the underlying connection failed."""


async def receive_string(receive_frame: Callable[[], Awaitable[Frame]]) -> str | None:
    """
    Assemble one logical text message.

    Returns None when the stream ends cleanly between messages. Raises
    TransportError if the stream ends after fragments of a message have arrived,
    or if the assembled bytes are not valid UTF-8. Raises UnexpectedMessageType
    if the completed message is not text.
    """
    buffer = bytearray()
    fragments = 0
    while True:
        frame = await receive_frame()
        if frame.message_type is MessageType.CLOSE:
            if fragments:
                raise TransportError("connection closed mid-message")
            return None
        fragments += 1
        buffer.extend(frame.payload)
        if frame.end_of_message:
            break

    if frame.message_type is not MessageType.TEXT:
        raise UnexpectedMessageType(frame.message_type)
    try:
        return buffer.decode("utf-8")
    except UnicodeDecodeError as e:
        raise TransportError(f"invalid UTF-8 text message: {e}") from e
