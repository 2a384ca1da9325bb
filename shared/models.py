"""
MODULE OVERVIEW:
The strictly typed data structures exchanged over a session, powered by Pydantic v2.

WHAT IS HAPPENING HERE:
Inbound text is parsed into a tagged `Command` (simple or composite) so matching
stays exhaustive. The handler answers every command with a `CommandOutcome`: either
a text `Reply` or a `CloseSession` request. The unsolicited status frame is a
`HeartbeatPayload`, whose field order is the wire key order.
"""
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class SimpleCommand(BaseModel):
    """Message without a `#`: the whole lowercased text."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["simple"] = "simple"
    text: str


class CompositeCommand(BaseModel):
    """Message with a `#`: keyword before the first `#`, everything after it as argument."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["composite"] = "composite"
    keyword: str
    argument: str


Command = Annotated[Union[SimpleCommand, CompositeCommand], Field(discriminator="kind")]


class Reply(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["reply"] = "reply"
    text: str


class CloseSession(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["close"] = "close"
    reason: str


CommandOutcome = Annotated[Union[Reply, CloseSession], Field(discriminator="kind")]


# WHAT IS HAPPENING HERE:
# The heartbeat alternates between a paid and a denied status. The key order
# (type, message, result) is part of the contract, and model_dump_json() emits
# fields in declaration order without whitespace.
class HeartbeatPayload(BaseModel):
    type: Literal["payment_status"] = "payment_status"
    message: Literal["Pagado", "Denegado"]
    result: Literal[1, 2]

    @classmethod
    def for_toggle(cls, paid: bool) -> "HeartbeatPayload":
        if paid:
            return cls(message="Pagado", result=1)
        return cls(message="Denegado", result=2)
