"""
MODULE OVERVIEW:
Command parsing and dispatch for the session's Command Loop.

WHAT IS HAPPENING HERE:
Two kinds of messages are understood:
  1. Simple messages: just a word, e.g. "hola" or "adios".
  2. Composite messages: a keyword plus a parameter, separated by `#`, e.g. "hola#Ana".
The whole message is lowercased before splitting, so the parameter loses its case too.
Clients already depend on the exact reply strings below, including the two fallback
replies that differ only by a trailing period.
"""
from shared.models import CloseSession, Command, CommandOutcome, CompositeCommand, Reply, SimpleCommand

DELIMITER = "#"

GREETING_REPLY = "Hola, Bienvenido..."
GREETING_PREFIX = "Hola Usuario"
UNKNOWN_SIMPLE_REPLY = "No se entiende el mensaje"
UNKNOWN_COMPOSITE_REPLY = "No se entiende el mensaje."
DISCONNECT_REASON = "Desconectado"


def parse_command(message: str) -> Command:
    lowered = message.lower()
    if DELIMITER in lowered:
        keyword, argument = lowered.split(DELIMITER, 1)
        return CompositeCommand(keyword=keyword, argument=argument)
    return SimpleCommand(text=lowered)


def handle_command(command: Command) -> CommandOutcome:
    if isinstance(command, CompositeCommand):
        if command.keyword == "hola":
            return Reply(text=GREETING_PREFIX + command.argument)
        return Reply(text=UNKNOWN_COMPOSITE_REPLY)

    if command.text == "hola":
        return Reply(text=GREETING_REPLY)
    if command.text == "adios":
        return CloseSession(reason=DISCONNECT_REASON)
    return Reply(text=UNKNOWN_SIMPLE_REPLY)


def respond(message: str) -> CommandOutcome:
    """Parse and dispatch one inbound message."""
    return handle_command(parse_command(message))
