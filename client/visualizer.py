"""
MODULE OVERVIEW:
The Rich terminal feed.

WHAT IS HAPPENING HERE:
Each frame the client receives is printed as it arrives: heartbeats in colour by
payment result, command replies in plain text. When the session ends, a summary
panel shows how many frames arrived and the close code and reason.
"""

from datetime import datetime

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from client.websocket_client import CloseInfo, WebSocketClient
from shared.models import HeartbeatPayload

STATUS_STYLE = {1: "green", 2: "red"}


class Visualizer:
    def __init__(self, client: WebSocketClient, console: Console | None = None):
        self.client = client
        self.console = console or Console()
        self.heartbeats = 0
        self.replies = 0

    async def on_frame(self, frame: HeartbeatPayload | str) -> None:
        ts = datetime.now().strftime("%H:%M:%S")
        if isinstance(frame, HeartbeatPayload):
            self.heartbeats += 1
            style = STATUS_STYLE[frame.result]
            self.console.print(f"[cyan]{ts}[/] [magenta]{frame.type}[/] [{style}]{frame.message} ({frame.result})[/]")
        else:
            self.replies += 1
            self.console.print(f"[cyan]{ts}[/] [blue]reply[/] {escape(frame)}", highlight=False)

    def summary(self, close: CloseInfo) -> Panel:
        text = (
            f"Frames Received: {self.client.frames_received}\n"
            f"Heartbeats: {self.heartbeats}\n"
            f"Replies: {self.replies}\n"
            f"Close: {close.code} '{close.reason}'"
        )
        return Panel(text, title="Session Closed")

    async def run(self, commands: list[str], duration_s: float) -> CloseInfo:
        self.client.on_frame_callback = self.on_frame
        close = await self.client.run(commands, duration_s)
        self.console.print(self.summary(close))
        return close
