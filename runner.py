"""
CLI entrypoint for the Payment Status Socket.
"""
import typer
import asyncio

from client.visualizer import Visualizer
from client.websocket_client import WebSocketClient
from shared.config import configure_logging, settings

app = typer.Typer(help="Payment Status Socket CLI Manager")


@app.command()
def server():
    """Start the FastAPI backend server using Uvicorn."""
    import uvicorn
    configure_logging()
    typer.echo(f"Starting server on port {settings.PORT}...")
    uvicorn.run("server.main:app", host=settings.HOST, port=settings.PORT, log_level=settings.LOG_LEVEL.lower())


@app.command()
def client(
    send: list[str] = typer.Option([], "--send", help="Command to send, in order. Repeat for several, e.g. --send hola --send adios"),
    duration: float = typer.Option(70.0, help="Give up after this many seconds if the server has not closed"),
    client_id: str = typer.Option("cli", help="Client id reported in the server logs"),
):
    """Connect, send the given commands, and print every frame until the server closes."""
    configure_logging()
    base_url = f"http://127.0.0.1:{settings.PORT}"
    visualizer = Visualizer(WebSocketClient(client_id, base_url, settings.WS_PATH))
    try:
        asyncio.run(visualizer.run(send, duration))
    except KeyboardInterrupt:
        pass


@app.command()
def health():
    """Query the server's liveness probe."""
    import httpx
    resp = httpx.get(f"http://127.0.0.1:{settings.PORT}/healthz")
    typer.echo(resp.json())


if __name__ == "__main__":
    app()
