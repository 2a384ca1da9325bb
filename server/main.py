"""
MODULE OVERVIEW:
The FastAPI application.

WHAT IS HAPPENING HERE:
There is no shared state to set up: each WebSocket connection owns its session and
its heartbeat task, and tears both down itself. The lifespan only marks startup and
shutdown in the logs. Plain HTTP requests never reach the session handler; the only
HTTP route is a liveness probe.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from loguru import logger

from server.routes import websocket
from shared.config import settings


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Payment status socket listening for WebSocket sessions on {settings.WS_PATH}")
    yield
    logger.info("Shutdown complete.")


app = FastAPI(
    title="Payment Status Socket",
    description="Single-connection command and payment status WebSocket endpoint",
    version="1.0.0",
    lifespan=lifespan
)

app.include_router(websocket.router, tags=["Session"])


@app.get("/healthz", tags=["Ops"])
async def health_check():
    return {"status": "ok"}
