"""FastAPI application serving the local cooktop dashboard."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ..config import load_config
from ..core.clock import SimulationClock
from ..core.events import Event, EventType
from ..core.fsm import CookingStateMachine
from .routes import recipes, simulator, state
from .websocket import WebSocketManager

logger = logging.getLogger(__name__)

_WARNING_EVENTS = frozenset({
    EventType.BOILOVER_PREDICTED,
    EventType.DISTURBANCE_DETECTED,
    EventType.AUTO_OFF,
})


@dataclass
class AppState:
    """Application state container."""

    clock: Optional[SimulationClock] = None
    ws_manager: WebSocketManager = field(default_factory=WebSocketManager)


# Global app state
app_state = AppState()


async def _event_handler(event: Event) -> None:
    """Forward core events to WebSocket clients."""
    data = event.data or {}
    if event.type == EventType.STATE_ENTER:
        await app_state.ws_manager.broadcast_state_update(
            state=data.get("state", ""),
            previous_state=data.get("from_state"),
        )
    elif event.type in _WARNING_EVENTS:
        await app_state.ws_manager.broadcast_warning(event.type.name, data)
    elif event.type != EventType.STATE_EXIT:
        await app_state.ws_manager.broadcast("event", event.to_dict())


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan management."""
    logger.info("Starting cooktop API")

    cfg = load_config()
    clock = SimulationClock(CookingStateMachine(cfg))
    clock.add_listener(_event_handler)
    clock.add_snapshot_listener(app_state.ws_manager.broadcast_snapshot)
    app_state.clock = clock

    await clock.start_loop()
    logger.info("Cooktop API started")

    try:
        yield
    finally:
        logger.info("Shutting down cooktop API")
        clock.stop()
        await clock.stop_loop()
        logger.info("Cooktop API shutdown complete")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="Cooktop Control API",
        description="Local dashboard adapter for the induction cooking core",
        version="1.0.0",
        lifespan=lifespan,
    )

    # CORS middleware for the dashboard dev server
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[
            "http://localhost:5173",  # Vite dev server
            "http://localhost:3000",
            "http://127.0.0.1:5173",
            "http://127.0.0.1:3000",
        ],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(state.router, prefix="/api/state", tags=["State"])
    app.include_router(recipes.router, prefix="/api/recipes", tags=["Recipes"])
    app.include_router(simulator.router, prefix="/api/simulator", tags=["Simulator"])

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        clock = app_state.clock
        return {
            "status": "healthy",
            "controller_running": clock is not None,
            "loop_running": clock.is_running if clock else False,
            "websocket_connections": app_state.ws_manager.connection_count,
        }

    return app


# Create the app instance
app = create_app()
