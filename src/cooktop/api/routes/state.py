"""State and command API routes."""

from __future__ import annotations

from dataclasses import asdict
from datetime import datetime, time
from typing import TYPE_CHECKING

from fastapi import APIRouter, HTTPException, WebSocket, WebSocketDisconnect

from ...core.clock import SimulationClock
from ...core.scheduler import TargetTime
from ..schemas import CommandRequest, CommandResponse, ReservationRequest

if TYPE_CHECKING:
    from ..app import AppState

router = APIRouter()


def get_app_state() -> "AppState":
    """Get app state - injected at runtime."""
    from ..app import app_state
    return app_state


def require_clock() -> SimulationClock:
    """Return the running clock or fail with 503."""
    clock = get_app_state().clock
    if clock is None:
        raise HTTPException(status_code=503, detail="Controller not initialized")
    return clock


def parse_target_time(value: str) -> TargetTime:
    """Parse an ISO datetime or a time of day."""
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        pass
    try:
        return time.fromisoformat(value)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid target time: {value}")


@router.get("/")
async def get_current_state():
    """Get the current session snapshot."""
    return require_clock().snapshot.to_dict()


@router.get("/history")
async def get_history():
    """Get the bounded sensor history."""
    clock = require_clock()
    snapshot = clock.snapshot
    return {
        "capacity": clock.config.history_capacity,
        "history": [entry.to_dict() for entry in snapshot.history],
    }


@router.post("/command")
async def control_cooking(command: CommandRequest):
    """Forward a cooking command to the core."""
    clock = require_clock()

    if command.action == "start":
        recipe = None
        if command.recipe_id is not None:
            recipe = clock.config.get_recipe(command.recipe_id)
            if recipe is None:
                raise HTTPException(status_code=404, detail=f"Unknown recipe: {command.recipe_id}")
        success = clock.start(recipe)
        message = "Cooking started"
    elif command.action == "stop":
        success = clock.stop()
        message = "Stopped"
    elif command.action == "confirm_ingredients":
        success = clock.confirm_ingredients_added()
        message = "Ingredients confirmed"
    elif command.action == "acknowledge":
        success = clock.acknowledge_complete()
        message = "Completion acknowledged"
    else:
        raise HTTPException(status_code=400, detail=f"Invalid action: {command.action}")

    state = clock.snapshot.state.name
    if not success:
        raise HTTPException(
            status_code=400,
            detail=f"Cannot {command.action} in state {state}",
        )
    return asdict(CommandResponse(success=True, state=state, message=message))


@router.post("/reservation")
async def arm_reservation(request: ReservationRequest):
    """Reserve a recipe to finish at a given time."""
    clock = require_clock()
    target = parse_target_time(request.target_time)

    recipe = None
    if request.recipe_id is not None:
        recipe = clock.config.get_recipe(request.recipe_id)
        if recipe is None:
            raise HTTPException(status_code=404, detail=f"Unknown recipe: {request.recipe_id}")

    if not clock.arm_reservation(target, recipe):
        raise HTTPException(
            status_code=400,
            detail="Cannot reserve - not idle or recipe not reservable",
        )

    snapshot = clock.snapshot
    return {
        "success": True,
        "state": snapshot.state.name,
        "start_time": snapshot.reservation_start_time.isoformat(),
    }


@router.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket):
    """WebSocket endpoint for real-time updates."""
    manager = get_app_state().ws_manager
    await manager.connect(websocket)
    try:
        while True:
            # Keep connection alive; commands go through the REST routes
            await websocket.receive_text()
    except WebSocketDisconnect:
        await manager.disconnect(websocket)
