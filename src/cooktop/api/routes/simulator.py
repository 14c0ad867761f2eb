"""Simulator control API routes."""

from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, HTTPException

from ..schemas import SimulatorReset, SimulatorStatus, VibrationInjection
from .state import require_clock

router = APIRouter()


@router.get("/")
async def get_simulator_status():
    """Get process model status."""
    clock = require_clock()
    model = clock.machine.process
    thermal = model.state

    return asdict(SimulatorStatus(
        tick=thermal.tick,
        center_temp=thermal.center,
        legacy_temp=thermal.legacy_temp,
        vibration=thermal.vibration,
        heat_uniformity=thermal.heat_uniformity,
        ambient_temp=model.params.ambient_temp_c,
        thermal_mass=model.params.thermal_mass,
        skipped_ticks=clock.skipped_ticks,
    ))


@router.post("/reset")
async def reset_simulator(request: SimulatorReset):
    """Reset the simulated vessel to a uniform temperature (idle only)."""
    clock = require_clock()
    if not clock.reset_process(request.temperature):
        raise HTTPException(status_code=400, detail="Simulator can only be reset while idle")

    thermal = clock.machine.process.state
    return {
        "message": "Simulator reset",
        "center_temp": thermal.center,
        "sensor_array": list(thermal.sensors),
    }


@router.post("/vibration")
async def inject_vibration(request: VibrationInjection):
    """Force the vibration signal, e.g. to demo a froth surge."""
    clock = require_clock()
    clock.inject_vibration(request.vibration)
    return {"vibration": clock.machine.process.state.vibration}
