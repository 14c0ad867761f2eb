"""Thermal process simulation for the cooking zone."""

from .process_model import HeatCommand, ProcessModel, ProcessParameters, ThermalState, advance

__all__ = [
    "HeatCommand",
    "ProcessModel",
    "ProcessParameters",
    "ThermalState",
    "advance",
]
