"""Fixed-period driver and command gateway for the cooking state machine."""

from __future__ import annotations

import asyncio
import logging
import threading
from datetime import datetime
from typing import Awaitable, Callable, Optional

from ..config import CooktopConfig
from ..recipes import Recipe
from .events import Event
from .fsm import CookingStateMachine
from .scheduler import TargetTime
from .session import SessionSnapshot
from .states import CookingState

logger = logging.getLogger(__name__)

# Type alias for event listeners
EventListener = Callable[[Event], Awaitable[None]]

# Type alias for per-tick snapshot listeners
SnapshotListener = Callable[[SessionSnapshot], Awaitable[None]]


class SimulationClock:
    """Sole external entry point of the control core.

    ``tick()`` and every command run under one lock so a host with
    several threads cannot interleave them. A tick that finds the lock
    held is skipped, never queued. The optional asyncio loop ticks at a
    fixed interval and drops ticks it fell behind on.

    Example:
        clock = SimulationClock(CookingStateMachine(config))
        clock.add_listener(on_event)
        await clock.start_loop()
        clock.start(config.get_recipe("ramen"))
    """

    def __init__(
        self,
        machine: Optional[CookingStateMachine] = None,
        config: Optional[CooktopConfig] = None,
    ) -> None:
        """Initialize the clock.

        Args:
            machine: State machine to drive. Built from config if None.
            config: Configuration; defaults to the machine's.
        """
        if machine is None:
            machine = CookingStateMachine(config)
        self._machine = machine
        self.config = config or machine.config
        self._lock = threading.Lock()
        self._listeners: list[EventListener] = []
        self._snapshot_listeners: list[SnapshotListener] = []
        self._running = False
        self._loop_task: Optional[asyncio.Task[None]] = None
        self.skipped_ticks = 0

    @property
    def machine(self) -> CookingStateMachine:
        return self._machine

    @property
    def snapshot(self) -> SessionSnapshot:
        """Most recently published snapshot."""
        return self._machine.snapshot

    @property
    def interval(self) -> float:
        """Tick period in seconds."""
        return self.config.tick_interval

    @property
    def is_running(self) -> bool:
        """Whether the periodic loop is running."""
        return self._running

    def add_listener(self, listener: EventListener) -> None:
        """Add an async event listener."""
        self._listeners.append(listener)

    def remove_listener(self, listener: EventListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def add_snapshot_listener(self, listener: SnapshotListener) -> None:
        """Add an async listener called with the snapshot after each loop tick."""
        self._snapshot_listeners.append(listener)

    def remove_snapshot_listener(self, listener: SnapshotListener) -> None:
        if listener in self._snapshot_listeners:
            self._snapshot_listeners.remove(listener)

    def tick(self, now: Optional[datetime] = None) -> SessionSnapshot:
        """Advance one fixed period.

        Args:
            now: Wall-clock override for the reservation gate.

        Returns:
            The new snapshot, or the previous one if this tick was skipped
            because another tick still held the lock.
        """
        if not self._lock.acquire(blocking=False):
            self.skipped_ticks += 1
            logger.debug("Tick skipped, previous tick still running")
            return self._machine.snapshot
        try:
            return self._machine.tick(now)
        finally:
            self._lock.release()

    # Commands, serialized with tick()

    def select_recipe(self, recipe: Recipe) -> bool:
        with self._lock:
            return self._machine.select_recipe(recipe)

    def start(self, recipe: Optional[Recipe] = None) -> bool:
        with self._lock:
            return self._machine.start(recipe)

    def stop(self) -> bool:
        with self._lock:
            return self._machine.stop()

    def arm_reservation(self, target_time: TargetTime, recipe: Optional[Recipe] = None) -> bool:
        with self._lock:
            return self._machine.arm_reservation(target_time, recipe)

    def confirm_ingredients_added(self) -> bool:
        with self._lock:
            return self._machine.confirm_ingredients_added()

    def acknowledge_complete(self) -> bool:
        with self._lock:
            return self._machine.acknowledge_complete()

    def inject_vibration(self, vibration: float) -> None:
        """Simulator hook: force the vibration signal."""
        with self._lock:
            self._machine.process.inject_vibration(vibration)

    def reset_process(self, temp_c: Optional[float] = None) -> bool:
        """Simulator hook: reset the process model. IDLE only."""
        with self._lock:
            if self._machine.state != CookingState.IDLE:
                return False
            self._machine.process.reset(temp_c)
            return True

    async def dispatch_events(self) -> None:
        """Deliver queued events to all listeners."""
        with self._lock:
            events = self._machine.drain_events()
        for event in events:
            for listener in list(self._listeners):
                try:
                    await listener(event)
                except Exception as e:
                    logger.error("Event listener error: %s", e)

    async def _publish(self, snapshot: SessionSnapshot) -> None:
        for listener in list(self._snapshot_listeners):
            try:
                await listener(snapshot)
            except Exception as e:
                logger.error("Snapshot listener error: %s", e)

    async def run(self) -> None:
        """Tick at the configured interval until stop_loop() is called.

        A tick that raises returns the machine to IDLE with the coil off;
        the loop keeps running so the dashboard still sees fresh snapshots.
        """
        self._running = True
        loop = asyncio.get_running_loop()
        interval = self.interval
        next_due = loop.time()
        logger.info("Control loop started (%.0fms tick)", interval * 1000)

        while self._running:
            try:
                snapshot = self.tick()
            except Exception:
                logger.exception("Control tick failed, switching the coil off")
                self.stop()
                snapshot = self._machine.snapshot
            await self.dispatch_events()
            await self._publish(snapshot)

            next_due += interval
            now = loop.time()
            if now > next_due:
                # Fell behind: drop missed ticks rather than bursting
                missed = int((now - next_due) // interval) + 1
                self.skipped_ticks += missed
                next_due += missed * interval
                logger.debug("Control loop behind, skipped %d ticks", missed)

            try:
                await asyncio.sleep(max(0.0, next_due - now))
            except asyncio.CancelledError:
                break

        logger.info("Control loop stopped")

    async def start_loop(self) -> None:
        """Start the control loop as a background task."""
        if self._loop_task is not None:
            return
        self._loop_task = asyncio.create_task(self.run(), name="cooktop-clock")

    async def stop_loop(self) -> None:
        """Stop the background control loop."""
        self._running = False
        if self._loop_task is not None:
            self._loop_task.cancel()
            try:
                await self._loop_task
            except asyncio.CancelledError:
                pass
            self._loop_task = None
