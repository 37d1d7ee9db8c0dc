"""Cooperative gravity loop.

The host runtime only has to call back once per frame with a monotonically
increasing timestamp in milliseconds. :class:`FrameQueue` is the in-process
frame source used by the pygame loop, the gymnasium environment and tests:
whoever owns the loop calls :meth:`FrameQueue.advance` each frame.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING, Callable, Dict, Optional, Protocol

if TYPE_CHECKING:
    from .core import TetrisEngine


logger = logging.getLogger(__name__)

FrameCallback = Callable[[float], None]


class FrameSource(Protocol):
    def request(self, callback: FrameCallback) -> int: ...

    def cancel(self, handle: int) -> None: ...


class FrameQueue:
    """Frame source driven by explicit ``advance(now)`` calls.

    Callbacks requested while a frame is running are deferred to the next
    frame. A cancelled handle never fires, even if it was due in the frame
    that cancelled it.
    """

    def __init__(self) -> None:
        self._pending: Dict[int, FrameCallback] = {}
        self._next_handle = 1
        self.now: Optional[float] = None

    def request(self, callback: FrameCallback) -> int:
        handle = self._next_handle
        self._next_handle += 1
        self._pending[handle] = callback
        return handle

    def cancel(self, handle: int) -> None:
        self._pending.pop(handle, None)

    @property
    def pending(self) -> int:
        return len(self._pending)

    def advance(self, now: float) -> int:
        """Run every callback pending at ``now``; return how many ran."""
        if self.now is not None and now < self.now:
            raise ValueError(f"frame time went backwards: {now} < {self.now}")
        self.now = now
        ran = 0
        for handle in list(self._pending):
            callback = self._pending.pop(handle, None)
            if callback is None:
                continue
            callback(now)
            ran += 1
        return ran


class SchedulerState(Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    TERMINAL = "terminal"


class GravityScheduler:
    """Applies gravity to a :class:`TetrisEngine` at a level-dependent interval.

    Each frame compares ``now - last_time`` against the engine's gravity
    interval. Once it is exceeded the baseline resets and, unless the game is
    paused or over, the active piece falls one row or locks if it cannot.
    """

    def __init__(self, engine: "TetrisEngine", frames: FrameSource) -> None:
        self.engine = engine
        self.frames = frames
        self.last_time: Optional[float] = None
        self._handle: Optional[int] = None
        self._active = False
        self._generation = 0

    @property
    def state(self) -> SchedulerState:
        if not self._active:
            return SchedulerState.IDLE
        game = self.engine.state
        if game.game_over:
            return SchedulerState.TERMINAL
        if game.is_paused:
            return SchedulerState.PAUSED
        return SchedulerState.RUNNING

    def start(self) -> None:
        if self._active:
            return
        self._active = True
        self.last_time = None
        self._handle = self.frames.request(self._on_frame)
        logger.debug("Gravity scheduler started")

    def stop(self) -> None:
        if not self._active:
            return
        self._active = False
        self._generation += 1
        if self._handle is not None:
            self.frames.cancel(self._handle)
            self._handle = None
        logger.debug("Gravity scheduler stopped")

    def restart(self) -> None:
        self.stop()
        self.start()

    def _on_frame(self, now: float) -> None:
        self._handle = None
        generation = self._generation
        try:
            self.step(now)
        finally:
            # A stop or restart issued from inside the step owns scheduling now
            if self._active and generation == self._generation:
                self._handle = self.frames.request(self._on_frame)

    def step(self, now: float) -> bool:
        """Run one scheduling cycle; return True if gravity was applied."""
        if self.last_time is None:
            self.last_time = now
            return False
        if now - self.last_time <= self.engine.gravity_interval():
            return False
        self.last_time = now
        if not self.engine.state.accepts_input:
            return False
        if self.engine.can_fall():
            self.engine.tick()
        else:
            self.engine.lock()
        return True
