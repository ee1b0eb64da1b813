"""
Frame scheduling for the animation driver.

The driver never talks to a timer directly: it asks a FrameScheduler for
the next frame and may cancel that request. At most one frame callback is
in flight at a time; scheduling a new one replaces nothing, so callers must
cancel first.
"""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from typing import Callable

FrameCallback = Callable[[float], None]
Clock = Callable[[], float]

# ~60 FPS
DEFAULT_FRAME_INTERVAL_MS = 16


def monotonic_ms() -> float:
    """Monotonic timestamp in milliseconds."""
    return time.perf_counter() * 1000.0


class FrameScheduler(ABC):
    """Single pending-task handle with cancel."""

    @property
    @abstractmethod
    def pending(self) -> bool:
        raise NotImplementedError

    @abstractmethod
    def schedule(self, callback: FrameCallback) -> int:
        """
        Request one call of *callback(now_ms)*. Returns a handle for cancel().

        Raises RuntimeError if a frame is already pending.
        """
        raise NotImplementedError

    @abstractmethod
    def cancel(self, handle: int) -> None:
        """Cancel the pending frame if *handle* still refers to it."""
        raise NotImplementedError
