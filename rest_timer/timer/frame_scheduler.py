"""Cooperative tick sources for the countdown render loop"""
import asyncio
from abc import ABC, abstractmethod
from typing import Any, Callable, Optional


class FrameScheduler(ABC):
    """Requests a single callback on the next display frame / tick"""

    @abstractmethod
    def request_frame(self, callback: Callable[[], None]) -> Any:
        """Schedule callback once; return a handle for cancel_frame"""

    @abstractmethod
    def cancel_frame(self, handle: Any) -> None:
        """Cancel a pending callback"""


class AsyncioFrameScheduler(FrameScheduler):
    """Ticks on the asyncio event loop every interval_seconds"""

    def __init__(self, interval_seconds: float = 1.0, loop: Optional[asyncio.AbstractEventLoop] = None):
        self.interval_seconds = interval_seconds
        self._loop = loop

    def request_frame(self, callback: Callable[[], None]) -> asyncio.TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(self.interval_seconds, callback)

    def cancel_frame(self, handle: asyncio.TimerHandle) -> None:
        handle.cancel()
