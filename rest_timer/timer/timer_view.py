"""Rendering interface for the rest countdown"""
import math
from abc import ABC, abstractmethod


def format_remaining(remaining_ms: int) -> str:
    """Render as M:SS, rounding seconds up so 0:00 only shows at zero"""
    total_seconds = max(0, math.ceil(remaining_ms / 1000))
    minutes, seconds = divmod(total_seconds, 60)
    return f"{minutes}:{seconds:02d}"


class TimerView(ABC):
    """Whatever displays the countdown of the focused exercise"""

    @abstractmethod
    def show_remaining(self, remaining_ms: int, is_paused: bool) -> None:
        """Display the remaining time"""

    @abstractmethod
    def show_ready(self) -> None:
        """Display the terminal 'ready' indicator"""

    @abstractmethod
    def hide(self) -> None:
        """Remove the countdown from the screen"""
