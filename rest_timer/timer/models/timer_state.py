"""Rest timer state models"""
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel

ExerciseId = Union[int, str]


class TimerStatus(str, Enum):
    """Rest timer status"""
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    COMPLETED = "completed"


class TimerState(BaseModel):
    """
    One rest interval for one exercise, held by the workout session.

    Remaining time is always derived from wall-clock timestamps, never from a
    counter, so a state survives its controller being rebuilt or the process
    being suspended.
    """
    exercise_id: ExerciseId
    exercise_name: Optional[str] = None
    duration_seconds: float = 90
    started_at_ms: int
    paused_accumulated_ms: int = 0
    paused_at_ms: Optional[int] = None  # start of the current pause
    is_paused: bool = False
    is_completed: bool = False
    notification_id: Optional[str] = None  # outstanding scheduled notification

    @property
    def duration_ms(self) -> int:
        return int(round(self.duration_seconds * 1000))

    @property
    def status(self) -> TimerStatus:
        if self.is_completed:
            return TimerStatus.COMPLETED
        if self.is_paused:
            return TimerStatus.PAUSED
        return TimerStatus.RUNNING

    def elapsed_ms(self, now_ms: int) -> int:
        paused = self.paused_accumulated_ms
        if self.is_paused and self.paused_at_ms is not None:
            paused += now_ms - self.paused_at_ms
        return now_ms - self.started_at_ms - paused

    def remaining_ms(self, now_ms: int) -> int:
        if self.is_completed:
            return 0
        return max(0, self.duration_ms - self.elapsed_ms(now_ms))

    def pause(self, now_ms: int) -> bool:
        if self.is_paused or self.is_completed:
            return False
        self.is_paused = True
        self.paused_at_ms = now_ms
        return True

    def resume(self, now_ms: int) -> bool:
        if not self.is_paused or self.is_completed:
            return False
        if self.paused_at_ms is not None:
            self.paused_accumulated_ms += now_ms - self.paused_at_ms
        self.is_paused = False
        self.paused_at_ms = None
        return True

    def complete_if_elapsed(self, now_ms: int) -> bool:
        """Mark completed the first time remaining reaches zero. True only on that transition."""
        if self.is_completed or self.is_paused:
            return False
        if self.remaining_ms(now_ms) > 0:
            return False
        self.is_completed = True
        return True
