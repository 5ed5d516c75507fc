"""Workout session context handed to the countdown controller"""
from typing import Dict, Optional

from .models.timer_state import ExerciseId, TimerState


class WorkoutSession:
    """
    Per-workout context: who is training, which exercise is focused in the
    UI, and the rest timer of each exercise. Timer states live here, not in
    the controller, so a rebuilt controller picks them up unchanged.
    """

    def __init__(self, owner_id: Optional[str] = None):
        self.owner_id = owner_id
        self.focused_exercise_id: Optional[ExerciseId] = None
        self.rest_timers: Dict[ExerciseId, TimerState] = {}

    def focus(self, exercise_id: Optional[ExerciseId]) -> None:
        self.focused_exercise_id = exercise_id

    def timer_for(self, exercise_id: Optional[ExerciseId]) -> Optional[TimerState]:
        if exercise_id is None:
            return None
        return self.rest_timers.get(exercise_id)

    def put_timer(self, state: TimerState) -> None:
        self.rest_timers[state.exercise_id] = state

    def pop_timer(self, exercise_id: ExerciseId) -> Optional[TimerState]:
        return self.rest_timers.pop(exercise_id, None)
