"""Rest Timer Controller - drives the visible rest countdown"""
import asyncio
import logging
import uuid
from typing import Any, Awaitable, Callable, Dict, Optional, Set

from rest_timer import config
from rest_timer.utils.time_helper import now_ms

from .frame_scheduler import FrameScheduler
from .models.timer_state import ExerciseId, TimerState, TimerStatus
from .notifier import RestNotifier
from .session import WorkoutSession
from .timer_view import TimerView

logger = logging.getLogger(__name__)


class RestTimerController:
    """
    Renders and mutates the rest timer of the focused exercise.

    State machine per exercise: idle -> running -> (paused <-> running) ->
    completed. skip()/cancel() return any state to idle; only start() leaves
    completed.

    The controller never waits on the backend. Scheduling and cancelling the
    background notification are spawned as tasks whose failures are logged
    and dropped: without the backend the countdown still works, only the
    notification while backgrounded is lost.
    """

    def __init__(
        self,
        session: WorkoutSession,
        frames: FrameScheduler,
        view: Optional[TimerView] = None,
        notifier: Optional[RestNotifier] = None,
        clock: Callable[[], int] = now_ms,
        id_factory: Optional[Callable[[], str]] = None,
    ):
        self.session = session
        self.frames = frames
        self.view = view
        self.notifier = notifier
        self.clock = clock
        self._id_factory = id_factory or self._default_notification_id
        self._frame_handle: Any = None
        self._background: Set[asyncio.Task] = set()
        self._scheduling: Dict[str, asyncio.Task] = {}  # schedule calls still in flight

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------

    def start(
        self,
        exercise_id: ExerciseId,
        duration_seconds: float = config.DEFAULT_REST_SECONDS,
        exercise_name: Optional[str] = None,
    ) -> TimerState:
        """Start a fresh rest timer, superseding any previous one for this exercise"""
        previous = self.session.pop_timer(exercise_id)
        if previous is not None:
            self._cancel_notification(previous)

        now = self.clock()
        state = TimerState(
            exercise_id=exercise_id,
            exercise_name=exercise_name,
            duration_seconds=duration_seconds,
            started_at_ms=now,
        )
        self.session.put_timer(state)
        self.session.focus(exercise_id)

        self._schedule_notification(state, duration_seconds)
        self._start_loop()

        logger.info(f"Rest timer started: {duration_seconds}sec for exercise {exercise_id}")
        return state

    def pause(self, exercise_id: Optional[ExerciseId] = None) -> bool:
        state = self._timer(exercise_id)
        if state is None or not state.pause(self.clock()):
            return False

        # A paused timer must not fire in the background
        self._cancel_notification(state)
        if self._is_focused(state):
            self._stop_loop()
            self._render(state)
        return True

    def resume(self, exercise_id: Optional[ExerciseId] = None) -> bool:
        state = self._timer(exercise_id)
        if state is None:
            return False

        now = self.clock()
        if not state.resume(now):
            return False

        remaining = state.remaining_ms(now)
        if remaining > 0:
            self._schedule_notification(state, remaining / 1000)
        if self._is_focused(state):
            self._start_loop()
        return True

    def toggle_pause(self, exercise_id: Optional[ExerciseId] = None) -> bool:
        state = self._timer(exercise_id)
        if state is None:
            return False
        if state.is_paused:
            return self.resume(exercise_id)
        return self.pause(exercise_id)

    def skip(self, exercise_id: Optional[ExerciseId] = None) -> bool:
        """Discard the timer immediately; its notification is deleted in the background"""
        exercise_id = self._resolve(exercise_id)
        if exercise_id is None:
            return False

        state = self.session.pop_timer(exercise_id)
        if state is None:
            return False

        if exercise_id == self.session.focused_exercise_id:
            self._stop_loop()
            if self.view is not None:
                self.view.hide()

        self._cancel_notification(state)
        logger.info(f"Rest timer skipped for exercise {exercise_id}")
        return True

    cancel = skip

    def dismiss(self, exercise_id: Optional[ExerciseId] = None) -> bool:
        """Remove a completed timer's 'ready' indicator (user moved on)"""
        state = self._timer(exercise_id)
        if state is None or not state.is_completed:
            return False

        self.session.pop_timer(state.exercise_id)
        if self._is_focused(state) and self.view is not None:
            self.view.hide()
        return True

    def focus(self, exercise_id: Optional[ExerciseId], view: Optional[TimerView] = None) -> None:
        """Switch the displayed exercise; its timer keeps its own timestamps"""
        self._stop_loop()
        self.session.focus(exercise_id)
        if view is not None:
            self.view = view

        state = self._timer(exercise_id)
        if state is None:
            if self.view is not None:
                self.view.hide()
            return
        self._start_loop()

    def detach_for_teardown(self, exercise_id: Optional[ExerciseId] = None) -> Optional[TimerState]:
        """Stop rendering and return a snapshot to hand back to reattach()"""
        state = self._timer(exercise_id)
        self._stop_loop()
        self.view = None
        if state is None:
            return None
        return state.model_copy(deep=True)

    def reattach(self, snapshot: TimerState, view: Optional[TimerView] = None) -> TimerState:
        """
        Restore a snapshot taken by detach_for_teardown() and resume rendering.

        A timer the session already holds for the exercise wins if it was
        started at or after the snapshot; an older one is superseded like
        start() does, so its notification is cancelled.
        """
        current = self.session.timer_for(snapshot.exercise_id)
        if current is not None and current.started_at_ms >= snapshot.started_at_ms:
            self.focus(current.exercise_id, view=view)
            return current

        if current is not None:
            self.session.pop_timer(current.exercise_id)
            self._cancel_notification(current)

        state = snapshot.model_copy(deep=True)
        self.session.put_timer(state)
        self.focus(state.exercise_id, view=view)
        return state

    def remaining_ms(self, exercise_id: Optional[ExerciseId] = None) -> int:
        state = self._timer(exercise_id)
        if state is None:
            return 0
        now = self.clock()
        state.complete_if_elapsed(now)
        return state.remaining_ms(now)

    def status(self, exercise_id: Optional[ExerciseId] = None) -> TimerStatus:
        state = self._timer(exercise_id)
        if state is None:
            return TimerStatus.IDLE
        state.complete_if_elapsed(self.clock())
        return state.status

    @property
    def is_ticking(self) -> bool:
        return self._frame_handle is not None

    async def wait_for_background(self) -> None:
        """Wait until spawned schedule/cancel calls have finished"""
        while self._background:
            await asyncio.gather(*list(self._background), return_exceptions=True)

    # ------------------------------------------------------------------
    # Render loop
    # ------------------------------------------------------------------

    def _start_loop(self) -> None:
        self._stop_loop()
        self._on_frame()

    def _stop_loop(self) -> None:
        if self._frame_handle is not None:
            self.frames.cancel_frame(self._frame_handle)
            self._frame_handle = None

    def _on_frame(self) -> None:
        self._frame_handle = None
        state = self._timer(None)
        if state is None:
            return

        if state.complete_if_elapsed(self.clock()):
            logger.info(f"Rest timer completed for exercise {state.exercise_id}")

        self._render(state)

        if state.is_paused or state.is_completed:
            return
        self._frame_handle = self.frames.request_frame(self._on_frame)

    def _render(self, state: TimerState) -> None:
        if self.view is None:
            return
        if state.is_completed:
            self.view.show_ready()
        else:
            self.view.show_remaining(state.remaining_ms(self.clock()), state.is_paused)

    # ------------------------------------------------------------------
    # Background notification
    # ------------------------------------------------------------------

    def _schedule_notification(self, state: TimerState, delay_seconds: float) -> None:
        if self.notifier is None or not self.notifier.is_available():
            state.notification_id = None
            return

        notification_id = self._id_factory()
        state.notification_id = notification_id
        task = self._spawn(
            self.notifier.schedule(notification_id, delay_seconds, state.exercise_name),
            f"schedule notification {notification_id}",
        )
        if task is not None:
            self._scheduling[notification_id] = task
            task.add_done_callback(lambda _t, nid=notification_id: self._scheduling.pop(nid, None))

    def _cancel_notification(self, state: TimerState) -> None:
        notification_id = state.notification_id
        state.notification_id = None
        if notification_id is None or self.notifier is None:
            return

        in_flight = self._scheduling.pop(notification_id, None)
        self._spawn(
            self._cancel_after(notification_id, in_flight),
            f"cancel notification {notification_id}",
        )

    async def _cancel_after(self, notification_id: str, in_flight: Optional[asyncio.Task]) -> None:
        # Deleting before the create lands would leave a stray record behind
        if in_flight is not None and not in_flight.done():
            await asyncio.wait({in_flight})
        await self.notifier.cancel(notification_id)

    def _spawn(self, coro: Awaitable[Any], action: str) -> Optional[asyncio.Task]:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            coro.close()
            logger.warning(f"No running event loop; could not {action}")
            return None

        task = loop.create_task(self._guarded(coro, action))
        self._background.add(task)
        task.add_done_callback(self._background.discard)
        return task

    @staticmethod
    async def _guarded(coro: Awaitable[Any], action: str) -> None:
        try:
            await coro
        except Exception as e:
            logger.warning(f"Background delivery degraded, could not {action}: {e}")

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _resolve(self, exercise_id: Optional[ExerciseId]) -> Optional[ExerciseId]:
        return self.session.focused_exercise_id if exercise_id is None else exercise_id

    def _timer(self, exercise_id: Optional[ExerciseId]) -> Optional[TimerState]:
        return self.session.timer_for(self._resolve(exercise_id))

    def _is_focused(self, state: Optional[TimerState]) -> bool:
        return state is not None and state.exercise_id == self.session.focused_exercise_id

    def _default_notification_id(self) -> str:
        owner = self.session.owner_id or "anonymous"
        return f"rest_{owner}_{self.clock()}_{uuid.uuid4().hex[:8]}"
