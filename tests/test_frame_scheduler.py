import asyncio

from rest_timer.timer.countdown_controller import RestTimerController
from rest_timer.timer.frame_scheduler import AsyncioFrameScheduler
from rest_timer.timer.session import WorkoutSession


async def test_frame_fires_after_interval():
    frames = AsyncioFrameScheduler(interval_seconds=0.01)
    fired = asyncio.Event()

    frames.request_frame(fired.set)

    await asyncio.wait_for(fired.wait(), timeout=1)


async def test_cancelled_frame_never_fires():
    frames = AsyncioFrameScheduler(interval_seconds=0.01)
    calls = []

    handle = frames.request_frame(lambda: calls.append(1))
    frames.cancel_frame(handle)
    await asyncio.sleep(0.05)

    assert calls == []


async def test_controller_ticks_on_event_loop(view, clock):
    controller = RestTimerController(
        WorkoutSession(owner_id="user-1"), AsyncioFrameScheduler(interval_seconds=0.01), view=view, clock=clock
    )
    controller.start("plank", 2)

    clock.advance(2_000)
    await asyncio.sleep(0.05)

    assert view.last == ("ready",)
    assert not controller.is_ticking
