import copy
from pathlib import Path
import sys
from typing import Any, Callable, Dict, List, Optional

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from rest_timer.errors import DeliveryTargetInvalid  # noqa: E402
from rest_timer.infra.supabase.repositories import RepositoryFactory  # noqa: E402
from rest_timer.models.push_message import PushMessage  # noqa: E402
from rest_timer.models.scheduled_notification import PlatformKind  # noqa: E402
from rest_timer.services.push_channel import PushChannel, PushChannelRouter  # noqa: E402
from rest_timer.timer.frame_scheduler import FrameScheduler  # noqa: E402
from rest_timer.timer.timer_view import TimerView  # noqa: E402


# ----------------------------------------------------------------------
# In-memory stand-in for the supabase query builder
# ----------------------------------------------------------------------

class FakeResponse:
    def __init__(self, data: List[Dict[str, Any]], count: Optional[int] = None):
        self.data = data
        self.count = count


class FakeTable:
    def __init__(self):
        self.rows: List[Dict[str, Any]] = []
        self.unavailable = False


class FakeQuery:
    def __init__(self, table: FakeTable):
        self._table = table
        self._op = "select"
        self._payload: Any = None
        self._on_conflict = "id"
        self._filters: List[Callable[[Dict[str, Any]], bool]] = []
        self._order: Optional[str] = None
        self._desc = False
        self._limit: Optional[int] = None

    def select(self, *columns, count=None):
        self._op = "select"
        return self

    def insert(self, data):
        self._op, self._payload = "insert", data
        return self

    def upsert(self, data, on_conflict="id"):
        self._op, self._payload, self._on_conflict = "upsert", data, on_conflict
        return self

    def update(self, data):
        self._op, self._payload = "update", data
        return self

    def delete(self):
        self._op = "delete"
        return self

    def eq(self, column, value):
        self._filters.append(lambda row: row.get(column) == value)
        return self

    def lt(self, column, value):
        self._filters.append(lambda row: row.get(column) is not None and row[column] < value)
        return self

    def lte(self, column, value):
        self._filters.append(lambda row: row.get(column) is not None and row[column] <= value)
        return self

    def in_(self, column, values):
        self._filters.append(lambda row: row.get(column) in values)
        return self

    def is_(self, column, value):
        assert value == "null"
        self._filters.append(lambda row: row.get(column) is None)
        return self

    def order(self, column, desc=False):
        self._order, self._desc = column, desc
        return self

    def limit(self, n):
        self._limit = n
        return self

    def _matches(self, row):
        return all(f(row) for f in self._filters)

    def execute(self) -> FakeResponse:
        if self._table.unavailable:
            raise ConnectionError("store unavailable")

        rows = self._table.rows
        if self._op == "select":
            found = [copy.deepcopy(r) for r in rows if self._matches(r)]
            if self._order:
                found.sort(key=lambda r: r.get(self._order), reverse=self._desc)
            if self._limit:
                found = found[: self._limit]
            return FakeResponse(found, count=len(found))

        if self._op == "insert":
            rows.append(copy.deepcopy(self._payload))
            return FakeResponse([copy.deepcopy(self._payload)])

        if self._op == "upsert":
            keys = [k.strip() for k in self._on_conflict.split(",")]
            for i, row in enumerate(rows):
                if all(row.get(k) == self._payload.get(k) for k in keys):
                    rows[i] = {**row, **copy.deepcopy(self._payload)}
                    return FakeResponse([copy.deepcopy(rows[i])])
            rows.append(copy.deepcopy(self._payload))
            return FakeResponse([copy.deepcopy(self._payload)])

        if self._op == "update":
            updated = []
            for row in rows:
                if self._matches(row):
                    row.update(copy.deepcopy(self._payload))
                    updated.append(copy.deepcopy(row))
            return FakeResponse(updated)

        if self._op == "delete":
            removed = [r for r in rows if self._matches(r)]
            self._table.rows = [r for r in rows if not self._matches(r)]
            return FakeResponse(removed)

        raise AssertionError(f"unsupported op {self._op}")


class FakeSupabaseClient:
    def __init__(self):
        self.tables: Dict[str, FakeTable] = {}

    def _get(self, name: str) -> FakeTable:
        return self.tables.setdefault(name, FakeTable())

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self._get(name))

    def rows(self, name: str) -> List[Dict[str, Any]]:
        return self._get(name).rows

    def set_unavailable(self, name: str, unavailable: bool = True) -> None:
        self._get(name).unavailable = unavailable


# ----------------------------------------------------------------------
# Clock, frames, view and push doubles
# ----------------------------------------------------------------------

class ManualClock:
    def __init__(self, start_ms: int = 1_700_000_000_000):
        self.now = start_ms
        self.start = start_ms

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms

    def at(self, offset_ms: int) -> None:
        self.now = self.start + offset_ms


class ManualFrameScheduler(FrameScheduler):
    """Frames only fire when the test calls tick()"""

    def __init__(self):
        self.pending: Dict[int, Callable[[], None]] = {}
        self._next = 0

    def request_frame(self, callback):
        self._next += 1
        self.pending[self._next] = callback
        return self._next

    def cancel_frame(self, handle):
        self.pending.pop(handle, None)

    def tick(self) -> int:
        callbacks = list(self.pending.values())
        self.pending.clear()
        for callback in callbacks:
            callback()
        return len(callbacks)


class RecordingView(TimerView):
    def __init__(self):
        self.events: List[tuple] = []

    def show_remaining(self, remaining_ms, is_paused):
        self.events.append(("remaining", remaining_ms, is_paused))

    def show_ready(self):
        self.events.append(("ready",))

    def hide(self):
        self.events.append(("hide",))

    @property
    def last(self):
        return self.events[-1] if self.events else None


class FakePushChannel(PushChannel):
    def __init__(self):
        self.sent: List[tuple] = []
        self.failures: Dict[Any, Exception] = {}

    def fail_for(self, target, error: Exception) -> None:
        key = target if isinstance(target, str) else target.get("endpoint")
        self.failures[key] = error

    async def send(self, target, message: PushMessage) -> None:
        key = target if isinstance(target, str) else target.get("endpoint")
        if key in self.failures:
            raise self.failures[key]
        self.sent.append((target, message))


@pytest.fixture
def fake_supabase() -> FakeSupabaseClient:
    return FakeSupabaseClient()


@pytest.fixture
def repositories(fake_supabase) -> RepositoryFactory:
    return RepositoryFactory(fake_supabase)


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def frames() -> ManualFrameScheduler:
    return ManualFrameScheduler()


@pytest.fixture
def view() -> RecordingView:
    return RecordingView()


@pytest.fixture
def web_channel() -> FakePushChannel:
    return FakePushChannel()


@pytest.fixture
def native_channel() -> FakePushChannel:
    return FakePushChannel()


@pytest.fixture
def channels(web_channel, native_channel) -> PushChannelRouter:
    return PushChannelRouter({
        PlatformKind.WEB: web_channel,
        PlatformKind.NATIVE: native_channel,
    })


@pytest.fixture
def gone_error() -> DeliveryTargetInvalid:
    return DeliveryTargetInvalid("Subscription expired or invalid (410)", status_code=410)


@pytest.fixture
def web_subscription() -> Dict[str, Any]:
    return {
        "endpoint": "https://push.example.com/send/abc",
        "keys": {"p256dh": "BNc...", "auth": "tBH..."},
    }
