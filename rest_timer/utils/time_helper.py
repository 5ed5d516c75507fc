"""Epoch-millisecond time helpers"""
import time
from datetime import datetime, timezone


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds"""
    return int(time.time() * 1000)


def ms_to_datetime(epoch_ms: int) -> datetime:
    """Convert epoch milliseconds to an aware UTC datetime"""
    return datetime.fromtimestamp(epoch_ms / 1000, tz=timezone.utc)
