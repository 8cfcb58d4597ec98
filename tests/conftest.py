from datetime import datetime, timedelta, timezone
from itertools import count

import pytest

from core.domain import AppSettings, WorkSession
from core.persistence import MemoryStorage
from core.store import AppStore


class FakeClock:
    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock():
    return FakeClock(datetime(2025, 3, 10, 9, 0, tzinfo=timezone.utc))


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def store(storage, clock):
    ids = count(1)
    return AppStore(storage, clock=clock, id_factory=lambda: f"id{next(ids)}")


@pytest.fixture
def settings():
    return AppSettings(
        currency="BRL",
        hourly_rate=50,
        multipliers={"normal": 1, "extra": 1.5, "night": 1.2, "holiday": 2},
        dark_mode=False,
    )


def _session(id, start, end=None, type="normal", rate=20, break_minutes=0, description="work"):
    return WorkSession(
        id=id,
        start_time=start,
        end_time=end,
        break_minutes=break_minutes,
        type=type,
        hourly_rate_snapshot=rate,
        description=description,
    )


@pytest.fixture
def make_session():
    return _session
