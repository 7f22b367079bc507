from datetime import datetime, timedelta, timezone
from typing import Callable

import pytest

from object_store.config import HashMode, ObjectStoreConfig
from object_store.impl.memory import MemoryObjectStore, create_memory_object_store

START = datetime(2024, 1, 2, 3, 4, tzinfo=timezone.utc)


class TickingClock:
    """Returns a new minute on every call so legacy hashes never collide."""

    def __init__(self, start: datetime = START, step: timedelta = timedelta(minutes=1)):
        self.now = start
        self.step = step

    def __call__(self) -> datetime:
        current = self.now
        self.now = self.now + self.step
        return current


@pytest.fixture
def clock() -> TickingClock:
    return TickingClock()


@pytest.fixture
def make_store(clock: TickingClock) -> Callable[..., MemoryObjectStore]:
    def factory(setup=None, hash_mode: HashMode = HashMode.LEGACY, **kwargs):
        return create_memory_object_store(
            setup, ObjectStoreConfig(clock=clock, hash_mode=hash_mode, **kwargs)
        )

    return factory


@pytest.fixture
def store(make_store) -> MemoryObjectStore:
    return make_store()
