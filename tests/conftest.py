from __future__ import annotations

import pytest

from stepwise import Driver, QueueScheduler


@pytest.fixture
def sched() -> QueueScheduler:
    return QueueScheduler()


@pytest.fixture
def driver(sched: QueueScheduler) -> Driver:
    return Driver(sched)
