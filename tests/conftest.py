from __future__ import annotations

import pytest

from usersession.core.current_user import reset_current_user
from usersession.core.events.bus import EventBus, reset_default_bus

from .helpers.fakes import EventLog, RecordingCacheDriver


@pytest.fixture(autouse=True)
def _isolate_process_state():
    reset_default_bus()
    reset_current_user()
    yield
    reset_default_bus()
    reset_current_user()


@pytest.fixture
def driver():
    return RecordingCacheDriver()


@pytest.fixture
def bus():
    return EventBus()


@pytest.fixture
def event_log():
    return EventLog()
