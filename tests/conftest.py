"""
Test Configuration
==================

Shared fixtures: a manual clock standing in for QTimer, a session with a
bound project, fake capture sources and a temporary project store.
"""

import os

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import numpy as np
import pytest

from stopmotion.models import Frame, Project
from stopmotion.session import Session
from stopmotion.store import JsonProjectStore


class FakeTimer:
    """Mimics QtTimer: set_interval on an active timer restarts it."""

    def __init__(self, clock, callback, single_shot):
        self.clock = clock
        self.callback = callback
        self.single_shot = single_shot
        self._interval = 0
        self.due = None

    def start(self, interval_ms):
        self._interval = int(interval_ms)
        self.due = self.clock.now + self._interval

    def stop(self):
        self.due = None

    def is_active(self):
        return self.due is not None

    def interval(self):
        return self._interval

    def set_interval(self, interval_ms):
        self._interval = int(interval_ms)
        if self.due is not None:
            self.due = self.clock.now + self._interval


class ManualClock:
    def __init__(self):
        self.now = 0
        self.timers = []

    def timer(self, callback, single_shot=False):
        t = FakeTimer(self, callback, single_shot)
        self.timers.append(t)
        return t

    def advance(self, ms):
        target = self.now + ms
        while True:
            pending = [t for t in self.timers if t.due is not None and t.due <= target]
            if not pending:
                break
            t = min(pending, key=lambda t: t.due)
            self.now = t.due
            if t.single_shot or t._interval <= 0:
                t.due = None
            else:
                t.due = self.now + t._interval
            t.callback()
        self.now = target


class FakeSource:
    def __init__(self, bitmap=None, resolution=(64, 48)):
        self.bitmap = bitmap
        self._resolution = resolution
        self.closed = 0
        self.device_index = None

    @property
    def is_open(self):
        return self.bitmap is not None

    def open(self, index, constraints=None):
        self.device_index = index

    def resolution(self):
        return self._resolution

    def current_bitmap(self):
        return self.bitmap

    def close(self):
        self.closed += 1


class FailingStore:
    """Project store whose writes fail until ``fail`` is cleared."""

    def __init__(self, projects=None):
        self.projects = projects or [Project(name="Seed")]
        self.fail = True
        self.writes = []

    def load_all(self):
        return self.projects

    def save_all(self, projects):
        from stopmotion.errors import PersistenceError

        if self.fail:
            raise PersistenceError("disk full")
        self.writes.append([p.to_dict() for p in projects])


def make_frame(tag, imported=False):
    return Frame(image=f"full-{tag}", thumbnail=f"thumb-{tag}", imported=imported)


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def session():
    s = Session()
    s.activate(Project(name="Test"))
    return s


@pytest.fixture
def filled_session(session):
    for tag in "abcd":
        session.store.append(make_frame(tag))
    return session


@pytest.fixture
def bitmap():
    rng = np.random.default_rng(7)
    return rng.integers(0, 256, size=(48, 64, 3), dtype=np.uint8)


@pytest.fixture
def fake_source(bitmap):
    return FakeSource(bitmap)


@pytest.fixture
def store_path(tmp_path):
    return tmp_path / "projects.json"


@pytest.fixture
def json_store(store_path):
    return JsonProjectStore(store_path)
