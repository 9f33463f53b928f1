import os

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import numpy as np
import pytest

from body_overlay.models import BodyFrame, SkeletonSnapshot
from body_overlay.session import ReplaySession, SessionDelegate
from body_overlay.timers import ManualTimer


class EventLog(SessionDelegate):
    """세션 이벤트를 순서대로 기록"""

    def __init__(self):
        self.events = []

    def on_frame(self, frame):
        self.events.append(("frame", frame))

    def on_anchors_updated(self, anchors):
        self.events.append(("updated", [a.identifier for a in anchors]))

    def on_anchors_removed(self, anchors):
        self.events.append(("removed", [a.identifier for a in anchors]))

    def kinds(self):
        return [kind for kind, _ in self.events]


@pytest.fixture
def event_log():
    return EventLog()


@pytest.fixture
def make_frame():
    """{name: (x, y, tracked)} -> BodyFrame"""
    def _make(joints, image_size=(640, 480), timestamp=0.0):
        names = tuple(joints)
        landmarks = np.array([joints[n][:2] for n in names], dtype=float).reshape(-1, 2)
        tracked = np.array([joints[n][2] for n in names], dtype=bool)
        return BodyFrame(timestamp, image_size, SkeletonSnapshot(names, landmarks, tracked))
    return _make


@pytest.fixture
def session():
    return ReplaySession([])


@pytest.fixture
def manual_timer():
    return ManualTimer()
