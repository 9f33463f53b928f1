from body_overlay.models import Marker2D
from body_overlay.overlay import OverlayStore


class RecordingSurface:
    def __init__(self):
        self.attached = []
        self.detached = []

    def attach_marker(self, marker):
        self.attached.append(marker)

    def detach_marker(self, marker):
        self.detached.append(marker)


def test_add_attaches_and_records():
    surface = RecordingSurface()
    store = OverlayStore(surface)
    a = Marker2D((1.0, 2.0))
    b = Marker2D((3.0, 4.0))

    store.add(a)
    store.add(b)

    assert len(store) == 2
    assert store.shapes == (a, b)
    assert surface.attached == [a, b]


def test_clear_detaches_everything():
    surface = RecordingSurface()
    store = OverlayStore(surface)
    markers = [Marker2D((float(i), 0.0)) for i in range(3)]
    for m in markers:
        store.add(m)

    store.clear()

    assert len(store) == 0
    assert surface.detached == markers


def test_clear_on_empty_store():
    store = OverlayStore()
    store.clear()
    assert len(store) == 0


def test_headless_store():
    store = OverlayStore()
    store.add(Marker2D((0.0, 0.0)))
    assert len(store) == 1
    store.clear()
    assert store.shapes == ()
