import os

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")


@pytest.fixture(scope="session")
def qapp():
    QtWidgets = pytest.importorskip("PyQt5.QtWidgets")
    app = QtWidgets.QApplication.instance()
    if app is None:
        app = QtWidgets.QApplication(["backdrop-tests"])
    yield app


class FakeTarget:
    """Stand-in render target exposing the ``QWidget`` sizing API."""

    def __init__(self, width=800, height=600):
        self._width = width
        self._height = height
        self.updates = 0

    def width(self):
        return self._width

    def height(self):
        return self._height

    def update(self):
        self.updates += 1


class FakeScheduler:
    def __init__(self):
        self.callback = None
        self.active = False
        self.starts = 0

    def start(self, callback):
        self.callback = callback
        self.active = True
        self.starts += 1

    def stop(self):
        self.active = False

    def fire(self):
        if self.active and self.callback is not None:
            self.callback()


@pytest.fixture
def target():
    return FakeTarget()


@pytest.fixture
def scheduler():
    return FakeScheduler()


@pytest.fixture
def make_target():
    return FakeTarget
