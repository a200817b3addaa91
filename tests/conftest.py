"""Shared fixtures: a Qt core application, an in-memory repository, a fake clock."""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from PySide6.QtCore import QCoreApplication

from drawing_trainer.data.database import connect_memory
from drawing_trainer.data.repository import Repository


@pytest.fixture(scope="session", autouse=True)
def qapp():
    """QTimer needs an application object even when no event loop runs."""
    app = QCoreApplication.instance() or QCoreApplication([])
    yield app


@pytest.fixture
def repo():
    conn = connect_memory()
    yield Repository(conn)
    conn.close()


class FakeClock:
    """Monotonic clock the tests advance by hand."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()
