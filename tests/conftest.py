"""
Pytest configuration and shared fixtures for markhandles tests.
"""

import json
import os

# Qt widgets and painters need a platform plugin; run headless
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest
from PySide6.QtCore import QRectF

from markhandles.editor.marks import RectangleMark
from markhandles.editor.transformer import HandleController


class RecordingPainter:
    """Stand-in for QPainter that records the calls made on it."""

    def __init__(self) -> None:
        self.calls = []
        self.rects = []

    def save(self) -> None:
        self.calls.append(("save",))

    def restore(self) -> None:
        self.calls.append(("restore",))

    def setPen(self, pen) -> None:
        self.calls.append(("setPen", pen))

    def setBrush(self, brush) -> None:
        self.calls.append(("setBrush", brush))

    def setOpacity(self, opacity) -> None:
        self.calls.append(("setOpacity", opacity))

    def drawRect(self, rect) -> None:
        self.calls.append(("drawRect", rect))
        self.rects.append(QRectF(rect))

    def call_names(self):
        return [call[0] for call in self.calls]


# ============== Mark Fixtures ==============

@pytest.fixture
def mark() -> RectangleMark:
    """A 100x50 mark at the origin."""
    return RectangleMark(QRectF(0, 0, 100, 50))


@pytest.fixture
def controller(mark: RectangleMark) -> HandleController:
    """Controller with default handle settings over the origin mark."""
    return HandleController(mark)


@pytest.fixture
def painter() -> RecordingPainter:
    return RecordingPainter()


@pytest.fixture
def config_path(tmp_path):
    """Path for a config file inside a temporary directory."""
    return tmp_path / "markhandles" / "config.json"


@pytest.fixture
def write_config(config_path):
    """Write raw JSON (or a literal string) to the temporary config file."""
    def _write(data):
        config_path.parent.mkdir(parents=True, exist_ok=True)
        text = data if isinstance(data, str) else json.dumps(data)
        config_path.write_text(text, encoding="utf-8")
        return config_path
    return _write
