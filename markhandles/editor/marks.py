"""
Mark models for markhandles.

A mark is the rectangle that defines an annotation's geometry. The handle
controller reads it through get_mark_rect() and writes partial updates back
through apply_mark_update(); the owner decides everything else (painting,
moving, normalizing).
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Callable, Optional

from PySide6.QtCore import QPointF, QRectF, Qt
from PySide6.QtGui import QColor, QPainter, QPen

from markhandles.editor.handles import MarkUpdate


@dataclass
class MarkStyle:
    """Style properties for a mark outline."""
    stroke_color: QColor = field(default_factory=lambda: QColor(255, 80, 80))
    stroke_width: int = 2
    fill_color: Optional[QColor] = None
    opacity: float = 1.0  # 0.0 to 1.0


class MarkOwner(ABC):
    """
    Base class for objects that own a mark rectangle.
    """

    @abstractmethod
    def get_mark_rect(self) -> QRectF:
        """Return the current mark in logical coordinates."""
        pass

    @abstractmethod
    def apply_mark_update(self, update: MarkUpdate) -> None:
        """
        Merge a partial update into the mark.

        Args:
            update: Fields to write; fields left as None are untouched.
        """
        pass


class RectangleMark(MarkOwner):
    """
    Rectangle annotation owning its mark.

    The mark may hold negative extents while a handle is dragged past the
    opposite side; normalize() is called once the drag is over.
    """

    def __init__(
        self,
        rect: QRectF,
        style: Optional[MarkStyle] = None
    ) -> None:
        self._rect = QRectF(rect)
        self.style: MarkStyle = style or MarkStyle()

    def get_mark_rect(self) -> QRectF:
        return QRectF(self._rect)

    def apply_mark_update(self, update: MarkUpdate) -> None:
        self._rect = update.apply_to(self._rect)

    def normalize(self) -> None:
        """Flip negative width/height so the mark has non-negative extents."""
        self._rect = self._rect.normalized()

    def hit_test(self, point: QPointF) -> bool:
        # Anywhere inside, with some tolerance around the border
        tolerance = max(self.style.stroke_width, 5)
        outer = self._rect.normalized().adjusted(-tolerance, -tolerance, tolerance, tolerance)
        return outer.contains(point)

    def move_by(self, dx: float, dy: float) -> None:
        self._rect.translate(dx, dy)

    def paint(
        self,
        painter: QPainter,
        to_draw_space: Callable[[QRectF], QRectF]
    ) -> None:
        """
        Paint the mark outline.

        Args:
            painter: The QPainter to use (untransformed widget coordinates).
            to_draw_space: Maps the logical mark to the box to paint.
        """
        painter.save()
        pen = QPen(self.style.stroke_color)
        pen.setWidth(self.style.stroke_width)
        pen.setJoinStyle(Qt.PenJoinStyle.MiterJoin)
        painter.setPen(pen)
        painter.setOpacity(self.style.opacity)

        if self.style.fill_color:
            painter.setBrush(self.style.fill_color)
        else:
            painter.setBrush(Qt.BrushStyle.NoBrush)

        painter.drawRect(to_draw_space(self._rect.normalized()))
        painter.restore()
