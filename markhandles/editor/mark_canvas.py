"""
Mark canvas widget for markhandles.

The MarkCanvas displays one rectangle mark with its resize handles and wires
pointer events to the HandleController.

Supports:
- Resizing by dragging any of the eight handles
- Moving by dragging the mark body
- Resize and move cursors when hovering
- Zoom (Ctrl+wheel, keyboard shortcuts)
- Pan (Space+drag)
"""

from typing import Optional

from PySide6.QtCore import QPointF, QRectF, QSizeF, Qt, Signal
from PySide6.QtGui import QColor, QKeyEvent, QMouseEvent, QPainter, QWheelEvent
from PySide6.QtWidgets import QWidget

from markhandles.editor.handles import HandlePosition
from markhandles.editor.marks import RectangleMark
from markhandles.editor.transformer import HandleController
from markhandles.services.config_service import ConfigService
from markhandles.services.logging_service import get_logger


# Standard 8-handle resize cursors
RESIZE_CURSORS = {
    HandlePosition.TOP_LEFT: Qt.CursorShape.SizeFDiagCursor,
    HandlePosition.TOP_CENTER: Qt.CursorShape.SizeVerCursor,
    HandlePosition.TOP_RIGHT: Qt.CursorShape.SizeBDiagCursor,
    HandlePosition.MIDDLE_LEFT: Qt.CursorShape.SizeHorCursor,
    HandlePosition.MIDDLE_RIGHT: Qt.CursorShape.SizeHorCursor,
    HandlePosition.BOTTOM_LEFT: Qt.CursorShape.SizeBDiagCursor,
    HandlePosition.BOTTOM_CENTER: Qt.CursorShape.SizeVerCursor,
    HandlePosition.BOTTOM_RIGHT: Qt.CursorShape.SizeFDiagCursor,
}


def cursor_for_handle(position: Optional[HandlePosition]) -> Qt.CursorShape:
    """Get the resize cursor for a handle, or the arrow cursor for None."""
    if position is None:
        return Qt.CursorShape.ArrowCursor
    return RESIZE_CURSORS[position]


class MarkCanvas(QWidget):
    """
    Canvas widget for displaying and resizing a single mark.

    Signals:
        mark_changed: Emitted with the new mark after each resize or move
                      step, and after a drag that changed the mark ends.
        zoom_changed: Emitted when zoom level changes.
    """

    mark_changed = Signal(QRectF)
    zoom_changed = Signal(float)

    # Zoom limits
    MIN_ZOOM = 0.1
    MAX_ZOOM = 5.0

    def __init__(
        self,
        mark: RectangleMark,
        config: Optional[ConfigService] = None,
        parent: Optional[QWidget] = None
    ) -> None:
        super().__init__(parent)
        self._logger = get_logger(__name__)

        self._mark = mark
        if config is not None:
            self._controller = HandleController.from_config(mark, config)
            self._min_zoom, self._max_zoom = config.zoom_limits
        else:
            self._controller = HandleController(mark)
            self._min_zoom = self.MIN_ZOOM
            self._max_zoom = self.MAX_ZOOM

        # View transform
        self._zoom: float = 1.0
        self._pan_offset: QPointF = QPointF(0, 0)

        # Interaction state
        self._panning: bool = False
        self._pan_start: Optional[QPointF] = None
        self._space_pressed: bool = False
        self._moving: bool = False
        self._drag_start: Optional[QPointF] = None
        self._press_rect: Optional[QRectF] = None

        self._setup_widget()

    def _setup_widget(self) -> None:
        """Configure widget properties."""
        self.setMouseTracking(True)
        self.setFocusPolicy(Qt.FocusPolicy.StrongFocus)
        self.setMinimumSize(200, 200)

    @property
    def mark(self) -> RectangleMark:
        return self._mark

    @property
    def controller(self) -> HandleController:
        return self._controller

    # ─── Zoom ─────────────────────────────────────────────────────────────

    @property
    def zoom(self) -> float:
        return self._zoom

    @property
    def pan_offset(self) -> QPointF:
        return QPointF(self._pan_offset)

    def set_zoom(self, zoom: float, anchor: Optional[QPointF] = None) -> None:
        """
        Set the zoom level, keeping ``anchor`` (widget coordinates) in place.

        Args:
            zoom: The new zoom factor; clamped to the configured limits.
            anchor: Widget point that should stay over the same image point.
        """
        new_zoom = max(self._min_zoom, min(self._max_zoom, zoom))
        if new_zoom == self._zoom:
            return

        if anchor is not None:
            img_anchor = self.widget_to_image(anchor)
            self._zoom = new_zoom
            self._pan_offset = QPointF(
                anchor.x() - img_anchor.x() * self._zoom,
                anchor.y() - img_anchor.y() * self._zoom
            )
        else:
            self._zoom = new_zoom

        self.zoom_changed.emit(self._zoom)
        self.update()

    def zoom_in(self) -> None:
        """Zoom in by 25% from center."""
        center = QPointF(self.width() / 2, self.height() / 2)
        self.set_zoom(self._zoom * 1.25, center)

    def zoom_out(self) -> None:
        """Zoom out by 25% from center."""
        center = QPointF(self.width() / 2, self.height() / 2)
        self.set_zoom(self._zoom / 1.25, center)

    def zoom_to_100(self) -> None:
        """Reset zoom to 100% and clear the pan offset."""
        self._zoom = 1.0
        self._pan_offset = QPointF(0, 0)
        self.zoom_changed.emit(self._zoom)
        self.update()

    # ─── Coordinate Conversion ────────────────────────────────────────────

    def widget_to_image(self, pos: QPointF) -> QPointF:
        """Convert widget coordinates to image coordinates."""
        return QPointF(
            (pos.x() - self._pan_offset.x()) / self._zoom,
            (pos.y() - self._pan_offset.y()) / self._zoom
        )

    def image_to_widget(self, pos: QPointF) -> QPointF:
        """Convert image coordinates to widget coordinates."""
        return QPointF(
            pos.x() * self._zoom + self._pan_offset.x(),
            pos.y() * self._zoom + self._pan_offset.y()
        )

    def image_box_to_widget(self, box: QRectF) -> QRectF:
        """Convert a logical box to the box painted on the widget."""
        return QRectF(
            self.image_to_widget(box.topLeft()),
            QSizeF(box.width() * self._zoom, box.height() * self._zoom)
        )

    # ─── Event Handlers ───────────────────────────────────────────────────

    def paintEvent(self, event) -> None:
        """Paint the canvas."""
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)

        painter.fillRect(self.rect(), QColor(26, 26, 26))

        self._mark.paint(painter, self.image_box_to_widget)
        self._controller.paint(painter, self.image_box_to_widget)

        painter.end()

    def mousePressEvent(self, event: QMouseEvent) -> None:
        """Handle mouse press."""
        if event.button() != Qt.MouseButton.LeftButton:
            return

        if self._space_pressed:
            self._panning = True
            self._pan_start = event.position()
            self.setCursor(Qt.CursorShape.ClosedHandCursor)
            return

        img_pos = self.widget_to_image(event.position())
        self._press_rect = self._mark.get_mark_rect()

        if self._controller.start_transformation(img_pos) is not None:
            return

        if self._mark.hit_test(img_pos):
            self._moving = True
            self._drag_start = img_pos

    def mouseMoveEvent(self, event: QMouseEvent) -> None:
        """Handle mouse move."""
        if self._panning and self._pan_start is not None:
            delta = event.position() - self._pan_start
            self._pan_offset += QPointF(delta.x(), delta.y())
            self._pan_start = event.position()
            self.update()
            return

        img_pos = self.widget_to_image(event.position())

        if self._controller.is_transforming:
            self._controller.on_transformation(img_pos)
            self.mark_changed.emit(self._mark.get_mark_rect())
            self.update()
            return

        if self._moving and self._drag_start is not None:
            delta = img_pos - self._drag_start
            self._mark.move_by(delta.x(), delta.y())
            self._drag_start = img_pos
            self.mark_changed.emit(self._mark.get_mark_rect())
            self.update()
            return

        if not self._space_pressed:
            self._update_cursor_for_position(img_pos)

    def _update_cursor_for_position(self, img_pos: QPointF) -> None:
        """Update cursor based on what's under the mouse position."""
        handle = self._controller.index_at_cursor(img_pos)
        if handle is None and self._mark.hit_test(img_pos):
            self.setCursor(Qt.CursorShape.SizeAllCursor)
        else:
            self.setCursor(cursor_for_handle(handle))

    def mouseReleaseEvent(self, event: QMouseEvent) -> None:
        """Handle mouse release."""
        if event.button() != Qt.MouseButton.LeftButton:
            return

        if self._panning:
            self._panning = False
            self._pan_start = None
            self.setCursor(
                Qt.CursorShape.OpenHandCursor if self._space_pressed
                else Qt.CursorShape.ArrowCursor
            )
            return

        if self._controller.is_transforming or self._moving:
            self._controller.end_transformation()
            self._mark.normalize()
            rect = self._mark.get_mark_rect()

            if rect != self._press_rect:
                self._logger.info(
                    f"Mark changed to {rect.x():.1f},{rect.y():.1f} "
                    f"{rect.width():.1f}x{rect.height():.1f}"
                )
                self.mark_changed.emit(rect)
            self.update()

        self._moving = False
        self._drag_start = None
        self._press_rect = None

    def wheelEvent(self, event: QWheelEvent) -> None:
        """Handle mouse wheel for zooming."""
        if event.modifiers() & Qt.KeyboardModifier.ControlModifier:
            delta = event.angleDelta().y()
            factor = 1.1 if delta > 0 else 0.9
            self.set_zoom(self._zoom * factor, event.position())
            event.accept()
        else:
            event.ignore()

    def keyPressEvent(self, event: QKeyEvent) -> None:
        """Handle key press."""
        key = event.key()
        modifiers = event.modifiers()

        # Space for panning
        if key == Qt.Key.Key_Space and not event.isAutoRepeat():
            self._space_pressed = True
            self.setCursor(Qt.CursorShape.OpenHandCursor)
            return

        if modifiers & Qt.KeyboardModifier.ControlModifier:
            if key in (Qt.Key.Key_Plus, Qt.Key.Key_Equal):
                self.zoom_in()
                return
            elif key == Qt.Key.Key_Minus:
                self.zoom_out()
                return
            elif key == Qt.Key.Key_0:
                self.zoom_to_100()
                return

        super().keyPressEvent(event)

    def keyReleaseEvent(self, event: QKeyEvent) -> None:
        """Handle key release."""
        if event.key() == Qt.Key.Key_Space and not event.isAutoRepeat():
            self._space_pressed = False
            self.setCursor(Qt.CursorShape.ArrowCursor)
