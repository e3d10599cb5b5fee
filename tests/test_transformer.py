"""
Unit tests for HandleController.

Tests:
- Boundary checks and latching
- Drag steps written to the mark owner
- Drag steps without a latched handle
- Painting the handles
"""

import json
import logging

import pytest
from PySide6.QtCore import QPointF, QRectF, Qt
from PySide6.QtGui import QColor, QImage, QPainter

from markhandles.editor.handles import HandlePosition, MarkUpdate
from markhandles.editor.marks import RectangleMark
from markhandles.editor.transformer import HandleController, NoActiveHandleError
from markhandles.services.config_service import ConfigService


def rect_tuple(rect: QRectF):
    return (rect.x(), rect.y(), rect.width(), rect.height())


class TestBoundary:

    def test_check_boundary_on_handle(self, controller):
        assert controller.check_boundary(QPointF(100, 50))
        assert controller.check_boundary(QPointF(50, 0))

    def test_check_boundary_off_handle(self, controller):
        assert not controller.check_boundary(QPointF(50, 25))
        assert not controller.check_boundary(QPointF(300, 300))

    def test_check_boundary_does_not_latch(self, controller):
        controller.check_boundary(QPointF(0, 0))
        assert controller.active_handle is None

    def test_index_at_cursor(self, controller):
        assert controller.index_at_cursor(QPointF(0, 25)) is HandlePosition.MIDDLE_LEFT
        assert controller.index_at_cursor(QPointF(30, 30)) is None

    def test_custom_node_width(self, mark):
        controller = HandleController(mark, node_width=30)
        assert controller.check_boundary(QPointF(114, 64))
        assert not HandleController(mark).check_boundary(QPointF(114, 64))


class TestLatching:

    def test_start_transformation_latches_handle(self, controller):
        assert controller.start_transformation(QPointF(98, 52)) is HandlePosition.BOTTOM_RIGHT
        assert controller.active_handle is HandlePosition.BOTTOM_RIGHT
        assert controller.is_transforming

    def test_miss_is_observable(self, controller):
        assert controller.start_transformation(QPointF(50, 25)) is None
        assert not controller.is_transforming

    def test_miss_clears_previous_latch(self, controller):
        controller.start_transformation(QPointF(0, 0))
        controller.start_transformation(QPointF(50, 25))
        assert controller.active_handle is None

    def test_latch_persists_until_ended(self, controller, mark):
        controller.start_transformation(QPointF(100, 50))
        controller.on_transformation(QPointF(120, 80))
        controller.on_transformation(QPointF(130, 90))
        assert controller.active_handle is HandlePosition.BOTTOM_RIGHT

        controller.end_transformation()
        assert controller.active_handle is None

    def test_require_active_handle(self, controller):
        with pytest.raises(NoActiveHandleError):
            controller.require_active_handle()

        controller.start_transformation(QPointF(50, 50))
        assert controller.require_active_handle() is HandlePosition.BOTTOM_CENTER


class TestTransformation:

    def test_bottom_right_drag(self, controller, mark):
        controller.start_transformation(QPointF(100, 50))
        update = controller.on_transformation(QPointF(120, 80))

        assert update == MarkUpdate(width=120, height=80)
        assert rect_tuple(mark.get_mark_rect()) == (0, 0, 120, 80)

    def test_top_left_drag(self, controller, mark):
        controller.start_transformation(QPointF(0, 0))
        controller.on_transformation(QPointF(10, 10))

        assert rect_tuple(mark.get_mark_rect()) == (10, 10, 90, 40)

    def test_consecutive_steps(self, controller, mark):
        controller.start_transformation(QPointF(100, 50))

        controller.on_transformation(QPointF(10, 10))
        assert rect_tuple(mark.get_mark_rect()) == (0, 0, 10, 10)

        controller.on_transformation(QPointF(10, 10))
        assert rect_tuple(mark.get_mark_rect()) == (0, 0, 10, 10)

    def test_table_follows_mark_after_step(self, controller, mark):
        controller.start_transformation(QPointF(100, 50))
        controller.on_transformation(QPointF(10, 10))

        table = controller.handle_table()
        assert table[HandlePosition.BOTTOM_RIGHT.index].center == QPointF(10, 10)
        assert controller.index_at_cursor(QPointF(100, 50)) is None

    def test_each_step_reads_current_mark(self, controller, mark):
        controller.start_transformation(QPointF(100, 50))
        # The owner moves the mark between two drag steps
        mark.move_by(5, 5)
        controller.on_transformation(QPointF(50, 50))

        assert rect_tuple(mark.get_mark_rect()) == (5, 5, 45, 45)

    def test_edge_handle_leaves_other_axis(self, controller, mark):
        controller.start_transformation(QPointF(50, 0))
        update = controller.on_transformation(QPointF(999, -20))

        assert update.changed_fields() == ("y", "height")
        assert rect_tuple(mark.get_mark_rect()) == (0, -20, 100, 70)

    def test_drag_past_edge_is_not_normalized(self, controller, mark):
        controller.start_transformation(QPointF(100, 25))
        controller.on_transformation(QPointF(-40, 25))

        assert rect_tuple(mark.get_mark_rect()) == (0, 0, -40, 50)

    def test_without_latch_is_ignored(self, controller, mark, caplog):
        with caplog.at_level(logging.WARNING):
            assert controller.on_transformation(QPointF(10, 10)) is None

        assert rect_tuple(mark.get_mark_rect()) == (0, 0, 100, 50)
        assert "Ignoring drag step" in caplog.text

    def test_after_miss_is_ignored(self, controller, mark):
        controller.start_transformation(QPointF(50, 25))
        assert controller.on_transformation(QPointF(10, 10)) is None
        assert rect_tuple(mark.get_mark_rect()) == (0, 0, 100, 50)

    def test_after_end_is_ignored(self, controller, mark):
        controller.start_transformation(QPointF(0, 0))
        controller.end_transformation()
        assert controller.on_transformation(QPointF(10, 10)) is None


class TestPaint:

    def test_eight_handles_filled(self, controller, painter):
        controller.paint(painter, lambda box: box)

        assert painter.call_names().count("drawRect") == 8
        assert all(r.width() == 10 and r.height() == 10 for r in painter.rects)

    def test_boxes_centered_on_handles(self, controller, painter):
        controller.paint(painter, lambda box: box)

        centers = [(r.center().x(), r.center().y()) for r in painter.rects]
        assert centers == [
            (0, 0), (50, 0), (100, 0),
            (0, 25), (100, 25),
            (0, 50), (50, 50), (100, 50),
        ]

    def test_boxes_pass_through_draw_space(self, controller, painter):
        def zoom_and_pan(box: QRectF) -> QRectF:
            return QRectF(box.x() * 2 + 7, box.y() * 2 + 3, box.width() * 2, box.height() * 2)

        controller.paint(painter, zoom_and_pan)

        assert all(r.width() == 20 and r.height() == 20 for r in painter.rects)
        assert painter.rects[0] == QRectF(-3, -7, 20, 20)

    def test_painter_state_restored(self, controller, painter):
        controller.paint(painter, lambda box: box)

        names = painter.call_names()
        assert names[0] == "save"
        assert names[-1] == "restore"
        assert names.count("save") == names.count("restore") == 1

    def test_fill_color(self, controller, painter):
        controller.paint(painter, lambda box: box)

        brushes = [call[1] for call in painter.calls if call[0] == "setBrush"]
        pens = [call[1] for call in painter.calls if call[0] == "setPen"]
        assert brushes == [QColor("#5c7cfa")]
        assert pens == [Qt.PenStyle.NoPen]

    def test_paint_on_image(self, qapp):
        controller = HandleController(RectangleMark(QRectF(20, 20, 100, 50)), node_color="#ff0000")
        image = QImage(200, 200, QImage.Format.Format_ARGB32)
        image.fill(QColor(255, 255, 255))

        painter = QPainter(image)
        painter.setBrush(QColor(0, 255, 0))
        controller.paint(painter, lambda box: box)
        assert painter.brush().color() == QColor(0, 255, 0)
        painter.end()

        assert image.pixelColor(120, 70) == QColor(255, 0, 0)
        assert image.pixelColor(20, 20) == QColor(255, 0, 0)
        assert image.pixelColor(70, 45) == QColor(255, 255, 255)


class TestConfiguration:

    def test_defaults(self, controller):
        assert controller.node_width == 10
        assert controller.node_color == QColor("#5c7cfa")

    def test_node_color_is_a_copy(self, controller):
        controller.node_color.setRed(0)
        assert controller.node_color == QColor("#5c7cfa")

    def test_from_config(self, mark, config_path):
        config_path.parent.mkdir(parents=True)
        config_path.write_text(
            json.dumps({"handles": {"node_width": 16, "node_color": "#102030"}}), encoding="utf-8"
        )
        config = ConfigService(config_path)

        controller = HandleController.from_config(mark, config)
        assert controller.node_width == 16
        assert controller.node_color == QColor("#102030")
