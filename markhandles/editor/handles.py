"""
Handle geometry for rectangular marks.

This module derives the eight resize handles of a mark rectangle and maps
pointer positions onto them. Everything here is pure: functions take the mark
as it currently stands and return new values, nothing is cached between calls.

Handle order (the order defines the handle index):
    TL(0), TC(1), TR(2), ML(3), MR(4), BL(5), BC(6), BR(7)

Widths and heights are never normalized here. Dragging a handle past the
opposite side produces a negative extent, which is left to the mark owner.
"""

from dataclasses import dataclass, fields
from enum import Enum
from typing import List, Optional, Tuple

from PySide6.QtCore import QPointF, QRectF


class HandlePosition(Enum):
    """Enum for the eight resize handles; the value is the handle index."""
    TOP_LEFT = 0
    TOP_CENTER = 1
    TOP_RIGHT = 2
    MIDDLE_LEFT = 3
    MIDDLE_RIGHT = 4
    BOTTOM_LEFT = 5
    BOTTOM_CENTER = 6
    BOTTOM_RIGHT = 7

    @property
    def index(self) -> int:
        return self.value

    @classmethod
    def from_index(cls, index: int) -> "HandlePosition":
        """
        Look up a handle by its index.

        Raises:
            ValueError: If the index is not in 0-7.
        """
        try:
            return cls(index)
        except ValueError:
            raise ValueError(f"Handle index out of range: {index!r}") from None


@dataclass(frozen=True)
class MarkUpdate:
    """
    Partial update of a mark rectangle.

    A field set to None is left untouched when the update is applied.
    A field set to a number is written, even if it equals the current value.
    """
    x: Optional[float] = None
    y: Optional[float] = None
    width: Optional[float] = None
    height: Optional[float] = None

    def changed_fields(self) -> Tuple[str, ...]:
        """Names of the fields this update writes, in x, y, width, height order."""
        return tuple(f.name for f in fields(self) if getattr(self, f.name) is not None)

    @property
    def is_empty(self) -> bool:
        return not self.changed_fields()

    def apply_to(self, rect: QRectF) -> QRectF:
        """
        Return a new rectangle with the written fields replaced.

        The result is built from raw x/y/width/height so that negative
        extents survive unchanged.
        """
        return QRectF(
            rect.x() if self.x is None else self.x,
            rect.y() if self.y is None else self.y,
            rect.width() if self.width is None else self.width,
            rect.height() if self.height is None else self.height,
        )


def handle_center(position: HandlePosition, mark: QRectF) -> QPointF:
    """
    Get the center of one handle on the mark border.

    Args:
        position: The handle.
        mark: The mark rectangle in logical coordinates.

    Returns:
        The handle center in logical coordinates.
    """
    x, y, w, h = mark.x(), mark.y(), mark.width(), mark.height()

    centers = {
        HandlePosition.TOP_LEFT: (x, y),
        HandlePosition.TOP_CENTER: (x + w / 2, y),
        HandlePosition.TOP_RIGHT: (x + w, y),
        HandlePosition.MIDDLE_LEFT: (x, y + h / 2),
        HandlePosition.MIDDLE_RIGHT: (x + w, y + h / 2),
        HandlePosition.BOTTOM_LEFT: (x, y + h),
        HandlePosition.BOTTOM_CENTER: (x + w / 2, y + h),
        HandlePosition.BOTTOM_RIGHT: (x + w, y + h),
    }
    cx, cy = centers[position]
    return QPointF(cx, cy)


def adjust_mark(position: HandlePosition, mark: QRectF, pos: QPointF) -> MarkUpdate:
    """
    Compute the update produced by dragging a handle to a new position.

    The handle (or edge) opposite the dragged one stays fixed; only the
    fields that handle is allowed to change are set on the result.

    Args:
        position: The handle being dragged.
        mark: The mark rectangle before this drag step.
        pos: The pointer position in logical coordinates.

    Returns:
        The partial update for the mark.
    """
    x, y, w, h = mark.x(), mark.y(), mark.width(), mark.height()
    px, py = pos.x(), pos.y()

    if position == HandlePosition.TOP_LEFT:
        return MarkUpdate(x=px, y=py, width=w + x - px, height=h + y - py)
    elif position == HandlePosition.TOP_CENTER:
        return MarkUpdate(y=py, height=h + y - py)
    elif position == HandlePosition.TOP_RIGHT:
        return MarkUpdate(y=py, width=px - x, height=y + h - py)
    elif position == HandlePosition.MIDDLE_LEFT:
        return MarkUpdate(x=px, width=w + x - px)
    elif position == HandlePosition.MIDDLE_RIGHT:
        return MarkUpdate(width=px - x)
    elif position == HandlePosition.BOTTOM_LEFT:
        return MarkUpdate(x=px, width=w + x - px, height=py - y)
    elif position == HandlePosition.BOTTOM_CENTER:
        return MarkUpdate(height=py - y)
    else:  # BOTTOM_RIGHT
        return MarkUpdate(width=px - x, height=py - y)


def anchor_point(position: HandlePosition, mark: QRectF) -> QPointF:
    """Get the point that stays fixed while the given handle is dragged."""
    opposite = {
        HandlePosition.TOP_LEFT: HandlePosition.BOTTOM_RIGHT,
        HandlePosition.TOP_CENTER: HandlePosition.BOTTOM_CENTER,
        HandlePosition.TOP_RIGHT: HandlePosition.BOTTOM_LEFT,
        HandlePosition.MIDDLE_LEFT: HandlePosition.MIDDLE_RIGHT,
        HandlePosition.MIDDLE_RIGHT: HandlePosition.MIDDLE_LEFT,
        HandlePosition.BOTTOM_LEFT: HandlePosition.TOP_RIGHT,
        HandlePosition.BOTTOM_CENTER: HandlePosition.TOP_CENTER,
        HandlePosition.BOTTOM_RIGHT: HandlePosition.TOP_LEFT,
    }
    return handle_center(opposite[position], mark)


@dataclass(frozen=True)
class HandleDescriptor:
    """One handle of a mark: where it is and how dragging it changes the mark."""
    position: HandlePosition
    center: QPointF
    mark: QRectF

    @property
    def index(self) -> int:
        return self.position.index

    def adjust(self, pos: QPointF) -> MarkUpdate:
        """Update for dragging this handle to ``pos``, relative to the table's mark."""
        return adjust_mark(self.position, self.mark, pos)


def build_handle_table(mark: QRectF) -> List[HandleDescriptor]:
    """
    Derive the eight handles of a mark.

    Returns:
        Descriptors in handle index order: TL, TC, TR, ML, MR, BL, BC, BR.
    """
    snapshot = QRectF(mark)
    return [
        HandleDescriptor(position, handle_center(position, snapshot), snapshot)
        for position in HandlePosition
    ]


def handle_hit_box(center: QPointF, node_width: float) -> QRectF:
    """Square of side ``node_width`` centered on a handle."""
    half = node_width / 2
    return QRectF(center.x() - half, center.y() - half, node_width, node_width)


def point_in_handle(center: QPointF, pos: QPointF, node_width: float) -> bool:
    """
    Test whether a point lies in a handle's hit-box.

    The box edges are included.
    """
    half = node_width / 2
    return abs(pos.x() - center.x()) <= half and abs(pos.y() - center.y()) <= half


def handle_at(mark: QRectF, pos: QPointF, node_width: float) -> Optional[HandlePosition]:
    """
    Find the handle under a point.

    Handles are scanned in index order, so where hit-boxes overlap (marks
    smaller than a handle) the lowest index wins.

    Returns:
        The handle hit, or None if the point is outside every handle.
    """
    for descriptor in build_handle_table(mark):
        if point_in_handle(descriptor.center, pos, node_width):
            return descriptor.position
    return None
