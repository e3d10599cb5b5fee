"""
Handle controller for resizing a mark.

The HandleController sits between pointer events and a mark owner:
- check_boundary: is the pointer over one of the eight handles?
- start_transformation: latch the handle under the pointer
- on_transformation: resize the mark by dragging the latched handle
- end_transformation: release the latch
- paint: draw the handles

The handle table is rebuilt from the owner's current mark on every call, so
each drag step is computed from the mark as it stands before that step.
"""

from typing import TYPE_CHECKING, Callable, List, Optional, Union

from PySide6.QtCore import QPointF, QRectF, Qt
from PySide6.QtGui import QColor, QPainter

from markhandles.editor.handles import (
    HandleDescriptor,
    HandlePosition,
    MarkUpdate,
    build_handle_table,
    handle_at,
    handle_hit_box,
)
from markhandles.services.config_service import DEFAULT_NODE_COLOR, DEFAULT_NODE_WIDTH
from markhandles.services.logging_service import get_logger

if TYPE_CHECKING:
    from markhandles.editor.marks import MarkOwner
    from markhandles.services.config_service import ConfigService


# Maps a logical box to the box actually painted (zoom/pan)
DrawSpaceTransform = Callable[[QRectF], QRectF]


class NoActiveHandleError(RuntimeError):
    """Raised when a drag step arrives while no handle is latched."""


class HandleController:
    """
    Resize controller for the mark of a single owner.

    The only state kept between calls is the latched handle.
    """

    def __init__(
        self,
        shape: "MarkOwner",
        node_width: float = DEFAULT_NODE_WIDTH,
        node_color: Union[str, QColor] = DEFAULT_NODE_COLOR,
    ) -> None:
        """
        Initialize the controller.

        Args:
            shape: Owner of the mark; read via get_mark_rect(), written via
                   apply_mark_update().
            node_width: Side length of a handle in logical units.
            node_color: Fill color of the handles.
        """
        self._logger = get_logger(__name__)
        self._shape = shape
        self._node_width = node_width
        self._node_color = QColor(node_color)
        self._active_handle: Optional[HandlePosition] = None

    @classmethod
    def from_config(cls, shape: "MarkOwner", config: "ConfigService") -> "HandleController":
        """Create a controller using the handle settings from the config service."""
        return cls(shape, node_width=config.node_width, node_color=config.node_color)

    @property
    def node_width(self) -> float:
        return self._node_width

    @property
    def node_color(self) -> QColor:
        return QColor(self._node_color)

    @property
    def active_handle(self) -> Optional[HandlePosition]:
        return self._active_handle

    @property
    def is_transforming(self) -> bool:
        return self._active_handle is not None

    def handle_table(self) -> List[HandleDescriptor]:
        """Build the handle table from the owner's current mark."""
        return build_handle_table(self._shape.get_mark_rect())

    def index_at_cursor(self, pos: QPointF) -> Optional[HandlePosition]:
        """
        Find the handle under the pointer.

        Returns:
            The first handle (in index order) whose hit-box contains pos,
            or None.
        """
        return handle_at(self._shape.get_mark_rect(), pos, self._node_width)

    def check_boundary(self, pos: QPointF) -> bool:
        """Test if the pointer is over any handle."""
        return self.index_at_cursor(pos) is not None

    def start_transformation(self, pos: QPointF) -> Optional[HandlePosition]:
        """
        Latch the handle under the pointer.

        A miss latches nothing, clearing any previous latch.

        Returns:
            The latched handle, or None if the pointer is not over a handle.
        """
        self._active_handle = self.index_at_cursor(pos)
        if self._active_handle is None:
            self._logger.debug(f"No handle at ({pos.x():.1f}, {pos.y():.1f})")
        else:
            self._logger.debug(f"Latched handle {self._active_handle.name}")
        return self._active_handle

    def require_active_handle(self) -> HandlePosition:
        """
        Get the latched handle.

        Raises:
            NoActiveHandleError: If no handle is latched.
        """
        if self._active_handle is None:
            raise NoActiveHandleError("No handle latched; call start_transformation first")
        return self._active_handle

    def on_transformation(self, pos: QPointF) -> Optional[MarkUpdate]:
        """
        Drag the latched handle to a new pointer position.

        The update is written to the owner and returned. Without a latched
        handle the call is ignored and None is returned.
        """
        try:
            position = self.require_active_handle()
        except NoActiveHandleError as e:
            self._logger.warning(f"Ignoring drag step: {e}")
            return None

        descriptor = self.handle_table()[position.index]
        update = descriptor.adjust(pos)
        self._shape.apply_mark_update(update)
        return update

    def end_transformation(self) -> None:
        """Release the latched handle."""
        if self._active_handle is not None:
            self._logger.debug(f"Released handle {self._active_handle.name}")
        self._active_handle = None

    def paint(self, painter: QPainter, to_draw_space: DrawSpaceTransform) -> None:
        """
        Paint the handles.

        Args:
            painter: The painter to draw with. Its state is restored afterwards.
            to_draw_space: Maps a logical box to the box to paint.
        """
        painter.save()
        painter.setPen(Qt.PenStyle.NoPen)
        painter.setBrush(self._node_color)

        for descriptor in self.handle_table():
            box = to_draw_space(handle_hit_box(descriptor.center, self._node_width))
            painter.drawRect(box)

        painter.restore()
