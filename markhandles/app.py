"""
markhandles - interactive demo of the mark resize handles.

This is the main entry point for the application.
Run with: python -m markhandles.app
"""

import sys

from PySide6.QtCore import QRectF
from PySide6.QtWidgets import QApplication

from markhandles.editor.mark_canvas import MarkCanvas
from markhandles.editor.marks import RectangleMark
from markhandles.services.config_service import ConfigService
from markhandles.services.logging_service import get_logger, set_log_level, setup_logging


def main() -> int:
    """
    Main entry point for the markhandles demo.

    Returns:
        Exit code (0 for success, non-zero for error).
    """
    # Initialize basic logging first to catch early errors
    setup_logging()
    logger = get_logger(__name__)

    try:
        logger.info("Starting markhandles...")

        config = ConfigService()
        set_log_level(config.log_level)

        app = QApplication(sys.argv)
        app.setApplicationName("markhandles")
        app.setApplicationVersion("0.1.0")

        canvas = MarkCanvas(RectangleMark(QRectF(80, 60, 240, 160)), config)
        canvas.setWindowTitle("markhandles")
        canvas.resize(640, 480)
        canvas.show()

        logger.info("Initialization complete. Entering event loop...")

        exit_code = app.exec()

        logger.info(f"markhandles exiting with code {exit_code}")
        return exit_code

    except Exception as e:
        logger.critical(f"Fatal error during startup: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
