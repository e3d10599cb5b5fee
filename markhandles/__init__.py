"""
markhandles - Resize handles for rectangular annotation marks.

This package contains the main application modules:
- editor: Handle geometry, the handle controller, marks and the canvas
- services: Application services (config, logging)
"""

__version__ = "0.1.0"
