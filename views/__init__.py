"""Views package."""

from .diagram_canvas import (
    DiagramCanvas,
    DiagramScene,
    BoxGraphicsItem,
    ConnectorGraphics,
)
from .main_window import MainWindow

__all__ = [
    "DiagramCanvas",
    "DiagramScene",
    "BoxGraphicsItem",
    "ConnectorGraphics",
    "MainWindow",
]
