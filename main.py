#!/usr/bin/env python3
"""
BoxLink Package Diagram Editor - Main Entry Point

A visual editor for package diagrams whose dependency connectors stay
orthogonally routed while packages are moved around.

Usage:
    python main.py
    python main.py --debug    # Enable debug logging
"""

import sys
import logging
import argparse
from PyQt6.QtWidgets import QApplication

from views import MainWindow

__version__ = "0.1.0"


def setup_logging(debug: bool = False):
    """Configure logging for the application."""
    level = logging.DEBUG if debug else logging.INFO

    # Create formatter
    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    )

    # Console handler
    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)

    # Configure root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.addHandler(console_handler)

    # Log startup message
    logger = logging.getLogger(__name__)
    logger.info(f"Logging initialized at {'DEBUG' if debug else 'INFO'} level")


def create_application(argv) -> QApplication:
    """Create the Qt application with Qt-specific arguments passed through."""
    app = QApplication(argv)
    app.setApplicationName("BoxLink")
    app.setApplicationVersion(__version__)
    return app


def main(argv=None):
    """Parse flags, configure logging and run the editor."""
    parser = argparse.ArgumentParser(description='BoxLink package diagram editor')
    parser.add_argument('--debug', action='store_true', help='Enable debug logging')
    args, qt_args = parser.parse_known_args(argv)

    setup_logging(debug=args.debug)

    app = create_application([sys.argv[0]] + qt_args)
    window = MainWindow()
    window.show()
    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
