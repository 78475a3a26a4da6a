"""
Main application window.

Assembles the diagram canvas, toolbar and status bar.
"""

import logging

from PyQt6.QtGui import QAction, QKeySequence
from PyQt6.QtWidgets import (
    QMainWindow, QWidget, QToolBar, QPushButton, QLabel,
    QStatusBar, QMessageBox, QInputDialog, QSizePolicy
)

from services import DiagramSurface, get_settings
from views.diagram_canvas import DiagramCanvas

logger = logging.getLogger(__name__)


class DiagramToolbar(QToolBar):
    """Toolbar with diagram editing controls."""

    def __init__(self, parent=None):
        super().__init__("Diagram", parent)
        self.setMovable(False)
        self._setup_ui()

    def _setup_ui(self):
        self.setStyleSheet("""
            QToolBar {
                background: #F9FAFB;
                border-bottom: 1px solid #E5E7EB;
                padding: 8px 16px;
                spacing: 8px;
            }
            QPushButton {
                padding: 8px 16px;
                border-radius: 6px;
                font-weight: 500;
                font-size: 13px;
                background: white;
                color: #374151;
                border: 1px solid #D1D5DB;
            }
            QPushButton:hover {
                background: #F3F4F6;
            }
            QPushButton:checked {
                background: #DBEAFE;
                border: 1px solid #3B82F6;
            }
        """)

        self.add_box_btn = QPushButton("Add Package")
        self.addWidget(self.add_box_btn)

        self.link_mode_btn = QPushButton("Relationship Mode")
        self.link_mode_btn.setCheckable(True)
        self.addWidget(self.link_mode_btn)

        self.addSeparator()

        self.clear_btn = QPushButton("Clear Diagram")
        self.addWidget(self.clear_btn)

        spacer = QWidget()
        spacer.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Preferred)
        self.addWidget(spacer)

        self.status_label = QLabel("Ready")
        self.status_label.setStyleSheet("color: #6B7280; font-size: 12px;")
        self.addWidget(self.status_label)


class MainWindow(QMainWindow):
    """Main application window for the package diagram editor."""

    def __init__(self):
        super().__init__()

        # Settings manager (JSON file based)
        self.settings_manager = get_settings()
        settings = self.settings_manager.settings

        self.surface = DiagramSurface(
            style=self.settings_manager.connector_style(),
            default_label=settings.routing.default_label,
        )
        self._box_counter = 0

        self._setup_window()
        self._setup_menu()
        self._setup_toolbar()
        self._setup_central_widget()
        self._setup_status_bar()
        self._connect_signals()

        self._load_window_settings()

    def _load_window_settings(self):
        """Restore window geometry and state."""
        geometry, state = self.settings_manager.get_window_geometry()
        if geometry:
            self.restoreGeometry(geometry)
        if state:
            self.restoreState(state)

    def _save_window_settings(self):
        """Save window geometry and state."""
        self.settings_manager.save_window_geometry(
            bytes(self.saveGeometry()),
            bytes(self.saveState())
        )

    def closeEvent(self, event):
        """Handle window close - save settings."""
        self._save_window_settings()
        super().closeEvent(event)

    def _setup_window(self):
        self.setWindowTitle("BoxLink Package Diagram")
        self.setMinimumSize(900, 600)
        self.resize(1200, 800)
        self.setStyleSheet("""
            QMainWindow {
                background: #F3F4F6;
            }
        """)

    def _setup_menu(self):
        """Create menu bar."""
        menubar = self.menuBar()

        edit_menu = menubar.addMenu("&Edit")

        add_action = QAction("Add &Package...", self)
        add_action.setShortcut(QKeySequence("Ctrl+Shift+N"))
        add_action.triggered.connect(self._on_add_box)
        edit_menu.addAction(add_action)

        delete_action = QAction("&Delete Selected Packages", self)
        delete_action.setShortcut(QKeySequence.StandardKey.Delete)
        delete_action.triggered.connect(self._on_delete_selected)
        edit_menu.addAction(delete_action)

        view_menu = menubar.addMenu("&View")

        reset_action = QAction("&Reset View", self)
        reset_action.setShortcut(QKeySequence("Ctrl+0"))
        reset_action.triggered.connect(lambda: self.canvas.reset_view())
        view_menu.addAction(reset_action)

    def _setup_toolbar(self):
        self.toolbar = DiagramToolbar()
        self.addToolBar(self.toolbar)

        self.toolbar.add_box_btn.clicked.connect(self._on_add_box)
        self.toolbar.link_mode_btn.toggled.connect(self._on_link_mode_toggled)
        self.toolbar.clear_btn.clicked.connect(self._on_clear_diagram)

    def _setup_central_widget(self):
        grid_size = self.settings_manager.settings.ui.grid_size
        if not self.settings_manager.settings.ui.show_grid:
            grid_size = 0
        self.canvas = DiagramCanvas(self.surface, grid_size=grid_size)
        self.setCentralWidget(self.canvas)

    def _setup_status_bar(self):
        status = QStatusBar()
        status.setStyleSheet("""
            QStatusBar {
                background: #F9FAFB;
                border-top: 1px solid #E5E7EB;
                padding: 4px 8px;
                color: #6B7280;
                font-size: 12px;
            }
        """)
        self.setStatusBar(status)

        self._count_label = QLabel("Packages: 0  Relationships: 0")
        status.addWidget(self._count_label)

        status.addWidget(QWidget(), 1)

        self._instruction_label = QLabel(
            "Click a line to select • Double right-click a line to delete • Drag anchors to re-route"
        )
        status.addWidget(self._instruction_label)

    def _connect_signals(self):
        scene = self.canvas.diagram_scene
        scene.boxAdded.connect(lambda _: self._update_counts())
        scene.connectorAdded.connect(lambda _: self._update_counts())
        scene.connectorRemoved.connect(lambda _: self._update_counts())

    def _update_counts(self):
        self._count_label.setText(
            f"Packages: {len(self.surface.boxes)}  Relationships: {len(self.surface.connectors)}"
        )

    def _on_add_box(self):
        self._box_counter += 1
        name, ok = QInputDialog.getText(
            self, "Add Package", "Package name:", text=f"Package{self._box_counter}"
        )
        if not ok or not name.strip():
            return
        self.canvas.add_box_at_center(name.strip())
        logger.info(f"Added package '{name.strip()}'")

    def _on_delete_selected(self):
        self.canvas.diagram_scene.delete_selected_boxes()
        self._update_counts()

    def _on_link_mode_toggled(self, checked: bool):
        self.canvas.controller.set_link_mode(checked)
        self.toolbar.link_mode_btn.setText("Exit Relationship Mode" if checked else "Relationship Mode")
        self.toolbar.status_label.setText(
            "Click the source package, then the target" if checked else "Ready"
        )

    def _on_clear_diagram(self):
        """Clear the diagram after confirmation."""
        if not self.surface.boxes:
            return

        reply = QMessageBox.question(
            self,
            "Clear Diagram",
            "Are you sure you want to clear the entire diagram?",
            QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No
        )

        if reply == QMessageBox.StandardButton.Yes:
            scene = self.canvas.diagram_scene
            for box_id in list(self.surface.boxes.keys()):
                scene.remove_box(box_id)
            self._update_counts()
            self.statusBar().showMessage("Diagram cleared", 2000)
