"""
Pytest configuration and shared fixtures for BoxLink tests.
"""

import pytest
import tempfile
import shutil
from pathlib import Path
from typing import Generator, List, Optional

# Add parent directory to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from models.connector import ConnectorModel, DeleteDecision
from models.diagram import InvalidBoxReference
from models.geometry import Bounds
from services.diagram_surface import DiagramSurface
from services.interaction import InteractionController
from services.settings_manager import reset_settings_manager


# ============== Temporary Directory Fixtures ==============

@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    tmp = tempfile.mkdtemp(prefix="boxlink_test_")
    yield Path(tmp)
    shutil.rmtree(tmp, ignore_errors=True)


@pytest.fixture
def settings_file(temp_dir: Path) -> Path:
    """Path for an isolated settings file."""
    return temp_dir / "config" / "settings.json"


@pytest.fixture(autouse=True)
def clean_global_settings():
    """Never leak the global settings manager between tests."""
    reset_settings_manager()
    yield
    reset_settings_manager()


# ============== Geometry Fixtures ==============

class StaticGeometry:
    """Minimal geometry source backed by a plain dict of bounds."""

    def __init__(self, bounds: Optional[dict] = None):
        self.bounds = dict(bounds or {})

    def get_bounds(self, box_id: str) -> Bounds:
        if box_id not in self.bounds:
            raise InvalidBoxReference(box_id)
        return self.bounds[box_id]


@pytest.fixture
def geometry() -> StaticGeometry:
    """Box A at (0,0,100,50) and box B at (200,150,100,50)."""
    return StaticGeometry({
        "A": Bounds(0, 0, 100, 50),
        "B": Bounds(200, 150, 100, 50),
    })


@pytest.fixture
def connector(geometry) -> ConnectorModel:
    """Connector from A to B over a static geometry source."""
    return ConnectorModel("A", "B", geometry, label="Relation", connector_id="c1")


# ============== Surface Fixtures ==============

class RecordingSink:
    """Render sink that records every update it receives."""

    def __init__(self):
        self.changed: List[str] = []
        self.removed: List[str] = []
        self.pending: List[Optional[str]] = []

    def connector_changed(self, connector: ConnectorModel) -> None:
        self.changed.append(connector.id)

    def connector_removed(self, connector_id: str) -> None:
        self.removed.append(connector_id)

    def pending_source_changed(self, box_id: Optional[str]) -> None:
        self.pending.append(box_id)


@pytest.fixture
def surface() -> DiagramSurface:
    """Surface holding boxes A and B."""
    s = DiagramSurface()
    s.add_box("A", 0, 0, 100, 50, box_id="A")
    s.add_box("B", 200, 150, 100, 50, box_id="B")
    return s


@pytest.fixture
def sink(surface) -> RecordingSink:
    recorder = RecordingSink()
    surface.add_render_sink(recorder)
    return recorder


class ScriptedPrompt:
    """Delete confirmation prompt that answers from a fixed decision."""

    def __init__(self, decision: DeleteDecision = DeleteDecision.CONFIRMED):
        self.decision = decision
        self.calls = 0

    def __call__(self, *args) -> DeleteDecision:
        self.calls += 1
        return self.decision


@pytest.fixture
def prompt() -> ScriptedPrompt:
    return ScriptedPrompt()


@pytest.fixture
def controller(surface, prompt) -> InteractionController:
    return InteractionController(surface, confirm_delete=prompt)
