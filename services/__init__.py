"""Services package."""

from .diagram_surface import (
    BoxChangeRegistry,
    DiagramSurface,
    RenderSink,
)
from .interaction import (
    InteractionController,
    PointerEvent,
    PointerEventKind,
    PrimitiveRole,
    PrimitiveTarget,
)
from .settings_manager import (
    SettingsManager,
    AppSettings,
    RoutingSettings,
    StyleSettings,
    UISettings,
    get_settings,
    reset_settings_manager,
)

__all__ = [
    "BoxChangeRegistry",
    "DiagramSurface",
    "RenderSink",
    "InteractionController",
    "PointerEvent",
    "PointerEventKind",
    "PrimitiveRole",
    "PrimitiveTarget",
    "SettingsManager",
    "AppSettings",
    "RoutingSettings",
    "StyleSettings",
    "UISettings",
    "get_settings",
    "reset_settings_manager",
]
