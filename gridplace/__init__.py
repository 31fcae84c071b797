"""
GridPlace - Grid Widget Placement Engine

Places rectangular items on a fixed grid of cells and keeps the layout free
of overlaps when items are dragged, nudged, resized, added or removed.
"""

__version__ = "0.1.0"
__author__ = "GridPlace Team"

from .grid.model import Grid, Item
from .placement.engine import PlacementEngine, PlacementOutcome
from .api.session import LayoutSession
from .config import EditorConfig, load_config

__all__ = [
    "Grid",
    "Item",
    "PlacementEngine",
    "PlacementOutcome",
    "LayoutSession",
    "EditorConfig",
    "load_config",
]
