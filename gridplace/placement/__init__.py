"""Placement engine with collision detection and drag quantization."""

from .collision import CollisionDetector
from .engine import (
    PlacementEngine,
    PlacementConfig,
    PlacementOutcome,
    PlacementReport,
    ResolutionStrategy,
)
from .drag import (
    DragTarget,
    DragIdle,
    Dragging,
    DragState,
    calculate_drag_target,
    quantize_delta,
)

__all__ = [
    "CollisionDetector",
    "PlacementEngine",
    "PlacementConfig",
    "PlacementOutcome",
    "PlacementReport",
    "ResolutionStrategy",
    "DragTarget",
    "DragIdle",
    "Dragging",
    "DragState",
    "calculate_drag_target",
    "quantize_delta",
]
