"""
Drag Target Calculator

Turns continuous pointer movement into a discrete candidate cell. Pure
functions of the drag-start state and the current pointer; the drag state
itself is modelled as a tagged union so a hover cell can never exist without
a dragged item.
"""

import math
from dataclasses import dataclass, replace
from typing import Optional, Tuple, Union

from ..grid.model import Cell, Grid

Pointer = Tuple[float, float]

# Pointer movement (px) below which no candidate is produced on either axis
DEFAULT_DEAD_ZONE = 8


@dataclass(frozen=True)
class DragTarget:
    """Candidate cells for the current pointer position."""
    hover_cell: Cell  # raw cell under the pointer, for highlighting
    final_drop_cell: Cell  # legal anchor for the dragged item's span


@dataclass(frozen=True)
class DragIdle:
    """No drag in progress."""


@dataclass(frozen=True)
class Dragging:
    """A drag in progress."""
    item_id: str
    start_pointer: Pointer
    start_cell: Cell
    hover_cell: Optional[Cell] = None
    final_drop_cell: Optional[Cell] = None

    def with_target(self, target: DragTarget) -> "Dragging":
        """Copy of this state carrying the given candidate cells."""
        return replace(self, hover_cell=target.hover_cell,
                       final_drop_cell=target.final_drop_cell)


DragState = Union[DragIdle, Dragging]


def quantize_delta(delta: float, cell_pitch: int) -> int:
    """
    Convert a pointer displacement on one axis to whole cells.

    Non-negative deltas round down and negative deltas round up, so the item
    only enters a new cell once the pointer has travelled a full pitch.
    """
    if delta >= 0:
        return math.floor(delta / cell_pitch)
    return math.ceil(delta / cell_pitch)


def calculate_drag_target(
    grid: Grid,
    start_pointer: Pointer,
    start_cell: Cell,
    current_pointer: Pointer,
    column_span: int = 1,
    row_span: int = 1,
    dead_zone: int = DEFAULT_DEAD_ZONE,
) -> Optional[DragTarget]:
    """
    Compute the hover and drop cells for a pointer position.

    Args:
        grid: Grid supplying dimensions and cell pitch
        start_pointer: Pointer (x, y) when the drag began
        start_cell: Dragged item's anchor when the drag began
        current_pointer: Current pointer (x, y)
        column_span: Dragged item's column span
        row_span: Dragged item's row span
        dead_zone: Minimum movement in pixels on at least one axis

    Returns:
        DragTarget, or None while the pointer is inside the dead zone
    """
    delta_x = current_pointer[0] - start_pointer[0]
    delta_y = current_pointer[1] - start_pointer[1]

    if abs(delta_x) < dead_zone and abs(delta_y) < dead_zone:
        return None

    delta_col = quantize_delta(delta_x, grid.cell_pitch)
    delta_row = quantize_delta(delta_y, grid.cell_pitch)

    hover_cell = grid.clamp_cell(start_cell[0] + delta_col, start_cell[1] + delta_row)

    max_col = grid.columns - column_span + 1
    max_row = grid.rows - row_span + 1
    final_drop_cell = (max(1, min(hover_cell[0], max_col)),
                       max(1, min(hover_cell[1], max_row)))

    return DragTarget(hover_cell=hover_cell, final_drop_cell=final_drop_cell)
