"""
GridPlace Session State Management

Owns one grid together with its placement engine, the current selection and
the in-progress drag. Every committed change is recorded on an undo stack as a
whole-layout snapshot, and listeners are notified so a shell can redraw.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Set

from ..config import EditorConfig
from ..grid.model import Cell, Grid, Item
from ..placement.drag import (
    DragIdle,
    Dragging,
    DragState,
    DragTarget,
    Pointer,
    calculate_drag_target,
)
from ..placement.engine import PlacementEngine, PlacementOutcome
from .actions import ActionResult, LayoutActions

logger = logging.getLogger(__name__)

LayoutListener = Callable[[Grid], None]


@dataclass
class ItemState:
    """Snapshot of an item's placement state."""
    item_id: str
    column: int
    row: int
    column_span: int
    row_span: int
    payload: Any = None


@dataclass
class LayoutSnapshot:
    """Complete snapshot of the layout for undo/redo."""
    item_states: List[ItemState] = field(default_factory=list)
    description: str = ""


class LayoutSession:
    """
    Manages the lifecycle of a grid editing session.

    Provides:
    - Move, resize, add and remove operations with change notification
    - Pointer drag lifecycle (begin, update, end, cancel)
    - Undo/redo stack
    - Dirty state tracking
    """

    MAX_UNDO_STACK = 50

    def __init__(self, grid: Optional[Grid] = None, config: Optional[EditorConfig] = None):
        self.config = config or EditorConfig()
        self.grid = grid if grid is not None else self.config.grid.build_grid()
        self.engine = PlacementEngine(self.grid, self.config.placement)
        self.actions = LayoutActions(self.grid, self.engine)

        self.drag_state: DragState = DragIdle()
        self.selected_id: Optional[str] = None

        self._listeners: List[LayoutListener] = []
        self._undo_limit = self.config.undo_limit or self.MAX_UNDO_STACK
        self._undo_stack: List[LayoutSnapshot] = []
        self._redo_stack: List[LayoutSnapshot] = []
        self._dirty: bool = False
        self._dirty_ids: Set[str] = set()

        # Take initial snapshot
        self._save_snapshot("Initial layout")

    @property
    def is_dirty(self) -> bool:
        """Check if the layout changed since the last clear_dirty()."""
        return self._dirty

    @property
    def dirty_items(self) -> List[str]:
        """Get ids of items modified since the last clear_dirty()."""
        return list(self._dirty_ids)

    @property
    def is_dragging(self) -> bool:
        return isinstance(self.drag_state, Dragging)

    @property
    def selected_item(self) -> Optional[Item]:
        if self.selected_id is None:
            return None
        return self.grid.get_item(self.selected_id)

    # -- Listeners ---------------------------------------------------------

    def add_listener(self, callback: LayoutListener):
        """Register a callback invoked with the grid after each committed change."""
        if callback not in self._listeners:
            self._listeners.append(callback)

    def remove_listener(self, callback: LayoutListener):
        if callback in self._listeners:
            self._listeners.remove(callback)

    def _notify(self):
        for callback in list(self._listeners):
            callback(self.grid)

    # -- Selection ---------------------------------------------------------

    def select(self, item_id: str) -> bool:
        """Select an item. Returns False if it is not on the grid."""
        if item_id not in self.grid:
            return False
        self.selected_id = item_id
        return True

    def deselect(self):
        self.selected_id = None

    # -- Layout operations -------------------------------------------------

    def move_to(self, item_id: str, column: int, row: int) -> ActionResult:
        """Move an item's anchor to a cell, resolving collisions."""
        result = self.actions.move_to(item_id, column, row)
        self._commit(result, f"Move {item_id}")
        return result

    def move_by(self, item_id: str, delta_col: int, delta_row: int) -> ActionResult:
        """Nudge an item by whole cells."""
        result = self.actions.move_by(item_id, delta_col, delta_row)
        self._commit(result, f"Move {item_id}")
        return result

    def resize(self, item_id: str, column_delta: int = 0, row_delta: int = 0) -> ActionResult:
        result = self.actions.resize(item_id, column_delta, row_delta)
        self._commit(result, f"Resize {item_id}")
        return result

    def add_item(
        self,
        item: Optional[Item] = None,
        column_span: Optional[int] = None,
        row_span: Optional[int] = None,
        payload: Any = None,
    ) -> ActionResult:
        """Add an item at the first free cell and select it."""
        result = self.actions.add_item(item, column_span, row_span, payload)
        if result.success:
            self.selected_id = result.modified_ids[0]
        self._commit(result, "Add item")
        return result

    def remove_item(self, item_id: str) -> ActionResult:
        if self.is_dragging and self.drag_state.item_id == item_id:
            self.cancel_drag()
        result = self.actions.remove_item(item_id)
        if result.success and self.selected_id == item_id:
            self.selected_id = None
        self._commit(result, f"Remove {item_id}")
        return result

    def reset(self) -> ActionResult:
        """Remove every item."""
        self.cancel_drag()
        result = self.actions.reset()
        if result.success:
            self.selected_id = None
        self._commit(result, "Reset layout")
        return result

    def click_cell(self, column: int, row: int) -> ActionResult:
        """
        Handle a click on a grid cell.

        Clicking an item selects it. Clicking an empty cell moves the
        selected item there. Ignored while a drag is in progress.
        """
        if self.is_dragging:
            return ActionResult(False, "Drag in progress", [], PlacementOutcome.NO_MOVEMENT)

        hit = self.engine.collisions.item_at(column, row)
        if hit is not None:
            self.selected_id = hit.item_id
            return ActionResult(True, f"Selected {hit.item_id}", [],
                                PlacementOutcome.NO_MOVEMENT)

        if self.selected_id is None or self.selected_id not in self.grid:
            return ActionResult(False, f"Nothing selected to move to ({column}, {row})")

        return self.move_to(self.selected_id, column, row)

    def remove_selected(self) -> ActionResult:
        """Remove the selected item (Delete key)."""
        if self.selected_id is None:
            return ActionResult(False, "Nothing selected")
        return self.remove_item(self.selected_id)

    def _commit(self, result: ActionResult, description: str):
        """Record a successful action for undo and notify listeners."""
        if not result.success:
            return
        # A fallback onto the item's own anchor succeeds without moving anything
        if result.modified_ids:
            self.mark_modified(result.modified_ids)
            self._save_snapshot(description)
        self._notify()

    # -- Drag lifecycle ----------------------------------------------------

    def begin_drag(self, item_id: str, pointer: Pointer) -> bool:
        """
        Start dragging an item.

        Args:
            item_id: Item under the pointer
            pointer: Pointer (x, y) in pixels

        Returns:
            True if the drag started, False if the item does not exist
        """
        item = self.grid.get_item(item_id)
        if not item:
            return False

        self.selected_id = item_id
        self.drag_state = Dragging(
            item_id=item_id,
            start_pointer=(float(pointer[0]), float(pointer[1])),
            start_cell=item.anchor,
        )
        return True

    def update_drag(self, pointer: Pointer) -> Optional[DragTarget]:
        """
        Track pointer movement during a drag.

        Returns the candidate cells for this pointer position, or None when
        no drag is active or the pointer is still inside the dead zone. Inside
        the dead zone the previous candidate, if any, is kept.
        """
        state = self.drag_state
        if not isinstance(state, Dragging):
            return None

        item = self.grid.get_item(state.item_id)
        if not item:
            self.cancel_drag()
            return None

        target = calculate_drag_target(
            self.grid,
            state.start_pointer,
            state.start_cell,
            pointer,
            column_span=item.column_span,
            row_span=item.row_span,
            dead_zone=self.config.dead_zone,
        )
        if target is not None:
            self.drag_state = state.with_target(target)
        return target

    def end_drag(self, pointer: Optional[Pointer] = None) -> ActionResult:
        """
        Drop the dragged item on its current candidate cell.

        Args:
            pointer: Optional final pointer position, applied before dropping

        Returns:
            ActionResult of the resulting move. Without a candidate cell the
            item stays put and the outcome is NO_MOVEMENT.
        """
        if not self.is_dragging:
            return ActionResult(False, "No drag in progress", [], PlacementOutcome.NO_MOVEMENT)

        if pointer is not None:
            self.update_drag(pointer)

        state = self.drag_state
        self.drag_state = DragIdle()
        if not isinstance(state, Dragging) or state.final_drop_cell is None:
            return ActionResult(False, "Drag ended without a target", [],
                                PlacementOutcome.NO_MOVEMENT)

        return self.move_to(state.item_id, *state.final_drop_cell)

    def cancel_drag(self):
        """Abandon the drag; the item stays where it was."""
        self.drag_state = DragIdle()

    def drop_preview_cells(self) -> Set[Cell]:
        """Cells the dragged item would cover if dropped now."""
        state = self.drag_state
        if not isinstance(state, Dragging) or state.final_drop_cell is None:
            return set()

        item = self.grid.get_item(state.item_id)
        if not item:
            return set()
        return self.engine.collisions.footprint_cells(item, *state.final_drop_cell)

    # -- Undo / redo -------------------------------------------------------

    def checkpoint(self, description: str = ""):
        """
        Record the current layout as an undo step.

        Session operations checkpoint themselves; call this after changing
        the grid directly.
        """
        self._save_snapshot(description)

    def undo(self) -> bool:
        """
        Undo last change.

        Returns:
            True if undo was performed, False if nothing to undo
        """
        if len(self._undo_stack) <= 1:  # Keep at least the initial state
            return False

        self.cancel_drag()
        self._redo_stack.append(self._undo_stack.pop())
        self._restore_snapshot(self._undo_stack[-1])

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("Undo: %s", self._redo_stack[-1].description)

        self._dirty = True
        self._notify()
        return True

    def redo(self) -> bool:
        """
        Redo last undone change.

        Returns:
            True if redo was performed, False if nothing to redo
        """
        if not self._redo_stack:
            return False

        self.cancel_drag()
        snapshot = self._redo_stack.pop()
        self._undo_stack.append(snapshot)
        self._restore_snapshot(snapshot)

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("Redo: %s", snapshot.description)

        self._dirty = True
        self._notify()
        return True

    def mark_modified(self, item_ids: List[str]):
        """
        Mark items as modified (for dirty tracking).

        Args:
            item_ids: Ids of the items that were modified
        """
        self._dirty = True
        self._dirty_ids.update(item_ids)

    def clear_dirty(self):
        """Clear dirty state (call after the shell has persisted the layout)."""
        self._dirty = False
        self._dirty_ids.clear()

    def _take_snapshot(self, description: str = "") -> LayoutSnapshot:
        """Create snapshot of current layout."""
        states = [
            ItemState(
                item_id=item.item_id,
                column=item.column,
                row=item.row,
                column_span=item.column_span,
                row_span=item.row_span,
                payload=item.payload,
            )
            for item in self.grid
        ]
        return LayoutSnapshot(item_states=states, description=description)

    def _save_snapshot(self, description: str = ""):
        """Save current state to undo stack."""
        self._undo_stack.append(self._take_snapshot(description))

        # Clear redo stack on new action
        self._redo_stack.clear()

        # Limit stack size
        while len(self._undo_stack) > self._undo_limit:
            self._undo_stack.pop(0)

    def _restore_snapshot(self, snapshot: LayoutSnapshot):
        """Restore the layout, including membership, from a snapshot."""
        existing = self.grid.items
        restored: Dict[str, Item] = {}
        for state in snapshot.item_states:
            item = existing.get(state.item_id)
            if item is None:
                item = Item(item_id=state.item_id)
            item.column = state.column
            item.row = state.row
            item.column_span = state.column_span
            item.row_span = state.row_span
            item.payload = state.payload
            restored[state.item_id] = item
        self.grid.items = restored

        if self.selected_id not in restored:
            self.selected_id = None

    def get_stats(self) -> Dict[str, Any]:
        """Get session statistics."""
        return {
            "dirty": self.is_dirty,
            "dirty_count": len(self._dirty_ids),
            "undo_available": len(self._undo_stack) > 1,
            "redo_available": len(self._redo_stack) > 0,
            "items": len(self.grid),
            "selected": self.selected_id,
            "dragging": self.is_dragging,
        }
