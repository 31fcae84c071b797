"""
GridPlace Core API: Atomic Actions

Id-addressed operations on a grid for UI shells. Each call goes through the
placement engine's collision rules and reports what happened as an
ActionResult instead of raising, so a shell can map results directly to user
feedback (commit, snap back, or nothing to do).

Usage:
    from gridplace.api.actions import LayoutActions
    actions = LayoutActions(grid)
    actions.move_to("chart", 3, 1)
    actions.move_by("chart", 0, 1)
"""

from dataclasses import dataclass, field
from typing import Any, List, Optional

from ..grid.model import Grid, Item
from ..placement.engine import PlacementEngine, PlacementOutcome


@dataclass
class ActionResult:
    """Result of an atomic action."""
    success: bool
    message: str
    modified_ids: List[str] = field(default_factory=list)
    outcome: PlacementOutcome = PlacementOutcome.FAILED


class LayoutActions:
    """Id-addressed layout operations."""

    def __init__(self, grid: Grid, engine: Optional[PlacementEngine] = None):
        self.grid = grid
        self.engine = engine or PlacementEngine(grid)

    def move_to(self, item_id: str, column: int, row: int) -> ActionResult:
        """Move an item's anchor to a cell."""
        item = self.grid.get_item(item_id)
        if not item:
            return ActionResult(False, f"Item {item_id} not found")

        outcome = self.engine.place_item(item, column, row)
        report = self.engine.last_report
        modified = list(report.moved_ids) if report else []

        if outcome == PlacementOutcome.NO_MOVEMENT:
            return ActionResult(False, f"Item {item_id} already at {item.anchor}",
                                [], outcome)
        if outcome == PlacementOutcome.FAILED:
            return ActionResult(False, f"No room for {item_id} near ({column}, {row})",
                                [], outcome)

        strategy = report.strategy.value if report and report.strategy else "direct"
        return ActionResult(
            True,
            f"Moved {item_id} to ({item.column}, {item.row}) via {strategy}",
            modified,
            outcome,
        )

    def move_by(self, item_id: str, delta_col: int, delta_row: int) -> ActionResult:
        """Move an item relative to its anchor (arrow-key nudges)."""
        item = self.grid.get_item(item_id)
        if not item:
            return ActionResult(False, f"Item {item_id} not found")

        return self.move_to(item_id, item.column + delta_col, item.row + delta_row)

    def resize(self, item_id: str, column_delta: int = 0, row_delta: int = 0) -> ActionResult:
        """
        Change an item's spans.

        Column and row deltas are applied independently; the result succeeds
        if at least one span changed.
        """
        item = self.grid.get_item(item_id)
        if not item:
            return ActionResult(False, f"Item {item_id} not found")

        outcomes = []
        if column_delta:
            outcomes.append(self.engine.resize_column_span(item, column_delta))
        if row_delta:
            outcomes.append(self.engine.resize_row_span(item, row_delta))

        size = f"{item.column_span}x{item.row_span}"
        if PlacementOutcome.SUCCESS in outcomes:
            return ActionResult(True, f"Resized {item_id} to {size}",
                                [item_id], PlacementOutcome.SUCCESS)
        if PlacementOutcome.FAILED in outcomes:
            return ActionResult(False, f"Cannot resize {item_id} beyond {size}",
                                [], PlacementOutcome.FAILED)
        return ActionResult(False, f"Item {item_id} already {size}",
                            [], PlacementOutcome.NO_MOVEMENT)

    def add_item(
        self,
        item: Optional[Item] = None,
        column_span: Optional[int] = None,
        row_span: Optional[int] = None,
        payload: Any = None,
    ) -> ActionResult:
        """
        Add an item at the first free cell.

        Without an explicit item a new one is created using the requested
        spans, or the engine's default new-item span.
        """
        if item is None:
            config = self.engine.config
            item = Item(
                column_span=(config.new_item_column_span
                             if column_span is None else column_span),
                row_span=config.new_item_row_span if row_span is None else row_span,
                payload=payload,
            )
        elif item.item_id in self.grid:
            return ActionResult(False, f"Item {item.item_id} already exists")

        outcome = self.engine.place_new_item(item)
        if outcome != PlacementOutcome.SUCCESS:
            return ActionResult(False, "Grid is full", [], outcome)

        return ActionResult(
            True,
            f"Added {item.item_id} at ({item.column}, {item.row}) "
            f"size {item.column_span}x{item.row_span}",
            [item.item_id],
            outcome,
        )

    def remove_item(self, item_id: str) -> ActionResult:
        """Remove an item from the grid."""
        if not self.grid.remove_item(item_id):
            return ActionResult(False, f"Item {item_id} not found")
        return ActionResult(True, f"Removed {item_id}", [item_id], PlacementOutcome.SUCCESS)

    def reset(self) -> ActionResult:
        """Remove every item."""
        removed = list(self.grid.items)
        self.grid.reset()
        if not removed:
            return ActionResult(False, "Grid already empty", [], PlacementOutcome.NO_MOVEMENT)
        return ActionResult(True, f"Removed {len(removed)} items", removed,
                            PlacementOutcome.SUCCESS)
