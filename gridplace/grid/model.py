"""
Grid Data Model

Plain data for the placement engine: the fixed-size cell grid and the
rectangular items laid out on it. Positions are 1-based (column, row) anchors
of an item's top-left cell; footprints are always derived from anchor and
span, never cached.

Construction rejects programming errors (non-positive dimensions or spans,
items that do not fit the grid, overlapping inserts) with ValueError so the
placement algorithm can assume the at-rest invariants hold.
"""

import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Set, Tuple

Cell = Tuple[int, int]
Checkpoint = Dict[str, Cell]


def _new_item_id() -> str:
    return uuid.uuid4().hex


@dataclass
class Item:
    """A rectangular widget anchored on the grid."""
    item_id: str = field(default_factory=_new_item_id)
    column: int = 1
    row: int = 1
    column_span: int = 1
    row_span: int = 1

    # Caller-owned data, never interpreted by the engine
    payload: Any = None

    def __post_init__(self):
        if self.column_span < 1 or self.row_span < 1:
            raise ValueError(
                f"Item {self.item_id}: spans must be >= 1 "
                f"(got {self.column_span}x{self.row_span})"
            )
        if self.column < 1 or self.row < 1:
            raise ValueError(
                f"Item {self.item_id}: anchor must be >= (1, 1) "
                f"(got ({self.column}, {self.row}))"
            )

    @property
    def anchor(self) -> Cell:
        """Top-left occupied cell as (column, row)."""
        return (self.column, self.row)

    @property
    def last_column(self) -> int:
        return self.column + self.column_span - 1

    @property
    def last_row(self) -> int:
        return self.row + self.row_span - 1

    def footprint(self, column: Optional[int] = None,
                  row: Optional[int] = None) -> Set[Cell]:
        """
        Get the set of unit cells this item covers.

        Args:
            column: Hypothetical anchor column (defaults to the current one)
            row: Hypothetical anchor row (defaults to the current one)
        """
        start_col = self.column if column is None else column
        start_row = self.row if row is None else row
        return {
            (c, r)
            for r in range(start_row, start_row + self.row_span)
            for c in range(start_col, start_col + self.column_span)
        }

    def overlaps(self, other: 'Item', column: Optional[int] = None,
                 row: Optional[int] = None) -> bool:
        """Check if this item, optionally at a hypothetical anchor, overlaps another.

        Uses interval overlap on both axes against other's current footprint.
        """
        col = self.column if column is None else column
        r = self.row if row is None else row

        col_overlap = (col < other.column + other.column_span and
                       col + self.column_span > other.column)
        row_overlap = (r < other.row + other.row_span and
                       r + self.row_span > other.row)
        return col_overlap and row_overlap

    def contains(self, column: int, row: int) -> bool:
        """Check if a cell lies inside the current footprint."""
        return (self.column <= column <= self.last_column and
                self.row <= row <= self.last_row)


@dataclass
class Grid:
    """
    Fixed-size layout container.

    Items are kept in an insertion-ordered dict keyed by id, so iteration
    order is stable for the duration of a placement attempt.
    """
    columns: int
    rows: int
    cell_pitch: int = 65  # rendered cell size + gap, in pixels

    items: Dict[str, Item] = field(default_factory=dict)

    def __post_init__(self):
        if self.columns < 1 or self.rows < 1:
            raise ValueError(
                f"Grid dimensions must be positive (got {self.columns}x{self.rows})"
            )
        if self.cell_pitch < 1:
            raise ValueError(f"Cell pitch must be positive (got {self.cell_pitch})")

        initial = list(self.items.values())
        self.items = {}
        for item in initial:
            self.add_item(item)

    # --- Item Management ---

    def add_item(self, item: Item):
        """
        Insert an item at its current anchor.

        Raises:
            ValueError: If the id is taken, the item does not fit inside the
                grid, or it overlaps an existing item.
        """
        if item.item_id in self.items:
            raise ValueError(f"Duplicate item id: {item.item_id}")
        if item.column_span > self.columns or item.row_span > self.rows:
            raise ValueError(
                f"Item {item.item_id} span {item.column_span}x{item.row_span} "
                f"exceeds grid {self.columns}x{self.rows}"
            )
        if not self.in_bounds(item):
            raise ValueError(
                f"Item {item.item_id} at {item.anchor} is outside the grid"
            )
        for other in self.items.values():
            if item.overlaps(other):
                raise ValueError(
                    f"Item {item.item_id} at {item.anchor} overlaps {other.item_id}"
                )
        self.items[item.item_id] = item

    def get_item(self, item_id: str) -> Optional[Item]:
        """Get an item by id."""
        return self.items.get(item_id)

    def remove_item(self, item_id: str) -> Optional[Item]:
        """Remove and return an item."""
        return self.items.pop(item_id, None)

    def reset(self):
        """Remove all items."""
        self.items.clear()

    def __iter__(self) -> Iterator[Item]:
        return iter(list(self.items.values()))

    def __len__(self) -> int:
        return len(self.items)

    def __contains__(self, item_id: object) -> bool:
        return item_id in self.items

    # --- Geometry ---

    def max_anchor(self, item: Item) -> Cell:
        """Largest legal anchor for the item's span."""
        return (self.columns - item.column_span + 1,
                self.rows - item.row_span + 1)

    def clamp_anchor(self, item: Item, column: int, row: int) -> Cell:
        """Clamp a requested anchor so the item's full span stays on the grid."""
        max_col, max_row = self.max_anchor(item)
        return (max(1, min(column, max_col)), max(1, min(row, max_row)))

    def clamp_cell(self, column: int, row: int) -> Cell:
        """Clamp a raw cell to the grid, ignoring any span."""
        return (max(1, min(column, self.columns)), max(1, min(row, self.rows)))

    def in_bounds(self, item: Item, column: Optional[int] = None,
                  row: Optional[int] = None) -> bool:
        """Check if the item's footprint (optionally at another anchor) fits."""
        col = item.column if column is None else column
        r = item.row if row is None else row
        return (col >= 1 and r >= 1 and
                col + item.column_span - 1 <= self.columns and
                r + item.row_span - 1 <= self.rows)

    # --- Checkpoints ---

    def checkpoint(self) -> Checkpoint:
        """Copy of every item's anchor, keyed by id."""
        return {item_id: item.anchor for item_id, item in self.items.items()}

    def restore(self, checkpoint: Checkpoint):
        """Write anchors from a checkpoint back verbatim."""
        for item_id, (column, row) in checkpoint.items():
            item = self.items.get(item_id)
            if item is not None:
                item.column = column
                item.row = row

    def moved_since(self, checkpoint: Checkpoint) -> List[str]:
        """Ids of items whose anchor differs from the checkpoint."""
        return [item_id for item_id, item in self.items.items()
                if item_id in checkpoint and checkpoint[item_id] != item.anchor]

    # --- Invariant Checks ---

    def find_overlaps(self) -> List[Tuple[str, str]]:
        """Find all overlapping item pairs as (id1, id2) in collection order."""
        overlaps = []
        items = list(self.items.values())

        for i, first in enumerate(items):
            for second in items[i+1:]:
                if first.overlaps(second):
                    overlaps.append((first.item_id, second.item_id))

        return overlaps

    def out_of_bounds(self) -> List[str]:
        """Ids of items whose footprint leaves the grid."""
        return [item.item_id for item in self.items.values()
                if not self.in_bounds(item)]

    def is_valid(self) -> bool:
        """True when every at-rest invariant holds."""
        return not self.out_of_bounds() and not self.find_overlaps()

    # --- Statistics ---

    def get_stats(self) -> Dict:
        """Get grid statistics."""
        covered = sum(item.column_span * item.row_span
                      for item in self.items.values())
        total = self.columns * self.rows
        return {
            "item_count": len(self.items),
            "columns": self.columns,
            "rows": self.rows,
            "cell_pitch": self.cell_pitch,
            "covered_cells": covered,
            "free_cells": max(0, total - covered),
        }

    def __repr__(self) -> str:
        return (f"Grid(size={self.columns}x{self.rows}, "
                f"items={len(self.items)}, "
                f"cell_pitch={self.cell_pitch})")
