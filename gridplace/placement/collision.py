"""
Collision Detector

Stateless geometric queries over a borrowed grid. Every query is a linear
scan of the item collection; no spatial index is kept because the working
set is tens of items.
"""

from typing import Iterable, List, Optional, Set

from ..grid.model import Cell, Grid, Item


class CollisionDetector:
    """Answers overlap and occupancy questions about a grid."""

    def __init__(self, grid: Grid):
        self.grid = grid

    def overlap(self, item: Item, column: int, row: int, other: Item) -> bool:
        """True if item placed at (column, row) intersects other's current footprint."""
        return item.overlaps(other, column, row)

    def has_collision(self, item: Item, column: int, row: int,
                      ignore: Optional[Iterable[str]] = None) -> bool:
        """
        Check whether item can sit at (column, row).

        Out of bounds counts as a collision. The item itself and any id in
        ``ignore`` are skipped.
        """
        if not self.grid.in_bounds(item, column, row):
            return True

        ignored = set(ignore) if ignore else set()
        for other in self.grid.items.values():
            if other.item_id == item.item_id or other.item_id in ignored:
                continue
            if item.overlaps(other, column, row):
                return True

        return False

    def collisions_at(self, item: Item, column: int, row: int) -> List[Item]:
        """All other items overlapping item placed at (column, row). No bounds check."""
        return [other for other in self.grid.items.values()
                if other.item_id != item.item_id and item.overlaps(other, column, row)]

    def item_at(self, column: int, row: int) -> Optional[Item]:
        """First item, in collection order, whose footprint contains the cell."""
        for item in self.grid.items.values():
            if item.contains(column, row):
                return item
        return None

    def footprint_cells(self, item: Item, column: Optional[int] = None,
                        row: Optional[int] = None) -> Set[Cell]:
        return item.footprint(column, row)

    def occupied_cells(self) -> Set[Cell]:
        """Union of every item's footprint."""
        cells: Set[Cell] = set()
        for item in self.grid.items.values():
            cells |= item.footprint()
        return cells

    def layout_is_clear(self) -> bool:
        """True when no item is out of bounds or overlapping another."""
        for item in self.grid.items.values():
            if self.has_collision(item, item.column, item.row):
                return False
        return True
