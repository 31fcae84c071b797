"""
Placement Engine

Realizes a requested move of one item on the grid, resolving any overlap it
creates or rejecting the move. Every attempt is transactional:

1. Snapshot - Record every item's anchor before touching anything
2. Attempt  - Try resolution strategies in a fixed order:
   a. Directional push (colliders slide one cell along the move)
   b. Direct swap (single collider with the same span)
   c. Asymmetric swap (single collider with a different span)
   d. Fallback search (nearest free cell to the target, mover only)
3. Commit or rollback - A failed strategy restores the snapshot before the
   next one runs, and a failed call leaves the layout exactly as it was

The engine also owns the container operations that must respect the same
collision rules: first-fit insertion of new items and span resizing.
"""

import logging
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

from ..grid.model import Cell, Checkpoint, Grid, Item
from .collision import CollisionDetector

logger = logging.getLogger(__name__)


class PlacementOutcome(Enum):
    """Result of a placement or resize request."""
    SUCCESS = "success"
    NO_MOVEMENT = "no_movement"
    FAILED = "failed"


class ResolutionStrategy(Enum):
    """How a successful placement was realized."""
    DIRECT = "direct"              # Target was already free
    PUSH = "push"                  # Colliders displaced along the move
    SWAP = "swap"                  # Exchanged anchors with an equal-span item
    COMPLEX_SWAP = "complex_swap"  # Took the collider's anchor, collider relocated
    FALLBACK = "fallback"          # Nearest free cell to the requested target


@dataclass
class PlacementConfig:
    """Configuration for the placement engine."""
    # Directional push: displacement cap is factor * item count
    push_limit_factor: int = 2

    # Default span for items created without one
    new_item_column_span: int = 2
    new_item_row_span: int = 2


@dataclass
class PlacementReport:
    """Details of the most recent place_item call."""
    item_id: str
    outcome: PlacementOutcome = PlacementOutcome.NO_MOVEMENT
    strategy: Optional[ResolutionStrategy] = None
    requested: Cell = (0, 0)  # target as passed by the caller
    target: Cell = (0, 0)  # target after clamping to the item's span
    moved_ids: List[str] = field(default_factory=list)  # items whose anchor changed
    strategies_tried: List[ResolutionStrategy] = field(default_factory=list)


def _sign(value: int) -> int:
    return (value > 0) - (value < 0)


class PlacementEngine:
    """
    Multi-strategy conflict resolver for a single grid.

    Not thread-safe: callers serialize mutating calls against one grid.
    """

    def __init__(self, grid: Grid, config: Optional[PlacementConfig] = None):
        """
        Initialize the engine.

        Args:
            grid: The grid to mutate
            config: Placement configuration
        """
        self.grid = grid
        self.config = config or PlacementConfig()
        self.collisions = CollisionDetector(grid)
        self.last_report: Optional[PlacementReport] = None

    def place_item(self, item: Item, target_col: int, target_row: int) -> PlacementOutcome:
        """
        Move an item to a target anchor, resolving collisions.

        The target is clamped so the item's span fits the grid. A target equal
        to the current anchor is a no-op.

        Returns:
            PlacementOutcome; FAILED leaves every item where it was
        """
        self._require_member(item)

        col, row = self.grid.clamp_anchor(item, target_col, target_row)
        report = PlacementReport(
            item_id=item.item_id,
            requested=(target_col, target_row),
            target=(col, row),
        )
        self.last_report = report

        if item.anchor == (col, row):
            return PlacementOutcome.NO_MOVEMENT

        checkpoint = self.grid.checkpoint()
        collisions = self.collisions.collisions_at(item, col, row)

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "Place %s: %s -> (%d, %d) requested=(%d, %d) colliders=%s",
                item.item_id,
                item.anchor,
                col,
                row,
                target_col,
                target_row,
                [c.item_id for c in collisions],
            )

        if not collisions:
            item.column = col
            item.row = row
            return self._finish(report, checkpoint, PlacementOutcome.SUCCESS,
                                ResolutionStrategy.DIRECT)

        # Strategy (a): push colliders along the dominant axis of the move
        report.strategies_tried.append(ResolutionStrategy.PUSH)
        delta_col, delta_row = self._push_direction(item, col, row)
        if self._try_push(item, col, row, delta_col, delta_row, checkpoint):
            return self._finish(report, checkpoint, PlacementOutcome.SUCCESS,
                                ResolutionStrategy.PUSH)

        # Strategies (b)/(c): one-on-one exchange with a single collider
        if len(collisions) == 1:
            other = collisions[0]
            same_span = (item.column_span == other.column_span and
                         item.row_span == other.row_span)

            if same_span:
                report.strategies_tried.append(ResolutionStrategy.SWAP)
                if self._try_swap(item, other, checkpoint):
                    return self._finish(report, checkpoint, PlacementOutcome.SUCCESS,
                                        ResolutionStrategy.SWAP)
            else:
                report.strategies_tried.append(ResolutionStrategy.COMPLEX_SWAP)
                if self._try_complex_swap(item, other, checkpoint):
                    return self._finish(report, checkpoint, PlacementOutcome.SUCCESS,
                                        ResolutionStrategy.COMPLEX_SWAP)

        # Strategy (d): nearest free cell to the requested target
        report.strategies_tried.append(ResolutionStrategy.FALLBACK)
        return self._try_fallback(item, col, row, checkpoint, report)

    def nearest_free_cell(self, item: Item, start_col: int,
                          start_row: int) -> Optional[Cell]:
        """
        Breadth-first search for the closest anchor where item fits.

        Explores 4-connected neighbours (+col, -col, +row, -row) within the
        span-adjusted bounds, so cells are visited in order of increasing
        Manhattan distance from the start. The item itself is ignored when
        testing for collisions.

        Returns:
            (column, row) or None if no anchor on the grid is free
        """
        max_col, max_row = self.grid.max_anchor(item)
        start = (start_col, start_row)

        visited = {start}
        queue = deque([start])

        while queue:
            col, row = queue.popleft()

            if not self.collisions.has_collision(item, col, row):
                return (col, row)

            for neighbour in ((col + 1, row), (col - 1, row),
                              (col, row + 1), (col, row - 1)):
                n_col, n_row = neighbour
                if (1 <= n_col <= max_col and 1 <= n_row <= max_row and
                        neighbour not in visited):
                    visited.add(neighbour)
                    queue.append(neighbour)

        return None

    # --- Container Operations ---

    def place_new_item(self, item: Item) -> PlacementOutcome:
        """
        Add an item at the first free anchor in row-major order.

        If the item's span fits nowhere it is shrunk to 1x1 and the scan
        repeats. On a full grid the item is not added and keeps its spans.
        """
        if item.item_id in self.grid:
            raise ValueError(f"Item {item.item_id} is already on the grid")

        original_spans = (item.column_span, item.row_span)
        cell = self._first_fit(item)

        if cell is None and original_spans != (1, 1):
            if logger.isEnabledFor(logging.DEBUG):
                logger.debug(
                    "First fit: %s does not fit at %dx%d, retrying at 1x1",
                    item.item_id,
                    original_spans[0],
                    original_spans[1],
                )
            item.column_span = 1
            item.row_span = 1
            cell = self._first_fit(item)

        if cell is None:
            item.column_span, item.row_span = original_spans
            logger.debug("First fit: grid full, %s not added", item.item_id)
            return PlacementOutcome.FAILED

        item.column, item.row = cell
        self.grid.add_item(item)
        logger.debug("First fit: added %s at %s", item.item_id, cell)
        return PlacementOutcome.SUCCESS

    def resize_column_span(self, item: Item, delta: int) -> PlacementOutcome:
        """Grow or shrink an item's column span by delta."""
        return self._resize(item, delta, "column_span", item.column, self.grid.columns)

    def resize_row_span(self, item: Item, delta: int) -> PlacementOutcome:
        """Grow or shrink an item's row span by delta."""
        return self._resize(item, delta, "row_span", item.row, self.grid.rows)

    # --- Strategies ---

    def _push_direction(self, item: Item, col: int, row: int) -> Tuple[int, int]:
        """Unit push vector; a diagonal move keeps only its longer axis (ties favour columns)."""
        col_distance = col - item.column
        row_distance = row - item.row
        delta_col = _sign(col_distance)
        delta_row = _sign(row_distance)

        if delta_col != 0 and delta_row != 0:
            if abs(col_distance) >= abs(row_distance):
                delta_row = 0
            else:
                delta_col = 0

        return (delta_col, delta_row)

    def _try_push(self, item: Item, col: int, row: int,
                  delta_col: int, delta_row: int, checkpoint: Checkpoint) -> bool:
        """
        Strategy (a): move item to the target and displace colliders.

        Displacement cascades through an explicit worklist in depth-first
        order. Each item is displaced at most once.

        Returns:
            True if the resulting layout is in bounds and overlap-free
        """
        item.column = col
        item.row = row

        processed = {item.item_id}
        limit = self.config.push_limit_factor * len(self.grid)
        steps = 0

        worklist: List[Tuple[Item, Item]] = [
            (other, item) for other in reversed(self.collisions.collisions_at(item, col, row))
        ]

        while worklist:
            pushed, pusher = worklist.pop()
            if pushed.item_id in processed:
                continue

            steps += 1
            if steps > limit:
                logger.debug("Push aborted: displacement limit %d reached", limit)
                self.grid.restore(checkpoint)
                return False

            processed.add(pushed.item_id)
            pushed.column, pushed.row = self._displace(pushed, pusher, delta_col, delta_row)

            if logger.isEnabledFor(logging.DEBUG):
                logger.debug(
                    "Push %s by %s: -> %s (pusher %s)",
                    pushed.item_id,
                    (delta_col, delta_row),
                    pushed.anchor,
                    pusher.item_id,
                )

            newly_hit = [other for other in
                         self.collisions.collisions_at(pushed, pushed.column, pushed.row)
                         if other.item_id not in processed]
            worklist.extend((other, pushed) for other in reversed(newly_hit))

        if self.collisions.layout_is_clear():
            return True

        logger.debug("Push left overlaps after %d displacements, rolling back", steps)
        self.grid.restore(checkpoint)
        return False

    def _displace(self, pushed: Item, pusher: Item,
                  delta_col: int, delta_row: int) -> Cell:
        """
        New anchor for an item pushed one cell along (delta_col, delta_row).

        When the step would cross the grid edge the item goes to the cell just
        before the pusher's leading edge on that axis instead.
        """
        new_col = pushed.column + delta_col
        new_row = pushed.row + delta_row

        if delta_col > 0:
            if new_col + pushed.column_span - 1 > self.grid.columns:
                new_col = pusher.column - pushed.column_span
        elif delta_col < 0:
            if new_col < 1:
                new_col = pusher.column + pusher.column_span
        elif delta_row > 0:
            if new_row + pushed.row_span - 1 > self.grid.rows:
                new_row = pusher.row - pushed.row_span
        elif delta_row < 0:
            if new_row < 1:
                new_row = pusher.row + pusher.row_span

        return self.grid.clamp_anchor(pushed, new_col, new_row)

    def _try_swap(self, item: Item, other: Item, checkpoint: Checkpoint) -> bool:
        """Strategy (b): exchange anchors with an equal-span collider."""
        item_anchor = item.anchor
        other_anchor = other.anchor

        item.column, item.row = other_anchor
        other.column, other.row = item_anchor

        if (not self.collisions.has_collision(item, item.column, item.row) and
                not self.collisions.has_collision(other, other.column, other.row)):
            return True

        logger.debug("Swap %s <-> %s rejected", item.item_id, other.item_id)
        self.grid.restore(checkpoint)
        return False

    def _try_complex_swap(self, item: Item, other: Item, checkpoint: Checkpoint) -> bool:
        """
        Strategy (c): take a different-span collider's anchor and relocate it.

        The collider first tries one cell against the mover's direction of
        travel, then the nearest free anchor around where it stood.
        """
        origin_col, origin_row = checkpoint[item.item_id]
        other_origin = other.anchor

        item.column, item.row = other_origin

        travel_col = _sign(item.column - origin_col)
        travel_row = _sign(item.row - origin_row)

        new_anchor: Optional[Cell] = None
        if travel_col != 0 or travel_row != 0:
            candidate = self.grid.clamp_anchor(other, other.column - travel_col,
                                               other.row - travel_row)
            if not self.collisions.has_collision(other, *candidate):
                new_anchor = candidate

        if new_anchor is None:
            new_anchor = self.nearest_free_cell(other, *other_origin)

        if new_anchor is not None:
            other.column, other.row = new_anchor
            if (not self.collisions.has_collision(item, item.column, item.row) and
                    not self.collisions.has_collision(other, other.column, other.row)):
                return True

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "Complex swap %s <-> %s rejected (collider anchor=%s)",
                item.item_id,
                other.item_id,
                new_anchor,
            )
        self.grid.restore(checkpoint)
        return False

    def _try_fallback(self, item: Item, col: int, row: int,
                      checkpoint: Checkpoint, report: PlacementReport) -> PlacementOutcome:
        """Strategy (d): move only the item, to the free anchor nearest the target."""
        self.grid.restore(checkpoint)
        cell = self.nearest_free_cell(item, col, row)

        if cell is None:
            self.grid.restore(checkpoint)
            return self._finish(report, checkpoint, PlacementOutcome.FAILED, None)

        # The search ignores the item itself, so cell may be its current anchor
        item.column, item.row = cell
        return self._finish(report, checkpoint, PlacementOutcome.SUCCESS,
                            ResolutionStrategy.FALLBACK)

    # --- Helpers ---

    def _first_fit(self, item: Item) -> Optional[Cell]:
        """Row-major scan for the first anchor where the full span fits."""
        for row in range(1, self.grid.rows + 1):
            for col in range(1, self.grid.columns + 1):
                if not self.collisions.has_collision(item, col, row):
                    return (col, row)
        return None

    def _resize(self, item: Item, delta: int, span_attr: str,
                start: int, limit: int) -> PlacementOutcome:
        """Apply a span change speculatively and keep it only if nothing collides."""
        self._require_member(item)

        current = getattr(item, span_attr)
        candidate = max(1, min(current + delta, limit))

        if candidate == current:
            return PlacementOutcome.NO_MOVEMENT

        if start + candidate - 1 > limit:
            if logger.isEnabledFor(logging.DEBUG):
                logger.debug(
                    "Resize %s %s=%d rejected: far edge past grid boundary",
                    item.item_id,
                    span_attr,
                    candidate,
                )
            return PlacementOutcome.FAILED

        setattr(item, span_attr, candidate)
        if self.collisions.has_collision(item, item.column, item.row):
            setattr(item, span_attr, current)
            if logger.isEnabledFor(logging.DEBUG):
                logger.debug(
                    "Resize %s %s=%d rejected: collision",
                    item.item_id,
                    span_attr,
                    candidate,
                )
            return PlacementOutcome.FAILED

        return PlacementOutcome.SUCCESS

    def _require_member(self, item: Item):
        if self.grid.get_item(item.item_id) is not item:
            raise ValueError(f"Item {item.item_id} is not on this grid")

    def _finish(self, report: PlacementReport, checkpoint: Checkpoint,
                outcome: PlacementOutcome,
                strategy: Optional[ResolutionStrategy]) -> PlacementOutcome:
        report.outcome = outcome
        report.strategy = strategy
        report.moved_ids = self.grid.moved_since(checkpoint)

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "Place %s done: outcome=%s strategy=%s moved=%s",
                report.item_id,
                outcome.value,
                strategy.value if strategy else None,
                report.moved_ids,
            )
        return outcome
