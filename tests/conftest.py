"""
Shared test fixtures for GridPlace tests.

Provides reusable grid, item, engine and session fixtures
for testing the placement core, API actions, config and CLI.
"""

import pytest
from pathlib import Path
from typing import Dict

from gridplace.grid.model import Grid, Item
from gridplace.placement.engine import PlacementEngine
from gridplace.api.session import LayoutSession


def make_grid(columns: int, rows: int, *items: Item, cell_pitch: int = 65) -> Grid:
    """Build a grid and insert items in order."""
    grid = Grid(columns=columns, rows=rows, cell_pitch=cell_pitch)
    for item in items:
        grid.add_item(item)
    return grid


def layout(grid: Grid) -> Dict[str, tuple]:
    """Anchor and span of every item, for whole-layout comparisons."""
    return {
        item.item_id: (item.column, item.row, item.column_span, item.row_span)
        for item in grid
    }


@pytest.fixture
def build_grid():
    """Factory fixture: build_grid(columns, rows, *items)."""
    return make_grid


@pytest.fixture
def snapshot_layout():
    """Factory fixture returning {id: (column, row, column_span, row_span)}."""
    return layout


@pytest.fixture
def empty_grid() -> Grid:
    """An empty 4x4 grid."""
    return Grid(columns=4, rows=4)


@pytest.fixture
def pair_grid() -> Grid:
    """A 4x4 grid with two adjacent 1x1 items on the first row."""
    return make_grid(
        4, 4,
        Item(item_id="A", column=1, row=1),
        Item(item_id="B", column=2, row=1),
    )


@pytest.fixture
def dashboard_grid() -> Grid:
    """A 6x6 dashboard with widgets of mixed sizes."""
    return make_grid(
        6, 6,
        Item(item_id="chart", column=1, row=1, column_span=3, row_span=2),
        Item(item_id="clock", column=4, row=1, column_span=1, row_span=1),
        Item(item_id="notes", column=5, row=1, column_span=2, row_span=2),
        Item(item_id="feed", column=1, row=3, column_span=2, row_span=3),
        Item(item_id="weather", column=3, row=3, column_span=2, row_span=2),
    )


@pytest.fixture
def engine(pair_grid) -> PlacementEngine:
    """A placement engine over the pair grid."""
    return PlacementEngine(pair_grid)


@pytest.fixture
def session(dashboard_grid) -> LayoutSession:
    """An editing session over the dashboard grid."""
    return LayoutSession(dashboard_grid)


@pytest.fixture
def scenario_file(tmp_path) -> Path:
    """A small replay scenario on disk."""
    path = tmp_path / "scenario.yaml"
    path.write_text(
        "grid:\n"
        "  columns: 4\n"
        "  rows: 4\n"
        "items:\n"
        "  - {id: A, column: 1, row: 1}\n"
        "  - {id: B, column: 2, row: 1}\n"
        "steps:\n"
        "  - {op: place, item: A, column: 2, row: 1}\n"
        "  - {op: resize, item: B, columns: 1}\n"
        "  - {op: undo}\n"
        "  - {op: add, id: N, column_span: 2, row_span: 2}\n"
    )
    return path
