#!/usr/bin/env python3
"""
GridPlace CLI

Command-line shell for replaying layout scenarios through the placement
engine and printing the resulting grid.

Usage:
    gridplace replay <scenario.yaml> [options]
    gridplace show <scenario.yaml> [options]

A scenario file describes a starting layout and a list of steps:

    grid: {columns: 4, rows: 3}
    items:
      - {id: A, column: 1, row: 1, column_span: 2}
    steps:
      - {op: place, item: A, column: 3, row: 1}
      - {op: drag, item: A, from: [0, 0], to: [-130, 70]}
      - {op: undo}
"""

import argparse
import logging
import sys
from dataclasses import fields, replace
from pathlib import Path
from string import ascii_uppercase
from typing import Any, Dict, List, Tuple

import yaml

from .api.actions import ActionResult
from .api.session import LayoutSession
from .config import GridConfig, load_config
from .grid.model import Grid, Item

STEP_OPS = ("place", "move_by", "drag", "resize", "add", "remove", "undo", "redo", "reset")

EMPTY_CELL = "."


def load_scenario(path: Path, config_path=None) -> Tuple[LayoutSession, List[Dict[str, Any]]]:
    """
    Build a session from a scenario file.

    Args:
        path: Scenario YAML file
        config_path: Optional configuration override file

    Returns:
        Tuple of (session, steps)

    Raises:
        FileNotFoundError: If the scenario file does not exist
        ValueError: If the scenario is malformed or its items overlap
    """
    if not path.exists():
        raise FileNotFoundError(f"Scenario file not found: {path}")

    with open(path, 'r') as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Scenario must be a mapping: {path}")

    config = load_config(config_path)
    grid_overrides = data.get("grid") or {}
    unknown = sorted(set(grid_overrides) - {f.name for f in fields(GridConfig)})
    if unknown:
        raise ValueError(f"Unknown keys in scenario grid: {unknown}")
    if grid_overrides:
        config.grid = replace(config.grid, **grid_overrides)

    grid = config.grid.build_grid()
    for index, entry in enumerate(data.get("items") or [], 1):
        if not isinstance(entry, dict):
            raise ValueError(f"Item {index}: must be a mapping with an id")
        grid.add_item(Item(
            item_id=str(entry["id"]),
            column=int(entry.get("column", 1)),
            row=int(entry.get("row", 1)),
            column_span=int(entry.get("column_span", 1)),
            row_span=int(entry.get("row_span", 1)),
            payload=entry.get("payload"),
        ))

    steps = data.get("steps") or []
    for index, step in enumerate(steps, 1):
        if not isinstance(step, dict) or step.get("op") not in STEP_OPS:
            raise ValueError(f"Step {index}: op must be one of {', '.join(STEP_OPS)}")

    return LayoutSession(grid, config), steps


def run_step(session: LayoutSession, step: Dict[str, Any]) -> ActionResult:
    """Apply one scenario step to the session."""
    op = step["op"]
    item_id = str(step.get("item", ""))

    if op == "place":
        return session.move_to(item_id, int(step["column"]), int(step["row"]))

    if op == "move_by":
        return session.move_by(item_id, int(step.get("columns", 0)), int(step.get("rows", 0)))

    if op == "drag":
        start = tuple(step.get("from", (0, 0)))
        if not session.begin_drag(item_id, start):
            return ActionResult(False, f"Item {item_id} not found")
        for pointer in step.get("path") or []:
            session.update_drag(tuple(pointer))
        return session.end_drag(tuple(step["to"]))

    if op == "resize":
        return session.resize(item_id, int(step.get("columns", 0)), int(step.get("rows", 0)))

    if op == "add":
        if "id" in step:
            item = Item(
                item_id=str(step["id"]),
                column_span=int(step.get("column_span", session.config.placement.new_item_column_span)),
                row_span=int(step.get("row_span", session.config.placement.new_item_row_span)),
            )
            return session.add_item(item)
        return session.add_item(column_span=step.get("column_span"), row_span=step.get("row_span"))

    if op == "remove":
        return session.remove_item(item_id)

    if op == "undo":
        done = session.undo()
        return ActionResult(done, "Undone" if done else "Nothing to undo")

    if op == "redo":
        done = session.redo()
        return ActionResult(done, "Redone" if done else "Nothing to redo")

    return session.reset()


def assign_labels(grid: Grid) -> Dict[str, str]:
    """Give each item a one-character label for the occupancy map."""
    labels = {}
    for index, item in enumerate(grid):
        labels[item.item_id] = ascii_uppercase[index] if index < len(ascii_uppercase) else "#"
    return labels


def render_map(grid: Grid) -> str:
    """Render the grid as rows of item labels."""
    labels = assign_labels(grid)
    cells = [[EMPTY_CELL] * grid.columns for _ in range(grid.rows)]
    for item in grid:
        for col, row in item.footprint():
            cells[row - 1][col - 1] = labels[item.item_id]
    return "\n".join("  " + " ".join(line) for line in cells)


def print_layout(grid: Grid, show_map: bool = True):
    labels = assign_labels(grid)
    print(f"\nGrid {grid.columns}x{grid.rows}, {len(grid)} items")
    for item in grid:
        print(f"  {labels[item.item_id]} {item.item_id:<12} "
              f"at ({item.column}, {item.row}) size {item.column_span}x{item.row_span}")
    if show_map:
        print()
        print(render_map(grid))


def cmd_replay(args):
    """Replay a scenario and report each step."""
    session, steps = load_scenario(Path(args.scenario), args.config)

    print(f"Replaying {len(steps)} steps from {args.scenario}")
    for index, step in enumerate(steps, 1):
        result = run_step(session, step)
        status = "ok" if result.success else result.outcome.value
        print(f"  [{index}] {step['op']:<8} {status:<12} {result.message}")

    print_layout(session.grid, show_map=not args.no_map)

    if not session.grid.is_valid():
        print("Error: layout is invalid after replay")
        return 1
    return 0


def cmd_show(args):
    """Print a scenario's starting layout."""
    session, steps = load_scenario(Path(args.scenario), args.config)
    print_layout(session.grid, show_map=not args.no_map)
    print(f"\n{len(steps)} steps")
    return 0


def main(argv=None):
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="GridPlace - Grid widget placement engine",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  gridplace show dashboard.yaml
  gridplace replay dashboard.yaml -v
  gridplace replay dashboard.yaml --config wide_grid.yaml --no-map
        """,
    )

    parser.add_argument('--version', action='version', version='gridplace 0.1.0')

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    # Replay command
    replay_parser = subparsers.add_parser('replay', help='Replay scenario steps')
    replay_parser.add_argument('scenario', help='Path to scenario YAML file')
    replay_parser.add_argument('--config', help='Configuration override file')
    replay_parser.add_argument('--no-map', action='store_true', help="Don't print the occupancy map")
    replay_parser.add_argument('-v', '--verbose', action='store_true', help='Verbose output')

    # Show command
    show_parser = subparsers.add_parser('show', help='Show the starting layout')
    show_parser.add_argument('scenario', help='Path to scenario YAML file')
    show_parser.add_argument('--config', help='Configuration override file')
    show_parser.add_argument('--no-map', action='store_true', help="Don't print the occupancy map")

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    if getattr(args, 'verbose', False):
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
            datefmt="%H:%M:%S",
        )

    # Dispatch command
    commands = {
        'replay': cmd_replay,
        'show': cmd_show,
    }

    try:
        return commands[args.command](args)
    except (FileNotFoundError, ValueError, KeyError, yaml.YAMLError) as e:
        print(f"Error: {e}")
        return 1


if __name__ == '__main__':
    sys.exit(main())
