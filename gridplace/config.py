"""
Editor Configuration

Loads grid dimensions and engine tunables from a YAML file so shells can
change them without modifying code. Defaults live in grid_defaults.yaml next
to this module; a user file may override any subset of keys.
"""

import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from .grid.model import Grid
from .placement.drag import DEFAULT_DEAD_ZONE
from .placement.engine import PlacementConfig

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent / "grid_defaults.yaml"

REQUIRED_SECTIONS = ("grid", "placement", "drag", "session")


@dataclass
class GridConfig:
    """Grid dimensions and cell geometry."""
    columns: int = 6
    rows: int = 6
    cell_size: int = 60  # px
    gap: int = 5  # px

    @property
    def cell_pitch(self) -> int:
        """Distance between neighbouring cell origins in pixels."""
        return self.cell_size + self.gap

    def build_grid(self) -> Grid:
        """Create an empty grid with these dimensions."""
        return Grid(columns=self.columns, rows=self.rows, cell_pitch=self.cell_pitch)


@dataclass
class EditorConfig:
    """Everything an editing session needs to configure itself."""
    grid: GridConfig = field(default_factory=GridConfig)
    placement: PlacementConfig = field(default_factory=PlacementConfig)

    # Drag quantization
    dead_zone: int = DEFAULT_DEAD_ZONE  # px

    # Undo history
    undo_limit: int = 50


def _build_section(cls, values: Dict[str, Any], section: str):
    """Instantiate a config dataclass, rejecting keys it does not define."""
    if not isinstance(values, dict):
        raise ValueError(f"Configuration section '{section}' must be a mapping")

    known = {f.name for f in fields(cls)}
    unknown = sorted(set(values) - known)
    if unknown:
        raise ValueError(f"Unknown keys in section '{section}': {unknown}")

    return cls(**values)


def _read_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    # Security: Check for symlinks to prevent reading unintended files
    if path.is_symlink():
        raise ValueError(f"Configuration file cannot be a symlink: {path}")

    with open(path, 'r') as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError(f"Configuration file must contain a mapping: {path}")
    return data


def load_config(config_path: Optional[Union[str, Path]] = None) -> EditorConfig:
    """
    Load editor configuration.

    Args:
        config_path: Optional YAML file overriding the packaged defaults.
                    Only the keys it contains are overridden.

    Returns:
        EditorConfig

    Raises:
        FileNotFoundError: If a configuration file does not exist
        ValueError: If a file is a symlink, lacks a required section, or
            contains unknown keys
    """
    data = _read_yaml(DEFAULT_CONFIG_PATH)

    missing = [s for s in REQUIRED_SECTIONS if s not in data]
    if missing:
        raise ValueError(
            f"Configuration file missing required sections: {missing}"
        )

    if config_path is not None:
        overrides = _read_yaml(Path(config_path))
        unknown = sorted(set(overrides) - set(REQUIRED_SECTIONS))
        if unknown:
            raise ValueError(f"Unknown configuration sections: {unknown}")

        for section, values in overrides.items():
            if not isinstance(values, dict):
                raise ValueError(f"Configuration section '{section}' must be a mapping")
            data[section] = {**data[section], **values}
        logger.debug("Loaded configuration overrides from %s", config_path)

    grid = _build_section(GridConfig, data["grid"], "grid")
    placement = _build_section(PlacementConfig, data["placement"], "placement")

    drag = data["drag"] or {}
    session = data["session"] or {}
    config = EditorConfig(
        grid=grid,
        placement=placement,
        dead_zone=int(drag.get("dead_zone", DEFAULT_DEAD_ZONE)),
        undo_limit=int(session.get("undo_limit", 50)),
    )

    for name in ("columns", "rows", "cell_size"):
        if getattr(grid, name) < 1:
            raise ValueError(f"grid.{name} must be >= 1 (got {getattr(grid, name)})")
    if grid.gap < 0:
        raise ValueError(f"grid.gap must be >= 0 (got {grid.gap})")

    if placement.push_limit_factor < 1:
        raise ValueError(
            f"placement.push_limit_factor must be >= 1 (got {placement.push_limit_factor})"
        )
    for name in ("new_item_column_span", "new_item_row_span"):
        if getattr(placement, name) < 1:
            raise ValueError(f"placement.{name} must be >= 1 (got {getattr(placement, name)})")

    if config.dead_zone < 0:
        raise ValueError(f"drag.dead_zone must be >= 0 (got {config.dead_zone})")
    if config.undo_limit < 1:
        raise ValueError(f"session.undo_limit must be >= 1 (got {config.undo_limit})")

    return config
