"""Grid data model: the layout container and the items placed on it."""

from .model import Grid, Item, Cell, Checkpoint

__all__ = [
    "Grid",
    "Item",
    "Cell",
    "Checkpoint",
]
