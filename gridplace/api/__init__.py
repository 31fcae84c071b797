"""
GridPlace Core API

High-level API for UI shells editing a grid layout.

Modules:
- actions: Id-addressed operations (move, nudge, resize, add, remove)
- session: State management with drag lifecycle and undo/redo support
"""

from .actions import LayoutActions, ActionResult
from .session import LayoutSession, LayoutSnapshot, ItemState

__all__ = [
    "LayoutActions",
    "ActionResult",
    "LayoutSession",
    "LayoutSnapshot",
    "ItemState",
]
