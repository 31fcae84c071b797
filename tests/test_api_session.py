"""
Tests for the GridPlace Session API.

Tests session state management, drag lifecycle, undo/redo, and dirty tracking.
"""

import pytest

from gridplace.api.session import LayoutSession, LayoutSnapshot
from gridplace.config import EditorConfig, GridConfig
from gridplace.grid.model import Item
from gridplace.placement.drag import DragIdle, Dragging
from gridplace.placement.engine import PlacementOutcome


class TestSessionBasics:
    """Test basic session properties."""

    def test_default_grid_from_config(self):
        """Without a grid the session builds one from its config."""
        session = LayoutSession(config=EditorConfig(grid=GridConfig(columns=8, rows=3)))
        assert (session.grid.columns, session.grid.rows) == (8, 3)
        assert session.grid.cell_pitch == 65

    def test_dirty_initially_false(self, session):
        """New session should not be dirty."""
        assert session.is_dirty is False
        assert session.dirty_items == []

    def test_initial_snapshot(self, session):
        """The initial layout is on the undo stack but cannot be undone."""
        assert len(session._undo_stack) == 1
        assert session.undo() is False

    def test_stats(self, session):
        stats = session.get_stats()
        assert stats["items"] == 5
        assert stats["undo_available"] is False
        assert stats["dragging"] is False


class TestOperations:
    """Test layout operations through the session."""

    def test_move_marks_dirty(self, session):
        """Successful moves mark the moved items dirty."""
        result = session.move_to("clock", 4, 6)

        assert result.success is True
        assert session.is_dirty is True
        assert "clock" in session.dirty_items

    def test_failed_move_records_nothing(self, session):
        """No-op moves do not create undo steps."""
        session.move_to("clock", 4, 1)

        assert session.is_dirty is False
        assert len(session._undo_stack) == 1

    def test_clear_dirty(self, session):
        session.move_by("clock", 0, 5)
        session.clear_dirty()

        assert session.is_dirty is False
        assert session.dirty_items == []

    def test_add_selects_new_item(self, session):
        result = session.add_item(column_span=1, row_span=1)

        assert result.success is True
        assert session.selected_id == result.modified_ids[0]

    def test_remove_clears_selection(self, session):
        session.select("clock")
        session.remove_item("clock")

        assert session.selected_item is None

    def test_reset(self, session):
        result = session.reset()

        assert result.success is True
        assert len(session.grid) == 0


class TestListeners:
    """Test change notification."""

    def test_listener_called_on_success(self, session):
        calls = []
        session.add_listener(calls.append)

        session.move_to("clock", 4, 6)

        assert calls == [session.grid]

    def test_listener_not_called_on_no_movement(self, session):
        calls = []
        session.add_listener(calls.append)

        session.move_to("clock", 4, 1)

        assert calls == []

    def test_remove_listener(self, session):
        calls = []
        session.add_listener(calls.append)
        session.remove_listener(calls.append)

        session.move_to("clock", 4, 6)

        assert calls == []


class TestSelection:
    """Test selection handling."""

    def test_select_existing(self, session):
        assert session.select("notes") is True
        assert session.selected_item.item_id == "notes"

    def test_select_missing(self, session):
        assert session.select("NONEXISTENT") is False
        assert session.selected_item is None

    def test_deselect(self, session):
        session.select("notes")
        session.deselect()
        assert session.selected_id is None


class TestClickAndKeys:
    """Test cell clicks and selected-item shortcuts."""

    def test_click_item_selects_it(self, session):
        """Clicking any cell of an item selects that item."""
        result = session.click_cell(2, 2)

        assert result.success is True
        assert session.selected_id == "chart"
        assert session.is_dirty is False

    def test_click_empty_cell_moves_selection(self, session):
        """With a selection, clicking an empty cell moves the selected item there."""
        session.select("clock")
        result = session.click_cell(5, 6)

        assert result.success is True
        assert session.grid.get_item("clock").anchor == (5, 6)
        assert session.get_stats()["undo_available"] is True

    def test_click_empty_cell_without_selection(self, session):
        result = session.click_cell(6, 6)

        assert result.success is False
        assert "nothing selected" in result.message.lower()

    def test_click_ignored_while_dragging(self, session):
        session.begin_drag("clock", (300, 40))
        session.select("notes")

        result = session.click_cell(6, 6)

        assert result.success is False
        assert session.grid.get_item("notes").anchor == (5, 1)

    def test_remove_selected(self, session):
        """Delete removes the selected item and clears the selection."""
        session.click_cell(4, 1)
        result = session.remove_selected()

        assert result.success is True
        assert "clock" not in session.grid
        assert session.selected_id is None

    def test_remove_selected_without_selection(self, session):
        assert session.remove_selected().success is False
        assert len(session.grid) == 5


class TestFallbackInSession:
    """Test sessions around moves that resolve without moving anything."""

    def test_unmoved_success_adds_no_undo_step(self, build_grid):
        """A fallback onto the item's own anchor leaves history untouched."""
        grid = build_grid(
            3, 2,
            Item(item_id="A", column=1, row=1),
            Item(item_id="B", column=2, row=1, column_span=2, row_span=2),
            Item(item_id="C", column=1, row=2),
        )
        session = LayoutSession(grid)
        calls = []
        session.add_listener(calls.append)

        result = session.move_to("A", 3, 2)

        assert result.outcome == PlacementOutcome.SUCCESS
        assert result.modified_ids == []
        assert len(session._undo_stack) == 1
        assert session.is_dirty is False
        assert calls == [grid]


class TestDrag:
    """Test the pointer drag lifecycle."""

    def test_begin_drag(self, session):
        """Starting a drag records the item's anchor and selects it."""
        assert session.begin_drag("clock", (300, 40)) is True

        assert isinstance(session.drag_state, Dragging)
        assert session.drag_state.start_cell == (4, 1)
        assert session.selected_id == "clock"

    def test_begin_drag_missing_item(self, session):
        assert session.begin_drag("NONEXISTENT", (0, 0)) is False
        assert isinstance(session.drag_state, DragIdle)

    def test_update_outside_drag(self, session):
        assert session.update_drag((100, 100)) is None

    def test_drag_to_free_cell(self, session):
        """Dragging five pitches down drops the item there."""
        session.begin_drag("clock", (300, 40))
        target = session.update_drag((300, 40 + 5 * 65))

        assert target.final_drop_cell == (4, 6)
        assert session.drop_preview_cells() == {(4, 6)}

        result = session.end_drag()

        assert result.success is True
        assert session.grid.get_item("clock").anchor == (4, 6)
        assert isinstance(session.drag_state, DragIdle)

    def test_dead_zone_keeps_last_candidate(self, session):
        """Returning inside the dead zone keeps the previous candidate."""
        session.begin_drag("clock", (300, 40))
        session.update_drag((300, 40 + 5 * 65))

        assert session.update_drag((302, 41)) is None
        assert session.drag_state.final_drop_cell == (4, 6)

    def test_end_drag_without_candidate(self, session):
        """A click without movement does nothing."""
        session.begin_drag("clock", (300, 40))
        result = session.end_drag((303, 42))

        assert result.outcome == PlacementOutcome.NO_MOVEMENT
        assert session.grid.get_item("clock").anchor == (4, 1)
        assert isinstance(session.drag_state, DragIdle)

    def test_end_drag_with_final_pointer(self, session):
        session.begin_drag("clock", (300, 40))
        result = session.end_drag((300, 40 + 4 * 65))

        assert result.success is True
        assert session.grid.get_item("clock").anchor == (4, 5)

    def test_cancel_drag(self, session):
        session.begin_drag("clock", (300, 40))
        session.update_drag((300, 400))
        session.cancel_drag()

        assert isinstance(session.drag_state, DragIdle)
        assert session.drop_preview_cells() == set()
        assert session.grid.get_item("clock").anchor == (4, 1)

    def test_end_drag_when_idle(self, session):
        result = session.end_drag()
        assert result.success is False
        assert result.outcome == PlacementOutcome.NO_MOVEMENT


class TestUndoRedo:
    """Test undo/redo functionality."""

    def test_undo_restores_position(self, session):
        """Undo should restore previous position."""
        session.move_to("clock", 4, 6)

        assert session.undo() is True
        assert session.grid.get_item("clock").anchor == (4, 1)

    def test_undo_restores_pushed_items(self, build_grid):
        """Undo restores every item touched by a push."""
        grid = build_grid(4, 4, Item(item_id="A"), Item(item_id="B", column=2))
        session = LayoutSession(grid)
        session.move_to("A", 2, 1)

        session.undo()

        assert grid.get_item("A").anchor == (1, 1)
        assert grid.get_item("B").anchor == (2, 1)

    def test_redo(self, session):
        """Redo reapplies the undone change."""
        session.move_to("clock", 4, 6)
        session.undo()

        assert session.redo() is True
        assert session.grid.get_item("clock").anchor == (4, 6)
        assert session.redo() is False

    def test_new_action_clears_redo(self, session):
        session.move_to("clock", 4, 6)
        session.undo()
        session.move_to("clock", 5, 6)

        assert session.redo() is False

    def test_undo_add_and_remove(self, session):
        """Membership changes are undoable."""
        session.remove_item("clock")
        assert "clock" not in session.grid

        session.undo()
        assert session.grid.get_item("clock").anchor == (4, 1)
        assert session.grid.is_valid()

        result = session.add_item(column_span=1, row_span=1)
        new_id = result.modified_ids[0]
        session.undo()
        assert new_id not in session.grid

        session.redo()
        assert new_id in session.grid

    def test_undo_restores_spans(self, session):
        session.resize("clock", row_delta=1)
        session.undo()

        assert session.grid.get_item("clock").row_span == 1

    def test_undo_limit(self, build_grid):
        """History is capped by the configured limit."""
        grid = build_grid(6, 1, Item(item_id="A"))
        session = LayoutSession(grid, EditorConfig(undo_limit=3))

        for col in (2, 3, 4, 5, 6):
            session.move_to("A", col, 1)

        assert len(session._undo_stack) == 3
        assert session.undo() is True
        assert session.undo() is True
        assert session.undo() is False
        assert grid.get_item("A").anchor == (4, 1)

    def test_undo_notifies_listeners(self, session):
        calls = []
        session.move_to("clock", 4, 6)
        session.add_listener(calls.append)

        session.undo()

        assert len(calls) == 1

    def test_checkpoint_clears_redo(self, session):
        """Checkpoint should clear redo stack."""
        session._redo_stack.append(LayoutSnapshot(description="test"))

        session.checkpoint("Manual edit")

        assert len(session._redo_stack) == 0
        assert session._undo_stack[-1].description == "Manual edit"
