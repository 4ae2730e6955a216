"""
Drag Gesture Tests

Moves and handle edits recompute from the pre-drag snapshot and commit one
history entry at most.
"""

import pytest

from lpsketch.document import KernelError, Selection, SelectionKind, SymbolType
from lpsketch.geometry import Point
from lpsketch.history import DocumentHistory
from lpsketch.operations import DragGesture, DragKind, ResultStatus, place_line
from lpsketch.selection_handles import SelectionHandleTarget
from lpsketch.snapper import resolve_snap_point
from lpsketch.tools import HandleKind, HandleRole
from conftest import make_line


class TestHandleDrag:
    def test_start_handle_follows_pointer(self, empty_doc):
        empty_doc.lines.append(make_line(220, 220, 420, 220, id="l1"))
        gesture = DragGesture.begin_at(empty_doc, Point(221, 221), Selection(SelectionKind.LINE, "l1"))

        assert gesture.kind == DragKind.EDIT_HANDLE
        assert gesture.handle.role == HandleRole.START
        # Gesture starts on the handle itself, not on the raw pointer
        assert gesture.start == Point(220, 220)

        current = gesture.update(Point(220, 320))
        assert current.lines[0].start == Point(220, 320)
        assert current.lines[0].end == Point(420, 220)

    def test_updates_never_accumulate(self, empty_doc):
        empty_doc.lines.append(make_line(0, 0, 100, 0, id="l1"))
        handle = SelectionHandleTarget(HandleKind.LINE, "l1", HandleRole.END)
        gesture = DragGesture.begin_handle_edit(empty_doc, handle, Point(100, 0))

        for p in (Point(110, 0), Point(150, 20), Point(120, 0)):
            current = gesture.update(p)
        assert current.lines[0].end == Point(120, 0)

    def test_snap_context(self, empty_doc):
        empty_doc.lines.append(make_line(0, 0, 100, 0, id="l1"))
        handle = SelectionHandleTarget(HandleKind.LINE, "l1", HandleRole.END)
        gesture = DragGesture.begin_handle_edit(empty_doc, handle, Point(100, 0))
        assert gesture.snap_exclusion == Selection(SelectionKind.LINE, "l1")
        assert gesture.fixed_anchor() == Point(0, 0)


class TestMoveDrag:
    def test_move_entity_under_pointer(self, empty_doc):
        empty_doc.lines.append(make_line(0, 0, 100, 0, id="l1"))
        gesture = DragGesture.begin_at(empty_doc, Point(50, 1))
        assert gesture.kind == DragKind.MOVE
        assert gesture.fixed_anchor() is None

        current = gesture.update(Point(60, 11))
        assert current.lines[0].start == Point(10, 10)

    def test_moved_entity_never_snaps_onto_itself(self, empty_doc):
        empty_doc.lines.append(make_line(0, 0, 100, 0, id="l1"))
        gesture = DragGesture.begin_move(empty_doc, Point(50, 0), [Selection(SelectionKind.LINE, "l1")])
        assert gesture.snap_exclusion == Selection(SelectionKind.LINE, "l1")

        current = gesture.update(Point(50, 30))
        # (4, 33) is within snap range of the dragged line's start at (0, 30)
        resolved = resolve_snap_point(Point(4, 33), current.visible_on_page(), gesture.snap_exclusion)
        assert not resolved.snapped
        assert resolved.point == Point(4, 33)

    def test_other_entities_still_snap_during_move(self, empty_doc):
        empty_doc.lines.append(make_line(0, 0, 100, 0, id="l1"))
        empty_doc.lines.append(make_line(0, 30, 0, 80, id="l2"))
        gesture = DragGesture.begin_move(empty_doc, Point(50, 0), [Selection(SelectionKind.LINE, "l1")])
        current = gesture.update(Point(50, 30))

        resolved = resolve_snap_point(Point(4, 33), current.visible_on_page(), gesture.snap_exclusion)
        assert resolved.snapped
        assert resolved.point == Point(0, 30)

    def test_nothing_under_pointer(self, empty_doc):
        assert DragGesture.begin_at(empty_doc, Point(50, 50)) is None

    def test_edit_handle_needs_handle(self, empty_doc):
        with pytest.raises(ValueError):
            DragGesture(DragKind.EDIT_HANDLE, empty_doc, Point(0, 0))


class TestDragCommit:
    def test_single_history_entry(self, empty_doc):
        empty_doc.lines.append(make_line(0, 0, 100, 0, id="l1"))
        history = DocumentHistory()
        gesture = DragGesture.begin_at(empty_doc, Point(50, 0))
        current = empty_doc
        for x in range(51, 60):
            current = gesture.update(Point(x, 0))

        result = gesture.finish(history, current)
        assert result.success
        assert len(history.undo_stack) == 1
        assert history.undo(result.data) == empty_doc

    def test_unchanged_drag_commits_nothing(self, empty_doc):
        empty_doc.lines.append(make_line(0, 0, 100, 0, id="l1"))
        history = DocumentHistory()
        gesture = DragGesture.begin_at(empty_doc, Point(50, 0))
        current = gesture.update(Point(50, 0))

        result = gesture.finish(history, current)
        assert result.status == ResultStatus.NO_EFFECT
        assert not history.can_undo

    def test_finish_twice(self, empty_doc):
        empty_doc.lines.append(make_line(0, 0, 100, 0, id="l1"))
        history = DocumentHistory()
        gesture = DragGesture.begin_at(empty_doc, Point(50, 0))
        current = gesture.update(Point(60, 0))
        gesture.finish(history, current)

        assert gesture.finish(history, current).status == ResultStatus.NO_EFFECT
        assert len(history.undo_stack) == 1
        with pytest.raises(KernelError):
            gesture.update(Point(70, 0))

    def test_moving_conductor_resyncs_connectors(self, empty_doc):
        doc = place_line(empty_doc, Point(0, 50), Point(100, 50), element_id="h").data
        doc = place_line(doc, Point(50, 0), Point(50, 100), element_id="v").data
        assert len(doc.symbols) == 1

        # Drag the vertical line off the horizontal one
        gesture = DragGesture.begin_move(doc, Point(50, 20), [Selection(SelectionKind.LINE, "v")])
        current = gesture.update(Point(50, 220))
        result = gesture.finish(DocumentHistory(), current)
        assert [s for s in result.data.symbols if s.symbol_type == SymbolType.MECHANICAL_CROSSRUN_CONNECTION] == []
