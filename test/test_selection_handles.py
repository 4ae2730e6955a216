"""
Selection Handle Tests

Handle enumeration, hit testing, delta editing against a source document
and fixed anchors for angle snapping.
"""

import pytest

from lpsketch.document import Arrow, Selection, SelectionKind, Symbol, SymbolType
from lpsketch.geometry import Point, quadratic_point
from lpsketch.selection_handles import (
    SelectionHandleTarget,
    fixed_anchor_for_handle,
    handles_for_selection,
    hit_test_selected_handle,
    move_selection_handle_by_delta,
    selection_handle_point,
)
from lpsketch.tools import HandleKind, HandleRole
from conftest import make_arc, make_curve, make_line


class TestHandleTarget:
    def test_role_must_match_kind(self):
        with pytest.raises(ValueError):
            SelectionHandleTarget(HandleKind.LINE, "x", HandleRole.THROUGH)

    def test_selection_of_direction_handle_is_symbol(self):
        target = SelectionHandleTarget(HandleKind.SYMBOL_DIRECTION, "s1", HandleRole.DIRECTION)
        assert target.selection == Selection(SelectionKind.SYMBOL, "s1")


class TestHandles:
    def test_line_handles(self, empty_doc):
        empty_doc.lines.append(make_line(0, 0, 100, 0, id="l1"))
        handles = handles_for_selection(empty_doc, Selection(SelectionKind.LINE, "l1"))
        assert [(t.role, p) for t, p in handles] == [
            (HandleRole.START, Point(0, 0)),
            (HandleRole.END, Point(100, 0)),
        ]

    def test_curve_through_handle_is_visual_midpoint(self, empty_doc):
        empty_doc.curves.append(make_curve((0, 0), (50, 100), (100, 0), id="c1"))
        target = SelectionHandleTarget(HandleKind.CURVE, "c1", HandleRole.THROUGH)
        assert selection_handle_point(empty_doc, target) == Point(50, 50)

    def test_non_directional_symbol_has_no_handle(self, empty_doc):
        empty_doc.symbols.append(Symbol(symbol_type=SymbolType.BOND, id="s1"))
        assert handles_for_selection(empty_doc, Selection(SelectionKind.SYMBOL, "s1")) == []

    def test_direction_handle_scales_with_zoom(self, empty_doc):
        empty_doc.symbols.append(Symbol(symbol_type=SymbolType.GROUND_ROD, position=Point(10, 10),
                                        direction_deg=0.0, id="s1"))
        empty_doc.view.zoom = 2.0
        [(target, point)] = handles_for_selection(empty_doc, Selection(SelectionKind.SYMBOL, "s1"))
        assert target.role == HandleRole.DIRECTION
        assert point.x == pytest.approx(27.0)
        assert point.y == pytest.approx(10.0)

    def test_hit_picks_closest_handle(self, empty_doc):
        empty_doc.lines.append(make_line(0, 0, 10, 0, id="l1"))
        selected = Selection(SelectionKind.LINE, "l1")
        hit = hit_test_selected_handle(Point(8, 1), selected, empty_doc)
        assert hit.handle.role == HandleRole.END
        assert hit.selection == selected

    def test_hit_outside_tolerance(self, empty_doc):
        empty_doc.lines.append(make_line(0, 0, 100, 0, id="l1"))
        assert hit_test_selected_handle(Point(50, 0), Selection(SelectionKind.LINE, "l1"), empty_doc) is None

    def test_no_selection_no_handles(self, empty_doc):
        assert hit_test_selected_handle(Point(0, 0), None, empty_doc) is None


class TestHandleEditing:
    """Deltas are applied to the source geometry, never accumulated."""

    def test_line_start_drag(self, empty_doc):
        empty_doc.lines.append(make_line(220, 220, 420, 220, id="l1"))
        draft = empty_doc.clone()
        target = SelectionHandleTarget(HandleKind.LINE, "l1", HandleRole.START)

        assert move_selection_handle_by_delta(draft, empty_doc, target, Point(0, 100))
        assert draft.lines[0].start == Point(220, 320)
        assert draft.lines[0].end == Point(420, 220)

    def test_repeated_moves_do_not_drift(self, empty_doc):
        empty_doc.lines.append(make_line(0, 0, 100, 0, id="l1"))
        draft = empty_doc.clone()
        target = SelectionHandleTarget(HandleKind.LINE, "l1", HandleRole.END)

        for delta in (Point(5, 5), Point(10, 10), Point(3, 0)):
            move_selection_handle_by_delta(draft, empty_doc, target, delta)
        assert draft.lines[0].end == Point(103, 0)

    def test_curve_through_drag_rederives_control(self, empty_doc):
        empty_doc.curves.append(make_curve((0, 0), (50, 100), (100, 0), id="c1"))
        draft = empty_doc.clone()
        target = SelectionHandleTarget(HandleKind.CURVE, "c1", HandleRole.THROUGH)

        move_selection_handle_by_delta(draft, empty_doc, target, Point(0, 10))
        curve = draft.curves[0]
        mid = quadratic_point(curve.start, curve.through, curve.end, 0.5)
        assert mid.x == pytest.approx(50.0)
        assert mid.y == pytest.approx(60.0)

    def test_curve_endpoint_drag_keeps_visual_midpoint(self, empty_doc):
        empty_doc.curves.append(make_curve((0, 0), (50, 100), (100, 0), id="c1"))
        draft = empty_doc.clone()
        target = SelectionHandleTarget(HandleKind.CURVE, "c1", HandleRole.END)

        move_selection_handle_by_delta(draft, empty_doc, target, Point(20, 0))
        curve = draft.curves[0]
        assert curve.end == Point(120, 0)
        mid = quadratic_point(curve.start, curve.through, curve.end, 0.5)
        assert mid.x == pytest.approx(50.0)
        assert mid.y == pytest.approx(50.0)

    def test_arc_through_drag(self, empty_doc):
        empty_doc.arcs.append(make_arc((0, 0), (50, 50), (100, 0), id="a1"))
        draft = empty_doc.clone()
        target = SelectionHandleTarget(HandleKind.ARC, "a1", HandleRole.THROUGH)
        move_selection_handle_by_delta(draft, empty_doc, target, Point(0, -10))
        assert draft.arcs[0].through == Point(50, 40)

    def test_direction_drag_sets_angle(self, empty_doc):
        empty_doc.symbols.append(Symbol(symbol_type=SymbolType.GROUND_ROD, position=Point(0, 0),
                                        direction_deg=0.0, id="s1"))
        draft = empty_doc.clone()
        target = SelectionHandleTarget(HandleKind.SYMBOL_DIRECTION, "s1", HandleRole.DIRECTION)
        # Handle sits at (34, 0); moving it to (0, 34) points the symbol down-screen
        move_selection_handle_by_delta(draft, empty_doc, target, Point(-34, 34))
        assert draft.symbols[0].direction_deg == pytest.approx(90.0)
        assert draft.symbols[0].position == Point(0, 0)

    def test_missing_element(self, empty_doc):
        target = SelectionHandleTarget(HandleKind.LINE, "gone", HandleRole.START)
        assert move_selection_handle_by_delta(empty_doc.clone(), empty_doc, target, Point(1, 1)) is False


class TestFixedAnchor:
    def test_line_anchor_is_other_end(self, empty_doc):
        empty_doc.lines.append(make_line(0, 0, 100, 0, id="l1"))
        start = SelectionHandleTarget(HandleKind.LINE, "l1", HandleRole.START)
        end = SelectionHandleTarget(HandleKind.LINE, "l1", HandleRole.END)
        assert fixed_anchor_for_handle(empty_doc, start) == Point(100, 0)
        assert fixed_anchor_for_handle(empty_doc, end) == Point(0, 0)

    def test_arrow_anchor(self, empty_doc):
        empty_doc.arrows.append(Arrow(tail=Point(1, 1), head=Point(9, 9), id="ar"))
        tail = SelectionHandleTarget(HandleKind.ARROW, "ar", HandleRole.TAIL)
        assert fixed_anchor_for_handle(empty_doc, tail) == Point(9, 9)

    def test_arc_has_no_anchor(self, empty_doc):
        empty_doc.arcs.append(make_arc((0, 0), (50, 50), (100, 0), id="a1"))
        target = SelectionHandleTarget(HandleKind.ARC, "a1", HandleRole.START)
        assert fixed_anchor_for_handle(empty_doc, target) is None
        assert fixed_anchor_for_handle(empty_doc, None) is None
