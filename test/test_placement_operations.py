"""
Conductor Placement Tests

Validation messages, active material/class, page assignment and the
auto-connector hook on placement.
"""

import pytest

from lpsketch.document import MaterialColor, SymbolType, WireClass
from lpsketch.geometry import Point, quadratic_point
from lpsketch.operations import ResultStatus, place_arc, place_curve, place_line


class TestPlaceLine:
    def test_places_with_active_settings(self, empty_doc):
        empty_doc.settings.active_color = MaterialColor.BLUE
        empty_doc.settings.active_class = WireClass.CLASS2
        empty_doc.view.current_page = 3

        result = place_line(empty_doc, Point(0, 0), Point(10, 0), element_id="new")
        assert result.success
        line = result.data.lines[0]
        assert line.id == "new"
        assert line.color == MaterialColor.BLUE
        assert line.wire_class == WireClass.CLASS2
        assert line.page == 3

    def test_input_document_untouched(self, empty_doc):
        place_line(empty_doc, Point(0, 0), Point(10, 0))
        assert empty_doc.lines == []

    def test_zero_length_is_no_effect(self, empty_doc):
        result = place_line(empty_doc, Point(1, 1), Point(1, 1.001))
        assert result.status == ResultStatus.NO_EFFECT
        assert result.data is None

    def test_third_line_adds_tee_connector(self, empty_doc):
        doc = place_line(empty_doc, Point(0, 0), Point(100, 0)).data
        doc = place_line(doc, Point(100, 0), Point(100, 100)).data
        assert doc.symbols == []

        doc = place_line(doc, Point(100, 0), Point(200, 0)).data
        assert [s.symbol_type for s in doc.symbols] == [SymbolType.CABLE_TO_CABLE_CONNECTION]
        assert doc.symbols[0].auto_connector

    def test_connectors_off(self, empty_doc):
        empty_doc.settings.auto_connectors_enabled = False
        doc = place_line(empty_doc, Point(0, 50), Point(100, 50)).data
        doc = place_line(doc, Point(50, 0), Point(50, 100)).data
        assert doc.symbols == []


class TestPlaceArc:
    def test_valid_arc(self, empty_doc):
        result = place_arc(empty_doc, Point(0, 0), Point(100, 0), Point(50, 50))
        assert result.success
        arc = result.data.arcs[0]
        assert arc.through == Point(50, 50)
        assert arc.end == Point(100, 0)

    def test_coincident_endpoints(self, empty_doc):
        result = place_arc(empty_doc, Point(0, 0), Point(0, 0), Point(50, 50))
        assert result.is_error
        assert result.message == "Arc endpoint 2 must be different from endpoint 1."

    def test_pull_point_on_endpoint(self, empty_doc):
        result = place_arc(empty_doc, Point(0, 0), Point(100, 0), Point(100, 0))
        assert result.message == "Arc pull point must be different from both endpoints."

    def test_collinear(self, empty_doc, log_messages):
        result = place_arc(empty_doc, Point(0, 0), Point(100, 0), Point(50, 0))
        assert result.is_error
        assert result.message == "Arc pull point cannot be collinear with endpoints."
        assert any("collinear" in m for m in log_messages)


class TestPlaceCurve:
    def test_stores_control_point(self, empty_doc):
        result = place_curve(empty_doc, Point(0, 0), Point(50, 50), Point(100, 0))
        curve = result.data.curves[0]
        assert curve.through == Point(50, 100)
        mid = quadratic_point(curve.start, curve.through, curve.end, 0.5)
        assert mid.y == pytest.approx(50.0)

    def test_rejects_repeated_click(self, empty_doc):
        assert place_curve(empty_doc, Point(0, 0), Point(0, 0), Point(100, 0)).is_error
        assert place_curve(empty_doc, Point(0, 0), Point(50, 50), Point(50, 50)).is_error
