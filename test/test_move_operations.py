"""
Move and Delete Tests
"""

from lpsketch.document import DimensionText, Selection, SelectionKind, Symbol, SymbolType
from lpsketch.geometry import Point
from lpsketch.operations import ResultStatus, delete_selection, move_selection_by_delta, place_line
from conftest import make_arc, make_line


class TestMove:
    def test_moves_every_point_of_selection(self, empty_doc):
        empty_doc.arcs.append(make_arc((0, 0), (50, 50), (100, 0), id="a1"))
        moved = move_selection_by_delta(empty_doc, [Selection(SelectionKind.ARC, "a1")], Point(10, -5))
        arc = moved.arcs[0]
        assert (arc.start, arc.through, arc.end) == (Point(10, -5), Point(60, 45), Point(110, -5))
        assert empty_doc.arcs[0].start == Point(0, 0)

    def test_duplicate_selection_moves_once(self, empty_doc):
        empty_doc.lines.append(make_line(0, 0, 10, 0, id="l1"))
        sel = Selection(SelectionKind.LINE, "l1")
        moved = move_selection_by_delta(empty_doc, [sel, sel], Point(5, 0))
        assert moved.lines[0].start == Point(5, 0)

    def test_dimension_text_moves_label_only(self, empty_doc):
        empty_doc.dimension_texts.append(DimensionText(start=Point(0, 0), end=Point(10, 0),
                                                       position=Point(5, 5), id="d1"))
        moved = move_selection_by_delta(empty_doc, [Selection(SelectionKind.DIMENSION_TEXT, "d1")], Point(0, 10))
        dim = moved.dimension_texts[0]
        assert dim.position == Point(5, 15)
        assert dim.start == Point(0, 0)

    def test_unknown_selection_ignored(self, empty_doc):
        moved = move_selection_by_delta(empty_doc, [Selection(SelectionKind.LINE, "gone")], Point(1, 1))
        assert moved == empty_doc


class TestDelete:
    def test_delete_symbol(self, empty_doc):
        empty_doc.symbols.append(Symbol(symbol_type=SymbolType.BOND, id="s1"))
        result = delete_selection(empty_doc, [Selection(SelectionKind.SYMBOL, "s1")])
        assert result.success
        assert result.data.symbols == []
        assert len(empty_doc.symbols) == 1

    def test_nothing_to_delete(self, empty_doc):
        result = delete_selection(empty_doc, [Selection(SelectionKind.LINE, "gone")])
        assert result.status == ResultStatus.NO_TARGET

    def test_deleting_conductor_removes_its_connector(self, empty_doc):
        doc = place_line(empty_doc, Point(0, 50), Point(100, 50), element_id="h").data
        doc = place_line(doc, Point(50, 0), Point(50, 100), element_id="v").data
        assert len(doc.symbols) == 1

        result = delete_selection(doc, [Selection(SelectionKind.LINE, "v")])
        assert result.data.symbols == []
