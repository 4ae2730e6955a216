"""
LP Sketch - Document Operations
===============================

Document-mutating operations with structured results.

Usage:
    from lpsketch.operations import place_line, ResultStatus

    result = place_line(doc, Point(0, 0), Point(100, 0))
    if result.success:
        doc = history.commit(doc, result.data)
"""

from .base import OperationResult, ResultStatus
from .placement import place_line, place_arc, place_curve
from .auto_spacing import hit_test_arc_for_auto_spacing, place_linear_auto_spacing, place_arc_auto_spacing
from .move import move_selection_by_delta, move_selections_in_place, delete_selection
from .drag import DragGesture, DragKind

__all__ = [
    'OperationResult',
    'ResultStatus',
    'place_line',
    'place_arc',
    'place_curve',
    'hit_test_arc_for_auto_spacing',
    'place_linear_auto_spacing',
    'place_arc_auto_spacing',
    'move_selection_by_delta',
    'move_selections_in_place',
    'delete_selection',
    'DragGesture',
    'DragKind',
]
