"""
LP Sketch - Annotation Kernel
=============================

Document model and interaction kernel for lightning-protection markups on
PDF drawings: snapping, input constraints, auto connectors, auto spacing,
selection handles, hit testing and undo/redo.

Usage:
    from lpsketch import Document, Point, DocumentHistory
    from lpsketch.operations import place_line

    doc = Document()
    history = DocumentHistory()
    result = place_line(doc, Point(0, 0), Point(100, 0))
    if result.success:
        doc = history.commit(doc, result.data)
"""

from lpsketch.geometry import Point
from lpsketch.document import (
    Document,
    KernelError,
    Selection,
    SelectionKind,
    UnknownElementError,
)
from lpsketch.history import DocumentHistory
from lpsketch.tools import Tool

__all__ = [
    'Point',
    'Document',
    'KernelError',
    'Selection',
    'SelectionKind',
    'UnknownElementError',
    'DocumentHistory',
    'Tool',
]
