"""
LP Sketch - Drag Gestures
=========================

Select-tool drags: moving whole selections or editing one handle.

A gesture snapshots the document when it starts. Every pointer move rebuilds
the candidate document from that snapshot plus the total pointer delta, so
dropped, repeated or out-of-order move events cannot make geometry drift.
History gets exactly one entry when the gesture ends, and none for a drag
that changed nothing.

Usage:
    gesture = DragGesture.begin_at(doc, pointer, selected)
    while dragging:
        doc = gesture.update(resolved_pointer)
    result = gesture.finish(history, doc)
    doc = result.data if result.changed else doc
"""

from enum import Enum
from typing import List, Optional, Sequence

from loguru import logger

from lpsketch.auto_connectors import sync_auto_connectors
from lpsketch.document import CONDUCTOR_KINDS, Document, KernelError, Selection
from lpsketch.geometry import Point
from lpsketch.hit_test import hit_test
from lpsketch.history import DocumentHistory
from lpsketch.operations.base import OperationResult
from lpsketch.operations.move import move_selections_in_place
from lpsketch.selection_handles import (
    SelectionHandleTarget,
    fixed_anchor_for_handle,
    hit_test_selected_handle,
    move_selection_handle_by_delta,
    selection_handle_point,
)


class DragKind(Enum):
    MOVE = "move"
    EDIT_HANDLE = "edit-handle"


class DragGesture:
    def __init__(self, kind: DragKind, source: Document, start: Point,
                 selections: Sequence[Selection] = (),
                 handle: Optional[SelectionHandleTarget] = None):
        if kind == DragKind.EDIT_HANDLE and handle is None:
            raise ValueError("Handle edit gesture needs a handle")
        self.kind = kind
        self.source = source.clone()
        self.start = start
        self.selections: List[Selection] = list(selections)
        self.handle = handle
        self.finished = False

    # === Construction ===

    @classmethod
    def begin_move(cls, document: Document, start: Point, selections: Sequence[Selection]) -> 'DragGesture':
        return cls(DragKind.MOVE, document, start, selections=selections)

    @classmethod
    def begin_handle_edit(cls, document: Document, handle: SelectionHandleTarget,
                          pointer: Point) -> 'DragGesture':
        # Start at the handle itself so the resolved pointer maps 1:1 onto it
        start = selection_handle_point(document, handle) or pointer
        return cls(DragKind.EDIT_HANDLE, document, start,
                   selections=[handle.selection], handle=handle)

    @classmethod
    def begin_at(cls, document: Document, point: Point,
                 selected: Optional[Selection] = None) -> Optional['DragGesture']:
        """
        Pointer-down with the select tool: a handle of the current selection
        wins, otherwise the entity under the pointer is moved.
        """
        handle_hit = hit_test_selected_handle(point, selected, document)
        if handle_hit is not None:
            return cls.begin_handle_edit(document, handle_hit.handle, point)

        hit = hit_test(point, document.visible_on_page())
        if hit is None:
            return None
        return cls.begin_move(document, point, [hit])

    # === Snapping context ===

    @property
    def snap_exclusion(self) -> Optional[Selection]:
        """Entity that must not snap onto itself during this gesture."""
        if self.kind == DragKind.MOVE:
            return self.selections[0] if self.selections else None
        return self.handle.selection if self.handle is not None else None

    def fixed_anchor(self) -> Optional[Point]:
        """Angle-snap reference while editing a handle."""
        if self.kind != DragKind.EDIT_HANDLE:
            return None
        return fixed_anchor_for_handle(self.source, self.handle)

    # === Gesture ===

    def update(self, point: Point) -> Document:
        """Candidate document for the pointer at ``point``."""
        if self.finished:
            raise KernelError("Drag gesture already finished")

        delta = Point(point.x - self.start.x, point.y - self.start.y)
        draft = self.source.clone()
        if self.kind == DragKind.MOVE:
            move_selections_in_place(draft, self.source, self.selections, delta)
        else:
            move_selection_handle_by_delta(draft, self.source, self.handle, delta)
        return draft

    def finish(self, history: DocumentHistory, current: Document) -> OperationResult:
        """
        Ends the gesture. Commits the pre-drag snapshot to ``history`` if
        ``current`` differs from it; conductor edits also refresh the auto
        connectors.
        """
        if self.finished:
            return OperationResult.no_effect("Drag gesture already finished")
        self.finished = True

        if self.source.to_dict() == current.to_dict():
            logger.debug(f"{self.kind.value} drag without change, nothing committed")
            return OperationResult.no_effect("Drag did not change the document")

        result = current.clone()
        touches_conductor = any(s.kind in CONDUCTOR_KINDS for s in self.selections)
        if touches_conductor and result.settings.auto_connectors_enabled:
            result = sync_auto_connectors(result)

        history.push(self.source)
        logger.info(f"{self.kind.value} drag committed ({len(self.selections)} element(s))")
        return OperationResult.ok("Drag committed.", result)
