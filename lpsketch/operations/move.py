"""
LP Sketch - Move and Delete Selections
"""

from typing import Iterable, List, Sequence

from loguru import logger

from lpsketch.auto_connectors import sync_auto_connectors
from lpsketch.document import (
    CONDUCTOR_KINDS,
    Document,
    Selection,
    SelectionKind,
)
from lpsketch.geometry import Point
from lpsketch.operations.base import OperationResult

# Point attributes translated by a move, per kind
_MOVED_POINTS = {
    SelectionKind.LINE: ("start", "end"),
    SelectionKind.ARC: ("start", "through", "end"),
    SelectionKind.CURVE: ("start", "through", "end"),
    SelectionKind.ARROW: ("tail", "head"),
    SelectionKind.SYMBOL: ("position",),
    SelectionKind.TEXT: ("position",),
    # Only the label moves; the measured endpoints stay where they were taken
    SelectionKind.DIMENSION_TEXT: ("position",),
    SelectionKind.LEGEND: ("position",),
    SelectionKind.GENERAL_NOTE: ("position",),
    SelectionKind.MARK: ("position",),
}


def _unique(selections: Iterable[Selection]) -> List[Selection]:
    seen = set()
    ordered = []
    for selection in selections:
        if selection in seen:
            continue
        seen.add(selection)
        ordered.append(selection)
    return ordered


def move_selections_in_place(draft: Document, source: Document,
                             selections: Sequence[Selection], delta: Point) -> int:
    """
    Sets every selected element on ``draft`` to its ``source`` geometry plus
    ``delta``. Each (kind, id) moves once. Returns the number moved.
    """
    moved = 0
    for selection in _unique(selections):
        original = source.find(selection)
        target = draft.find(selection)
        if original is None or target is None:
            continue
        for attr in _MOVED_POINTS[selection.kind]:
            setattr(target, attr, getattr(original, attr).translated(delta.x, delta.y))
        moved += 1
    return moved


def move_selection_by_delta(source: Document, selections: Sequence[Selection], delta: Point) -> Document:
    """New document: ``source`` with the selected elements translated by ``delta``."""
    draft = source.clone()
    move_selections_in_place(draft, source, selections, delta)
    return draft


def delete_selection(document: Document, selections: Sequence[Selection]) -> OperationResult:
    """
    Removes the selected elements. Deleting a conductor rebuilds the auto
    connectors so no junction symbol outlives its conductors.
    """
    targets = [s for s in _unique(selections) if document.find(s) is not None]
    if not targets:
        return OperationResult.no_target("Nothing selected to delete")

    draft = document.clone()
    keys = {(s.kind, s.id) for s in targets}
    for kind in SelectionKind:
        items = draft.collection(kind)
        items[:] = [e for e in items if (kind, e.id) not in keys]

    removes_conductor = any(s.kind in CONDUCTOR_KINDS for s in targets)
    if removes_conductor and draft.settings.auto_connectors_enabled:
        draft = sync_auto_connectors(draft)

    logger.info(f"Deleted {len(targets)} element(s)")
    return OperationResult.ok(f"Deleted {len(targets)} element(s).", draft)
