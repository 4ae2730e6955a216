"""
LP Sketch - Selection Handles
=============================

Named, draggable control points of a selected primitive:

- line: start / end
- arrow: tail / head
- arc: start / through / end (through lies on the arc)
- curve: start / through / end (through is the visual midpoint at t=0.5,
  the stored control point is derived from it)
- directional symbol: one synthetic direction handle at a fixed screen
  distance along the symbol's direction

Deltas are always applied to the gesture's source document, never
accumulated on the live one.
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple
import math

from loguru import logger

from config.tolerances import Tolerances, px_to_doc
from lpsketch.document import (
    DIRECTIONAL_SYMBOLS,
    Curve,
    Document,
    Selection,
    SelectionKind,
    Symbol,
)
from lpsketch.geometry import (
    Point,
    angle_degrees,
    distance,
    quadratic_control_point_for_through,
    quadratic_point,
)
from lpsketch.tools import HANDLE_ROLES, HandleKind, HandleRole


@dataclass(frozen=True)
class SelectionHandleTarget:
    kind: HandleKind
    id: str
    role: HandleRole

    def __post_init__(self):
        if self.role not in HANDLE_ROLES[self.kind]:
            raise ValueError(f"Handle role {self.role.value} is not valid for {self.kind.value}")

    @property
    def selection(self) -> Selection:
        if self.kind == HandleKind.SYMBOL_DIRECTION:
            return Selection(SelectionKind.SYMBOL, self.id)
        return Selection(SelectionKind(self.kind.value), self.id)


@dataclass(frozen=True)
class HandleHit:
    selection: Selection
    handle: SelectionHandleTarget


_HANDLE_KIND_FOR_SELECTION = {
    SelectionKind.LINE: HandleKind.LINE,
    SelectionKind.ARC: HandleKind.ARC,
    SelectionKind.CURVE: HandleKind.CURVE,
    SelectionKind.ARROW: HandleKind.ARROW,
    SelectionKind.SYMBOL: HandleKind.SYMBOL_DIRECTION,
}


def curve_through_point(curve: Curve) -> Point:
    """Visual midpoint of a curve (the stored ``through`` is the control point)."""
    return quadratic_point(curve.start, curve.through, curve.end, 0.5)


def directional_symbol_handle_point(symbol: Symbol, zoom: float,
                                    length_px: float = Tolerances.HANDLE_DIRECTION_LENGTH_PX) -> Point:
    length = px_to_doc(length_px, zoom)
    radians = math.radians(symbol.direction_deg or 0.0)
    return Point(symbol.position.x + math.cos(radians) * length,
                 symbol.position.y + math.sin(radians) * length)


def handles_for_selection(document: Document, selection: Optional[Selection]
                          ) -> List[Tuple[SelectionHandleTarget, Point]]:
    """Every handle of the selected element with its current position."""
    if selection is None or selection.kind not in _HANDLE_KIND_FOR_SELECTION:
        return []

    element = document.find(selection)
    if element is None:
        return []

    kind = _HANDLE_KIND_FOR_SELECTION[selection.kind]
    if kind == HandleKind.SYMBOL_DIRECTION:
        if element.symbol_type not in DIRECTIONAL_SYMBOLS:
            return []
        target = SelectionHandleTarget(kind, element.id, HandleRole.DIRECTION)
        return [(target, directional_symbol_handle_point(element, document.view.zoom))]

    handles = []
    for role in HANDLE_ROLES[kind]:
        target = SelectionHandleTarget(kind, element.id, role)
        handles.append((target, _handle_point(element, kind, role)))
    return handles


def _handle_point(element, kind: HandleKind, role: HandleRole) -> Point:
    if kind == HandleKind.CURVE and role == HandleRole.THROUGH:
        return curve_through_point(element)
    return getattr(element, role.value)


def selection_handle_point(document: Document, handle: SelectionHandleTarget) -> Optional[Point]:
    """Current position of ``handle`` in ``document``, or None if it no longer exists."""
    for target, point in handles_for_selection(document, handle.selection):
        if target == handle:
            return point
    return None


def hit_test_selected_handle(point: Point, selected: Optional[Selection], document: Document,
                             tolerance_px: float = Tolerances.HANDLE_HIT_TOLERANCE_PX
                             ) -> Optional[HandleHit]:
    """Closest handle of ``selected`` within the zoom-scaled tolerance."""
    tolerance = px_to_doc(tolerance_px, document.view.zoom)
    best: Optional[SelectionHandleTarget] = None
    best_distance = math.inf

    for target, handle_point in handles_for_selection(document, selected):
        d = distance(point, handle_point)
        if d <= tolerance and d < best_distance:
            best_distance = d
            best = target

    if best is None:
        return None
    return HandleHit(selected, best)


def move_selection_handle_by_delta(draft: Document, source: Document,
                                   handle: SelectionHandleTarget, delta: Point) -> bool:
    """
    Sets ``handle`` on ``draft`` to its ``source`` position plus ``delta``.

    The other points of the primitive are reset to their source values, so
    repeated calls during one drag never drift. Returns False when the
    element is missing from either document.
    """
    selection = handle.selection
    original = source.find(selection)
    target = draft.find(selection)
    if original is None or target is None:
        logger.debug(f"Handle target {handle.kind.value}:{handle.id} not found")
        return False

    if handle.kind == HandleKind.SYMBOL_DIRECTION:
        if original.symbol_type not in DIRECTIONAL_SYMBOLS:
            return False
        source_handle = directional_symbol_handle_point(original, source.view.zoom)
        moved = source_handle.translated(delta.x, delta.y)
        target.direction_deg = angle_degrees(original.position, moved)
        return True

    if handle.kind == HandleKind.CURVE:
        source_through = curve_through_point(original)
        start, end = original.start, original.end
        through = source_through
        if handle.role == HandleRole.START:
            start = start.translated(delta.x, delta.y)
        elif handle.role == HandleRole.END:
            end = end.translated(delta.x, delta.y)
        else:
            through = source_through.translated(delta.x, delta.y)
        target.start = start
        target.end = end
        target.through = quadratic_control_point_for_through(start, through, end)
        return True

    # Lines, arrows and arcs: plain point roles
    for role in HANDLE_ROLES[handle.kind]:
        setattr(target, role.value, getattr(original, role.value))
    moved = getattr(original, handle.role.value).translated(delta.x, delta.y)
    setattr(target, handle.role.value, moved)
    return True


def fixed_anchor_for_handle(source: Document, handle: Optional[SelectionHandleTarget]) -> Optional[Point]:
    """
    Point that stays put while ``handle`` is dragged; the angle-snap reference.
    Lines and arrows use their other end, directional symbols their position.
    Arcs and curves have no single anchor.
    """
    if handle is None:
        return None

    element = source.find(handle.selection)
    if element is None:
        return None

    if handle.kind == HandleKind.LINE:
        return element.end if handle.role == HandleRole.START else element.start
    if handle.kind == HandleKind.ARROW:
        return element.head if handle.role == HandleRole.TAIL else element.tail
    if handle.kind == HandleKind.SYMBOL_DIRECTION:
        return element.position if element.symbol_type in DIRECTIONAL_SYMBOLS else None
    return None
