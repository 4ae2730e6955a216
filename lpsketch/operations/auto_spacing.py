"""
LP Sketch - Auto-Spacing Placement
==================================

Places air terminals along a traced path or an existing arc.

The real-world maximum interval is converted to document points with the
document scale. Positions that already hold a lettered terminal on the page
are skipped, so applying the same spacing twice places nothing the second
time.
"""

from typing import List, Optional, Sequence

from loguru import logger

from config.tolerances import Tolerances, px_to_doc
from lpsketch.document import (
    LETTERED_SYMBOLS,
    Arc,
    Document,
    Symbol,
    SymbolType,
    class_for_symbol,
    element_page,
)
from lpsketch.geometry import Point, distance_to_circular_arc
from lpsketch.operations.base import OperationResult
from lpsketch.spacing import compute_arc_auto_spacing_points, compute_linear_auto_spacing_points
from lpsketch.tools import CornerKind


def hit_test_arc_for_auto_spacing(point: Point, document: Document) -> Optional[Arc]:
    """Closest arc on the current page within the arc auto-spacing tolerance."""
    visible = document.visible_on_page()
    tolerance = px_to_doc(Tolerances.SPACING_ARC_HIT_TOLERANCE_PX, visible.view.zoom)
    best: Optional[Arc] = None
    best_distance = tolerance

    for arc in reversed(visible.arcs):
        d = distance_to_circular_arc(point, arc.start, arc.through, arc.end,
                                     Tolerances.NODE_ARC_DISTANCE_SEGMENTS)
        if d <= tolerance and (best is None or d < best_distance):
            best = arc
            best_distance = d

    return best


def _interval_pt(document: Document, max_interval_real: float, label: str):
    """Returns (interval_pt, error_result)."""
    if not document.scale.is_usable:
        return None, OperationResult.error(f"Set scale before using {label} auto-spacing.")
    if max_interval_real is None or not max_interval_real > 0:
        return None, OperationResult.error(
            f"{label.capitalize()} auto-spacing max interval must be a positive number.")
    return max_interval_real / document.scale.real_units_per_point, None


def _points_to_place(document: Document, points: Sequence[Point]) -> List[Point]:
    page = document.view.current_page
    occupied = {
        (s.position.x, s.position.y)
        for s in document.symbols
        if element_page(s) == page and s.symbol_type in LETTERED_SYMBOLS
    }

    output: List[Point] = []
    for point in points:
        key = (point.x, point.y)
        if key in occupied:
            continue
        occupied.add(key)
        output.append(point)
    return output


def _place_air_terminals(document: Document, points: Sequence[Point], letter: str) -> Document:
    draft = document.clone()
    settings = draft.settings
    for point in points:
        draft.symbols.append(Symbol(
            symbol_type=SymbolType.AIR_TERMINAL,
            position=point,
            letter=letter,
            color=settings.active_color,
            symbol_class=class_for_symbol(SymbolType.AIR_TERMINAL, settings.active_class),
            page=draft.view.current_page,
        ))
    return draft


def _finish(document: Document, points: Sequence[Point], letter: Optional[str], label: str) -> OperationResult:
    if not points:
        return OperationResult.error(f"{label.capitalize()} auto-spacing could not place any terminals.")
    if not letter:
        return OperationResult.error("Select an air terminal letter before placing auto-spacing terminals.")

    to_place = _points_to_place(document, points)
    skipped = len(points) - len(to_place)
    if not to_place:
        logger.debug(f"{label} auto-spacing: all {skipped} position(s) already occupied")
        return OperationResult.no_effect("All auto-spacing positions already hold an air terminal.")

    result = _place_air_terminals(document, to_place, letter)
    count = len(to_place)
    logger.info(f"{label.capitalize()} auto-spacing placed {count} air terminal(s), skipped {skipped}")
    return OperationResult.ok(
        f"{label.capitalize()} auto-spacing complete: placed {count} air terminal{'' if count == 1 else 's'}.",
        result,
    )


def place_linear_auto_spacing(document: Document, vertices: Sequence[Point], corners: Sequence[CornerKind],
                              closed: bool, max_interval_real: float, letter: Optional[str]) -> OperationResult:
    """
    Places air terminals along a traced path.

    Args:
        vertices: Traced path
        corners: Corner tag per vertex (outside corners restart spacing)
        closed: Whether the path wraps back to its first vertex
        max_interval_real: Maximum spacing in real-world units
        letter: Air terminal letter for the new symbols
    """
    interval, failure = _interval_pt(document, max_interval_real, "linear")
    if failure is not None:
        logger.warning(f"Linear auto-spacing rejected: {failure.message}")
        return failure
    if len(vertices) < 2:
        return OperationResult.error("Trace at least two points before finishing linear auto-spacing.")
    if closed and len(vertices) < 3:
        return OperationResult.error("Closed linear auto-spacing paths require at least three vertices.")

    points = compute_linear_auto_spacing_points(vertices, corners, closed, interval)
    return _finish(document, points, letter, "linear")


def place_arc_auto_spacing(document: Document, arc_id: Optional[str], max_interval_real: float,
                           letter: Optional[str]) -> OperationResult:
    """Places air terminals along an existing arc, including both of its endpoints."""
    interval, failure = _interval_pt(document, max_interval_real, "arc")
    if failure is not None:
        logger.warning(f"Arc auto-spacing rejected: {failure.message}")
        return failure
    if not arc_id:
        return OperationResult.error("Select an arc before applying arc auto-spacing.")

    arc = next((a for a in document.arcs if a.id == arc_id), None)
    if arc is None:
        return OperationResult.no_target("Selected arc no longer exists. Select another arc.")

    points = compute_arc_auto_spacing_points(arc.start, arc.through, arc.end, interval)
    return _finish(document, points, letter, "arc")
