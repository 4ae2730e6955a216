"""
LP Sketch - Conductor Placement
===============================

Validates and places lines, arcs and curves on the current page with the
active material and class. New conductors get their auto connectors from the
incremental analyzer.
"""

from typing import Optional

from loguru import logger

from config.tolerances import Tolerances
from lpsketch.auto_connectors import add_auto_connectors_for_conductors
from lpsketch.document import Arc, Curve, Document, Line, Selection, SelectionKind
from lpsketch.geometry import (
    Point,
    circular_arc_geometry_from_three_points,
    distance,
    quadratic_control_point_for_through,
)
from lpsketch.operations.base import OperationResult


def _too_close(a: Point, b: Point) -> bool:
    return distance(a, b) < Tolerances.GEOMETRY_MIN_POINT_SEPARATION


def _commit_conductor(document: Document, kind: SelectionKind, conductor) -> Document:
    draft = document.clone()
    draft.collection(kind).append(conductor)
    return add_auto_connectors_for_conductors(draft, [Selection(kind, conductor.id)])


def place_line(document: Document, start: Point, end: Point,
               element_id: Optional[str] = None) -> OperationResult:
    if _too_close(start, end):
        return OperationResult.no_effect("Line end must be different from its start")

    settings = document.settings
    line = Line(start=start, end=end, color=settings.active_color,
                wire_class=settings.active_class, page=document.view.current_page)
    if element_id:
        line.id = element_id

    result = _commit_conductor(document, SelectionKind.LINE, line)
    logger.info(f"Line {line.id} placed {start} -> {end}")
    return OperationResult.ok("Line segment added.", result)


def place_arc(document: Document, start: Point, end: Point, through: Point,
              element_id: Optional[str] = None) -> OperationResult:
    """Arc from two endpoints and a pull point the arc passes through."""
    if _too_close(start, end):
        return OperationResult.error("Arc endpoint 2 must be different from endpoint 1.")
    if _too_close(end, through) or _too_close(start, through):
        return OperationResult.error("Arc pull point must be different from both endpoints.")
    if circular_arc_geometry_from_three_points(start, through, end) is None:
        logger.warning(f"Arc rejected: {start}, {through}, {end} are collinear")
        return OperationResult.error("Arc pull point cannot be collinear with endpoints.")

    settings = document.settings
    arc = Arc(start=start, through=through, end=end, color=settings.active_color,
              wire_class=settings.active_class, page=document.view.current_page)
    if element_id:
        arc.id = element_id

    result = _commit_conductor(document, SelectionKind.ARC, arc)
    logger.info(f"Arc {arc.id} placed {start} ~ {through} -> {end}")
    return OperationResult.ok("Arc added.", result)


def place_curve(document: Document, start: Point, through: Point, end: Point,
                element_id: Optional[str] = None) -> OperationResult:
    """
    Curve from three clicks; ``through`` is the visual midpoint. The stored
    ``through`` of the new curve is the derived control point.
    """
    if _too_close(start, through):
        return OperationResult.error("Curve point 2 must be different from point 1.")
    if _too_close(through, end) or _too_close(start, end):
        return OperationResult.error("Curve point 3 must be different from points 1 and 2.")

    settings = document.settings
    curve = Curve(
        start=start,
        through=quadratic_control_point_for_through(start, through, end),
        end=end,
        color=settings.active_color,
        wire_class=settings.active_class,
        page=document.view.current_page,
    )
    if element_id:
        curve.id = element_id

    result = _commit_conductor(document, SelectionKind.CURVE, curve)
    logger.info(f"Curve {curve.id} placed {start} ~ {through} -> {end}")
    return OperationResult.ok("Curve added.", result)
