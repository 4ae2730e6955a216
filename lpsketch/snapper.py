"""
LP Sketch - Snap Resolver
=========================

Finds the best snap target near a raw document point.

Candidates are endpoints, basepoints (symbol/text/dimension positions), marks,
intersections, perpendicular feet from a reference point and the nearest point
on every linear primitive. Exact kinds (priority 1) outrank ``nearest``
(priority 0); within a priority the closer candidate wins.

Usage:
    from lpsketch.snapper import resolve_snap_point

    visible = doc.visible_on_page()
    res = resolve_snap_point(raw, visible, reference_point=line_start)
    if res.snapped:
        print(res.kind, res.point)
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple

from loguru import logger

from config.feature_flags import is_enabled
from config.tolerances import Tolerances, snap_tolerance_doc
from lpsketch.document import Document, Selection, SelectionKind
from lpsketch.geometry import (
    Point,
    distance,
    line_segment_intersection,
    nearest_point_on_circular_arc,
    nearest_point_on_quadratic,
    polyline_intersections,
    project_point_onto_segment,
    sample_circular_arc_polyline,
    sample_quadratic_polyline,
)
from lpsketch.tools import SnapKind


@dataclass(frozen=True)
class SnapResolution:
    point: Point
    snapped: bool = False
    kind: Optional[SnapKind] = None


@dataclass(frozen=True)
class SnapPointPreview:
    """Marker descriptor for the UI: where and what kind of snap."""
    point: Point
    kind: SnapKind


@dataclass
class _ArcLikeEntry:
    polyline: List[Point]
    start: Point
    end: Point
    nearest: Point


class SnapResolver:
    """
    One-shot snap evaluation against a (page-filtered) document.

    The excluded selection is dropped from every candidate source so an entity
    being dragged never snaps onto itself.
    """

    def __init__(self, document: Document, exclude_selection: Optional[Selection] = None,
                 reference_point: Optional[Point] = None):
        self.document = document
        self.exclude_selection = exclude_selection
        self.reference_point = reference_point
        self.tolerance = snap_tolerance_doc(document.view.zoom)

    def _elements(self, kind: SelectionKind) -> list:
        items = self.document.collection(kind)
        excluded = self.exclude_selection
        if excluded is not None and excluded.kind == kind:
            return [e for e in items if e.id != excluded.id]
        return items

    def _check_point(self, candidate: Point, raw: Point, kind: SnapKind,
                     candidates: List[Tuple[float, int, int, SnapResolution]]):
        dist = distance(candidate, raw)
        if dist <= self.tolerance:
            # Sequence number keeps the first of equally good candidates
            candidates.append((dist, kind.priority, len(candidates),
                               SnapResolution(candidate, True, kind)))

    def resolve(self, raw: Point) -> SnapResolution:
        if not self.document.settings.snap_enabled:
            return SnapResolution(raw)

        lines = self._elements(SelectionKind.LINE)
        arcs = self._elements(SelectionKind.ARC)
        curves = self._elements(SelectionKind.CURVE)
        arrows = self._elements(SelectionKind.ARROW)
        reference = self.reference_point
        candidates: List[Tuple[float, int, int, SnapResolution]] = []

        # 1. Endpoints and perpendicular feet
        for line in lines:
            self._check_point(line.start, raw, SnapKind.ENDPOINT, candidates)
            self._check_point(line.end, raw, SnapKind.ENDPOINT, candidates)
            if reference is not None:
                foot = project_point_onto_segment(reference, line.start, line.end)
                self._check_point(foot, raw, SnapKind.PERPENDICULAR, candidates)

        arc_entries = [
            _ArcLikeEntry(
                polyline=sample_circular_arc_polyline(a.start, a.through, a.end,
                                                      Tolerances.SNAP_POLYLINE_SEGMENTS),
                start=a.start,
                end=a.end,
                nearest=nearest_point_on_circular_arc(raw, a.start, a.through, a.end,
                                                      Tolerances.SNAP_NEAREST_SEGMENTS),
            )
            for a in arcs
        ]
        curve_entries = [
            _ArcLikeEntry(
                polyline=sample_quadratic_polyline(c.start, c.through, c.end,
                                                   Tolerances.SNAP_POLYLINE_SEGMENTS),
                start=c.start,
                end=c.end,
                nearest=nearest_point_on_quadratic(raw, c.start, c.through, c.end,
                                                   Tolerances.SNAP_NEAREST_SEGMENTS),
            )
            for c in curves
        ]
        arc_like = arc_entries + curve_entries

        for entry in arc_like:
            self._check_point(entry.start, raw, SnapKind.ENDPOINT, candidates)
            self._check_point(entry.end, raw, SnapKind.ENDPOINT, candidates)

        for arrow in arrows:
            self._check_point(arrow.tail, raw, SnapKind.ENDPOINT, candidates)
            self._check_point(arrow.head, raw, SnapKind.ENDPOINT, candidates)
            if reference is not None:
                foot = project_point_onto_segment(reference, arrow.tail, arrow.head)
                self._check_point(foot, raw, SnapKind.PERPENDICULAR, candidates)

        # 2. Marks
        for mark in self._elements(SelectionKind.MARK):
            self._check_point(mark.position, raw, SnapKind.MARK, candidates)

        # 3. Intersections
        for line in lines:
            for entry in arc_like:
                for hit in polyline_intersections([line.start, line.end], entry.polyline):
                    self._check_point(hit, raw, SnapKind.INTERSECTION, candidates)

        for i, entry_a in enumerate(arc_like):
            for entry_b in arc_like[i + 1:]:
                for hit in polyline_intersections(entry_a.polyline, entry_b.polyline):
                    self._check_point(hit, raw, SnapKind.INTERSECTION, candidates)

        for i, line_a in enumerate(lines):
            for line_b in lines[i + 1:]:
                hit = line_segment_intersection(line_a.start, line_a.end, line_b.start, line_b.end)
                if hit is not None:
                    self._check_point(hit, raw, SnapKind.INTERSECTION, candidates)

        for arrow in arrows:
            for line in lines:
                hit = line_segment_intersection(arrow.tail, arrow.head, line.start, line.end)
                if hit is not None:
                    self._check_point(hit, raw, SnapKind.INTERSECTION, candidates)

        for entry in arc_like:
            for arrow in arrows:
                for hit in polyline_intersections([arrow.tail, arrow.head], entry.polyline):
                    self._check_point(hit, raw, SnapKind.INTERSECTION, candidates)

        # 4. Basepoints
        for kind in (SelectionKind.SYMBOL, SelectionKind.TEXT, SelectionKind.DIMENSION_TEXT):
            for element in self._elements(kind):
                self._check_point(element.position, raw, SnapKind.BASEPOINT, candidates)

        # 5. Nearest on primitive
        for line in lines:
            self._check_point(project_point_onto_segment(raw, line.start, line.end),
                              raw, SnapKind.NEAREST, candidates)
        for arrow in arrows:
            self._check_point(project_point_onto_segment(raw, arrow.tail, arrow.head),
                              raw, SnapKind.NEAREST, candidates)
        for entry in arc_like:
            self._check_point(entry.nearest, raw, SnapKind.NEAREST, candidates)

        if not candidates:
            return SnapResolution(raw)

        candidates.sort(key=lambda c: (-c[1], c[0], c[2]))
        best_dist, best_prio, _, winner = candidates[0]

        if is_enabled("snap_debug"):
            logger.debug(
                f"[SNAP] {len(candidates)} candidates within {self.tolerance:.3f}, "
                f"winner {winner.kind.value} at {winner.point} (d={best_dist:.3f}, prio={best_prio})"
            )
        return winner


def resolve_snap_point(raw: Point, document: Document,
                       exclude_selection: Optional[Selection] = None,
                       reference_point: Optional[Point] = None) -> SnapResolution:
    """
    Resolves ``raw`` against ``document``.

    Pass the page-filtered view (``document.visible_on_page()``). With snapping
    disabled the raw point is returned unsnapped.
    """
    return SnapResolver(document, exclude_selection, reference_point).resolve(raw)
