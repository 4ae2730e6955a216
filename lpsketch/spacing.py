"""
LP Sketch - Auto-Spacing Engine
===============================

Distributes air-terminal positions along a traced path or an arc at no more
than a maximum interval.

Linear paths carry a corner tag per vertex. Outside corners are anchors where
the even spacing restarts; inside corners are passed through. Each span
between consecutive anchors is divided into ``ceil(length / max_interval)``
equal pieces measured along the polyline, not per edge.

Usage:
    from lpsketch.spacing import compute_linear_auto_spacing_points

    pts = compute_linear_auto_spacing_points(
        [Point(0, 0), Point(10, 0), Point(10, 10)],
        [CornerKind.OUTSIDE, CornerKind.INSIDE, CornerKind.OUTSIDE],
        closed=False, max_interval_pt=6)
"""

from typing import List, Sequence
import math

import numpy as np
from loguru import logger

from config.feature_flags import is_enabled
from config.tolerances import spacing_dedupe_epsilon
from lpsketch.geometry import (
    Point,
    circular_arc_geometry_from_three_points,
    distance,
    polyline_length,
    sample_arc_angles,
)
from lpsketch.tools import CornerKind

_LENGTH_EPSILON = 1e-9


def points_at_distances(points: Sequence[Point], distances: Sequence[float]) -> List[Point]:
    """
    Points at the given arc-length distances along a polyline.
    Distances are clamped to [0, length]; zero-length edges are skipped.
    """
    if not points:
        return [Point(0.0, 0.0) for _ in distances]

    kept = [points[0]]
    for p in points[1:]:
        if distance(kept[-1], p) > _LENGTH_EPSILON:
            kept.append(p)
    if len(kept) == 1:
        return [points[0] for _ in distances]

    xs = np.array([p.x for p in kept])
    ys = np.array([p.y for p in kept])
    cumulative = np.concatenate(([0.0], np.cumsum(np.hypot(np.diff(xs), np.diff(ys)))))
    targets = np.asarray(distances, dtype=float)

    out_x = np.interp(targets, cumulative, xs)
    out_y = np.interp(targets, cumulative, ys)
    return [Point(float(x), float(y)) for x, y in zip(out_x, out_y)]


def dedupe_points(points: Sequence[Point], epsilon: float) -> List[Point]:
    """Keeps the first of any points within ``epsilon`` of each other."""
    deduped: List[Point] = []
    for point in points:
        if not any(distance(kept, point) <= epsilon for kept in deduped):
            deduped.append(point)
    return deduped


def equal_spacing_points_on_polyline(points: Sequence[Point], max_interval_pt: float) -> List[Point]:
    total = polyline_length(points)
    if total <= _LENGTH_EPSILON:
        return [points[0]] if points else []

    count = max(1, math.ceil(total / max_interval_pt))
    interval = total / count
    return points_at_distances(points, [i * interval for i in range(count + 1)])


def _closed_span(vertices: Sequence[Point], start: int, end: int) -> List[Point]:
    if start == end:
        return [*vertices[start:], *vertices[:start + 1]]
    if start < end:
        return list(vertices[start:end + 1])
    return [*vertices[start:], *vertices[:end + 1]]


def compute_linear_auto_spacing_points(vertices: Sequence[Point], corners: Sequence[CornerKind],
                                       closed: bool, max_interval_pt: float,
                                       dedupe_epsilon_pt: float = None) -> List[Point]:
    """
    Spaced points along a traced path.

    Open paths anchor at the first vertex, the last vertex and every interior
    outside corner. Closed paths anchor at outside corners only and wrap; a
    single anchor spans the whole loop, no anchor yields nothing.
    """
    if dedupe_epsilon_pt is None:
        dedupe_epsilon_pt = spacing_dedupe_epsilon()
    if len(vertices) < 2 or max_interval_pt <= 0:
        return []

    result: List[Point] = []

    if closed:
        anchors = [i for i, corner in enumerate(corners) if corner == CornerKind.OUTSIDE]
        if not anchors:
            return []
        if len(anchors) == 1:
            spans = [_closed_span(vertices, anchors[0], anchors[0])]
        else:
            spans = [
                _closed_span(vertices, anchors[i], anchors[(i + 1) % len(anchors)])
                for i in range(len(anchors))
            ]
    else:
        last = len(vertices) - 1
        anchor_set = {0, last}
        anchor_set.update(
            i for i in range(1, last)
            if i < len(corners) and corners[i] == CornerKind.OUTSIDE
        )
        anchors = sorted(anchor_set)
        spans = [list(vertices[anchors[i - 1]:anchors[i] + 1]) for i in range(1, len(anchors))]

    for span in spans:
        result.extend(equal_spacing_points_on_polyline(span, max_interval_pt))

    if is_enabled("spacing_debug"):
        logger.debug(f"[SPACING] anchors={anchors} spans={len(spans)} raw_points={len(result)}")
    return dedupe_points(result, dedupe_epsilon_pt)


def compute_arc_auto_spacing_points(start: Point, through: Point, end: Point, max_interval_pt: float,
                                    dedupe_epsilon_pt: float = None) -> List[Point]:
    """
    Equal-angle points along the arc's true sweep. First and last points are
    exactly ``start`` and ``end``. Invalid arcs yield nothing.
    """
    if dedupe_epsilon_pt is None:
        dedupe_epsilon_pt = spacing_dedupe_epsilon()
    if max_interval_pt <= 0:
        return []

    arc = circular_arc_geometry_from_three_points(start, through, end)
    if arc is None:
        return []

    arc_length = arc.arc_length
    if not math.isfinite(arc_length) or arc_length <= _LENGTH_EPSILON:
        return [start]

    count = max(1, math.ceil(arc_length / max_interval_pt))
    points = sample_arc_angles(arc, count)
    points[0] = start
    points[-1] = end

    if is_enabled("spacing_debug"):
        logger.debug(f"[SPACING] arc length {arc_length:.3f}pt -> {count} segments")
    return dedupe_points(points, dedupe_epsilon_pt)
