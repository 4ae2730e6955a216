"""
LP Sketch - Geometry Primitives
===============================

Points, segments, quadratic curves and three-point circular arcs.

Everything here is pure: no document access, no logging in the hot paths.
Degenerate input yields ``None`` (or a documented fallback), never an exception.

Usage:
    from lpsketch.geometry import Point, circular_arc_geometry_from_three_points

    arc = circular_arc_geometry_from_three_points(Point(0, 0), Point(50, 40), Point(100, 0))
    if arc is None:
        ...  # collinear or coincident points
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple
import math

import numpy as np

from config.tolerances import Tolerances

TAU = math.pi * 2


@dataclass(frozen=True)
class Point:
    """Document-space point (PDF points). Value type without identity."""
    x: float = 0.0
    y: float = 0.0

    def distance_to(self, other: 'Point') -> float:
        return math.hypot(self.x - other.x, self.y - other.y)

    def midpoint(self, other: 'Point') -> 'Point':
        return Point((self.x + other.x) / 2, (self.y + other.y) / 2)

    def translated(self, dx: float, dy: float) -> 'Point':
        return Point(self.x + dx, self.y + dy)

    def as_tuple(self) -> Tuple[float, float]:
        return (self.x, self.y)

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y}

    @classmethod
    def from_dict(cls, data: dict) -> 'Point':
        return cls(float(data["x"]), float(data["y"]))

    def __repr__(self):
        return f"P({self.x:.2f}, {self.y:.2f})"


@dataclass(frozen=True)
class Bounds:
    """Axis-aligned bounding box."""
    min_x: float
    min_y: float
    max_x: float
    max_y: float

    def padded(self, padding: float) -> 'Bounds':
        return Bounds(self.min_x - padding, self.min_y - padding,
                      self.max_x + padding, self.max_y + padding)

    def as_tuple(self) -> Tuple[float, float, float, float]:
        return (self.min_x, self.min_y, self.max_x, self.max_y)


@dataclass(frozen=True)
class CircularArcGeometry:
    """Circle through three points plus the sweep that visits the through point."""
    center: Point
    radius: float
    start_angle: float
    through_angle: float
    end_angle: float
    sweep_positive: bool
    sweep_radians: float
    large_arc_flag: int
    sweep_flag: int

    @property
    def arc_length(self) -> float:
        return self.radius * self.sweep_radians

    def point_at_angle(self, angle: float) -> Point:
        return Point(
            self.center.x + math.cos(angle) * self.radius,
            self.center.y + math.sin(angle) * self.radius,
        )


# === Scalars and angles ===

def clamp(value: float, min_value: float, max_value: float) -> float:
    return min(max_value, max(min_value, value))


def distance(a: Point, b: Point) -> float:
    return math.hypot(a.x - b.x, a.y - b.y)


def angle_degrees(a: Point, b: Point) -> float:
    """Direction from a to b in degrees, normalized to [0, 360)."""
    raw = math.degrees(math.atan2(b.y - a.y, b.x - a.x))
    return (raw + 360.0) % 360.0


def snap_angle_degrees(angle: float, increment_deg: float) -> float:
    """Rounds to the nearest multiple of increment_deg (half up), normalized to [0, 360)."""
    snapped = math.floor(angle / increment_deg + 0.5) * increment_deg
    return (snapped + 360.0) % 360.0


def normalize_radians(radians: float) -> float:
    normalized = math.fmod(radians, TAU)
    return normalized + TAU if normalized < 0 else normalized


def positive_angle_delta(start: float, end: float) -> float:
    """Counter-clockwise angular distance from start to end in [0, 2*pi)."""
    delta = normalize_radians(end) - normalize_radians(start)
    return delta if delta >= 0 else delta + TAU


# === Segments ===

def project_point_onto_segment(point: Point, start: Point, end: Point) -> Point:
    """Orthogonal projection clamped to the segment (t in [0, 1])."""
    dx = end.x - start.x
    dy = end.y - start.y
    len_sq = dx * dx + dy * dy

    if len_sq == 0:
        return start

    t = clamp(((point.x - start.x) * dx + (point.y - start.y) * dy) / len_sq, 0.0, 1.0)
    return Point(start.x + t * dx, start.y + t * dy)


def distance_to_segment(point: Point, start: Point, end: Point) -> float:
    return distance(point, project_point_onto_segment(point, start, end))


def line_segment_intersection(a1: Point, a2: Point, b1: Point, b2: Point) -> Optional[Point]:
    """
    Intersection of segments a1-a2 and b1-b2.

    The point must lie inside both segments' bounding ranges (1e-9 slack).
    Parallel and non-overlapping segments return None.
    """
    denominator = (a1.x - a2.x) * (b1.y - b2.y) - (a1.y - a2.y) * (b1.x - b2.x)
    if denominator == 0:
        return None

    cross_a = a1.x * a2.y - a1.y * a2.x
    cross_b = b1.x * b2.y - b1.y * b2.x
    x = (cross_a * (b1.x - b2.x) - (a1.x - a2.x) * cross_b) / denominator
    y = (cross_a * (b1.y - b2.y) - (a1.y - a2.y) * cross_b) / denominator

    eps = Tolerances.GEOMETRY_INTERSECTION_EPSILON
    within_a = (
        min(a1.x, a2.x) - eps <= x <= max(a1.x, a2.x) + eps
        and min(a1.y, a2.y) - eps <= y <= max(a1.y, a2.y) + eps
    )
    within_b = (
        min(b1.x, b2.x) - eps <= x <= max(b1.x, b2.x) + eps
        and min(b1.y, b2.y) - eps <= y <= max(b1.y, b2.y) + eps
    )
    if not within_a or not within_b:
        return None

    return Point(x, y)


# === Polylines ===

def polyline_length(points: Sequence[Point]) -> float:
    if len(points) < 2:
        return 0.0
    return sum(distance(points[i - 1], points[i]) for i in range(1, len(points)))


def nearest_point_on_polyline(point: Point, samples: Sequence[Point]) -> Point:
    """Nearest projection of point onto any segment of the sampled polyline."""
    best_point = samples[0]
    best_distance = math.inf

    for i in range(1, len(samples)):
        projected = project_point_onto_segment(point, samples[i - 1], samples[i])
        d = distance(point, projected)
        if d < best_distance:
            best_distance = d
            best_point = projected

    return best_point


def polyline_intersections(poly_a: Sequence[Point], poly_b: Sequence[Point]) -> List[Point]:
    """All pairwise segment intersections between two polylines."""
    hits: List[Point] = []
    for i in range(1, len(poly_a)):
        for j in range(1, len(poly_b)):
            hit = line_segment_intersection(poly_a[i - 1], poly_a[i], poly_b[j - 1], poly_b[j])
            if hit is not None:
                hits.append(hit)
    return hits


def bounds_for_points(points: Sequence[Point]) -> Bounds:
    if not points:
        return Bounds(0.0, 0.0, 0.0, 0.0)
    xs = [p.x for p in points]
    ys = [p.y for p in points]
    return Bounds(min(xs), min(ys), max(xs), max(ys))


def bounds_overlap(a: Bounds, b: Bounds, padding: float = 0.0) -> bool:
    return not (
        a.max_x + padding < b.min_x
        or b.max_x + padding < a.min_x
        or a.max_y + padding < b.min_y
        or b.max_y + padding < a.min_y
    )


def point_in_bounds(point: Point, bounds: Bounds, padding: float = 0.0) -> bool:
    return (
        bounds.min_x - padding <= point.x <= bounds.max_x + padding
        and bounds.min_y - padding <= point.y <= bounds.max_y + padding
    )


# === Quadratic Bezier ===

def quadratic_point(start: Point, control: Point, end: Point, t: float) -> Point:
    one_minus_t = 1.0 - t
    a = one_minus_t * one_minus_t
    b = 2.0 * one_minus_t * t
    c = t * t
    return Point(
        a * start.x + b * control.x + c * end.x,
        a * start.y + b * control.y + c * end.y,
    )


def quadratic_control_point_for_through(start: Point, through: Point, end: Point) -> Point:
    """Control point whose curve passes through ``through`` at t=0.5."""
    return Point(
        2.0 * through.x - (start.x + end.x) / 2.0,
        2.0 * through.y - (start.y + end.y) / 2.0,
    )


def sample_quadratic_polyline(start: Point, control: Point, end: Point,
                              segments: int = Tolerances.QUADRATIC_SAMPLE_SEGMENTS) -> List[Point]:
    total = max(1, int(math.floor(segments)))
    ts = np.linspace(0.0, 1.0, total + 1)
    one_minus = 1.0 - ts
    a = one_minus * one_minus
    b = 2.0 * one_minus * ts
    c = ts * ts
    xs = a * start.x + b * control.x + c * end.x
    ys = a * start.y + b * control.y + c * end.y
    return [Point(float(x), float(y)) for x, y in zip(xs, ys)]


def nearest_point_on_quadratic(point: Point, start: Point, control: Point, end: Point,
                               segments: int = Tolerances.QUADRATIC_NEAREST_SEGMENTS) -> Point:
    samples = sample_quadratic_polyline(start, control, end, segments)
    return nearest_point_on_polyline(point, samples)


def distance_to_quadratic(point: Point, start: Point, control: Point, end: Point,
                          segments: int = Tolerances.QUADRATIC_NEAREST_SEGMENTS) -> float:
    return distance(point, nearest_point_on_quadratic(point, start, control, end, segments))


def quadratic_length_adaptive(start: Point, control: Point, end: Point) -> float:
    """Curve length by flatness-driven subdivision (chord vs control net)."""

    def _length(p0: Point, p1: Point, p2: Point, depth: int) -> float:
        chord = distance(p0, p2)
        net = distance(p0, p1) + distance(p1, p2)
        if depth >= Tolerances.CURVE_MAX_SUBDIVISION_DEPTH or net - chord <= Tolerances.CURVE_FLATNESS_EPSILON_PT:
            return (chord + net) / 2.0

        left_mid = p0.midpoint(p1)
        right_mid = p1.midpoint(p2)
        split = left_mid.midpoint(right_mid)
        return _length(p0, left_mid, split, depth + 1) + _length(split, right_mid, p2, depth + 1)

    return _length(start, control, end, 0)


# === Circular arcs ===

def circular_arc_geometry_from_three_points(start: Point, through: Point, end: Point,
                                            epsilon: float = Tolerances.GEOMETRY_ARC_EPSILON
                                            ) -> Optional[CircularArcGeometry]:
    """
    Circle through start, through and end, with the sweep that contains ``through``.

    Returns None when two points coincide, the points are collinear, or the
    sweep collapses to 0 or a full turn. This is the only place that decides
    whether a three-point arc is valid.
    """
    if (
        distance(start, through) <= epsilon
        or distance(start, end) <= epsilon
        or distance(through, end) <= epsilon
    ):
        return None

    ax, ay = start.x, start.y
    bx, by = through.x, through.y
    cx, cy = end.x, end.y

    denominator = 2.0 * (ax * (by - cy) + bx * (cy - ay) + cx * (ay - by))
    if abs(denominator) <= epsilon:
        return None

    a_sq = ax * ax + ay * ay
    b_sq = bx * bx + by * by
    c_sq = cx * cx + cy * cy
    center_x = (a_sq * (by - cy) + b_sq * (cy - ay) + c_sq * (ay - by)) / denominator
    center_y = (a_sq * (cx - bx) + b_sq * (ax - cx) + c_sq * (bx - ax)) / denominator

    if not (math.isfinite(center_x) and math.isfinite(center_y)):
        return None

    center = Point(center_x, center_y)
    radius = distance(center, start)
    if not math.isfinite(radius) or radius <= epsilon:
        return None

    start_angle = normalize_radians(math.atan2(start.y - center.y, start.x - center.x))
    through_angle = normalize_radians(math.atan2(through.y - center.y, through.x - center.x))
    end_angle = normalize_radians(math.atan2(end.y - center.y, end.x - center.x))

    ccw_span = positive_angle_delta(start_angle, end_angle)
    ccw_through = positive_angle_delta(start_angle, through_angle)
    angle_eps = Tolerances.GEOMETRY_ANGLE_EPSILON

    if ccw_span <= angle_eps or ccw_span >= TAU - angle_eps:
        return None

    sweep_positive = ccw_through <= ccw_span + angle_eps
    sweep_radians = ccw_span if sweep_positive else TAU - ccw_span

    if sweep_radians <= angle_eps or sweep_radians >= TAU - angle_eps:
        return None

    return CircularArcGeometry(
        center=center,
        radius=radius,
        start_angle=start_angle,
        through_angle=through_angle,
        end_angle=end_angle,
        sweep_positive=sweep_positive,
        sweep_radians=sweep_radians,
        large_arc_flag=1 if sweep_radians > math.pi else 0,
        sweep_flag=1 if sweep_positive else 0,
    )


def circular_arc_path_from_three_points(start: Point, through: Point, end: Point) -> Optional[str]:
    """SVG path data ("M ... A ...") for the arc, or None if the arc is invalid."""
    arc = circular_arc_geometry_from_three_points(start, through, end)
    if arc is None:
        return None
    return (
        f"M {start.x} {start.y} "
        f"A {arc.radius} {arc.radius} 0 {arc.large_arc_flag} {arc.sweep_flag} {end.x} {end.y}"
    )


def sample_arc_angles(arc: CircularArcGeometry, segments: int) -> List[Point]:
    """Evenly spaced samples along the true sweep (segments + 1 points)."""
    direction = 1.0 if arc.sweep_positive else -1.0
    angles = arc.start_angle + direction * np.linspace(0.0, arc.sweep_radians, segments + 1)
    xs = arc.center.x + np.cos(angles) * arc.radius
    ys = arc.center.y + np.sin(angles) * arc.radius
    return [Point(float(x), float(y)) for x, y in zip(xs, ys)]


def sample_circular_arc_polyline(start: Point, through: Point, end: Point,
                                 segments: int = Tolerances.ARC_SAMPLE_SEGMENTS) -> List[Point]:
    """
    Polyline along the circular arc. First and last samples are exactly start/end.
    An invalid arc degrades to its chord [start, end].
    """
    arc = circular_arc_geometry_from_three_points(start, through, end)
    if arc is None:
        return [start, end]

    points = sample_arc_angles(arc, max(2, int(math.floor(segments))))
    points[0] = start
    points[-1] = end
    return points


def nearest_point_on_circular_arc(point: Point, start: Point, through: Point, end: Point,
                                  segments: int = Tolerances.ARC_NEAREST_SEGMENTS) -> Point:
    samples = sample_circular_arc_polyline(start, through, end, segments)
    return nearest_point_on_polyline(point, samples)


def distance_to_circular_arc(point: Point, start: Point, through: Point, end: Point,
                             segments: int = Tolerances.ARC_NEAREST_SEGMENTS) -> float:
    return distance(point, nearest_point_on_circular_arc(point, start, through, end, segments))


def arc_length_from_three_points(start: Point, through: Point, end: Point) -> float:
    """True arc length; invalid arcs fall back to the chord length."""
    arc = circular_arc_geometry_from_three_points(start, through, end)
    if arc is None:
        return distance(start, end)
    return arc.arc_length
