"""
LP Sketch - Input Point Resolver
================================

Turns a raw pointer position into the point a tool actually uses.

Order of precedence:
1. Angle constraint relative to the tool's reference point (line start,
   dimension start, last auto-spacing vertex, arrow tail, symbol anchor or
   the fixed end of a dragged handle). Length from the reference is kept.
2. Target-distance lock for the measure tools: the cumulative path length is
   pulled to the nearest multiple of a real-world target distance. The lock
   is sticky for small movements and for a short hold time.
3. Otherwise the (possibly snapped) point.

Shift disables geometric snaps, Ctrl disables angle snapping, touch input
suppresses the preview marker.

Usage:
    resolver = InputPointResolver(now_ms=clock)
    result = resolver.resolve(raw, doc, Tool.LINE,
                              reference_state=SnapReferenceState(line_start=start))
    place_at(result.point)
"""

from dataclasses import dataclass, field
from typing import Callable, List, Optional
import math
import time

from loguru import logger

from config.feature_flags import is_enabled
from config.tolerances import Tolerances, px_to_doc
from lpsketch.document import Document, Selection
from lpsketch.geometry import Point, angle_degrees, distance, polyline_length, snap_angle_degrees
from lpsketch.snapper import SnapPointPreview, SnapResolution, resolve_snap_point
from lpsketch.tools import PointerType, SnapKind, TARGET_DISTANCE_TOOLS, Tool


@dataclass
class ModifierState:
    shift_key: bool = False
    ctrl_key: bool = False
    pointer_type: PointerType = PointerType.MOUSE


@dataclass
class SnapReferenceState:
    """In-progress tool state that provides reference points."""
    line_start: Optional[Point] = None
    dimension_start: Optional[Point] = None
    dimension_end: Optional[Point] = None
    measure_points: List[Point] = field(default_factory=list)
    mark_anchor: Optional[Point] = None
    mark_corners: List[Point] = field(default_factory=list)
    linear_auto_spacing_vertices: List[Point] = field(default_factory=list)
    arrow_start: Optional[Point] = None
    symbol_direction_start: Optional[Point] = None
    # Fixed end of the handle being dragged with the select tool
    handle_anchor: Optional[Point] = None


@dataclass(frozen=True)
class TargetDistanceSnapLock:
    tool: Tool
    point: Point
    snapped_distance_pt: float
    target_distance_ft: float
    acquired_at_ms: float


@dataclass
class ResolvedInputPoint:
    point: Point
    preview: Optional[SnapPointPreview] = None
    target_distance_lock: Optional[TargetDistanceSnapLock] = None


def apply_angle_constraint(start: Point, end: Point, increment_deg: float) -> Point:
    """Rotates ``end`` about ``start`` onto the nearest angle increment, keeping its length."""
    length = distance(start, end)
    if length == 0:
        return end

    snapped = math.radians(snap_angle_degrees(angle_degrees(start, end), increment_deg))
    return Point(start.x + math.cos(snapped) * length, start.y + math.sin(snapped) * length)


def snap_reference_point_for_tool(tool: Tool, state: SnapReferenceState) -> Optional[Point]:
    """Reference point for perpendicular snapping."""
    if tool == Tool.LINE:
        return state.line_start
    if tool == Tool.DIMENSION_TEXT:
        return state.dimension_end if state.dimension_end is not None else state.dimension_start
    if tool == Tool.MEASURE:
        return state.measure_points[-1] if state.measure_points else None
    if tool == Tool.MEASURE_MARK:
        return state.mark_corners[-1] if state.mark_corners else state.mark_anchor
    if tool == Tool.LINEAR_AUTO_SPACING:
        vertices = state.linear_auto_spacing_vertices
        return vertices[-1] if vertices else None
    if tool == Tool.ARROW:
        return state.arrow_start
    if tool == Tool.SELECT:
        return state.handle_anchor
    return None


def _angle_reference_for_tool(tool: Tool, state: SnapReferenceState) -> Optional[Point]:
    if tool == Tool.LINE:
        return state.line_start
    if tool == Tool.DIMENSION_TEXT:
        # Only while placing the second dimension point
        return state.dimension_start if state.dimension_end is None else None
    if tool == Tool.MEASURE_MARK:
        return state.mark_corners[-1] if state.mark_corners else state.mark_anchor
    if tool == Tool.LINEAR_AUTO_SPACING:
        vertices = state.linear_auto_spacing_vertices
        return vertices[-1] if vertices else None
    if tool == Tool.ARROW:
        return state.arrow_start
    if tool == Tool.SYMBOL:
        return state.symbol_direction_start
    if tool == Tool.SELECT:
        return state.handle_anchor
    return None


def _target_distance_path(tool: Tool, state: SnapReferenceState) -> Optional[List[Point]]:
    if tool == Tool.MEASURE:
        return list(state.measure_points) if state.measure_points else None
    if tool == Tool.MEASURE_MARK:
        if state.mark_anchor is None:
            return None
        return [state.mark_anchor, *state.mark_corners]
    return None


def _monotonic_ms() -> float:
    return time.monotonic() * 1000.0


class InputPointResolver:
    """
    Stateful wrapper around the snap resolver.

    The only state is the current target-distance lock; ``now_ms`` is the
    monotonic clock used for its hold time (injectable for tests).
    """

    def __init__(self, now_ms: Optional[Callable[[], float]] = None,
                 target_distance_tolerance_px: float = Tolerances.TARGET_DISTANCE_TOLERANCE_PX,
                 target_distance_release_px: float = Tolerances.TARGET_DISTANCE_RELEASE_PX,
                 target_distance_hold_ms: float = Tolerances.TARGET_DISTANCE_HOLD_MS):
        self.now_ms = now_ms or _monotonic_ms
        self.target_distance_tolerance_px = target_distance_tolerance_px
        self.target_distance_release_px = target_distance_release_px
        self.target_distance_hold_ms = target_distance_hold_ms
        self.target_distance_lock: Optional[TargetDistanceSnapLock] = None

    def reset(self):
        self.target_distance_lock = None

    def resolve(self, raw: Point, document: Document, tool: Tool,
                modifiers: Optional[ModifierState] = None,
                reference_state: Optional[SnapReferenceState] = None,
                target_distance_ft: Optional[float] = None,
                snap_resolution: Optional[SnapResolution] = None,
                exclude_selection: Optional[Selection] = None,
                snap_reference_point: Optional[Point] = None) -> ResolvedInputPoint:
        """
        Resolves ``raw`` for ``tool``.

        Args:
            raw: Pointer position in document space
            document: Full document; snapping runs on its current page
            tool: Active tool
            modifiers: Shift/Ctrl/pointer type of the event
            reference_state: In-progress tool points
            target_distance_ft: Measure target distance in real units (None = off)
            snap_resolution: Precomputed snap for ``raw`` (skips resolving again)
            exclude_selection: Entity being dragged, never a snap target
            snap_reference_point: Overrides the per-tool perpendicular reference
        """
        modifiers = modifiers or ModifierState()
        state = reference_state or SnapReferenceState()
        settings = document.settings

        geometric_snaps = settings.snap_enabled and not modifiers.shift_key
        angle_snaps = settings.angle_snap_enabled and not modifiers.ctrl_key
        can_preview = geometric_snaps and modifiers.pointer_type != PointerType.TOUCH

        lock = self.target_distance_lock if geometric_snaps else None

        if geometric_snaps:
            if snap_resolution is None:
                reference = snap_reference_point
                if reference is None:
                    reference = snap_reference_point_for_tool(tool, state)
                snap_resolution = resolve_snap_point(
                    raw, document.visible_on_page(),
                    exclude_selection=exclude_selection,
                    reference_point=reference,
                )
            unconstrained = snap_resolution.point
        else:
            snap_resolution = None
            unconstrained = raw

        snap_preview = None
        if can_preview and snap_resolution is not None and snap_resolution.snapped and snap_resolution.kind:
            snap_preview = SnapPointPreview(snap_resolution.point, snap_resolution.kind)

        angle_reference = _angle_reference_for_tool(tool, state) if angle_snaps else None
        if angle_reference is not None:
            angled = apply_angle_constraint(angle_reference, unconstrained, settings.angle_increment_deg)
            if is_enabled("input_debug"):
                logger.debug(f"[INPUT] {tool.value}: angle constraint from {angle_reference} -> {angled}")

            if tool != Tool.MEASURE_MARK:
                self.target_distance_lock = lock
                return ResolvedInputPoint(angled, snap_preview, lock)
            candidate = angled
        else:
            candidate = unconstrained

        if geometric_snaps:
            point, snapped, lock = self._resolve_target_distance(
                tool, candidate, document, state, target_distance_ft, lock)
        else:
            point, snapped, lock = candidate, False, None

        self.target_distance_lock = lock
        preview = SnapPointPreview(point, SnapKind.MARK) if can_preview and snapped else snap_preview
        return ResolvedInputPoint(point, preview, lock)

    def _resolve_target_distance(self, tool: Tool, candidate: Point, document: Document,
                                 state: SnapReferenceState, target_distance_ft: Optional[float],
                                 current_lock: Optional[TargetDistanceSnapLock]):
        unsnapped = (candidate, False, None)
        if tool not in TARGET_DISTANCE_TOOLS:
            return unsnapped

        path = _target_distance_path(tool, state)
        if not target_distance_ft or not document.scale.is_usable or not path:
            return unsnapped

        start = path[-1]
        segment_length = distance(start, candidate)
        if segment_length <= Tolerances.TARGET_DISTANCE_MIN_SEGMENT_PT:
            return unsnapped

        target_pt = target_distance_ft / document.scale.real_units_per_point
        if not math.isfinite(target_pt) or target_pt <= 0:
            return unsnapped

        base_length = polyline_length(path)
        candidate_length = base_length + segment_length
        multiple = max(1, math.floor(candidate_length / target_pt + 0.5))
        snapped_distance = multiple * target_pt
        off_target = abs(candidate_length - snapped_distance)

        zoom = document.view.zoom
        lock_tolerance = px_to_doc(self.target_distance_tolerance_px, zoom)
        release_tolerance = px_to_doc(self.target_distance_release_px, zoom)

        if (
            current_lock is not None
            and current_lock.tool == tool
            and abs(current_lock.target_distance_ft - target_distance_ft) < 0.0001
            and abs(current_lock.snapped_distance_pt - snapped_distance) < 0.01
        ):
            age_ms = self.now_ms() - current_lock.acquired_at_ms
            moved = distance(candidate, current_lock.point)
            if moved <= release_tolerance and (
                age_ms <= self.target_distance_hold_ms or off_target <= lock_tolerance
            ):
                return current_lock.point, True, current_lock

        if off_target > lock_tolerance:
            return unsnapped

        along_segment = snapped_distance - base_length
        if along_segment < 0 or along_segment > segment_length + 0.001:
            return unsnapped

        t = along_segment / segment_length
        snapped_point = Point(
            start.x + (candidate.x - start.x) * t,
            start.y + (candidate.y - start.y) * t,
        )
        lock = TargetDistanceSnapLock(
            tool=tool,
            point=snapped_point,
            snapped_distance_pt=snapped_distance,
            target_distance_ft=target_distance_ft,
            acquired_at_ms=self.now_ms(),
        )
        if is_enabled("input_debug"):
            logger.debug(f"[INPUT] target distance lock x{multiple} at {snapped_point} ({snapped_distance:.3f}pt)")
        return snapped_point, True, lock
