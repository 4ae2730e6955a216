"""
LP Sketch - Central Tolerance Configuration
===========================================

All tolerances and screen-space constants in one place.

Tolerance philosophy:
- Document space is PDF points at 1:1 page scale.
- Pixel constants (*_PX) are converted to document units by dividing by the
  current zoom (never below MIN_ZOOM).
- Geometry epsilons are absolute document-space values.

Usage:
    from config.tolerances import Tolerances

    # Directly as class attributes
    eps = Tolerances.NODE_CLUSTER_EPSILON_PT

    # Or via convenience functions
    from config.tolerances import snap_tolerance_doc
    tol = snap_tolerance_doc(view.zoom)
"""


class Tolerances:
    """
    Central tolerance constants for the annotation kernel.

    Categories:
    - GEOMETRY_*: primitive math (arcs, intersections)
    - SNAP_*: snap resolver
    - NODE_*: auto-connector node detection
    - SPACING_*: auto-spacing
    - HANDLE_*: selection handles and hit testing
    - TARGET_DISTANCE_*: measure tool distance lock
    - HISTORY_*: undo/redo
    """

    # =========================================================================
    # Geometry primitives
    # =========================================================================

    # Coincidence / collinearity epsilon for three-point arcs
    GEOMETRY_ARC_EPSILON = 1e-6

    # Sweep angles closer than this to 0 or 2*pi are degenerate
    GEOMETRY_ANGLE_EPSILON = 1e-7

    # Segment intersection bounding-range tolerance
    GEOMETRY_INTERSECTION_EPSILON = 1e-9

    # Minimum distance between two placement clicks
    GEOMETRY_MIN_POINT_SEPARATION = 0.01

    # Default sampling resolutions
    QUADRATIC_SAMPLE_SEGMENTS = 24
    QUADRATIC_NEAREST_SEGMENTS = 48
    ARC_SAMPLE_SEGMENTS = 32
    ARC_NEAREST_SEGMENTS = 96

    # Adaptive quadratic length
    CURVE_FLATNESS_EPSILON_PT = 0.35
    CURVE_MAX_SUBDIVISION_DEPTH = 9

    # =========================================================================
    # Snap resolver
    # =========================================================================

    SNAP_TOLERANCE_PX = 10.0
    SNAP_POLYLINE_SEGMENTS = 24  # arc/curve sampling for intersection candidates
    SNAP_NEAREST_SEGMENTS = 64  # arc/curve sampling for nearest candidates

    # =========================================================================
    # Auto connectors
    # =========================================================================

    NODE_CLUSTER_EPSILON_PT = 0.75
    NODE_TOUCH_EPSILON_PT = 0.9
    NODE_ARC_SAMPLE_STEPS = 56
    NODE_ARC_DISTANCE_SEGMENTS = 96

    # Auto-connector ids round positions to 1/NODE_ID_PRECISION pt
    NODE_ID_PRECISION = 10

    # =========================================================================
    # Auto spacing
    # =========================================================================

    SPACING_DEDUPE_EPSILON_PT = 0.5
    SPACING_ARC_HIT_TOLERANCE_PX = 12.0

    # =========================================================================
    # Selection handles / hit testing
    # =========================================================================

    HANDLE_HIT_TOLERANCE_PX = 12.0
    HANDLE_DIRECTION_LENGTH_PX = 34.0
    HIT_TOLERANCE_PX = 10.0
    HIT_LINEAR_TIE_TOLERANCE_PX = 0.5
    HIT_ARC_SEGMENTS = 72

    # Lower bound for zoom when converting pixels to document units
    MIN_ZOOM = 0.01

    # =========================================================================
    # Target distance lock (measure tools)
    # =========================================================================

    TARGET_DISTANCE_TOLERANCE_PX = 10.0
    TARGET_DISTANCE_RELEASE_PX = 20.0
    TARGET_DISTANCE_HOLD_MS = 1000.0
    TARGET_DISTANCE_MIN_SEGMENT_PT = 0.0001

    # =========================================================================
    # History
    # =========================================================================

    HISTORY_MAX_DEPTH = 100


# =============================================================================
# Convenience functions
# =============================================================================

def px_to_doc(px: float, zoom: float) -> float:
    """Converts a screen distance in pixels to document units at ``zoom``."""
    return px / max(Tolerances.MIN_ZOOM, zoom)


def snap_tolerance_doc(zoom: float) -> float:
    """Snap radius in document units (10px at the current zoom)."""
    return px_to_doc(Tolerances.SNAP_TOLERANCE_PX, zoom)


def node_cluster_epsilon() -> float:
    return Tolerances.NODE_CLUSTER_EPSILON_PT


def node_touch_epsilon() -> float:
    return Tolerances.NODE_TOUCH_EPSILON_PT


def spacing_dedupe_epsilon() -> float:
    return Tolerances.SPACING_DEDUPE_EPSILON_PT


def history_max_depth() -> int:
    return Tolerances.HISTORY_MAX_DEPTH
