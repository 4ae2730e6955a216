import pytest
from loguru import logger

from config.feature_flags import FEATURE_FLAGS, set_flag
from lpsketch.document import (
    Arc,
    Curve,
    Document,
    Line,
    MaterialColor,
    ScaleState,
    WireClass,
)
from lpsketch.geometry import Point


# Global Feature Flag Defaults - Single Source of Truth for Test Isolation
# ========================================================================
# Every test starts with clean feature flags.
# Keep in sync with config/feature_flags.py.
FEATURE_FLAG_DEFAULTS = {
    # Debug modes
    "snap_debug": False,
    "input_debug": False,
    "auto_connector_debug": False,
    "spacing_debug": False,
    "history_debug": False,

    # Auto connectors
    "incremental_auto_connectors": True,
    "preserve_connector_mode_on_sync": True,
}


@pytest.fixture(autouse=True)
def _global_feature_flag_isolation():
    """
    Resets all feature flags before and after every test, and drops flags a
    test invented at runtime.
    """
    for key in list(FEATURE_FLAGS):
        if key not in FEATURE_FLAG_DEFAULTS:
            del FEATURE_FLAGS[key]
    for key, value in FEATURE_FLAG_DEFAULTS.items():
        set_flag(key, value)

    yield

    for key in list(FEATURE_FLAGS):
        if key not in FEATURE_FLAG_DEFAULTS:
            del FEATURE_FLAGS[key]
    for key, value in FEATURE_FLAG_DEFAULTS.items():
        set_flag(key, value)


@pytest.fixture
def log_messages():
    """Collects loguru messages emitted during the test."""
    messages = []
    sink_id = logger.add(lambda message: messages.append(message.record["message"]), level="DEBUG")
    yield messages
    logger.remove(sink_id)


# === Document factories ===

@pytest.fixture
def empty_doc():
    return Document()


@pytest.fixture
def scaled_doc():
    """Document calibrated to 1 real unit per point."""
    doc = Document()
    doc.scale = ScaleState(is_set=True, real_units_per_point=1.0, display_units="ft-in")
    return doc


def make_line(x1, y1, x2, y2, color=MaterialColor.GREEN, wire_class=WireClass.CLASS1, page=1, id=None):
    line = Line(start=Point(x1, y1), end=Point(x2, y2), color=color, wire_class=wire_class, page=page)
    if id:
        line.id = id
    return line


def make_arc(start, through, end, color=MaterialColor.GREEN, page=1, id=None):
    arc = Arc(start=Point(*start), through=Point(*through), end=Point(*end), color=color, page=page)
    if id:
        arc.id = id
    return arc


def make_curve(start, control, end, color=MaterialColor.GREEN, page=1, id=None):
    curve = Curve(start=Point(*start), through=Point(*control), end=Point(*end), color=color, page=page)
    if id:
        curve.id = id
    return curve
