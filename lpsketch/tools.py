"""
LP Sketch - Tool Enums
Active tools, snap kinds, pointer types and handle identifiers shared by the resolvers
"""

from enum import Enum


class Tool(Enum):
    """Available annotation tools"""
    SELECT = "select"
    MULTI_SELECT = "multi_select"
    LINE = "line"
    ARC = "arc"
    CURVE = "curve"
    LINEAR_AUTO_SPACING = "linear_auto_spacing"
    ARC_AUTO_SPACING = "arc_auto_spacing"
    SYMBOL = "symbol"
    LEGEND = "legend"
    GENERAL_NOTES = "general_notes"
    TEXT = "text"
    DIMENSION_TEXT = "dimension_text"
    ARROW = "arrow"
    PAN = "pan"
    CALIBRATE = "calibrate"
    MEASURE = "measure"
    MEASURE_MARK = "measure_mark"


TARGET_DISTANCE_TOOLS = frozenset({Tool.MEASURE, Tool.MEASURE_MARK})


class SnapKind(Enum):
    """Snap marker kinds"""
    ENDPOINT = "endpoint"
    INTERSECTION = "intersection"
    NEAREST = "nearest"
    PERPENDICULAR = "perpendicular"
    BASEPOINT = "basepoint"
    MARK = "mark"

    @property
    def priority(self) -> int:
        # Exact snaps all share one priority and outrank nearest-on-curve
        return 0 if self is SnapKind.NEAREST else 1


class PointerType(Enum):
    MOUSE = "mouse"
    PEN = "pen"
    TOUCH = "touch"


class CornerKind(Enum):
    """Auto-spacing vertex tag. Outside corners restart the spacing."""
    OUTSIDE = "outside"
    INSIDE = "inside"


class HandleKind(Enum):
    LINE = "line"
    ARC = "arc"
    CURVE = "curve"
    ARROW = "arrow"
    SYMBOL_DIRECTION = "symbol-direction"


class HandleRole(Enum):
    START = "start"
    THROUGH = "through"
    END = "end"
    TAIL = "tail"
    HEAD = "head"
    DIRECTION = "direction"


HANDLE_ROLES = {
    HandleKind.LINE: (HandleRole.START, HandleRole.END),
    HandleKind.ARC: (HandleRole.START, HandleRole.THROUGH, HandleRole.END),
    HandleKind.CURVE: (HandleRole.START, HandleRole.THROUGH, HandleRole.END),
    HandleKind.ARROW: (HandleRole.TAIL, HandleRole.HEAD),
    HandleKind.SYMBOL_DIRECTION: (HandleRole.DIRECTION,),
}
