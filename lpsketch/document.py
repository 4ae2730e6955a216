"""
LP Sketch - Document Model
==========================

Typed annotation document: conductors (lines, arcs, curves), symbols, texts,
arrows, dimension texts, construction marks and legend/note placements, plus
view, settings and scale state.

Elements live in flat, id-keyed lists. Operations never mutate a document
that is installed as "current"; they work on ``Document.clone()``.

Usage:
    from lpsketch.document import Document, Line, Selection, SelectionKind

    doc = Document()
    doc.lines.append(Line(start=Point(0, 0), end=Point(100, 0)))
    line = doc.find(Selection(SelectionKind.LINE, doc.lines[0].id))
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Union
import copy
import uuid

from loguru import logger

from config.version import SCHEMA_VERSION
from lpsketch.geometry import Point


def _new_id() -> str:
    return str(uuid.uuid4())[:8]


class KernelError(Exception):
    """Base class for exceptions raised by the annotation kernel."""


class UnknownElementError(KernelError, KeyError):
    """A selection refers to an element that does not exist in the document."""


# === Enumerations ===

class MaterialColor(Enum):
    GREEN = "green"
    BLUE = "blue"
    RED = "red"
    CYAN = "cyan"
    PURPLE = "purple"  # bimetallic, only ever derived


COPPER_COLORS = frozenset({MaterialColor.GREEN, MaterialColor.CYAN, MaterialColor.RED})


class WireClass(Enum):
    CLASS1 = "class1"
    CLASS2 = "class2"


class SymbolClass(Enum):
    CLASS1 = "class1"
    CLASS2 = "class2"
    NONE = "none"

    @classmethod
    def from_wire_class(cls, wire_class: WireClass) -> 'SymbolClass':
        return cls(wire_class.value)


class AutoConnectorType(Enum):
    MECHANICAL = "mechanical"
    CADWELD = "cadweld"


class LayerId(Enum):
    ROOFTOP = "rooftop"
    DOWNLEADS = "downleads"
    GROUNDING = "grounding"
    ANNOTATION = "annotation"


class SymbolType(Enum):
    AIR_TERMINAL = "air_terminal"
    BONDED_AIR_TERMINAL = "bonded_air_terminal"
    BOND = "bond"
    CADWELD_CONNECTION = "cadweld_connection"
    CADWELD_CROSSRUN_CONNECTION = "cadweld_crossrun_connection"
    CONTINUED = "continued"
    CONNECT_EXISTING = "connect_existing"
    CONDUIT_DOWNLEAD_GROUND = "conduit_downlead_ground"
    CONDUIT_DOWNLEAD_ROOF = "conduit_downlead_roof"
    SURFACE_DOWNLEAD_GROUND = "surface_downlead_ground"
    SURFACE_DOWNLEAD_ROOF = "surface_downlead_roof"
    THROUGH_ROOF_TO_STEEL = "through_roof_to_steel"
    THROUGH_WALL_CONNECTOR = "through_wall_connector"
    GROUND_ROD = "ground_rod"
    STEEL_BOND = "steel_bond"
    CABLE_TO_CABLE_CONNECTION = "cable_to_cable_connection"
    MECHANICAL_CROSSRUN_CONNECTION = "mechanical_crossrun_connection"


DIRECTIONAL_SYMBOLS = frozenset({
    SymbolType.CONTINUED,
    SymbolType.CONNECT_EXISTING,
    SymbolType.CONDUIT_DOWNLEAD_GROUND,
    SymbolType.CONDUIT_DOWNLEAD_ROOF,
    SymbolType.SURFACE_DOWNLEAD_GROUND,
    SymbolType.SURFACE_DOWNLEAD_ROOF,
    SymbolType.GROUND_ROD,
})

DOWNLEAD_SYMBOLS = frozenset({
    SymbolType.CONDUIT_DOWNLEAD_GROUND,
    SymbolType.CONDUIT_DOWNLEAD_ROOF,
    SymbolType.SURFACE_DOWNLEAD_GROUND,
    SymbolType.SURFACE_DOWNLEAD_ROOF,
})

LETTERED_SYMBOLS = frozenset({SymbolType.AIR_TERMINAL, SymbolType.BONDED_AIR_TERMINAL})

NO_CLASS_SYMBOLS = frozenset({SymbolType.CONTINUED, SymbolType.CONNECT_EXISTING})

AUTO_CONNECTOR_SYMBOLS = frozenset({
    SymbolType.CABLE_TO_CABLE_CONNECTION,
    SymbolType.CADWELD_CONNECTION,
    SymbolType.MECHANICAL_CROSSRUN_CONNECTION,
    SymbolType.CADWELD_CROSSRUN_CONNECTION,
})


def class_for_symbol(symbol_type: SymbolType, active_class: WireClass) -> SymbolClass:
    if symbol_type in NO_CLASS_SYMBOLS:
        return SymbolClass.NONE
    return SymbolClass.from_wire_class(active_class)


# === Elements ===

def _opt_page(data: dict) -> Optional[int]:
    page = data.get("page")
    return int(page) if page is not None else None


@dataclass
class Line:
    start: Point = field(default_factory=Point)
    end: Point = field(default_factory=Point)
    color: MaterialColor = MaterialColor.GREEN
    wire_class: WireClass = WireClass.CLASS1
    page: Optional[int] = None
    id: str = field(default_factory=_new_id)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "start": self.start.to_dict(),
            "end": self.end.to_dict(),
            "page": self.page,
            "color": self.color.value,
            "class": self.wire_class.value,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'Line':
        return cls(
            start=Point.from_dict(data["start"]),
            end=Point.from_dict(data["end"]),
            color=MaterialColor(data.get("color", "green")),
            wire_class=WireClass(data.get("class", "class1")),
            page=_opt_page(data),
            id=data["id"],
        )


@dataclass
class Arc:
    """Three-point circular arc. ``through`` lies on the arc."""
    start: Point = field(default_factory=Point)
    through: Point = field(default_factory=Point)
    end: Point = field(default_factory=Point)
    color: MaterialColor = MaterialColor.GREEN
    wire_class: WireClass = WireClass.CLASS1
    page: Optional[int] = None
    id: str = field(default_factory=_new_id)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "start": self.start.to_dict(),
            "through": self.through.to_dict(),
            "end": self.end.to_dict(),
            "page": self.page,
            "color": self.color.value,
            "class": self.wire_class.value,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'Arc':
        return cls(
            start=Point.from_dict(data["start"]),
            through=Point.from_dict(data["through"]),
            end=Point.from_dict(data["end"]),
            color=MaterialColor(data.get("color", "green")),
            wire_class=WireClass(data.get("class", "class1")),
            page=_opt_page(data),
            id=data["id"],
        )


@dataclass
class Curve:
    """
    Quadratic Bezier conductor.

    ``through`` stores the control point. The visual midpoint is
    ``quadratic_point(start, through, end, 0.5)``.
    """
    start: Point = field(default_factory=Point)
    through: Point = field(default_factory=Point)
    end: Point = field(default_factory=Point)
    color: MaterialColor = MaterialColor.GREEN
    wire_class: WireClass = WireClass.CLASS1
    page: Optional[int] = None
    id: str = field(default_factory=_new_id)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "start": self.start.to_dict(),
            "through": self.through.to_dict(),
            "end": self.end.to_dict(),
            "page": self.page,
            "color": self.color.value,
            "class": self.wire_class.value,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'Curve':
        return cls(
            start=Point.from_dict(data["start"]),
            through=Point.from_dict(data["through"]),
            end=Point.from_dict(data["end"]),
            color=MaterialColor(data.get("color", "green")),
            wire_class=WireClass(data.get("class", "class1")),
            page=_opt_page(data),
            id=data["id"],
        )


Conductor = Union[Line, Arc, Curve]


@dataclass
class Symbol:
    symbol_type: SymbolType = SymbolType.AIR_TERMINAL
    position: Point = field(default_factory=Point)
    direction_deg: Optional[float] = None
    vertical_footage_ft: Optional[float] = None
    letter: Optional[str] = None
    auto_connector: bool = False
    color: MaterialColor = MaterialColor.GREEN
    symbol_class: SymbolClass = SymbolClass.CLASS1
    page: Optional[int] = None
    id: str = field(default_factory=_new_id)

    @property
    def is_directional(self) -> bool:
        return self.symbol_type in DIRECTIONAL_SYMBOLS

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "symbolType": self.symbol_type.value,
            "position": self.position.to_dict(),
            "page": self.page,
            "color": self.color.value,
            "class": self.symbol_class.value,
        }
        if self.direction_deg is not None:
            data["directionDeg"] = self.direction_deg
        if self.vertical_footage_ft is not None:
            data["verticalFootageFt"] = self.vertical_footage_ft
        if self.letter is not None:
            data["letter"] = self.letter
        if self.auto_connector:
            data["autoConnector"] = True
        return data

    @classmethod
    def from_dict(cls, data: dict) -> 'Symbol':
        return cls(
            symbol_type=SymbolType(data["symbolType"]),
            position=Point.from_dict(data["position"]),
            direction_deg=data.get("directionDeg"),
            vertical_footage_ft=data.get("verticalFootageFt"),
            letter=data.get("letter"),
            auto_connector=bool(data.get("autoConnector", False)),
            color=MaterialColor(data.get("color", "green")),
            symbol_class=SymbolClass(data.get("class", "class1")),
            page=_opt_page(data),
            id=data["id"],
        )


@dataclass
class Text:
    position: Point = field(default_factory=Point)
    text: str = ""
    color: MaterialColor = MaterialColor.GREEN
    layer: LayerId = LayerId.ANNOTATION
    page: Optional[int] = None
    id: str = field(default_factory=_new_id)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "position": self.position.to_dict(),
            "text": self.text,
            "page": self.page,
            "color": self.color.value,
            "layer": self.layer.value,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'Text':
        return cls(
            position=Point.from_dict(data["position"]),
            text=data.get("text", ""),
            color=MaterialColor(data.get("color", "green")),
            layer=LayerId(data.get("layer", "annotation")),
            page=_opt_page(data),
            id=data["id"],
        )


@dataclass
class Arrow:
    tail: Point = field(default_factory=Point)
    head: Point = field(default_factory=Point)
    color: MaterialColor = MaterialColor.GREEN
    layer: LayerId = LayerId.ANNOTATION
    page: Optional[int] = None
    id: str = field(default_factory=_new_id)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "tail": self.tail.to_dict(),
            "head": self.head.to_dict(),
            "page": self.page,
            "color": self.color.value,
            "layer": self.layer.value,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'Arrow':
        return cls(
            tail=Point.from_dict(data["tail"]),
            head=Point.from_dict(data["head"]),
            color=MaterialColor(data.get("color", "green")),
            layer=LayerId(data.get("layer", "annotation")),
            page=_opt_page(data),
            id=data["id"],
        )


@dataclass
class DimensionText:
    """Measured dimension between start and end, labelled at ``position``."""
    start: Point = field(default_factory=Point)
    end: Point = field(default_factory=Point)
    position: Point = field(default_factory=Point)
    override_text: Optional[str] = None
    show_linework: bool = True
    layer: LayerId = LayerId.ANNOTATION
    page: Optional[int] = None
    id: str = field(default_factory=_new_id)

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "start": self.start.to_dict(),
            "end": self.end.to_dict(),
            "position": self.position.to_dict(),
            "page": self.page,
            "showLinework": self.show_linework,
            "layer": self.layer.value,
        }
        if self.override_text is not None:
            data["overrideText"] = self.override_text
        return data

    @classmethod
    def from_dict(cls, data: dict) -> 'DimensionText':
        return cls(
            start=Point.from_dict(data["start"]),
            end=Point.from_dict(data["end"]),
            position=Point.from_dict(data["position"]),
            override_text=data.get("overrideText"),
            show_linework=bool(data.get("showLinework", True)),
            layer=LayerId(data.get("layer", "annotation")),
            page=_opt_page(data),
            id=data["id"],
        )


@dataclass
class Mark:
    """Construction aid, snap target only."""
    position: Point = field(default_factory=Point)
    page: Optional[int] = None
    id: str = field(default_factory=_new_id)

    def to_dict(self) -> dict:
        return {"id": self.id, "position": self.position.to_dict(), "page": self.page}

    @classmethod
    def from_dict(cls, data: dict) -> 'Mark':
        return cls(position=Point.from_dict(data["position"]), page=_opt_page(data), id=data["id"])


@dataclass
class LegendPlacement:
    position: Point = field(default_factory=Point)
    edited_labels: Dict[str, str] = field(default_factory=dict)
    page: Optional[int] = None
    id: str = field(default_factory=_new_id)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "position": self.position.to_dict(),
            "page": self.page,
            "editedLabels": dict(self.edited_labels),
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'LegendPlacement':
        return cls(
            position=Point.from_dict(data["position"]),
            edited_labels=dict(data.get("editedLabels", {})),
            page=_opt_page(data),
            id=data["id"],
        )


@dataclass
class GeneralNotePlacement:
    position: Point = field(default_factory=Point)
    page: Optional[int] = None
    id: str = field(default_factory=_new_id)

    def to_dict(self) -> dict:
        return {"id": self.id, "position": self.position.to_dict(), "page": self.page}

    @classmethod
    def from_dict(cls, data: dict) -> 'GeneralNotePlacement':
        return cls(position=Point.from_dict(data["position"]), page=_opt_page(data), id=data["id"])


def element_page(element) -> int:
    """Page of an element; elements without a page belong to page 1."""
    page = getattr(element, "page", None)
    return page if page is not None else 1


# === Selection ===

class SelectionKind(Enum):
    LINE = "line"
    ARC = "arc"
    CURVE = "curve"
    SYMBOL = "symbol"
    TEXT = "text"
    DIMENSION_TEXT = "dimension_text"
    ARROW = "arrow"
    LEGEND = "legend"
    GENERAL_NOTE = "general_note"
    MARK = "mark"


CONDUCTOR_KINDS = frozenset({SelectionKind.LINE, SelectionKind.ARC, SelectionKind.CURVE})

# SelectionKind -> Document attribute holding that collection
COLLECTION_FOR_KIND: Dict[SelectionKind, str] = {
    SelectionKind.LINE: "lines",
    SelectionKind.ARC: "arcs",
    SelectionKind.CURVE: "curves",
    SelectionKind.SYMBOL: "symbols",
    SelectionKind.TEXT: "texts",
    SelectionKind.DIMENSION_TEXT: "dimension_texts",
    SelectionKind.ARROW: "arrows",
    SelectionKind.LEGEND: "legend_placements",
    SelectionKind.GENERAL_NOTE: "general_note_placements",
    SelectionKind.MARK: "marks",
}


@dataclass(frozen=True)
class Selection:
    """Identifies one placed entity by (kind, id)."""
    kind: SelectionKind
    id: str

    def to_dict(self) -> dict:
        return {"kind": self.kind.value, "id": self.id}

    @classmethod
    def from_dict(cls, data: dict) -> 'Selection':
        return cls(SelectionKind(data["kind"]), data["id"])


# === Document state ===

@dataclass
class ViewState:
    current_page: int = 1
    zoom: float = 1.0
    pan: Point = field(default_factory=Point)

    def to_dict(self) -> dict:
        return {"currentPage": self.current_page, "zoom": self.zoom, "pan": self.pan.to_dict()}

    @classmethod
    def from_dict(cls, data: dict) -> 'ViewState':
        return cls(
            current_page=int(data.get("currentPage", 1)),
            zoom=float(data.get("zoom", 1.0)),
            pan=Point.from_dict(data.get("pan", {"x": 0, "y": 0})),
        )


@dataclass
class SettingsState:
    active_color: MaterialColor = MaterialColor.GREEN
    active_class: WireClass = WireClass.CLASS1
    snap_enabled: bool = True
    angle_snap_enabled: bool = True
    angle_increment_deg: float = 15.0
    auto_connectors_enabled: bool = True
    auto_connector_type: AutoConnectorType = AutoConnectorType.MECHANICAL

    def to_dict(self) -> dict:
        return {
            "activeColor": self.active_color.value,
            "activeClass": self.active_class.value,
            "snapEnabled": self.snap_enabled,
            "angleSnapEnabled": self.angle_snap_enabled,
            "angleIncrementDeg": self.angle_increment_deg,
            "autoConnectorsEnabled": self.auto_connectors_enabled,
            "autoConnectorType": self.auto_connector_type.value,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'SettingsState':
        return cls(
            active_color=MaterialColor(data.get("activeColor", "green")),
            active_class=WireClass(data.get("activeClass", "class1")),
            snap_enabled=bool(data.get("snapEnabled", True)),
            angle_snap_enabled=bool(data.get("angleSnapEnabled", True)),
            angle_increment_deg=float(data.get("angleIncrementDeg", 15.0)),
            auto_connectors_enabled=bool(data.get("autoConnectorsEnabled", True)),
            auto_connector_type=AutoConnectorType(data.get("autoConnectorType", "mechanical")),
        )


@dataclass
class ScaleState:
    """Real-world units per document point. Unset until calibrated."""
    is_set: bool = False
    real_units_per_point: Optional[float] = None
    display_units: Optional[str] = None

    @property
    def is_usable(self) -> bool:
        return self.is_set and bool(self.real_units_per_point) and self.real_units_per_point > 0

    def to_dict(self) -> dict:
        return {
            "isSet": self.is_set,
            "realUnitsPerPoint": self.real_units_per_point,
            "displayUnits": self.display_units,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'ScaleState':
        return cls(
            is_set=bool(data.get("isSet", False)),
            real_units_per_point=data.get("realUnitsPerPoint"),
            display_units=data.get("displayUnits"),
        )


_ELEMENT_TYPES = {
    "lines": Line,
    "arcs": Arc,
    "curves": Curve,
    "symbols": Symbol,
    "texts": Text,
    "arrows": Arrow,
    "dimension_texts": DimensionText,
    "marks": Mark,
    "legend_placements": LegendPlacement,
    "general_note_placements": GeneralNotePlacement,
}


@dataclass
class Document:
    """
    Complete annotation document.

    Deep equality (``==``) compares every element, so history tests can assert
    exact restoration.
    """
    lines: List[Line] = field(default_factory=list)
    arcs: List[Arc] = field(default_factory=list)
    curves: List[Curve] = field(default_factory=list)
    symbols: List[Symbol] = field(default_factory=list)
    texts: List[Text] = field(default_factory=list)
    arrows: List[Arrow] = field(default_factory=list)
    dimension_texts: List[DimensionText] = field(default_factory=list)
    marks: List[Mark] = field(default_factory=list)
    legend_placements: List[LegendPlacement] = field(default_factory=list)
    general_note_placements: List[GeneralNotePlacement] = field(default_factory=list)
    view: ViewState = field(default_factory=ViewState)
    settings: SettingsState = field(default_factory=SettingsState)
    scale: ScaleState = field(default_factory=ScaleState)
    schema_version: str = SCHEMA_VERSION

    def clone(self) -> 'Document':
        return copy.deepcopy(self)

    def conductors(self) -> List[Conductor]:
        return [*self.lines, *self.arcs, *self.curves]

    def collection(self, kind: SelectionKind) -> list:
        return getattr(self, COLLECTION_FOR_KIND[kind])

    def find(self, selection: Selection):
        """Element referenced by ``selection``, or None."""
        for element in self.collection(selection.kind):
            if element.id == selection.id:
                return element
        return None

    def require(self, selection: Selection):
        element = self.find(selection)
        if element is None:
            raise UnknownElementError(f"{selection.kind.value} '{selection.id}' not found")
        return element

    def visible_on_page(self, page: Optional[int] = None) -> 'Document':
        """
        Copy restricted to elements on ``page`` (default: current page).
        Snapping and hit testing run against this view.
        """
        target = self.view.current_page if page is None else page
        visible = Document(
            view=copy.deepcopy(self.view),
            settings=copy.deepcopy(self.settings),
            scale=copy.deepcopy(self.scale),
            schema_version=self.schema_version,
        )
        for attr in _ELEMENT_TYPES:
            items = [copy.deepcopy(e) for e in getattr(self, attr) if element_page(e) == target]
            setattr(visible, attr, items)
        return visible

    def to_dict(self) -> dict:
        data = {"schemaVersion": self.schema_version}
        for attr in _ELEMENT_TYPES:
            data[attr] = [e.to_dict() for e in getattr(self, attr)]
        data["view"] = self.view.to_dict()
        data["settings"] = self.settings.to_dict()
        data["scale"] = self.scale.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: dict) -> 'Document':
        schema_version = data.get("schemaVersion", SCHEMA_VERSION)
        if schema_version != SCHEMA_VERSION:
            logger.warning(f"Loading document schema {schema_version} with kernel schema {SCHEMA_VERSION}")
        doc = cls(
            view=ViewState.from_dict(data.get("view", {})),
            settings=SettingsState.from_dict(data.get("settings", {})),
            scale=ScaleState.from_dict(data.get("scale", {})),
            schema_version=schema_version,
        )
        for attr, element_type in _ELEMENT_TYPES.items():
            setattr(doc, attr, [element_type.from_dict(d) for d in data.get(attr, [])])
        logger.debug(f"Document loaded: {len(doc.conductors())} conductors, {len(doc.symbols)} symbols")
        return doc
