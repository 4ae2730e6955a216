"""
LP Sketch - Auto-Connector Analyzer
===================================

Infers junction symbols from conductor geometry.

Per page, every line/arc/curve becomes a segment chain. Endpoints and pairwise
intersections are clustered into nodes; each node's branch count decides
whether it is a junction (>= 3 branches) and which kind (tee = 3,
crossrun >= 4). Material and class are resolved from the touching conductors.

Generated symbol ids are derived from rounded position, color, junction and
connector mode, so rebuilding the same geometry yields the same ids.

Usage:
    from lpsketch.auto_connectors import compute_auto_connector_nodes, sync_auto_connectors

    nodes = compute_auto_connector_nodes(doc)
    doc = sync_auto_connectors(doc)
"""

import math
from dataclasses import dataclass
from enum import Enum
from functools import cmp_to_key
from typing import Dict, Iterable, List, Optional, Set

from loguru import logger
from shapely.geometry import box
from shapely.strtree import STRtree

from config.feature_flags import is_enabled
from config.tolerances import Tolerances, node_cluster_epsilon, node_touch_epsilon
from lpsketch.document import (
    AUTO_CONNECTOR_SYMBOLS,
    AutoConnectorType,
    COPPER_COLORS,
    Document,
    MaterialColor,
    Selection,
    SelectionKind,
    Symbol,
    SymbolClass,
    SymbolType,
    WireClass,
    element_page,
)
from lpsketch.geometry import (
    Bounds,
    Point,
    bounds_for_points,
    distance,
    distance_to_circular_arc,
    distance_to_quadratic,
    distance_to_segment,
    point_in_bounds,
    polyline_intersections,
    sample_circular_arc_polyline,
    sample_quadratic_polyline,
)


class JunctionKind(Enum):
    TEE = "tee"
    CROSSRUN = "crossrun"


@dataclass(frozen=True)
class AutoConnectorNode:
    position: Point
    color: MaterialColor
    connector_class: WireClass
    page: int
    junction: JunctionKind


_CONNECTOR_SYMBOL_TYPES = {
    (JunctionKind.TEE, AutoConnectorType.MECHANICAL): SymbolType.CABLE_TO_CABLE_CONNECTION,
    (JunctionKind.TEE, AutoConnectorType.CADWELD): SymbolType.CADWELD_CONNECTION,
    (JunctionKind.CROSSRUN, AutoConnectorType.MECHANICAL): SymbolType.MECHANICAL_CROSSRUN_CONNECTION,
    (JunctionKind.CROSSRUN, AutoConnectorType.CADWELD): SymbolType.CADWELD_CROSSRUN_CONNECTION,
}

_CADWELD_SYMBOLS = frozenset({SymbolType.CADWELD_CONNECTION, SymbolType.CADWELD_CROSSRUN_CONNECTION})


class _ConductorEntry:
    """Conductor sampled to a polyline, with its bounding box."""

    def __init__(self, kind: SelectionKind, element):
        self.kind = kind
        self.id = element.id
        self.start = element.start
        self.end = element.end
        self.through = getattr(element, "through", None)
        self.color = element.color
        self.wire_class = element.wire_class
        self.page = element_page(element)

        steps = Tolerances.NODE_ARC_SAMPLE_STEPS
        if kind == SelectionKind.ARC:
            self.polyline = sample_circular_arc_polyline(self.start, self.through, self.end, steps)
        elif kind == SelectionKind.CURVE:
            self.polyline = sample_quadratic_polyline(self.start, self.through, self.end, steps)
        else:
            self.polyline = [self.start, self.end]
        self.bounds: Bounds = bounds_for_points(self.polyline)

    @property
    def selection(self) -> Selection:
        return Selection(self.kind, self.id)

    def interior_distance(self, node: Point) -> float:
        segments = Tolerances.NODE_ARC_DISTANCE_SEGMENTS
        if self.kind == SelectionKind.ARC:
            return distance_to_circular_arc(node, self.start, self.through, self.end, segments)
        if self.kind == SelectionKind.CURVE:
            return distance_to_quadratic(node, self.start, self.through, self.end, segments)
        return distance_to_segment(node, self.start, self.end)

    def branch_contribution(self, node: Point) -> int:
        """
        Branches this conductor adds at ``node``: 1 for an endpoint (also when
        both endpoints coincide there), 2 when the node splits its interior.
        """
        eps = node_touch_epsilon()
        if not point_in_bounds(node, self.bounds, eps):
            return 0

        on_start = distance(self.start, node) <= eps
        on_end = distance(self.end, node) <= eps
        if on_start or on_end:
            return 1
        if self.interior_distance(node) <= eps:
            return 2
        return 0


class _PageIndex:
    """STR-tree over conductor bounds of one page."""

    def __init__(self, entries: List[_ConductorEntry]):
        self.entries = entries
        half = node_touch_epsilon() / 2.0
        # Every box padded by half the touch epsilon: two boxes intersect
        # exactly when the raw bounds overlap with the full epsilon.
        self.tree = STRtree([box(*e.bounds.padded(half).as_tuple()) for e in entries])

    def _query(self, bounds: Bounds) -> List[int]:
        half = node_touch_epsilon() / 2.0
        hits = self.tree.query(box(*bounds.padded(half).as_tuple()))
        return sorted(int(i) for i in hits)

    def overlapping(self, entry_index: int) -> List[int]:
        return [i for i in self._query(self.entries[entry_index].bounds) if i != entry_index]

    def near_point(self, point: Point) -> List[_ConductorEntry]:
        indices = self._query(Bounds(point.x, point.y, point.x, point.y))
        return [self.entries[i] for i in indices]


def cluster_points(points: Iterable[Point], epsilon: float) -> List[Point]:
    """
    Greedy clustering: each point joins the first cluster whose centroid lies
    within ``epsilon``; the centroid is recomputed from all members.
    """
    clusters: List[List[Point]] = []
    centers: List[Point] = []

    for point in points:
        for idx, center in enumerate(centers):
            if distance(center, point) <= epsilon:
                members = clusters[idx]
                members.append(point)
                count = len(members)
                centers[idx] = Point(sum(p.x for p in members) / count,
                                     sum(p.y for p in members) / count)
                break
        else:
            clusters.append([point])
            centers.append(point)

    return centers


def resolve_connector_material(colors: Set[MaterialColor]) -> MaterialColor:
    """Aluminum with any copper color is bimetallic; else red > cyan > green > blue."""
    if MaterialColor.BLUE in colors and colors & COPPER_COLORS:
        return MaterialColor.PURPLE
    for color in (MaterialColor.RED, MaterialColor.CYAN, MaterialColor.GREEN, MaterialColor.BLUE):
        if color in colors:
            return color
    return MaterialColor.PURPLE


def resolve_connector_class(classes: Set[WireClass]) -> WireClass:
    return WireClass.CLASS2 if WireClass.CLASS2 in classes else WireClass.CLASS1


def _conductor_entries(document: Document) -> Dict[int, List[_ConductorEntry]]:
    by_page: Dict[int, List[_ConductorEntry]] = {}
    for kind, items in (
        (SelectionKind.LINE, document.lines),
        (SelectionKind.ARC, document.arcs),
        (SelectionKind.CURVE, document.curves),
    ):
        for element in items:
            entry = _ConductorEntry(kind, element)
            by_page.setdefault(entry.page, []).append(entry)
    return by_page


def _candidate_points(index: _PageIndex, subset: Optional[Set[int]] = None) -> List[Point]:
    """Endpoints plus pairwise intersections of bounds-overlapping conductors."""
    entries = index.entries
    owners = range(len(entries)) if subset is None else sorted(subset)
    points: List[Point] = []

    for i in owners:
        points.append(entries[i].start)
        points.append(entries[i].end)

    for i in owners:
        for j in index.overlapping(i):
            # Each pair once; pairs with a non-owner are visited from the owner
            if subset is None or j in subset:
                if j <= i:
                    continue
            points.extend(polyline_intersections(entries[i].polyline, entries[j].polyline))

    return points


def _classify(index: _PageIndex, page: int, node_position: Point) -> Optional[AutoConnectorNode]:
    branch_count = 0
    colors: Set[MaterialColor] = set()
    classes: Set[WireClass] = set()

    for entry in index.near_point(node_position):
        contribution = entry.branch_contribution(node_position)
        if contribution <= 0:
            continue
        branch_count += contribution
        colors.add(entry.color)
        classes.add(entry.wire_class)

    if is_enabled("auto_connector_debug"):
        logger.debug(f"[AUTO-CONN] p{page} node {node_position}: {branch_count} branches")

    if branch_count < 3 or not colors:
        return None

    return AutoConnectorNode(
        position=node_position,
        color=resolve_connector_material(colors),
        connector_class=resolve_connector_class(classes),
        page=page,
        junction=JunctionKind.CROSSRUN if branch_count >= 4 else JunctionKind.TEE,
    )


def _compare_nodes(a: AutoConnectorNode, b: AutoConnectorNode) -> int:
    if a.page != b.page:
        return a.page - b.page
    if abs(a.position.y - b.position.y) > 1e-6:
        return -1 if a.position.y < b.position.y else 1
    if abs(a.position.x - b.position.x) > 1e-6:
        return -1 if a.position.x < b.position.x else 1
    if a.color != b.color:
        return -1 if a.color.value < b.color.value else 1
    if a.junction != b.junction:
        return -1 if a.junction.value < b.junction.value else 1
    return 0


def _sorted_nodes(nodes: List[AutoConnectorNode]) -> List[AutoConnectorNode]:
    return sorted(nodes, key=cmp_to_key(_compare_nodes))


def compute_auto_connector_nodes(document: Document) -> List[AutoConnectorNode]:
    """All junction nodes of the document, page by page, in deterministic order."""
    nodes: List[AutoConnectorNode] = []

    for page, entries in sorted(_conductor_entries(document).items()):
        index = _PageIndex(entries)
        for position in cluster_points(_candidate_points(index), node_cluster_epsilon()):
            node = _classify(index, page, position)
            if node is not None:
                nodes.append(node)

    return _sorted_nodes(nodes)


def connector_symbol_type(junction: JunctionKind, connector_type: AutoConnectorType) -> SymbolType:
    return _CONNECTOR_SYMBOL_TYPES[(junction, connector_type)]


def _node_key(node: AutoConnectorNode) -> str:
    precision = Tolerances.NODE_ID_PRECISION
    x = int(math.floor(node.position.x * precision + 0.5))
    y = int(math.floor(node.position.y * precision + 0.5))
    return f"p{node.page}-auto-connector-{x}-{y}-{node.color.value}-{node.junction.value}"


def auto_connector_id(node: AutoConnectorNode, connector_type: AutoConnectorType) -> str:
    return f"{_node_key(node)}-{connector_type.value}"


def _symbol_for_node(node: AutoConnectorNode, connector_type: AutoConnectorType) -> Symbol:
    return Symbol(
        symbol_type=connector_symbol_type(node.junction, connector_type),
        position=node.position,
        auto_connector=True,
        color=node.color,
        symbol_class=SymbolClass.from_wire_class(node.connector_class),
        page=node.page,
        id=auto_connector_id(node, connector_type),
    )


def build_auto_connector_symbols(document: Document,
                                 connector_type: Optional[AutoConnectorType] = None) -> List[Symbol]:
    """Fresh auto-connector symbols for the whole document."""
    connector_type = connector_type or document.settings.auto_connector_type
    return [_symbol_for_node(node, connector_type) for node in compute_auto_connector_nodes(document)]


def build_auto_connector_symbols_for_added_conductors(
        document: Document, added: List[Selection],
        connector_type: Optional[AutoConnectorType] = None) -> List[Symbol]:
    """
    Auto-connector symbols for junctions involving ``added`` conductors only.

    ``document`` must already contain the added conductors. Nodes whose id is
    already present among the document's symbols are skipped.
    """
    connector_type = connector_type or document.settings.auto_connector_type
    added_keys = {(s.kind, s.id) for s in added}
    existing_ids = {symbol.id for symbol in document.symbols}
    output: List[Symbol] = []
    nodes: List[AutoConnectorNode] = []

    for page, entries in sorted(_conductor_entries(document).items()):
        added_indices = {i for i, e in enumerate(entries) if (e.kind, e.id) in added_keys}
        if not added_indices:
            continue

        index = _PageIndex(entries)
        added_entries = [entries[i] for i in sorted(added_indices)]
        positions = cluster_points(_candidate_points(index, added_indices), node_cluster_epsilon())

        for position in positions:
            # Only nodes the new conductors actually take part in
            if not any(e.branch_contribution(position) > 0 for e in added_entries):
                continue
            node = _classify(index, page, position)
            if node is not None:
                nodes.append(node)

    for node in _sorted_nodes(nodes):
        symbol = _symbol_for_node(node, connector_type)
        if symbol.id in existing_ids:
            continue
        existing_ids.add(symbol.id)
        output.append(symbol)

    logger.debug(f"[AUTO-CONN] incremental pass for {len(added)} conductor(s): {len(output)} new connector(s)")
    return output


def is_auto_connector_symbol(symbol: Symbol) -> bool:
    return symbol.auto_connector and symbol.symbol_type in AUTO_CONNECTOR_SYMBOLS


def strip_auto_connector_symbols(symbols: List[Symbol]) -> List[Symbol]:
    """Drops generated connector symbols; manually placed connectors stay."""
    return [s for s in symbols if not is_auto_connector_symbol(s)]


def sync_auto_connectors(document: Document) -> Document:
    """
    Full rebuild: strip generated connectors and, if enabled, regenerate them.

    A surviving node keeps the connector family (mechanical/cadweld) of the
    symbol it replaces. Returns a new document.
    """
    result = document.clone()
    previous = [s for s in result.symbols if is_auto_connector_symbol(s)]
    result.symbols = strip_auto_connector_symbols(result.symbols)

    if not result.settings.auto_connectors_enabled:
        logger.info(f"Auto connectors disabled: removed {len(previous)} generated connector(s)")
        return result

    default_type = result.settings.auto_connector_type
    preserved: Dict[str, AutoConnectorType] = {}
    if is_enabled("preserve_connector_mode_on_sync"):
        for symbol in previous:
            mode = (AutoConnectorType.CADWELD if symbol.symbol_type in _CADWELD_SYMBOLS
                    else AutoConnectorType.MECHANICAL)
            base_key = symbol.id.rsplit("-", 1)[0]
            preserved[base_key] = mode

    rebuilt = [
        _symbol_for_node(node, preserved.get(_node_key(node), default_type))
        for node in compute_auto_connector_nodes(result)
    ]
    result.symbols.extend(rebuilt)
    logger.info(f"Auto connectors rebuilt: {len(previous)} removed, {len(rebuilt)} generated")
    return result


def add_auto_connectors_for_conductors(document: Document, added: List[Selection]) -> Document:
    """
    Placement hook: adds connectors for freshly placed conductors in place on
    ``document`` (a working copy) and returns it. Falls back to a full sync
    when the incremental path is switched off.
    """
    if not document.settings.auto_connectors_enabled or not added:
        return document
    if not is_enabled("incremental_auto_connectors"):
        return sync_auto_connectors(document)

    document.symbols.extend(build_auto_connector_symbols_for_added_conductors(document, added))
    return document
