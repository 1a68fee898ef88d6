"""
Canvas Document Abstraction Layer

Provides a minimal typed view over OCIF canvas documents so the layout
engine can read node identities and write positions without knowing the
rest of the schema. Every field the layout engine does not interpret is
kept in an ``extra`` mapping (or the ``data`` extension list) and written
back unchanged, since renderers downstream depend on it.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple
import math

# OCIF extension type markers
ARROW_NODE_TYPE = "@ocif/node/arrow"
EDGE_RELATION_TYPE = "@ocif/rel/edge"


def as_vector(value: Any) -> Optional[List[float]]:
    """Coerce a 2-vector to a list of finite floats, or None if malformed."""
    if not isinstance(value, (list, tuple)) or len(value) < 2:
        return None
    coords = []
    for item in value[:2]:
        if isinstance(item, bool) or not isinstance(item, (int, float)):
            return None
        if not math.isfinite(item):
            return None
        coords.append(float(item))
    return coords


def _id_text(value: Any, fallback: str = "") -> str:
    return fallback if value is None else str(value)


def _endpoint_id(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    return str(value)


@dataclass
class RecordSource:
    """How a record looked when it was read, so it can be written back as-is."""
    keys: List[str]  # Original key order
    raw_id: Any = None
    loaded_id: str = ""  # ``id`` as first exposed on the record
    raw_data: Any = None

    @classmethod
    def of(cls, record: Dict[str, Any], loaded_id: str) -> 'RecordSource':
        return cls(
            keys=list(record),
            raw_id=record.get("id"),
            loaded_id=loaded_id,
            raw_data=record.get("data"),
        )

    def has(self, key: str) -> bool:
        return key in self.keys


def _put_id(out: Dict[str, Any], current_id: str, origin: Optional[RecordSource]):
    if origin is None or current_id != origin.loaded_id:
        out["id"] = current_id
    elif origin.has("id"):
        out["id"] = origin.raw_id


def _put_data(out: Dict[str, Any], data: List[Any], origin: Optional[RecordSource]):
    if origin is not None and origin.has("data"):
        # Non-list values are only kept while nothing replaced them
        if not data and not isinstance(origin.raw_data, list):
            out["data"] = origin.raw_data
        else:
            out["data"] = data
    elif data:
        out["data"] = data


def _vector_out(value: Any) -> Any:
    return list(value) if isinstance(value, (list, tuple)) else value


def _in_origin_order(core: Dict[str, Any], extra: Dict[str, Any],
                     origin: Optional[RecordSource]) -> Dict[str, Any]:
    """Merge core fields and extras, following the record's original key order."""
    merged = dict(core)
    for key, value in extra.items():
        merged.setdefault(key, value)
    if origin is None:
        return merged
    ordered = {k: merged[k] for k in origin.keys if k in merged}
    for key, value in merged.items():
        ordered.setdefault(key, value)
    return ordered


def _find_extension(data: List[Any], ext_type: str) -> Optional[Dict[str, Any]]:
    for entry in data:
        if isinstance(entry, dict) and entry.get("type") == ext_type:
            return entry
    return None


@dataclass
class Node:
    """Represents a positionable canvas node (shape or arrow)."""
    id: str
    position: Optional[List[float]] = None  # [x, y], canvas units
    size: Optional[List[float]] = None  # [width, height]
    data: List[Any] = field(default_factory=list)  # OCIF extensions

    # Fields the layout engine never reads (resource, text, style, ...)
    extra: Dict[str, Any] = field(default_factory=dict)

    _origin: Optional[RecordSource] = field(default=None, repr=False, compare=False)

    @property
    def is_arrow(self) -> bool:
        """True when this node renders a relation rather than a shape."""
        return self.get_extension(ARROW_NODE_TYPE) is not None

    @property
    def has_position(self) -> bool:
        """True when the node carries a finite 2-D position."""
        return as_vector(self.position) is not None

    def get_extension(self, ext_type: str) -> Optional[Dict[str, Any]]:
        """Return the first ``data`` entry with the given type."""
        return _find_extension(self.data, ext_type)

    def distance_to(self, other: 'Node') -> float:
        """Center-to-center distance; both nodes must be positioned."""
        dx = self.position[0] - other.position[0]
        dy = self.position[1] - other.position[1]
        return math.sqrt(dx * dx + dy * dy)

    @classmethod
    def from_dict(cls, record: Dict[str, Any], node_id: Optional[str] = None) -> 'Node':
        """Build a node from an OCIF record, keeping unknown fields.

        ``node_id`` is the mapping key for documents that key nodes by id;
        it is used when the record has no id of its own.
        """
        extra = {k: v for k, v in record.items()
                 if k not in ("id", "position", "size", "data")}
        raw_data = record.get("data")
        resolved_id = _id_text(record.get("id"), node_id if node_id is not None else "")
        return cls(
            id=resolved_id,
            position=record.get("position"),
            size=record.get("size"),
            data=list(raw_data) if isinstance(raw_data, list) else [],
            extra=extra,
            _origin=RecordSource.of(record, resolved_id),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert back to an OCIF record."""
        origin = self._origin
        d: Dict[str, Any] = {}
        _put_id(d, self.id, origin)
        if self.position is not None or (origin and origin.has("position")):
            d["position"] = _vector_out(self.position)
        if self.size is not None or (origin and origin.has("size")):
            d["size"] = _vector_out(self.size)
        _put_data(d, self.data, origin)
        return _in_origin_order(d, self.extra, origin)


@dataclass
class EdgeReference:
    """Arrow wiring carried by an ``@ocif/rel/edge`` relation entry."""
    arrow_id: Optional[str]
    start_id: Optional[str]
    end_id: Optional[str]


@dataclass
class Relation:
    """Represents a declared connection between two nodes.

    ``source`` and ``target`` hold the values as read; use ``source_id`` and
    ``target_id`` for node lookups.
    """
    id: str
    source: Any = None
    target: Any = None
    data: List[Any] = field(default_factory=list)
    extra: Dict[str, Any] = field(default_factory=dict)

    _origin: Optional[RecordSource] = field(default=None, repr=False, compare=False)

    @property
    def source_id(self) -> Optional[str]:
        return _endpoint_id(self.source)

    @property
    def target_id(self) -> Optional[str]:
        return _endpoint_id(self.target)

    @property
    def has_endpoints(self) -> bool:
        """True when both top-level endpoints are set."""
        return self.source_id is not None and self.target_id is not None

    def get_extension(self, ext_type: str) -> Optional[Dict[str, Any]]:
        """Return the first ``data`` entry with the given type."""
        return _find_extension(self.data, ext_type)

    def edge_reference(self) -> Optional[EdgeReference]:
        """Return the arrow wiring, or None if this is not an edge relation."""
        entry = self.get_extension(EDGE_RELATION_TYPE)
        if entry is None:
            return None
        return EdgeReference(
            arrow_id=_endpoint_id(entry.get("node")),
            start_id=_endpoint_id(entry.get("start")),
            end_id=_endpoint_id(entry.get("end")),
        )

    @classmethod
    def from_dict(cls, record: Dict[str, Any]) -> 'Relation':
        """Build a relation from an OCIF record, keeping unknown fields."""
        extra = {k: v for k, v in record.items()
                 if k not in ("id", "source", "target", "data")}
        raw_data = record.get("data")
        resolved_id = _id_text(record.get("id"))
        return cls(
            id=resolved_id,
            source=record.get("source"),
            target=record.get("target"),
            data=list(raw_data) if isinstance(raw_data, list) else [],
            extra=extra,
            _origin=RecordSource.of(record, resolved_id),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert back to an OCIF record."""
        origin = self._origin
        d: Dict[str, Any] = {}
        _put_id(d, self.id, origin)
        if self.source is not None or (origin and origin.has("source")):
            d["source"] = self.source
        if self.target is not None or (origin and origin.has("target")):
            d["target"] = self.target
        _put_data(d, self.data, origin)
        return _in_origin_order(d, self.extra, origin)


@dataclass
class Graph:
    """
    The unit passed to and from the layout engine.

    Node order is kept for iteration but carries no meaning. Document-level
    fields (``ocif`` version, ``resources``, ``schemas``, anything unknown)
    live in ``extra``.
    """
    nodes: List[Node] = field(default_factory=list)
    relations: List[Relation] = field(default_factory=list)
    extra: Dict[str, Any] = field(default_factory=dict)

    # True when the source document stored nodes as an id -> record mapping
    nodes_as_mapping: bool = False

    # Document key order as read, for write-back
    _keys: List[str] = field(default_factory=list, repr=False, compare=False)

    def add_node(self, node: Node):
        """Add a node to the graph."""
        self.nodes.append(node)

    def add_relation(self, relation: Relation):
        """Add a relation to the graph."""
        self.relations.append(relation)

    def get_node(self, node_id: str) -> Optional[Node]:
        """Get the first node with the given id."""
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def node_index(self) -> Dict[str, Node]:
        """Map node id to node; the first occurrence wins on duplicates."""
        index: Dict[str, Node] = {}
        for node in self.nodes:
            index.setdefault(node.id, node)
        return index

    def get_arrow_nodes(self) -> List[Node]:
        """Get all arrow pseudo-nodes."""
        return [n for n in self.nodes if n.is_arrow]

    def get_edge_relations(self) -> List[Relation]:
        """Get all relations rendered through an arrow node."""
        return [r for r in self.relations if r.get_extension(EDGE_RELATION_TYPE)]

    def get_positions(self) -> Dict[str, Tuple[float, float]]:
        """Snapshot of node positions keyed by id (positioned nodes only)."""
        return {
            n.id: (n.position[0], n.position[1])
            for n in self.nodes if n.has_position
        }

    def get_bounding_box(self) -> Optional[Tuple[float, float, float, float]]:
        """Get (min_x, min_y, max_x, max_y) over positioned nodes."""
        positioned = [n for n in self.nodes if n.has_position]
        if not positioned:
            return None
        xs = [n.position[0] for n in positioned]
        ys = [n.position[1] for n in positioned]
        return (min(xs), min(ys), max(xs), max(ys))

    def get_stats(self) -> Dict:
        """Get graph statistics."""
        return {
            "node_count": len(self.nodes),
            "arrow_count": len(self.get_arrow_nodes()),
            "relation_count": len(self.relations),
            "edge_relation_count": len(self.get_edge_relations()),
            "positioned_count": sum(1 for n in self.nodes if n.has_position),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Graph':
        """Build a graph from an OCIF document mapping."""
        from .ocif_adapter import graph_from_dict
        return graph_from_dict(data)

    def to_dict(self) -> Dict[str, Any]:
        """Convert back to an OCIF document mapping."""
        from .ocif_adapter import graph_to_dict
        return graph_to_dict(self)

    def __repr__(self) -> str:
        return f"Graph(nodes={len(self.nodes)}, relations={len(self.relations)})"
