"""
OCIF Document Adapter

Provides loading and saving of OCIF canvas documents (.ocif.json / .json)
to/from the Graph abstraction. Nodes may be stored either as a list of
records or as an id -> record mapping; the input shape is written back.

No schema validation is done here: malformed records are skipped or kept
as-is so the layout step can still produce a result.
"""

from pathlib import Path
from typing import Any, Dict, Union
import json
import logging

from .abstraction import Graph, Node, Relation

logger = logging.getLogger(__name__)


class OCIFDocumentError(ValueError):
    """Raised when an OCIF document cannot be read or written."""


def graph_from_dict(data: Dict[str, Any]) -> Graph:
    """Build a Graph from a parsed OCIF document."""
    if not isinstance(data, dict):
        raise OCIFDocumentError(
            f"OCIF document root must be an object, got {type(data).__name__}"
        )

    raw_nodes = data.get("nodes")
    raw_relations = data.get("relations")
    # Unusable nodes/relations values stay in extra and are written back as-is
    parsed = {
        "nodes": isinstance(raw_nodes, (list, dict)),
        "relations": isinstance(raw_relations, list),
    }
    graph = Graph(
        extra={k: v for k, v in data.items() if not parsed.get(k)},
        _keys=list(data),
    )

    if isinstance(raw_nodes, dict):
        graph.nodes_as_mapping = True
        for node_id, record in raw_nodes.items():
            if not isinstance(record, dict):
                logger.debug("Skipping non-object node record %r", node_id)
                continue
            graph.add_node(Node.from_dict(record, node_id=str(node_id)))
    elif isinstance(raw_nodes, list):
        for i, record in enumerate(raw_nodes):
            if not isinstance(record, dict):
                logger.debug("Skipping non-object node record at index %d", i)
                continue
            graph.add_node(Node.from_dict(record))
    elif raw_nodes is not None:
        logger.debug("Ignoring 'nodes' of type %s", type(raw_nodes).__name__)

    if isinstance(raw_relations, list):
        for i, record in enumerate(raw_relations):
            if not isinstance(record, dict):
                logger.debug("Skipping non-object relation record at index %d", i)
                continue
            graph.add_relation(Relation.from_dict(record))
    elif raw_relations is not None:
        logger.debug("Ignoring 'relations' of type %s", type(raw_relations).__name__)

    return graph


def graph_to_dict(graph: Graph) -> Dict[str, Any]:
    """Convert a Graph back into an OCIF document mapping.

    Keys come out in the order the document was read; graphs built in code
    get ``ocif``, ``nodes`` and ``relations`` first.
    """
    def wanted(key: str, items: list) -> bool:
        if items:
            return True
        if key in graph.extra:
            return False
        return not graph._keys or key in graph._keys

    doc: Dict[str, Any] = {}
    if wanted("nodes", graph.nodes):
        if graph.nodes_as_mapping:
            doc["nodes"] = {node.id: node.to_dict() for node in graph.nodes}
        else:
            doc["nodes"] = [node.to_dict() for node in graph.nodes]
    if wanted("relations", graph.relations):
        doc["relations"] = [relation.to_dict() for relation in graph.relations]
    for key, value in graph.extra.items():
        doc.setdefault(key, value)

    order = graph._keys or ["ocif", "nodes", "relations"]
    ordered = {key: doc[key] for key in order if key in doc}
    for key, value in doc.items():
        ordered.setdefault(key, value)
    return ordered


def load_ocif_document(path: Union[str, Path]) -> Graph:
    """
    Load an OCIF document from disk.

    Args:
        path: Path to the JSON document

    Returns:
        Graph view of the document

    Raises:
        OCIFDocumentError: If the file is missing, unreadable or not valid UTF-8 JSON
    """
    path = Path(path)
    if not path.exists():
        raise OCIFDocumentError(f"Document not found: {path}")

    try:
        with path.open("r", encoding="utf-8") as handle:
            data = json.load(handle)
    except json.JSONDecodeError as e:
        raise OCIFDocumentError(f"Invalid JSON in {path}: {e}") from e
    except UnicodeDecodeError as e:
        raise OCIFDocumentError(f"{path} is not UTF-8 encoded: {e}") from e
    except OSError as e:
        raise OCIFDocumentError(f"Cannot read {path}: {e}") from e

    graph = graph_from_dict(data)
    logger.debug(
        "Loaded %s: %d nodes, %d relations",
        path, len(graph.nodes), len(graph.relations),
    )
    return graph


def save_ocif_document(graph: Graph, path: Union[str, Path], indent: int = 2):
    """
    Save a Graph as an OCIF JSON document.

    Args:
        graph: Graph to write
        path: Destination path (parent directories must exist)
        indent: JSON indentation
    """
    path = Path(path)
    try:
        with path.open("w", encoding="utf-8") as handle:
            json.dump(graph_to_dict(graph), handle, indent=indent)
            handle.write("\n")
    except OSError as e:
        raise OCIFDocumentError(f"Cannot write {path}: {e}") from e

    logger.info("Saved %d nodes to %s", len(graph.nodes), path)
