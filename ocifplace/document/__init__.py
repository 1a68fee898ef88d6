"""Canvas document model and OCIF file adapter."""

from .abstraction import (
    ARROW_NODE_TYPE,
    EDGE_RELATION_TYPE,
    EdgeReference,
    Graph,
    Node,
    Relation,
)
from .ocif_adapter import (
    OCIFDocumentError,
    graph_from_dict,
    graph_to_dict,
    load_ocif_document,
    save_ocif_document,
)

__all__ = [
    "ARROW_NODE_TYPE",
    "EDGE_RELATION_TYPE",
    "EdgeReference",
    "Graph",
    "Node",
    "Relation",
    "OCIFDocumentError",
    "graph_from_dict",
    "graph_to_dict",
    "load_ocif_document",
    "save_ocif_document",
]
