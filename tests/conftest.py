"""
Shared test fixtures for OcifPlace tests.

Provides reusable graphs, OCIF documents and layout configurations
for testing the layout engine, the document adapter and the CLI.
"""

import json
import random

import pytest

from ocifplace.document.abstraction import (
    ARROW_NODE_TYPE,
    EDGE_RELATION_TYPE,
    Graph,
    Node,
    Relation,
)
from ocifplace.layout.force_directed import LayoutConfig


@pytest.fixture
def default_config() -> LayoutConfig:
    """Default 1000x800 canvas with 50 padding."""
    return LayoutConfig()


@pytest.fixture
def rng() -> random.Random:
    """Seeded random generator for reproducible seeding."""
    return random.Random(1234)


@pytest.fixture
def simple_graph() -> Graph:
    """Three unpositioned nodes in a chain A - B - C."""
    graph = Graph()
    for node_id in ("A", "B", "C"):
        graph.add_node(Node(id=node_id))
    graph.add_relation(Relation(id="r1", source="A", target="B"))
    graph.add_relation(Relation(id="r2", source="B", target="C"))
    return graph


@pytest.fixture
def two_triangles() -> Graph:
    """Two disconnected triangles starting on opposite sides of the canvas."""
    graph = Graph()
    left = {"a1": [200.0, 300.0], "a2": [250.0, 400.0], "a3": [180.0, 450.0]}
    right = {"b1": [800.0, 300.0], "b2": [750.0, 400.0], "b3": [820.0, 450.0]}
    for node_id, pos in {**left, **right}.items():
        graph.add_node(Node(id=node_id, position=list(pos)))

    for group in (list(left), list(right)):
        for i in range(3):
            src, dst = group[i], group[(i + 1) % 3]
            graph.add_relation(Relation(id=f"{src}-{dst}", source=src, target=dst))
    return graph


@pytest.fixture
def arrow_graph() -> Graph:
    """Two shapes connected through an arrow pseudo-node."""
    graph = Graph()
    graph.add_node(Node(
        id="A",
        data=[{"type": "@ocif/node/rectangle", "fillColor": "#ffffff"}],
        extra={"resource": "res-a"},
    ))
    graph.add_node(Node(id="B", data=[{"type": "@ocif/node/oval"}]))
    graph.add_node(Node(
        id="arrow-1",
        data=[{"type": ARROW_NODE_TYPE, "strokeColor": "#000000"}],
    ))
    graph.add_relation(Relation(
        id="edge-1",
        data=[{"type": EDGE_RELATION_TYPE, "start": "A", "end": "B", "node": "arrow-1"}],
    ))
    graph.add_relation(Relation(id="rel-1", source="A", target="B"))
    return graph


@pytest.fixture
def ocif_document() -> dict:
    """A small OCIF document as produced by the content generator."""
    return {
        "ocif": "https://canvasprotocol.org/ocif/0.4",
        "nodes": [
            {
                "id": "n1",
                "size": [120, 60],
                "resource": "r1",
                "data": [{"type": "@ocif/node/rectangle", "strokeWidth": 2}],
            },
            {"id": "n2", "position": [400, 300], "resource": "r2"},
            {"id": "n3"},
            {
                "id": "arrow-1",
                "data": [{"type": "@ocif/node/arrow", "strokeColor": "#333"}],
            },
        ],
        "relations": [
            {"id": "rel-1", "source": "n1", "target": "n2"},
            {"id": "rel-2", "source": "n2", "target": "n3"},
            {
                "id": "edge-1",
                "data": [{"type": "@ocif/rel/edge", "start": "n1", "end": "n3",
                          "node": "arrow-1", "rel": "depends-on"}],
            },
        ],
        "resources": [
            {"id": "r1", "representations": [{"mime-type": "text/plain", "content": "One"}]},
            {"id": "r2", "representations": [{"mime-type": "text/plain", "content": "Two"}]},
        ],
        "schemas": [],
    }


@pytest.fixture
def ocif_file(tmp_path, ocif_document):
    """The OCIF document written to a temporary file."""
    path = tmp_path / "diagram.json"
    path.write_text(json.dumps(ocif_document), encoding="utf-8")
    return path

