"""
Tests for the canvas document model and the OCIF adapter.

Tests cover:
- Node/Relation parsing with preserved unknown fields
- Arrow and edge-relation detection
- List and mapping node layouts
- Loading and saving documents
"""

import json

import pytest

from ocifplace.document.abstraction import Graph, Node, Relation
from ocifplace.document.ocif_adapter import (
    OCIFDocumentError,
    graph_from_dict,
    graph_to_dict,
    load_ocif_document,
    save_ocif_document,
)


# =============================================================================
# Record Tests
# =============================================================================

class TestNode:
    """Tests for Node records."""

    def test_from_dict_keeps_unknown_fields(self):
        record = {
            "id": "n1",
            "position": [1, 2],
            "resource": "r1",
            "text": "Hello",
            "data": [{"type": "@ocif/node/oval", "fillColor": "#fff"}],
        }
        node = Node.from_dict(record)

        assert node.id == "n1"
        assert node.position == [1, 2]
        assert node.extra == {"resource": "r1", "text": "Hello"}
        assert node.to_dict() == record

    def test_is_arrow(self):
        assert Node.from_dict({"id": "a", "data": [{"type": "@ocif/node/arrow"}]}).is_arrow
        assert not Node.from_dict({"id": "b", "data": [{"type": "@ocif/node/rectangle"}]}).is_arrow
        assert not Node.from_dict({"id": "c"}).is_arrow

    def test_non_mapping_data_entries_kept(self):
        """Test that odd data entries are ignored for lookups but written back."""
        record = {"id": "n", "data": ["note", {"type": "@ocif/node/arrow"}, 7]}
        node = Node.from_dict(record)

        assert node.is_arrow
        assert node.to_dict() == record

    def test_non_list_data_kept(self):
        record = {"id": "n", "data": {"type": "@ocif/node/oval"}}
        node = Node.from_dict(record)

        assert not node.is_arrow
        assert node.to_dict() == record

    def test_key_order_kept(self):
        record = {"text": "Hi", "data": [], "id": "n", "position": [1, 2]}
        node = Node.from_dict(record)
        node.position = [5.0, 6.0]

        assert list(node.to_dict()) == ["text", "data", "id", "position"]

    def test_missing_id_not_invented(self):
        record = {"position": [1, 2]}
        node = Node.from_dict(record)

        assert node.id == ""
        assert node.to_dict() == record

    def test_null_id_written_back(self):
        record = {"id": None, "size": [10, 10]}
        node = Node.from_dict(record)

        assert node.id == ""
        assert node.to_dict() == record

    def test_renamed_node_writes_new_id(self):
        node = Node.from_dict({"id": None})
        node.id = "fresh"
        assert node.to_dict() == {"id": "fresh"}

    def test_has_position(self):
        assert Node(id="a", position=[1.0, 2.0]).has_position
        assert not Node(id="b").has_position
        assert not Node(id="c", position=[1.0]).has_position
        assert not Node(id="d", position=[float("nan"), 0.0]).has_position


class TestRelation:
    """Tests for Relation records."""

    def test_endpoints(self):
        assert Relation.from_dict({"id": "r", "source": "a", "target": "b"}).has_endpoints
        assert not Relation.from_dict({"id": "r", "source": "a"}).has_endpoints
        assert not Relation.from_dict({"id": "r", "source": "", "target": "b"}).has_endpoints

    def test_edge_reference(self):
        relation = Relation.from_dict({
            "id": "e",
            "data": [{"type": "@ocif/rel/edge", "start": "a", "end": "b", "node": "arrow"}],
        })
        ref = relation.edge_reference()

        assert ref.arrow_id == "arrow"
        assert ref.start_id == "a"
        assert ref.end_id == "b"

    def test_no_edge_reference(self):
        assert Relation.from_dict({"id": "r", "source": "a", "target": "b"}).edge_reference() is None

    def test_falsy_endpoints_written_back(self):
        record = {"id": "r", "source": "", "target": 0}
        relation = Relation.from_dict(record)

        assert not relation.has_endpoints
        assert relation.to_dict() == record

    def test_endpoint_ids_are_strings(self):
        relation = Relation.from_dict({"id": "r", "source": 1, "target": 2})
        assert (relation.source_id, relation.target_id) == ("1", "2")

    def test_round_trip_keeps_extra(self):
        record = {"id": "r", "source": "a", "target": "b", "label": "uses"}
        assert Relation.from_dict(record).to_dict() == record


# =============================================================================
# Graph Tests
# =============================================================================

class TestGraph:
    """Tests for Graph helpers."""

    def test_from_dict(self, ocif_document):
        graph = Graph.from_dict(ocif_document)

        assert len(graph.nodes) == 4
        assert len(graph.relations) == 3
        assert graph.extra["ocif"] == ocif_document["ocif"]
        assert graph.extra["resources"] == ocif_document["resources"]

    def test_stats(self, ocif_document):
        stats = Graph.from_dict(ocif_document).get_stats()

        assert stats == {
            "node_count": 4,
            "arrow_count": 1,
            "relation_count": 3,
            "edge_relation_count": 1,
            "positioned_count": 1,
        }

    def test_node_index_first_wins(self):
        first = Node(id="dup")
        graph = Graph(nodes=[first, Node(id="dup")])
        assert graph.node_index()["dup"] is first

    def test_bounding_box(self):
        graph = Graph(nodes=[Node(id="a", position=[1.0, 5.0]),
                             Node(id="b", position=[4.0, -2.0]),
                             Node(id="c")])
        assert graph.get_bounding_box() == (1.0, -2.0, 4.0, 5.0)
        assert Graph().get_bounding_box() is None


# =============================================================================
# Adapter Tests
# =============================================================================

class TestAdapter:
    """Tests for OCIF document conversion and file I/O."""

    def test_round_trip_list_nodes(self, ocif_document):
        assert graph_to_dict(graph_from_dict(ocif_document)) == ocif_document

    def test_round_trip_mapping_nodes(self):
        """Test documents that key nodes by id."""
        document = {
            "version": "0.4",
            "nodes": {
                "n1": {"position": [1, 2], "text": "One"},
                "n2": {"id": "n2", "size": [10, 10]},
            },
            "relations": [],
        }
        graph = graph_from_dict(document)

        assert graph.nodes_as_mapping
        assert [n.id for n in graph.nodes] == ["n1", "n2"]
        assert graph_to_dict(graph) == document

    def test_round_trip_malformed_content(self):
        """Test that content the layout ignores survives a round trip."""
        document = {
            "nodes": [
                {"id": "n", "data": ["note", {"type": "@ocif/node/oval"}]},
                {"id": "m", "data": {"type": "@ocif/node/rectangle"}},
                {"data": []},
                "stray",
            ],
            "relations": [{"id": "r", "source": "", "target": "m"}, None],
        }
        assert graph_to_dict(graph_from_dict(document)) == {
            "nodes": document["nodes"][:3],
            "relations": document["relations"][:1],
        }

    def test_document_key_order_kept(self):
        document = {
            "schemas": [],
            "resources": [{"id": "r1"}],
            "relations": [],
            "ocif": "https://canvasprotocol.org/ocif/0.4",
            "nodes": [{"id": "a"}],
        }
        out = graph_to_dict(graph_from_dict(document))

        assert list(out) == list(document)
        assert out == document

    def test_unusable_nodes_value_kept(self):
        document = {"nodes": None, "relations": "none"}
        graph = graph_from_dict(document)

        assert graph.nodes == [] and graph.relations == []
        assert graph_to_dict(graph) == document

    def test_absent_sections_not_added(self):
        document = {"ocif": "0.4", "nodes": []}
        assert graph_to_dict(graph_from_dict(document)) == document

    def test_new_graph_layout(self):
        graph = Graph(nodes=[Node(id="a")], extra={"schemas": [], "ocif": "0.4"})
        assert list(graph_to_dict(graph)) == ["ocif", "nodes", "relations", "schemas"]

    def test_missing_relations(self):
        graph = graph_from_dict({"nodes": [{"id": "a"}]})
        assert graph.relations == []

    def test_non_object_records_skipped(self):
        graph = graph_from_dict({"nodes": [{"id": "a"}, "b", 3], "relations": [None]})
        assert [n.id for n in graph.nodes] == ["a"]
        assert graph.relations == []

    def test_non_object_root_rejected(self):
        with pytest.raises(OCIFDocumentError):
            graph_from_dict(["not", "a", "document"])

    def test_load_and_save(self, ocif_file, tmp_path):
        graph = load_ocif_document(ocif_file)
        graph.get_node("n3").position = [10.0, 20.0]

        out = tmp_path / "out.json"
        save_ocif_document(graph, out)
        saved = json.loads(out.read_text(encoding="utf-8"))

        n3 = [n for n in saved["nodes"] if n["id"] == "n3"][0]
        assert n3["position"] == [10.0, 20.0]
        assert saved["resources"][0]["id"] == "r1"
        assert saved["schemas"] == []

    def test_load_missing_file(self, tmp_path):
        with pytest.raises(OCIFDocumentError):
            load_ocif_document(tmp_path / "missing.json")

    def test_load_non_utf8(self, tmp_path):
        path = tmp_path / "latin1.json"
        path.write_bytes(b'{"nodes": ["\xff\xfe"]}')

        with pytest.raises(OCIFDocumentError, match="UTF-8") as excinfo:
            load_ocif_document(path)
        assert isinstance(excinfo.value.__cause__, UnicodeDecodeError)

    def test_load_directory(self, tmp_path):
        with pytest.raises(OCIFDocumentError):
            load_ocif_document(tmp_path)

    def test_load_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(OCIFDocumentError):
            load_ocif_document(path)
