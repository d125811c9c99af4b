"""
Unit tests for the workflow document model and loader.
"""

import pytest

from flowguard.document import PARSE_QUERY, WorkflowDocument, WorkflowNode, load_document
from flowguard.errors import DocumentNotFoundError, DocumentSyntaxError
from flowguard.services.artifact_cache import ArtifactCache


class TestWorkflowNode:
    """Tests for WorkflowNode coercion and derived properties."""

    def test_kind_strips_namespace(self):
        """Test kind is the lower-cased type after the last dot."""
        node = WorkflowNode(type="n8n-nodes-base.httpRequest")
        assert node.kind == "httprequest"

    def test_kind_without_namespace(self):
        """Test bare types are lower-cased."""
        assert WorkflowNode(type="Webhook").kind == "webhook"

    def test_from_raw_coerces_loose_values(self):
        """Test numeric ids become strings and mistyped fields fall back to defaults."""
        node = WorkflowNode.from_raw({"id": 7, "type": 3, "name": None, "parameters": "x", "extra": 1})
        assert node.id == "7"
        assert node.type == ""
        assert node.name == ""
        assert node.parameters == {}

    def test_label_fallbacks(self):
        """Test label prefers name, then id, then type."""
        assert WorkflowNode(name="Fetch", id="1").label == "Fetch"
        assert WorkflowNode(id="1", type="set").label == "1"
        assert WorkflowNode(type="set").label == "set"
        assert WorkflowNode().label == "unnamed node"


class TestWorkflowDocument:
    """Tests for document properties."""

    def test_properties(self):
        """Test name, nodes and connections accessors."""
        doc = WorkflowDocument.from_data({
            "name": "T",
            "nodes": [{"id": "a", "type": "webhook"}, "not-a-node"],
            "connections": {"a": {}},
        })
        assert doc.name == "T"
        assert [n.id for n in doc.nodes] == ["a"]
        assert doc.connections == {"a": {}}
        assert doc.size_bytes == len(doc.text.encode("utf-8"))

    def test_blank_name_is_missing(self):
        """Test whitespace-only names count as missing."""
        assert WorkflowDocument.from_data({"name": "  "}).name is None

    def test_non_list_nodes(self):
        """Test a non-list nodes field yields no parsed nodes."""
        doc = WorkflowDocument.from_data({"nodes": {"a": 1}})
        assert doc.raw_nodes == {"a": 1}
        assert doc.nodes == []


class TestLoadDocument:
    """Tests for load_document()."""

    def test_loads_valid_file(self, write_workflow):
        """Test a valid file is read and parsed through the cache."""
        path = write_workflow({"name": "T", "nodes": []})
        cache = ArtifactCache()

        doc = load_document(path, cache)

        assert doc.name == "T"
        assert cache.peek(doc.resource_id, PARSE_QUERY) == {"name": "T", "nodes": []}

    def test_missing_file(self, tmp_path):
        """Test a missing file raises DocumentNotFoundError."""
        with pytest.raises(DocumentNotFoundError) as exc_info:
            load_document(str(tmp_path / "nope.json"), ArtifactCache())
        assert exc_info.value.code == "DOCUMENT_NOT_FOUND"

    def test_invalid_json(self, write_workflow):
        """Test truncated JSON raises DocumentSyntaxError."""
        path = write_workflow('{"name":"T"')
        with pytest.raises(DocumentSyntaxError) as exc_info:
            load_document(path, ArtifactCache())
        assert "invalid JSON" in exc_info.value.message
        assert exc_info.value.details["reason"]

    def test_top_level_must_be_object(self, write_workflow):
        """Test a JSON array at the top level is rejected."""
        path = write_workflow("[1, 2, 3]")
        with pytest.raises(DocumentSyntaxError, match="JSON object"):
            load_document(path, ArtifactCache())
