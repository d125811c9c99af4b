"""Workflow document model and loader.

A document is loaded exactly once per run through the artifact cache. Loading
is strict about syntax (the file must hold a JSON object) and lenient about
shape: missing or mistyped fields are left for the Structure validator to
report as findings.
"""

import json
from pathlib import Path
from typing import Any, Optional

import structlog
from pydantic import BaseModel, ConfigDict, Field

from flowguard.errors import DocumentNotFoundError, DocumentSyntaxError
from flowguard.services.artifact_cache import ArtifactCache, CacheMiss

logger = structlog.get_logger()

PARSE_QUERY = "json"


class WorkflowNode(BaseModel):
    """A single typed node. Keys beyond these four are ignored."""

    model_config = ConfigDict(frozen=True)

    id: Optional[str] = None
    type: str = ""
    name: str = ""
    parameters: dict[str, Any] = Field(default_factory=dict)

    @property
    def kind(self) -> str:
        """Type tag without its namespace, lower-cased: 'n8n-nodes-base.httpRequest' -> 'httprequest'."""
        return self.type.rsplit(".", 1)[-1].lower()

    @property
    def label(self) -> str:
        return self.name or self.id or self.type or "unnamed node"

    @classmethod
    def from_raw(cls, raw: dict) -> "WorkflowNode":
        """Coerce loosely-typed JSON into a node without rejecting it."""
        params = raw.get("parameters")
        node_id = raw.get("id")
        return cls(
            id=str(node_id) if node_id is not None else None,
            type=raw.get("type") if isinstance(raw.get("type"), str) else "",
            name=raw.get("name") if isinstance(raw.get("name"), str) else "",
            parameters=params if isinstance(params, dict) else {},
        )


class WorkflowDocument(BaseModel):
    """The parsed configuration artifact handed to every validator."""

    model_config = ConfigDict(frozen=True)

    path: str
    text: str
    data: dict[str, Any]

    @property
    def resource_id(self) -> str:
        return self.path

    @property
    def base_dir(self) -> Path:
        return Path(self.path).parent

    @property
    def name(self) -> Optional[str]:
        name = self.data.get("name")
        return name if isinstance(name, str) and name.strip() else None

    @property
    def raw_nodes(self) -> Any:
        return self.data.get("nodes")

    @property
    def nodes(self) -> list[WorkflowNode]:
        raw = self.raw_nodes
        if not isinstance(raw, list):
            return []
        return [WorkflowNode.from_raw(n) for n in raw if isinstance(n, dict)]

    @property
    def connections(self) -> dict[str, Any]:
        conns = self.data.get("connections")
        return conns if isinstance(conns, dict) else {}

    @property
    def size_bytes(self) -> int:
        return len(self.text.encode("utf-8"))

    @classmethod
    def from_data(cls, data: dict, path: str = "workflow.json") -> "WorkflowDocument":
        """Build a document from an in-memory dict (serialized with indent=2)."""
        return cls(path=path, text=json.dumps(data, indent=2), data=data)


def load_document(path: str, cache: ArtifactCache) -> WorkflowDocument:
    """Read and parse a workflow file through the cache.

    Raises:
        DocumentNotFoundError: the file is missing or unreadable
        DocumentSyntaxError: the content is not a JSON object
    """
    resource_id = str(Path(path).resolve())

    text = cache.get_or_load(resource_id)
    if isinstance(text, CacheMiss):
        raise DocumentNotFoundError(f"Workflow file '{path}' not found", path=path)

    data = cache.get_or_compute(resource_id, PARSE_QUERY, lambda: json.loads(text))
    if isinstance(data, CacheMiss):
        raise DocumentSyntaxError(
            f"{Path(path).name} has invalid JSON syntax",
            path=path,
            details={"reason": data.reason},
        )
    if not isinstance(data, dict):
        raise DocumentSyntaxError(
            f"{Path(path).name} must contain a JSON object at the top level, got {type(data).__name__}",
            path=path,
        )

    logger.debug("document_loaded", path=path, size_bytes=len(text.encode("utf-8")))
    return WorkflowDocument(path=resource_id, text=text, data=data)
