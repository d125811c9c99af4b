"""Pytest configuration for flowguard tests.

Provides workflow fixtures and resets structlog between tests so a logger
bound to a captured stream never outlives the test that captured it.
"""

import copy
import json
from pathlib import Path

import pytest
import structlog

from flowguard.config import Settings
from flowguard.document import WorkflowDocument
from flowguard.services.artifact_cache import ArtifactCache
from flowguard.validators.patterns import default_library

COMPLETE_WORKFLOW = {
    "name": "Reseller Sync",
    "nodes": [
        {
            "id": "1",
            "name": "Webhook",
            "type": "n8n-nodes-base.webhook",
            "parameters": {"path": "resellers", "httpMethod": "POST", "authentication": "headerAuth"},
        },
        {
            "id": "2",
            "name": "Validate Input",
            "type": "n8n-nodes-base.function",
            "parameters": {
                "functionCode": (
                    "try {\n"
                    "  if (typeof items[0].json.email !== 'string') {\n"
                    "    throw new Error('email required');\n"
                    "  }\n"
                    "  return items;\n"
                    "} catch (e) {\n"
                    "  throw e;\n"
                    "}"
                )
            },
        },
        {
            "id": "3",
            "name": "Fetch Reseller",
            "type": "n8n-nodes-base.httpRequest",
            "parameters": {"url": "https://api.partner.io/resellers", "method": "GET"},
        },
        {"id": "4", "name": "Set Fields", "type": "n8n-nodes-base.set", "parameters": {}},
        {"id": "5", "name": "Respond", "type": "n8n-nodes-base.respondToWebhook", "parameters": {}},
    ],
    "connections": {
        "Webhook": {"main": [[{"node": "Validate Input", "type": "main", "index": 0}]]},
        "Validate Input": {"main": [[{"node": "Fetch Reseller", "type": "main", "index": 0}]]},
        "Fetch Reseller": {"main": [[{"node": "Set Fields", "type": "main", "index": 0}]]},
        "Set Fields": {"main": [[{"node": "Respond", "type": "main", "index": 0}]]},
    },
}


@pytest.fixture(autouse=True)
def reset_structlog():
    yield
    structlog.reset_defaults()


@pytest.fixture
def settings():
    return Settings()


@pytest.fixture
def cache():
    return ArtifactCache()


@pytest.fixture
def patterns():
    return default_library


@pytest.fixture
def complete_workflow():
    return copy.deepcopy(COMPLETE_WORKFLOW)


@pytest.fixture
def write_workflow(tmp_path):
    """Write a workflow dict (or raw text) into tmp_path and return its path."""

    def _write(data, name: str = "workflow.json") -> str:
        path = tmp_path / name
        text = data if isinstance(data, str) else json.dumps(data, indent=2)
        path.write_text(text, encoding="utf-8")
        return str(path)

    return _write


@pytest.fixture
def make_document(tmp_path):
    """Build an in-memory document rooted in tmp_path."""

    def _make(data: dict) -> WorkflowDocument:
        return WorkflowDocument.from_data(data, path=str(tmp_path / "workflow.json"))

    return _make


def run_validator(validator, document: WorkflowDocument, cache: ArtifactCache = None):
    return validator.evaluate(document, cache or ArtifactCache(), default_library)


def severities(findings, severity) -> list:
    return [f for f in findings if f.severity == severity]


def write_project_file(root: Path, name: str, content: str = "") -> Path:
    path = root / name
    path.write_text(content, encoding="utf-8")
    return path
