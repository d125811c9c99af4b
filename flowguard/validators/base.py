"""Base validator — abstract class implementing the Strategy Pattern.

Each validator is a standalone, independently testable unit.
New validators are added to the registry without modifying the engine.
"""

from abc import ABC, abstractmethod
from collections import Counter
from pathlib import Path
from typing import Optional, Union

from flowguard.config import Settings, get_settings
from flowguard.document import WorkflowDocument, WorkflowNode
from flowguard.services.artifact_cache import ArtifactCache, CacheMiss
from flowguard.validators.models import Category, Finding, Severity, ValidatorKind
from flowguard.validators.patterns import PatternLibrary, PatternMatch

# Node kinds (type tag without namespace, lower-cased)
TRIGGER_KINDS = {"webhook", "cron", "schedule", "scheduletrigger", "manualtrigger", "interval", "formtrigger"}
HTTP_KINDS = {"httprequest"}
FUNCTION_KINDS = {"function", "functionitem", "code"}
TRANSFORM_KINDS = {
    "set", "merge", "if", "switch", "filter", "itemlists", "splitinbatches", "splitout",
    "aggregate", "sort", "limit", "removeduplicates", "datetime", "renamekeys",
    "respondtowebhook", "noop", "wait", "emailsend", "spreadsheetfile", "readbinaryfile",
    "writebinaryfile", "movebinarydata", "html", "xml", "markdown", "crypto", "stickynote",
    "executeworkflow",
}

# Code-bearing parameter keys of function-type nodes
CODE_FIELDS = ("functionCode", "jsCode")


def is_trigger_kind(kind: str) -> bool:
    return kind in TRIGGER_KINDS or kind.endswith("trigger")


def is_known_kind(kind: str) -> bool:
    return is_trigger_kind(kind) or kind in HTTP_KINDS or kind in FUNCTION_KINDS or kind in TRANSFORM_KINDS


class BaseValidator(ABC):
    """Abstract base for all workflow validators.

    Contract:
        - evaluate() is deterministic: same document -> same ordered findings
        - evaluate() returns a list of Finding (never raises for document issues)
        - expensive derivations go through the shared ArtifactCache
        - no shared mutable state other than the cache
    """

    kind: ValidatorKind
    category: Category

    def __init__(self, settings: Optional[Settings] = None, verbose: bool = False):
        self.settings = settings or get_settings()
        self.verbose = verbose

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable name for logging and reports."""
        ...

    @abstractmethod
    def evaluate(
        self, document: WorkflowDocument, cache: ArtifactCache, patterns: PatternLibrary
    ) -> list[Finding]:
        """Run checks against the document.

        Args:
            document: Parsed workflow document
            cache: Run-scoped artifact cache
            patterns: Compiled pattern library

        Returns:
            Findings in the order the checks ran
        """
        ...

    # ── Helper Methods ──

    def _finding(
        self,
        severity: Severity,
        message: str,
        detail: Optional[str] = None,
        category: Optional[Category] = None,
    ) -> Finding:
        """Convenience method to create a Finding tagged with this validator."""
        return Finding(
            category=category or self.category,
            severity=severity,
            message=message,
            detail=detail,
            source_validator=self.name,
        )

    def _match_finding(self, match: PatternMatch, subject: str) -> Finding:
        """Finding for a pattern rule hit, with the matched excerpt as detail."""
        rule = match.rule
        count = f" ({match.count} occurrences)" if match.count > 1 else ""
        detail = f"{match.excerpt} [{rule.id}]"
        return self._finding(
            rule.severity,
            f"{rule.description} in {subject}{count}",
            detail=detail,
            category=rule.category,
        )

    def _project_root(self, document: WorkflowDocument) -> Path:
        if self.settings.PROJECT_ROOT:
            return Path(self.settings.PROJECT_ROOT)
        return document.base_dir

    def _nodes(self, document: WorkflowDocument, cache: ArtifactCache) -> list[WorkflowNode]:
        """Parsed nodes, shared across validators through the cache."""
        nodes = cache.get_or_compute(document.resource_id, "nodes", lambda: document.nodes)
        return [] if isinstance(nodes, CacheMiss) else nodes

    def _kind_counts(self, document: WorkflowDocument, cache: ArtifactCache) -> Counter:
        counts = cache.get_or_compute(
            document.resource_id,
            "kind_counts",
            lambda: Counter(n.kind for n in self._nodes(document, cache)),
        )
        return Counter() if isinstance(counts, CacheMiss) else counts

    def _function_nodes(self, document: WorkflowDocument, cache: ArtifactCache) -> list[WorkflowNode]:
        return [n for n in self._nodes(document, cache) if n.kind in FUNCTION_KINDS]

    def _function_code(self, document: WorkflowDocument, cache: ArtifactCache) -> list[tuple[str, str]]:
        """(node label, code) for every function-type node with a code field."""

        def extract() -> list[tuple[str, str]]:
            blocks = []
            for node in self._function_nodes(document, cache):
                for key in CODE_FIELDS:
                    code = node.parameters.get(key)
                    if isinstance(code, str) and code.strip():
                        blocks.append((node.label, code))
            return blocks

        blocks = cache.get_or_compute(document.resource_id, "function_code", extract)
        return [] if isinstance(blocks, CacheMiss) else blocks

    def _edge_count(self, document: WorkflowDocument, cache: ArtifactCache) -> int:
        """Total downstream edges: connections[source][output][branch][edge]."""

        def count() -> int:
            total = 0
            for outputs in document.connections.values():
                if not isinstance(outputs, dict):
                    continue
                for branches in outputs.values():
                    if not isinstance(branches, list):
                        continue
                    for branch in branches:
                        if isinstance(branch, list):
                            total += len(branch)
                        elif isinstance(branch, dict):
                            total += 1
            return total

        edges = cache.get_or_compute(document.resource_id, "edge_count", count)
        return 0 if isinstance(edges, CacheMiss) else edges

    @staticmethod
    def _read_text(cache: ArtifactCache, path: Union[str, Path]) -> Optional[str]:
        content = cache.get_or_load(str(path))
        return None if isinstance(content, CacheMiss) else content
