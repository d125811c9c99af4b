"""Structure Validator — required fields, node inventory, node-type diversity, graph references."""

from collections import Counter

import structlog

from flowguard.document import WorkflowDocument, WorkflowNode
from flowguard.services.artifact_cache import ArtifactCache
from flowguard.validators.base import (
    FUNCTION_KINDS,
    HTTP_KINDS,
    BaseValidator,
    is_known_kind,
    is_trigger_kind,
)
from flowguard.validators.models import Category, Finding, Severity, ValidatorKind
from flowguard.validators.patterns import PatternLibrary

logger = structlog.get_logger()


class StructureValidator(BaseValidator):
    """Validates the structural integrity of the workflow document."""

    kind = ValidatorKind.STRUCTURE
    category = Category.STRUCTURE

    @property
    def name(self) -> str:
        return "StructureValidator"

    def evaluate(
        self, document: WorkflowDocument, cache: ArtifactCache, patterns: PatternLibrary
    ) -> list[Finding]:
        findings = []

        # 1. Workflow name
        if document.name is None:
            findings.append(self._finding(Severity.ERROR, "Missing required field: name"))
        else:
            findings.append(self._finding(Severity.PASS, f"Workflow name: {document.name}"))

        # 2. Nodes array. Nothing else is checkable without it
        raw_nodes = document.raw_nodes
        if raw_nodes is None:
            findings.append(self._finding(Severity.ERROR, "Missing required field: nodes"))
            return findings
        if not isinstance(raw_nodes, list):
            findings.append(self._finding(
                Severity.ERROR, f"'nodes' must be a list, got {type(raw_nodes).__name__}"
            ))
            return findings
        if not raw_nodes:
            findings.append(self._finding(Severity.ERROR, "'nodes' list is empty — no workflow nodes defined"))
            return findings

        for i, raw in enumerate(raw_nodes):
            if not isinstance(raw, dict):
                findings.append(self._finding(Severity.WARNING, f"Node #{i + 1} is not an object and was skipped"))

        nodes = self._nodes(document, cache)
        kinds = self._kind_counts(document, cache)

        # 3. Node count
        findings.extend(self._check_node_count(nodes))

        # 4. Node-type diversity
        findings.extend(self._check_node_types(nodes, kinds))

        # 5. Identity and typing
        findings.extend(self._check_node_identity(nodes))

        # 6. Connection references
        findings.extend(self._check_connections(document, nodes))

        # 7. Webhook configuration
        findings.extend(self._check_webhooks(nodes))

        if self.verbose and nodes:
            summary = ", ".join(f"{count} x {kind or '(untyped)'}" for kind, count in sorted(kinds.items()))
            findings.append(self._finding(Severity.INFO, f"Node type summary: {summary}"))

        return findings

    def _check_node_count(self, nodes: list[WorkflowNode]) -> list[Finding]:
        minimum = self.settings.MIN_NODE_COUNT
        if len(nodes) < minimum:
            return [self._finding(
                Severity.WARNING,
                f"Only {len(nodes)} nodes found. Expected at least {minimum} for a complete workflow.",
            )]
        return [self._finding(Severity.PASS, f"Found {len(nodes)} workflow nodes")]

    def _check_node_types(self, nodes: list[WorkflowNode], kinds: Counter) -> list[Finding]:
        findings = []

        trigger_count = sum(count for kind, count in kinds.items() if is_trigger_kind(kind))
        if trigger_count < 1:
            findings.append(self._finding(
                Severity.ERROR,
                "No trigger nodes found. At least one webhook, schedule or manual trigger is required.",
            ))
        else:
            findings.append(self._finding(Severity.PASS, f"Found {trigger_count} trigger node(s)"))

        http_count = sum(kinds[k] for k in HTTP_KINDS)
        if http_count < 1:
            findings.append(self._finding(
                Severity.WARNING, "No HTTP request nodes found. Consider adding external API integrations."
            ))
        else:
            findings.append(self._finding(Severity.PASS, f"Found {http_count} HTTP request node(s)"))

        function_count = sum(kinds[k] for k in FUNCTION_KINDS)
        if function_count < 1:
            findings.append(self._finding(
                Severity.WARNING, "No function nodes found. Consider adding data processing logic."
            ))
        else:
            findings.append(self._finding(Severity.PASS, f"Found {function_count} function node(s)"))

        # Unknown types are tolerated for forward compatibility
        unknown = sorted({n.type for n in nodes if n.type and not is_known_kind(n.kind)})
        for node_type in unknown:
            count = sum(1 for n in nodes if n.type == node_type)
            logger.debug("unknown_node_type", node_type=node_type, count=count)
            findings.append(self._finding(
                Severity.INFO, f"Unknown node type '{node_type}' ({count} node(s)) — tolerated"
            ))

        return findings

    def _check_node_identity(self, nodes: list[WorkflowNode]) -> list[Finding]:
        findings = []

        ids = Counter(n.id for n in nodes if n.id is not None)
        for node_id, count in sorted(ids.items()):
            if count > 1:
                findings.append(self._finding(
                    Severity.ERROR, f"Duplicate node id '{node_id}' used by {count} nodes", detail=node_id
                ))

        for i, node in enumerate(nodes):
            if not node.type:
                findings.append(self._finding(
                    Severity.WARNING, f"Node '{node.name or f'#{i + 1}'}' has no type"
                ))

        return findings

    def _check_connections(self, document: WorkflowDocument, nodes: list[WorkflowNode]) -> list[Finding]:
        """Connections are keyed by node name (or id) and point at node names."""
        known = {n.name for n in nodes if n.name} | {n.id for n in nodes if n.id}
        dangling = set()

        for source, outputs in document.connections.items():
            if source not in known:
                dangling.add(source)
            if not isinstance(outputs, dict):
                continue
            for branches in outputs.values():
                if not isinstance(branches, list):
                    continue
                for branch in branches:
                    edges = branch if isinstance(branch, list) else [branch]
                    for edge in edges:
                        target = edge.get("node") if isinstance(edge, dict) else None
                        if isinstance(target, str) and target not in known:
                            dangling.add(target)

        return [
            self._finding(Severity.WARNING, f"Connection references unknown node '{name}'", detail=name)
            for name in sorted(dangling)
        ]

    def _check_webhooks(self, nodes: list[WorkflowNode]) -> list[Finding]:
        findings = []
        for node in nodes:
            if node.kind != "webhook":
                continue
            path = node.parameters.get("path")
            method = node.parameters.get("httpMethod", "GET")
            if not isinstance(path, str) or not path.strip():
                findings.append(self._finding(Severity.WARNING, f"Webhook '{node.label}' has no path"))
                continue
            if " " in path:
                findings.append(self._finding(
                    Severity.WARNING, f"Webhook path contains spaces: {path}", detail=node.label
                ))
            if str(method).upper() == "GET":
                keyword = next(
                    (k for k in self.settings.SENSITIVE_WEBHOOK_KEYWORDS if k.lower() in path.lower()), None
                )
                if keyword:
                    findings.append(self._finding(
                        Severity.WARNING,
                        f"Webhook /{path} uses GET for potentially sensitive data",
                        detail=keyword,
                    ))
            logger.debug("webhook_endpoint", path=f"/{path}", method=method, node=node.label)
        return findings
