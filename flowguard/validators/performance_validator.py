"""Performance Validator — document size, node count, blocking code, graph density, memory."""

import structlog

from flowguard.document import WorkflowDocument
from flowguard.services.artifact_cache import ArtifactCache
from flowguard.validators.base import BaseValidator
from flowguard.validators.models import Category, Finding, Severity, ValidatorKind
from flowguard.validators.patterns import PatternLibrary, Scope, Tier

logger = structlog.get_logger()


def _kb(size: int) -> str:
    return f"{size / 1024:.1f} KB"


class PerformanceValidator(BaseValidator):
    """Flags workflows likely to be slow or memory-hungry at execution time.

    All thresholds come from Settings and every comparison is strictly
    greater-than: a value equal to a threshold does not trigger it.
    """

    kind = ValidatorKind.PERFORMANCE
    category = Category.PERFORMANCE

    @property
    def name(self) -> str:
        return "PerformanceValidator"

    def evaluate(
        self, document: WorkflowDocument, cache: ArtifactCache, patterns: PatternLibrary
    ) -> list[Finding]:
        findings = []

        findings.extend(self._check_size(document))
        findings.extend(self._check_node_count(document, cache))
        findings.extend(self._check_code(document, cache, patterns))
        findings.extend(self._check_connections(document, cache))
        findings.extend(self._check_memory(document))

        return findings

    def _check_size(self, document: WorkflowDocument) -> list[Finding]:
        size = document.size_bytes
        soft, hard = self.settings.SIZE_SOFT_LIMIT, self.settings.SIZE_HARD_LIMIT

        if size > hard:
            return [self._finding(
                Severity.ERROR,
                f"Workflow file is too large ({_kb(size)}, limit {_kb(hard)})",
                detail=f"{size} bytes",
            )]
        if size > soft:
            return [self._finding(
                Severity.WARNING,
                f"Workflow file is large ({_kb(size)}). Consider splitting into sub-workflows.",
                detail=f"{size} bytes",
            )]
        return [self._finding(Severity.PASS, f"Workflow size is reasonable ({_kb(size)})")]

    def _check_node_count(self, document: WorkflowDocument, cache: ArtifactCache) -> list[Finding]:
        count = len(self._nodes(document, cache))

        if count > self.settings.NODE_COUNT_ERROR:
            return [self._finding(
                Severity.ERROR,
                f"Too many nodes ({count} > {self.settings.NODE_COUNT_ERROR}). Split the workflow.",
            )]
        if count > self.settings.NODE_COUNT_WARNING:
            return [self._finding(
                Severity.WARNING,
                f"High node count ({count} > {self.settings.NODE_COUNT_WARNING}) may slow execution",
            )]
        return [self._finding(Severity.PASS, f"Node count is manageable ({count})")]

    def _check_code(
        self, document: WorkflowDocument, cache: ArtifactCache, patterns: PatternLibrary
    ) -> list[Finding]:
        blocks = self._function_code(document, cache)
        if not blocks:
            return []

        rules = patterns.select(scope=Scope.CODE, tier=Tier.PERFORMANCE)
        findings = [
            self._match_finding(match, f"function node '{label}'")
            for label, code in blocks
            for match in patterns.scan(code, rules)
        ]
        if not findings:
            findings.append(self._finding(Severity.PASS, "No blocking patterns in function code"))
        return findings

    def _check_connections(self, document: WorkflowDocument, cache: ArtifactCache) -> list[Finding]:
        edges = self._edge_count(document, cache)
        if edges > self.settings.CONNECTION_LIMIT:
            return [self._finding(
                Severity.WARNING,
                f"Complex connection graph ({edges} connections > {self.settings.CONNECTION_LIMIT})",
            )]
        return [self._finding(Severity.PASS, f"Connection count is manageable ({edges})")]

    def _check_memory(self, document: WorkflowDocument) -> list[Finding]:
        estimate = document.size_bytes * self.settings.MEMORY_MULTIPLIER
        limit = self.settings.MEMORY_LIMIT_BYTES
        logger.debug("memory_estimate", estimate_bytes=estimate, limit_bytes=limit)

        if estimate > limit:
            return [self._finding(
                Severity.WARNING,
                f"Estimated execution memory is high (~{estimate / 1024 / 1024:.1f} MB)",
                detail=f"{estimate} bytes estimated",
            )]
        return [self._finding(Severity.PASS, f"Estimated execution memory ~{_kb(estimate)}")]
