"""Security Validator — credential leaks, placeholders, transport settings, code injection.

Document-scoped rules run over the raw serialized document. Code-scoped rules
run over each function node's code, so injection heuristics never fire on
plain configuration strings.
"""

import json

import structlog

from flowguard.document import WorkflowDocument
from flowguard.services.artifact_cache import ArtifactCache
from flowguard.validators.base import BaseValidator
from flowguard.validators.models import Category, Finding, Severity, ValidatorKind
from flowguard.validators.patterns import (
    CRYPTO_IDIOMS,
    ERROR_HANDLING_IDIOMS,
    INPUT_VALIDATION_IDIOMS,
    WEBHOOK_AUTH_HINTS,
    PatternLibrary,
    Scope,
)

logger = structlog.get_logger()

# Check groups reported with a pass finding when clean
_DOCUMENT_GROUPS = {
    "credentials": "No hardcoded credentials detected",
    "placeholders": "No development placeholders found",
    "transport": "No insecure transport settings found",
    "data_protection": "No sensitive personal data references",
}
_CODE_GROUPS = ("injection", "input_handling", "modules")


class SecurityValidator(BaseValidator):
    """Scans the workflow for secrets and unsafe code using the pattern library."""

    kind = ValidatorKind.SECURITY
    category = Category.SECURITY

    @property
    def name(self) -> str:
        return "SecurityValidator"

    def evaluate(
        self, document: WorkflowDocument, cache: ArtifactCache, patterns: PatternLibrary
    ) -> list[Finding]:
        findings = []

        findings.extend(self._scan_document(document, cache, patterns))
        findings.extend(self._scan_code(document, cache, patterns))
        findings.extend(self._check_webhook_auth(document, cache))

        return findings

    def _scan_document(
        self, document: WorkflowDocument, cache: ArtifactCache, patterns: PatternLibrary
    ) -> list[Finding]:
        findings = []
        rules = patterns.select(scope=Scope.DOCUMENT, category=Category.SECURITY)
        matches = patterns.scan(document.text, rules)

        hit_groups = set()
        for match in matches:
            hit_groups.add(match.rule.group)
            if match.rule.group == "environment":
                findings.append(self._finding(
                    Severity.INFO,
                    "Uses environment variable references (good practice)",
                    detail=f"{match.excerpt} [{match.rule.id}]",
                ))
            else:
                findings.append(self._match_finding(match, "workflow document"))

        for group, message in _DOCUMENT_GROUPS.items():
            if group not in hit_groups:
                findings.append(self._finding(Severity.PASS, message))

        if CRYPTO_IDIOMS.search(document.text):
            findings.append(self._finding(Severity.PASS, "Cryptographic functions found"))
        else:
            findings.append(self._finding(Severity.INFO, "No cryptographic functions detected"))

        logger.debug(
            "security_document_scanned",
            rules=len(rules),
            matches=len(matches),
            patterns_version=patterns.version,
        )
        return findings

    def _scan_code(
        self, document: WorkflowDocument, cache: ArtifactCache, patterns: PatternLibrary
    ) -> list[Finding]:
        blocks = self._function_code(document, cache)
        if not blocks:
            return [self._finding(Severity.INFO, "No function node code to scan")]

        findings = []
        rules = [
            r for r in patterns.select(scope=Scope.CODE, category=Category.SECURITY)
            if r.group in _CODE_GROUPS
        ]

        clean = True
        for label, code in blocks:
            for match in patterns.scan(code, rules):
                clean = False
                findings.append(self._match_finding(match, f"function node '{label}'"))

            # Hygiene: validation and error handling idioms
            if not INPUT_VALIDATION_IDIOMS.search(code):
                findings.append(self._finding(
                    Severity.WARNING, f"Function node '{label}' does not validate its input"
                ))
            if not ERROR_HANDLING_IDIOMS.search(code):
                findings.append(self._finding(
                    Severity.WARNING, f"Function node '{label}' has no error handling (try/catch/throw)"
                ))

        if clean:
            findings.append(self._finding(
                Severity.PASS, f"No injection patterns in {len(blocks)} function code block(s)"
            ))
        return findings

    def _check_webhook_auth(self, document: WorkflowDocument, cache: ArtifactCache) -> list[Finding]:
        findings = []
        for node in self._nodes(document, cache):
            if node.kind != "webhook":
                continue
            mode = node.parameters.get("authentication")
            params = json.dumps(node.parameters, sort_keys=True)
            if mode != "none" and WEBHOOK_AUTH_HINTS.search(params):
                findings.append(self._finding(Severity.PASS, f"Webhook '{node.label}' declares authentication"))
            else:
                findings.append(self._finding(
                    Severity.WARNING, f"Webhook '{node.label}' has no authentication configured"
                ))
        return findings
