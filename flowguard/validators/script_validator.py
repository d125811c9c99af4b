"""Companion-Scripts Validator — shell scripts shipped next to the workflow.

For every configured script: existence, execute permission, a `bash -n`
dry parse and unresolved placeholder URLs. The checks are independent and
additive, except that a missing script skips the rest.
"""

import os
import subprocess
from pathlib import Path

import structlog

from flowguard.document import WorkflowDocument
from flowguard.services.artifact_cache import ArtifactCache
from flowguard.validators.base import BaseValidator
from flowguard.validators.models import Category, Finding, Severity, ValidatorKind
from flowguard.validators.patterns import URL_ASSIGNMENT, URL_PLACEHOLDER, URL_TOKEN, PatternLibrary

logger = structlog.get_logger()

MAX_EXCERPT_LINES = 3


class CompanionScriptValidator(BaseValidator):
    """Checks the request scripts that exercise the workflow's endpoints."""

    kind = ValidatorKind.COMPANION_SCRIPTS
    category = Category.TESTS

    @property
    def name(self) -> str:
        return "CompanionScriptValidator"

    def evaluate(
        self, document: WorkflowDocument, cache: ArtifactCache, patterns: PatternLibrary
    ) -> list[Finding]:
        root = self._project_root(document)
        findings = []
        for script in self.settings.COMPANION_SCRIPTS:
            findings.extend(self._check_script(root / script, cache))
        return findings

    def _check_script(self, path: Path, cache: ArtifactCache) -> list[Finding]:
        name = path.name
        if not path.is_file():
            return [self._finding(Severity.WARNING, f"{name} not found", detail=str(path))]

        findings = []

        # 1. Execute permission
        if os.access(path, os.X_OK):
            findings.append(self._finding(Severity.PASS, f"{name} is executable"))
        else:
            findings.append(self._finding(
                Severity.WARNING, f"{name} is not executable. Run: chmod +x {name}"
            ))

        # 2. Shell syntax
        findings.append(self._check_syntax(path))

        # 3. Placeholder URLs
        content = self._read_text(cache, path)
        if content is None:
            findings.append(self._finding(Severity.WARNING, f"Could not read {name}"))
            return findings

        placeholders = self._placeholder_urls(content)
        if placeholders:
            findings.append(self._finding(
                Severity.WARNING,
                f"{name} contains placeholder URLs. Update BASE_URL before testing.",
                detail=", ".join(placeholders[:MAX_EXCERPT_LINES]),
            ))
        else:
            findings.append(self._finding(Severity.PASS, f"{name} URLs look configured"))

        return findings

    def _check_syntax(self, path: Path) -> Finding:
        try:
            result = subprocess.run(
                ["bash", "-n", str(path)],
                capture_output=True,
                text=True,
                timeout=self.settings.SCRIPT_CHECK_TIMEOUT,
            )
        except subprocess.TimeoutExpired:
            logger.warning("script_syntax_check_timeout", script=str(path))
            return self._finding(
                Severity.WARNING,
                f"Syntax check of {path.name} timed out after {self.settings.SCRIPT_CHECK_TIMEOUT}s",
            )

        if result.returncode == 0:
            return self._finding(Severity.PASS, f"{path.name} syntax is valid")

        excerpt = "\n".join(result.stderr.strip().splitlines()[:MAX_EXCERPT_LINES])
        logger.debug("script_syntax_invalid", script=str(path), returncode=result.returncode)
        return self._finding(Severity.ERROR, f"{path.name} has syntax errors", detail=excerpt or None)

    @staticmethod
    def _placeholder_urls(content: str) -> list[str]:
        candidates = URL_TOKEN.findall(content) + URL_ASSIGNMENT.findall(content)
        found = []
        for url in candidates:
            if URL_PLACEHOLDER.search(url) and url not in found:
                found.append(url)
        return found
