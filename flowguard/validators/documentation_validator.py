"""Documentation Validator — README completeness and the standard project files."""

from pathlib import Path

from flowguard.document import WorkflowDocument
from flowguard.services.artifact_cache import ArtifactCache
from flowguard.validators.base import BaseValidator
from flowguard.validators.models import Category, Finding, Severity, ValidatorKind
from flowguard.validators.patterns import README_API, README_QUICKSTART, PatternLibrary

CHANGELOG_NAMES = ("CHANGELOG.md", "CHANGES.md", "HISTORY.md")

# (file name, warning message when missing)
PROJECT_FILES = (
    ("LICENSE", "LICENSE file missing"),
    ("SECURITY.md", "SECURITY.md missing (recommended for production workflows)"),
    ("CONTRIBUTING.md", "CONTRIBUTING.md missing (recommended for open source projects)"),
)


class DocumentationValidator(BaseValidator):
    """Checks the documentation files next to the workflow."""

    kind = ValidatorKind.DOCUMENTATION
    category = Category.DOCUMENTATION

    @property
    def name(self) -> str:
        return "DocumentationValidator"

    def evaluate(
        self, document: WorkflowDocument, cache: ArtifactCache, patterns: PatternLibrary
    ) -> list[Finding]:
        root = self._project_root(document)
        findings = self._check_readme(root, document, cache)

        for filename, message in PROJECT_FILES:
            if (root / filename).is_file():
                findings.append(self._finding(Severity.PASS, f"{filename} exists"))
            else:
                findings.append(self._finding(Severity.WARNING, message))

        if any((root / name).is_file() for name in CHANGELOG_NAMES):
            findings.append(self._finding(Severity.PASS, "Changelog file exists"))
        else:
            findings.append(self._finding(Severity.WARNING, "No changelog file found (CHANGELOG.md recommended)"))

        return findings

    def _check_readme(self, root: Path, document: WorkflowDocument, cache: ArtifactCache) -> list[Finding]:
        readme = root / "README.md"
        if not readme.is_file():
            return [self._finding(Severity.ERROR, "README.md is missing")]

        content = self._read_text(cache, readme)
        if content is None:
            return [self._finding(Severity.ERROR, "Could not read README.md", detail=str(readme))]

        findings = []
        complete = True

        if not README_QUICKSTART.search(content):
            complete = False
            findings.append(self._finding(
                Severity.WARNING, "README.md has no Quick Start / Getting Started / Installation section"
            ))
        if not README_API.search(content):
            complete = False
            findings.append(self._finding(Severity.WARNING, "README.md has no API / Endpoints / Usage section"))

        workflow_file = Path(document.path).name
        if "workflow.json" not in content and workflow_file not in content:
            complete = False
            findings.append(self._finding(
                Severity.WARNING, f"README.md does not mention the workflow file ({workflow_file})"
            ))

        if complete:
            findings.append(self._finding(Severity.PASS, "README.md exists and looks complete"))

        lines = len(content.splitlines())
        if lines < self.settings.README_MIN_LINES:
            findings.append(self._finding(
                Severity.WARNING, f"README.md is quite short ({lines} lines). Consider adding more detail."
            ))

        return findings
