"""
Unit tests for the Documentation validator.
"""

from flowguard.config import Settings
from flowguard.tests.conftest import run_validator, severities, write_project_file
from flowguard.validators.documentation_validator import DocumentationValidator
from flowguard.validators.models import Category, Severity

FULL_README = "\n".join(
    ["# Reseller Sync", "", "Imports resellers through `workflow.json`.", ""]
    + ["## Quick Start", "", "1. Import the workflow", "2. Activate it", ""]
    + ["## API", "", "POST /webhook/resellers", ""]
    + [f"- note {i}" for i in range(10)]
)


def complete_project(root):
    write_project_file(root, "README.md", FULL_README)
    for name in ("LICENSE", "SECURITY.md", "CONTRIBUTING.md", "CHANGELOG.md"):
        write_project_file(root, name, "x")


class TestReadme:
    """Tests for README checks."""

    def test_missing_readme_is_error(self, make_document, settings):
        """Test a missing README.md is an error."""
        findings = run_validator(DocumentationValidator(settings), make_document({"name": "T"}))
        errors = severities(findings, Severity.ERROR)
        assert [e.message for e in errors] == ["README.md is missing"]
        assert errors[0].category == Category.DOCUMENTATION

    def test_complete_project(self, tmp_path, make_document, settings):
        """Test a fully documented project has no warnings."""
        complete_project(tmp_path)
        findings = run_validator(DocumentationValidator(settings), make_document({"name": "T"}))
        assert severities(findings, Severity.ERROR) == []
        assert severities(findings, Severity.WARNING) == []
        assert "README.md exists and looks complete" in [f.message for f in findings]

    def test_missing_sections(self, tmp_path, make_document, settings):
        """Test each missing README section is its own warning."""
        write_project_file(tmp_path, "README.md", "# Title\n" * 25)
        warnings = [w.message for w in severities(
            run_validator(DocumentationValidator(settings), make_document({"name": "T"})), Severity.WARNING
        )]
        assert "README.md has no Quick Start / Getting Started / Installation section" in warnings
        assert "README.md has no API / Endpoints / Usage section" in warnings
        assert "README.md does not mention the workflow file (workflow.json)" in warnings

    def test_deeper_section_headings(self, tmp_path, make_document, settings):
        """Test level-3 headings count as README sections."""
        write_project_file(tmp_path, "README.md", "### Installation\n### API\nworkflow.json\n" + "text\n" * 25)
        warnings = [w.message for w in severities(
            run_validator(DocumentationValidator(settings), make_document({"name": "T"})), Severity.WARNING
        )]
        assert not any("section" in w for w in warnings)

    def test_short_readme(self, tmp_path, make_document, settings):
        """Test READMEs below the minimum length are warnings."""
        write_project_file(tmp_path, "README.md", "## Installation\n## Usage\nworkflow.json\n")
        warnings = [w.message for w in severities(
            run_validator(DocumentationValidator(settings), make_document({"name": "T"})), Severity.WARNING
        )]
        assert "README.md is quite short (3 lines). Consider adding more detail." in warnings

    def test_project_root_setting(self, tmp_path, make_document):
        """Test PROJECT_ROOT overrides the document's directory."""
        docs = tmp_path / "docs"
        docs.mkdir()
        complete_project(docs)
        validator = DocumentationValidator(Settings(PROJECT_ROOT=str(docs)))
        findings = run_validator(validator, make_document({"name": "T"}))
        assert severities(findings, Severity.ERROR) == []


class TestProjectFiles:
    """Tests for LICENSE, SECURITY, CONTRIBUTING and changelog files."""

    def test_missing_files_warn(self, tmp_path, make_document, settings):
        """Test each missing project file is a warning."""
        write_project_file(tmp_path, "README.md", FULL_README)
        warnings = [w.message for w in severities(
            run_validator(DocumentationValidator(settings), make_document({"name": "T"})), Severity.WARNING
        )]
        assert warnings == [
            "LICENSE file missing",
            "SECURITY.md missing (recommended for production workflows)",
            "CONTRIBUTING.md missing (recommended for open source projects)",
            "No changelog file found (CHANGELOG.md recommended)",
        ]

    def test_history_counts_as_changelog(self, tmp_path, make_document, settings):
        """Test HISTORY.md satisfies the changelog check."""
        write_project_file(tmp_path, "HISTORY.md", "x")
        findings = run_validator(DocumentationValidator(settings), make_document({"name": "T"}))
        assert "Changelog file exists" in [f.message for f in severities(findings, Severity.PASS)]
