"""
Unit tests for the flowguard typed error classes.
"""

from flowguard.errors import (
    ConfigurationError,
    DependencyError,
    DocumentError,
    DocumentNotFoundError,
    DocumentSyntaxError,
    FlowguardError,
    RunTimeoutError,
)


class TestFlowguardError:
    """Tests for the base FlowguardError class."""

    def test_basic_error(self):
        """Test basic error creation with message only."""
        error = FlowguardError("Something went wrong")
        assert str(error) == "Something went wrong"
        assert error.code is None
        assert error.details == {}

    def test_error_with_code(self):
        """Test error with code."""
        error = FlowguardError("Something went wrong", code="ERR_001")
        assert str(error) == "[ERR_001] Something went wrong"

    def test_to_dict(self):
        """Test error serialization to dictionary."""
        error = FlowguardError("Test error", code="TEST_CODE", details={"key": "value"})
        assert error.to_dict() == {
            "type": "FlowguardError",
            "message": "Test error",
            "code": "TEST_CODE",
            "details": {"key": "value"},
        }

    def test_to_dict_minimal(self):
        """Test minimal error serialization."""
        assert FlowguardError("Test error").to_dict() == {"type": "FlowguardError", "message": "Test error"}


class TestDocumentErrors:
    """Tests for document loading errors."""

    def test_not_found(self):
        """Test DocumentNotFoundError carries its path and code."""
        error = DocumentNotFoundError("missing", path="workflow.json")
        assert isinstance(error, DocumentError)
        assert error.code == "DOCUMENT_NOT_FOUND"
        assert error.details == {"path": "workflow.json"}

    def test_syntax(self):
        """Test DocumentSyntaxError merges path into details."""
        error = DocumentSyntaxError("bad", path="workflow.json", details={"reason": "Expecting ','"})
        assert error.code == "DOCUMENT_SYNTAX_INVALID"
        assert error.details == {"reason": "Expecting ','", "path": "workflow.json"}


class TestOperationalErrors:
    """Tests for dependency, timeout and configuration errors."""

    def test_dependency(self):
        """Test DependencyError lists missing tools."""
        error = DependencyError("Missing required tools: bash", missing=["bash"])
        assert error.code == "DEPENDENCY_MISSING"
        assert error.details == {"missing": ["bash"]}

    def test_timeout(self):
        """Test RunTimeoutError records the budget."""
        error = RunTimeoutError("too slow", timeout_seconds=1.5)
        assert error.code == "RUN_TIMEOUT"
        assert error.details == {"timeout_seconds": 1.5}

    def test_configuration(self):
        """Test ConfigurationError names the offending setting."""
        error = ConfigurationError("bad", setting="MAX_WORKERS")
        assert isinstance(error, FlowguardError)
        assert error.details == {"setting": "MAX_WORKERS"}
