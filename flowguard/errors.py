"""
Typed error classes for flowguard.

Only operational failures are raised as exceptions. Anything discovered while
validating a document is reported as a Finding instead:
- FlowguardError: Base exception for all flowguard errors
- DocumentError: The target document is missing or unparseable
- DependencyError: A required external tool is not installed
- RunTimeoutError: The run exceeded its overall time budget
- ConfigurationError: Settings are inconsistent
"""

from typing import Any, Optional


class FlowguardError(Exception):
    """Base exception class for all flowguard errors.

    Attributes:
        message: Human-readable error message
        code: Optional error code for programmatic handling
        details: Optional dictionary with additional error context
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Convert error to a dictionary for serialization."""
        result: dict[str, Any] = {
            "type": self.__class__.__name__,
            "message": self.message,
        }
        if self.code:
            result["code"] = self.code
        if self.details:
            result["details"] = self.details
        return result

    def __str__(self) -> str:
        if self.code:
            return f"[{self.code}] {self.message}"
        return self.message


class DocumentError(FlowguardError):
    """Errors related to loading the target workflow document."""

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        self.path = path
        details = details or {}
        if path:
            details["path"] = path
        super().__init__(message, code=code, details=details)


class DocumentNotFoundError(DocumentError):
    """Raised when the workflow file does not exist or cannot be read."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message, path=path, code="DOCUMENT_NOT_FOUND")


class DocumentSyntaxError(DocumentError):
    """Raised when the workflow file is not a valid JSON object."""

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            message, path=path, code="DOCUMENT_SYNTAX_INVALID", details=details
        )


class DependencyError(FlowguardError):
    """Raised when a required external tool is missing."""

    def __init__(self, message: str, missing: Optional[list[str]] = None):
        self.missing = missing or []
        super().__init__(
            message,
            code="DEPENDENCY_MISSING",
            details={"missing": self.missing} if self.missing else None,
        )


class RunTimeoutError(FlowguardError):
    """Raised when a validation run exceeds its time budget."""

    def __init__(self, message: str, timeout_seconds: Optional[float] = None):
        self.timeout_seconds = timeout_seconds
        details = {}
        if timeout_seconds is not None:
            details["timeout_seconds"] = timeout_seconds
        super().__init__(message, code="RUN_TIMEOUT", details=details)


class ConfigurationError(FlowguardError):
    """Raised when settings conflict with each other."""

    def __init__(
        self,
        message: str,
        setting: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        self.setting = setting
        details = details or {}
        if setting:
            details["setting"] = setting
        super().__init__(message, code="CONFIGURATION_ERROR", details=details)


__all__ = [
    "FlowguardError",
    "DocumentError",
    "DocumentNotFoundError",
    "DocumentSyntaxError",
    "DependencyError",
    "RunTimeoutError",
    "ConfigurationError",
]
