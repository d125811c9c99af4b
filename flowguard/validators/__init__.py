"""Workflow validators — deterministic checks over an automation workflow document.

Usage:
    from flowguard.validators import ValidationEngine

    summary = ValidationEngine().run("workflow.json")
    if not summary.success:
        # Report summary.findings and exit non-zero
"""

from flowguard.validators.engine import EngineState, ValidationEngine
from flowguard.validators.models import Category, Finding, RunSummary, Severity, ValidatorKind
from flowguard.validators.registry import VALIDATOR_REGISTRY

__all__ = [
    "ValidationEngine",
    "EngineState",
    "VALIDATOR_REGISTRY",
    "RunSummary",
    "Finding",
    "Category",
    "Severity",
    "ValidatorKind",
]
