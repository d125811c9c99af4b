"""Validator dispatch table. Declaration order is registration order."""

from flowguard.validators.base import BaseValidator
from flowguard.validators.documentation_validator import DocumentationValidator
from flowguard.validators.models import ValidatorKind
from flowguard.validators.performance_validator import PerformanceValidator
from flowguard.validators.script_validator import CompanionScriptValidator
from flowguard.validators.security_validator import SecurityValidator
from flowguard.validators.structure_validator import StructureValidator

VALIDATOR_REGISTRY: dict[ValidatorKind, type[BaseValidator]] = {
    ValidatorKind.STRUCTURE: StructureValidator,          # Everything else assumes a readable node list
    ValidatorKind.SECURITY: SecurityValidator,
    ValidatorKind.PERFORMANCE: PerformanceValidator,
    ValidatorKind.DOCUMENTATION: DocumentationValidator,
    ValidatorKind.COMPANION_SCRIPTS: CompanionScriptValidator,
}

# External tools a validator shells out to
REQUIRED_TOOLS: dict[ValidatorKind, tuple[str, ...]] = {
    ValidatorKind.COMPANION_SCRIPTS: ("bash",),
}
