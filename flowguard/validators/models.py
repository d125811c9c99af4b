"""Validation models — categories, severity levels, findings, and the run summary.

All validation is deterministic: same document in, same sorted findings out,
whether validators ran sequentially or concurrently.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class Category(str, Enum):
    """Concern a finding belongs to. Declaration order is report order."""

    STRUCTURE = "structure"
    SECURITY = "security"
    PERFORMANCE = "performance"
    DOCUMENTATION = "documentation"
    TESTS = "tests"


class Severity(str, Enum):
    """Finding severity levels, most severe first."""

    ERROR = "error"      # Fails the run (exit code 1)
    WARNING = "warning"  # Should be addressed before production
    INFO = "info"        # Informational, never affects the outcome
    PASS = "pass"        # A check that succeeded


class ValidatorKind(str, Enum):
    """Dispatch tag for the five validator units."""

    STRUCTURE = "structure"
    SECURITY = "security"
    PERFORMANCE = "performance"
    DOCUMENTATION = "documentation"
    COMPANION_SCRIPTS = "companion_scripts"


CATEGORY_ORDER = {c: i for i, c in enumerate(Category)}
SEVERITY_RANK = {s: i for i, s in enumerate(Severity)}


class Finding(BaseModel):
    """A single validator output. Immutable once created."""

    category: Category
    severity: Severity
    message: str
    detail: Optional[str] = None           # Matched text or pattern
    source_validator: str

    model_config = {"frozen": True}

    def sort_key(self) -> tuple[int, int]:
        return CATEGORY_ORDER[self.category], SEVERITY_RANK[self.severity]


class ValidatorTiming(BaseModel):
    """Wall-clock duration of one dispatch step."""

    name: str
    duration_ms: float

    model_config = {"frozen": True}


class RunSummary(BaseModel):
    """Aggregate result of one validation run — the output of the engine."""

    findings: tuple[Finding, ...] = ()
    counts: dict[str, int] = Field(
        default_factory=lambda: {s.value: 0 for s in Severity},
        description="Count of findings by severity",
    )
    timings: tuple[ValidatorTiming, ...] = ()
    total_ms: float = 0.0
    aborted: bool = Field(default=False, description="True if the run stopped before validators ran")

    model_config = {"frozen": True}

    @property
    def success(self) -> bool:
        return self.counts[Severity.ERROR.value] == 0

    @property
    def passed(self) -> int:
        return self.counts[Severity.PASS.value]

    @property
    def warnings(self) -> int:
        return self.counts[Severity.WARNING.value]

    @property
    def errors(self) -> int:
        return self.counts[Severity.ERROR.value]

    @classmethod
    def build(
        cls,
        findings: list[Finding],
        timings: Optional[list[ValidatorTiming]] = None,
        total_ms: float = 0.0,
        aborted: bool = False,
    ) -> "RunSummary":
        """Fold findings into a summary. Single reduction step, no shared counters.

        Findings are sorted by (category, severity rank, original index), so the
        input order only matters between findings that tie on the first two.
        """
        counts = {s.value: 0 for s in Severity}
        for finding in findings:
            counts[finding.severity.value] += 1

        ordered = sorted(enumerate(findings), key=lambda pair: (*pair[1].sort_key(), pair[0]))

        return cls(
            findings=tuple(f for _, f in ordered),
            counts=counts,
            timings=tuple(timings or ()),
            total_ms=round(total_ms, 3),
            aborted=aborted,
        )

    @classmethod
    def fatal(cls, finding: Finding, total_ms: float = 0.0) -> "RunSummary":
        """Summary for a run that aborted before any validator executed."""
        return cls.build([finding], total_ms=total_ms, aborted=True)

    def by_category(self) -> dict[Category, list[Finding]]:
        grouped: dict[Category, list[Finding]] = {}
        for finding in self.findings:
            grouped.setdefault(finding.category, []).append(finding)
        return grouped

    def signature(self) -> list[tuple[str, str, str]]:
        """(category, severity, message) triples, for comparing runs."""
        return [(f.category.value, f.severity.value, f.message) for f in self.findings]
