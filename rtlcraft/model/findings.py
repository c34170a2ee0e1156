"""
Syntax and lint findings.

Findings are plain data: they are created once per analysis pass, never
mutated, and kept in source (extractor) or catalog (rule checker) order.
"""

from enum import Enum
from typing import List, Optional

from pydantic import Field

from .base import FrozenModel, Severity


class ImbalanceDirection(str, Enum):
    """Direction of a delimiter imbalance."""

    MISSING = "missing"  # more openers than closers
    EXTRA = "extra"  # more closers than openers


class Finding(FrozenModel):
    """Common shape of syntax and lint findings."""

    line: Optional[int] = Field(default=None, ge=1, description="1-based line, if known")
    severity: Severity
    rule: str = Field(..., description="Rule identifier (e.g. 'inferred_latch')")
    message: str
    suggestion: Optional[str] = Field(default=None, description="Optional fix suggestion")

    @property
    def location(self) -> str:
        return f"line {self.line}" if self.line is not None else "file"

    def __str__(self) -> str:
        return f"[{self.severity.value.upper()}] {self.location}: {self.rule}: {self.message}"


class SyntaxFinding(Finding):
    """Malformed construct reported by the structural extractor."""

    magnitude: Optional[int] = Field(
        default=None, gt=0, description="Size of a delimiter imbalance"
    )
    direction: Optional[ImbalanceDirection] = Field(
        default=None, description="Whether closers are missing or extra"
    )


class LintFinding(Finding):
    """Static-analysis finding reported by the rule checker."""


class LintSummary(FrozenModel):
    """Counts per severity and an overall quality score (0-100)."""

    total: int = 0
    errors: int = 0
    warnings: int = 0
    info: int = 0
    score: int = 100

    @classmethod
    def from_findings(cls, findings: List[Finding]) -> "LintSummary":
        errors = sum(1 for f in findings if f.severity == Severity.ERROR)
        warnings = sum(1 for f in findings if f.severity == Severity.WARNING)
        info = sum(1 for f in findings if f.severity == Severity.INFO)
        return cls(
            total=len(findings),
            errors=errors,
            warnings=warnings,
            info=info,
            score=max(0, 100 - (errors * 10 + warnings * 5 + info)),
        )


class LintRecommendations(FrozenModel):
    """Human-readable follow-ups grouped by urgency."""

    immediate: List[str] = Field(default_factory=list)
    optimization: List[str] = Field(default_factory=list)
    best_practices: List[str] = Field(default_factory=list)


class LintReport(FrozenModel):
    """Findings together with their summary and recommendations."""

    findings: List[LintFinding] = Field(default_factory=list)
    summary: LintSummary = Field(default_factory=LintSummary)
    recommendations: LintRecommendations = Field(default_factory=LintRecommendations)

    @property
    def errors(self) -> List[LintFinding]:
        return [f for f in self.findings if f.severity == Severity.ERROR]

    @property
    def warnings(self) -> List[LintFinding]:
        return [f for f in self.findings if f.severity == Severity.WARNING]

    @property
    def is_clean(self) -> bool:
        return not self.findings

    def by_rule(self, rule: str) -> List[LintFinding]:
        return [f for f in self.findings if f.rule == rule]


class ModuleValidation(FrozenModel):
    """Result of a quick structural sanity check of a module text."""

    is_valid: bool = True
    errors: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
