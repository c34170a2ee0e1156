"""
Aggregate analysis report.
"""

from typing import List, Optional

from pydantic import Field

from .base import StrictModel
from .design import DesignModel
from .estimates import (
    EstimationConfig,
    Optimization,
    PowerEstimate,
    Recommendation,
    ResourceEstimate,
    ThermalEstimate,
    TimingEstimate,
)
from .findings import LintFinding, LintRecommendations, LintSummary, SyntaxFinding


class AnalysisReport(StrictModel):
    """
    Everything one analysis pass produces.

    Estimates stay ``None`` when the estimation call failed; the failure text
    is then listed in ``estimation_errors`` while the structural model and the
    findings are still returned.
    """

    design_model: DesignModel = Field(default_factory=DesignModel)
    syntax_findings: List[SyntaxFinding] = Field(default_factory=list)
    lint_findings: List[LintFinding] = Field(default_factory=list)
    lint_summary: LintSummary = Field(default_factory=LintSummary)
    lint_recommendations: LintRecommendations = Field(default_factory=LintRecommendations)
    config: Optional[EstimationConfig] = None
    resource_estimate: Optional[ResourceEstimate] = None
    timing_estimate: Optional[TimingEstimate] = None
    power_estimate: Optional[PowerEstimate] = None
    thermal_estimate: Optional[ThermalEstimate] = None
    optimizations: List[Optimization] = Field(default_factory=list)
    recommendations: List[Recommendation] = Field(default_factory=list)
    estimation_errors: List[str] = Field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        """True when any syntax or lint finding has error severity."""
        findings = [*self.syntax_findings, *self.lint_findings]
        return any(f.severity.value == "error" for f in findings)

    @property
    def estimated(self) -> bool:
        return self.resource_estimate is not None and self.timing_estimate is not None
