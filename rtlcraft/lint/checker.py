"""
Rule checker: runs the lint rule catalog over a design model.
"""

import logging
from typing import Iterable, List, Optional

from rtlcraft.model import (
    DesignModel,
    LintFinding,
    LintRecommendations,
    LintReport,
    LintSummary,
    Severity,
)

from .rules import RULES, LintContext, LintRule

logger = logging.getLogger(__name__)


class RuleChecker:
    """
    Evaluates a fixed, ordered catalog of lint rules.

    Findings from different rules are concatenated in catalog order and never
    de-duplicated; one line may receive findings from several rules.
    """

    def __init__(self, rules: Optional[Iterable[LintRule]] = None):
        self.rules = tuple(rules) if rules is not None else RULES

    def check(self, model: DesignModel, text: str) -> List[LintFinding]:
        """
        Run every rule against ``model`` and its source ``text``.

        Raises:
            TypeError: If ``model`` is not a DesignModel or ``text`` is not a string
        """
        if not isinstance(model, DesignModel):
            raise TypeError(f"RuleChecker.check expects a DesignModel, got {type(model).__name__}")
        if not isinstance(text, str):
            raise TypeError(f"RuleChecker.check expects source text, got {type(text).__name__}")

        context = LintContext.from_text(text)
        findings: List[LintFinding] = []
        for rule in self.rules:
            results = rule(model, context)
            if results:
                logger.debug("Rule %s produced %d findings", rule.__name__, len(results))
            findings.extend(results)
        return findings

    def report(self, model: DesignModel, text: str) -> LintReport:
        """Findings together with the summary score and recommendations."""
        findings = self.check(model, text)
        return LintReport(
            findings=findings,
            summary=LintSummary.from_findings(findings),
            recommendations=generate_recommendations(findings),
        )


def generate_recommendations(findings: List[LintFinding]) -> LintRecommendations:
    """Group follow-up advice by urgency, based on which rules fired."""
    immediate: List[str] = []
    optimization: List[str] = []
    best_practices: List[str] = []

    rules = {f.rule for f in findings}

    if any(f.severity == Severity.ERROR for f in findings):
        immediate.extend(
            [
                "Fix all error-level issues before synthesis",
                "Pay special attention to latch inference and combinational loops",
            ]
        )

    if "wide_mux" in rules:
        optimization.extend(
            [
                "Consider pipelining wide multiplexers for better timing",
                "Use hierarchical mux structures for large fan-in",
            ]
        )

    if "dsp_inference" in rules:
        optimization.extend(
            [
                "Restructure arithmetic for DSP block inference",
                "Group multiply-accumulate operations",
            ]
        )

    if any(f.severity == Severity.WARNING and "blocking" in f.rule for f in findings):
        best_practices.extend(
            [
                "Follow consistent coding style for assignments",
                "Use non-blocking for sequential, blocking for combinational",
            ]
        )

    if any("timing" in rule for rule in rules):
        best_practices.extend(
            [
                "Add proper timing constraints",
                "Use synthesis attributes where appropriate",
            ]
        )

    return LintRecommendations(
        immediate=immediate, optimization=optimization, best_practices=best_practices
    )


def check(model: DesignModel, text: str) -> List[LintFinding]:
    """Run the default rule catalog."""
    return RuleChecker().check(model, text)
