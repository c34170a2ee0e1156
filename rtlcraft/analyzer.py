"""
Design analyzer: the single entry point that runs extraction, linting and
estimation over one Verilog source text.
"""

import logging
from typing import Any, Callable, Dict, Optional

from pydantic import ValidationError

from rtlcraft.errors import EstimationError
from rtlcraft.estimation import EstimationEngine, OptimizationAdvisor, config_from_intent, config_from_model
from rtlcraft.lint import RuleChecker
from rtlcraft.model import AnalysisReport, DesignIntent, EstimationConfig, ThermalEnvironment
from rtlcraft.parser.hdl import VerilogExtractor

logger = logging.getLogger(__name__)


class DesignAnalyzer:
    """
    Runs the full analysis pipeline.

    Syntax and lint problems are reported as findings. Estimation failures
    (unknown device, missing depth, invalid config values) are recorded in
    ``estimation_errors``; the structural model and findings are returned
    either way.

    Example:
        >>> analyzer = DesignAnalyzer()
        >>> report = analyzer.analyze(source, device="Kintex-7")
        >>> report.lint_summary.score
    """

    def __init__(
        self,
        extractor: Optional[VerilogExtractor] = None,
        checker: Optional[RuleChecker] = None,
        engine: Optional[EstimationEngine] = None,
        advisor: Optional[OptimizationAdvisor] = None,
    ):
        self.extractor = extractor or VerilogExtractor()
        self.checker = checker or RuleChecker()
        self.engine = engine or EstimationEngine()
        self.advisor = advisor or OptimizationAdvisor(self.engine)

    def analyze(
        self,
        text: str,
        intent: Optional[DesignIntent] = None,
        environment: Optional[ThermalEnvironment] = None,
        estimate: bool = True,
        **overrides: Any,
    ) -> AnalysisReport:
        """
        Analyze Verilog source text.

        Args:
            text: Verilog source
            intent: Optional design intent; its values take precedence over
                figures derived from the source
            environment: Thermal environment for the thermal estimate
            estimate: Set to False to run extraction and linting only
            **overrides: EstimationConfig fields (e.g. ``device="Kintex-7"``)

        Returns:
            AnalysisReport
        """
        model, syntax_findings = self.extractor.extract(text)
        lint = self.checker.report(model, text)
        logger.debug(
            "Extracted %d modules, %d syntax findings, %d lint findings",
            len(model.modules),
            len(syntax_findings),
            len(lint.findings),
        )

        fields: Dict[str, Any] = {
            "design_model": model,
            "syntax_findings": syntax_findings,
            "lint_findings": lint.findings,
            "lint_summary": lint.summary,
            "lint_recommendations": lint.recommendations,
        }
        if estimate:
            fields.update(
                self._estimate(
                    lambda: config_from_model(model, intent, self.engine.architectures, **overrides),
                    environment,
                )
            )
        return AnalysisReport(**fields)

    def analyze_intent(
        self,
        intent: DesignIntent,
        environment: Optional[ThermalEnvironment] = None,
        **overrides: Any,
    ) -> AnalysisReport:
        """Estimate a design from its intent alone, before any source exists."""
        return AnalysisReport(
            **self._estimate(
                lambda: config_from_intent(intent, self.engine.architectures, **overrides),
                environment,
            )
        )

    def _estimate(
        self,
        make_config: Callable[[], EstimationConfig],
        environment: Optional[ThermalEnvironment],
    ) -> Dict[str, Any]:
        """Estimate fields of the report; estimates computed before a failure are kept."""
        fields: Dict[str, Any] = {}
        try:
            config = make_config()
            fields["config"] = config
            fields["timing_estimate"] = self.engine.estimate_timing(config)
            resources = self.engine.estimate_resources(config)
            fields["resource_estimate"] = resources
            power = self.engine.estimate_power(config, resources)
            fields["power_estimate"] = power
            fields["thermal_estimate"] = self.engine.estimate_thermal(config, power, environment)
            optimizations = self.advisor.suggest_alternatives(config)
            fields["optimizations"] = optimizations
            fields["recommendations"] = self.advisor.recommend(optimizations)
        except (EstimationError, ValidationError) as e:
            logger.warning("Estimation failed: %s", e)
            fields["estimation_errors"] = [str(e)]
        return fields


def analyze(text: str, **overrides: Any) -> AnalysisReport:
    """Analyze ``text`` with the default extractor, rules and catalogs."""
    return DesignAnalyzer().analyze(text, **overrides)
