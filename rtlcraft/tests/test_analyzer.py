import json
import logging

import pytest

from rtlcraft import DesignAnalyzer, analyze
from rtlcraft.model import ComponentKind, DesignIntent, ThermalEnvironment, ThermalStatus


@pytest.fixture(scope="module")
def analyzer():
    return DesignAnalyzer()


class TestAnalyze:
    def test_counter(self, analyzer, counter_source):
        report = analyzer.analyze(counter_source)

        assert report.design_model.module_names == ["counter"]
        assert report.syntax_findings == []
        assert [f.rule for f in report.lint_findings] == ["missing_timing_constraint"]
        assert report.lint_summary.score == 95
        assert not report.has_errors

        assert report.estimated
        assert report.config.component_kind == ComponentKind.ADDER
        assert report.config.width == 8
        assert report.thermal_estimate.status == ThermalStatus.SAFE
        # Three adder architectures and voltage/frequency scaling
        assert len(report.optimizations) == 4
        assert report.estimation_errors == []

    def test_overrides(self, analyzer, counter_source):
        report = analyzer.analyze(counter_source, device="Kintex-7", frequency_mhz=200)

        assert report.config.device == "Kintex-7"
        assert report.config.frequency_mhz == 200.0

    def test_intent_and_environment(self, analyzer, counter_source):
        intent = DesignIntent(component="adder", parameters={"width": 32}, constraints=["delay"])
        environment = ThermalEnvironment(ambient_c=60, package="QFP")
        report = analyzer.analyze(counter_source, intent=intent, environment=environment)

        assert report.config.width == 32
        assert report.config.architecture == "carry_lookahead"
        assert report.thermal_estimate.junction_temperature_c > 60

    def test_without_estimation(self, analyzer, counter_source):
        report = analyzer.analyze(counter_source, estimate=False)

        assert report.config is None
        assert not report.estimated
        assert report.optimizations == []
        assert report.lint_findings

    def test_syntax_errors_still_estimated(self, analyzer):
        report = analyzer.analyze("module m (input [7:0] a, output [7:0] y);\n    assign y = (a + 1;\nendmodule\n")

        assert [f.rule for f in report.syntax_findings] == ["unbalanced_parentheses"]
        assert report.has_errors
        assert report.estimated

    def test_report_is_json_serializable(self, analyzer, counter_source):
        data = json.loads(json.dumps(analyzer.analyze(counter_source).to_dict()))

        assert data["lintSummary"]["score"] == 95
        assert data["designModel"]["modules"][0]["name"] == "counter"
        assert data["timingEstimate"]["criticalPath"]["levels"] == 3

    def test_module_level_function(self, counter_source):
        assert analyze(counter_source, estimate=False).lint_summary.score == 95


class TestEstimationFailures:
    def test_unknown_device(self, analyzer, counter_source, caplog):
        with caplog.at_level(logging.WARNING, logger="rtlcraft.analyzer"):
            report = analyzer.analyze(counter_source, device="Virtex-2")

        assert not report.estimated
        assert report.config.device == "Virtex-2"
        assert "Unsupported device: Virtex-2" in report.estimation_errors[0]
        # Structure and lint results survive the failure
        assert report.design_model.module_names == ["counter"]
        assert report.lint_summary.score == 95
        assert "Estimation failed" in caplog.text

    def test_memory_without_depth(self, analyzer):
        intent = DesignIntent(component="memory", parameters={"width": 32, "architecture": "block_ram"})
        report = analyzer.analyze_intent(intent)

        assert report.config.architecture == "block_ram"
        assert report.timing_estimate is None
        assert "depth" in report.estimation_errors[0]

    def test_non_numeric_intent_parameter(self, analyzer, counter_source):
        intent = DesignIntent(component="adder", parameters={"width": "wide"})
        report = analyzer.analyze(counter_source, intent=intent)

        assert report.config is None
        assert "Invalid value for parameter 'width'" in report.estimation_errors[0]
        assert report.design_model.module_names == ["counter"]
        assert report.lint_summary.score == 95

    def test_invalid_config_value(self, analyzer, counter_source):
        report = analyzer.analyze(counter_source, width=0)

        assert report.config is None
        assert len(report.estimation_errors) == 1
        assert report.lint_findings


class TestAnalyzeIntent:
    def test_intent_only(self, analyzer):
        intent = DesignIntent(component="adder", parameters={"width": 16, "frequency": 150}, constraints=["area"])
        report = analyzer.analyze_intent(intent, device="Zynq-7020")

        assert report.design_model.modules == []
        assert report.config.architecture == "ripple_carry"
        assert report.config.device == "Zynq-7020"
        assert report.config.frequency_mhz == 150.0
        assert report.estimated
        assert report.power_estimate.total_power_mw > 0
        assert report.recommendations
