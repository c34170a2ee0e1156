"""
Optimization advisor ranking and recommendations.
"""

import pytest

from rtlcraft.estimation import EstimationEngine, OptimizationAdvisor, optimization_score
from rtlcraft.model import EstimationConfig, OptimizationKind


@pytest.fixture(scope="module")
def advisor():
    return OptimizationAdvisor(EstimationEngine())


@pytest.fixture
def ripple_config():
    return EstimationConfig(component_kind="adder", architecture="ripple_carry", width=32)


class TestScore:
    def test_weights(self):
        assert optimization_score(1.0, 1.0, 1.0) == 1.0
        assert optimization_score(2.0, 1.0, 1.0) == 1.4
        assert optimization_score(1.0, 0.5, 2.0) == 1.15


class TestSuggestAlternatives:
    def test_ranking(self, advisor, ripple_config):
        options = advisor.suggest_alternatives(ripple_config)

        assert [o.kind for o in options] == [
            OptimizationKind.PIPELINING,
            OptimizationKind.ARCHITECTURE_CHANGE,
            OptimizationKind.DVFS,
            OptimizationKind.ARCHITECTURE_CHANGE,
        ]
        assert [o.changes.get("architecture") for o in options] == [
            None,
            "carry_lookahead",
            None,
            "carry_select",
        ]
        scores = [o.score for o in options]
        assert scores == sorted(scores, reverse=True)

    def test_pipelining(self, advisor, ripple_config):
        pipelining = advisor.suggest_alternatives(ripple_config)[0]

        assert pipelining.description == "Add 2 pipeline stages"
        assert pipelining.changes == {"pipeline_stages": 2}
        assert pipelining.impact.ff_change == 32
        assert pipelining.impact.latency_increase == 2
        assert pipelining.impact.frequency_change_mhz == 170.4
        assert pipelining.impact.power_change_mw == 16.0
        assert pipelining.score == 1.582

    def test_architecture_change_impact(self, advisor, ripple_config):
        lookahead = advisor.suggest_alternatives(ripple_config)[1]

        assert lookahead.description == "Switch to carry_lookahead architecture"
        assert lookahead.impact.lut_change == 16
        assert lookahead.impact.delay_change_ns == -4.4
        assert lookahead.impact.power_change_mw == 20.0
        assert lookahead.score == pytest.approx(1.278, abs=1e-3)

    def test_dvfs(self, advisor, ripple_config):
        dvfs = advisor.suggest_alternatives(ripple_config)[2]

        assert dvfs.changes == {"frequency_scaling": 0.8, "voltage_scaling": 0.9}
        assert dvfs.impact.frequency_change_mhz == -20.0
        assert dvfs.impact.power_change_mw == pytest.approx(-39.21, abs=0.01)
        assert dvfs.score == pytest.approx(0.976, abs=1e-3)

    def test_current_architecture_not_proposed(self, advisor, ripple_config):
        options = advisor.suggest_alternatives(ripple_config)
        assert all(o.changes.get("architecture") != "ripple_carry" for o in options)

    def test_shallow_design_is_not_pipelined(self, advisor):
        options = advisor.suggest_alternatives(EstimationConfig(width=8))
        # Generic kind: no architectures, 3 logic levels
        assert [o.kind for o in options] == [OptimizationKind.DVFS]

    def test_at_most_five(self, advisor, ripple_config):
        options = advisor.suggest_alternatives(ripple_config, include_devices=True)

        assert len(options) == 5
        migrations = [o for o in options if o.kind == OptimizationKind.DEVICE_MIGRATION]
        assert all(o.changes["device"] != "Artix-7" for o in migrations)

    def test_memory_without_depth_skips_profiles(self, advisor):
        config = EstimationConfig(component_kind="memory", width=32)
        options = advisor.suggest_alternatives(config)

        assert all(o.kind != OptimizationKind.ARCHITECTURE_CHANGE for o in options)


class TestRecommend:
    def test_best_per_category(self, advisor, ripple_config):
        recommendations = advisor.recommend(advisor.suggest_alternatives(ripple_config))

        assert [r.category for r in recommendations] == ["performance", "power"]
        assert recommendations[0].expected_improvement == "+170.4 MHz"
        assert recommendations[0].description == "Add 2 pipeline stages"
        assert recommendations[1].expected_improvement == "39.2 mW saved"
        assert recommendations[1].description == "Dynamic Voltage and Frequency Scaling"

    def test_area_saving(self, advisor):
        config = EstimationConfig(component_kind="adder", architecture="carry_select", width=32)
        recommendations = advisor.recommend(advisor.suggest_alternatives(config))

        # carry_lookahead outranks ripple_carry and is the first to save area
        area = [r for r in recommendations if r.category == "area"]
        assert area[0].description == "Switch to carry_lookahead architecture"
        assert area[0].expected_improvement == "23 LUTs saved"

    def test_nothing_to_recommend(self, advisor):
        assert advisor.recommend([]) == []
