"""
Timing, resource, power and thermal estimates on the bundled catalogs.
"""

import pytest

from rtlcraft.errors import MissingParameterError, UnknownArchitectureError, UnknownDeviceError
from rtlcraft.estimation import EstimationEngine, cooling_requirement, generic_logic_levels
from rtlcraft.model import (
    EstimationConfig,
    PackageType,
    ThermalEnvironment,
    ThermalStatus,
)


@pytest.fixture(scope="module")
def engine():
    return EstimationEngine()


def ripple(width=32, **changes):
    return EstimationConfig(component_kind="adder", architecture="ripple_carry", width=width, **changes)


class TestTiming:
    def test_ripple_carry(self, engine):
        timing = engine.estimate_timing(ripple())

        assert timing.logic_delay_ns == 4.0
        assert timing.routing_delay_ns == 4.8
        assert timing.total_delay_ns == 8.8
        assert timing.max_frequency_mhz == 113.6
        assert timing.setup_slack_ns == 1.2
        assert timing.hold_slack_ns == 0.5
        assert timing.meets_target
        assert timing.critical_path.levels == 5
        assert timing.critical_path.bottleneck == "routing"

    @pytest.mark.parametrize("width, total", [(8, 2.2), (16, 4.4), (32, 8.8)])
    def test_ripple_delay_grows_linearly(self, engine, width, total):
        assert engine.estimate_timing(ripple(width)).total_delay_ns == total

    def test_speed_grade_derates_delay(self, engine):
        assert engine.estimate_timing(ripple(speed_grade="fastest")).total_delay_ns == 6.6

    def test_temperature_derates_delay(self, engine):
        assert engine.estimate_timing(ripple(temperature_c=35)).total_delay_ns == 9.68

    def test_generic_path_capped_at_device_limit(self, engine):
        timing = engine.estimate_timing(EstimationConfig(width=8))

        assert timing.total_delay_ns == 0.818
        assert timing.max_frequency_mhz == 450.0
        assert timing.critical_path.levels == 3

    def test_logic_level_override(self, engine):
        config = EstimationConfig(width=8, logic_levels=10)
        assert generic_logic_levels(config) == 10
        assert engine.estimate_timing(config).logic_delay_ns == 1.24

    def test_single_bit_has_no_logic_levels(self, engine):
        config = EstimationConfig(width=1)
        timing = engine.estimate_timing(config)

        assert generic_logic_levels(config) == 0
        assert timing.logic_delay_ns == 0.0
        assert timing.total_delay_ns == 0.0
        assert timing.max_frequency_mhz == 450.0
        assert timing.setup_slack_ns == 10.0
        assert timing.critical_path.levels == 0

    def test_identical_inputs_give_identical_results(self, engine):
        assert engine.estimate_timing(ripple()) == engine.estimate_timing(ripple())


class TestResources:
    def test_generic(self, engine):
        resources = engine.estimate_resources(EstimationConfig(width=8))

        assert resources.luts == 16
        assert resources.ffs == 8
        assert resources.brams == 0
        assert resources.dsps == 0
        assert resources.ios == 19
        assert resources.total_equivalent_luts == 20
        assert resources.bottleneck == "ios"
        assert resources.utilization["ios"] == 9.05
        assert resources.fits

    def test_instances_scale_logic_not_ios(self, engine):
        resources = engine.estimate_resources(EstimationConfig(width=8, instances=3))

        assert resources.luts == 48
        assert resources.ffs == 24
        assert resources.ios == 19

    def test_wide_multiplier_uses_dsps(self, engine):
        multiplier = engine.estimate_resources(EstimationConfig(component_kind="multiplier", width=32))
        generic = engine.estimate_resources(EstimationConfig(component_kind="generic", width=32))

        assert multiplier.dsps == 2
        assert multiplier.luts == 20
        assert generic.dsps == 0
        assert generic.luts == 64

    def test_narrow_multiplier_stays_in_fabric(self, engine):
        resources = engine.estimate_resources(
            EstimationConfig(component_kind="multiplier", architecture="array", width=4)
        )
        assert resources.dsps == 0
        assert resources.luts == 13

    def test_block_ram(self, engine):
        config = EstimationConfig(component_kind="memory", architecture="block_ram", width=32, depth=1024)
        resources = engine.estimate_resources(config)

        assert resources.brams == 2
        assert resources.luts == 8
        assert resources.ffs == 64

    def test_block_ram_needs_depth(self, engine):
        config = EstimationConfig(component_kind="memory", architecture="block_ram", width=32)
        with pytest.raises(MissingParameterError, match="depth"):
            engine.estimate_resources(config)

    def test_unknown_architecture(self, engine):
        with pytest.raises(UnknownArchitectureError, match="kogge_stone"):
            engine.estimate_resources(ripple().with_changes(architecture="kogge_stone"))

    @pytest.mark.parametrize("method", ["estimate_timing", "estimate_resources", "estimate_power"])
    def test_unknown_device(self, engine, method):
        with pytest.raises(UnknownDeviceError) as exc_info:
            getattr(engine, method)(ripple(device="Virtex-2"))
        assert "Unsupported device: Virtex-2" in str(exc_info.value)
        assert isinstance(exc_info.value, KeyError)

    def test_architecture_ignored_for_generic_kind(self, engine):
        config = EstimationConfig(component_kind="generic", architecture="ripple_carry", width=8)
        assert engine.estimate_resources(config).luts == 16

    def test_design_that_does_not_fit(self, engine):
        resources = engine.estimate_resources(ripple(instances=1000))

        assert not resources.fits
        assert resources.bottleneck == "luts"
        assert resources.utilization["luts"] > 100


class TestPower:
    def test_generic(self, engine):
        power = engine.estimate_power(EstimationConfig(width=8))

        assert power.static_power_mw == 150.0
        assert power.dynamic_power_mw == 43.5
        assert power.total_power_mw == 193.5
        assert power.breakdown.logic_power_mw == 20.0
        assert power.breakdown.ff_power_mw == 4.0
        assert power.breakdown.clock_power_mw == 10.0
        assert power.breakdown.io_power_mw == 9.5
        assert power.efficiency_mhz_per_mw == 0.52
        assert power.thermal_design_power_mw == 251.55

    def test_ripple_carry(self, engine):
        assert engine.estimate_power(ripple()).total_power_mw == 250.0

    def test_uses_given_resources(self, engine):
        config = ripple()
        resources = engine.estimate_resources(config)
        doubled = resources.model_copy(update={"luts": resources.luts * 2})

        assert engine.estimate_power(config, doubled).breakdown.logic_power_mw == 80.0

    def test_static_power_scales_with_voltage(self, engine):
        low = engine.estimate_power(ripple(voltage_v=0.9))
        assert low.static_power_mw < 150.0


class TestThermal:
    def test_low_power_is_safe(self, engine):
        thermal = engine.estimate_thermal(ripple())

        assert thermal.temperature_rise_c == 0.5
        assert thermal.junction_temperature_c == 25.5
        assert thermal.thermal_margin_c == 59.5
        assert thermal.status == ThermalStatus.SAFE
        assert thermal.recommendations == []

    def test_marginal(self, engine):
        power = engine.estimate_power(ripple()).model_copy(update={"total_power_mw": 28000.0})
        thermal = engine.estimate_thermal(ripple(), power)

        assert thermal.junction_temperature_c == 81.0
        assert thermal.status == ThermalStatus.MARGINAL
        assert len(thermal.recommendations) == 4
        assert thermal.recommendations[0] == "Improve cooling solution"

    def test_critical(self, engine):
        power = engine.estimate_power(ripple()).model_copy(update={"total_power_mw": 40000.0})
        thermal = engine.estimate_thermal(ripple(), power)

        assert thermal.junction_temperature_c == 105.0
        assert thermal.thermal_margin_c == -20.0
        assert thermal.status == ThermalStatus.CRITICAL
        assert len(thermal.recommendations) == 6
        assert thermal.recommendations[-1].startswith("Consider different FPGA")

    def test_environment(self, engine):
        power = engine.estimate_power(ripple()).model_copy(update={"total_power_mw": 1000.0})
        # QFP without airflow: 0.5 + 8.0 * 1.1 * 1.0 = 9.3 C/W
        environment = ThermalEnvironment(ambient_c=40, airflow_lfm=0, heat_sink_efficiency=1.0, package="qfp")
        thermal = engine.estimate_thermal(ripple(), power, environment)

        assert environment.package == PackageType.QFP
        assert thermal.temperature_rise_c == 9.3
        assert thermal.junction_temperature_c == 49.3


class TestPrediction:
    def test_baseline_only(self, engine):
        prediction = engine.predict_performance(ripple())

        assert prediction.timing.max_frequency_mhz == 113.6
        assert prediction.frequency_feasibility is None
        assert prediction.resource_scaling is None
        assert prediction.power_scaling is None
        assert prediction.recommendations == []

    def test_unreachable_frequency(self, engine):
        prediction = engine.predict_performance(ripple(), target_frequency_mhz=200)
        feasibility = prediction.frequency_feasibility

        assert not feasibility.achievable
        assert feasibility.margin_ns == -3.8
        assert feasibility.required_optimization == "pipelining_or_architecture_change"
        assert [r.category for r in prediction.recommendations] == ["timing"]

    def test_reachable_frequency(self, engine):
        prediction = engine.predict_performance(ripple(), target_frequency_mhz=100)

        assert prediction.frequency_feasibility.achievable
        assert prediction.frequency_feasibility.required_optimization == "none"
        assert prediction.recommendations == []

    def test_many_instances(self, engine):
        prediction = engine.predict_performance(ripple(), instances=1000)

        assert not prediction.resource_scaling.feasible
        assert prediction.resource_scaling.bottleneck == "luts"
        assert prediction.resource_scaling.luts == 32000
        assert prediction.power_scaling.estimated_power_mw == 250000.0
        assert not prediction.power_scaling.thermal_feasible
        assert prediction.power_scaling.cooling_requirements == "liquid_cooling"
        assert [r.category for r in prediction.recommendations] == ["resources", "thermal"]

    def test_few_instances(self, engine):
        prediction = engine.predict_performance(ripple(), instances=2)

        assert prediction.resource_scaling.feasible
        assert prediction.power_scaling.estimated_power_mw == 500.0
        assert prediction.power_scaling.cooling_requirements == "natural_convection"
        assert prediction.recommendations == []

    def test_frequency_scaling(self, engine):
        prediction = engine.predict_performance(ripple(), frequency_scaling=2.0)
        assert prediction.power_scaling.estimated_power_mw == 500.0
        assert prediction.resource_scaling is None


@pytest.mark.parametrize(
    "power, solution",
    [
        (500, "natural_convection"),
        (1000, "forced_air_cooling"),
        (4999, "forced_air_cooling"),
        (10000, "heat_sink_fan"),
        (15000, "liquid_cooling"),
    ],
)
def test_cooling_requirement(power, solution):
    assert cooling_requirement(power) == solution
