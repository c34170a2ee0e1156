"""
Configs derived from intents and models, and clock domain crossing analysis.
"""

import pytest
from pydantic import ValidationError

from rtlcraft.estimation import (
    DesignMetrics,
    analyze_clock_domains,
    config_from_intent,
    config_from_model,
    pick_architecture,
)
from rtlcraft.model import ClockDomain, ComponentKind, DesignIntent
from rtlcraft.parser import extract

MAC_V = """\
module mac (input clk, input [7:0] a, input [7:0] b, output reg [15:0] acc);
    always @(posedge clk)
        acc <= acc + a * b;
endmodule
"""

RAM_V = """\
module ram (input clk, input we, input [9:0] addr, input [31:0] din, output reg [31:0] dout);
    reg [31:0] mem [0:1023];
    always @(posedge clk) begin
        if (we) mem[addr] <= din;
        dout <= mem[addr];
    end
endmodule
"""


def model_of(text):
    model, _ = extract(text)
    return model


class TestConfigFromIntent:
    @pytest.mark.parametrize(
        "constraint, architecture",
        [("delay", "carry_lookahead"), ("Timing ", "carry_lookahead"), ("area", "ripple_carry")],
    )
    def test_constraint_selects_architecture(self, constraint, architecture):
        intent = DesignIntent(component="adder", parameters={"width": 16}, constraints=[constraint])
        config = config_from_intent(intent)

        assert config.component_kind == ComponentKind.ADDER
        assert config.width == 16
        assert config.architecture == architecture

    def test_first_recognized_constraint_wins(self):
        intent = DesignIntent(component="adder", parameters={"width": 16}, constraints=["cheap", "area", "delay"])
        assert config_from_intent(intent).architecture == "ripple_carry"

    def test_explicit_architecture_wins(self):
        intent = DesignIntent(
            component="multiplier", parameters={"width": 16, "architecture": "booth"}, constraints=["delay"]
        )
        assert config_from_intent(intent).architecture == "booth"

    def test_unknown_component_is_generic(self):
        config = config_from_intent(DesignIntent(component="fft", constraints=["delay"]))

        assert config.component_kind == ComponentKind.GENERIC
        assert config.architecture is None

    def test_memory_without_depth_has_no_architecture(self):
        intent = DesignIntent(component="memory", parameters={"width": 32}, constraints=["area"])
        assert config_from_intent(intent).architecture is None

    def test_memory_with_depth(self):
        intent = DesignIntent(component="ram", parameters={"width": 32, "depth": 1024}, constraints=["area"])
        config = config_from_intent(intent)

        assert config.component_kind == ComponentKind.MEMORY
        assert config.depth == 1024
        assert config.architecture == "block_ram"

    def test_parameters_and_overrides(self):
        intent = DesignIntent(
            componentKind="adder",
            parameters={"width": 8, "frequency": 200, "device": "Zynq-7020", "instances": 4},
        )
        config = config_from_intent(intent, device="Kintex-7", voltage_v=None)

        assert config.frequency_mhz == 200.0
        assert config.instances == 4
        assert config.device == "Kintex-7"
        assert config.voltage_v == 1.0

    def test_invalid_width(self):
        with pytest.raises(ValidationError):
            config_from_intent(DesignIntent(component="adder", parameters={"width": 0}))


class TestPickArchitecture:
    def test_no_recognized_constraint(self):
        assert pick_architecture(ComponentKind.ADDER, ["cheap"], 16) is None

    def test_generic_has_no_profiles(self):
        assert pick_architecture(ComponentKind.GENERIC, ["delay"], 16) is None

    def test_power_minimizes_luts(self):
        assert pick_architecture(ComponentKind.MULTIPLIER, ["power"], 16) == "booth"

    @pytest.mark.parametrize("width, architecture", [(32, "booth"), (64, "wallace_tree")])
    def test_delay_depends_on_width(self, width, architecture):
        assert pick_architecture(ComponentKind.MULTIPLIER, ["speed"], width) == architecture


class TestConfigFromModel:
    def test_multiply_accumulate(self):
        model = model_of(MAC_V)
        metrics = DesignMetrics.from_model(model)

        assert metrics.component_kind == ComponentKind.MULTIPLIER
        assert metrics.has_adder
        assert metrics.register_bits == 16
        assert metrics.register_stages == 1
        assert metrics.logic_levels == 2
        assert metrics.clock_domains == ["clk"]

        config = config_from_model(model)
        assert config.component_kind == ComponentKind.MULTIPLIER
        assert config.width == 16
        assert config.logic_levels == 2
        assert config.architecture is None

    def test_counter_is_an_adder(self, counter_source):
        model = model_of(counter_source)
        metrics = DesignMetrics.from_model(model)

        assert metrics.component_kind == ComponentKind.ADDER
        assert metrics.clock_domains == ["clk"]
        assert metrics.register_bits == 8

        config = config_from_model(model)
        assert config.width == 8
        assert config.logic_levels is None

    def test_memory(self):
        model = model_of(RAM_V)
        metrics = DesignMetrics.from_model(model)

        assert metrics.has_memory
        assert metrics.memory_depth == 1024
        assert metrics.width == 32

        config = config_from_model(model, DesignIntent(component="memory", constraints=["area"]))
        assert config.component_kind == ComponentKind.MEMORY
        assert config.depth == 1024
        assert config.architecture == "block_ram"

    def test_intent_overrides_metrics(self):
        intent = DesignIntent(component="adder", parameters={"width": 32})
        config = config_from_model(model_of(MAC_V), intent)

        assert config.component_kind == ComponentKind.ADDER
        assert config.width == 32
        assert config.logic_levels == 2

    def test_empty_model(self):
        config = config_from_model(model_of(""))

        assert config.component_kind == ComponentKind.GENERIC
        assert config.width == 8


class TestClockDomains:
    def test_crossings_and_issues(self):
        analysis = analyze_clock_domains(
            [ClockDomain(name="a", frequency_mhz=100), ClockDomain(name="b", frequency_mhz=400),
             ClockDomain(name="c", frequency_mhz=100)]
        )

        assert analysis.total_crossings == 2
        assert [(s.from_domain, s.to_domain) for s in analysis.synchronizers_needed] == [("a", "b"), ("b", "c")]
        assert all(s.recommended_stages == 2 for s in analysis.synchronizers_needed)
        assert [i.frequency_ratio for i in analysis.potential_issues] == [0.25, 4.0]
        assert len(analysis.recommendations) == 4

    def test_large_ratio_needs_three_stages(self):
        analysis = analyze_clock_domains(
            [ClockDomain(name="fast", frequency_mhz=500), ClockDomain(name="slow", frequency_mhz=100)]
        )
        assert analysis.synchronizers_needed[0].recommended_stages == 3

    def test_close_frequencies(self):
        analysis = analyze_clock_domains(
            [ClockDomain(name="a", frequency_mhz=100), ClockDomain(name="b", frequency_mhz=150)]
        )

        assert analysis.total_crossings == 1
        assert analysis.potential_issues == []
        assert len(analysis.recommendations) == 2

    def test_single_domain(self):
        analysis = analyze_clock_domains([ClockDomain(name="clk", frequency_mhz=100)])

        assert analysis.total_crossings == 0
        assert analysis.recommendations == []
