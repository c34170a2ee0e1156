#!/usr/bin/env python3
"""
rtlcraft - Verilog analysis, lint and FPGA estimation tool.

Usage:
    python scripts/rtlcraft.py analyze counter.v --device Kintex-7
    python scripts/rtlcraft.py lint counter.v --json
    python scripts/rtlcraft.py estimate --component adder --architecture ripple_carry --width 32
    python scripts/rtlcraft.py list-devices

Subcommands:
    analyze             Extract, lint and estimate a Verilog file
    lint                Run the lint rules over a Verilog file
    estimate            Estimate a component from parameters alone
    list-devices        List the device catalog
    list-architectures  List the architecture catalog
"""
import argparse
import json
import logging
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from pydantic import ValidationError

from rtlcraft.analyzer import DesignAnalyzer
from rtlcraft.catalog import default_architecture_catalog, default_device_catalog
from rtlcraft.errors import RtlcraftError
from rtlcraft.estimation import EstimationEngine, OptimizationAdvisor
from rtlcraft.lint import RuleChecker
from rtlcraft.model import AnalysisReport, EstimationConfig, ThermalEnvironment
from rtlcraft.parser import extract
from rtlcraft.utils import filter_none


def read_source(path: str) -> str:
    source = Path(path)
    if not source.exists():
        raise FileNotFoundError(f"Verilog file not found: {source}")
    return source.read_text(encoding="utf-8")


def config_overrides(args) -> dict:
    """EstimationConfig fields given on the command line."""
    overrides = {
        "device": args.device,
        "frequency_mhz": args.frequency,
        "temperature_c": args.temperature,
        "voltage_v": args.voltage,
        "speed_grade": args.speed_grade,
    }
    return filter_none(overrides)


def fail(error: Exception, use_json: bool):
    if use_json:
        print(json.dumps({"success": False, "error": str(error)}))
    else:
        print(f"Error: {error}")
    sys.exit(1)


def print_findings(title: str, findings):
    if not findings:
        return
    print(f"\n{title} ({len(findings)}):")
    for finding in findings:
        print(f"  {finding}")
        if finding.suggestion:
            print(f"      -> {finding.suggestion}")


def print_estimates(report):
    timing = report.timing_estimate
    resources = report.resource_estimate
    power = report.power_estimate
    thermal = report.thermal_estimate

    if report.config:
        config = report.config
        print(
            f"\nEstimate: {config.component_kind.value}/{config.architecture or 'generic'} "
            f"width={config.width} on {config.device}"
        )
    if timing:
        print(
            f"  Timing:    {timing.total_delay_ns} ns, fmax {timing.max_frequency_mhz} MHz, "
            f"setup slack {timing.setup_slack_ns} ns"
        )
    if resources:
        print(
            f"  Resources: {resources.luts} LUTs, {resources.ffs} FFs, {resources.brams} BRAMs, "
            f"{resources.dsps} DSPs, {resources.ios} IOs"
            + ("" if resources.fits else f"  (does not fit, bottleneck {resources.bottleneck})")
        )
    if power:
        print(
            f"  Power:     {power.total_power_mw} mW "
            f"(static {power.static_power_mw}, dynamic {power.dynamic_power_mw})"
        )
    if thermal:
        print(
            f"  Thermal:   junction {thermal.junction_temperature_c} C, "
            f"margin {thermal.thermal_margin_c} C ({thermal.status.value})"
        )
        for recommendation in thermal.recommendations:
            print(f"             - {recommendation}")

    if report.optimizations:
        print("\nAlternatives:")
        for option in report.optimizations:
            print(f"  {option.score:6.3f}  {option.description}")
    for error in report.estimation_errors:
        print(f"\nEstimation error: {error}")


def cmd_analyze(args):
    """Extract, lint and estimate a Verilog file."""
    try:
        text = read_source(args.input)
        environment = ThermalEnvironment(airflow_lfm=args.airflow, package=args.package)
        report = DesignAnalyzer().analyze(
            text, environment=environment, estimate=not args.no_estimate, **config_overrides(args)
        )
    except (OSError, RtlcraftError, ValidationError) as e:
        fail(e, args.json)

    if args.json:
        print(json.dumps({"success": True, "report": report.to_dict()}, indent=2))
        return

    model = report.design_model
    print(f"\n{args.input}: {len(model.modules)} module(s), complexity {model.complexity.category.value}")
    for module in model.modules:
        print(
            f"  {module.name:20} {len(module.ports)} ports, {len(module.signals)} signals, "
            f"{len(module.blocks)} blocks, {len(module.instances)} instances"
        )
    print_findings("Syntax findings", report.syntax_findings)
    print_findings("Lint findings", report.lint_findings)
    print(f"\nLint score: {report.lint_summary.score}/100")
    print_estimates(report)
    if report.has_errors:
        sys.exit(2)


def cmd_lint(args):
    """Run the lint rules over a Verilog file."""
    try:
        text = read_source(args.input)
    except OSError as e:
        fail(e, args.json)

    model, syntax_findings = extract(text)
    lint = RuleChecker().report(model, text)

    if args.json:
        print(
            json.dumps(
                {
                    "success": True,
                    "syntax": [f.to_dict() for f in syntax_findings],
                    "lint": lint.to_dict(),
                },
                indent=2,
            )
        )
    else:
        print_findings("Syntax findings", syntax_findings)
        print_findings("Lint findings", lint.findings)
        summary = lint.summary
        print(
            f"\n{summary.errors} errors, {summary.warnings} warnings, {summary.info} info "
            f"- score {summary.score}/100"
        )
        recommendations = lint.recommendations
        for title, items in (
            ("Immediate", recommendations.immediate),
            ("Optimization", recommendations.optimization),
            ("Best practices", recommendations.best_practices),
        ):
            if items:
                print(f"\n{title}:")
                for item in items:
                    print(f"  - {item}")

    if any(f.severity.value == "error" for f in [*syntax_findings, *lint.findings]):
        sys.exit(2)


def cmd_estimate(args):
    """Estimate a component from parameters alone."""
    try:
        engine = EstimationEngine()
        config = EstimationConfig(
            component_kind=args.component,
            architecture=args.architecture,
            width=args.width,
            depth=args.depth,
            instances=args.instances,
            **config_overrides(args),
        )
        environment = ThermalEnvironment(airflow_lfm=args.airflow, package=args.package)
        timing = engine.estimate_timing(config)
        resources = engine.estimate_resources(config)
        power = engine.estimate_power(config, resources)
        thermal = engine.estimate_thermal(config, power, environment)
        advisor = OptimizationAdvisor(engine)
        optimizations = advisor.suggest_alternatives(config, include_devices=args.include_devices)
        recommendations = advisor.recommend(optimizations)
    except (RtlcraftError, ValidationError) as e:
        fail(e, args.json)

    if args.json:
        print(
            json.dumps(
                {
                    "success": True,
                    "config": config.to_dict(),
                    "timing": timing.to_dict(),
                    "resources": resources.to_dict(),
                    "power": power.to_dict(),
                    "thermal": thermal.to_dict(),
                    "optimizations": [o.to_dict() for o in optimizations],
                    "recommendations": [r.to_dict() for r in recommendations],
                },
                indent=2,
            )
        )
        return

    print_estimates(
        AnalysisReport(
            config=config,
            timing_estimate=timing,
            resource_estimate=resources,
            power_estimate=power,
            thermal_estimate=thermal,
            optimizations=optimizations,
        )
    )
    if recommendations:
        print("\nRecommendations:")
        for recommendation in recommendations:
            print(
                f"  [{recommendation.priority:6}] {recommendation.category:11} "
                f"{recommendation.description} ({recommendation.expected_improvement})"
            )


def cmd_list_devices(args):
    """List the device catalog."""
    try:
        catalog = default_device_catalog()
    except RtlcraftError as e:
        fail(e, args.json)

    if args.json:
        print(json.dumps({"success": True, "devices": [d.to_dict() for d in catalog]}))
        return

    print("\nAvailable devices:")
    for device in catalog:
        capacity = device.capacity
        print(
            f"  {device.name:12} {device.part:22} {capacity.luts:>8} LUTs {capacity.dsps:>5} DSPs "
            f"{device.max_frequency:>6.0f} MHz"
        )


def cmd_list_architectures(args):
    """List the architecture catalog."""
    try:
        catalog = default_architecture_catalog()
    except RtlcraftError as e:
        fail(e, args.json)

    profiles = list(catalog)
    if args.component:
        profiles = [p for p in profiles if p.component_kind.value == args.component]

    if args.json:
        print(
            json.dumps(
                {
                    "success": True,
                    "architectures": [
                        {
                            "componentKind": p.component_kind.value,
                            "name": p.name,
                            "description": p.description,
                            "operands": list(p.operands),
                            "delay": p.delay_formula.text,
                            "luts": p.lut_formula.text,
                            "ffs": p.ff_formula.text,
                        }
                        for p in profiles
                    ],
                }
            )
        )
        return

    print("\nAvailable architectures:")
    for profile in profiles:
        print(f"  {profile.component_kind.value:10} {profile.name:16} - {profile.description}")


def add_config_arguments(parser):
    parser.add_argument("--device", "-d", help="Target device (default: Artix-7)")
    parser.add_argument("--frequency", "-f", type=float, help="Operating frequency in MHz")
    parser.add_argument("--temperature", type=float, help="Operating temperature in C")
    parser.add_argument("--voltage", type=float, help="Core voltage in V")
    parser.add_argument("--speed-grade", help="Speed grade: slowest/mid/fastest or -1/-2/-3")
    parser.add_argument("--airflow", type=float, default=200.0, help="Airflow in LFM (default: 200)")
    parser.add_argument(
        "--package", default="BGA", choices=["BGA", "QFP", "TQFP"], help="Package type (default: BGA)"
    )


def main():
    parser = argparse.ArgumentParser(
        prog="rtlcraft", description="Verilog analysis, lint and FPGA estimation tool"
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # analyze subcommand
    analyze_parser = subparsers.add_parser("analyze", help="Extract, lint and estimate a Verilog file")
    analyze_parser.add_argument("input", help="Verilog source file")
    add_config_arguments(analyze_parser)
    analyze_parser.add_argument("--no-estimate", action="store_true", help="Skip estimation")
    analyze_parser.add_argument("--json", action="store_true", help="JSON output")
    analyze_parser.set_defaults(func=cmd_analyze)

    # lint subcommand
    lint_parser = subparsers.add_parser("lint", help="Run the lint rules over a Verilog file")
    lint_parser.add_argument("input", help="Verilog source file")
    lint_parser.add_argument("--json", action="store_true", help="JSON output")
    lint_parser.set_defaults(func=cmd_lint)

    # estimate subcommand
    estimate_parser = subparsers.add_parser("estimate", help="Estimate a component from parameters")
    estimate_parser.add_argument(
        "--component", "-c", default="generic", help="adder, multiplier, memory or generic"
    )
    estimate_parser.add_argument("--architecture", "-a", help="Architecture variant")
    estimate_parser.add_argument("--width", "-w", type=int, default=8, help="Data width (default: 8)")
    estimate_parser.add_argument("--depth", type=int, help="Memory depth")
    estimate_parser.add_argument("--instances", type=int, default=1, help="Replication count")
    add_config_arguments(estimate_parser)
    estimate_parser.add_argument(
        "--include-devices", action="store_true", help="Also propose other devices"
    )
    estimate_parser.add_argument("--json", action="store_true", help="JSON output")
    estimate_parser.set_defaults(func=cmd_estimate)

    # list-devices subcommand
    devices_parser = subparsers.add_parser("list-devices", help="List available devices")
    devices_parser.add_argument("--json", action="store_true", help="JSON output")
    devices_parser.set_defaults(func=cmd_list_devices)

    # list-architectures subcommand
    arch_parser = subparsers.add_parser("list-architectures", help="List architecture variants")
    arch_parser.add_argument("component", nargs="?", help="Only show this component kind")
    arch_parser.add_argument("--json", action="store_true", help="JSON output")
    arch_parser.set_defaults(func=cmd_list_architectures)

    args = parser.parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    args.func(args)


if __name__ == "__main__":
    main()
