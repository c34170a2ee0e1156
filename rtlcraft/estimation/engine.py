"""
FPGA estimation engine.

Closed-form timing, resource, power and thermal estimates for one
``EstimationConfig`` against the device and architecture catalogs.

Every method is a pure function of its arguments and the (immutable)
catalogs: identical inputs always give identical results.
"""

import logging
import math
from typing import Dict, List, Optional, Tuple

from rtlcraft.catalog import (
    ArchitectureCatalog,
    ArchitectureProfile,
    DeviceCatalog,
    DeviceProfile,
    default_architecture_catalog,
    default_device_catalog,
)
from rtlcraft.errors import MissingParameterError
from rtlcraft.model import (
    ComponentKind,
    CriticalPath,
    EstimationConfig,
    FrequencyFeasibility,
    PerformancePrediction,
    PowerBreakdown,
    PowerEstimate,
    PowerScaling,
    Recommendation,
    ResourceEstimate,
    ResourceScaling,
    ThermalEnvironment,
    ThermalEstimate,
    ThermalStatus,
    TimingEstimate,
)
from rtlcraft.model.estimates import MAX_JUNCTION_TEMPERATURE_C

logger = logging.getLogger(__name__)

HOLD_SLACK_NS = 0.5

# Block RAM primitive geometry (words x bits)
BRAM_WORDS = 512
BRAM_BITS = 36

# Multipliers at least this wide map onto DSP slices
DSP_MIN_WIDTH = 8
DSP_WIDTH = 18
DSP_LUT_FACTOR = 0.3

# Weights of the equivalent-LUT figure
FF_LUT_EQUIVALENT = 0.5
BRAM_LUT_EQUIVALENT = 10
DSP_LUT_EQUIVALENT = 5

CLOCK_POWER_PER_MHZ = 0.1
IO_POWER_PER_PIN = 0.5
THERMAL_DESIGN_MARGIN = 1.3

# Power (mW) above which a design is considered hard to cool
THERMAL_POWER_LIMIT_MW = 10000

# (upper power bound in mW, cooling solution)
COOLING_TIERS: Tuple[Tuple[float, str], ...] = (
    (1000, "natural_convection"),
    (5000, "forced_air_cooling"),
    (15000, "heat_sink_fan"),
)
COOLING_FALLBACK = "liquid_cooling"

SCALED_RESOURCES = ("luts", "ffs", "brams", "dsps")
UTILIZED_RESOURCES = ("luts", "ffs", "brams", "dsps", "ios")


def generic_logic_levels(config: EstimationConfig) -> int:
    """Logic levels of the generic path: the override, else ceil(log2(width))."""
    if config.logic_levels:
        return config.logic_levels
    return math.ceil(math.log2(config.width))


def cooling_requirement(power_mw: float) -> str:
    """Cooling solution needed to dissipate ``power_mw``."""
    for limit, solution in COOLING_TIERS:
        if power_mw < limit:
            return solution
    return COOLING_FALLBACK


class EstimationEngine:
    """
    Estimates FPGA implementation figures for a single component.

    Example:
        >>> engine = EstimationEngine()
        >>> config = EstimationConfig(component_kind="adder", architecture="ripple_carry", width=32)
        >>> engine.estimate_timing(config).max_frequency_mhz
    """

    def __init__(
        self,
        devices: Optional[DeviceCatalog] = None,
        architectures: Optional[ArchitectureCatalog] = None,
    ):
        """
        Initialize the engine.

        Args:
            devices: Device catalog (defaults to the bundled one)
            architectures: Architecture catalog (defaults to the bundled one)
        """
        self.devices = devices if devices is not None else default_device_catalog()
        self.architectures = architectures if architectures is not None else default_architecture_catalog()

    # --- Catalog lookups ---

    def device(self, config: EstimationConfig) -> DeviceProfile:
        """
        Device profile of ``config``.

        Raises:
            UnknownDeviceError: If the device is not in the catalog
        """
        return self.devices.get(config.device)

    def profile(self, config: EstimationConfig) -> Optional[ArchitectureProfile]:
        """
        Architecture profile of ``config``, or None for the generic path.

        The generic kind and configs without an architecture always take the
        generic formulas.

        Raises:
            UnknownArchitectureError: If an architecture is named that the
                component kind does not register
        """
        if config.architecture is None or config.component_kind == ComponentKind.GENERIC:
            return None
        return self.architectures.get(config.component_kind, config.architecture)

    def temperature_factor(self, config: EstimationConfig, device: DeviceProfile) -> float:
        return device.temperature_factor ** ((config.temperature_c - 25) / 10)

    # --- Timing ---

    def estimate_timing(self, config: EstimationConfig) -> TimingEstimate:
        """
        Estimate the critical path of ``config``.

        Setup slack is reported against ``config.target_period_ns``.

        Raises:
            UnknownDeviceError: If the device is not in the catalog
            UnknownArchitectureError: If the architecture is not registered
            MissingParameterError: If the profile needs a depth
        """
        device = self.device(config)
        profile = self.profile(config)
        levels = generic_logic_levels(config)

        if profile is not None:
            logic_delay = profile.delay(config.width, config.depth)
        else:
            logic_delay = levels * device.lut_delay

        routing_delay = logic_delay * device.routing_factor * math.sqrt(config.fanout)
        total_delay = (
            (logic_delay + routing_delay)
            * self.temperature_factor(config, device)
            * config.speed_grade.factor
        )

        if total_delay > 0:
            max_frequency = min(1000.0 / total_delay, device.max_frequency)
        else:
            max_frequency = device.max_frequency

        logger.debug(
            "Timing %s/%s width=%d on %s: logic=%.3f routing=%.3f total=%.3f",
            config.component_kind.value,
            config.architecture or "generic",
            config.width,
            device.name,
            logic_delay,
            routing_delay,
            total_delay,
        )

        return TimingEstimate(
            logic_delay_ns=round(logic_delay, 3),
            routing_delay_ns=round(routing_delay, 3),
            total_delay_ns=round(total_delay, 3),
            max_frequency_mhz=round(max_frequency, 1),
            target_period_ns=config.target_period_ns,
            setup_slack_ns=round(config.target_period_ns - total_delay, 3),
            hold_slack_ns=HOLD_SLACK_NS,
            critical_path=CriticalPath(
                levels=levels,
                fanout=config.fanout,
                bottleneck="logic" if logic_delay > routing_delay else "routing",
            ),
        )

    # --- Resources ---

    def estimate_resources(self, config: EstimationConfig) -> ResourceEstimate:
        """
        Estimate resource usage of ``config`` and its device utilization.

        Raises:
            UnknownDeviceError: If the device is not in the catalog
            UnknownArchitectureError: If the architecture is not registered
            MissingParameterError: If the profile needs a depth
        """
        device = self.device(config)
        profile = self.profile(config)
        width = config.width

        brams = 0.0
        dsps = 0.0
        if profile is not None:
            luts = profile.luts(width, config.depth)
            ffs = profile.ffs(width, config.depth)
            if profile.uses_block_ram:
                if config.depth is None:
                    raise MissingParameterError("depth", f"{profile.component_kind.value}/{profile.name}")
                brams = math.ceil(config.depth * width / (BRAM_WORDS * BRAM_BITS))
        else:
            luts = 2.0 * width
            ffs = float(width)

        if config.component_kind == ComponentKind.MULTIPLIER and width >= DSP_MIN_WIDTH:
            dsps = math.ceil(width / DSP_WIDTH)
            luts *= DSP_LUT_FACTOR

        luts *= config.instances
        ffs *= config.instances
        brams *= config.instances
        dsps *= config.instances

        counts = {
            "luts": math.ceil(luts),
            "ffs": math.ceil(ffs),
            "brams": math.ceil(brams),
            "dsps": math.ceil(dsps),
            "ios": 2 * width + 3,
        }
        equivalent = math.ceil(
            luts + FF_LUT_EQUIVALENT * ffs + BRAM_LUT_EQUIVALENT * brams + DSP_LUT_EQUIVALENT * dsps
        )

        capacity = device.capacity.as_dict()
        utilization = {
            name: round(counts[name] / capacity[name] * 100, 2) for name in UTILIZED_RESOURCES
        }
        bottleneck = max(UTILIZED_RESOURCES, key=lambda name: utilization[name])
        fits = all(counts[name] <= capacity[name] for name in UTILIZED_RESOURCES)

        if not fits:
            logger.debug("Design does not fit %s (bottleneck %s)", device.name, bottleneck)

        return ResourceEstimate(
            **counts,
            total_equivalent_luts=equivalent,
            utilization=utilization,
            bottleneck=bottleneck,
            fits=fits,
        )

    # --- Power ---

    def estimate_power(
        self, config: EstimationConfig, resources: Optional[ResourceEstimate] = None
    ) -> PowerEstimate:
        """
        Estimate static and dynamic power of ``config``.

        Args:
            config: Estimation input
            resources: Resource figures to use; estimated from ``config`` when omitted

        Raises:
            UnknownDeviceError: If the device is not in the catalog
        """
        device = self.device(config)
        if resources is None:
            resources = self.estimate_resources(config)

        frequency = config.frequency_mhz
        toggle = config.toggle_rate

        static = (
            device.power_base
            * self.temperature_factor(config, device)
            * config.voltage_v ** device.voltage_exponent
        )
        logic_power = resources.luts * device.power_per_lut * frequency * toggle
        ff_power = resources.ffs * device.power_per_ff * frequency * toggle
        clock_power = CLOCK_POWER_PER_MHZ * frequency
        io_power = IO_POWER_PER_PIN * resources.ios

        dynamic = logic_power + ff_power + clock_power + io_power
        total = static + dynamic

        return PowerEstimate(
            static_power_mw=round(static, 2),
            dynamic_power_mw=round(dynamic, 2),
            total_power_mw=round(total, 2),
            breakdown=PowerBreakdown(
                logic_power_mw=round(logic_power, 2),
                ff_power_mw=round(ff_power, 2),
                clock_power_mw=round(clock_power, 2),
                io_power_mw=round(io_power, 2),
            ),
            efficiency_mhz_per_mw=round(frequency / total, 2) if total > 0 else 0.0,
            thermal_design_power_mw=round(total * THERMAL_DESIGN_MARGIN, 2),
        )

    # --- Thermal ---

    def estimate_thermal(
        self,
        config: EstimationConfig,
        power: Optional[PowerEstimate] = None,
        environment: Optional[ThermalEnvironment] = None,
    ) -> ThermalEstimate:
        """
        Estimate junction temperature from total power and the package.

        Args:
            config: Estimation input; its temperature is the default ambient
            power: Power figures to use; estimated from ``config`` when omitted
            environment: Airflow, heat sink and package (defaults apply when omitted)
        """
        if power is None:
            power = self.estimate_power(config)
        if environment is None:
            environment = ThermalEnvironment()

        ambient = environment.ambient_c if environment.ambient_c is not None else config.temperature_c
        package = environment.package

        airflow_factor = max(0.5, 1 - (environment.airflow_lfm - 100) / 1000)
        resistance = package.junction_to_case + (
            package.case_to_ambient * airflow_factor * environment.heat_sink_efficiency
        )
        rise = power.total_power_mw / 1000 * resistance
        junction = ambient + rise
        margin = MAX_JUNCTION_TEMPERATURE_C - junction

        if margin > 10:
            status = ThermalStatus.SAFE
        elif margin > 0:
            status = ThermalStatus.MARGINAL
        else:
            status = ThermalStatus.CRITICAL

        return ThermalEstimate(
            junction_temperature_c=round(junction, 1),
            temperature_rise_c=round(rise, 1),
            thermal_margin_c=round(margin, 1),
            status=status,
            recommendations=thermal_recommendations(junction, margin),
        )

    # --- Prediction ---

    def predict_performance(
        self,
        config: EstimationConfig,
        target_frequency_mhz: Optional[float] = None,
        instances: Optional[int] = None,
        frequency_scaling: Optional[float] = None,
    ) -> PerformancePrediction:
        """
        Estimate ``config`` and check it against scaling targets.

        Args:
            config: Estimation input
            target_frequency_mhz: Frequency the design has to reach
            instances: Replication count applied on top of the estimate
            frequency_scaling: Factor applied to the estimated power

        Returns:
            Prediction with the baseline estimates and, per target given, a
            feasibility section plus recommendations
        """
        timing = self.estimate_timing(config)
        resources = self.estimate_resources(config)
        power = self.estimate_power(config, resources)
        device = self.device(config)

        prediction: Dict[str, object] = {"timing": timing, "resources": resources, "power": power}
        recommendations: List[Recommendation] = []

        if target_frequency_mhz:
            required_period = 1000.0 / target_frequency_mhz
            achievable = timing.total_delay_ns <= required_period
            prediction["frequency_feasibility"] = FrequencyFeasibility(
                achievable=achievable,
                current_max_mhz=timing.max_frequency_mhz,
                target_mhz=target_frequency_mhz,
                margin_ns=round(required_period - timing.total_delay_ns, 3),
                required_optimization="none" if achievable else "pipelining_or_architecture_change",
            )
            if not achievable:
                recommendations.append(
                    Recommendation(
                        category="timing",
                        priority="high",
                        description="Target frequency not achievable with current design",
                        action="pipelining_or_architecture_change",
                    )
                )

        if instances:
            capacity = device.capacity.as_dict()
            scaled = {name: getattr(resources, name) * instances for name in SCALED_RESOURCES}
            feasible = all(scaled[name] <= capacity[name] for name in SCALED_RESOURCES)
            bottleneck = max(SCALED_RESOURCES, key=lambda name: scaled[name] / capacity[name])
            prediction["resource_scaling"] = ResourceScaling(**scaled, feasible=feasible, bottleneck=bottleneck)
            if not feasible:
                recommendations.append(
                    Recommendation(
                        category="resources",
                        priority="high",
                        description=f"Resource bottleneck: {bottleneck}",
                        action="consider_larger_device_or_optimization",
                    )
                )

        if frequency_scaling or instances:
            scaled_power = power.total_power_mw * (frequency_scaling or 1) * (instances or 1)
            thermal_feasible = scaled_power < THERMAL_POWER_LIMIT_MW
            prediction["power_scaling"] = PowerScaling(
                estimated_power_mw=round(scaled_power, 2),
                thermal_feasible=thermal_feasible,
                cooling_requirements=cooling_requirement(scaled_power),
            )
            if not thermal_feasible:
                recommendations.append(
                    Recommendation(
                        category="thermal",
                        priority="medium",
                        description="Power consumption may require enhanced cooling",
                        action=cooling_requirement(scaled_power),
                    )
                )

        return PerformancePrediction(**prediction, recommendations=recommendations)


def thermal_recommendations(junction_c: float, margin_c: float) -> List[str]:
    """Cooling advice for a junction temperature and its margin to 85 C."""
    recommendations = []
    if margin_c < 10:
        recommendations.extend(
            [
                "Improve cooling solution",
                "Consider heat sink with better thermal conductivity",
            ]
        )
    if junction_c > 70:
        recommendations.extend(
            [
                "Reduce operating frequency to lower power",
                "Implement power gating for unused logic",
            ]
        )
    if margin_c < 0:
        recommendations.extend(
            [
                "CRITICAL: Reduce power consumption immediately",
                "Consider different FPGA with better thermal characteristics",
            ]
        )
    return recommendations
