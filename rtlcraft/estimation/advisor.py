"""
Optimization advisor.

Proposes alternatives to a baseline configuration (other architectures,
pipelining, voltage/frequency scaling, other devices) and ranks them by a
weighted improvement score.
"""

import logging
import math
from typing import List, Optional

from rtlcraft.errors import EstimationError
from rtlcraft.model import (
    EstimationConfig,
    Optimization,
    OptimizationImpact,
    OptimizationKind,
    PowerEstimate,
    Recommendation,
    ResourceEstimate,
    TimingEstimate,
)

from .engine import EstimationEngine

logger = logging.getLogger(__name__)

FREQUENCY_WEIGHT = 0.4
AREA_WEIGHT = 0.3
POWER_WEIGHT = 0.3

# Pipelining is proposed above this many logic levels
PIPELINE_MIN_LEVELS = 4
LEVELS_PER_STAGE = 3
PIPELINE_SPEEDUP = 2.5

DVFS_FREQUENCY_SCALING = 0.8
DVFS_VOLTAGE_SCALING = 0.9

MAX_SUGGESTIONS = 5


def _ratio(numerator: float, denominator: float) -> float:
    return numerator / denominator if denominator > 0 else 1.0


def optimization_score(frequency_ratio: float, area_ratio: float, power_ratio: float) -> float:
    """Weighted improvement score; each ratio is > 1 when the candidate is better."""
    return round(
        FREQUENCY_WEIGHT * frequency_ratio + AREA_WEIGHT * area_ratio + POWER_WEIGHT * power_ratio, 4
    )


class OptimizationAdvisor:
    """
    Ranks design alternatives against a baseline estimate.

    Example:
        >>> advisor = OptimizationAdvisor()
        >>> config = EstimationConfig(component_kind="adder", architecture="ripple_carry", width=32)
        >>> for option in advisor.suggest_alternatives(config):
        ...     print(option.description, option.score)
    """

    def __init__(self, engine: Optional[EstimationEngine] = None):
        self.engine = engine if engine is not None else EstimationEngine()

    def suggest_alternatives(
        self, config: EstimationConfig, include_devices: bool = False
    ) -> List[Optimization]:
        """
        Return at most five alternatives, best score first.

        Ties keep candidate order: architectures in registration order, then
        pipelining, voltage/frequency scaling and device migrations.

        Raises:
            EstimationError: If the baseline itself cannot be estimated
        """
        timing = self.engine.estimate_timing(config)
        resources = self.engine.estimate_resources(config)
        power = self.engine.estimate_power(config, resources)

        candidates = self._architecture_changes(config, timing, resources, power)
        pipelining = self._pipelining(config, timing, resources, power)
        if pipelining is not None:
            candidates.append(pipelining)
        candidates.append(self._dvfs(config, resources, power))
        if include_devices:
            candidates.extend(self._device_migrations(config, timing, resources, power))

        # sorted() is stable, equal scores keep candidate order
        ranked = sorted(candidates, key=lambda option: option.score, reverse=True)
        logger.debug("Ranked %d alternatives for %s", len(ranked), config.device)
        return ranked[:MAX_SUGGESTIONS]

    def recommend(self, optimizations: List[Optimization]) -> List[Recommendation]:
        """Pick the best performance, area and power alternatives."""
        recommendations = []

        performance = next((o for o in optimizations if o.impact.frequency_change_mhz > 0), None)
        if performance is not None:
            recommendations.append(
                Recommendation(
                    category="performance",
                    priority="high",
                    description=performance.description,
                    expected_improvement=f"+{performance.impact.frequency_change_mhz:.1f} MHz",
                )
            )

        area = next((o for o in optimizations if o.impact.lut_change < 0), None)
        if area is not None:
            recommendations.append(
                Recommendation(
                    category="area",
                    priority="medium",
                    description=area.description,
                    expected_improvement=f"{abs(area.impact.lut_change)} LUTs saved",
                )
            )

        power = next((o for o in optimizations if o.impact.power_change_mw < 0), None)
        if power is not None:
            recommendations.append(
                Recommendation(
                    category="power",
                    priority="medium",
                    description=power.description,
                    expected_improvement=f"{abs(power.impact.power_change_mw):.1f} mW saved",
                )
            )

        return recommendations

    # --- Candidates ---

    def _compare(
        self,
        kind: OptimizationKind,
        description: str,
        changes: dict,
        candidate: EstimationConfig,
        timing: TimingEstimate,
        resources: ResourceEstimate,
        power: PowerEstimate,
    ) -> Optimization:
        """Estimate ``candidate`` in full and score it against the baseline."""
        new_timing = self.engine.estimate_timing(candidate)
        new_resources = self.engine.estimate_resources(candidate)
        new_power = self.engine.estimate_power(candidate, new_resources)

        return Optimization(
            kind=kind,
            description=description,
            changes=changes,
            impact=OptimizationImpact(
                frequency_change_mhz=round(new_timing.max_frequency_mhz - timing.max_frequency_mhz, 1),
                lut_change=new_resources.luts - resources.luts,
                ff_change=new_resources.ffs - resources.ffs,
                power_change_mw=round(new_power.total_power_mw - power.total_power_mw, 2),
                delay_change_ns=round(new_timing.total_delay_ns - timing.total_delay_ns, 3),
            ),
            score=optimization_score(
                _ratio(new_timing.max_frequency_mhz, timing.max_frequency_mhz),
                _ratio(resources.luts, new_resources.luts),
                _ratio(power.total_power_mw, new_power.total_power_mw),
            ),
        )

    def _architecture_changes(
        self,
        config: EstimationConfig,
        timing: TimingEstimate,
        resources: ResourceEstimate,
        power: PowerEstimate,
    ) -> List[Optimization]:
        options = []
        for profile in self.engine.architectures.architectures_for(config.component_kind):
            if profile.name == config.architecture:
                continue
            try:
                option = self._compare(
                    OptimizationKind.ARCHITECTURE_CHANGE,
                    f"Switch to {profile.name} architecture",
                    {"architecture": profile.name},
                    config.with_changes(architecture=profile.name),
                    timing,
                    resources,
                    power,
                )
            except EstimationError as e:
                logger.debug("Skipping architecture %s: %s", profile.name, e)
                continue
            options.append(option)
        return options

    def _pipelining(
        self,
        config: EstimationConfig,
        timing: TimingEstimate,
        resources: ResourceEstimate,
        power: PowerEstimate,
    ) -> Optional[Optimization]:
        levels = timing.critical_path.levels
        if levels <= PIPELINE_MIN_LEVELS:
            return None

        stages = math.ceil(levels / LEVELS_PER_STAGE)
        additional_ffs = resources.luts * (stages - 1)
        pipelined = resources.model_copy(update={"ffs": resources.ffs + additional_ffs})
        new_power = self.engine.estimate_power(config, pipelined)
        new_frequency = timing.max_frequency_mhz * PIPELINE_SPEEDUP

        return Optimization(
            kind=OptimizationKind.PIPELINING,
            description=f"Add {stages} pipeline stages",
            changes={"pipeline_stages": stages},
            impact=OptimizationImpact(
                frequency_change_mhz=round(new_frequency - timing.max_frequency_mhz, 1),
                ff_change=additional_ffs,
                power_change_mw=round(new_power.total_power_mw - power.total_power_mw, 2),
                latency_increase=stages,
            ),
            score=optimization_score(
                PIPELINE_SPEEDUP, 1.0, _ratio(power.total_power_mw, new_power.total_power_mw)
            ),
        )

    def _dvfs(
        self, config: EstimationConfig, resources: ResourceEstimate, power: PowerEstimate
    ) -> Optimization:
        scaled = config.with_changes(
            frequency_mhz=config.frequency_mhz * DVFS_FREQUENCY_SCALING,
            voltage_v=config.voltage_v * DVFS_VOLTAGE_SCALING,
        )
        new_power = self.engine.estimate_power(scaled, resources)

        return Optimization(
            kind=OptimizationKind.DVFS,
            description="Dynamic Voltage and Frequency Scaling",
            changes={
                "frequency_scaling": DVFS_FREQUENCY_SCALING,
                "voltage_scaling": DVFS_VOLTAGE_SCALING,
            },
            impact=OptimizationImpact(
                frequency_change_mhz=round(scaled.frequency_mhz - config.frequency_mhz, 1),
                power_change_mw=round(new_power.total_power_mw - power.total_power_mw, 2),
            ),
            score=optimization_score(
                DVFS_FREQUENCY_SCALING, 1.0, _ratio(power.total_power_mw, new_power.total_power_mw)
            ),
        )

    def _device_migrations(
        self,
        config: EstimationConfig,
        timing: TimingEstimate,
        resources: ResourceEstimate,
        power: PowerEstimate,
    ) -> List[Optimization]:
        options = []
        for device in self.engine.devices:
            if device.name == config.device:
                continue
            candidate = config.with_changes(device=device.name)
            if not self.engine.estimate_resources(candidate).fits:
                logger.debug("Design does not fit %s, not proposed", device.name)
                continue
            options.append(
                self._compare(
                    OptimizationKind.DEVICE_MIGRATION,
                    f"Migrate to {device.name}",
                    {"device": device.name},
                    candidate,
                    timing,
                    resources,
                    power,
                )
            )
        return options
