"""FPGA timing, resource, power and thermal estimation."""

from .advisor import OptimizationAdvisor, optimization_score
from .cdc import analyze_clock_domains
from .derive import DesignMetrics, config_from_intent, config_from_model, pick_architecture
from .engine import EstimationEngine, cooling_requirement, generic_logic_levels

__all__ = [
    "EstimationEngine",
    "OptimizationAdvisor",
    "DesignMetrics",
    "analyze_clock_domains",
    "config_from_intent",
    "config_from_model",
    "cooling_requirement",
    "generic_logic_levels",
    "optimization_score",
    "pick_architecture",
]
