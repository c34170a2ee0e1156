"""
rtlcraft - structural analysis, linting and FPGA estimation for Verilog.
"""

from .analyzer import DesignAnalyzer, analyze
from .estimation import EstimationEngine, OptimizationAdvisor
from .lint import RuleChecker
from .model import AnalysisReport, DesignIntent, DesignModel, EstimationConfig
from .parser import VerilogExtractor, extract

__version__ = "0.1.0"

__all__ = [
    "DesignAnalyzer",
    "analyze",
    "VerilogExtractor",
    "extract",
    "RuleChecker",
    "EstimationEngine",
    "OptimizationAdvisor",
    "AnalysisReport",
    "DesignModel",
    "DesignIntent",
    "EstimationConfig",
    "__version__",
]
