"""
Pydantic-based data models for HDL analysis.

The structural ``DesignModel`` is the single representation shared by the
extractor, the rule checker and the estimation engine. Findings, estimates
and configs are immutable records.
"""

from .base import FrozenModel, Parameter, ParameterKind, RtlBaseModel, Severity, StrictModel
from .design import (
    UNIT_MODULE_NAME,
    Assignment,
    AssignmentOperator,
    BlockKind,
    ComplexityCategory,
    Connection,
    DesignComplexity,
    DesignModel,
    Instance,
    Module,
    ProceduralAssignment,
    ProceduralBlock,
    SourceStatistics,
)
from .estimates import (
    CdcAnalysis,
    CdcIssue,
    ClockDomain,
    ComponentKind,
    CriticalPath,
    DesignIntent,
    EstimationConfig,
    FrequencyFeasibility,
    Optimization,
    OptimizationImpact,
    OptimizationKind,
    PackageType,
    PerformancePrediction,
    PowerBreakdown,
    PowerEstimate,
    PowerScaling,
    Recommendation,
    ResourceEstimate,
    ResourceScaling,
    SpeedGrade,
    SynchronizerRequirement,
    ThermalEnvironment,
    ThermalEstimate,
    ThermalStatus,
    TimingEstimate,
)
from .findings import (
    Finding,
    ImbalanceDirection,
    LintFinding,
    LintRecommendations,
    LintReport,
    LintSummary,
    ModuleValidation,
    SyntaxFinding,
)
from .port import Port, PortDirection, Signal, SignalKind
from .report import AnalysisReport

__all__ = [
    # Base
    "RtlBaseModel",
    "StrictModel",
    "FrozenModel",
    "Severity",
    "Parameter",
    "ParameterKind",
    # Ports / signals
    "Port",
    "PortDirection",
    "Signal",
    "SignalKind",
    # Design
    "UNIT_MODULE_NAME",
    "DesignModel",
    "Module",
    "Instance",
    "Connection",
    "ProceduralBlock",
    "ProceduralAssignment",
    "AssignmentOperator",
    "BlockKind",
    "Assignment",
    "SourceStatistics",
    "DesignComplexity",
    "ComplexityCategory",
    # Findings
    "Finding",
    "SyntaxFinding",
    "LintFinding",
    "ImbalanceDirection",
    "LintSummary",
    "LintRecommendations",
    "LintReport",
    "ModuleValidation",
    # Estimation
    "ComponentKind",
    "SpeedGrade",
    "EstimationConfig",
    "DesignIntent",
    "ResourceEstimate",
    "TimingEstimate",
    "CriticalPath",
    "PowerEstimate",
    "PowerBreakdown",
    "PackageType",
    "ThermalEnvironment",
    "ThermalEstimate",
    "ThermalStatus",
    "Optimization",
    "OptimizationImpact",
    "OptimizationKind",
    "Recommendation",
    "ClockDomain",
    "CdcAnalysis",
    "CdcIssue",
    "SynchronizerRequirement",
    "FrequencyFeasibility",
    "ResourceScaling",
    "PowerScaling",
    "PerformancePrediction",
    # Report
    "AnalysisReport",
]
