"""
Estimation inputs and results.

``EstimationConfig`` and ``DesignIntent`` are the inputs of the estimation
engine; every other record here is a value computed fresh on each call.
"""

from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from pydantic import AliasChoices, Field, field_validator

from ..errors import InvalidParameterError
from .base import FrozenModel

MAX_JUNCTION_TEMPERATURE_C = 85.0


class ComponentKind(str, Enum):
    """Closed set of component kinds the estimator knows about.

    ``GENERIC`` has no architecture profiles and always takes the generic
    fallback formulas.
    """

    ADDER = "adder"
    MULTIPLIER = "multiplier"
    MEMORY = "memory"
    GENERIC = "generic"

    @classmethod
    def from_string(cls, value: str) -> "ComponentKind":
        """Normalize aliases; unknown kinds raise ``ValueError``."""
        normalized = value.lower().strip().replace("-", "_").replace(" ", "_")
        mapping = {
            "adder": cls.ADDER,
            "add": cls.ADDER,
            "multiplier": cls.MULTIPLIER,
            "mult": cls.MULTIPLIER,
            "mul": cls.MULTIPLIER,
            "memory": cls.MEMORY,
            "mem": cls.MEMORY,
            "ram": cls.MEMORY,
            "generic": cls.GENERIC,
            "custom": cls.GENERIC,
        }
        if normalized not in mapping:
            raise ValueError(
                f"Unknown component kind '{value}'. "
                f"Expected one of: {', '.join(k.value for k in cls)}"
            )
        return mapping[normalized]


class SpeedGrade(str, Enum):
    """Device speed grade; the multiplier derates the critical path delay."""

    SLOWEST = "slowest"
    MID = "mid"
    FASTEST = "fastest"

    @property
    def factor(self) -> float:
        return {"slowest": 1.0, "mid": 0.85, "fastest": 0.75}[self.value]

    @classmethod
    def from_string(cls, value: Any) -> "SpeedGrade":
        """Accept grade names and Xilinx-style numbers (-1 slowest .. -3 fastest)."""
        normalized = str(value).lower().strip()
        mapping = {
            "slowest": cls.SLOWEST,
            "slow": cls.SLOWEST,
            "-1": cls.SLOWEST,
            "1": cls.SLOWEST,
            "mid": cls.MID,
            "medium": cls.MID,
            "-2": cls.MID,
            "2": cls.MID,
            "fastest": cls.FASTEST,
            "fast": cls.FASTEST,
            "-3": cls.FASTEST,
            "3": cls.FASTEST,
        }
        if normalized not in mapping:
            raise ValueError(f"Unknown speed grade '{value}'")
        return mapping[normalized]


class EstimationConfig(FrozenModel):
    """
    Input of every estimation call.

    Setup slack is measured against ``target_period_ns``, which defaults to a
    fixed 10 ns (100 MHz) reference period rather than ``frequency_mhz``.
    """

    device: str = Field(default="Artix-7", description="Device catalog key")
    component_kind: ComponentKind = Field(default=ComponentKind.GENERIC)
    architecture: Optional[str] = Field(
        default=None, description="Architecture name; None selects the generic formulas"
    )
    width: int = Field(default=8, gt=0, description="Data width in bits")
    depth: Optional[int] = Field(default=None, gt=0, description="Memory depth in words")
    frequency_mhz: float = Field(default=100.0, gt=0)
    temperature_c: float = Field(default=25.0)
    voltage_v: float = Field(default=1.0, gt=0)
    speed_grade: SpeedGrade = Field(default=SpeedGrade.SLOWEST)
    fanout: int = Field(default=4, gt=0)
    logic_levels: Optional[int] = Field(
        default=None, gt=0, description="Overrides ceil(log2(width)) on the generic path"
    )
    toggle_rate: float = Field(default=0.25, ge=0.0, le=1.0)
    instances: int = Field(default=1, gt=0, description="Replication count")
    target_period_ns: float = Field(default=10.0, gt=0, description="Slack reference period")

    @field_validator("component_kind", mode="before")
    @classmethod
    def normalize_component_kind(cls, v: Any) -> Any:
        if isinstance(v, str) and not isinstance(v, ComponentKind):
            return ComponentKind.from_string(v)
        return v

    @field_validator("speed_grade", mode="before")
    @classmethod
    def normalize_speed_grade(cls, v: Any) -> Any:
        if isinstance(v, (str, int)) and not isinstance(v, SpeedGrade):
            return SpeedGrade.from_string(v)
        return v

    @field_validator("architecture")
    @classmethod
    def normalize_architecture(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip().lower().replace("-", "_").replace(" ", "_")
        return v or None

    def with_changes(self, **changes: Any) -> "EstimationConfig":
        """Return a validated copy with ``changes`` applied."""
        return type(self).model_validate({**self.model_dump(), **changes})


class DesignIntent(FrozenModel):
    """
    Structured design request produced by an upstream prompt interpreter.

    Accepted directly by the estimator when no source text exists yet.
    """

    component_kind: str = Field(
        ...,
        validation_alias=AliasChoices("componentKind", "component_kind", "component"),
        description="Component kind as requested (free text)",
    )
    parameters: Dict[str, Any] = Field(default_factory=dict)
    constraints: List[str] = Field(default_factory=list)

    def _number(self, name: str, convert: Callable[[Any], Any]) -> Any:
        value = self.parameters.get(name)
        if value is None:
            return None
        try:
            return convert(value)
        except (TypeError, ValueError):
            raise InvalidParameterError(name, value) from None

    @property
    def width(self) -> Optional[int]:
        return self._number("width", int)

    @property
    def depth(self) -> Optional[int]:
        return self._number("depth", int)

    @property
    def frequency_mhz(self) -> Optional[float]:
        return self._number("frequency", float)

    @property
    def architecture(self) -> Optional[str]:
        return self.parameters.get("architecture")


# --- Results ---


class ResourceEstimate(FrozenModel):
    """Estimated resource usage; counts are ceiling-rounded integers."""

    luts: int = Field(..., ge=0)
    ffs: int = Field(..., ge=0)
    brams: int = Field(default=0, ge=0)
    dsps: int = Field(default=0, ge=0)
    ios: int = Field(default=0, ge=0)
    total_equivalent_luts: int = Field(default=0, ge=0)
    utilization: Dict[str, float] = Field(
        default_factory=dict, description="Percent of device capacity per resource"
    )
    bottleneck: Optional[str] = Field(default=None, description="Most utilized resource")
    fits: bool = Field(default=True, description="True when every resource fits the device")


class CriticalPath(FrozenModel):
    levels: int = Field(..., ge=0)
    fanout: int = Field(..., gt=0)
    bottleneck: str = Field(..., description="'logic' or 'routing'")


class TimingEstimate(FrozenModel):
    """Estimated critical path timing (ns) and achievable frequency (MHz)."""

    logic_delay_ns: float
    routing_delay_ns: float
    total_delay_ns: float
    max_frequency_mhz: float
    target_period_ns: float
    setup_slack_ns: float
    hold_slack_ns: float
    critical_path: CriticalPath

    @property
    def meets_target(self) -> bool:
        return self.setup_slack_ns >= 0


class PowerBreakdown(FrozenModel):
    logic_power_mw: float
    ff_power_mw: float
    clock_power_mw: float
    io_power_mw: float


class PowerEstimate(FrozenModel):
    """Estimated static/dynamic power in mW."""

    static_power_mw: float
    dynamic_power_mw: float
    total_power_mw: float
    breakdown: PowerBreakdown
    efficiency_mhz_per_mw: float
    thermal_design_power_mw: float


class PackageType(str, Enum):
    BGA = "BGA"
    QFP = "QFP"
    TQFP = "TQFP"

    @property
    def junction_to_case(self) -> float:
        """Thermal resistance junction-to-case in C/W."""
        return {"BGA": 0.2, "QFP": 0.5, "TQFP": 0.3}[self.value]

    @property
    def case_to_ambient(self) -> float:
        """Thermal resistance case-to-ambient in C/W."""
        return {"BGA": 2.5, "QFP": 8.0, "TQFP": 4.0}[self.value]


class ThermalStatus(str, Enum):
    SAFE = "safe"
    MARGINAL = "marginal"
    CRITICAL = "critical"


class ThermalEnvironment(FrozenModel):
    """Operating environment for the thermal estimate."""

    ambient_c: Optional[float] = Field(
        default=None, description="Ambient temperature; defaults to the config temperature"
    )
    airflow_lfm: float = Field(default=200.0, ge=0, description="Airflow, linear feet per minute")
    heat_sink_efficiency: float = Field(default=0.8, gt=0, le=1.0)
    package: PackageType = Field(default=PackageType.BGA)

    @field_validator("package", mode="before")
    @classmethod
    def normalize_package(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.upper()
        return v


class ThermalEstimate(FrozenModel):
    junction_temperature_c: float
    temperature_rise_c: float
    thermal_margin_c: float
    max_junction_temperature_c: float = MAX_JUNCTION_TEMPERATURE_C
    status: ThermalStatus
    recommendations: List[str] = Field(default_factory=list)


# --- Optimization ---


class OptimizationKind(str, Enum):
    ARCHITECTURE_CHANGE = "architecture_change"
    PIPELINING = "pipelining"
    DVFS = "dvfs"
    DEVICE_MIGRATION = "device_migration"


class OptimizationImpact(FrozenModel):
    """Deltas of a candidate against the baseline (candidate minus baseline)."""

    frequency_change_mhz: float = 0.0
    lut_change: int = 0
    ff_change: int = 0
    power_change_mw: float = 0.0
    delay_change_ns: Optional[float] = None
    latency_increase: Optional[int] = None


class Optimization(FrozenModel):
    """A ranked alternative to the baseline configuration."""

    kind: OptimizationKind
    description: str
    changes: Dict[str, Any] = Field(default_factory=dict, description="Parameter delta")
    impact: OptimizationImpact
    score: float


class Recommendation(FrozenModel):
    category: str
    priority: str
    description: str
    expected_improvement: str = ""
    action: str = ""


# --- Clock domains ---


class ClockDomain(FrozenModel):
    name: str
    frequency_mhz: float = Field(..., gt=0)


class SynchronizerRequirement(FrozenModel):
    from_domain: str
    to_domain: str
    recommended_stages: int
    synchronizer_type: str = "ff_synchronizer"


class CdcIssue(FrozenModel):
    from_domain: str
    to_domain: str
    frequency_ratio: float
    issue: str


class CdcAnalysis(FrozenModel):
    total_crossings: int = 0
    synchronizers_needed: List[SynchronizerRequirement] = Field(default_factory=list)
    potential_issues: List[CdcIssue] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)


# --- Performance prediction ---


class FrequencyFeasibility(FrozenModel):
    achievable: bool
    current_max_mhz: float
    target_mhz: float
    margin_ns: float
    required_optimization: str


class ResourceScaling(FrozenModel):
    luts: int
    ffs: int
    brams: int
    dsps: int
    feasible: bool
    bottleneck: str


class PowerScaling(FrozenModel):
    estimated_power_mw: float
    thermal_feasible: bool
    cooling_requirements: str


class PerformancePrediction(FrozenModel):
    timing: TimingEstimate
    resources: ResourceEstimate
    power: PowerEstimate
    frequency_feasibility: Optional[FrequencyFeasibility] = None
    resource_scaling: Optional[ResourceScaling] = None
    power_scaling: Optional[PowerScaling] = None
    recommendations: List[Recommendation] = Field(default_factory=list)
