"""Structural design model - the single representation shared by the
extractor, the rule checker and the estimation engine."""

from enum import Enum
from typing import Dict, List, Optional, Sequence, TypeVar

from pydantic import Field

from .base import FrozenModel, Parameter, StrictModel
from .port import Port, PortDirection, Signal

NamedItem = TypeVar("NamedItem")

# Name given to the module that collects constructs found outside any module
UNIT_MODULE_NAME = "$unit"


class BlockKind(str, Enum):
    """Classification of a procedural block."""

    SEQUENTIAL = "sequential"
    COMBINATIONAL = "combinational"
    UNKNOWN = "unknown"


class AssignmentOperator(str, Enum):
    """Procedural assignment operator."""

    BLOCKING = "blocking"  # =
    NONBLOCKING = "nonblocking"  # <=

    @property
    def symbol(self) -> str:
        return "=" if self == AssignmentOperator.BLOCKING else "<="


class Connection(FrozenModel):
    """Named port connection of an instance (``.port(signal)``)."""

    port: str = Field(..., description="Port name on the instantiated module")
    signal: str = Field(default="", description="Connected expression text")


class Instance(FrozenModel):
    """Module instantiation."""

    module_name: str = Field(..., description="Instantiated module name")
    instance_name: str = Field(..., description="Instance name")
    connections: List[Connection] = Field(default_factory=list)
    line: int = Field(..., ge=1)


class ProceduralAssignment(FrozenModel):
    """A single ``lhs = rhs`` / ``lhs <= rhs`` statement inside a procedural block."""

    lhs: str
    rhs: str
    operator: AssignmentOperator
    line: int = Field(..., ge=1)


class ProceduralBlock(FrozenModel):
    """
    ``always`` block.

    ``end_line`` is the line of the closing ``end`` (or of the terminating
    ``;`` for a single-statement body).
    """

    sensitivity: str = Field(default="", description="Sensitivity list text")
    kind: BlockKind = Field(default=BlockKind.UNKNOWN)
    keyword: str = Field(default="always", description="always, always_ff, always_comb, ...")
    body: str = Field(default="")
    line: int = Field(..., ge=1)
    end_line: int = Field(..., ge=1)
    reads: List[str] = Field(default_factory=list, description="Identifiers read")
    writes: List[str] = Field(default_factory=list, description="Identifiers written")
    statements: List[ProceduralAssignment] = Field(default_factory=list)

    @property
    def is_sequential(self) -> bool:
        return self.kind == BlockKind.SEQUENTIAL

    @property
    def is_combinational(self) -> bool:
        return self.kind == BlockKind.COMBINATIONAL


class Assignment(FrozenModel):
    """Continuous ``assign lhs = rhs;``."""

    lhs: str
    rhs: str
    line: int = Field(..., ge=1)
    complexity: int = Field(default=0, ge=0, description="Expression complexity of the rhs")


class Module(StrictModel):
    """A ``module ... endmodule`` region and everything declared inside it."""

    name: str = Field(..., description="Module name")
    line: int = Field(..., ge=1)
    end_line: int = Field(..., ge=1)
    ports: List[Port] = Field(default_factory=list)
    signals: List[Signal] = Field(default_factory=list)
    instances: List[Instance] = Field(default_factory=list)
    blocks: List[ProceduralBlock] = Field(default_factory=list)
    assignments: List[Assignment] = Field(default_factory=list)
    parameters: List[Parameter] = Field(default_factory=list)

    # --- Convenience accessors ---

    @staticmethod
    def _find_by_name(items: Sequence[NamedItem], name: str) -> Optional[NamedItem]:
        """Return the first item with a matching ``name`` attribute."""
        return next((item for item in items if getattr(item, "name", None) == name), None)

    def get_port(self, name: str) -> Optional[Port]:
        return self._find_by_name(self.ports, name)

    def get_signal(self, name: str) -> Optional[Signal]:
        return self._find_by_name(self.signals, name)

    def get_parameter(self, name: str) -> Optional[Parameter]:
        return self._find_by_name(self.parameters, name)

    # --- Computed properties ---

    @property
    def is_unit(self) -> bool:
        """True for the synthetic module holding constructs outside any module."""
        return self.name == UNIT_MODULE_NAME

    @property
    def input_ports(self) -> List[Port]:
        return [p for p in self.ports if p.direction == PortDirection.INPUT]

    @property
    def output_ports(self) -> List[Port]:
        return [p for p in self.ports if p.direction == PortDirection.OUTPUT]

    @property
    def clock_ports(self) -> List[Port]:
        return [p for p in self.ports if p.is_clock]

    @property
    def sequential_blocks(self) -> List[ProceduralBlock]:
        return [b for b in self.blocks if b.is_sequential]

    @property
    def combinational_blocks(self) -> List[ProceduralBlock]:
        return [b for b in self.blocks if b.is_combinational]


class SourceStatistics(FrozenModel):
    """Line and token statistics of the analysed text."""

    total_lines: int = 0
    code_lines: int = 0
    comment_lines: int = 0
    blank_lines: int = 0
    total_tokens: int = 0
    token_distribution: Dict[str, int] = Field(default_factory=dict)
    avg_line_length: float = 0.0


class ComplexityCategory(str, Enum):
    SIMPLE = "simple"
    MODERATE = "moderate"
    COMPLEX = "complex"
    VERY_COMPLEX = "very_complex"

    @classmethod
    def from_score(cls, score: int) -> "ComplexityCategory":
        if score < 10:
            return cls.SIMPLE
        if score < 25:
            return cls.MODERATE
        if score < 50:
            return cls.COMPLEX
        return cls.VERY_COMPLEX


class DesignComplexity(FrozenModel):
    """Aggregate structural complexity score."""

    total: int = 0
    per_module: float = 0.0
    category: ComplexityCategory = ComplexityCategory.SIMPLE


class DesignModel(StrictModel):
    """
    Complete structural model of an HDL source text.

    This is the canonical data model that the extractor produces and the
    rule checker and estimation engine consume.
    """

    modules: List[Module] = Field(default_factory=list)
    parameters: List[Parameter] = Field(
        default_factory=list, description="Parameters declared outside every module"
    )
    statistics: SourceStatistics = Field(default_factory=SourceStatistics)
    complexity: DesignComplexity = Field(default_factory=DesignComplexity)

    def get_module(self, name: str) -> Optional[Module]:
        """Get module by name."""
        return next((m for m in self.modules if m.name == name), None)

    @property
    def module_names(self) -> List[str]:
        return [m.name for m in self.modules]

    @property
    def all_ports(self) -> List[Port]:
        return [p for m in self.modules for p in m.ports]

    @property
    def all_signals(self) -> List[Signal]:
        return [s for m in self.modules for s in m.signals]

    @property
    def all_blocks(self) -> List[ProceduralBlock]:
        return [b for m in self.modules for b in m.blocks]

    @property
    def all_assignments(self) -> List[Assignment]:
        return [a for m in self.modules for a in m.assignments]

    @property
    def all_instances(self) -> List[Instance]:
        return [i for m in self.modules for i in m.instances]

    def hierarchy(self) -> Dict[str, List[Instance]]:
        """Map each module name to the instances it contains."""
        return {m.name: list(m.instances) for m in self.modules}

    @property
    def top_modules(self) -> List[str]:
        """Modules that no other module in this design instantiates."""
        instantiated = {i.module_name for i in self.all_instances}
        return [m.name for m in self.modules if not m.is_unit and m.name not in instantiated]
