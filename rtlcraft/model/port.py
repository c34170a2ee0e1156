"""
Port and signal declarations.
"""

from enum import Enum
from typing import Any, Optional

from pydantic import Field, field_validator

from .base import FrozenModel


class PortDirection(str, Enum):
    """Port direction enumeration."""

    INPUT = "input"
    OUTPUT = "output"
    INOUT = "inout"

    @classmethod
    def from_string(cls, value: str) -> "PortDirection":
        """Normalize common direction aliases into ``PortDirection``."""
        normalized = value.lower().strip()
        mapping = {
            "in": cls.INPUT,
            "input": cls.INPUT,
            "out": cls.OUTPUT,
            "output": cls.OUTPUT,
            "inout": cls.INOUT,
        }
        return mapping.get(normalized, cls.INPUT)


class SignalKind(str, Enum):
    """Net/variable kind of an internal signal."""

    WIRE = "wire"
    REG = "reg"


class _Vector(FrozenModel):
    """Shared shape of ports and signals: a name and an inclusive bit range."""

    name: str = Field(..., description="Declared name")
    width: int = Field(default=1, gt=0, description="Bit width")
    msb: int = Field(default=0, description="Most significant bit index")
    lsb: int = Field(default=0, description="Least significant bit index")
    range_text: Optional[str] = Field(
        default=None, description="Raw range text when it could not be resolved"
    )
    line: int = Field(..., ge=1, description="1-based source line")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name cannot be empty")
        return v

    @property
    def is_vector(self) -> bool:
        """Check if this is a multi-bit declaration."""
        return self.width > 1

    @property
    def is_resolved(self) -> bool:
        """False when the declared range referenced something unresolvable."""
        return self.range_text is None


class Port(_Vector):
    """Module port declaration (ANSI header or body declaration)."""

    direction: PortDirection = Field(..., description="Port direction")
    data_type: Optional[str] = Field(
        default=None, description="Declared data type (wire, reg, logic)"
    )

    @field_validator("direction", mode="before")
    @classmethod
    def normalize_direction(cls, v: Any) -> Any:
        """Validate and normalize port direction."""
        if isinstance(v, str):
            return PortDirection.from_string(v).value
        return v

    @property
    def is_input(self) -> bool:
        return self.direction == PortDirection.INPUT

    @property
    def is_output(self) -> bool:
        return self.direction == PortDirection.OUTPUT

    @property
    def is_bidirectional(self) -> bool:
        return self.direction == PortDirection.INOUT

    @property
    def is_clock(self) -> bool:
        """Heuristic: input port whose name mentions ``clk``."""
        return self.is_input and "clk" in self.name.lower()


class Signal(_Vector):
    """Internal ``wire`` / ``reg`` declaration."""

    kind: SignalKind = Field(..., description="wire or reg")
    is_array: bool = Field(default=False, description="Declared with an unpacked dimension")
    array_depth: Optional[int] = Field(
        default=None, gt=0, description="Number of entries for a memory array, if resolvable"
    )

    @property
    def is_memory(self) -> bool:
        """True for a 2-D ``reg`` array such as ``reg [7:0] mem [0:255]``."""
        return self.kind == SignalKind.REG and self.is_array

    @property
    def total_bits(self) -> int:
        return self.width * (self.array_depth or 1)
