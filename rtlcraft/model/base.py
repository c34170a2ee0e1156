"""
Base models for rtlcraft records.

Provides shared base models with centralized configuration for every
structural, finding and estimate record. Using these base models eliminates
repetitive ``model_config`` declarations across the codebase.

Architecture Decision:
    Two mutability policies exist on purpose:
    StrictModel (extra="forbid") is for records the extractor assembles
    (Module, DesignModel) and that callers may still inspect and extend.
    FrozenModel additionally sets frozen=True and is used for findings,
    device/estimation records and configs, which are created once per
    analysis pass and never mutated.
"""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel


class RtlBaseModel(BaseModel):
    """Base model with shared configuration for all rtlcraft models.

    Provides camelCase aliasing, assignment validation, and allows field
    population by either alias or Python name.
    """

    model_config = {
        "validate_assignment": True,
        "alias_generator": to_camel,
        "populate_by_name": True,
    }

    def to_dict(self) -> dict:
        """Serialize to a tree of primitive values (camelCase keys)."""
        return self.model_dump(mode="json", by_alias=True)


class StrictModel(RtlBaseModel):
    """Base model that forbids unknown fields."""

    model_config = {
        **RtlBaseModel.model_config,
        "extra": "forbid",
    }


class FrozenModel(StrictModel):
    """Immutable record; hashing and equality follow field values."""

    model_config = {
        **StrictModel.model_config,
        "frozen": True,
    }


class Severity(str, Enum):
    """Severity of a syntax or lint finding."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class ParameterKind(str, Enum):
    """Verilog parameter declaration kind."""

    PARAMETER = "parameter"
    LOCALPARAM = "localparam"


class Parameter(FrozenModel):
    """
    Verilog ``parameter`` / ``localparam`` declaration.

    ``value`` keeps the source text; ``resolved`` holds the integer value when
    the expression could be evaluated against earlier parameters.
    """

    name: str = Field(..., description="Parameter name")
    value: str = Field(..., description="Value expression as written")
    kind: ParameterKind = Field(default=ParameterKind.PARAMETER, description="Declaration kind")
    resolved: Optional[int] = Field(default=None, description="Integer value, if resolvable")
    line: int = Field(..., ge=1, description="1-based source line")

    @field_validator("kind", mode="before")
    @classmethod
    def normalize_kind(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.lower()
        return v

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Ensure parameter name is valid."""
        v = v.strip()
        if not v:
            raise ValueError("Parameter name cannot be empty")
        return v

    @property
    def is_local(self) -> bool:
        return self.kind == ParameterKind.LOCALPARAM
