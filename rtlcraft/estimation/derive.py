"""
Estimation configs derived from a design model or a design intent.

A ``DesignIntent`` states what was asked for; a ``DesignModel`` describes
what the source text actually contains. Intent values win, design metrics
fill whatever the intent leaves open.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from rtlcraft.catalog import ArchitectureCatalog, default_architecture_catalog
from rtlcraft.errors import MissingParameterError
from rtlcraft.model import ComponentKind, DesignIntent, DesignModel, EstimationConfig, Module
from rtlcraft.parser.hdl import expression_complexity
from rtlcraft.utils import filter_none

logger = logging.getLogger(__name__)

_EDGE_RE = re.compile(r"\b(?:posedge|negedge)\s+([A-Za-z_]\w*)")
_ADD_RE = re.compile(r"(?<![+])\+(?![+])")

# Intent parameters copied onto the config unchanged
PASSTHROUGH_PARAMETERS = (
    "device",
    "temperature_c",
    "voltage_v",
    "speed_grade",
    "fanout",
    "toggle_rate",
    "instances",
    "logic_levels",
)

# Constraint keyword -> profile metric that is minimized
CONSTRAINT_METRICS = {
    "delay": "delay",
    "timing": "delay",
    "speed": "delay",
    "area": "luts",
    "power": "luts",
}


@dataclass(frozen=True)
class DesignMetrics:
    """Figures read off a structural model for estimation."""

    register_bits: int = 0
    register_stages: int = 0
    logic_levels: int = 1
    max_width: Optional[int] = None
    has_multiplier: bool = False
    has_adder: bool = False
    has_memory: bool = False
    memory_depth: Optional[int] = None
    memory_width: Optional[int] = None
    clock_domains: List[str] = field(default_factory=list)

    @property
    def component_kind(self) -> ComponentKind:
        """Dominant component kind: memory, then multiplier, then adder."""
        if self.has_memory:
            return ComponentKind.MEMORY
        if self.has_multiplier:
            return ComponentKind.MULTIPLIER
        if self.has_adder:
            return ComponentKind.ADDER
        return ComponentKind.GENERIC

    @property
    def width(self) -> Optional[int]:
        """Data width to estimate with (memory word width for memories)."""
        if self.has_memory and self.memory_width:
            return self.memory_width
        return self.max_width

    @classmethod
    def from_model(cls, model: DesignModel) -> "DesignMetrics":
        register_bits = 0
        register_stages = 0
        levels = 1
        expressions: List[str] = []
        clocks: List[str] = []

        for module in model.modules:
            for block in module.sequential_blocks:
                register_stages += 1
                register_bits += sum(_declared_width(module, name) for name in block.writes)
                for clock in _EDGE_RE.findall(block.sensitivity):
                    if clock not in clocks and "rst" not in clock.lower():
                        clocks.append(clock)
            for block in module.blocks:
                for statement in block.statements:
                    expressions.append(statement.rhs)
                    levels = max(levels, expression_complexity(statement.rhs))
            for assignment in module.assignments:
                expressions.append(assignment.rhs)
                levels = max(levels, assignment.complexity)
            for port in module.clock_ports:
                if port.name not in clocks:
                    clocks.append(port.name)

        widths = [p.width for p in model.all_ports] + [s.width for s in model.all_signals]
        memories = [s for s in model.all_signals if s.is_memory]
        depths = [s.array_depth for s in memories if s.array_depth]

        return cls(
            register_bits=register_bits,
            register_stages=register_stages,
            logic_levels=levels,
            max_width=max(widths) if widths else None,
            has_multiplier=any("*" in e for e in expressions),
            has_adder=any(_ADD_RE.search(e) for e in expressions),
            has_memory=bool(memories),
            memory_depth=max(depths) if depths else None,
            memory_width=max(s.width for s in memories) if memories else None,
            clock_domains=clocks,
        )


def _declared_width(module: Module, name: str) -> int:
    declared = module.get_signal(name) or module.get_port(name)
    return declared.width if declared is not None else 1


def _intent_values(intent: DesignIntent) -> Dict[str, Any]:
    """Config fields stated by ``intent``; unknown component kinds become generic."""
    try:
        kind = ComponentKind.from_string(intent.component_kind)
    except ValueError:
        logger.debug("Component '%s' has no profiles, using generic formulas", intent.component_kind)
        kind = ComponentKind.GENERIC

    values: Dict[str, Any] = {
        "component_kind": kind,
        "width": intent.width,
        "depth": intent.depth,
        "frequency_mhz": intent.frequency_mhz,
        "architecture": intent.architecture,
    }
    for name in PASSTHROUGH_PARAMETERS:
        if name in intent.parameters:
            values[name] = intent.parameters[name]
    return filter_none(values)


def pick_architecture(
    kind: ComponentKind,
    constraints: List[str],
    width: int,
    depth: Optional[int] = None,
    architectures: Optional[ArchitectureCatalog] = None,
) -> Optional[str]:
    """
    Registered architecture that best meets the first recognized constraint.

    ``delay`` picks the lowest logic delay, ``area`` and ``power`` the lowest
    LUT count, both evaluated at ``width`` (and ``depth``). Returns None when
    no constraint is recognized or the kind has no evaluable profile.
    """
    architectures = architectures if architectures is not None else default_architecture_catalog()
    metric = next(
        (CONSTRAINT_METRICS[c.strip().lower()] for c in constraints if c.strip().lower() in CONSTRAINT_METRICS),
        None,
    )
    if metric is None:
        return None

    ranked = []
    for profile in architectures.architectures_for(kind):
        try:
            value = profile.delay(width, depth) if metric == "delay" else profile.luts(width, depth)
        except MissingParameterError:
            continue
        ranked.append((value, profile.name))
    if not ranked:
        return None

    # min() keeps the first registered profile on ties
    best = min(ranked, key=lambda item: item[0])[1]
    logger.debug("Constraint '%s' selects %s/%s", metric, kind.value, best)
    return best


def _build_config(
    values: Dict[str, Any],
    constraints: List[str],
    architectures: Optional[ArchitectureCatalog],
    overrides: Dict[str, Any],
) -> EstimationConfig:
    values = {**values, **filter_none(overrides)}
    kind = values.get("component_kind", ComponentKind.GENERIC)

    # A kind given as free text is left to EstimationConfig validation
    if values.get("architecture") is None and constraints and isinstance(kind, ComponentKind):
        choice = pick_architecture(
            kind, constraints, int(values.get("width", 8)), values.get("depth"), architectures
        )
        if choice is not None:
            values["architecture"] = choice

    return EstimationConfig(**values)


def config_from_intent(
    intent: DesignIntent,
    architectures: Optional[ArchitectureCatalog] = None,
    **overrides: Any,
) -> EstimationConfig:
    """
    Build an estimation config from a design intent alone.

    Args:
        intent: Structured design request
        architectures: Catalog used for constraint-driven selection
        **overrides: Config fields that take precedence over the intent

    Raises:
        pydantic.ValidationError: If a resulting field is invalid (e.g. width <= 0)
    """
    return _build_config(_intent_values(intent), intent.constraints, architectures, overrides)


def config_from_model(
    model: DesignModel,
    intent: Optional[DesignIntent] = None,
    architectures: Optional[ArchitectureCatalog] = None,
    **overrides: Any,
) -> EstimationConfig:
    """
    Build an estimation config from an extracted design.

    The intent (when given) is applied first; the design metrics fill the
    fields it does not state.
    """
    metrics = DesignMetrics.from_model(model)
    values: Dict[str, Any] = {"component_kind": metrics.component_kind}
    if metrics.width:
        values["width"] = metrics.width
    if metrics.memory_depth:
        values["depth"] = metrics.memory_depth
    if metrics.logic_levels > 1:
        values["logic_levels"] = metrics.logic_levels

    constraints: List[str] = []
    if intent is not None:
        values.update(_intent_values(intent))
        constraints = intent.constraints

    logger.debug("Derived config values: %s", values)
    return _build_config(values, constraints, architectures, overrides)
