"""
Architecture catalog.

Each (component kind, architecture) entry carries closed-form delay and area
formulas. The formulas are written as constant expressions in
architectures.yml and compiled once when the catalog is loaded.
"""

import logging
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Tuple

import yaml

from rtlcraft.errors import CatalogError, ExpressionError, MissingParameterError, UnknownArchitectureError
from rtlcraft.expr import Expression, compile_expression
from rtlcraft.model.estimates import ComponentKind
from rtlcraft.utils import ARCHITECTURES_PATH

logger = logging.getLogger(__name__)

DEFAULT_ARCHITECTURES_PATH = ARCHITECTURES_PATH

DEFAULT_OPERANDS = ("width",)

# Operand value used to check formulas at load time
_PROBE_VALUE = 16


@dataclass(frozen=True)
class ArchitectureProfile:
    """Delay and area model of one architecture variant."""

    component_kind: ComponentKind
    name: str
    description: str
    operands: Tuple[str, ...]
    delay_formula: Expression
    lut_formula: Expression
    ff_formula: Expression
    uses_block_ram: bool = False

    @property
    def key(self) -> Tuple[ComponentKind, str]:
        return (self.component_kind, self.name)

    def operand_values(self, width: int, depth: Optional[int] = None) -> Dict[str, int]:
        """
        Bind the formula operands.

        Raises:
            MissingParameterError: If the profile needs ``depth`` and none is given
        """
        values = {"width": width}
        if "depth" in self.operands:
            if depth is None:
                raise MissingParameterError("depth", f"{self.component_kind.value}/{self.name}")
            values["depth"] = depth
        return values

    def delay(self, width: int, depth: Optional[int] = None) -> float:
        """Logic delay in ns."""
        return self.delay_formula(**self.operand_values(width, depth))

    def luts(self, width: int, depth: Optional[int] = None) -> float:
        return self.lut_formula(**self.operand_values(width, depth))

    def ffs(self, width: int, depth: Optional[int] = None) -> float:
        return self.ff_formula(**self.operand_values(width, depth))


class ArchitectureCatalog:
    """
    Immutable table of architecture profiles keyed by (component kind, name).

    Registration order is preserved; the optimization advisor proposes
    alternatives in that order.
    """

    def __init__(self, profiles: Iterable[ArchitectureProfile]):
        table: Dict[Tuple[ComponentKind, str], ArchitectureProfile] = {}
        for profile in profiles:
            table[profile.key] = profile
        self._profiles = MappingProxyType(table)

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "ArchitectureCatalog":
        """
        Load and compile architecture profiles from a YAML file.

        Args:
            path: Path to an architectures.yml file (defaults to the bundled catalog)

        Raises:
            CatalogError: If the file is missing, a kind is unknown or a formula
                does not compile
        """
        path = Path(path) if path else DEFAULT_ARCHITECTURES_PATH

        if not path.exists():
            raise CatalogError("Architecture catalog file not found", file_path=path)

        try:
            with open(path, "r") as f:
                raw_data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise CatalogError(f"YAML syntax error: {e}", file_path=path) from e

        if not isinstance(raw_data, dict):
            raise CatalogError("Expected a mapping of component kind to architectures", file_path=path)

        profiles = []
        for kind_name, entries in raw_data.items():
            try:
                kind = ComponentKind.from_string(str(kind_name))
            except ValueError as e:
                raise CatalogError(str(e), file_path=path, entry=str(kind_name)) from e
            if not isinstance(entries, dict):
                raise CatalogError("Expected a mapping of architectures", file_path=path, entry=str(kind_name))

            for name, data in entries.items():
                entry = f"{kind.value}/{name}"
                profiles.append(cls._parse_profile(kind, str(name), data, path, entry))

        logger.debug("Loaded %d architecture profiles from %s", len(profiles), path)
        return cls(profiles)

    @staticmethod
    def _parse_profile(
        kind: ComponentKind, name: str, data: object, path: Path, entry: str
    ) -> ArchitectureProfile:
        if not isinstance(data, dict):
            raise CatalogError("Expected a mapping", file_path=path, entry=entry)

        operands = tuple(data.get("operands") or DEFAULT_OPERANDS)
        formulas = {}
        for field in ("delay", "luts", "ffs"):
            if field not in data:
                raise CatalogError(f"Missing '{field}' formula", file_path=path, entry=entry)
            try:
                formula = compile_expression(str(data[field]))
                # Referencing anything but the operands fails here, not at estimation time
                formula.evaluate({operand: _PROBE_VALUE for operand in operands})
            except ExpressionError as e:
                raise CatalogError(str(e), file_path=path, entry=entry) from e
            formulas[field] = formula

        return ArchitectureProfile(
            component_kind=kind,
            name=name,
            description=str(data.get("description", "")),
            operands=operands,
            delay_formula=formulas["delay"],
            lut_formula=formulas["luts"],
            ff_formula=formulas["ffs"],
            uses_block_ram=bool(data.get("uses_block_ram", False)),
        )

    @property
    def profiles(self) -> Mapping[Tuple[ComponentKind, str], ArchitectureProfile]:
        return self._profiles

    def find(self, kind: ComponentKind, name: str) -> Optional[ArchitectureProfile]:
        """Get a profile, or None if the pair is not registered."""
        return self._profiles.get((kind, name))

    def get(self, kind: ComponentKind, name: str) -> ArchitectureProfile:
        """
        Get a profile by (component kind, architecture name).

        Raises:
            UnknownArchitectureError: If the pair is not registered
        """
        profile = self.find(kind, name)
        if profile is None:
            available = [p.name for p in self.architectures_for(kind)]
            raise UnknownArchitectureError(kind.value, name, available)
        return profile

    def architectures_for(self, kind: ComponentKind) -> List[ArchitectureProfile]:
        """Profiles of one component kind in registration order."""
        return [p for p in self._profiles.values() if p.component_kind == kind]

    def kinds(self) -> List[ComponentKind]:
        seen: List[ComponentKind] = []
        for profile in self._profiles.values():
            if profile.component_kind not in seen:
                seen.append(profile.component_kind)
        return seen

    def __contains__(self, key: object) -> bool:
        return key in self._profiles

    def __iter__(self) -> Iterator[ArchitectureProfile]:
        return iter(self._profiles.values())

    def __len__(self) -> int:
        return len(self._profiles)


@lru_cache(maxsize=None)
def default_architecture_catalog() -> ArchitectureCatalog:
    """Return the bundled architecture catalog, loaded once."""
    return ArchitectureCatalog.load()
