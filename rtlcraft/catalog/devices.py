"""
Device catalog.

Provides access to the target device profiles (delays, capacities, power
coefficients) from the bundled devices.yml file.
"""

import logging
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Iterator, List, Mapping, Optional

import yaml
from pydantic import Field, ValidationError

from rtlcraft.errors import CatalogError, UnknownDeviceError
from rtlcraft.model.base import FrozenModel
from rtlcraft.utils import DEVICES_PATH

logger = logging.getLogger(__name__)

# Default path to device definitions
DEFAULT_DEVICES_PATH = DEVICES_PATH


class DeviceCapacity(FrozenModel):
    """Available resources of a device."""

    luts: int = Field(..., gt=0)
    ffs: int = Field(..., gt=0)
    brams: int = Field(..., gt=0)
    dsps: int = Field(..., gt=0)
    ios: int = Field(..., gt=0)

    def as_dict(self) -> Dict[str, int]:
        return {"luts": self.luts, "ffs": self.ffs, "brams": self.brams, "dsps": self.dsps, "ios": self.ios}


class DeviceProfile(FrozenModel):
    """Timing, power and capacity figures of one target device."""

    name: str
    family: str = ""
    part: str = ""
    capacity: DeviceCapacity
    lut_delay: float = Field(..., gt=0, description="LUT delay (ns)")
    ff_delay: float = Field(..., gt=0, description="Clock-to-out delay (ns)")
    carry_delay: float = Field(..., gt=0, description="Carry chain delay per bit (ns)")
    routing_factor: float = Field(..., ge=0)
    power_base: float = Field(..., ge=0, description="Static power at 25 C, 1.0 V (mW)")
    power_per_lut: float = Field(..., ge=0, description="mW per LUT per MHz at full toggle")
    power_per_ff: float = Field(..., ge=0, description="mW per FF per MHz at full toggle")
    max_frequency: float = Field(..., gt=0, description="Fabric frequency limit (MHz)")
    temperature_factor: float = Field(..., gt=0, description="Delay derating per 10 C")
    voltage_exponent: float = Field(..., gt=0)


class DeviceCatalog:
    """
    Immutable table of device profiles.

    Profiles keep the order of the data file.
    """

    def __init__(self, profiles: Mapping[str, DeviceProfile]):
        """Initialize with pre-loaded profiles."""
        self._profiles = MappingProxyType(dict(profiles))

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "DeviceCatalog":
        """
        Load device profiles from a YAML file.

        Args:
            path: Path to a devices.yml file (defaults to the bundled catalog)

        Returns:
            DeviceCatalog instance

        Raises:
            CatalogError: If the file is missing or an entry is malformed
        """
        path = Path(path) if path else DEFAULT_DEVICES_PATH

        if not path.exists():
            raise CatalogError("Device catalog file not found", file_path=path)

        try:
            with open(path, "r") as f:
                raw_data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise CatalogError(f"YAML syntax error: {e}", file_path=path) from e

        if not isinstance(raw_data, dict):
            raise CatalogError("Expected a mapping of device name to profile", file_path=path)

        profiles = {}
        for name, data in raw_data.items():
            if not isinstance(data, dict):
                raise CatalogError("Expected a mapping", file_path=path, entry=str(name))
            try:
                profiles[str(name)] = DeviceProfile(name=str(name), **data)
            except (ValidationError, TypeError) as e:
                raise CatalogError(str(e), file_path=path, entry=str(name)) from e

        logger.debug("Loaded %d device profiles from %s", len(profiles), path)
        return cls(profiles)

    @property
    def profiles(self) -> Mapping[str, DeviceProfile]:
        """Read-only view of all profiles."""
        return self._profiles

    def names(self) -> List[str]:
        """Device names in catalog order."""
        return list(self._profiles.keys())

    def get(self, name: str) -> DeviceProfile:
        """
        Get a device profile by name.

        Raises:
            UnknownDeviceError: If no profile has that name
        """
        try:
            return self._profiles[name]
        except KeyError:
            raise UnknownDeviceError(name, self.names()) from None

    def __contains__(self, name: object) -> bool:
        return name in self._profiles

    def __iter__(self) -> Iterator[DeviceProfile]:
        return iter(self._profiles.values())

    def __len__(self) -> int:
        return len(self._profiles)


@lru_cache(maxsize=None)
def default_device_catalog() -> DeviceCatalog:
    """Return the bundled device catalog, loaded once."""
    return DeviceCatalog.load()
