"""Bundled device and architecture catalogs."""

from .architectures import ArchitectureCatalog, ArchitectureProfile, default_architecture_catalog
from .devices import DeviceCapacity, DeviceCatalog, DeviceProfile, default_device_catalog

__all__ = [
    "ArchitectureCatalog",
    "ArchitectureProfile",
    "DeviceCapacity",
    "DeviceCatalog",
    "DeviceProfile",
    "default_architecture_catalog",
    "default_device_catalog",
]
