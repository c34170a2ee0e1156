"""
Device and architecture catalogs.
"""

import pytest

from rtlcraft.catalog import (
    ArchitectureCatalog,
    DeviceCatalog,
    default_architecture_catalog,
    default_device_catalog,
)
from rtlcraft.errors import CatalogError, MissingParameterError, UnknownArchitectureError, UnknownDeviceError
from rtlcraft.model import ComponentKind

DEVICE_YAML = """\
Tiny-1:
  capacity: {luts: 100, ffs: 200, brams: 1, dsps: 1, ios: 10}
  lut_delay: 0.2
  ff_delay: 0.1
  carry_delay: 0.05
  routing_factor: 0.5
  power_base: 10
  power_per_lut: 0.1
  power_per_ff: 0.05
  max_frequency: 200
  temperature_factor: 1.1
  voltage_exponent: 2
"""


def write(tmp_path, name, content):
    path = tmp_path / name
    path.write_text(content)
    return path


class TestDeviceCatalog:
    def test_bundled_devices(self):
        catalog = default_device_catalog()

        assert catalog.names() == ["Artix-7", "Kintex-7", "Zynq-7020", "Cyclone-V", "Stratix-10"]
        assert len(catalog) == 5
        assert "Artix-7" in catalog

        artix = catalog.get("Artix-7")
        assert artix.capacity.luts == 20800
        assert artix.lut_delay == 0.124
        assert artix.max_frequency == 450

    def test_default_catalog_is_cached(self):
        assert default_device_catalog() is default_device_catalog()

    def test_profiles_are_read_only(self):
        catalog = default_device_catalog()
        with pytest.raises(TypeError):
            catalog.profiles["Fake"] = catalog.get("Artix-7")

    def test_unknown_device(self):
        with pytest.raises(UnknownDeviceError) as exc_info:
            default_device_catalog().get("Virtex-2")

        assert exc_info.value.device == "Virtex-2"
        assert "Artix-7" in exc_info.value.available

    def test_load_custom_file(self, tmp_path):
        catalog = DeviceCatalog.load(write(tmp_path, "devices.yml", DEVICE_YAML))

        tiny = catalog.get("Tiny-1")
        assert tiny.name == "Tiny-1"
        assert tiny.capacity.as_dict() == {"luts": 100, "ffs": 200, "brams": 1, "dsps": 1, "ios": 10}

    def test_missing_file(self, tmp_path):
        with pytest.raises(CatalogError, match="not found"):
            DeviceCatalog.load(tmp_path / "missing.yml")

    def test_yaml_syntax_error(self, tmp_path):
        with pytest.raises(CatalogError, match="YAML syntax error"):
            DeviceCatalog.load(write(tmp_path, "devices.yml", "Tiny-1: [unclosed\n"))

    def test_invalid_entry(self, tmp_path):
        content = DEVICE_YAML.replace("luts: 100", "luts: 0")
        with pytest.raises(CatalogError) as exc_info:
            DeviceCatalog.load(write(tmp_path, "devices.yml", content))

        assert exc_info.value.entry == "Tiny-1"
        assert "Entry: Tiny-1" in str(exc_info.value)

    def test_missing_field(self, tmp_path):
        content = DEVICE_YAML.replace("  lut_delay: 0.2\n", "")
        with pytest.raises(CatalogError):
            DeviceCatalog.load(write(tmp_path, "devices.yml", content))


class TestArchitectureCatalog:
    def test_bundled_architectures(self):
        catalog = default_architecture_catalog()

        assert len(catalog) == 8
        assert catalog.kinds() == [ComponentKind.ADDER, ComponentKind.MULTIPLIER, ComponentKind.MEMORY]
        assert [p.name for p in catalog.architectures_for(ComponentKind.ADDER)] == [
            "ripple_carry",
            "carry_lookahead",
            "carry_select",
        ]
        assert catalog.architectures_for(ComponentKind.GENERIC) == []

    def test_formulas(self):
        catalog = default_architecture_catalog()

        lookahead = catalog.get(ComponentKind.ADDER, "carry_lookahead")
        assert lookahead.delay(16) == pytest.approx(1.7)
        assert lookahead.luts(16) == 24.0
        assert lookahead.ffs(16) == 17.0

        distributed = catalog.get(ComponentKind.MEMORY, "distributed")
        assert distributed.operands == ("depth", "width")
        assert distributed.luts(32, 256) == 256.0

    def test_block_ram_flag(self):
        catalog = default_architecture_catalog()
        assert catalog.get(ComponentKind.MEMORY, "block_ram").uses_block_ram
        assert not catalog.get(ComponentKind.MEMORY, "distributed").uses_block_ram

    def test_depth_required(self):
        distributed = default_architecture_catalog().get(ComponentKind.MEMORY, "distributed")
        with pytest.raises(MissingParameterError, match="memory/distributed"):
            distributed.delay(32)

    def test_unknown_architecture(self):
        catalog = default_architecture_catalog()

        assert catalog.find(ComponentKind.ADDER, "kogge_stone") is None
        with pytest.raises(UnknownArchitectureError) as exc_info:
            catalog.get(ComponentKind.ADDER, "kogge_stone")
        assert exc_info.value.available == ["ripple_carry", "carry_lookahead", "carry_select"]

    def test_architecture_names_are_per_kind(self):
        with pytest.raises(UnknownArchitectureError):
            default_architecture_catalog().get(ComponentKind.MULTIPLIER, "ripple_carry")

    def test_load_custom_file(self, tmp_path):
        content = "adder:\n  tiny:\n    delay: width * 0.1\n    luts: width\n    ffs: \"0\"\n"
        catalog = ArchitectureCatalog.load(write(tmp_path, "architectures.yml", content))

        tiny = catalog.get(ComponentKind.ADDER, "tiny")
        assert tiny.delay(10) == pytest.approx(1.0)
        assert tiny.description == ""

    @pytest.mark.parametrize(
        "content, message",
        [
            ("fft:\n  radix2:\n    delay: \"1\"\n    luts: \"1\"\n    ffs: \"1\"\n", "Unknown component kind"),
            ("adder:\n  broken:\n    delay: width *\n    luts: width\n    ffs: width\n", "adder/broken"),
            ("adder:\n  broken:\n    delay: depth\n    luts: width\n    ffs: width\n", "adder/broken"),
            ("adder:\n  broken:\n    delay: width\n    luts: width\n", "Missing 'ffs' formula"),
            ("adder:\n  broken:\n    delay: foo(width)\n    luts: width\n    ffs: width\n", "adder/broken"),
        ],
    )
    def test_invalid_entries(self, tmp_path, content, message):
        with pytest.raises(CatalogError, match=message):
            ArchitectureCatalog.load(write(tmp_path, "architectures.yml", content))
