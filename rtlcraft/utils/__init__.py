"""Shared utility helpers for rtlcraft."""

import bisect
from enum import Enum
from pathlib import Path
from typing import Any, List, Optional

# Bundled catalog data files live next to the catalog loaders
CATALOG_DATA_DIR = Path(__file__).resolve().parent.parent / "catalog"
DEVICES_PATH = CATALOG_DATA_DIR / "devices.yml"
ARCHITECTURES_PATH = CATALOG_DATA_DIR / "architectures.yml"


class LineIndex:
    """Map character offsets of a text onto 1-based line numbers.

    The line-start table is built once; lookups are a binary search, which
    gives the same answer as counting the newlines that precede the offset.

    Example:
        >>> LineIndex("a\\nb\\nc").line_of(2)
        2
    """

    def __init__(self, text: str):
        self._starts: List[int] = [0]
        for position, char in enumerate(text):
            if char == "\n":
                self._starts.append(position + 1)

    def line_of(self, offset: int) -> int:
        """Return the 1-based line containing ``offset``."""
        return bisect.bisect_right(self._starts, offset)

    @property
    def line_count(self) -> int:
        return len(self._starts)


def range_width(msb: Optional[int], lsb: Optional[int]) -> int:
    """Width of an inclusive ``[msb:lsb]`` range; ``1`` when no range is given.

    Descending and ascending ranges give the same width.
    """
    if msb is None or lsb is None:
        return 1
    return abs(msb - lsb) + 1


def enum_value(v: Any) -> str:
    """Extract the string value from an Enum member or return str(v)."""
    return v.value if isinstance(v, Enum) else str(v)


def filter_none(data: dict) -> dict:
    """Remove keys with None values from a dictionary.

    Passing None explicitly to pydantic fields with defaults fails
    validation; dropping the keys lets the model defaults apply.
    """
    return {k: v for k, v in data.items() if v is not None}
