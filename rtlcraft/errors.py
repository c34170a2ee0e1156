"""Exceptions raised by the catalogs and the estimation engine.

Malformed HDL never raises: it is reported as ``SyntaxFinding`` /
``LintFinding`` data. The exceptions below are caller-contract violations
that abort a single estimation call.
"""

from pathlib import Path
from typing import Iterable, Optional


class RtlcraftError(Exception):
    """Base class for all rtlcraft errors."""


class CatalogError(RtlcraftError):
    """A catalog data file is missing or malformed."""

    def __init__(self, message: str, file_path: Optional[Path] = None, entry: Optional[str] = None):
        self.file_path = file_path
        self.entry = entry
        super().__init__(self._format_message(message))

    def _format_message(self, message: str) -> str:
        """Format error message with file and entry information."""
        parts = []
        if self.file_path:
            parts.append(f"File: {self.file_path}")
        if self.entry:
            parts.append(f"Entry: {self.entry}")
        parts.append(message)
        return " | ".join(parts)


class EstimationError(RtlcraftError):
    """Base class for failures of a single estimation call."""


class UnknownDeviceError(EstimationError, KeyError):
    """The requested device is not in the device catalog."""

    def __init__(self, device: str, available: Iterable[str] = ()):
        self.device = device
        self.available = list(available)
        message = f"Unsupported device: {device}"
        if self.available:
            message += f" (available: {', '.join(self.available)})"
        super().__init__(message)

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return self.args[0]


class UnknownArchitectureError(EstimationError, KeyError):
    """The (component kind, architecture) pair is not in the architecture catalog."""

    def __init__(self, component_kind: str, architecture: str, available: Iterable[str] = ()):
        self.component_kind = component_kind
        self.architecture = architecture
        self.available = list(available)
        message = f"Unknown architecture '{architecture}' for component '{component_kind}'"
        if self.available:
            message += f" (available: {', '.join(self.available)})"
        super().__init__(message)

    def __str__(self) -> str:
        return self.args[0]


class MissingParameterError(EstimationError, ValueError):
    """A parameter required by the selected profile was not supplied."""

    def __init__(self, parameter: str, context: str):
        self.parameter = parameter
        super().__init__(f"Missing required parameter '{parameter}' for {context}")


class InvalidParameterError(EstimationError, ValueError):
    """A supplied parameter cannot be read as the number it must be."""

    def __init__(self, parameter: str, value: object):
        self.parameter = parameter
        self.value = value
        super().__init__(f"Invalid value for parameter '{parameter}': {value!r}")


class ExpressionError(RtlcraftError, ValueError):
    """A constant expression could not be parsed or evaluated."""
