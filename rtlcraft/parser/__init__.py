"""
Parsers for HDL source text.
"""

from .hdl import VerilogExtractor, extract, strip_comments, validate_module

__all__ = ["VerilogExtractor", "extract", "strip_comments", "validate_module"]
