"""Verilog structural extraction."""

from .verilog_extractor import VerilogExtractor, expression_complexity, extract, strip_comments, validate_module

__all__ = ["VerilogExtractor", "expression_complexity", "extract", "strip_comments", "validate_module"]
