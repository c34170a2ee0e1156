"""Static-analysis rules for synthesizable Verilog."""

from .checker import RuleChecker, check, generate_recommendations
from .rules import RULE_IDS, RULES, LintContext

__all__ = ["RuleChecker", "check", "generate_recommendations", "RULES", "RULE_IDS", "LintContext"]
