"""
Synthesis lint rules.

Each rule is an isolated predicate ``rule(model, context) -> List[LintFinding]``
over the structural model and the source lines. The rules are lexical
heuristics (line windows and regex co-occurrence), not data-flow or
control-flow analysis; their trigger conditions are kept deliberately simple
and documented on each function.
"""

import re
from dataclasses import dataclass
from typing import Callable, List, Tuple

from rtlcraft.model import AssignmentOperator, DesignModel, LintFinding, Severity
from rtlcraft.parser.hdl import strip_comments

# Lines after an asynchronous-reset block searched for a posedge clock
ASYNC_RESET_WINDOW = 10
# Lines after a case statement searched for case items
CASE_ITEM_WINDOW = 50
WIDE_MUX_THRESHOLD = 8
# Lines before a debug register searched for a keep attribute
KEEP_ATTRIBUTE_WINDOW = 2

_CLOCK_REFERENCE_RE = re.compile(r"\w+_clk\w*")
_BRANCH_RE = re.compile(r"\b(if|case|casez|casex)\b")
_FALLBACK_RE = re.compile(r"\b(else|default)\b")
_ASSIGN_LHS_RE = re.compile(r"\bassign\s+([A-Za-z_]\w*)\s*=")
_EMPTY_SENSITIVITY_RE = re.compile(r"\balways\s*@\s*\(\s*\)")
_CASE_START_RE = re.compile(r"\bcase\s*\(\s*\w+\s*\)")
_CASE_ITEM_RE = re.compile(r"^\s*\d+\s*:")
_STAR_SENSITIVITY_RE = re.compile(r"@\s*\(\s*\*\s*\)|@\s*\*")
_VECTOR_REG_RE = re.compile(r"\breg\b.*\[")


@dataclass(frozen=True)
class LintContext:
    """Source lines shared by every rule.

    ``lines`` are the original lines; ``code_lines`` are the same lines with
    comments blanked out (same count, same columns).
    """

    text: str
    lines: Tuple[str, ...]
    code_lines: Tuple[str, ...]

    @classmethod
    def from_text(cls, text: str) -> "LintContext":
        return cls(
            text=text,
            lines=tuple(text.split("\n")),
            code_lines=tuple(strip_comments(text).split("\n")),
        )


LintRule = Callable[[DesignModel, LintContext], List[LintFinding]]


# --- Clock domain crossing ---


def async_reset_sync_deassert(model: DesignModel, context: LintContext) -> List[LintFinding]:
    """Sequential block sensitive to ``negedge`` with no ``posedge`` in the next 10 lines."""
    findings = []
    for block in model.all_blocks:
        if not block.is_sequential or "negedge" not in block.sensitivity:
            continue
        window = context.code_lines[block.line - 1 : block.line - 1 + ASYNC_RESET_WINDOW]
        if not any("posedge" in line for line in window):
            findings.append(
                LintFinding(
                    line=block.line,
                    severity=Severity.WARNING,
                    rule="async_reset_sync_deassert",
                    message="Consider synchronous deassertion for reset",
                    suggestion="Use: always @(posedge clk or negedge rst_n)",
                )
            )
    return findings


def missing_synchronizer(model: DesignModel, context: LintContext) -> List[LintFinding]:
    """Continuous assignment whose right-hand side references a ``*_clk*`` identifier."""
    return [
        LintFinding(
            line=assignment.line,
            severity=Severity.WARNING,
            rule="missing_synchronizer",
            message="Potential clock domain crossing detected",
            suggestion="Use proper synchronizers for CDC signals",
        )
        for assignment in model.all_assignments
        if _CLOCK_REFERENCE_RE.search(assignment.rhs)
    ]


# --- Combinational logic ---


def inferred_latch(model: DesignModel, context: LintContext) -> List[LintFinding]:
    """Combinational block with ``if``/``case`` but no ``else`` and no ``default``.

    Lexical only: an ``else`` anywhere in the body clears the block.
    """
    findings = []
    for block in model.all_blocks:
        if not block.is_combinational:
            continue
        if _BRANCH_RE.search(block.body) and not _FALLBACK_RE.search(block.body):
            findings.append(
                LintFinding(
                    line=block.end_line,
                    severity=Severity.ERROR,
                    rule="inferred_latch",
                    message="Incomplete if/case statement may infer latch",
                    suggestion="Add else clause or default assignment",
                )
            )
    return findings


def combinational_loop(model: DesignModel, context: LintContext) -> List[LintFinding]:
    """``assign x = ...`` whose line mentions ``x`` more than once."""
    findings = []
    for index, line in enumerate(context.code_lines):
        match = _ASSIGN_LHS_RE.search(line)
        if not match:
            continue
        lhs = match.group(1)
        if len(re.findall(rf"\b{re.escape(lhs)}\b", line)) > 1:
            findings.append(
                LintFinding(
                    line=index + 1,
                    severity=Severity.ERROR,
                    rule="combinational_loop",
                    message=f"Potential combinational loop with signal {lhs}",
                    suggestion="Break the feedback path or use registers",
                )
            )
    return findings


# --- Coding style ---


def blocking_in_sequential(model: DesignModel, context: LintContext) -> List[LintFinding]:
    """Blocking ``=`` statement inside a sequential block."""
    return [
        LintFinding(
            line=statement.line,
            severity=Severity.WARNING,
            rule="blocking_in_sequential",
            message="Use non-blocking assignments (<=) in sequential logic",
            suggestion="Change = to <= for sequential assignments",
        )
        for block in model.all_blocks
        if block.is_sequential
        for statement in block.statements
        if statement.operator == AssignmentOperator.BLOCKING
    ]


def nonblocking_in_combinational(model: DesignModel, context: LintContext) -> List[LintFinding]:
    """Non-blocking ``<=`` statement inside a combinational block."""
    return [
        LintFinding(
            line=statement.line,
            severity=Severity.WARNING,
            rule="nonblocking_in_combinational",
            message="Use blocking assignments (=) in combinational logic",
            suggestion="Change <= to = for combinational assignments",
        )
        for block in model.all_blocks
        if block.is_combinational
        for statement in block.statements
        if statement.operator == AssignmentOperator.NONBLOCKING
    ]


def empty_sensitivity(model: DesignModel, context: LintContext) -> List[LintFinding]:
    """``always @()``."""
    return [
        LintFinding(
            line=index + 1,
            severity=Severity.ERROR,
            rule="empty_sensitivity",
            message="Empty sensitivity list",
            suggestion="Add appropriate signals to sensitivity list",
        )
        for index, line in enumerate(context.code_lines)
        if _EMPTY_SENSITIVITY_RE.search(line)
    ]


# --- Resource optimization ---


def wide_mux(model: DesignModel, context: LintContext) -> List[LintFinding]:
    """``case (sel)`` with more than 8 plain decimal items (``3:``) within a 50-line window.

    Sized literals (``4'd3:``) and ``casez``/``casex`` are not counted.
    """
    findings = []
    lines = context.code_lines
    for index, line in enumerate(lines):
        if not _CASE_START_RE.search(line):
            continue
        count = 0
        for following in lines[index + 1 : min(len(lines), index + CASE_ITEM_WINDOW)]:
            if "endcase" in following:
                break
            if _CASE_ITEM_RE.match(following):
                count += 1
        if count > WIDE_MUX_THRESHOLD:
            findings.append(
                LintFinding(
                    line=index + 1,
                    severity=Severity.INFO,
                    rule="wide_mux",
                    message=f"Large multiplexer ({count} inputs) may impact timing",
                    suggestion="Consider pipeline stages or hierarchical muxing",
                )
            )
    return findings


def dsp_inference(model: DesignModel, context: LintContext) -> List[LintFinding]:
    """Line containing both ``*`` and ``+`` (the ``@(*)`` sensitivity does not count)."""
    findings = []
    for index, line in enumerate(context.code_lines):
        line = _STAR_SENSITIVITY_RE.sub("", line)
        if "*" in line and "+" in line:
            findings.append(
                LintFinding(
                    line=index + 1,
                    severity=Severity.INFO,
                    rule="dsp_inference",
                    message="Potential DSP block inference opportunity",
                    suggestion="Structure as: (A * B) + C for DSP inference",
                )
            )
    return findings


def bram_inference(model: DesignModel, context: LintContext) -> List[LintFinding]:
    """Declared 2-D ``reg`` array."""
    return [
        LintFinding(
            line=signal.line,
            severity=Severity.INFO,
            rule="bram_inference",
            message=f"Memory array '{signal.name}' detected - ensure BRAM inference",
            suggestion="Use synchronous read for BRAM inference",
        )
        for signal in model.all_signals
        if signal.is_memory
    ]


# --- Synthesis attributes ---


def missing_timing_constraint(model: DesignModel, context: LintContext) -> List[LintFinding]:
    """Clock input while the file has neither ``create_clock`` nor ``(* PERIOD``."""
    if "create_clock" in context.text or "(* PERIOD" in context.text:
        return []
    return [
        LintFinding(
            line=port.line,
            severity=Severity.WARNING,
            rule="missing_timing_constraint",
            message=f"Clock signal '{port.name}' without timing constraint",
            suggestion='Add (* PERIOD = "10ns" *) attribute or SDC constraint',
        )
        for port in model.all_ports
        if port.is_clock
    ]


def debug_signal(model: DesignModel, context: LintContext) -> List[LintFinding]:
    """Vector ``reg`` mentioning ``debug`` without ``(* keep`` on it or the two lines above."""
    findings = []
    lines = context.code_lines
    for index, line in enumerate(lines):
        if "debug" not in line or not _VECTOR_REG_RE.search(line):
            continue
        window = lines[max(0, index - KEEP_ATTRIBUTE_WINDOW) : index + 1]
        if not any("(* keep" in candidate for candidate in window):
            findings.append(
                LintFinding(
                    line=index + 1,
                    severity=Severity.INFO,
                    rule="debug_signal",
                    message="Debug signal may be optimized away",
                    suggestion='Add (* keep = "true" *) attribute',
                )
            )
    return findings


# Catalog order is the order findings are reported in
RULES: Tuple[LintRule, ...] = (
    async_reset_sync_deassert,
    missing_synchronizer,
    inferred_latch,
    combinational_loop,
    blocking_in_sequential,
    nonblocking_in_combinational,
    empty_sensitivity,
    wide_mux,
    dsp_inference,
    bram_inference,
    missing_timing_constraint,
    debug_signal,
)

RULE_IDS: Tuple[str, ...] = tuple(rule.__name__ for rule in RULES)
