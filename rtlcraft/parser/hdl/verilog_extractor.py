"""
Structural extractor for Verilog source text.

Turns raw text into a ``DesignModel`` plus a list of ``SyntaxFinding``. The
extractor never raises on malformed input; it reports what it could not make
sense of and returns a best-effort partial model.

Comments are blanked out once per call (pyparsing's C++-style comment
expression) so that character offsets in the stripped text equal offsets in
the original. Each construct kind is then found by its own scan over that
shared text and assigned to the module whose span contains it.
"""

import logging
import re
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set, Tuple

from pyparsing import (
    Literal,
    Suppress,
    Word,
    alphanums,
    alphas,
    cpp_style_comment,
)

from rtlcraft.expr import evaluate_constant
from rtlcraft.model import (
    UNIT_MODULE_NAME,
    Assignment,
    AssignmentOperator,
    BlockKind,
    ComplexityCategory,
    Connection,
    DesignComplexity,
    DesignModel,
    ImbalanceDirection,
    Instance,
    Module,
    ModuleValidation,
    Parameter,
    Port,
    ProceduralAssignment,
    ProceduralBlock,
    Severity,
    Signal,
    SourceStatistics,
    SyntaxFinding,
)
from rtlcraft.utils import LineIndex

logger = logging.getLogger(__name__)

KEYWORDS = frozenset(
    """
    module endmodule input output inout wire reg logic tri supply0 supply1
    always always_ff always_comb always_latch initial assign deassign
    begin end fork join if else case casez casex endcase default
    for while repeat forever generate endgenerate function endfunction
    task endtask parameter localparam defparam genvar integer real time realtime
    posedge negedge or and nand nor xor xnor not buf signed unsigned
    """.split()
)

OPERATORS = frozenset("&& || == != <= >= < > ! & | ^ ~ + - * / % << >> ? : = @ #".split())

SYSTEM_TASKS = frozenset(
    "$display $monitor $write $finish $stop $time $realtime $dumpfile $dumpvars $random $urandom".split()
)

# Comments become spaces; newlines are kept so line numbers do not move
_COMMENT = cpp_style_comment.copy().set_parse_action(lambda t: re.sub(r"[^\n]", " ", t[0]))

_MODULE_RE = re.compile(r"\bmodule\s+([A-Za-z_]\w*)")
_ENDMODULE_RE = re.compile(r"\bendmodule\b")
_SUBPROGRAM_RE = re.compile(r"\b(function|task)\b")

_PARAMETER_RE = re.compile(
    r"\b(parameter|localparam)\b(?:\s+(?:integer|real|signed|unsigned)\b)?\s*(?:\[[^\]]*\])?"
)
_PARAMETER_ITEM_RE = re.compile(r"\s*([A-Za-z_]\w*)\s*=(?!=)\s*(.*)$", re.S)

_RANGE = r"\[([^\]:]+):([^\]]+)\]"
_PORT_RE = re.compile(
    r"\b(input|output|inout)\b"
    r"(?:\s+(wire|reg|logic)\b)?"
    r"(?:\s+(?:signed|unsigned)\b)?"
    r"\s*(?:" + _RANGE + r")?"
    r"\s*([A-Za-z_]\w*(?:\s*,\s*(?!(?:input|output|inout)\b)[A-Za-z_]\w*)*)"
)
_SIGNAL_RE = re.compile(
    r"(?:^|;|\bbegin\b(?:\s*:\s*\w+)?)\s*\b(wire|reg)\b"
    r"(?:\s+(?:signed|unsigned)\b)?"
    r"\s*(?:" + _RANGE + r")?"
    r"\s*([A-Za-z_]\w*(?:\s*\[[^\]]*\])?(?:\s*,\s*[A-Za-z_]\w*(?:\s*\[[^\]]*\])?)*)",
    re.M,
)
_SIGNAL_ITEM_RE = re.compile(r"([A-Za-z_]\w*)\s*(?:\[([^\]:]+)(?::([^\]]+))?\])?")

_INSTANCE_HEAD_RE = re.compile(
    r"\b([A-Za-z_]\w*)\s+(?:#\s*\((?:[^()]|\([^()]*\))*\)\s*)?([A-Za-z_]\w*)\s*\("
)
_IDENTIFIER = Word(alphas + "_", alphanums + "_$")
# The balanced (...) after the head is closed with a depth counter, not a recursive grammar
_CONNECTION_HEAD = Suppress(".") + _IDENTIFIER("port") + Suppress(Literal("("))

_ALWAYS_RE = re.compile(
    r"\b(always_ff|always_comb|always_latch|always)\b\s*(?:@\s*(?:\(([^)]*)\)|(\*)))?"
)
_BEGIN_END_RE = re.compile(r"\b(begin|end)\b")
_CASE_ENDCASE_RE = re.compile(r"\b(case|casez|casex|endcase)\b")
_WORD_RE = re.compile(r"[A-Za-z_$][\w$]*")
_EDGE_RE = re.compile(r"\b(posedge|negedge)\b")
_OR_RE = re.compile(r"\bor\b")

_STATEMENT_RE = re.compile(
    r"(?<![\w$.'])(?:assign\s+)?([A-Za-z_]\w*(?:\s*\[[^\]]*\])*|\{[^}]*\})\s*(<=|=)(?!=)"
)
_NUMBER_LITERAL_RE = re.compile(r"\d*\s*'[sS]?[bBoOdDhH]\s*[0-9a-fA-FxXzZ?_]+|\b\d+(?:\.\d+)?\b")
_IDENT_RE = re.compile(r"\b[A-Za-z_]\w*\b")
_INDEX_RE = re.compile(r"\[[^\]]*\]")

_ASSIGN_RE = re.compile(r"\bassign\s+([^=;]+?)\s*=\s*([^;]+);")
_OPERATOR_CHARS_RE = re.compile(r"[&|^~+\-*/%<>=!]")

_STATEMENT_START_RE = re.compile(r"^[ \t]*(assign|wire|reg|input|output|inout)\b", re.M)
_NEXT_KEYWORD_RE = re.compile(
    r"^[ \t]*(assign|wire|reg|input|output|inout|always|always_ff|always_comb|always_latch|initial|"
    r"parameter|localparam|integer|genvar|generate|endgenerate|function|task|module|endmodule)\b",
    re.M,
)

_TOKEN_RE = re.compile(
    r"\$\w+|\d*'[sS]?[bBoOdDhH][0-9a-fA-FxXzZ_]+|\d+(?:\.\d+)?|\w+|\"[^\"]*\"|[{}();,\[\]@#=<>!&|^~+\-*/%?:.]"
)
_SIZED_LITERAL_RE = re.compile(r"^\d*'[sS]?[bBoOdDhH][0-9a-fA-FxXzZ_]+$")

_IF_RE = re.compile(r"\bif\b")
_CASE_RE = re.compile(r"\bcase[zx]?\b")
_FOR_RE = re.compile(r"\bfor\b")

# Guard for pathological else-if chains
_MAX_STATEMENT_NESTING = 200


def strip_comments(text: str) -> str:
    """Blank out ``//`` and ``/* */`` comments, keeping every offset and newline."""
    return _COMMENT.transform_string(text)


def _paren_pairs(text: str) -> Dict[int, int]:
    """Map the offset of each matched '(' in ``text`` to the offset of its ')'."""
    pairs: Dict[int, int] = {}
    stack: List[int] = []
    for index, char in enumerate(text):
        if char == "(":
            stack.append(index)
        elif char == ")" and stack:
            pairs[stack.pop()] = index
    return pairs


@dataclass
class _ModuleSpan:
    name: str
    start: int
    header_end: int
    end: int


@dataclass
class _ModuleParts:
    ports: List[Port] = field(default_factory=list)
    signals: List[Signal] = field(default_factory=list)
    instances: List[Instance] = field(default_factory=list)
    blocks: List[ProceduralBlock] = field(default_factory=list)
    assignments: List[Assignment] = field(default_factory=list)
    parameters: List[Parameter] = field(default_factory=list)
    declared: Set[str] = field(default_factory=set)

    def is_empty(self) -> bool:
        return not (self.ports or self.signals or self.instances or self.blocks or self.assignments)


class VerilogExtractor:
    """Extracts the structural model of Verilog source text."""

    def extract(self, text: str) -> Tuple[DesignModel, List[SyntaxFinding]]:
        """
        Extract the design model and syntax findings from ``text``.

        Args:
            text: Verilog source text

        Returns:
            Tuple of (DesignModel, syntax findings in source order)
        """
        code = strip_comments(text)
        lines = LineIndex(text)
        located: List[SyntaxFinding] = []

        spans = self._find_module_spans(code, lines, located)
        if not spans:
            logger.warning("No 'module' keyword found in Verilog text")

        parts: Dict[Optional[int], _ModuleParts] = defaultdict(_ModuleParts)
        environments = self._extract_parameters(code, lines, spans, parts)

        subprograms = self._subprogram_spans(code)
        self._extract_ports(code, lines, spans, parts, environments, subprograms, located)
        self._extract_signals(code, lines, spans, parts, environments, located)
        self._extract_instances(code, lines, spans, parts)
        block_spans = self._extract_blocks(code, lines, spans, parts)
        self._extract_assignments(code, lines, spans, parts, block_spans)
        located.extend(self._check_semicolons(code, lines, spans))

        modules = []
        for index, span in enumerate(spans):
            part = parts[index]
            modules.append(
                Module(
                    name=span.name,
                    line=lines.line_of(span.start),
                    end_line=lines.line_of(max(span.start, span.end - 1)),
                    ports=part.ports,
                    signals=part.signals,
                    instances=part.instances,
                    blocks=part.blocks,
                    assignments=part.assignments,
                    parameters=part.parameters,
                )
            )
        orphans = parts[None]
        if not orphans.is_empty():
            logger.debug("Collecting constructs outside any module into %s", UNIT_MODULE_NAME)
            modules.append(
                Module(
                    name=UNIT_MODULE_NAME,
                    line=1,
                    end_line=lines.line_count,
                    ports=orphans.ports,
                    signals=orphans.signals,
                    instances=orphans.instances,
                    blocks=orphans.blocks,
                    assignments=orphans.assignments,
                )
            )

        model = DesignModel(
            modules=modules,
            parameters=orphans.parameters,
            statistics=self.generate_statistics(text, code),
        )
        model.complexity = self.calculate_complexity(model)

        located.sort(key=lambda f: f.line)
        findings = located + self._check_balance(code)
        logger.debug(
            "Extracted %d modules with %d syntax findings", len(model.modules), len(findings)
        )
        return model, findings

    # --- Module spans ---

    def _find_module_spans(
        self, code: str, lines: LineIndex, findings: List[SyntaxFinding]
    ) -> List[_ModuleSpan]:
        spans = []
        starts = list(_MODULE_RE.finditer(code))
        for index, match in enumerate(starts):
            limit = starts[index + 1].start() if index + 1 < len(starts) else len(code)
            end_match = _ENDMODULE_RE.search(code, match.end())
            if end_match and end_match.start() < limit:
                end = end_match.end()
            else:
                end = limit
                findings.append(
                    SyntaxFinding(
                        line=lines.line_of(match.start()),
                        severity=Severity.ERROR,
                        rule="missing_endmodule",
                        message=f"Module '{match.group(1)}' has no matching endmodule",
                        suggestion="Add 'endmodule' after the last statement of the module",
                    )
                )
            spans.append(
                _ModuleSpan(
                    name=match.group(1),
                    start=match.start(),
                    header_end=self._header_end(code, match.end(), end),
                    end=end,
                )
            )
        return spans

    @staticmethod
    def _header_end(code: str, position: int, limit: int) -> int:
        """Offset just past the ';' that closes the module header."""
        depth = 0
        for index in range(position, limit):
            char = code[index]
            if char == "(":
                depth += 1
            elif char == ")":
                depth -= 1
            elif char == ";" and depth <= 0:
                return index + 1
        return position

    @staticmethod
    def _owner(spans: List[_ModuleSpan], offset: int) -> Optional[int]:
        for index, span in enumerate(spans):
            if span.start <= offset < span.end:
                return index
            if span.start > offset:
                break
        return None

    @staticmethod
    def _subprogram_spans(code: str) -> List[Tuple[int, int]]:
        spans = []
        for match in _SUBPROGRAM_RE.finditer(code):
            closer = re.compile(rf"\bend{match.group(1)}\b")
            end_match = closer.search(code, match.end())
            spans.append((match.start(), end_match.end() if end_match else len(code)))
        return spans

    # --- Parameters ---

    def _extract_parameters(
        self,
        code: str,
        lines: LineIndex,
        spans: List[_ModuleSpan],
        parts: Dict[Optional[int], _ModuleParts],
    ) -> Dict[Optional[int], Dict[str, int]]:
        """Extract parameters and resolve them in declaration order.

        Returns the resolved values per module (``None`` for top level).
        """
        environments: Dict[Optional[int], Dict[str, int]] = defaultdict(dict)
        for match in _PARAMETER_RE.finditer(code):
            kind = match.group(1)
            owner = self._owner(spans, match.start())
            for name, value, offset in self._parameter_items(code, match.end()):
                scope = {**environments[None], **environments[owner]}
                resolved = evaluate_constant(value, scope) if value else None
                if resolved is not None:
                    environments[owner][name] = resolved
                parts[owner].parameters.append(
                    Parameter(
                        name=name,
                        value=value,
                        kind=kind,
                        resolved=resolved,
                        line=lines.line_of(offset),
                    )
                )
        return environments

    @staticmethod
    def _parameter_items(code: str, position: int) -> List[Tuple[str, str, int]]:
        """Split ``A = 1, B = A + 1`` at depth-0 commas, stopping at ';' or an unmatched ')'."""
        items = []
        depth = 0
        start = position
        index = position
        while index <= len(code):
            char = code[index] if index < len(code) else ";"
            if char in "([{":
                depth += 1
            elif char in ")]}" and depth > 0:
                depth -= 1
            elif depth == 0 and char in ",;)":
                item = code[start:index]
                if re.match(r"\s*(parameter|localparam)\b", item):
                    break
                match = _PARAMETER_ITEM_RE.match(item)
                if match:
                    items.append((match.group(1), match.group(2).strip(), start + match.start(1)))
                if char != ",":
                    break
                start = index + 1
            index += 1
        return items

    # --- Ports and signals ---

    @staticmethod
    def _resolve_range(
        msb_text: Optional[str], lsb_text: Optional[str], scope: Dict[str, int]
    ) -> Tuple[int, int, int, Optional[str]]:
        """Return (width, msb, lsb, unresolved range text)."""
        if msb_text is None or lsb_text is None:
            return 1, 0, 0, None
        msb = evaluate_constant(msb_text, scope)
        lsb = evaluate_constant(lsb_text, scope)
        if msb is None or lsb is None:
            return 1, 0, 0, f"[{msb_text.strip()}:{lsb_text.strip()}]"
        return abs(msb - lsb) + 1, msb, lsb, None

    @staticmethod
    def _scope(environments: Dict[Optional[int], Dict[str, int]], owner: Optional[int]) -> Dict[str, int]:
        return {**environments[None], **environments[owner]}

    def _declare(
        self,
        part: _ModuleParts,
        name: str,
        what: str,
        module_name: str,
        line: int,
        findings: List[SyntaxFinding],
    ) -> bool:
        key = f"{what}:{name}"
        if key in part.declared:
            findings.append(
                SyntaxFinding(
                    line=line,
                    severity=Severity.WARNING,
                    rule="duplicate_declaration",
                    message=f"Duplicate declaration of {what} '{name}' in module '{module_name}'",
                    suggestion="Remove the repeated declaration",
                )
            )
            return False
        part.declared.add(key)
        return True

    def _extract_ports(self, code, lines, spans, parts, environments, subprograms, findings) -> None:
        for match in _PORT_RE.finditer(code):
            if any(start <= match.start() < end for start, end in subprograms):
                continue
            owner = self._owner(spans, match.start())
            module_name = spans[owner].name if owner is not None else UNIT_MODULE_NAME
            direction, data_type, msb_text, lsb_text, names = match.groups()
            width, msb, lsb, range_text = self._resolve_range(
                msb_text, lsb_text, self._scope(environments, owner)
            )
            line = lines.line_of(match.start())
            for name in (n.strip() for n in names.split(",")):
                if not name or not self._declare(parts[owner], name, "port", module_name, line, findings):
                    continue
                parts[owner].ports.append(
                    Port(
                        name=name,
                        direction=direction,
                        data_type=data_type,
                        width=width,
                        msb=msb,
                        lsb=lsb,
                        range_text=range_text,
                        line=line,
                    )
                )

    def _extract_signals(self, code, lines, spans, parts, environments, findings) -> None:
        for match in _SIGNAL_RE.finditer(code):
            owner = self._owner(spans, match.start(1))
            module_name = spans[owner].name if owner is not None else UNIT_MODULE_NAME
            kind, msb_text, lsb_text, names = match.groups()
            scope = self._scope(environments, owner)
            width, msb, lsb, range_text = self._resolve_range(msb_text, lsb_text, scope)
            line = lines.line_of(match.start(1))
            for item in _SIGNAL_ITEM_RE.finditer(names):
                name, first, second = item.groups()
                if not self._declare(parts[owner], name, "signal", module_name, line, findings):
                    continue
                depth = None
                if first is not None:
                    depth = self._array_depth(first, second, scope)
                parts[owner].signals.append(
                    Signal(
                        name=name,
                        kind=kind,
                        width=width,
                        msb=msb,
                        lsb=lsb,
                        range_text=range_text,
                        is_array=first is not None,
                        array_depth=depth,
                        line=line,
                    )
                )

    @staticmethod
    def _array_depth(first: str, second: Optional[str], scope: Dict[str, int]) -> Optional[int]:
        low = evaluate_constant(first, scope)
        if second is None:
            return low if low and low > 0 else None
        high = evaluate_constant(second, scope)
        if low is None or high is None:
            return None
        return abs(high - low) + 1

    # --- Instances ---

    def _extract_instances(self, code, lines, spans, parts) -> None:
        position = 0
        semicolon = close = -1
        while True:
            match = _INSTANCE_HEAD_RE.search(code, position)
            if match is None:
                break
            module_name, instance_name = match.groups()
            owner = self._owner(spans, match.start())
            if (
                module_name in KEYWORDS
                or instance_name in KEYWORDS
                or (owner is not None and match.start() < spans[owner].header_end)
            ):
                # Retry right after the first word; a real instance may start inside this match
                position = match.end(1)
                continue
            # An instance ends with ");" at the first ';' after its head
            if semicolon < match.end():
                semicolon = code.find(";", match.end())
                if semicolon < 0:
                    break
                close = semicolon - 1
                while close >= 0 and code[close].isspace():
                    close -= 1
            if close < match.end() or code[close] != ")":
                position = match.end(1)
                continue
            parts[owner].instances.append(
                Instance(
                    module_name=module_name,
                    instance_name=instance_name,
                    connections=self.parse_connections(code[match.end():close]),
                    line=lines.line_of(match.start()),
                )
            )
            position = semicolon + 1

    @staticmethod
    def parse_connections(text: str) -> List[Connection]:
        """Parse named connections ``.port(expr)``; positional connections are ignored."""
        connections = []
        pairs = _paren_pairs(text)
        resume = 0
        for tokens, start, end in _CONNECTION_HEAD.scan_string(text):
            if start < resume:
                continue
            close = pairs.get(end - 1)
            if close is None:
                continue
            connections.append(Connection(port=tokens["port"], signal=text[end:close].strip()))
            resume = close + 1
        return connections

    # --- Procedural blocks ---

    def _extract_blocks(self, code, lines, spans, parts) -> List[Tuple[int, int]]:
        block_spans = []
        for match in _ALWAYS_RE.finditer(code):
            keyword, sensitivity, star = match.groups()
            if star:
                sensitivity = star
            sensitivity = (sensitivity or "").strip()
            body_start = match.end()
            body_end = self._statement_end(code, body_start)
            owner = self._owner(spans, match.start())
            body = code[body_start:body_end]

            statements = self._statements(body, body_start, lines)
            reads: List[str] = []
            writes: List[str] = []
            for statement in statements:
                self._extend_unique(writes, self._written_names(statement.lhs))
                self._extend_unique(reads, self._read_names(statement.rhs))

            line = lines.line_of(match.start())
            parts[owner].blocks.append(
                ProceduralBlock(
                    sensitivity=sensitivity,
                    kind=self.classify_block(keyword, sensitivity),
                    keyword=keyword,
                    body=body.strip(),
                    line=line,
                    end_line=max(line, lines.line_of(max(body_start, body_end - 1))),
                    reads=reads,
                    writes=writes,
                    statements=statements,
                )
            )
            block_spans.append((match.start(), body_end))
        return block_spans

    @staticmethod
    def classify_block(keyword: str, sensitivity: str) -> BlockKind:
        """Classify a procedural block from its keyword and sensitivity list."""
        if keyword == "always_ff" or _EDGE_RE.search(sensitivity):
            return BlockKind.SEQUENTIAL
        if keyword == "always_comb":
            return BlockKind.COMBINATIONAL
        if sensitivity == "*" or _OR_RE.search(sensitivity) or "," in sensitivity:
            return BlockKind.COMBINATIONAL
        return BlockKind.UNKNOWN

    def _statement_end(self, code: str, position: int, nesting: int = 0) -> int:
        """Offset just past the statement starting at ``position``.

        Understands ``begin``/``end`` and ``case``/``endcase`` nesting, ``if``
        with an optional ``else`` and loop headers; anything else ends at the
        next ';'.
        """
        position = self._skip_space(code, position)
        if position >= len(code):
            return len(code)
        word_match = _WORD_RE.match(code, position)
        word = word_match.group(0) if word_match else ""

        if nesting < _MAX_STATEMENT_NESTING:
            if word == "begin":
                return self._matching_close(code, word_match.end(), _BEGIN_END_RE, "end")
            if word in ("case", "casez", "casex"):
                return self._matching_close(code, word_match.end(), _CASE_ENDCASE_RE, "endcase")
            if word == "if":
                end = self._statement_end(code, self._skip_group(code, word_match.end()), nesting + 1)
                following = _WORD_RE.match(code, self._skip_space(code, end))
                if following and following.group(0) == "else":
                    end = self._statement_end(code, following.end(), nesting + 1)
                return end
            if word in ("for", "while", "repeat"):
                return self._statement_end(code, self._skip_group(code, word_match.end()), nesting + 1)
            if word == "forever":
                return self._statement_end(code, word_match.end(), nesting + 1)

        semicolon = code.find(";", position)
        return len(code) if semicolon < 0 else semicolon + 1

    @staticmethod
    def _skip_space(code: str, position: int) -> int:
        while position < len(code) and code[position].isspace():
            position += 1
        return position

    def _skip_group(self, code: str, position: int) -> int:
        """Skip a parenthesized group starting at ``position`` (after whitespace)."""
        position = self._skip_space(code, position)
        if position >= len(code) or code[position] != "(":
            return position
        depth = 0
        for index in range(position, len(code)):
            if code[index] == "(":
                depth += 1
            elif code[index] == ")":
                depth -= 1
                if depth == 0:
                    return index + 1
        return len(code)

    @staticmethod
    def _matching_close(code: str, position: int, pattern: re.Pattern, closer: str) -> int:
        depth = 1
        for match in pattern.finditer(code, position):
            depth += -1 if match.group(1) == closer else 1
            if depth == 0:
                return match.end()
        return len(code)

    def _statements(self, body: str, offset: int, lines: LineIndex) -> List[ProceduralAssignment]:
        """Procedural assignments at parenthesis depth 0 of ``body``."""
        depths = []
        depth = 0
        for char in body:
            depths.append(depth)
            if char == "(":
                depth += 1
            elif char == ")":
                depth = max(0, depth - 1)

        statements = []
        position = 0
        while True:
            match = _STATEMENT_RE.search(body, position)
            if match is None:
                break
            lhs, operator = match.group(1), match.group(2)
            if depths[match.start()] > 0 or lhs in KEYWORDS:
                position = match.end()
                continue
            semicolon = body.find(";", match.end())
            rhs_end = len(body) if semicolon < 0 else semicolon
            statements.append(
                ProceduralAssignment(
                    lhs=re.sub(r"\s+", " ", lhs.strip()),
                    rhs=body[match.end():rhs_end].strip(),
                    operator=(
                        AssignmentOperator.NONBLOCKING if operator == "<=" else AssignmentOperator.BLOCKING
                    ),
                    line=lines.line_of(offset + match.start()),
                )
            )
            position = rhs_end
        return statements

    @staticmethod
    def _extend_unique(target: List[str], names: List[str]) -> None:
        for name in names:
            if name not in target:
                target.append(name)

    @staticmethod
    def _written_names(lhs: str) -> List[str]:
        return [n for n in _IDENT_RE.findall(_INDEX_RE.sub(" ", lhs)) if n not in KEYWORDS]

    @staticmethod
    def _read_names(rhs: str) -> List[str]:
        return [n for n in _IDENT_RE.findall(_NUMBER_LITERAL_RE.sub(" ", rhs)) if n not in KEYWORDS]

    # --- Continuous assignments ---

    def _extract_assignments(self, code, lines, spans, parts, block_spans) -> None:
        for match in _ASSIGN_RE.finditer(code):
            if any(start <= match.start() < end for start, end in block_spans):
                continue
            owner = self._owner(spans, match.start())
            rhs = match.group(2).strip()
            parts[owner].assignments.append(
                Assignment(
                    lhs=match.group(1).strip(),
                    rhs=rhs,
                    line=lines.line_of(match.start()),
                    complexity=expression_complexity(rhs),
                )
            )

    # --- Syntax checks ---

    def _check_semicolons(self, code, lines, spans) -> List[SyntaxFinding]:
        """Declarations and assignments whose ';' comes after the next statement keyword."""
        findings = []
        for span in spans:
            body_end = span.end
            end_match = _ENDMODULE_RE.search(code, span.header_end, span.end)
            if end_match:
                body_end = end_match.start()
            for match in _STATEMENT_START_RE.finditer(code, span.header_end, body_end):
                semicolon = code.find(";", match.end(), body_end)
                following = _NEXT_KEYWORD_RE.search(code, match.end(), body_end)
                next_start = following.start(1) if following else body_end
                if semicolon < 0 or semicolon > next_start:
                    findings.append(
                        SyntaxFinding(
                            line=lines.line_of(match.start(1)),
                            severity=Severity.ERROR,
                            rule="missing_semicolon",
                            message="Missing semicolon at end of statement",
                            suggestion=f"Terminate the '{match.group(1)}' statement with ';'",
                        )
                    )
        return findings

    @staticmethod
    def _check_balance(code: str) -> List[SyntaxFinding]:
        findings = []
        checks = (
            ("unbalanced_parentheses", "parentheses", "closing parentheses",
             code.count("(") - code.count(")")),
            ("unbalanced_brackets", "brackets", "closing brackets",
             code.count("[") - code.count("]")),
            ("unbalanced_begin_end", "begin/end", "end statements",
             len(re.findall(r"\bbegin\b", code)) - len(re.findall(r"\bend\b", code))),
        )
        for rule, what, closers, count in checks:
            if count == 0:
                continue
            direction = ImbalanceDirection.MISSING if count > 0 else ImbalanceDirection.EXTRA
            findings.append(
                SyntaxFinding(
                    line=None,
                    severity=Severity.ERROR,
                    rule=rule,
                    message=f"Unbalanced {what}: {direction.value} {abs(count)} {closers}",
                    magnitude=abs(count),
                    direction=direction,
                )
            )
        return findings

    # --- Statistics ---

    @staticmethod
    def token_type(token: str) -> str:
        if token in KEYWORDS:
            return "keyword"
        if token in OPERATORS:
            return "operator"
        if token in SYSTEM_TASKS:
            return "system_task"
        if token.isdigit():
            return "number"
        if _SIZED_LITERAL_RE.match(token):
            return "number_literal"
        if token.startswith('"') and token.endswith('"') and len(token) > 1:
            return "string"
        if re.match(r"^[A-Za-z_]\w*$", token):
            return "identifier"
        if token in "{}();,[]":
            return "punctuation"
        return "unknown"

    def generate_statistics(self, text: str, code: Optional[str] = None) -> SourceStatistics:
        """Line counts and token distribution of ``text``."""
        if code is None:
            code = strip_comments(text)
        lines = text.split("\n")
        non_empty = sum(1 for line in lines if line.strip())
        comment_lines = sum(1 for line in lines if line.strip().startswith("//"))
        tokens = _TOKEN_RE.findall(code)
        distribution: Dict[str, int] = {}
        for token in tokens:
            kind = self.token_type(token)
            distribution[kind] = distribution.get(kind, 0) + 1
        return SourceStatistics(
            total_lines=len(lines),
            code_lines=non_empty - comment_lines,
            comment_lines=comment_lines,
            blank_lines=len(lines) - non_empty,
            total_tokens=len(tokens),
            token_distribution=distribution,
            avg_line_length=round(sum(len(line) for line in lines) / len(lines), 2),
        )

    @staticmethod
    def calculate_complexity(model: DesignModel) -> DesignComplexity:
        """Structural complexity: modules, blocks, branches, loops and assignment operators."""
        modules = [m for m in model.modules if not m.is_unit]
        total = 2 * len(modules)
        for block in model.all_blocks:
            total += 3
            total += 2 * len(_IF_RE.findall(block.body))
            total += 3 * len(_CASE_RE.findall(block.body))
            total += 4 * len(_FOR_RE.findall(block.body))
        total += sum(a.complexity for a in model.all_assignments)
        return DesignComplexity(
            total=total,
            per_module=round(total / len(modules), 2) if modules else 0.0,
            category=ComplexityCategory.from_score(total),
        )


def expression_complexity(expression: str) -> int:
    """Operator characters + matched parenthesis pairs + 2 per ternary '?'."""
    operators = len(_OPERATOR_CHARS_RE.findall(expression))
    pairs = 0
    open_count = 0
    for char in expression:
        if char == "(":
            open_count += 1
        elif char == ")" and open_count > 0:
            open_count -= 1
            pairs += 1
    return operators + pairs + 2 * expression.count("?")


def extract(text: str) -> Tuple[DesignModel, List[SyntaxFinding]]:
    """Extract the design model and syntax findings from Verilog text."""
    return VerilogExtractor().extract(text)


def validate_module(text: str) -> ModuleValidation:
    """
    Quick structural validation of a module text.

    Checks for the ``module`` declaration, the ``endmodule`` statement and a
    non-empty port list.
    """
    code = strip_comments(text)
    errors = []
    warnings = []
    if not re.search(r"\bmodule\b", code):
        errors.append("Missing module declaration")
    if not _ENDMODULE_RE.search(code):
        errors.append("Missing endmodule statement")
    header = re.search(r"\bmodule\s+\w+\s*(?:#\s*\((?:[^()]|\([^()]*\))*\)\s*)?\(([^)]*)\)", code)
    if not header or not header.group(1).strip():
        warnings.append("Module has no ports")
    return ModuleValidation(is_valid=not errors, errors=errors, warnings=warnings)
