"""Definition/reference analysis for Python sources.

WHY: Cross-links (jump from a use to its definition) and hover docs are
what make a literate listing navigable. For Python files the standard
``ast`` module knows where functions and classes are defined and where
names are loaded, which is enough for intra-file navigation.

HOW: A first pass collects every ``def``/``class`` with its qualified
name, the exact span of its name, its signature and docstring. A second
pass marks each loaded ``Name`` bound to a collected definition as a
reference to it. Symbol ids are the qualified names made safe for use
as HTML anchors.

RULES:
- ast columns are UTF-8 byte offsets; emitted columns are code points
- Definition tokens carry is_definition and the definition's doc_text
- Reference tokens carry is_reference, the same symbol and doc_text
- A bare name resolves to the outermost definition with that name
- Syntax errors raise AnalyzerError (the file cannot be indexed)
"""

from __future__ import annotations

import ast
import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from cire.analyzers.base import AnalyzerError, BaseAnalyzer
from cire.core.ir import Annotation, Position, Span, Token
from cire.core.positions import char_column, split_lines

# Characters kept verbatim in anchor ids; everything else is percent-encoded.
_SAFE_ID_CHARS = frozenset(
    "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789-_./~"
)


def generate_id(symbol: str) -> str:
    """Encode a symbol as an anchor id: spaces become "+", unsafe chars %XX."""
    parts: List[str] = []
    for ch in symbol:
        if ch in _SAFE_ID_CHARS:
            parts.append(ch)
        elif ch == " ":
            parts.append("+")
        else:
            parts.append("%{:02X}".format(ord(ch)))
    return "".join(parts)


@dataclass(frozen=True)
class _Definition:
    qualname: str
    span: Span
    doc_text: Tuple[str, ...]
    depth: int


def _signature(node: ast.AST) -> str:
    if isinstance(node, ast.ClassDef):
        bases = ", ".join(ast.unparse(b) for b in node.bases)
        return "class {}({})".format(node.name, bases) if bases else "class {}".format(node.name)
    prefix = "async def" if isinstance(node, ast.AsyncFunctionDef) else "def"
    sig = "{} {}({})".format(prefix, node.name, ast.unparse(node.args))
    if node.returns is not None:
        sig += " -> {}".format(ast.unparse(node.returns))
    return sig


def _name_span(node: ast.AST, lines: Sequence[str]) -> Optional[Span]:
    """Locate the name of a def/class statement in the source lines."""
    line_idx = node.lineno - 1
    if not 0 <= line_idx < len(lines):
        return None
    line = lines[line_idx]
    start_col = char_column(line, node.col_offset)
    pattern = re.compile(r"\b(?:def|class)\s+(" + re.escape(node.name) + r")\b")
    match = pattern.search(line, start_col)
    if match is None:
        return None
    return Span(
        Position(line_idx, match.start(1)),
        Position(line_idx, match.end(1)),
    )


class _DefinitionCollector(ast.NodeVisitor):
    def __init__(self, lines: Sequence[str]) -> None:
        self.lines = lines
        self.scope: List[str] = []
        self.definitions: List[_Definition] = []

    def _visit_definition(self, node: ast.AST) -> None:
        qualname = ".".join(self.scope + [node.name])
        span = _name_span(node, self.lines)
        if span is not None:
            doc: List[str] = [_signature(node)]
            docstring = ast.get_docstring(node)
            if docstring:
                doc.append(docstring)
            self.definitions.append(_Definition(
                qualname=qualname,
                span=span,
                doc_text=tuple(doc),
                depth=len(self.scope),
            ))
        self.scope.append(node.name)
        self.generic_visit(node)
        self.scope.pop()

    visit_FunctionDef = _visit_definition
    visit_AsyncFunctionDef = _visit_definition
    visit_ClassDef = _visit_definition


class SymbolAnalyzer(BaseAnalyzer):
    """Intra-file definitions and references for Python sources."""

    @property
    def name(self) -> str:
        return "Python symbols"

    def analyze(self, source: str) -> List[Token]:
        try:
            tree = ast.parse(source)
        except (SyntaxError, ValueError) as e:
            raise AnalyzerError("{}: cannot parse source: {}".format(self.name, e)) from e

        lines = split_lines(source)
        collector = _DefinitionCollector(lines)
        collector.visit(tree)

        tokens: List[Token] = []
        by_name: Dict[str, _Definition] = {}
        for definition in collector.definitions:
            symbol = generate_id(definition.qualname)
            tokens.append(Token(
                span=definition.span,
                annotation=Annotation(
                    symbol=symbol,
                    is_definition=True,
                    doc_text=definition.doc_text,
                ),
            ))
            simple = definition.qualname.rsplit(".", 1)[-1]
            known = by_name.get(simple)
            if known is None or definition.depth < known.depth:
                by_name[simple] = definition

        for node in ast.walk(tree):
            if not isinstance(node, ast.Name) or not isinstance(node.ctx, ast.Load):
                continue
            definition = by_name.get(node.id)
            if definition is None or node.end_lineno is None or node.end_col_offset is None:
                continue
            start_line = lines[node.lineno - 1]
            end_line = lines[node.end_lineno - 1]
            tokens.append(Token(
                span=Span(
                    Position(node.lineno - 1, char_column(start_line, node.col_offset)),
                    Position(node.end_lineno - 1, char_column(end_line, node.end_col_offset)),
                ),
                annotation=Annotation(
                    symbol=generate_id(definition.qualname),
                    is_reference=True,
                    doc_text=definition.doc_text,
                ),
            ))

        return tokens
