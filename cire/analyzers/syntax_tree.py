"""Tree-sitter parsing shared by the multi-language analyzers.

WHY: Comments and highlight classes for languages other than Python can
only be found reliably by a real parser: a comment marker inside a string
literal, a heredoc or a pragma is not a comment. tree-sitter grammars for
every supported language come prebuilt in tree_sitter_language_pack.

HOW: parse_source() maps a cire language name to a grammar, parses the
UTF-8 encoded source and wraps the tree in a ParsedSource, which converts
tree-sitter points (row, byte column) into cire Positions (line,
code-point column). iter_nodes() walks the tree in source order without
recursion.

RULES:
- Unknown languages and missing grammars raise AnalyzerError
- tree-sitter never fails on bad input; syntax errors become ERROR nodes
- Columns are converted from UTF-8 bytes to code points per line
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, FrozenSet, Iterator, List, Optional, Tuple

from tree_sitter_language_pack import get_parser

from cire.analyzers.base import AnalyzerError
from cire.core.ir import Position, Span
from cire.core.positions import char_column, split_lines

# cire language name → tree_sitter_language_pack grammar name
GRAMMARS = {
    "go": "go",
    "golang": "go",
    "java": "java",
    "js": "javascript",
    "javascript": "javascript",
    "ts": "typescript",
    "typescript": "typescript",
    "rust": "rust",
    "c": "c",
    "cpp": "cpp",
    "c++": "cpp",
    "csharp": "csharp",
    "c#": "csharp",
    "cs": "csharp",
    "php": "php",
    "dart": "dart",
    "ruby": "ruby",
    "python": "python",
    "py": "python",
    "haskell": "haskell",
}

# Node types grammars use for comments; Rust and Java split line and block,
# Dart and Haskell give doc comments their own type.
COMMENT_NODE_TYPES = frozenset({
    "comment", "line_comment", "block_comment", "documentation_comment", "haddock",
})


def grammar_for(language: str) -> Optional[str]:
    return GRAMMARS.get(language.lower())


@dataclass(frozen=True)
class ParsedSource:
    """A parsed buffer plus the coordinate conversions analyzers need."""

    source_bytes: bytes
    lines: List[str]
    root: Any

    def position(self, point: Tuple[int, int]) -> Position:
        row, byte_col = point[0], point[1]
        if row >= len(self.lines):
            return Position(row, byte_col)
        return Position(row, char_column(self.lines[row], byte_col))

    def span(self, node: Any) -> Span:
        return Span(self.position(node.start_point), self.position(node.end_point))

    def text(self, node: Any) -> str:
        return self.source_bytes[node.start_byte:node.end_byte].decode("utf-8", errors="replace")


def parse_source(source: str, language: str) -> ParsedSource:
    """Parse ``source`` with the tree-sitter grammar for ``language``.

    Raises:
        AnalyzerError: If no grammar is known or it cannot be loaded.
    """
    grammar = grammar_for(language)
    if grammar is None:
        raise AnalyzerError("No tree-sitter grammar for language: {}".format(language))
    try:
        parser = get_parser(grammar)
    except (LookupError, ValueError) as e:
        raise AnalyzerError("Cannot load tree-sitter grammar '{}': {}".format(grammar, e)) from e

    source_bytes = source.encode("utf-8")
    tree = parser.parse(source_bytes)
    return ParsedSource(
        source_bytes=source_bytes,
        lines=split_lines(source),
        root=tree.root_node,
    )


def iter_nodes(root: Any, prune: FrozenSet[str] = frozenset()) -> Iterator[Any]:
    """Yield every node in pre-order; children of ``prune`` types are skipped."""
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        if node.type in prune:
            continue
        stack.extend(reversed(node.children))


def is_line_start(source_bytes: bytes, start_byte: int) -> bool:
    """True when only whitespace precedes ``start_byte`` on its line."""
    line_start = source_bytes.rfind(b"\n", 0, start_byte) + 1
    return not source_bytes[line_start:start_byte].strip()
