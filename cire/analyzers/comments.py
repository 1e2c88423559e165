"""Standalone comment extraction and cleanup.

WHY: Comments are the prose of a literate view. Only comments that stand
on their own lines read as prose; trailing comments after code belong to
the code. Raw comment text also carries syntax ("//", "#", "/* * */")
that must be removed before it can be rendered as Markdown.

HOW: Comment nodes come from a real parser so that comment markers inside
strings, heredocs and pragmas are never mistaken for comments: the
standard tokenizer for Python, tree-sitter grammars for every other
language. Nodes on consecutive lines are grouped into one Comment
spanning the first node's start to the last node's end; each node is
cleaned by clean_comment() and the cleaned parts are joined with
newlines.

RULES:
- A comment is standalone when only whitespace precedes it on its line
- A blank or code line ends a group
- Output comments are start-sorted and never overlap
- Unsupported languages raise AnalyzerError
"""

from __future__ import annotations

import io
import logging
import tokenize
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence, Tuple

from cire.analyzers.base import AnalyzerError
from cire.analyzers.syntax_tree import (
    COMMENT_NODE_TYPES,
    GRAMMARS,
    ParsedSource,
    is_line_start,
    iter_nodes,
    parse_source,
)
from cire.core.ir import Comment, Position, Span

logger = logging.getLogger(__name__)

_C_FAMILY = frozenset({
    "go", "golang", "java", "js", "javascript", "ts", "typescript", "rust",
    "c", "cpp", "c++", "csharp", "c#", "cs", "php", "dart",
})
_HASH_FAMILY = frozenset({"python", "py", "ruby"})
_HASKELL = frozenset({"haskell"})

SUPPORTED_LANGUAGES = frozenset(GRAMMARS)


def _family(language: str) -> Optional[str]:
    lang = language.lower()
    if lang in _C_FAMILY:
        return "c"
    if lang in _HASH_FAMILY:
        return "hash"
    if lang in _HASKELL:
        return "haskell"
    return None


def _clean_line(text: str, prefix: str) -> str:
    if text.startswith(prefix):
        text = text[len(prefix):]
    if text.startswith(" "):
        text = text[1:]
    return text.rstrip()


def _indent_width(line: str) -> int:
    return len(line) - len(line.lstrip())


def _dedent(lines: List[str]) -> List[str]:
    widths = [_indent_width(line) for line in lines if line.strip()]
    if not widths:
        return lines
    common = min(widths)
    if common <= 0:
        return lines
    return [line[common:] if len(line) >= common else line for line in lines]


def _trim_blank_edges(lines: List[str]) -> List[str]:
    start, end = 0, len(lines)
    if lines and not lines[0].strip():
        start = 1
    if end > start and not lines[end - 1].strip():
        end -= 1
    return lines[start:end]


def _clean_block(inner: str) -> str:
    lines = inner.split("\n")
    non_blank = [line.strip() for line in lines if line.strip()]
    starred = bool(non_blank) and all(line.startswith("*") for line in non_blank)

    if starred:
        cleaned: List[str] = []
        for line in lines:
            stripped = line.lstrip()
            if stripped.startswith("*"):
                cleaned.append(_clean_line(stripped, "*"))
            elif not line.strip():
                cleaned.append("")
        if cleaned and cleaned[0] == "":
            cleaned = cleaned[1:]
        if cleaned and cleaned[-1] == "":
            cleaned = cleaned[:-1]
        return "\n".join(cleaned)

    raw = [line.rstrip() for line in _trim_blank_edges(lines)]
    return "\n".join(_dedent(raw))


def clean_comment(content: str, language: str) -> str:
    """Strip comment syntax from one comment node and return its prose.

    WHY: Renderers treat comment content as Markdown. Comment markers,
    javadoc stars and block indentation would otherwise leak into it.

    HOW: Line comments lose their marker and one following space. Block
    comments lose their delimiters; starred blocks lose the leading "*"
    of each line, other blocks are dedented by their common indent.

    RULES:
    - Unknown languages and unrecognized shapes fall back to strip()
    - Haskell blocks need "{- " and " -}"; pragmas ({-# .. #-}) stay intact
    - Haskell inline blocks are trimmed, multi-line ones dedented
    """
    family = _family(language)
    if family == "c":
        if content.startswith("//"):
            return _clean_line(content, "//")
        if content.startswith("/*") and content.endswith("*/") and len(content) >= 4:
            return _clean_block(content[2:-2])
    elif family == "hash":
        if content.startswith("#"):
            return _clean_line(content, "#")
    elif family == "haskell":
        if content.startswith("--"):
            return _clean_line(content, "--")
        if content.startswith("{- ") and content.endswith(" -}") and len(content) >= 6:
            inner = content[2:-2]
            if "\n" not in inner:
                return inner.strip()
            raw = [line.rstrip() for line in _trim_blank_edges(inner.split("\n"))]
            return "\n".join(_dedent(raw))
    return content.strip()


@dataclass(frozen=True)
class _Node:
    span: Span
    text: str


def _python_nodes(source: str) -> List[_Node]:
    nodes: List[_Node] = []
    readline = io.StringIO(source).readline
    try:
        for tok in tokenize.generate_tokens(readline):
            if tok.type != tokenize.COMMENT:
                continue
            if tok.line[:tok.start[1]].strip():
                continue
            nodes.append(_Node(
                span=Span(
                    Position(tok.start[0] - 1, tok.start[1]),
                    Position(tok.end[0] - 1, tok.end[1]),
                ),
                text=tok.string,
            ))
    except (tokenize.TokenError, SyntaxError) as e:
        logger.warning("Comment extraction stopped early after %d comments: %s", len(nodes), e)
    return nodes


def _trimmed_span(parsed: ParsedSource, node: Any, text: str) -> Tuple[Span, str]:
    """Span of a comment node without the line break some grammars include."""
    start = parsed.position(node.start_point)
    stripped = text.rstrip("\r\n")
    if stripped == text:
        return parsed.span(node), text
    lines = stripped.split("\n")
    if len(lines) == 1:
        end = Position(start.line, start.column + len(stripped))
    else:
        end = Position(start.line + len(lines) - 1, len(lines[-1]))
    return Span(start, end), stripped


def _tree_sitter_nodes(source: str, language: str) -> List[_Node]:
    parsed = parse_source(source, language)
    nodes: List[_Node] = []
    for node in iter_nodes(parsed.root, prune=COMMENT_NODE_TYPES):
        if node.type not in COMMENT_NODE_TYPES:
            continue
        if not is_line_start(parsed.source_bytes, node.start_byte):
            continue
        span, text = _trimmed_span(parsed, node, parsed.text(node))
        nodes.append(_Node(span=span, text=text))
    return nodes


def _group(nodes: Sequence[_Node], language: str) -> List[Comment]:
    groups: List[Tuple[Span, List[str]]] = []
    for node in nodes:
        cleaned = clean_comment(node.text, language)
        if groups and node.span.start.line == groups[-1][0].end.line + 1:
            span, parts = groups[-1]
            parts.append(cleaned)
            groups[-1] = (Span(span.start, node.span.end), parts)
        else:
            groups.append((node.span, [cleaned]))
    return [Comment(span=span, content="\n".join(parts)) for span, parts in groups]


class CommentAnalyzer:
    """Extracts standalone comments as prose for one language."""

    def __init__(self, language: str = "python") -> None:
        if language.lower() not in SUPPORTED_LANGUAGES:
            raise AnalyzerError("Unsupported comment language: {}".format(language))
        self.language = language

    @property
    def name(self) -> str:
        return "{} comments".format(self.language)

    def analyze(self, source: str) -> List[Comment]:
        if self.language.lower() in ("python", "py"):
            nodes = _python_nodes(source)
        else:
            nodes = _tree_sitter_nodes(source, self.language)
        return _group(nodes, self.language)
