"""Lexical syntax highlighting.

WHY: Highlight classes are the bulk of a rendered listing's decoration.
Python ships its own tokenizer, which reports exact code-point columns,
so no external grammar is needed for Python files. Every other language
is highlighted from its tree-sitter syntax tree.

HOW: HighlightAnalyzer walks tokenize.generate_tokens() output and maps
each lexical token to a highlight class. A small amount of lookbehind
distinguishes the names introduced by ``def``/``class`` and decorator
names. TreeSitterHighlightAnalyzer classifies syntax-tree nodes by type:
anonymous word tokens are keywords, string/number/comment nodes are
classed whole, and the name field of function and type declarations
marks function and class names.

RULES:
- tokenize rows are 1-based; emitted lines are 0-based
- keyword → "keyword", soft keywords are left plain
- names of builtins → "builtin"
- name after def → "function", after class → "class"
- "@" at the start of a logical line and the following name → "decorator"
- strings (including f-string parts) → "string", numbers → "number",
  comments → "comment", operators → "operator"
- A tokenize failure keeps the tokens produced so far and logs a warning
- tree-sitter: anonymous word tokens → "keyword", string, number and
  comment nodes → their class (children not visited), type names → "type",
  declaration names → "function" or "class", other anonymous symbols
  except brackets and separators → "operator"
"""

from __future__ import annotations

import builtins
import io
import keyword
import logging
import re
import tokenize
from typing import Any, List, Optional, Set, Tuple

from cire.analyzers.base import AnalyzerError, BaseAnalyzer
from cire.analyzers.syntax_tree import COMMENT_NODE_TYPES, GRAMMARS, parse_source
from cire.core.ir import Annotation, Position, Span, Token

logger = logging.getLogger(__name__)

_BUILTIN_NAMES = frozenset(name for name in dir(builtins) if not name.startswith("_"))

_STRING_TOKEN_NAMES = frozenset({"STRING", "FSTRING_START", "FSTRING_MIDDLE", "FSTRING_END"})

# Token types after which "@" starts a decorator.
_LINE_START_TYPES = frozenset({tokenize.NEWLINE, tokenize.NL, tokenize.INDENT, tokenize.DEDENT})


def _span(tok: tokenize.TokenInfo) -> Span:
    (srow, scol), (erow, ecol) = tok.start, tok.end
    return Span(Position(srow - 1, scol), Position(erow - 1, ecol))


def classify_name(text: str, previous: Optional[str]) -> str:
    """Return the highlight class of a NAME token given the preceding name."""
    if previous == "def":
        return "function"
    if previous == "class":
        return "class"
    if keyword.iskeyword(text):
        return "keyword"
    if text in _BUILTIN_NAMES:
        return "builtin"
    return ""


class HighlightAnalyzer(BaseAnalyzer):
    """Python highlighting based on the standard tokenizer."""

    @property
    def name(self) -> str:
        return "Python highlighting"

    def analyze(self, source: str) -> List[Token]:
        tokens: List[Token] = []
        previous_name: Optional[str] = None
        previous_type: Optional[int] = None
        in_decorator = False

        readline = io.StringIO(source).readline
        try:
            for tok in tokenize.generate_tokens(readline):
                type_name = tokenize.tok_name.get(tok.type, "")
                css = ""

                if tok.type == tokenize.NAME:
                    if in_decorator:
                        css = "decorator"
                        in_decorator = False
                    else:
                        css = classify_name(tok.string, previous_name)
                elif tok.type == tokenize.OP:
                    if tok.string == "@" and (previous_type is None or previous_type in _LINE_START_TYPES):
                        css = "decorator"
                        in_decorator = True
                    else:
                        css = "operator"
                elif type_name in _STRING_TOKEN_NAMES:
                    css = "string"
                elif tok.type == tokenize.NUMBER:
                    css = "number"
                elif tok.type == tokenize.COMMENT:
                    css = "comment"

                previous_name = tok.string if tok.type == tokenize.NAME else None
                if tok.type not in (tokenize.COMMENT, tokenize.NL):
                    previous_type = tok.type

                if css and tok.start != tok.end:
                    tokens.append(Token(span=_span(tok), annotation=Annotation(highlight_class=css)))
        except (tokenize.TokenError, SyntaxError) as e:
            logger.warning("Highlighting stopped early after %d tokens: %s", len(tokens), e)

        return tokens


_TS_STRING = re.compile(r"(^|_)(string|char|character|rune|heredoc)(_literal|_body)?$")
_TS_NUMBER = re.compile(r"(^|_)(int|integer|float|number|decimal|hex|octal|binary|floating_point|imaginary)(_literal)?$")
_TS_TYPE_NAMES = frozenset({"type_identifier", "primitive_type", "predefined_type", "builtin_type"})
_TS_FUNCTION_DECL = re.compile(r"(^|_)(function|method|func)(_(declaration|definition|item|signature|spec))?$")
_TS_TYPE_DECL = re.compile(r"(^|_)(class|struct|interface|enum|trait|type)_(declaration|definition|item|specifier|spec)$")
_TS_WORD = re.compile(r"[A-Za-z_][A-Za-z_0-9]*")
_TS_PUNCTUATION = frozenset({"(", ")", "[", "]", "{", "}", ",", ";", ".", ":", "::", '"', "'", "`"})


def classify_node(node: Any, function_names: Set[Tuple[int, int]], class_names: Set[Tuple[int, int]]) -> str:
    """Return the highlight class of a syntax-tree node, or ""."""
    node_type = node.type
    if node_type in COMMENT_NODE_TYPES:
        return "comment"
    key = (node.start_byte, node.end_byte)
    if key in function_names and not node.children:
        return "function"
    if key in class_names and not node.children:
        return "class"
    if node.is_named:
        if _TS_STRING.search(node_type):
            return "string"
        if _TS_NUMBER.search(node_type):
            return "number"
        if node_type in _TS_TYPE_NAMES:
            return "type"
        return ""
    if _TS_WORD.fullmatch(node_type):
        return "keyword"
    if node_type in _TS_PUNCTUATION:
        return ""
    return "operator"


class TreeSitterHighlightAnalyzer(BaseAnalyzer):
    """Highlighting for any language with a tree-sitter grammar.

    Nodes are classified by type alone. Names are recognised through the
    ``name`` field of their declaration, which pre-order visits first.
    Strings, comments and numbers are leaves for highlighting purposes.
    """

    def __init__(self, language: str) -> None:
        if language.lower() not in GRAMMARS:
            raise AnalyzerError("No highlighting grammar for language: {}".format(language))
        self.language = language

    @property
    def name(self) -> str:
        return "{} highlighting".format(self.language)

    def analyze(self, source: str) -> List[Token]:
        parsed = parse_source(source, self.language)
        function_names: Set[Tuple[int, int]] = set()
        class_names: Set[Tuple[int, int]] = set()
        tokens: List[Token] = []

        stack = [parsed.root]
        while stack:
            node = stack.pop()

            if node.is_named:
                name_node = node.child_by_field_name("name")
                if name_node is not None:
                    key = (name_node.start_byte, name_node.end_byte)
                    if _TS_FUNCTION_DECL.search(node.type):
                        function_names.add(key)
                    elif _TS_TYPE_DECL.search(node.type):
                        class_names.add(key)

            css = classify_node(node, function_names, class_names)
            if css and node.start_byte < node.end_byte:
                tokens.append(Token(span=parsed.span(node), annotation=Annotation(highlight_class=css)))
            if css in ("string", "comment", "number"):
                continue
            stack.extend(reversed(node.children))

        logger.debug("%s: %d highlight tokens", self.name, len(tokens))
        return tokens
