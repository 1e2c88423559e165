"""Intermediate representation dataclasses for annotated source documents.

WHY: Analyzers (syntax highlighting, code-intelligence indexes, language
servers) each describe the same source buffer in their own terms. Renderers
(Markdown, MDX, JSON) each need code runs, prose blocks and cross-reference
metadata, but in different syntaxes. The IR is the single, well-typed
contract between the two sides.

HOW: The types form a pipeline:
  Position / Span  : coordinates in the analyzed buffer
  Annotation       : what an analyzer knows about a span
  Token            : Span + Annotation, possibly overlapping other tokens
  Comment          : a prose region with already-cleaned content
  Segment          : non-overlapping Span + merged Annotation
  TextRun / AnnotatedRun : literal or decorated pieces of a code block
  CodeBlock / ProseBlock : the two block kinds of the output document
  Document         : the complete assembled document

RULES:
- Lines and columns are 0-based; columns count code points, not bytes
- Positions order lexicographically by (line, column)
- Every type is frozen: created once per run, never mutated
- doc_text is a tuple so annotations stay hashable and immutable
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Tuple, Union


@dataclass(frozen=True, order=True)
class Position:
    """A point in the source buffer.

    Field order matters: ``order=True`` compares (line, column) tuples,
    which is exactly the lexicographic position order.
    """

    line: int
    column: int

    def __str__(self) -> str:
        return "{}:{}".format(self.line, self.column)


@dataclass(frozen=True)
class Span:
    """A half-open range [start, end) in the source buffer."""

    start: Position
    end: Position

    @property
    def is_valid(self) -> bool:
        return self.start <= self.end

    def contains(self, other: Span) -> bool:
        return self.start <= other.start and other.end <= self.end

    def __str__(self) -> str:
        return "{}-{}".format(self.start, self.end)


@dataclass(frozen=True)
class Annotation:
    """Everything an analyzer can say about a span.

    WHY: Highlighting, navigation and hover documentation come from
    different producers. One flat record lets the partitioner merge
    them without knowing which producer said what.

    RULES:
    - symbol: anchor id shared by a definition and its references ("" = none)
    - highlight_class: CSS-ish class name ("" = none)
    - doc_text: hover documentation fragments, in producer order
    """

    symbol: str = ""
    is_definition: bool = False
    is_reference: bool = False
    highlight_class: str = ""
    doc_text: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Token:
    """A Span plus an Annotation, as produced by one analyzer."""

    span: Span
    annotation: Annotation = field(default_factory=Annotation)


@dataclass(frozen=True)
class Comment:
    """A prose region of the source; content is already cleaned of markup."""

    span: Span
    content: str


@dataclass(frozen=True)
class Segment:
    """A non-overlapping range with the merged annotation of its covering tokens."""

    span: Span
    annotation: Annotation


class RunKind(str, Enum):
    """How an annotated run is decorated, in precedence order."""

    DEFINITION = "definition"
    REFERENCE = "reference"
    HIGHLIGHT = "highlight"
    PLAIN = "plain"


@dataclass(frozen=True)
class TextRun:
    """Literal source text between segments, handed to renderers verbatim."""

    text: str


@dataclass(frozen=True)
class AnnotatedRun:
    """The source text of one Segment together with its decoration kind."""

    text: str
    segment: Segment
    kind: RunKind

    @property
    def annotation(self) -> Annotation:
        return self.segment.annotation

    @property
    def doc_text(self) -> Tuple[str, ...]:
        return self.segment.annotation.doc_text


Run = Union[TextRun, AnnotatedRun]


@dataclass(frozen=True)
class CodeBlock:
    """An ordered group of runs rendered as one code listing."""

    runs: Tuple[Run, ...]

    @property
    def text(self) -> str:
        return "".join(run.text for run in self.runs)


@dataclass(frozen=True)
class ProseBlock:
    """A comment's content rendered as document prose."""

    content: str


Block = Union[CodeBlock, ProseBlock]


@dataclass(frozen=True)
class Document:
    """The complete assembled document that renderers receive.

    RULES:
    - blocks: in source order; code and prose alternate freely
    - source_filename: basename of the analyzed file (for output naming)
    - line_count: number of lines in the analyzed buffer
    """

    blocks: List[Block]
    source_filename: str = ""
    line_count: int = 0

    @property
    def code_blocks(self) -> List[CodeBlock]:
        return [b for b in self.blocks if isinstance(b, CodeBlock)]

    @property
    def prose_blocks(self) -> List[ProseBlock]:
        return [b for b in self.blocks if isinstance(b, ProseBlock)]
