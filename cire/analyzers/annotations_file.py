"""Loading of externally produced annotations from JSON files.

WHY: Code-intelligence indexes and language servers run outside cire,
often on another machine or in CI. They hand their results over as a
JSON file of tokens and comments in the buffer's coordinates. A schema
check up front turns malformed exports into one clear error instead of
a confusing partition.

HOW: The file is parsed with json and validated with jsonschema against
ANNOTATION_SCHEMA. Spans are given either as {"start", "end"} objects or
as compact index ranges: [line, start_col, end_col] for single-line
spans and [start_line, start_col, end_line, end_col] otherwise.
FileAnalyzer exposes the tokens as a regular analyzer.

RULES:
- Top level: {"tokens": [...], "comments": [...]}; both keys optional
- Token fields besides the span are optional and default to empty
- Comment entries require "content"
- Invalid JSON or schema violations raise AnnotationFileError
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Union

import jsonschema

from cire.analyzers.base import BaseAnalyzer
from cire.core.ir import Annotation, Comment, Position, Span, Token

_POSITION_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "required": ["line", "column"],
    "properties": {
        "line": {"type": "integer", "minimum": 0},
        "column": {"type": "integer", "minimum": 0},
    },
}

_SPAN_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "required": ["start", "end"],
    "properties": {
        "start": _POSITION_SCHEMA,
        "end": _POSITION_SCHEMA,
    },
}

_RANGE_SCHEMA: Dict[str, Any] = {
    "type": "array",
    "items": {"type": "integer", "minimum": 0},
    "minItems": 3,
    "maxItems": 4,
}

ANNOTATION_SCHEMA: Dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "type": "object",
    "properties": {
        "tokens": {
            "type": "array",
            "items": {
                "type": "object",
                "anyOf": [{"required": ["span"]}, {"required": ["range"]}],
                "properties": {
                    "span": _SPAN_SCHEMA,
                    "range": _RANGE_SCHEMA,
                    "symbol": {"type": "string"},
                    "is_definition": {"type": "boolean"},
                    "is_reference": {"type": "boolean"},
                    "highlight_class": {"type": "string"},
                    "doc_text": {"type": "array", "items": {"type": "string"}},
                },
            },
        },
        "comments": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["content"],
                "anyOf": [{"required": ["span"]}, {"required": ["range"]}],
                "properties": {
                    "span": _SPAN_SCHEMA,
                    "range": _RANGE_SCHEMA,
                    "content": {"type": "string"},
                },
            },
        },
    },
}


class AnnotationFileError(ValueError):
    """Raised when an annotation file is not valid JSON or violates the schema.

    RULES:
    - Message includes the file path and the parser/schema message
    """


@dataclass(frozen=True)
class AnnotationSet:
    """Tokens and comments loaded from one annotation file."""

    tokens: List[Token] = field(default_factory=list)
    comments: List[Comment] = field(default_factory=list)


def parse_range(data: Dict[str, Any]) -> Span:
    """Build a Span from a "span" object or a compact "range" array."""
    if "span" in data:
        start, end = data["span"]["start"], data["span"]["end"]
        return Span(
            Position(start["line"], start["column"]),
            Position(end["line"], end["column"]),
        )
    r = data["range"]
    if len(r) == 3:
        return Span(Position(r[0], r[1]), Position(r[0], r[2]))
    return Span(Position(r[0], r[1]), Position(r[2], r[3]))


def parse_annotations(data: Any) -> AnnotationSet:
    """Validate and convert an already-decoded annotation document."""
    try:
        jsonschema.validate(instance=data, schema=ANNOTATION_SCHEMA)
    except jsonschema.ValidationError as e:
        raise AnnotationFileError(e.message) from e

    tokens = [
        Token(
            span=parse_range(item),
            annotation=Annotation(
                symbol=item.get("symbol", ""),
                is_definition=item.get("is_definition", False),
                is_reference=item.get("is_reference", False),
                highlight_class=item.get("highlight_class", ""),
                doc_text=tuple(item.get("doc_text", ())),
            ),
        )
        for item in data.get("tokens", [])
    ]
    comments = [
        Comment(span=parse_range(item), content=item["content"])
        for item in data.get("comments", [])
    ]
    return AnnotationSet(tokens=tokens, comments=comments)


def load_annotations(path: Union[str, Path]) -> AnnotationSet:
    """Load and validate an annotation file.

    Raises:
        AnnotationFileError: If the file is not valid JSON or fails validation.
        OSError: If the file cannot be read.
    """
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise AnnotationFileError("{}: invalid JSON: {}".format(path, e)) from e
    try:
        return parse_annotations(data)
    except AnnotationFileError as e:
        raise AnnotationFileError("{}: {}".format(path, e)) from e


class FileAnalyzer(BaseAnalyzer):
    """Serves the tokens of a loaded annotation file as an analyzer.

    The file describes a fixed buffer, so ``source`` is not inspected.
    """

    def __init__(self, annotations: AnnotationSet, label: str = "annotation file") -> None:
        self.annotations = annotations
        self.label = label

    @property
    def name(self) -> str:
        return self.label

    def analyze(self, source: str) -> List[Token]:
        return list(self.annotations.tokens)
